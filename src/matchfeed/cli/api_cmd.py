"""API server command."""

import typer

from matchfeed.api.main import run_api

app = typer.Typer(help="Start the HTTP API polled by the UI")


@app.callback(invoke_without_command=True)
def api(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host", help="Bind host (default from config)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (default from config)"),
) -> None:
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"] if ctx.obj else None
    run_api(host=host, port=port, settings=settings)


if __name__ == "__main__":
    app()
