"""Fetch subcommand: run the pipeline once and print the payload."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer

from matchfeed.api.views import build_v2_response
from matchfeed.config import Settings
from matchfeed.pipeline import MatchQuery, PipelineContext, build_payload

app = typer.Typer(help="Run the aggregation pipeline once")


async def _collect(settings: Settings, query: MatchQuery, v2: bool) -> tuple[dict[str, Any], int]:
    async with PipelineContext.create(settings) as ctx:
        payload = await build_payload(ctx, query)
    if v2:
        body = build_v2_response(payload).model_dump(by_alias=True, mode="json")
    else:
        body = payload.to_wire()
    return body, len(payload.data)


@app.callback(invoke_without_command=True)
def fetch(
    ctx: typer.Context,
    sort: str = typer.Option("markets", "--sort", help="markets | time | league | home"),
    competition: str = typer.Option("all", "--competition", "-c", help="Competition id or 'all'"),
    status: str = typer.Option("all", "--status", "-s", help="all | live | ht | upcoming"),
    include_upcoming: bool = typer.Option(False, "--include-upcoming", help="Include not-started events"),
    v2: bool = typer.Option(False, "--v2", help="Emit the v2 mapped view"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
) -> None:
    """Fetch, enrich and print the aggregated match payload."""
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    query = MatchQuery(sort=sort, competition=competition, status=status, include_upcoming=include_upcoming)
    body, count = asyncio.run(_collect(settings, query, v2))
    text = json.dumps(body, ensure_ascii=False, indent=2, default=str)
    if output is not None:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Wrote {count} matches to {output}")
    else:
        typer.echo(text)
        typer.echo(f"Total: {count} matches", err=True)
