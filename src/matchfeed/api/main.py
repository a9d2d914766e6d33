"""FastAPI backend polled by the live-matches UI."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from matchfeed import __version__
from matchfeed.api.auth import require_basic_auth
from matchfeed.api.schemas import ErrorResponse, HealthResponse, MatchesV2Response
from matchfeed.api.views import build_v2_response
from matchfeed.config import Settings, get_settings
from matchfeed.pipeline import MatchesPayload, MatchQuery, PipelineContext, build_payload

log = structlog.get_logger(__name__)

router = APIRouter()


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def match_query(
    sort: str = Query("markets", description="markets | time | league | home"),
    competition: str = Query("all", description="Competition id or 'all'"),
    status: str = Query("all", description="all | live | ht | upcoming"),
    include_upcoming: str | None = Query(
        None, alias="includeUpcoming", description="1/true to include not-started events"
    ),
) -> MatchQuery:
    return MatchQuery.from_params(
        {
            "sort": sort,
            "competition": competition,
            "status": status,
            "includeUpcoming": include_upcoming or "",
        }
    )


async def _run_pipeline(request: Request, query: MatchQuery) -> MatchesPayload | JSONResponse:
    ctx: PipelineContext = request.app.state.context
    try:
        return await build_payload(ctx, query)
    except Exception:
        log.exception("pipeline_failed", path=request.url.path)
        return _error_json("internal_error", "Internal server error", 500)


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    ctx: PipelineContext | None = request.app.state.context
    return HealthResponse(status="ok", cache_entries=len(ctx.cache) if ctx is not None else 0)


@router.get(
    "/api/matches",
    dependencies=[Depends(require_basic_auth)],
    responses={500: {"description": "Pipeline failure", "model": ErrorResponse}},
)
async def matches(request: Request, query: MatchQuery = Depends(match_query)):
    """Enriched events plus competition, percentage and market-config maps."""
    result = await _run_pipeline(request, query)
    if isinstance(result, JSONResponse):
        return result
    return JSONResponse(content=result.to_wire())


@router.get(
    "/api/matches-v2",
    response_model=MatchesV2Response,
    dependencies=[Depends(require_basic_auth)],
    responses={500: {"description": "Pipeline failure", "model": ErrorResponse}},
)
async def matches_v2(request: Request, query: MatchQuery = Depends(match_query)):
    """Same pipeline, mapped to descriptive field names with resolved market names."""
    result = await _run_pipeline(request, query)
    if isinstance(result, JSONResponse):
        return result
    return build_v2_response(result)


def create_app(settings: Settings | None = None, context: PipelineContext | None = None) -> FastAPI:
    """Build the app. Without an injected context, the lifespan opens and closes one."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if app.state.context is None:
            owned = PipelineContext.create(settings)
            app.state.context = owned
        yield
        if owned is not None:
            await owned.aclose()
            app.state.context = None

    app = FastAPI(title="matchfeed API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.context = context
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.include_router(router)
    return app


app = create_app()


def run_api(
    host: str | None = None,
    port: int | None = None,
    profile: str | None = None,
    settings: Settings | None = None,
) -> None:
    import uvicorn

    settings = settings or get_settings(profile)
    uvicorn.run(
        create_app(settings),
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=False,
    )
