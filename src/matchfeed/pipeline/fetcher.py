"""Event list and reference data - fetched concurrently, each degrading to empty on failure."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog

from matchfeed.ingestion.sportsbook.normalize import (
    CompetitionMaps,
    attach_scores,
    build_competition_maps,
    build_market_config_map,
    filter_by_status,
    parse_events,
    parse_market_configs,
)
from matchfeed.models import Envelope, Event, MarketConfigEntry
from matchfeed.pipeline.context import PipelineContext

log = structlog.get_logger(__name__)


@dataclass
class FetchResult:
    """Everything the enrichment stage needs, fetched once per request."""

    events_envelope: Envelope | None
    events: list[Event] = field(default_factory=list)
    competitions: CompetitionMaps = field(default_factory=CompetitionMaps)
    market_config: dict[str, MarketConfigEntry] = field(default_factory=dict)
    play_percentages: dict[str, Any] = field(default_factory=dict)
    popularity: dict[str, Any] = field(default_factory=dict)
    token: str | None = None


def _map_payload(envelope: Envelope | None) -> dict[str, Any]:
    if envelope is None or not isinstance(envelope.payload, dict):
        return {}
    return envelope.payload


async def fetch_events_and_reference(ctx: PipelineContext, include_upcoming: bool) -> FetchResult:
    sportsbook = ctx.sportsbook
    settings = ctx.settings
    (
        events_env,
        competitions_env,
        percentages_env,
        popularity_env,
        market_config_env,
    ) = await asyncio.gather(
        sportsbook.fetch_events(),
        sportsbook.fetch_competitions(),
        sportsbook.fetch_play_percentages(),
        sportsbook.fetch_popularity(),
        sportsbook.fetch_market_config(),
    )
    token = ctx.tokens.get_token()
    if token is None:
        log.info("token_unavailable", msg="Live stats enrichment skipped this cycle.")

    if events_env is None:
        log.warning("events_unavailable")
    all_events = parse_events(events_env)
    attach_scores(all_events, events_env)
    events = filter_by_status(all_events, include_upcoming)

    result = FetchResult(
        events_envelope=events_env,
        events=events,
        competitions=build_competition_maps(competitions_env, settings.flag_url_template),
        market_config=build_market_config_map(
            parse_market_configs(market_config_env), settings.main_market_type
        ),
        play_percentages=_map_payload(percentages_env),
        popularity=_map_payload(popularity_env),
        token=token,
    )
    log.debug(
        "reference_fetched",
        events_total=len(all_events),
        events_selected=len(events),
        competitions=len(result.competitions.names),
        market_configs=len(result.market_config),
    )
    return result
