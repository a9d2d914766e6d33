"""Pipeline entry point and the consolidated response payload."""

from __future__ import annotations

import time
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from matchfeed.models import Event, MarketConfigEntry
from matchfeed.pipeline.context import PipelineContext
from matchfeed.pipeline.fetcher import FetchResult, fetch_events_and_reference
from matchfeed.pipeline.filters import MatchQuery, apply_query
from matchfeed.pipeline.orchestrator import EnrichmentOrchestrator

log = structlog.get_logger(__name__)


class MatchesPayload(BaseModel):
    """Enriched event list plus lookup maps. Other top-level event-list fields pass through as extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    data: list[Event] = Field(default_factory=list)
    competitions: dict[int, int] = Field(default_factory=dict)  # id -> parent id
    competition_names: dict[int, str] = Field(default_factory=dict, alias="competitionNames")
    competition_icons: dict[int, str] = Field(default_factory=dict, alias="competitionIcons")
    play_percentages: dict[str, Any] = Field(default_factory=dict, alias="playPercentages")
    match_popularity: dict[str, Any] = Field(default_factory=dict, alias="matchPopularity")
    market_config: dict[str, MarketConfigEntry] = Field(default_factory=dict, alias="marketConfig")

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict: passthrough fields first, then the assembled fields."""
        out: dict[str, Any] = dict(self.model_extra or {})
        out.update(
            {
                "data": [e.to_wire() for e in self.data],
                "competitions": self.competitions,
                "competitionNames": self.competition_names,
                "competitionIcons": self.competition_icons,
                "playPercentages": self.play_percentages,
                "matchPopularity": self.match_popularity,
                "marketConfig": {
                    k: v.model_dump(by_alias=True, exclude_unset=True)
                    for k, v in self.market_config.items()
                },
            }
        )
        return out


_PAYLOAD_KEYS = {
    (field.alias or name) for name, field in MatchesPayload.model_fields.items()
} | set(MatchesPayload.model_fields)


def assemble(fetched: FetchResult, events: list[Event]) -> MatchesPayload:
    """Shape the response: additive over the raw event-list envelope, nothing renamed."""
    passthrough: dict[str, Any] = {}
    if fetched.events_envelope is not None:
        passthrough = {
            k: v for k, v in fetched.events_envelope.passthrough().items()
            if k not in _PAYLOAD_KEYS
        }
    return MatchesPayload(
        data=events,
        competitions=fetched.competitions.parents,
        competition_names=fetched.competitions.names,
        competition_icons=fetched.competitions.icons,
        play_percentages=fetched.play_percentages,
        match_popularity=fetched.popularity,
        market_config=fetched.market_config,
        **passthrough,
    )


async def build_payload(ctx: PipelineContext, query: MatchQuery | None = None) -> MatchesPayload:
    """Fetch, enrich, filter, sort and assemble. Upstream failures degrade; anything else raises."""
    query = query or MatchQuery()
    t0 = time.monotonic()
    fetched = await fetch_events_and_reference(ctx, query.include_upcoming)
    orchestrator = EnrichmentOrchestrator(ctx)
    enriched = await orchestrator.enrich(fetched.events, fetched.token)
    selected = apply_query(enriched, query, ctx.settings.half_time_status)
    payload = assemble(fetched, selected)
    log.info(
        "pipeline_complete",
        events=len(selected),
        enriched=len(enriched),
        batches=orchestrator.batches_run,
        sort=query.sort,
        status=query.status,
        competition=query.competition,
        elapsed_ms=int((time.monotonic() - t0) * 1000),
    )
    return payload
