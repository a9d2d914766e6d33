"""Fold per-event enrichment responses onto a base event by explicit field rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError

from matchfeed.ingestion.livestats.client import extract_document
from matchfeed.ingestion.sportsbook.normalize import parse_markets
from matchfeed.models import ENRICHMENT_FIELDS, Envelope, Event

log = structlog.get_logger(__name__)

# Detail keys folded into the market list rather than copied as fields.
_DETAIL_MARKET_KEYS = ("m", "markets")


@dataclass
class EventEnrichment:
    """Responses gathered for one event. None means the call failed or was skipped."""

    detail: Envelope | None = None
    summary: Envelope | None = None
    head_to_head: Envelope | None = None
    last_matches: Envelope | None = None
    analysis: Envelope | None = None
    missing_players: Envelope | None = None
    referee: Envelope | None = None
    standings: Envelope | None = None
    live_stats: Any = None


def _payload(envelope: Envelope | None) -> Any:
    return envelope.payload if envelope is not None else None


def apply_detail(event: Event, detail: dict[str, Any]) -> Event:
    """Overlay detail provider fields on event; detail markets replace event markets when present."""
    overlay = {
        k: v for k, v in detail.items()
        if k not in ENRICHMENT_FIELDS and k not in _DETAIL_MARKET_KEYS
    }
    detail_markets = detail.get("m")
    if detail_markets is None:
        detail_markets = detail.get("markets")
    try:
        merged = Event.model_validate({**event.to_wire(), **overlay})
    except ValidationError as e:
        log.warning("skip_detail_fields", event_id=event.key, error=str(e))
        merged = event.model_copy(deep=True)
    if isinstance(detail_markets, list):
        merged.markets = parse_markets(detail_markets, event.key)
    return merged


def merge_event(base: Event, found: EventEnrichment) -> Event:
    event = base.model_copy(deep=True)
    if event.markets is None:
        event.markets = []

    detail = _payload(found.detail)
    if isinstance(detail, dict):
        event = apply_detail(event, detail)

    summary = _payload(found.summary)
    if summary is not None:
        event.statistics = summary
        standings_model = summary.get("tournamentStandingsModel") if isinstance(summary, dict) else None
        if not event.standings and standings_model:
            event.standings = {"overAll": standings_model}

    for attr, envelope in (
        ("head_to_head", found.head_to_head),
        ("last_matches", found.last_matches),
        ("analysis", found.analysis),
        ("missing_players", found.missing_players),
        ("referee_stats", found.referee),
        ("standings", found.standings),
    ):
        data = _payload(envelope)
        if data is not None:
            setattr(event, attr, data)

    document = extract_document(found.live_stats)
    if document:
        event.live_stats = document
    return event
