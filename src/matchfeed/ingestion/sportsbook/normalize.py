"""Sportsbook payloads -> canonical Event list and id-keyed reference maps."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import ValidationError

from matchfeed.models import Competition, Envelope, Event, Market, MarketConfigEntry, Outcome

log = structlog.get_logger(__name__)


@dataclass
class CompetitionMaps:
    """Competition id -> parent id / display name / flag icon URL."""

    parents: dict[int, int] = field(default_factory=dict)
    names: dict[int, str] = field(default_factory=dict)
    icons: dict[int, str] = field(default_factory=dict)


def _data_dict(envelope: Envelope | None) -> dict[str, Any]:
    if envelope is None or not isinstance(envelope.payload, dict):
        return {}
    return envelope.payload


def parse_outcomes(rows: list[Any], market_id: Any = None) -> list[Outcome]:
    """Outcomes of one market. A malformed outcome is skipped, not the market."""
    outcomes: list[Outcome] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            outcomes.append(Outcome.model_validate(row))
        except ValidationError as e:
            log.warning("skip_outcome", market_id=market_id, error=str(e))
    return outcomes


def parse_markets(rows: list[Any], event_id: str = "") -> list[Market]:
    """Markets of one event, validated row by row. A malformed market is skipped, not the event."""
    markets: list[Market] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        raw_outcomes = row.get("o")
        try:
            if isinstance(raw_outcomes, list):
                market = Market.model_validate({k: v for k, v in row.items() if k != "o"})
                market.outcomes = parse_outcomes(raw_outcomes, market.market_id)
            else:
                market = Market.model_validate(row)
        except ValidationError as e:
            log.warning("skip_market", event_id=event_id, market_id=row.get("i"), error=str(e))
            continue
        markets.append(market)
    return markets


def parse_event(row: dict[str, Any]) -> Event:
    """One event row; markets are parsed leniently. Raises ValidationError on bad event fields."""
    raw_markets = row.get("m")
    if not isinstance(raw_markets, list):
        return Event.model_validate(row)
    event = Event.model_validate({k: v for k, v in row.items() if k != "m"})
    event.markets = parse_markets(raw_markets, event.key)
    return event


def parse_events(envelope: Envelope | None) -> list[Event]:
    """Events from ``data.events``. Rows whose own fields fail validation are skipped."""
    rows = _data_dict(envelope).get("events") or []
    events: list[Event] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            events.append(parse_event(row))
        except ValidationError as e:
            log.warning("skip_event", event_id=row.get("i"), error=str(e))
    return events


def attach_scores(events: list[Event], envelope: Envelope | None) -> None:
    """Fill ``sc`` from the ``data.sc`` side map for events that carry no inline score."""
    score_map = _data_dict(envelope).get("sc") or {}
    if not isinstance(score_map, dict):
        return
    for event in events:
        key = event.key
        if key and event.score is None and score_map.get(key):
            event.score = score_map[key]


def filter_by_status(events: list[Event], include_upcoming: bool) -> list[Event]:
    """Live/finished events (status > 0); not-started (status 0) only with include_upcoming."""
    return [
        e for e in events
        if e.status_code > 0 or (include_upcoming and e.status_code == 0)
    ]


def build_competition_maps(envelope: Envelope | None, flag_url_template: str) -> CompetitionMaps:
    """Index the competition list. Icon URL is the flag template with the lower-cased country code."""
    maps = CompetitionMaps()
    rows = envelope.payload if envelope is not None else None
    if not isinstance(rows, list):
        return maps
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            comp = Competition.model_validate(row)
        except ValidationError as e:
            log.warning("skip_competition", competition_id=row.get("i"), error=str(e))
            continue
        cid = comp.competition_id
        if not cid:
            continue
        if comp.parent_id:
            maps.parents[cid] = comp.parent_id
        if comp.name:
            maps.names[cid] = comp.name
        if comp.country_code:
            maps.icons[cid] = flag_url_template.format(code=comp.country_code.lower())
    return maps


def parse_market_configs(envelope: Envelope | None) -> list[MarketConfigEntry]:
    """Entries of ``data.m`` in payload order."""
    raw = _data_dict(envelope).get("m") or {}
    values = raw.values() if isinstance(raw, dict) else raw
    entries: list[MarketConfigEntry] = []
    for row in values:
        if not isinstance(row, dict):
            continue
        try:
            entries.append(MarketConfigEntry.model_validate(row))
        except ValidationError as e:
            log.warning("skip_market_config", config_id=row.get("i"), error=str(e))
    return entries


def build_market_config_map(
    entries: list[MarketConfigEntry], main_market_type: int
) -> dict[str, MarketConfigEntry]:
    """Key configs by subtype and ``type_subtype``; first registration of a key wins.

    Main-type entries are registered in a first pass so they own any key they
    share with other entries, whatever the payload order.
    """
    lookup: dict[str, MarketConfigEntry] = {}

    def register(entry: MarketConfigEntry) -> None:
        for key in entry.keys:
            lookup.setdefault(key, entry)

    for entry in entries:
        if entry.market_type == main_market_type:
            register(entry)
    for entry in entries:
        register(entry)
    return lookup


def lookup_market_config(
    lookup: dict[str, MarketConfigEntry], keys: list[str]
) -> MarketConfigEntry | None:
    """First entry found for keys (subtype first, composite second)."""
    for key in keys:
        entry = lookup.get(key)
        if entry is not None:
            return entry
    return None
