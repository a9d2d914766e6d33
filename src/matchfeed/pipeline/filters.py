"""Caller-selected competition/status filters and sort order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from matchfeed.models import Event

SORT_MODES = ("markets", "time", "league", "home")
STATUS_FILTERS = ("all", "live", "ht", "upcoming")


def _truthy_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true")


@dataclass
class MatchQuery:
    """Query options for one pipeline run. Unknown sort/status params fall back to the defaults."""

    sort: str = "markets"
    competition: str = "all"
    status: str = "all"
    include_upcoming: bool = False

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> MatchQuery:
        """From raw query-string params (``sort``, ``competition``, ``status``, ``includeUpcoming``)."""
        sort = params.get("sort")
        status = params.get("status")
        return cls(
            sort=sort if sort in SORT_MODES else "markets",
            competition=params.get("competition") or "all",
            status=status if status in STATUS_FILTERS else "all",
            include_upcoming=_truthy_flag(params.get("includeUpcoming")),
        )


def filter_by_competition(events: list[Event], competition: str) -> list[Event]:
    if competition == "all":
        return events
    return [
        e for e in events
        if e.competition_id is not None and str(e.competition_id) == competition
    ]


def filter_by_status_mode(events: list[Event], mode: str, half_time_status: int) -> list[Event]:
    """live: in play except half-time; ht: half-time only; upcoming: not started."""
    if mode == "live":
        return [e for e in events if e.status_code > 0 and e.status_code != half_time_status]
    if mode == "ht":
        return [e for e in events if e.status_code == half_time_status]
    if mode == "upcoming":
        return [e for e in events if e.status_code == 0]
    return events


def sort_events(events: list[Event], mode: str) -> list[Event]:
    """Stable sort; ``markets`` (most markets first) for unknown modes."""
    if mode == "time":
        return sorted(events, key=lambda e: e.kickoff or 0)
    if mode == "league":
        return sorted(events, key=lambda e: e.competition_id or 0)
    if mode == "home":
        return sorted(events, key=lambda e: e.home_name or "")
    return sorted(events, key=lambda e: e.market_count, reverse=True)


def apply_query(events: list[Event], query: MatchQuery, half_time_status: int) -> list[Event]:
    selected = filter_by_competition(events, query.competition)
    selected = filter_by_status_mode(selected, query.status, half_time_status)
    return sort_events(selected, query.sort)
