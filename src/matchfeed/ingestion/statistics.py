"""Statistics provider - per-event summary, history, analysis, squad and referee data."""

from __future__ import annotations

from matchfeed.ingestion.http import UpstreamClient
from matchfeed.models import Envelope


class StatisticsClient:
    """One method per statistics endpoint, keyed by sportsbook event id. Uncached."""

    def __init__(self, upstream: UpstreamClient) -> None:
        self.upstream = upstream
        self.settings = upstream.settings

    def _url(self, *parts: object) -> str:
        return "/".join([self.settings.statistics_base, *(str(p) for p in parts)])

    async def _get(self, *parts: object) -> Envelope | None:
        return await self.upstream.fetch_envelope(self._url(*parts))

    async def fetch_summary(self, event_id: str) -> Envelope | None:
        return await self._get("eventsummary", self.settings.sport_id, event_id)

    async def fetch_head_to_head(self, event_id: str) -> Envelope | None:
        return await self._get("headtohead", self.settings.sport_id, event_id, self.settings.history_limit)

    async def fetch_last_matches(self, event_id: str) -> Envelope | None:
        return await self._get("lastmatches", self.settings.sport_id, event_id, self.settings.history_limit)

    async def fetch_analysis(self, event_id: str) -> Envelope | None:
        return await self._get("socceriddaaanalys", event_id)

    async def fetch_missing_players(self, event_id: str) -> Envelope | None:
        return await self._get("missingplayerandstats", self.settings.sport_id, event_id)

    async def fetch_referee(self, event_id: str) -> Envelope | None:
        return await self._get("soccerrefereepage", event_id, self.settings.history_limit)

    async def fetch_standings(self, event_id: str) -> Envelope | None:
        return await self._get("standing", self.settings.sport_id, event_id)
