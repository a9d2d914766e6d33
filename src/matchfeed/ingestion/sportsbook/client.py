"""Sportsbook REST endpoints - event list, market config, competitions, percentages, detail."""

from __future__ import annotations

from matchfeed.ingestion.http import UpstreamClient
from matchfeed.models import Envelope


class SportsbookClient:
    """URLs and cache TTLs for the sportsbook API. All methods return None on failure."""

    def __init__(self, upstream: UpstreamClient) -> None:
        self.upstream = upstream
        self.settings = upstream.settings

    @property
    def base(self) -> str:
        return self.settings.sportsbook_base

    def events_url(self) -> str:
        return f"{self.base}/events?st={self.settings.sport_id}&type=1&version=0"

    def event_detail_url(self, event_id: str) -> str:
        return f"{self.base}/event/{event_id}?allMarkets=true"

    async def fetch_events(self) -> Envelope | None:
        """``data: {events[], sc{eventId: score}, version, isdiff}``. Live state, short or no cache."""
        return await self.upstream.fetch_envelope(self.events_url(), self.settings.events_ttl_sec)

    async def fetch_market_config(self) -> Envelope | None:
        """``data: {m, mg, msg, dmg, dmsg, s}`` - maps keyed by string ids."""
        return await self.upstream.fetch_envelope(
            f"{self.base}/get_market_config", self.settings.market_config_ttl_sec
        )

    async def fetch_competitions(self) -> Envelope | None:
        return await self.upstream.fetch_envelope(
            f"{self.base}/competitions", self.settings.competitions_ttl_sec
        )

    async def fetch_play_percentages(self) -> Envelope | None:
        """eventId -> market subtype -> outcome id -> percent."""
        return await self.upstream.fetch_envelope(
            f"{self.base}/outcome-play-percentages?sportType={self.settings.sport_id}",
            self.settings.percentages_ttl_sec,
        )

    async def fetch_popularity(self) -> Envelope | None:
        """eventId -> percent of bet slips containing the event."""
        return await self.upstream.fetch_envelope(
            f"{self.base}/played-event-percentage?sportType={self.settings.sport_id}",
            self.settings.percentages_ttl_sec,
        )

    async def fetch_event_detail(self, event_id: str) -> Envelope | None:
        """Full event with every market (``m`` or ``markets``)."""
        return await self.upstream.fetch_envelope(self.event_detail_url(event_id))
