"""Explicit pipeline dependencies - HTTP clients, cache and token holder for one process or test."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

import httpx

from matchfeed.config.settings import Settings
from matchfeed.ingestion.cache import TTLCache
from matchfeed.ingestion.http import UpstreamClient
from matchfeed.ingestion.livestats.client import LiveStatsClient
from matchfeed.ingestion.livestats.token import TokenManager
from matchfeed.ingestion.sportsbook.client import SportsbookClient
from matchfeed.ingestion.statistics import StatisticsClient


@dataclass
class PipelineContext:
    settings: Settings
    upstream: UpstreamClient
    sportsbook: SportsbookClient
    statistics: StatisticsClient
    live_stats: LiveStatsClient
    tokens: TokenManager

    @property
    def cache(self) -> TTLCache:
        return self.upstream.cache

    @classmethod
    def create(
        cls,
        settings: Settings,
        http: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> PipelineContext:
        """Build a context with its own cache and token state. Pass http to inject a transport."""
        cache = TTLCache(maxsize=settings.cache_max_entries, clock=clock)
        upstream = UpstreamClient(settings, cache=cache, http=http)
        return cls(
            settings=settings,
            upstream=upstream,
            sportsbook=SportsbookClient(upstream),
            statistics=StatisticsClient(upstream),
            live_stats=LiveStatsClient(upstream),
            tokens=TokenManager(
                external_token=settings.live_stats_token,
                fallback_token=settings.live_stats_fallback_token,
                clock=clock,
            ),
        )

    async def aclose(self) -> None:
        await self.upstream.aclose()

    async def __aenter__(self) -> PipelineContext:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
