"""Per-event enrichment fan-out - sequential batches, semaphore-bounded requests within a batch."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Iterator

import structlog

from matchfeed.models import Event
from matchfeed.pipeline.context import PipelineContext
from matchfeed.pipeline.merge import EventEnrichment, merge_event

log = structlog.get_logger(__name__)


def iter_batches(events: list[Event], size: int) -> Iterator[list[Event]]:
    """Consecutive slices of at most size events."""
    for start in range(0, len(events), size):
        yield events[start : start + size]


class EnrichmentOrchestrator:
    """Runs the fixed per-event call set for each batch, then merges before starting the next.

    batch_size bounds how many events are in flight; max_concurrency bounds
    how many upstream requests are in flight inside a batch.
    """

    def __init__(
        self,
        ctx: PipelineContext,
        batch_size: int | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self.ctx = ctx
        self.batch_size = batch_size or ctx.settings.batch_size
        self.max_concurrency = max_concurrency or ctx.settings.max_concurrency
        self._semaphore = asyncio.Semaphore(self.max_concurrency)
        self.batches_run = 0

    def event_calls(self) -> list[tuple[str, Callable[[str], Awaitable[Any]]]]:
        """(EventEnrichment field, fetcher) pairs issued for every event, keyed by event id."""
        sportsbook = self.ctx.sportsbook
        stats = self.ctx.statistics
        return [
            ("detail", sportsbook.fetch_event_detail),
            ("summary", stats.fetch_summary),
            ("head_to_head", stats.fetch_head_to_head),
            ("last_matches", stats.fetch_last_matches),
            ("analysis", stats.fetch_analysis),
            ("missing_players", stats.fetch_missing_players),
            ("referee", stats.fetch_referee),
            ("standings", stats.fetch_standings),
        ]

    async def _gated(self, call: Callable[..., Awaitable[Any]], *args: str) -> Any:
        async with self._semaphore:
            return await call(*args)

    async def _by_event_id(self, call: Callable[[str], Awaitable[Any]], event: Event) -> Any:
        event_id = event.key
        if not event_id:
            return None
        return await self._gated(call, event_id)

    async def _live_stats(self, event: Event, token: str | None) -> Any:
        betradar_id = event.betradar_id
        if not betradar_id or not token:
            return None
        return await self._gated(self.ctx.live_stats.fetch_match_details, str(betradar_id), token)

    async def fetch_batch(self, batch: list[Event], token: str | None) -> list[EventEnrichment]:
        """Issue every call for every event in batch; results aligned with batch order."""
        calls = self.event_calls()
        groups = [
            asyncio.gather(*(self._by_event_id(call, event) for event in batch))
            for _, call in calls
        ]
        groups.append(asyncio.gather(*(self._live_stats(event, token) for event in batch)))
        results = await asyncio.gather(*groups)

        found = [EventEnrichment() for _ in batch]
        for (name, _), column in zip(calls, results):
            for item, value in zip(found, column):
                setattr(item, name, value)
        for item, value in zip(found, results[-1]):
            item.live_stats = value
        return found

    async def enrich(self, events: list[Event], token: str | None) -> list[Event]:
        enriched: list[Event] = []
        for batch in iter_batches(events, self.batch_size):
            t0 = time.monotonic()
            found = await self.fetch_batch(batch, token)
            enriched.extend(merge_event(event, item) for event, item in zip(batch, found))
            self.batches_run += 1
            log.debug(
                "batch_enriched",
                batch=self.batches_run,
                events=len(batch),
                elapsed_ms=int((time.monotonic() - t0) * 1000),
            )
        return enriched
