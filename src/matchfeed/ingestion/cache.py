"""Keyed TTL cache for upstream JSON responses."""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable

import structlog
from cachetools import TLRUCache

log = structlog.get_logger(__name__)


def _entry_expiry(key: str, entry: tuple[Any, float], now: float) -> float:
    return now + entry[1]


class TTLCache:
    """Get-or-fetch cache keyed by request URL; every entry carries its own TTL.

    Backed by ``cachetools.TLRUCache``: an expired entry is dropped on access and
    replaced by the next successful fetch; past ``maxsize`` the least recently
    used entry goes first. A fetch returning None counts as a failure and is not
    cached. Concurrent misses on the same key each call ``fetch`` (no in-flight
    dedupe).
    """

    def __init__(self, maxsize: int = 4096, clock: Callable[[], float] = time.time) -> None:
        self._entries: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_entry_expiry, timer=clock)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        """Return the live value for key, or None if missing or expired."""
        entry = self._entries.get(key)
        return entry[0] if entry is not None else None

    def set(self, key: str, value: Any, ttl: float) -> None:
        self._entries[key] = (value, ttl)

    async def get_or_fetch(
        self,
        key: str,
        ttl: float | None,
        fetch: Callable[[], Awaitable[Any | None]],
    ) -> Any | None:
        """Return the cached value for key or await fetch(). ttl <= 0 or None bypasses the cache."""
        caching = ttl is not None and ttl > 0
        if caching:
            cached = self.get(key)
            if cached is not None:
                log.debug("cache_hit", key=key)
                return cached
        value = await fetch()
        if value is not None and caching:
            self.set(key, value, ttl)
        return value
