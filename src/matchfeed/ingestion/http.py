"""Async JSON client shared by all upstream providers - headers, timeouts, caching."""

from __future__ import annotations

import time
import uuid
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from matchfeed.config.settings import Settings
from matchfeed.ingestion.cache import TTLCache
from matchfeed.models import Envelope

log = structlog.get_logger(__name__)


class UpstreamClient:
    """Thin wrapper over httpx.AsyncClient. Every failure degrades to None."""

    def __init__(
        self,
        settings: Settings,
        cache: TTLCache | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.cache = cache if cache is not None else TTLCache()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=settings.timeout_sec)

    def make_headers(self) -> dict[str, str]:
        """Per-request browser-like headers: fresh transaction id and timestamp on each call."""
        origin = self.settings.origin
        return {
            "accept": "application/json, text/plain, */*",
            "accept-language": self.settings.accept_language,
            "cache-control": "no-cache",
            "client-transaction-id": str(uuid.uuid4()),
            "origin": origin,
            "platform": "web",
            "pragma": "no-cache",
            "referer": origin + "/",
            "timestamp": str(int(time.time() * 1000)),
        }

    def make_plain_headers(self) -> dict[str, str]:
        """Minimal headers for providers that only check origin/referer."""
        origin = self.settings.origin
        return {
            "accept": "*/*",
            "accept-language": self.settings.accept_language,
            "origin": origin,
            "referer": origin + "/",
        }

    async def get_json(self, url: str, headers: dict[str, str] | None = None) -> Any | None:
        """GET url and decode JSON. Non-2xx, transport and decode errors return None."""
        try:
            resp = await self._http.get(url, headers=headers if headers is not None else self.make_headers())
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            log.warning("upstream_status", url=url, status=e.response.status_code)
        except httpx.HTTPError as e:
            log.warning("upstream_error", url=url, error=str(e) or type(e).__name__)
        except ValueError as e:
            log.warning("upstream_bad_json", url=url, error=str(e))
        return None

    async def fetch_json(self, url: str, ttl: float | None = None) -> Any | None:
        """Cached get_json keyed by url."""
        return await self.cache.get_or_fetch(url, ttl, lambda: self.get_json(url))

    async def fetch_envelope(self, url: str, ttl: float | None = None) -> Envelope | None:
        """Fetch an ``{isSuccess, data, message}`` response and parse it."""
        raw = await self.fetch_json(url, ttl)
        if not isinstance(raw, dict):
            return None
        try:
            return Envelope.model_validate(raw)
        except ValidationError as e:
            log.warning("upstream_bad_envelope", url=url, error=str(e))
            return None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()
