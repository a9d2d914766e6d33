"""Bearer token for the live-stats provider. Expiry comes from the token's own ``exp=`` claim."""

from __future__ import annotations

import re
import time
from typing import Callable

import structlog

log = structlog.get_logger(__name__)

_EXP_CLAIM = re.compile(r"exp=(\d+)")


def parse_token_expiry(token: str) -> float | None:
    """Unix seconds from the ``exp=<digits>`` claim, or None if absent."""
    match = _EXP_CLAIM.search(token or "")
    if not match:
        return None
    return float(match.group(1))


class TokenManager:
    """Holds at most one token.

    Precedence: the externally configured token (re-read every call, so a
    rotated value is picked up), then the last adopted token while it is
    unexpired, then the fallback token. Returns None instead of raising when
    no usable token exists.
    """

    def __init__(
        self,
        external_token: str | None = None,
        fallback_token: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.external_token = external_token
        self.fallback_token = fallback_token
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def expires_at(self) -> float:
        return self._expires_at

    def _is_live(self) -> bool:
        return self._token is not None and self._expires_at > self._clock()

    def _adopt(self, candidate: str, source: str) -> str | None:
        expires_at = parse_token_expiry(candidate)
        if expires_at is None:
            log.warning("token_unparseable", source=source)
            return None
        self._token = candidate
        self._expires_at = expires_at
        if not self._is_live():
            log.warning("token_expired", source=source, expired_at=int(expires_at))
            return None
        log.info("token_adopted", source=source, expires_at=int(expires_at))
        return candidate

    def get_token(self) -> str | None:
        if self.external_token:
            if self._token == self.external_token and self._is_live():
                return self._token
            return self._adopt(self.external_token, "external")
        if self._is_live():
            return self._token
        if self.fallback_token:
            return self._adopt(self.fallback_token, "fallback")
        return None
