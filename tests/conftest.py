"""Shared fixtures: test settings and a fake upstream served through httpx.MockTransport."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from matchfeed.config import Settings
from matchfeed.pipeline import PipelineContext

SPORTSBOOK = "https://sb.test/sportsbook"
STATISTICS = "https://stats.test/statistics"
LIVE_STATS = "https://live.test/gismo"


def make_settings(**overrides: Any) -> Settings:
    raw: dict[str, Any] = {
        "upstream": {
            "sportsbook_base": SPORTSBOOK,
            "statistics_base": STATISTICS,
            "live_stats_base": LIVE_STATS,
            "flag_url_template": "https://flags.test/{code}.png",
            "timeout_sec": 2.0,
        },
        "live_stats": {"fallback_token": ""},
        "auth": {"username": "admin", "password": "secret"},
    }
    for section, values in overrides.items():
        raw.setdefault(section, {}).update(values)
    return Settings.from_dict(raw)


def envelope(data: Any) -> dict[str, Any]:
    return {"isSuccess": True, "data": data, "message": ""}


def make_event(event_id: int, status: int = 1, markets: int = 1, **extra: Any) -> dict[str, Any]:
    event = {
        "i": event_id,
        "hn": f"Home {event_id}",
        "an": f"Away {event_id}",
        "s": status,
        "ci": 10,
        "d": 1_700_000_000 + event_id,
        "sid": 1,
        "m": [{"i": event_id * 100 + n, "t": 1, "st": 1, "o": []} for n in range(markets)],
    }
    event.update(extra)
    return event


class FakeUpstream:
    """Serves canned JSON by URL path and records every request in arrival order."""

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.failing: set[str] = set()
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.failing:
            return httpx.Response(500, json={"error": "boom"})
        if path in self.routes:
            return httpx.Response(200, json=self.routes[path])
        return httpx.Response(404)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def count(self, path: str) -> int:
        return self.paths().count(path)

    def requests_for_event(self, event_id: int) -> list[httpx.Request]:
        return [r for r in self.requests if str(event_id) in r.url.path.split("/")]

    def set_events(self, events: list[dict[str, Any]], scores: dict[str, Any] | None = None) -> None:
        self.routes["/sportsbook/events"] = {
            "isSuccess": True,
            "data": {"events": events, "sc": scores or {}, "version": 42, "isdiff": False},
            "message": "ok",
        }

    def set_reference(self) -> None:
        self.routes["/sportsbook/competitions"] = envelope(
            [
                {"i": 10, "p": 1, "n": "Super Lig", "cid": "TR"},
                {"i": 20, "p": 2, "n": "Premier League", "cid": "GB"},
            ]
        )
        self.routes["/sportsbook/get_market_config"] = envelope(
            {
                "m": {
                    "1": {"i": 1, "n": "Match Result", "sn": "MR", "mt": 1, "mst": 1},
                    "2": {"i": 2, "n": "Main Result", "sn": "MS", "mt": 4, "mst": 1},
                },
                "mg": {},
            }
        )
        self.routes["/sportsbook/outcome-play-percentages"] = envelope({"101": {"1": {"1": 55.5}}})
        self.routes["/sportsbook/played-event-percentage"] = envelope({"101": 12.5})


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake() -> FakeUpstream:
    fake = FakeUpstream()
    fake.set_reference()
    return fake


def make_context(settings: Settings, fake: FakeUpstream, **kwargs: Any) -> PipelineContext:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
    return PipelineContext.create(settings, http=http, **kwargs)
