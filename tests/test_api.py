"""API routes: auth gate, v1 and v2 payloads, error shape."""

import pytest
from conftest import make_context, make_event, make_settings
from fastapi.testclient import TestClient

from matchfeed.api.main import create_app

AUTH = ("admin", "secret")


@pytest.fixture
def client(settings, fake):
    fake.set_events([make_event(101, markets=2), make_event(102, markets=1, ci=20)], scores={"101": {"ht": "0-0"}})
    app = create_app(settings, context=make_context(settings, fake))
    return TestClient(app)


def test_health_is_public(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_matches_requires_credentials(client):
    r = client.get("/api/matches")
    assert r.status_code == 401
    assert r.headers["www-authenticate"] == 'Basic realm="Protected"'
    assert client.get("/api/matches", auth=("admin", "wrong")).status_code == 401
    assert client.get("/api/matches-v2", auth=("nobody", "secret")).status_code == 401


def test_unconfigured_credentials_reject_everything(fake):
    settings = make_settings(auth={"username": "", "password": ""})
    app = create_app(settings, context=make_context(settings, fake))
    r = TestClient(app).get("/api/matches", auth=AUTH)
    assert r.status_code == 401


def test_matches_v1_shape(client):
    r = client.get("/api/matches", auth=AUTH)
    assert r.status_code == 200
    body = r.json()
    assert body["isSuccess"] is True
    assert [e["i"] for e in body["data"]] == [101, 102]
    assert body["data"][0]["sc"] == {"ht": "0-0"}
    assert body["competitionNames"]["10"] == "Super Lig"
    assert body["competitions"]["20"] == 2
    assert body["matchPopularity"] == {"101": 12.5}
    assert set(body["marketConfig"]) == {"1", "4_1", "1_1"}


def test_matches_query_params(client):
    r = client.get("/api/matches", params={"competition": "20"}, auth=AUTH)
    assert [e["i"] for e in r.json()["data"]] == [102]
    r = client.get("/api/matches", params={"sort": "time"}, auth=AUTH)
    assert [e["i"] for e in r.json()["data"]] == [101, 102]
    r = client.get("/api/matches", params={"status": "ht"}, auth=AUTH)
    assert r.json()["data"] == []


def test_matches_v2_resolves_market_names(client):
    r = client.get("/api/matches-v2", auth=AUTH)
    assert r.status_code == 200
    body = r.json()
    first = body["matches"][0]
    assert first["id"] == 101
    assert first["homeTeam"] == {"name": "Home 101"}
    assert first["competition"]["name"] == "Super Lig"
    assert first["competition"]["icon"] == "https://flags.test/tr.png"
    assert first["popularity"] == 12.5
    assert first["playPercentages"] == {"1": {"1": 55.5}}
    assert [m["displayName"] for m in first["markets"]] == ["Main Result", "Main Result"]
    assert body["meta"]["competitions"]["20"]["name"] == "Premier League"


def test_pipeline_failure_returns_error_json(client, monkeypatch):
    async def boom(ctx, query=None):
        raise RuntimeError("unexpected")

    monkeypatch.setattr("matchfeed.api.main.build_payload", boom)
    for path in ("/api/matches", "/api/matches-v2"):
        r = client.get(path, auth=AUTH)
        assert r.status_code == 500
        assert r.json() == {"detail": "Internal server error", "code": "internal_error"}
