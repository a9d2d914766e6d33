"""End-to-end pipeline runs against a fake upstream."""

import asyncio
import time

import httpx
from conftest import LIVE_STATS, envelope, make_context, make_event, make_settings

from matchfeed.pipeline import MatchQuery, PipelineContext, build_payload
from matchfeed.pipeline.fetcher import fetch_events_and_reference
from matchfeed.pipeline.orchestrator import EnrichmentOrchestrator, iter_batches

EVENT_CALLS = 8


def _run(settings, fake, query=None):
    async def go():
        async with make_context(settings, fake) as ctx:
            return await build_payload(ctx, query)

    return asyncio.run(go())


def _live_token(offset=3600):
    return f"exp={int(time.time()) + offset}~acl=/*~data=t~hmac=00"


def test_iter_batches():
    assert [len(b) for b in iter_batches(list(range(12)), 5)] == [5, 5, 2]
    assert list(iter_batches([], 5)) == []


def test_batches_run_sequentially_with_fixed_call_set(settings, fake):
    ids = [101, 102, 103, 104, 105, 106]
    fake.set_events([make_event(i) for i in ids])

    async def go():
        async with make_context(settings, fake) as ctx:
            fetched = await fetch_events_and_reference(ctx, include_upcoming=False)
            orchestrator = EnrichmentOrchestrator(ctx)
            enriched = await orchestrator.enrich(fetched.events, fetched.token)
            return orchestrator, enriched

    orchestrator, enriched = asyncio.run(go())
    assert orchestrator.batches_run == 2
    assert [e.key for e in enriched] == [str(i) for i in ids]
    for i in ids:
        assert len(fake.requests_for_event(i)) == EVENT_CALLS

    position = {id(r): n for n, r in enumerate(fake.requests)}
    first_batch = [position[id(r)] for i in ids[:5] for r in fake.requests_for_event(i)]
    second_batch = [position[id(r)] for r in fake.requests_for_event(106)]
    assert max(first_batch) < min(second_batch)


def test_upcoming_only_with_flag(settings, fake):
    fake.set_events([make_event(101, status=1), make_event(102, status=0)])
    assert [e.key for e in _run(settings, fake).data] == ["101"]
    included = _run(settings, fake, MatchQuery(include_upcoming=True))
    assert sorted(e.key for e in included.data) == ["101", "102"]


def test_market_config_failure_degrades_to_empty_map(settings, fake):
    fake.set_events([make_event(101)])
    fake.failing.add("/sportsbook/get_market_config")
    wire = _run(settings, fake).to_wire()
    assert wire["marketConfig"] == {}
    assert [e["i"] for e in wire["data"]] == [101]


def test_reference_maps_in_payload(settings, fake):
    fake.set_events([make_event(101)])
    wire = _run(settings, fake).to_wire()
    assert wire["competitions"] == {10: 1, 20: 2}
    assert wire["competitionNames"][10] == "Super Lig"
    assert wire["competitionIcons"][20] == "https://flags.test/gb.png"
    assert wire["playPercentages"] == {"101": {"1": {"1": 55.5}}}
    assert wire["matchPopularity"] == {"101": 12.5}
    assert wire["marketConfig"]["1"]["n"] == "Main Result"
    assert wire["marketConfig"]["1_1"]["n"] == "Match Result"


def test_per_event_failures_keep_the_event(settings, fake):
    fake.set_events([make_event(101, markets=2)])
    fake.failing.add("/sportsbook/event/101")
    fake.failing.add("/statistics/eventsummary/1/101")
    fake.routes["/statistics/headtohead/1/101/10"] = envelope({"matches": [1, 2]})
    payload = _run(settings, fake)
    event = payload.data[0]
    assert event.market_count == 2
    wire = event.to_wire()
    assert wire["headToHead"] == {"matches": [1, 2]}
    assert "statistics" not in wire
    assert "standings" not in wire


def test_detail_markets_and_summary_flow_into_event(settings, fake):
    fake.set_events([make_event(101, markets=1)])
    detail_markets = [{"i": 1, "t": 1, "st": 1, "o": [{"no": 1, "odd": 2.0}]}, {"i": 2, "t": 2, "st": 60}]
    fake.routes["/sportsbook/event/101"] = envelope({"i": 101, "m": detail_markets})
    fake.routes["/statistics/eventsummary/1/101"] = envelope({"tournamentStandingsModel": [{"p": 1}]})
    event = _run(settings, fake).data[0]
    assert [m.to_wire() for m in event.markets] == detail_markets
    assert event.standings == {"overAll": [{"p": 1}]}


def test_live_stats_only_with_secondary_id_and_token(fake):
    settings = make_settings(live_stats={"token": _live_token()})
    fake.set_events([make_event(101, bri=9001), make_event(102)])
    fake.routes["/gismo/match_detailsextended/9001"] = {"doc": [{"data": {"match": {"_id": 9001}}}]}
    payload = _run(settings, fake)
    live_paths = [p for p in fake.paths() if p.startswith("/gismo/")]
    assert live_paths == ["/gismo/match_detailsextended/9001"]
    by_key = {e.key: e for e in payload.data}
    assert by_key["101"].live_stats == {"data": {"match": {"_id": 9001}}}
    assert "sportradar" not in by_key["102"].to_wire()
    request = next(r for r in fake.requests if r.url.path.startswith("/gismo/"))
    assert str(request.url).startswith(LIVE_STATS + "/match_detailsextended/9001?T=")


def test_no_token_means_no_live_stats_calls(settings, fake):
    fake.set_events([make_event(101, bri=9001)])
    _run(settings, fake)
    assert not [p for p in fake.paths() if p.startswith("/gismo/")]


def test_expired_token_means_no_live_stats_calls(fake):
    settings = make_settings(live_stats={"token": _live_token(offset=-60)})
    fake.set_events([make_event(101, bri=9001)])
    _run(settings, fake)
    assert not [p for p in fake.paths() if p.startswith("/gismo/")]


def test_event_without_id_makes_no_per_event_calls(settings, fake):
    nameless = make_event(0)
    del nameless["i"]
    fake.set_events([nameless])
    payload = _run(settings, fake)
    assert len(payload.data) == 1
    assert len(fake.requests) == 5


def test_passthrough_fields_and_side_map_scores(settings, fake):
    fake.set_events([make_event(101), make_event(102, sc={"inline": 1})], scores={"101": {"ht": "1-0"}, "102": {"x": 1}})
    wire = _run(settings, fake).to_wire()
    assert wire["isSuccess"] is True
    assert wire["message"] == "ok"
    scores = {e["i"]: e.get("sc") for e in wire["data"]}
    assert scores == {101: {"ht": "1-0"}, 102: {"inline": 1}}


def test_reference_data_is_cached_across_runs(settings, fake):
    fake.set_events([make_event(101)])

    async def go():
        async with make_context(settings, fake) as ctx:
            await build_payload(ctx)
            await build_payload(ctx)

    asyncio.run(go())
    assert fake.count("/sportsbook/competitions") == 1
    assert fake.count("/sportsbook/get_market_config") == 1
    assert fake.count("/sportsbook/events") == 2
    assert fake.count("/sportsbook/event/101") == 2


def test_events_failure_returns_empty_payload(settings, fake):
    fake.failing.add("/sportsbook/events")
    wire = _run(settings, fake).to_wire()
    assert wire["data"] == []
    assert wire["competitionNames"][10] == "Super Lig"


def test_query_sorts_and_filters(settings, fake):
    fake.set_events(
        [
            make_event(101, markets=1, ci=10),
            make_event(102, markets=4, ci=10),
            make_event(103, markets=9, ci=20),
            make_event(104, status=2, ci=10),
        ]
    )
    payload = _run(settings, fake, MatchQuery(competition="10", status="live"))
    assert [e.key for e in payload.data] == ["102", "101"]
    ht = _run(settings, fake, MatchQuery(status="ht"))
    assert [e.key for e in ht.data] == ["104"]


def test_request_headers(fake):
    settings = make_settings(live_stats={"token": _live_token()})
    fake.set_events([make_event(101, bri=9001)])
    _run(settings, fake)
    origin = settings.origin
    live = [r for r in fake.requests if r.url.path.startswith("/gismo/")]
    browser = [r for r in fake.requests if not r.url.path.startswith("/gismo/")]
    assert len(live) == 1 and len(browser) == 5 + EVENT_CALLS

    transaction_ids = [r.headers["client-transaction-id"] for r in browser]
    assert len(set(transaction_ids)) == len(browser)
    for r in browser:
        assert r.headers["origin"] == origin
        assert r.headers["referer"] == origin + "/"
        assert r.headers["timestamp"].isdigit()
        assert r.headers["platform"] == "web"

    assert live[0].headers["origin"] == origin
    assert live[0].headers["referer"] == origin + "/"
    assert "client-transaction-id" not in live[0].headers
    assert "timestamp" not in live[0].headers


def test_in_flight_requests_capped_by_max_concurrency(settings, fake):
    fake.set_events([make_event(i) for i in (101, 102, 103)])
    in_flight = {"now": 0, "peak": 0}

    async def slow_handler(request):
        in_flight["now"] += 1
        in_flight["peak"] = max(in_flight["peak"], in_flight["now"])
        await asyncio.sleep(0.01)
        in_flight["now"] -= 1
        return fake.handler(request)

    async def go():
        http = httpx.AsyncClient(transport=httpx.MockTransport(slow_handler))
        async with PipelineContext.create(settings, http=http) as ctx:
            fetched = await fetch_events_and_reference(ctx, include_upcoming=False)
            in_flight["peak"] = 0
            orchestrator = EnrichmentOrchestrator(ctx, max_concurrency=3)
            enriched = await orchestrator.enrich(fetched.events, fetched.token)
        await http.aclose()
        return enriched

    enriched = asyncio.run(go())
    assert len(enriched) == 3
    assert in_flight["peak"] == 3
