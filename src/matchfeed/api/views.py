"""Aggregated payload -> v2 view (descriptive field names, config-resolved market names)."""

from __future__ import annotations

from matchfeed.api.schemas import (
    CompetitionMeta,
    CompetitionRef,
    MarketV2,
    MatchesV2Meta,
    MatchesV2Response,
    MatchV2,
    OutcomeV2,
    TeamRef,
)
from matchfeed.ingestion.sportsbook.normalize import lookup_market_config
from matchfeed.models import Event, Market, MarketConfigEntry, Outcome
from matchfeed.pipeline.assembler import MatchesPayload


def map_outcome(outcome: Outcome) -> OutcomeV2:
    return OutcomeV2(
        id=outcome.outcome_id,
        name=outcome.name,
        odd=outcome.odd,
        previous_odd=outcome.previous_odd,
        value=outcome.display_value,
    )


def map_market(market: Market, market_config: dict[str, MarketConfigEntry]) -> MarketV2:
    config = lookup_market_config(market_config, market.config_keys)
    display_name = market.name
    if config is not None:
        for candidate in (config.name, config.short_name):
            if candidate is not None:
                display_name = candidate
                break
    return MarketV2(
        id=market.market_id,
        type=market.type,
        sub_type=market.sub_type,
        status=market.status,
        bet_count=market.bet_count,
        line=market.line,
        name=market.name,
        display_name=display_name,
        outcomes=[map_outcome(o) for o in market.outcomes or []],
    )


def map_match(event: Event, payload: MatchesPayload) -> MatchV2:
    competition = None
    cid = event.competition_id
    if cid:
        competition = CompetitionRef(
            id=cid,
            name=payload.competition_names.get(cid),
            parent_id=payload.competitions.get(cid),
            icon=payload.competition_icons.get(cid),
        )
    key = event.key
    return MatchV2(
        id=event.event_id,
        betradar_id=event.betradar_id,
        status=event.status,
        bet_period=event.bet_period,
        kickoff=event.kickoff,
        sport_id=event.sport_id,
        competition=competition,
        home_team=TeamRef(name=event.home_name),
        away_team=TeamRef(name=event.away_name),
        markets=[map_market(m, payload.market_config) for m in event.markets or []],
        popularity=payload.match_popularity.get(key),
        play_percentages=payload.play_percentages.get(key),
        sc=event.score,
        statistics=event.statistics,
        head_to_head=event.head_to_head,
        last_matches=event.last_matches,
        iddaa_analysis=event.analysis,
        missing_players=event.missing_players,
        referee_stats=event.referee_stats,
        standings=event.standings,
        sportradar=event.live_stats,
    )


def competitions_meta(payload: MatchesPayload) -> dict[int, CompetitionMeta]:
    """Every named competition with its parent and icon."""
    return {
        cid: CompetitionMeta(
            name=name,
            parent_id=payload.competitions.get(cid),
            icon=payload.competition_icons.get(cid),
        )
        for cid, name in payload.competition_names.items()
    }


def build_v2_response(payload: MatchesPayload) -> MatchesV2Response:
    return MatchesV2Response(
        matches=[map_match(e, payload) for e in payload.data],
        meta=MatchesV2Meta(
            competitions=competitions_meta(payload),
            play_percentages=payload.play_percentages,
            match_popularity=payload.match_popularity,
            market_config={
                k: v.model_dump(by_alias=True, exclude_unset=True)
                for k, v in payload.market_config.items()
            },
        ),
    )
