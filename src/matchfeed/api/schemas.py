"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"
    cache_entries: int = 0


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. internal_error")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- v2 mapped view ---
class OutcomeV2(_CamelModel):
    id: int | str | None = None
    name: str | None = None
    odd: int | float | None = None
    previous_odd: int | float | None = Field(None, alias="previousOdd")
    value: int | float | str | None = None


class MarketV2(_CamelModel):
    id: int | None = None
    type: int | None = None
    sub_type: int | str | None = Field(None, alias="subType")
    status: int | None = None
    bet_count: int | None = Field(None, alias="betCount")
    line: int | float | str | None = None
    name: str | None = None
    display_name: str | None = Field(None, alias="displayName")
    outcomes: list[OutcomeV2] = Field(default_factory=list)


class CompetitionRef(_CamelModel):
    id: int
    name: str | None = None
    parent_id: int | None = Field(None, alias="parentId")
    icon: str | None = None


class TeamRef(BaseModel):
    name: str | None = None


class MatchV2(_CamelModel):
    id: int | str | None = None
    betradar_id: int | str | None = Field(None, alias="betradarId")
    status: int | None = None
    bet_period: int | None = Field(None, alias="betPeriod")
    kickoff: int | float | None = None
    sport_id: int | None = Field(None, alias="sportId")
    competition: CompetitionRef | None = None
    home_team: TeamRef = Field(default_factory=TeamRef, alias="homeTeam")
    away_team: TeamRef = Field(default_factory=TeamRef, alias="awayTeam")
    markets: list[MarketV2] = Field(default_factory=list)
    popularity: float | None = None
    play_percentages: Any = Field(None, alias="playPercentages")
    sc: Any = None
    statistics: Any = None
    head_to_head: Any = Field(None, alias="headToHead")
    last_matches: Any = Field(None, alias="lastMatches")
    iddaa_analysis: Any = Field(None, alias="iddaaAnalysis")
    missing_players: Any = Field(None, alias="missingPlayers")
    referee_stats: Any = Field(None, alias="refereeStats")
    standings: Any = None
    sportradar: Any = None


class CompetitionMeta(_CamelModel):
    name: str | None = None
    parent_id: int | None = Field(None, alias="parentId")
    icon: str | None = None


class MatchesV2Meta(_CamelModel):
    competitions: dict[int, CompetitionMeta] = Field(default_factory=dict)
    play_percentages: dict[str, Any] = Field(default_factory=dict, alias="playPercentages")
    match_popularity: dict[str, Any] = Field(default_factory=dict, alias="matchPopularity")
    market_config: dict[str, Any] = Field(default_factory=dict, alias="marketConfig")


class MatchesV2Response(BaseModel):
    matches: list[MatchV2]
    meta: MatchesV2Meta
