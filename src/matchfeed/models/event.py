"""Event, Market, Outcome - sportsbook entities.

Fields keep the provider's short wire names as aliases so a dumped model
(``by_alias=True, exclude_unset=True``) has the same shape as the upstream
payload plus whatever enrichment was attached.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Outcome id sources, highest precedence first.
OUTCOME_ID_FIELDS = ("no", "on", "No")
# Outcome display value sources, highest precedence first.
OUTCOME_VALUE_FIELDS = ("v", "ov", "cs")

# Event fields filled by enrichment calls, never by the event-detail payload.
ENRICHMENT_FIELDS = (
    "statistics",
    "headToHead",
    "lastMatches",
    "iddaaAnalysis",
    "missingPlayers",
    "refereeStats",
    "standings",
    "sportradar",
)


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump with provider field names, only fields that were present or assigned."""
        return self.model_dump(by_alias=True, exclude_unset=True)

    def first_present(self, wire_names: tuple[str, ...]) -> Any:
        """Value of the first field, by provider name, that is not None."""
        by_wire_name = {f.alias or name: name for name, f in type(self).model_fields.items()}
        for wire_name in wire_names:
            value = getattr(self, by_wire_name[wire_name])
            if value is not None:
                return value
        return None


class Outcome(_ProviderModel):
    """Selectable option within a market."""

    outcome_no: int | str | None = Field(None, alias="no")
    outcome_on: int | str | None = Field(None, alias="on")
    ordinal: int | str | None = Field(None, alias="No")
    name: str | None = Field(None, alias="n")
    odd: int | float | None = None
    previous_odd: int | float | None = Field(None, alias="wodd")
    value: int | float | str | None = Field(None, alias="v")
    value_text: int | float | str | None = Field(None, alias="ov")
    correct_score: str | None = Field(None, alias="cs")

    @property
    def outcome_id(self) -> int | str | None:
        """Canonical outcome number: ``no``, then ``on``, then ``No``."""
        return self.first_present(OUTCOME_ID_FIELDS)

    @property
    def display_value(self) -> int | float | str | None:
        """Handicap/total/score label: ``v``, then ``ov``, then ``cs``."""
        return self.first_present(OUTCOME_VALUE_FIELDS)


class Market(_ProviderModel):
    """Bettable proposition on one event."""

    market_id: int | None = Field(None, alias="i")
    type: int | None = Field(None, alias="t")
    sub_type: int | str | None = Field(None, alias="st")
    name: str | None = Field(None, alias="n")
    status: int | None = Field(None, alias="s")  # 1 = open
    line: int | float | str | None = Field(None, alias="sov")
    bet_count: int | None = Field(None, alias="mbc")
    outcomes: list[Outcome] | None = Field(None, alias="o")

    @property
    def config_keys(self) -> list[str]:
        """Market-config lookup keys in lookup order: subtype, then ``type_subtype``."""
        keys: list[str] = []
        if self.sub_type:
            keys.append(str(self.sub_type))
        if self.type is not None and self.sub_type is not None:
            keys.append(f"{self.type}_{self.sub_type}")
        return keys

    @property
    def identity(self) -> tuple[int | None, str | None]:
        """(market id, subtype or line) - stable key for diffing markets across polls."""
        composite = self.sub_type if self.sub_type is not None else self.line
        return (self.market_id, str(composite) if composite is not None else None)


class Event(_ProviderModel):
    """One match as listed by the sportsbook, plus attached enrichment."""

    event_id: int | str | None = Field(None, alias="i")
    betradar_id: int | str | None = Field(None, alias="bri")
    competition_id: int | None = Field(None, alias="ci")
    home_name: str | None = Field(None, alias="hn")
    away_name: str | None = Field(None, alias="an")
    sport_id: int | None = Field(None, alias="sid")
    status: int | None = Field(None, alias="s")  # 0 = not started
    bet_period: int | None = Field(None, alias="bp")
    kickoff: int | float | None = Field(None, alias="d")  # epoch seconds
    markets: list[Market] | None = Field(None, alias="m")
    score: dict[str, Any] | None = Field(None, alias="sc")

    statistics: Any = None
    head_to_head: Any = Field(None, alias="headToHead")
    last_matches: Any = Field(None, alias="lastMatches")
    analysis: Any = Field(None, alias="iddaaAnalysis")
    missing_players: Any = Field(None, alias="missingPlayers")
    referee_stats: Any = Field(None, alias="refereeStats")
    standings: Any = None
    live_stats: Any = Field(None, alias="sportradar")

    @property
    def key(self) -> str:
        """Event id as string; falls back to a raw ``id`` field. Empty when unknown."""
        raw = self.event_id
        if not raw and self.model_extra:
            raw = self.model_extra.get("id")
        return str(raw) if raw else ""

    @property
    def status_code(self) -> int:
        return self.status if self.status is not None else 0

    @property
    def market_count(self) -> int:
        return len(self.markets or [])
