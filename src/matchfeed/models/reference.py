"""Reference data and the common upstream response envelope."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Envelope(BaseModel):
    """``{isSuccess, data, message}`` wrapper used by the sportsbook and statistics APIs."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    is_success: bool | None = Field(None, alias="isSuccess")
    data: Any = None
    message: str | None = None

    @property
    def payload(self) -> Any:
        """``data`` when it carries something; None for null/false/0/empty string."""
        if self.data is None or self.data is False or self.data == "" or self.data == 0:
            return None
        return self.data

    def passthrough(self) -> dict[str, Any]:
        """Top-level fields other than ``data``, with provider names."""
        out = self.model_dump(by_alias=True, exclude_unset=True)
        out.pop("data", None)
        return out


class Competition(BaseModel):
    """Competition (league/cup) from the competitions endpoint."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    competition_id: int | None = Field(None, alias="i")
    parent_id: int | None = Field(None, alias="p")
    name: str | None = Field(None, alias="n")
    short_name: str | None = Field(None, alias="sn")
    country_code: str | None = Field(None, alias="cid")
    icon: str | None = Field(None, alias="ic")


class MarketConfigEntry(BaseModel):
    """Display metadata for one market subtype."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    config_id: int | None = Field(None, alias="i")
    name: str | None = Field(None, alias="n")
    short_name: str | None = Field(None, alias="sn")
    market_type: int | None = Field(None, alias="mt")
    market_sub_type: int | None = Field(None, alias="mst")
    in_live: bool | None = Field(None, alias="il")
    is_legal: bool | None = Field(None, alias="in")

    @property
    def keys(self) -> list[str]:
        """Registration keys: subtype, then ``type_subtype``. Empty without a subtype."""
        if not self.market_sub_type:
            return []
        keys = [str(self.market_sub_type)]
        if self.market_type:
            keys.append(f"{self.market_type}_{self.market_sub_type}")
        return keys
