"""Canonical schema (Pydantic) - Event, Market, Outcome, reference data."""

from matchfeed.models.event import ENRICHMENT_FIELDS, Event, Market, Outcome
from matchfeed.models.reference import Competition, Envelope, MarketConfigEntry

__all__ = [
    "Event",
    "Market",
    "Outcome",
    "Competition",
    "Envelope",
    "MarketConfigEntry",
    "ENRICHMENT_FIELDS",
]
