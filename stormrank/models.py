"""
Data model (storm records and aggregates)
=========================================

Each row of the Storm Data file becomes a `RawRecord`. The pipeline then
derives new objects instead of editing old ones:

    RawRecord -> NormalizedRecord -> AdjustedRecord -> EventAggregate

All record types are frozen so that filters and aggregations can share them
freely. The only record-level correction (the known 115 'B' outlier) happens
while the NormalizedRecord is *created*, never afterwards.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

@dataclass(frozen=True)
class RawRecord:
    """One storm event row, as loaded.

    `event_type` is kept verbatim: variants such as "TSTM WIND" and
    "THUNDERSTORM WIND" stay separate categories.
    """
    record_id: int
    begin_timestamp: datetime
    state: str
    event_type: str
    fatalities: int
    injuries: int
    property_damage_magnitude: float
    property_damage_unit: Optional[str]
    crop_damage_magnitude: float
    crop_damage_unit: Optional[str]
    remarks: str = ""

    @property
    def year(self) -> int:
        return self.begin_timestamp.year

@dataclass(frozen=True)
class NormalizedRecord:
    """RawRecord plus absolute (un-adjusted) dollar amounts."""
    raw: RawRecord
    combined_harm: int
    property_damage_dollars: float
    crop_damage_dollars: float
    total_damage_dollars: float
    # True when the known-outlier correction was applied
    corrected: bool = False

    @property
    def event_type(self) -> str:
        return self.raw.event_type

    @property
    def year(self) -> int:
        return self.raw.year

@dataclass(frozen=True)
class AdjustedRecord:
    """NormalizedRecord with damage expressed in reference-year dollars."""
    normalized: NormalizedRecord
    property_damage: float
    crop_damage: float
    total_damage: float
    factor: float

    @property
    def raw(self) -> RawRecord:
        return self.normalized.raw

    @property
    def event_type(self) -> str:
        return self.normalized.raw.event_type

    @property
    def year(self) -> int:
        return self.normalized.raw.year

    @property
    def fatalities(self) -> int:
        return self.normalized.raw.fatalities

    @property
    def injuries(self) -> int:
        return self.normalized.raw.injuries

    @property
    def combined_harm(self) -> int:
        return self.normalized.combined_harm

@dataclass(frozen=True)
class EventAggregate:
    """Harm and damage totals for one event type, with their ranks."""
    event_type: str
    record_count: int
    percent_of_total: float
    fatalities: int
    injuries: int
    combined_harm: int
    fatalities_rank: int
    injuries_rank: int
    combined_harm_rank: int
    property_damage: float
    crop_damage: float
    total_damage: float
    property_damage_rank: int
    crop_damage_rank: int
    total_damage_rank: int

    def as_dict(self) -> Dict[str, object]:
        return dict(self.__dict__)
