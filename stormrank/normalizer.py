"""
Damage normalizer
=================

Turns RawRecords into NormalizedRecords: decodes both magnitude/unit pairs
into dollars, adds the combined harm count, and applies the single known
data-entry correction.

The correction: a property damage of 115 'B' (115 billion dollars) was
recorded for the January 2006 Napa flood. Contemporary reports put the loss
at about 115 million, so any record with magnitude 115 and unit 'B' is
decoded with the million multiplier instead. Left alone, that one row would
top every cumulative damage ranking.
"""

from __future__ import annotations
from typing import Iterable, List
from loguru import logger
from .decoder import decode, to_dollars
from .models import NormalizedRecord, RawRecord

OUTLIER_MAGNITUDE = 115.0
OUTLIER_UNIT = "B"
OUTLIER_REPLACEMENT_UNIT = "M"

def is_known_outlier(raw: RawRecord) -> bool:
    """Match the bad entry by value, not by row position."""
    return (raw.property_damage_magnitude == OUTLIER_MAGNITUDE
            and raw.property_damage_unit == OUTLIER_UNIT)

def normalize_record(raw: RawRecord) -> NormalizedRecord:
    corrected = is_known_outlier(raw)
    prop_unit = OUTLIER_REPLACEMENT_UNIT if corrected else raw.property_damage_unit
    prop = to_dollars(raw.property_damage_magnitude, prop_unit)
    crop = to_dollars(raw.crop_damage_magnitude, raw.crop_damage_unit)
    return NormalizedRecord(
        raw=raw,
        combined_harm=raw.fatalities + raw.injuries,
        property_damage_dollars=prop,
        crop_damage_dollars=crop,
        total_damage_dollars=prop + crop,
        corrected=corrected,
    )

def normalize_records(raws: Iterable[RawRecord]) -> List[NormalizedRecord]:
    """Normalize every record; logs how many outlier corrections were made."""
    out = [normalize_record(r) for r in raws]
    fixed = [n.raw.record_id for n in out if n.corrected]
    if fixed:
        logger.warning(
            "Corrected {} record(s) with property damage {:g} {} -> {} multiplier: ids={}",
            len(fixed), OUTLIER_MAGNITUDE, OUTLIER_UNIT, OUTLIER_REPLACEMENT_UNIT, fixed,
        )
    logger.debug("Normalized {} records", len(out))
    return out

def unrecognised_units(raws: Iterable[RawRecord]) -> dict:
    """Count unit codes that decode to 0 while carrying a non-zero magnitude."""
    counts: dict = {}
    for r in raws:
        for mag, unit in ((r.property_damage_magnitude, r.property_damage_unit),
                          (r.crop_damage_magnitude, r.crop_damage_unit)):
            if mag and decode(unit) == 0.0:
                key = unit if unit is not None else ""
                counts[key] = counts.get(key, 0) + 1
    return counts
