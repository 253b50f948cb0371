"""
Magnitude decoder
=================

Storm Data splits every damage amount into a number (PROPDMG) and a scale
letter (PROPDMGEXP). Only the three documented letters are trusted:

    K -> thousands, M -> millions, B -> billions   (any case)

Every other code seen in the file ("+", "?", "0".."8", "H", blank, missing)
decodes to 0, so the matching amount counts as zero dollars rather than
its face value.
"""

import math
from typing import Any, Dict

UNIT_MULTIPLIERS: Dict[str, float] = {
    "k": 1_000.0,
    "m": 1_000_000.0,
    "b": 1_000_000_000.0,
}

def decode(unit: Any) -> float:
    """Return the dollar multiplier for a unit code; 0.0 if unrecognised."""
    if not isinstance(unit, str):
        return 0.0
    return UNIT_MULTIPLIERS.get(unit.lower(), 0.0)

def to_dollars(magnitude: float, unit: Any) -> float:
    """Combine a magnitude/unit pair into an absolute dollar amount."""
    if not magnitude or math.isnan(magnitude):
        return 0.0
    return float(magnitude) * decode(unit)
