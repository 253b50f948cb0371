"""
Frequency table
===============

How many records each event type has, and what share of the *whole* loaded
dataset that is. The denominator is passed in (or taken from the input
length) rather than hard-coded, so the shares stay correct for any file.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional
from .models import RawRecord

@dataclass(frozen=True)
class FrequencyRow:
    event_type: str
    record_count: int
    percent_of_total: float

def percent_share(count: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(count / total * 100, 1)

def count_event_types(event_types: Iterable[str]) -> Dict[str, int]:
    """Counts per label, in first-seen order."""
    counts: Dict[str, int] = {}
    for et in event_types:
        counts[et] = counts.get(et, 0) + 1
    return counts

def build_frequency_table(records: Iterable[RawRecord], total: Optional[int] = None) -> List[FrequencyRow]:
    """One row per distinct event_type.

    total: row count of the full loaded dataset; defaults to the number of
    records passed in.
    """
    counts = count_event_types(r.event_type for r in records)
    if total is None:
        total = sum(counts.values())
    return [FrequencyRow(et, n, percent_share(n, total)) for et, n in counts.items()]

def as_mapping(rows: Iterable[FrequencyRow]) -> Dict[str, FrequencyRow]:
    return {r.event_type: r for r in rows}
