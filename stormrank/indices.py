"""
Record indices
==============

Built once from the loaded records and never updated. Two guarantees the
rest of the package depends on:

- every ID list is ascending, because record_id is the row position and
  rows are visited in file order; filters can intersect them directly;
- `by_type` (and `by_state`) iterate in the order each label first appears
  in the file, which is the tie-break order for ranks.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Sequence
from bisect import bisect_left, bisect_right
from .models import RawRecord

@dataclass
class Indices:
    by_state: Dict[str, List[int]] = field(default_factory=dict)
    by_type: Dict[str, List[int]] = field(default_factory=dict)
    by_year: Dict[int, List[int]] = field(default_factory=dict)

    @property
    def years_sorted(self) -> List[int]:
        return sorted(self.by_year)

    def ids_for(self, kind: str, value) -> List[int]:
        """IDs carrying `value` for kind state | type | year; [] if unseen."""
        lookup = {"state": self.by_state, "type": self.by_type, "year": self.by_year}
        if kind not in lookup:
            raise ValueError("index kind must be: state | type | year")
        return lookup[kind].get(value, [])

    def years_between(self, y1: int, y2: int) -> List[int]:
        """IDs of records beginning in [y1, y2], ascending."""
        years = self.years_sorted
        chosen = years[bisect_left(years, y1):bisect_right(years, y2)]
        # merging per-year lists keeps the result ascending
        return sorted(i for y in chosen for i in self.by_year[y])

def build_indices(records: Sequence[RawRecord]) -> Indices:
    idx = Indices()
    for r in records:
        idx.by_state.setdefault(r.state, []).append(r.record_id)
        idx.by_type.setdefault(r.event_type, []).append(r.record_id)
        idx.by_year.setdefault(r.year, []).append(r.record_id)
    return idx
