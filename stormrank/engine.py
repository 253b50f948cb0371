"""
Core engine
===========

Wires the pipeline together and keeps a filterable working set:

1) Load dataset -> list of RawRecord (immutable)
2) Build indices -> fast lookup tables (state, event type, year)
3) Normalize + adjust every record once (outlier fix, CPI scaling)
4) Maintain a *current selection* of record IDs (SelectionState.active_ids)
5) `analyze()` aggregates the current selection into ranked tables

Filtering never changes the denominator of the percent shares: those are
always relative to the full loaded dataset.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
from loguru import logger
from .aggregator import DEFAULT_MIN_RECORDS, RankedTable, damage_table, harm_table, join_tables
from .cpi import MissingCpiYearError, adjust_records, check_coverage
from .frequency import build_frequency_table
from .indices import Indices, build_indices
from .models import AdjustedRecord, EventAggregate, RawRecord
from .normalizer import normalize_records
from .ranking import intersect_sorted

@dataclass
class AnalysisConfig:
    """Knobs for one analysis run."""
    # None -> latest begin year in the dataset
    reference_year: Optional[int] = None
    # groups with fewer records are left out of the per-record views
    min_records: int = DEFAULT_MIN_RECORDS
    # rows shown by CLI listings and report tables
    top_n: int = 10

@dataclass
class AnalysisResult:
    """Everything one run produces; the reporting side only reads this."""
    harm: RankedTable
    damage: RankedTable
    harm_per_record: RankedTable
    damage_per_record: RankedTable
    events: List[EventAggregate]
    reference_year: int
    records_in_scope: int
    total_records: int
    corrected_records: int

    def table(self, name: str) -> RankedTable:
        tables = {
            "harm": self.harm,
            "damage": self.damage,
            "harm-per-record": self.harm_per_record,
            "damage-per-record": self.damage_per_record,
        }
        key = name.lower().replace("_", "-")
        if key not in tables:
            raise ValueError(f"table must be one of: {', '.join(tables)}")
        return tables[key]

@dataclass
class SelectionState:
    """Holds the current working set of record IDs (like a view)."""
    active_ids: List[int]

@dataclass
class StormEngine:
    """Storm event harm/damage engine.

    The engine stores:
    - records: all RawRecord rows
    - idx: precomputed indices for fast filters
    - cpi: year -> price index
    - state: current selection (list of IDs)

    Filters update `state.active_ids` only.
    """
    records: List[RawRecord]
    cpi: Mapping[int, float]
    config: AnalysisConfig = field(default_factory=AnalysisConfig)
    dataset_path: Optional[str] = None
    # commands that shaped the selection (for the report)
    command_log: List[str] = field(default_factory=list)
    idx: Indices = field(init=False)
    state: SelectionState = field(init=False)
    _adjusted: Optional[List[AdjustedRecord]] = field(default=None, init=False)
    _undo: List[List[int]] = field(default_factory=list, init=False)
    _redo: List[List[int]] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.idx = build_indices(self.records)
        self.state = SelectionState(active_ids=list(range(len(self.records))))

    @property
    def reference_year(self) -> int:
        if self.config.reference_year is not None:
            return self.config.reference_year
        if not self.idx.years_sorted:
            raise ValueError("Cannot pick a reference year: the dataset is empty")
        return self.idx.years_sorted[-1]

    def missing_cpi_years(self) -> List[int]:
        return check_coverage(self.cpi, list(self.idx.years_sorted) + [self.reference_year])

    # ---------------- Pipeline ----------------
    @property
    def adjusted(self) -> List[AdjustedRecord]:
        """Normalized + inflation-adjusted records, computed once for the full dataset."""
        if self._adjusted is None:
            missing = self.missing_cpi_years()
            if missing:
                raise MissingCpiYearError(missing)
            normalized = normalize_records(self.records)
            self._adjusted = adjust_records(normalized, self.cpi, self.reference_year)
        return self._adjusted

    def analyze(self) -> AnalysisResult:
        """Aggregate the current selection into the four ranked tables."""
        adjusted = self.adjusted
        selected = [adjusted[i] for i in self.state.active_ids]
        frequency = build_frequency_table((r.raw for r in selected), total=len(self.records))
        harm = harm_table(selected, frequency)
        damage = damage_table(selected, frequency)
        logger.info("Aggregated {} of {} records into {} event types",
                    len(selected), len(self.records), len(harm))
        return AnalysisResult(
            harm=harm,
            damage=damage,
            harm_per_record=harm.per_record(self.config.min_records),
            damage_per_record=damage.per_record(self.config.min_records),
            events=join_tables(harm, damage),
            reference_year=self.reference_year,
            records_in_scope=len(selected),
            total_records=len(self.records),
            corrected_records=sum(1 for r in selected if r.normalized.corrected),
        )

    # ---------------- History (Stacks) ----------------
    def _push_history(self) -> None:
        self._undo.append(self.state.active_ids[:])
        self._redo.clear()

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self.state.active_ids[:])
        self.state.active_ids = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self.state.active_ids[:])
        self.state.active_ids = self._redo.pop()
        return True

    # ---------------- Filters ----------------
    def reset(self) -> None:
        """Reset selection to all records."""
        self._push_history()
        self.state = SelectionState(active_ids=list(range(len(self.records))))

    def filter_state(self, state: str) -> None:
        self._push_history()
        ids = self.idx.ids_for("state", state)
        self.state.active_ids = intersect_sorted(self.state.active_ids, ids)

    def filter_type(self, event_type: str) -> None:
        """Keep one event type label (exact match, labels are not normalized)."""
        self._push_history()
        ids = self.idx.ids_for("type", event_type)
        self.state.active_ids = intersect_sorted(self.state.active_ids, ids)

    def filter_year_range(self, y1: int, y2: int) -> None:
        self._push_history()
        ids = self.idx.years_between(y1, y2)
        self.state.active_ids = intersect_sorted(self.state.active_ids, ids)

    def counts_by(self, field_name: str) -> Dict[str, int]:
        """Record counts per state or per event type in the current selection."""
        attrs = {"state": "state", "type": "event_type"}
        if field_name not in attrs:
            raise ValueError("field must be: state | type")
        attr = attrs[field_name]
        # one pass over the selection, first-seen order
        return dict(Counter(getattr(self.records[i], attr) for i in self.state.active_ids))
