"""
Aggregator (ranked tables per event type)
=========================================

Two passes over the adjusted records, each computing all of its metrics
together:

- harm:   fatalities, injuries, combined_harm
- damage: property_damage, crop_damage, total_damage  (reference-year $)

Groups are held in a plain dict keyed by event_type, so their order is the
order in which each label first appears. Every metric gets its own rank
(1 = largest) and ties fall back to that first-seen order.

`RankedTable.per_record()` derives the "harm per occurrence" views from a
finished table: rare event types (fewer than `min_records` rows) are
dropped, each total is divided by the record count and everything is
re-ranked. No second scan of the records is needed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import heapq
import json
import pandas as pd
from .frequency import FrequencyRow, as_mapping, build_frequency_table
from .models import AdjustedRecord, EventAggregate
from .ranking import assign_ranks, stable_sort

HARM_METRICS: Tuple[str, ...] = ("fatalities", "injuries", "combined_harm")
DAMAGE_METRICS: Tuple[str, ...] = ("property_damage", "crop_damage", "total_damage")
PER_RECORD_SUFFIX = "_per_record"
# groups with record_count <= 4 are too rare for per-record ratios
DEFAULT_MIN_RECORDS = 5

@dataclass(frozen=True)
class AggregateRow:
    """One event type's line in a ranked table."""
    event_type: str
    record_count: int
    percent_of_total: float
    metrics: Dict[str, float] = field(default_factory=dict)
    ranks: Dict[str, int] = field(default_factory=dict)

    def value(self, metric: str) -> float:
        return self.metrics[metric]

    def rank(self, metric: str) -> int:
        return self.ranks[metric]

    def as_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "event_type": self.event_type,
            "record_count": self.record_count,
            "percent_of_total": self.percent_of_total,
        }
        for m, v in self.metrics.items():
            out[m] = v
            out[f"{m}_rank"] = self.ranks[m]
        return out

@dataclass
class RankedTable:
    """Rows in first-seen group order, plus the names of their metrics.

    The last metric is the headline one, used when no metric is named
    (combined_harm for harm tables, total_damage for damage tables).
    """
    name: str
    metrics: Tuple[str, ...]
    rows: List[AggregateRow]

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def headline(self) -> str:
        return self.metrics[-1]

    def _metric(self, metric: Optional[str]) -> str:
        if metric is None:
            return self.headline
        m = metric.lower().strip()
        if m not in self.metrics:
            raise ValueError(f"Unknown metric {metric!r} for {self.name}; choose from {list(self.metrics)}")
        return m

    def row(self, event_type: str) -> AggregateRow:
        for r in self.rows:
            if r.event_type == event_type:
                return r
        raise KeyError(event_type)

    def sort_by(self, metric: Optional[str] = None, descending: bool = True) -> List[AggregateRow]:
        m = self._metric(metric)
        return stable_sort(self.rows, key=lambda r: r.metrics[m], descending=descending)

    def top(self, n: int, metric: Optional[str] = None) -> List[AggregateRow]:
        """Largest n rows by metric; ties resolved exactly like the ranks."""
        m = self._metric(metric)
        # nlargest is documented as sorted(..., reverse=True)[:n], which is stable
        return heapq.nlargest(n, self.rows, key=lambda r: r.metrics[m])

    def per_record(self, min_records: int = DEFAULT_MIN_RECORDS) -> "RankedTable":
        """Per-occurrence view: metric / record_count, rare groups removed."""
        kept = [r for r in self.rows if r.record_count >= min_records]
        metrics = tuple(m + PER_RECORD_SUFFIX for m in self.metrics)
        values = {
            r.event_type: {m + PER_RECORD_SUFFIX: round(r.metrics[m] / r.record_count, 2) for m in self.metrics}
            for r in kept
        }
        freq = {r.event_type: (r.record_count, r.percent_of_total) for r in kept}
        return RankedTable(
            name=f"{self.name}{PER_RECORD_SUFFIX}",
            metrics=metrics,
            rows=_ranked_rows(values, freq, metrics),
        )

    def _columns(self) -> List[str]:
        cols = ["event_type", "record_count", "percent_of_total"]
        for m in self.metrics:
            cols += [m, f"{m}_rank"]
        return cols

    def to_frame(self, rows: Optional[Sequence[AggregateRow]] = None) -> pd.DataFrame:
        rows = self.rows if rows is None else rows
        return pd.DataFrame([r.as_dict() for r in rows], columns=self._columns())

    def export_csv(self, path: str, metric: Optional[str] = None) -> None:
        """Write the table sorted by `metric` (headline metric by default)."""
        self.to_frame(self.sort_by(metric)).to_csv(path, index=False)

    def export_json(self, path: str, metric: Optional[str] = None) -> None:
        payload = [r.as_dict() for r in self.sort_by(metric)]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

def _ranked_rows(
    values: Mapping[str, Mapping[str, float]],
    freq: Mapping[str, Tuple[int, float]],
    metrics: Sequence[str],
) -> List[AggregateRow]:
    labels = list(values)
    ranks = {m: assign_ranks(labels, [values[et][m] for et in labels]) for m in metrics}
    return [
        AggregateRow(
            event_type=et,
            record_count=freq[et][0],
            percent_of_total=freq[et][1],
            metrics=dict(values[et]),
            ranks={m: ranks[m][et] for m in metrics},
        )
        for et in labels
    ]

def _frequency_lookup(records: Sequence[AdjustedRecord],
                      frequency: Optional[Iterable[FrequencyRow]]) -> Dict[str, Tuple[int, float]]:
    if frequency is None:
        frequency = build_frequency_table(r.raw for r in records)
    return {et: (f.record_count, f.percent_of_total) for et, f in as_mapping(frequency).items()}

def harm_table(records: Sequence[AdjustedRecord],
               frequency: Optional[Iterable[FrequencyRow]] = None) -> RankedTable:
    """Sum fatalities, injuries and combined harm per event type."""
    acc: Dict[str, List[int]] = {}
    for r in records:
        a = acc.get(r.event_type)
        if a is None:
            a = acc[r.event_type] = [0, 0, 0]
        a[0] += r.fatalities
        a[1] += r.injuries
        a[2] += r.combined_harm
    values = {et: dict(zip(HARM_METRICS, a)) for et, a in acc.items()}
    return RankedTable("harm", HARM_METRICS,
                       _ranked_rows(values, _frequency_lookup(records, frequency), HARM_METRICS))

def damage_table(records: Sequence[AdjustedRecord],
                 frequency: Optional[Iterable[FrequencyRow]] = None) -> RankedTable:
    """Sum adjusted property, crop and total damage per event type."""
    acc: Dict[str, List[float]] = {}
    for r in records:
        a = acc.get(r.event_type)
        if a is None:
            a = acc[r.event_type] = [0.0, 0.0, 0.0]
        a[0] += r.property_damage
        a[1] += r.crop_damage
        a[2] += r.total_damage
    values = {et: {m: round(v, 2) for m, v in zip(DAMAGE_METRICS, a)} for et, a in acc.items()}
    return RankedTable("damage", DAMAGE_METRICS,
                       _ranked_rows(values, _frequency_lookup(records, frequency), DAMAGE_METRICS))

def join_tables(harm: RankedTable, damage: RankedTable) -> List[EventAggregate]:
    """Merge the harm and damage rows of each event type (harm row order)."""
    by_type = {r.event_type: r for r in damage.rows}
    out: List[EventAggregate] = []
    for h in harm.rows:
        d = by_type[h.event_type]
        out.append(EventAggregate(
            event_type=h.event_type,
            record_count=h.record_count,
            percent_of_total=h.percent_of_total,
            fatalities=int(h.value("fatalities")),
            injuries=int(h.value("injuries")),
            combined_harm=int(h.value("combined_harm")),
            fatalities_rank=h.rank("fatalities"),
            injuries_rank=h.rank("injuries"),
            combined_harm_rank=h.rank("combined_harm"),
            property_damage=d.value("property_damage"),
            crop_damage=d.value("crop_damage"),
            total_damage=d.value("total_damage"),
            property_damage_rank=d.rank("property_damage"),
            crop_damage_rank=d.rank("crop_damage"),
            total_damage_rank=d.rank("total_damage"),
        ))
    return out
