"""
Inflation adjustment (CPI)
==========================

Damage amounts from 1950 and from 2011 are not comparable until they are
expressed in the same year's dollars. With a CPI table (year -> index) and
a reference year R:

    factor(year)    = CPI[year] / CPI[R]
    adjusted_amount = round(amount / factor(year), 2)

Property and crop damage are adjusted separately; the adjusted total is the
sum of the two rounded values, so total == property + crop holds exactly to
the cent in every AdjustedRecord.

A CPI table with a gap is an error. Falling back to factor 1.0 would mix
nominal and real dollars without anybody noticing.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional, Sequence
import pandas as pd
from loguru import logger
from .models import AdjustedRecord, NormalizedRecord

CpiTable = Mapping[int, float]

class MissingCpiYearError(KeyError):
    """Raised when the CPI table does not cover a year that is needed."""

    def __init__(self, years: Sequence[int]):
        self.years = sorted(set(years))
        super().__init__(f"CPI table has no entry for year(s): {self.years}")

def check_coverage(cpi: CpiTable, years: Iterable[int]) -> List[int]:
    """Return the years (sorted) that are missing from `cpi`."""
    return sorted({y for y in years if y not in cpi})

def inflation_factor(cpi: CpiTable, year: int, reference_year: int) -> float:
    missing = check_coverage(cpi, (year, reference_year))
    if missing:
        raise MissingCpiYearError(missing)
    return float(cpi[year]) / float(cpi[reference_year])

def adjust_amount(amount: float, factor: float) -> float:
    return round(amount / factor, 2)

def adjust_record(rec: NormalizedRecord, cpi: CpiTable, reference_year: int) -> AdjustedRecord:
    return _apply_factor(rec, inflation_factor(cpi, rec.year, reference_year))

def _apply_factor(rec: NormalizedRecord, factor: float) -> AdjustedRecord:
    prop = adjust_amount(rec.property_damage_dollars, factor)
    crop = adjust_amount(rec.crop_damage_dollars, factor)
    return AdjustedRecord(
        normalized=rec,
        property_damage=prop,
        crop_damage=crop,
        total_damage=round(prop + crop, 2),
        factor=factor,
    )

def adjust_records(
    records: Sequence[NormalizedRecord],
    cpi: CpiTable,
    reference_year: Optional[int] = None,
) -> List[AdjustedRecord]:
    """Adjust every record to `reference_year` dollars.

    reference_year defaults to the latest year in `records`. Coverage is
    checked up front, so either every record is adjusted or none is.
    """
    years = {r.year for r in records}
    if reference_year is None:
        if not years:
            return []
        reference_year = max(years)
    missing = check_coverage(cpi, years | {reference_year})
    if missing:
        raise MissingCpiYearError(missing)

    factors: Dict[int, float] = {y: inflation_factor(cpi, y, reference_year) for y in years}
    out = [_apply_factor(r, factors[r.year]) for r in records]
    logger.info("Adjusted {} records to {} dollars ({} distinct years)",
                len(out), reference_year, len(years))
    return out

# -----------------------------
# Loading a CPI table from disk
# -----------------------------

def _norm(s: str) -> str:
    return "".join(ch for ch in str(s).lower() if ch.isalnum())

def cpi_from_frame(df: pd.DataFrame) -> Dict[int, float]:
    """
    Build a year -> index mapping from either:
    - an annual table with a year column and a cpi/index/value column, or
    - a FRED monthly export (DATE or observation_date, CPIAUCSL), which is
      averaged per calendar year.
    """
    cols = {_norm(c): c for c in df.columns}
    value_col = next((cols[k] for k in ("cpiaucsl", "cpi", "index", "value") if k in cols), None)
    if value_col is None:
        raise KeyError(f"No CPI value column found. Available={list(df.columns)}")

    if "year" in cols:
        years = pd.to_numeric(df[cols["year"]], errors="raise").astype(int)
    else:
        date_col = next((cols[k] for k in ("date", "observationdate") if k in cols), None)
        if date_col is None:
            raise KeyError(f"No year or date column found. Available={list(df.columns)}")
        years = pd.to_datetime(df[date_col], errors="raise").dt.year

    values = pd.to_numeric(df[value_col], errors="coerce")
    annual = values.groupby(years).mean().dropna()
    return {int(y): float(v) for y, v in annual.items()}

def load_cpi_table(path: str) -> Dict[int, float]:
    if path.lower().endswith((".xlsx", ".xlsm")):
        df = pd.read_excel(path, engine="openpyxl")
    else:
        df = pd.read_csv(path)
    cpi = cpi_from_frame(df)
    if cpi:
        logger.info("Loaded CPI for {} years ({}-{}) from {}", len(cpi), min(cpi), max(cpi), path)
    return cpi
