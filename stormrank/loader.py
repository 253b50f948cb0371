"""
Dataset loader (Storm Data table -> RawRecord list)
===================================================

This module reads the NOAA Storm Data export (CSV, optionally bz2/gzip
compressed, or an Excel sheet) and converts each row into a `RawRecord`.

Key ideas:
- Column names are matched loosely (case and punctuation are ignored), so
  both the NOAA names (BGN_DATE, EVTYPE, PROPDMGEXP...) and descriptive names
  (begin_date_time, event_type...) work.
- Blank numbers become 0: a missing damage magnitude means "no damage
  recorded", never "drop the row". Text that is not a number also becomes
  0, and the column's count of such cells is logged as a warning.
- Begin dates use one fixed format. A date that does not parse aborts the
  whole load, because skipping rows would silently change every cumulative
  sum downstream.
"""

from __future__ import annotations
from typing import List, Optional
import re
import pandas as pd
from loguru import logger
from .models import RawRecord

DATE_FORMAT = "%m/%d/%Y %H:%M:%S"

class RecordParseError(ValueError):
    """Raised when a row cannot be turned into a RawRecord."""

def _numeric(df: pd.DataFrame, col: str) -> pd.Series:
    """Column as floats; blanks become 0, unparseable text becomes 0 with a warning."""
    raw = df[col]
    values = pd.to_numeric(raw, errors="coerce")
    text = raw.astype(str).str.strip()
    bad = values.isna() & raw.notna() & (text != "")
    if bad.any():
        pos = int(bad.to_numpy().nonzero()[0][0])
        logger.warning(
            "Column {}: {} non-numeric value(s) counted as 0 (first {!r} at row {})",
            col, int(bad.sum()), raw.iloc[pos], pos + 1,
        )
    return values.fillna(0.0)

def _to_unit(x) -> Optional[str]:
    if pd.isna(x): return None
    return str(x)

def _to_str(x) -> str:
    if pd.isna(x): return ""
    return str(x)

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(df: pd.DataFrame, *names: str) -> str:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={names}. Available={cols}")

def _optional_col(df: pd.DataFrame, *names: str) -> Optional[str]:
    try:
        return _col(df, *names)
    except KeyError:
        return None

def _parse_dates(values: pd.Series) -> pd.Series:
    parsed = pd.to_datetime(values, format=DATE_FORMAT, errors="coerce")
    bad = parsed.isna()
    if bad.any():
        pos = int(bad.to_numpy().nonzero()[0][0])
        raise RecordParseError(
            f"Row {pos + 1}: cannot parse begin date {values.iloc[pos]!r} "
            f"(expected format {DATE_FORMAT}); {int(bad.sum())} bad row(s) in total"
        )
    return parsed

def read_table(path: str) -> pd.DataFrame:
    """Read the raw table; compression is inferred from the file name."""
    if path.lower().endswith((".xlsx", ".xlsm")):
        return pd.read_excel(path, engine="openpyxl", dtype=object)
    return pd.read_csv(path, dtype=object, keep_default_na=True, encoding="utf-8")

def load_records_frame(df: pd.DataFrame) -> List[RawRecord]:
    """Convert an already-read table into RawRecord objects."""
    df = df.rename(columns={c: str(c).strip() for c in df.columns})

    date_col = _col(df, "BGN_DATE", "begin_date_time", "begin_timestamp", "Begin Date")
    state_col = _col(df, "STATE", "state")
    type_col = _col(df, "EVTYPE", "event_type", "Event Type")
    fat_col = _col(df, "FATALITIES", "fatalities")
    inj_col = _col(df, "INJURIES", "injuries")
    pd_col = _col(df, "PROPDMG", "property_damage_magnitude", "property_damage")
    pe_col = _col(df, "PROPDMGEXP", "property_damage_unit", "property_damage_exp")
    cd_col = _col(df, "CROPDMG", "crop_damage_magnitude", "crop_damage")
    ce_col = _col(df, "CROPDMGEXP", "crop_damage_unit", "crop_damage_exp")
    rem_col = _optional_col(df, "REMARKS", "remarks")

    stamps = _parse_dates(df[date_col])
    remarks = df[rem_col] if rem_col else [None] * len(df)

    records: List[RawRecord] = []
    rows = zip(stamps, df[state_col], df[type_col], _numeric(df, fat_col), _numeric(df, inj_col),
               _numeric(df, pd_col), df[pe_col], _numeric(df, cd_col), df[ce_col], remarks)
    for i, (ts, st, et, fat, inj, pmag, punit, cmag, cunit, rem) in enumerate(rows):
        records.append(RawRecord(
            record_id=i,
            begin_timestamp=ts.to_pydatetime(),
            state=_to_str(st),
            event_type=_to_str(et),
            fatalities=int(fat),
            injuries=int(inj),
            property_damage_magnitude=float(pmag),
            property_damage_unit=_to_unit(punit),
            crop_damage_magnitude=float(cmag),
            crop_damage_unit=_to_unit(cunit),
            remarks=_to_str(rem),
        ))
    return records

def load_storm_data(path: str) -> List[RawRecord]:
    """
    Load the Storm Data file at `path`.
    Raises RecordParseError on the first malformed begin date.
    """
    df = read_table(path)
    logger.debug("Read {} rows x {} columns from {}", len(df), len(df.columns), path)
    records = load_records_frame(df)
    logger.info("Loaded {} storm records from {}", len(records), path)
    return records
