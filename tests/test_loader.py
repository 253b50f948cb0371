"""
Tests for the Storm Data loader.
"""

from datetime import datetime

import pandas as pd
import pytest
from loguru import logger

from stormrank.loader import RecordParseError, load_records_frame, load_storm_data


class TestLoadStormData:
    """Test cases for loading the NOAA layout from disk."""

    @pytest.fixture
    def records(self, storm_csv):
        return load_storm_data(storm_csv)

    def test_row_count_and_ids(self, records):
        assert len(records) == 5
        assert [r.record_id for r in records] == [0, 1, 2, 3, 4]

    def test_dates_parsed(self, records):
        assert records[0].begin_timestamp == datetime(1950, 4, 18, 0, 0, 0)
        assert records[2].year == 2006

    def test_fields(self, records):
        r = records[2]
        assert r.state == "CA"
        assert r.event_type == "FLOOD"
        assert r.property_damage_magnitude == 115.0
        assert r.property_damage_unit == "B"
        assert r.crop_damage_magnitude == 32.5
        assert r.crop_damage_unit == "M"
        assert r.remarks == "Napa river flood"

    def test_event_type_kept_verbatim(self, records):
        assert records[3].event_type == "TSTM WIND"
        assert records[4].event_type == " TSTM WIND"

    def test_blank_damage_fields_become_zero(self, records):
        r = records[4]
        assert r.property_damage_magnitude == 0.0
        assert r.property_damage_unit is None
        assert r.crop_damage_magnitude == 0.0
        assert r.crop_damage_unit is None

    def test_bad_date_aborts_whole_load(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text(
            "BGN_DATE,STATE,EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP\n"
            "4/18/1950 0:00:00,AL,TORNADO,0,0,0,,0,\n"
            "not a date,AL,TORNADO,0,0,0,,0,\n",
            encoding="utf-8",
        )
        with pytest.raises(RecordParseError, match="Row 2"):
            load_storm_data(str(path))


class TestLoadRecordsFrame:
    """Column resolution on in-memory frames."""

    def test_descriptive_column_names(self):
        df = pd.DataFrame({
            "Begin Date Time": ["12/31/2011 23:59:59"],
            "State": ["TX"],
            "Event Type": ["HAIL"],
            "Fatalities": ["0"],
            "Injuries": ["3"],
            "Property Damage Magnitude": ["1.5"],
            "Property Damage Unit": ["k"],
            "Crop Damage Magnitude": [None],
            "Crop Damage Unit": [None],
        })
        (r,) = load_records_frame(df)
        assert r.begin_timestamp == datetime(2011, 12, 31, 23, 59, 59)
        assert r.injuries == 3
        assert r.property_damage_unit == "k"
        assert r.remarks == ""

    def test_missing_required_column(self):
        df = pd.DataFrame({"BGN_DATE": ["1/1/2000 0:00:00"], "STATE": ["AL"]})
        with pytest.raises(KeyError):
            load_records_frame(df)

    def test_non_numeric_text_counted_as_zero_with_warning(self):
        df = pd.DataFrame({
            "BGN_DATE": ["1/1/2000 0:00:00", "1/2/2000 0:00:00", "1/3/2000 0:00:00"],
            "STATE": ["AL", "AL", "AL"],
            "EVTYPE": ["FLOOD", "FLOOD", "FLOOD"],
            "FATALITIES": ["x", "2", None],
            "INJURIES": ["0", "0", "0"],
            "PROPDMG": ["12,5", "3", ""],
            "PROPDMGEXP": ["K", "K", None],
            "CROPDMG": ["0", "0", "0"],
            "CROPDMGEXP": [None, None, None],
        })
        messages = []
        sink_id = logger.add(messages.append, level="WARNING", format="{message}")
        try:
            records = load_records_frame(df)
        finally:
            logger.remove(sink_id)

        assert records[0].fatalities == 0
        assert records[1].fatalities == 2
        assert records[0].property_damage_magnitude == 0.0
        assert records[1].property_damage_magnitude == 3.0
        assert records[2].property_damage_magnitude == 0.0
        text = "".join(messages)
        assert "Column FATALITIES: 1 non-numeric value(s)" in text
        assert "Column PROPDMG: 1 non-numeric value(s)" in text
        assert "'12,5'" in text
        assert "INJURIES" not in text
