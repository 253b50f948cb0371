"""
Shared fixtures for stormrank tests.
"""

from datetime import datetime

import pytest

from stormrank.models import RawRecord


def _raw(record_id, event_type, year=2000, fatalities=0, injuries=0,
         prop=0.0, prop_unit=None, crop=0.0, crop_unit=None, state="AL"):
    return RawRecord(
        record_id=record_id,
        begin_timestamp=datetime(year, 6, 1),
        state=state,
        event_type=event_type,
        fatalities=fatalities,
        injuries=injuries,
        property_damage_magnitude=prop,
        property_damage_unit=prop_unit,
        crop_damage_magnitude=crop,
        crop_damage_unit=crop_unit,
    )


@pytest.fixture
def make_raw():
    """Factory for RawRecord objects with sensible defaults."""
    return _raw


@pytest.fixture
def scenario_records():
    """The two-record TORNADO / FLOOD scenario."""
    return [
        _raw(0, "TORNADO", 2000, fatalities=5, injuries=50, prop=10, prop_unit="M"),
        _raw(1, "FLOOD", 2000, fatalities=1, injuries=2, prop=115, prop_unit="B"),
    ]


@pytest.fixture
def scenario_cpi():
    return {2000: 100.0, 2011: 150.0}


@pytest.fixture
def storm_csv(tmp_path):
    """A small Storm Data CSV in the NOAA column layout."""
    content = (
        "STATE__,BGN_DATE,BGN_TIME,STATE,EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP,REMARKS\n"
        '1,4/18/1950 0:00:00,0130,AL,TORNADO,0,15,25,K,0,,\n'
        '1,4/18/1950 0:00:00,0145,AL,TORNADO,0,0,2.5,K,0,,\n'
        '6,1/1/2006 0:00:00,0000,CA,FLOOD,0,0,115,B,32.5,M,"Napa river flood"\n'
        '48,11/30/2011 0:00:00,0800,TX,TSTM WIND,1,2,5,m,3,?,\n'
        '48,11/30/2011 0:00:00,0800,TX, TSTM WIND,0,1,,,,,\n'
    )
    path = tmp_path / "storm.csv"
    path.write_text(content, encoding="utf-8")
    return str(path)
