"""
Tests for CPI loading and inflation adjustment.
"""

import pandas as pd
import pytest

from stormrank.cpi import (
    MissingCpiYearError,
    adjust_amount,
    adjust_record,
    adjust_records,
    check_coverage,
    cpi_from_frame,
    inflation_factor,
    load_cpi_table,
)
from stormrank.normalizer import normalize_record, normalize_records


class TestInflationAdjuster:

    @pytest.fixture
    def cpi(self):
        return {1995: 152.4, 2000: 100.0, 2011: 150.0}

    def test_reference_year_factor_is_one(self, cpi):
        assert inflation_factor(cpi, 2011, 2011) == 1.0
        assert adjust_amount(12_345.67, inflation_factor(cpi, 2011, 2011)) == 12_345.67

    def test_factor(self, cpi):
        assert inflation_factor(cpi, 2000, 2011) == pytest.approx(100 / 150)

    def test_adjust_record(self, make_raw, cpi):
        n = normalize_record(make_raw(0, "FLOOD", 2000, prop=115, prop_unit="B", crop=1, crop_unit="K"))
        a = adjust_record(n, cpi, 2011)
        assert a.property_damage == 172_500_000.00
        assert a.crop_damage == 1_500.00
        assert a.total_damage == 172_501_500.00
        assert a.factor == pytest.approx(100 / 150)

    def test_total_is_sum_of_rounded_parts(self, make_raw, cpi):
        n = normalize_record(make_raw(0, "HAIL", 1995, prop=1.234, prop_unit="K", crop=5.678, crop_unit="K"))
        a = adjust_record(n, cpi, 2011)
        assert a.total_damage == round(a.property_damage + a.crop_damage, 2)

    def test_default_reference_year_is_latest(self, make_raw, cpi):
        recs = normalize_records([
            make_raw(0, "A", 2000, prop=1, prop_unit="M"),
            make_raw(1, "B", 2011, prop=1, prop_unit="M"),
        ])
        out = adjust_records(recs, cpi)
        assert out[1].property_damage == 1_000_000.0
        assert out[0].property_damage == 1_500_000.0

    def test_missing_year_raises_before_adjusting(self, make_raw, cpi):
        recs = normalize_records([
            make_raw(0, "A", 2000, prop=1, prop_unit="M"),
            make_raw(1, "B", 1993, prop=1, prop_unit="M"),
        ])
        with pytest.raises(MissingCpiYearError) as exc:
            adjust_records(recs, cpi, reference_year=2011)
        assert exc.value.years == [1993]
        assert isinstance(exc.value, KeyError)

    def test_missing_reference_year(self, make_raw, cpi):
        recs = normalize_records([make_raw(0, "A", 2000)])
        with pytest.raises(MissingCpiYearError):
            adjust_records(recs, cpi, reference_year=2012)

    def test_empty_input(self, cpi):
        assert adjust_records([], cpi) == []

    def test_check_coverage(self, cpi):
        assert check_coverage(cpi, [2011, 1990, 2000, 1990]) == [1990]


class TestCpiLoading:

    def test_fred_monthly_averaged_per_year(self, tmp_path):
        path = tmp_path / "CPIAUCSL.csv"
        path.write_text(
            "DATE,CPIAUCSL\n"
            "2010-01-01,217.0\n2010-02-01,219.0\n"
            "2011-01-01,221.0\n2011-02-01,223.0\n2011-03-01,225.0\n",
            encoding="utf-8",
        )
        cpi = load_cpi_table(str(path))
        assert cpi == {2010: 218.0, 2011: 223.0}

    def test_annual_table(self):
        df = pd.DataFrame({"Year": [1950, 1951], "CPI": [24.1, 26.0]})
        assert cpi_from_frame(df) == {1950: 24.1, 1951: 26.0}

    def test_no_value_column(self):
        with pytest.raises(KeyError):
            cpi_from_frame(pd.DataFrame({"year": [2000], "price": [1.0]}))
