"""
Tests for DOCX report generation.
"""

import tempfile

import pytest

from stormrank.engine import StormEngine
from stormrank.report import LIMITATIONS, ReportConfig, generate_docx_report

docx = pytest.importorskip("docx")
pytest.importorskip("matplotlib")


class TestGenerateDocxReport:

    @pytest.fixture
    def engine(self, make_raw):
        records = []
        for et, n in (("TORNADO", 6), ("FLASH FLOOD", 5), ("HEAT", 2)):
            for _ in range(n):
                records.append(make_raw(len(records), et, 2011, fatalities=1, injuries=2,
                                        prop=4, prop_unit="K", crop=1, crop_unit="K"))
        return StormEngine(records=records, cpi={2011: 224.9})

    def test_writes_docx(self, engine, tmp_path):
        out = tmp_path / "reports" / "storm.docx"
        cfg = ReportConfig(top_n=3, dataset_file="/data/repdata_StormData.csv.bz2",
                           command_log=["filter year 2011 2011"])
        path = generate_docx_report(engine.analyze(), str(out), config=cfg)
        assert path == str(out)
        assert out.exists()

        text = "\n".join(p.text for p in docx.Document(path).paragraphs)
        assert "repdata_StormData.csv.bz2" in text
        assert "2011 dollars" in text
        assert LIMITATIONS in text
        assert "filter year 2011 2011" in text
        # four ranked tables, one per section
        assert len(docx.Document(path).tables) == 4

    def test_empty_selection_rejected(self, engine, tmp_path):
        engine.filter_state("ZZ")
        with pytest.raises(ValueError):
            generate_docx_report(engine.analyze(), str(tmp_path / "x.docx"))

    def test_chart_files_removed_after_save(self, engine, tmp_path, monkeypatch):
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        monkeypatch.setattr(tempfile, "tempdir", str(scratch))
        out = tmp_path / "storm.docx"
        generate_docx_report(engine.analyze(), str(out))
        assert out.exists()
        assert list(scratch.iterdir()) == []
