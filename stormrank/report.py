from __future__ import annotations

"""
stormrank report generator
--------------------------
Writes a DOCX report from an `AnalysisResult`: one section per ranked table
(harm, harm per record, damage, damage per record), each with a bar chart
of the top N event types and the matching table.

python-docx and matplotlib are imported lazily, so the rest of the package
works without them until a report is requested.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple
import os
import tempfile

from .aggregator import RankedTable
from .engine import AnalysisResult

LIMITATIONS = (
    "Event type labels are used exactly as recorded. The source file holds many "
    "spelling variants of the same phenomenon (for example 'TSTM WIND' and "
    "'THUNDERSTORM WIND'); they are not merged, so some categories are split."
)

@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Storm Event Harm and Damage Report"
    subtitle: str = "Ranked by event type (NOAA Storm Data)"
    dataset_file: Optional[str] = None
    # rows per chart / table
    top_n: int = 10
    command_log: Optional[List[str]] = None

def _fmt(v: float) -> str:
    if float(v).is_integer():
        return f"{int(v):,}"
    return f"{v:,.2f}"

def generate_docx_report(
    result: AnalysisResult,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """Generate the DOCX report; returns `out_path`."""
    config = config or ReportConfig()

    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if result.records_in_scope == 0:
        raise ValueError("No records to report on (selection is empty).")

    # -----------------------------
    # 1) Charts
    # -----------------------------
    # charts live only until the document is saved
    with tempfile.TemporaryDirectory(prefix="stormrank_report_") as tmpdir:
        def _bar(table: RankedTable) -> Tuple[str, str]:
            rows = table.top(config.top_n)
            labels = [r.event_type for r in rows]
            values = np.array([float(r.metrics[table.headline]) for r in rows])
            title = f"Top {len(rows)} event types by {table.headline.replace('_', ' ')}"
            plt.figure(figsize=(8, 4.5))
            plt.barh(labels[::-1], values[::-1])
            plt.title(title)
            plt.xlabel(table.headline.replace("_", " "))
            plt.tight_layout()
            path = os.path.join(tmpdir, f"{table.name}.png")
            plt.savefig(path, dpi=150)
            plt.close()
            return title, path

        sections = [
            (result.harm, "Cumulative fatalities and injuries per event type."),
            (result.harm_per_record,
             "Fatalities and injuries per recorded event; rare event types are left out."),
            (result.damage,
             f"Cumulative property and crop damage in {result.reference_year} dollars."),
            (result.damage_per_record,
             f"Damage per recorded event in {result.reference_year} dollars; rare event types are left out."),
        ]
        charts = [_bar(t) if len(t) else None for t, _ in sections]

        # -----------------------------
        # 2) Document
        # -----------------------------
        doc = Document()
        style = doc.styles["Normal"]
        style.font.name = "Calibri"
        style.font.size = Pt(11)

        def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
            p = doc.add_paragraph()
            r = p.add_run(text)
            r.bold = bold
            r.italic = italic
            r.font.size = Pt(size)
            p.alignment = WD_ALIGN_PARAGRAPH.CENTER

        def _kv(key: str, value: str) -> None:
            p = doc.add_paragraph()
            r = p.add_run(f"{key}: ")
            r.bold = True
            p.add_run(value)

        _center_title(config.title, 22, bold=True)
        _center_title(config.subtitle, 12, italic=True)

        doc.add_paragraph("")
        if config.dataset_file:
            _kv("Dataset file", os.path.basename(config.dataset_file))
        _kv("Records in scope", f"{result.records_in_scope} of {result.total_records}")
        _kv("Event types in scope", str(len(result.harm)))
        _kv("Damage expressed in", f"{result.reference_year} dollars (CPI adjusted)")
        _kv("Records with corrected property damage", str(result.corrected_records))

        if config.command_log:
            doc.add_heading("Selection commands", level=1)
            for line in config.command_log:
                doc.add_paragraph(line, style="List Bullet")

        for (table, blurb), chart in zip(sections, charts):
            doc.add_heading(table.name.replace("_", " ").title(), level=1)
            doc.add_paragraph(blurb)
            if chart is None:
                doc.add_paragraph("No event type qualifies for this view.")
                continue
            title, path = chart
            doc.add_paragraph(title)
            doc.add_picture(path, width=Inches(6.5))

            rows = table.top(config.top_n)
            t = doc.add_table(rows=1, cols=3 + len(table.metrics))
            h = t.rows[0].cells
            h[0].text = "Event type"
            h[1].text = "Records"
            h[2].text = "% of all"
            for i, m in enumerate(table.metrics):
                h[3 + i].text = m.replace("_", " ")
            for r in rows:
                cells = t.add_row().cells
                cells[0].text = r.event_type
                cells[1].text = str(r.record_count)
                cells[2].text = f"{r.percent_of_total:.1f}"
                for i, m in enumerate(table.metrics):
                    cells[3 + i].text = f"{_fmt(r.metrics[m])} (#{r.ranks[m]})"

        doc.add_heading("Limitations", level=1)
        doc.add_paragraph(LIMITATIONS)
        doc.add_paragraph(
            "Damage amounts whose unit code is not K, M or B are counted as zero. "
            "One property damage entry of 115 B (billion) is treated as 115 M (million)."
        )

        from . import __version__
        doc.add_heading("Reproducibility footer", level=1)
        doc.add_paragraph(f"stormrank version: {__version__}")
        doc.add_paragraph(f"Report generated at: {datetime.now().isoformat(timespec='seconds')}")

        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        doc.save(out_path)
    return out_path
