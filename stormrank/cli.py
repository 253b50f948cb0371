"""
stormrank Command Line Interface (CLI)
======================================

Run it like:

    python -m stormrank.cli --data repdata_StormData.csv.bz2 --cpi CPIAUCSL.csv

Without --summary an interactive REPL starts; commands filter the working
set of records and print ranked harm/damage tables. With --summary N the
top N rows of all four tables are printed and the program exits.

The CLI never modifies the input files.
"""

from __future__ import annotations
import argparse, shlex
from typing import List, Optional, Sequence
from .aggregator import AggregateRow
from .cpi import load_cpi_table
from .engine import AnalysisConfig, StormEngine
from .loader import load_storm_data
from .log import setup_logging
from .normalizer import unrecognised_units

HELP_TEXT = """
stormrank commands (grouped)
----------------------------

1) View / Inspect
   help
   stats
   values <state|type> [prefix]     (example: values type TSTM)

2) Filtering
   filter state "<code>"            (example: filter state TX)
   filter type "<Event Type>"       (example: filter type "FLASH FLOOD")
   filter year <y1> <y2>            (example: filter year 1993 2011)
   reset

3) Ranked tables (current selection)
   harm [n] [metric]                (metrics: fatalities, injuries, combined_harm)
   damage [n] [metric]              (metrics: property_damage, crop_damage, total_damage)
   per-record <harm|damage> [n] [metric]
                                    (example: per-record harm 10 fatalities_per_record)

4) Export / Report
   export <harm|damage|harm-per-record|damage-per-record> <csv|json> "<path>"
   report "<out.docx>"

5) History
   undo
   redo

6) Exit
   quit
"""

def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the stormrank CLI.

    1) Load dataset and CPI table
    2) Build the engine
    3) Print a summary, or start an interactive REPL
    """
    ap = argparse.ArgumentParser(prog="stormrank")
    ap.add_argument("--data", required=True, help="Path to the Storm Data CSV (.csv, .csv.bz2, .xlsx)")
    ap.add_argument("--cpi", required=True, help="Path to a CPI table (annual year/cpi or FRED monthly CPIAUCSL)")
    ap.add_argument("--reference-year", type=int, default=None,
                    help="Express damage in this year's dollars (default: last year in the data)")
    ap.add_argument("--min-records", type=int, default=AnalysisConfig.min_records,
                    help="Smallest record count kept in per-record views")
    ap.add_argument("--top", type=int, default=AnalysisConfig.top_n, help="Rows per listing")
    ap.add_argument("--summary", action="store_true", help="Print the four ranked tables and exit")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args(argv)

    setup_logging(args.log_level)
    config = AnalysisConfig(reference_year=args.reference_year,
                            min_records=args.min_records, top_n=args.top)

    print("Loading dataset...")
    records = load_storm_data(args.data)
    cpi = load_cpi_table(args.cpi)
    engine = StormEngine(records=records, cpi=cpi, config=config, dataset_path=args.data)

    if args.summary:
        print_summary(engine)
        return

    print(f"Loaded {len(records)} records. Type 'help' for commands.")
    while True:
        try:
            line = input("stormrank> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        if stripped.split()[0].lower() in ("filter", "reset", "undo", "redo"):
            engine.command_log.append(stripped)
        try:
            handle(engine, stripped)
        except Exception as e:
            print(f"Error: {e}")

def print_summary(engine: StormEngine) -> None:
    result = engine.analyze()
    n = engine.config.top_n
    print(f"Damage in {result.reference_year} dollars; {result.records_in_scope} records.")
    for table in (result.harm, result.harm_per_record, result.damage, result.damage_per_record):
        print(f"\nTop {n} event types by {table.headline} ({table.name}):")
        _print_rows(table.top(n), table.metrics)

def handle(engine: StormEngine, line: str) -> None:
    """Handle one CLI command line."""
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP_TEXT)
        return

    if cmd == "stats":
        print(f"Current selection: {len(engine.state.active_ids)} of {len(engine.records)} records")
        print(f"States: {len(engine.idx.by_state)} | Event types: {len(engine.idx.by_type)} | "
              f"Years: {engine.idx.years_sorted[0] if engine.idx.years_sorted else '-'}"
              f"-{engine.idx.years_sorted[-1] if engine.idx.years_sorted else '-'}")
        print(f"Reference year: {engine.reference_year}")
        dropped = unrecognised_units(engine.records[i] for i in engine.state.active_ids)
        if dropped:
            shown = ", ".join(f"{k!r}={v}" for k, v in sorted(dropped.items(), key=lambda kv: -kv[1]))
            print(f"Damage amounts zeroed by unrecognised unit codes: {shown}")
        return

    if cmd == "reset":
        engine.reset()
        print("Selection reset.")
        return

    if cmd == "undo":
        print("Undone." if engine.undo() else "Nothing to undo.")
        return

    if cmd == "redo":
        print("Redone." if engine.redo() else "Nothing to redo.")
        return

    if cmd == "values":
        if len(parts) < 2:
            raise ValueError("usage: values <state|type> [prefix]")
        counts = engine.counts_by(parts[1].lower())
        prefix = parts[2].lower() if len(parts) >= 3 else ""
        vals = sorted(v for v in counts if v.lower().startswith(prefix))
        for v in vals[:50]:
            print(f"{v} ({counts[v]})")
        if len(vals) > 50:
            print(f"... ({len(vals)} total, showing 50)")
        return

    if cmd == "filter":
        if len(parts) < 3:
            raise ValueError("usage: filter <state|type|year> ...")
        kind = parts[1].lower()
        if kind == "state":
            engine.filter_state(parts[2]); print(f"Filtered state={parts[2]}. Size={len(engine.state.active_ids)}"); return
        if kind == "type":
            engine.filter_type(parts[2]); print(f"Filtered type={parts[2]}. Size={len(engine.state.active_ids)}"); return
        if kind == "year":
            if len(parts) < 4:
                raise ValueError("usage: filter year <y1> <y2>")
            y1, y2 = int(parts[2]), int(parts[3]); engine.filter_year_range(y1, y2); print(f"Filtered years {y1}-{y2}. Size={len(engine.state.active_ids)}"); return
        raise ValueError("filter kind must be: state, type, year")

    if cmd in ("harm", "damage", "per-record"):
        if cmd == "per-record":
            if len(parts) < 2 or parts[1].lower() not in ("harm", "damage"):
                raise ValueError("usage: per-record <harm|damage> [n] [metric]")
            name = parts[1].lower() + "-per-record"
            rest = parts[2:]
        else:
            name, rest = cmd, parts[1:]
        n = int(rest[0]) if rest else engine.config.top_n
        metric = rest[1] if len(rest) >= 2 else None
        table = engine.analyze().table(name)
        out = table.top(n, metric)
        print(f"Top {len(out)} by {metric or table.headline} ({table.name}):")
        _print_rows(out, table.metrics)
        return

    if cmd == "export":
        # export <table> <csv|json> "<path>"
        if len(parts) < 4:
            print('Usage: export harm csv "harm.csv"  OR  export damage-per-record json "out.json"')
            return
        table = engine.analyze().table(parts[1])
        fmt, out_path = parts[2].lower(), parts[3]
        if fmt == "csv":
            table.export_csv(out_path)
        elif fmt == "json":
            table.export_json(out_path)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {table.name} ({len(table)} rows) to {out_path}")
        return

    if cmd == "report":
        from .report import ReportConfig, generate_docx_report
        if len(parts) < 2:
            raise ValueError('usage: report "<out.docx>"')
        cfg = ReportConfig(top_n=engine.config.top_n, dataset_file=engine.dataset_path,
                           command_log=engine.command_log)
        path = generate_docx_report(engine.analyze(), parts[1], config=cfg)
        print(f"Report written to {path}")
        return

    print("Unknown command. Type 'help'.")

def _print_rows(rows: List[AggregateRow], metrics: Sequence[str]) -> None:
    for r in rows:
        vals = " ".join(f"{m}={_fmt(r.metrics[m])} (#{r.ranks[m]})" for m in metrics)
        print(f"{r.event_type} | n={r.record_count} ({r.percent_of_total}%) | {vals}")

def _fmt(v: float) -> str:
    if float(v).is_integer():
        return f"{int(v):,}"
    return f"{v:,.2f}"

if __name__ == "__main__":
    main()
