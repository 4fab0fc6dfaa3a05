#!/usr/bin/env python3
"""
FitPanel Analytics CLI — clean raw tracker exports, analyse them, build the workbook.

USAGE:
  python -m fitpanel.cli clean                        # raw → cleaned
  python -m fitpanel.cli analyze                      # cleaned → processed + workbook
  python -m fitpanel.cli run                          # both
  python -m fitpanel.cli run --raw ./exports --no-workbook
"""
from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

from fitpanel.config import (
    CLEANED_FOLDER,
    PROCESSED_FOLDER,
    RAW_FOLDER,
    REPORTS_FOLDER,
    WORKBOOK_NAME,
)
from fitpanel.data.store import CleanedStore
from fitpanel.errors import MissingTable, ValidationViolation
from fitpanel.pipeline import analyze, check_cleaned, clean_all, drop_report_frame


def _banner(title: str) -> None:
    print("\n" + "=" * 70)
    print(f"  FITPANEL ANALYTICS — {title}")
    print("=" * 70)
    print(f"  Started: {datetime.now():%Y-%m-%d %H:%M:%S}")


def cmd_clean(args) -> None:
    """Clean every raw export into the cleaned folder."""
    _banner("CLEANING")
    store = CleanedStore(Path(args.cleaned))
    print(f"\n  Raw folder: {args.raw}\n")
    reports = clean_all(store, Path(args.raw))

    processed = Path(args.processed)
    processed.mkdir(parents=True, exist_ok=True)
    drop_report_frame(reports).to_csv(processed / "cleaning_report.csv", index=False, lineterminator="\n")

    kept = sum(r.kept_rows for r in reports.values())
    dropped = sum(r.dropped for r in reports.values())
    print(f"\n  {kept:,} rows kept, {dropped:,} dropped")
    print(f"  Cleaned tables saved to: {args.cleaned}\n")


def cmd_analyze(args, store: CleanedStore | None = None) -> None:
    """Aggregate cleaned tables into result CSVs and the analysis workbook."""
    _banner("ANALYSIS")
    if store is None:
        store = CleanedStore(Path(args.cleaned)).load()
        check_cleaned(store)

    print(f"\n  Tables available: {len(store.names())}\n")
    results = analyze(store, Path(args.processed))
    print(f"\n  Result tables saved to: {args.processed}")

    if not args.no_workbook:
        from fitpanel.reports.analysis_workbook import generate_excel
        out = generate_excel(results, Path(args.reports) / WORKBOOK_NAME)
        print(f"  Workbook saved to: {out}")
    print("=" * 70 + "\n")


def cmd_run(args) -> None:
    """Clean then analyse, reusing the in-memory cleaned tables."""
    _banner("FULL RUN")
    store = CleanedStore(Path(args.cleaned))
    print(f"\n  Raw folder: {args.raw}\n")
    reports = clean_all(store, Path(args.raw))
    Path(args.processed).mkdir(parents=True, exist_ok=True)
    drop_report_frame(reports).to_csv(
        Path(args.processed) / "cleaning_report.csv", index=False, lineterminator="\n",
    )
    cmd_analyze(args, store=store)


def _add_folder_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--raw", default=str(RAW_FOLDER), help=f"Raw export folder (default {RAW_FOLDER})")
    p.add_argument("--cleaned", default=str(CLEANED_FOLDER), help="Cleaned table folder")
    p.add_argument("--processed", default=str(PROCESSED_FOLDER), help="Result table folder")
    p.add_argument("--reports", default=str(REPORTS_FOLDER), help="Workbook folder")
    p.add_argument("--no-workbook", action="store_true", help="Skip the Excel workbook")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="FitPanel Analytics — fitness-tracker panel cleaning and analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # clean subcommand
    clean_parser = subparsers.add_parser("clean", help="Clean raw exports")
    _add_folder_args(clean_parser)
    clean_parser.set_defaults(func=cmd_clean)

    # analyze subcommand
    analyze_parser = subparsers.add_parser("analyze", help="Aggregate cleaned tables")
    _add_folder_args(analyze_parser)
    analyze_parser.set_defaults(func=cmd_analyze)

    # run subcommand
    run_parser = subparsers.add_parser("run", help="Clean and analyse")
    _add_folder_args(run_parser)
    run_parser.set_defaults(func=cmd_run)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    try:
        args.func(args)
    except (MissingTable, ValidationViolation) as exc:
        print(f"\n  ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
