"""
Pipeline — raw exports → cleaned tables → result tables → workbook.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from fitpanel.analytics.aggregator import Aggregator, write_results
from fitpanel.config import MANDATORY_TABLE, PROCESSED_FOLDER, RAW_FOLDER, TABLE_SPECS
from fitpanel.data.derive import derive_metrics
from fitpanel.data.loader import TableLoader, discover_raw_files
from fitpanel.data.schemas import DropReport
from fitpanel.data.store import CleanedStore
from fitpanel.data.validate import Validator
from fitpanel.errors import MissingTable


def clean_all(
    store: CleanedStore,
    raw_folder: Path = RAW_FOLDER,
    loader: TableLoader | None = None,
    validator: Validator | None = None,
) -> dict[str, DropReport]:
    """Load, validate and derive every known table into ``store``.

    Absent optional tables are reported and skipped. Raises MissingTable when
    the daily activity export cannot be found.
    """
    loader = loader or TableLoader()
    validator = validator or Validator()

    files = discover_raw_files(raw_folder, tuple(loader.specs.values()))
    if MANDATORY_TABLE not in files:
        raise MissingTable(MANDATORY_TABLE, f"no raw file matching it in {raw_folder}")

    reports: dict[str, DropReport] = {}
    specs = list(loader.specs.values())
    n = len(specs)
    for i, spec in enumerate(specs, 1):
        raw = loader.load(spec.name, files.get(spec.name))
        if raw is None:
            report = DropReport(table=spec.name, present=False)
            store.discard(spec.name)
        else:
            cleaned, report = validator.validate(spec, raw)
            store.put(spec.name, derive_metrics(spec, cleaned))
        reports[spec.name] = report
        print(f"  [{i}/{n}] {report.summary_line()}")

    return reports


def check_cleaned(store: CleanedStore, validator: Validator | None = None) -> None:
    """Raise ValidationViolation if a cleaned table read back from disk breaks its contract."""
    validator = validator or Validator()
    for name in store.names():
        if name in store.specs:
            validator.check(store.specs[name], store.get(name))


def analyze(
    store: CleanedStore,
    processed_folder: Path | None = PROCESSED_FOLDER,
    aggregator: Aggregator | None = None,
) -> dict[str, pd.DataFrame]:
    """Compute every result table; write them as CSV when a folder is given."""
    aggregator = aggregator or Aggregator()
    results = aggregator.run(store)
    if processed_folder is not None:
        write_results(results, processed_folder)
    return results


def drop_report_frame(reports: dict[str, DropReport]) -> pd.DataFrame:
    """Drop accounting as one row per table, in catalogue order."""
    order = {spec.name: i for i, spec in enumerate(TABLE_SPECS)}
    rows = sorted((r.as_dict() for r in reports.values()), key=lambda r: order.get(r["table"], len(order)))
    return pd.DataFrame(rows, columns=list(DropReport(table="").as_dict()))
