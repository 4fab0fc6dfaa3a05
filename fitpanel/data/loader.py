"""
Raw CSV discovery and per-table loading: column names, strings, types, instants.
"""
from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from fitpanel.config import DATETIME_FORMATS, RAW_FOLDER, TABLE_SPECS
from fitpanel.data.datetimes import normalize_datetimes
from fitpanel.data.normalize import (
    coerce_boolean,
    coerce_id,
    coerce_numeric,
    empty_frame,
    normalize_columns,
    row_flags,
    trim_strings,
)
from fitpanel.data.schemas import TableSpec
from fitpanel.errors import ParseFailure

# Row-level marker for values that failed coercion; consumed by the Validator
PARSE_ERROR_COL = "_parse_error"


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------

def discover_raw_files(
    folder: Path = RAW_FOLDER,
    specs: tuple[TableSpec, ...] = TABLE_SPECS,
) -> dict[str, Path]:
    """Map table name → first CSV whose filename contains the keyword.

    Candidates are ordered by filename, then by path relative to ``folder``,
    so when several export folders hold the same file the earliest path
    wins on every machine. Matching is case-insensitive; tables without a
    match are simply absent.
    """
    folder = Path(folder)
    if not folder.exists():
        return {}

    files = sorted(
        folder.rglob("*.csv"),
        key=lambda p: (p.name.lower(), p.relative_to(folder).as_posix().lower()),
    )
    found: dict[str, Path] = {}
    for spec in specs:
        keyword = spec.keyword.lower()
        match = next((f for f in files if keyword in f.name.lower()), None)
        if match is not None:
            found[spec.name] = match
    return found


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def read_raw_csv(path: Path) -> pd.DataFrame:
    """Read every column as text so ids keep their exact digits."""
    return pd.read_csv(path, dtype=str, skipinitialspace=True)


class TableLoader:
    """Turns one raw export into a typed frame with canonical column names.

    Rows whose id, timestamp, numeric or boolean cells fail to parse are kept
    but flagged in ``PARSE_ERROR_COL``; the Validator drops and counts them.
    """

    def __init__(
        self,
        specs: tuple[TableSpec, ...] = TABLE_SPECS,
        formats: tuple[str, ...] = DATETIME_FORMATS,
    ) -> None:
        self.specs = {spec.name: spec for spec in specs}
        self.formats = formats

    def prepare(self, spec: TableSpec, raw: pd.DataFrame) -> pd.DataFrame:
        """Normalise and coerce an already-read raw frame."""
        df = normalize_columns(raw)
        if spec.renames:
            df = df.rename(columns=dict(spec.renames))

        for required in ("id", spec.timestamp):
            if required not in df.columns:
                raise ParseFailure(
                    required,
                    f"{spec.name}: column '{required}' not found in {list(df.columns)}",
                )

        df = trim_strings(df)
        failed = row_flags(df.index)

        df["id"] = coerce_id(df["id"])
        failed |= df["id"].isna().to_numpy()

        df[spec.timestamp] = normalize_datetimes(df[spec.timestamp], self.formats)
        failed |= df[spec.timestamp].isna().to_numpy()

        # Expected columns missing from this export still appear in the output
        for col in spec.numeric:
            if col not in df.columns:
                df[col] = np.nan
        for col in spec.booleans:
            if col not in df.columns:
                df[col] = pd.Series(pd.NA, index=df.index, dtype="boolean")
        for col in spec.strings:
            if col not in df.columns:
                df[col] = pd.Series(pd.NA, index=df.index, dtype="string")

        for col in spec.numeric_columns(df.columns):
            df[col], bad = coerce_numeric(df[col])
            failed |= bad
        for col in spec.booleans:
            df[col], bad = coerce_boolean(df[col])
            failed |= bad
        for col in spec.strings:
            df[col] = coerce_id(df[col])

        df[PARSE_ERROR_COL] = failed
        return df

    def load(self, name: str, path: Path | None) -> pd.DataFrame | None:
        """Read and prepare one table. Returns None when the file is absent.

        An unreadable file degrades to an empty frame instead of aborting.
        """
        spec = self.specs[name]
        if path is None:
            return None
        try:
            raw = read_raw_csv(Path(path))
            return self.prepare(spec, raw)
        except (OSError, ValueError) as exc:
            print(f"  Warning: {spec.name} unreadable ({Path(path).name}): {exc}")
            return self.empty(spec)

    @staticmethod
    def empty(spec: TableSpec) -> pd.DataFrame:
        return empty_frame(spec, {PARSE_ERROR_COL: "bool"})
