"""
CleanedStore — the 18 canonical cleaned tables, in memory and optionally on disk.

Every ``put`` replaces a whole table. ``get`` never fails: an absent table
comes back as an empty frame with the table's canonical columns.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from fitpanel.config import CLEANED_DATETIME_FORMAT, TABLE_SPECS
from fitpanel.data.derive import DERIVED_COLUMNS
from fitpanel.data.normalize import empty_frame
from fitpanel.data.schemas import TableSpec
from fitpanel.errors import MissingTable


class CleanedStore:
    """Named cleaned tables with whole-table replace semantics."""

    def __init__(
        self,
        folder: Optional[Path] = None,
        specs: tuple[TableSpec, ...] = TABLE_SPECS,
    ) -> None:
        self.folder = Path(folder) if folder is not None else None
        self.specs = {spec.name: spec for spec in specs}
        self._tables: dict[str, pd.DataFrame] = {}

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def put(self, name: str, df: pd.DataFrame) -> None:
        """Replace table ``name``; with a folder, rewrite its CSV as well."""
        df = df.reset_index(drop=True).copy()
        self._tables[name] = df
        if self.folder is not None:
            self.folder.mkdir(parents=True, exist_ok=True)
            self.write_csv(df, self.path_for(name))

    def discard(self, name: str) -> None:
        """Forget table ``name`` and remove its CSV, so a stale file never outlives its source."""
        self._tables.pop(name, None)
        if self.folder is not None:
            self.path_for(name).unlink(missing_ok=True)

    @staticmethod
    def write_csv(df: pd.DataFrame, path: Path) -> Path:
        df.to_csv(path, index=False, date_format=CLEANED_DATETIME_FORMAT, lineterminator="\n")
        return path

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def path_for(self, name: str) -> Path:
        spec = self.specs.get(name)
        filename = spec.filename if spec else f"{name}_cleaned.csv"
        return self.folder / filename

    def _read_csv(self, name: str) -> pd.DataFrame | None:
        if self.folder is None:
            return None
        path = self.path_for(name)
        if not path.exists():
            return None
        return self.read_cleaned(self.specs[name], path) if name in self.specs else pd.read_csv(path)

    @staticmethod
    def read_cleaned(spec: TableSpec, path: Path) -> pd.DataFrame:
        """Read a cleaned CSV back with its canonical types."""
        dtypes = {"id": "string"}
        dtypes.update({col: "string" for col in spec.strings})
        df = pd.read_csv(path, dtype=dtypes)
        if spec.timestamp in df.columns:
            df[spec.timestamp] = pd.to_datetime(
                df[spec.timestamp], format=CLEANED_DATETIME_FORMAT, errors="coerce"
            ).dt.tz_localize("UTC")
        for col in spec.booleans:
            if col in df.columns:
                df[col] = df[col].astype("boolean")
        for col, dtype in DERIVED_COLUMNS.get(spec.family, {}).items():
            if dtype == "bool" and col in df.columns:
                df[col] = df[col].astype(bool)
        return df

    def get(self, name: str) -> pd.DataFrame:
        """Copy of table ``name``; empty frame with canonical columns when absent."""
        if name not in self._tables:
            loaded = self._read_csv(name)
            if loaded is not None:
                self._tables[name] = loaded
        if name in self._tables:
            return self._tables[name].copy()
        return self.empty(name)

    def empty(self, name: str) -> pd.DataFrame:
        spec = self.specs.get(name)
        if spec is None:
            return pd.DataFrame()
        return empty_frame(spec, DERIVED_COLUMNS.get(spec.family))

    def has(self, name: str) -> bool:
        """True when the table exists and holds at least one row."""
        if name in self._tables:
            return not self._tables[name].empty
        loaded = self._read_csv(name)
        if loaded is None:
            return False
        self._tables[name] = loaded
        return not loaded.empty

    def require(self, name: str) -> pd.DataFrame:
        """Like ``get`` but raises MissingTable when the table was never stored."""
        if name not in self._tables and self._read_csv(name) is None:
            raise MissingTable(name, "no cleaned data was produced or found")
        return self.get(name)

    def names(self) -> list[str]:
        """Tables currently present (in memory or on disk), in catalogue order."""
        present = set(self._tables)
        if self.folder is not None and self.folder.exists():
            present.update(n for n in self.specs if self.path_for(n).exists())
        ordered = [n for n in self.specs if n in present]
        return ordered + sorted(present - set(ordered))

    def load(self) -> "CleanedStore":
        """Read every cleaned CSV present in the folder into memory."""
        for name in self.names():
            self.get(name)
        return self
