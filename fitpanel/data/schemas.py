"""
Table catalogue types — raw dataset shapes, validation bounds, drop accounting.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TableFamily(str, Enum):
    DAILY_ACTIVITY = "daily_activity"
    DAILY_INTENSITIES = "daily_intensities"
    DAILY_CALORIES = "daily_calories"
    DAILY_STEPS = "daily_steps"
    SLEEP = "sleep"
    WEIGHT = "weight"
    HEART_RATE = "heart_rate"
    HOURLY_CALORIES = "hourly_calories"
    GENERIC = "generic"


@dataclass(frozen=True)
class TableSpec:
    """Shape of one of the 18 known raw datasets and its cleaned counterpart."""
    name: str                                   # canonical table name
    keyword: str                                # case-insensitive filename match
    timestamp: str                              # timestamp column after renames
    family: TableFamily = TableFamily.GENERIC
    renames: tuple[tuple[str, str], ...] = ()    # (raw, canonical) pairs
    numeric: tuple[str, ...] = ()
    numeric_prefixes: tuple[str, ...] = ()      # wide tables: calories00 .. calories59
    booleans: tuple[str, ...] = ()
    strings: tuple[str, ...] = ()               # opaque tokens besides id
    key: tuple[str, ...] = ()                   # defaults to (id, timestamp)
    mandatory: bool = False

    @property
    def key_columns(self) -> tuple[str, ...]:
        return self.key or ("id", self.timestamp)

    @property
    def filename(self) -> str:
        return f"{self.name}_cleaned.csv"

    def numeric_columns(self, columns) -> list[str]:
        """Numeric columns present in ``columns`` (explicit names + prefixed wide columns)."""
        cols = [c for c in self.numeric if c in columns]
        for prefix in self.numeric_prefixes:
            cols.extend(
                c for c in columns
                if c.startswith(prefix) and c[len(prefix):].isdigit() and c not in cols
            )
        return cols


@dataclass(frozen=True)
class ValidationRules:
    """Physical validity bounds; a row outside them is dropped."""
    max_daily_minutes: int = 1440
    min_heart_rate: float = 0          # exclusive
    max_heart_rate: float = 220        # exclusive
    min_sleep_minutes: float = 0       # exclusive
    min_weight_kg: float = 0           # exclusive


@dataclass
class DropReport:
    """Row accounting for one table through load + validation."""
    table: str
    raw_rows: int = 0
    parse_failures: int = 0
    violations: int = 0
    duplicates: int = 0
    key_conflicts: int = 0
    kept_rows: int = 0
    present: bool = True

    @property
    def dropped(self) -> int:
        return self.parse_failures + self.violations + self.duplicates + self.key_conflicts

    def summary_line(self) -> str:
        if not self.present:
            return f"{self.table}: not found — treated as empty"
        return (
            f"{self.table}: {self.raw_rows:,} rows → {self.kept_rows:,} kept "
            f"(parse -{self.parse_failures:,}, bounds -{self.violations:,}, "
            f"dup -{self.duplicates:,}, key -{self.key_conflicts:,})"
        )

    def as_dict(self) -> dict:
        return {
            "table": self.table,
            "present": self.present,
            "raw_rows": self.raw_rows,
            "parse_failures": self.parse_failures,
            "violations": self.violations,
            "duplicates": self.duplicates,
            "key_conflicts": self.key_conflicts,
            "kept_rows": self.kept_rows,
        }
