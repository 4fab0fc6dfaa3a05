"""
Validator — per-table physical bounds, parse-failure and duplicate removal.
"""
from __future__ import annotations

import pandas as pd

from fitpanel.config import DEFAULT_RULES
from fitpanel.data.derive import total_minutes
from fitpanel.data.loader import PARSE_ERROR_COL
from fitpanel.data.schemas import DropReport, TableFamily, TableSpec, ValidationRules
from fitpanel.errors import ValidationViolation


class Validator:
    """Drops rows that cannot be real measurements and counts every drop."""

    def __init__(self, rules: ValidationRules = DEFAULT_RULES) -> None:
        self.rules = rules

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def violations(self, spec: TableSpec, df: pd.DataFrame) -> list[tuple[str, pd.Series]]:
        """Named row masks for every bound the table's family must respect.

        Comparisons are written so that a missing value also violates the bound.
        """
        r = self.rules
        family = spec.family
        checks: list[tuple[str, pd.Series]] = []

        if family in (TableFamily.DAILY_ACTIVITY, TableFamily.DAILY_INTENSITIES):
            checks.append((
                f"total_minutes > {r.max_daily_minutes}",
                ~(total_minutes(df) <= r.max_daily_minutes),
            ))
        elif family == TableFamily.SLEEP:
            checks.append((
                "total_minutes_asleep <= 0",
                ~(df["total_minutes_asleep"] > r.min_sleep_minutes),
            ))
            checks.append((
                "total_time_in_bed <= 0",
                ~(df["total_time_in_bed"] > r.min_sleep_minutes),
            ))
        elif family == TableFamily.HEART_RATE:
            checks.append((
                f"bpm outside ({r.min_heart_rate:g}, {r.max_heart_rate:g})",
                ~((df["value"] > r.min_heart_rate) & (df["value"] < r.max_heart_rate)),
            ))
        elif family == TableFamily.WEIGHT:
            checks.append((
                "weight_kg <= 0",
                ~(df["weight_kg"] > r.min_weight_kg),
            ))
        elif family == TableFamily.HOURLY_CALORIES:
            checks.append(("calories missing", df["calories"].isna()))

        return [(name, mask.fillna(True).astype(bool)) for name, mask in checks]

    # ------------------------------------------------------------------
    # Cleaning
    # ------------------------------------------------------------------

    def validate(self, spec: TableSpec, df: pd.DataFrame) -> tuple[pd.DataFrame, DropReport]:
        """Drop parse failures, bound violations, exact duplicates, then key conflicts."""
        report = DropReport(table=spec.name, raw_rows=len(df))

        unparsed = df[spec.timestamp].isna() | df["id"].isna()
        if PARSE_ERROR_COL in df.columns:
            unparsed |= df[PARSE_ERROR_COL].astype(bool)
        unparsed = unparsed.astype(bool)
        report.parse_failures = int(unparsed.sum())
        df = df.loc[~unparsed].drop(columns=[PARSE_ERROR_COL], errors="ignore")

        bad = pd.Series(False, index=df.index)
        for _, mask in self.violations(spec, df):
            bad |= mask
        report.violations = int(bad.sum())
        df = df.loc[~bad]

        pre = len(df)
        df = df.drop_duplicates(keep="first")
        report.duplicates = pre - len(df)

        key = [c for c in spec.key_columns if c in df.columns]
        conflicts = df.duplicated(subset=key, keep="first")
        report.key_conflicts = int(conflicts.sum())
        df = df.loc[~conflicts].reset_index(drop=True)

        report.kept_rows = len(df)
        return df, report

    def check(self, spec: TableSpec, df: pd.DataFrame) -> None:
        """Raise ValidationViolation if a cleaned table breaks its contract."""
        if df.empty:
            return
        missing_ts = int(df[spec.timestamp].isna().sum())
        if missing_ts:
            raise ValidationViolation(spec.name, f"{spec.timestamp} not parsed", missing_ts)
        for rule, mask in self.violations(spec, df):
            count = int(mask.sum())
            if count:
                raise ValidationViolation(spec.name, rule, count)
        key = [c for c in spec.key_columns if c in df.columns]
        dupes = int(df.duplicated(subset=key).sum())
        if dupes:
            raise ValidationViolation(spec.name, f"duplicate key {tuple(key)}", dupes)
