"""
Derived columns per table family: minute totals, ratios, non-wear flags, sleep efficiency.

Distances are rounded with ``Series.round`` (NumPy round-half-to-even on the
stored binary value).
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from fitpanel.data.schemas import TableFamily, TableSpec

ACTIVE_MINUTES = ("very_active_minutes", "fairly_active_minutes", "lightly_active_minutes")
INTENSITY_MINUTES = ACTIVE_MINUTES + ("sedentary_minutes",)

DISTANCE_DECIMALS = 2


def total_minutes(df: pd.DataFrame) -> pd.Series:
    """Sum of the four intensity-minute fields; NaN when any of them is missing."""
    return df[list(INTENSITY_MINUTES)].sum(axis=1, min_count=len(INTENSITY_MINUTES))


def round_distances(df: pd.DataFrame, decimals: int = DISTANCE_DECIMALS) -> pd.DataFrame:
    for col in df.columns:
        if "distance" in col and pd.api.types.is_numeric_dtype(df[col]):
            df[col] = df[col].round(decimals)
    return df


def _minute_metrics(df: pd.DataFrame, steps_col: str | None) -> pd.DataFrame:
    df["total_minutes"] = total_minutes(df)
    df["total_active_minutes"] = df["total_minutes"] - df["sedentary_minutes"]
    df["active_ratio"] = df["total_active_minutes"] / df["total_minutes"].replace(0, np.nan)

    inactive = (df[list(ACTIVE_MINUTES)] == 0).all(axis=1)
    if steps_col is not None:
        inactive &= df[steps_col] == 0
    df["non_wear"] = inactive.astype(bool)
    return df


def daily_activity_metrics(df: pd.DataFrame) -> pd.DataFrame:
    return _minute_metrics(round_distances(df), steps_col="total_steps")


def daily_intensity_metrics(df: pd.DataFrame) -> pd.DataFrame:
    # No step column in this export; non-wear rests on the minute fields alone
    return _minute_metrics(round_distances(df), steps_col=None)


def daily_calorie_metrics(df: pd.DataFrame) -> pd.DataFrame:
    df["non_wear"] = (df["calories"].isna() | (df["calories"] == 0)).astype(bool)
    return df


def daily_step_metrics(df: pd.DataFrame) -> pd.DataFrame:
    df["non_wear"] = (df["step_total"].isna() | (df["step_total"] == 0)).astype(bool)
    return df


def sleep_metrics(df: pd.DataFrame) -> pd.DataFrame:
    df["sleep_efficiency"] = df["total_minutes_asleep"] / df["total_time_in_bed"].replace(0, np.nan)
    df["time_awake_in_bed"] = df["total_time_in_bed"] - df["total_minutes_asleep"]
    return df


_DERIVATIONS = {
    TableFamily.DAILY_ACTIVITY: daily_activity_metrics,
    TableFamily.DAILY_INTENSITIES: daily_intensity_metrics,
    TableFamily.DAILY_CALORIES: daily_calorie_metrics,
    TableFamily.DAILY_STEPS: daily_step_metrics,
    TableFamily.SLEEP: sleep_metrics,
}

_MINUTE_COLUMNS = {
    "total_minutes": "float64",
    "total_active_minutes": "float64",
    "active_ratio": "float64",
    "non_wear": "bool",
}

DERIVED_COLUMNS: dict[TableFamily, dict[str, str]] = {
    TableFamily.DAILY_ACTIVITY: _MINUTE_COLUMNS,
    TableFamily.DAILY_INTENSITIES: _MINUTE_COLUMNS,
    TableFamily.DAILY_CALORIES: {"non_wear": "bool"},
    TableFamily.DAILY_STEPS: {"non_wear": "bool"},
    TableFamily.SLEEP: {"sleep_efficiency": "float64", "time_awake_in_bed": "float64"},
}


def derive_metrics(spec: TableSpec, df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` with the derived columns of its table family."""
    df = df.copy()
    func = _DERIVATIONS.get(spec.family)
    if func is None:
        return round_distances(df)
    return func(df)
