"""
Safe math and classification helpers used across all analytics modules.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

# Sunday last: weekly tables run Monday → Sunday
DAY_ORDER = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide safely, returning default if denominator is zero or NaN."""
    if denominator == 0 or pd.isna(denominator):
        return default
    result = numerator / denominator
    return default if pd.isna(result) else result


def pct_of_total(part: float, total: float) -> float:
    """Percentage of total."""
    return safe_divide(part, total) * 100


def safe_series_divide(
    numerator: pd.Series,
    denominator: pd.Series,
    default: float = np.nan,
) -> pd.Series:
    """Element-wise safe division for pandas Series."""
    return (numerator / denominator.replace(0, np.nan)).fillna(default)


def classify(value, rules, missing: str | None = None) -> str | None:
    """First label whose predicate accepts ``value``; ``missing`` for NaN/None."""
    if value is None or pd.isna(value):
        return missing
    for predicate, label in rules:
        if predicate(value):
            return label
    return missing


def classify_series(values: pd.Series, rules, missing: str | None = None) -> pd.Series:
    return values.map(lambda v: classify(v, rules, missing)).astype(object)


def day_column(df: pd.DataFrame, timestamp: str) -> pd.Series:
    """Calendar day (naive midnight) of each instant, as parsed."""
    return df[timestamp].dt.tz_localize(None).dt.normalize()


def day_names(days: pd.Series) -> pd.Series:
    return pd.Categorical(days.dt.day_name(), categories=DAY_ORDER, ordered=True)


def describe(values: pd.Series, decimals: int = 2) -> dict:
    """Mean / median / sd / min / max of a numeric column, NaN when empty."""
    values = values.dropna()
    if values.empty:
        return {"mean": np.nan, "median": np.nan, "sd": np.nan, "min": np.nan, "max": np.nan}
    return {
        "mean": round(float(values.mean()), decimals),
        "median": round(float(values.median()), decimals),
        "sd": round(float(values.std()), decimals) if len(values) > 1 else np.nan,
        "min": round(float(values.min()), decimals),
        "max": round(float(values.max()), decimals),
    }
