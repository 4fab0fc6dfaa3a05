"""
Correlation analytics — daily Pearson matrix, named key pairs, same-day and next-day joins.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from fitpanel.analytics.common import classify, day_column
from fitpanel.config import CORRELATION_STRENGTH

MATRIX_FIELDS = [
    "total_steps",
    "total_distance",
    "calories",
    "very_active_minutes",
    "fairly_active_minutes",
    "lightly_active_minutes",
    "sedentary_minutes",
    "total_active_minutes",
]

DAILY_PAIRS = [
    ("Steps → Calories", "total_steps", "calories"),
    ("Very Active Minutes → Calories", "very_active_minutes", "calories"),
    ("Total Active Minutes → Calories", "total_active_minutes", "calories"),
    ("Sedentary Minutes → Calories", "sedentary_minutes", "calories"),
    ("Distance → Calories", "total_distance", "calories"),
    ("Steps → Distance", "total_steps", "total_distance"),
]

SLEEP_PAIRS = [
    ("Steps → Sleep Duration", "total_steps", "total_minutes_asleep"),
    ("Very Active Minutes → Sleep Duration", "very_active_minutes", "total_minutes_asleep"),
    ("Steps → Sleep Efficiency", "total_steps", "sleep_efficiency"),
    ("Very Active Minutes → Sleep Efficiency", "very_active_minutes", "sleep_efficiency"),
]

LAG_PAIR = ("Sleep Duration → Next Day Steps", "total_minutes_asleep", "total_steps")

KEY_COLUMNS = ["relationship", "correlation", "interpretation", "n"]


def strength(r: float) -> str:
    """Strong / Moderate / Weak / Very Weak by |r|; Undefined when r is NaN."""
    return classify(r, CORRELATION_STRENGTH, missing="Undefined")


def pearson(x: pd.Series, y: pd.Series) -> tuple[float, int]:
    """Pearson r over pairwise-complete rows, with the number of rows used.

    NaN when fewer than two complete rows or either side is constant.
    """
    pair = pd.DataFrame({"x": pd.to_numeric(x, errors="coerce"),
                         "y": pd.to_numeric(y, errors="coerce")}).dropna()
    n = len(pair)
    if n < 2 or pair["x"].nunique() < 2 or pair["y"].nunique() < 2:
        return np.nan, n
    return float(pair["x"].corr(pair["y"])), n


# ---------------------------------------------------------------------------
# Matrix
# ---------------------------------------------------------------------------

def correlation_matrix(daily: pd.DataFrame, fields: list[str] = MATRIX_FIELDS) -> pd.DataFrame:
    """Symmetric Pearson matrix over listwise-complete rows, diagonal fixed to 1.

    With fewer than two complete rows every cell is NaN.
    """
    data = daily.reindex(columns=fields).apply(pd.to_numeric, errors="coerce").dropna()
    if len(data) < 2:
        matrix = pd.DataFrame(np.nan, index=fields, columns=fields)
    else:
        values = data.corr(method="pearson").to_numpy()
        values = (values + values.T) / 2
        np.fill_diagonal(values, 1.0)
        matrix = pd.DataFrame(values, index=fields, columns=fields)
    matrix.index.name = "variable"
    return matrix.round(4).reset_index()


# ---------------------------------------------------------------------------
# Joins
# ---------------------------------------------------------------------------

def _daily_by_day(daily: pd.DataFrame) -> pd.DataFrame:
    cols = ["id", "total_steps", "very_active_minutes", "calories"]
    return daily.assign(day=day_column(daily, "activity_day"))[["day", *cols]]


def same_day_join(sleep: pd.DataFrame, daily: pd.DataFrame) -> pd.DataFrame:
    """Sleep records joined to the same user's activity on the same calendar day."""
    left = sleep.assign(day=day_column(sleep, "sleep_day"))
    joined = left.merge(_daily_by_day(daily), on=["id", "day"], how="inner")
    return joined[joined["total_steps"].notna()].reset_index(drop=True)


def lag_join(sleep: pd.DataFrame, daily: pd.DataFrame, days: int = 1) -> pd.DataFrame:
    """Sleep on day D joined to the same user's activity on day D + ``days``.

    Exact user and calendar-day equality only.
    """
    left = sleep.assign(
        day=day_column(sleep, "sleep_day") + pd.Timedelta(days=days),
    )
    joined = left.merge(_daily_by_day(daily), on=["id", "day"], how="inner")
    joined = joined.rename(columns={"day": "next_day"})
    return joined[joined["total_steps"].notna()].reset_index(drop=True)


# ---------------------------------------------------------------------------
# Key correlations
# ---------------------------------------------------------------------------

def _pair_rows(df: pd.DataFrame, pairs) -> list[dict]:
    rows = []
    for label, x, y in pairs:
        r, n = pearson(df[x], df[y])
        rows.append({
            "relationship": label,
            "correlation": round(r, 4) if not np.isnan(r) else np.nan,
            "interpretation": strength(r),
            "n": n,
        })
    return rows


def key_correlations(daily: pd.DataFrame, sleep: pd.DataFrame) -> pd.DataFrame:
    """Named bivariate correlations; sleep pairs only when sleep joins to activity."""
    rows = _pair_rows(daily, DAILY_PAIRS)
    if not sleep.empty:
        same_day = same_day_join(sleep, daily)
        if not same_day.empty:
            rows += _pair_rows(same_day, SLEEP_PAIRS)
        lagged = lag_join(sleep, daily)
        if not lagged.empty:
            rows += _pair_rows(lagged, [LAG_PAIR])
    return pd.DataFrame(rows, columns=KEY_COLUMNS)
