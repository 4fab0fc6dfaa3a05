"""
Sleep analytics — overall sleep statistics and per-user consistency ratings.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from fitpanel.analytics.common import classify_series
from fitpanel.config import SLEEP_CONSISTENCY

CONSISTENCY_COLUMNS = [
    "id", "avg_sleep", "sleep_sd", "avg_efficiency", "sleep_records", "consistency_rating",
]
ANALYSIS_COLUMNS = ["metric", "value"]


def user_sleep_consistency(sleep: pd.DataFrame) -> pd.DataFrame:
    """Per-user mean and standard deviation of nightly sleep hours.

    A user with a single night has no standard deviation and no rating.
    """
    if sleep.empty:
        return pd.DataFrame(columns=CONSISTENCY_COLUMNS)
    df = sleep.assign(sleep_hours=sleep["total_minutes_asleep"] / 60)
    out = df.groupby("id").agg(
        avg_sleep=("sleep_hours", "mean"),
        sleep_sd=("sleep_hours", "std"),
        avg_efficiency=("sleep_efficiency", "mean"),
        sleep_records=("sleep_hours", "size"),
    ).reset_index()
    out["consistency_rating"] = classify_series(out["sleep_sd"], SLEEP_CONSISTENCY)
    out = out.sort_values("id").reset_index(drop=True)
    return out[CONSISTENCY_COLUMNS].round(4)


def sleep_analysis(sleep: pd.DataFrame) -> pd.DataFrame:
    """Overall sleep statistics as metric/value rows, plus the mean per-user sd."""
    if sleep.empty:
        return pd.DataFrame(columns=ANALYSIS_COLUMNS)
    hours = sleep["total_minutes_asleep"] / 60
    awake = sleep["total_time_in_bed"] - sleep["total_minutes_asleep"]
    consistency = user_sleep_consistency(sleep)["sleep_sd"]

    def _stat(series: pd.Series, how: str) -> float:
        series = series.dropna()
        if series.empty or (how == "std" and len(series) < 2):
            return np.nan
        return round(float(getattr(series, how)()), 4)

    rows = [
        ("avg_sleep_hours", _stat(hours, "mean")),
        ("median_sleep_hours", _stat(hours, "median")),
        ("sd_sleep_hours", _stat(hours, "std")),
        ("avg_time_in_bed_hours", _stat(sleep["total_time_in_bed"] / 60, "mean")),
        ("avg_sleep_efficiency", _stat(sleep["sleep_efficiency"], "mean")),
        ("avg_time_awake_minutes", _stat(awake, "mean")),
        ("avg_consistency_sd", _stat(consistency, "mean")),
    ]
    return pd.DataFrame(rows, columns=ANALYSIS_COLUMNS)
