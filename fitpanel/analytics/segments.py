"""
User segmentation — activity level, sleep pattern and engagement per user.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from fitpanel.analytics.common import classify_series
from fitpanel.analytics.coverage import user_engagement
from fitpanel.config import ACTIVITY_LEVELS, ADEQUATE_TRACKING_DAYS, SLEEP_PATTERNS

ACTIVITY_ORDER = ["Sedentary", "Low Active", "Somewhat Active", "Active", "Highly Active"]

SEGMENT_COLUMNS = [
    "id", "days_tracked", "engagement_level",
    "avg_daily_steps", "avg_calories", "avg_distance", "activity_level",
    "avg_sleep_hours", "avg_sleep_efficiency", "sleep_pattern",
]


def activity_segments(daily: pd.DataFrame) -> pd.DataFrame:
    seg = daily.groupby("id").agg(
        avg_daily_steps=("total_steps", "mean"),
        avg_calories=("calories", "mean"),
        avg_distance=("total_distance", "mean"),
    ).reset_index()
    seg["activity_level"] = classify_series(seg["avg_daily_steps"], ACTIVITY_LEVELS)
    return seg


def sleep_segments(sleep: pd.DataFrame) -> pd.DataFrame:
    cols = ["id", "avg_sleep_hours", "avg_sleep_efficiency", "sleep_pattern"]
    if sleep.empty:
        return pd.DataFrame(columns=cols).astype({"id": "string"})
    seg = sleep.assign(sleep_hours=sleep["total_minutes_asleep"] / 60).groupby("id").agg(
        avg_sleep_hours=("sleep_hours", "mean"),
        avg_sleep_efficiency=("sleep_efficiency", "mean"),
    ).reset_index()
    seg["sleep_pattern"] = classify_series(seg["avg_sleep_hours"], SLEEP_PATTERNS)
    return seg[cols]


def user_segments(daily: pd.DataFrame, sleep: pd.DataFrame) -> pd.DataFrame:
    """Engagement, activity and (when sleep is tracked) sleep segments per user.

    Users without sleep data keep blank sleep columns.
    """
    eng = user_engagement(daily)[["id", "days_tracked", "engagement_level"]]
    seg = eng.merge(activity_segments(daily), on="id", how="left")
    seg = seg.merge(sleep_segments(sleep), on="id", how="left")
    for col in ("avg_daily_steps", "avg_calories", "avg_distance",
                "avg_sleep_hours", "avg_sleep_efficiency"):
        seg[col] = pd.to_numeric(seg[col], errors="coerce").round(2)
    return seg[SEGMENT_COLUMNS]


def feature_by_segment(daily: pd.DataFrame, sleep: pd.DataFrame) -> pd.DataFrame:
    """Sleep adoption and adequate-tracking share per activity level."""
    cols = ["activity_level", "users", "pct_with_sleep", "pct_adequate_tracking"]
    seg = user_segments(daily, sleep)
    if seg.empty:
        return pd.DataFrame(columns=cols)
    seg = seg.assign(
        has_sleep=seg["sleep_pattern"].notna().astype(int),
        adequate_tracking=(seg["days_tracked"] >= ADEQUATE_TRACKING_DAYS).astype(int),
    )
    out = seg.groupby("activity_level").agg(
        users=("id", "size"),
        with_sleep=("has_sleep", "sum"),
        adequate=("adequate_tracking", "sum"),
    ).reset_index()
    out["pct_with_sleep"] = (100 * out["with_sleep"] / out["users"].replace(0, np.nan)).round(1)
    out["pct_adequate_tracking"] = (100 * out["adequate"] / out["users"].replace(0, np.nan)).round(1)
    out["_order"] = out["activity_level"].map({level: i for i, level in enumerate(ACTIVITY_ORDER)})
    out = out.sort_values("_order").reset_index(drop=True)
    return out[cols]
