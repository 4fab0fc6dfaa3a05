"""
Coverage analytics — users per dataset, engagement, feature utilisation, tracking frequency.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from fitpanel.analytics.common import classify_series, day_column, pct_of_total
from fitpanel.config import ENGAGEMENT_LEVELS, MIN_TRACKING_DAYS, TABLES_BY_NAME

ENGAGEMENT_ORDER = ["Everyday", "Heavy", "Moderate", "Light"]

ENGAGEMENT_COLUMNS = [
    "id", "days_tracked", "first_day", "last_day", "date_range_days", "engagement_level",
]


# ---------------------------------------------------------------------------
# Dataset coverage
# ---------------------------------------------------------------------------

def users_per_dataset(tables: dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Distinct users and row count for every dataset that holds rows."""
    rows = []
    for name, df in tables.items():
        if df is None or df.empty:
            continue
        rows.append({
            "dataset": name,
            "users": int(df["id"].nunique()),
            "records": int(len(df)),
        })
    return pd.DataFrame(rows, columns=["dataset", "users", "records"])


# ---------------------------------------------------------------------------
# Engagement
# ---------------------------------------------------------------------------

def engagement_level(days_tracked: pd.Series) -> pd.Series:
    """Everyday / Heavy / Moderate / Light by distinct tracked days."""
    return classify_series(days_tracked, ENGAGEMENT_LEVELS)


def user_engagement(daily: pd.DataFrame) -> pd.DataFrame:
    """Per-user tracked days, first/last day and engagement level."""
    if daily.empty:
        return pd.DataFrame(columns=ENGAGEMENT_COLUMNS)

    df = daily.assign(day=day_column(daily, "activity_day"))
    eng = df.groupby("id").agg(
        days_tracked=("day", "nunique"),
        first_day=("day", "min"),
        last_day=("day", "max"),
    ).reset_index()
    eng["date_range_days"] = (eng["last_day"] - eng["first_day"]).dt.days + 1
    eng["engagement_level"] = engagement_level(eng["days_tracked"])
    eng = eng.sort_values(["days_tracked", "id"], ascending=[False, True])
    return eng[ENGAGEMENT_COLUMNS].reset_index(drop=True)


def engagement_distribution(daily: pd.DataFrame) -> pd.DataFrame:
    """User count per engagement level, most engaged first."""
    eng = user_engagement(daily)
    counts = eng["engagement_level"].value_counts()
    rows = [
        {"engagement_level": level, "users": int(counts[level])}
        for level in ENGAGEMENT_ORDER if level in counts.index
    ]
    return pd.DataFrame(rows, columns=["engagement_level", "users"])


def recommended_exclusions(daily: pd.DataFrame, min_days: int = MIN_TRACKING_DAYS) -> pd.DataFrame:
    """Users with too few tracked days to support per-user statistics."""
    eng = user_engagement(daily)
    return eng[eng["days_tracked"] < min_days].reset_index(drop=True)


# ---------------------------------------------------------------------------
# Feature utilisation
# ---------------------------------------------------------------------------

FEATURE_TABLES = {
    "has_activity": "daily_activities",
    "has_sleep": "sleep_day",
    "has_weight": "weight_log",
    "has_heartrate": "heartrate_seconds",
}


def feature_utilization_matrix(
    daily: pd.DataFrame,
    sleep: pd.DataFrame,
    weight: pd.DataFrame,
    heartrate: pd.DataFrame,
) -> pd.DataFrame:
    """One row per activity user with a flag for each tracked feature."""
    sources = {
        "has_activity": daily,
        "has_sleep": sleep,
        "has_weight": weight,
        "has_heartrate": heartrate,
    }
    users = pd.Series(sorted(daily["id"].dropna().unique()), dtype="string")
    matrix = pd.DataFrame({"id": users})
    for flag, df in sources.items():
        ids = set(df["id"].dropna()) if not df.empty else set()
        matrix[flag] = matrix["id"].isin(ids).astype(bool)
    return matrix


def feature_summary(matrix: pd.DataFrame) -> pd.DataFrame:
    """Adoption counts and percentages (1 decimal) per feature."""
    total = len(matrix)
    rows = []
    for flag in FEATURE_TABLES:
        users = int(matrix[flag].sum()) if total else 0
        rows.append({
            "feature": flag.removeprefix("has_"),
            "users": users,
            "total_users": total,
            "pct_users": round(pct_of_total(users, total), 1),
        })
    return pd.DataFrame(rows, columns=["feature", "users", "total_users", "pct_users"])


# ---------------------------------------------------------------------------
# Tracking frequency for optional features
# ---------------------------------------------------------------------------

def sleep_tracking_frequency(sleep: pd.DataFrame) -> pd.DataFrame:
    cols = ["id", "sleep_records", "first_sleep", "last_sleep", "date_range", "sleep_tracking_rate"]
    if sleep.empty:
        return pd.DataFrame(columns=cols)
    df = sleep.assign(day=day_column(sleep, "sleep_day"))
    freq = df.groupby("id").agg(
        sleep_records=("day", "size"),
        first_sleep=("day", "min"),
        last_sleep=("day", "max"),
    ).reset_index()
    freq["date_range"] = (freq["last_sleep"] - freq["first_sleep"]).dt.days + 1
    freq["sleep_tracking_rate"] = (100 * freq["sleep_records"] / freq["date_range"]).round(1)
    freq = freq.sort_values(["sleep_records", "id"], ascending=[False, True])
    return freq[cols].reset_index(drop=True)


def weight_logging_frequency(weight: pd.DataFrame) -> pd.DataFrame:
    cols = ["id", "weight_logs", "manual_logs", "auto_logs", "first_log", "last_log"]
    if weight.empty:
        return pd.DataFrame(columns=cols)
    manual = weight["is_manual_report"].astype("boolean")
    df = weight.assign(
        day=day_column(weight, "date"),
        manual=manual.fillna(False).astype(int),
        auto=(~manual).fillna(False).astype(int),
    )
    freq = df.groupby("id").agg(
        weight_logs=("day", "size"),
        manual_logs=("manual", "sum"),
        auto_logs=("auto", "sum"),
        first_log=("day", "min"),
        last_log=("day", "max"),
    ).reset_index()
    freq = freq.sort_values(["weight_logs", "id"], ascending=[False, True])
    return freq[cols].reset_index(drop=True)


def heartrate_tracking_frequency(heartrate: pd.DataFrame) -> pd.DataFrame:
    cols = ["id", "hr_records", "days_with_hr", "first_hr", "last_hr"]
    if heartrate.empty:
        return pd.DataFrame(columns=cols)
    df = heartrate.assign(day=day_column(heartrate, "time"))
    freq = df.groupby("id").agg(
        hr_records=("day", "size"),
        days_with_hr=("day", "nunique"),
        first_hr=("day", "min"),
        last_hr=("day", "max"),
    ).reset_index()
    freq = freq.sort_values(["days_with_hr", "id"], ascending=[False, True])
    return freq[cols].reset_index(drop=True)


# ---------------------------------------------------------------------------
# Data quality
# ---------------------------------------------------------------------------

def non_wear_summary(daily: pd.DataFrame) -> pd.DataFrame:
    """Users with at least one suspected device-off day."""
    cols = ["id", "total_days", "non_wear_days", "non_wear_pct"]
    if daily.empty:
        return pd.DataFrame(columns=cols)
    summary = daily.assign(nw=daily["non_wear"].astype(bool).astype(int)).groupby("id").agg(
        total_days=("nw", "size"),
        non_wear_days=("nw", "sum"),
    ).reset_index()
    summary["non_wear_pct"] = (
        100 * summary["non_wear_days"] / summary["total_days"].replace(0, np.nan)
    ).round(1)
    summary = summary[summary["non_wear_days"] > 0]
    summary = summary.sort_values(["non_wear_pct", "id"], ascending=[False, True])
    return summary[cols].reset_index(drop=True)


def dataset_label(name: str) -> str:
    """``sleep_day`` → ``Sleep Day``; unknown names pass through."""
    return name.replace("_", " ").title() if name in TABLES_BY_NAME else name
