"""
Temporal analytics — hour-of-day, day-of-week, weekly trend and retention series.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from fitpanel.analytics.common import DAY_ORDER, day_column, day_names, safe_series_divide
from fitpanel.config import WEEKEND_DAYS

HOURLY_COLUMNS = ["hour", "avg_steps", "median_steps", "avg_calories"]
DOW_COLUMNS = [
    "day_of_week", "is_weekend", "days", "avg_steps", "avg_calories",
    "avg_sedentary_minutes", "avg_active_minutes",
]
WEEKLY_COLUMNS = ["week_number", "avg_steps", "avg_calories", "avg_active_minutes", "unique_users"]


def hourly_activity_summary(hourly_steps: pd.DataFrame, hourly_calories: pd.DataFrame) -> pd.DataFrame:
    """Mean/median steps (and mean calories) by hour of day, 0–23.

    The hour is read from the instant as parsed; no timezone conversion.
    """
    if hourly_steps.empty:
        return pd.DataFrame(columns=HOURLY_COLUMNS)
    steps = hourly_steps.assign(hour=hourly_steps["activity_hour"].dt.hour)
    summary = steps.groupby("hour").agg(
        avg_steps=("step_total", "mean"),
        median_steps=("step_total", "median"),
    ).reset_index()

    if not hourly_calories.empty:
        cal = hourly_calories.assign(hour=hourly_calories["activity_hour"].dt.hour)
        cal = cal.groupby("hour").agg(avg_calories=("calories", "mean")).reset_index()
        summary = summary.merge(cal, on="hour", how="left")
    else:
        summary["avg_calories"] = np.nan

    summary = summary.sort_values("hour").reset_index(drop=True)
    summary["hour"] = summary["hour"].astype(int)
    return summary[HOURLY_COLUMNS].round(2)


def peak_hours(hourly: pd.DataFrame, top: int) -> pd.DataFrame:
    """Hours with the highest mean steps; earlier hour wins a tie."""
    return hourly.sort_values(["avg_steps", "hour"], ascending=[False, True]).head(top)


def _with_weekday(daily: pd.DataFrame) -> pd.DataFrame:
    days = day_column(daily, "activity_day")
    names = days.dt.day_name()
    return daily.assign(
        day_of_week=pd.Categorical(names, categories=DAY_ORDER, ordered=True),
        is_weekend=names.isin(WEEKEND_DAYS),
    )


def daily_averages_by_dow(daily: pd.DataFrame) -> pd.DataFrame:
    """Day-of-week means, Monday → Sunday, with a weekend flag."""
    if daily.empty:
        return pd.DataFrame(columns=DOW_COLUMNS)
    df = _with_weekday(daily)
    out = df.groupby(["day_of_week", "is_weekend"], observed=True).agg(
        days=("id", "size"),
        avg_steps=("total_steps", "mean"),
        avg_calories=("calories", "mean"),
        avg_sedentary_minutes=("sedentary_minutes", "mean"),
        avg_active_minutes=("total_active_minutes", "mean"),
    ).reset_index()
    out = out.sort_values("day_of_week").reset_index(drop=True)
    out["day_of_week"] = out["day_of_week"].astype(str)
    return out[DOW_COLUMNS].round(2)


def weekday_weekend(daily: pd.DataFrame) -> pd.DataFrame:
    cols = ["period", "days", "avg_steps", "avg_calories", "avg_active_minutes"]
    if daily.empty:
        return pd.DataFrame(columns=cols)
    df = _with_weekday(daily)
    out = df.groupby("is_weekend").agg(
        days=("id", "size"),
        avg_steps=("total_steps", "mean"),
        avg_calories=("calories", "mean"),
        avg_active_minutes=("total_active_minutes", "mean"),
    ).reset_index()
    out["period"] = np.where(out["is_weekend"], "Weekend", "Weekday")
    out = out.sort_values("is_weekend").reset_index(drop=True)
    return out[cols].round(2)


def sleep_by_dow(sleep: pd.DataFrame) -> pd.DataFrame:
    cols = ["day_of_week", "nights", "avg_sleep_hours", "avg_sleep_efficiency"]
    if sleep.empty:
        return pd.DataFrame(columns=cols)
    df = sleep.assign(
        day_of_week=day_names(day_column(sleep, "sleep_day")),
        sleep_hours=sleep["total_minutes_asleep"] / 60,
    )
    out = df.groupby("day_of_week", observed=True).agg(
        nights=("id", "size"),
        avg_sleep_hours=("sleep_hours", "mean"),
        avg_sleep_efficiency=("sleep_efficiency", "mean"),
    ).reset_index()
    out = out.sort_values("day_of_week").reset_index(drop=True)
    out["day_of_week"] = out["day_of_week"].astype(str)
    return out[cols].round(4)


def week_numbers(days: pd.Series) -> pd.Series:
    """1-based week index counted from the earliest day in ``days``."""
    return ((days - days.min()).dt.days // 7 + 1).astype(int)


def weekly_trends(daily: pd.DataFrame) -> pd.DataFrame:
    """Week-indexed means and distinct active users (the retention series)."""
    if daily.empty:
        return pd.DataFrame(columns=WEEKLY_COLUMNS)
    df = daily.assign(week_number=week_numbers(day_column(daily, "activity_day")))
    out = df.groupby("week_number").agg(
        avg_steps=("total_steps", "mean"),
        avg_calories=("calories", "mean"),
        avg_active_minutes=("total_active_minutes", "mean"),
        unique_users=("id", "nunique"),
    ).reset_index()
    out = out.sort_values("week_number").reset_index(drop=True)
    return out[WEEKLY_COLUMNS].round(2)


def retention(daily: pd.DataFrame) -> pd.DataFrame:
    """Users active each week relative to week 1."""
    cols = ["week_number", "unique_users", "retention_rate", "dropout_rate"]
    weekly = weekly_trends(daily)
    if weekly.empty:
        return pd.DataFrame(columns=cols)
    first = weekly["unique_users"].iloc[0]
    baseline = pd.Series(first, index=weekly.index, dtype=float)
    weekly["retention_rate"] = (100 * safe_series_divide(weekly["unique_users"], baseline)).round(1)
    weekly["dropout_rate"] = (100 - weekly["retention_rate"]).round(1)
    return weekly[cols]
