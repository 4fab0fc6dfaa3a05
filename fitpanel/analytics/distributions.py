"""
Exploration distributions — summary statistics and data-quality outliers.
"""
from __future__ import annotations

import pandas as pd

from fitpanel.analytics.common import day_column, describe
from fitpanel.config import ABNORMAL_SLEEP_HOURS, EXTREME_CALORIES

DISTRIBUTION_COLUMNS = ["metric", "mean", "median", "sd", "min", "max"]

ACTIVITY_METRICS = [
    ("total_steps", "Steps"),
    ("calories", "Calories"),
    ("very_active_minutes", "Very Active Minutes"),
    ("fairly_active_minutes", "Fairly Active Minutes"),
    ("lightly_active_minutes", "Lightly Active Minutes"),
    ("sedentary_minutes", "Sedentary Minutes"),
]

OUTLIER_COLUMNS = ["id", "day", "check", "metric", "value"]


def _distribution(df: pd.DataFrame, metrics: list[tuple[str, str]]) -> pd.DataFrame:
    rows = [{"metric": label, **describe(df[col])} for col, label in metrics]
    return pd.DataFrame(rows, columns=DISTRIBUTION_COLUMNS)


def activity_distributions(daily: pd.DataFrame) -> pd.DataFrame:
    return _distribution(daily, ACTIVITY_METRICS)


def sleep_distributions(sleep: pd.DataFrame) -> pd.DataFrame:
    df = sleep.assign(sleep_hours=sleep["total_minutes_asleep"] / 60)
    return _distribution(df, [
        ("sleep_hours", "Sleep Hours"),
        ("sleep_efficiency", "Sleep Efficiency"),
    ])


def data_quality_outliers(daily: pd.DataFrame, sleep: pd.DataFrame) -> pd.DataFrame:
    """Rows worth a second look: kept in the cleaned data, listed here.

    Zero-step days, implausible calorie burns, very short or very long sleep,
    and sleep efficiency above 1 (more minutes asleep than in bed).
    """
    low_cal, high_cal = EXTREME_CALORIES
    short_sleep, long_sleep = ABNORMAL_SLEEP_HOURS
    frames = []

    def _collect(df, timestamp, mask, check, metric, values):
        if df.empty or not mask.any():
            return
        frames.append(pd.DataFrame({
            "id": df.loc[mask, "id"],
            "day": day_column(df.loc[mask], timestamp),
            "check": check,
            "metric": metric,
            "value": values[mask].astype(float),
        }))

    if not daily.empty:
        steps = daily["total_steps"]
        calories = daily["calories"]
        _collect(daily, "activity_day", (steps == 0).fillna(False),
                 "zero_step_day", "total_steps", steps)
        _collect(daily, "activity_day", ((calories > high_cal) | (calories < low_cal)).fillna(False),
                 "extreme_calories", "calories", calories)

    if not sleep.empty:
        hours = sleep["total_minutes_asleep"] / 60
        _collect(sleep, "sleep_day", ((hours < short_sleep) | (hours > long_sleep)).fillna(False),
                 "abnormal_sleep", "sleep_hours", hours.round(2))
        efficiency = sleep["sleep_efficiency"]
        _collect(sleep, "sleep_day", (efficiency > 1).fillna(False),
                 "sleep_efficiency_above_1", "sleep_efficiency", efficiency.round(4))

    if not frames:
        return pd.DataFrame(columns=OUTLIER_COLUMNS)
    out = pd.concat(frames, ignore_index=True)
    return out.sort_values(["check", "id", "day"], kind="stable").reset_index(drop=True)
