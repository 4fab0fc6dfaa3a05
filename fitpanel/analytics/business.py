"""
Business KPIs — peak hour, step-goal adherence, retention, adequate sleep.
"""
from __future__ import annotations

import pandas as pd

from fitpanel.analytics.common import pct_of_total
from fitpanel.analytics.temporal import hourly_activity_summary, peak_hours, retention
from fitpanel.config import ADEQUATE_SLEEP_HOURS, GOAL_DAY_SHARE_PCT, STEP_GOAL

INSIGHT_COLUMNS = ["metric", "value", "interpretation"]


def share_of_users_meeting(df: pd.DataFrame, hit: pd.Series, share_pct: float = GOAL_DAY_SHARE_PCT) -> dict:
    """Users whose share of days with ``hit`` is at least ``share_pct`` percent."""
    if df.empty:
        return {"users_meeting": 0, "total_users": 0, "pct_users": 0.0}
    per_user = df.assign(hit=hit.fillna(False).astype(int)).groupby("id").agg(
        days_hit=("hit", "sum"),
        total_days=("hit", "size"),
    )
    per_user["pct_days"] = 100 * per_user["days_hit"] / per_user["total_days"]
    meeting = int((per_user["pct_days"] >= share_pct).sum())
    total = int(len(per_user))
    return {
        "users_meeting": meeting,
        "total_users": total,
        "pct_users": round(pct_of_total(meeting, total), 1),
    }


def step_goal_adherence(daily: pd.DataFrame, goal: int = STEP_GOAL) -> dict:
    return share_of_users_meeting(daily, daily["total_steps"] >= goal)


def adequate_sleep_adherence(sleep: pd.DataFrame, bounds: tuple = ADEQUATE_SLEEP_HOURS) -> dict:
    low, high = bounds
    hours = sleep["total_minutes_asleep"] / 60
    return share_of_users_meeting(sleep, (hours >= low) & (hours <= high))


def business_insights(
    daily: pd.DataFrame,
    hourly_steps: pd.DataFrame,
    hourly_calories: pd.DataFrame,
    sleep: pd.DataFrame,
) -> pd.DataFrame:
    """Headline metrics for the business report, one row each."""
    rows = []

    hourly = hourly_activity_summary(hourly_steps, hourly_calories)
    if not hourly.empty:
        peak = int(peak_hours(hourly, 1)["hour"].iloc[0])
        rows.append(("Peak Activity Hour", f"{peak}:00", "Best time for activity notifications"))

    goal = step_goal_adherence(daily)
    rows.append((
        f"Users Meeting {STEP_GOAL // 1000}k Steps ({GOAL_DAY_SHARE_PCT}%+ days)",
        f"{goal['pct_users']:.1f}%",
        "Percentage of engaged, active users",
    ))

    weekly = retention(daily)
    if not weekly.empty:
        last = weekly.iloc[-1]
        week = int(last["week_number"])
        rows.append((
            f"Week {week} Retention Rate",
            f"{last['retention_rate']:.1f}%",
            f"Users still active in week {week} relative to week 1",
        ))

    if not sleep.empty:
        adequate = adequate_sleep_adherence(sleep)
        low, high = ADEQUATE_SLEEP_HOURS
        rows.append((
            f"Users with Adequate Sleep ({GOAL_DAY_SHARE_PCT}%+ days)",
            f"{adequate['pct_users']:.1f}%",
            f"Users getting healthy {low}-{high}h sleep",
        ))

    return pd.DataFrame(rows, columns=INSIGHT_COLUMNS)
