"""
Panel Analysis Workbook — executive summary KPIs plus one sheet per key result table.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from fitpanel.analytics.coverage import dataset_label
from fitpanel.excel.writer import ExcelWriter

# Users whose device was off on at least this share of tracked days
NON_WEAR_ALERT_PCT = 20.0

# (result table, sheet title)
TABLE_SHEETS = [
    ("user_segments", "User Segments"),
    ("user_engagement", "Engagement"),
    ("users_per_dataset", "Dataset Coverage"),
    ("feature_summary", "Feature Adoption"),
    ("key_correlations", "Key Correlations"),
    ("correlation_matrix", "Correlation Matrix"),
    ("hourly_activity_summary", "Hourly Activity"),
    ("daily_averages_by_dow", "Day of Week"),
    ("weekly_trends", "Weekly Trends"),
    ("retention", "Retention"),
    ("non_wear_summary", "Non-Wear Days"),
    ("sleep_analysis", "Sleep Analysis"),
    ("user_sleep_consistency", "Sleep Consistency"),
    ("data_quality_outliers", "Data Quality"),
]

SEGMENT_LEGEND = [
    ("Sedentary", "Mean daily steps below 5,000"),
    ("Low Active", "5,000 to 7,499 steps"),
    ("Somewhat Active", "7,500 to 9,999 steps"),
    ("Active", "10,000 to 12,499 steps"),
    ("Highly Active", "12,500 steps or more"),
    ("Everyday", "25 or more tracked days"),
    ("Heavy", "21 to 24 tracked days"),
    ("Moderate", "11 to 20 tracked days"),
    ("Light", "10 or fewer tracked days"),
]


def _engagement_highlight(r):
    return {"Everyday": "good", "Light": "caution"}.get(r.get("engagement_level"))


def _correlation_highlight(r):
    return {"Strong": "good", "Undefined": "caution"}.get(r.get("interpretation"))


def _non_wear_highlight(r):
    pct = r.get("non_wear_pct")
    return "alert" if pct is not None and pct >= NON_WEAR_ALERT_PCT else None


HIGHLIGHTS = {
    "user_engagement": _engagement_highlight,
    "user_segments": _engagement_highlight,
    "key_correlations": _correlation_highlight,
    "non_wear_summary": _non_wear_highlight,
    "data_quality_outliers": lambda r: "outlier",
}


def generate_json(results: dict[str, pd.DataFrame]) -> dict:
    """Headline figures for the executive summary."""
    engagement = results.get("user_engagement", pd.DataFrame())
    features = results.get("feature_summary", pd.DataFrame())
    segments = results.get("user_segments", pd.DataFrame())

    def _feature_pct(name: str) -> float:
        if features.empty:
            return 0.0
        hit = features.loc[features["feature"] == name, "pct_users"]
        return float(hit.iloc[0]) if len(hit) else 0.0

    def _mean(df: pd.DataFrame, col: str) -> float:
        if df.empty or col not in df.columns:
            return 0.0
        val = pd.to_numeric(df[col], errors="coerce").mean()
        return 0.0 if pd.isna(val) else round(float(val), 1)

    insights = results.get("business_insights", pd.DataFrame())
    return {
        "summary": {
            "total_users": int(len(engagement)),
            "avg_days_tracked": _mean(engagement, "days_tracked"),
            "avg_daily_steps": _mean(segments, "avg_daily_steps"),
            "sleep_adoption": _feature_pct("sleep"),
            "heartrate_adoption": _feature_pct("heartrate"),
            "weight_adoption": _feature_pct("weight"),
        },
        "insights": insights.to_dict("records"),
    }


def generate_excel(results: dict[str, pd.DataFrame], output_path: str | Path) -> Path:
    data = generate_json(results)
    s = data["summary"]

    ew = ExcelWriter()

    # Executive Summary
    summary = ew.sheet("Executive Summary")
    summary.title("FITPANEL ANALYTICS", "Fitness-tracker panel analysis")

    summary.section("PANEL OVERVIEW").kpis([
        (s["total_users"], "USERS", "number"),
        (s["avg_days_tracked"], "AVG DAYS TRACKED", "decimal"),
        (s["avg_daily_steps"], "AVG DAILY STEPS", "number"),
    ])
    summary.section("FEATURE ADOPTION").kpis([
        (s["sleep_adoption"], "SLEEP TRACKING", "percent"),
        (s["heartrate_adoption"], "HEART RATE", "percent"),
        (s["weight_adoption"], "WEIGHT LOGGING", "percent"),
    ])

    if data["insights"]:
        summary.section("KEY INSIGHTS")
        for insight in data["insights"]:
            summary.insight(f"{insight['metric']}: {insight['value']}", insight["interpretation"])

    summary.section("SEGMENT DEFINITIONS").legend(SEGMENT_LEGEND)

    # Result tables
    for name, title in TABLE_SHEETS:
        df = results.get(name)
        if df is None:
            continue
        if "dataset" in df.columns:
            df = df.assign(dataset=df["dataset"].map(dataset_label))
        ew.sheet(title).table(df, highlight=HIGHLIGHTS.get(name))

    return ew.save(output_path)
