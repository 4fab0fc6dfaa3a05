"""
Aggregator — declared result tables computed from the CleanedStore.

Each aggregation names the cleaned tables it requires and the ones it can use
when present. A required table that is absent or empty yields an empty result
with the declared columns; optional tables are handed over as empty frames.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import pandas as pd

from fitpanel.analytics import business, correlations, coverage, distributions
from fitpanel.analytics import segments, sleep, temporal
from fitpanel.config import MANDATORY_TABLE, PEAK_HOURS_SHOWN, PROCESSED_FOLDER, TABLE_SPECS
from fitpanel.data.store import CleanedStore

Tables = dict[str, pd.DataFrame]


@dataclass(frozen=True)
class Aggregation:
    name: str
    requires: tuple[str, ...]
    build: Callable[[Tables], pd.DataFrame]
    columns: list[str]
    optional: tuple[str, ...] = ()
    description: str = ""

    @property
    def tables(self) -> tuple[str, ...]:
        return self.requires + self.optional

    def empty(self) -> pd.DataFrame:
        return pd.DataFrame(columns=self.columns)


def _feature_matrix(t: Tables) -> pd.DataFrame:
    return coverage.feature_utilization_matrix(
        t["daily_activities"], t["sleep_day"], t["weight_log"], t["heartrate_seconds"],
    )


_DAILY = ("daily_activities",)
_SLEEP = ("sleep_day",)
_FEATURES = ("sleep_day", "weight_log", "heartrate_seconds")

AGGREGATIONS: tuple[Aggregation, ...] = (
    # --- Coverage -----------------------------------------------------------
    Aggregation(
        "users_per_dataset", _DAILY,
        lambda t: coverage.users_per_dataset(t),
        ["dataset", "users", "records"],
        optional=tuple(s.name for s in TABLE_SPECS if s.name != MANDATORY_TABLE),
        description="Distinct users and records per dataset",
    ),
    Aggregation(
        "user_engagement", _DAILY,
        lambda t: coverage.user_engagement(t["daily_activities"]),
        coverage.ENGAGEMENT_COLUMNS,
        description="Tracked days and engagement level per user",
    ),
    Aggregation(
        "engagement_distribution", _DAILY,
        lambda t: coverage.engagement_distribution(t["daily_activities"]),
        ["engagement_level", "users"],
    ),
    Aggregation(
        "feature_utilization_matrix", _DAILY, _feature_matrix,
        ["id", *coverage.FEATURE_TABLES],
        optional=_FEATURES,
    ),
    Aggregation(
        "feature_summary", _DAILY,
        lambda t: coverage.feature_summary(_feature_matrix(t)),
        ["feature", "users", "total_users", "pct_users"],
        optional=_FEATURES,
        description="Feature adoption across activity users",
    ),
    Aggregation(
        "sleep_tracking_frequency", _SLEEP,
        lambda t: coverage.sleep_tracking_frequency(t["sleep_day"]),
        ["id", "sleep_records", "first_sleep", "last_sleep", "date_range", "sleep_tracking_rate"],
    ),
    Aggregation(
        "weight_logging_frequency", ("weight_log",),
        lambda t: coverage.weight_logging_frequency(t["weight_log"]),
        ["id", "weight_logs", "manual_logs", "auto_logs", "first_log", "last_log"],
    ),
    Aggregation(
        "heartrate_tracking_frequency", ("heartrate_seconds",),
        lambda t: coverage.heartrate_tracking_frequency(t["heartrate_seconds"]),
        ["id", "hr_records", "days_with_hr", "first_hr", "last_hr"],
    ),
    # --- Exploration --------------------------------------------------------
    Aggregation(
        "activity_distributions", _DAILY,
        lambda t: distributions.activity_distributions(t["daily_activities"]),
        distributions.DISTRIBUTION_COLUMNS,
    ),
    Aggregation(
        "sleep_distributions", _SLEEP,
        lambda t: distributions.sleep_distributions(t["sleep_day"]),
        distributions.DISTRIBUTION_COLUMNS,
    ),
    Aggregation(
        "non_wear_summary", _DAILY,
        lambda t: coverage.non_wear_summary(t["daily_activities"]),
        ["id", "total_days", "non_wear_days", "non_wear_pct"],
        description="Users with suspected device-off days",
    ),
    Aggregation(
        "recommended_exclusions", _DAILY,
        lambda t: coverage.recommended_exclusions(t["daily_activities"]),
        coverage.ENGAGEMENT_COLUMNS,
    ),
    Aggregation(
        "data_quality_outliers", _DAILY,
        lambda t: distributions.data_quality_outliers(t["daily_activities"], t["sleep_day"]),
        distributions.OUTLIER_COLUMNS,
        optional=_SLEEP,
    ),
    # --- Segmentation -------------------------------------------------------
    Aggregation(
        "user_segments", _DAILY,
        lambda t: segments.user_segments(t["daily_activities"], t["sleep_day"]),
        segments.SEGMENT_COLUMNS,
        optional=_SLEEP,
        description="Activity level, sleep pattern and engagement per user",
    ),
    Aggregation(
        "feature_by_segment", _DAILY,
        lambda t: segments.feature_by_segment(t["daily_activities"], t["sleep_day"]),
        ["activity_level", "users", "pct_with_sleep", "pct_adequate_tracking"],
        optional=_SLEEP,
    ),
    # --- Correlations -------------------------------------------------------
    Aggregation(
        "correlation_matrix", _DAILY,
        lambda t: correlations.correlation_matrix(t["daily_activities"]),
        ["variable", *correlations.MATRIX_FIELDS],
    ),
    Aggregation(
        "key_correlations", _DAILY,
        lambda t: correlations.key_correlations(t["daily_activities"], t["sleep_day"]),
        correlations.KEY_COLUMNS,
        optional=_SLEEP,
        description="Named activity and sleep correlations",
    ),
    # --- Temporal -----------------------------------------------------------
    Aggregation(
        "hourly_activity_summary", ("hourly_steps",),
        lambda t: temporal.hourly_activity_summary(t["hourly_steps"], t["hourly_calories"]),
        temporal.HOURLY_COLUMNS,
        optional=("hourly_calories",),
    ),
    Aggregation(
        "peak_activity_hours", ("hourly_steps",),
        lambda t: temporal.peak_hours(
            temporal.hourly_activity_summary(t["hourly_steps"], t["hourly_calories"]),
            PEAK_HOURS_SHOWN,
        ),
        temporal.HOURLY_COLUMNS,
        optional=("hourly_calories",),
    ),
    Aggregation(
        "daily_averages_by_dow", _DAILY,
        lambda t: temporal.daily_averages_by_dow(t["daily_activities"]),
        temporal.DOW_COLUMNS,
    ),
    Aggregation(
        "weekday_weekend", _DAILY,
        lambda t: temporal.weekday_weekend(t["daily_activities"]),
        ["period", "days", "avg_steps", "avg_calories", "avg_active_minutes"],
    ),
    Aggregation(
        "sleep_by_dow", _SLEEP,
        lambda t: temporal.sleep_by_dow(t["sleep_day"]),
        ["day_of_week", "nights", "avg_sleep_hours", "avg_sleep_efficiency"],
    ),
    Aggregation(
        "weekly_trends", _DAILY,
        lambda t: temporal.weekly_trends(t["daily_activities"]),
        temporal.WEEKLY_COLUMNS,
        description="Week-indexed activity means and active users",
    ),
    Aggregation(
        "retention", _DAILY,
        lambda t: temporal.retention(t["daily_activities"]),
        ["week_number", "unique_users", "retention_rate", "dropout_rate"],
    ),
    # --- Sleep --------------------------------------------------------------
    Aggregation(
        "sleep_analysis", _SLEEP,
        lambda t: sleep.sleep_analysis(t["sleep_day"]),
        sleep.ANALYSIS_COLUMNS,
    ),
    Aggregation(
        "user_sleep_consistency", _SLEEP,
        lambda t: sleep.user_sleep_consistency(t["sleep_day"]),
        sleep.CONSISTENCY_COLUMNS,
    ),
    # --- Business -----------------------------------------------------------
    Aggregation(
        "business_insights", _DAILY,
        lambda t: business.business_insights(
            t["daily_activities"], t["hourly_steps"], t["hourly_calories"], t["sleep_day"],
        ),
        business.INSIGHT_COLUMNS,
        optional=("hourly_steps", "hourly_calories", "sleep_day"),
        description="Headline KPIs",
    ),
)


@dataclass
class Aggregator:
    """Runs every declared aggregation against one CleanedStore."""
    aggregations: tuple[Aggregation, ...] = AGGREGATIONS
    skipped: dict[str, list[str]] = field(default_factory=dict)

    def run(self, store: CleanedStore) -> dict[str, pd.DataFrame]:
        """Compute every result table. Raises MissingTable without daily activity."""
        store.require(MANDATORY_TABLE)
        self.skipped = {}

        cache: Tables = {}

        def fetch(name: str) -> pd.DataFrame:
            if name not in cache:
                cache[name] = store.get(name)
            return cache[name]

        results: dict[str, pd.DataFrame] = {}
        n = len(self.aggregations)
        for i, agg in enumerate(self.aggregations, 1):
            missing = [name for name in agg.requires if fetch(name).empty]
            if missing:
                self.skipped[agg.name] = missing
                results[agg.name] = agg.empty()
                print(f"  [{i}/{n}] {agg.name}: skipped (no {', '.join(missing)})")
                continue
            tables = {name: fetch(name) for name in agg.tables}
            result = agg.build(tables)
            results[agg.name] = result.reset_index(drop=True)
            note = f" ({agg.description})" if agg.description else ""
            print(f"  [{i}/{n}] {agg.name}: {len(result):,} rows{note}")
        return results


def write_results(results: dict[str, pd.DataFrame], folder: Path = PROCESSED_FOLDER) -> list[Path]:
    """Write each result table to ``<folder>/<name>.csv``; returns the paths."""
    folder = Path(folder)
    folder.mkdir(parents=True, exist_ok=True)
    paths = []
    for name, df in results.items():
        path = folder / f"{name}.csv"
        df.to_csv(path, index=False, date_format="%Y-%m-%d", lineterminator="\n")
        paths.append(path)
    return paths
