"""
FitPanel Analytics — Configuration: paths, table catalogue, thresholds.
"""
import os
from pathlib import Path

from fitpanel.data.schemas import TableFamily, TableSpec, ValidationRules

# ---------------------------------------------------------------------------
# Paths — override with FITPANEL_DATA_DIR env var
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("FITPANEL_DATA_DIR", str(Path.cwd() / "data")))
RAW_FOLDER = _data_dir / "raw"
CLEANED_FOLDER = _data_dir / "cleaned"
PROCESSED_FOLDER = _data_dir / "processed"
REPORTS_FOLDER = _data_dir / "reports"

WORKBOOK_NAME = "fitpanel_analysis.xlsx"

# ---------------------------------------------------------------------------
# Datetime patterns (order matters — first match wins)
# ---------------------------------------------------------------------------
DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%m-%d-%Y %I:%M:%S %p",
    "%m-%d-%Y %I:%M %p",
    "%m-%d-%Y %H:%M:%S",
    "%m-%d-%Y %H:%M",
    "%m-%d-%Y",
)

# Cleaned files store instants in UTC with this layout
CLEANED_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# ---------------------------------------------------------------------------
# Raw table catalogue (18 known exports)
# ---------------------------------------------------------------------------
_DAILY_MINUTES = (
    "very_active_minutes",
    "fairly_active_minutes",
    "lightly_active_minutes",
    "sedentary_minutes",
)

TABLE_SPECS = (
    TableSpec(
        name="daily_activities",
        keyword="dailyActivity",
        timestamp="activity_day",
        family=TableFamily.DAILY_ACTIVITY,
        renames=(("activity_date", "activity_day"),),
        numeric=(
            "total_steps", "total_distance", "tracker_distance",
            "logged_activities_distance", "very_active_distance",
            "moderately_active_distance", "light_active_distance",
            "sedentary_active_distance", *_DAILY_MINUTES, "calories",
        ),
        mandatory=True,
    ),
    TableSpec(
        name="daily_calories",
        keyword="dailyCalories",
        timestamp="activity_day",
        family=TableFamily.DAILY_CALORIES,
        numeric=("calories",),
    ),
    TableSpec(
        name="daily_intensities",
        keyword="dailyIntensities",
        timestamp="activity_day",
        family=TableFamily.DAILY_INTENSITIES,
        numeric=(
            *_DAILY_MINUTES, "sedentary_active_distance", "light_active_distance",
            "moderately_active_distance", "very_active_distance",
        ),
    ),
    TableSpec(
        name="daily_steps",
        keyword="dailySteps",
        timestamp="activity_day",
        family=TableFamily.DAILY_STEPS,
        numeric=("step_total",),
    ),
    TableSpec(
        name="sleep_day",
        keyword="sleepDay",
        timestamp="sleep_day",
        family=TableFamily.SLEEP,
        numeric=("total_sleep_records", "total_minutes_asleep", "total_time_in_bed"),
    ),
    TableSpec(
        name="weight_log",
        keyword="weightLogInfo",
        timestamp="date",
        family=TableFamily.WEIGHT,
        numeric=("weight_kg", "weight_pounds", "fat", "bmi"),
        booleans=("is_manual_report",),
        strings=("log_id",),
    ),
    TableSpec(
        name="hourly_calories",
        keyword="hourlyCalories",
        timestamp="activity_hour",
        family=TableFamily.HOURLY_CALORIES,
        numeric=("calories",),
    ),
    TableSpec(
        name="hourly_intensities",
        keyword="hourlyIntensities",
        timestamp="activity_hour",
        numeric=("total_intensity", "average_intensity"),
    ),
    TableSpec(
        name="hourly_steps",
        keyword="hourlySteps",
        timestamp="activity_hour",
        numeric=("step_total",),
    ),
    TableSpec(
        name="heartrate_seconds",
        keyword="heartrate_seconds",
        timestamp="time",
        family=TableFamily.HEART_RATE,
        numeric=("value",),
    ),
    TableSpec(
        name="minute_calories_narrow",
        keyword="minuteCaloriesNarrow",
        timestamp="activity_minute",
        numeric=("calories",),
    ),
    TableSpec(
        name="minute_intensities_narrow",
        keyword="minuteIntensitiesNarrow",
        timestamp="activity_minute",
        numeric=("intensity",),
    ),
    TableSpec(
        name="minute_steps_narrow",
        keyword="minuteStepsNarrow",
        timestamp="activity_minute",
        numeric=("steps",),
    ),
    TableSpec(
        name="minute_sleep",
        keyword="minuteSleep",
        timestamp="date",
        numeric=("value",),
        strings=("log_id",),
        key=("id", "date", "log_id"),
    ),
    TableSpec(
        name="minute_mets_narrow",
        keyword="minuteMETsNarrow",
        timestamp="activity_minute",
        renames=(("me_ts", "mets"),),
        numeric=("mets",),
    ),
    TableSpec(
        name="minute_calories_wide",
        keyword="minuteCaloriesWide",
        timestamp="activity_hour",
        numeric_prefixes=("calories",),
    ),
    TableSpec(
        name="minute_intensities_wide",
        keyword="minuteIntensitiesWide",
        timestamp="activity_hour",
        numeric_prefixes=("intensity",),
    ),
    TableSpec(
        name="minute_steps_wide",
        keyword="minuteStepsWide",
        timestamp="activity_hour",
        numeric_prefixes=("steps",),
    ),
)

TABLES_BY_NAME = {spec.name: spec for spec in TABLE_SPECS}

MANDATORY_TABLE = "daily_activities"

DEFAULT_RULES = ValidationRules()

# ---------------------------------------------------------------------------
# Classification tables (order matters — first match wins)
# ---------------------------------------------------------------------------
ACTIVITY_LEVELS = (
    (lambda steps: steps < 5000, "Sedentary"),
    (lambda steps: steps < 7500, "Low Active"),
    (lambda steps: steps < 10000, "Somewhat Active"),
    (lambda steps: steps < 12500, "Active"),
    (lambda steps: True, "Highly Active"),
)

SLEEP_PATTERNS = (
    (lambda hours: hours < 6, "Under-sleeper"),
    (lambda hours: hours <= 8, "Normal"),
    (lambda hours: True, "Over-sleeper"),
)

ENGAGEMENT_LEVELS = (
    (lambda days: days >= 25, "Everyday"),
    (lambda days: days >= 21, "Heavy"),
    (lambda days: days >= 11, "Moderate"),
    (lambda days: True, "Light"),
)

CORRELATION_STRENGTH = (
    (lambda r: abs(r) >= 0.7, "Strong"),
    (lambda r: abs(r) >= 0.4, "Moderate"),
    (lambda r: abs(r) >= 0.2, "Weak"),
    (lambda r: True, "Very Weak"),
)

SLEEP_CONSISTENCY = (
    (lambda sd: sd < 1, "Very Consistent"),
    (lambda sd: sd < 1.5, "Consistent"),
    (lambda sd: sd < 2, "Moderate"),
    (lambda sd: True, "Inconsistent"),
)

# ---------------------------------------------------------------------------
# Business / exploration constants
# ---------------------------------------------------------------------------
STEP_GOAL = 10_000
ADEQUATE_SLEEP_HOURS = (7, 9)          # inclusive
GOAL_DAY_SHARE_PCT = 50                # a user "meets" a goal on >= 50% of days
ADEQUATE_TRACKING_DAYS = 21
MIN_TRACKING_DAYS = 7                  # fewer → recommended exclusion
EXTREME_CALORIES = (1000, 5000)        # < low or > high is an outlier
ABNORMAL_SLEEP_HOURS = (3, 12)
PEAK_HOURS_SHOWN = 5
WEEKEND_DAYS = {"Saturday", "Sunday"}
