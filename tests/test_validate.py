import pandas as pd
import pytest

from fitpanel.config import TABLES_BY_NAME
from fitpanel.data.schemas import ValidationRules
from fitpanel.data.validate import Validator
from fitpanel.errors import ValidationViolation

from conftest import USER_A, USER_B, daily_minutes, prepare


def _validate(name, rows, validator=None):
    spec = TABLES_BY_NAME[name]
    return (validator or Validator()).validate(spec, prepare(name, rows))


def test_heart_rate_bounds_are_exclusive():
    rows = [
        {"Id": USER_A, "Time": f"4/12/2016 7:21:{s:02d} AM", "Value": str(v)}
        for s, v in [(0, 219), (5, 220), (10, 0), (15, 1)]
    ]
    df, report = _validate("heartrate_seconds", rows)

    assert sorted(df["value"].tolist()) == [1.0, 219.0]
    assert report.violations == 2
    assert report.kept_rows == 2


def test_daily_minutes_cap_is_inclusive():
    df, report = _validate("daily_activities", [
        daily_minutes(USER_A, "4/12/2016", 30, 20, 200, 1190),   # 1440
        daily_minutes(USER_A, "4/13/2016", 30, 20, 200, 1191),   # 1441
    ])
    assert len(df) == 1
    assert df["activity_day"].iloc[0] == pd.Timestamp("2016-04-12", tz="UTC")
    assert report.violations == 1


def test_sleep_with_zero_minutes_asleep_is_dropped():
    df, report = _validate("sleep_day", [
        {"Id": USER_A, "SleepDay": "4/12/2016 12:00:00 AM", "TotalSleepRecords": "1",
         "TotalMinutesAsleep": "0", "TotalTimeInBed": "480"},
        {"Id": USER_A, "SleepDay": "4/13/2016 12:00:00 AM", "TotalSleepRecords": "1",
         "TotalMinutesAsleep": "420", "TotalTimeInBed": "480"},
    ])
    assert df["total_minutes_asleep"].tolist() == [420.0]
    assert report.violations == 1


def test_weight_must_be_positive():
    df, report = _validate("weight_log", [
        {"Id": USER_A, "Date": "5/2/2016 11:59:59 PM", "WeightKg": "52.6", "Fat": "",
         "IsManualReport": "True", "LogId": "1462233599000"},
        {"Id": USER_A, "Date": "5/3/2016 11:59:59 PM", "WeightKg": "0", "Fat": "",
         "IsManualReport": "True", "LogId": "1462319999000"},
    ])
    assert len(df) == 1
    assert df["log_id"].iloc[0] == "1462233599000"
    assert pd.isna(df["fat"].iloc[0])
    assert report.violations == 1


def test_hourly_calories_without_value_dropped():
    df, report = _validate("hourly_calories", [
        {"Id": USER_A, "ActivityHour": "4/12/2016 12:00:00 AM", "Calories": "81"},
        {"Id": USER_A, "ActivityHour": "4/12/2016 1:00:00 AM", "Calories": ""},
    ])
    assert len(df) == 1 and report.violations == 1


def test_parse_failures_duplicates_and_key_conflicts_are_counted():
    rows = [
        daily_minutes(USER_A, "4/12/2016", 10, 10, 100, 1000),
        daily_minutes(USER_A, "4/12/2016", 10, 10, 100, 1000),               # exact duplicate
        daily_minutes(USER_A, "4/12/2016", 99, 10, 100, 1000),               # same key, other values
        daily_minutes(USER_B, "someday", 10, 10, 100, 1000),                 # bad timestamp
        daily_minutes("", "4/12/2016", 10, 10, 100, 1000),                   # missing id
    ]
    df, report = _validate("daily_activities", rows)

    assert report.raw_rows == 5
    assert report.parse_failures == 2
    assert report.duplicates == 1
    assert report.key_conflicts == 1
    assert report.kept_rows == 1
    assert report.dropped == 4
    assert df["very_active_minutes"].tolist() == [10.0]
    assert "_parse_error" not in df.columns


def test_minute_sleep_key_includes_log_id():
    rows = [
        {"Id": USER_A, "date": "4/12/2016 2:47:30 AM", "value": "3", "logId": "11380564589"},
        {"Id": USER_A, "date": "4/12/2016 2:47:30 AM", "value": "1", "logId": "11380564590"},
    ]
    df, report = _validate("minute_sleep", rows)
    assert len(df) == 2 and report.key_conflicts == 0


def test_custom_rules_are_honoured():
    strict = Validator(ValidationRules(max_heart_rate=100))
    rows = [{"Id": USER_A, "Time": "4/12/2016 7:21:00 AM", "Value": "150"}]
    df, report = _validate("heartrate_seconds", rows, validator=strict)
    assert df.empty and report.violations == 1


def test_check_raises_on_broken_contract():
    spec = TABLES_BY_NAME["heartrate_seconds"]
    bad = prepare("heartrate_seconds", [{"Id": USER_A, "Time": "4/12/2016 7:21:00 AM", "Value": "250"}])
    with pytest.raises(ValidationViolation) as exc:
        Validator().check(spec, bad.drop(columns=["_parse_error"]))
    assert exc.value.table == "heartrate_seconds"
    assert exc.value.rows == 1


def test_check_accepts_clean_table():
    spec = TABLES_BY_NAME["heartrate_seconds"]
    df, _ = _validate("heartrate_seconds", [{"Id": USER_A, "Time": "4/12/2016 7:21:00 AM", "Value": "80"}])
    Validator().check(spec, df)
