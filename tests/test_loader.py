import pandas as pd
import pytest

from fitpanel.config import TABLES_BY_NAME
from fitpanel.data.loader import PARSE_ERROR_COL, TableLoader, discover_raw_files
from fitpanel.errors import ParseFailure

from conftest import USER_A, prepare, write_csv


def test_discover_matches_keywords_case_insensitively(tmp_path):
    write_csv(tmp_path, "dailyActivity_merged.csv", ["Id"], [])
    write_csv(tmp_path, "SLEEPDAY_merged.csv", ["Id"], [])
    write_csv(tmp_path / "nested", "minuteSleep_merged.csv", ["Id"], [])
    write_csv(tmp_path, "notes.csv", ["Id"], [])

    found = discover_raw_files(tmp_path)

    assert found["daily_activities"].name == "dailyActivity_merged.csv"
    assert found["sleep_day"].name == "SLEEPDAY_merged.csv"
    assert found["minute_sleep"].name == "minuteSleep_merged.csv"
    assert "heartrate_seconds" not in found
    assert "daily_steps" not in found


def test_discover_picks_first_file_by_name(tmp_path):
    write_csv(tmp_path, "b_dailySteps.csv", ["Id"], [])
    write_csv(tmp_path, "a_dailySteps.csv", ["Id"], [])
    assert discover_raw_files(tmp_path)["daily_steps"].name == "a_dailySteps.csv"


@pytest.mark.parametrize("periods", [
    ("b_3.12.16", "a_4.12.16"), ("z_3.12.16", "y_4.12.16"), ("n_4.12.16", "m_3.12.16"),
])
def test_discover_same_filename_in_two_periods_picks_first_path(tmp_path, periods):
    for period in periods:
        write_csv(tmp_path / period, "dailyActivity_merged.csv", ["Id"], [])

    picks = {discover_raw_files(tmp_path)["daily_activities"].parent.name for _ in range(3)}

    assert picks == {min(periods)}


def test_discover_missing_folder_is_empty(tmp_path):
    assert discover_raw_files(tmp_path / "nope") == {}


def test_prepare_daily_activity_types_and_renames():
    df = prepare("daily_activities", [
        {"Id": USER_A, "ActivityDate": "4/12/2016", "TotalSteps": "13162",
         "VeryActiveMinutes": "25", "FairlyActiveMinutes": "13",
         "LightlyActiveMinutes": "328", "SedentaryMinutes": "728", "Calories": "1985"},
        {"Id": USER_A, "ActivityDate": "4/13/2016", "TotalSteps": "abc",
         "VeryActiveMinutes": "21", "FairlyActiveMinutes": "19",
         "LightlyActiveMinutes": "217", "SedentaryMinutes": "776", "Calories": "1797"},
    ])

    assert "activity_day" in df.columns and "activity_date" not in df.columns
    assert str(df["id"].dtype) == "string"
    assert df["id"].iloc[0] == USER_A
    assert df["activity_day"].iloc[0] == pd.Timestamp("2016-04-12", tz="UTC")
    assert df["total_steps"].iloc[0] == 13162.0
    # columns absent from this export are still present
    assert "tracker_distance" in df.columns
    assert df[PARSE_ERROR_COL].tolist() == [False, True]


def test_prepare_requires_timestamp_column():
    spec = TABLES_BY_NAME["sleep_day"]
    with pytest.raises(ParseFailure):
        TableLoader().prepare(spec, pd.DataFrame({"Id": ["1"], "Minutes": ["3"]}, dtype=str))


def test_prepare_minute_mets_rename():
    df = prepare("minute_mets_narrow", [
        {"Id": USER_A, "ActivityMinute": "4/12/2016 12:00:00 AM", "METs": "10"},
    ])
    assert df["mets"].iloc[0] == 10.0


def test_prepare_wide_table_prefixed_columns_are_numeric():
    df = prepare("minute_steps_wide", [
        {"Id": USER_A, "ActivityHour": "4/13/2016 12:00:00 AM", "Steps00": "4", "Steps01": "x"},
    ])
    assert df["steps00"].iloc[0] == 4.0
    assert bool(df[PARSE_ERROR_COL].iloc[0]) is True


def test_load_absent_file_returns_none():
    assert TableLoader().load("sleep_day", None) is None


def test_load_unreadable_file_degrades_to_empty(tmp_path, capsys):
    path = write_csv(tmp_path, "sleepDay_merged.csv", ["Id", "Minutes"], [["1", "3"]])

    df = TableLoader().load("sleep_day", path)

    assert df.empty
    assert "sleep_day" in df.columns or "total_minutes_asleep" in df.columns
    assert "Warning: sleep_day unreadable" in capsys.readouterr().out
