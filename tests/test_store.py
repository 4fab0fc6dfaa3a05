import pandas as pd
import pytest

from fitpanel.config import TABLES_BY_NAME
from fitpanel.data.derive import derive_metrics
from fitpanel.data.store import CleanedStore
from fitpanel.data.validate import Validator
from fitpanel.errors import MissingTable
from fitpanel.pipeline import clean_all

from conftest import USER_A, daily_minutes, prepare


def _cleaned_daily():
    spec = TABLES_BY_NAME["daily_activities"]
    df, _ = Validator().validate(spec, prepare("daily_activities", [
        daily_minutes(USER_A, "4/12/2016", 30, 20, 200, 1190),
        daily_minutes(USER_A, "4/13/2016", 0, 0, 0, 1440, steps=0),
    ]))
    return derive_metrics(spec, df)


def test_absent_table_is_empty_with_canonical_columns():
    store = CleanedStore()
    df = store.get("sleep_day")

    assert df.empty
    for col in ("id", "sleep_day", "total_minutes_asleep", "sleep_efficiency"):
        assert col in df.columns
    assert not store.has("sleep_day")


def test_get_returns_a_copy():
    store = CleanedStore()
    store.put("daily_activities", _cleaned_daily())

    first = store.get("daily_activities")
    first.loc[0, "total_steps"] = -1

    assert store.get("daily_activities")["total_steps"].iloc[0] == 5000


def test_put_replaces_whole_table():
    store = CleanedStore()
    store.put("daily_activities", _cleaned_daily())
    store.put("daily_activities", _cleaned_daily().head(1))
    assert len(store.get("daily_activities")) == 1


def test_disk_round_trip_keeps_types(tmp_path):
    CleanedStore(tmp_path).put("daily_activities", _cleaned_daily())
    assert (tmp_path / "daily_activities_cleaned.csv").exists()

    df = CleanedStore(tmp_path).get("daily_activities")

    assert str(df["id"].dtype) == "string"
    assert df["id"].iloc[0] == USER_A
    assert df["activity_day"].iloc[0] == pd.Timestamp("2016-04-12", tz="UTC")
    assert df["non_wear"].tolist() == [False, True]
    assert df["total_minutes"].iloc[0] == 1440


def test_require_missing_table(tmp_path):
    with pytest.raises(MissingTable):
        CleanedStore(tmp_path).require("daily_activities")


def test_names_and_load(tmp_path):
    store = CleanedStore(tmp_path)
    store.put("daily_activities", _cleaned_daily())
    store.put("sleep_day", store.empty("sleep_day"))

    reopened = CleanedStore(tmp_path).load()

    assert reopened.names() == ["daily_activities", "sleep_day"]
    assert reopened.has("daily_activities")
    assert not reopened.has("sleep_day")


def test_cleaning_twice_is_byte_identical(raw_folder, tmp_path):
    first, second = tmp_path / "run1", tmp_path / "run2"
    clean_all(CleanedStore(first), raw_folder)
    clean_all(CleanedStore(second), raw_folder)

    files = sorted(p.name for p in first.glob("*.csv"))
    assert files == sorted(p.name for p in second.glob("*.csv"))
    assert "daily_activities_cleaned.csv" in files
    for name in files:
        assert (first / name).read_bytes() == (second / name).read_bytes()


def test_recleaning_own_output_folder_is_stable(raw_folder, tmp_path):
    folder = tmp_path / "cleaned"
    clean_all(CleanedStore(folder), raw_folder)
    before = {p.name: p.read_bytes() for p in folder.glob("*.csv")}
    clean_all(CleanedStore(folder), raw_folder)
    after = {p.name: p.read_bytes() for p in folder.glob("*.csv")}
    assert before == after
