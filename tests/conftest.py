import csv
from datetime import date, timedelta
from pathlib import Path

import pandas as pd
import pytest

from fitpanel.config import TABLES_BY_NAME
from fitpanel.data.loader import TableLoader

USER_A = "1503960366"
USER_B = "1624580081"
START = date(2016, 4, 12)

DAILY_HEADER = [
    "Id", "ActivityDate", "TotalSteps", "TotalDistance", "TrackerDistance",
    "LoggedActivitiesDistance", "VeryActiveDistance", "ModeratelyActiveDistance",
    "LightActiveDistance", "SedentaryActiveDistance", "VeryActiveMinutes",
    "FairlyActiveMinutes", "LightlyActiveMinutes", "SedentaryMinutes", "Calories",
]


def us_date(d: date) -> str:
    return f"{d.month}/{d.day}/{d.year}"


def us_instant(d: date, hour: int, minute: int = 0, second: int = 0) -> str:
    h12 = hour % 12 or 12
    suffix = "AM" if hour < 12 else "PM"
    return f"{us_date(d)} {h12}:{minute:02d}:{second:02d} {suffix}"


def write_csv(folder: Path, filename: str, header: list[str], rows: list[list]) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / filename
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def daily_row(uid, day, steps, very, fairly, lightly, sedentary, calories):
    distance = round(steps * 0.00075, 3) if isinstance(steps, (int, float)) else 0
    return [
        uid, us_date(day) if isinstance(day, date) else day, steps, distance, distance,
        0, 0, 0, distance, 0, very, fairly, lightly, sedentary, calories,
    ]


def daily_rows() -> list[list]:
    """User A: 22 clean days. User B: 10 clean days (first one non-wear). Then 4 bad rows."""
    rows = []
    for i in range(22):
        day = START + timedelta(days=i)
        if i == 0:
            rows.append(daily_row(USER_A, day, 11000, 30, 20, 200, 1190, 2100))
        else:
            rows.append(daily_row(USER_A, day, 11000 + 100 * i, 20 + i % 5, 10, 180, 1000, 2000 + 10 * i))
    for i in range(10):
        day = START + timedelta(days=i)
        if i == 0:
            rows.append(daily_row(USER_B, day, 0, 0, 0, 0, 1440, 1500))
        else:
            rows.append(daily_row(USER_B, day, 4000, 0, 5, 150, 1200, 1800))
    rows.append(list(rows[23]))                                                       # exact duplicate
    rows.append(daily_row(USER_B, date(2016, 4, 30), 4000, 0, 5, 150, 1300, 1800))    # 1455 minutes
    rows.append(daily_row(USER_B, "not a date", 4000, 0, 5, 150, 1200, 1800))         # bad timestamp
    bad_steps = daily_row(USER_B, date(2016, 5, 1), 4000, 0, 5, 150, 1200, 1800)
    bad_steps[2] = "abc"
    rows.append(bad_steps)                                                            # bad number
    return rows


@pytest.fixture
def raw_folder(tmp_path) -> Path:
    """A small Fitbit-style export: daily activity, sleep, heart rate, hourly, weight."""
    folder = tmp_path / "raw"
    write_csv(folder, "dailyActivity_merged.csv", DAILY_HEADER, daily_rows())

    sleep = [
        [USER_A, us_instant(START + timedelta(days=i), 0), 1, asleep, in_bed]
        for i, (asleep, in_bed) in enumerate([(420, 460), (480, 500), (390, 420), (450, 480), (0, 480)])
    ]
    sleep.append([USER_B, us_instant(START, 0), 1, 500, 490])
    write_csv(folder, "sleepDay_merged.csv",
              ["Id", "SleepDay", "TotalSleepRecords", "TotalMinutesAsleep", "TotalTimeInBed"], sleep)

    heart = [
        [USER_A, us_instant(START, 7, 21, 0), 219],
        [USER_A, us_instant(START, 7, 21, 5), 220],
        [USER_A, us_instant(START, 7, 21, 10), 0],
        [USER_A, us_instant(START, 7, 21, 15), 75],
    ]
    write_csv(folder, "heartrate_seconds_merged.csv", ["Id", "Time", "Value"], heart)

    hourly_steps = [[USER_A, us_instant(START, h), 500 if h == 18 else h * 10] for h in range(24)]
    write_csv(folder, "hourlySteps_merged.csv", ["Id", "ActivityHour", "StepTotal"], hourly_steps)

    hourly_cal = [[USER_A, us_instant(START, h), 50 + h] for h in range(24)]
    write_csv(folder, "hourlyCalories_merged.csv", ["Id", "ActivityHour", "Calories"], hourly_cal)

    weight = [
        [USER_A, us_instant(date(2016, 5, 2), 23, 59, 59), 52.599998474121, 115.96, 22, 22.65, "True", "1462233599000"],
        [USER_A, us_instant(date(2016, 5, 3), 23, 59, 59), 0, 0, "", 0, "False", "1462319999000"],
    ]
    write_csv(folder, "weightLogInfo_merged.csv",
              ["Id", "Date", "WeightKg", "WeightPounds", "Fat", "BMI", "IsManualReport", "LogId"], weight)
    return folder


def prepare(name: str, rows: list[dict]) -> pd.DataFrame:
    """Run raw string rows for table ``name`` through the loader."""
    spec = TABLES_BY_NAME[name]
    return TableLoader().prepare(spec, pd.DataFrame(rows, dtype=str))


def daily_minutes(uid: str, day: str, very, fairly, lightly, sedentary, steps=5000, calories=2000) -> dict:
    return {
        "Id": uid, "ActivityDate": day, "TotalSteps": str(steps), "TotalDistance": "3.5",
        "VeryActiveMinutes": str(very), "FairlyActiveMinutes": str(fairly),
        "LightlyActiveMinutes": str(lightly), "SedentaryMinutes": str(sedentary),
        "Calories": str(calories),
    }
