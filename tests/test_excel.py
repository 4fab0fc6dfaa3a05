from datetime import date

import numpy as np
import pandas as pd
from openpyxl import load_workbook

from fitpanel.excel import ExcelWriter, cell_value, infer_columns
from fitpanel.excel.styles import HIGHLIGHT_FILLS
from fitpanel.reports.analysis_workbook import generate_excel


def test_infer_columns_from_dtypes():
    df = pd.DataFrame({
        "users": pd.Series([1], dtype="int64"),
        "pct_users": [50.0],
        "retention_rate": [100.0],
        "avg_steps": [1.5],
        "first_day": pd.to_datetime(["2016-04-12"]),
        "is_weekend": [True],
        "engagement_level": ["Heavy"],
    })
    types = {key: col_type for key, col_type, _ in infer_columns(df)}
    assert types == {
        "users": "number", "pct_users": "percent", "retention_rate": "percent",
        "avg_steps": "decimal", "first_day": "date", "is_weekend": "text",
        "engagement_level": "text",
    }
    assert infer_columns(df)[0][2] == "Users"


def test_cell_value_converts_to_native():
    assert cell_value(np.int64(3), "number") == 3
    assert cell_value(np.bool_(True), "text") == "Yes"
    assert cell_value(np.nan, "decimal") is None
    assert cell_value(pd.NA, "text") is None
    assert cell_value(pd.Timestamp("2016-04-12 07:00", tz="UTC"), "date") == date(2016, 4, 12)
    assert cell_value(pd.Timestamp("2016-04-12 07:00", tz="UTC"), "text").tzinfo is None


def test_sheet_cursor_layout(tmp_path):
    ew = ExcelWriter()
    sheet = ew.sheet("A very long sheet title that Excel would reject")
    sheet.title("TITLE", "subtitle")
    assert sheet.row == 4
    sheet.section("OVERVIEW").kpis([(None, "MISSING", "number"), (12, "USERS", "number")])
    assert sheet.ws.cell(row=6, column=1).value == "n/a"
    assert sheet.ws.cell(row=6, column=3).value == 12

    df = pd.DataFrame({"engagement_level": ["Everyday", "Light"], "days": [26, 3]})
    table = ew.sheet("Engagement").table(
        df, highlight=lambda r: "good" if r["engagement_level"] == "Everyday" else None,
    )
    assert table.row == 5
    assert table.ws.freeze_panes == "A2"
    assert table.ws.cell(row=2, column=1).fill.start_color.rgb.endswith(
        HIGHLIGHT_FILLS["good"].start_color.rgb[-6:]
    )

    path = ew.save(tmp_path / "out" / "book.xlsx")
    wb = load_workbook(path)
    assert len(wb.sheetnames[0]) == 31
    assert wb["Engagement"]["B3"].value == 3


def test_workbook_flags_users_mostly_not_wearing_device(tmp_path):
    non_wear = pd.DataFrame({
        "id": ["1503960366", "1624580081"],
        "total_days": [10, 10],
        "non_wear_days": [5, 1],
        "non_wear_pct": [50.0, 10.0],
    })
    path = generate_excel({"non_wear_summary": non_wear}, tmp_path / "book.xlsx")

    ws = load_workbook(path)["Non-Wear Days"]
    alert = HIGHLIGHT_FILLS["alert"].start_color.rgb[-6:]
    assert ws["A2"].fill.start_color.rgb.endswith(alert)
    assert not ws["A3"].fill.start_color.rgb.endswith(alert)
