"""
ExcelWriter — styled analysis workbooks built sheet by sheet.

Each sheet is wrapped in a ``SheetCursor`` that remembers the next free row,
so report code reads top to bottom:

    ew = ExcelWriter()
    sheet = ew.sheet("Summary")
    sheet.title("FITPANEL", "panel analysis")
    sheet.section("OVERVIEW")
    sheet.kpis([(12, "USERS", "number")])
    sheet.table(df)
    ew.save(path)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from fitpanel.excel.formatters import (
    fit_column_widths,
    style_header_row,
    write_data_cell,
    write_kpi_card,
)
from fitpanel.excel.styles import (
    DATA_FONT, INSIGHT_BODY_FONT, INSIGHT_TITLE_FONT, LEGEND_BOLD_FONT,
    SECTION_FONT, SUBTITLE_FONT, THIN_BORDER, TINT_FILL, TITLE_FONT, WRAP,
)

ColSpec = tuple[str, str, str]  # (key, col_type, label)
Highlighter = Callable[[dict], Optional[str]]

MAX_SHEET_TITLE = 31
_PERCENT_HINTS = ("pct_", "_pct", "_rate")


def column_label(key: str) -> str:
    """``avg_daily_steps`` → ``Avg Daily Steps``."""
    return key.replace("_", " ").title()


def _column_type(key: str, series: pd.Series) -> str:
    dtype = series.dtype
    if pd.api.types.is_bool_dtype(dtype):
        return "text"
    if pd.api.types.is_integer_dtype(dtype):
        return "number"
    if pd.api.types.is_float_dtype(dtype):
        if key.startswith(_PERCENT_HINTS[0]) or key.endswith(_PERCENT_HINTS[1:]):
            return "percent"
        return "decimal"
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return "date"
    return "text"


def infer_columns(df: pd.DataFrame) -> list[ColSpec]:
    """Column specs from dtypes: ints → number, floats → decimal or percent, datetimes → date."""
    return [(str(key), _column_type(str(key), df[key]), column_label(str(key))) for key in df.columns]


def cell_value(val, col_type: str):
    """Excel-safe native value: NA → blank, numpy → Python, bool → Yes/No, instants → dates."""
    if isinstance(val, (list, tuple, dict)):
        return str(val)
    if val is None or pd.isna(val):
        return None
    if isinstance(val, pd.Timestamp):
        val = val.tz_convert(None) if val.tzinfo else val
        val = val.to_pydatetime()
    elif hasattr(val, "item"):
        val = val.item()
    if isinstance(val, bool):
        return "Yes" if val else "No"
    if col_type == "date" and isinstance(val, datetime):
        return val.date()
    if isinstance(val, datetime) and val.tzinfo is not None:
        return val.replace(tzinfo=None)
    return val


@dataclass
class SheetCursor:
    """A worksheet plus the next free row."""
    ws: Worksheet
    row: int = 1
    width: int = 8

    def skip(self, rows: int = 1) -> "SheetCursor":
        self.row += rows
        return self

    def title(self, title: str, subtitle: str = "") -> "SheetCursor":
        self.ws.cell(row=self.row, column=1, value=title).font = TITLE_FONT
        self.ws.merge_cells(start_row=self.row, start_column=1, end_row=self.row, end_column=self.width)
        if subtitle:
            self.ws.cell(row=self.row + 1, column=1, value=subtitle).font = SUBTITLE_FONT
            self.ws.merge_cells(
                start_row=self.row + 1, start_column=1, end_row=self.row + 1, end_column=self.width,
            )
        return self.skip(3)

    def section(self, heading: str) -> "SheetCursor":
        self.ws.cell(row=self.row, column=1, value=heading).font = SECTION_FONT
        return self.skip(2)

    def kpis(self, cards: list[tuple], spacing: int = 2) -> "SheetCursor":
        """``cards`` is a list of ``(value, label, format)``."""
        for i, (value, label, fmt) in enumerate(cards):
            write_kpi_card(self.ws, self.row, 1 + i * spacing, value, label, fmt)
        return self.skip(3)

    def insight(self, heading: str, body: str) -> "SheetCursor":
        self.ws.cell(row=self.row, column=1, value=heading).font = INSIGHT_TITLE_FONT
        self.ws.cell(row=self.row + 1, column=1, value=body).font = INSIGHT_BODY_FONT
        self.ws.merge_cells(
            start_row=self.row + 1, start_column=1, end_row=self.row + 1, end_column=self.width,
        )
        return self.skip(3)

    def legend(self, items: list[tuple[str, str]]) -> "SheetCursor":
        style_header_row(self.ws, self.row, ["Category", "Definition"])
        for offset, (category, definition) in enumerate(items, 1):
            for col, text in ((1, category), (2, definition)):
                cell = self.ws.cell(row=self.row + offset, column=col, value=text)
                cell.font = LEGEND_BOLD_FONT if col == 1 else DATA_FONT
                cell.fill = TINT_FILL
                cell.border = THIN_BORDER
                cell.alignment = WRAP
        self.ws.column_dimensions["A"].width = 22
        self.ws.column_dimensions["B"].width = 60
        return self.skip(len(items) + 2)

    def table(
        self,
        data: pd.DataFrame,
        columns: list[ColSpec] | None = None,
        highlight: Highlighter | None = None,
        freeze: bool = True,
    ) -> "SheetCursor":
        """Header band plus one row per record; blanks for missing values.

        ``highlight(record)`` may return a name from ``HIGHLIGHT_FILLS``.
        """
        columns = columns or infer_columns(data)
        header_row = self.row
        style_header_row(self.ws, header_row, [label for _, _, label in columns])

        for offset, record in enumerate(data.to_dict("records"), 1):
            name = highlight(record) if highlight else None
            for col, (key, col_type, _) in enumerate(columns, 1):
                write_data_cell(
                    self.ws, header_row + offset, col,
                    cell_value(record.get(key), col_type), col_type,
                    highlight=name, zebra=offset % 2 == 0,
                )

        fit_column_widths(self.ws, first_row=header_row)
        if freeze:
            self.ws.freeze_panes = f"A{header_row + 1}"
        return self.skip(len(data) + 2)


class ExcelWriter:
    """Workbook under construction; the first sheet re-uses openpyxl's default one."""

    def __init__(self) -> None:
        self.wb = Workbook()
        self._fresh = True

    def sheet(self, title: str) -> SheetCursor:
        title = title[:MAX_SHEET_TITLE]
        if self._fresh:
            ws = self.wb.active
            ws.title = title
            self._fresh = False
        else:
            ws = self.wb.create_sheet(title=title)
        return SheetCursor(ws)

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        return path
