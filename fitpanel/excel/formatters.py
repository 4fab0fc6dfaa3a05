"""
Cell-level helpers: header band, typed data cells, KPI cards, column widths.
"""
from __future__ import annotations

from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from fitpanel.excel.styles import (
    CENTER, LEFT, RIGHT,
    DATA_FONT, HEADER_FONT, KPI_LABEL_FONT, KPI_VALUE_FONT,
    HEADER_BORDER, HEADER_FILL, KPI_BORDER, KPI_FILL, THIN_BORDER, ZEBRA_FILL,
    HIGHLIGHT_FILLS, NUMBER_FORMATS, NUMERIC_TYPES,
)

MISSING_KPI = "n/a"


def style_header_row(ws: Worksheet, row: int, labels: list[str]) -> None:
    """Write ``labels`` across ``row`` as a dark header band."""
    for col, label in enumerate(labels, 1):
        cell = ws.cell(row=row, column=col, value=label)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = HEADER_BORDER
        cell.alignment = CENTER


def write_data_cell(
    ws: Worksheet,
    row: int,
    col: int,
    value,
    col_type: str = "text",
    highlight: str | None = None,
    zebra: bool = False,
) -> None:
    """Write one typed cell. A known highlight wins over zebra striping."""
    cell = ws.cell(row=row, column=col, value=value)
    cell.font = DATA_FONT
    cell.border = THIN_BORDER
    cell.alignment = RIGHT if col_type in NUMERIC_TYPES else LEFT
    fmt = NUMBER_FORMATS.get(col_type)
    if fmt:
        cell.number_format = fmt

    fill = HIGHLIGHT_FILLS.get(highlight) if highlight else None
    if fill is not None:
        cell.fill = fill
    elif zebra:
        cell.fill = ZEBRA_FILL


def write_kpi_card(ws: Worksheet, row: int, col: int, value, label: str, fmt: str = "number") -> None:
    """Large value over a small caption, boxed. ``None`` shows as ``n/a``."""
    top = ws.cell(row=row, column=col, value=MISSING_KPI if value is None else value)
    top.font = KPI_VALUE_FONT
    if value is not None and fmt in NUMBER_FORMATS:
        top.number_format = NUMBER_FORMATS[fmt]

    bottom = ws.cell(row=row + 1, column=col, value=label)
    bottom.font = KPI_LABEL_FONT

    for cell in (top, bottom):
        cell.alignment = CENTER
        cell.fill = KPI_FILL
        cell.border = KPI_BORDER


def fit_column_widths(ws: Worksheet, first_row: int = 1, min_width: int = 10, max_width: int = 45) -> None:
    """Size each column to its longest value at or below ``first_row``.

    Merged title cells above ``first_row`` are ignored so a long title does
    not stretch column A.
    """
    widths: dict[int, int] = {}
    for row in ws.iter_rows(min_row=first_row):
        for cell in row:
            if cell.value is None:
                continue
            widths[cell.column] = max(widths.get(cell.column, 0), len(str(cell.value)))
    for col, width in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = min(max(width + 2, min_width), max_width)
