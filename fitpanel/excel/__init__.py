"""Workbook styling, formatting, and writing utilities."""
from .styles import *
from .formatters import style_header_row, write_data_cell, write_kpi_card, fit_column_widths
from .writer import ExcelWriter, SheetCursor, cell_value, infer_columns
