"""
Workbook palette — colors, fonts, fills, borders and number formats in one place.
"""
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

# ---------------------------------------------------------------------------
# Palette
# ---------------------------------------------------------------------------
ACCENT = "00897B"        # teal
INK = "004D40"           # deep teal, titles and header band
MUTED = "607D8B"         # blue-grey captions
GRID = "CFD8DC"
TINT = "E0F2F1"
ZEBRA = "F4F7F7"
PAPER = "FFFFFF"
TEXT = "263238"

CAUTION = "FFF8E1"       # amber tint
ALERT = "FFEBEE"         # red tint
OUTLIER = "FFF3E0"       # orange tint

FONT_NAME = "Calibri"


def _font(size: int, color: str = TEXT, **kw) -> Font:
    return Font(name=FONT_NAME, size=size, color=color, **kw)


def _solid(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _box(color: str, bottom: str = "thin") -> Border:
    side = Side(style="thin", color=color)
    return Border(left=side, right=side, top=side, bottom=Side(style=bottom, color=color))


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------
TITLE_FONT = _font(22, INK, bold=True)
SUBTITLE_FONT = _font(11, MUTED, italic=True)
SECTION_FONT = _font(13, INK, bold=True)
HEADER_FONT = _font(10, PAPER, bold=True)
DATA_FONT = _font(10)
KPI_VALUE_FONT = _font(24, ACCENT, bold=True)
KPI_LABEL_FONT = _font(9, MUTED, bold=True)
INSIGHT_TITLE_FONT = _font(11, INK, bold=True)
INSIGHT_BODY_FONT = _font(10, MUTED, italic=True)
LEGEND_BOLD_FONT = _font(10, bold=True)

# ---------------------------------------------------------------------------
# Fills / borders / alignment
# ---------------------------------------------------------------------------
HEADER_FILL = _solid(INK)
TINT_FILL = _solid(TINT)
ZEBRA_FILL = _solid(ZEBRA)
KPI_FILL = _solid(TINT)

THIN_BORDER = _box(GRID)
HEADER_BORDER = _box(INK, bottom="medium")
KPI_BORDER = _box(ACCENT)

CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")
RIGHT = Alignment(horizontal="right", vertical="center")
WRAP = Alignment(horizontal="left", vertical="top", wrap_text=True)

# Row highlight name → fill
HIGHLIGHT_FILLS = {
    "good": _solid(TINT),
    "caution": _solid(CAUTION),
    "alert": _solid(ALERT),
    "outlier": _solid(OUTLIER),
}

# Cell number formats by column type
NUMBER_FORMATS = {
    "number": "#,##0",
    "decimal": "#,##0.00",
    "ratio": "0.0000",
    "percent": '0.0"%"',
    "date": "yyyy-mm-dd",
}
NUMERIC_TYPES = ("number", "decimal", "ratio", "percent")
