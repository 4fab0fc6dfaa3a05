"""
Datetime normalisation — heterogeneous timestamp strings → UTC instants.

Patterns are tried in the order given by ``DATETIME_FORMATS``; the first
pattern that parses a value wins.
"""
from __future__ import annotations

import re
from datetime import datetime

import numpy as np
import pandas as pd

from fitpanel.config import DATETIME_FORMATS
from fitpanel.errors import ParseFailure

_LINE_BREAKS_RE = re.compile(r"[\r\n]")
_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Whitespace cleanup
# ---------------------------------------------------------------------------

def squish(text: str) -> str:
    """Strip embedded line breaks, collapse whitespace runs, trim."""
    text = _LINE_BREAKS_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def squish_series(values: pd.Series) -> pd.Series:
    """Vectorised ``squish``; nulls become empty strings."""
    text = values.astype("string").fillna("")
    return (
        text.str.replace(r"[\r\n]", "", regex=True)
        .str.replace(r"\s+", " ", regex=True)
        .str.strip()
    )


# ---------------------------------------------------------------------------
# Scalar parsing
# ---------------------------------------------------------------------------

def first_matching_format(text: str, formats=DATETIME_FORMATS) -> str | None:
    """Return the first pattern that parses ``text``, or None."""
    cleaned = squish(text)
    for fmt in formats:
        try:
            datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
        return fmt
    return None


def parse_instant(text, formats=DATETIME_FORMATS) -> pd.Timestamp:
    """Parse one timestamp string into a UTC-anchored ``pd.Timestamp``.

    Raises ParseFailure when no pattern matches.
    """
    if text is None or (isinstance(text, float) and np.isnan(text)):
        raise ParseFailure(text, "Empty timestamp")
    cleaned = squish(str(text))
    fmt = first_matching_format(cleaned, formats)
    if fmt is None:
        raise ParseFailure(text, f"No known datetime pattern matches {text!r}")
    return pd.Timestamp(datetime.strptime(cleaned, fmt), tz="UTC")


# ---------------------------------------------------------------------------
# Vectorised parsing
# ---------------------------------------------------------------------------

def normalize_datetimes(values: pd.Series, formats=DATETIME_FORMATS) -> pd.Series:
    """Parse a column of timestamp strings; unparseable values become NaT.

    Each pattern only sees the rows no earlier pattern could parse, which
    keeps the first-match-wins order of ``parse_instant``.
    """
    text = squish_series(values)
    result = pd.Series(pd.NaT, index=text.index, dtype="datetime64[ns]")
    has_text = (text != "").to_numpy(dtype=bool)

    for fmt in formats:
        pending = result.isna().to_numpy() & has_text
        if not pending.any():
            break
        parsed = pd.to_datetime(text[pending].astype(object), format=fmt, errors="coerce")
        result.loc[pending] = parsed.astype("datetime64[ns]")

    return result.dt.tz_localize("UTC")
