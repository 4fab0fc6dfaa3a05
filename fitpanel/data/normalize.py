"""
Column-name normalisation, string trimming, and type coercion.
"""
from __future__ import annotations

import re

import numpy as np
import pandas as pd

from fitpanel.data.datetimes import squish_series


# ---------------------------------------------------------------------------
# Column names
# ---------------------------------------------------------------------------

_CAMEL_LOWER_UPPER_RE = re.compile(r"([a-z0-9])([A-Z])")
_CAMEL_ACRONYM_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_NON_ALNUM_RE = re.compile(r"[^0-9a-zA-Z]+")


def normalize_column_name(name: str) -> str:
    """Snake-case a raw header: ``TotalSteps`` → ``total_steps``, ``METs`` → ``me_ts``."""
    s = str(name).strip()
    s = _CAMEL_LOWER_UPPER_RE.sub(r"\1_\2", s)
    s = _CAMEL_ACRONYM_RE.sub(r"\1_\2", s)
    s = _NON_ALNUM_RE.sub("_", s.lower())
    s = re.sub(r"_+", "_", s).strip("_")
    return s or "x"


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename every column to its snake-case key; repeated keys get ``_2``, ``_3``."""
    seen: dict[str, int] = {}
    names = []
    for col in df.columns:
        key = normalize_column_name(col)
        if key in seen:
            seen[key] += 1
            key = f"{key}_{seen[key]}"
        else:
            seen[key] = 1
        names.append(key)
    df = df.copy()
    df.columns = names
    return df


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------

def trim_strings(df: pd.DataFrame) -> pd.DataFrame:
    """Strip line breaks and collapse whitespace in every text column (nulls kept)."""
    df = df.copy()
    for col in df.columns:
        if df[col].dtype == object or pd.api.types.is_string_dtype(df[col]):
            missing = df[col].isna()
            df[col] = squish_series(df[col]).astype(object).where(~missing, None)
    return df


def coerce_id(values: pd.Series) -> pd.Series:
    """Identifiers and other opaque tokens stay strings; empty → <NA>."""
    text = values.astype("string").str.strip()
    return text.mask((text == "").fillna(False))


# ---------------------------------------------------------------------------
# Numeric / boolean coercion
# ---------------------------------------------------------------------------

def coerce_numeric(values: pd.Series) -> tuple[pd.Series, pd.Series]:
    """Convert text to float.

    Returns (numbers, failed) where ``failed`` marks non-empty cells that
    are not numeric. Empty cells become NaN without counting as failures.
    """
    text = values.astype("string").str.strip()
    blank = (text.isna() | (text == "")).fillna(True).to_numpy(dtype=bool)
    raw = text.astype(object)
    raw[blank] = np.nan
    numbers = pd.to_numeric(raw, errors="coerce").astype(float)
    failed = pd.Series(~blank & numbers.isna().to_numpy(), index=values.index)
    return numbers, failed


_TRUE = {"true", "t", "yes", "y", "1"}
_FALSE = {"false", "f", "no", "n", "0"}


def coerce_boolean(values: pd.Series) -> tuple[pd.Series, pd.Series]:
    """Convert text flags to nullable booleans; returns (flags, failed)."""
    text = values.astype("string").str.strip().str.lower()
    blank = (text.isna() | (text == "")).fillna(True).to_numpy(dtype=bool)
    flags = pd.Series(pd.NA, index=values.index, dtype="boolean")
    flags[text.isin(_TRUE).to_numpy(dtype=bool)] = True
    flags[text.isin(_FALSE).to_numpy(dtype=bool)] = False
    failed = pd.Series(~blank & flags.isna().to_numpy(), index=values.index)
    return flags, failed


def row_flags(index: pd.Index) -> pd.Series:
    """All-False row mask aligned to ``index``."""
    return pd.Series(np.zeros(len(index), dtype=bool), index=index)


def empty_frame(spec, extra: dict[str, str] | None = None) -> pd.DataFrame:
    """Zero-row frame carrying the canonical columns and dtypes of ``spec``."""
    cols: dict[str, pd.Series] = {
        "id": pd.Series(dtype="string"),
        spec.timestamp: pd.Series(dtype="datetime64[ns, UTC]"),
    }
    for col in spec.numeric:
        cols[col] = pd.Series(dtype=float)
    for col in spec.booleans:
        cols[col] = pd.Series(dtype="boolean")
    for col in spec.strings:
        cols[col] = pd.Series(dtype="string")
    for col, dtype in (extra or {}).items():
        cols[col] = pd.Series(dtype=dtype)
    return pd.DataFrame(cols)
