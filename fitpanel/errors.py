"""
Error taxonomy for the cleaning and aggregation pipeline.

Row-level problems (ParseFailure, ValidationViolation) are recovered locally
during a run: the row is dropped and counted. Only a missing mandatory table
aborts a run.
"""
from __future__ import annotations


class FitPanelError(Exception):
    """Base class for pipeline errors."""


class ParseFailure(FitPanelError, ValueError):
    """A timestamp or numeric value could not be parsed."""

    def __init__(self, value, message: str | None = None) -> None:
        self.value = value
        super().__init__(message or f"Could not parse {value!r}")


class ValidationViolation(FitPanelError, ValueError):
    """A cleaned table holds values outside its physical bounds."""

    def __init__(self, table: str, rule: str, rows: int) -> None:
        self.table = table
        self.rule = rule
        self.rows = rows
        super().__init__(f"{table}: {rows:,} row(s) violate '{rule}'")


class MissingTable(FitPanelError, LookupError):
    """An expected table is absent."""

    def __init__(self, table: str, detail: str = "") -> None:
        self.table = table
        msg = f"Required table '{table}' is missing"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
