"""Completion semantics for a single habit-grid cell.

Every computation (today's status, streaks, stats) goes through
``is_completed`` so the grid has exactly one notion of "done".
"""

from __future__ import annotations

from collections.abc import Sequence

CellValue = bool | int | float | str | None

COMPLETION_MARKS = frozenset({"true", "yes", "x", "✓"})


def is_completed(value: object) -> bool:
    """Return True if the cell counts as done. Never raises."""
    match value:
        case bool():
            return value
        case int() | float():
            return value > 0
        case str():
            return value.strip().lower() in COMPLETION_MARKS
        case _:
            return False


def is_tracked(value: object) -> bool:
    """Return True for a non-empty cell (a day that has been recorded)."""
    return value is not None and not (isinstance(value, str) and value == "")


def cell_at(row: Sequence[CellValue], index: int) -> CellValue:
    """Cell at index, or None when the index falls outside the row."""
    if 0 <= index < len(row):
        return row[index]
    return None
