"""Habit grid analysis: one HabitRecord per named row for a given day column."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from habitsheet.data.completion import cell_at, is_completed
from habitsheet.data.schemas import HabitRecord, HabitRow
from habitsheet.data.streaks import compute_stats, compute_streak

logger = logging.getLogger(__name__)


class MalformedInputError(ValueError):
    """The caller passed a structurally invalid grid or day index."""


def _validate(grid: object, today_index: object) -> None:
    if grid is None or isinstance(grid, str | bytes) or not isinstance(grid, Sequence):
        msg = f"grid must be a sequence of habit rows, got {type(grid).__name__}"
        raise MalformedInputError(msg)
    if isinstance(today_index, bool) or not isinstance(today_index, int):
        msg = f"today_index must be an int, got {type(today_index).__name__}"
        raise MalformedInputError(msg)
    if today_index < 0:
        msg = f"today_index must be non-negative, got {today_index}"
        raise MalformedInputError(msg)


def _normalize_name(raw: object) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def analyze(grid: Sequence[HabitRow], today_index: int) -> list[HabitRecord]:
    """Analyze every named habit row against the today column.

    Rows with blank names are skipped. Short rows and missing cells read as
    empty. Output order follows input order.

    Raises:
        MalformedInputError: grid is not a sequence, or today_index is not a
            non-negative int.
    """
    _validate(grid, today_index)

    records: list[HabitRecord] = []
    for row in grid:
        name = _normalize_name(getattr(row, "name", None))
        if not name:
            continue
        cells = getattr(row, "cells", None)
        if not isinstance(cells, Sequence) or isinstance(cells, str | bytes):
            cells = ()
        records.append(
            HabitRecord(
                name=name,
                completed_today=is_completed(cell_at(cells, today_index)),
                streak=compute_streak(cells, today_index),
                stats=compute_stats(cells, today_index),
            )
        )

    logger.debug("Analyzed %d habits at column %d", len(records), today_index)
    return records


def sort_by_streak(records: Iterable[HabitRecord]) -> list[HabitRecord]:
    """Display order: longest current streak first, ties keep input order."""
    return sorted(records, key=lambda r: r.streak, reverse=True)
