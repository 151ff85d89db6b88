"""Streak and completion statistics for one habit row."""

from __future__ import annotations

from collections.abc import Sequence

from habitsheet.data.completion import CellValue, cell_at, is_completed, is_tracked
from habitsheet.data.schemas import HabitStats


def compute_streak(row: Sequence[CellValue], today_index: int) -> int:
    """Count consecutive completed days ending at (and including) today.

    A pending today always yields 0, however long yesterday's run was.
    """
    if not is_completed(cell_at(row, today_index)):
        return 0
    streak = 0
    col = today_index
    while col >= 0 and is_completed(row[col]):
        streak += 1
        col -= 1
    return streak


def compute_longest_streak(row: Sequence[CellValue], today_index: int) -> int:
    """Longest run of completed days within columns [0, today_index]."""
    longest = 0
    running = 0
    for col in range(today_index + 1):
        if is_completed(cell_at(row, col)):
            running += 1
            longest = max(longest, running)
        else:
            running = 0
    return longest


def compute_stats(row: Sequence[CellValue], today_index: int) -> HabitStats:
    """Tracked/completed counts, rate and streaks up to today.

    Blank cells (days not yet recorded) are not counted as tracked.
    """
    total_days = 0
    completed_days = 0
    for col in range(today_index + 1):
        value = cell_at(row, col)
        if not is_tracked(value):
            continue
        total_days += 1
        if is_completed(value):
            completed_days += 1

    rate = completed_days / total_days * 100 if total_days > 0 else 0.0
    return HabitStats(
        total_days=total_days,
        completed_days=completed_days,
        completion_rate=rate,
        longest_streak=compute_longest_streak(row, today_index),
        current_streak=compute_streak(row, today_index),
    )
