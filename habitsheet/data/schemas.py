"""Habit analysis records, report summaries, and completion results."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypedDict

from habitsheet.data.completion import CellValue


class TrendDirection(StrEnum):
    """Direction of a habit's weekly completion rate over a period."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


@dataclass(frozen=True)
class HabitRow:
    """One tracked habit: its name cell and one cell per calendar day."""

    name: object
    cells: Sequence[CellValue] = ()


@dataclass(frozen=True)
class HabitStats:
    """Aggregate statistics over columns [0, today] of one habit row."""

    total_days: int = 0
    completed_days: int = 0
    completion_rate: float = 0.0  # 0-100
    longest_streak: int = 0
    current_streak: int = 0


@dataclass(frozen=True)
class HabitRecord:
    """Per-habit analysis output for a single 'today' column."""

    name: str
    completed_today: bool
    streak: int
    stats: HabitStats = field(default_factory=HabitStats)


class HabitSummary(TypedDict):
    """Day-level rollup over a list of HabitRecords."""

    total_habits: int
    completed_today: int
    pending_today: int
    completion_rate: float  # share of habits done today, 0-100
    average_streak: float
    longest_streak: int
    is_perfect_day: bool


class HabitPeriodStats(TypedDict):
    """One habit's stats across the days of a weekly/monthly report."""

    completed_days: int
    total_days: int
    completion_rate: float
    longest_streak: int
    current_streak: int


class HabitTrend(TypedDict):
    """Weekly completion rates and derived trend for one habit."""

    weekly_rates: list[float]
    direction: str  # TrendDirection value
    consistency: int  # 0-100


class Insights(TypedDict):
    """Achievements, concerns and recommendations for a daily report."""

    achievements: list[str]
    concerns: list[str]
    recommendations: list[str]
    motivational_message: str


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of marking a habit complete in the sheet."""

    success: bool
    message: str
    habit_name: str
    streak: int = 0
    cell: str | None = None  # A1 notation of the written cell
    already_completed: bool = False
