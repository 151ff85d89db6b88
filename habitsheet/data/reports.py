"""Report aggregation over analyzer output: daily, weekly and monthly views."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from habitsheet.data.analyzer import analyze, sort_by_streak
from habitsheet.data.schemas import (
    HabitPeriodStats,
    HabitRecord,
    HabitSummary,
    HabitTrend,
    Insights,
    TrendDirection,
)
from habitsheet.data.sheets import SheetLayoutError, SheetSnapshot

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 10.0
HIGH_STREAK_DAYS = 7


def is_perfect_day(records: Iterable[HabitRecord]) -> bool:
    """Every habit with at least one tracked day is done today, and there is one."""
    tracked = [r for r in records if r.stats.total_days > 0]
    return bool(tracked) and all(r.completed_today for r in tracked)


def summarize(records: Sequence[HabitRecord]) -> HabitSummary:
    total = len(records)
    completed = sum(1 for r in records if r.completed_today)
    streaks = [r.streak for r in records]
    return HabitSummary(
        total_habits=total,
        completed_today=completed,
        pending_today=total - completed,
        completion_rate=completed / total * 100 if total else 0.0,
        average_streak=sum(streaks) / total if total else 0.0,
        longest_streak=max(streaks, default=0),
        is_perfect_day=is_perfect_day(records),
    )


@dataclass(frozen=True)
class DailyReport:
    """Analysis of one day column plus its summary."""

    day: date
    records: tuple[HabitRecord, ...]
    summary: HabitSummary

    @property
    def completed(self) -> list[HabitRecord]:
        return sort_by_streak(r for r in self.records if r.completed_today)

    @property
    def pending(self) -> list[HabitRecord]:
        return [r for r in self.records if not r.completed_today]


def build_daily_report(snapshot: SheetSnapshot, day: date) -> DailyReport:
    """Analyze the column for ``day``.

    Raises:
        SheetLayoutError: the header has no column for that day of month.
    """
    col = snapshot.column_for_day(day.day)
    if col is None:
        msg = f"Column for day {day.day} not found"
        raise SheetLayoutError(msg)
    records = analyze(snapshot.rows, col)
    return DailyReport(day=day, records=tuple(records), summary=summarize(records))


@dataclass(frozen=True)
class PeriodReport:
    """Day-by-day results for a week or month with per-habit rollups."""

    start: date | None
    end: date | None
    days: tuple[DailyReport, ...]
    habit_names: tuple[str, ...]
    perfect_days: int = 0
    average_completion: float = 0.0
    best_day: date | None = None
    worst_day: date | None = None
    habit_stats: dict[str, HabitPeriodStats] = field(default_factory=dict)
    trends: dict[str, HabitTrend] = field(default_factory=dict)


def week_days(day: date) -> list[date]:
    """Days of the Sunday-start week containing ``day``, within its month, up to ``day``."""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    days = (start + timedelta(days=i) for i in range(7))
    return [d for d in days if d.month == day.month and d <= day]


def month_days(day: date) -> list[date]:
    """First of the month through ``day``."""
    return [day.replace(day=n) for n in range(1, day.day + 1)]


def consistency_score(rates: Sequence[float]) -> int:
    """100 minus twice the population std-dev of the rates, floored at 0."""
    if len(rates) < 2:
        return 100
    mean = sum(rates) / len(rates)
    variance = sum((r - mean) ** 2 for r in rates) / len(rates)
    return round(max(0.0, 100 - math.sqrt(variance) * 2))


def _direction(rates: Sequence[float]) -> TrendDirection:
    if len(rates) < 2:
        return TrendDirection.STABLE
    half = len(rates) // 2
    first, second = rates[:half], rates[half:]
    difference = sum(second) / len(second) - sum(first) / len(first)
    if difference > TREND_THRESHOLD:
        return TrendDirection.IMPROVING
    if difference < -TREND_THRESHOLD:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def compute_trends(daily: Sequence[DailyReport], names: Iterable[str]) -> dict[str, HabitTrend]:
    """Weekly completion rates per habit in consecutive 7-day chunks."""
    weeks = [daily[i : i + 7] for i in range(0, len(daily), 7)]
    trends: dict[str, HabitTrend] = {}
    for name in names:
        rates = []
        for week in weeks:
            done = sum(1 for d in week for r in d.records if r.name == name and r.completed_today)
            rates.append(done / len(week) * 100)
        trends[name] = HabitTrend(
            weekly_rates=rates,
            direction=_direction(rates).value,
            consistency=consistency_score(rates),
        )
    return trends


def build_period_report(snapshot: SheetSnapshot, days: Sequence[date]) -> PeriodReport:
    """Analyze every listed day that has a column in the sheet."""
    daily: list[DailyReport] = []
    for day in days:
        col = snapshot.column_for_day(day.day)
        if col is None:
            logger.debug("No column for day %d, skipping", day.day)
            continue
        records = analyze(snapshot.rows, col)
        daily.append(DailyReport(day=day, records=tuple(records), summary=summarize(records)))

    names: list[str] = []
    for report in daily:
        for record in report.records:
            if record.name not in names:
                names.append(record.name)

    habit_stats: dict[str, HabitPeriodStats] = {
        name: HabitPeriodStats(
            completed_days=0, total_days=0, completion_rate=0.0, longest_streak=0, current_streak=0
        )
        for name in names
    }
    best: DailyReport | None = None
    worst: DailyReport | None = None
    for report in daily:
        rate = report.summary["completion_rate"]
        if best is None or rate > best.summary["completion_rate"]:
            best = report
        if worst is None or rate < worst.summary["completion_rate"]:
            worst = report
        for record in report.records:
            stat = habit_stats[record.name]
            stat["total_days"] += 1
            if record.completed_today:
                stat["completed_days"] += 1
            stat["longest_streak"] = max(stat["longest_streak"], record.streak)
            stat["current_streak"] = record.streak

    for stat in habit_stats.values():
        if stat["total_days"]:
            stat["completion_rate"] = stat["completed_days"] / stat["total_days"] * 100

    return PeriodReport(
        start=days[0] if days else None,
        end=days[-1] if days else None,
        days=tuple(daily),
        habit_names=tuple(names),
        perfect_days=sum(1 for d in daily if d.summary["is_perfect_day"]),
        average_completion=(
            sum(d.summary["completion_rate"] for d in daily) / len(daily) if daily else 0.0
        ),
        best_day=best.day if best else None,
        worst_day=worst.day if worst else None,
        habit_stats=habit_stats,
        trends=compute_trends(daily, names),
    )


def generate_insights(report: DailyReport) -> Insights:
    summary = report.summary
    rate = summary["completion_rate"]
    achievements: list[str] = []
    concerns: list[str] = []
    recommendations: list[str] = []

    if rate >= 80:
        achievements.append("Excellent completion rate today!")
    if summary["is_perfect_day"]:
        achievements.append("Perfect day achieved!")
    high_streaks = [r for r in report.records if r.streak >= HIGH_STREAK_DAYS]
    if high_streaks:
        achievements.append(f"{len(high_streaks)} habit(s) with {HIGH_STREAK_DAYS}+ day streak!")

    if rate < 50:
        concerns.append("Low completion rate today")
    zero_streaks = [r for r in report.records if r.streak == 0]
    if zero_streaks:
        concerns.append(f"{len(zero_streaks)} habit(s) need attention")

    if summary["pending_today"] > 0:
        recommendations.append(f"{summary['pending_today']} habit(s) still pending - you can do it!")
    if zero_streaks:
        recommendations.append(f'Start with "{zero_streaks[0].name}" to rebuild momentum')

    if rate >= 90:
        message = "You're absolutely crushing it today! Keep up the amazing work!"
    elif rate >= 70:
        message = "Great progress today! You're building strong habits!"
    elif rate >= 50:
        message = "Every step counts! You're making progress!"
    else:
        message = "Tomorrow is a fresh start! You've got this!"

    return Insights(
        achievements=achievements,
        concerns=concerns,
        recommendations=recommendations,
        motivational_message=message,
    )


def insight_groups(insights: Insights) -> list[tuple[str, list[str]]]:
    """Titled, non-empty insight lists in display order."""
    groups = [
        ("Highlights", insights["achievements"]),
        ("Needs attention", insights["concerns"]),
        ("Next steps", insights["recommendations"]),
    ]
    return [(title, items) for title, items in groups if items]
