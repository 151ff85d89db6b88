"""Tests for habitsheet.data.reports: summaries, periods, trends, insights."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from habitsheet.data.reports import (
    DailyReport,
    build_daily_report,
    build_period_report,
    compute_trends,
    consistency_score,
    generate_insights,
    insight_groups,
    is_perfect_day,
    month_days,
    summarize,
    week_days,
)
from habitsheet.data.schemas import HabitRecord, HabitRow, HabitStats
from habitsheet.data.sheets import SheetLayoutError, SheetSnapshot


def _snapshot(rows: dict[str, list[Any]], days: int = 31) -> SheetSnapshot:
    return SheetSnapshot(
        header=tuple(range(1, days + 1)),
        rows=tuple(HabitRow(name, tuple(cells)) for name, cells in rows.items()),
    )


def _record(name: str, done: bool, streak: int = 0, tracked: int = 1) -> HabitRecord:
    return HabitRecord(name, done, streak, HabitStats(total_days=tracked, completed_days=int(done)))


def _report(records: list[HabitRecord]) -> DailyReport:
    return DailyReport(day=date(2026, 10, 5), records=tuple(records), summary=summarize(records))


# ---------------------------------------------------------------------------
# summarize / is_perfect_day
# ---------------------------------------------------------------------------


class TestSummarize:
    def test_counts_and_rates(self) -> None:
        summary = summarize([_record("a", True, 3), _record("b", True, 1), _record("c", False)])
        assert summary["total_habits"] == 3
        assert summary["completed_today"] == 2
        assert summary["pending_today"] == 1
        assert round(summary["completion_rate"], 2) == 66.67
        assert round(summary["average_streak"], 2) == 1.33
        assert summary["longest_streak"] == 3
        assert summary["is_perfect_day"] is False

    def test_empty(self) -> None:
        summary = summarize([])
        assert summary["completion_rate"] == 0.0
        assert summary["average_streak"] == 0.0
        assert summary["longest_streak"] == 0
        assert summary["is_perfect_day"] is False


class TestIsPerfectDay:
    def test_all_tracked_done(self) -> None:
        assert is_perfect_day([_record("a", True), _record("b", True)])

    def test_untracked_habits_ignored(self) -> None:
        assert is_perfect_day([_record("a", True), _record("new", False, tracked=0)])

    def test_one_pending(self) -> None:
        assert not is_perfect_day([_record("a", True), _record("b", False)])

    def test_nothing_tracked(self) -> None:
        assert not is_perfect_day([])
        assert not is_perfect_day([_record("new", False, tracked=0)])


# ---------------------------------------------------------------------------
# Daily report
# ---------------------------------------------------------------------------


class TestBuildDailyReport:
    def test_analyzes_day_column(self) -> None:
        snapshot = _snapshot({"Read": [True, True, True], "Run": [True, False, None], "": [True]})
        report = build_daily_report(snapshot, date(2026, 10, 3))
        assert [r.name for r in report.records] == ["Read", "Run"]
        assert report.summary["completed_today"] == 1
        assert [r.name for r in report.completed] == ["Read"]
        assert [r.name for r in report.pending] == ["Run"]

    def test_completed_sorted_by_streak(self) -> None:
        snapshot = _snapshot({"Short": [False, True], "Long": [True, True]})
        report = build_daily_report(snapshot, date(2026, 10, 2))
        assert [r.name for r in report.completed] == ["Long", "Short"]

    def test_missing_day_column(self) -> None:
        snapshot = _snapshot({"Read": [True]}, days=3)
        with pytest.raises(SheetLayoutError, match="day 9"):
            build_daily_report(snapshot, date(2026, 10, 9))


# ---------------------------------------------------------------------------
# Period windows
# ---------------------------------------------------------------------------


class TestPeriodDays:
    def test_week_starts_sunday(self) -> None:
        # 2026-10-14 is a Wednesday
        assert week_days(date(2026, 10, 14)) == [date(2026, 10, d) for d in (11, 12, 13, 14)]

    def test_week_clipped_to_month(self) -> None:
        assert week_days(date(2026, 10, 2)) == [date(2026, 10, 1), date(2026, 10, 2)]

    def test_sunday_is_first_day(self) -> None:
        assert week_days(date(2026, 10, 4)) == [date(2026, 10, 4)]

    def test_month_to_date(self) -> None:
        assert month_days(date(2026, 10, 3)) == [date(2026, 10, 1), date(2026, 10, 2), date(2026, 10, 3)]


# ---------------------------------------------------------------------------
# Trends
# ---------------------------------------------------------------------------


class TestConsistencyScore:
    def test_single_week(self) -> None:
        assert consistency_score([40.0]) == 100
        assert consistency_score([]) == 100

    def test_steady(self) -> None:
        assert consistency_score([50.0, 50.0]) == 100

    def test_spread(self) -> None:
        assert consistency_score([60.0, 40.0]) == 80
        assert consistency_score([100.0, 0.0]) == 0


class TestPeriodReport:
    def _two_weeks(self) -> SheetSnapshot:
        return _snapshot(
            {
                "Late": [False] * 7 + [True] * 7,
                "Early": [True] * 7 + [False] * 7,
                "Steady": [True, False, True, False, True, False, True] * 2,
            }
        )

    def test_trend_directions(self) -> None:
        days = [date(2026, 10, d) for d in range(1, 15)]
        report = build_period_report(self._two_weeks(), days)
        assert report.trends["Late"]["weekly_rates"] == [0.0, 100.0]
        assert report.trends["Late"]["direction"] == "improving"
        assert report.trends["Late"]["consistency"] == 0
        assert report.trends["Early"]["direction"] == "declining"
        assert report.trends["Steady"]["direction"] == "stable"

    def test_rollups(self) -> None:
        days = [date(2026, 10, d) for d in range(1, 15)]
        report = build_period_report(self._two_weeks(), days)
        assert report.start == date(2026, 10, 1)
        assert report.end == date(2026, 10, 14)
        assert len(report.days) == 14
        assert report.habit_names == ("Late", "Early", "Steady")

        late = report.habit_stats["Late"]
        assert late["total_days"] == 14
        assert late["completed_days"] == 7
        assert late["completion_rate"] == 50.0
        assert late["longest_streak"] == 7
        assert late["current_streak"] == 7
        assert report.habit_stats["Early"]["current_streak"] == 0

    def test_best_worst_and_perfect_days(self) -> None:
        snapshot = _snapshot({"A": [True, False, True], "B": [True, False, False]})
        report = build_period_report(snapshot, [date(2026, 10, d) for d in (1, 2, 3)])
        assert report.perfect_days == 1
        assert report.best_day == date(2026, 10, 1)
        assert report.worst_day == date(2026, 10, 2)
        assert report.average_completion == pytest.approx(50.0)

    def test_days_without_column_are_skipped(self) -> None:
        snapshot = _snapshot({"A": [True, True]}, days=2)
        report = build_period_report(snapshot, [date(2026, 10, d) for d in (1, 2, 3)])
        assert [d.day.day for d in report.days] == [1, 2]

    def test_empty_period(self) -> None:
        report = build_period_report(_snapshot({"A": []}), [])
        assert report.days == ()
        assert report.start is None
        assert report.average_completion == 0.0
        assert report.best_day is None

    def test_compute_trends_partial_week(self) -> None:
        snapshot = _snapshot({"A": [True] * 9})
        daily = build_period_report(snapshot, [date(2026, 10, d) for d in range(1, 10)]).days
        trends = compute_trends(daily, ["A"])
        assert trends["A"]["weekly_rates"] == [100.0, 100.0]


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


class TestGenerateInsights:
    def test_perfect_day(self) -> None:
        insights = generate_insights(_report([_record("a", True, 8), _record("b", True, 2)]))
        assert "Excellent completion rate today!" in insights["achievements"]
        assert "Perfect day achieved!" in insights["achievements"]
        assert "1 habit(s) with 7+ day streak!" in insights["achievements"]
        assert insights["concerns"] == []
        assert insights["recommendations"] == []
        assert insights["motivational_message"].startswith("You're absolutely crushing it")

    def test_struggling_day(self) -> None:
        insights = generate_insights(_report([_record("a", True, 1), _record("Stretch", False), _record("c", False)]))
        assert "Low completion rate today" in insights["concerns"]
        assert "2 habit(s) need attention" in insights["concerns"]
        assert "2 habit(s) still pending - you can do it!" in insights["recommendations"]
        assert 'Start with "Stretch" to rebuild momentum' in insights["recommendations"]
        assert insights["motivational_message"].startswith("Tomorrow is a fresh start")

    @pytest.mark.parametrize(
        ("done", "total", "prefix"),
        [(9, 10, "You're absolutely"), (7, 10, "Great progress"), (5, 10, "Every step counts")],
    )
    def test_message_bands(self, done: int, total: int, prefix: str) -> None:
        records = [_record(str(i), i < done, 1 if i < done else 0) for i in range(total)]
        assert generate_insights(_report(records))["motivational_message"].startswith(prefix)

    def test_groups_skip_empty_lists(self) -> None:
        insights = generate_insights(_report([_record("a", True, 8), _record("b", True, 2)]))
        groups = insight_groups(insights)
        assert [title for title, _ in groups] == ["Highlights"]
        assert groups[0][1] == insights["achievements"]
