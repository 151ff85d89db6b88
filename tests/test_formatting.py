"""Tests for habitsheet.integrations.formatting."""

from __future__ import annotations

from datetime import date

from habitsheet.integrations.formatting import (
    color_scheme,
    format_date,
    html_progress_bar,
    motivation_message,
    percent,
    progress_color,
    streak_label,
    text_progress_bar,
    truncate,
)


class TestProgress:
    def test_percent_rounds_half_up(self) -> None:
        assert percent(62.5) == 63
        assert percent(66.67) == 67
        assert percent(0) == 0

    def test_text_bar(self) -> None:
        assert text_progress_bar(0) == "░░░░░░░░░░ 0%"
        assert text_progress_bar(100) == "██████████ 100%"
        assert text_progress_bar(66.67) == "███████░░░ 67%"

    def test_text_bar_clamps(self) -> None:
        assert text_progress_bar(150) == "██████████ 100%"
        assert text_progress_bar(-5) == "░░░░░░░░░░ 0%"

    def test_colors(self) -> None:
        assert progress_color(100) == "#22c55e"
        assert progress_color(80) == "#84cc16"
        assert progress_color(50) == "#f59e0b"
        assert progress_color(30) == "#f97316"
        assert progress_color(10) == "#ef4444"

    def test_html_bar_width(self) -> None:
        bar = html_progress_bar(40)
        assert "width: 40%" in bar
        assert "#f97316" in bar


class TestColorScheme:
    def test_perfect_is_green(self) -> None:
        assert color_scheme(True)["border"] == "#22c55e"
        assert color_scheme(False)["pending_title"] == "#dc3545"

    def test_returns_copy(self) -> None:
        colors = color_scheme(False)
        colors["border"] = "red"
        assert color_scheme(False)["border"] == "#000000"


class TestFormatDate:
    def test_styles(self) -> None:
        day = date(2026, 10, 5)
        assert format_date(day) == "Monday, October 5, 2026"
        assert format_date(day, "short") == "5/10/2026"
        assert format_date(day, "iso") == "2026-10-05"


class TestText:
    def test_truncate(self) -> None:
        assert truncate("short") == "short"
        assert truncate("a" * 30, 20) == "a" * 17 + "..."

    def test_streak_label(self) -> None:
        assert streak_label(0) == ""
        assert streak_label(1) == "1 day"
        assert streak_label(4) == "4 days"

    def test_motivation_bands(self) -> None:
        assert motivation_message(True, 100)[0] == "🎉"
        assert motivation_message(False, 85)[0] == "💪"
        assert motivation_message(False, 55)[0] == "👍"
        assert motivation_message(False, 10)[0] == "🌱"
        assert motivation_message(False, 0)[0] == "🌅"
