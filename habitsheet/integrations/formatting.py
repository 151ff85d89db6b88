"""Shared presentation helpers for the email and Slack renderers."""

from __future__ import annotations

import math
from datetime import date

PERFECT_COLORS = {
    "border": "#22c55e",
    "header_title": "#22c55e",
    "header_subtitle": "#16a34a",
    "date_text": "#16a34a",
    "section_title": "#22c55e",
    "pending_title": "#22c55e",
    "footer_text": "#16a34a",
}

DEFAULT_COLORS = {
    "border": "#000000",
    "header_title": "#1a1a1a",
    "header_subtitle": "#8e8e93",
    "date_text": "#495057",
    "section_title": "#1a1a1a",
    "pending_title": "#dc3545",
    "footer_text": "#8e8e93",
}


def percent(rate: float) -> int:
    """Whole percent, halves rounded up."""
    return math.floor(rate + 0.5)


def text_progress_bar(rate: float, width: int = 10) -> str:
    rate = min(max(rate, 0.0), 100.0)
    filled = percent(rate / 100 * width)
    return f"{'█' * filled}{'░' * (width - filled)} {percent(rate)}%"


def progress_color(rate: float) -> str:
    if rate >= 100:
        return "#22c55e"
    if rate >= 75:
        return "#84cc16"
    if rate >= 50:
        return "#f59e0b"
    if rate >= 25:
        return "#f97316"
    return "#ef4444"


def html_progress_bar(rate: float) -> str:
    width = percent(min(max(rate, 0.0), 100.0))
    return (
        '<div style="background-color: #f8f9fa; border-radius: 8px; height: 12px; '
        'overflow: hidden; margin: 8px 0;">'
        f'<div style="width: {width}%; height: 100%; background-color: {progress_color(rate)}; '
        'border-radius: 8px;"></div></div>'
    )


def color_scheme(perfect: bool) -> dict[str, str]:
    return dict(PERFECT_COLORS if perfect else DEFAULT_COLORS)


def format_date(day: date, style: str = "detailed") -> str:
    match style:
        case "detailed":
            return f"{day:%A}, {day:%B} {day.day}, {day.year}"
        case "short":
            return f"{day.day}/{day.month}/{day.year}"
        case "iso":
            return day.isoformat()
        case _:
            return str(day)


def truncate(text: str, limit: int = 50) -> str:
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)] + "..."


def motivation_message(perfect: bool, rate: float) -> tuple[str, str]:
    """(emoji, message) for the fallback block shown when there are no lessons."""
    if perfect:
        return "🎉", "Amazing! Every habit is done today. Keep it going!"
    if rate >= 80:
        return "💪", "Great work! Most habits are done. Finish the last few!"
    if rate >= 50:
        return "👍", "Not bad! More than half done. Keep pushing!"
    if rate > 0:
        return "🌱", "Good start! Every small step counts. Keep going!"
    return "🌅", "Not started yet today? No problem, tomorrow is a new chance!"


def streak_label(streak: int) -> str:
    if streak <= 0:
        return ""
    return f"{streak} day" if streak == 1 else f"{streak} days"
