"""Slack Block Kit payloads for reports, slash-command replies and button results."""

from __future__ import annotations

import random
import re
from collections.abc import Sequence
from typing import Any

from habitsheet.core.registry import ephemeral
from habitsheet.data.lessons import Lesson, Phrase
from habitsheet.data.reports import DailyReport, PeriodReport, generate_insights, insight_groups
from habitsheet.data.schemas import CompletionResult, HabitRecord
from habitsheet.integrations.formatting import (
    format_date,
    motivation_message,
    percent,
    text_progress_bar,
    truncate,
)

ACTION_PREFIX = "complete_habit_"

ENCOURAGEMENTS = ("Awesome!", "Well done!", "Excellent!", "Keep it up!", "Great job!")

Block = dict[str, Any]


def habit_action_id(name: str, index: int) -> str:
    """Button action id; the index keeps ids unique when names normalize alike."""
    snake = re.sub(r"\s+", "_", name).lower()
    return f"{ACTION_PREFIX}{snake}_{index}"


def escape_mrkdwn(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _section(text: str) -> Block:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _divider() -> Block:
    return {"type": "divider"}


def _completed_lines(records: Sequence[HabitRecord], short: bool = False) -> str:
    lines = []
    for record in records:
        if record.streak > 0:
            suffix = f"{record.streak}d" if short else f"{record.streak} days"
            lines.append(f"{escape_mrkdwn(record.name)} _({suffix})_")
        else:
            lines.append(escape_mrkdwn(record.name))
    return "\n".join(lines)


def _pending_blocks(report: DailyReport, max_buttons: int, title: str) -> list[Block]:
    pending = report.pending
    if not pending:
        return []
    blocks = [_section(f"*{title}:*\n" + "\n".join(escape_mrkdwn(r.name) for r in pending))]
    buttons = [
        {
            "type": "button",
            "text": {"type": "plain_text", "text": f"Complete {truncate(r.name, 20)}"},
            "value": r.name,
            "action_id": habit_action_id(r.name, i),
        }
        for i, r in enumerate(pending[:max_buttons])
    ]
    if buttons:
        blocks.append({"type": "actions", "elements": buttons})
    return blocks


def motivation_text(report: DailyReport, lessons: Sequence[Lesson] = ()) -> str:
    if lessons:
        return "*Today's lessons:*\n" + "\n".join(f"• {escape_mrkdwn(lesson.text)}" for lesson in lessons)
    _, message = motivation_message(report.summary["is_perfect_day"], report.summary["completion_rate"])
    return message


def insights_text(report: DailyReport) -> str:
    parts = []
    for title, items in insight_groups(generate_insights(report)):
        parts.append(f"*{title}:*\n" + "\n".join(f"• {escape_mrkdwn(item)}" for item in items))
    return "\n\n".join(parts)


def phrases_text(phrases: Sequence[Phrase]) -> str:
    if not phrases:
        return ""
    lines = (f"• *{escape_mrkdwn(p.english)}* : {escape_mrkdwn(p.translation)}" for p in phrases)
    return "*Phrases of the day:*\n" + "\n".join(lines)


def build_daily_message(
    report: DailyReport,
    channel: str = "",
    lessons: Sequence[Lesson] = (),
    phrases: Sequence[Phrase] = (),
    max_buttons: int = 5,
) -> dict[str, Any]:
    """Scheduled daily report for the incoming webhook."""
    summary = report.summary
    rate = summary["completion_rate"]
    title = "Habit Tracker" + (" - Perfect Day!" if summary["is_perfect_day"] else "")

    blocks: list[Block] = [
        {"type": "header", "text": {"type": "plain_text", "text": title}},
        _section(
            f"*{format_date(report.day)}*\n\n"
            f"*Progress:* {summary['completed_today']}/{summary['total_habits']} habits ({percent(rate)}%)\n"
            f"`{text_progress_bar(rate)}`"
        ),
        _divider(),
    ]
    completed = report.completed
    if completed:
        blocks.append(_section(f"*Completed ({len(completed)}):*\n{_completed_lines(completed)}"))
    blocks.extend(_pending_blocks(report, max_buttons, f"Pending ({len(report.pending)})"))
    insights = insights_text(report)
    if insights:
        blocks.extend([_divider(), _section(insights)])

    blocks.extend([_divider(), _section(motivation_text(report, lessons))])
    if phrases:
        blocks.extend([_divider(), _section(phrases_text(phrases))])

    message: dict[str, Any] = {
        "text": f"Habit report: {summary['completed_today']}/{summary['total_habits']} done",
        "blocks": blocks,
        "unfurl_links": False,
        "unfurl_media": False,
    }
    if channel:
        message["channel"] = channel
    return message


def build_report_blocks(report: DailyReport, max_buttons: int = 5) -> list[Block]:
    """Compact interactive report for /habit-report."""
    summary = report.summary
    rate = summary["completion_rate"]
    blocks: list[Block] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": f"Habit report - {format_date(report.day, 'short')}"},
        },
        _section(
            f"*Progress:* {summary['completed_today']}/{summary['total_habits']} ({percent(rate)}%)\n"
            f"`{text_progress_bar(rate)}`"
        ),
    ]
    completed = report.completed
    if completed:
        blocks.append(_section(f"*Completed:*\n{_completed_lines(completed, short=True)}"))
    blocks.extend(_pending_blocks(report, max_buttons, "Pending"))
    return blocks


def build_status_text(report: DailyReport) -> str:
    summary = report.summary
    rate = summary["completion_rate"]
    return (
        "*Today's habit status:*\n"
        f"• Completed: {summary['completed_today']}/{summary['total_habits']} habits\n"
        f"• Progress: {percent(rate)}%\n"
        f"• Progress bar: `{text_progress_bar(rate)}`"
    )


def build_period_text(report: PeriodReport, label: str) -> str:
    """Weekly/monthly rollup for ``/habit-report week|month``."""
    if not report.days:
        return f"*{label} report:* no tracked days yet."
    lines = [
        f"*{label} report ({format_date(report.start, 'short')} - {format_date(report.end, 'short')}):*",
        f"• Days tracked: {len(report.days)}",
        f"• Perfect days: {report.perfect_days}",
        f"• Average completion: {percent(report.average_completion)}%",
    ]
    if report.best_day is not None and report.worst_day is not None:
        lines.append(
            f"• Best day: {format_date(report.best_day, 'short')}, "
            f"worst day: {format_date(report.worst_day, 'short')}"
        )
    lines.append("")
    for name in report.habit_names:
        stat = report.habit_stats[name]
        trend = report.trends[name]
        lines.append(
            f"{escape_mrkdwn(name)}: {stat['completed_days']}/{stat['total_days']} "
            f"({percent(stat['completion_rate'])}%), "
            f"best streak {stat['longest_streak']}, {trend['direction']}"
        )
    return "\n".join(lines)


def build_help_text() -> str:
    return (
        "*Habit Tracker help:*\n\n"
        "*Commands:*\n"
        "• `/habit-report` - today's report with completion buttons\n"
        "• `/habit-report week` or `/habit-report month` - period summary\n"
        "• `/habit-status` - quick status\n"
        "• `/habit-done <habit>` - mark a habit complete\n"
        "• `/habit-help` - show this help\n\n"
        "*Features:*\n"
        "• Automatic daily reports\n"
        "• Complete habits with buttons\n"
        "• Streak tracking"
    )


def build_completion_response(
    result: CompletionResult,
    user_id: str = "",
    rng: random.Random | None = None,
) -> dict[str, Any]:
    if not result.success:
        return ephemeral(f'Could not complete "{result.habit_name}": {result.message}')
    if result.already_completed:
        return ephemeral(f'"{result.habit_name}" is already complete today.')

    encouragement = (rng or random).choice(ENCOURAGEMENTS)
    who = f"<@{user_id}>" if user_id else "You"
    streak = f" (Streak: {result.streak} days!)" if result.streak > 0 else ""
    return {
        "response_type": "in_channel",
        "text": f'{encouragement} {who} completed "*{escape_mrkdwn(result.habit_name)}*"{streak}',
    }
