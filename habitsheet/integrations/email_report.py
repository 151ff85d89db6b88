"""Email rendering for the daily habit report (HTML and plain text)."""

from __future__ import annotations

from collections.abc import Sequence
from html import escape

from habitsheet.data.lessons import Lesson, Phrase
from habitsheet.data.reports import DailyReport, generate_insights, insight_groups
from habitsheet.data.schemas import HabitRecord
from habitsheet.integrations.formatting import (
    color_scheme,
    format_date,
    html_progress_bar,
    motivation_message,
    percent,
    streak_label,
    text_progress_bar,
)

FONT_STACK = "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif"


def build_subject(report: DailyReport) -> str:
    subject = f"Habit Report {format_date(report.day, 'short')}"
    if report.summary["is_perfect_day"]:
        subject += " - Perfect Day"
    return subject


def _habit_section(records: Sequence[HabitRecord], title: str, title_color: str) -> str:
    heading = f'<h3 style="margin: 0 0 12px; font-size: 16px; font-weight: 600; color: {title_color};">'
    if not records:
        return (
            f'<div style="margin-bottom: 24px;">{heading}{title}</h3>'
            '<p style="margin: 0; font-size: 14px; color: #8e8e93; font-style: italic;">No habits</p></div>'
        )

    items = []
    for record in records:
        indicator, color = ("✓", "#22c55e") if record.completed_today else ("○", "#8e8e93")
        streak = streak_label(record.streak)
        streak_html = (
            f'<span style="font-size: 12px; color: #8e8e93; margin-left: 8px;">({streak})</span>'
            if streak
            else ""
        )
        items.append(
            '<div style="padding: 12px 16px; margin-bottom: 8px; border: 1px solid #f0f0f0; border-radius: 8px;">'
            f'<span style="font-size: 16px; color: {color}; margin-right: 12px; font-weight: 600;">{indicator}</span>'
            f'<span style="font-size: 14px; color: #1a1a1a; font-weight: 500;">{escape(record.name)}</span>'
            f"{streak_html}</div>"
        )
    return f'<div style="margin-bottom: 32px;">{heading}{title} ({len(records)})</h3>{"".join(items)}</div>'


def _lessons_section(report: DailyReport, lessons: Sequence[Lesson], colors: dict[str, str]) -> str:
    if not lessons:
        emoji, message = motivation_message(report.summary["is_perfect_day"], report.summary["completion_rate"])
        return (
            '<div style="margin-bottom: 32px; background-color: #f8f9fa; border-radius: 12px; '
            'padding: 24px; text-align: center;">'
            f'<div style="font-size: 24px; margin-bottom: 12px;">{emoji}</div>'
            f'<p style="margin: 0; font-size: 14px; color: {colors["section_title"]}; line-height: 1.5;">'
            f"{escape(message)}</p></div>"
        )
    items = "".join(
        '<div style="margin-bottom: 12px; padding: 12px; border-radius: 8px; border-left: 3px solid #007bff;">'
        f'<p style="margin: 0; font-size: 14px; line-height: 1.5; color: #333333;">{escape(lesson.text)}</p></div>'
        for lesson in lessons
    )
    return (
        '<div style="padding: 24px; border-radius: 12px; margin: 24px 0; border: 1px solid #e9ecef;">'
        '<h3 style="margin: 0 0 20px; font-size: 18px; font-weight: 600; text-align: center;">'
        f"Today's lessons</h3>{items}</div>"
    )


def _insights_section(report: DailyReport) -> str:
    groups = insight_groups(generate_insights(report))
    if not groups:
        return ""
    blocks = []
    for title, items in groups:
        rows = "".join(f'<li style="margin-bottom: 4px;">{escape(item)}</li>' for item in items)
        blocks.append(
            f'<h4 style="margin: 0 0 8px; font-size: 14px; font-weight: 600;">{title}</h4>'
            f'<ul style="margin: 0 0 16px; padding-left: 20px; font-size: 14px; color: #333333;">{rows}</ul>'
        )
    return f'<div style="margin-bottom: 32px;">{"".join(blocks)}</div>'


def _phrases_section(phrases: Sequence[Phrase]) -> str:
    if not phrases:
        return ""
    rows = "".join(
        f'<tr style="background-color: {"#ffffff" if i % 2 == 0 else "#f8f9fa"};">'
        f'<td style="padding: 10px 12px; border-bottom: 1px solid #dee2e6;">{escape(p.english)}</td>'
        f'<td style="padding: 10px 12px; border-bottom: 1px solid #dee2e6;">{escape(p.translation)}</td></tr>'
        for i, p in enumerate(phrases)
    )
    return (
        '<div style="margin: 20px 0; padding: 20px; border-radius: 8px;">'
        '<h3 style="margin: 0 0 15px 0; font-size: 18px;">Phrases of the day</h3>'
        f'<table style="width: 100%; border-collapse: collapse;"><tbody>{rows}</tbody></table></div>'
    )


def build_html(
    report: DailyReport,
    lessons: Sequence[Lesson] = (),
    phrases: Sequence[Phrase] = (),
) -> str:
    summary = report.summary
    perfect = summary["is_perfect_day"]
    colors = color_scheme(perfect)
    rate = summary["completion_rate"]
    completed = _habit_section(report.completed, "Completed", colors["section_title"])
    pending = _habit_section(report.pending, "Pending", colors["pending_title"])

    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{escape(build_subject(report))}</title></head>
<body style="margin: 0; padding: 0; background-color: #ffffff; font-family: {FONT_STACK};">
<div style="max-width: 600px; margin: 40px auto; padding: 40px; border: 1px solid {colors['border']}; border-radius: 12px;">
<div style="text-align: center; margin-bottom: 32px;">
<h1 style="margin: 0; font-size: 28px; font-weight: 300; color: {colors['header_title']};">Habit Report</h1>
<p style="margin: 8px 0 0; font-size: 16px; color: {colors['header_subtitle']};">{'Perfect day!' if perfect else 'Daily progress'}</p>
<span style="font-size: 14px; font-weight: 500; color: {colors['date_text']};">{format_date(report.day)}</span>
</div>
<div style="margin-bottom: 32px; border: 1px solid #e9ecef; border-radius: 12px; padding: 24px;">
<h3 style="margin: 0 0 16px; font-size: 16px; font-weight: 600; color: {colors['section_title']}; text-align: center;">Progress</h3>
{html_progress_bar(rate)}
<div style="text-align: center;">
<span style="font-size: 18px; font-weight: 600; color: {colors['section_title']};">{summary['completed_today']}/{summary['total_habits']}</span>
<span style="font-size: 14px; color: {colors['header_subtitle']}; margin-left: 8px;">({percent(rate)}%)</span>
</div>
</div>
{completed}
{pending}
{_insights_section(report)}
{_lessons_section(report, lessons, colors)}
{_phrases_section(phrases)}
<div style="text-align: center; padding-top: 24px; border-top: 1px solid #f0f0f0;">
<p style="margin: 0; font-size: 12px; color: {colors['footer_text']};">Sent by habitsheet</p>
</div>
</div>
</body>
</html>
"""


def build_plain_text(
    report: DailyReport,
    lessons: Sequence[Lesson] = (),
    phrases: Sequence[Phrase] = (),
) -> str:
    summary = report.summary
    subject = build_subject(report)
    lines = [subject, "=" * len(subject), "", format_date(report.day), ""]

    lines.append("PROGRESS")
    lines.append(
        f"{summary['completed_today']}/{summary['total_habits']} habits ({percent(summary['completion_rate'])}%)"
    )
    lines.append(text_progress_bar(summary["completion_rate"]))
    lines.append("")

    for title, records, mark in (("COMPLETED", report.completed, "✓"), ("PENDING", report.pending, "○")):
        if not records:
            continue
        lines.append(f"{title} ({len(records)})")
        lines.append("-" * 20)
        for record in records:
            streak = streak_label(record.streak)
            lines.append(f"{mark} {record.name}" + (f" ({streak})" if streak else ""))
        lines.append("")

    for title, items in insight_groups(generate_insights(report)):
        lines.append(title.upper())
        lines.extend(f"- {item}" for item in items)
        lines.append("")

    if lessons:
        lines.append("TODAY'S LESSONS")
        lines.append("=" * 15)
        lines.extend(f"{i}. {lesson.text}" for i, lesson in enumerate(lessons, 1))
    else:
        _, message = motivation_message(summary["is_perfect_day"], summary["completion_rate"])
        lines.append(message)

    if phrases:
        lines.append("")
        lines.append("PHRASES OF THE DAY")
        lines.extend(f"- {p.english} : {p.translation}" for p in phrases)

    return "\n".join(lines) + "\n"
