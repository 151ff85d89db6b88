"""Tracker service and the daily report pipeline."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from google.auth.exceptions import GoogleAuthError
from gspread.exceptions import GSpreadException

from habitsheet.core.config import Settings, validate_settings
from habitsheet.core.config import settings as default_settings
from habitsheet.data.analyzer import MalformedInputError
from habitsheet.data.lessons import LessonLibrary
from habitsheet.data.reports import (
    DailyReport,
    PeriodReport,
    build_daily_report,
    build_period_report,
    month_days,
    week_days,
)
from habitsheet.data.schemas import CompletionResult
from habitsheet.data.sheets import HabitCompletionWriter, HabitSheet, SheetLayoutError
from habitsheet.integrations.channels import ChannelRouter, DeliveryReceipt, ReportContent

logger = logging.getLogger(__name__)

# Failures that mean "the report could not be built", as opposed to a bug
REPORT_ERRORS = (SheetLayoutError, MalformedInputError, GSpreadException, GoogleAuthError, OSError)


class TrackerService:
    """Reads the habit sheet and writes completions for 'today' in the configured timezone."""

    def __init__(
        self,
        config: Settings | None = None,
        sheet: HabitSheet | None = None,
        writer: HabitCompletionWriter | None = None,
        lessons: LessonLibrary | None = None,
    ) -> None:
        self.config = config or default_settings
        self.sheet = sheet or HabitSheet(self.config)
        self.writer = writer or HabitCompletionWriter(self.sheet, self.config)
        self.lessons = lessons or LessonLibrary(self.config)

    def today(self) -> date:
        return datetime.now(ZoneInfo(self.config.timezone)).date()

    async def daily_report(self, day: date | None = None) -> DailyReport:
        snapshot = await self.sheet.load_snapshot()
        return build_daily_report(snapshot, day or self.today())

    async def period_report(self, period: str) -> PeriodReport:
        """``week`` or ``month`` ending today."""
        today = self.today()
        match period:
            case "week":
                days = week_days(today)
            case "month":
                days = month_days(today)
            case _:
                msg = f"Unknown period: {period}"
                raise ValueError(msg)
        snapshot = await self.sheet.load_snapshot()
        return build_period_report(snapshot, days)

    async def report_content(self) -> ReportContent:
        report, lessons, phrases = await asyncio.gather(
            self.daily_report(),
            self.lessons.random_lessons(),
            self.lessons.random_phrases(),
        )
        return ReportContent(report=report, lessons=tuple(lessons), phrases=tuple(phrases))

    async def complete_habit(self, habit_name: str, user: str = "") -> CompletionResult:
        return await self.writer.complete(habit_name, self.today(), user)


async def run_daily_report(
    service: TrackerService,
    router: ChannelRouter,
    config: Settings | None = None,
) -> list[DeliveryReceipt]:
    """Build today's report and broadcast it to every channel.

    On failure every channel gets an error notification instead.

    Returns:
        One receipt per provider.
    """
    cfg = config or service.config

    validation = validate_settings(cfg)
    for warning in validation.warnings:
        logger.warning("Config: %s", warning)
    if not validation.valid:
        problems = "; ".join(validation.issues)
        logger.error("Daily report skipped, invalid configuration: %s", problems)
        return await router.notify(f"Habit report failed: invalid configuration ({problems})")

    try:
        content = await service.report_content()
    except REPORT_ERRORS as exc:
        logger.error("Daily report failed: %s", exc)
        return await router.notify(f"Habit report failed: {exc}")

    receipts = await router.broadcast_report(content)
    delivered = [r.channel for r in receipts if r.success]
    logger.info(
        "Daily report for %s delivered via %s",
        content.report.day.isoformat(),
        ", ".join(delivered) or "no channel",
    )
    return receipts
