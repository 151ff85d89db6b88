"""Async scheduler that fires report jobs at configured local times."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from habitsheet.core.config import Settings
from habitsheet.core.config import settings as default_settings

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]

TICK_SECONDS = 30


@dataclass
class ScheduleEntry:
    """A daily trigger for a named job."""

    name: str
    trigger_time: time  # HH:MM local time
    job_name: str


def _parse_time(time_str: str) -> tuple[int, int]:
    """Parse 'HH:MM' string to (hour, minute)."""
    parts = time_str.split(":")
    return int(parts[0]), int(parts[1])


def default_schedules(config: Settings | None = None) -> list[ScheduleEntry]:
    """Morning and evening daily report."""
    cfg = config or default_settings
    morning_h, morning_m = _parse_time(cfg.schedule_morning)
    evening_h, evening_m = _parse_time(cfg.schedule_evening)
    return [
        ScheduleEntry(name="morning_report", trigger_time=time(morning_h, morning_m), job_name="daily_report"),
        ScheduleEntry(name="evening_report", trigger_time=time(evening_h, evening_m), job_name="daily_report"),
    ]


class Scheduler:
    """Checks every 30 seconds and fires each entry at most once per day."""

    def __init__(
        self,
        schedules: list[ScheduleEntry] | None = None,
        jobs: dict[str, Job] | None = None,
        tz: str | None = None,
        config: Settings | None = None,
    ) -> None:
        cfg = config or default_settings
        self.schedules = schedules if schedules is not None else default_schedules(cfg)
        self.jobs: dict[str, Job] = dict(jobs or {})
        self.tz = ZoneInfo(tz or cfg.timezone)
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._fired_today: set[str] = set()
        self._fired_date: date | None = None

    async def start(self) -> None:
        """Start the scheduler loop."""
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("Scheduler started with %d entries", len(self.schedules))

    async def stop(self) -> None:
        """Stop the scheduler loop."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("Scheduler stopped")

    def register_job(self, name: str, job: Job) -> None:
        self.jobs[name] = job

    async def _run_job(self, job_name: str) -> object | None:
        job = self.jobs.get(job_name)
        if job is None:
            logger.error("No job registered as %s", job_name)
            return None
        try:
            return await job()
        except Exception:
            logger.exception("Error in scheduled job %s", job_name)
            return None

    async def tick(self, now: datetime | None = None) -> list[str]:
        """Run every entry due at ``now``. Returns the names that fired."""
        now = now or datetime.now(self.tz)

        # New day: every entry may fire again
        if self._fired_date != now.date():
            self._fired_today.clear()
            self._fired_date = now.date()

        fired = []
        for entry in self.schedules:
            if entry.name in self._fired_today:
                continue
            if now.hour == entry.trigger_time.hour and now.minute == entry.trigger_time.minute:
                self._fired_today.add(entry.name)
                fired.append(entry.name)
                logger.info("Triggering scheduled job %s (%s)", entry.job_name, entry.name)
                await self._run_job(entry.job_name)
        return fired

    async def _loop(self) -> None:
        """Tick every TICK_SECONDS until stopped."""
        while self._running:
            await self.tick()
            await asyncio.sleep(TICK_SECONDS)

    async def trigger_now(self, schedule_name: str) -> object | None:
        """Run a schedule entry's job immediately, by entry or job name."""
        for entry in self.schedules:
            if schedule_name in (entry.name, entry.job_name):
                return await self._run_job(entry.job_name)
        if schedule_name in self.jobs:
            return await self._run_job(schedule_name)
        logger.error("Unknown schedule: %s", schedule_name)
        return None
