"""Tests for habitsheet.integrations.scheduler."""

from __future__ import annotations

from datetime import datetime, time
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

from habitsheet.core.config import Settings
from habitsheet.integrations.scheduler import ScheduleEntry, Scheduler, default_schedules

TZ = ZoneInfo("Asia/Ho_Chi_Minh")


def _at(day: int, hour: int, minute: int, second: int = 0) -> datetime:
    return datetime(2026, 10, day, hour, minute, second, tzinfo=TZ)


def _scheduler(job: AsyncMock) -> Scheduler:
    schedules = [
        ScheduleEntry(name="morning_report", trigger_time=time(8, 0), job_name="daily_report"),
        ScheduleEntry(name="evening_report", trigger_time=time(20, 0), job_name="daily_report"),
    ]
    return Scheduler(schedules=schedules, jobs={"daily_report": job}, tz="Asia/Ho_Chi_Minh")


class TestDefaultSchedules:
    def test_from_settings(self) -> None:
        entries = default_schedules(Settings(schedule_morning="07:30", schedule_evening="21:05"))
        assert [(e.name, e.trigger_time, e.job_name) for e in entries] == [
            ("morning_report", time(7, 30), "daily_report"),
            ("evening_report", time(21, 5), "daily_report"),
        ]


class TestTick:
    async def test_fires_at_matching_minute(self) -> None:
        job = AsyncMock()
        scheduler = _scheduler(job)
        assert await scheduler.tick(_at(5, 8, 0, 10)) == ["morning_report"]
        job.assert_awaited_once()

    async def test_nothing_due(self) -> None:
        job = AsyncMock()
        scheduler = _scheduler(job)
        assert await scheduler.tick(_at(5, 9, 15)) == []
        job.assert_not_awaited()

    async def test_fires_once_per_day(self) -> None:
        job = AsyncMock()
        scheduler = _scheduler(job)
        await scheduler.tick(_at(5, 8, 0, 0))
        assert await scheduler.tick(_at(5, 8, 0, 30)) == []
        assert job.await_count == 1

    async def test_morning_and_evening(self) -> None:
        job = AsyncMock()
        scheduler = _scheduler(job)
        await scheduler.tick(_at(5, 8, 0))
        assert await scheduler.tick(_at(5, 20, 0)) == ["evening_report"]
        assert job.await_count == 2

    async def test_next_day_fires_again(self) -> None:
        job = AsyncMock()
        scheduler = _scheduler(job)
        await scheduler.tick(_at(5, 8, 0))
        assert await scheduler.tick(_at(6, 8, 0)) == ["morning_report"]
        assert job.await_count == 2

    async def test_job_failure_is_contained(self) -> None:
        job = AsyncMock(side_effect=RuntimeError("sheet down"))
        scheduler = _scheduler(job)
        assert await scheduler.tick(_at(5, 8, 0)) == ["morning_report"]
        # Marked as fired even though it failed
        assert await scheduler.tick(_at(5, 8, 0, 40)) == []

    async def test_missing_job(self) -> None:
        scheduler = Scheduler(
            schedules=[ScheduleEntry(name="x", trigger_time=time(8, 0), job_name="nothing")],
            tz="UTC",
        )
        assert await scheduler.tick(datetime(2026, 10, 5, 8, 0, tzinfo=ZoneInfo("UTC"))) == ["x"]


class TestTriggerNow:
    async def test_by_entry_name(self) -> None:
        job = AsyncMock(return_value="sent")
        assert await _scheduler(job).trigger_now("evening_report") == "sent"

    async def test_by_job_name(self) -> None:
        job = AsyncMock(return_value="sent")
        assert await _scheduler(job).trigger_now("daily_report") == "sent"

    async def test_registered_job_without_entry(self) -> None:
        scheduler = Scheduler(schedules=[], tz="UTC")
        job = AsyncMock(return_value=42)
        scheduler.register_job("adhoc", job)
        assert await scheduler.trigger_now("adhoc") == 42

    async def test_unknown(self) -> None:
        assert await Scheduler(schedules=[], tz="UTC").trigger_now("nonexistent") is None


class TestLifecycle:
    async def test_start_and_stop(self) -> None:
        scheduler = Scheduler(schedules=[], tz="UTC")
        await scheduler.start()
        assert scheduler._running is True
        await scheduler.stop()
        assert scheduler._running is False
        assert scheduler._task is None
