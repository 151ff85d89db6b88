"""Daily lessons and phrase cards read from an optional second spreadsheet."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

import gspread
from google.auth.exceptions import GoogleAuthError
from gspread.exceptions import GSpreadException

from habitsheet.core.config import Settings
from habitsheet.core.config import settings as default_settings

logger = logging.getLogger(__name__)

# Lessons are optional decoration; any read failure leaves them out of the report.
READ_ERRORS = (GSpreadException, GoogleAuthError, OSError)

T = TypeVar("T")


@dataclass(frozen=True)
class Lesson:
    day: str
    text: str


@dataclass(frozen=True)
class Phrase:
    english: str
    translation: str


def _text(row: Sequence[object], idx: int) -> str:
    if idx >= len(row) or row[idx] is None:
        return ""
    return str(row[idx]).strip()


def parse_lessons(values: Sequence[Sequence[object]]) -> list[Lesson]:
    """Rows of (day, lesson), header excluded. Rows without lesson text are skipped."""
    lessons = []
    for row in values:
        text = _text(row, 1)
        if text:
            lessons.append(Lesson(day=_text(row, 0), text=text))
    return lessons


def parse_phrases(values: Sequence[Sequence[object]]) -> list[Phrase]:
    """Rows of (english, translation), header excluded. Incomplete rows are skipped."""
    phrases = []
    for row in values:
        english, translation = _text(row, 0), _text(row, 1)
        if english and translation:
            phrases.append(Phrase(english=english, translation=translation))
    return phrases


def pick_random(items: Sequence[T], count: int, rng: random.Random | None = None) -> list[T]:
    """All items when there are no more than ``count``, else a random sample."""
    if count <= 0:
        return []
    if len(items) <= count:
        return list(items)
    return (rng or random).sample(list(items), count)


class LessonLibrary:
    """Random lessons and phrases for reports. Empty when not configured."""

    def __init__(self, config: Settings | None = None, client: gspread.Client | None = None) -> None:
        self._config = config or default_settings
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self._config.lessons_spreadsheet_id)

    def _rows(self, sheet_name: str) -> list[list[object]]:
        if self._client is None:
            self._client = gspread.service_account(filename=str(self._config.google_service_account_file))
        spreadsheet = self._client.open_by_key(self._config.lessons_spreadsheet_id)
        values = spreadsheet.worksheet(sheet_name).get_all_values()
        return values[1:]

    def read_lessons(self) -> list[Lesson]:
        if not self.enabled:
            return []
        try:
            return parse_lessons(self._rows(self._config.lessons_sheet_name))
        except READ_ERRORS as exc:
            logger.warning("Could not read lessons sheet '%s': %s", self._config.lessons_sheet_name, exc)
            return []

    def read_phrases(self) -> list[Phrase]:
        if not self.enabled:
            return []
        try:
            return parse_phrases(self._rows(self._config.phrases_sheet_name))
        except READ_ERRORS as exc:
            logger.warning("Could not read phrases sheet '%s': %s", self._config.phrases_sheet_name, exc)
            return []

    async def random_lessons(self, count: int | None = None) -> list[Lesson]:
        lessons = await asyncio.to_thread(self.read_lessons)
        return pick_random(lessons, self._config.lessons_count if count is None else count)

    async def random_phrases(self, count: int | None = None) -> list[Phrase]:
        phrases = await asyncio.to_thread(self.read_phrases)
        return pick_random(phrases, self._config.phrases_count if count is None else count)
