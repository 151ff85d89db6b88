"""Tests for habitsheet.data.lessons: lesson/phrase parsing and random picks."""

from __future__ import annotations

import random
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests
from google.auth.exceptions import RefreshError
from gspread.exceptions import SpreadsheetNotFound

from habitsheet.core.config import Settings
from habitsheet.data.lessons import (
    Lesson,
    LessonLibrary,
    Phrase,
    parse_lessons,
    parse_phrases,
    pick_random,
)


class TestParsing:
    def test_parse_lessons_skips_blank_text(self) -> None:
        rows: list[list[Any]] = [["1", " Be kind "], ["2", ""], [], ["", "Rest well"], ["3"]]
        assert parse_lessons(rows) == [Lesson("1", "Be kind"), Lesson("", "Rest well")]

    def test_parse_phrases_requires_both_columns(self) -> None:
        rows = [["Hello", "Xin chào"], ["Thanks", ""], ["", "Tạm biệt"], [" Good night ", " Chúc ngủ ngon "]]
        assert parse_phrases(rows) == [
            Phrase("Hello", "Xin chào"),
            Phrase("Good night", "Chúc ngủ ngon"),
        ]


class TestPickRandom:
    def test_returns_everything_when_few(self) -> None:
        assert pick_random([1, 2], 4) == [1, 2]

    def test_samples_without_repeats(self) -> None:
        picked = pick_random(list(range(20)), 5, rng=random.Random(7))
        assert len(picked) == 5
        assert len(set(picked)) == 5
        assert set(picked) <= set(range(20))

    def test_seeded_is_deterministic(self) -> None:
        items = list(range(50))
        assert pick_random(items, 3, rng=random.Random(1)) == pick_random(items, 3, rng=random.Random(1))

    def test_zero_count(self) -> None:
        assert pick_random([1, 2, 3], 0) == []


def _client(values_by_sheet: dict[str, list[list[str]]]) -> MagicMock:
    client = MagicMock()
    spreadsheet = client.open_by_key.return_value

    def worksheet(name: str) -> MagicMock:
        ws = MagicMock()
        ws.get_all_values.return_value = values_by_sheet[name]
        return ws

    spreadsheet.worksheet.side_effect = worksheet
    return client


class TestLessonLibrary:
    async def test_disabled_without_spreadsheet(self) -> None:
        client = MagicMock()
        library = LessonLibrary(Settings(lessons_spreadsheet_id=""), client=client)
        assert library.enabled is False
        assert await library.random_lessons() == []
        assert await library.random_phrases() == []
        client.open_by_key.assert_not_called()

    async def test_reads_and_skips_header(self) -> None:
        client = _client(
            {
                "daily lessons": [["Day", "Lesson"], ["1", "Start small"], ["2", "Keep going"]],
                "english phrases": [["English", "Translation"], ["Hi", "Chào"]],
            }
        )
        library = LessonLibrary(Settings(lessons_spreadsheet_id="lessons-id"), client=client)
        lessons = await library.random_lessons(count=10)
        phrases = await library.random_phrases()
        assert sorted(lesson.text for lesson in lessons) == ["Keep going", "Start small"]
        assert phrases == [Phrase("Hi", "Chào")]
        client.open_by_key.assert_called_with("lessons-id")

    async def test_respects_configured_count(self) -> None:
        rows = [["Day", "Lesson"]] + [[str(i), f"Lesson {i}"] for i in range(10)]
        client = _client({"daily lessons": rows})
        library = LessonLibrary(Settings(lessons_spreadsheet_id="id", lessons_count=4), client=client)
        assert len(await library.random_lessons()) == 4

    async def test_read_failure_yields_empty(self) -> None:
        client = MagicMock()
        client.open_by_key.side_effect = SpreadsheetNotFound("id")
        library = LessonLibrary(Settings(lessons_spreadsheet_id="id"), client=client)
        assert await library.random_lessons() == []
        assert await library.random_phrases() == []

    @pytest.mark.parametrize(
        "error",
        [requests.ConnectionError("connection reset"), RefreshError("token expired"), TimeoutError("slow")],
    )
    async def test_network_and_auth_failures_yield_empty(self, error: Exception) -> None:
        client = MagicMock()
        client.open_by_key.side_effect = error
        library = LessonLibrary(Settings(lessons_spreadsheet_id="id"), client=client)
        assert await library.random_lessons() == []
        assert await library.random_phrases() == []
