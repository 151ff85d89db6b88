"""Google Sheets access: monthly habit grid reads and completion writes.

All sheet-coordinate arithmetic lives in SheetLayout. Everything downstream
works on 0-indexed day columns and HabitRow lists.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime

import gspread
from gspread.exceptions import GSpreadException
from gspread.utils import ValueRenderOption, a1_to_rowcol, rowcol_to_a1

from habitsheet.core.config import Settings
from habitsheet.core.config import settings as default_settings
from habitsheet.data.audit import write_audit_entry
from habitsheet.data.completion import CellValue, cell_at, is_completed
from habitsheet.data.schemas import CompletionResult, HabitRow
from habitsheet.data.streaks import compute_streak

logger = logging.getLogger(__name__)


class SheetLayoutError(RuntimeError):
    """The worksheet, or a day column within it, could not be located."""


def _column_number(letters: str) -> int:
    """1-based column number for a column letter ('A' -> 1, 'AI' -> 35)."""
    return a1_to_rowcol(f"{letters.strip().upper()}1")[1]


@dataclass(frozen=True)
class SheetLayout:
    """Where the habit grid sits inside the worksheet (1-based sheet rows)."""

    first_row: int = 14
    date_row: int = 15
    last_row: int = 31
    name_column: str = "C"
    first_day_column: str = "E"
    last_day_column: str = "AI"

    @classmethod
    def from_settings(cls, config: Settings) -> SheetLayout:
        return cls(
            first_row=config.sheet_first_row,
            date_row=config.sheet_date_row,
            last_row=config.sheet_last_row,
            name_column=config.sheet_name_column,
            first_day_column=config.sheet_first_day_column,
            last_day_column=config.sheet_last_day_column,
        )

    @property
    def data_range(self) -> str:
        return f"{self.name_column}{self.first_row}:{self.last_day_column}{self.last_row}"

    @property
    def day_offset(self) -> int:
        """Columns between the habit-name column and the first day column."""
        return _column_number(self.first_day_column) - _column_number(self.name_column)

    @property
    def date_row_offset(self) -> int:
        return self.date_row - self.first_row

    @property
    def first_habit_row(self) -> int:
        return self.date_row + 1

    def cell_a1(self, habit_index: int, day_index: int) -> str:
        """A1 address of a habit's cell for a 0-indexed day column."""
        return rowcol_to_a1(
            self.first_habit_row + habit_index,
            _column_number(self.first_day_column) + day_index,
        )


def _as_day_number(value: object) -> int | None:
    match value:
        case bool():
            return None
        case int():
            return value
        case float() if value.is_integer():
            return int(value)
        case str():
            try:
                number = float(value.strip())
            except ValueError:
                return None
            return int(number) if number.is_integer() else None
        case _:
            return None


def find_day_column(header: Sequence[object], day: int) -> int | None:
    """Index of the header cell holding the given day of month, if any."""
    for idx, value in enumerate(header):
        if _as_day_number(value) == day:
            return idx
    return None


@dataclass(frozen=True)
class SheetSnapshot:
    """One read of the habit grid: day-number header plus habit rows.

    ``rows`` keeps blank-name rows so row indexes map back to sheet rows.
    """

    header: tuple[object, ...]
    rows: tuple[HabitRow, ...]

    def column_for_day(self, day: int) -> int | None:
        return find_day_column(self.header, day)

    def find_habit(self, name: str) -> int | None:
        """Row index of a habit by case-insensitive trimmed name."""
        wanted = name.strip().lower()
        if not wanted:
            return None
        for idx, row in enumerate(self.rows):
            if row.name is not None and str(row.name).strip().lower() == wanted:
                return idx
        return None


def parse_snapshot(values: Sequence[Sequence[CellValue]], layout: SheetLayout) -> SheetSnapshot:
    """Split a raw range read into the date header and habit rows."""
    offset = layout.day_offset
    header_idx = layout.date_row_offset

    header: tuple[object, ...] = ()
    if 0 <= header_idx < len(values):
        header = tuple(values[header_idx][offset:])

    rows: list[HabitRow] = []
    for raw in values[header_idx + 1 :]:
        name = raw[0] if raw else None
        rows.append(HabitRow(name=name, cells=tuple(raw[offset:])))
    return SheetSnapshot(header=header, rows=tuple(rows))


class HabitSheet:
    """gspread-backed reader/writer for the monthly habit worksheet."""

    def __init__(self, config: Settings | None = None, client: gspread.Client | None = None) -> None:
        self._config = config or default_settings
        self._client = client
        self._worksheet: gspread.Worksheet | None = None
        self.layout = SheetLayout.from_settings(self._config)

    def _get_client(self) -> gspread.Client:
        if self._client is None:
            self._client = gspread.service_account(filename=str(self._config.google_service_account_file))
        return self._client

    def worksheet(self) -> gspread.Worksheet:
        """Open (once) and return the configured worksheet."""
        if self._worksheet is None:
            spreadsheet = self._get_client().open_by_key(self._config.spreadsheet_id)
            try:
                self._worksheet = spreadsheet.worksheet(self._config.sheet_name)
            except gspread.WorksheetNotFound as exc:
                msg = f"Sheet '{self._config.sheet_name}' not found"
                raise SheetLayoutError(msg) from exc
        return self._worksheet

    def read_snapshot(self) -> SheetSnapshot:
        values = self.worksheet().get(
            self.layout.data_range,
            value_render_option=ValueRenderOption.unformatted,
        )
        return parse_snapshot(values, self.layout)

    def write_cell(self, a1: str, value: CellValue) -> None:
        self.worksheet().update_acell(a1, value)

    async def load_snapshot(self) -> SheetSnapshot:
        """Read the grid without blocking the event loop."""
        return await asyncio.to_thread(self.read_snapshot)


class HabitCompletionWriter:
    """Marks a habit complete for a day, one read-modify-write at a time.

    Repeated requests for the same habit and day inside the debounce window
    return the previous result without touching the sheet.
    """

    def __init__(
        self,
        sheet: HabitSheet,
        config: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sheet = sheet
        self._config = config or default_settings
        self._clock = clock
        self._lock = asyncio.Lock()
        self._recent: dict[tuple[str, date], tuple[float, CompletionResult]] = {}

    async def complete(self, habit_name: str, day: date, user: str = "") -> CompletionResult:
        key = (habit_name.strip().lower(), day)
        async with self._lock:
            now = self._clock()
            self._prune(now)
            previous = self._recent.get(key)
            if previous is not None and now - previous[0] < self._config.completion_debounce_seconds:
                logger.info("Debounced duplicate completion for %s", habit_name)
                return dataclasses.replace(previous[1], already_completed=True)

            try:
                result = await asyncio.to_thread(self._complete_sync, habit_name, day, user)
            except (SheetLayoutError, GSpreadException) as exc:
                logger.error("Completion write failed for %s: %s", habit_name, exc)
                return CompletionResult(success=False, message=str(exc), habit_name=habit_name)

            if result.success:
                self._recent[key] = (now, result)
            return result

    def _prune(self, now: float) -> None:
        window = self._config.completion_debounce_seconds
        for key in [k for k, (stamp, _) in self._recent.items() if now - stamp >= window]:
            del self._recent[key]

    def _complete_sync(self, habit_name: str, day: date, user: str) -> CompletionResult:
        snapshot = self._sheet.read_snapshot()

        col = snapshot.column_for_day(day.day)
        if col is None:
            return CompletionResult(
                success=False,
                message=f"Column for day {day.day} not found",
                habit_name=habit_name,
            )

        row_idx = snapshot.find_habit(habit_name)
        if row_idx is None:
            return CompletionResult(
                success=False,
                message=f"Habit '{habit_name}' not found",
                habit_name=habit_name,
            )

        row = snapshot.rows[row_idx]
        name = str(row.name).strip()
        cells = list(row.cells)
        a1 = self._sheet.layout.cell_a1(row_idx, col)

        if is_completed(cell_at(cells, col)):
            return CompletionResult(
                success=True,
                message=f"'{name}' is already complete today",
                habit_name=name,
                streak=compute_streak(cells, col),
                cell=a1,
                already_completed=True,
            )

        self._sheet.write_cell(a1, True)
        if len(cells) <= col:
            cells.extend([None] * (col + 1 - len(cells)))
        cells[col] = True
        streak = compute_streak(cells, col)

        try:
            write_audit_entry(
                self._config.data_audit_path / "completions.jsonl",
                {
                    "timestamp": datetime.now(UTC).isoformat(),
                    "action": "complete",
                    "habit": name,
                    "day": day.isoformat(),
                    "cell": a1,
                    "user": user,
                    "streak": streak,
                },
            )
        except OSError as exc:
            logger.warning("Audit write failed for %s: %s", name, exc)
        logger.info("Marked '%s' complete at %s (streak %d)", name, a1, streak)
        return CompletionResult(
            success=True,
            message=f"'{name}' marked complete",
            habit_name=name,
            streak=streak,
            cell=a1,
        )
