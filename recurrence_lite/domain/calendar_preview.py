"""Month-grid preview of expanded occurrences.

Maps a series of occurrence dates onto a Sunday-first month grid so a
renderer (CLI or web) can highlight recurring days alongside the start and
end of the range.
"""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from .recurrence_engine import RecurrenceEngineConfig, days_in_month, expand, weekday_index
from .recurrence_models import RecurrenceSpec
from .summary import DAY_ABBREVIATIONS, month_name

logger = logging.getLogger(__name__)


class DayCell(BaseModel):
    """A single day in the month grid."""

    day: int = Field(..., description="Day of month")
    is_recurring: bool = Field(default=False, description="Day is an occurrence")
    is_start: bool = Field(default=False, description="Day is the range start")
    is_end: bool = Field(default=False, description="Day is the range end")

    def marker(self) -> str:
        """Return the text-grid label for this cell."""
        if self.is_start:
            return f"[{self.day}]"
        if self.is_end:
            return f"({self.day})"
        if self.is_recurring:
            return f"{self.day}*"
        return str(self.day)


class MonthGrid(BaseModel):
    """A month laid out as Sunday-first weeks.

    Cells outside the month are None so each week has exactly seven entries.
    """

    year: int
    month: int
    weeks: list[list[Optional[DayCell]]] = Field(default_factory=list)

    @property
    def title(self) -> str:
        """Return e.g. ``January 2024``."""
        return f"{month_name(self.month)} {self.year}"

    def previous_month(self) -> tuple[int, int]:
        """Return (year, month) of the preceding month."""
        if self.month == 1:
            return self.year - 1, 12
        return self.year, self.month - 1

    def next_month(self) -> tuple[int, int]:
        """Return (year, month) of the following month."""
        if self.month == 12:
            return self.year + 1, 1
        return self.year, self.month + 1

    def recurring_days(self) -> list[int]:
        """Return the highlighted days of month in order."""
        return [cell.day for week in self.weeks for cell in week if cell and cell.is_recurring]

    def render_text(self) -> str:
        """Render the grid as monospaced text.

        ``*`` marks a recurring day, ``[d]`` the start and ``(d)`` the end.
        """
        width = 5
        lines = [
            self.title.center(width * 7).rstrip(),
            "".join(f"{abbr:>{width}}" for abbr in DAY_ABBREVIATIONS),
        ]
        for week in self.weeks:
            lines.append("".join(f"{cell.marker() if cell else '':>{width}}" for cell in week).rstrip())
        return "\n".join(lines)


def build_month_grid(
    year: int,
    month: int,
    occurrences: Iterable[date],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> MonthGrid:
    """Lay out ``month`` of ``year`` with occurrence, start and end flags.

    Args:
        year: Calendar year to render
        month: Calendar month (1-12) to render
        occurrences: Occurrence dates (any month; others are ignored)
        start_date: Optional range start to flag
        end_date: Optional range end to flag

    Returns:
        MonthGrid with Sunday-first weeks
    """
    recurring = {d for d in occurrences if d.year == year and d.month == month}

    cells: list[Optional[DayCell]] = [None] * weekday_index(date(year, month, 1))
    for day_number in range(1, days_in_month(year, month) + 1):
        current = date(year, month, day_number)
        cells.append(
            DayCell(
                day=day_number,
                is_recurring=current in recurring,
                is_start=start_date == current,
                is_end=end_date == current,
            )
        )
    while len(cells) % 7:
        cells.append(None)

    weeks = [cells[i : i + 7] for i in range(0, len(cells), 7)]
    return MonthGrid(year=year, month=month, weeks=weeks)


def initial_month(spec: RecurrenceSpec, today: Optional[date] = None) -> tuple[int, int]:
    """Return the (year, month) a preview opens on: the start's month, else today's."""
    anchor = spec.start_date or today or date.today()
    return anchor.year, anchor.month


def preview_month(
    spec: RecurrenceSpec,
    year: Optional[int] = None,
    month: Optional[int] = None,
    today: Optional[date] = None,
    config: Optional[RecurrenceEngineConfig] = None,
) -> MonthGrid:
    """Expand ``spec`` and lay out one month of the result."""
    if year is None or month is None:
        year, month = initial_month(spec, today)
    occurrences = expand(spec, config)
    logger.debug("Rendering %04d-%02d preview from %d occurrences", year, month, len(occurrences))
    return build_month_grid(year, month, occurrences, spec.start_date, spec.end_date)
