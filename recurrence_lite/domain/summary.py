"""Human-readable descriptions of recurrence specs.

Rendered from the spec alone; never depends on the expanded dates.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from .recurrence_models import Frequency, MonthlyMode, RecurrenceSpec

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
DAY_ABBREVIATIONS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_FREQUENCY_UNITS = {
    Frequency.DAILY: "day",
    Frequency.WEEKLY: "week",
    Frequency.MONTHLY: "month",
    Frequency.YEARLY: "year",
}


def day_name(index: int) -> str:
    """Return the weekday name for a Sunday-first index (0-6)."""
    return DAY_NAMES[index % 7]


def month_name(month: int) -> str:
    """Return the month name for a calendar month number (1-12)."""
    return MONTH_NAMES[(month - 1) % 12]


def ordinal_suffix(n: int) -> str:
    """Return the English ordinal suffix for ``n``.

    Examples:
        >>> [ordinal_suffix(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 22, 101)]
        ['st', 'nd', 'rd', 'th', 'th', 'th', 'th', 'st', 'nd', 'st']
    """
    if 10 <= n % 100 <= 20:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def ordinal(n: int) -> str:
    """Return ``n`` with its ordinal suffix, e.g. ``2nd``."""
    return f"{n}{ordinal_suffix(n)}"


def interval_phrase(spec: RecurrenceSpec) -> str:
    """Return ``every N unit(s)`` for the spec's frequency and interval."""
    unit = _FREQUENCY_UNITS[spec.frequency]
    plural = "s" if spec.interval > 1 else ""
    return f"every {spec.interval} {unit}{plural}"


def weekday_list(days: frozenset[int], separator: str = ", ") -> str:
    """Join the names of ``days`` in Sunday-first order."""
    return separator.join(day_name(d) for d in sorted(days))


def nth_weekday_phrase(spec: RecurrenceSpec) -> str:
    """Return e.g. ``the 2nd Tuesday of the month``."""
    return f"the {ordinal(spec.nth)} {day_name(spec.weekday_in_month)} of the month"


def _sentence(phrase: str) -> str:
    return phrase[:1].upper() + phrase[1:] + "."


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a date for display (ISO 8601), or None when unset."""
    return value.isoformat() if value is not None else None


class RecurrenceSummary(BaseModel):
    """Structured summary lines for a recurrence spec."""

    frequency: str = Field(..., description="Frequency line, e.g. 'Every 2 weeks.'")
    on: Optional[str] = Field(default=None, description="Qualifier line, if any")
    starts: str = Field(..., description="Start line")
    ends: str = Field(..., description="End line")

    def lines(self) -> list[str]:
        """Return the summary as labelled display lines."""
        result = [f"Frequency: {self.frequency}"]
        if self.on:
            result.append(f"On: {self.on}")
        result.append(f"Starts: {self.starts}")
        result.append(f"Ends: {self.ends}")
        return result


def describe(spec: RecurrenceSpec) -> RecurrenceSummary:
    """Build the structured summary for ``spec``."""
    frequency = _sentence(interval_phrase(spec))

    on = None
    if spec.frequency == Frequency.WEEKLY and spec.days_of_week:
        on = weekday_list(spec.days_of_week) + "."
    elif spec.frequency == Frequency.MONTHLY:
        if spec.monthly_mode == MonthlyMode.NTH_WEEKDAY:
            on = _sentence(nth_weekday_phrase(spec))
        else:
            on = f"Day {spec.day_of_month} of the month."

    starts = format_date(spec.start_date) or "Not set"
    ends = format_date(spec.end_date) or "Never"

    return RecurrenceSummary(frequency=frequency, on=on, starts=f"{starts}.", ends=f"{ends}.")


def summary_text(spec: RecurrenceSpec) -> str:
    """Return the multi-line summary text for ``spec``."""
    return "\n".join(describe(spec).lines())
