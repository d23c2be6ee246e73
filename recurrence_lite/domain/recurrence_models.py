"""Data models for recurrence expansion - Recurrence Lite version."""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

# Weekday indices follow the form convention: 0 = Sunday ... 6 = Saturday.
SUNDAY = 0
SATURDAY = 6


class Frequency(str, Enum):
    """Supported recurrence frequencies."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class MonthlyMode(str, Enum):
    """How a monthly recurrence picks its day."""

    DAY_OF_MONTH = "dayOfMonth"
    NTH_WEEKDAY = "nthDayOfWeek"


_MONTHLY_MODE_ALIASES = {
    "dayofmonth": MonthlyMode.DAY_OF_MONTH,
    "nthweekday": MonthlyMode.NTH_WEEKDAY,
    "nthdayofweek": MonthlyMode.NTH_WEEKDAY,
}


def _coerce_int(value: Any, default: int) -> int:
    """Coerce form-style numeric input to int, falling back to ``default``."""
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class RecurrenceSpec(BaseModel):
    """Declarative description of a repeating pattern.

    The spec is a value: callers rebuild it on every change (``model_copy``)
    and pass it explicitly to the engine. Form-style input is normalized here
    so the engine only ever sees positive intervals and in-range days of month.
    """

    frequency: Frequency = Field(default=Frequency.DAILY, description="Recurrence frequency")
    interval: int = Field(default=1, description="Every N units (>= 1)")

    start_date: Optional[date] = Field(default=None, description="First candidate day")
    end_date: Optional[date] = Field(default=None, description="Inclusive upper bound")

    # Weekly
    days_of_week: frozenset[int] = Field(
        default_factory=frozenset, description="Weekday indices 0-6 (Sunday=0)"
    )

    # Monthly
    monthly_mode: MonthlyMode = Field(default=MonthlyMode.DAY_OF_MONTH)
    day_of_month: int = Field(default=1, description="Target day 1-31 for dayOfMonth mode")
    nth: int = Field(default=1, description="Occurrence 1-5 for nthDayOfWeek mode")
    weekday_in_month: int = Field(default=SUNDAY, description="Weekday 0-6 for nthDayOfWeek mode")

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    @field_validator("frequency", mode="before")
    @classmethod
    def _parse_frequency(cls, value: Any) -> Any:
        if isinstance(value, str):
            for member in Frequency:
                if member.value.lower() == value.strip().lower():
                    return member
        return value

    @field_validator("monthly_mode", mode="before")
    @classmethod
    def _parse_monthly_mode(cls, value: Any) -> Any:
        if isinstance(value, str):
            key = value.replace("_", "").replace("-", "").strip().lower()
            return _MONTHLY_MODE_ALIASES.get(key, value)
        return value

    @field_validator("interval", mode="before")
    @classmethod
    def _clamp_interval(cls, value: Any) -> int:
        interval = _coerce_int(value, 1)
        if interval < 1:
            logger.warning("Recurrence interval %r is not a positive integer; using 1", value)
            return 1
        return interval

    @field_validator("day_of_month", mode="before")
    @classmethod
    def _clamp_day_of_month(cls, value: Any) -> int:
        day = _coerce_int(value, 1)
        if day < 1 or day > 31:
            logger.warning("day_of_month %r outside 1..31; using 1", value)
            return 1
        return day

    @field_validator("nth", mode="before")
    @classmethod
    def _coerce_nth(cls, value: Any) -> int:
        return _coerce_int(value, 1)

    @field_validator("weekday_in_month", mode="before")
    @classmethod
    def _coerce_weekday(cls, value: Any) -> int:
        return _coerce_int(value, SUNDAY)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_optional_date(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator("days_of_week", mode="before")
    @classmethod
    def _parse_days_of_week(cls, value: Any) -> frozenset[int]:
        if value is None:
            return frozenset()
        if isinstance(value, (int, str)):
            value = [value]
        days = set()
        for raw in value:
            day = _coerce_int(raw, -1)
            if SUNDAY <= day <= SATURDAY:
                days.add(day)
            else:
                logger.debug("Dropping out-of-range weekday index %r", raw)
        return frozenset(days)

    def with_start_defaults(self) -> "RecurrenceSpec":
        """Return a copy whose monthly qualifiers are derived from ``start_date``.

        Day-of-month defaults to the start's day, nth/weekday default to the
        start's weekday and its occurrence index within the month. Without a
        start date the defaults are day 1 and the first Sunday.
        """
        # Imported here to keep the models free of engine imports at module load.
        from .recurrence_engine import nth_occurrence_of_weekday, weekday_index

        if self.start_date is None:
            update = {"day_of_month": 1, "nth": 1, "weekday_in_month": SUNDAY}
        else:
            update = {
                "day_of_month": self.start_date.day,
                "nth": nth_occurrence_of_weekday(self.start_date),
                "weekday_in_month": weekday_index(self.start_date),
            }
        return self.model_copy(update=update)


class OccurrenceSeries(BaseModel):
    """Result of expanding a recurrence spec."""

    dates: list[date] = Field(default_factory=list, description="Strictly increasing occurrences")
    scanned_days: int = Field(default=0, description="Candidate days visited by the scan")
    scan_cap_reached: bool = Field(default=False, description="Scan stopped on the safety cap")

    @property
    def count(self) -> int:
        """Number of occurrences in the series."""
        return len(self.dates)
