"""Recurrence expansion engine for Recurrence Lite.

Walks a day-by-day cursor from the spec's start date, testing each candidate
day against the frequency-specific match rule and jumping over whole weeks,
months or years on boundary days to honor the interval. Two hard caps bound
the work: at most ``MAX_SCAN`` candidate days are visited and at most
``MAX_OUTPUT`` occurrences are returned.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from .recurrence_models import (
    SATURDAY,
    Frequency,
    MonthlyMode,
    OccurrenceSeries,
    RecurrenceSpec,
)

logger = logging.getLogger(__name__)

# Five years of candidate days.
MAX_SCAN = 365 * 5
MAX_OUTPUT = 365

_ONE_DAY = timedelta(days=1)


@dataclass
class RecurrenceEngineConfig:
    """Configuration for recurrence expansion.

    ``daily_interval_stepping`` switches Daily recurrences from the legacy
    one-day step (interval ignored) to stepping ``interval`` days.
    """

    max_scan: int = MAX_SCAN
    max_output: int = MAX_OUTPUT
    daily_interval_stepping: bool = False

    @classmethod
    def from_settings(cls, settings: Any) -> "RecurrenceEngineConfig":
        """Extract engine configuration from a settings object.

        Args:
            settings: Object or mapping with optional ``max_scan``, ``max_output``
                and ``daily_interval_stepping`` values

        Returns:
            RecurrenceEngineConfig with values from settings or defaults
        """
        if isinstance(settings, dict):
            get = settings.get
        else:
            def get(key: str, default: Any) -> Any:
                return getattr(settings, key, default)

        return cls(
            max_scan=int(get("max_scan", MAX_SCAN)),
            max_output=int(get("max_output", MAX_OUTPUT)),
            daily_interval_stepping=bool(get("daily_interval_stepping", False)),
        )


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in ``month`` of ``year``."""
    return calendar.monthrange(year, month)[1]


def is_last_day_of_month(day: date) -> bool:
    """Check whether ``day`` is the final day of its month."""
    return day.day == days_in_month(day.year, day.month)


def weekday_index(day: date) -> int:
    """Return the weekday of ``day`` with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


def nth_weekday_of_month(year: int, month: int, nth: int, weekday: int) -> Optional[date]:
    """Find the ``nth`` occurrence of ``weekday`` in a month.

    Occurrences are counted from day 1 forward.

    Args:
        year: Calendar year
        month: Calendar month (1-12)
        nth: Which occurrence to find (1 = first)
        weekday: Weekday index with Sunday as 0

    Returns:
        The matching date, or None when the month has fewer than ``nth``
        occurrences of that weekday.

    Examples:
        >>> nth_weekday_of_month(2024, 1, 1, 0)
        datetime.date(2024, 1, 7)
        >>> nth_weekday_of_month(2024, 2, 5, 1) is None
        True
    """
    occurrences = 0
    for day_number in range(1, days_in_month(year, month) + 1):
        candidate = date(year, month, day_number)
        if weekday_index(candidate) == weekday:
            occurrences += 1
            if occurrences == nth:
                return candidate
    return None


def nth_occurrence_of_weekday(day: date) -> int:
    """Return which occurrence of its weekday ``day`` is within its month."""
    return (day.day - 1) // 7 + 1


def _effective_interval(spec: RecurrenceSpec) -> int:
    # The spec owner clamps; specs built with model_construct skip that.
    return spec.interval if spec.interval >= 1 else 1


def matches(spec: RecurrenceSpec, day: date) -> bool:
    """Test whether ``day`` is an occurrence of ``spec``.

    Bounds are not checked here; ``expand`` owns the start/end window.
    """
    if spec.frequency == Frequency.DAILY:
        return True

    if spec.frequency == Frequency.WEEKLY:
        return weekday_index(day) in spec.days_of_week

    if spec.frequency == Frequency.MONTHLY:
        if spec.monthly_mode == MonthlyMode.NTH_WEEKDAY:
            target = nth_weekday_of_month(day.year, day.month, spec.nth, spec.weekday_in_month)
            return target is not None and target == day
        # Month-end clamping: a 31st target lands on the last real day.
        if day.day == spec.day_of_month:
            return True
        return is_last_day_of_month(day) and spec.day_of_month > day.day

    if spec.frequency == Frequency.YEARLY:
        start = spec.start_date
        return start is not None and (day.month, day.day) == (start.month, start.day)

    return False


def next_candidate(
    spec: RecurrenceSpec, day: date, daily_interval_stepping: bool = False
) -> date:
    """Advance the scan cursor past ``day``.

    Weekly, monthly and yearly walks step one day at a time and jump on the
    last day of a week, month or year so that whole periods are skipped
    according to the interval.
    """
    interval = _effective_interval(spec)

    if spec.frequency == Frequency.DAILY:
        if daily_interval_stepping:
            return day + timedelta(days=interval)
        return day + _ONE_DAY

    if spec.frequency == Frequency.WEEKLY:
        if weekday_index(day) == SATURDAY:
            # Lands on the Sunday that opens the interval-th following week.
            return day + timedelta(days=7 * interval - 6)
        return day + _ONE_DAY

    if spec.frequency == Frequency.MONTHLY:
        if is_last_day_of_month(day):
            return day.replace(day=1) + relativedelta(months=interval)
        return day + _ONE_DAY

    if spec.frequency == Frequency.YEARLY:
        if (day.month, day.day) == (12, 31):
            return day + relativedelta(years=interval, month=1, day=1)
        return day + _ONE_DAY

    return day + _ONE_DAY


def expand_series(
    spec: RecurrenceSpec, config: Optional[RecurrenceEngineConfig] = None
) -> OccurrenceSeries:
    """Expand ``spec`` into an occurrence series with scan metadata.

    Never raises for degenerate specs: a missing start date, an empty weekly
    day set, out-of-range monthly qualifiers or an end date before the start
    all produce an empty (or short) series.

    Args:
        spec: Recurrence specification to expand
        config: Optional engine configuration (defaults to the module caps)

    Returns:
        OccurrenceSeries with strictly increasing dates, at most
        ``config.max_output`` of them
    """
    cfg = config or RecurrenceEngineConfig()

    start = spec.start_date
    if start is None:
        logger.debug("Recurrence spec has no start date; returning empty series")
        return OccurrenceSeries()

    end = spec.end_date
    cursor = start
    found: list[date] = []
    scanned = 0

    while scanned < cfg.max_scan:
        if end is not None and cursor > end:
            break

        if matches(spec, cursor) and cursor >= start:
            found.append(cursor)

        try:
            cursor = next_candidate(spec, cursor, cfg.daily_interval_stepping)
        except (OverflowError, ValueError):
            logger.debug("Recurrence cursor ran past the calendar range after %s", cursor)
            scanned += 1
            break
        scanned += 1

    scan_cap_reached = scanned >= cfg.max_scan
    dates = sorted({d for d in found if d >= start})[: cfg.max_output]

    logger.debug(
        "Expanded %s recurrence from %s: %d occurrences, %d days scanned%s",
        spec.frequency.value,
        start.isoformat(),
        len(dates),
        scanned,
        " (scan cap reached)" if scan_cap_reached else "",
    )

    return OccurrenceSeries(dates=dates, scanned_days=scanned, scan_cap_reached=scan_cap_reached)


def expand(spec: RecurrenceSpec, config: Optional[RecurrenceEngineConfig] = None) -> list[date]:
    """Expand ``spec`` into its ordered list of occurrence dates."""
    return expand_series(spec, config).dates
