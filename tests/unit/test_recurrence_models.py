"""Unit tests for recurrence_lite.domain.recurrence_models."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from recurrence_lite.domain.recurrence_models import (
    SUNDAY,
    Frequency,
    MonthlyMode,
    OccurrenceSeries,
    RecurrenceSpec,
)

pytestmark = [pytest.mark.unit, pytest.mark.fast]


class TestRecurrenceSpecParsing:
    """Tests for input parsing and aliases."""

    def test_model_validate_when_camel_case_then_populates_fields(self) -> None:
        """JSON-style camelCase keys map onto the snake_case fields."""
        spec = RecurrenceSpec.model_validate(
            {
                "frequency": "Monthly",
                "startDate": "2024-01-16",
                "endDate": "2024-06-30",
                "monthlyMode": "nthDayOfWeek",
                "nth": 3,
                "weekdayInMonth": 2,
                "dayOfMonth": 16,
            }
        )

        assert spec.frequency is Frequency.MONTHLY
        assert spec.start_date == date(2024, 1, 16)
        assert spec.end_date == date(2024, 6, 30)
        assert spec.monthly_mode is MonthlyMode.NTH_WEEKDAY
        assert (spec.nth, spec.weekday_in_month, spec.day_of_month) == (3, 2, 16)

    def test_defaults_when_empty_then_daily_every_day(self) -> None:
        """An empty spec is a daily, interval-1 pattern with no start."""
        spec = RecurrenceSpec()

        assert spec.frequency is Frequency.DAILY
        assert spec.interval == 1
        assert spec.start_date is None
        assert spec.days_of_week == frozenset()
        assert spec.monthly_mode is MonthlyMode.DAY_OF_MONTH
        assert spec.weekday_in_month == SUNDAY

    @pytest.mark.parametrize("value", ["weekly", "WEEKLY", " Weekly "])
    def test_frequency_when_any_case_then_parsed(self, value: str) -> None:
        """Frequency names are case-insensitive."""
        assert RecurrenceSpec(frequency=value).frequency is Frequency.WEEKLY

    def test_frequency_when_unknown_then_validation_error(self) -> None:
        """Unknown frequencies are structurally invalid."""
        with pytest.raises(ValidationError):
            RecurrenceSpec(frequency="Hourly")

    @pytest.mark.parametrize("value", ["day_of_month", "day-of-month", "dayOfMonth"])
    def test_monthly_mode_when_alias_then_parsed(self, value: str) -> None:
        """Monthly mode accepts snake, kebab and camel spellings."""
        assert RecurrenceSpec(monthly_mode=value).monthly_mode is MonthlyMode.DAY_OF_MONTH

    def test_monthly_mode_when_nth_weekday_alias_then_parsed(self) -> None:
        """``nth-weekday`` is an alias for nthDayOfWeek."""
        assert RecurrenceSpec(monthly_mode="nth-weekday").monthly_mode is MonthlyMode.NTH_WEEKDAY

    def test_dates_when_blank_string_then_none(self) -> None:
        """Cleared form fields arrive as empty strings."""
        spec = RecurrenceSpec(start_date="", end_date="  ")

        assert spec.start_date is None
        assert spec.end_date is None

    def test_dates_when_datetime_then_truncated_to_date(self) -> None:
        """Datetimes keep only their calendar date."""
        spec = RecurrenceSpec(start_date=datetime(2024, 3, 1, 15, 30))

        assert spec.start_date == date(2024, 3, 1)

    def test_dates_when_unparseable_then_validation_error(self) -> None:
        """Garbage dates are structurally invalid."""
        with pytest.raises(ValidationError):
            RecurrenceSpec(start_date="not-a-date")


class TestRecurrenceSpecNormalization:
    """Tests for clamping of malformed numeric input."""

    @pytest.mark.parametrize(("raw", "expected"), [(0, 1), (-3, 1), ("abc", 1), (None, 1), ("4", 4), (2, 2)])
    def test_interval_when_malformed_then_clamped_to_one(self, raw: object, expected: int) -> None:
        """Non-positive or non-numeric intervals become 1."""
        assert RecurrenceSpec(interval=raw).interval == expected

    @pytest.mark.parametrize(("raw", "expected"), [(0, 1), (32, 1), ("x", 1), ("31", 31), (15, 15)])
    def test_day_of_month_when_out_of_range_then_clamped(self, raw: object, expected: int) -> None:
        """Days of month outside 1..31 become 1."""
        assert RecurrenceSpec(day_of_month=raw).day_of_month == expected

    def test_days_of_week_when_out_of_range_then_dropped(self) -> None:
        """Weekday indices outside 0-6 are dropped; duplicates collapse."""
        spec = RecurrenceSpec(days_of_week=[1, 9, -1, "3", 3])

        assert spec.days_of_week == frozenset({1, 3})

    def test_days_of_week_when_none_then_empty(self) -> None:
        """A missing day set is empty."""
        assert RecurrenceSpec(days_of_week=None).days_of_week == frozenset()

    def test_nth_when_out_of_range_then_kept(self) -> None:
        """Out-of-range nth values are kept; they simply never match."""
        assert RecurrenceSpec(nth=6).nth == 6


class TestRecurrenceSpecBehavior:
    """Tests for immutability and derived values."""

    def test_spec_when_assigned_then_frozen(self) -> None:
        """Specs are values; change them with model_copy."""
        spec = RecurrenceSpec(interval=2)

        with pytest.raises(ValidationError):
            spec.interval = 3  # type: ignore[misc]

        assert spec.model_copy(update={"interval": 3}).interval == 3
        assert spec.interval == 2

    def test_with_start_defaults_when_start_then_derives_qualifiers(self) -> None:
        """Tuesday 2024-01-16 is the third Tuesday and the 16th."""
        spec = RecurrenceSpec(frequency="Monthly", start_date=date(2024, 1, 16)).with_start_defaults()

        assert spec.day_of_month == 16
        assert spec.nth == 3
        assert spec.weekday_in_month == 2

    def test_with_start_defaults_when_no_start_then_first_sunday(self) -> None:
        """Without a start the qualifiers reset to day 1 and the first Sunday."""
        spec = RecurrenceSpec(day_of_month=20, nth=4, weekday_in_month=5).with_start_defaults()

        assert (spec.day_of_month, spec.nth, spec.weekday_in_month) == (1, 1, SUNDAY)

    def test_model_dump_when_by_alias_then_camel_case(self) -> None:
        """Serialized specs use the camelCase wire names."""
        dumped = RecurrenceSpec(start_date=date(2024, 1, 1)).model_dump(mode="json", by_alias=True)

        assert dumped["startDate"] == "2024-01-01"
        assert dumped["frequency"] == "Daily"
        assert "daysOfWeek" in dumped


class TestOccurrenceSeries:
    """Tests for OccurrenceSeries."""

    def test_series_when_dates_then_count(self) -> None:
        """The count reads the date list."""
        series = OccurrenceSeries(dates=[date(2024, 1, 1), date(2024, 1, 3)])

        assert series.count == 2

    def test_series_when_empty_then_zero_count(self) -> None:
        """An empty series has no occurrences."""
        series = OccurrenceSeries()

        assert series.count == 0
        assert series.scan_cap_reached is False
