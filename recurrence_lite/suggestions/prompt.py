"""Prompt construction for recurring-task suggestions."""

from ..domain.recurrence_models import Frequency, MonthlyMode, RecurrenceSpec
from ..domain.summary import format_date, interval_phrase, nth_weekday_phrase, weekday_list

SUGGESTION_COUNT = 5


def build_prompt(spec: RecurrenceSpec, count: int = SUGGESTION_COUNT) -> str:
    """Build the natural-language prompt describing ``spec``.

    Examples:
        >>> from datetime import date
        >>> spec = RecurrenceSpec(frequency="Weekly", interval=2, days_of_week={1, 3},
        ...                       start_date=date(2024, 1, 1))
        >>> build_prompt(spec)  # doctest: +NORMALIZE_WHITESPACE
        'Suggest 5 common recurring tasks or reminders for a recurrence pattern that is
        every 2 weeks, specifically on Monday and Wednesday. Provide the suggestions as a
        numbered list.'
    """
    pattern = interval_phrase(spec)

    if spec.frequency == Frequency.WEEKLY and spec.days_of_week:
        pattern += f", specifically on {weekday_list(spec.days_of_week, ' and ')}"
    elif spec.frequency == Frequency.MONTHLY:
        if spec.monthly_mode == MonthlyMode.NTH_WEEKDAY:
            pattern += f", on {nth_weekday_phrase(spec)}"
        else:
            pattern += f", on day {spec.day_of_month} of the month"
    elif spec.frequency == Frequency.YEARLY and spec.start_date is not None:
        pattern += f", starting on {format_date(spec.start_date)}"

    return (
        f"Suggest {count} common recurring tasks or reminders for a recurrence pattern "
        f"that is {pattern}. Provide the suggestions as a numbered list."
    )
