import logging
from collections.abc import AsyncIterator, Generator
from datetime import date
from typing import Any

import pytest

from recurrence_lite.core.http_client import close_all_clients
from recurrence_lite.domain.recurrence_models import RecurrenceSpec
from recurrence_lite.lite_logging import LITE_MODULES, NOISY_LOGGERS

_CONFIG_ENV_KEYS = (
    "GEMINI_API_KEY",
    "RECURRENCE_LITE_GEMINI_API_KEY",
    "RECURRENCE_LITE_GEMINI_MODEL",
    "RECURRENCE_LITE_GEMINI_API_BASE",
    "RECURRENCE_LITE_SERVER_BIND",
    "RECURRENCE_LITE_SERVER_PORT",
    "RECURRENCE_LITE_LOG_LEVEL",
    "RECURRENCE_LITE_SUGGESTION_TIMEOUT",
    "RECURRENCE_LITE_DAILY_INTERVAL_STEPPING",
    "RECURRENCE_LITE_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear recurrence_lite environment variables for every test.

    Keeps a developer's exported GEMINI_API_KEY or log-level overrides from
    leaking into config and CLI tests.
    """
    for key in _CONFIG_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def restore_logger_levels() -> Generator[None, Any, None]:
    """Restore logger levels changed by logging setup under test."""
    names = ["", *NOISY_LOGGERS, *LITE_MODULES]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture(autouse=True)
async def cleanup_shared_http_clients() -> AsyncIterator[None]:
    """Close shared httpx clients after every test to prevent resource leaks."""
    yield
    await close_all_clients()


@pytest.fixture
def weekly_spec() -> RecurrenceSpec:
    """Every week on Monday and Wednesday from Monday 2024-01-01, unbounded."""
    return RecurrenceSpec(frequency="Weekly", days_of_week={1, 3}, start_date=date(2024, 1, 1))


@pytest.fixture
def weekly_spec_payload() -> dict[str, Any]:
    """The weekly spec as the camelCase JSON body the API accepts, bounded to two weeks."""
    return {
        "frequency": "Weekly",
        "interval": 1,
        "daysOfWeek": [1, 3],
        "startDate": "2024-01-01",
        "endDate": "2024-01-14",
    }
