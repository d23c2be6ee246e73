"""Task suggestions for recurrence specs (prompt builder and remote client)."""

from .client import GeminiSuggestionClient, SuggestionProvider, SuggestionSettings
from .exceptions import (
    SuggestionAPIError,
    SuggestionConfigError,
    SuggestionEmptyResponseError,
    SuggestionError,
    SuggestionTransportError,
)
from .prompt import build_prompt

__all__ = [
    "GeminiSuggestionClient",
    "SuggestionAPIError",
    "SuggestionConfigError",
    "SuggestionEmptyResponseError",
    "SuggestionError",
    "SuggestionProvider",
    "SuggestionSettings",
    "SuggestionTransportError",
    "build_prompt",
]
