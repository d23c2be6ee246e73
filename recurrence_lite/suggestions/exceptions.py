"""Exception hierarchy for task-suggestion errors.

Suggestions are an optional, fallible side channel: none of these errors
affect recurrence expansion, and callers are expected to surface them as a
message next to an otherwise working preview.
"""


class SuggestionError(Exception):
    """Base exception for all suggestion errors."""


class SuggestionConfigError(SuggestionError):
    """Suggestion provider is not configured.

    Raised when:
    - No API key is available
    - The configured model or endpoint is empty

    Should result in HTTP 503 Service Unavailable response.
    """


class SuggestionTransportError(SuggestionError):
    """The request never produced an HTTP response.

    Raised when:
    - Connection or DNS resolution fails
    - The request times out

    Should result in HTTP 502 Bad Gateway response.
    """


class SuggestionAPIError(SuggestionError):
    """The text-generation API answered with an error status.

    Carries the upstream status code; the message is taken from the error
    body when one is present.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SuggestionEmptyResponseError(SuggestionError):
    """The API answered successfully but returned no suggestion text."""
