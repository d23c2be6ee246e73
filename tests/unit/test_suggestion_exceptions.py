"""Unit tests for recurrence_lite.suggestions.exceptions."""

import pytest

from recurrence_lite.suggestions.exceptions import (
    SuggestionAPIError,
    SuggestionConfigError,
    SuggestionEmptyResponseError,
    SuggestionError,
    SuggestionTransportError,
)

pytestmark = [pytest.mark.unit, pytest.mark.fast]


class TestSuggestionExceptions:
    """Tests for the suggestion exception hierarchy."""

    @pytest.mark.parametrize(
        "exc_class",
        [SuggestionConfigError, SuggestionTransportError, SuggestionAPIError, SuggestionEmptyResponseError],
    )
    def test_exceptions_when_raised_then_caught_as_base(self, exc_class: type) -> None:
        """Every suggestion error is a SuggestionError."""
        with pytest.raises(SuggestionError, match="boom"):
            raise exc_class("boom")

    def test_api_error_when_status_code_then_stored(self) -> None:
        """The upstream status code is kept on the exception."""
        error = SuggestionAPIError("quota exceeded", status_code=429)

        assert error.status_code == 429
        assert str(error) == "quota exceeded"

    def test_api_error_when_no_status_code_then_none(self) -> None:
        assert SuggestionAPIError("failed").status_code is None
