"""Async client for recurring-task suggestions from the Gemini API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from ..core.config_manager import get_config_value
from ..core.http_client import get_shared_client, record_client_error, record_client_success
from ..domain.recurrence_models import RecurrenceSpec
from .exceptions import (
    SuggestionAPIError,
    SuggestionConfigError,
    SuggestionEmptyResponseError,
    SuggestionTransportError,
)
from .prompt import build_prompt

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash"
HTTP_CLIENT_ID = "suggestions"


class SuggestionProvider(Protocol):
    """Protocol for injected suggestion capabilities."""

    async def suggest(self, spec: RecurrenceSpec) -> str:
        """Return free-text task suggestions for ``spec``.

        Args:
            spec: Recurrence specification to describe

        Returns:
            Suggestion text as returned by the provider

        Raises:
            SuggestionError: If suggestions cannot be produced
        """
        ...


@dataclass
class SuggestionSettings:
    """Settings for the Gemini suggestion client."""

    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    api_base: str = DEFAULT_API_BASE
    timeout_seconds: float = 60.0

    @classmethod
    def from_config(cls, config: Any) -> SuggestionSettings:
        """Extract suggestion settings from a Config object or mapping."""
        return cls(
            api_key=get_config_value(config, "gemini_api_key") or None,
            model=get_config_value(config, "gemini_model") or DEFAULT_MODEL,
            api_base=get_config_value(config, "gemini_api_base") or DEFAULT_API_BASE,
            timeout_seconds=float(get_config_value(config, "suggestion_timeout_seconds", 60.0)),
        )

    @property
    def is_configured(self) -> bool:
        """True when an API key and model are available."""
        return bool(self.api_key and self.model)

    def endpoint(self) -> str:
        """Return the generateContent URL for the configured model."""
        return f"{self.api_base.rstrip('/')}/models/{self.model}:generateContent"


def extract_suggestion_text(payload: Any) -> Optional[str]:
    """Pull ``candidates[0].content.parts[0].text`` out of a response body."""
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    if not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) and text else None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"API call failed with status: {response.status_code}"


class GeminiSuggestionClient:
    """Suggestion provider backed by the Gemini ``generateContent`` endpoint.

    Uses the shared pooled httpx client unless one is injected.
    """

    def __init__(
        self,
        settings: SuggestionSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self._http_client = http_client

    async def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return await get_shared_client(HTTP_CLIENT_ID)

    async def suggest(self, spec: RecurrenceSpec) -> str:
        """Request task suggestions for ``spec``.

        Raises:
            SuggestionConfigError: If no API key is configured
            SuggestionTransportError: If the request fails before a response
            SuggestionAPIError: If the API returns a non-success status
            SuggestionEmptyResponseError: If the response carries no text
        """
        if not self.settings.is_configured:
            raise SuggestionConfigError("Gemini API key is not configured")

        prompt = build_prompt(spec)
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        logger.debug("Requesting suggestions from model %s", self.settings.model)

        client = await self._client()
        try:
            response = await client.post(
                self.settings.endpoint(),
                params={"key": self.settings.api_key},
                json=payload,
                timeout=self.settings.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            await record_client_error(HTTP_CLIENT_ID)
            raise SuggestionTransportError(f"Suggestion request failed: {exc}") from exc

        if response.is_error:
            await record_client_error(HTTP_CLIENT_ID)
            message = _error_message(response)
            logger.warning("Suggestion API returned %d: %s", response.status_code, message)
            raise SuggestionAPIError(message, status_code=response.status_code)

        await record_client_success(HTTP_CLIENT_ID)

        try:
            body = response.json()
        except ValueError as exc:
            raise SuggestionEmptyResponseError("Suggestion response was not valid JSON") from exc

        text = extract_suggestion_text(body)
        if text is None:
            raise SuggestionEmptyResponseError("No suggestions found. Please try again.")
        return text
