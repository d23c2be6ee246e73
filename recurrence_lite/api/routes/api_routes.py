"""Main API routes for recurrence_lite."""

from __future__ import annotations

import logging
from typing import Any, Optional

from aiohttp import web
from pydantic import ValidationError

from ... import __version__
from ...domain.calendar_preview import preview_month
from ...domain.recurrence_engine import RecurrenceEngineConfig, expand_series
from ...domain.recurrence_models import RecurrenceSpec
from ...domain.summary import describe
from ...suggestions import SuggestionConfigError, SuggestionError, SuggestionProvider

logger = logging.getLogger(__name__)


async def _read_spec(request: web.Request) -> tuple[Optional[RecurrenceSpec], Optional[web.Response]]:
    """Parse the request body into a RecurrenceSpec or an HTTP 400 response."""
    try:
        data = await request.json()
    except ValueError:
        return None, web.json_response({"error": "invalid json"}, status=400)

    if not isinstance(data, dict):
        return None, web.json_response({"error": "spec must be a JSON object"}, status=400)

    try:
        return RecurrenceSpec.model_validate(data), None
    except ValidationError as exc:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return None, web.json_response({"error": "invalid spec", "details": details}, status=400)


def _optional_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    return int(raw)


def register_api_routes(
    app: Any,
    engine_config: RecurrenceEngineConfig,
    suggestion_provider: Optional[SuggestionProvider],
) -> None:
    """Register main API routes.

    Args:
        app: aiohttp web application
        engine_config: Expansion caps and daily stepping mode
        suggestion_provider: Optional injected suggestion capability
    """

    async def health_check(_request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response(
            {
                "status": "ok",
                "version": __version__,
                "suggestions_available": suggestion_provider is not None,
            }
        )

    async def post_occurrences(request: web.Request) -> web.Response:
        """Expand a spec and return its occurrences with a summary."""
        spec, error = await _read_spec(request)
        if error is not None:
            return error

        series = expand_series(spec, engine_config)
        logger.debug("/api/occurrences expanded %d dates", series.count)

        body = series.model_dump(mode="json")
        body["count"] = series.count
        body["summary"] = describe(spec).lines()
        return web.json_response(body)

    async def post_calendar(request: web.Request) -> web.Response:
        """Lay out one month of a spec's occurrences as a grid."""
        try:
            year = _optional_int(request.query.get("year"))
            month = _optional_int(request.query.get("month"))
        except ValueError:
            return web.json_response({"error": "year and month must be integers"}, status=400)
        if month is not None and not 1 <= month <= 12:
            return web.json_response({"error": "month must be 1-12"}, status=400)
        if year is not None and not 1 <= year <= 9999:
            return web.json_response({"error": "year must be 1-9999"}, status=400)

        spec, error = await _read_spec(request)
        if error is not None:
            return error

        grid = preview_month(spec, year, month, config=engine_config)
        body = grid.model_dump(mode="json")
        body["title"] = grid.title
        body["previous"] = dict(zip(("year", "month"), grid.previous_month()))
        body["next"] = dict(zip(("year", "month"), grid.next_month()))
        return web.json_response(body)

    async def post_suggestions(request: web.Request) -> web.Response:
        """Ask the suggestion provider for recurring-task ideas."""
        if suggestion_provider is None:
            return web.json_response({"error": "suggestions not configured"}, status=503)

        spec, error = await _read_spec(request)
        if error is not None:
            return error

        try:
            text = await suggestion_provider.suggest(spec)
        except SuggestionConfigError as exc:
            return web.json_response({"error": str(exc)}, status=503)
        except SuggestionError as exc:
            logger.exception("Suggestion request failed")
            return web.json_response({"error": f"Failed to get suggestions: {exc}"}, status=502)

        return web.json_response({"suggestions": text})

    app.router.add_get("/api/health", health_check)
    app.router.add_post("/api/occurrences", post_occurrences)
    app.router.add_post("/api/calendar", post_calendar)
    app.router.add_post("/api/suggestions", post_suggestions)
