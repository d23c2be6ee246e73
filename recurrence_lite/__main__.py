"""Command-line entry for recurrence_lite.

Expands a recurrence spec given as flags (or a YAML/JSON spec file) and prints
the occurrence dates, optionally with a summary, a month-grid preview and
task suggestions. ``--serve`` starts the JSON API instead.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import date
from typing import Any, NoReturn, Optional

from dateutil import parser as date_parser
from pydantic import ValidationError

from . import _init_logging, run_server
from .config_loader import Config, load_config, load_spec_file
from .core.config_manager import ConfigManager
from .domain.calendar_preview import build_month_grid, initial_month
from .domain.recurrence_engine import expand_series
from .domain.recurrence_models import Frequency, MonthlyMode, RecurrenceSpec
from .domain.summary import DAY_ABBREVIATIONS, summary_text

logger = logging.getLogger(__name__)

EXIT_USAGE = 2
EXIT_SUGGESTION_FAILED = 1

# Filled from the start date when not given explicitly.
_MONTHLY_QUALIFIERS = ("day_of_month", "nth", "weekday_in_month")

_WEEKDAY_TOKENS = {abbr.lower(): index for index, abbr in enumerate(DAY_ABBREVIATIONS)}
_WEEKDAY_TOKENS.update({abbr[:2].lower(): index for index, abbr in enumerate(DAY_ABBREVIATIONS)})


def _parse_date(value: str) -> date:
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError) as exc:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r}") from exc


def _parse_weekday(value: str) -> int:
    token = value.strip().lower()
    if token.isdigit() and 0 <= int(token) <= 6:
        return int(token)
    for key in (token[:3], token[:2]):
        if key in _WEEKDAY_TOKENS:
            return _WEEKDAY_TOKENS[key]
    raise argparse.ArgumentTypeError(f"invalid weekday: {value!r} (use 0-6 with Sunday=0, or a name)")


def _parse_weekday_list(value: str) -> list[int]:
    tokens = [t for t in value.replace(" ", ",").split(",") if t]
    return sorted({_parse_weekday(t) for t in tokens})


def _parse_monthly_mode(value: str) -> MonthlyMode:
    key = value.replace("-", "").replace("_", "").lower()
    if key in ("dayofmonth", "day"):
        return MonthlyMode.DAY_OF_MONTH
    if key in ("nthweekday", "nthdayofweek", "nth"):
        return MonthlyMode.NTH_WEEKDAY
    raise argparse.ArgumentTypeError(f"invalid monthly mode: {value!r}")


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for recurrence_lite CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="recurrence_lite",
        description="Recurrence Lite - expand recurring date patterns",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m recurrence_lite --frequency weekly --days mon,wed --start 2024-01-01
  python -m recurrence_lite --frequency monthly --monthly-mode nth-weekday --nth 2 --weekday tue
  python -m recurrence_lite --spec-file pattern.yaml --calendar --summary
  python -m recurrence_lite --serve --port 3000
        """,
    )

    spec_group = parser.add_argument_group("recurrence")
    spec_group.add_argument("--spec-file", metavar="PATH", help="YAML/JSON file holding a recurrence spec")
    spec_group.add_argument(
        "--frequency",
        type=str.capitalize,
        choices=[f.value for f in Frequency],
        help="Recurrence frequency (default: Daily)",
    )
    spec_group.add_argument("--interval", type=int, metavar="N", help="Every N units (default: 1)")
    spec_group.add_argument("--start", type=_parse_date, metavar="DATE", help="Start date (default: today)")
    spec_group.add_argument("--end", type=_parse_date, metavar="DATE", help="Optional inclusive end date")
    spec_group.add_argument(
        "--days",
        type=_parse_weekday_list,
        metavar="DAYS",
        help="Weekly days, e.g. 'mon,wed' or '1,3' (Sunday=0)",
    )
    spec_group.add_argument(
        "--monthly-mode",
        type=_parse_monthly_mode,
        metavar="MODE",
        help="Monthly mode: 'day-of-month' or 'nth-weekday'",
    )
    spec_group.add_argument("--day-of-month", type=int, metavar="N", help="Day 1-31 for day-of-month mode")
    spec_group.add_argument("--nth", type=int, metavar="N", help="Occurrence 1-5 for nth-weekday mode")
    spec_group.add_argument("--weekday", type=_parse_weekday, metavar="DAY", help="Weekday for nth-weekday mode")

    output_group = parser.add_argument_group("output")
    output_group.add_argument("--limit", type=int, metavar="N", help="Print at most N dates")
    output_group.add_argument("--summary", action="store_true", help="Print a human-readable summary")
    output_group.add_argument("--calendar", action="store_true", help="Print a month-grid preview")
    output_group.add_argument("--suggest", action="store_true", help="Ask for recurring-task suggestions")
    output_group.add_argument("--json", action="store_true", help="Print the result as JSON")

    parser.add_argument("--config", metavar="PATH", help="Config file (default: ./recurrence_lite/config.yaml)")
    parser.add_argument("--serve", action="store_true", help="Start the JSON API server")
    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port for --serve (default: 8080, or RECURRENCE_LITE_SERVER_PORT)",
    )

    return parser


def build_spec(args: argparse.Namespace, config: Config, today: Optional[date] = None) -> RecurrenceSpec:
    """Combine the config's default spec, an optional spec file and CLI flags.

    Flags win over the spec file, which wins over the config. Monthly
    qualifiers that were not given anywhere default from the start date.

    Raises:
        ValueError: If the spec file is not a mapping
        pydantic.ValidationError: If the resulting spec is invalid
    """
    base = config.recurrence
    if args.spec_file:
        base = load_spec_file(args.spec_file)

    values: dict[str, Any] = base.model_dump(exclude_unset=True) if base is not None else {}

    overrides = {
        "frequency": args.frequency,
        "interval": args.interval,
        "start_date": args.start,
        "end_date": args.end,
        "days_of_week": args.days,
        "monthly_mode": args.monthly_mode,
        "day_of_month": args.day_of_month,
        "nth": args.nth,
        "weekday_in_month": args.weekday,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    if values.get("start_date") is None:
        values["start_date"] = today or date.today()

    spec = RecurrenceSpec.model_validate(values)

    derived = spec.with_start_defaults()
    missing = {key: getattr(derived, key) for key in _MONTHLY_QUALIFIERS if key not in values}
    if missing:
        spec = spec.model_copy(update=missing)
    return spec


def _render(spec: RecurrenceSpec, config: Config, args: argparse.Namespace) -> str:
    series = expand_series(spec, config.engine_config())
    dates = series.dates[: args.limit] if args.limit is not None else series.dates

    if args.json:
        body = series.model_dump(mode="json")
        body["dates"] = [d.isoformat() for d in dates]
        body["count"] = series.count
        body["spec"] = spec.model_dump(mode="json", by_alias=True)
        if args.summary:
            body["summary"] = summary_text(spec).splitlines()
        return json.dumps(body, indent=2, sort_keys=True)

    sections = []
    if args.summary:
        sections.append(summary_text(spec))
    if args.calendar:
        year, month = initial_month(spec)
        sections.append(build_month_grid(year, month, series.dates, spec.start_date, spec.end_date).render_text())
    listing = "\n".join(d.isoformat() for d in dates) if dates else "(no occurrences)"
    if len(dates) < series.count:
        listing += f"\n... {series.count - len(dates)} more"
    sections.append(listing)
    return "\n\n".join(sections)


async def _fetch_suggestions(spec: RecurrenceSpec, config: Config) -> str:
    from .core.http_client import close_all_clients
    from .suggestions import GeminiSuggestionClient, SuggestionSettings

    client = GeminiSuggestionClient(SuggestionSettings.from_config(config))
    try:
        return await client.suggest(spec)
    finally:
        await close_all_clients()


def main(argv: Optional[list[str]] = None) -> NoReturn:
    """Run the recurrence_lite CLI."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    if args.serve:
        run_server(args)
        sys.exit(0)

    _init_logging(os.environ.get("RECURRENCE_LITE_LOG_LEVEL", "WARNING"))

    try:
        config = load_config(args.config).merged_with(ConfigManager().load_full_config())
        spec = build_spec(args, config)
    except (ValueError, OSError) as exc:
        # pydantic.ValidationError is a ValueError
        message = str(exc) if not isinstance(exc, ValidationError) else f"invalid recurrence spec:\n{exc}"
        print(f"recurrence_lite: {message}", file=sys.stderr)
        sys.exit(EXIT_USAGE)

    print(_render(spec, config, args))

    if args.suggest:
        from .suggestions import SuggestionError

        try:
            text = asyncio.run(_fetch_suggestions(spec, config))
        except SuggestionError as exc:
            print(f"Failed to get suggestions: {exc}", file=sys.stderr)
            sys.exit(EXIT_SUGGESTION_FAILED)
        print()
        print(text)

    sys.exit(0)


if __name__ == "__main__":
    main()
