"""Book the configured Arena Alicante group classes.

Logs in, loads the weekly schedule for each activity, picks the earliest
eligible class and reserves it. Meant to run from cron shortly after the
72-hour booking window opens.

Run with: arena-booker
Debug:    arena-booker --headed --log-level DEBUG
Subset:   arena-booker --activities boxeo,crossfit
Dry run:  arena-booker --dry-run
File:     arena-booker --activities-file activities.json

Activities come from ARENA_ACTIVITIES (JSON) or --activities-file, e.g.:
  {"boxeo": {"activityId": 5, "allowedDays": [1, 5], "minHour": 19}}

Exit codes:
  0 = no activity failed (booked, nothing eligible, or skipped)
  1 = at least one activity was rejected, waitlisted or errored
  2 = configuration error (nothing was sent to the site)
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence

from dotenv import load_dotenv

from arena_booker.config import BookerConfig, load_config, read_activities_file
from arena_booker.errors import ConfigurationError
from arena_booker.logging import get_logger, setup_logging
from arena_booker.models import ActivityResult
from arena_booker.orchestrator import BookingRunner
from arena_booker.session import browser_session

log = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        prog="arena-booker",
        description="Book Arena Alicante group classes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Launch browser in headed mode (visible window).",
    )
    parser.add_argument(
        "--activities",
        type=str,
        default=None,
        help="Comma-separated activity names to run (overrides RUN_ACTIVITIES).",
    )
    parser.add_argument(
        "--activities-file",
        type=str,
        default=None,
        help="JSON file with the activity map (overrides ARENA_ACTIVITIES).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Find eligible classes but do not reserve them.",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Output logs as JSON lines (overrides LOG_JSON).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (overrides LOG_LEVEL).",
    )
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict:
    overrides: dict = {}
    if args.headed:
        overrides["headless"] = False
    if args.activities is not None:
        overrides["run_activities"] = args.activities
    if args.activities_file is not None:
        overrides["arena_activities"] = read_activities_file(args.activities_file)
    if args.json_logs:
        overrides["log_json"] = True
    if args.log_level:
        overrides["log_level"] = args.log_level
    return overrides


def _format_table(results: list[ActivityResult]) -> str:
    """Format activity results as a human-readable table.

    Columns: Activity | Outcome | Class | Start | Detail
    """
    if not results:
        return "(no activities run)"

    headers = ["Activity", "Outcome", "Class", "Start", "Detail"]
    rows = [
        [
            r.name,
            r.outcome.value,
            f"{r.class_name} ({r.class_id})" if r.class_id is not None else "-",
            r.start_time.strftime("%a %d/%m %H:%M") if r.start_time else "-",
            r.detail or "-",
        ]
        for r in results
    ]

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    header_line = " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    separator = "-+-".join("-" * w for w in widths)
    row_lines = [
        " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)) for row in rows
    ]
    return "\n".join([header_line, separator, *row_lines])


async def run(config: BookerConfig, *, dry_run: bool = False) -> list[ActivityResult]:
    """Open a browser session and run every selected activity."""
    async with browser_session(config) as page:
        return await BookingRunner(page, config, dry_run=dry_run).run()


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    load_dotenv()

    try:
        config = load_config(**_overrides(args))
        config.require_credentials()
    except ConfigurationError as e:
        setup_logging()
        log.error("configuration_error", error=str(e))
        return EXIT_CONFIG

    setup_logging(json_output=config.log_json, log_level=config.log_level)

    try:
        results = asyncio.run(run(config, dry_run=args.dry_run))
    except ConfigurationError as e:
        log.error("configuration_error", error=str(e))
        return EXIT_CONFIG
    except Exception as e:
        log.exception("booking_run_crashed", error=str(e), type=type(e).__name__)
        return EXIT_FAILED

    print(_format_table(results))
    return EXIT_FAILED if any(r.failed for r in results) else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
