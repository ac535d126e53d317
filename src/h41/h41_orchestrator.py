"""
Purpose
-------
Command-line entry point for the H.4.1 engine: discover published editions
or fetch and extract one edition, printing JSON to STDOUT.

Key behaviors
-------------
- `discover [TARGET] [LOOKBACK] [LOG_LEVEL]` prints the discovered ISO dates,
  most recent first.
- `extract YYYY-MM-DD [LOG_LEVEL]` fetches the edition published on that date,
  extracts every field, and prints the full `ExtractionResult` plus a
  display block with thousands-separated figures.
- Fetch and discovery failures are logged at ERROR and end the process with
  exit status 1.

Conventions
-----------
- `.env` is loaded with `python-dotenv` before anything reads the
  environment (`USER_AGENT`, `LOG_LEVEL`, `LOG_FORMAT`, `LOG_DEST`).
- Log records go to STDERR (or `LOG_DEST`); STDOUT carries only the JSON
  result.

Downstream usage
----------------
`python -m h41.h41_orchestrator discover 40 120 INFO` or
`python -m h41.h41_orchestrator extract 2026-01-08 DEBUG`. Library callers
should use `fetch_and_extract`, `discover` and `extract` directly.
"""

import dataclasses
import json
import sys
from typing import Any, Dict, List, Sequence

from dotenv import load_dotenv

from h41.discovery.discovery_config import DEFAULT_LOOKBACK_DAYS, DEFAULT_TARGET_COUNT
from h41.discovery.release_discovery import discover
from h41.extraction.extraction_orchestrator import extract
from h41.extraction.extraction_types import ExtractionResult, HistoricalSnapshot
from h41.fetch.fetch_errors import H41FetchError
from h41.fetch.fetch_types import Edition
from h41.fetch.fetch_validator import fetch_release
from h41.logging.h41_logger import H41Logger, initialize_logger
from h41.parsing.value_parser import format_value

DISCOVER_COMMAND: str = "discover"
EXTRACT_COMMAND: str = "extract"


def main() -> None:
    """
    Run the command named on the command line.

    Parameters
    ----------
    None
        Arguments are read from `sys.argv` via `extract_cli_args`.

    Returns
    -------
    None
        Prints JSON to STDOUT; exits with status 1 on fetch or discovery
        failure.

    Raises
    ------
    ValueError
        If the command or its arguments are invalid.
    """

    load_dotenv()
    command, arguments, logger_level = extract_cli_args()
    logger: H41Logger = initialize_logger(
        component_name="h41_orchestrator",
        level=logger_level,
        run_meta={"command": command, "arguments": arguments},
    )
    try:
        if command == DISCOVER_COMMAND:
            target_count, lookback_days = arguments
            dates: List[str] = discover(
                int(target_count), int(lookback_days), logger.bind("release_discovery")
            )
            print(json.dumps(dates, indent=2))
            return
        result: ExtractionResult = fetch_and_extract(arguments[0], None, logger)
    except H41FetchError as e:
        logger.error(
            "command_failed",
            msg=str(e),
            context={"command": command, "error": type(e).__name__, "url": e.url},
        )
        sys.exit(1)
    print(json.dumps(result_payload(result), indent=2, default=str))


def extract_cli_args() -> tuple[str, List[str], str]:
    """
    Parse `sys.argv` into the command, its positional arguments and the
    logger level.

    Returns
    -------
    tuple[str, list[str], str]
        `(command, arguments, logger_level)`. For "discover" the arguments
        are `[target_count, lookback_days]` (defaults filled in); for
        "extract" they are `[date_iso]`.

    Raises
    ------
    ValueError
        If the command is unknown or "extract" lacks its date.
    """

    args: List[str] = sys.argv[1:]
    if not args:
        raise ValueError(f"Expected a command: {DISCOVER_COMMAND} or {EXTRACT_COMMAND}")
    command: str = args[0]
    logger_level: str = "INFO"
    if command == DISCOVER_COMMAND:
        target_count: str = args[1] if len(args) > 1 else str(DEFAULT_TARGET_COUNT)
        lookback_days: str = args[2] if len(args) > 2 else str(DEFAULT_LOOKBACK_DAYS)
        if len(args) > 3:
            logger_level = args[3]
        return command, [target_count, lookback_days], logger_level
    if command == EXTRACT_COMMAND:
        if len(args) < 2:
            raise ValueError("The extract command needs a YYYY-MM-DD date")
        if len(args) > 2:
            logger_level = args[2]
        return command, [args[1]], logger_level
    raise ValueError(f"Unknown command: {command}")


def fetch_and_extract(
    date_iso: str,
    snapshots: Sequence[HistoricalSnapshot] | None,
    logger: H41Logger,
) -> ExtractionResult:
    """
    Fetch the edition published on `date_iso` and extract it.

    Parameters
    ----------
    date_iso : str
        Publication date, `YYYY-MM-DD`.
    snapshots : Sequence[HistoricalSnapshot] or None
        Prior editions for week-ago / year-ago comparisons.
    logger : H41Logger
        Parent logger; fetch and extraction get bound child loggers.

    Returns
    -------
    ExtractionResult
        Extraction of the fetched document.

    Raises
    ------
    H41FetchError
        Any fetch failure from `fetch_release`.
    """

    edition: Edition = fetch_release(date_iso, logger.bind("fetch_validator"))
    logger.info(
        "edition_ready",
        context={
            "publication_date": edition.publication_date,
            "as_of_date": edition.as_of_date,
            "url": edition.source_url,
        },
    )
    return extract(date_iso, edition.html, snapshots, logger.bind("extraction_orchestrator"))


def display_fields(result: ExtractionResult) -> Dict[str, Dict[str, str]]:
    """
    Render current values and changes the way the release prints them.
    """

    return {
        key: {
            "current": format_value(value.current),
            "weekly_change": format_value(value.weekly_change, signed=True),
            "yearly_change": format_value(value.yearly_change, signed=True),
        }
        for key, value in result.fields.items()
    }


def result_payload(result: ExtractionResult) -> Dict[str, Any]:
    payload: Dict[str, Any] = dataclasses.asdict(result)
    payload["display"] = display_fields(result)
    return payload


if __name__ == "__main__":
    main()
