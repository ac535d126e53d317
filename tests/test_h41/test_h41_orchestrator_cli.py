"""
Purpose
-------
Tests for the command-line entry point `h41.h41_orchestrator`.

Key behaviors
-------------
- `extract_cli_args` parses both commands, fills discovery defaults and
  rejects missing or unknown commands.
- `main` prints discovery dates or the extraction payload as JSON on STDOUT.
- Fetch failures are logged at ERROR and exit with status 1.
- `fetch_and_extract` chains the fetcher and the extractor.

Conventions
-----------
- `sys.argv` is set with `monkeypatch`; `load_dotenv`, `initialize_logger`
  and network-facing collaborators are patched in the module namespace.
"""

import json
from typing import List

import pytest
from pytest import MonkeyPatch
from pytest_mock import MockerFixture

from h41 import h41_orchestrator
from h41.extraction.extraction_orchestrator import extract
from h41.fetch.fetch_errors import NoReleaseForDate
from h41.fetch.fetch_types import Edition
from tests.test_h41.h41_testing_utils import (
    AS_OF_DATE,
    REQUESTED_DATE,
    DummyLogger,
    edition_html,
)

MODULE: str = "h41.h41_orchestrator"


def set_argv(monkeypatch: MonkeyPatch, *args: str) -> None:
    monkeypatch.setattr("sys.argv", ["h41", *args])


def patch_runtime(mocker: MockerFixture) -> DummyLogger:
    logger = DummyLogger()
    mocker.patch(f"{MODULE}.load_dotenv")
    mocker.patch(f"{MODULE}.initialize_logger", return_value=logger)
    return logger


def make_edition() -> Edition:
    return Edition(
        publication_date=REQUESTED_DATE,
        as_of_date=AS_OF_DATE,
        source_url="https://www.federalreserve.gov/releases/h41/20260108/default.htm",
        fetched_at="2026-01-08T16:30:00+00:00",
        html=edition_html(),
    )


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["discover"], ("discover", ["40", "120"], "INFO")),
        (["discover", "10"], ("discover", ["10", "120"], "INFO")),
        (["discover", "10", "30", "DEBUG"], ("discover", ["10", "30"], "DEBUG")),
        (["extract", "2026-01-08"], ("extract", ["2026-01-08"], "INFO")),
        (["extract", "2026-01-08", "WARNING"], ("extract", ["2026-01-08"], "WARNING")),
    ],
)
def test_extract_cli_args(
    monkeypatch: MonkeyPatch, argv: List[str], expected: tuple[str, List[str], str]
) -> None:
    """
    Parameters
    ----------
    argv : list[str]
        Arguments after the program name.
    expected : tuple[str, list[str], str]
        Parsed `(command, arguments, logger_level)`.

    Returns
    -------
    None
        The test passes if the parsed tuple matches.
    """

    set_argv(monkeypatch, *argv)
    assert h41_orchestrator.extract_cli_args() == expected


@pytest.mark.parametrize("argv", [[], ["extract"], ["backfill", "2026-01-08"]])
def test_extract_cli_args_rejects_bad_input(monkeypatch: MonkeyPatch, argv: List[str]) -> None:
    set_argv(monkeypatch, *argv)
    with pytest.raises(ValueError):
        h41_orchestrator.extract_cli_args()


def test_main_discover_prints_dates(
    monkeypatch: MonkeyPatch, mocker: MockerFixture, capsys: pytest.CaptureFixture
) -> None:
    """
    Returns
    -------
    None
        The test passes if `discover` receives the parsed integers and the
        dates are printed as a JSON list.
    """

    set_argv(monkeypatch, "discover", "2", "30")
    logger = patch_runtime(mocker)
    mock_discover = mocker.patch(
        f"{MODULE}.discover", return_value=["2026-01-08", "2025-12-31"]
    )

    h41_orchestrator.main()

    mock_discover.assert_called_once_with(2, 30, logger)
    assert json.loads(capsys.readouterr().out) == ["2026-01-08", "2025-12-31"]


def test_main_extract_prints_payload(
    monkeypatch: MonkeyPatch, mocker: MockerFixture, capsys: pytest.CaptureFixture
) -> None:
    """
    Returns
    -------
    None
        The test passes if the printed payload carries the extracted fields,
        derived metrics and the display block with formatted figures.
    """

    set_argv(monkeypatch, "extract", REQUESTED_DATE)
    logger = patch_runtime(mocker)
    result = extract(REQUESTED_DATE, edition_html(), logger=DummyLogger())
    mock_fetch = mocker.patch(f"{MODULE}.fetch_and_extract", return_value=result)

    h41_orchestrator.main()

    mock_fetch.assert_called_once_with(REQUESTED_DATE, None, logger)
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is True
    assert payload["as_of_date"] == AS_OF_DATE
    assert payload["fields"]["securitiesHeld"]["current"] == 6500000.0
    assert payload["derived"]["reserve_integrity"]["ok"] is True
    assert payload["display"]["securitiesHeld"] == {
        "current": "6,500,000",
        "weekly_change": "-2,000",
        "yearly_change": "-800,000",
    }
    assert payload["display"]["loans"]["weekly_change"] == "+100"


def test_main_exits_on_fetch_error(
    monkeypatch: MonkeyPatch, mocker: MockerFixture, capsys: pytest.CaptureFixture
) -> None:
    """
    Returns
    -------
    None
        The test passes if `NoReleaseForDate` is logged as "command_failed"
        and the process exits with status 1 without printing a result.
    """

    set_argv(monkeypatch, "extract", "2026-01-01")
    logger = patch_runtime(mocker)
    mocker.patch(
        f"{MODULE}.fetch_and_extract",
        side_effect=NoReleaseForDate("2026-01-01", "https://example.invalid"),
    )

    with pytest.raises(SystemExit) as excinfo:
        h41_orchestrator.main()

    assert excinfo.value.code == 1
    assert logger.events("errors") == ["command_failed"]
    assert logger.errors[0][1]["error"] == "NoReleaseForDate"
    assert capsys.readouterr().out == ""


def test_fetch_and_extract_chains_fetch_and_extraction(mocker: MockerFixture) -> None:
    """
    Returns
    -------
    None
        The test passes if the fetched edition's HTML is extracted for the
        requested date and the hand-off is logged.
    """

    mock_fetch = mocker.patch(f"{MODULE}.fetch_release", return_value=make_edition())
    logger = DummyLogger()

    result = h41_orchestrator.fetch_and_extract(REQUESTED_DATE, None, logger)

    mock_fetch.assert_called_once_with(REQUESTED_DATE, logger)
    assert result.ok
    assert result.fields["tga"].current == 800000.0
    assert "edition_ready" in logger.events("infos")
