"""
Purpose
-------
Exercise the retry / backoff control flow of `h41.utils.requests_utils`
without real I/O.

Key behaviors
-------------
- Happy path returns the response without sleeping.
- 5xx responses are retried and the request succeeds on a later attempt.
- 4xx responses (e.g. 403, 404) fail fast with the response attached to the
  raised `requests.HTTPError` and no sleep.
- With `expect_html=True`, a non-HTML Content-Type is retried and the last
  `ValueError` is raised once attempts run out.
- `Retry-After` values are honored for 429 and bad values fall back to the
  jittered backoff.

Conventions
-----------
- `requests.get`, `time.sleep` and `random.uniform` are patched in the
  module namespace.
- Responses are `MagicMock` objects whose `raise_for_status` mirrors the
  real behavior for the configured status.
"""

from typing import Dict, List
from unittest.mock import MagicMock

import pytest
import requests
from pytest import MonkeyPatch
from pytest_mock import MockerFixture

from h41.utils import requests_utils

TEST_URL: str = "https://www.federalreserve.gov/releases/h41/20260108/"
TEST_AGENT: str = "h41-test-agent"


def fake_response(status_code: int = 200, content_type: str = "text/html") -> MagicMock:
    """
    Build a response stand-in whose `raise_for_status` raises for non-2xx.

    Parameters
    ----------
    status_code : int, default=200
        HTTP status.
    content_type : str, default="text/html"
        Content-Type header value.

    Returns
    -------
    MagicMock
        Response stand-in.
    """

    response = MagicMock()
    response.status_code = status_code
    response.headers = {"Content-Type": content_type}
    response.text = "<html></html>"
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} error", response=response
        )
    return response


def patch_transport(mocker: MockerFixture, responses: List[MagicMock]) -> Dict[str, MagicMock]:
    mock_get = mocker.patch.object(requests_utils.requests, "get", side_effect=responses)
    mock_sleep = mocker.patch.object(requests_utils.time, "sleep")
    mocker.patch.object(requests_utils.random, "uniform", return_value=1.0)
    return {"get": mock_get, "sleep": mock_sleep}


def test_create_header_uses_env_agent_and_overrides(monkeypatch: MonkeyPatch) -> None:
    """
    Parameters
    ----------
    monkeypatch : MonkeyPatch
        Seeds USER_AGENT.

    Returns
    -------
    None
        The test passes if the env User-Agent is used, Accept defaults to
        HTML, and caller overrides are merged last.
    """

    monkeypatch.setenv("USER_AGENT", TEST_AGENT)
    header = requests_utils.create_header({"Accept-Language": "en-GB,en;q=0.8"})

    assert header == {
        "User-Agent": TEST_AGENT,
        "Accept": requests_utils.DEFAULT_ACCEPT,
        "Accept-Language": "en-GB,en;q=0.8",
    }


def test_create_header_defaults_without_env(monkeypatch: MonkeyPatch) -> None:
    """
    Returns
    -------
    None
        The test passes if the built-in browser User-Agent is used.
    """

    monkeypatch.delenv("USER_AGENT", raising=False)
    assert requests_utils.create_header()["User-Agent"] == requests_utils.DEFAULT_USER_AGENT


def test_make_request_happy(mocker: MockerFixture) -> None:
    """
    Returns
    -------
    None
        The test passes if the first response is returned, headers and timeout
        are forwarded, and no sleep happens.
    """

    ok = fake_response()
    mocks = patch_transport(mocker, [ok])

    assert requests_utils.make_request(TEST_URL, expect_html=True) is ok
    mocks["get"].assert_called_once()
    assert mocks["get"].call_args.kwargs["timeout"] == (3.5, 10.0)
    mocks["sleep"].assert_not_called()


def test_make_request_retries_server_errors_then_succeeds(mocker: MockerFixture) -> None:
    """
    Two 503 responses followed by a 200.

    Returns
    -------
    None
        The test passes if three GETs are sent, the backoff sleeps are 0.5 and
        1.0 seconds, and the 200 response is returned.
    """

    ok = fake_response()
    mocks = patch_transport(mocker, [fake_response(503), fake_response(503), ok])

    assert requests_utils.make_request(TEST_URL) is ok
    assert mocks["get"].call_count == 3
    assert [c.args[0] for c in mocks["sleep"].call_args_list] == [0.5, 1.0]


@pytest.mark.parametrize("status_code", [400, 403, 404, 410])
def test_make_request_fails_fast_on_client_errors(mocker: MockerFixture, status_code: int) -> None:
    """
    Parameters
    ----------
    status_code : int
        Non-retryable client status.

    Returns
    -------
    None
        The test passes if one GET is sent, `requests.HTTPError` carrying the
        response status is raised, and no sleep happens.
    """

    mocks = patch_transport(mocker, [fake_response(status_code)])

    with pytest.raises(requests.HTTPError) as excinfo:
        requests_utils.make_request(TEST_URL)
    assert excinfo.value.response.status_code == status_code
    assert mocks["get"].call_count == 1
    mocks["sleep"].assert_not_called()


def test_make_request_exhausts_on_non_html_content(mocker: MockerFixture) -> None:
    """
    Returns
    -------
    None
        The test passes if every attempt is made, sleeps happen between
        attempts only, and the last `ValueError` is raised.
    """

    mocks = patch_transport(mocker, [fake_response(content_type="application/json")] * 3)

    with pytest.raises(ValueError, match="Expected HTML"):
        requests_utils.make_request(TEST_URL, expect_html=True)
    assert mocks["get"].call_count == 3
    assert mocks["sleep"].call_count == 2


def test_make_request_reraises_network_error(mocker: MockerFixture) -> None:
    """
    Returns
    -------
    None
        The test passes if a persistent connection error is raised after the
        configured number of attempts.
    """

    mocks = patch_transport(mocker, [requests.ConnectionError("down")] * 2)

    with pytest.raises(requests.ConnectionError):
        requests_utils.make_request(TEST_URL, max_retries=2)
    assert mocks["get"].call_count == 2


def test_handle_status_code_honors_retry_after(mocker: MockerFixture) -> None:
    """
    Returns
    -------
    None
        The test passes if a 429 with "Retry-After: 7" sleeps 7 seconds and a
        500 sleeps the jittered backoff.
    """

    mocker.patch.object(requests_utils.random, "uniform", return_value=1.0)
    throttled = fake_response(429)
    throttled.headers = {"Retry-After": "7"}

    assert requests_utils.handle_status_code(throttled, 0, 0.5) == 7.0
    assert requests_utils.handle_status_code(fake_response(500), 2, 0.5) == 2.0


@pytest.mark.parametrize("raw", ["0", "-3", "nan", "not-a-date", ""])
def test_extract_retry_after_falls_back(raw: str) -> None:
    """
    Parameters
    ----------
    raw : str
        Unusable Retry-After value.

    Returns
    -------
    None
        The test passes if the default sleep is returned.
    """

    assert requests_utils.extract_retry_after(raw, 1.5) == 1.5
