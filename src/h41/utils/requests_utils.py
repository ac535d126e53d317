"""
Purpose
-------
HTTP GET helper with retry, exponential backoff and response validation,
shared by the edition fetcher, the index-page reader and the discovery
probes.

Key behaviors
-------------
- Sends browser-like request headers; callers can override any header
  (the fetch state machine varies Accept-Language between attempts).
- Retries transient network failures and 5xx responses with exponential
  backoff plus jitter; 429 honors `Retry-After`.
- Fails fast on every other non-2xx status by raising `requests.HTTPError`
  with the offending response attached, so callers can read the status.
- Optionally enforces an HTML Content-Type.

Conventions
-----------
- Backoff is `backoff_factor * 2 ** attempt`, jittered by roughly 10%.
- Timeouts are `(connect, read)` tuples passed straight to `requests`.
- USER_AGENT in the environment overrides the default browser User-Agent.

Downstream usage
----------------
Use `make_request` as a context manager-compatible call
(`with make_request(url, ...) as response:`) and read `response.text`.
"""

import datetime as dt
import email.utils as eu
import math
import os
import random
import time
from typing import Any, TypeAlias

import requests

ExceptionTypes: TypeAlias = tuple[type[BaseException], ...]

DEFAULT_USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
RETRYABLE_STATUS_CODES: set[int] = {500, 502, 503, 504}
TOO_MANY_REQUESTS_STATUS_CODE: int = 429
RETRYABLE_EXCEPTIONS: ExceptionTypes = (
    requests.Timeout,
    requests.ConnectionError,
    requests.RequestException,
    ValueError,
)
RETRY_AFTER_ERRORS: ExceptionTypes = (ValueError, TypeError, AttributeError)


def make_request(
    url: str,
    headers: dict[str, str] | None = None,
    expect_html: bool = False,
    max_retries: int = 3,
    backoff_factor: float = 0.5,
    timeout: tuple[float, float] = (3.5, 10.0),
    session: requests.Session | None = None,
) -> requests.Response:
    """
    GET `url` with retry and backoff.

    Parameters
    ----------
    url : str
        Target URL.
    headers : dict[str, str], optional
        Header overrides merged on top of `create_header()`.
    expect_html : bool, default=False
        When True, a non-HTML Content-Type is treated as a retryable failure.
    max_retries : int, default=3
        Maximum number of attempts.
    backoff_factor : float, default=0.5
        Base multiplier for exponential backoff.
    timeout : tuple[float, float], default=(3.5, 10.0)
        (connect, read) timeout in seconds.
    session : requests.Session, optional
        Session to reuse connections across calls.

    Returns
    -------
    requests.Response
        A response with a 2xx status.

    Raises
    ------
    requests.HTTPError
        On a non-retryable status, or the last 5xx once attempts run out.
    requests.RequestException
        The last network-level failure once attempts run out.
    ValueError
        The last Content-Type failure once attempts run out.
    """

    header: dict[str, str] = create_header(headers)
    last_exception: BaseException | None = None
    for attempt in range(max_retries):
        try:
            return try_request(url, header, timeout, expect_html, session)
        except RETRYABLE_EXCEPTIONS as e:
            last_exception = e
            exception_response: Any | None = (
                e.response if isinstance(e, requests.RequestException) else None
            )
            check_response(exception_response, attempt, max_retries, backoff_factor)
    raise last_exception if last_exception else RuntimeError("Request failed without exception")


def try_request(
    url: str,
    header: dict[str, str],
    timeout: tuple[float, float] = (3.5, 10.0),
    expect_html: bool = False,
    session: requests.Session | None = None,
) -> requests.Response:
    """
    Send one GET and validate its status and, optionally, its Content-Type.

    Raises
    ------
    requests.HTTPError
        If the status is not 2xx.
    ValueError
        If HTML is expected but the Content-Type says otherwise.
    """

    if session is not None:
        response = session.get(url, headers=header, timeout=timeout)
    else:
        response = requests.get(url, headers=header, timeout=timeout)
    response.raise_for_status()
    if expect_html:
        content_type: str = response.headers.get("Content-Type", "").lower()
        if content_type and "html" not in content_type:
            raise ValueError(f"Expected HTML response, got {content_type}")
    return response


def create_header(overrides: dict[str, str] | None = None) -> dict[str, str]:
    """
    Build request headers: User-Agent, Accept, then caller overrides.

    Parameters
    ----------
    overrides : dict[str, str], optional
        Headers that replace or extend the defaults.

    Returns
    -------
    dict[str, str]
        Header mapping for `requests`.
    """

    header: dict[str, str] = {
        "User-Agent": os.environ.get("USER_AGENT", DEFAULT_USER_AGENT),
        "Accept": DEFAULT_ACCEPT,
    }
    if overrides:
        header.update(overrides)
    return header


def check_response(
    response: Any | None, attempt: int, max_retries: int, backoff_factor: float
) -> None:
    """
    Decide whether to retry and sleep before the next attempt.

    Parameters
    ----------
    response : requests.Response | None
        Failed response, or None for network-level errors.
    attempt : int
        Zero-based attempt number.
    max_retries : int
        Attempt limit.
    backoff_factor : float
        Base multiplier for exponential backoff.

    Returns
    -------
    None

    Raises
    ------
    requests.HTTPError
        If the response status is not retryable.

    Notes
    -----
    - No sleep happens after the final attempt.
    """

    sleep_time: float = backoff_factor * (2**attempt)
    if response is not None:
        sleep_time = handle_status_code(response, attempt, backoff_factor)
    if attempt < max_retries - 1:
        time.sleep(sleep_time)


def handle_status_code(response: Any, attempt: int, backoff_factor: float) -> float:
    """
    Map a failed response to a sleep duration, or raise for hard failures.

    Parameters
    ----------
    response : requests.Response
        Failed response carrying `status_code` and `headers`.
    attempt : int
        Zero-based attempt index.
    backoff_factor : float
        Base multiplier for exponential backoff.

    Returns
    -------
    float
        Seconds to sleep: jittered backoff for 5xx, `Retry-After` (or the
        jittered backoff) for 429.

    Raises
    ------
    requests.HTTPError
        For any other status; the response is attached to the exception.
    """

    status_code: Any | None = getattr(response, "status_code", None)
    headers: dict = getattr(response, "headers", None) or {}
    default_sleep: float = backoff_factor * (2**attempt) * random.uniform(0.9, 1.1)

    if status_code in RETRYABLE_STATUS_CODES:
        return default_sleep
    if status_code == TOO_MANY_REQUESTS_STATUS_CODE:
        retry_after = headers.get("Retry-After")
        if isinstance(retry_after, str):
            return extract_retry_after(retry_after, default_sleep)
        return default_sleep
    raise requests.HTTPError(f"Non-retryable status code: {status_code}", response=response)


def extract_retry_after(retry_after: str, default_sleep: float) -> float:
    """
    Parse a `Retry-After` value (delta-seconds or HTTP-date) into seconds.

    Parameters
    ----------
    retry_after : str
        Raw header value.
    default_sleep : float
        Returned when the value is unusable, non-positive or in the past.

    Returns
    -------
    float
        Seconds to wait. Never raises.
    """

    try:
        seconds: float = float(retry_after.strip())
        if not math.isfinite(seconds) or seconds <= 0.0:
            return default_sleep
        return seconds
    except RETRY_AFTER_ERRORS:
        try:
            retry_at: dt.datetime = eu.parsedate_to_datetime(retry_after)
            if retry_at.tzinfo is None:
                retry_at = retry_at.replace(tzinfo=dt.timezone.utc)
            secs: float = (retry_at - dt.datetime.now(dt.timezone.utc)).total_seconds()
            return secs if secs > 0.0 else default_sleep
        except RETRY_AFTER_ERRORS:
            return default_sleep
