"""
Purpose
-------
Discover which calendar dates carry a published H.4.1 edition by probing
the publisher's date-addressed URLs backward from an anchor date.

Key behaviors
-------------
- Establishes the anchor from the "current edition" page's self-declared
  release date, falling back to the most recent date linked from the index
  page. Without an anchor discovery fails fast with `AnchorNotEstablished`.
- Walks back one calendar day at a time over `lookback_days`, grouping the
  candidate days into windows of `window_size`.
- Probes each window with a bounded `ThreadPoolExecutor`; windows run one
  after another, nearest to the anchor first, and the walk stops once the
  target count is reached.
- A probe tries both URL shapes (`{YYYYMMDD}/` and `{YYYYMMDD}/default.htm`)
  and accepts a page only if `is_valid_release_page` passes. A probe that
  errors or times out counts as "not found" and never affects its siblings.

Conventions
-----------
- Dates are ISO `YYYY-MM-DD` strings in results; pandas Timestamps inside.
- Probes do not share a `requests.Session` across threads.
- Results are deduplicated and sorted most recent first.

Downstream usage
----------------
Call `discover(target_count, lookback_days, logger)`; feed the returned
dates to `fetch_validator.fetch_release`.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List

import pandas as pd
import requests
from lxml import etree

from h41.discovery.discovery_config import (
    ANCHOR_DATE_PATTERNS,
    ANCHOR_INVALID_MARKERS,
    ANCHOR_MAX_RETRIES,
    ANCHOR_TIMEOUT,
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_TARGET_COUNT,
    MAXIMAL_WORKER_COUNT,
    MIN_PAGE_LENGTH,
    PROBE_MAX_RETRIES,
    PROBE_TIMEOUT,
    WINDOW_SIZE,
)
from h41.discovery.structural_validator import is_valid_release_page
from h41.fetch.fetch_config import DEFAULT_HEADERS, EDITION_URL_VARIANTS, H41_CURRENT_URL
from h41.fetch.fetch_errors import AnchorNotEstablished
from h41.fetch.index_page import fetch_index_html, list_index_release_dates
from h41.logging.h41_logger import H41Logger, initialize_logger
from h41.parsing.document_dates import document_text
from h41.utils.date_utils import parse_month_date, to_iso, to_timestamp
from h41.utils.requests_utils import make_request


def discover(
    target_count: int = DEFAULT_TARGET_COUNT,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    logger: H41Logger | None = None,
    window_size: int = WINDOW_SIZE,
    max_workers: int = MAXIMAL_WORKER_COUNT,
    session: requests.Session | None = None,
) -> List[str]:
    """
    Return up to `target_count` edition dates, most recent first.

    Parameters
    ----------
    target_count : int, default=40
        Number of editions wanted; the walk stops after the window that
        reaches it.
    lookback_days : int, default=120
        Number of calendar days probed, anchor included.
    logger : H41Logger, optional
        Logger; a "release_discovery" logger is created when omitted.
    window_size : int, default=14
        Candidate days probed per window.
    max_workers : int, default=5
        Concurrent probes per window.
    session : requests.Session, optional
        Session for the anchor and index requests only.

    Returns
    -------
    list[str]
        Distinct ISO dates sorted descending, at most `target_count` long.

    Raises
    ------
    AnchorNotEstablished
        If neither the current-edition page nor the index page yields a date.
    """

    if logger is None:
        logger = initialize_logger("release_discovery")
    anchor: pd.Timestamp = establish_anchor(logger, session)
    logger.info(
        "discovery_started",
        context={
            "anchor": to_iso(anchor),
            "target_count": target_count,
            "lookback_days": lookback_days,
        },
    )
    found: set[str] = set()
    for window_index, window in enumerate(candidate_windows(anchor, lookback_days, window_size)):
        hits: List[str] = probe_window(window, logger, max_workers)
        found.update(hits)
        logger.info(
            "discovery_window_done",
            context={
                "window": window_index,
                "first_day": to_iso(window[0]),
                "last_day": to_iso(window[-1]),
                "hits": len(hits),
                "total": len(found),
            },
        )
        if len(found) >= target_count:
            break
    dates: List[str] = sorted(found, reverse=True)[:target_count]
    logger.info("discovery_finished", context={"count": len(dates)})
    return dates


def candidate_windows(
    anchor: pd.Timestamp, lookback_days: int, window_size: int
) -> List[List[pd.Timestamp]]:
    """
    Split the candidate days (anchor first, walking backward) into windows.

    Parameters
    ----------
    anchor : pd.Timestamp
        Most recent known release date.
    lookback_days : int
        Number of candidate days, anchor included.
    window_size : int
        Days per window; the last window may be shorter.

    Returns
    -------
    list[list[pd.Timestamp]]
        Windows in processing order; days inside a window are descending.
    """

    if lookback_days <= 0:
        return []
    days: List[pd.Timestamp] = list(
        pd.date_range(end=anchor, periods=lookback_days, freq="D")[::-1]
    )
    size: int = max(window_size, 1)
    return [days[start : start + size] for start in range(0, len(days), size)]


def probe_window(window: List[pd.Timestamp], logger: H41Logger, max_workers: int) -> List[str]:
    """
    Probe one window's days concurrently.

    Returns
    -------
    list[str]
        ISO dates whose probe succeeded, in completion order.
    """

    hits: List[str] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(probe_candidate, day, logger) for day in window]
        for future in as_completed(futures):
            result: str | None = future.result()
            if result is not None:
                hits.append(result)
    return hits


def probe_candidate(day: pd.Timestamp, logger: H41Logger) -> str | None:
    """
    Test whether `day` has an edition under either URL shape.

    Parameters
    ----------
    day : pd.Timestamp
        Candidate date.
    logger : H41Logger
        Logger for probe diagnostics.

    Returns
    -------
    str or None
        ISO date if a valid edition page was found, otherwise None.

    Notes
    -----
    - Request failures and timeouts are logged at DEBUG and treated as
      "not found".
    """

    ymd: str = day.strftime("%Y%m%d")
    for template in EDITION_URL_VARIANTS:
        url: str = template.format(ymd=ymd)
        try:
            with make_request(
                url,
                headers=DEFAULT_HEADERS,
                expect_html=True,
                max_retries=PROBE_MAX_RETRIES,
                timeout=PROBE_TIMEOUT,
            ) as response:
                html: str = response.text
        except (requests.RequestException, ValueError) as e:
            logger.debug("probe_failed", context={"url": url, "error": str(e)})
            continue
        if is_valid_release_page(html):
            logger.debug("probe_hit", context={"url": url})
            return to_iso(day)
        logger.debug("probe_rejected", context={"url": url, "length": len(html)})
    return None


def parse_anchor_date(html: str) -> pd.Timestamp | None:
    """
    Read the release date declared by the current-edition page.

    Parameters
    ----------
    html : str
        Current-edition page HTML.

    Returns
    -------
    pd.Timestamp or None
        None when the page is too short, is a not-found page, or declares no
        parseable date.
    """

    if not html or len(html) < MIN_PAGE_LENGTH:
        return None
    lowered: str = html.lower()
    if any(marker in lowered for marker in ANCHOR_INVALID_MARKERS):
        return None
    text: str = document_text(etree.HTML(html))
    for pattern in ANCHOR_DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            parsed: pd.Timestamp | None = parse_month_date(match.group(1))
            if parsed is not None:
                return parsed
    return None


def establish_anchor(logger: H41Logger, session: requests.Session | None = None) -> pd.Timestamp:
    """
    Determine the most recent known release date.

    Parameters
    ----------
    logger : H41Logger
        Logger for diagnostics.
    session : requests.Session, optional
        Session for the anchor and index requests.

    Returns
    -------
    pd.Timestamp
        Anchor date.

    Raises
    ------
    AnchorNotEstablished
        If both the current-edition page and the index page fail.
    """

    anchor: pd.Timestamp | None = None
    try:
        with make_request(
            H41_CURRENT_URL,
            headers=DEFAULT_HEADERS,
            max_retries=ANCHOR_MAX_RETRIES,
            timeout=ANCHOR_TIMEOUT,
            session=session,
        ) as response:
            anchor = parse_anchor_date(response.text)
    except requests.RequestException as e:
        logger.warning("anchor_current_page_failed", msg=str(e), context={"url": H41_CURRENT_URL})
    if anchor is not None:
        logger.info("anchor_established", context={"anchor": to_iso(anchor), "source": "current"})
        return anchor

    try:
        dates: List[str] = list_index_release_dates(fetch_index_html(logger, session))
    except requests.RequestException as e:
        logger.warning("anchor_index_page_failed", msg=str(e))
        dates = []
    if dates:
        logger.info("anchor_established", context={"anchor": dates[0], "source": "index"})
        return to_timestamp(dates[0])

    logger.error("anchor_not_established", context={"url": H41_CURRENT_URL})
    raise AnchorNotEstablished("Could not establish the discovery anchor date", H41_CURRENT_URL)
