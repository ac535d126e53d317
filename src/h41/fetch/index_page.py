"""
Purpose
-------
Read the publisher's rolling H.4.1 index page, which links every recent
edition as `/releases/h41/YYYYMMDD/`.

Key behaviors
-------------
- `fetch_index_html` downloads the index page through `make_request`.
- `list_index_release_dates` extracts the distinct edition dates linked
  from the page, most recent first.
- `index_lists_date` answers whether a given date is linked.

Conventions
-----------
- Dates are returned as ISO `YYYY-MM-DD` strings.
- Link tokens that are not valid calendar dates are ignored.

Downstream usage
----------------
The fetch validator uses `index_lists_date` as its final confirmation;
release discovery uses `list_index_release_dates` as its anchor fallback.
"""

import re
from typing import List

import requests

from h41.fetch.fetch_config import (
    DEFAULT_HEADERS,
    FETCH_MAX_RETRIES,
    H41_INDEX_URL,
    INDEX_LINK_TEMPLATE,
    INDEX_MIN_YEAR,
    INDEX_TIMEOUT,
)
from h41.logging.h41_logger import H41Logger
from h41.utils.date_utils import iso_to_ymd, ymd_to_iso
from h41.utils.requests_utils import make_request

INDEX_LINK_PATTERN: re.Pattern[str] = re.compile(r"/releases/h41/(\d{8})/")


def fetch_index_html(logger: H41Logger, session: requests.Session | None = None) -> str:
    """
    Download the H.4.1 index page.

    Parameters
    ----------
    logger : H41Logger
        Logger for fetch diagnostics.
    session : requests.Session, optional
        Session reused across requests.

    Returns
    -------
    str
        Page HTML.

    Raises
    ------
    requests.RequestException
        Propagated from `make_request` when the page cannot be fetched.
    """

    with make_request(
        H41_INDEX_URL,
        headers=DEFAULT_HEADERS,
        max_retries=FETCH_MAX_RETRIES,
        timeout=INDEX_TIMEOUT,
        session=session,
    ) as response:
        html: str = response.text
    logger.debug("index_page_fetched", context={"url": H41_INDEX_URL, "length": len(html)})
    return html


def list_index_release_dates(html: str, min_year: int = INDEX_MIN_YEAR) -> List[str]:
    """
    Extract the edition dates linked from the index page.

    Parameters
    ----------
    html : str
        Index page HTML.
    min_year : int, default=INDEX_MIN_YEAR
        Links to earlier years are ignored.

    Returns
    -------
    list[str]
        Distinct ISO dates, most recent first.
    """

    dates: set[str] = set()
    for ymd in INDEX_LINK_PATTERN.findall(html):
        if int(ymd[:4]) < min_year:
            continue
        try:
            dates.add(ymd_to_iso(ymd))
        except ValueError:
            continue
    return sorted(dates, reverse=True)


def index_lists_date(html: str, date_iso: str) -> bool:
    return INDEX_LINK_TEMPLATE.format(ymd=iso_to_ymd(date_iso)) in html
