"""
Purpose
-------
Fetch one H.4.1 edition by date and accept it only if the body is a genuine
release, not a soft-failure page served with a 200 status.

Key behaviors
-------------
- Attempt 1 requests the edition with the default browser headers. A
  non-2xx status raises `HttpError` at once (5xx responses are retried
  inside `make_request` first); a network failure raises
  `FetchBlockedOrUnexpectedHtml` chained to its cause.
- Attempt 2 repeats the request with an altered Accept-Language; any
  failure there moves on to the last attempt.
- Attempt 3 consults the index page: if no link names the date the
  outcome is `NoReleaseForDate`, otherwise `FetchBlockedOrUnexpectedHtml`.
- A body passes validation when it carries at least two content signatures
  (report title token, section headings, a known line item); a page that
  only shows the government banner fails.

Conventions
-----------
- Every attempt is logged with the attempt number and URL.
- `requests` exceptions never escape; they are mapped to the
  `H41FetchError` hierarchy.

Downstream usage
----------------
`fetch_release(date_iso, logger)` returns an `Edition` ready for
`extraction_orchestrator.extract`.
"""

from typing import Dict, List, NoReturn

import pandas as pd
import requests
from lxml import etree

from h41.fetch.fetch_config import (
    CONTENT_SIGNATURES,
    EDITION_URL_TEMPLATE,
    FETCH_ATTEMPT_HEADERS,
    FETCH_MAX_RETRIES,
    FETCH_TIMEOUT,
    GOVERNMENT_BANNER,
    MIN_SIGNATURE_MATCHES,
)
from h41.fetch.fetch_errors import FetchBlockedOrUnexpectedHtml, HttpError, NoReleaseForDate
from h41.fetch.fetch_types import Edition
from h41.fetch.index_page import fetch_index_html, index_lists_date
from h41.logging.h41_logger import H41Logger
from h41.parsing.document_dates import find_document_dates
from h41.utils.date_utils import iso_to_ymd, to_iso
from h41.utils.requests_utils import make_request


def fetch_release(
    date_iso: str, logger: H41Logger, session: requests.Session | None = None
) -> Edition:
    """
    Fetch and validate the edition published on `date_iso`.

    Parameters
    ----------
    date_iso : str
        Requested publication date, `YYYY-MM-DD`.
    logger : H41Logger
        Logger for attempt diagnostics.
    session : requests.Session, optional
        Session reused across attempts.

    Returns
    -------
    Edition
        The validated document.

    Raises
    ------
    HttpError
        Non-2xx status on the first attempt (after 5xx retries).
    NoReleaseForDate
        The index page does not link the date.
    FetchBlockedOrUnexpectedHtml
        The first attempt failed at the network level, or no attempt
        returned valid content and the index lists the date or could not
        be read.
    ValueError
        If `date_iso` is not a valid ISO date.
    """

    url: str = EDITION_URL_TEMPLATE.format(ymd=iso_to_ymd(date_iso))
    for attempt, headers in enumerate(FETCH_ATTEMPT_HEADERS, start=1):
        context: dict = {"url": url, "attempt": attempt}
        try:
            html: str = request_edition(url, headers, session)
        except requests.HTTPError as e:
            status: int | None = status_of(e)
            if attempt == 1:
                logger.error("edition_http_error", context={**context, "status": status})
                raise HttpError(status, url) from e
            logger.warning("edition_attempt_http_error", context={**context, "status": status})
            continue
        except requests.RequestException as e:
            if attempt == 1:
                logger.error("edition_network_error", msg=str(e), context=context)
                raise FetchBlockedOrUnexpectedHtml(
                    f"Edition for {date_iso} could not be fetched: {e}", url
                ) from e
            logger.warning("edition_attempt_network_error", msg=str(e), context=context)
            continue

        if validate_release_html(html):
            logger.info("edition_fetched", context={**context, "length": len(html)})
            return build_edition(date_iso, url, html)
        logger.warning(
            "edition_attempt_unexpected_html",
            context={**context, "reason": validation_failure_reason(html), "length": len(html)},
        )

    confirm_via_index(date_iso, url, logger, session)

def request_edition(
    url: str, headers: Dict[str, str], session: requests.Session | None = None
) -> str:
    with make_request(
        url,
        headers=headers,
        max_retries=FETCH_MAX_RETRIES,
        timeout=FETCH_TIMEOUT,
        session=session,
    ) as response:
        return response.text


def status_of(error: requests.HTTPError) -> int | None:
    response = error.response
    return getattr(response, "status_code", None) if response is not None else None


def confirm_via_index(
    date_iso: str,
    url: str,
    logger: H41Logger,
    session: requests.Session | None = None,
) -> NoReturn:
    """
    Final state: decide between "no such edition" and "blocked".

    Parameters
    ----------
    date_iso : str
        Requested date.
    url : str
        Edition URL that could not be fetched.
    logger : H41Logger
        Logger for diagnostics.
    session : requests.Session, optional
        Session reused for the index request.

    Raises
    ------
    NoReleaseForDate
        The index page does not link the date.
    FetchBlockedOrUnexpectedHtml
        The index lists the date, or could not be read.
    """

    try:
        index_html: str = fetch_index_html(logger, session)
    except requests.RequestException as e:
        logger.error("index_confirmation_failed", msg=str(e), context={"url": url})
        raise FetchBlockedOrUnexpectedHtml(
            f"Edition for {date_iso} could not be fetched or confirmed", url
        ) from e

    if not index_lists_date(index_html, date_iso):
        logger.warning("no_release_for_date", context={"date": date_iso, "url": url})
        raise NoReleaseForDate(date_iso, url)
    logger.error("edition_blocked_or_unexpected", context={"date": date_iso, "url": url})
    raise FetchBlockedOrUnexpectedHtml(
        f"Edition for {date_iso} is listed but every attempt returned unexpected content", url
    )


def content_signature_matches(html: str) -> List[str]:
    lowered: str = html.lower()
    return [signature for signature in CONTENT_SIGNATURES if signature in lowered]


def validation_failure_reason(html: str) -> str | None:
    """
    Explain why a body is not an H.4.1 release.

    Parameters
    ----------
    html : str
        Response body.

    Returns
    -------
    str or None
        None for a valid release, "government_banner_only" for a page that
        shows the site banner without enough signatures, "missing_signatures"
        otherwise.
    """

    if len(content_signature_matches(html)) >= MIN_SIGNATURE_MATCHES:
        return None
    if GOVERNMENT_BANNER in html.lower():
        return "government_banner_only"
    return "missing_signatures"


def validate_release_html(html: str) -> bool:
    return validation_failure_reason(html) is None


def build_edition(date_iso: str, url: str, html: str) -> Edition:
    root = etree.HTML(html)
    _, as_of = find_document_dates(root)
    return Edition(
        publication_date=date_iso,
        as_of_date=to_iso(as_of) if as_of is not None else None,
        source_url=url,
        fetched_at=pd.Timestamp.now(tz="UTC").isoformat(),
        html=html,
    )
