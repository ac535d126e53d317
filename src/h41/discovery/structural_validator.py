"""
Purpose
-------
Cheap structural check used by discovery probes to decide whether a page is
a real H.4.1 edition.

Key behaviors
-------------
- Rejects short pages and pages showing block / not-found markers.
- Scores one point per signature group present (report title, section
  heading, table marker, core line item) and requires at least two.
- Requires at least ten thousands-separated numbers, which rejects page
  shells that mention the report but carry no tabular data.
"""

from h41.discovery.discovery_config import (
    BLOCKED_PAGE_MARKERS,
    LARGE_NUMBER_PATTERN,
    MIN_LARGE_NUMBERS,
    MIN_PAGE_LENGTH,
    MIN_SIGNATURE_SCORE,
    SIGNATURE_GROUPS,
)


def signature_score(lowered_html: str) -> int:
    return sum(
        1 for group in SIGNATURE_GROUPS if any(phrase in lowered_html for phrase in group)
    )


def count_large_numbers(html: str) -> int:
    return len(LARGE_NUMBER_PATTERN.findall(html))


def is_valid_release_page(html: str | None) -> bool:
    """
    Decide whether a probed page is a genuine edition.

    Parameters
    ----------
    html : str or None
        Probe response body.

    Returns
    -------
    bool
        True when the page is long enough, unblocked, scores at least
        `MIN_SIGNATURE_SCORE` and contains at least `MIN_LARGE_NUMBERS`
        large formatted numbers.
    """

    if not html or len(html) < MIN_PAGE_LENGTH:
        return False
    lowered: str = html.lower()
    if any(marker in lowered for marker in BLOCKED_PAGE_MARKERS):
        return False
    if signature_score(lowered) < MIN_SIGNATURE_SCORE:
        return False
    return count_large_numbers(html) >= MIN_LARGE_NUMBERS
