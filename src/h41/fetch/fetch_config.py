"""
Purpose
-------
Configuration for fetching H.4.1 editions and the publisher's index page.

Key behaviors
-------------
- Defines the edition, index and current-edition URLs.
- Defines the request header profiles of the two fetch attempts.
- Defines the content signatures a genuine edition must carry.

Conventions
-----------
- Signature phrases are lower-case and compared against the lower-cased
  HTML body.
- Timeouts are (connect, read) tuples in seconds.
"""

from typing import Dict, List

H41_BASE_URL: str = "https://www.federalreserve.gov/releases/h41/"
H41_INDEX_URL: str = H41_BASE_URL
H41_CURRENT_URL: str = H41_BASE_URL + "current/"
EDITION_URL_TEMPLATE: str = H41_BASE_URL + "{ymd}/default.htm"
EDITION_URL_VARIANTS: List[str] = [H41_BASE_URL + "{ymd}/", H41_BASE_URL + "{ymd}/default.htm"]
INDEX_LINK_TEMPLATE: str = "/releases/h41/{ymd}/"

DEFAULT_HEADERS: Dict[str, str] = {
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Referer": H41_INDEX_URL,
}
ALTERNATE_HEADERS: Dict[str, str] = {
    **DEFAULT_HEADERS,
    "Accept-Language": "en-US,en;q=0.8",
}
FETCH_ATTEMPT_HEADERS: List[Dict[str, str]] = [DEFAULT_HEADERS, ALTERNATE_HEADERS]

FETCH_TIMEOUT: tuple[float, float] = (3.5, 15.0)
FETCH_MAX_RETRIES: int = 3
INDEX_TIMEOUT: tuple[float, float] = (3.5, 15.0)

GOVERNMENT_BANNER: str = "an official website of the united states government"
CONTENT_SIGNATURES: List[str] = [
    "h.4.1",
    "factors affecting reserve balances",
    "consolidated statement of condition",
    "reserve bank credit",
]
MIN_SIGNATURE_MATCHES: int = 2

INDEX_MIN_YEAR: int = 1996
