"""
Purpose
-------
Configuration for H.4.1 release discovery: walk sizes, concurrency,
timeouts and the structural validation thresholds used by the probes.

Conventions
-----------
- Phrase lists are lower-case and compared against lower-cased HTML.
- Timeouts are (connect, read) tuples in seconds.
"""

import re
from typing import List

DEFAULT_TARGET_COUNT: int = 40
DEFAULT_LOOKBACK_DAYS: int = 120
WINDOW_SIZE: int = 14
MAXIMAL_WORKER_COUNT: int = 5

PROBE_TIMEOUT: tuple[float, float] = (2.5, 2.5)
PROBE_MAX_RETRIES: int = 1
ANCHOR_TIMEOUT: tuple[float, float] = (3.0, 3.0)
ANCHOR_MAX_RETRIES: int = 2

MIN_PAGE_LENGTH: int = 500
ANCHOR_INVALID_MARKERS: List[str] = ["page not found", "404 error"]
ANCHOR_DATE_PATTERNS: List[re.Pattern[str]] = [
    re.compile(r"release\s+date:\s*([a-z]+\.?\s+\d{1,2},\s+\d{4})", re.IGNORECASE),
    re.compile(r"([a-z]+\.?\s+\d{1,2},\s+\d{4})\s*(?:release|h\.4\.1)", re.IGNORECASE),
]

BLOCKED_PAGE_MARKERS: List[str] = [
    "access denied",
    "please enable javascript",
    "you need to enable javascript",
    "are you a robot",
    "not a robot",
    "bot detected",
    "403 forbidden",
    "page not found",
    "404 error",
]
TITLE_SIGNATURES: List[str] = ["h.4.1", "frb: h.4.1"]
SECTION_SIGNATURES: List[str] = ["factors affecting reserve balances", "frb: h.4.1"]
TABLE_SIGNATURES: List[str] = ["table 1", "<table"]
CORE_ITEM_SIGNATURES: List[str] = [
    "u.s. treasury securities",
    "mortgage-backed securities",
    "reserve balances with federal reserve banks",
    "reverse repurchase agreements",
    "u.s. treasury, general account",
]
SIGNATURE_GROUPS: List[List[str]] = [
    TITLE_SIGNATURES,
    SECTION_SIGNATURES,
    TABLE_SIGNATURES,
    CORE_ITEM_SIGNATURES,
]
MIN_SIGNATURE_SCORE: int = 2
LARGE_NUMBER_PATTERN: re.Pattern[str] = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?")
MIN_LARGE_NUMBERS: int = 10
