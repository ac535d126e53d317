"""
Purpose
-------
Constants for the H.4.1 table parsing layer: cell-value shapes, header
marker phrases per table mode, and table-context limits.

Conventions
-----------
- Marker phrases are stored in normalized form (see
  `label_matcher.normalize_label`) and compared against normalized header
  text.
- XPath expressions address direct children so that rows of nested tables
  are never attributed to their parent table.
"""

import re
from typing import Dict, List

# Value cells
NOT_AVAILABLE_MARKERS: set[str] = {"n.a.", "na", "n/a", "-", "--", "...", "\u2026"}
MINUS_LIKE_CHARS: str = "-\u2212\u2012\u2013\u2014\u2015\ufe63\uff0d"
VALUE_PATTERN: re.Pattern[str] = re.compile(
    r"^(?P<sign>[+"
    + re.escape(MINUS_LIKE_CHARS)
    + r"])?(?P<number>\d+(?:,\d+)*)(?P<fraction>\.\d+)?$"
)
NBSP_CHARS: tuple[str, ...] = ("\u00a0", "\u202f", "\u2007")

# Table modes
WEEKLY_FACTORS_MODE: str = "weekly-factors"
STATEMENT_MODE: str = "statement"

AVERAGE_MARKERS: List[str] = ["averages of daily figures", "average"]
WEEK_ENDED_MARKER: str = "week ended"
CHANGE_MARKERS: Dict[str, str] = {
    WEEKLY_FACTORS_MODE: "change from",
    STATEMENT_MODE: "change since",
}
STATEMENT_CURRENT_MARKERS: List[str] = ["wednesday", "as of"]

# Table context
MAX_CONTEXT_SIBLINGS: int = 6
CONTEXT_SEPARATOR: str = " | "
HEADER_TEXT_SEPARATOR: str = " | "

XPATH_HEAD_ROWS: str = "./thead/tr"
XPATH_ROWS: str = "./tr|./thead/tr|./tbody/tr|./tfoot/tr"
XPATH_BODY_ROWS: str = "./tr|./tbody/tr|./tfoot/tr"
XPATH_CELLS: str = "./th|./td"

# Text-window fallback
TEXT_WINDOW_LINES: int = 10
TEXT_WINDOW_VALUES: int = 3
TEXT_BLOCK_TAGS: set[str] = {
    "th",
    "td",
    "p",
    "li",
    "caption",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "pre",
}

# Document-level dates
RELEASE_DATE_PATTERN: re.Pattern[str] = re.compile(
    r"release\s+date:?\s*([a-z]+\.?\s+\d{1,2},?\s+\d{4})", re.IGNORECASE
)
WEEK_ENDED_PATTERN: re.Pattern[str] = re.compile(
    r"(?<!from )week\s+ended:?\s*([a-z]+\.?\s+\d{1,2},?\s+\d{4})", re.IGNORECASE
)
