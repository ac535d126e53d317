"""
Purpose
-------
Score how well an observed row or header text matches target labels.

Key behaviors
-------------
- Normalizes both sides: lower-case, "&" becomes "and", periods removed,
  other punctuation replaced by spaces, whitespace collapsed.
- Scores a pair as 3 (exact), 2 (observed starts with target),
  1 (observed contains target) or 0 (no match).

Conventions
-----------
- Empty targets never match.
- Prefix and containment are plain substring checks on the normalized
  text, so a label carrying an inline footnote digit ("Loans1") still
  matches.
- Callers keep the first candidate on ties by comparing with a strict ">".
"""

import re
from typing import Iterable

PUNCTUATION_PATTERN: re.Pattern[str] = re.compile(r"[(),;:/\\\"'\[\]{}*\-–—]")
EXACT_SCORE: int = 3
PREFIX_SCORE: int = 2
CONTAINS_SCORE: int = 1


def normalize_label(text: str | None) -> str:
    """
    Normalize label text for comparison.

    Examples
    --------
    "U.S. Treasury, General Account" -> "us treasury general account"
    "Loans & leases (net)" -> "loans and leases net"
    """

    if not text:
        return ""
    lowered: str = text.lower().replace("&", " and ").replace(".", "")
    return " ".join(PUNCTUATION_PATTERN.sub(" ", lowered).split())


def score_label(observed: str, target: str) -> int:
    """
    Score one observed text against one target label.

    Parameters
    ----------
    observed : str
        Text found in the document.
    target : str
        Label being searched for.

    Returns
    -------
    int
        3, 2, 1 or 0.
    """

    norm_observed: str = normalize_label(observed)
    norm_target: str = normalize_label(target)
    if not norm_observed or not norm_target:
        return 0
    if norm_observed == norm_target:
        return EXACT_SCORE
    if norm_observed.startswith(norm_target):
        return PREFIX_SCORE
    if norm_target in norm_observed:
        return CONTAINS_SCORE
    return 0


def best_label_score(observed: str, targets: Iterable[str]) -> int:
    return max((score_label(observed, target) for target in targets), default=0)


def contains_label(haystack: str, needle: str) -> bool:
    """
    True if the normalized `needle` occurs as whole words inside the
    normalized `haystack`.
    """

    norm_needle: str = normalize_label(needle)
    return bool(norm_needle) and f" {norm_needle} " in f" {normalize_label(haystack)} "
