"""
Purpose
-------
Date helpers shared by fetching, discovery and extraction: conversions
between ISO dates, `YYYYMMDD` URL tokens and pandas Timestamps, and parsing
of the month-name dates printed in H.4.1 headers ("Jan 7, 2026",
"January 8, 2026", "Sept. 3, 2025").

Conventions
-----------
- All dates are tz-naive, normalized `pd.Timestamp` values (midnight).
- Day distances are whole calendar days.
- Parsing functions return None instead of raising on unparseable text.
"""

import re

import pandas as pd

MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}
MONTH_DATE_PATTERN: re.Pattern[str] = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sept?|oct|nov|dec)[a-z]*\.?\s+(\d{1,2}),?\s+(\d{4})\b",
    re.IGNORECASE,
)
YMD_PATTERN: re.Pattern[str] = re.compile(r"^\d{8}$")


def to_timestamp(date_iso: str) -> pd.Timestamp:
    """
    Parse a `YYYY-MM-DD` string into a normalized Timestamp.

    Raises
    ------
    ValueError
        If the string is not a valid ISO calendar date.
    """

    return pd.Timestamp(date_iso).normalize()


def to_iso(date: pd.Timestamp) -> str:
    return date.strftime("%Y-%m-%d")


def iso_to_ymd(date_iso: str) -> str:
    """
    Convert `YYYY-MM-DD` to the `YYYYMMDD` token used in release URLs.

    Raises
    ------
    ValueError
        If `date_iso` is not a valid ISO date.
    """

    return to_timestamp(date_iso).strftime("%Y%m%d")


def ymd_to_iso(ymd: str) -> str:
    """
    Convert a `YYYYMMDD` token back to `YYYY-MM-DD`.

    Raises
    ------
    ValueError
        If `ymd` is not eight digits forming a valid date.
    """

    if not YMD_PATTERN.match(ymd):
        raise ValueError(f"Invalid YYYYMMDD token: {ymd}")
    return to_iso(pd.Timestamp(year=int(ymd[:4]), month=int(ymd[4:6]), day=int(ymd[6:])))


def parse_month_date(text: str) -> pd.Timestamp | None:
    """
    Return the first month-name date embedded in `text`.

    Parameters
    ----------
    text : str
        Free text such as a merged header ("Change from week ended | Dec 31, 2025").

    Returns
    -------
    pd.Timestamp or None
        The parsed date, or None if no well-formed, valid date is present
        (e.g. "Feb 30, 2026").
    """

    match = MONTH_DATE_PATTERN.search(text)
    if match is None:
        return None
    month: int = MONTHS[match.group(1).lower()[:3]]
    try:
        return pd.Timestamp(year=int(match.group(3)), month=month, day=int(match.group(2)))
    except ValueError:
        return None


def format_header_date(date: pd.Timestamp) -> str:
    """
    Render a date the way H.4.1 column headers print it, e.g. "Jan 7, 2026".
    """

    return f"{date.strftime('%b')} {date.day}, {date.year}"


def day_distance(a: pd.Timestamp, b: pd.Timestamp) -> int:
    return abs((a - b).days)
