"""
Purpose
-------
Read the dates an H.4.1 document declares about itself: the release date
("Release Date: January 8, 2026") and the balance date of the reporting
week ("Week ended Jan 7, 2026").

Conventions
-----------
- "Change from week ended ..." headers are not balance dates and are
  skipped.
- Missing or unparseable dates are returned as None.
"""

from typing import Tuple

import pandas as pd

from h41.parsing.parsing_config import RELEASE_DATE_PATTERN, WEEK_ENDED_PATTERN
from h41.parsing.parsing_types import HtmlElement
from h41.parsing.value_parser import clean_cell_text
from h41.utils.date_utils import parse_month_date


def document_text(root: HtmlElement) -> str:
    if root is None:
        return ""
    return clean_cell_text(" ".join(root.xpath("//body//text()[not(ancestor::script)]")))


def find_release_date(text: str) -> pd.Timestamp | None:
    match = RELEASE_DATE_PATTERN.search(text)
    return parse_month_date(match.group(1)) if match else None


def find_week_ended_date(text: str) -> pd.Timestamp | None:
    match = WEEK_ENDED_PATTERN.search(text)
    return parse_month_date(match.group(1)) if match else None


def find_document_dates(root: HtmlElement) -> Tuple[pd.Timestamp | None, pd.Timestamp | None]:
    """
    Return (release_date, as_of_date) declared by a parsed release page.

    Parameters
    ----------
    root : HtmlElement
        lxml root element.

    Returns
    -------
    tuple[pd.Timestamp | None, pd.Timestamp | None]
        Release date and "week ended" balance date.
    """

    text: str = document_text(root)
    return find_release_date(text), find_week_ended_date(text)
