"""
Purpose
-------
Unit tests for `h41.parsing.text_window_scanner`, the fallback that reads
figures from text lines when table structure cannot be resolved.

Key behaviors
-------------
- Verify line flattening of block elements and `<pre>` blocks.
- Verify value reading on the label line and across following numeric
  lines, bounded by the first non-numeric line and by the window size.
- Verify None results when nothing matches or no value follows.
"""

import pytest

from h41.parsing import text_window_scanner
from tests.test_h41.h41_testing_utils import parse_html, wrap_document


def test_document_lines_flattens_blocks_and_pre_lines() -> None:
    """
    Check the line list built from a mixed document.

    Returns
    -------
    None
        The test passes if headings, paragraphs and each `<pre>` line become
        separate lines, footnote superscripts are dropped, and blank lines
        are skipped.
    """

    html = wrap_document(
        "<h3>Memorandum Items</h3>",
        "<p>Securities lent to dealers<sup>5</sup></p>",
        "<pre>Loans   7,000   100   -1,000\n\n  Total 5\n</pre>",
    )
    lines = text_window_scanner.document_lines(parse_html(html))

    assert lines == [
        "Memorandum Items",
        "Securities lent to dealers",
        "Loans 7,000 100 -1,000",
        "Total 5",
    ]
    assert text_window_scanner.document_lines(None) == []


def test_scan_reads_values_on_the_label_line() -> None:
    """
    A label followed by three figures on the same line.

    Returns
    -------
    None
        The test passes if the three values are read in order.
    """

    match = text_window_scanner.scan_text_window(
        ["Currency in circulation 2", "Loans 7,000 100 -1,000"], ["Loans"]
    )

    assert match is not None
    assert match.line_index == 1
    assert match.score == 3
    assert match.values == (7000.0, 100.0, -1000.0)
    assert match.raw_tokens == ("7,000", "100", "-1,000")


def test_scan_reads_following_numeric_lines_until_a_label_line() -> None:
    """
    Values split over separate lines, as produced by table cells, stop at the
    next labelled line.

    Returns
    -------
    None
        The test passes if only the two figures before the next label are
        read.
    """

    lines = [
        "Currency in circulation",
        "2,350,000",
        "5,000",
        "Reverse repurchase agreements",
        "600,000",
    ]
    match = text_window_scanner.scan_text_window(lines, ["Currency in circulation"])

    assert match is not None
    assert match.label_line == "Currency in circulation"
    assert match.values == (2350000.0, 5000.0)


def test_scan_respects_window_and_not_available_tokens() -> None:
    """
    Check the window bound and "n.a." handling.

    Returns
    -------
    None
        The test passes if:
            - a window of one line reads a single value, and
            - an "n.a." token occupies its position as None.
    """

    narrow = text_window_scanner.scan_text_window(["Loans", "1", "2", "3"], ["Loans"], window=1)
    assert narrow is not None and narrow.values == (1.0,)

    with_na = text_window_scanner.scan_text_window(["Loans n.a. 100 -1,000"], ["Loans"])
    assert with_na is not None and with_na.values == (None, 100.0, -1000.0)


@pytest.mark.parametrize(
    "lines",
    [
        ["Currency in circulation 2,350,000"],
        ["Loans", "Currency in circulation 1"],
        ["Loans n.a."],
        [],
    ],
)
def test_scan_returns_none_without_usable_values(lines: list[str]) -> None:
    """
    No matching label, or a label without a numeric value, yields None.

    Parameters
    ----------
    lines : list[str]
        Scanned lines.

    Returns
    -------
    None
        The test passes if `scan_text_window` returns None.
    """

    assert text_window_scanner.scan_text_window(lines, ["Loans"]) is None
