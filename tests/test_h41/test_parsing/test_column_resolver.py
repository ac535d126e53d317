"""
Purpose
-------
Unit tests for `h41.parsing.column_resolver`.

Key behaviors
-------------
- Verify that `build_logical_columns` expands colspan / rowspan headers into
  one column per physical position with concatenated header text and a
  parsed date.
- Verify header-row detection with and without `<thead>`.
- Verify current-column selection for weekly-factors and statement tables,
  including exact-date preference and closest-date fallback.
- Verify the nearest / farthest rule for weekly and yearly change columns.
- Verify token-based column lookup used by the maturity table.

Conventions
-----------
- Tables are built with `h41_testing_utils.build_table` and parsed with
  lxml; column lists for selection tests are constructed directly.
"""

from typing import List

import pandas as pd
import pytest

from h41.parsing import column_resolver
from h41.parsing.parsing_config import STATEMENT_MODE, WEEKLY_FACTORS_MODE
from h41.parsing.parsing_types import LogicalColumn
from h41.utils.date_utils import parse_month_date
from tests.test_h41.h41_testing_utils import (
    MATURITY_BUCKET_HEADERS,
    build_table,
    parse_html,
    statement_head,
    weekly_factors_head,
)

REQUESTED = pd.Timestamp("2026-01-08")


def first_table(html: str):
    return parse_html(html).xpath("//table")[0]


def column(index: int, header_text: str) -> LogicalColumn:
    return LogicalColumn(index, header_text, parse_month_date(header_text))


def test_build_logical_columns_expands_row_and_column_spans() -> None:
    """
    Check the grid built from the two-row factors header.

    Returns
    -------
    None
        The test passes if:
            - five logical columns are produced,
            - the spanned "Averages of daily figures" text reaches the three
              columns it covers,
            - the row-spanned Wednesday column keeps its own position,
            - and each header date is parsed.
    """

    table = first_table(
        build_table(weekly_factors_head(), [["Loans", "7,000", "100", "-1,000", "7,100"]])
    )
    columns = column_resolver.build_logical_columns(table)

    assert [c.index for c in columns] == [0, 1, 2, 3, 4]
    assert columns[1].header_text == "Averages of daily figures | Week ended Jan 7, 2026"
    assert columns[2].header_text == (
        "Averages of daily figures | Change from week ended Dec 31, 2025"
    )
    assert columns[3].resolved_date == pd.Timestamp("2025-01-08")
    assert columns[4].header_text == "Wednesday Jan 7, 2026"
    assert columns[0].resolved_date is None


def test_header_rows_without_thead_stop_at_first_numeric_row() -> None:
    """
    Ensure leading non-numeric rows are treated as headers when the table
    has no `<thead>`.

    Returns
    -------
    None
        The test passes if the header row is detected and the data row is the
        only body row.
    """

    table = first_table(
        build_table(
            [["Week ended", "Jan 7, 2026"]],
            [["Securities held outright", "6,500,000"]],
            use_thead=False,
        )
    )

    assert len(column_resolver.header_rows(table)) == 1
    body = column_resolver.body_rows(table)
    assert len(body) == 1
    assert column_resolver.cell_text(body[0].xpath("./th|./td")[0]) == "Securities held outright"


def test_cell_text_ignores_footnote_superscripts() -> None:
    """
    Check that `<sup>` footnote markers are dropped from cell text.

    Returns
    -------
    None
        The test passes if the footnote digit does not appear in the text.
    """

    table = first_table(build_table([["Item", "Value"]], [["Loans <sup>3</sup>", "1"]]))
    cell = column_resolver.body_rows(table)[0].xpath("./th")[0]
    assert column_resolver.cell_text(cell) == "Loans"


@pytest.mark.parametrize("raw_span, expected", [("3", 3), ("0", 1), ("abc", 1), ("1000", 64)])
def test_span_of_bounds_invalid_values(raw_span: str, expected: int) -> None:
    """
    Verify colspan parsing clamps to [1, 64] and tolerates junk.

    Parameters
    ----------
    raw_span : str
        Attribute value.
    expected : int
        Effective span.

    Returns
    -------
    None
        The test passes if `span_of` returns `expected`.
    """

    table = first_table(build_table([["Item", ("Value", {"colspan": raw_span})]], []))
    cell = table.xpath(".//th")[1]
    assert column_resolver.span_of(cell, "colspan") == expected


def test_change_columns_nearest_is_weekly_farthest_is_yearly() -> None:
    """
    Requested 2026-01-08 with change headers dated Jan 7, 2026 and Jan 9, 2025.

    Returns
    -------
    None
        The test passes if the weekly column is the Jan 7, 2026 column and the
        yearly column is the Jan 9, 2025 column.
    """

    table = first_table(
        build_table(
            [
                [
                    "Item",
                    "Week ended Jan 7, 2026",
                    "Change from Jan 9, 2025",
                    "Change from Jan 7, 2026",
                ]
            ],
            [["Loans", "7,000", "-1,000", "100"]],
        )
    )
    columns = column_resolver.build_logical_columns(table)
    selection = column_resolver.resolve_columns(columns, REQUESTED, WEEKLY_FACTORS_MODE)

    assert selection.current is not None and selection.current.index == 1
    assert selection.weekly is not None and selection.weekly.resolved_date == pd.Timestamp(
        "2026-01-07"
    )
    assert selection.yearly is not None and selection.yearly.resolved_date == pd.Timestamp(
        "2025-01-09"
    )


def test_resolve_columns_on_factors_header() -> None:
    """
    Check the full factors header: the week-average column is current and
    the Wednesday column is never chosen.

    Returns
    -------
    None
        The test passes if the selection is (1, 2, 3).
    """

    table = first_table(build_table(weekly_factors_head(), []))
    columns = column_resolver.build_logical_columns(table)
    selection = column_resolver.resolve_columns(columns, REQUESTED, WEEKLY_FACTORS_MODE)

    assert (selection.current.index, selection.weekly.index, selection.yearly.index) == (1, 2, 3)


def test_resolve_columns_on_statement_header() -> None:
    """
    Check a statement table: the Wednesday as-of column is current and the
    "Change since" columns are weekly / yearly.

    Returns
    -------
    None
        The test passes if the selection is (2, 3, 4) and the eliminations
        column is skipped.
    """

    table = first_table(build_table(statement_head(), []))
    columns = column_resolver.build_logical_columns(table)
    selection = column_resolver.resolve_columns(columns, REQUESTED, STATEMENT_MODE)

    assert columns[3].header_text == "Change since | Wednesday Dec 31, 2025"
    assert (selection.current.index, selection.weekly.index, selection.yearly.index) == (2, 3, 4)


def test_current_column_prefers_exact_date_text_then_closest_date() -> None:
    """
    Among several week-average columns, the one naming the requested date
    wins; otherwise the closest date wins.

    Returns
    -------
    None
        The test passes if:
            - a request for 2026-01-14 picks the "Jan 14, 2026" column, and
            - a request for 2026-01-12 also picks it (2 days vs 5 days).
    """

    columns: List[LogicalColumn] = [
        column(0, "Item"),
        column(1, "Averages of daily figures | Week ended Jan 7, 2026"),
        column(2, "Averages of daily figures | Week ended Jan 14, 2026"),
    ]

    exact = column_resolver.resolve_current_column(
        columns, pd.Timestamp("2026-01-14"), WEEKLY_FACTORS_MODE
    )
    closest = column_resolver.resolve_current_column(
        columns, pd.Timestamp("2026-01-12"), WEEKLY_FACTORS_MODE
    )
    assert exact is not None and exact.index == 2
    assert closest is not None and closest.index == 2


def test_current_column_falls_back_to_any_dated_column() -> None:
    """
    A header with only a bare date still yields a current column.

    Returns
    -------
    None
        The test passes if the dated column is selected and no change columns
        are found.
    """

    columns = [column(0, "Week ended"), column(1, "Jan 7, 2026")]
    selection = column_resolver.resolve_columns(columns, REQUESTED, WEEKLY_FACTORS_MODE)

    assert selection.current is not None and selection.current.index == 1
    assert selection.weekly is None and selection.yearly is None


def test_current_column_none_without_value_columns() -> None:
    """
    A table with only the label column has no current column.

    Returns
    -------
    None
        The test passes if the resolver returns None.
    """

    columns = [column(0, "Item"), column(1, "Notes")]
    assert column_resolver.resolve_current_column(columns, REQUESTED, WEEKLY_FACTORS_MODE) is None


def test_change_columns_single_and_undated() -> None:
    """
    Check the degenerate change-column cases.

    Returns
    -------
    None
        The test passes if:
            - one dated change column is weekly with no yearly column, and
            - undated change columns resolve the first one as weekly.
    """

    single = [
        column(0, "Item"),
        column(1, "Week ended Jan 7, 2026"),
        column(2, "Change from Dec 31, 2025"),
    ]
    weekly, yearly = column_resolver.resolve_change_columns(single, REQUESTED, WEEKLY_FACTORS_MODE)
    assert weekly is not None and weekly.index == 2
    assert yearly is None

    undated = [column(0, "Item"), column(1, "Change from week"), column(2, "Change from year")]
    weekly, yearly = column_resolver.resolve_change_columns(undated, REQUESTED, WEEKLY_FACTORS_MODE)
    assert weekly is not None and weekly.index == 1
    assert yearly is None


def test_find_column_by_tokens_matches_whole_words() -> None:
    """
    Verify the maturity bucket lookup.

    Returns
    -------
    None
        The test passes if "over 10 years" resolves to the "Over 10 years"
        column rather than "Over 5 years to 10 years", and a missing bucket
        returns None.
    """

    columns = [column(0, "Remaining maturity")] + [
        column(i + 1, text) for i, text in enumerate(MATURITY_BUCKET_HEADERS)
    ]

    over_ten = column_resolver.find_column_by_tokens(columns, ["over 10 years"])
    one_to_five = column_resolver.find_column_by_tokens(columns, ["over 1 year", "5 years"])
    assert over_ten is not None and over_ten.header_text == "Over 10 years"
    assert one_to_five is not None and one_to_five.header_text == "Over 1 year to 5 years"
    assert column_resolver.find_column_by_tokens(columns, ["over 30 years"]) is None
