"""
Purpose
-------
Resolve the logical columns of an H.4.1 table and pick, for a requested
date, the "current" column and the week-over-week / year-over-year change
columns.

Key behaviors
-------------
- Splits a table into header rows and body rows.
- Materializes multi-row headers into a grid: a header cell's text is
  attached to every column it spans (colspan), and columns covered by a
  rowspan from an earlier header row are skipped in later rows.
- Weekly-factors tables: the current column is the period-average column
  ("Averages of daily figures", preferably "Week ended"); change columns
  carry "Change from".
- Statement tables: the current column is the as-of column ("Wednesday");
  change columns carry "Change since".
- Among change columns, the one whose header date is nearest to the
  requested date is the weekly change and the farthest one the yearly
  change.

Conventions
-----------
- Column 0 is the row-label column and is never selected as a value column.
- Change columns are never candidates for the current column.
- Ties in day distance keep the leftmost column.

Downstream usage
----------------
`resolve_columns` is called by the extraction orchestrator once per
(table, mode); `build_logical_columns` and `body_rows` are shared with the
row extractor.
"""

from typing import Iterable, List, Sequence, Tuple

import pandas as pd

from h41.parsing.label_matcher import normalize_label
from h41.parsing.parsing_config import (
    AVERAGE_MARKERS,
    CHANGE_MARKERS,
    HEADER_TEXT_SEPARATOR,
    STATEMENT_CURRENT_MARKERS,
    STATEMENT_MODE,
    WEEK_ENDED_MARKER,
    XPATH_BODY_ROWS,
    XPATH_CELLS,
    XPATH_HEAD_ROWS,
    XPATH_ROWS,
)
from h41.parsing.parsing_types import ColumnSelection, HtmlElement, LogicalColumn
from h41.parsing.value_parser import clean_cell_text, parse_value
from h41.utils.date_utils import day_distance, format_header_date, parse_month_date

MAX_SPAN: int = 64


def cell_text(cell: HtmlElement) -> str:
    """
    Visible text of a cell without footnote superscripts, with line breaks
    and nested elements separated by single spaces.
    """

    parts: List[str] = cell.xpath(".//text()[not(ancestor::sup)]")
    return clean_cell_text(" ".join(parts))


def cells_of(row: HtmlElement) -> List[HtmlElement]:
    return row.xpath(XPATH_CELLS)


def span_of(cell: HtmlElement, attribute: str) -> int:
    """
    Read a colspan / rowspan attribute; missing or invalid values count as 1.
    """

    try:
        span: int = int(str(cell.get(attribute, "1")).strip())
    except ValueError:
        return 1
    return min(max(span, 1), MAX_SPAN)


def header_rows(table: HtmlElement) -> List[HtmlElement]:
    """
    Return the header rows of a table.

    Parameters
    ----------
    table : HtmlElement
        lxml `<table>` element.

    Returns
    -------
    list[HtmlElement]
        `<thead>` rows when the table has a head section; otherwise the
        leading rows up to (excluding) the first row that carries a numeric
        value after its label cell. Rows made only of `<th>` cells always
        count as header rows.
    """

    head: List[HtmlElement] = table.xpath(XPATH_HEAD_ROWS)
    if head:
        return head
    leading: List[HtmlElement] = []
    for row in table.xpath(XPATH_ROWS):
        cells = cells_of(row)
        all_th: bool = bool(cells) and all(cell.tag == "th" for cell in cells)
        if not all_th and any(parse_value(cell_text(cell)) is not None for cell in cells[1:]):
            break
        leading.append(row)
    return leading


def body_rows(table: HtmlElement) -> List[HtmlElement]:
    """
    Return every non-header row, in document order.
    """

    head: List[HtmlElement] = header_rows(table)
    if table.xpath(XPATH_HEAD_ROWS):
        return table.xpath(XPATH_BODY_ROWS)
    return table.xpath(XPATH_ROWS)[len(head) :]


def build_logical_columns(table: HtmlElement) -> List[LogicalColumn]:
    """
    Expand the header rows of `table` into logical columns.

    Parameters
    ----------
    table : HtmlElement
        lxml `<table>` element.

    Returns
    -------
    list[LogicalColumn]
        One column per physical position, indexes 0..width-1. Columns no
        header cell covers get an empty `header_text`.

    Notes
    -----
    - Row-spanned cells reserve their positions in the following header
      rows, so later cells land in the correct columns.
    """

    texts: dict[int, List[str]] = {}
    occupied: set[Tuple[int, int]] = set()
    width: int = 0
    for r, row in enumerate(header_rows(table)):
        col: int = 0
        for cell in cells_of(row):
            while (r, col) in occupied:
                col += 1
            colspan: int = span_of(cell, "colspan")
            rowspan: int = span_of(cell, "rowspan")
            text: str = cell_text(cell)
            for c in range(col, col + colspan):
                if text:
                    texts.setdefault(c, []).append(text)
                for k in range(1, rowspan):
                    occupied.add((r + k, c))
            col += colspan
        width = max(width, col)
    columns: List[LogicalColumn] = []
    for index in range(width):
        header_text: str = HEADER_TEXT_SEPARATOR.join(texts.get(index, []))
        columns.append(LogicalColumn(index, header_text, parse_month_date(header_text)))
    return columns


def is_change_column(column: LogicalColumn, markers: Iterable[str]) -> bool:
    norm: str = normalize_label(column.header_text)
    return any(marker in norm for marker in markers)


def pick_closest(
    candidates: Sequence[LogicalColumn], requested_date: pd.Timestamp
) -> LogicalColumn | None:
    """
    Pick the candidate whose header names the requested date, else the one
    whose header date is closest to it, else the first candidate.
    """

    if not candidates:
        return None
    wanted: str = normalize_label(format_header_date(requested_date))
    for column in candidates:
        if wanted in normalize_label(column.header_text):
            return column
    dated: List[LogicalColumn] = [c for c in candidates if c.resolved_date is not None]
    if not dated:
        return candidates[0]
    return min(dated, key=lambda c: day_distance(c.resolved_date, requested_date))


def resolve_current_column(
    columns: Sequence[LogicalColumn], requested_date: pd.Timestamp, mode: str
) -> LogicalColumn | None:
    """
    Find the period-average (or as-of) column for the requested date.

    Parameters
    ----------
    columns : Sequence[LogicalColumn]
        Output of `build_logical_columns`.
    requested_date : pd.Timestamp
        Publication or as-of date being extracted.
    mode : str
        "weekly-factors" or "statement".

    Returns
    -------
    LogicalColumn or None
        None if no value column exists.

    Notes
    -----
    Candidates are tried in tiers; the first non-empty tier wins:
    - weekly-factors: average + "week ended", average, "week ended", any
      dated column;
    - statement: "wednesday" / "as of", any dated column.
    """

    value_columns: List[LogicalColumn] = [
        c
        for c in columns
        if c.index > 0 and not is_change_column(c, CHANGE_MARKERS.values())
    ]
    norms: dict[int, str] = {c.index: normalize_label(c.header_text) for c in value_columns}

    def having(markers: Iterable[str]) -> List[LogicalColumn]:
        marker_list = list(markers)
        return [c for c in value_columns if any(m in norms[c.index] for m in marker_list)]

    dated: List[LogicalColumn] = [c for c in value_columns if c.resolved_date is not None]
    if mode == STATEMENT_MODE:
        tiers: List[List[LogicalColumn]] = [having(STATEMENT_CURRENT_MARKERS), dated]
    else:
        averages: List[LogicalColumn] = having(AVERAGE_MARKERS)
        tiers = [
            [c for c in averages if WEEK_ENDED_MARKER in norms[c.index]],
            averages,
            having([WEEK_ENDED_MARKER]),
            dated,
        ]
    for tier in tiers:
        if tier:
            return pick_closest(tier, requested_date)
    return None


def resolve_change_columns(
    columns: Sequence[LogicalColumn], requested_date: pd.Timestamp, mode: str
) -> Tuple[LogicalColumn | None, LogicalColumn | None]:
    """
    Find the weekly-change and yearly-change columns.

    Parameters
    ----------
    columns : Sequence[LogicalColumn]
        Output of `build_logical_columns`.
    requested_date : pd.Timestamp
        Date the distances are measured from.
    mode : str
        Selects the change marker ("change from" or "change since").

    Returns
    -------
    tuple[LogicalColumn | None, LogicalColumn | None]
        (weekly, yearly). The dated change column nearest to the requested
        date is weekly and the farthest is yearly. With a single dated change
        column yearly is None; with no dated change column the first change
        column is weekly and yearly is None.
    """

    marker: str = CHANGE_MARKERS[mode]
    change: List[LogicalColumn] = [
        c for c in columns if c.index > 0 and is_change_column(c, [marker])
    ]
    if not change:
        return None, None
    dated: List[LogicalColumn] = [c for c in change if c.resolved_date is not None]
    if not dated:
        return change[0], None
    weekly: LogicalColumn = min(dated, key=lambda c: day_distance(c.resolved_date, requested_date))
    yearly: LogicalColumn = max(dated, key=lambda c: day_distance(c.resolved_date, requested_date))
    if yearly.index == weekly.index:
        return weekly, None
    return weekly, yearly


def resolve_columns(
    columns: Sequence[LogicalColumn], requested_date: pd.Timestamp, mode: str
) -> ColumnSelection:
    weekly, yearly = resolve_change_columns(columns, requested_date, mode)
    return ColumnSelection(
        current=resolve_current_column(columns, requested_date, mode),
        weekly=weekly,
        yearly=yearly,
    )


def find_column_by_tokens(
    columns: Sequence[LogicalColumn], tokens: Sequence[str]
) -> LogicalColumn | None:
    """
    Return the first value column whose normalized header contains every
    token as a whole-word phrase (e.g. ["91 days", "1 year"]).
    """

    wanted: List[str] = [f" {normalize_label(token)} " for token in tokens]
    for column in columns:
        if column.index == 0:
            continue
        padded: str = f" {normalize_label(column.header_text)} "
        if all(token in padded for token in wanted):
            return column
    return None
