"""
Purpose
-------
Select the table row that best matches a list of label candidates and read
its cell values per logical column.

Key behaviors
-------------
- Scores the first cell of every body row against all candidates and keeps
  the row with the strictly highest score, so an exact match always beats
  prefix or substring matches and ties go to the earliest row.
- Reads values left to right: the label cell is skipped (honoring its
  colspan) and a value cell spanning several columns repeats its value into
  each of them.
- Cells missing at the end of a short row are no data.
- Locates section-scoped rows such as the "Holdings" row below
  "U.S. Treasury securities" in the maturity table.

Conventions
-----------
- Values are parsed with `value_parser.parse_value`; malformed cells become
  None and never raise.
- Rows with an empty first cell are ignored.
"""

from typing import List, Sequence, Tuple

from h41.parsing.column_resolver import body_rows, cell_text, cells_of, span_of
from h41.parsing.label_matcher import best_label_score, contains_label, normalize_label
from h41.parsing.parsing_types import HtmlElement, MatchedRow
from h41.parsing.value_parser import parse_value


def read_row_cells(row: HtmlElement, column_count: int) -> Tuple[str | None, ...]:
    """
    Spread a row's cell texts over logical columns.

    Parameters
    ----------
    row : HtmlElement
        lxml `<tr>` element.
    column_count : int
        Number of logical columns resolved from the header; the result is
        padded with None up to this width.

    Returns
    -------
    tuple[str | None, ...]
        Raw text per logical column; position 0 (label) is always None.
    """

    cells: List[HtmlElement] = cells_of(row)
    raw: List[str | None] = []
    if cells:
        raw.extend([None] * span_of(cells[0], "colspan"))
    for cell in cells[1:]:
        text: str = cell_text(cell)
        raw.extend([text] * span_of(cell, "colspan"))
    if len(raw) < column_count:
        raw.extend([None] * (column_count - len(raw)))
    return tuple(raw)


def read_row_values(row: HtmlElement, column_count: int) -> Tuple[float | None, ...]:
    return tuple(parse_value(text) for text in read_row_cells(row, column_count))


def build_matched_row(
    row: HtmlElement, row_index: int, score: int, column_count: int
) -> MatchedRow:
    raw_cells: Tuple[str | None, ...] = read_row_cells(row, column_count)
    return MatchedRow(
        row_index=row_index,
        label_text=row_label(row),
        score=score,
        values=read_row_values(row, column_count),
        raw_cells=raw_cells,
    )


def row_label(row: HtmlElement) -> str:
    cells: List[HtmlElement] = cells_of(row)
    return cell_text(cells[0]) if cells else ""


def find_best_row(
    table: HtmlElement, candidates: Sequence[str], column_count: int = 0
) -> MatchedRow | None:
    """
    Find the body row whose label best matches any candidate.

    Parameters
    ----------
    table : HtmlElement
        lxml `<table>` element.
    candidates : Sequence[str]
        Acceptable labels, most specific first.
    column_count : int, default=0
        Logical column count used to pad the row's values.

    Returns
    -------
    MatchedRow or None
        The highest-scoring row (score > 0), or None if nothing matches.
    """

    best_row: HtmlElement | None = None
    best_index: int = -1
    best_score: int = 0
    for index, row in enumerate(body_rows(table)):
        label: str = row_label(row)
        if not label:
            continue
        score: int = best_label_score(label, candidates)
        if score > best_score:
            best_row, best_index, best_score = row, index, score
    if best_row is None:
        return None
    return build_matched_row(best_row, best_index, best_score, column_count)


def has_matching_row(table: HtmlElement, candidates: Sequence[str]) -> bool:
    return find_best_row(table, candidates) is not None


def find_section_row(
    table: HtmlElement, section_label: str, row_label_text: str, column_count: int = 0
) -> MatchedRow | None:
    """
    Find the first row labelled `row_label_text` below a section row.

    Parameters
    ----------
    table : HtmlElement
        lxml `<table>` element.
    section_label : str
        Label of the section heading row (e.g. "U.S. Treasury securities").
    row_label_text : str
        Exact label of the wanted row inside the section (e.g. "Holdings").
    column_count : int, default=0
        Logical column count used to pad the row's values.

    Returns
    -------
    MatchedRow or None
        The section row's child row, or, when no section structure exists,
        the best direct match for `section_label`.
    """

    wanted: str = normalize_label(row_label_text)
    in_section: bool = False
    for index, row in enumerate(body_rows(table)):
        label: str = row_label(row)
        if not label:
            continue
        if contains_label(label, section_label):
            in_section = True
            continue
        if in_section and normalize_label(label) == wanted:
            return build_matched_row(row, index, 3, column_count)
    return find_best_row(table, [section_label], column_count)
