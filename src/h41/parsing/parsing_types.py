"""
Purpose
-------
Value types produced by the table parsing layer.

Key behaviors
-------------
- `LogicalColumn`: one expanded table column with its merged header text
  and the date parsed from it.
- `MatchedRow`: the row chosen for a set of label candidates and its
  per-column values.
- `ColumnSelection`: the current / weekly-change / yearly-change columns
  resolved for one table.
- `TextWindowMatch`: the result of the text-window fallback scan.

Conventions
-----------
- All types are frozen dataclasses; parsing never mutates the lxml tree or
  previously returned values.
- Column indexes are 0-based physical positions after colspan expansion;
  index 0 is the row-label column.
"""

from dataclasses import dataclass
from typing import Any, Tuple, TypeAlias

import pandas as pd

HtmlElement: TypeAlias = Any


@dataclass(frozen=True)
class LogicalColumn:
    """
    Purpose
    -------
    One logical table column.

    Attributes
    ----------
    index : int
        Physical position after colspan / rowspan expansion; unique per table.
    header_text : str
        Texts of all header cells covering this column joined with " | ".
    resolved_date : pd.Timestamp or None
        First valid month-name date found in `header_text`.
    """

    index: int
    header_text: str
    resolved_date: pd.Timestamp | None


@dataclass(frozen=True)
class MatchedRow:
    """
    Purpose
    -------
    A table row selected by label matching.

    Attributes
    ----------
    row_index : int
        Position among the table's body rows.
    label_text : str
        Raw text of the row's first cell.
    score : int
        Label Matcher score (1 substring, 2 prefix, 3 exact).
    values : tuple[float | None, ...]
        Parsed value per logical column; index 0 (the label) is always None.
    raw_cells : tuple[str | None, ...]
        Raw cell text per logical column, aligned with `values`.
    """

    row_index: int
    label_text: str
    score: int
    values: Tuple[float | None, ...]
    raw_cells: Tuple[str | None, ...]

    def value_at(self, index: int | None) -> float | None:
        if index is None or index < 0 or index >= len(self.values):
            return None
        return self.values[index]

    def raw_at(self, index: int | None) -> str | None:
        if index is None or index < 0 or index >= len(self.raw_cells):
            return None
        return self.raw_cells[index]


@dataclass(frozen=True)
class ColumnSelection:
    """
    Purpose
    -------
    Columns resolved for one table in one mode.

    Attributes
    ----------
    current : LogicalColumn or None
        Period-average (weekly factors) or as-of (statement) column.
    weekly : LogicalColumn or None
        Change column nearest to the requested date.
    yearly : LogicalColumn or None
        Change column farthest from the requested date.
    """

    current: LogicalColumn | None
    weekly: LogicalColumn | None
    yearly: LogicalColumn | None


@dataclass(frozen=True)
class TextWindowMatch:
    """
    Purpose
    -------
    Label line and values found by the text-window fallback.

    Attributes
    ----------
    label_line : str
        Line whose text matched a label candidate.
    line_index : int
        Position of `label_line` in the scanned lines.
    score : int
        Label Matcher score of `label_line`.
    values : tuple[float | None, ...]
        Up to three values (current, weekly change, yearly change).
    raw_tokens : tuple[str, ...]
        Tokens the values were parsed from.
    """

    label_line: str
    line_index: int
    score: int
    values: Tuple[float | None, ...]
    raw_tokens: Tuple[str, ...]

