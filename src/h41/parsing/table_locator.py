"""
Purpose
-------
Find the H.4.1 table that carries a given title, optionally constrained to
contain a given row label.

Key behaviors
-------------
- Builds, lazily and once per table, a context string from the table's
  caption, its aria-label, and the text of up to six preceding sibling
  elements of the table and of its parent.
- A table matches a title when its normalized context contains the
  normalized title.
- With row labels, the first titled table that also has a matching row wins
  (this separates "(continued)" tables that repeat a title); otherwise the
  first titled table is returned.
- Lookups are memoized per (title, row labels).

Conventions
-----------
- One `TableLocator` serves one parsed document and one extraction call;
  its caches are never shared.
- Preceding sibling tables contribute no text to the context, since their
  bodies would leak another table's title into this one.
- Comments and processing instructions are skipped.
"""

from typing import Dict, List, Sequence, Tuple

from h41.parsing.column_resolver import build_logical_columns
from h41.parsing.label_matcher import contains_label
from h41.parsing.parsing_config import CONTEXT_SEPARATOR, MAX_CONTEXT_SIBLINGS
from h41.parsing.parsing_types import HtmlElement, LogicalColumn
from h41.parsing.row_extractor import has_matching_row
from h41.parsing.value_parser import clean_cell_text

LookupKey = Tuple[str, Tuple[str, ...]]


def element_text(element: HtmlElement) -> str:
    return clean_cell_text(" ".join(element.itertext()))


def preceding_texts(element: HtmlElement | None) -> List[str]:
    """
    Text of up to `MAX_CONTEXT_SIBLINGS` preceding element siblings, nearest
    first.
    """

    if element is None:
        return []
    texts: List[str] = []
    seen: int = 0
    for sibling in element.itersiblings(preceding=True):
        if not isinstance(sibling.tag, str):
            continue
        seen += 1
        if sibling.tag != "table":
            text: str = element_text(sibling)
            if text:
                texts.append(text)
        if seen >= MAX_CONTEXT_SIBLINGS:
            break
    return texts


def build_table_context(table: HtmlElement) -> str:
    """
    Build the context string describing `table`.

    Parameters
    ----------
    table : HtmlElement
        lxml `<table>` element.

    Returns
    -------
    str
        Caption, aria-label, preceding sibling texts and the parent's
        preceding sibling texts joined with " | ".
    """

    parts: List[str] = []
    for caption in table.xpath("./caption"):
        text: str = element_text(caption)
        if text:
            parts.append(text)
    aria_label: str | None = table.get("aria-label")
    if aria_label:
        parts.append(clean_cell_text(aria_label))
    parts.extend(preceding_texts(table))
    parts.extend(preceding_texts(table.getparent()))
    return CONTEXT_SEPARATOR.join(parts)


class TableLocator:
    """
    Purpose
    -------
    Memoized title / row-label table lookup over one parsed document.

    Parameters
    ----------
    root : HtmlElement
        lxml root of the parsed release document.

    Attributes
    ----------
    tables : list[HtmlElement]
        All `<table>` elements in document order.

    Notes
    -----
    - Context strings are built on first use and kept per table position.
    """

    def __init__(self, root: HtmlElement) -> None:
        self.tables: List[HtmlElement] = root.xpath("//table") if root is not None else []
        self._contexts: Dict[int, str] = {}
        self._lookups: Dict[LookupKey, int | None] = {}
        self._columns: Dict[int, List[LogicalColumn]] = {}

    def has_tables(self) -> bool:
        return bool(self.tables)

    def context_at(self, position: int) -> str:
        if position not in self._contexts:
            self._contexts[position] = build_table_context(self.tables[position])
        return self._contexts[position]

    def position_of(self, table: HtmlElement) -> int | None:
        for position, candidate in enumerate(self.tables):
            if candidate is table:
                return position
        return None

    def context_of(self, table: HtmlElement) -> str:
        position: int | None = self.position_of(table)
        return self.context_at(position) if position is not None else build_table_context(table)

    def columns_of(self, table: HtmlElement) -> List[LogicalColumn]:
        """
        Logical columns of `table`, built once per table.
        """

        position: int | None = self.position_of(table)
        if position is None:
            return build_logical_columns(table)
        if position not in self._columns:
            self._columns[position] = build_logical_columns(table)
        return self._columns[position]

    def locate(self, title: str, row_labels: Sequence[str] | None = None) -> HtmlElement | None:
        """
        Return the table for `title`, preferring one containing `row_labels`.

        Parameters
        ----------
        title : str
            Table title hint, e.g. "Factors Affecting Reserve Balances".
        row_labels : Sequence[str], optional
            Row label candidates the table should contain.

        Returns
        -------
        HtmlElement or None
            None means "table not found".
        """

        key: LookupKey = (title, tuple(row_labels or ()))
        if key not in self._lookups:
            self._lookups[key] = self._find_position(title, row_labels)
        position: int | None = self._lookups[key]
        return self.tables[position] if position is not None else None

    def _find_position(self, title: str, row_labels: Sequence[str] | None) -> int | None:
        titled: List[int] = [
            position
            for position in range(len(self.tables))
            if contains_label(self.context_at(position), title)
        ]
        if row_labels:
            for position in titled:
                if has_matching_row(self.tables[position], row_labels):
                    return position
        return titled[0] if titled else None
