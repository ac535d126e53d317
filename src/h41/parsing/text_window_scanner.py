"""
Purpose
-------
Fallback extractor that reads figures from the document's text lines when
the table structure cannot be resolved.

Key behaviors
-------------
- `document_lines` flattens the document into lines: the text of every
  innermost block element (cells, paragraphs, headings, captions) and each
  line of `<pre>` blocks, in document order.
- `scan_text_window` finds the line that best matches the label candidates,
  then reads up to three values (current, weekly change, yearly change)
  from the tokens after the label on that line and from the following
  lines, stopping at the first line that is not purely numeric or after
  `window` lines.

Conventions
-----------
- Only whole whitespace-separated tokens accepted by `parse_value` (or
  not-available markers, which yield None) count as values.
- Lines that fail to parse never raise.
"""

from typing import List, Sequence, Tuple

from h41.parsing.label_matcher import best_label_score
from h41.parsing.parsing_config import (
    NOT_AVAILABLE_MARKERS,
    TEXT_BLOCK_TAGS,
    TEXT_WINDOW_LINES,
    TEXT_WINDOW_VALUES,
)
from h41.parsing.parsing_types import HtmlElement, TextWindowMatch
from h41.parsing.value_parser import clean_cell_text, parse_value


def document_lines(root: HtmlElement) -> List[str]:
    """
    Flatten a parsed document into non-empty text lines.

    Parameters
    ----------
    root : HtmlElement
        lxml root element.

    Returns
    -------
    list[str]
        Cleaned lines in document order.
    """

    if root is None:
        return []
    lines: List[str] = []
    for element in root.iter(*TEXT_BLOCK_TAGS):
        if element.tag == "pre":
            for raw_line in "".join(element.itertext()).splitlines():
                line = clean_cell_text(raw_line)
                if line:
                    lines.append(line)
            continue
        if any(True for _ in element.iterdescendants(*TEXT_BLOCK_TAGS)):
            continue
        if any(True for _ in element.iterancestors("pre")):
            continue
        parts: List[str] = element.xpath(".//text()[not(ancestor::sup)]")
        line = clean_cell_text(" ".join(parts))
        if line:
            lines.append(line)
    return lines


def is_value_token(token: str) -> bool:
    return token.lower() in NOT_AVAILABLE_MARKERS or parse_value(token) is not None


def trailing_value_tokens(line: str) -> List[str]:
    """
    Value tokens at the end of a label line, in order.
    """

    tokens: List[str] = line.split()
    start: int = len(tokens)
    while start > 0 and is_value_token(tokens[start - 1]):
        start -= 1
    return tokens[start:]


def scan_text_window(
    lines: Sequence[str], candidates: Sequence[str], window: int = TEXT_WINDOW_LINES
) -> TextWindowMatch | None:
    """
    Find a labelled line and read the values that follow it.

    Parameters
    ----------
    lines : Sequence[str]
        Output of `document_lines`.
    candidates : Sequence[str]
        Row label candidates, most specific first.
    window : int, default=10
        Maximum number of lines read after the label line.

    Returns
    -------
    TextWindowMatch or None
        None when no line matches or no value follows the label.
    """

    best_index: int = -1
    best_score: int = 0
    for index, line in enumerate(lines):
        words: List[str] = line.split()
        label_part: str = " ".join(words[: len(words) - len(trailing_value_tokens(line))])
        if not label_part:
            continue
        score: int = best_label_score(label_part, candidates)
        if score > best_score:
            best_index, best_score = index, score
    if best_index < 0:
        return None

    tokens: List[str] = trailing_value_tokens(lines[best_index])
    for line in lines[best_index + 1 : best_index + 1 + window]:
        if len(tokens) >= TEXT_WINDOW_VALUES:
            break
        line_tokens: List[str] = line.split()
        if not all(is_value_token(token) for token in line_tokens):
            break
        tokens.extend(line_tokens)
    tokens = tokens[:TEXT_WINDOW_VALUES]
    if not tokens:
        return None
    values: Tuple[float | None, ...] = tuple(parse_value(token) for token in tokens)
    if all(value is None for value in values):
        return None
    return TextWindowMatch(
        label_line=lines[best_index],
        line_index=best_index,
        score=best_score,
        values=values,
        raw_tokens=tuple(tokens),
    )
