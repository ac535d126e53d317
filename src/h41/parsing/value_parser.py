"""
Purpose
-------
Turn raw H.4.1 table-cell text into signed numbers.

Key behaviors
-------------
- `parse_value` accepts `[sign]digits[,digits]*[.digits]`, where the sign is
  "+", an ASCII hyphen, or a Unicode minus-like dash placed directly before
  the first digit. Commas are thousands separators.
- Empty cells and not-available markers ("n.a.", "na", ...) are no data.
- Any other shape is no data as well; a malformed cell never raises, so one
  bad cell cannot abort extraction of the rest of a table.
- `format_value` renders a number back with thousands separators.

Conventions
-----------
- "No data" is represented by None.
- Values are returned as floats; H.4.1 figures are millions of dollars.
"""

from h41.parsing.parsing_config import NBSP_CHARS, NOT_AVAILABLE_MARKERS, VALUE_PATTERN


def clean_cell_text(raw: str | None) -> str:
    """
    Replace non-breaking spaces with plain spaces, collapse runs of
    whitespace and trim.
    """

    if raw is None:
        return ""
    text: str = raw
    for char in NBSP_CHARS:
        text = text.replace(char, " ")
    return " ".join(text.split())


def parse_value(raw: str | None) -> float | None:
    """
    Parse one cell's text.

    Parameters
    ----------
    raw : str or None
        Raw cell text, possibly containing non-breaking spaces.

    Returns
    -------
    float or None
        The signed value, or None for empty, not-available or malformed text.

    Notes
    -----
    - Whitespace between the sign and the first digit is not accepted:
      "- 12" is malformed.
    """

    text: str = clean_cell_text(raw)
    if not text or text.lower() in NOT_AVAILABLE_MARKERS:
        return None
    match = VALUE_PATTERN.match(text)
    if match is None:
        return None
    number: float = float(match.group("number").replace(",", "") + (match.group("fraction") or ""))
    sign: str | None = match.group("sign")
    if sign is not None and sign != "+":
        return -number
    return number


def format_value(value: float | None, signed: bool = False) -> str:
    """
    Render a value with thousands separators.

    Parameters
    ----------
    value : float or None
        Value to render; None renders as "n.a.".
    signed : bool, default=False
        Prefix positive values with "+" (used for change figures).

    Returns
    -------
    str
        e.g. "6,500,000", "-1,234", "+12.5".
    """

    if value is None:
        return "n.a."
    text: str = f"{value:,.0f}" if float(value).is_integer() else f"{value:,}"
    if signed and value > 0:
        return "+" + text
    return text
