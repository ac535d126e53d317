"""
Purpose
-------
Read the maturity distribution of Treasury and mortgage-backed holdings
from the H.4.1 "Maturity Distribution" table.

Key behaviors
-------------
- Locates the maturity table by title and resolves one logical column per
  maturity bucket by whole-word header tokens.
- For each security section, reads the "Holdings" row that follows the
  section heading row.
- Buckets whose column cannot be resolved are reported as None.

Conventions
-----------
- A missing table or section yields no profile for it; this never raises.
"""

from typing import Dict, List

from h41.extraction.extraction_config import (
    MATURITY_BUCKETS,
    MATURITY_HOLDINGS_LABEL,
    MATURITY_SECTIONS,
    MATURITY_TITLE,
)
from h41.extraction.extraction_types import MaturityProfile
from h41.logging.h41_logger import H41Logger
from h41.parsing.column_resolver import find_column_by_tokens
from h41.parsing.parsing_types import HtmlElement, LogicalColumn, MatchedRow
from h41.parsing.row_extractor import find_section_row
from h41.parsing.table_locator import TableLocator


def bucket_columns(columns: List[LogicalColumn]) -> Dict[str, int | None]:
    """
    Map each maturity bucket key to the logical column index carrying it.
    """

    resolved: Dict[str, int | None] = {}
    for bucket, tokens in MATURITY_BUCKETS.items():
        column: LogicalColumn | None = find_column_by_tokens(columns, tokens)
        resolved[bucket] = column.index if column is not None else None
    return resolved


def maturity_distribution(locator: TableLocator, logger: H41Logger) -> Dict[str, MaturityProfile]:
    """
    Build a maturity profile per security section.

    Parameters
    ----------
    locator : TableLocator
        Locator over the parsed edition.
    logger : H41Logger
        Logger for diagnostics.

    Returns
    -------
    dict[str, MaturityProfile]
        Profiles keyed by section key ("treasury", "mbs"); sections that are
        absent from the table are left out.
    """

    table: HtmlElement | None = locator.locate(MATURITY_TITLE)
    if table is None:
        logger.debug("maturity_table_not_found", context={"title": MATURITY_TITLE})
        return {}
    columns: List[LogicalColumn] = locator.columns_of(table)
    indexes: Dict[str, int | None] = bucket_columns(columns)

    profiles: Dict[str, MaturityProfile] = {}
    for key, section in MATURITY_SECTIONS.items():
        row: MatchedRow | None = find_section_row(
            table, section, MATURITY_HOLDINGS_LABEL, len(columns)
        )
        if row is None:
            logger.debug("maturity_section_not_found", context={"section": section})
            continue
        profiles[key] = MaturityProfile(
            section=section,
            row_text=row.label_text,
            buckets={bucket: row.value_at(index) for bucket, index in indexes.items()},
        )
    return profiles
