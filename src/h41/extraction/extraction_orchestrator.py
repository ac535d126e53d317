"""
Purpose
-------
Turn one H.4.1 edition's HTML into typed figures: every FieldSpec in the
catalogue, the derived metrics built on them, and a per-field validation
report.

Key behaviors
-------------
- Parses the document once with lxml and shares one `TableLocator` (and its
  table / column caches) across all FieldSpecs of the call.
- Two-tier strategy per FieldSpec:
  1. structural: locate the titled table, pick the best-matching row and
     resolve the current / weekly-change / yearly-change columns;
  2. text window: when any structural step fails, scan the flattened
     document text for the label and read up to three trailing values.
  The strategy used, or the structural failure reason, is recorded in the
  field's `ValidationEntry`.
- A field neither strategy resolves produces a "<key>: <reason>" warning and
  an all-None `ExtractedValue`; the remaining fields are unaffected.
- Year-ago and week-ago snapshots are selected from the caller's list by
  the document's as-of date; the year-ago snapshot also fills the yearly
  change of fields whose table has no yearly column.

Conventions
-----------
- `extract` is a pure function of its arguments: no module state, no I/O
  beyond logging.
- `ok` is False only when the document contains no table at all.
- The as-of date is the document's "week ended" date, else the requested
  date.

Downstream usage
----------------
Call `extract(requested_date_iso, html, snapshots, logger)` with the HTML
returned by `fetch_validator.fetch_release`; keep
`snapshot_from_result(result, FIELD_SPECS)` to feed later calls.
"""

from typing import Dict, List, Sequence, Tuple

import pandas as pd
from lxml import etree

from h41.extraction.derived_metrics import (
    asset_composition,
    build_extracted_value,
    group_totals,
    reserve_integrity,
)
from h41.extraction.extraction_config import (
    FIELD_SPECS,
    WEEKLY_LAG_DAYS,
    WEEKLY_TOLERANCE_DAYS,
    YEARLY_LAG_DAYS,
    YEARLY_TOLERANCE_DAYS,
)
from h41.extraction.extraction_types import (
    COLUMN_NOT_FOUND,
    NO_STRATEGY,
    ROW_NOT_FOUND,
    STRUCTURAL_STRATEGY,
    TABLE_NOT_FOUND,
    TEXT_WINDOW_STRATEGY,
    DerivedMetrics,
    ExtractedValue,
    ExtractionResult,
    FieldNotFound,
    FieldSpec,
    HistoricalSnapshot,
    SourceDates,
    ValidationEntry,
)
from h41.extraction.maturity_distribution import maturity_distribution
from h41.extraction.snapshot_lookup import select_snapshot, snapshot_value
from h41.logging.h41_logger import H41Logger, initialize_logger
from h41.parsing.column_resolver import resolve_columns
from h41.parsing.document_dates import find_document_dates
from h41.parsing.parsing_types import (
    ColumnSelection,
    HtmlElement,
    LogicalColumn,
    MatchedRow,
    TextWindowMatch,
)
from h41.parsing.row_extractor import find_best_row
from h41.parsing.table_locator import TableLocator
from h41.parsing.text_window_scanner import document_lines, scan_text_window
from h41.utils.date_utils import to_iso, to_timestamp

FieldOutcome = Tuple[ExtractedValue, ValidationEntry]


def extract(
    requested_date_iso: str,
    html: str | None,
    snapshots: Sequence[HistoricalSnapshot] | None = None,
    logger: H41Logger | None = None,
    specs: Sequence[FieldSpec] = FIELD_SPECS,
) -> ExtractionResult:
    """
    Extract every FieldSpec and the derived metrics from one edition.

    Parameters
    ----------
    requested_date_iso : str
        Requested edition date, `YYYY-MM-DD`; drives column resolution.
    html : str or None
        Edition HTML. Empty or None yields `ok=False`.
    snapshots : Sequence[HistoricalSnapshot], optional
        Caller-owned prior editions used for week-ago / year-ago comparisons.
    logger : H41Logger, optional
        Logger; an "extraction_orchestrator" logger is created when omitted.
    specs : Sequence[FieldSpec], default=FIELD_SPECS
        Catalogue of fields to extract.

    Returns
    -------
    ExtractionResult
        One `ExtractedValue` and one `ValidationEntry` per spec, warnings for
        unresolved fields, derived metrics and the document's dates.

    Raises
    ------
    ValueError
        If `requested_date_iso` is not a valid ISO date.
    """

    if logger is None:
        logger = initialize_logger("extraction_orchestrator")
    requested: pd.Timestamp = to_timestamp(requested_date_iso)
    root: HtmlElement | None = parse_document(html)
    locator = TableLocator(root)
    ok: bool = locator.has_tables()
    if not ok:
        logger.warning(
            "no_tables_found",
            context={"requested_date": requested_date_iso, "length": len(html or "")},
        )

    release_date, week_ended = find_document_dates(root)
    as_of: pd.Timestamp = week_ended if week_ended is not None else requested
    year_ago: HistoricalSnapshot | None = select_snapshot(
        snapshots, as_of, YEARLY_LAG_DAYS, YEARLY_TOLERANCE_DAYS
    )
    week_ago: HistoricalSnapshot | None = select_snapshot(
        snapshots, as_of, WEEKLY_LAG_DAYS, WEEKLY_TOLERANCE_DAYS
    )
    logger.debug(
        "extraction_started",
        context={
            "requested_date": requested_date_iso,
            "as_of_date": to_iso(as_of),
            "tables": len(locator.tables),
            "year_ago_snapshot": year_ago.date if year_ago is not None else None,
            "week_ago_snapshot": week_ago.date if week_ago is not None else None,
        },
    )

    fields: Dict[str, ExtractedValue] = {}
    report: List[ValidationEntry] = []
    warnings: List[str] = []
    lines: List[str] | None = None
    for spec in specs:
        try:
            value, entry = extract_structural(spec, locator, requested, to_iso(as_of))
        except FieldNotFound as e:
            if lines is None:
                lines = document_lines(root)
            match: TextWindowMatch | None = scan_text_window(lines, spec.row_label_candidates)
            if match is not None:
                value, entry = text_window_outcome(spec, match, to_iso(as_of), e.reason)
            else:
                value = ExtractedValue()
                entry = ValidationEntry(key=spec.key, strategy=NO_STRATEGY, reason=e.reason)
                warnings.append(str(e))
                logger.warning("field_not_found", context={"key": spec.key, "reason": e.reason})
        value = apply_yearly_snapshot(value, spec, year_ago)
        fields[spec.key] = value
        report.append(entry)
        logger.debug(
            "field_extracted",
            context={"key": spec.key, "strategy": entry.strategy, "current": value.current},
        )

    spec_map: Dict[str, FieldSpec] = {spec.key: spec for spec in specs}
    derived = DerivedMetrics(
        asset_composition=asset_composition(fields),
        group_totals=group_totals(fields, spec_map, to_iso(as_of), week_ago, year_ago),
        reserve_integrity=reserve_integrity(fields),
        maturity=maturity_distribution(locator, logger) if ok else {},
    )
    if derived.reserve_integrity is not None and not derived.reserve_integrity.ok:
        logger.warning(
            "reserve_integrity_mismatch",
            context={
                "calculated": derived.reserve_integrity.calculated,
                "reported": derived.reserve_integrity.reported,
                "delta": derived.reserve_integrity.delta,
            },
        )
    logger.info(
        "extraction_finished",
        context={
            "requested_date": requested_date_iso,
            "ok": ok,
            "fields": len(fields),
            "warnings": len(warnings),
        },
    )
    return ExtractionResult(
        ok=ok,
        fields=fields,
        warnings=tuple(warnings),
        report=tuple(report),
        derived=derived,
        requested_date=requested_date_iso,
        release_date=to_iso(release_date) if release_date is not None else None,
        as_of_date=to_iso(week_ended) if week_ended is not None else None,
    )


def parse_document(html: str | None) -> HtmlElement | None:
    if not html or not html.strip():
        return None
    return etree.HTML(html)


def column_date(column: LogicalColumn | None) -> str | None:
    if column is None or column.resolved_date is None:
        return None
    return to_iso(column.resolved_date)


def column_header(column: LogicalColumn | None) -> str | None:
    return column.header_text if column is not None else None


def column_index(column: LogicalColumn | None) -> int | None:
    return column.index if column is not None else None


def extract_structural(
    spec: FieldSpec, locator: TableLocator, requested: pd.Timestamp, as_of_iso: str
) -> FieldOutcome:
    """
    Resolve one FieldSpec from the document's tables.

    Parameters
    ----------
    spec : FieldSpec
        Field to extract.
    locator : TableLocator
        Locator shared by the extraction call.
    requested : pd.Timestamp
        Requested date used to pick columns.
    as_of_iso : str
        Fallback date for the current figure when its header carries none.

    Returns
    -------
    tuple[ExtractedValue, ValidationEntry]
        Value and its structural diagnostic entry.

    Raises
    ------
    FieldNotFound
        With reason "table not found", "row not found" or "column not found".
    """

    table: HtmlElement | None = locator.locate(spec.table_title_hint, spec.row_label_candidates)
    if table is None:
        raise FieldNotFound(spec.key, TABLE_NOT_FOUND)
    columns: List[LogicalColumn] = locator.columns_of(table)
    row: MatchedRow | None = find_best_row(table, spec.row_label_candidates, len(columns))
    if row is None:
        raise FieldNotFound(spec.key, ROW_NOT_FOUND)
    selection: ColumnSelection = resolve_columns(columns, requested, spec.mode)
    if selection.current is None:
        raise FieldNotFound(spec.key, COLUMN_NOT_FOUND)

    indexes = [column_index(c) for c in (selection.current, selection.weekly, selection.yearly)]
    value: ExtractedValue = build_extracted_value(
        row.value_at(indexes[0]),
        row.value_at(indexes[1]),
        row.value_at(indexes[2]),
        SourceDates(
            current=column_date(selection.current) or as_of_iso,
            weekly=column_date(selection.weekly),
            yearly=column_date(selection.yearly),
        ),
    )
    entry = ValidationEntry(
        key=spec.key,
        strategy=STRUCTURAL_STRATEGY,
        table_context=locator.context_of(table),
        row_text=row.label_text,
        column_headers=(
            column_header(selection.current),
            column_header(selection.weekly),
            column_header(selection.yearly),
        ),
        raw_cells=tuple(row.raw_at(index) for index in indexes),
    )
    return value, entry


def text_window_outcome(
    spec: FieldSpec, match: TextWindowMatch, as_of_iso: str, reason: str
) -> FieldOutcome:
    """
    Build a FieldSpec's value from a text-window match; values are read in
    (current, weekly change, yearly change) order.
    """

    values: List[float | None] = list(match.values) + [None] * (3 - len(match.values))
    value: ExtractedValue = build_extracted_value(
        values[0], values[1], values[2], SourceDates(current=as_of_iso)
    )
    entry = ValidationEntry(
        key=spec.key,
        strategy=TEXT_WINDOW_STRATEGY,
        row_text=match.label_line,
        raw_cells=match.raw_tokens,
        reason=reason,
    )
    return value, entry


def apply_yearly_snapshot(
    value: ExtractedValue, spec: FieldSpec, year_ago: HistoricalSnapshot | None
) -> ExtractedValue:
    """
    Fill a missing yearly change from the year-ago snapshot.

    Only applies when the current value is known and no yearly figure came
    from the document itself.
    """

    if value.current is None or value.yearly_change is not None:
        return value
    if value.source_dates.yearly is not None:
        return value
    prior: float | None = snapshot_value(year_ago, spec)
    if prior is None or year_ago is None:
        return value
    return build_extracted_value(
        value.current,
        value.weekly_change,
        value.current - prior,
        SourceDates(
            current=value.source_dates.current,
            weekly=value.source_dates.weekly,
            yearly=year_ago.date,
        ),
    )
