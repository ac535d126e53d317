"""
Purpose
-------
Select caller-supplied historical snapshots for week-ago and year-ago
comparisons, and turn extraction results into snapshots callers can keep.

Key behaviors
-------------
- `select_snapshot` picks the snapshot whose date is closest to
  `as_of - lag_days`, accepting it only within `tolerance_days`; outside
  that window there is no comparison.
- `snapshot_value` reads a field from a snapshot by its key, then by its
  row label candidates.
- `snapshot_from_result` builds a `HistoricalSnapshot` from an
  `ExtractionResult`.

Conventions
-----------
- Ties in distance keep the snapshot listed first.
- Snapshots with unparseable dates are ignored.
- Snapshots built here carry every field under its key and, unless an
  earlier field already claimed it, under its row label; two fields can
  share a row label (Treasury securities in the factors and statement
  tables).
"""

from typing import Sequence

import pandas as pd

from h41.extraction.extraction_types import ExtractionResult, FieldSpec, HistoricalSnapshot


def select_snapshot(
    snapshots: Sequence[HistoricalSnapshot] | None,
    as_of: pd.Timestamp,
    lag_days: int,
    tolerance_days: int,
) -> HistoricalSnapshot | None:
    """
    Find the snapshot closest to `as_of - lag_days`.

    Parameters
    ----------
    snapshots : Sequence[HistoricalSnapshot] or None
        Caller-supplied prior editions.
    as_of : pd.Timestamp
        As-of date of the edition being extracted.
    lag_days : int
        Comparison distance, e.g. 364 for year-over-year.
    tolerance_days : int
        Maximum accepted distance from the target date, inclusive.

    Returns
    -------
    HistoricalSnapshot or None
        None when no snapshot falls inside the tolerance window.
    """

    if not snapshots:
        return None
    target: pd.Timestamp = as_of - pd.Timedelta(days=lag_days)
    frame = pd.DataFrame(
        {
            "position": range(len(snapshots)),
            "date": pd.to_datetime([s.date for s in snapshots], errors="coerce"),
        }
    )
    frame["distance"] = (frame["date"] - target).abs().dt.days
    eligible = frame[frame["distance"] <= tolerance_days]
    if eligible.empty:
        return None
    best = eligible.sort_values(["distance", "position"], kind="stable").iloc[0]
    return snapshots[int(best["position"])]


def snapshot_value(snapshot: HistoricalSnapshot | None, spec: FieldSpec) -> float | None:
    """
    Read `spec`'s value from `snapshot`, trying the spec key and then each
    row label candidate.
    """

    if snapshot is None:
        return None
    for label in (spec.key, *spec.row_label_candidates):
        value = snapshot.fields.get(label)
        if value is not None:
            return float(value)
    return None


def snapshot_from_result(
    result: ExtractionResult, specs: Sequence[FieldSpec]
) -> HistoricalSnapshot:
    """
    Convert an extraction result into a snapshot keyed by field key and row
    label.

    Parameters
    ----------
    result : ExtractionResult
        Output of `extract`.
    specs : Sequence[FieldSpec]
        Specs used for the extraction, in catalogue order.

    Returns
    -------
    HistoricalSnapshot
        Dated with the document's as-of date, or the requested date when
        the document declares none. Fields without a current value are
        omitted.
    """

    fields: dict[str, float] = {}
    for spec in specs:
        value = result.fields.get(spec.key)
        if value is not None and value.current is not None:
            fields[spec.key] = value.current
            fields.setdefault(spec.row_label, value.current)
    return HistoricalSnapshot(date=result.as_of_date or result.requested_date, fields=fields)
