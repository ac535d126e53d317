"""
Purpose
-------
Records exchanged by the extraction layer: what to extract (`FieldSpec`),
what was extracted (`ExtractedValue`, `ExtractionResult`), how it was found
(`ValidationEntry`), and caller-owned comparison input
(`HistoricalSnapshot`).

Key behaviors
-------------
- All records are frozen dataclasses; an extraction result never changes
  after it is returned.
- `FieldNotFound` is raised inside structural extraction and converted into
  a warning by the orchestrator; it never reaches callers of `extract`.

Conventions
-----------
- Dates are ISO `YYYY-MM-DD` strings.
- Values are millions of dollars as floats; None means "no data".
- Percent fields are `change / (current - change) * 100`.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

STRUCTURAL_STRATEGY: str = "structural"
TEXT_WINDOW_STRATEGY: str = "text_window"
NO_STRATEGY: str = "none"

TABLE_NOT_FOUND: str = "table not found"
ROW_NOT_FOUND: str = "row not found"
COLUMN_NOT_FOUND: str = "column not found"


class FieldNotFound(Exception):
    """
    A FieldSpec could not be resolved structurally.

    Attributes
    ----------
    key : str
        FieldSpec key.
    reason : str
        "table not found", "row not found" or "column not found".
    """

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason


@dataclass(frozen=True)
class FieldSpec:
    """
    Purpose
    -------
    A named datum to extract from an edition.

    Attributes
    ----------
    key : str
        Stable identifier, e.g. "securitiesHeld".
    table_title_hint : str
        Title text expected near the table.
    row_label_candidates : tuple[str, ...]
        Acceptable row labels, most specific first. The first candidate is
        the field's canonical row label (the snapshot key).
    mode : str
        "weekly-factors" or "statement".
    """

    key: str
    table_title_hint: str
    row_label_candidates: Tuple[str, ...]
    mode: str

    @property
    def row_label(self) -> str:
        return self.row_label_candidates[0]


@dataclass(frozen=True)
class SourceDates:
    current: str | None = None
    weekly: str | None = None
    yearly: str | None = None


@dataclass(frozen=True)
class ExtractedValue:
    """
    Purpose
    -------
    Result of applying one FieldSpec to one edition.

    Attributes
    ----------
    current : float or None
        Current-period value.
    weekly_change, yearly_change : float or None
        Changes from the week-ago and year-ago periods.
    weekly_change_percent, yearly_change_percent : float or None
        Changes relative to the prior value; 0.0 when the prior value is 0.
    source_dates : SourceDates
        Header (or snapshot) dates each figure came from.
    """

    current: float | None = None
    weekly_change: float | None = None
    yearly_change: float | None = None
    weekly_change_percent: float | None = None
    yearly_change_percent: float | None = None
    source_dates: SourceDates = field(default_factory=SourceDates)


@dataclass(frozen=True)
class HistoricalSnapshot:
    """
    Purpose
    -------
    A prior edition's figures, supplied by the caller for comparisons.

    Attributes
    ----------
    date : str
        As-of date of the prior edition.
    fields : Mapping[str, float]
        Values keyed by row label (a FieldSpec's first candidate) or by
        FieldSpec key.
    """

    date: str
    fields: Mapping[str, float]


@dataclass(frozen=True)
class ValidationEntry:
    """
    Purpose
    -------
    Diagnostic record for one FieldSpec.

    Attributes
    ----------
    key : str
        FieldSpec key.
    strategy : str
        "structural", "text_window" or "none".
    table_context : str or None
        Context string of the matched table.
    row_text : str or None
        Label of the matched row or text line.
    column_headers : tuple[str | None, str | None, str | None]
        Header texts of the current, weekly and yearly columns.
    raw_cells : tuple[str | None, ...]
        Raw texts read for current, weekly and yearly.
    reason : str or None
        Why the structural strategy failed, if it did.
    """

    key: str
    strategy: str
    table_context: str | None = None
    row_text: str | None = None
    column_headers: Tuple[str | None, str | None, str | None] = (None, None, None)
    raw_cells: Tuple[str | None, ...] = ()
    reason: str | None = None


@dataclass(frozen=True)
class GroupTotal:
    name: str
    members: Tuple[str, ...]
    value: ExtractedValue


@dataclass(frozen=True)
class ReserveIntegrity:
    """
    Purpose
    -------
    Check that reserve balances equal supplying minus absorbing factors.

    Attributes
    ----------
    calculated : float
        Total supplying minus total absorbing.
    reported : float
        Reported reserve balances.
    delta : float
        `calculated - reported`.
    ok : bool
        True when `abs(delta)` is within tolerance.
    """

    calculated: float
    reported: float
    delta: float
    ok: bool


@dataclass(frozen=True)
class MaturityProfile:
    """
    Purpose
    -------
    Holdings of one security type split by remaining maturity.

    Attributes
    ----------
    section : str
        Section label, e.g. "U.S. Treasury securities".
    row_text : str
        Label of the row the buckets were read from.
    buckets : Mapping[str, float | None]
        Value per maturity bucket key.
    """

    section: str
    row_text: str
    buckets: Mapping[str, float | None]


@dataclass(frozen=True)
class DerivedMetrics:
    asset_composition: Mapping[str, float] = field(default_factory=dict)
    group_totals: Mapping[str, GroupTotal] = field(default_factory=dict)
    reserve_integrity: ReserveIntegrity | None = None
    maturity: Mapping[str, MaturityProfile] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractionResult:
    """
    Purpose
    -------
    Everything `extract` learned from one document.

    Attributes
    ----------
    ok : bool
        False only when the document holds no table at all.
    fields : dict[str, ExtractedValue]
        One entry per FieldSpec key, present even when no data was found.
    warnings : tuple[str, ...]
        "<key>: <reason>" for each field neither strategy could resolve.
    report : tuple[ValidationEntry, ...]
        One diagnostic entry per FieldSpec, in FieldSpec order.
    derived : DerivedMetrics
        Ratios, group totals, integrity check and maturity profiles.
    requested_date : str
        Date passed to `extract`.
    release_date : str or None
        "Release Date" declared by the document.
    as_of_date : str or None
        "Week ended" date declared by the document.
    """

    ok: bool
    fields: Dict[str, ExtractedValue]
    warnings: Tuple[str, ...]
    report: Tuple[ValidationEntry, ...]
    derived: DerivedMetrics
    requested_date: str
    release_date: str | None = None
    as_of_date: str | None = None
