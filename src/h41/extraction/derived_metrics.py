"""
Purpose
-------
Metrics derived from extracted fields: relative changes, asset
composition, composite-group totals and the reserve-balance integrity
check.

Key behaviors
-------------
- `percent_change` divides a change by the prior value
  (`current - change`), never by `current`; a zero prior value gives 0.0.
- `asset_composition` expresses components as percentages of total assets,
  0.0 whenever the total or component is missing or the total is zero.
- `group_totals` sums member fields and recomputes the group's weekly and
  yearly changes against the same sum in the week-ago / year-ago snapshot,
  rather than adding up the members' rounded changes.
- `reserve_integrity` compares supplying minus absorbing factors with the
  reported reserve balances.

Conventions
-----------
- Missing inputs produce None (or 0.0 for composition ratios); nothing here
  raises on missing data.
"""

from typing import Dict, Mapping, Sequence

from h41.extraction.extraction_config import (
    ASSET_COMPOSITION,
    ASSET_COMPOSITION_TOTAL,
    COMPOSITE_GROUPS,
    INTEGRITY_ABSORBING,
    INTEGRITY_REPORTED,
    INTEGRITY_SUPPLYING,
    INTEGRITY_TOLERANCE,
)
from h41.extraction.extraction_types import (
    ExtractedValue,
    FieldSpec,
    GroupTotal,
    HistoricalSnapshot,
    ReserveIntegrity,
    SourceDates,
)
from h41.extraction.snapshot_lookup import snapshot_value


def percent_change(current: float | None, change: float | None) -> float | None:
    """
    Change relative to the prior value, in percent.

    Parameters
    ----------
    current : float or None
        Current value.
    change : float or None
        Change since the prior period.

    Returns
    -------
    float or None
        `change / (current - change) * 100`; 0.0 when `current - change` is
        zero; None when either input is missing.
    """

    if current is None or change is None:
        return None
    previous: float = current - change
    if previous == 0:
        return 0.0
    return change / previous * 100


def build_extracted_value(
    current: float | None,
    weekly_change: float | None,
    yearly_change: float | None,
    source_dates: SourceDates | None = None,
) -> ExtractedValue:
    return ExtractedValue(
        current=current,
        weekly_change=weekly_change,
        yearly_change=yearly_change,
        weekly_change_percent=percent_change(current, weekly_change),
        yearly_change_percent=percent_change(current, yearly_change),
        source_dates=source_dates or SourceDates(),
    )


def asset_composition(fields: Mapping[str, ExtractedValue]) -> Dict[str, float]:
    """
    Share of total assets held in each component, in percent.

    Parameters
    ----------
    fields : Mapping[str, ExtractedValue]
        Extracted fields keyed by FieldSpec key.

    Returns
    -------
    dict[str, float]
        Ratio name to percentage; 0.0 for missing data or a zero total.
    """

    total_value = fields.get(ASSET_COMPOSITION_TOTAL)
    total: float | None = total_value.current if total_value is not None else None
    ratios: Dict[str, float] = {}
    for name, key in ASSET_COMPOSITION.items():
        component_value = fields.get(key)
        component: float | None = component_value.current if component_value is not None else None
        if total is None or total == 0 or component is None:
            ratios[name] = 0.0
        else:
            ratios[name] = component / total * 100
    return ratios


def difference(current: float | None, prior: float | None) -> float | None:
    if current is None or prior is None:
        return None
    return current - prior


def snapshot_sum(
    snapshot: HistoricalSnapshot | None, members: Sequence[str], specs: Mapping[str, FieldSpec]
) -> float | None:
    if snapshot is None or any(member not in specs for member in members):
        return None
    values = [snapshot_value(snapshot, specs[member]) for member in members]
    if any(value is None for value in values):
        return None
    return sum(values)


def group_totals(
    fields: Mapping[str, ExtractedValue],
    specs: Mapping[str, FieldSpec],
    as_of_date: str | None,
    week_ago: HistoricalSnapshot | None,
    year_ago: HistoricalSnapshot | None,
) -> Dict[str, GroupTotal]:
    """
    Compute every composite group's total and changes.

    Parameters
    ----------
    fields : Mapping[str, ExtractedValue]
        Extracted fields keyed by FieldSpec key.
    specs : Mapping[str, FieldSpec]
        FieldSpecs keyed by key, used to read snapshot values by row label.
        A group with a member outside `specs` gets no snapshot changes.
    as_of_date : str or None
        Date of the current figures.
    week_ago, year_ago : HistoricalSnapshot or None
        Comparison snapshots selected by the caller.

    Returns
    -------
    dict[str, GroupTotal]
        One entry per group in `COMPOSITE_GROUPS`. The total is None if any
        member is missing; a change is None if the matching snapshot is
        missing or lacks a member.
    """

    totals: Dict[str, GroupTotal] = {}
    for name, members in COMPOSITE_GROUPS.items():
        currents = [fields[m].current if m in fields else None for m in members]
        total: float | None = None
        if all(value is not None for value in currents):
            total = sum(currents)
        prior_week: float | None = snapshot_sum(week_ago, members, specs)
        prior_year: float | None = snapshot_sum(year_ago, members, specs)
        weekly: float | None = difference(total, prior_week)
        yearly: float | None = difference(total, prior_year)
        dates = SourceDates(
            current=as_of_date,
            weekly=week_ago.date if weekly is not None and week_ago is not None else None,
            yearly=year_ago.date if yearly is not None and year_ago is not None else None,
        )
        value: ExtractedValue = build_extracted_value(total, weekly, yearly, dates)
        totals[name] = GroupTotal(name, members, value)
    return totals


def reserve_integrity(fields: Mapping[str, ExtractedValue]) -> ReserveIntegrity | None:
    """
    Check reserve balances against supplying minus absorbing factors.

    Returns
    -------
    ReserveIntegrity or None
        None when any of the three figures is missing.
    """

    supplying = fields.get(INTEGRITY_SUPPLYING)
    absorbing = fields.get(INTEGRITY_ABSORBING)
    reported = fields.get(INTEGRITY_REPORTED)
    if supplying is None or absorbing is None or reported is None:
        return None
    if supplying.current is None or absorbing.current is None or reported.current is None:
        return None
    calculated: float = supplying.current - absorbing.current
    delta: float = calculated - reported.current
    return ReserveIntegrity(
        calculated=calculated,
        reported=reported.current,
        delta=delta,
        ok=abs(delta) <= INTEGRITY_TOLERANCE,
    )
