"""
Purpose
-------
The fixed catalogue of H.4.1 figures to extract, plus the definitions of
the derived metrics computed from them.

Key behaviors
-------------
- `FIELD_SPECS` lists every extracted field with its table title hint,
  row label candidates (most specific first) and table mode.
- `COMPOSITE_GROUPS` names fields summed into group totals.
- `ASSET_COMPOSITION` maps ratio names to component fields of total assets.
- Snapshot lag / tolerance constants drive week-ago and year-ago lookups.

Conventions
-----------
- The first row label candidate of each spec is the key used in
  historical snapshots.
- Row label candidates are full phrases: label matching is substring
  based, so an acronym would also match inside unrelated words.
- Figures are millions of dollars.
"""

from typing import Dict, List, Tuple

from h41.extraction.extraction_types import FieldSpec
from h41.parsing.parsing_config import STATEMENT_MODE, WEEKLY_FACTORS_MODE

FACTORS_TITLE: str = "Factors Affecting Reserve Balances of Depository Institutions"
STATEMENT_TITLE: str = "Consolidated Statement of Condition of All Federal Reserve Banks"
MEMORANDUM_TITLE: str = "Memorandum Items"
MATURITY_TITLE: str = (
    "Maturity Distribution of Securities, Loans, and Selected Other Assets and Liabilities"
)


def factors_spec(key: str, *labels: str) -> FieldSpec:
    return FieldSpec(key, FACTORS_TITLE, tuple(labels), WEEKLY_FACTORS_MODE)


def statement_spec(key: str, *labels: str) -> FieldSpec:
    return FieldSpec(key, STATEMENT_TITLE, tuple(labels), STATEMENT_MODE)


def memorandum_spec(key: str, *labels: str) -> FieldSpec:
    return FieldSpec(key, MEMORANDUM_TITLE, tuple(labels), WEEKLY_FACTORS_MODE)


FIELD_SPECS: List[FieldSpec] = [
    # Factors supplying reserve funds
    factors_spec("reserveBankCredit", "Reserve Bank credit"),
    factors_spec("securitiesHeld", "Securities held outright", "Securities held"),
    factors_spec("treasurySecurities", "U.S. Treasury securities", "Treasury securities"),
    factors_spec("bills", "Bills"),
    factors_spec("notesAndBonds", "Notes and bonds, nominal"),
    factors_spec("tips", "Notes and bonds, inflation-indexed"),
    factors_spec("mbs", "Mortgage-backed securities"),
    factors_spec("repos", "Repurchase agreements"),
    factors_spec("loans", "Loans"),
    factors_spec("primaryCredit", "Primary credit"),
    factors_spec("btfp", "Bank Term Funding Program"),
    factors_spec("cbSwaps", "Central bank liquidity swaps"),
    factors_spec("totalSupplying", "Total factors supplying reserve funds"),
    # Factors absorbing reserve funds
    factors_spec("currency", "Currency in circulation"),
    factors_spec("reverseRepo", "Reverse repurchase agreements"),
    factors_spec(
        "deposits",
        "Deposits with F.R. Banks, other than reserve balances",
        "Deposits with Federal Reserve Banks, other than reserve balances",
    ),
    factors_spec(
        "tga",
        "U.S. Treasury, General Account",
        "U.S. Treasury General Account",
        "Treasury, General Account",
        "Treasury General Account",
    ),
    factors_spec(
        "totalAbsorbing",
        "Total factors, other than reserve balances, absorbing reserve funds",
    ),
    factors_spec("reserveBalances", "Reserve balances with Federal Reserve Banks"),
    # Consolidated statement of condition
    statement_spec("gold", "Gold certificate account"),
    statement_spec("sdr", "Special drawing rights certificate account"),
    statement_spec("statementTreasury", "U.S. Treasury securities"),
    statement_spec("statementMbs", "Mortgage-backed securities"),
    statement_spec("otherAssets", "Other assets"),
    statement_spec("totalAssets", "Total assets"),
    statement_spec("totalLiabilities", "Total liabilities"),
    # Memorandum items
    memorandum_spec("securitiesLentOvernight", "Overnight facility"),
    memorandum_spec("securitiesLentTerm", "Term facility"),
]

COMPOSITE_GROUPS: Dict[str, Tuple[str, ...]] = {
    "securitiesCore": ("treasurySecurities", "mbs"),
    "liquidityFacilities": ("repos", "loans", "cbSwaps"),
    "absorbingCore": ("currency", "reverseRepo", "tga"),
    "securitiesLending": ("securitiesLentOvernight", "securitiesLentTerm"),
}

ASSET_COMPOSITION_TOTAL: str = "totalAssets"
ASSET_COMPOSITION: Dict[str, str] = {
    "treasury": "statementTreasury",
    "mbs": "statementMbs",
    "otherAssets": "otherAssets",
}

INTEGRITY_SUPPLYING: str = "totalSupplying"
INTEGRITY_ABSORBING: str = "totalAbsorbing"
INTEGRITY_REPORTED: str = "reserveBalances"
INTEGRITY_TOLERANCE: float = 10.0

YEARLY_LAG_DAYS: int = 364
YEARLY_TOLERANCE_DAYS: int = 14
WEEKLY_LAG_DAYS: int = 7
WEEKLY_TOLERANCE_DAYS: int = 3

MATURITY_HOLDINGS_LABEL: str = "Holdings"
MATURITY_SECTIONS: Dict[str, str] = {
    "treasury": "U.S. Treasury securities",
    "mbs": "Mortgage-backed securities",
}
MATURITY_BUCKETS: Dict[str, Tuple[str, ...]] = {
    "within15Days": ("within 15 days",),
    "days16To90": ("16 days", "90 days"),
    "days91To1Year": ("91 days", "1 year"),
    "years1To5": ("over 1 year", "5 years"),
    "years5To10": ("over 5 years", "10 years"),
    "over10Years": ("over 10 years",),
    "all": ("all",),
}
