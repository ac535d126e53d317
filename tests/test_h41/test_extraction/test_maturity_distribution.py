"""
Unit tests for `h41.extraction.maturity_distribution`.
"""

from h41.extraction import maturity_distribution
from h41.parsing.table_locator import TableLocator
from tests.test_h41.h41_testing_utils import (
    FACTORS_ROWS,
    DummyLogger,
    build_table,
    edition_html,
    parse_html,
    weekly_factors_head,
    wrap_document,
)


def test_profiles_for_treasury_and_mbs_sections() -> None:
    """
    Returns
    -------
    None
        The test passes if both sections are read from their own "Holdings"
        rows, bucket by bucket, with the footnote marker dropped from the
        section label.
    """

    locator = TableLocator(parse_html(edition_html()))
    profiles = maturity_distribution.maturity_distribution(locator, DummyLogger())

    assert set(profiles) == {"treasury", "mbs"}
    treasury = profiles["treasury"]
    assert treasury.row_text == "Holdings"
    assert treasury.buckets == {
        "within15Days": 60000.0,
        "days16To90": 300000.0,
        "days91To1Year": 600000.0,
        "years1To5": 1700000.0,
        "years5To10": 700000.0,
        "over10Years": 840000.0,
        "all": 4200000.0,
    }
    assert profiles["mbs"].buckets["over10Years"] == 2204490.0
    assert profiles["mbs"].buckets["all"] == 2300000.0


def test_missing_maturity_table_gives_no_profiles() -> None:
    """
    Returns
    -------
    None
        The test passes if an edition without the maturity table yields an
        empty mapping and a debug record.
    """

    html = wrap_document(build_table(weekly_factors_head(), [list(r) for r in FACTORS_ROWS]))
    logger = DummyLogger()

    assert maturity_distribution.maturity_distribution(TableLocator(parse_html(html)), logger) == {}
    assert logger.events("debugs") == ["maturity_table_not_found"]
