import pytest

from valuation_copilot.utils.data_processing import extract_number, format_compact, format_currency, safe_float
from valuation_copilot.utils.validation import validate_snapshot


@pytest.mark.parametrize("text, expected", [
    ("50k", 50_000),
    ("2.5 million", 2_500_000),
    ("about 50M", 50_000_000),
    ("10 thousand", 10_000),
    ("1200", 1200),
    ("3.75", 3.75),
])
def test_extract_number(text, expected):
    assert extract_number(text) == pytest.approx(expected)


def test_extract_number_without_digits():
    assert extract_number("no digits here") is None


def test_extract_number_uses_first_occurrence():
    assert extract_number("between 20 and 40k") == pytest.approx(20_000)


def test_million_wins_over_thousand():
    assert extract_number("5 million, not 5k") == pytest.approx(5_000_000)


def test_safe_float():
    assert safe_float("$1,250.50") == 1250.5
    assert safe_float(None) == 0.0
    assert safe_float("n/a", default=-1) == -1
    assert safe_float([3]) == 3.0


def test_format_currency():
    assert format_currency(50_000_000) == "$50,000,000"
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-250_000) == "-$250,000"
    assert format_currency(float("inf")) == "n/a"


def test_format_compact():
    assert format_compact(12_500_000) == "$12.5M"
    assert format_compact(250_000) == "$250k"
    assert format_compact(12) == "$12"


def test_validate_snapshot_rejects_missing_section(session):
    snapshot = session.snapshot()
    assert validate_snapshot(snapshot)
    del snapshot["vcInputs"]
    assert not validate_snapshot(snapshot)


def test_validate_snapshot_rejects_missing_nested_key(session):
    snapshot = session.snapshot()
    del snapshot["context"]["region"]
    assert not validate_snapshot(snapshot)
    assert not validate_snapshot(None)
