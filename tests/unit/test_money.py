"""Unit tests for currency rounding primitives"""

import pytest
from decimal import Decimal
from bill_planner.domain.money import (
    format_currency,
    monthly_interest_cents,
    parse_amount,
    scale_cents,
    to_major_units,
    to_minor_units,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("145.00", Decimal("145.00")),
        ("$1,234.50", Decimal("1234.50")),
        (12.5, Decimal("12.5")),
        (7, Decimal("7")),
        ("abc", Decimal("0")),
        ("", Decimal("0")),
        (None, Decimal("0")),
        (float("nan"), Decimal("0")),
        (float("inf"), Decimal("0")),
        ("NaN", Decimal("0")),
        (True, Decimal("0")),
        ("1e50", Decimal("0")),
        (1e30, Decimal("0")),
    ],
)
def test_parse_amount_normalizes_bad_input_to_zero(value, expected):
    assert parse_amount(value) == expected


def test_to_minor_units_rounds_half_away_from_zero():
    """Half a cent rounds up, unlike banker's rounding"""
    assert to_minor_units("0.125") == 13
    assert to_minor_units("2.675") == 268
    assert to_minor_units("-0.125") == -13
    assert to_minor_units(145) == 14500


@pytest.mark.parametrize("value", ["1e50", 1e30, Decimal("1E+40"), "-1e29"])
def test_to_minor_units_out_of_range_is_zero(value):
    assert to_minor_units(value) == 0


def test_large_but_plausible_amount_is_kept():
    assert to_minor_units("999,999,999,999.99") == 99999999999999


def test_float_input_does_not_drift():
    assert to_minor_units(0.1 + 0.2) == 30
    assert to_minor_units(1.005) == 101


def test_to_major_units_has_two_places():
    assert to_major_units(14500) == Decimal("145.00")
    assert str(to_major_units(5)) == "0.05"


def test_monthly_interest_cents():
    """$1000.00 at 12% is $10.00 a month"""
    assert monthly_interest_cents(100000, 12) == 1000
    assert monthly_interest_cents(123456, 5.9) == 607  # 607.0 cents
    assert monthly_interest_cents(0, 12) == 0
    assert monthly_interest_cents(100000, 0) == 0
    assert monthly_interest_cents(100000, None) == 0


def test_scale_cents():
    assert scale_cents(10000, "1.2") == 12000
    assert scale_cents(3333, "1.5") == 5000  # 4999.5 rounds up


def test_format_currency():
    assert format_currency(123456) == "$1,234.56"
    assert format_currency(5) == "$0.05"
    assert format_currency(-2500) == "-$25.00"
