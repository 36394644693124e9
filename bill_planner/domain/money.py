"""Currency rounding primitives.

Balances, payments and interest are carried as integer cents inside the
domain. Conversion to and from decimal dollars happens only at the edges
(API schemas, stored documents), so repeated arithmetic never drifts.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")
# Dollar amounts at or above 10**MAX_EXPONENT are treated as invalid
MAX_EXPONENT = 12


def parse_amount(value: Any) -> Decimal:
    """
    Parse user-entered amount into a Decimal.

    Accepts numbers and numeric strings (a leading "$" and thousands
    separators are tolerated). Anything non-numeric, NaN, infinite or out
    of range becomes 0 instead of raising.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("$", "")
        if not cleaned:
            return ZERO
        try:
            parsed = Decimal(cleaned)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not parsed.is_finite() or parsed.adjusted() >= MAX_EXPONENT:
        return ZERO
    return parsed


def to_minor_units(amount: Any) -> int:
    """Dollars to cents, rounding half away from zero at the hundredths place"""
    try:
        return int(parse_amount(amount).quantize(CENT, rounding=ROUND_HALF_UP).scaleb(2))
    except InvalidOperation:
        return 0


def to_major_units(cents: int) -> Decimal:
    """Cents to dollars with exactly two decimal places"""
    return Decimal(int(cents)).scaleb(-2).quantize(CENT)


def round_half_up(value: Decimal) -> int:
    """Round a fractional cent amount to a whole cent"""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def monthly_interest_cents(balance_cents: int, annual_rate_percent: Any) -> int:
    """
    One month of simple interest on a cent balance.

    Example:
        $1000.00 at 12% -> 100000 * 12 / 100 / 12 = 1000 cents ($10.00)
    """
    rate = parse_amount(annual_rate_percent)
    if balance_cents <= 0 or rate <= 0:
        return 0
    return round_half_up(Decimal(balance_cents) * rate / Decimal(1200))


def scale_cents(cents: int, multiplier: Any) -> int:
    """Multiply a cent amount by a factor, rounding to the cent"""
    return round_half_up(Decimal(cents) * parse_amount(multiplier))


def format_currency(cents: int) -> str:
    """Display helper: 123456 -> "$1,234.56" """
    sign = "-" if cents < 0 else ""
    return f"{sign}${to_major_units(abs(cents)):,.2f}"
