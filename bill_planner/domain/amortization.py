"""Payoff projections for balance-carrying bills (loans, credit cards)"""

from typing import List, Optional

from bill_planner.domain.models import PayoffComparison, PayoffProjection, PayoffStep
from bill_planner.domain.money import monthly_interest_cents, scale_cents
from bill_planner.utils.date_utils import add_months_to_month

MAX_PAYOFF_MONTHS = 600  # 50 years

SLIGHTLY_MORE_MULTIPLIER = "1.2"
AGGRESSIVE_MULTIPLIER = "1.5"


def _zero_projection() -> PayoffProjection:
    return PayoffProjection(
        months_to_payoff=0,
        total_interest_paid_cents=0,
        total_amount_paid_cents=0,
        monthly_breakdown=[],
    )


def compute_payoff(
    balance_cents: int,
    monthly_payment_cents: int,
    annual_rate_percent: Optional[float] = 0,
    max_months: int = MAX_PAYOFF_MONTHS,
) -> PayoffProjection:
    """
    Amortize a balance month by month at a fixed payment.

    Requirements:
    - Interest each month = remaining * rate / 100 / 12, rounded to the cent
    - Final payment is capped at remaining + interest (balance never negative)
    - Stops at a zero balance or after max_months, whichever comes first

    A payment that never outpaces interest runs into the ceiling; that is a
    normal result flagged with hit_ceiling, not an error.

    Args:
        balance_cents: Outstanding balance
        monthly_payment_cents: Payment made every month
        annual_rate_percent: Annual rate in percentage points (5.9 = 5.9%)
        max_months: Iteration ceiling

    Returns:
        PayoffProjection with per-month breakdown and totals

    Example:
        $1000.00 at 12%, $100/month -> month 1: $10.00 interest,
        $90.00 principal, $910.00 remaining
    """
    if balance_cents <= 0 or monthly_payment_cents <= 0:
        return _zero_projection()

    remaining = balance_cents
    total_interest = 0
    month = 0
    breakdown: List[PayoffStep] = []

    while remaining > 0 and month < max_months:
        month += 1

        interest = monthly_interest_cents(remaining, annual_rate_percent)
        payment = min(monthly_payment_cents, remaining + interest)
        principal = payment - interest

        remaining -= principal
        total_interest += interest

        if remaining <= 0:
            remaining = 0

        breakdown.append(
            PayoffStep(
                month=month,
                payment_cents=payment,
                principal_cents=principal,
                interest_cents=interest,
                remaining_balance_cents=remaining,
            )
        )

    return PayoffProjection(
        months_to_payoff=month,
        total_interest_paid_cents=total_interest,
        total_amount_paid_cents=balance_cents + total_interest,
        monthly_breakdown=breakdown,
        hit_ceiling=remaining > 0,
    )


def compute_payoff_comparison(
    balance_cents: int,
    current_payment_cents: int,
    annual_rate_percent: Optional[float] = 0,
    max_months: int = MAX_PAYOFF_MONTHS,
) -> PayoffComparison:
    """Run the payoff at the current payment, +20% and +50%"""
    return PayoffComparison(
        current=compute_payoff(balance_cents, current_payment_cents, annual_rate_percent, max_months),
        slightly_more=compute_payoff(
            balance_cents,
            scale_cents(current_payment_cents, SLIGHTLY_MORE_MULTIPLIER),
            annual_rate_percent,
            max_months,
        ),
        aggressive=compute_payoff(
            balance_cents,
            scale_cents(current_payment_cents, AGGRESSIVE_MULTIPLIER),
            annual_rate_percent,
            max_months,
        ),
    )


def format_payoff_time(months: int) -> str:
    """14 -> "1 year, 2 months"; 0 -> "Paid off" """
    if months == 0:
        return "Paid off"

    years, rest = divmod(months, 12)
    year_text = f"{years} year{'s' if years != 1 else ''}"
    month_text = f"{rest} month{'s' if rest != 1 else ''}"

    if years == 0:
        return month_text
    if rest == 0:
        return year_text
    return f"{year_text}, {month_text}"


def estimated_payoff_month(start_month: str, months_to_payoff: int) -> str:
    """Month key in which the last payment lands"""
    return add_months_to_month(start_month, months_to_payoff)
