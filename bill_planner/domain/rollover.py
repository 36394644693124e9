"""Month rollover - closes the active month and opens the next one"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Union

from bill_planner.domain.models import (
    Bill,
    Frequency,
    HistoryItem,
    RolloverResult,
    UnpaidDecision,
)
from bill_planner.domain.money import format_currency, monthly_interest_cents
from bill_planner.domain.projection import as_of_month
from bill_planner.utils.date_utils import add_months, add_months_to_month, compare_months, month_key_of

UNKNOWN_METHOD = "Unknown"

Decisions = Mapping[str, Union[UnpaidDecision, str]]


def apply_payment_to_balance(balance_cents: int, paid_cents: int, annual_rate_percent: Optional[float]) -> int:
    """
    New balance after one month's payment.

    Requirements:
    - A payment that covers the whole balance clears it with no interest
      charged on that final month
    - Otherwise one month of interest is taken out of the payment first and
      only the remainder reduces principal
    - Unpaid interest is not added to the balance; the balance never goes
      below zero

    Example:
        $1000.00 at 12%, paid $100.00 -> interest $10.00, principal $90.00,
        new balance $910.00
    """
    if paid_cents >= balance_cents:
        return 0

    interest = monthly_interest_cents(balance_cents, annual_rate_percent)
    principal_paid = max(0, paid_cents - interest)
    return max(0, balance_cents - principal_paid)


def _archive(shown: Bill, original: Bill, now: datetime) -> HistoryItem:
    return HistoryItem(
        id=original.id,
        name=original.name,
        paid_amount_cents=_paid_amount(shown),
        paid_method=shown.paid_method or UNKNOWN_METHOD,
        paid_date=shown.paid_date,
        archived_at=now,
        original_due_date=shown.due_date,
        amount_cents=original.amount_cents,
        has_balance=original.has_balance,
        balance_cents=original.balance_cents,
        is_recurring=original.is_recurring,
    )


def _paid_amount(shown: Bill) -> int:
    if not shown.is_paid:
        return 0
    if shown.paid_amount_cents:
        return shown.paid_amount_cents
    return shown.amount_cents


def _decision_for(decisions: Decisions, bill_id: str) -> UnpaidDecision:
    value = decisions.get(bill_id, UnpaidDecision.CARRY_OVER)
    return UnpaidDecision(value)


def _carry_forward(bill: Bill, shown: Bill, new_active_month: str, balance_cents: Optional[int], amount_cents: int) -> Bill:
    """Clear the paid state and move the due date one month on"""
    anchor = bill.anchor_day
    next_due = add_months(shown.due_date, 1, anchor_day=anchor)
    advance = bill.paid_months.get(new_active_month)
    remaining_advances = {
        month: payment
        for month, payment in bill.paid_months.items()
        if compare_months(month, new_active_month) > 0
    }

    return replace(
        bill,
        amount_cents=amount_cents,
        balance_cents=balance_cents,
        due_date=next_due,
        original_due_day=anchor,
        is_paid=advance is not None,
        paid_amount_cents=advance.paid_amount_cents if advance else None,
        paid_method=advance.paid_method if advance else None,
        paid_date=advance.paid_date if advance else None,
        paid_months=remaining_advances,
    )


def rollover_month(
    bills: List[Bill],
    history: List[HistoryItem],
    active_month: str,
    decisions: Optional[Decisions] = None,
    now: Optional[datetime] = None,
) -> RolloverResult:
    """
    Close active_month and produce the state for the following month.

    Pure function of its inputs: nothing is mutated, so a caller that fails
    to persist the result still holds the previous state.

    Steps, per bill due in or before the active month:
    1. Paid bills (including advance payments for this month) are archived
       to history, newest first
    2. One-time bills are dropped
    3. Unpaid bills marked "remove" are dropped; unmapped bills carry over
    4. Balance bills apply the paid amount (0 if unpaid) against the balance
    5. Non-balance bills have their amount reset to 0 for re-entry
    6. Balance bills at zero are dropped unless they are credit accounts
    7. Survivors are marked unpaid and their due date moves one month on,
       anchored to the original day-of-month

    Bills already dated after the active month are passed through untouched.

    Args:
        bills: Current bill list
        history: Current paid history, newest first
        active_month: Month being closed ("YYYY-MM")
        decisions: bill id -> carry-over | remove for unpaid bills
        now: Archive timestamp (default: current local time)

    Returns:
        RolloverResult with new bills, history and month pointers
    """
    decisions = decisions or {}
    now = now or datetime.now()
    new_active_month = add_months_to_month(active_month, 1)

    archived: List[HistoryItem] = []
    next_bills: List[Bill] = []
    removed_ids: List[str] = []
    warnings: List[str] = []

    for bill in bills:
        if compare_months(month_key_of(bill.due_date), active_month) > 0:
            next_bills.append(bill)
            continue

        shown = as_of_month(bill, active_month) or bill
        paid = shown.is_paid
        paid_cents = _paid_amount(shown)

        if paid:
            archived.append(_archive(shown, bill, now))
            if 0 < paid_cents < bill.amount_cents:
                warnings.append(
                    f"{bill.name}: partial payment of {format_currency(paid_cents)} "
                    f"against {format_currency(bill.amount_cents)} due"
                )

        if bill.frequency == Frequency.ONE_TIME:
            removed_ids.append(bill.id)
            continue

        if not paid and _decision_for(decisions, bill.id) == UnpaidDecision.REMOVE:
            removed_ids.append(bill.id)
            continue

        balance = bill.balance_cents
        amount = bill.amount_cents

        if bill.has_balance:
            current_balance = bill.balance_cents or 0
            balance = apply_payment_to_balance(current_balance, paid_cents, bill.interest_rate)

            interest = monthly_interest_cents(current_balance, bill.interest_rate)
            if paid and paid_cents < current_balance and paid_cents < interest:
                warnings.append(
                    f"{bill.name}: payment of {format_currency(paid_cents)} did not cover "
                    f"{format_currency(interest)} interest"
                )

            if balance <= 0 and not bill.is_credit_account:
                removed_ids.append(bill.id)
                continue
        else:
            amount = 0

        next_bills.append(_carry_forward(bill, shown, new_active_month, balance, amount))

    return RolloverResult(
        bills=next_bills,
        paid_history=archived + list(history),
        active_month=new_active_month,
        viewing_month=new_active_month,
        archived=archived,
        removed_ids=removed_ids,
        warnings=warnings,
    )
