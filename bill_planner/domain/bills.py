"""Pure edits to the bill list.

Every function returns a new list. An id that is no longer present leaves
the list unchanged; UI state can lag a tick behind the aggregate, so a stale
id is not an error.
"""

import uuid
from dataclasses import replace
from datetime import date
from typing import Callable, List, Optional

from bill_planner.domain.models import AdvancePayment, Bill, Frequency
from bill_planner.utils.date_utils import compare_months, month_key_of


def new_bill(
    name: str,
    amount_cents: int,
    due_date: date,
    frequency: Frequency = Frequency.ONE_TIME,
    amount_varies: bool = False,
    has_balance: bool = False,
    balance_cents: Optional[int] = None,
    monthly_payment_cents: Optional[int] = None,
    interest_rate: Optional[float] = None,
    is_credit_account: bool = False,
    note: Optional[str] = None,
) -> Bill:
    """Build a bill the way the add-bill form does"""
    return Bill(
        id=str(uuid.uuid4()),
        name=name.strip(),
        amount_cents=0 if amount_varies else amount_cents,
        due_date=due_date,
        frequency=frequency,
        has_balance=has_balance,
        balance_cents=(balance_cents or 0) if has_balance else None,
        monthly_payment_cents=(monthly_payment_cents or 0) if has_balance else None,
        interest_rate=(interest_rate or 0.0) if has_balance else None,
        is_credit_account=has_balance and is_credit_account,
        note=note or "",
        original_due_day=due_date.day,
    )


def find_bill(bills: List[Bill], bill_id: str) -> Optional[Bill]:
    return next((b for b in bills if b.id == bill_id), None)


def _update(bills: List[Bill], bill_id: str, change: Callable[[Bill], Bill]) -> List[Bill]:
    return [change(b) if b.id == bill_id else b for b in bills]


def is_advance_for(bill: Bill, viewing_month: Optional[str]) -> bool:
    """True when a payment made while viewing this month belongs in paid_months"""
    if viewing_month is None or not bill.is_recurring:
        return False
    return compare_months(viewing_month, month_key_of(bill.due_date)) > 0


def mark_paid(
    bills: List[Bill],
    bill_id: str,
    paid_method: str,
    paid_on: date,
    paid_amount_cents: Optional[int] = None,
    viewing_month: Optional[str] = None,
) -> List[Bill]:
    """
    Record a payment.

    A recurring bill paid while previewing a later month gets an advance
    payment for that month; its current-month paid state is left alone.
    """

    def pay(bill: Bill) -> Bill:
        amount = bill.amount_cents if paid_amount_cents is None else paid_amount_cents
        if is_advance_for(bill, viewing_month):
            paid_months = dict(bill.paid_months)
            paid_months[viewing_month] = AdvancePayment(
                paid_amount_cents=amount,
                paid_method=paid_method,
                paid_date=paid_on,
            )
            return replace(bill, paid_months=paid_months)

        return replace(
            bill,
            is_paid=True,
            paid_amount_cents=amount,
            paid_method=paid_method,
            paid_date=paid_on,
        )

    return _update(bills, bill_id, pay)


def undo_payment(bills: List[Bill], bill_id: str, viewing_month: Optional[str] = None) -> List[Bill]:
    """Toggle a bill back to unpaid (or drop the advance payment for a previewed month)"""

    def unpay(bill: Bill) -> Bill:
        if is_advance_for(bill, viewing_month):
            paid_months = {k: v for k, v in bill.paid_months.items() if k != viewing_month}
            return replace(bill, paid_months=paid_months)

        month = month_key_of(bill.due_date)
        return replace(
            bill,
            is_paid=False,
            paid_amount_cents=None,
            paid_method=None,
            paid_date=None,
            paid_months={k: v for k, v in bill.paid_months.items() if k != month},
        )

    return _update(bills, bill_id, unpay)


def update_note(bills: List[Bill], bill_id: str, note: str) -> List[Bill]:
    return _update(bills, bill_id, lambda b: replace(b, note=note))


def update_amount(bills: List[Bill], bill_id: str, amount_cents: int) -> List[Bill]:
    return _update(bills, bill_id, lambda b: replace(b, amount_cents=max(0, amount_cents)))


def delete_bill(bills: List[Bill], bill_id: str) -> List[Bill]:
    return [b for b in bills if b.id != bill_id]
