"""Which bills are due in a month, and the month's totals"""

from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional

from bill_planner.domain.models import Bill, BudgetSummary, HistoryItem
from bill_planner.utils.date_utils import compare_months, date_in_month, is_within_days, month_key_of


def _project(bill: Bill, target_month: str) -> Bill:
    """Show a recurring bill in a later month it has not been rolled into yet"""
    advance = bill.paid_months.get(target_month)
    return replace(
        bill,
        due_date=date_in_month(target_month, bill.anchor_day),
        is_paid=advance is not None,
        paid_amount_cents=advance.paid_amount_cents if advance else None,
        paid_method=advance.paid_method if advance else None,
        paid_date=advance.paid_date if advance else None,
    )


def _with_advance(bill: Bill, target_month: str) -> Bill:
    advance = bill.paid_months.get(target_month)
    if advance is None or bill.is_paid:
        return bill
    return replace(
        bill,
        is_paid=True,
        paid_amount_cents=advance.paid_amount_cents,
        paid_method=advance.paid_method,
        paid_date=advance.paid_date,
    )


def as_of_month(bill: Bill, target_month: str) -> Optional[Bill]:
    """The bill as it appears in target_month, or None if it is not due then"""
    order = compare_months(month_key_of(bill.due_date), target_month)
    if order == 0:
        return _with_advance(bill, target_month)
    if order < 0 and bill.is_recurring:
        return _project(bill, target_month)
    return None


def bills_for_month(bills: Iterable[Bill], target_month: str) -> List[Bill]:
    """
    Bills due in target_month, ordered by due date.

    Requirements:
    - Bills whose due date falls in the month are included as-is
    - Recurring bills from earlier months are projected forward, keeping
      their anchor day and clamping it to the month length (same result as
      rolling the bill over month by month)
    - One-time bills never appear outside their own month
    """
    selected = [shown for shown in (as_of_month(b, target_month) for b in bills) if shown is not None]
    return sorted(selected, key=lambda b: (b.due_date, b.name))


def is_month_complete(bills: Iterable[Bill], month: str) -> bool:
    """A month is complete when it has bills and every one is paid"""
    month_bills = bills_for_month(bills, month)
    return len(month_bills) > 0 and all(b.is_paid for b in month_bills)


def visible_bills(month_bills: Iterable[Bill]) -> List[Bill]:
    """Hide paid-off credit accounts that have nothing due"""
    return [
        b
        for b in month_bills
        if not (
            b.is_credit_account
            and b.has_balance
            and (b.balance_cents or 0) <= 0
            and b.amount_cents <= 0
        )
    ]


def summarize_month(
    bills: Iterable[Bill],
    month: str,
    today: Optional[date] = None,
    due_soon_days: int = 14,
) -> BudgetSummary:
    """Totals for the dashboard header of one month"""
    month_bills = bills_for_month(bills, month)
    unpaid = [b for b in month_bills if not b.is_paid]
    paid = [b for b in month_bills if b.is_paid]

    return BudgetSummary(
        month=month,
        total_due_cents=sum(b.amount_cents for b in unpaid),
        due_soon_cents=sum(
            b.amount_cents for b in unpaid if is_within_days(b.due_date, due_soon_days, today)
        ),
        total_paid_cents=sum(
            b.paid_amount_cents if b.paid_amount_cents else b.amount_cents for b in paid
        ),
        unpaid_count=len(visible_bills(unpaid)),
        bill_count=len(month_bills),
        is_complete=len(month_bills) > 0 and not unpaid,
    )


def history_for_month(history: Iterable[HistoryItem], month: str) -> List[HistoryItem]:
    """Archived payments for bills originally due in the given month"""
    return [h for h in history if month_key_of(h.original_due_date) == month]
