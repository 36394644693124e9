"""Unit tests for bill list edits"""

from datetime import date
from bill_planner.domain.bills import (
    delete_bill,
    find_bill,
    mark_paid,
    new_bill,
    undo_payment,
    update_amount,
    update_note,
)
from bill_planner.domain.models import AdvancePayment, Frequency


def test_new_bill_defaults():
    bill = new_bill("  Rent  ", 150000, date(2024, 1, 31), Frequency.MONTHLY)

    assert bill.name == "Rent"
    assert bill.id
    assert bill.original_due_day == 31
    assert bill.is_recurring is True
    assert bill.has_balance is False
    assert bill.balance_cents is None
    assert bill.note == ""


def test_new_bill_variable_amount_starts_at_zero():
    bill = new_bill("Electric", 8500, date(2024, 1, 20), Frequency.MONTHLY, amount_varies=True)

    assert bill.amount_cents == 0


def test_new_bill_credit_flag_requires_balance():
    bill = new_bill("Card", 5000, date(2024, 1, 5), is_credit_account=True)
    assert bill.is_credit_account is False

    card = new_bill(
        "Card", 5000, date(2024, 1, 5), has_balance=True, balance_cents=120000, is_credit_account=True
    )
    assert card.is_credit_account is True
    assert card.monthly_payment_cents == 0
    assert card.interest_rate == 0.0


def test_new_bill_ids_are_unique():
    assert new_bill("A", 1, date(2024, 1, 1)).id != new_bill("A", 1, date(2024, 1, 1)).id


def test_mark_paid_defaults_to_bill_amount(make_bill):
    bill = make_bill(amount_cents=8500)

    [paid] = mark_paid([bill], bill.id, "Checking", date(2024, 1, 10))

    assert paid.is_paid is True
    assert paid.paid_amount_cents == 8500
    assert paid.paid_method == "Checking"
    assert paid.paid_date == date(2024, 1, 10)
    assert bill.is_paid is False  # input untouched


def test_mark_paid_in_preview_records_advance(make_bill):
    bill = make_bill(due_date=date(2024, 1, 15))

    [paid] = mark_paid([bill], bill.id, "Card", date(2024, 1, 10), 9900, viewing_month="2024-02")

    assert paid.is_paid is False
    assert paid.paid_months == {
        "2024-02": AdvancePayment(paid_amount_cents=9900, paid_method="Card", paid_date=date(2024, 1, 10))
    }


def test_mark_paid_one_time_in_own_month_is_normal_payment(make_bill):
    bill = make_bill(frequency=Frequency.ONE_TIME, due_date=date(2024, 2, 3))

    [paid] = mark_paid([bill], bill.id, "Cash", date(2024, 1, 10), viewing_month="2024-02")

    assert paid.is_paid is True
    assert paid.paid_months == {}


def test_undo_payment_clears_paid_fields(make_bill):
    bill = make_bill(is_paid=True, paid_amount_cents=100, paid_method="Cash", paid_date=date(2024, 1, 2))

    [undone] = undo_payment([bill], bill.id, viewing_month="2024-01")

    assert undone.is_paid is False
    assert undone.paid_amount_cents is None
    assert undone.paid_method is None
    assert undone.paid_date is None


def test_undo_in_preview_only_drops_that_advance(make_bill):
    advance = AdvancePayment(paid_amount_cents=100, paid_method="Cash", paid_date=date(2024, 1, 2))
    bill = make_bill(
        is_paid=True,
        paid_amount_cents=10000,
        paid_method="Checking",
        paid_months={"2024-02": advance, "2024-03": advance},
    )

    [undone] = undo_payment([bill], bill.id, viewing_month="2024-02")

    assert undone.is_paid is True
    assert list(undone.paid_months) == ["2024-03"]


def test_undo_in_own_month_drops_own_advance(make_bill):
    advance = AdvancePayment(paid_amount_cents=100, paid_method="Cash", paid_date=date(2023, 12, 20))
    bill = make_bill(paid_months={"2024-01": advance})

    [undone] = undo_payment([bill], bill.id, viewing_month="2024-01")

    assert undone.paid_months == {}


def test_edits(make_bill):
    a, b = make_bill(), make_bill()

    bills = update_note([a, b], a.id, "autopay on the 1st")
    bills = update_amount(bills, b.id, 12345)

    assert find_bill(bills, a.id).note == "autopay on the 1st"
    assert find_bill(bills, b.id).amount_cents == 12345
    assert update_amount(bills, b.id, -50)[1].amount_cents == 0
    assert delete_bill(bills, a.id) == [find_bill(bills, b.id)]


def test_missing_id_is_noop(make_bill):
    bills = [make_bill()]

    assert mark_paid(bills, "nope", "Cash", date(2024, 1, 1)) == bills
    assert undo_payment(bills, "nope") == bills
    assert update_note(bills, "nope", "x") == bills
    assert delete_bill(bills, "nope") == bills
    assert find_bill(bills, "nope") is None
