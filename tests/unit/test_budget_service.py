"""Unit tests for the budget service (aggregate owner)"""

import pytest
from datetime import date, datetime
from sqlalchemy.exc import OperationalError
from bill_planner.domain.exceptions import (
    BackupNotFoundError,
    InvalidBudgetDocumentError,
    OperationNotAllowedError,
    RolloverNotAllowedError,
    StorageError,
)
from bill_planner.domain.models import Frequency, PayFrequency, Theme
from bill_planner.domain.navigation import NavAction, NavOutcome, ViewMode
from bill_planner.infrastructure.database.models import BudgetSnapshot
from bill_planner.services.budget_service import BudgetService

NOW = datetime(2024, 1, 10, 9, 30)  # matches the service fixture clock


def _failing_session_factory():
    raise OperationalError("INSERT", {}, Exception("disk I/O error"))


def _add_rent(service: BudgetService, **overrides):
    fields = dict(name="Rent", amount_cents=150000, due_date=date(2024, 1, 1), frequency=Frequency.MONTHLY)
    fields.update(overrides)
    return service.add_bill(**fields)


def test_fresh_start_defaults(service: BudgetService):
    assert service.active_month == "2024-01"
    assert service.viewing_month == "2024-01"
    assert service.view_mode == ViewMode.ACTIVE
    assert service.aggregate.is_first_time is True
    assert service.aggregate.bills == []
    assert service.load_error is None


def test_every_mutation_is_persisted(service: BudgetService, reload_service):
    bill = _add_rent(service)
    service.mark_paid(bill.id, "Checking")

    [saved] = reload_service().aggregate.bills
    assert saved.id == bill.id
    assert saved.is_paid is True
    assert saved.paid_date == NOW.date()


@pytest.mark.parametrize(
    "document",
    [
        ["not", "a", "budget"],
        {"version": "2"},
        {"bills": ["x"]},
        {"bills": [{"id": "1", "name": "Rent", "amount": 10, "dueDate": 5}]},
        {"version": 2, "activeMonth": "2024-1", "bills": []},
    ],
)
def test_corrupt_snapshot_starts_fresh_and_records_error(service: BudgetService, db, reload_service, document):
    db.add(BudgetSnapshot(id=1, version=2, active_month="2024-01", document=document))
    db.commit()

    reloaded = reload_service()

    assert reloaded.aggregate.bills == []
    assert reloaded.aggregate.is_first_time is True
    assert reloaded.active_month == "2024-01"
    assert reloaded.viewing_month == "2024-01"
    assert reloaded.load_error is not None


def test_storage_failure_keeps_change_in_memory(service: BudgetService, reload_service):
    working_factory = service._session_factory
    service._session_factory = _failing_session_factory

    with pytest.raises(StorageError):
        _add_rent(service)

    assert [b.name for b in service.aggregate.bills] == ["Rent"]
    assert service.has_unsaved_changes is True

    service._session_factory = working_factory
    service.save()

    assert service.has_unsaved_changes is False
    assert [b.name for b in reload_service().aggregate.bills] == ["Rent"]


def test_missing_bill_is_noop(service: BudgetService):
    bill = _add_rent(service)

    assert service.mark_paid("gone", "Cash") == [bill]
    assert service.delete_bill("gone") == [bill]
    assert service.undo_payment("gone") == [bill]


def test_variable_bill_needs_amount_before_paying(service: BudgetService):
    bill = _add_rent(service, name="Electric", amount_varies=True)

    with pytest.raises(OperationNotAllowedError):
        service.mark_paid(bill.id, "Checking")

    service.mark_paid(bill.id, "Checking", paid_amount_cents=9120)
    assert service.bills_for_month()[0].paid_amount_cents == 9120


def test_past_month_is_read_only(service: BudgetService):
    bill = _add_rent(service)
    service.navigate(NavAction.PREVIOUS)

    assert service.view_mode == ViewMode.PAST
    with pytest.raises(OperationNotAllowedError):
        service.mark_paid(bill.id, "Cash")
    with pytest.raises(OperationNotAllowedError):
        _add_rent(service)


def test_preview_payment_is_an_advance(service: BudgetService):
    bill = _add_rent(service)
    result = service.navigate(NavAction.NEXT)

    assert result.outcome == NavOutcome.MOVED
    assert service.view_mode == ViewMode.PREVIEW

    service.mark_paid(bill.id, "Checking")

    assert service.bills_for_month("2024-02")[0].is_paid is True
    assert service.bills_for_month("2024-01")[0].is_paid is False
    with pytest.raises(OperationNotAllowedError):
        service.delete_bill(bill.id)

    service.undo_payment(bill.id)
    assert service.bills_for_month("2024-02")[0].is_paid is False


def test_next_on_complete_month_offers_rollover(service: BudgetService):
    bill = _add_rent(service)
    service.mark_paid(bill.id, "Checking")

    result = service.navigate(NavAction.NEXT)

    assert result.outcome == NavOutcome.ROLLOVER_READY
    assert service.viewing_month == "2024-01"


def test_rollover_requires_complete_active_month(service: BudgetService):
    _add_rent(service)

    with pytest.raises(RolloverNotAllowedError):
        service.start_new_month()


def test_rollover_only_from_active_view(service: BudgetService):
    bill = _add_rent(service)
    service.mark_paid(bill.id, "Checking")
    service.navigate(NavAction.PREVIOUS)

    with pytest.raises(RolloverNotAllowedError):
        service.start_new_month()


def test_rollover_persists_and_backs_up(service: BudgetService, reload_service):
    rent = _add_rent(service)
    concert = _add_rent(
        service, name="Concert", amount_cents=8000, due_date=date(2024, 1, 20), frequency=Frequency.ONE_TIME
    )
    service.mark_paid(rent.id, "Checking")
    service.mark_paid(concert.id, "Card")

    result = service.start_new_month()

    assert result.active_month == "2024-02"
    assert service.viewing_month == "2024-02"
    assert service.view_mode == ViewMode.ACTIVE
    assert [h.name for h in service.history("2024-01")] == ["Rent", "Concert"]
    assert service.aggregate.last_reset == NOW

    reloaded = reload_service()
    assert reloaded.active_month == "2024-02"
    assert [b.name for b in reloaded.aggregate.bills] == ["Rent"]

    [backup] = service.list_backups()
    assert backup.slot == 1
    assert backup.month == "2024-01"


def test_restore_backup_keeps_pre_restore_copy(service: BudgetService):
    rent = _add_rent(service)
    service.mark_paid(rent.id, "Checking")
    service.start_new_month()

    restored = service.restore_backup(1)

    assert restored.active_month == "2024-01"
    assert service.viewing_month == "2024-01"
    assert service.bills_for_month()[0].is_paid is True
    assert {b.slot for b in service.list_backups()} == {0, 1}

    service.restore_backup(0)
    assert service.active_month == "2024-02"


def test_restore_missing_backup(service: BudgetService):
    with pytest.raises(BackupNotFoundError):
        service.restore_backup(2)


def test_export_import_round_trip(service: BudgetService):
    _add_rent(service, note="autopay")
    exported = service.export_document()

    service.reset()
    assert service.aggregate.bills == []

    service.import_document(exported)
    assert [b.note for b in service.aggregate.bills] == ["autopay"]


def test_bad_import_leaves_state_untouched(service: BudgetService):
    _add_rent(service)

    with pytest.raises(InvalidBudgetDocumentError):
        service.import_document("{broken")

    assert len(service.aggregate.bills) == 1


def test_bill_payoff(service: BudgetService):
    loan = _add_rent(
        service,
        name="Car",
        amount_cents=30000,
        has_balance=True,
        balance_cents=100000,
        monthly_payment_cents=10000,
        interest_rate=12,
    )

    comparison = service.bill_payoff(loan.id)

    assert comparison.current.monthly_breakdown[0].remaining_balance_cents == 91000
    assert service.bill_payoff(_add_rent(service).id) is None


def test_pay_infos(service: BudgetService):
    info = service.add_pay_info(" Day Job ", date(2024, 1, 5), PayFrequency.WEEKLY)

    assert info.name == "Day Job"
    assert [p.pay_date for p in service.upcoming_pays()][:2] == [date(2024, 1, 12), date(2024, 1, 19)]

    assert service.remove_pay_info(info.id) == []
    assert service.upcoming_pays() == []


def test_setup_theme_and_reset(service: BudgetService, reload_service):
    service.complete_setup()
    service.set_theme(Theme.LIGHT)
    assert reload_service().aggregate.is_first_time is False

    fresh = service.reset()

    assert fresh.is_first_time is True
    assert fresh.theme == Theme.LIGHT
    assert reload_service().aggregate.theme == Theme.LIGHT


def test_summary_uses_clock(service: BudgetService):
    _add_rent(service, name="Phone", amount_cents=6000, due_date=date(2024, 1, 20))

    summary = service.summary()

    assert summary.due_soon_cents == 6000
    assert summary.month == "2024-01"
