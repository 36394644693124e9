"""Unit tests for snapshot and backup persistence"""

from datetime import datetime
from sqlalchemy.orm import Session
from bill_planner.infrastructure.database.repositories import (
    PRE_RESTORE_SLOT,
    BackupRepository,
    BudgetRepository,
)
from bill_planner.services.budget_service import default_aggregate

NOW = datetime(2024, 1, 10, 9, 30)


def test_load_returns_none_when_nothing_saved(db: Session):
    assert BudgetRepository(db).load() is None


def test_save_then_load(db: Session, sample_bills):
    aggregate = default_aggregate(NOW)
    aggregate.bills = sample_bills
    aggregate.is_first_time = False

    BudgetRepository(db).save(aggregate)
    db.commit()

    loaded = BudgetRepository(db).load()
    assert loaded == aggregate


def test_save_overwrites_single_row(db: Session, make_bill):
    repo = BudgetRepository(db)
    aggregate = default_aggregate(NOW)

    repo.save(aggregate)
    aggregate.bills = [make_bill(name="Rent")]
    snapshot = repo.save(aggregate)
    db.commit()

    assert snapshot.id == 1
    assert snapshot.active_month == "2024-01"
    assert [b.name for b in repo.load().bills] == ["Rent"]


def test_rotating_backups_fill_then_overwrite_oldest(db: Session):
    repo = BackupRepository(db)
    january = default_aggregate(NOW)
    february = default_aggregate(datetime(2024, 2, 1))
    march = default_aggregate(datetime(2024, 3, 1))

    first = repo.write_rotating(january, 2, datetime(2024, 1, 31))
    second = repo.write_rotating(february, 2, datetime(2024, 2, 29))
    third = repo.write_rotating(march, 2, datetime(2024, 3, 31))
    db.commit()

    assert (first.slot, second.slot, third.slot) == (1, 2, 1)
    assert [(b.slot, b.month) for b in repo.list_backups()] == [(1, "2024-03"), (2, "2024-02")]
    assert repo.get(1).active_month == "2024-03"


def test_pre_restore_slot_not_part_of_rotation(db: Session):
    repo = BackupRepository(db)
    repo.write_slot(PRE_RESTORE_SLOT, default_aggregate(NOW), datetime(2020, 1, 1))

    backup = repo.write_rotating(default_aggregate(NOW), 2, NOW)

    assert backup.slot == 1
    assert repo.get(PRE_RESTORE_SLOT) is not None


def test_missing_slot(db: Session):
    assert BackupRepository(db).get(2) is None
