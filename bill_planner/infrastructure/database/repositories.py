"""Data access layer for budget snapshots and backups"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from bill_planner.infrastructure.database.models import BudgetBackup, BudgetSnapshot
from bill_planner.infrastructure.serialization import aggregate_from_dict, aggregate_to_dict
from bill_planner.domain.models import BudgetAggregate

SNAPSHOT_ID = 1
PRE_RESTORE_SLOT = 0


class BudgetRepository:
    """Repository for the current budget document"""

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> Optional[BudgetAggregate]:
        """Fetch the saved budget, or None if nothing has been saved yet"""
        snapshot = self.db.get(BudgetSnapshot, SNAPSHOT_ID)
        if snapshot is None:
            return None
        return aggregate_from_dict(snapshot.document)

    def save(self, aggregate: BudgetAggregate) -> BudgetSnapshot:
        """Replace the stored document with the full aggregate"""
        snapshot = self.db.get(BudgetSnapshot, SNAPSHOT_ID)
        if snapshot is None:
            snapshot = BudgetSnapshot(id=SNAPSHOT_ID)
            self.db.add(snapshot)

        snapshot.version = aggregate.version
        snapshot.active_month = aggregate.active_month
        snapshot.document = aggregate_to_dict(aggregate)
        self.db.flush()
        return snapshot


class BackupRepository:
    """Repository for rotating budget backups"""

    def __init__(self, db: Session):
        self.db = db

    def write_slot(self, slot: int, aggregate: BudgetAggregate, created_at: datetime) -> BudgetBackup:
        backup = self.db.get(BudgetBackup, slot)
        if backup is None:
            backup = BudgetBackup(slot=slot)
            self.db.add(backup)

        backup.month = aggregate.active_month
        backup.document = aggregate_to_dict(aggregate)
        backup.created_at = created_at
        self.db.flush()
        return backup

    def write_rotating(self, aggregate: BudgetAggregate, slots: int, created_at: datetime) -> BudgetBackup:
        """Fill the first empty slot, otherwise overwrite the oldest one"""
        existing = {b.slot: b for b in self.list_backups() if b.slot != PRE_RESTORE_SLOT}

        target = next((slot for slot in range(1, slots + 1) if slot not in existing), None)
        if target is None:
            target = min(existing.values(), key=lambda b: (b.created_at, b.slot)).slot

        return self.write_slot(target, aggregate, created_at)

    def get(self, slot: int) -> Optional[BudgetAggregate]:
        backup = self.db.get(BudgetBackup, slot)
        if backup is None:
            return None
        return aggregate_from_dict(backup.document)

    def list_backups(self) -> List[BudgetBackup]:
        return self.db.query(BudgetBackup).order_by(BudgetBackup.slot).all()
