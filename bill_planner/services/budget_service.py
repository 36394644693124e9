"""Budget controller - owns the in-memory aggregate and persists every change.

All operations run against one BudgetAggregate held by the service. A
mutation builds a new aggregate with the pure domain functions, swaps it in,
then writes the full state through the repository. If the write fails the
new aggregate stays in memory (has_unsaved_changes) and StorageError is
raised so the caller can offer a retry via save().
"""

import logging
import threading
import time
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from bill_planner.config import Settings, settings as default_settings
from bill_planner.domain import bills as bill_ops
from bill_planner.domain.amortization import compute_payoff_comparison
from bill_planner.domain.exceptions import (
    BackupNotFoundError,
    InvalidBudgetDocumentError,
    OperationNotAllowedError,
    RolloverNotAllowedError,
    StorageError,
)
from bill_planner.domain.models import (
    Bill,
    BudgetAggregate,
    BudgetSummary,
    Frequency,
    HistoryItem,
    PayFrequency,
    PayInfo,
    PayoffComparison,
    RolloverResult,
    Theme,
    UnpaidDecision,
)
from bill_planner.domain.navigation import (
    Capabilities,
    NavAction,
    Navigation,
    NavOutcome,
    ViewMode,
    capabilities_for,
    navigate,
    view_mode,
)
from bill_planner.domain.pay_schedule import UpcomingPay, upcoming_pays
from bill_planner.domain.projection import bills_for_month, history_for_month, is_month_complete, summarize_month
from bill_planner.domain.rollover import rollover_month
from bill_planner.infrastructure.database.models import BudgetBackup
from bill_planner.infrastructure.database.repositories import PRE_RESTORE_SLOT, BackupRepository, BudgetRepository
from bill_planner.infrastructure.observability.logging import log_rollover
from bill_planner.infrastructure.observability.metrics import (
    payment_counter,
    payoff_ceiling_counter,
    record_rollover,
    storage_failure_counter,
)
from bill_planner.infrastructure.serialization import CURRENT_VERSION, dumps_aggregate, loads_aggregate
from bill_planner.utils.date_utils import current_month_key

logger = logging.getLogger(__name__)


def default_aggregate(now: datetime, theme: str = "dark") -> BudgetAggregate:
    """Fresh budget: no bills, first-run wizard pending, current month active"""
    return BudgetAggregate(
        bills=[],
        paid_history=[],
        last_reset=now,
        is_first_time=True,
        theme=Theme(theme),
        pay_infos=[],
        active_month=current_month_key(now.date()),
        version=CURRENT_VERSION,
    )


class BudgetService:
    """Single owner of the budget aggregate for a session"""

    def __init__(
        self,
        session_factory: Callable,
        clock: Callable[[], datetime] = datetime.now,
        config: Optional[Settings] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock
        self._settings = config or default_settings
        self._lock = threading.RLock()
        self._aggregate = default_aggregate(clock(), self._settings.default_theme)
        self.viewing_month = self._aggregate.active_month
        self.has_unsaved_changes = False
        self.load_error: Optional[str] = None

    # ------------------------------------------------------------------
    # State

    @property
    def aggregate(self) -> BudgetAggregate:
        return self._aggregate

    @property
    def active_month(self) -> str:
        return self._aggregate.active_month

    @property
    def view_mode(self) -> ViewMode:
        return view_mode(self.viewing_month, self.active_month)

    @property
    def capabilities(self) -> Capabilities:
        return capabilities_for(self.viewing_month, self.active_month)

    def today(self) -> date:
        return self._clock().date()

    # ------------------------------------------------------------------
    # Persistence

    def load(self) -> BudgetAggregate:
        """Load saved state, falling back to a fresh budget when absent or unreadable"""
        with self._lock:
            aggregate = None
            self.load_error = None
            try:
                with self._session_factory() as db:
                    aggregate = BudgetRepository(db).load()
            except (SQLAlchemyError, InvalidBudgetDocumentError) as e:
                storage_failure_counter.labels(operation="load").inc()
                logger.error("Failed to load budget data", extra={"error": str(e)})
                self.load_error = "Saved budget data could not be loaded; starting fresh"

            if aggregate is None:
                logger.info("No saved budget found, starting fresh")
                aggregate = default_aggregate(self._clock(), self._settings.default_theme)

            self._aggregate = aggregate
            self.viewing_month = aggregate.active_month
            self.has_unsaved_changes = False
            return aggregate

    def save(self) -> None:
        """Write the in-memory aggregate (used to retry after a failed save)"""
        with self._lock:
            try:
                with self._session_factory() as db:
                    BudgetRepository(db).save(self._aggregate)
                    db.commit()
            except SQLAlchemyError as e:
                self.has_unsaved_changes = True
                storage_failure_counter.labels(operation="save").inc()
                logger.error("Failed to save budget data", extra={"error": str(e)})
                raise StorageError("Could not save budget data") from e
            self.has_unsaved_changes = False

    def _commit(self, aggregate: BudgetAggregate, viewing_month: Optional[str] = None) -> None:
        self._aggregate = aggregate
        if viewing_month is not None:
            self.viewing_month = viewing_month
        self.has_unsaved_changes = True
        self.save()

    def _set_bills(self, new_bills: List[Bill]) -> List[Bill]:
        self._commit(replace(self._aggregate, bills=new_bills))
        return new_bills

    def _require(self, allowed: bool, action: str) -> None:
        if not allowed:
            raise OperationNotAllowedError(f"Cannot {action} while viewing a {self.view_mode.value} month")

    def _find(self, bill_id: str) -> Optional[Bill]:
        bill = bill_ops.find_bill(self._aggregate.bills, bill_id)
        if bill is None:
            logger.debug("Bill not found, ignoring", extra={"bill_id": bill_id})
        return bill

    # ------------------------------------------------------------------
    # Read-only projections

    def bills_for_month(self, month: Optional[str] = None) -> List[Bill]:
        return bills_for_month(self._aggregate.bills, month or self.viewing_month)

    def summary(self, month: Optional[str] = None) -> BudgetSummary:
        return summarize_month(
            self._aggregate.bills,
            month or self.viewing_month,
            today=self.today(),
            due_soon_days=self._settings.due_soon_days,
        )

    def is_active_month_complete(self) -> bool:
        return is_month_complete(self._aggregate.bills, self.active_month)

    def history(self, month: Optional[str] = None) -> List[HistoryItem]:
        if month is None:
            return list(self._aggregate.paid_history)
        return history_for_month(self._aggregate.paid_history, month)

    def payoff_comparison(
        self,
        balance_cents: int,
        monthly_payment_cents: int,
        annual_rate_percent: Optional[float],
    ) -> PayoffComparison:
        comparison = compute_payoff_comparison(
            balance_cents,
            monthly_payment_cents,
            annual_rate_percent,
            max_months=self._settings.payoff_max_months,
        )
        if comparison.current.hit_ceiling:
            payoff_ceiling_counter.inc()
            logger.warning(
                "Payoff projection reached month ceiling",
                extra={
                    "balance_cents": balance_cents,
                    "monthly_payment_cents": monthly_payment_cents,
                    "max_months": self._settings.payoff_max_months,
                },
            )
        return comparison

    def bill_payoff(self, bill_id: str) -> Optional[PayoffComparison]:
        """Payoff comparison for a balance-carrying bill, None if it has no balance"""
        bill = self._find(bill_id)
        if bill is None or not bill.has_balance:
            return None
        payment = bill.monthly_payment_cents or bill.amount_cents
        return self.payoff_comparison(bill.balance_cents or 0, payment, bill.interest_rate)

    # ------------------------------------------------------------------
    # Bill edits

    def add_bill(
        self,
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
        with self._lock:
            self._require(self.capabilities.add_bill, "add bills")
            bill = bill_ops.new_bill(
                name=name,
                amount_cents=amount_cents,
                due_date=due_date,
                frequency=frequency,
                amount_varies=amount_varies,
                has_balance=has_balance,
                balance_cents=balance_cents,
                monthly_payment_cents=monthly_payment_cents,
                interest_rate=interest_rate,
                is_credit_account=is_credit_account,
                note=note,
            )
            self._set_bills(self._aggregate.bills + [bill])
            logger.info("Bill added", extra={"bill_id": bill.id, "frequency": bill.frequency.value})
            return bill

    def mark_paid(self, bill_id: str, paid_method: str, paid_amount_cents: Optional[int] = None) -> List[Bill]:
        with self._lock:
            self._require(self.capabilities.record_payment, "record payments")
            bill = self._find(bill_id)
            if bill is None:
                return self._aggregate.bills

            if paid_amount_cents is None and bill.amount_cents <= 0 and not bill.has_balance:
                raise OperationNotAllowedError(f"Enter this month's amount for {bill.name} before paying it")

            advance = bill_ops.is_advance_for(bill, self.viewing_month)
            new_bills = bill_ops.mark_paid(
                self._aggregate.bills,
                bill_id,
                paid_method=paid_method,
                paid_on=self.today(),
                paid_amount_cents=paid_amount_cents,
                viewing_month=self.viewing_month,
            )
            payment_counter.labels(kind="advance" if advance else "current").inc()
            return self._set_bills(new_bills)

    def undo_payment(self, bill_id: str) -> List[Bill]:
        with self._lock:
            self._require(self.capabilities.record_payment, "undo payments")
            if self._find(bill_id) is None:
                return self._aggregate.bills
            payment_counter.labels(kind="undo").inc()
            return self._set_bills(bill_ops.undo_payment(self._aggregate.bills, bill_id, self.viewing_month))

    def update_note(self, bill_id: str, note: str) -> List[Bill]:
        with self._lock:
            self._require(self.capabilities.edit_bill, "edit bills")
            if self._find(bill_id) is None:
                return self._aggregate.bills
            return self._set_bills(bill_ops.update_note(self._aggregate.bills, bill_id, note))

    def update_amount(self, bill_id: str, amount_cents: int) -> List[Bill]:
        with self._lock:
            self._require(self.capabilities.edit_bill, "edit bills")
            if self._find(bill_id) is None:
                return self._aggregate.bills
            return self._set_bills(bill_ops.update_amount(self._aggregate.bills, bill_id, amount_cents))

    def delete_bill(self, bill_id: str) -> List[Bill]:
        with self._lock:
            self._require(self.capabilities.edit_bill, "delete bills")
            if self._find(bill_id) is None:
                return self._aggregate.bills
            logger.info("Bill deleted", extra={"bill_id": bill_id})
            return self._set_bills(bill_ops.delete_bill(self._aggregate.bills, bill_id))

    # ------------------------------------------------------------------
    # Month navigation and rollover

    def navigate(self, action: NavAction) -> Navigation:
        with self._lock:
            result = navigate(
                self.viewing_month,
                self.active_month,
                NavAction(action),
                active_month_complete=self.is_active_month_complete(),
                window_months=self._settings.navigation_window_months,
            )
            if result.outcome == NavOutcome.MOVED:
                self.viewing_month = result.viewing_month
            return result

    def start_new_month(self, decisions: Optional[Mapping[str, UnpaidDecision]] = None) -> RolloverResult:
        """
        Close the active month.

        Only allowed from the active view and once every bill due in the
        active month is paid. A backup of the current state is written first.
        """
        with self._lock:
            if not self.capabilities.start_rollover:
                raise RolloverNotAllowedError("A new month can only be started from the active month")
            if not self.is_active_month_complete():
                raise RolloverNotAllowedError(f"Every bill in {self.active_month} must be paid first")

            start_time = time.time()
            now = self._clock()
            self._write_backup(now)

            result = rollover_month(
                self._aggregate.bills,
                self._aggregate.paid_history,
                self.active_month,
                decisions=decisions,
                now=now,
            )
            closed_month = self.active_month
            self._commit(
                replace(
                    self._aggregate,
                    bills=result.bills,
                    paid_history=result.paid_history,
                    active_month=result.active_month,
                    last_reset=now,
                ),
                viewing_month=result.viewing_month,
            )

            duration_ms = (time.time() - start_time) * 1000
            record_rollover(len(result.archived), len(result.removed_ids), len(result.warnings))
            log_rollover(
                closed_month,
                result.active_month,
                len(result.archived),
                result.removed_ids,
                result.warnings,
                duration_ms,
            )
            return result

    # ------------------------------------------------------------------
    # Income sources

    def add_pay_info(self, name: str, last_pay_date: date, frequency: PayFrequency) -> PayInfo:
        with self._lock:
            info = PayInfo(
                id=str(uuid.uuid4()),
                name=name.strip(),
                last_pay_date=last_pay_date,
                frequency=PayFrequency(frequency),
            )
            self._commit(replace(self._aggregate, pay_infos=self._aggregate.pay_infos + [info]))
            return info

    def remove_pay_info(self, pay_info_id: str) -> List[PayInfo]:
        with self._lock:
            remaining = [p for p in self._aggregate.pay_infos if p.id != pay_info_id]
            if len(remaining) != len(self._aggregate.pay_infos):
                self._commit(replace(self._aggregate, pay_infos=remaining))
            return self._aggregate.pay_infos

    def upcoming_pays(self) -> List[UpcomingPay]:
        return upcoming_pays(
            self._aggregate.pay_infos,
            today=self.today(),
            max_iterations=self._settings.pay_schedule_max_iterations,
        )

    # ------------------------------------------------------------------
    # Settings, setup, import/export, backups

    def complete_setup(self) -> BudgetAggregate:
        with self._lock:
            self._commit(replace(self._aggregate, is_first_time=False))
            return self._aggregate

    def set_theme(self, theme: Theme) -> BudgetAggregate:
        with self._lock:
            self._commit(replace(self._aggregate, theme=Theme(theme)))
            return self._aggregate

    def reset(self) -> BudgetAggregate:
        """Discard everything and start over with the first-run wizard"""
        with self._lock:
            fresh = default_aggregate(self._clock(), self._aggregate.theme.value)
            self._commit(fresh, viewing_month=fresh.active_month)
            logger.info("Budget reset")
            return fresh

    def export_document(self) -> str:
        return dumps_aggregate(self._aggregate)

    def import_document(self, text: str) -> BudgetAggregate:
        """Replace the budget with an exported document"""
        with self._lock:
            imported = loads_aggregate(text, today=self.today())
            self._commit(imported, viewing_month=imported.active_month)
            logger.info(
                "Budget imported",
                extra={"bill_count": len(imported.bills), "active_month": imported.active_month},
            )
            return imported

    def list_backups(self) -> List[BudgetBackup]:
        try:
            with self._session_factory() as db:
                backups = BackupRepository(db).list_backups()
                db.expunge_all()
                return backups
        except SQLAlchemyError as e:
            storage_failure_counter.labels(operation="backup").inc()
            raise StorageError("Could not read backups") from e

    def restore_backup(self, slot: int) -> BudgetAggregate:
        """Load a backup slot; the state being replaced is kept in the pre-restore slot"""
        with self._lock:
            try:
                with self._session_factory() as db:
                    backups = BackupRepository(db)
                    restored = backups.get(slot)
                    if restored is None:
                        raise BackupNotFoundError(f"Backup slot {slot} is empty")
                    backups.write_slot(PRE_RESTORE_SLOT, self._aggregate, self._clock())
                    db.commit()
            except SQLAlchemyError as e:
                storage_failure_counter.labels(operation="backup").inc()
                raise StorageError("Could not restore backup") from e

            self._commit(restored, viewing_month=restored.active_month)
            logger.info("Backup restored", extra={"slot": slot, "active_month": restored.active_month})
            return restored

    def _write_backup(self, now: datetime) -> None:
        """Best-effort copy of the state about to be rolled over"""
        try:
            with self._session_factory() as db:
                BackupRepository(db).write_rotating(self._aggregate, self._settings.backup_slots, now)
                db.commit()
        except SQLAlchemyError as e:
            storage_failure_counter.labels(operation="backup").inc()
            logger.error("Pre-rollover backup failed", extra={"error": str(e)})
