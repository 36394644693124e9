"""Domain models - pure Python dataclasses representing budget entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


class Frequency(str, Enum):
    """How often a bill comes due"""

    ONE_TIME = "one-time"
    MONTHLY = "monthly"


class PayFrequency(str, Enum):
    """Income source pay cadence"""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMIMONTHLY = "semimonthly"
    MONTHLY = "monthly"


class UnpaidDecision(str, Enum):
    """What happens to an unpaid recurring bill at rollover"""

    CARRY_OVER = "carry-over"
    REMOVE = "remove"


class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"


@dataclass
class AdvancePayment:
    """Payment recorded ahead of time for a previewed month"""

    paid_amount_cents: int
    paid_method: str
    paid_date: date


@dataclass
class Bill:
    """Single obligation tracked month to month"""

    id: str
    name: str
    amount_cents: int
    due_date: date
    frequency: Frequency = Frequency.ONE_TIME
    is_paid: bool = False
    paid_amount_cents: Optional[int] = None
    paid_method: Optional[str] = None
    paid_date: Optional[date] = None
    has_balance: bool = False
    balance_cents: Optional[int] = None
    monthly_payment_cents: Optional[int] = None
    interest_rate: Optional[float] = None  # annual, percentage points
    is_credit_account: bool = False
    note: Optional[str] = None
    original_due_day: Optional[int] = None
    paid_months: Dict[str, AdvancePayment] = field(default_factory=dict)

    @property
    def is_recurring(self) -> bool:
        return self.frequency == Frequency.MONTHLY

    @property
    def anchor_day(self) -> int:
        """Day-of-month the bill is due on, independent of short-month clamping"""
        return self.original_due_day or self.due_date.day


@dataclass(frozen=True)
class HistoryItem:
    """Archived snapshot of a bill paid in a closed month"""

    id: str
    name: str
    paid_amount_cents: int
    paid_method: Optional[str]
    paid_date: Optional[date]
    archived_at: datetime
    original_due_date: date
    amount_cents: int
    has_balance: bool = False
    balance_cents: Optional[int] = None
    is_recurring: bool = False


@dataclass
class PayInfo:
    """Income source used to show upcoming paydays"""

    id: str
    name: str
    last_pay_date: date
    frequency: PayFrequency


@dataclass
class BudgetAggregate:
    """Entire persisted budget state"""

    bills: List[Bill]
    paid_history: List[HistoryItem]
    last_reset: datetime
    is_first_time: bool
    theme: Theme
    pay_infos: List[PayInfo]
    active_month: str
    version: int


@dataclass
class PayoffStep:
    """One month of an amortization schedule"""

    month: int
    payment_cents: int
    principal_cents: int
    interest_cents: int
    remaining_balance_cents: int


@dataclass
class PayoffProjection:
    """Month-by-month payoff of a balance at a fixed payment"""

    months_to_payoff: int
    total_interest_paid_cents: int
    total_amount_paid_cents: int
    monthly_breakdown: List[PayoffStep]
    hit_ceiling: bool = False


@dataclass
class PayoffComparison:
    """Baseline payment against +20% and +50% scenarios"""

    current: PayoffProjection
    slightly_more: PayoffProjection
    aggressive: PayoffProjection

    @property
    def months_saved_slightly_more(self) -> int:
        return self.current.months_to_payoff - self.slightly_more.months_to_payoff

    @property
    def months_saved_aggressive(self) -> int:
        return self.current.months_to_payoff - self.aggressive.months_to_payoff


@dataclass
class BudgetSummary:
    """Totals for the bills shown in one month"""

    month: str
    total_due_cents: int
    due_soon_cents: int
    total_paid_cents: int
    unpaid_count: int
    bill_count: int
    is_complete: bool


@dataclass
class RolloverResult:
    """Output of closing the active month"""

    bills: List[Bill]
    paid_history: List[HistoryItem]
    active_month: str
    viewing_month: str
    archived: List[HistoryItem]
    removed_ids: List[str]
    warnings: List[str]
