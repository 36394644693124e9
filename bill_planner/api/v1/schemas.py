"""Pydantic schemas for API request/response validation.

Field names go over the wire in camelCase, matching the budget document.
Money is in dollars on the wire and converted to cents before reaching the
service.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field

from bill_planner.domain.amortization import estimated_payoff_month, format_payoff_time
from bill_planner.domain.models import (
    BudgetSummary,
    Frequency,
    PayFrequency,
    PayoffComparison,
    PayoffProjection,
    Theme,
    UnpaidDecision,
)
from bill_planner.domain.money import to_major_units
from bill_planner.domain.navigation import NavAction, NavOutcome, ViewMode
from bill_planner.infrastructure.serialization import (
    BillDocument,
    DocumentModel,
    HistoryItemDocument,
    Money,
    PayInfoDocument,
    Rate,
)


class CapabilitiesSchema(DocumentModel):
    record_payment: bool
    add_bill: bool
    edit_bill: bool
    start_rollover: bool


class StateResponse(DocumentModel):
    """Response for GET /v1/state"""

    active_month: str
    viewing_month: str
    view_mode: ViewMode
    capabilities: CapabilitiesSchema
    active_month_complete: bool
    is_first_time: bool
    theme: Theme
    last_reset: datetime
    has_unsaved_changes: bool
    load_error: Optional[str] = None


class SummarySchema(DocumentModel):
    total_due: Money
    due_soon: Money
    total_paid: Money
    unpaid_count: int
    bill_count: int
    is_complete: bool


class BillListResponse(DocumentModel):
    """Response for GET /v1/bills"""

    month: str
    view_mode: ViewMode
    bills: List[BillDocument]
    summary: SummarySchema


class BillCreateRequest(DocumentModel):
    """Request body for POST /v1/bills"""

    name: str = Field(..., min_length=1)
    amount: Money = Decimal("0")
    due_date: date
    frequency: Frequency = Frequency.ONE_TIME
    amount_varies: bool = False
    has_balance: bool = False
    balance: Optional[Money] = None
    monthly_payment: Optional[Money] = None
    interest_rate: Optional[Rate] = None
    is_credit_account: bool = False
    note: Optional[str] = None


class PaymentRequest(DocumentModel):
    """Request body for POST /v1/bills/{id}/pay"""

    paid_method: str = Field(..., min_length=1)
    paid_amount: Optional[Money] = None


class BillUpdateRequest(DocumentModel):
    """Request body for PATCH /v1/bills/{id}; only the given fields change"""

    note: Optional[str] = None
    amount: Optional[Money] = None


class BillsResponse(DocumentModel):
    bills: List[BillDocument]


class NavigateRequest(DocumentModel):
    action: NavAction


class NavigateResponse(DocumentModel):
    outcome: NavOutcome
    viewing_month: str
    view_mode: ViewMode


class RolloverRequest(DocumentModel):
    """Request body for POST /v1/months/rollover, keyed by bill id"""

    decisions: Dict[str, UnpaidDecision] = {}


class RolloverResponse(DocumentModel):
    active_month: str
    viewing_month: str
    archived: List[HistoryItemDocument]
    removed_ids: List[str]
    warnings: List[str]


class PayoffStepSchema(DocumentModel):
    month: int
    payment: Money
    principal: Money
    interest: Money
    remaining_balance: Money


class PayoffProjectionSchema(DocumentModel):
    months_to_payoff: int
    payoff_time: str
    estimated_payoff_month: str
    total_interest_paid: Money
    total_amount_paid: Money
    hit_ceiling: bool
    monthly_breakdown: List[PayoffStepSchema]


class PayoffComparisonResponse(DocumentModel):
    """Response for the payoff endpoints"""

    current: PayoffProjectionSchema
    slightly_more: PayoffProjectionSchema
    aggressive: PayoffProjectionSchema
    months_saved_slightly_more: int
    months_saved_aggressive: int


class HistoryResponse(DocumentModel):
    """Response for GET /v1/history"""

    month: Optional[str] = None
    items: List[HistoryItemDocument]
    total_paid: Money


class PayInfoRequest(DocumentModel):
    name: str = Field(..., min_length=1)
    last_pay_date: date
    frequency: PayFrequency


class PayInfosResponse(DocumentModel):
    pay_infos: List[PayInfoDocument]


class UpcomingPaySchema(DocumentModel):
    pay_info_id: str
    name: str
    pay_date: date
    days_until: int
    frequency: PayFrequency


class BackupSchema(DocumentModel):
    slot: int
    month: str
    created_at: datetime


class ThemeRequest(DocumentModel):
    theme: Theme


def summary_to_schema(summary: BudgetSummary) -> SummarySchema:
    return SummarySchema(
        total_due=to_major_units(summary.total_due_cents),
        due_soon=to_major_units(summary.due_soon_cents),
        total_paid=to_major_units(summary.total_paid_cents),
        unpaid_count=summary.unpaid_count,
        bill_count=summary.bill_count,
        is_complete=summary.is_complete,
    )


def projection_to_schema(projection: PayoffProjection, start_month: str) -> PayoffProjectionSchema:
    return PayoffProjectionSchema(
        months_to_payoff=projection.months_to_payoff,
        payoff_time=format_payoff_time(projection.months_to_payoff),
        estimated_payoff_month=estimated_payoff_month(start_month, projection.months_to_payoff),
        total_interest_paid=to_major_units(projection.total_interest_paid_cents),
        total_amount_paid=to_major_units(projection.total_amount_paid_cents),
        hit_ceiling=projection.hit_ceiling,
        monthly_breakdown=[
            PayoffStepSchema(
                month=step.month,
                payment=to_major_units(step.payment_cents),
                principal=to_major_units(step.principal_cents),
                interest=to_major_units(step.interest_cents),
                remaining_balance=to_major_units(step.remaining_balance_cents),
            )
            for step in projection.monthly_breakdown
        ],
    )


def comparison_to_schema(comparison: PayoffComparison, start_month: str) -> PayoffComparisonResponse:
    return PayoffComparisonResponse(
        current=projection_to_schema(comparison.current, start_month),
        slightly_more=projection_to_schema(comparison.slightly_more, start_month),
        aggressive=projection_to_schema(comparison.aggressive, start_month),
        months_saved_slightly_more=comparison.months_saved_slightly_more,
        months_saved_aggressive=comparison.months_saved_aggressive,
    )
