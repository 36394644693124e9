"""Bill endpoints - list a month, add, pay, undo, edit and delete bills"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from bill_planner.api.dependencies import get_budget_service
from bill_planner.api.v1.schemas import (
    BillCreateRequest,
    BillDocument,
    BillListResponse,
    BillsResponse,
    BillUpdateRequest,
    PaymentRequest,
    summary_to_schema,
)
from bill_planner.domain.money import to_minor_units
from bill_planner.domain.navigation import view_mode
from bill_planner.infrastructure.serialization import bill_to_document
from bill_planner.services.budget_service import BudgetService

router = APIRouter()


def _bills_response(service: BudgetService) -> BillsResponse:
    return BillsResponse(bills=[bill_to_document(b) for b in service.aggregate.bills])


def _cents(value) -> Optional[int]:
    return None if value is None else to_minor_units(value)


@router.get("/bills", response_model=BillListResponse)
def list_bills(
    month: Optional[str] = Query(None, description="Month key YYYY-MM, defaults to the viewing month"),
    service: BudgetService = Depends(get_budget_service),
):
    """
    Bills shown for a month, with recurring bills projected forward.

    Returns:
        Bills sorted by due date plus the month's totals
    """
    target = month or service.viewing_month
    bills = service.bills_for_month(target)
    return BillListResponse(
        month=target,
        view_mode=view_mode(target, service.active_month),
        bills=[bill_to_document(b) for b in bills],
        summary=summary_to_schema(service.summary(target)),
    )


@router.post("/bills", response_model=BillDocument, status_code=201)
def add_bill(request_body: BillCreateRequest, service: BudgetService = Depends(get_budget_service)):
    bill = service.add_bill(
        name=request_body.name,
        amount_cents=to_minor_units(request_body.amount),
        due_date=request_body.due_date,
        frequency=request_body.frequency,
        amount_varies=request_body.amount_varies,
        has_balance=request_body.has_balance,
        balance_cents=_cents(request_body.balance),
        monthly_payment_cents=_cents(request_body.monthly_payment),
        interest_rate=request_body.interest_rate,
        is_credit_account=request_body.is_credit_account,
        note=request_body.note,
    )
    return bill_to_document(bill)


@router.post("/bills/{bill_id}/pay", response_model=BillsResponse)
def pay_bill(bill_id: str, request_body: PaymentRequest, service: BudgetService = Depends(get_budget_service)):
    """
    Record a payment for the viewing month.

    While previewing a later month, recurring bills get an advance payment
    for that month instead of changing the current month's state.
    """
    service.mark_paid(bill_id, request_body.paid_method, _cents(request_body.paid_amount))
    return _bills_response(service)


@router.post("/bills/{bill_id}/undo", response_model=BillsResponse)
def undo_payment(bill_id: str, service: BudgetService = Depends(get_budget_service)):
    service.undo_payment(bill_id)
    return _bills_response(service)


@router.patch("/bills/{bill_id}", response_model=BillsResponse)
def update_bill(bill_id: str, request_body: BillUpdateRequest, service: BudgetService = Depends(get_budget_service)):
    if request_body.note is not None:
        service.update_note(bill_id, request_body.note)
    if request_body.amount is not None:
        service.update_amount(bill_id, to_minor_units(request_body.amount))
    return _bills_response(service)


@router.delete("/bills/{bill_id}", response_model=BillsResponse)
def delete_bill(bill_id: str, service: BudgetService = Depends(get_budget_service)):
    service.delete_bill(bill_id)
    return _bills_response(service)
