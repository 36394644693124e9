"""GET /v1/history - Archived payments from closed months"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from bill_planner.api.dependencies import get_budget_service
from bill_planner.api.v1.schemas import HistoryResponse
from bill_planner.domain.money import to_major_units
from bill_planner.infrastructure.serialization import history_to_document
from bill_planner.services.budget_service import BudgetService
from bill_planner.utils.date_utils import parse_month_key

router = APIRouter()


@router.get("/history", response_model=HistoryResponse)
def get_history(
    month: Optional[str] = Query(None, description="Month key YYYY-MM; all history when omitted"),
    service: BudgetService = Depends(get_budget_service),
):
    """
    Retrieve archived payments, newest first.

    Returns:
        History items whose original due date falls in the month, and their total
    """
    if month is not None:
        parse_month_key(month)

    items = service.history(month)
    return HistoryResponse(
        month=month,
        items=[history_to_document(h) for h in items],
        total_paid=to_major_units(sum(h.paid_amount_cents for h in items)),
    )
