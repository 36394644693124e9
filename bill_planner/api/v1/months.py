"""Month navigation and rollover endpoints"""

from fastapi import APIRouter, Depends

from bill_planner.api.dependencies import get_budget_service
from bill_planner.api.v1.schemas import (
    NavigateRequest,
    NavigateResponse,
    RolloverRequest,
    RolloverResponse,
)
from bill_planner.infrastructure.serialization import history_to_document
from bill_planner.services.budget_service import BudgetService

router = APIRouter()


@router.post("/months/navigate", response_model=NavigateResponse)
def navigate_month(request_body: NavigateRequest, service: BudgetService = Depends(get_budget_service)):
    """
    Move the viewing cursor one month.

    Returns:
        outcome "moved", "blocked" (outside the navigation window) or
        "rollover_ready" when next is pressed on a fully paid active month
    """
    result = service.navigate(request_body.action)
    return NavigateResponse(
        outcome=result.outcome,
        viewing_month=service.viewing_month,
        view_mode=service.view_mode,
    )


@router.post("/months/rollover", response_model=RolloverResponse)
def start_new_month(request_body: RolloverRequest, service: BudgetService = Depends(get_budget_service)):
    """
    Close the active month and open the next one.

    Requirements:
    - Viewing the active month
    - Every bill in the active month is paid

    Unpaid recurring bills default to carry-over unless listed as "remove".
    """
    result = service.start_new_month(request_body.decisions)
    return RolloverResponse(
        active_month=result.active_month,
        viewing_month=result.viewing_month,
        archived=[history_to_document(h) for h in result.archived],
        removed_ids=result.removed_ids,
        warnings=result.warnings,
    )
