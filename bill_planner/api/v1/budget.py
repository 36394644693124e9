"""Budget-wide endpoints - state, setup, theme, export/import, backups"""

from typing import List

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from bill_planner.api.dependencies import get_budget_service
from bill_planner.api.v1.schemas import BackupSchema, CapabilitiesSchema, StateResponse, ThemeRequest
from bill_planner.services.budget_service import BudgetService

router = APIRouter()


def _state(service: BudgetService) -> StateResponse:
    aggregate = service.aggregate
    caps = service.capabilities
    return StateResponse(
        active_month=aggregate.active_month,
        viewing_month=service.viewing_month,
        view_mode=service.view_mode,
        capabilities=CapabilitiesSchema(
            record_payment=caps.record_payment,
            add_bill=caps.add_bill,
            edit_bill=caps.edit_bill,
            start_rollover=caps.start_rollover,
        ),
        active_month_complete=service.is_active_month_complete(),
        is_first_time=aggregate.is_first_time,
        theme=aggregate.theme,
        last_reset=aggregate.last_reset,
        has_unsaved_changes=service.has_unsaved_changes,
        load_error=service.load_error,
    )


@router.get("/state", response_model=StateResponse)
def get_state(service: BudgetService = Depends(get_budget_service)):
    """Active and viewing month, what the current view allows, and app flags"""
    return _state(service)


@router.post("/setup/complete", response_model=StateResponse)
def complete_setup(service: BudgetService = Depends(get_budget_service)):
    service.complete_setup()
    return _state(service)


@router.put("/theme", response_model=StateResponse)
def set_theme(request_body: ThemeRequest, service: BudgetService = Depends(get_budget_service)):
    service.set_theme(request_body.theme)
    return _state(service)


@router.post("/reset", response_model=StateResponse)
def reset_budget(service: BudgetService = Depends(get_budget_service)):
    """Erase all bills, history and income sources"""
    service.reset()
    return _state(service)


@router.post("/save", response_model=StateResponse)
def save_budget(service: BudgetService = Depends(get_budget_service)):
    """Retry persisting the in-memory budget after a failed save"""
    service.save()
    return _state(service)


@router.get("/export")
def export_budget(service: BudgetService = Depends(get_budget_service)):
    filename = f"budget-data-{service.today().isoformat()}.json"
    return Response(
        content=service.export_document(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=StateResponse)
async def import_budget(request: Request, service: BudgetService = Depends(get_budget_service)):
    """
    Replace the whole budget with an exported document.

    Older document versions are upgraded; an unreadable document returns 422
    and leaves the current budget untouched.
    """
    body = await request.body()
    service.import_document(body.decode("utf-8", errors="replace"))
    return _state(service)


@router.get("/backups", response_model=List[BackupSchema])
def list_backups(service: BudgetService = Depends(get_budget_service)):
    return [BackupSchema(slot=b.slot, month=b.month, created_at=b.created_at) for b in service.list_backups()]


@router.post("/backups/{slot}/restore", response_model=StateResponse)
def restore_backup(slot: int, service: BudgetService = Depends(get_budget_service)):
    service.restore_backup(slot)
    return _state(service)
