"""Income sources and upcoming paydays"""

from typing import List

from fastapi import APIRouter, Depends

from bill_planner.api.dependencies import get_budget_service
from bill_planner.api.v1.schemas import PayInfoDocument, PayInfoRequest, PayInfosResponse, UpcomingPaySchema
from bill_planner.services.budget_service import BudgetService

router = APIRouter()


def _pay_infos_response(service: BudgetService) -> PayInfosResponse:
    return PayInfosResponse(
        pay_infos=[
            PayInfoDocument(id=p.id, name=p.name, last_pay_date=p.last_pay_date, frequency=p.frequency)
            for p in service.aggregate.pay_infos
        ]
    )


@router.get("/pay-infos", response_model=PayInfosResponse)
def list_pay_infos(service: BudgetService = Depends(get_budget_service)):
    return _pay_infos_response(service)


@router.post("/pay-infos", response_model=PayInfosResponse, status_code=201)
def add_pay_info(request_body: PayInfoRequest, service: BudgetService = Depends(get_budget_service)):
    service.add_pay_info(request_body.name, request_body.last_pay_date, request_body.frequency)
    return _pay_infos_response(service)


@router.delete("/pay-infos/{pay_info_id}", response_model=PayInfosResponse)
def remove_pay_info(pay_info_id: str, service: BudgetService = Depends(get_budget_service)):
    service.remove_pay_info(pay_info_id)
    return _pay_infos_response(service)


@router.get("/pay-infos/upcoming", response_model=List[UpcomingPaySchema])
def upcoming_pays(service: BudgetService = Depends(get_budget_service)):
    """Paydays from today to the end of the month, plus each source's next one"""
    return [
        UpcomingPaySchema(
            pay_info_id=pay.pay_info_id,
            name=pay.name,
            pay_date=pay.pay_date,
            days_until=pay.days_until,
            frequency=pay.frequency,
        )
        for pay in service.upcoming_pays()
    ]
