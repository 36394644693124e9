"""Debt payoff projections"""

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query

from bill_planner.api.dependencies import get_budget_service
from bill_planner.api.v1.schemas import PayoffComparisonResponse, comparison_to_schema
from bill_planner.domain.money import to_minor_units
from bill_planner.services.budget_service import BudgetService

router = APIRouter()


@router.get("/bills/{bill_id}/payoff", response_model=PayoffComparisonResponse)
def get_bill_payoff(bill_id: str, service: BudgetService = Depends(get_budget_service)):
    """Payoff timeline for a balance-carrying bill at its payment, +20% and +50%"""
    comparison = service.bill_payoff(bill_id)
    if comparison is None:
        raise HTTPException(status_code=404, detail="Bill not found or has no balance")
    return comparison_to_schema(comparison, service.active_month)


@router.get("/payoff", response_model=PayoffComparisonResponse)
def get_payoff(
    balance: Decimal = Query(..., ge=0, description="Current balance in dollars"),
    monthly_payment: Decimal = Query(..., ge=0, description="Monthly payment in dollars"),
    interest_rate: float = Query(0, ge=0, description="Annual interest rate in percent"),
    service: BudgetService = Depends(get_budget_service),
):
    comparison = service.payoff_comparison(to_minor_units(balance), to_minor_units(monthly_payment), interest_rate)
    return comparison_to_schema(comparison, service.active_month)
