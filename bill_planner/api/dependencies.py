"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Request

from bill_planner.infrastructure.database.session import SessionLocal
from bill_planner.services.budget_service import BudgetService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache(maxsize=None)
def get_budget_service() -> BudgetService:
    """Provide the process-wide budget service, loaded from storage on first use"""
    service = BudgetService(SessionLocal)
    service.load()
    return service
