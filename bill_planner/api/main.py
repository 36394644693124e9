"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from bill_planner.api.middleware import MetricsMiddleware, RequestIDMiddleware
from bill_planner.api.v1 import bills, budget, history, months, pay_infos, payoff
from bill_planner.config import settings
from bill_planner.domain.exceptions import (
    BackupNotFoundError,
    InvalidBudgetDocumentError,
    InvalidMonthKeyError,
    OperationNotAllowedError,
    StorageError,
)
from bill_planner.infrastructure.database.session import init_db
from bill_planner.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Domain error -> HTTP status
ERROR_STATUS = [
    (OperationNotAllowedError, 409),  # includes RolloverNotAllowedError
    (InvalidBudgetDocumentError, 422),
    (InvalidMonthKeyError, 422),
    (BackupNotFoundError, 404),
    (StorageError, 503),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"{type(exc).__name__}: {exc}",
            extra={"request_id": request_id, "path": request.url.path, "status": status_code},
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Bill Planner",
        description="Monthly bill tracking, rollover and debt payoff service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    for exc_class, status_code in ERROR_STATUS:
        app.add_exception_handler(exc_class, _error_handler(status_code))

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(budget.router, prefix="/v1", tags=["budget"])
    app.include_router(bills.router, prefix="/v1", tags=["bills"])
    app.include_router(months.router, prefix="/v1", tags=["months"])
    app.include_router(payoff.router, prefix="/v1", tags=["payoff"])
    app.include_router(history.router, prefix="/v1", tags=["history"])
    app.include_router(pay_infos.router, prefix="/v1", tags=["pay-infos"])

    return app


app = create_app()
