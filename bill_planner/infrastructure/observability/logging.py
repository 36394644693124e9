"""Structured JSON logging"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger import jsonlogger

from bill_planner.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_rollover(
    closed_month: str,
    new_month: str,
    archived_count: int,
    removed_ids: List[str],
    warnings: List[str],
    duration_ms: float,
) -> None:
    """Log structured rollover outcome"""
    logging.getLogger("bill_planner.rollover").info(
        "Month rollover completed",
        extra={
            "step": "rollover_complete",
            "closed_month": closed_month,
            "new_month": new_month,
            "archived_count": archived_count,
            "removed_count": len(removed_ids),
            "removed_ids": removed_ids,
            "warning_count": len(warnings),
            "duration_ms": duration_ms,
        },
    )
    for warning in warnings:
        logging.getLogger("bill_planner.rollover").warning(
            warning, extra={"step": "rollover_warning", "closed_month": closed_month}
        )
