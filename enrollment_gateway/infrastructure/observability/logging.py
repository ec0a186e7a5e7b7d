"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from enrollment_gateway.config import settings


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


def log_enrollment(
    request_id: str,
    applicant: str,
    payment_method: str,
    outcome: str,
    total_cents: int,
    duration_ms: float,
) -> None:
    """Log structured enrollment outcome for analysis"""
    logging.info(
        "Enrollment payment completed",
        extra={
            "request_id": request_id,
            "applicant": applicant,
            "step": "enrollment_complete",
            "payment_method": payment_method,
            "outcome": outcome,
            "total_cents": total_cents,
            "duration_ms": duration_ms,
        },
    )


def log_reconciliation_required(request_id: str, applicant: str, payment_reference: str, reason: str) -> None:
    """Money captured without a matching enrollment record: needs an operator"""
    logging.critical(
        "Payment captured but enrollment not recorded",
        extra={
            "request_id": request_id,
            "applicant": applicant,
            "payment_reference": payment_reference,
            "step": "reconciliation_required",
            "reason": reason,
        },
    )
