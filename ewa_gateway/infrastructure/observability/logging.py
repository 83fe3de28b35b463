"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from ewa_gateway.config import settings


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


def log_advance_outcome(
    user_id: str,
    outcome: str,
    amount_cents: Optional[int],
    fee_cents: Optional[int] = None,
    transaction_id: Optional[str] = None,
) -> None:
    """Log structured advance outcome for analysis"""
    logging.info(
        "Advance workflow finished",
        extra={
            "user_id": user_id,
            "step": "advance_complete",
            "advance_outcome": outcome,
            "amount_cents": amount_cents,
            "fee_cents": fee_cents,
            "transaction_id": transaction_id,
        },
    )


def log_voucher_purchase(user_id: str, voucher_id: str, outcome: str, stock_left: int) -> None:
    logging.info(
        "Voucher purchase finished",
        extra={
            "user_id": user_id,
            "voucher_id": voucher_id,
            "step": "voucher_purchase",
            "purchase_outcome": outcome,
            "stock_left": stock_left,
        },
    )
