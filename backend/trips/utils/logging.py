"""Structured logging for trip service operations."""

import logging
import uuid
from typing import Any

logger = logging.getLogger(__name__)


class StructuredTripLogger:
    """Structured logger for trip service operations."""

    def log_operation(
        self,
        operation: str,
        user_id: uuid.UUID | None,
        trip_id: uuid.UUID | None,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one service operation with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "user_id": str(user_id) if user_id else None,
            "trip_id": str(trip_id) if trip_id else None,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Trip operation: {operation} - {outcome}"

        # Caller mistakes are routine; only dependency and conflict failures warn
        if outcome in ("success", "validation_error", "not_found"):
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
