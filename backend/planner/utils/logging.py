"""Structured logging for remote store synchronization."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredSyncLogger:
    """Structured logger for refreshes and writes of cache-synced resources."""

    def log_sync(
        self,
        resource: str,
        operation: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one remote interaction with structured data."""
        log_data: dict[str, Any] = {
            "resource": resource,
            "operation": operation,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Sync {operation}: {resource} - {outcome}"

        if outcome in ("success", "skipped"):
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
