"""
Audit Logger

DESIGN DECISION: Every change to the subscription list is logged.
This provides:
1. Complete traceability
2. Debugging capability when the store misbehaves
3. A history the user can inspect

The audit logger:
- Is async so it can sit next to store calls
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from subtracker.models.audit import AuditEvent, AuditEventBuilder
from subtracker.services.store import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog for JSON output.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # re-configuration must reach module-level loggers
        cache_logger_on_first_use=False,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage sink, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("subtracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        severity = event.severity.value
        if severity in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif severity == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif severity == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_subscriptions_loaded(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.subscriptions_loaded(
            count=count,
            correlation_id=correlation_id,
        ))

    async def log_subscription_created(
        self,
        subscription_id: str,
        name: str,
        correlation_id: UUID,
    ) -> None:
        """Log subscription creation."""
        await self.log(AuditEventBuilder.subscription_created(
            subscription_id=subscription_id,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_subscription_updated(
        self,
        subscription_id: str,
        name: str,
        correlation_id: UUID,
    ) -> None:
        """Log subscription update."""
        await self.log(AuditEventBuilder.subscription_updated(
            subscription_id=subscription_id,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_subscription_deleted(
        self,
        subscription_id: str,
        correlation_id: UUID,
    ) -> None:
        """Log subscription deletion."""
        await self.log(AuditEventBuilder.subscription_deleted(
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: UUID,
        subscription_id: Optional[str] = None,
    ) -> None:
        """Log form validation failure."""
        await self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            correlation_id=correlation_id,
            subscription_id=subscription_id,
        ))

    async def log_notifications_evaluated(
        self,
        total: int,
        notified: int,
        urgent: int,
    ) -> None:
        await self.log(AuditEventBuilder.notifications_evaluated(
            total=total,
            notified=notified,
            urgent=urgent,
        ))

    async def log_store_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        subscription_id: Optional[str] = None,
    ) -> None:
        """Log a failed store call."""
        await self.log(AuditEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
            subscription_id=subscription_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., saving the form)
    and pass it through all subsequent operations.
    """
    return uuid4()
