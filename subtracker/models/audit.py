"""
Audit Models for Subscription Tracker

Every change to the subscription list is logged for audit purposes.
This provides:
1. Traceability of who changed what, and when
2. Debugging information when the store misbehaves
3. Ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store reads
    SUBSCRIPTIONS_LOADED = "subscriptions_loaded"

    # Mutations
    SUBSCRIPTION_CREATED = "subscription_created"
    SUBSCRIPTION_UPDATED = "subscription_updated"
    SUBSCRIPTION_DELETED = "subscription_deleted"

    # Input checks
    VALIDATION_FAILED = "validation_failed"

    # Renewal notices
    NOTIFICATIONS_EVALUATED = "notifications_evaluated"

    # System events
    STORE_ERROR = "store_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every mutation, failed validation and store error creates one.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which subscription is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'subscription', 'form')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Store id of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one save action)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.subscription_created(sub_id, name, correlation_id)
        event = AuditEventBuilder.store_error("list", message, correlation_id)
    """

    @staticmethod
    def subscriptions_loaded(
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTIONS_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="subscription",
            correlation_id=correlation_id,
            description=f"Loaded {count} subscriptions",
            details={"count": count},
        )

    @staticmethod
    def subscription_created(
        subscription_id: str,
        name: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_CREATED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription created: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def subscription_updated(
        subscription_id: str,
        name: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_UPDATED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription updated: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def subscription_deleted(
        subscription_id: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_DELETED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription deleted: {subscription_id}",
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: UUID,
        subscription_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="form",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Form validation failed with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def notifications_evaluated(
        total: int,
        notified: int,
        urgent: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATIONS_EVALUATED,
            severity=AuditSeverity.DEBUG,
            entity_type="subscription",
            description=f"{notified} of {total} subscriptions renew soon ({urgent} urgent)",
            details={
                "total": total,
                "notified": notified,
                "urgent": urgent,
            },
        )

    @staticmethod
    def store_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        subscription_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Store operation failed: {operation}",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
