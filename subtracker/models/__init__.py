"""
Data Models Package

This package contains all Pydantic models used in the Subscription Tracker.
All data flowing through the system must conform to these schemas.
"""

from subtracker.models.subscription import (
    DerivedNotification,
    NotificationSource,
    PrecomputedNotification,
    RenewalNotice,
    RenewalType,
    Subscription,
    SubscriptionDraft,
)
from subtracker.models.validation import (
    SubscriptionForm,
    ValidationIssue,
    ValidationResult,
)
from subtracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Subscription models
    "DerivedNotification",
    "NotificationSource",
    "PrecomputedNotification",
    "RenewalNotice",
    "RenewalType",
    "Subscription",
    "SubscriptionDraft",
    # Form validation models
    "SubscriptionForm",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
