"""
Main Orchestrator for Subscription Tracker

Ties the store, the validator, the renewal calculator and the audit log
together into the operations the UI needs:
1. Load (store -> typed records)
2. Save (form -> validate -> create or update)
3. Delete
4. Dashboard (records -> totals and upcoming renewals)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing validation
- Renewal math stays in core.renewal and stays pure
- Every mutation is audited
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from subtracker.audit import AuditLogger, create_correlation_id
from subtracker.config import get_settings
from subtracker.core.renewal import (
    Reference,
    evaluate_notification,
    total_for_cadence,
)
from subtracker.models.subscription import RenewalNotice, RenewalType, Subscription
from subtracker.models.validation import SubscriptionForm, ValidationResult
from subtracker.services.store import (
    HttpSubscriptionStore,
    InMemoryAuditStorage,
    InMemorySubscriptionStore,
    StoreError,
    SubscriptionStoreInterface,
)
from subtracker.validation import SubscriptionValidator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UpcomingRenewal:
    """A subscription paired with its active notice."""
    subscription: Subscription
    notice: RenewalNotice


@dataclass(frozen=True)
class DashboardSummary:
    """Header figures and the upcoming-renewals panel."""
    monthly_total: Decimal
    yearly_total: Decimal
    upcoming: list[UpcomingRenewal] = field(default_factory=list)

    @property
    def notification_count(self) -> int:
        return len(self.upcoming)

    @property
    def urgent_count(self) -> int:
        return sum(1 for item in self.upcoming if item.notice.urgent)


@dataclass(frozen=True)
class SaveOutcome:
    """Result of a save attempt; `subscription` may be None if the store did not echo it."""
    validation: ValidationResult
    saved: bool
    subscription: Optional[Subscription] = None


class SubscriptionService:
    """
    Orchestrates subscription CRUD and the dashboard.

    Store failures are audited and re-raised as StoreError; the UI
    decides how to show them.
    """

    def __init__(
        self,
        store: SubscriptionStoreInterface,
        validator: Optional[SubscriptionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or SubscriptionValidator()
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def validator(self) -> SubscriptionValidator:
        return self._validator

    async def load(self, correlation_id: Optional[UUID] = None) -> list[Subscription]:
        """Fetch every subscription from the store."""
        try:
            subscriptions = await self._store.list_subscriptions()
        except StoreError as e:
            await self._audit_logger.log_store_error(
                operation="list",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except Exception as e:
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": "list"},
                correlation_id=correlation_id,
            )
            raise
        await self._audit_logger.log_subscriptions_loaded(
            count=len(subscriptions),
            correlation_id=correlation_id,
        )
        return subscriptions

    async def save(
        self,
        form: SubscriptionForm,
        editing_id: Optional[str] = None,
        existing: Optional[list[Subscription]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> SaveOutcome:
        """
        Validate a form and create (or, with editing_id, update) a record.

        Invalid forms are not sent to the store; the outcome carries the
        validation issues instead.
        """
        correlation_id = correlation_id or create_correlation_id()

        validation = self._validator.validate(
            form,
            existing=existing or [],
            editing_id=editing_id,
        )
        if not validation.is_valid or validation.draft is None:
            await self._audit_logger.log_validation_failed(
                issues=[issue.model_dump() for issue in validation.issues],
                correlation_id=correlation_id,
                subscription_id=editing_id,
            )
            return SaveOutcome(validation=validation, saved=False)

        draft = validation.draft
        operation = "update" if editing_id else "create"
        try:
            if editing_id:
                subscription = await self._store.update_subscription(editing_id, draft)
            else:
                subscription = await self._store.create_subscription(draft)
        except StoreError as e:
            await self._audit_logger.log_store_error(
                operation=operation,
                error_message=str(e),
                correlation_id=correlation_id,
                subscription_id=editing_id,
            )
            raise
        except Exception as e:
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": operation, "subscription_id": editing_id},
                correlation_id=correlation_id,
            )
            raise

        subscription_id = subscription.id if subscription else (editing_id or "")
        if editing_id:
            await self._audit_logger.log_subscription_updated(
                subscription_id=subscription_id,
                name=draft.name,
                correlation_id=correlation_id,
            )
        else:
            await self._audit_logger.log_subscription_created(
                subscription_id=subscription_id,
                name=draft.name,
                correlation_id=correlation_id,
            )

        return SaveOutcome(validation=validation, saved=True, subscription=subscription)

    async def delete(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a record. Returns False if the store did not have it."""
        correlation_id = correlation_id or create_correlation_id()
        try:
            deleted = await self._store.delete_subscription(subscription_id)
        except StoreError as e:
            await self._audit_logger.log_store_error(
                operation="delete",
                error_message=str(e),
                correlation_id=correlation_id,
                subscription_id=subscription_id,
            )
            raise

        if deleted:
            await self._audit_logger.log_subscription_deleted(
                subscription_id=subscription_id,
                correlation_id=correlation_id,
            )
        else:
            logger.warning("delete_missing_subscription", subscription_id=subscription_id)
        return deleted

    async def dashboard(
        self,
        subscriptions: list[Subscription],
        reference: Optional[Reference] = None,
    ) -> DashboardSummary:
        """Totals per cadence and the subscriptions renewing soon."""
        upcoming = []
        for sub in subscriptions:
            notice = evaluate_notification(sub, reference)
            if notice is not None:
                upcoming.append(UpcomingRenewal(subscription=sub, notice=notice))

        summary = DashboardSummary(
            monthly_total=total_for_cadence(subscriptions, RenewalType.MONTHLY),
            yearly_total=total_for_cadence(subscriptions, RenewalType.YEARLY),
            upcoming=upcoming,
        )
        await self._audit_logger.log_notifications_evaluated(
            total=len(subscriptions),
            notified=summary.notification_count,
            urgent=summary.urgent_count,
        )
        return summary


def create_app_components(
    use_storage: bool = True,
) -> tuple[SubscriptionService, SubscriptionStoreInterface]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to connect to the HTTP store.
                    Set to False for an in-memory store.

    Returns:
        (subscription_service, store)
    """
    audit_logger = AuditLogger(InMemoryAuditStorage())
    store: SubscriptionStoreInterface

    if use_storage:
        try:
            store = HttpSubscriptionStore(get_settings().store)
        except Exception as e:
            # Store not configured - continue in memory
            logger.warning("store_not_configured", error=str(e))
            store = InMemorySubscriptionStore()
    else:
        store = InMemorySubscriptionStore()

    service = SubscriptionService(store=store, audit_logger=audit_logger)
    return service, store
