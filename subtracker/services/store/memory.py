"""
In-Memory Store Implementation

Same interface as the HTTP store, backed by a dict. Used when no store
URL is configured and throughout the test suite.
"""

from itertools import count
from typing import Iterable, Optional

from subtracker.models.audit import AuditEvent
from subtracker.models.subscription import Subscription, SubscriptionDraft
from subtracker.services.store.interface import (
    AuditStorageInterface,
    NotFoundError,
    SubscriptionStoreInterface,
)


class InMemorySubscriptionStore(SubscriptionStoreInterface):
    """Dict-backed subscription store. Insertion order is list order."""

    def __init__(self, subscriptions: Optional[Iterable[Subscription]] = None):
        self._records: dict[str, Subscription] = {}
        self._ids = count(1)
        for sub in subscriptions or []:
            self._records[sub.id] = sub

    def _next_id(self) -> str:
        while True:
            candidate = str(next(self._ids))
            if candidate not in self._records:
                return candidate

    def _build(self, subscription_id: str, draft: SubscriptionDraft) -> Subscription:
        return Subscription(
            id=subscription_id,
            name=draft.name,
            category=draft.category,
            description=draft.description,
            price=draft.price,
            renewal_type=draft.renewal_type,
            start_date=draft.start_date,
        )

    async def list_subscriptions(self) -> list[Subscription]:
        return list(self._records.values())

    async def create_subscription(
        self,
        draft: SubscriptionDraft,
    ) -> Optional[Subscription]:
        subscription = self._build(self._next_id(), draft)
        self._records[subscription.id] = subscription
        return subscription

    async def update_subscription(
        self,
        subscription_id: str,
        draft: SubscriptionDraft,
    ) -> Optional[Subscription]:
        if subscription_id not in self._records:
            raise NotFoundError(f"Subscription not found: {subscription_id}")
        subscription = self._build(subscription_id, draft)
        self._records[subscription_id] = subscription
        return subscription

    async def delete_subscription(self, subscription_id: str) -> bool:
        return self._records.pop(subscription_id, None) is not None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
