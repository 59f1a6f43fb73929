"""
Abstract Store Interface

DESIGN DECISION: We define an abstract interface for store operations.
This allows us to:
1. Point the app at any backend speaking the subscriptions API
2. Use in-memory storage for testing and offline use
3. Keep business logic decoupled from the transport

The interface mirrors the store's CRUD API. Nothing more.
"""

from abc import ABC, abstractmethod
from typing import Optional

from subtracker.models.audit import AuditEvent
from subtracker.models.subscription import Subscription, SubscriptionDraft


class SubscriptionStoreInterface(ABC):
    """
    Abstract interface for subscription storage operations.

    Implementations return fully parsed Subscription values; raw JSON
    never leaks past this boundary.
    """

    @abstractmethod
    async def list_subscriptions(self) -> list[Subscription]:
        """
        List all subscriptions, in the order the store returns them.

        Raises:
            StoreError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def create_subscription(
        self,
        draft: SubscriptionDraft,
    ) -> Optional[Subscription]:
        """
        Create a subscription.

        Returns:
            The created record if the store echoes it back, else None

        Raises:
            StoreError: If creation fails
        """
        pass

    @abstractmethod
    async def update_subscription(
        self,
        subscription_id: str,
        draft: SubscriptionDraft,
    ) -> Optional[Subscription]:
        """
        Replace the fields of an existing subscription.

        Returns:
            The updated record if the store echoes it back, else None

        Raises:
            NotFoundError: If the subscription doesn't exist
            StoreError: If the update fails
        """
        pass

    @abstractmethod
    async def delete_subscription(self, subscription_id: str) -> bool:
        """
        Delete a subscription by id.

        Returns:
            True if deleted, False if it did not exist
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event. Returns True if stored."""
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        pass


class StoreError(Exception):
    """Base exception for store operations."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(StoreError):
    """Subscription not found in the store."""
    pass


class StoreConnectionError(StoreError):
    """Could not reach the store."""
    pass
