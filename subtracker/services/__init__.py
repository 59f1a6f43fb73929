"""Services package."""

from subtracker.services.store import (
    AuditStorageInterface,
    HttpSubscriptionStore,
    InMemoryAuditStorage,
    InMemorySubscriptionStore,
    NotFoundError,
    StoreConnectionError,
    StoreError,
    SubscriptionStoreInterface,
)

__all__ = [
    "AuditStorageInterface",
    "HttpSubscriptionStore",
    "InMemoryAuditStorage",
    "InMemorySubscriptionStore",
    "NotFoundError",
    "StoreConnectionError",
    "StoreError",
    "SubscriptionStoreInterface",
]
