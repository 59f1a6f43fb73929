"""
Store Services Package

Provides the abstract store interface and its implementations.
The HTTP store talks to the subscriptions API; the in-memory store
backs tests and offline use.
"""

from subtracker.services.store.interface import (
    AuditStorageInterface,
    NotFoundError,
    StoreConnectionError,
    StoreError,
    SubscriptionStoreInterface,
)
from subtracker.services.store.http_store import HttpSubscriptionStore
from subtracker.services.store.memory import (
    InMemoryAuditStorage,
    InMemorySubscriptionStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SubscriptionStoreInterface",
    # Exceptions
    "NotFoundError",
    "StoreConnectionError",
    "StoreError",
    # Implementations
    "HttpSubscriptionStore",
    "InMemoryAuditStorage",
    "InMemorySubscriptionStore",
]
