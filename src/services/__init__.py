"""Services package."""

from src.services.storage import (
    ConnectionError,
    InMemoryLedgerStore,
    LedgerStoreInterface,
    NotFoundError,
    RawDocument,
    StorageError,
    SubscriptionError,
    WatchHandle,
)

__all__ = [
    # Storage services
    "ConnectionError",
    "InMemoryLedgerStore",
    "LedgerStoreInterface",
    "NotFoundError",
    "RawDocument",
    "StorageError",
    "SubscriptionError",
    "WatchHandle",
]
