"""
Storage Services Package

Provides the abstract ledger store interface and its implementations.
Firestore is the live backend; the in-memory store stands in for it in
tests and local runs.
"""

from src.services.storage.interface import (
    ConnectionError,
    LedgerStoreInterface,
    NotFoundError,
    RawDocument,
    StorageError,
    SubscriptionError,
    WatchHandle,
)
from src.services.storage.memory import InMemoryLedgerStore

__all__ = [
    # Interfaces
    "LedgerStoreInterface",
    "RawDocument",
    "WatchHandle",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    "SubscriptionError",
    # Implementations
    "InMemoryLedgerStore",
]
