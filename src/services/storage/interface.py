"""
Abstract Ledger Store Interface

DESIGN DECISION: We define an abstract interface for the external store.
This allows us to:
1. Swap Firestore for another live backend later
2. Use in-memory storage for testing
3. Keep report logic decoupled from the transport

The store owns persistence and change notification. The dashboard only
ever watches collections: each change produces the complete, ordered
list of documents, never a delta.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


# A document as delivered by the store: its fields plus an "id" key
RawDocument = dict[str, Any]

SnapshotCallback = Callable[[list[RawDocument]], None]
ErrorCallback = Callable[[Exception], None]


class WatchHandle(ABC):
    """A live watch on one collection query."""

    @abstractmethod
    def unsubscribe(self) -> None:
        """
        Stop delivering snapshots and release the live connection.

        Calling it more than once is a no-op.
        """
        pass


class LedgerStoreInterface(ABC):
    """
    Abstract interface for the live ledger store.

    Any store implementation (Firestore, in-memory, etc.)
    must implement these methods.
    """

    @abstractmethod
    def watch(
        self,
        collection: str,
        order_by: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        where: Optional[tuple[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> WatchHandle:
        """
        Watch a collection.

        Args:
            collection: Collection name
            order_by: Field to order by, descending
            on_snapshot: Called with the full ordered document list on
                         every change, starting with the current state
            on_error: Called with a StorageError when the feed fails
            where: Optional (field, value) equality filter
            limit: Maximum number of documents per snapshot

        Returns:
            Handle used to stop the watch

        Raises:
            ConnectionError: If the watch cannot be established
        """
        pass

    def close(self) -> None:
        """Release any client resources held by the store."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class SubscriptionError(StorageError):
    """
    A live feed failed.

    Reported through the subscriber's error channel. The last snapshot
    delivered before the failure stays in place.
    """

    def __init__(self, collection: str, cause: Exception):
        self.collection = collection
        self.cause = cause
        super().__init__(f"Live feed for '{collection}' failed: {cause}")
