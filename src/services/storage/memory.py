"""
In-Memory Ledger Store

Behaves like the live store the dashboard runs against: every write pushes
the full, ordered contents of the collection to each watcher. Used for
tests and for running the dashboard locally without credentials.

Delivery is synchronous; a write returns after every watcher has seen it.
"""

from typing import Any, Optional
from uuid import uuid4

from src.services.storage.interface import (
    ErrorCallback,
    LedgerStoreInterface,
    NotFoundError,
    RawDocument,
    SnapshotCallback,
    WatchHandle,
)


class _Watcher:
    def __init__(
        self,
        collection: str,
        order_by: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        where: Optional[tuple[str, Any]],
        limit: Optional[int],
    ):
        self.collection = collection
        self.order_by = order_by
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.where = where
        self.limit = limit


class InMemoryWatchHandle(WatchHandle):
    """Handle returned by InMemoryLedgerStore.watch()."""

    def __init__(self, store: "InMemoryLedgerStore", watcher: _Watcher):
        self._store = store
        self._watcher = watcher
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._remove_watcher(self._watcher)


class InMemoryLedgerStore(LedgerStoreInterface):
    """
    Dictionary-backed ledger store with push notification.

    Ids are assigned on add and never reused after delete.
    """

    def __init__(self):
        self._collections: dict[str, dict[str, RawDocument]] = {}
        self._watchers: list[_Watcher] = []

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document and return its new id."""
        doc_id = uuid4().hex
        self._collections.setdefault(collection, {})[doc_id] = dict(data)
        self._notify(collection)
        return doc_id

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Replace field values of an existing document in place."""
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise NotFoundError(f"Document not found: {collection}/{doc_id}")
        docs[doc_id].update(data)
        self._notify(collection)

    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        docs = self._collections.get(collection, {})
        if docs.pop(doc_id, None) is None:
            return False
        self._notify(collection)
        return True

    def fail(self, collection: str, error: Exception) -> None:
        """Report a transport failure to every watcher of a collection."""
        for watcher in list(self._watchers):
            if watcher.collection == collection:
                watcher.on_error(error)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def watch(
        self,
        collection: str,
        order_by: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        where: Optional[tuple[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> WatchHandle:
        watcher = _Watcher(collection, order_by, on_snapshot, on_error, where, limit)
        self._watchers.append(watcher)
        # Like a live store, the current state is delivered straight away
        watcher.on_snapshot(self._query(watcher))
        return InMemoryWatchHandle(self, watcher)

    def watcher_count(self, collection: Optional[str] = None) -> int:
        if collection is None:
            return len(self._watchers)
        return sum(1 for w in self._watchers if w.collection == collection)

    def close(self) -> None:
        self._watchers.clear()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _remove_watcher(self, watcher: _Watcher) -> None:
        if watcher in self._watchers:
            self._watchers.remove(watcher)

    def _query(self, watcher: _Watcher) -> list[RawDocument]:
        docs = [
            {**data, "id": doc_id}
            for doc_id, data in self._collections.get(watcher.collection, {}).items()
        ]
        if watcher.where is not None:
            field, value = watcher.where
            docs = [d for d in docs if d.get(field) == value]
        docs.sort(key=lambda d: str(d.get(watcher.order_by, "")), reverse=True)
        if watcher.limit is not None:
            docs = docs[:watcher.limit]
        return docs

    def _notify(self, collection: str) -> None:
        for watcher in list(self._watchers):
            if watcher.collection == collection:
                watcher.on_snapshot(self._query(watcher))
