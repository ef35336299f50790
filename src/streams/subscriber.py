"""
Stream Subscriber

Wraps one live watch on one store collection.

GUARANTEES:
- Every delivery is the complete, ordered collection; it replaces the
  previous one wholesale. Nothing here merges deltas.
- A feed failure goes to the error channel and leaves the last delivered
  snapshot in place. Stale data is preferred over a blank view.
- After cancel() no callback fires, even if the store still had a
  delivery in flight. cancel() is safe to call more than once.
"""

from typing import Any, Callable, Optional

from src.audit import AuditLogger
from src.services.storage.interface import (
    LedgerStoreInterface,
    RawDocument,
    StorageError,
    SubscriptionError,
    WatchHandle,
)


Snapshot = tuple[RawDocument, ...]
SnapshotHandler = Callable[[Snapshot], None]
ErrorHandler = Callable[[SubscriptionError], None]


class Subscription:
    """One live watch and the last snapshot it delivered."""

    def __init__(
        self,
        collection: str,
        on_snapshot: SnapshotHandler,
        on_error: Optional[ErrorHandler],
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.collection = collection
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._audit_logger = audit_logger
        self._handle: Optional[WatchHandle] = None
        self._active = True
        self._latest: Optional[Snapshot] = None
        self._last_error: Optional[SubscriptionError] = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def latest(self) -> Optional[Snapshot]:
        """Last delivered snapshot, or None before the first one."""
        return self._latest

    @property
    def last_error(self) -> Optional[SubscriptionError]:
        return self._last_error

    def cancel(self) -> None:
        """Stop deliveries and release the store watch."""
        if not self._active:
            return
        self._active = False
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.unsubscribe()
        if self._audit_logger:
            self._audit_logger.log_subscription_cancelled(self.collection)

    def _attach(self, handle: WatchHandle) -> None:
        if self._active:
            self._handle = handle
        else:
            # Cancelled from inside the first delivery
            handle.unsubscribe()

    def _deliver(self, documents: list[RawDocument]) -> None:
        if not self._active:
            return
        snapshot = tuple(documents)
        self._latest = snapshot
        if self._audit_logger:
            self._audit_logger.log_snapshot_received(self.collection, len(snapshot))
        self._on_snapshot(snapshot)

    def _fail(self, error: Exception) -> None:
        if not self._active:
            return
        if not isinstance(error, SubscriptionError):
            error = SubscriptionError(self.collection, error)
        self._last_error = error
        if self._audit_logger:
            self._audit_logger.log_subscription_failed(
                collection=self.collection,
                error_message=str(error.cause),
                retained_entries=len(self._latest or ()),
            )
        if self._on_error is not None:
            self._on_error(error)


class StreamSubscriber:
    """
    Subscribes to one collection of the ledger store.

    Usage:
        subscriber = StreamSubscriber(store, "incomes")
        subscription = subscriber.subscribe(on_snapshot, on_error)
        ...
        subscription.cancel()
    """

    def __init__(
        self,
        store: LedgerStoreInterface,
        collection: str,
        order_by: str = "date",
        where: Optional[tuple[str, Any]] = None,
        limit: Optional[int] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self.collection = collection
        self.order_by = order_by
        self.where = where
        self.limit = limit
        self._audit_logger = audit_logger

    def subscribe(
        self,
        on_snapshot: SnapshotHandler,
        on_error: Optional[ErrorHandler] = None,
    ) -> Subscription:
        """
        Start watching the collection.

        If the watch cannot be established the failure goes to `on_error`
        and the returned subscription simply never delivers.
        """
        subscription = Subscription(
            self.collection,
            on_snapshot,
            on_error,
            audit_logger=self._audit_logger,
        )
        if self._audit_logger:
            self._audit_logger.log_subscription_started(self.collection, self.order_by)

        try:
            handle = self._store.watch(
                self.collection,
                self.order_by,
                subscription._deliver,
                subscription._fail,
                where=self.where,
                limit=self.limit,
            )
        except StorageError as e:
            subscription._fail(e)
            return subscription

        subscription._attach(handle)
        return subscription
