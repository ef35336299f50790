"""
Firestore Ledger Store Implementation

DESIGN DECISION: Firestore is the live backend because:
1. The shop's records already live there (incomes, expenses, rent_history)
2. It pushes the full query result on every change
3. The daily hisab is written there by a separate process

TRADEOFFS:
- Snapshots arrive on a background thread owned by the client library
- No cross-collection snapshot (each watch fires independently)
- The Python client retries transient stream errors on its own; what
  reaches us is a failure to establish a watch or to read a snapshot

The implementation follows the abstract interface, so the reports never
import anything from google.cloud.
"""

from typing import Any, Optional

import structlog
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.config.settings import FirestoreSettings
from src.services.storage.interface import (
    ConnectionError,
    ErrorCallback,
    LedgerStoreInterface,
    RawDocument,
    SnapshotCallback,
    StorageError,
    WatchHandle,
)


logger = structlog.get_logger("shop_ledger.firestore")


class FirestoreWatchHandle(WatchHandle):
    """Wraps the client library's Watch object."""

    def __init__(self, collection: str, watch: Any):
        self._collection = collection
        self._watch = watch
        self._closed = False

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._watch.unsubscribe()
        logger.info("firestore_watch_closed", collection=self._collection)


class FirestoreLedgerStore(LedgerStoreInterface):
    """
    Firestore implementation of the ledger store.

    Each watch is a query listener (`on_snapshot`). Documents are handed
    to the caller as plain dicts with the document id under "id".
    """

    def __init__(
        self,
        settings: Optional[FirestoreSettings] = None,
        client: Optional[firestore.Client] = None,
    ):
        self._settings = settings or get_settings().firestore
        self._client = client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> firestore.Client:
        """
        Create the Firestore client.

        Uses the configured service account file, or Application Default
        Credentials when none is configured.
        """
        if self._client is None:
            try:
                if self._settings.credentials_path:
                    credentials = Credentials.from_service_account_file(
                        self._settings.credentials_path,
                    )
                    self._client = firestore.Client(
                        project=self._settings.project_id,
                        credentials=credentials,
                    )
                else:
                    self._client = firestore.Client(project=self._settings.project_id)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Firestore credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Firestore: {e}")

        return self._client

    def watch(
        self,
        collection: str,
        order_by: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        where: Optional[tuple[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> WatchHandle:
        client = self.connect()

        query = client.collection(collection)
        if where is not None:
            field, value = where
            query = query.where(filter=FieldFilter(field, "==", value))
        query = query.order_by(order_by, direction=firestore.Query.DESCENDING)
        if limit is not None:
            query = query.limit(limit)

        def _on_snapshot(docs, changes, read_time) -> None:
            try:
                documents: list[RawDocument] = [
                    {**(doc.to_dict() or {}), "id": doc.id} for doc in docs
                ]
            except Exception as e:
                on_error(StorageError(f"Failed to read snapshot of {collection}: {e}"))
                return
            on_snapshot(documents)

        try:
            watch = query.on_snapshot(_on_snapshot)
        except Exception as e:
            raise ConnectionError(f"Failed to watch {collection}: {e}")

        logger.info("firestore_watch_opened", collection=collection, order_by=order_by)
        return FirestoreWatchHandle(collection, watch)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
