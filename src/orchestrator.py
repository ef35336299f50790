"""
Main Orchestrator for Shop Ledger

This module ties the components together behind the dashboard's API:

1. Stream subscribers watch incomes, expenses, rent_history and today's
   daily_hisab in the ledger store
2. Each snapshot is validated and replaces that ledger wholesale
3. Reports are folded from the latest ledgers whenever they are asked for

DESIGN DECISION: The orchestrator holds only the latest validated snapshot
of each collection. There is no cross-collection snapshot: a report may see
a new income ledger next to an older expense ledger if both changed at the
same moment. The next notification brings them back in line, and because
every report is a full recomputation nothing is ever left half-updated.

Subscription setup and teardown are the only async operations; every
report is a synchronous pure function over the current ledgers.
"""

import asyncio
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

import structlog

from src.audit import AuditLogger, configure_logging
from src.config import get_settings
from src.config.settings import BusinessSettings, FirestoreSettings
from src.models.ledger import (
    Collection,
    DailyHisab,
    ExpenseEntry,
    IncomeEntry,
    LedgerEntry,
    PeriodMode,
    RentEntry,
    ValidationIssue,
)
from src.models.report import (
    BucketSummary,
    BusinessDuration,
    BusinessProfile,
    ExpenseTotals,
    LedgerTotals,
    ReportStats,
    TodaySnapshot,
)
from src.reports import (
    aggregate,
    elapsed,
    expense_totals,
    find_bucket,
    income_totals,
    reconcile_today,
    report_stats,
    search_entries,
)
from src.services.storage import (
    InMemoryLedgerStore,
    LedgerStoreInterface,
    SubscriptionError,
)
from src.streams import Snapshot, StreamSubscriber, Subscription
from src.validation import EntryValidator


logger = structlog.get_logger("shop_ledger.orchestrator")

LEDGER_COLLECTIONS = (
    Collection.INCOMES,
    Collection.EXPENSES,
    Collection.RENT_HISTORY,
)


class DashboardService:
    """
    The dashboard's view of the shop's books.

    Flow:
    1. start() → subscribe to every ledger and to today's hisab
    2. snapshots arrive → validate → replace the ledger
    3. get_*() → recompute from the current ledgers
    4. stop() → cancel every subscription

    A failed feed keeps its last snapshot; the failure is recorded in
    `errors` and the reports go on using the stale-but-present data.
    """

    def __init__(
        self,
        store: LedgerStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[EntryValidator] = None,
        business: Optional[BusinessSettings] = None,
        collection_names: Optional[dict[Collection, str]] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or EntryValidator()
        self._business = business or BusinessSettings()
        self._collection_names = {c: c.value for c in Collection}
        self._collection_names.update(collection_names or {})

        self._ledgers: dict[Collection, tuple[LedgerEntry, ...]] = {
            c: () for c in LEDGER_COLLECTIONS
        }
        self._issues: dict[Collection, list[ValidationIssue]] = {
            c: [] for c in Collection
        }
        self._hisab_documents: Snapshot = ()
        self._hisab_date: Optional[str] = None

        self._subscriptions: dict[Collection, Subscription] = {}
        self._errors: list[SubscriptionError] = []

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return bool(self._subscriptions)

    async def start(self, today: Optional[str] = None) -> None:
        """Open the live feeds. Does nothing if already running."""
        if self.running:
            return
        today = today or self._today()
        await asyncio.to_thread(self._subscribe_all, today)
        logger.info("dashboard_started", today=today)

    async def stop(self) -> None:
        """Close every live feed. The last ledgers stay readable."""
        subscriptions = list(self._subscriptions.values())
        self._subscriptions.clear()
        await asyncio.to_thread(self._cancel_all, subscriptions)
        logger.info("dashboard_stopped", closed=len(subscriptions))

    def _subscribe_all(self, today: str) -> None:
        for collection in LEDGER_COLLECTIONS:
            subscriber = StreamSubscriber(
                self._store,
                self._collection_names[collection],
                order_by="date",
                audit_logger=self._audit_logger,
            )
            self._subscriptions[collection] = subscriber.subscribe(
                self._ledger_handler(collection),
                self._on_error,
            )
        self._watch_hisab(today)

    @staticmethod
    def _cancel_all(subscriptions: list[Subscription]) -> None:
        for subscription in subscriptions:
            subscription.cancel()

    def _watch_hisab(self, today: str) -> None:
        """(Re)point the hisab feed at an exact date."""
        previous = self._subscriptions.pop(Collection.DAILY_HISAB, None)
        if previous is not None:
            previous.cancel()
        self._hisab_documents = ()
        self._hisab_date = today

        subscriber = StreamSubscriber(
            self._store,
            self._collection_names[Collection.DAILY_HISAB],
            order_by="date",
            where=("date", today),
            limit=1,
            audit_logger=self._audit_logger,
        )
        self._subscriptions[Collection.DAILY_HISAB] = subscriber.subscribe(
            self._on_hisab,
            self._on_error,
        )

    # -------------------------------------------------------------------------
    # Snapshot handlers
    # -------------------------------------------------------------------------

    def _ledger_handler(self, collection: Collection):
        def _on_snapshot(snapshot: Snapshot) -> None:
            entries, issues = self._validator.parse_entries(collection, list(snapshot))
            self._ledgers[collection] = tuple(entries)
            self._issues[collection] = issues
            self._log_issues(issues)
        return _on_snapshot

    def _on_hisab(self, snapshot: Snapshot) -> None:
        self._hisab_documents = snapshot
        hisab, issues = self._validator.parse_hisab(list(snapshot), self._hisab_date or "")
        self._issues[Collection.DAILY_HISAB] = issues
        self._log_issues(issues)
        if hisab is not None:
            self._audit_logger.log_hisab_received(hisab.date, str(hisab.profit_loss))

    def _on_error(self, error: SubscriptionError) -> None:
        self._errors.append(error)

    def _log_issues(self, issues: list[ValidationIssue]) -> None:
        for issue in issues:
            if issue.severity == "error":
                self._audit_logger.log_entry_excluded(
                    issue.collection.value, issue.document_id, issue.field, issue.message
                )
            else:
                self._audit_logger.log_entry_coerced(
                    issue.collection.value, issue.document_id, issue.field, issue.message
                )

    # -------------------------------------------------------------------------
    # Current state
    # -------------------------------------------------------------------------

    @property
    def incomes(self) -> tuple[IncomeEntry, ...]:
        return self._ledgers[Collection.INCOMES]

    @property
    def expenses(self) -> tuple[ExpenseEntry, ...]:
        return self._ledgers[Collection.EXPENSES]

    @property
    def rents(self) -> tuple[RentEntry, ...]:
        return self._ledgers[Collection.RENT_HISTORY]

    @property
    def errors(self) -> list[SubscriptionError]:
        """Feed failures seen so far, oldest first."""
        return list(self._errors)

    @property
    def validation_issues(self) -> list[ValidationIssue]:
        """Issues from the latest snapshot of every collection."""
        return [issue for issues in list(self._issues.values()) for issue in issues]

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def business_profile(self) -> BusinessProfile:
        return BusinessProfile(
            name=self._business.name,
            owner=self._business.owner,
            established_on=self._business.established_on,
        )

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def get_bucket_summaries(self, mode: PeriodMode) -> list[BucketSummary]:
        """Income, expense and net per period, oldest first."""
        summaries = aggregate(self.incomes, self.expenses, self.rents, PeriodMode(mode))
        self._audit_logger.log_summaries_computed(PeriodMode(mode).value, len(summaries))
        return summaries

    def get_report_stats(self, mode: PeriodMode) -> ReportStats:
        return report_stats(self.get_bucket_summaries(mode))

    def get_today_snapshot(self, today: Optional[str] = None) -> TodaySnapshot:
        """
        Today's live figures, with the hisab when it exists.

        Without a hisab the headline is the live net and a
        reconciliation gap is logged; this is not an error.
        """
        today = today or self._today()
        if self.running and today != self._hisab_date:
            self._watch_hisab(today)

        live = find_bucket(
            aggregate(
                [e for e in self.incomes if e.date == today],
                [e for e in self.expenses if e.date == today],
                [e for e in self.rents if e.date == today],
                PeriodMode.DAILY,
            ),
            today,
        )
        snapshot = reconcile_today(live, self._current_hisab(today), today)
        if not snapshot.is_reconciled:
            self._audit_logger.log_reconciliation_gap(today, str(snapshot.net))
        return snapshot

    def get_business_duration(self, now: Optional[date] = None) -> BusinessDuration:
        """How long the business has been running as of `now`."""
        now = now or date.fromisoformat(self._today())
        return elapsed(self._business.established_on, now)

    def search(self, collection: Collection, term: str) -> list[LedgerEntry]:
        """Entries of one ledger matching a search term, newest first."""
        collection = Collection(collection)
        if collection not in LEDGER_COLLECTIONS:
            raise ValueError(f"Not a ledger collection: {collection.value}")
        return search_entries(self._ledgers[collection], term)

    def get_income_ledger_totals(self, term: str = "") -> LedgerTotals:
        """Totals over the (optionally filtered) income ledger."""
        return income_totals(search_entries(self.incomes, term))

    def get_expense_totals(self, today: Optional[str] = None) -> ExpenseTotals:
        """Expense ledger totals for today and the current month."""
        return expense_totals(self.expenses, today or self._today())

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _current_hisab(self, today: str) -> Optional[DailyHisab]:
        if self._hisab_date != today:
            return None
        hisab, _ = self._validator.parse_hisab(list(self._hisab_documents), today)
        return hisab

    def _today(self) -> str:
        return datetime.now(ZoneInfo(self._business.timezone)).date().isoformat()


def _collection_names(settings: FirestoreSettings) -> dict[Collection, str]:
    return {
        Collection.INCOMES: settings.incomes_collection,
        Collection.EXPENSES: settings.expenses_collection,
        Collection.RENT_HISTORY: settings.rent_collection,
        Collection.DAILY_HISAB: settings.hisab_collection,
    }


def create_app_components(
    use_store: bool = True,
) -> tuple[DashboardService, LedgerStoreInterface]:
    """
    Factory function to create all application components.

    Args:
        use_store: Whether to connect the configured live store.
                   Set to False to run on an empty in-memory store.

    Returns:
        (dashboard, store)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)
    audit_logger = AuditLogger(history_size=settings.app.audit_history_size)

    store: LedgerStoreInterface
    collection_names: Optional[dict[Collection, str]] = None

    if use_store and settings.app.store_backend == "firestore":
        try:
            from src.services.storage.firestore import FirestoreLedgerStore

            firestore_settings = settings.firestore
            store = FirestoreLedgerStore(firestore_settings)
            collection_names = _collection_names(firestore_settings)
        except Exception as e:
            # Store not configured - continue on an empty in-memory store
            logger.warning("store_not_configured", error=str(e))
            audit_logger.log_error("store_not_configured", str(e))
            store = InMemoryLedgerStore()
    else:
        store = InMemoryLedgerStore()

    dashboard = DashboardService(
        store,
        audit_logger=audit_logger,
        business=settings.business,
        collection_names=collection_names,
    )
    return dashboard, store
