"""
Audit Logger

DESIGN DECISION: Everything that changes what the dashboard shows is logged.
This provides:
1. Traceability from a displayed figure back to the snapshots behind it
2. Debugging capability when ledgers and hisab disagree
3. A visible record of coerced and excluded documents

The audit logger:
- Is synchronous; it runs inside snapshot callbacks
- Keeps a bounded in-memory history for inspection
- Emits every event as a structured log line
"""

import logging
import sys
from collections import deque
from typing import Optional

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditEventType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(log_level: str = "INFO") -> None:
    """Route structlog output to stdout at the given level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory ring buffer (for the dashboard and tests)
    """

    def __init__(self, history_size: int = 500):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("shop_ledger.audit")

    @property
    def history(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._history)

    def events_of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        return [e for e in self._history if e.event_type == event_type]

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and remember it."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_subscription_started(self, collection: str, order_by: str) -> None:
        self.log(AuditEventBuilder.subscription_started(collection, order_by))

    def log_subscription_cancelled(self, collection: str) -> None:
        self.log(AuditEventBuilder.subscription_cancelled(collection))

    def log_subscription_failed(
        self,
        collection: str,
        error_message: str,
        retained_entries: int,
    ) -> None:
        """Log a live feed failure."""
        self.log(AuditEventBuilder.subscription_failed(
            collection=collection,
            error_message=error_message,
            retained_entries=retained_entries,
        ))

    def log_snapshot_received(self, collection: str, entry_count: int) -> None:
        self.log(AuditEventBuilder.snapshot_received(collection, entry_count))

    def log_entry_coerced(
        self,
        collection: str,
        document_id: Optional[str],
        field: str,
        message: str,
    ) -> None:
        self.log(AuditEventBuilder.entry_coerced(
            collection=collection,
            document_id=document_id,
            field=field,
            message=message,
        ))

    def log_entry_excluded(
        self,
        collection: str,
        document_id: Optional[str],
        field: str,
        message: str,
    ) -> None:
        self.log(AuditEventBuilder.entry_excluded(
            collection=collection,
            document_id=document_id,
            field=field,
            message=message,
        ))

    def log_hisab_received(self, date: str, profit_loss: str) -> None:
        self.log(AuditEventBuilder.hisab_received(date, profit_loss))

    def log_reconciliation_gap(self, date: str, live_net: str) -> None:
        """Log that today's hisab has not arrived yet (not an error)."""
        self.log(AuditEventBuilder.reconciliation_gap(date, live_net))

    def log_summaries_computed(self, mode: str, bucket_count: int) -> None:
        self.log(AuditEventBuilder.summaries_computed(mode, bucket_count))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
