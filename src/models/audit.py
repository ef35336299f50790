"""
Audit Models for Shop Ledger

Every significant thing that happens to the dashboard's inputs is logged.
This provides:
1. A trail of which snapshots fed which report
2. Debugging information when a figure looks wrong
3. Visibility into records that were coerced or dropped

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Live feed
    SUBSCRIPTION_STARTED = "subscription_started"
    SUBSCRIPTION_CANCELLED = "subscription_cancelled"
    SUBSCRIPTION_FAILED = "subscription_failed"
    SNAPSHOT_RECEIVED = "snapshot_received"

    # Entry boundary
    ENTRY_COERCED = "entry_coerced"
    ENTRY_EXCLUDED = "entry_excluded"

    # Reconciliation
    HISAB_RECEIVED = "hisab_received"
    RECONCILIATION_GAP = "reconciliation_gap"

    # Reports
    SUMMARIES_COMPUTED = "summaries_computed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which collection / document is this about?
    collection: Optional[str] = Field(
        default=None,
        description="Ledger collection the event relates to"
    )
    document_id: Optional[str] = Field(
        default=None,
        description="Store identity of the document, when known"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "collection": self.collection,
            "document_id": self.document_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.snapshot_received("incomes", 42)
        event = AuditEventBuilder.reconciliation_gap("2025-01-01", live_net)
    """

    @staticmethod
    def subscription_started(collection: str, order_by: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_STARTED,
            collection=collection,
            description=f"Watching {collection} ordered by {order_by}",
            details={"order_by": order_by},
        )

    @staticmethod
    def subscription_cancelled(collection: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_CANCELLED,
            collection=collection,
            description=f"Stopped watching {collection}",
        )

    @staticmethod
    def subscription_failed(
        collection: str,
        error_message: str,
        retained_entries: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_FAILED,
            severity=AuditSeverity.ERROR,
            collection=collection,
            description=f"Live feed for {collection} failed; keeping last snapshot",
            error_message=error_message,
            details={"retained_entries": retained_entries},
        )

    @staticmethod
    def snapshot_received(collection: str, entry_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_RECEIVED,
            severity=AuditSeverity.DEBUG,
            collection=collection,
            description=f"Snapshot of {collection} with {entry_count} entries",
            details={"entry_count": entry_count},
        )

    @staticmethod
    def entry_coerced(
        collection: str,
        document_id: Optional[str],
        field: str,
        message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_COERCED,
            severity=AuditSeverity.WARNING,
            collection=collection,
            document_id=document_id,
            description=f"Coerced {field}: {message}",
            details={"field": field},
        )

    @staticmethod
    def entry_excluded(
        collection: str,
        document_id: Optional[str],
        field: str,
        message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_EXCLUDED,
            severity=AuditSeverity.WARNING,
            collection=collection,
            document_id=document_id,
            description=f"Excluded entry: {message}",
            details={"field": field},
        )

    @staticmethod
    def hisab_received(date: str, profit_loss: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HISAB_RECEIVED,
            collection="daily_hisab",
            description=f"Hisab for {date}: profit/loss {profit_loss}",
            details={"date": date, "profit_loss": profit_loss},
        )

    @staticmethod
    def reconciliation_gap(date: str, live_net: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONCILIATION_GAP,
            collection="daily_hisab",
            description=f"No hisab for {date}; showing live net {live_net}",
            details={"date": date, "live_net": live_net},
        )

    @staticmethod
    def summaries_computed(mode: str, bucket_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARIES_COMPUTED,
            severity=AuditSeverity.DEBUG,
            description=f"{mode} report with {bucket_count} buckets",
            details={"mode": mode, "bucket_count": bucket_count},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
