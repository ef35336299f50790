"""
Data Models Package

This package contains all Pydantic models used by Shop Ledger.
Ledger documents are parsed into these schemas before any report sees them.
"""

from src.models.ledger import (
    Collection,
    DailyHisab,
    ExpenseCategory,
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
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Collection",
    "DailyHisab",
    "ExpenseCategory",
    "ExpenseEntry",
    "IncomeEntry",
    "LedgerEntry",
    "PeriodMode",
    "RentEntry",
    "ValidationIssue",
    # Report models
    "BucketSummary",
    "BusinessDuration",
    "BusinessProfile",
    "ExpenseTotals",
    "LedgerTotals",
    "ReportStats",
    "TodaySnapshot",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
