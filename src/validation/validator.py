"""
Ledger Entry Validation

DESIGN DECISION: Documents from the store are checked at one boundary,
here, before any report sees them. Each document goes through two steps:

STEP 1 - FIELD NORMALIZATION:
- The date must be a real YYYY-MM-DD calendar date, or the entry is excluded
- Missing or non-numeric amounts become zero
- Negated income-side expenses become magnitudes
- Unknown expense categories become "Others"

STEP 2 - SCHEMA VALIDATION:
- The cleaned document is validated against its Pydantic model
- Anything still rejected excludes that one entry

WHY AT THE BOUNDARY:
1. One bad record must never blank a whole report
2. The reports stay pure folds with no error paths
3. Every coercion is reported as a ValidationIssue, never silent
"""

import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Type, TypeVar

from pydantic import ValidationError

from src.models.ledger import (
    Collection,
    DailyHisab,
    ExpenseCategory,
    ExpenseEntry,
    IncomeEntry,
    LedgerEntry,
    RentEntry,
    ValidationIssue,
)
from src.services.storage.interface import RawDocument


EntryT = TypeVar("EntryT", bound=LedgerEntry)

# Entry model and monetary fields for each ledger collection
ENTRY_SCHEMAS: dict[Collection, tuple[Type[LedgerEntry], tuple[str, ...]]] = {
    Collection.INCOMES: (IncomeEntry, ("income", "expense")),
    Collection.EXPENSES: (ExpenseEntry, ("amount",)),
    Collection.RENT_HISTORY: (RentEntry, ("amount",)),
}


class MalformedEntryError(Exception):
    """A document field cannot be read as its declared type."""

    def __init__(self, field: str, issue_type: str, message: str):
        self.field = field
        self.issue_type = issue_type
        self.message = message
        super().__init__(message)


def parse_amount(value: Any) -> Decimal:
    """
    Read a monetary value.

    Accepts ints, floats, Decimals and numeric strings.

    Raises:
        MalformedEntryError: missing, boolean, non-numeric or non-finite
    """
    if value is None:
        raise MalformedEntryError("", "missing", "value is missing")
    if isinstance(value, bool):
        raise MalformedEntryError("", "not_numeric", f"{value!r} is not a number")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise MalformedEntryError("", "not_numeric", f"{value!r} is not finite")
        return Decimal(str(value))
    if isinstance(value, (int, Decimal)):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise MalformedEntryError("", "not_numeric", f"{value!r} is not a number")
    else:
        raise MalformedEntryError("", "not_numeric", f"{value!r} is not a number")
    if not result.is_finite():
        raise MalformedEntryError("", "not_numeric", f"{value!r} is not finite")
    return result


def parse_date(value: Any) -> str:
    """
    Read a calendar date string.

    Raises:
        MalformedEntryError: missing, not a string or not a real date
    """
    if value is None or value == "":
        raise MalformedEntryError("date", "missing", "date is missing")
    if not isinstance(value, str):
        raise MalformedEntryError("date", "invalid_format", f"date {value!r} is not a string")
    value = value.strip()
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise MalformedEntryError("date", "invalid_format", f"date {value!r} is not YYYY-MM-DD")
    return value


class EntryValidator:
    """
    Turns raw store documents into typed ledger entries.

    Never raises for a bad document; problems come back as issues.
    """

    def parse_entries(
        self,
        collection: Collection,
        documents: list[RawDocument],
    ) -> tuple[list[LedgerEntry], list[ValidationIssue]]:
        """
        Parse a full snapshot of one ledger collection.

        Returns:
            (entries in snapshot order, issues found)
        """
        model, amount_fields = ENTRY_SCHEMAS[collection]
        entries: list[LedgerEntry] = []
        issues: list[ValidationIssue] = []

        for document in documents:
            entry = self._parse_entry(collection, model, amount_fields, document, issues)
            if entry is not None:
                entries.append(entry)

        return entries, issues

    def parse_hisab(
        self,
        documents: list[RawDocument],
        today: str,
    ) -> tuple[Optional[DailyHisab], list[ValidationIssue]]:
        """
        Pick today's hisab out of a daily_hisab snapshot.

        Only a document dated exactly `today` counts.
        """
        issues: list[ValidationIssue] = []
        for document in documents:
            if document.get("date") != today:
                continue
            values: dict[str, Any] = {"date": today}
            for field in ("pastCash", "mainCash", "profitLoss"):
                values[field] = self._coerce_amount(
                    Collection.DAILY_HISAB, document, field, issues
                )
            return DailyHisab.model_validate(values), issues
        return None, issues

    def _parse_entry(
        self,
        collection: Collection,
        model: Type[EntryT],
        amount_fields: tuple[str, ...],
        document: RawDocument,
        issues: list[ValidationIssue],
    ) -> Optional[EntryT]:
        doc_id = self._doc_id(document)

        try:
            entry_date = parse_date(document.get("date"))
        except MalformedEntryError as e:
            issues.append(self._issue(collection, doc_id, e, severity="error"))
            return None

        values: dict[str, Any] = {
            "id": doc_id,
            "date": entry_date,
            "description": self._text(document.get("description")),
            "created_at": self._created_at(collection, document, issues),
        }
        for field in amount_fields:
            values[field] = self._coerce_amount(collection, document, field, issues)

        if collection == Collection.INCOMES:
            values["source"] = self._text(document.get("source")) or "Daily Summary"
        if collection == Collection.EXPENSES:
            values["category"] = self._category(collection, document, issues)

        try:
            return model.model_validate(values)
        except ValidationError as e:
            issues.append(ValidationIssue(
                collection=collection,
                document_id=values["id"],
                field=str(e.errors()[0]["loc"][0]) if e.errors() else "",
                issue_type="schema",
                message=f"Entry rejected: {e.error_count()} schema errors",
                severity="error",
            ))
            return None

    def _coerce_amount(
        self,
        collection: Collection,
        document: RawDocument,
        field: str,
        issues: list[ValidationIssue],
    ) -> Decimal:
        try:
            return parse_amount(document.get(field))
        except MalformedEntryError as e:
            e.field = field
            e.message = f"{field}: {e.message}; counted as 0"
            issues.append(self._issue(collection, self._doc_id(document), e, severity="warning"))
            return Decimal("0")

    def _category(
        self,
        collection: Collection,
        document: RawDocument,
        issues: list[ValidationIssue],
    ) -> ExpenseCategory:
        raw = document.get("category")
        try:
            return ExpenseCategory(raw.strip() if isinstance(raw, str) else raw)
        except ValueError:
            issues.append(ValidationIssue(
                collection=collection,
                document_id=self._doc_id(document),
                field="category",
                issue_type="unknown_category",
                message=f"Unknown category {raw!r}; filed under Others",
                severity="warning",
            ))
            return ExpenseCategory.OTHERS

    def _created_at(
        self,
        collection: Collection,
        document: RawDocument,
        issues: list[ValidationIssue],
    ) -> Optional[datetime]:
        raw = document.get("createdAt", document.get("created_at"))
        if raw is None or raw == "":
            return None
        if isinstance(raw, datetime):
            return raw
        try:
            return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
        except ValueError:
            issues.append(ValidationIssue(
                collection=collection,
                document_id=self._doc_id(document),
                field="createdAt",
                issue_type="invalid_format",
                message=f"createdAt {raw!r} is not a timestamp; ignored",
                severity="info",
            ))
            return None

    @staticmethod
    def _doc_id(document: RawDocument) -> Optional[str]:
        doc_id = document.get("id")
        return str(doc_id) if doc_id is not None else None

    @staticmethod
    def _text(value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @staticmethod
    def _issue(
        collection: Collection,
        document_id: Any,
        error: MalformedEntryError,
        severity: str,
    ) -> ValidationIssue:
        return ValidationIssue(
            collection=collection,
            document_id=str(document_id) if document_id is not None else None,
            field=error.field,
            issue_type=error.issue_type,
            message=error.message,
            severity=severity,
        )
