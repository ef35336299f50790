"""
Ledger Data Models for Shop Ledger

These models define the schemas for documents read from the external
ledger store. They are designed to:
1. Give every ledger a typed shape before it reaches the reports
2. Settle sign and category ambiguity once, at the boundary
3. Accept the store's camelCase field names as well as Python names

DESIGN DECISION: Entries are produced by the entry validator, never by
the reports. Amounts that cannot be read still count as zero there.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Collection(str, Enum):
    """Collections the dashboard watches in the ledger store."""
    INCOMES = "incomes"
    EXPENSES = "expenses"
    RENT_HISTORY = "rent_history"
    DAILY_HISAB = "daily_hisab"


class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: Using a closed list rather than free text keeps the
    ledger groupable. OTHERS is the catch-all for anything unrecognized.
    """
    ELECTRICITY = "Electricity"
    INTERNET = "Internet/Wifi"
    STAFF_SALARY = "Staff Salary"
    TEA_SNACKS = "Tea & Snacks"
    SHOP_RENT = "Shop Rent"
    BABA = "Baba"
    MAINTENANCE = "Maintenance"
    BAZAR = "Bazar"
    OTHERS = "Others"


class PeriodMode(str, Enum):
    """Granularity of report buckets."""
    DAILY = "Daily"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


# =============================================================================
# LEDGER ENTRIES
# =============================================================================

class LedgerEntry(BaseModel):
    """
    Shape shared by every ledger entry.

    `date` is the ISO calendar date (YYYY-MM-DD) and the only key used
    for ordering and grouping. `created_at` is informational.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: Optional[str] = Field(
        default=None,
        description="Identity assigned by the store"
    )
    date: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="Calendar date of the entry (YYYY-MM-DD)"
    )
    description: str = Field(
        default="",
        description="Free-text note"
    )
    created_at: Optional[datetime] = Field(
        default=None,
        alias="createdAt",
        description="When the entry was written"
    )

    @field_validator('date')
    @classmethod
    def validate_calendar_date(cls, v: str) -> str:
        """The pattern alone would accept 2025-02-30."""
        datetime.strptime(v, "%Y-%m-%d")
        return v


class IncomeEntry(LedgerEntry):
    """
    A daily income summary.

    The store carries both sides of the day here: `income` and an
    `expense` that older records keep negated. We store the magnitude.
    """

    income: Decimal = Field(
        default=Decimal("0"),
        description="Money received"
    )
    expense: Decimal = Field(
        default=Decimal("0"),
        description="Money spent out of the day's takings (magnitude)"
    )
    source: str = Field(
        default="Daily Summary",
        description="Where the income came from"
    )

    @field_validator('expense')
    @classmethod
    def normalize_expense_sign(cls, v: Decimal) -> Decimal:
        return abs(v)


class ExpenseEntry(LedgerEntry):
    """A categorized shop expense."""

    amount: Decimal = Field(
        default=Decimal("0"),
        description="Amount spent"
    )
    category: ExpenseCategory = Field(
        default=ExpenseCategory.OTHERS,
        description="Expense category"
    )


class RentEntry(LedgerEntry):
    """A rent payment."""

    amount: Decimal = Field(
        default=Decimal("0"),
        description="Rent paid"
    )


class DailyHisab(BaseModel):
    """
    The externally produced cash reconciliation for one day.

    Read-only to this system. At most one exists per date.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    date: str = Field(
        ...,
        description="Calendar date the reconciliation covers"
    )
    past_cash: Decimal = Field(
        default=Decimal("0"),
        alias="pastCash",
        description="Cash carried over from the previous day"
    )
    main_cash: Decimal = Field(
        default=Decimal("0"),
        alias="mainCash",
        description="Cash on hand"
    )
    profit_loss: Decimal = Field(
        default=Decimal("0"),
        alias="profitLoss",
        description="Authoritative profit or loss for the day"
    )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found while reading a ledger document."""

    collection: Collection = Field(
        ...,
        description="Collection the document came from"
    )
    document_id: Optional[str] = Field(
        default=None,
        description="Store identity of the document, when known"
    )
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_numeric', 'unknown_category')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="error: entry excluded, warning: value coerced"
    )
