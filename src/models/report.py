"""
Report Models for Shop Ledger

Everything in this module is derived. Nothing here is persisted: a new
set of objects is built on every recomputation and thrown away after the
caller reads it.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.ledger import DailyHisab


class BucketSummary(BaseModel):
    """
    Totals for one period bucket (a day, a month or a year).

    INVARIANT: net == income - expense.
    """
    model_config = ConfigDict(frozen=True)

    bucket_key: str = Field(
        ...,
        description="YYYY-MM-DD, YYYY-MM or YYYY depending on the period mode"
    )
    income: Decimal = Field(default=Decimal("0"))
    expense: Decimal = Field(default=Decimal("0"))
    net: Decimal = Field(default=Decimal("0"))

    @model_validator(mode='after')
    def validate_net(self) -> 'BucketSummary':
        if self.net != self.income - self.expense:
            raise ValueError("Net must equal income minus expense")
        return self

    @classmethod
    def from_totals(
        cls,
        bucket_key: str,
        income: Decimal,
        expense: Decimal,
    ) -> 'BucketSummary':
        return cls(
            bucket_key=bucket_key,
            income=income,
            expense=expense,
            net=income - expense,
        )

    @classmethod
    def empty(cls, bucket_key: str = "") -> 'BucketSummary':
        return cls.from_totals(bucket_key, Decimal("0"), Decimal("0"))


class TodaySnapshot(BaseModel):
    """
    The dashboard's view of today.

    Two sources of truth meet here. The live breakdown comes from the
    ledgers; the hisab, when present, is the reconciled figure produced
    elsewhere. They can disagree until the reconciliation catches up.
    """
    model_config = ConfigDict(frozen=True)

    date: str
    income: Decimal = Field(default=Decimal("0"))
    expense: Decimal = Field(default=Decimal("0"))
    net: Decimal = Field(default=Decimal("0"))
    hisab: Optional[DailyHisab] = None

    @property
    def is_reconciled(self) -> bool:
        return self.hisab is not None

    @property
    def headline_net(self) -> Decimal:
        """Profit/loss from the hisab when there is one, else the live net."""
        if self.hisab is not None:
            return self.hisab.profit_loss
        return self.net

    @property
    def discrepancy(self) -> Optional[Decimal]:
        """How far the hisab is from the live net (None when unreconciled)."""
        if self.hisab is None:
            return None
        return self.hisab.profit_loss - self.net


class BusinessDuration(BaseModel):
    """Time the business has been running."""
    model_config = ConfigDict(frozen=True)

    years: int = Field(default=0, ge=0)
    months: int = Field(default=0, ge=0, lt=12)
    days: int = Field(default=0, ge=0, lt=31)


class BusinessProfile(BaseModel):
    """Static facts about the business."""
    model_config = ConfigDict(frozen=True)

    name: str
    owner: str
    established_on: date


class ReportStats(BaseModel):
    """Headline figures for a report: the latest bucket and overall totals."""
    model_config = ConfigDict(frozen=True)

    current: BucketSummary
    total_income: Decimal = Field(default=Decimal("0"))
    total_expense: Decimal = Field(default=Decimal("0"))

    @property
    def total_net(self) -> Decimal:
        return self.total_income - self.total_expense


class LedgerTotals(BaseModel):
    """Income, expense and net over a slice of one ledger."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = Field(default=Decimal("0"))
    expense: Decimal = Field(default=Decimal("0"))
    net: Decimal = Field(default=Decimal("0"))


class ExpenseTotals(BaseModel):
    """Expense ledger totals for today and the current month."""
    model_config = ConfigDict(frozen=True)

    today: Decimal = Field(default=Decimal("0"))
    month: Decimal = Field(default=Decimal("0"))
