"""
Aggregation Engine

DESIGN DECISION: Every report is a full fold over the latest snapshot of
each ledger. There are no running counters carried between calls, so a
report can never mix a half-applied update with an old one.

The fold:
- Income entries add `income` to income and |expense| to expense
- Expense and rent entries add `amount` to expense
- One BucketSummary per key, sorted ascending by key

Zero-padded ISO keys sort chronologically as plain strings.
"""

from decimal import Decimal
from typing import Any, Iterable, Sequence

from src.models.ledger import ExpenseEntry, IncomeEntry, PeriodMode, RentEntry
from src.models.report import BucketSummary, ReportStats
from src.reports.bucketer import bucket_key
from src.validation.validator import MalformedEntryError, parse_amount


def _amount(value: Any) -> Decimal:
    """Missing or unreadable amounts count as zero."""
    try:
        return parse_amount(value)
    except MalformedEntryError:
        return Decimal("0")


def aggregate(
    incomes: Iterable[IncomeEntry],
    expenses: Iterable[ExpenseEntry],
    rents: Iterable[RentEntry],
    mode: PeriodMode,
) -> list[BucketSummary]:
    """
    Fold three ledgers into period buckets.

    Returns a new list on every call. Entries without a string date are
    left out rather than failing the report.
    """
    totals: dict[str, list[Decimal]] = {}

    def add(date: Any, income: Decimal, expense: Decimal) -> None:
        if not isinstance(date, str):
            return
        key = bucket_key(date, mode)
        bucket = totals.setdefault(key, [Decimal("0"), Decimal("0")])
        bucket[0] += income
        bucket[1] += expense

    for entry in incomes:
        add(
            getattr(entry, "date", None),
            _amount(getattr(entry, "income", None)),
            abs(_amount(getattr(entry, "expense", None))),
        )
    for entry in expenses:
        add(getattr(entry, "date", None), Decimal("0"), _amount(getattr(entry, "amount", None)))
    for entry in rents:
        add(getattr(entry, "date", None), Decimal("0"), _amount(getattr(entry, "amount", None)))

    return [
        BucketSummary.from_totals(key, income, expense)
        for key, (income, expense) in sorted(totals.items())
    ]


def report_stats(summaries: Sequence[BucketSummary]) -> ReportStats:
    """Latest bucket plus income and expense totals across all buckets."""
    current = summaries[-1] if summaries else BucketSummary.empty()
    return ReportStats(
        current=current,
        total_income=sum((s.income for s in summaries), Decimal("0")),
        total_expense=sum((s.expense for s in summaries), Decimal("0")),
    )


def find_bucket(summaries: Sequence[BucketSummary], key: str) -> BucketSummary:
    """The bucket with the given key, or an empty one."""
    for summary in summaries:
        if summary.bucket_key == key:
            return summary
    return BucketSummary.empty(key)
