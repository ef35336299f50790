"""
Ledger Queries

Read-only views over a single ledger snapshot: text search and the
summary cards shown above each ledger (income page totals, expense page
today/month totals).

Like the aggregator, every function here is a pure pass over the entries
it is given.
"""

from decimal import Decimal
from typing import Iterable, Sequence, TypeVar

from src.models.ledger import ExpenseEntry, IncomeEntry, LedgerEntry
from src.models.report import ExpenseTotals, LedgerTotals


EntryT = TypeVar("EntryT", bound=LedgerEntry)


def _search_text(entry: LedgerEntry) -> list[str]:
    texts = [entry.description]
    source = getattr(entry, "source", None)
    if source:
        texts.append(source)
    category = getattr(entry, "category", None)
    if category is not None:
        texts.append(category.value)
    return texts


def search_entries(entries: Sequence[EntryT], term: str) -> list[EntryT]:
    """
    Filter entries by a search term.

    Matches case-insensitively against description, source and category,
    and as a plain substring of the date (so "2025-01" finds a month).
    An empty term matches everything. Order is preserved.
    """
    needle = term.strip().lower()
    if not needle:
        return list(entries)
    return [
        entry for entry in entries
        if needle in entry.date
        or any(needle in text.lower() for text in _search_text(entry))
    ]


def income_totals(entries: Iterable[IncomeEntry]) -> LedgerTotals:
    """
    Totals of an income ledger slice.

    The income-side expense is a magnitude, so net is income minus expense.
    """
    income = Decimal("0")
    expense = Decimal("0")
    for entry in entries:
        income += entry.income
        expense += abs(entry.expense)
    return LedgerTotals(income=income, expense=expense, net=income - expense)


def expense_totals(entries: Iterable[ExpenseEntry], today: str) -> ExpenseTotals:
    """Expense ledger totals for `today` and for today's month."""
    month = today[:7]
    day_total = Decimal("0")
    month_total = Decimal("0")
    for entry in entries:
        if entry.date == today:
            day_total += entry.amount
        if entry.date.startswith(month):
            month_total += entry.amount
    return ExpenseTotals(today=day_total, month=month_total)
