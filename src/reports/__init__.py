"""Report building package."""

from src.reports.aggregator import aggregate, find_bucket, report_stats
from src.reports.bucketer import bucket_key
from src.reports.duration import elapsed
from src.reports.ledger import expense_totals, income_totals, search_entries
from src.reports.reconciler import reconcile_today

__all__ = [
    "aggregate",
    "bucket_key",
    "elapsed",
    "expense_totals",
    "find_bucket",
    "income_totals",
    "reconcile_today",
    "report_stats",
    "search_entries",
]
