"""
Snapshot Reconciler

Builds the "today" view from two sources that are allowed to disagree:

1. The live ledger bucket for today (income, expense, net)
2. The daily hisab written by the shop's reconciliation process

When the hisab exists its profit/loss is the headline and the live
breakdown is shown next to it. When it does not exist yet the headline is
the live net. That is a normal state for most of the day, not a failure,
and no attempt is made to make the two numbers agree.
"""

from typing import Optional

from src.models.ledger import DailyHisab
from src.models.report import BucketSummary, TodaySnapshot


def reconcile_today(
    live_bucket: BucketSummary,
    hisab: Optional[DailyHisab],
    today: str,
) -> TodaySnapshot:
    """
    Merge today's live bucket with today's hisab.

    The hisab only counts if it is dated exactly `today`.
    """
    if hisab is not None and hisab.date != today:
        hisab = None

    return TodaySnapshot(
        date=today,
        income=live_bucket.income,
        expense=live_bucket.expense,
        net=live_bucket.net,
        hisab=hisab,
    )
