"""
Shop Ledger - Source Package

The bookkeeping core behind a small shop's dashboard: it watches the
income, expense and rent ledgers kept in an external store and turns them
into daily, monthly and yearly summaries plus a "today" view.

DESIGN PRINCIPLES:
1. Ledgers are replaced wholesale, never patched
2. Summaries are recomputed in full from the latest ledgers
3. One bad record never blanks a report
4. Stale data beats a blank screen
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Shop Ledger Team"
