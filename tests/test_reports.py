"""Tests for bucketing, aggregation, reconciliation, duration and ledger queries."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from src.models.ledger import (
    DailyHisab,
    ExpenseCategory,
    ExpenseEntry,
    IncomeEntry,
    PeriodMode,
    RentEntry,
)
from src.models.report import BucketSummary, BusinessDuration
from src.reports import (
    aggregate,
    bucket_key,
    elapsed,
    expense_totals,
    find_bucket,
    income_totals,
    reconcile_today,
    report_stats,
    search_entries,
)


def income(day: str, amount: int, expense: int = 0, **kwargs) -> IncomeEntry:
    return IncomeEntry(date=day, income=Decimal(amount), expense=Decimal(expense), **kwargs)


def expense(day: str, amount: int, **kwargs) -> ExpenseEntry:
    return ExpenseEntry(date=day, amount=Decimal(amount), **kwargs)


def rent(day: str, amount: int) -> RentEntry:
    return RentEntry(date=day, amount=Decimal(amount))


@pytest.fixture
def ledgers():
    incomes = [
        income("2025-02-03", 700, -100),
        income("2025-01-20", 400, 50),
        income("2025-01-05", 1000, 200),
        income("2024-12-31", 300),
    ]
    expenses = [
        expense("2025-02-03", 80, category=ExpenseCategory.BAZAR),
        expense("2025-01-05", 150, category=ExpenseCategory.ELECTRICITY),
    ]
    rents = [
        rent("2025-01-01", 5000),
        rent("2024-12-01", 5000),
    ]
    return incomes, expenses, rents


class TestBucketer:
    """Tests for bucket_key."""

    def test_daily_keeps_date(self):
        """Test that Daily returns the date unchanged."""
        assert bucket_key("2025-01-05", PeriodMode.DAILY) == "2025-01-05"

    def test_monthly_truncates_to_month(self):
        """Test that Monthly keeps YYYY-MM."""
        assert bucket_key("2025-01-05", PeriodMode.MONTHLY) == "2025-01"

    def test_yearly_truncates_to_year(self):
        """Test that Yearly keeps YYYY."""
        assert bucket_key("2025-01-05", PeriodMode.YEARLY) == "2025"

    def test_malformed_input_is_deterministic(self):
        """Test that malformed dates give a stable key instead of failing."""
        assert bucket_key("oops", PeriodMode.MONTHLY) == "oops"
        assert bucket_key("oops", PeriodMode.MONTHLY) == bucket_key("oops", PeriodMode.MONTHLY)
        assert bucket_key("", PeriodMode.YEARLY) == ""


class TestAggregate:
    """Tests for the aggregation engine."""

    def test_single_day_mixed_sources(self):
        """Test income, income-side expense and a shop expense on one day."""
        result = aggregate(
            [income("2025-01-01", 1000, 200)],
            [expense("2025-01-01", 150)],
            [],
            PeriodMode.DAILY,
        )
        assert result == [
            BucketSummary(
                bucket_key="2025-01-01",
                income=Decimal("1000"),
                expense=Decimal("350"),
                net=Decimal("650"),
            )
        ]

    def test_monthly_merge(self):
        """Test that two dates in one month collapse into one bucket."""
        result = aggregate(
            [income("2025-01-05", 1000), income("2025-01-20", 400)],
            [expense("2025-01-05", 150)],
            [rent("2025-01-20", 500)],
            PeriodMode.MONTHLY,
        )
        assert len(result) == 1
        assert result[0].bucket_key == "2025-01"
        assert result[0].income == Decimal("1400")
        assert result[0].expense == Decimal("650")
        assert result[0].net == Decimal("750")

    def test_sorted_ascending_by_key(self, ledgers):
        """Test that buckets come out oldest first regardless of input order."""
        keys = [s.bucket_key for s in aggregate(*ledgers, PeriodMode.DAILY)]
        assert keys == sorted(keys)
        assert keys[0] == "2024-12-01"
        assert keys[-1] == "2025-02-03"

    def test_keys_are_unique(self, ledgers):
        """Test that every bucket key appears once."""
        for mode in PeriodMode:
            keys = [s.bucket_key for s in aggregate(*ledgers, mode)]
            assert len(keys) == len(set(keys))

    def test_income_conservation(self, ledgers):
        """Test that daily bucket incomes sum to the ledger's income."""
        incomes, expenses, rents = ledgers
        result = aggregate(incomes, expenses, rents, PeriodMode.DAILY)
        assert sum(s.income for s in result) == sum(e.income for e in incomes)

    def test_expense_conservation(self, ledgers):
        """Test that bucket expenses sum to all three sources after normalization."""
        incomes, expenses, rents = ledgers
        result = aggregate(incomes, expenses, rents, PeriodMode.DAILY)
        expected = (
            sum(abs(e.expense) for e in incomes)
            + sum(e.amount for e in expenses)
            + sum(r.amount for r in rents)
        )
        assert sum(s.expense for s in result) == expected

    def test_net_invariant(self, ledgers):
        """Test that net is income minus expense in every bucket."""
        for mode in PeriodMode:
            for summary in aggregate(*ledgers, mode):
                assert summary.net == summary.income - summary.expense

    def test_idempotent(self, ledgers):
        """Test that identical inputs give equal, separate results."""
        first = aggregate(*ledgers, PeriodMode.MONTHLY)
        second = aggregate(*ledgers, PeriodMode.MONTHLY)
        assert first == second
        assert first is not second

    def test_monthly_coarsens_daily(self, ledgers):
        """Test that daily incomes in a month add up to the monthly bucket."""
        daily = aggregate(*ledgers, PeriodMode.DAILY)
        monthly = aggregate(*ledgers, PeriodMode.MONTHLY)
        for month in monthly:
            in_month = [d for d in daily if d.bucket_key.startswith(month.bucket_key)]
            assert sum(d.income for d in in_month) == month.income
            assert sum(d.expense for d in in_month) == month.expense

    def test_yearly_buckets(self, ledgers):
        """Test yearly totals."""
        result = aggregate(*ledgers, PeriodMode.YEARLY)
        assert [s.bucket_key for s in result] == ["2024", "2025"]
        assert result[0].income == Decimal("300")
        assert result[0].expense == Decimal("5000")

    def test_negated_income_expense_counts_as_expense(self):
        """Test that a negative income-side expense still adds to expense."""
        entry = IncomeEntry.model_construct(
            date="2025-01-01", income=Decimal("500"), expense=Decimal("-120")
        )
        result = aggregate([entry], [], [], PeriodMode.DAILY)
        assert result[0].expense == Decimal("120")
        assert result[0].net == Decimal("380")

    def test_missing_amounts_count_as_zero(self):
        """Test that unreadable amounts do not fail the report."""
        broken = ExpenseEntry.model_construct(date="2025-01-01", amount="n/a")
        missing = RentEntry.model_construct(date="2025-01-01", amount=None)
        result = aggregate([income("2025-01-01", 100)], [broken], [missing], PeriodMode.DAILY)
        assert result[0].income == Decimal("100")
        assert result[0].expense == Decimal("0")

    def test_entries_without_date_are_skipped(self):
        """Test that an entry without a date string is left out."""
        dateless = RentEntry.model_construct(date=None, amount=Decimal("99"))
        result = aggregate([], [], [dateless, rent("2025-01-01", 1)], PeriodMode.DAILY)
        assert [s.bucket_key for s in result] == ["2025-01-01"]

    def test_empty_inputs(self):
        """Test that no entries give no buckets."""
        assert aggregate([], [], [], PeriodMode.DAILY) == []


class TestReportStats:
    """Tests for report_stats and find_bucket."""

    def test_current_is_latest_bucket(self, ledgers):
        """Test that the current bucket is the last one."""
        summaries = aggregate(*ledgers, PeriodMode.MONTHLY)
        stats = report_stats(summaries)
        assert stats.current.bucket_key == "2025-02"
        assert stats.total_income == sum(s.income for s in summaries)
        assert stats.total_expense == sum(s.expense for s in summaries)

    def test_empty_report(self):
        """Test that an empty report has an all-zero current bucket."""
        stats = report_stats([])
        assert stats.current.net == Decimal("0")
        assert stats.total_income == Decimal("0")

    def test_find_bucket_missing_key(self, ledgers):
        """Test that a missing key gives an empty bucket with that key."""
        bucket = find_bucket(aggregate(*ledgers, PeriodMode.DAILY), "2030-01-01")
        assert bucket.bucket_key == "2030-01-01"
        assert bucket.income == Decimal("0")


class TestReconcileToday:
    """Tests for the snapshot reconciler."""

    def test_fallback_without_hisab(self):
        """Test that the headline is the live net when there is no hisab."""
        live = BucketSummary.from_totals("2025-01-01", Decimal("1000"), Decimal("350"))
        snapshot = reconcile_today(live, None, "2025-01-01")
        assert snapshot.hisab is None
        assert snapshot.headline_net == live.net
        assert snapshot.income == Decimal("1000")

    def test_hisab_is_authoritative(self):
        """Test that hisab figures are surfaced alongside the live breakdown."""
        live = BucketSummary.from_totals("2025-01-01", Decimal("1000"), Decimal("350"))
        hisab = DailyHisab(
            date="2025-01-01",
            past_cash=Decimal("2000"),
            main_cash=Decimal("2600"),
            profit_loss=Decimal("600"),
        )
        snapshot = reconcile_today(live, hisab, "2025-01-01")
        assert snapshot.headline_net == Decimal("600")
        assert snapshot.hisab.main_cash == Decimal("2600")
        assert snapshot.net == Decimal("650")
        assert snapshot.expense == Decimal("350")

    def test_hisab_for_another_day_is_ignored(self):
        """Test that only an exact date match counts."""
        live = BucketSummary.from_totals("2025-01-02", Decimal("10"), Decimal("0"))
        stale = DailyHisab(date="2025-01-01", profit_loss=Decimal("999"))
        snapshot = reconcile_today(live, stale, "2025-01-02")
        assert snapshot.hisab is None
        assert snapshot.headline_net == Decimal("10")


class TestElapsed:
    """Tests for the business duration calculator."""

    def test_same_day_is_zero(self):
        """Test elapsed(d, d) is zero."""
        d = date(2019, 5, 6)
        assert elapsed(d, d) == BusinessDuration(years=0, months=0, days=0)

    def test_exact_year(self):
        """Test one full year."""
        assert elapsed(date(2019, 5, 6), date(2020, 5, 6)) == BusinessDuration(years=1)

    def test_day_borrow_uses_previous_month_length(self):
        """Test that May's 31 days give 30, not 31."""
        assert elapsed(date(2019, 5, 6), date(2019, 6, 5)) == BusinessDuration(days=30)

    def test_month_borrow(self):
        """Test borrowing twelve months from the year."""
        assert elapsed(date(2019, 5, 6), date(2021, 2, 10)) == BusinessDuration(
            years=1, months=9, days=4
        )

    def test_day_and_month_borrow_together(self):
        """Test a day borrow that pushes months negative."""
        assert elapsed(date(2019, 5, 6), date(2020, 5, 1)) == BusinessDuration(
            years=0, months=11, days=25
        )

    def test_borrow_across_short_february(self):
        """Test that a 31st start date early in March stays non-negative."""
        result = elapsed(date(2019, 1, 31), date(2019, 3, 1))
        assert result == BusinessDuration(years=0, months=0, days=29)

    def test_leap_february(self):
        """Test the borrow uses February's leap-year length."""
        assert elapsed(date(2020, 1, 15), date(2020, 3, 10)) == BusinessDuration(
            months=1, days=24
        )

    def test_datetime_arguments(self):
        """Test that datetimes are compared by calendar date."""
        assert elapsed(date(2019, 5, 6), datetime(2019, 6, 5, 23, 59)) == BusinessDuration(days=30)
        assert elapsed(datetime(2019, 5, 6, 8, 0), datetime(2020, 5, 6, 7, 0)) == BusinessDuration(
            years=1
        )
        assert elapsed(date(2019, 5, 6), datetime(2019, 5, 6, 12, 0)) == BusinessDuration()

    def test_now_before_establishment_is_zero(self):
        """Test that a date before establishment clamps to zero."""
        assert elapsed(date(2019, 5, 6), date(2019, 1, 1)) == BusinessDuration()

    def test_fields_never_negative(self):
        """Test non-negative fields across a range of dates."""
        start = date(2019, 5, 31)
        for year in (2019, 2020, 2024):
            for month in range(1, 13):
                for day in (1, 15, 28):
                    now = date(year, month, day)
                    if now < start:
                        continue
                    result = elapsed(start, now)
                    assert result.years >= 0
                    assert 0 <= result.months < 12
                    assert 0 <= result.days < 31


class TestLedgerQueries:
    """Tests for ledger search and totals."""

    def test_search_matches_description_case_insensitive(self):
        """Test description search ignores case."""
        entries = [expense("2025-01-01", 10, description="Morning TEA"), expense("2025-01-02", 5)]
        assert search_entries(entries, "tea") == [entries[0]]

    def test_search_matches_category_and_source(self):
        """Test that category and source are searchable."""
        expenses = [
            expense("2025-01-01", 10, category=ExpenseCategory.ELECTRICITY),
            expense("2025-01-01", 10, category=ExpenseCategory.BAZAR),
        ]
        assert search_entries(expenses, "electric") == [expenses[0]]
        incomes = [income("2025-01-01", 10, source="Bkash"), income("2025-01-01", 10)]
        assert search_entries(incomes, "bkash") == [incomes[0]]

    def test_search_matches_date_substring(self):
        """Test that a month prefix finds entries in that month."""
        entries = [rent("2025-01-01", 1), rent("2024-12-01", 1)]
        assert search_entries(entries, "2025-01") == [entries[0]]

    def test_empty_search_returns_everything(self):
        """Test that an empty term matches all entries, order kept."""
        entries = [rent("2025-01-02", 1), rent("2025-01-01", 1)]
        assert search_entries(entries, "  ") == entries

    def test_income_totals_uses_expense_magnitude(self):
        """Test that income ledger net subtracts the expense magnitude."""
        entries = [income("2025-01-01", 1000, -200), income("2025-01-02", 500, 100)]
        totals = income_totals(entries)
        assert totals.income == Decimal("1500")
        assert totals.expense == Decimal("300")
        assert totals.net == Decimal("1200")

    def test_expense_totals_today_and_month(self):
        """Test expense totals for the day and its month."""
        entries = [
            expense("2025-01-20", 100),
            expense("2025-01-20", 50),
            expense("2025-01-02", 25),
            expense("2024-12-20", 1000),
        ]
        totals = expense_totals(entries, "2025-01-20")
        assert totals.today == Decimal("150")
        assert totals.month == Decimal("175")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
