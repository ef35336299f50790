"""Elapsed business time in years, months and days."""

import calendar
from datetime import date, datetime

from src.models.report import BusinessDuration


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def elapsed(establishment: date, now: date) -> BusinessDuration:
    """
    Field-wise difference between two dates.

    A negative day count borrows the length of the month before `now`'s
    month; a negative month count borrows twelve months from the years.
    When one month's borrow is not enough (establishment on the 31st,
    `now` early in March) the borrow continues into the month before.

    Examples:
        elapsed(date(2019, 5, 6), date(2020, 5, 6)) -> 1y 0m 0d
        elapsed(date(2019, 5, 6), date(2019, 6, 5)) -> 0y 0m 30d

    A `now` earlier than `establishment` gives zero. Datetimes are reduced
    to their calendar date.
    """
    if isinstance(establishment, datetime):
        establishment = establishment.date()
    if isinstance(now, datetime):
        now = now.date()

    if now <= establishment:
        return BusinessDuration()

    years = now.year - establishment.year
    months = now.month - establishment.month
    days = now.day - establishment.day

    borrow_year, borrow_month = now.year, now.month
    while days < 0:
        borrow_year, borrow_month = _previous_month(borrow_year, borrow_month)
        months -= 1
        days += _days_in_month(borrow_year, borrow_month)

    if months < 0:
        years -= 1
        months += 12

    return BusinessDuration(years=years, months=months, days=days)
