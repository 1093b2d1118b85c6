"""
utils/dates.py
--------------
Calendar arithmetic shared by the recurrence and budget engines.

Month and year steps go through ``dateutil.relativedelta``, which clamps a
day that does not exist in the target month to that month's last day
(Jan 31 + 1 month -> Feb 28/29, Feb 29 + 1 year -> Feb 28).
"""

from datetime import date, datetime

from dateutil.relativedelta import relativedelta


def as_date(value: date | datetime) -> date:
    """Drop any time-of-day component so day differences stay whole."""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_days(anchor: date, days: int) -> date:
    return anchor + relativedelta(days=days)


def add_months(anchor: date, months: int) -> date:
    """Shift by whole months, clamping to the target month's last day."""
    return anchor + relativedelta(months=months)


def add_years(anchor: date, years: int) -> date:
    """Shift by whole years; Feb 29 lands on Feb 28 in non-leap years."""
    return anchor + relativedelta(years=years)


def month_anchor(year: int, month: int, day: int) -> date:
    """
    The date in ``year``/``month`` sharing ``day`` as day-of-month.

    Args:
        year: Target year.
        month: Target month (1-12).
        day: Desired day-of-month; clamped when the month is shorter.

    Returns:
        The clamped calendar date.
    """
    return date(year, month, 1) + relativedelta(day=day)


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (as_date(end) - as_date(start)).days
