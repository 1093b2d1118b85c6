"""
services/budget_period_engine.py
--------------------------------
Pure budget-period rules: the current window for a budget and the
spent/remaining/percent statistics for the expenses inside it.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from config import BUDGET_EXCEEDED_PERCENT, BUDGET_WARNING_PERCENT
from models.budget import Budget, BudgetPeriod, BudgetStats, BudgetWindow, Threshold
from models.transaction import ExpenseRecord
from utils.dates import add_days, days_between, month_anchor
from utils.exceptions import InvalidAnchor

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def _previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def _next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def compute_window(period: BudgetPeriod | str, start_date: date, today: date) -> BudgetWindow:
    """
    The period window containing ``today``.

    Monthly and yearly windows are re-anchored on ``start_date``'s day (and
    month) every period, so a 31st anchor gives Feb 28 -> Mar 31 rather than
    drifting to the 28th.

    Raises:
        InvalidAnchor: If ``start_date`` is after ``today``.
        ValueError: If ``period`` is unknown.
    """
    period = BudgetPeriod(period)
    if start_date > today:
        raise InvalidAnchor(
            f"Budget starts on {start_date}, after {today}",
            code="FUTURE_START",
        )

    if period == BudgetPeriod.WEEKLY:
        weeks = days_between(start_date, today) // 7
        start = add_days(start_date, weeks * 7)
        return BudgetWindow(start=start, end=add_days(start, 7))

    day = start_date.day
    if period == BudgetPeriod.MONTHLY:
        year, month = today.year, today.month
        if month_anchor(year, month, day) > today:
            year, month = _previous_month(year, month)
        end_year, end_month = _next_month(year, month)
        return BudgetWindow(
            start=month_anchor(year, month, day),
            end=month_anchor(end_year, end_month, day),
        )

    year = today.year
    if month_anchor(year, start_date.month, day) > today:
        year -= 1
    return BudgetWindow(
        start=month_anchor(year, start_date.month, day),
        end=month_anchor(year + 1, start_date.month, day),
    )


def compute_stats(budget: Budget, matching_expenses: Iterable[ExpenseRecord]) -> BudgetStats:
    """
    Aggregate already-filtered expenses against the budget limit.

    The caller is responsible for owner/category/kind/window filtering.
    An empty input yields zero spend and zero percent.
    """
    limit = Decimal(budget.limit_amount)
    spent = sum((Decimal(e.amount) for e in matching_expenses), _ZERO)
    percent = spent * _HUNDRED / limit if limit > 0 else _ZERO
    return BudgetStats(spent=spent, remaining=limit - spent, percent_used=percent)


def classify_threshold(
    percent_used: Decimal | float,
    warning_at: float = BUDGET_WARNING_PERCENT,
    exceeded_at: float = BUDGET_EXCEEDED_PERCENT,
) -> Threshold:
    if percent_used >= exceeded_at:
        return Threshold.EXCEEDED
    if percent_used >= warning_at:
        return Threshold.WARNING
    return Threshold.OK
