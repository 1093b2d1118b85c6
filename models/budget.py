"""
models/budget.py
----------------
Domain models for budgets and their derived statistics.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Threshold(str, Enum):
    OK = "ok"
    WARNING = "warning"
    EXCEEDED = "exceeded"


@dataclass(frozen=True)
class Budget:
    """
    A spending limit for one category over a rolling period.

    Attributes:
        owner_id: Opaque id of the owning user.
        category: Expense category the limit applies to.
        limit_amount: Positive limit per period.
        period: Weekly, monthly or yearly.
        start_date: Anchor for period-window computation.
        id: Database primary key (None for new records).
        created_at: Timestamp when the record was created.
    """
    owner_id: str
    category: str
    limit_amount: Decimal
    period: BudgetPeriod
    start_date: date
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class BudgetWindow:
    """Half-open date range [start, end)."""
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


@dataclass(frozen=True)
class BudgetStats:
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal


@dataclass(frozen=True)
class BudgetReport:
    """Everything a budget display needs for the current period."""
    budget: Budget
    window: BudgetWindow
    stats: BudgetStats
    threshold: Threshold


@dataclass(frozen=True)
class BudgetOverview:
    total_limit: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    over_budget: list[BudgetReport] = field(default_factory=list)
    highest_usage: list[BudgetReport] = field(default_factory=list)
