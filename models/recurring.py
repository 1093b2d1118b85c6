"""
models/recurring.py
-------------------
Domain model for recurring (scheduled) income and expenses.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


FREQUENCY_LABELS = {
    Frequency.DAILY: "Daily",
    Frequency.WEEKLY: "Weekly",
    Frequency.BIWEEKLY: "Bi-weekly",
    Frequency.MONTHLY: "Monthly",
    Frequency.QUARTERLY: "Quarterly",
    Frequency.YEARLY: "Yearly",
}


def format_frequency(frequency: str) -> str:
    """Human label for a frequency; unknown values are returned as given."""
    try:
        return FREQUENCY_LABELS[Frequency(frequency)]
    except ValueError:
        return frequency


class DueStatus(str, Enum):
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    DUE_TOMORROW = "due_tomorrow"
    UPCOMING = "upcoming"


class ScheduleFilter(str, Enum):
    UPCOMING = "upcoming"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    ALL = "all"


@dataclass(frozen=True)
class RecurringTransaction:
    """
    A recurring income or expense definition (salary, rent, subscription...).

    Instances are immutable: edits and processing produce a new value via
    ``dataclasses.replace`` and the repository persists it.

    Attributes:
        owner_id: Opaque id of the owning user.
        kind: Income or expense.
        category: Free-form category name.
        amount: Positive amount per occurrence.
        frequency: Schedule step.
        start_date: Schedule anchor.
        next_occurrence_date: Next date an entry should be materialized.
        end_date: Inclusive last allowed occurrence (None = open-ended).
        description: Optional note copied onto generated entries.
        is_active: Inactive definitions stay for history only.
        notification_enabled: Whether reminders are wanted.
        notification_days_before: Reminder lead time in days.
        last_processed_date: Date of the last materialized occurrence.
        id: Database primary key (None for new records).
        created_at: Timestamp when the record was created.
    """
    owner_id: str
    kind: TransactionKind
    category: str
    amount: Decimal
    frequency: Frequency
    start_date: date
    next_occurrence_date: date
    end_date: Optional[date] = None
    description: Optional[str] = None
    is_active: bool = True
    notification_enabled: bool = True
    notification_days_before: int = 1
    last_processed_date: Optional[date] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_exhausted(self) -> bool:
        """True once the next occurrence falls after ``end_date``."""
        return self.end_date is not None and self.next_occurrence_date > self.end_date

    @property
    def is_schedulable(self) -> bool:
        """Active and not exhausted: eligible for due/schedule queries."""
        return self.is_active and not self.is_exhausted

    def __str__(self) -> str:
        status = "active" if self.is_active else "paused"
        return (
            f"[{status}] {self.category}: {self.amount:.2f} {self.kind.value} "
            f"({format_frequency(self.frequency)}) - next: {self.next_occurrence_date}"
        )


@dataclass(frozen=True)
class ScheduleItem:
    """A definition paired with its whole-day distance from today."""
    recurring: RecurringTransaction
    days_until: int
    status: DueStatus
