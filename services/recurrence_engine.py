"""
services/recurrence_engine.py
-----------------------------
Pure scheduling rules for recurring transactions.

Nothing here reads the clock or touches storage: every function takes
``today`` explicitly and returns new values instead of mutating its input.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable

from models.recurring import (
    DueStatus,
    Frequency,
    RecurringTransaction,
    ScheduleFilter,
    ScheduleItem,
)
from models.transaction import Transaction
from utils.dates import add_days, add_months, add_years, days_between
from utils.exceptions import ExhaustedRecurrence

# Upper bound of days_until kept by each schedule window (lower bound is 0).
_WINDOW_DAYS = {
    ScheduleFilter.UPCOMING: 7,
    ScheduleFilter.THIS_WEEK: 7,
    ScheduleFilter.THIS_MONTH: 30,
}

# Occurrences per month, for monthly-equivalent totals.
MONTHLY_MULTIPLIERS = {
    Frequency.DAILY: Decimal(365) / Decimal(12),
    Frequency.WEEKLY: Decimal(52) / Decimal(12),
    Frequency.BIWEEKLY: Decimal(26) / Decimal(12),
    Frequency.MONTHLY: Decimal(1),
    Frequency.QUARTERLY: Decimal(1) / Decimal(3),
    Frequency.YEARLY: Decimal(1) / Decimal(12),
}


def compute_next_occurrence(anchor: date, frequency: Frequency | str) -> date:
    """
    Advance ``anchor`` by exactly one step of ``frequency``.

    Month-based steps clamp to the last day of the target month, so
    Jan 31 monthly gives Feb 28 (Feb 29 in leap years).

    Raises:
        ValueError: If ``frequency`` is not a known Frequency.
    """
    frequency = Frequency(frequency)
    if frequency == Frequency.DAILY:
        return add_days(anchor, 1)
    if frequency == Frequency.WEEKLY:
        return add_days(anchor, 7)
    if frequency == Frequency.BIWEEKLY:
        return add_days(anchor, 14)
    if frequency == Frequency.MONTHLY:
        return add_months(anchor, 1)
    if frequency == Frequency.QUARTERLY:
        return add_months(anchor, 3)
    return add_years(anchor, 1)


def days_until(recurring: RecurringTransaction, today: date) -> int:
    return days_between(today, recurring.next_occurrence_date)


def status_for(days: int) -> DueStatus:
    if days < 0:
        return DueStatus.OVERDUE
    if days == 0:
        return DueStatus.DUE_TODAY
    if days == 1:
        return DueStatus.DUE_TOMORROW
    return DueStatus.UPCOMING


def classify(recurring: RecurringTransaction, today: date) -> ScheduleItem:
    """
    Classify a definition relative to ``today``.

    Works for inactive and exhausted definitions too (history views);
    the query functions below are the ones that exclude them.
    """
    days = days_until(recurring, today)
    return ScheduleItem(recurring=recurring, days_until=days, status=status_for(days))


def _sort_key(item: ScheduleItem):
    return (item.days_until, item.recurring.category, item.recurring.id or 0)


def list_schedule(
    definitions: Iterable[RecurringTransaction],
    today: date,
    schedule_filter: ScheduleFilter | str = ScheduleFilter.UPCOMING,
) -> list[ScheduleItem]:
    """
    Schedulable definitions ordered by proximity, most overdue first.

    Overdue items are always kept; the filter only bounds how far into the
    future the list reaches (``all`` keeps everything).
    """
    schedule_filter = ScheduleFilter(schedule_filter)
    items = sorted(
        (classify(r, today) for r in definitions if r.is_schedulable),
        key=_sort_key,
    )
    limit = _WINDOW_DAYS.get(schedule_filter)
    if limit is None:
        return items
    # Overdue items (negative days) pass the upper bound automatically.
    return [item for item in items if item.days_until <= limit]


def list_due(definitions: Iterable[RecurringTransaction], today: date) -> list[RecurringTransaction]:
    """Schedulable definitions whose next occurrence is today or earlier."""
    return [
        item.recurring
        for item in list_schedule(definitions, today, ScheduleFilter.ALL)
        if item.days_until <= 0
    ]


def list_reminders(
    definitions: Iterable[RecurringTransaction],
    today: date,
) -> list[ScheduleItem]:
    """Upcoming occurrences that fall inside their own reminder lead time."""
    return [
        item
        for item in list_schedule(definitions, today, ScheduleFilter.ALL)
        if item.recurring.notification_enabled
        and 0 <= item.days_until <= item.recurring.notification_days_before
    ]


def process(
    recurring: RecurringTransaction,
    today: date,
) -> tuple[Transaction, RecurringTransaction]:
    """
    Materialize exactly one occurrence.

    The ledger entry is dated to the scheduled occurrence, not to ``today``.
    The returned definition has ``next_occurrence_date`` advanced by one
    frequency step; missed periods are never collapsed into one call.
    ``today`` is accepted for signature symmetry with the other queries
    and is not used to fast-forward.

    Raises:
        ExhaustedRecurrence: If the definition is inactive or past its end date.
    """
    if not recurring.is_active:
        raise ExhaustedRecurrence(
            f"Recurring transaction #{recurring.id} is inactive",
            code="INACTIVE",
        )
    if recurring.is_exhausted:
        raise ExhaustedRecurrence(
            f"Recurring transaction #{recurring.id} ended on {recurring.end_date}",
            code="EXHAUSTED",
        )

    occurrence = recurring.next_occurrence_date
    entry = Transaction(
        owner_id=recurring.owner_id,
        kind=recurring.kind,
        category=recurring.category,
        amount=recurring.amount,
        date=occurrence,
        description=recurring.description or f"Recurring: {recurring.category}",
        recurring_id=recurring.id,
    )
    updated = replace(
        recurring,
        next_occurrence_date=compute_next_occurrence(occurrence, recurring.frequency),
        last_processed_date=occurrence,
    )
    return entry, updated


def toggle_status(recurring: RecurringTransaction, active: bool) -> RecurringTransaction:
    """
    Flip ``is_active`` only.

    Reactivation does not fast-forward ``next_occurrence_date``; a long
    dormant definition comes back overdue and must be processed one
    occurrence at a time.
    """
    return replace(recurring, is_active=active)


def reschedule(recurring: RecurringTransaction, frequency: Frequency | str) -> RecurringTransaction:
    """
    Switch a definition to ``frequency``.

    The next occurrence moves to the first date of the new schedule,
    stepped from ``start_date``, that is not before the current
    ``next_occurrence_date``.
    """
    frequency = Frequency(frequency)
    candidate = recurring.start_date
    while candidate < recurring.next_occurrence_date:
        candidate = compute_next_occurrence(candidate, frequency)
    return replace(recurring, frequency=frequency, next_occurrence_date=candidate)


def monthly_equivalent(recurring: RecurringTransaction) -> Decimal:
    """Amount normalized to one month at the definition's frequency."""
    return recurring.amount * MONTHLY_MULTIPLIERS[Frequency(recurring.frequency)]
