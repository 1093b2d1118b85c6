"""
services/recurring_service.py
------------------------------
Business logic for managing recurring transactions.
Orchestrates between the recurrence engine, the stores and the clock.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from db.connection import transaction
from models.recurring import (
    Frequency,
    RecurringTransaction,
    ScheduleFilter,
    ScheduleItem,
    TransactionKind,
)
from models.transaction import Transaction
from repositories.base import LedgerStore, RecurringStore
from repositories.recurring_repo import RecurringRepository
from repositories.transaction_repo import TransactionRepository
from services import recurrence_engine as engine
from utils.clock import SystemClock
from utils.exceptions import FinanceError, NotFoundError, ValidationError
from utils.logger import get_logger
from utils.validation import clean_amount, clean_category, clean_choice, clean_date, require_owner

logger = get_logger(__name__)

_EDITABLE_FIELDS = {
    "kind", "category", "amount", "description", "frequency", "end_date",
    "notification_enabled", "notification_days_before",
}


def _clean_reminder_days(days) -> int:
    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        raise ValidationError("Reminder days must be a whole number >= 0", code="INVALID_NOTIFICATION")
    return days


class RecurringService:
    """
    Handles all business logic for recurring transactions.

    Responsibilities:
        - Validate and persist definitions.
        - Answer schedule, due and reminder queries against one clock reading.
        - Materialize due occurrences atomically with the definition advance.
    """

    def __init__(
        self,
        repo: Optional[RecurringStore] = None,
        ledger: Optional[LedgerStore] = None,
        clock=None,
        unit_of_work: Callable = transaction,
    ):
        self.repo = repo or RecurringRepository()
        self.ledger = ledger or TransactionRepository()
        self.clock = clock or SystemClock()
        self.unit_of_work = unit_of_work

    # ── CRUD ──────────────────────────────────────────────

    def create(
        self,
        owner_id: str,
        kind: str,
        category: str,
        amount,
        frequency: str,
        start_date,
        description: Optional[str] = None,
        end_date=None,
        notification_enabled: bool = True,
        notification_days_before: int = 1,
    ) -> RecurringTransaction:
        """
        Validate and save a new recurring definition.

        The first scheduled occurrence is one frequency step after
        ``start_date``.

        Raises:
            ValidationError: On any invalid field.
        """
        require_owner(owner_id)
        frequency = clean_choice(Frequency, frequency, "INVALID_FREQUENCY")
        start = clean_date(start_date, "start date")
        end = clean_date(end_date, "end date") if end_date is not None else None
        if end is not None and end < start:
            raise ValidationError("End date must not precede start date", code="INVALID_DATE")
        notification_days_before = _clean_reminder_days(notification_days_before)

        recurring = RecurringTransaction(
            owner_id=owner_id,
            kind=clean_choice(TransactionKind, kind, "INVALID_TYPE"),
            category=clean_category(category),
            amount=clean_amount(amount),
            frequency=frequency,
            start_date=start,
            next_occurrence_date=engine.compute_next_occurrence(start, frequency),
            end_date=end,
            description=description or None,
            notification_enabled=notification_enabled,
            notification_days_before=notification_days_before,
        )
        return self.repo.add(recurring)

    def get(self, owner_id: str, recurring_id: int) -> RecurringTransaction:
        """
        Raises:
            NotFoundError: Unknown id or another owner's definition.
        """
        recurring = self.repo.get_by_id(recurring_id, owner_id)
        if recurring is None:
            raise NotFoundError(f"Recurring #{recurring_id} not found", code="NOT_FOUND")
        return recurring

    def list_all(self, owner_id: str) -> list[RecurringTransaction]:
        require_owner(owner_id)
        return self.repo.list(owner_id)

    def update(self, owner_id: str, recurring_id: int, **changes) -> RecurringTransaction:
        """
        Edit fields of a definition. ``next_occurrence_date`` is not editable
        here; it moves through ``process``, and a frequency change realigns
        it onto the new schedule.

        Raises:
            ValidationError: Unknown field, no changes or invalid value.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update: {sorted(unknown)}", code="INVALID_FIELD")
        if not changes:
            raise ValidationError("No valid updates provided", code="NO_UPDATES")

        current = self.get(owner_id, recurring_id)
        if "kind" in changes:
            changes["kind"] = clean_choice(TransactionKind, changes["kind"], "INVALID_TYPE")
        if "category" in changes:
            changes["category"] = clean_category(changes["category"])
        if "amount" in changes:
            changes["amount"] = clean_amount(changes["amount"])
        if "frequency" in changes:
            changes["frequency"] = clean_choice(Frequency, changes["frequency"], "INVALID_FREQUENCY")
        if changes.get("end_date") is not None:
            changes["end_date"] = clean_date(changes["end_date"], "end date")
            if changes["end_date"] < current.start_date:
                raise ValidationError("End date must not precede start date", code="INVALID_DATE")
        if "notification_days_before" in changes:
            changes["notification_days_before"] = _clean_reminder_days(changes["notification_days_before"])

        frequency = changes.pop("frequency", current.frequency)
        updated = replace(current, **changes)
        if frequency == current.frequency:
            return self.repo.update(updated)
        updated = engine.reschedule(updated, frequency)
        return self.repo.update(updated, expected_next=current.next_occurrence_date)

    def delete(self, owner_id: str, recurring_id: int) -> bool:
        """Delete a definition. Entries it already produced stay in the ledger."""
        return self.repo.delete(recurring_id, owner_id)

    def toggle_status(self, owner_id: str, recurring_id: int, active: bool) -> RecurringTransaction:
        """Enable or disable a definition without touching its schedule."""
        current = self.get(owner_id, recurring_id)
        return self.repo.update(engine.toggle_status(current, active))

    # ── QUERIES ───────────────────────────────────────────

    def get_schedule(
        self, owner_id: str, schedule_filter: ScheduleFilter | str = ScheduleFilter.UPCOMING
    ) -> list[ScheduleItem]:
        return engine.list_schedule(self.repo.list(owner_id), self.clock.today(), schedule_filter)

    def get_due(self, owner_id: str) -> list[RecurringTransaction]:
        return engine.list_due(self.repo.list(owner_id), self.clock.today())

    def get_reminders(self, owner_id: str) -> list[ScheduleItem]:
        """Occurrences whose reminder lead time has been reached."""
        return engine.list_reminders(self.repo.list(owner_id), self.clock.today())

    def history(self, owner_id: str, recurring_id: int) -> list[Transaction]:
        """Ledger entries already materialized from a definition."""
        return self.ledger.get_by_recurring(recurring_id, owner_id)

    def monthly_commitments(self, owner_id: str) -> dict:
        """
        Monthly-equivalent totals of schedulable definitions.

        Returns:
            Dict with keys 'income', 'expense' and 'net'.
        """
        totals = {"income": Decimal("0"), "expense": Decimal("0")}
        for recurring in self.repo.list(owner_id):
            if recurring.is_schedulable:
                totals[TransactionKind(recurring.kind).value] += engine.monthly_equivalent(recurring)
        totals["net"] = totals["income"] - totals["expense"]
        return totals

    # ── PROCESSING ────────────────────────────────────────

    def process(self, owner_id: str, recurring_id: int) -> tuple[Transaction, RecurringTransaction]:
        """
        Materialize the next occurrence of one definition.

        The ledger insert and the definition advance share one database
        transaction; the advance is guarded by the previous
        next_occurrence_date so two concurrent approvals cannot both win.

        Raises:
            NotFoundError: Unknown definition.
            ExhaustedRecurrence: Definition inactive or past its end date.
            PersistenceError: Storage failure (nothing is committed).
        """
        recurring = self.get(owner_id, recurring_id)
        return self._process_one(recurring, self.clock.today())

    def _process_one(
        self, recurring: RecurringTransaction, today: date
    ) -> tuple[Transaction, RecurringTransaction]:
        entry, updated = engine.process(recurring, today)
        with self.unit_of_work() as conn:
            committed = self.ledger.append(entry, conn=conn)
            self.repo.update(updated, expected_next=recurring.next_occurrence_date, conn=conn)
        logger.info(
            f"Processed recurring #{recurring.id} for {committed.date}; "
            f"next occurrence {updated.next_occurrence_date}"
        )
        return committed, updated

    def process_due(self, owner_id: str, catch_up: bool = False) -> list[Transaction]:
        """
        Process every due definition of an owner.

        Each definition advances by one occurrence, or with ``catch_up`` by
        as many single steps as it takes to stop being due. Every step is
        its own transaction. A definition whose step fails is logged and
        skipped; the other definitions are still processed.

        Returns:
            The committed ledger entries in processing order.
        """
        today = self.clock.today()
        entries: list[Transaction] = []
        for recurring in engine.list_due(self.repo.list(owner_id), today):
            current = recurring
            while True:
                try:
                    entry, current = self._process_one(current, today)
                except FinanceError as e:
                    logger.error(
                        f"Failed to process recurring #{current.id} for "
                        f"{current.next_occurrence_date}: {e} (code={e.code})"
                    )
                    break
                entries.append(entry)
                if not catch_up or not current.is_schedulable:
                    break
                if engine.days_until(current, today) > 0:
                    break
        return entries
