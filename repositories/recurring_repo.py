"""
repositories/recurring_repo.py
-------------------------------
Data access layer for recurring transactions.
All SQL queries related to the `recurring_transactions` table live here.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from models.recurring import Frequency, RecurringTransaction, TransactionKind
from repositories.base import using
from utils.exceptions import ConcurrentUpdateError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = """
    id, owner_id, type, category, amount, description, frequency,
    start_date, end_date, next_occurrence_date, is_active, last_processed_date,
    notification_enabled, notification_days_before, created_at
"""


class RecurringRepository:
    """Repository for CRUD operations on the recurring_transactions table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, recurring: RecurringTransaction, conn=None) -> RecurringTransaction:
        """
        Insert a new recurring definition.

        Args:
            recurring: The RecurringTransaction to persist.

        Returns:
            A copy with its `id` and `created_at` populated.
        """
        sql = """
            INSERT INTO recurring_transactions
                (owner_id, type, category, amount, description, frequency, start_date,
                 end_date, next_occurrence_date, is_active, notification_enabled,
                 notification_days_before)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (
                    recurring.owner_id, TransactionKind(recurring.kind).value,
                    recurring.category, recurring.amount, recurring.description,
                    Frequency(recurring.frequency).value, recurring.start_date,
                    recurring.end_date, recurring.next_occurrence_date,
                    recurring.is_active, recurring.notification_enabled,
                    recurring.notification_days_before,
                ))
                row = cur.fetchone()
        saved = replace(recurring, id=row[0], created_at=row[1])
        logger.info(f"Added recurring '{saved.category}' #{saved.id} for owner {saved.owner_id}")
        return saved

    # ── READ ──────────────────────────────────────────────

    def list(self, owner_id: str, conn=None) -> list[RecurringTransaction]:
        """
        Get every recurring definition of an owner, active or not.

        Returns:
            List of RecurringTransaction ordered by next occurrence.
        """
        sql = f"""
            SELECT {_COLUMNS} FROM recurring_transactions
            WHERE owner_id = %s
            ORDER BY next_occurrence_date ASC, id ASC;
        """
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (owner_id,))
                return [self._row_to_recurring(r) for r in cur.fetchall()]

    def get_by_id(
        self, recurring_id: int, owner_id: str, conn=None
    ) -> Optional[RecurringTransaction]:
        """Fetch a single definition by ID, scoped to owner."""
        sql = f"SELECT {_COLUMNS} FROM recurring_transactions WHERE id = %s AND owner_id = %s;"
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (recurring_id, owner_id))
                row = cur.fetchone()
                return self._row_to_recurring(row) if row else None

    # ── UPDATE ────────────────────────────────────────────

    def update(
        self,
        recurring: RecurringTransaction,
        expected_next: Optional[date] = None,
        conn=None,
    ) -> RecurringTransaction:
        """
        Persist every mutable field of a definition.

        Args:
            recurring: The new value (must have id set).
            expected_next: When given, the row is only updated if its stored
                next_occurrence_date still equals this value.

        Raises:
            ConcurrentUpdateError: The optimistic check on next_occurrence_date failed.
            NotFoundError: No row with this id for this owner.
        """
        sql = """
            UPDATE recurring_transactions
            SET type = %s, category = %s, amount = %s, description = %s, frequency = %s,
                end_date = %s, next_occurrence_date = %s, is_active = %s,
                last_processed_date = %s, notification_enabled = %s,
                notification_days_before = %s
            WHERE id = %s AND owner_id = %s
        """
        params: list = [
            TransactionKind(recurring.kind).value, recurring.category, recurring.amount,
            recurring.description, Frequency(recurring.frequency).value,
            recurring.end_date, recurring.next_occurrence_date, recurring.is_active,
            recurring.last_processed_date, recurring.notification_enabled,
            recurring.notification_days_before, recurring.id, recurring.owner_id,
        ]
        if expected_next is not None:
            sql += " AND next_occurrence_date = %s"
            params.append(expected_next)

        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql + ";", params)
                updated = cur.rowcount > 0

        if not updated:
            if expected_next is not None:
                raise ConcurrentUpdateError(
                    f"Recurring #{recurring.id} was advanced by another writer",
                    code="CONFLICT",
                )
            raise NotFoundError(f"Recurring #{recurring.id} not found", code="NOT_FOUND")
        logger.info(
            f"Updated recurring #{recurring.id} (next: {recurring.next_occurrence_date}, "
            f"active: {recurring.is_active})"
        )
        return recurring

    # ── DELETE ────────────────────────────────────────────

    def delete(self, recurring_id: int, owner_id: str, conn=None) -> bool:
        """Delete a definition by ID, scoped to owner. Ledger rows are kept."""
        sql = "DELETE FROM recurring_transactions WHERE id = %s AND owner_id = %s;"
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (recurring_id, owner_id))
                deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted recurring #{recurring_id}")
        return deleted

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_recurring(row: tuple) -> RecurringTransaction:
        """Convert a database row tuple to a RecurringTransaction domain object."""
        return RecurringTransaction(
            id=row[0],
            owner_id=row[1],
            kind=TransactionKind(row[2]),
            category=row[3],
            amount=Decimal(row[4]),
            description=row[5],
            frequency=Frequency(row[6]),
            start_date=row[7],
            end_date=row[8],
            next_occurrence_date=row[9],
            is_active=row[10],
            last_processed_date=row[11],
            notification_enabled=row[12],
            notification_days_before=row[13],
            created_at=row[14],
        )
