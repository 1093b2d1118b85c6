"""
repositories/transaction_repo.py
--------------------------------
Data access layer for ledger entries.
All SQL queries related to the `transactions` table live here.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from models.recurring import TransactionKind
from models.transaction import ExpenseRecord, Transaction
from repositories.base import using
from utils.logger import get_logger

logger = get_logger(__name__)


class TransactionRepository:
    """Ledger store backed by the transactions table."""

    # ── CREATE ────────────────────────────────────────────

    def append(self, entry: Transaction, conn=None) -> Transaction:
        """
        Insert a new ledger entry.

        Args:
            entry: The Transaction to persist.
            conn: Optional connection of an enclosing transaction.

        Returns:
            A copy of the entry with `id` and `created_at` populated.

        Raises:
            PersistenceError: If the insert fails.
        """
        sql = """
            INSERT INTO transactions
                (owner_id, type, amount, category, description, date, recurring_id)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (
                    entry.owner_id, TransactionKind(entry.kind).value, entry.amount,
                    entry.category, entry.description, entry.date, entry.recurring_id,
                ))
                row = cur.fetchone()
        saved = replace(entry, id=row[0], created_at=row[1])
        logger.info(f"Appended {saved.kind.value} #{saved.id} for owner {saved.owner_id}")
        return saved

    # ── READ ──────────────────────────────────────────────

    def query_expenses(
        self, owner_id: str, category: str, start: date, end: date, conn=None
    ) -> list[ExpenseRecord]:
        """
        Expenses of one category inside a half-open date range.

        Args:
            owner_id: Owner scope.
            category: Exact category name.
            start: First day (inclusive).
            end: Window end (exclusive).

        Returns:
            List of ExpenseRecord ordered by date.
        """
        sql = """
            SELECT amount, date FROM transactions
            WHERE owner_id = %s AND category = %s AND type = 'expense'
              AND date >= %s AND date < %s
            ORDER BY date ASC, id ASC;
        """
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (owner_id, category, start, end))
                return [ExpenseRecord(amount=Decimal(r[0]), date=r[1]) for r in cur.fetchall()]

    def get_by_recurring(self, recurring_id: int, owner_id: str, conn=None) -> list[Transaction]:
        """All ledger entries materialized from one recurring definition."""
        sql = """
            SELECT id, owner_id, type, amount, category, description, date, recurring_id, created_at
            FROM transactions
            WHERE recurring_id = %s AND owner_id = %s
            ORDER BY date ASC, id ASC;
        """
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (recurring_id, owner_id))
                return [self._row_to_transaction(r) for r in cur.fetchall()]

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_transaction(row: tuple) -> Transaction:
        """Convert a database row tuple to a Transaction domain object."""
        return Transaction(
            id=row[0],
            owner_id=row[1],
            kind=TransactionKind(row[2]),
            amount=Decimal(row[3]),
            category=row[4],
            description=row[5],
            date=row[6],
            recurring_id=row[7],
            created_at=row[8],
        )
