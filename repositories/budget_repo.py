"""
repositories/budget_repo.py
-----------------------------
Data access layer for budgets.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Optional

from models.budget import Budget, BudgetPeriod
from repositories.base import using
from utils.exceptions import NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, owner_id, category, limit_amount, period, start_date, created_at"


class BudgetRepository:
    """Repository for CRUD operations on the budgets table."""

    def add(self, budget: Budget, conn=None) -> Budget:
        """Insert a new budget and return it with id/created_at set."""
        sql = """
            INSERT INTO budgets (owner_id, category, limit_amount, period, start_date)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (
                    budget.owner_id, budget.category, budget.limit_amount,
                    BudgetPeriod(budget.period).value, budget.start_date,
                ))
                row = cur.fetchone()
        saved = replace(budget, id=row[0], created_at=row[1])
        logger.info(f"Added budget '{saved.category}' #{saved.id} for owner {saved.owner_id}")
        return saved

    def list(self, owner_id: str, conn=None) -> list[Budget]:
        """Get all budgets for an owner, newest first."""
        sql = f"SELECT {_COLUMNS} FROM budgets WHERE owner_id = %s ORDER BY created_at DESC, id DESC;"
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (owner_id,))
                return [self._row_to_budget(r) for r in cur.fetchall()]

    def get_by_id(self, budget_id: int, owner_id: str, conn=None) -> Optional[Budget]:
        """Get a single budget, scoped to owner."""
        sql = f"SELECT {_COLUMNS} FROM budgets WHERE id = %s AND owner_id = %s;"
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (budget_id, owner_id))
                row = cur.fetchone()
                return self._row_to_budget(row) if row else None

    def update(self, budget: Budget, conn=None) -> Budget:
        """
        Persist category, limit and period of an existing budget.

        Raises:
            NotFoundError: No row with this id for this owner.
        """
        sql = """
            UPDATE budgets SET category = %s, limit_amount = %s, period = %s
            WHERE id = %s AND owner_id = %s;
        """
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (
                    budget.category, budget.limit_amount, BudgetPeriod(budget.period).value,
                    budget.id, budget.owner_id,
                ))
                updated = cur.rowcount > 0
        if not updated:
            raise NotFoundError(f"Budget #{budget.id} not found", code="NOT_FOUND")
        return budget

    def delete(self, budget_id: int, owner_id: str, conn=None) -> bool:
        """Delete a budget by ID, scoped to owner."""
        sql = "DELETE FROM budgets WHERE id = %s AND owner_id = %s;"
        with using(conn) as c:
            with c.cursor() as cur:
                cur.execute(sql, (budget_id, owner_id))
                deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted budget #{budget_id}")
        return deleted

    @staticmethod
    def _row_to_budget(row: tuple) -> Budget:
        return Budget(
            id=row[0],
            owner_id=row[1],
            category=row[2],
            limit_amount=Decimal(row[3]),
            period=BudgetPeriod(row[4]),
            start_date=row[5],
            created_at=row[6],
        )
