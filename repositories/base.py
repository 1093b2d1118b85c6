"""
repositories/base.py
--------------------
Collaborator contracts the services depend on, plus the connection helper
shared by the PostgreSQL repositories.

Every repository method takes an optional ``conn``. When given, the method
runs inside the caller's transaction and does not commit; otherwise it opens
and commits its own.
"""

from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional, Protocol

from db.connection import transaction
from models.budget import Budget
from models.recurring import RecurringTransaction
from models.transaction import ExpenseRecord, Transaction


@contextmanager
def using(conn=None) -> Iterator:
    """Yield ``conn`` as-is, or a fresh transactional connection."""
    if conn is not None:
        yield conn
        return
    with transaction() as own:
        yield own


class LedgerStore(Protocol):
    def append(self, entry: Transaction, conn=None) -> Transaction: ...

    def query_expenses(
        self, owner_id: str, category: str, start: date, end: date, conn=None
    ) -> list[ExpenseRecord]: ...

    def get_by_recurring(self, recurring_id: int, owner_id: str, conn=None) -> list[Transaction]: ...


class RecurringStore(Protocol):
    def add(self, recurring: RecurringTransaction, conn=None) -> RecurringTransaction: ...

    def list(self, owner_id: str, conn=None) -> list[RecurringTransaction]: ...

    def get_by_id(
        self, recurring_id: int, owner_id: str, conn=None
    ) -> Optional[RecurringTransaction]: ...

    def update(
        self,
        recurring: RecurringTransaction,
        expected_next: Optional[date] = None,
        conn=None,
    ) -> RecurringTransaction: ...

    def delete(self, recurring_id: int, owner_id: str, conn=None) -> bool: ...


class BudgetStore(Protocol):
    def add(self, budget: Budget, conn=None) -> Budget: ...

    def list(self, owner_id: str, conn=None) -> list[Budget]: ...

    def get_by_id(self, budget_id: int, owner_id: str, conn=None) -> Optional[Budget]: ...

    def update(self, budget: Budget, conn=None) -> Budget: ...

    def delete(self, budget_id: int, owner_id: str, conn=None) -> bool: ...
