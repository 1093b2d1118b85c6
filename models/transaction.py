"""
models/transaction.py
---------------------
Domain model for ledger entries (actual income and expenses).
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from models.recurring import TransactionKind


@dataclass(frozen=True)
class Transaction:
    """
    A single ledger entry.

    Attributes:
        owner_id: Opaque id of the owning user.
        kind: Income or expense.
        category: Category name.
        amount: Positive amount.
        date: Date the transaction is booked on.
        description: Optional note.
        recurring_id: Source definition when materialized from a recurrence.
        id: Database primary key (None for new records).
        created_at: Timestamp when the record was created.
    """
    owner_id: str
    kind: TransactionKind
    category: str
    amount: Decimal
    date: date
    description: Optional[str] = None
    recurring_id: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def is_expense(self) -> bool:
        """Returns True if this is an expense transaction."""
        return self.kind == TransactionKind.EXPENSE

    def is_income(self) -> bool:
        """Returns True if this is an income transaction."""
        return self.kind == TransactionKind.INCOME

    def __str__(self) -> str:
        sign = "-" if self.is_expense() else "+"
        return f"{sign}{self.amount:.2f} | {self.category} | {self.date}"


@dataclass(frozen=True)
class ExpenseRecord:
    """Minimal projection of a ledger row used for budget aggregation."""
    amount: Decimal
    date: date
