import itertools
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from models.budget import Budget, BudgetPeriod
from models.recurring import Frequency, RecurringTransaction, TransactionKind
from models.transaction import ExpenseRecord, Transaction
from utils.clock import FixedClock
from utils.exceptions import ConcurrentUpdateError, NotFoundError, PersistenceError

TODAY = date(2025, 3, 15)
OWNER = "user-1"


class InMemoryDatabase:
    """Shared state for the fake stores with snapshot/rollback transactions."""

    def __init__(self):
        self.recurring: dict[int, RecurringTransaction] = {}
        self.transactions: list[Transaction] = []
        self.budgets: dict[int, Budget] = {}
        self.ids = itertools.count(1)
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self):
        snapshot = (dict(self.recurring), list(self.transactions), dict(self.budgets))
        try:
            yield self
        except Exception:
            self.recurring, self.transactions, self.budgets = snapshot
            self.rollbacks += 1
            raise
        self.commits += 1


class FakeLedger:
    def __init__(self, db: InMemoryDatabase):
        self.db = db
        self.fail = False
        self.fail_after = None
        self.appended = 0

    def append(self, entry, conn=None):
        if self.fail or (self.fail_after is not None and self.appended >= self.fail_after):
            raise PersistenceError("ledger unavailable", code="08006")
        self.appended += 1
        saved = replace(entry, id=next(self.db.ids))
        self.db.transactions.append(saved)
        return saved

    def query_expenses(self, owner_id, category, start, end, conn=None):
        return [
            ExpenseRecord(amount=t.amount, date=t.date)
            for t in self.db.transactions
            if t.owner_id == owner_id
            and t.category == category
            and t.kind == TransactionKind.EXPENSE
            and start <= t.date < end
        ]

    def get_by_recurring(self, recurring_id, owner_id, conn=None):
        return [
            t for t in self.db.transactions
            if t.recurring_id == recurring_id and t.owner_id == owner_id
        ]


class FakeRecurringStore:
    def __init__(self, db: InMemoryDatabase):
        self.db = db
        self.fail_update = False

    def add(self, recurring, conn=None):
        saved = replace(recurring, id=next(self.db.ids))
        self.db.recurring[saved.id] = saved
        return saved

    def list(self, owner_id, conn=None):
        rows = [r for r in self.db.recurring.values() if r.owner_id == owner_id]
        return sorted(rows, key=lambda r: (r.next_occurrence_date, r.id))

    def get_by_id(self, recurring_id, owner_id, conn=None):
        row = self.db.recurring.get(recurring_id)
        return row if row is not None and row.owner_id == owner_id else None

    def update(self, recurring, expected_next=None, conn=None):
        if self.fail_update:
            raise PersistenceError("write failed")
        stored = self.get_by_id(recurring.id, recurring.owner_id)
        if stored is None:
            raise NotFoundError(f"Recurring #{recurring.id} not found", code="NOT_FOUND")
        if expected_next is not None and stored.next_occurrence_date != expected_next:
            raise ConcurrentUpdateError("advanced elsewhere", code="CONFLICT")
        self.db.recurring[recurring.id] = recurring
        return recurring

    def delete(self, recurring_id, owner_id, conn=None):
        if self.get_by_id(recurring_id, owner_id) is None:
            return False
        del self.db.recurring[recurring_id]
        return True


class FakeBudgetStore:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    def add(self, budget, conn=None):
        saved = replace(budget, id=next(self.db.ids))
        self.db.budgets[saved.id] = saved
        return saved

    def list(self, owner_id, conn=None):
        return [b for b in self.db.budgets.values() if b.owner_id == owner_id]

    def get_by_id(self, budget_id, owner_id, conn=None):
        row = self.db.budgets.get(budget_id)
        return row if row is not None and row.owner_id == owner_id else None

    def update(self, budget, conn=None):
        if self.get_by_id(budget.id, budget.owner_id) is None:
            raise NotFoundError(f"Budget #{budget.id} not found", code="NOT_FOUND")
        self.db.budgets[budget.id] = budget
        return budget

    def delete(self, budget_id, owner_id, conn=None):
        if self.get_by_id(budget_id, owner_id) is None:
            return False
        del self.db.budgets[budget_id]
        return True


def make_recurring(**overrides) -> RecurringTransaction:
    fields = dict(
        owner_id=OWNER,
        kind=TransactionKind.EXPENSE,
        category="Rent",
        amount=Decimal("1200.00"),
        frequency=Frequency.MONTHLY,
        start_date=date(2024, 1, 1),
        next_occurrence_date=TODAY,
        id=1,
    )
    fields.update(overrides)
    return RecurringTransaction(**fields)


def make_budget(**overrides) -> Budget:
    fields = dict(
        owner_id=OWNER,
        category="Groceries",
        limit_amount=Decimal("1000"),
        period=BudgetPeriod.MONTHLY,
        start_date=date(2025, 1, 15),
        id=1,
    )
    fields.update(overrides)
    return Budget(**fields)


def make_expense(amount, on: date, category="Groceries", owner_id=OWNER, kind=TransactionKind.EXPENSE):
    return Transaction(
        owner_id=owner_id,
        kind=kind,
        category=category,
        amount=Decimal(str(amount)),
        date=on,
    )


@pytest.fixture
def db():
    return InMemoryDatabase()


@pytest.fixture
def ledger(db):
    return FakeLedger(db)


@pytest.fixture
def recurring_store(db):
    return FakeRecurringStore(db)


@pytest.fixture
def budget_store(db):
    return FakeBudgetStore(db)


@pytest.fixture
def clock():
    return FixedClock(TODAY)
