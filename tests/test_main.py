from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import MagicMock

from conftest import OWNER, TODAY, make_budget, make_recurring
from main import process_owner
from services.budget_service import BudgetService
from services.recurring_service import RecurringService


def test_process_owner_books_due_items(db, recurring_store, budget_store, ledger, clock):
    recurring_store.add(make_recurring(id=None, category="Rent", next_occurrence_date=TODAY - timedelta(days=1)))
    recurring_store.add(make_recurring(id=None, category="Gym", next_occurrence_date=TODAY + timedelta(days=1)))
    budget_store.add(make_budget(id=None, category="Rent", limit_amount=Decimal("1000"), start_date=date(2025, 1, 1)))

    recurring = RecurringService(repo=recurring_store, ledger=ledger, clock=clock, unit_of_work=db.transaction)
    budgets = BudgetService(repo=budget_store, ledger=ledger, clock=clock)

    assert process_owner(OWNER, recurring, budgets, catch_up=False) == 1
    assert [t.category for t in db.transactions] == ["Rent"]
    assert budgets.check_alert(OWNER, "Rent")[0].stats.spent == Decimal("1200.00")


def test_process_owner_alerts_on_entries_booked_before_a_failure(db, recurring_store, budget_store, ledger, clock):
    recurring_store.add(make_recurring(id=None, category="Rent", next_occurrence_date=TODAY - timedelta(days=2)))
    recurring_store.add(make_recurring(id=None, category="Gym", next_occurrence_date=TODAY - timedelta(days=1)))
    ledger.fail_after = 1

    recurring = RecurringService(repo=recurring_store, ledger=ledger, clock=clock, unit_of_work=db.transaction)
    budgets = BudgetService(repo=budget_store, ledger=ledger, clock=clock)
    budgets.check_alert = MagicMock(wraps=budgets.check_alert)

    assert process_owner(OWNER, recurring, budgets, catch_up=False) == 1
    budgets.check_alert.assert_called_once_with(OWNER, "Rent")
