from datetime import date
from decimal import Decimal

import pytest

from conftest import OWNER, TODAY, make_budget, make_expense
from models.budget import BudgetPeriod, Threshold
from models.recurring import TransactionKind
from services.budget_service import BudgetService
from utils.clock import FixedClock
from utils.exceptions import InvalidAnchor, NotFoundError, ValidationError


@pytest.fixture
def service(budget_store, ledger, clock):
    return BudgetService(repo=budget_store, ledger=ledger, clock=clock)


def _seed(budget_store, **overrides):
    overrides.setdefault("id", None)
    return budget_store.add(make_budget(**overrides))


def _spend(ledger, *expenses):
    for expense in expenses:
        ledger.append(expense)


# ── CRUD ──────────────────────────────────────────────────


def test_create_budget(service):
    budget = service.create(OWNER, " Groceries ", 400, "weekly", "2025-03-03")
    assert budget.id is not None
    assert budget.category == "Groceries"
    assert budget.limit_amount == Decimal("400")
    assert budget.period == BudgetPeriod.WEEKLY
    assert budget.start_date == date(2025, 3, 3)


@pytest.mark.parametrize("kwargs, code", [
    (dict(owner_id=""), "INVALID_USER_ID"),
    (dict(category=""), "INVALID_CATEGORY"),
    (dict(limit_amount=-5), "INVALID_AMOUNT"),
    (dict(limit_amount="99.999"), "INVALID_AMOUNT"),
    (dict(period="daily"), "INVALID_PERIOD"),
    (dict(start_date="tomorrow"), "INVALID_DATE"),
])
def test_create_validation(service, kwargs, code):
    args = dict(owner_id=OWNER, category="Food", limit_amount=100, period="monthly", start_date="2025-01-01")
    args.update(kwargs)
    with pytest.raises(ValidationError) as exc:
        service.create(**args)
    assert exc.value.code == code


def test_update_only_editable_fields(service, budget_store):
    budget = _seed(budget_store)
    updated = service.update(OWNER, budget.id, limit_amount="750", period="yearly")
    assert updated.limit_amount == Decimal("750")
    assert updated.period == BudgetPeriod.YEARLY
    assert updated.start_date == budget.start_date
    with pytest.raises(ValidationError) as exc:
        service.update(OWNER, budget.id)
    assert exc.value.code == "NO_UPDATES"


def test_update_and_delete_are_owner_scoped(service, budget_store):
    budget = _seed(budget_store)
    with pytest.raises(NotFoundError):
        service.update("intruder", budget.id, limit_amount=1)
    assert not service.delete("intruder", budget.id)
    assert service.delete(OWNER, budget.id)


def test_list_budgets_by_period(service, budget_store):
    _seed(budget_store, category="Food", period=BudgetPeriod.WEEKLY)
    _seed(budget_store, category="Travel", period=BudgetPeriod.YEARLY)
    assert [b.category for b in service.list_budgets(OWNER, "yearly")] == ["Travel"]
    assert len(service.list_budgets(OWNER)) == 2


# ── reports ───────────────────────────────────────────────


def test_report_counts_only_matching_expenses_in_window(budget_store, ledger):
    service = BudgetService(repo=budget_store, ledger=ledger, clock=FixedClock(date(2025, 2, 10)))
    budget = _seed(budget_store, limit_amount=Decimal("1000"), start_date=date(2025, 1, 15))
    _spend(
        ledger,
        make_expense(500, date(2025, 1, 15)),
        make_expense(450, date(2025, 2, 14)),
        make_expense(300, date(2025, 1, 14)),                       # before window
        make_expense(300, date(2025, 2, 15)),                       # window end is exclusive
        make_expense(300, date(2025, 2, 1), category="Dining"),
        make_expense(300, date(2025, 2, 1), owner_id="someone-else"),
        make_expense(300, date(2025, 2, 1), kind=TransactionKind.INCOME),
    )

    report = service.get_status(OWNER, budget.id)
    assert (report.window.start, report.window.end) == (date(2025, 1, 15), date(2025, 2, 15))
    assert report.stats.spent == Decimal("950")
    assert report.stats.remaining == Decimal("50")
    assert report.stats.percent_used == 95
    assert report.threshold == Threshold.WARNING


def test_report_for_future_budget_is_invalid(service, budget_store):
    budget = _seed(budget_store, start_date=date(2025, 4, 1))
    with pytest.raises(InvalidAnchor):
        service.get_status(OWNER, budget.id)


def test_all_statuses_skip_future_budgets(service, budget_store):
    _seed(budget_store, category="Food", start_date=date(2025, 1, 1))
    _seed(budget_store, category="Later", start_date=date(2025, 6, 1))
    assert [r.budget.category for r in service.get_all_statuses(OWNER)] == ["Food"]


def test_overview(service, budget_store, ledger):
    _seed(budget_store, category="Food", limit_amount=Decimal("200"), start_date=date(2025, 1, 1))
    _seed(budget_store, category="Fun", limit_amount=Decimal("100"), start_date=date(2025, 1, 1))
    _seed(budget_store, category="Gas", limit_amount=Decimal("100"), start_date=date(2025, 1, 1))
    _seed(budget_store, category="Books", limit_amount=Decimal("100"), start_date=date(2025, 1, 1))
    _seed(budget_store, category="Idle", limit_amount=Decimal("100"), start_date=date(2025, 1, 1))
    _spend(
        ledger,
        make_expense(100, TODAY, category="Food"),
        make_expense(150, TODAY, category="Fun"),
        make_expense(20, TODAY, category="Gas"),
        make_expense(10, TODAY, category="Books"),
    )

    overview = service.get_overview(OWNER)
    assert overview.total_limit == Decimal("600")
    assert overview.total_spent == Decimal("280")
    assert overview.total_remaining == Decimal("320")
    assert [r.budget.category for r in overview.over_budget] == ["Fun"]
    assert [r.budget.category for r in overview.highest_usage] == ["Fun", "Food", "Gas"]


def test_check_alert_returns_only_stretched_budgets(service, budget_store, ledger):
    _seed(budget_store, category="Food", limit_amount=Decimal("100"), start_date=date(2025, 3, 1))
    _seed(budget_store, category="Food", limit_amount=Decimal("1000"), period=BudgetPeriod.YEARLY,
          start_date=date(2025, 1, 1))
    _spend(ledger, make_expense(100, TODAY, category="Food"))

    alerts = service.check_alert(OWNER, "Food")
    assert len(alerts) == 1
    assert alerts[0].threshold == Threshold.EXCEEDED
    assert service.check_alert(OWNER, "Travel") == []


def test_overview_counts_budget_at_exactly_its_limit_as_over(service, budget_store, ledger):
    _seed(budget_store, category="Rent", limit_amount=Decimal("500"), start_date=date(2025, 1, 1))
    _seed(budget_store, category="Food", limit_amount=Decimal("500"), start_date=date(2025, 1, 1))
    _spend(
        ledger,
        make_expense(500, TODAY, category="Rent"),
        make_expense(499, TODAY, category="Food"),
    )

    overview = service.get_overview(OWNER)
    assert [r.budget.category for r in overview.over_budget] == ["Rent"]
    assert all(r.threshold == Threshold.EXCEEDED for r in overview.over_budget)
