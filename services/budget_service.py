"""
services/budget_service.py
---------------------------
Business logic for budget limits and tracking.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Optional

from models.budget import Budget, BudgetOverview, BudgetPeriod, BudgetReport, Threshold
from repositories.base import BudgetStore, LedgerStore
from repositories.budget_repo import BudgetRepository
from repositories.transaction_repo import TransactionRepository
from services import budget_period_engine as engine
from utils.clock import SystemClock
from utils.dates import as_date
from utils.exceptions import NotFoundError, ValidationError
from utils.logger import get_logger
from utils.validation import clean_amount, clean_category, clean_choice, clean_date, require_owner

logger = get_logger(__name__)

_HIGHEST_USAGE_COUNT = 3


class BudgetService:
    """Manages budget limits, period windows and spend reports."""

    def __init__(
        self,
        repo: Optional[BudgetStore] = None,
        ledger: Optional[LedgerStore] = None,
        clock=None,
    ):
        self.repo = repo or BudgetRepository()
        self.ledger = ledger or TransactionRepository()
        self.clock = clock or SystemClock()

    # ── CRUD ──────────────────────────────────────────────

    def create(self, owner_id: str, category: str, limit_amount, period: str, start_date) -> Budget:
        """
        Validate and save a new budget.

        Raises:
            ValidationError: On any invalid field.
        """
        budget = Budget(
            owner_id=require_owner(owner_id),
            category=clean_category(category),
            limit_amount=clean_amount(limit_amount, "Limit amount"),
            period=clean_choice(BudgetPeriod, period, "INVALID_PERIOD"),
            start_date=clean_date(start_date, "start date"),
        )
        return self.repo.add(budget)

    def get(self, owner_id: str, budget_id: int) -> Budget:
        budget = self.repo.get_by_id(budget_id, owner_id)
        if budget is None:
            raise NotFoundError(f"Budget #{budget_id} not found", code="NOT_FOUND")
        return budget

    def list_budgets(self, owner_id: str, period: Optional[str] = None) -> list[Budget]:
        """All budgets of an owner, optionally only those of one period."""
        budgets = self.repo.list(owner_id)
        if period is None:
            return budgets
        wanted = clean_choice(BudgetPeriod, period, "INVALID_PERIOD")
        return [b for b in budgets if b.period == wanted]

    def update(
        self,
        owner_id: str,
        budget_id: int,
        category: Optional[str] = None,
        limit_amount=None,
        period: Optional[str] = None,
    ) -> Budget:
        """
        Change category, limit or period. The start date is fixed.

        Raises:
            ValidationError: No fields given or an invalid value.
            NotFoundError: Unknown budget.
        """
        changes = {}
        if category is not None:
            changes["category"] = clean_category(category)
        if limit_amount is not None:
            changes["limit_amount"] = clean_amount(limit_amount, "Limit amount")
        if period is not None:
            changes["period"] = clean_choice(BudgetPeriod, period, "INVALID_PERIOD")
        if not changes:
            raise ValidationError("No valid updates provided", code="NO_UPDATES")
        return self.repo.update(replace(self.get(owner_id, budget_id), **changes))

    def delete(self, owner_id: str, budget_id: int) -> bool:
        return self.repo.delete(budget_id, owner_id)

    # ── REPORTS ───────────────────────────────────────────

    def report(self, budget: Budget, today=None) -> BudgetReport:
        """
        Current-period window, stats and threshold for one budget.

        Raises:
            InvalidAnchor: The budget starts after today.
        """
        today = as_date(today or self.clock.today())
        window = engine.compute_window(budget.period, budget.start_date, today)
        expenses = self.ledger.query_expenses(budget.owner_id, budget.category, window.start, window.end)
        stats = engine.compute_stats(budget, expenses)
        threshold = engine.classify_threshold(stats.percent_used)
        if threshold != Threshold.OK:
            logger.warning(
                f"Budget #{budget.id} '{budget.category}' is {threshold.value}: "
                f"{stats.spent:.2f} / {budget.limit_amount:.2f} ({stats.percent_used:.0f}%)"
            )
        return BudgetReport(budget=budget, window=window, stats=stats, threshold=threshold)

    def get_status(self, owner_id: str, budget_id: int) -> BudgetReport:
        return self.report(self.get(owner_id, budget_id))

    def get_all_statuses(self, owner_id: str) -> list[BudgetReport]:
        """Reports for every budget that has already started."""
        today = self.clock.today()
        return [self.report(b, today) for b in self.repo.list(owner_id) if b.start_date <= today]

    def get_overview(self, owner_id: str) -> BudgetOverview:
        """Totals across all started budgets plus the most stretched categories."""
        reports = self.get_all_statuses(owner_id)
        total_limit = sum((r.budget.limit_amount for r in reports), Decimal("0"))
        total_spent = sum((r.stats.spent for r in reports), Decimal("0"))
        by_usage = sorted(reports, key=lambda r: r.stats.percent_used, reverse=True)
        return BudgetOverview(
            total_limit=total_limit,
            total_spent=total_spent,
            total_remaining=total_limit - total_spent,
            over_budget=[r for r in by_usage if r.threshold == Threshold.EXCEEDED],
            highest_usage=[r for r in by_usage if r.stats.percent_used > 0][:_HIGHEST_USAGE_COUNT],
        )

    def check_alert(self, owner_id: str, category: str) -> list[BudgetReport]:
        """
        Check the budgets of a category after a new expense.
        Called after each expense is recorded.

        Returns:
            Reports in the warning or exceeded band (empty if none).
        """
        today = self.clock.today()
        return [
            report
            for report in (
                self.report(b, today)
                for b in self.repo.list(owner_id)
                if b.category == category and b.start_date <= today
            )
            if report.threshold != Threshold.OK
        ]
