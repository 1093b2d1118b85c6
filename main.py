"""
main.py
-------
Entry point for the RecurBudget daily job.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Materialize due recurring transactions for every configured owner.
    - Log upcoming reminders and budgets that crossed their warning band.

Meant to be run once a day (cron, systemd timer, ...):
    python main.py
"""

from config import JOB_CATCH_UP, JOB_OWNER_IDS
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from services.budget_service import BudgetService
from services.recurring_service import RecurringService
from utils.clock import FixedClock, SystemClock
from utils.exceptions import FinanceError
from utils.logger import get_logger

logger = get_logger(__name__)


def process_owner(
    owner_id: str,
    recurring_service: RecurringService,
    budget_service: BudgetService,
    catch_up: bool = JOB_CATCH_UP,
) -> int:
    """
    Run the daily work for one owner.

    Returns:
        Number of ledger entries created.
    """
    entries = recurring_service.process_due(owner_id, catch_up=catch_up)
    for entry in entries:
        logger.info(f"[{owner_id}] booked {entry}")

    for item in recurring_service.get_reminders(owner_id):
        logger.info(
            f"[{owner_id}] reminder: {item.recurring.category} "
            f"{item.recurring.amount:.2f} due {item.recurring.next_occurrence_date} "
            f"({item.status.value})"
        )

    categories = {entry.category for entry in entries if entry.is_expense()}
    for category in sorted(categories):
        budget_service.check_alert(owner_id, category)
    return len(entries)


def main() -> None:
    """Initialize storage and run the job for every configured owner."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. One date for the whole run ─────────────────────
    clock = FixedClock(SystemClock().today())
    recurring_service = RecurringService(clock=clock)
    budget_service = BudgetService(clock=clock)

    # ── 3. Per-owner processing ───────────────────────────
    if not JOB_OWNER_IDS:
        logger.warning("JOB_OWNER_IDS is empty; nothing to process.")
    total = 0
    try:
        for owner_id in JOB_OWNER_IDS:
            try:
                total += process_owner(owner_id, recurring_service, budget_service)
            except FinanceError as e:
                logger.error(f"Daily job failed for owner {owner_id}: {e} (code={e.code})")
        logger.info(f"Daily job finished: {total} entries booked for {len(JOB_OWNER_IDS)} owners.")
    finally:
        # ── 4. Cleanup ────────────────────────────────────
        close_pool()


if __name__ == "__main__":
    main()
