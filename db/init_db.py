"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Ledger: every materialized income or expense
CREATE TABLE IF NOT EXISTS transactions (
    id              SERIAL PRIMARY KEY,
    owner_id        TEXT NOT NULL,
    type            VARCHAR(10) NOT NULL CHECK (type IN ('expense', 'income')),
    amount          NUMERIC(12,2) NOT NULL CHECK (amount > 0),
    category        VARCHAR(100) NOT NULL,
    description     TEXT,
    date            DATE NOT NULL,
    recurring_id    INT,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Recurring definitions; deleting one keeps the ledger rows it produced
CREATE TABLE IF NOT EXISTS recurring_transactions (
    id                       SERIAL PRIMARY KEY,
    owner_id                 TEXT NOT NULL,
    type                     VARCHAR(10) NOT NULL CHECK (type IN ('expense', 'income')),
    category                 VARCHAR(100) NOT NULL,
    amount                   NUMERIC(12,2) NOT NULL CHECK (amount > 0),
    description              TEXT,
    frequency                VARCHAR(20) NOT NULL CHECK (frequency IN
                                 ('daily', 'weekly', 'biweekly', 'monthly', 'quarterly', 'yearly')),
    start_date               DATE NOT NULL,
    end_date                 DATE,
    next_occurrence_date     DATE NOT NULL,
    is_active                BOOLEAN NOT NULL DEFAULT TRUE,
    last_processed_date      DATE,
    notification_enabled     BOOLEAN NOT NULL DEFAULT TRUE,
    notification_days_before INT NOT NULL DEFAULT 1 CHECK (notification_days_before >= 0),
    created_at               TIMESTAMPTZ DEFAULT NOW(),
    CHECK (next_occurrence_date >= start_date)
);

-- Budgets: spending limit per category and period
CREATE TABLE IF NOT EXISTS budgets (
    id              SERIAL PRIMARY KEY,
    owner_id        TEXT NOT NULL,
    category        VARCHAR(100) NOT NULL,
    limit_amount    NUMERIC(12,2) NOT NULL CHECK (limit_amount > 0),
    period          VARCHAR(10) NOT NULL CHECK (period IN ('weekly', 'monthly', 'yearly')),
    start_date      DATE NOT NULL,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_transactions_owner_category_date
    ON transactions(owner_id, category, type, date);
CREATE INDEX IF NOT EXISTS idx_recurring_owner ON recurring_transactions(owner_id);
CREATE INDEX IF NOT EXISTS idx_recurring_due
    ON recurring_transactions(next_occurrence_date) WHERE is_active = TRUE;
CREATE INDEX IF NOT EXISTS idx_budgets_owner ON budgets(owner_id, period);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    with transaction() as conn:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
    logger.info("Database schema initialized successfully.")


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("Database schema created successfully.")
