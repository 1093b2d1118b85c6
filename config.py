"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "recurbudget")
DB_USER: str = os.getenv("DB_USER", "recurbudget_user")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = (
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "5"))

# ── Clock / Logging ───────────────────────────────────────
APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "UTC")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Budget thresholds (percent of limit) ──────────────────
BUDGET_WARNING_PERCENT: int = int(os.getenv("BUDGET_WARNING_PERCENT", "90"))
BUDGET_EXCEEDED_PERCENT: int = int(os.getenv("BUDGET_EXCEEDED_PERCENT", "100"))

# ── Daily job ─────────────────────────────────────────────
_raw_owners = os.getenv("JOB_OWNER_IDS", "")
JOB_OWNER_IDS: list[str] = [
    owner.strip() for owner in _raw_owners.split(",") if owner.strip()
]
JOB_CATCH_UP: bool = os.getenv("JOB_CATCH_UP", "false").strip().lower() in ("1", "true", "yes")
