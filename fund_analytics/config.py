"""Application configuration."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DB_PATH = BASE_DIR / "data" / "fund_analytics.db"
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite+aiosqlite:///{DB_PATH}"

# Store read settings
STORE_QUERY_TIMEOUT = float(os.getenv("STORE_QUERY_TIMEOUT", "5.0"))  # seconds per read
STORE_RETRY_ATTEMPTS = int(os.getenv("STORE_RETRY_ATTEMPTS", "3"))
STORE_RETRY_BACKOFF = float(os.getenv("STORE_RETRY_BACKOFF", "0.2"))  # seconds, doubled per attempt
STORE_RETRY_MAX_BACKOFF = 2.0

# Query limits
DEFAULT_LOOKUP_LIMIT = 10
MAX_LOOKUP_LIMIT = 100
COMPARE_MIN_CODES = 2
COMPARE_MAX_CODES = 5
RECENT_NAV_COUNT = 5

# Oldest acceptable historical NAV for a window, in days past the window cutoff.
# Short windows still tolerate long market closures (e.g. Spring Festival).
STALENESS_FLOOR_DAYS = 15

# Ensure data directory exists (only needed for local SQLite, skip if DATABASE_URL is overridden)
if not os.getenv("DATABASE_URL"):
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
