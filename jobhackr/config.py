import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths (local development only)
DATA_DIR = Path(os.getenv("JOBHACKR_DATA_DIR", "data"))
DB_PATH = DATA_DIR / "jobhackr.db"

# Database (PostgreSQL when set, SQLite otherwise)
DATABASE_URL = os.getenv("DATABASE_URL")

# Keyword dictionaries override (JSON file with the same shape as analysis/keywords.json)
KEYWORDS_PATH = os.getenv("JOBHACKR_KEYWORDS_PATH")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Matching settings
DEFAULT_MIN_MATCH_SCORE = 70
AGGRESSIVE_MIN_MATCH_SCORE = 60
DEFAULT_MAX_APPLICATIONS_PER_DAY = 25
SKILL_MATCH_THRESHOLD = 80  # rapidfuzz ratio used for missing-skill detection

# Job search fan-out
MAX_JOBS_PER_SEARCH = 100
SEARCH_MAX_WORKERS = int(os.getenv("SEARCH_MAX_WORKERS", "5"))
SOURCE_TIMEOUT = 30

# Subscription quotas: None means the period is not capped for that tier
SUBSCRIPTION_LIMITS = {
    "free": {"applications_per_day": None, "applications_per_week": 10},
    "weekly": {"applications_per_day": 10, "applications_per_week": 70},
    "monthly": {"applications_per_day": 15, "applications_per_week": 105},
    "premium": {"applications_per_day": 30, "applications_per_week": 210},
}
