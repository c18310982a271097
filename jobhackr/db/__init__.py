"""Database access layer."""

from jobhackr.db.applications import get_applied_keys, record_applications, submit_applications
from jobhackr.db.candidates import (
    compute_cv_hash,
    get_cv_analysis,
    get_latest_cv_analysis,
    link_user_cv,
    save_cv_analysis,
)
from jobhackr.db.connection import get_connection, init_tables, write_transaction
from jobhackr.db.quotas import get_quota_status, reserve_slots, set_subscription_tier

__all__ = [
    "get_connection",
    "init_tables",
    "write_transaction",
    "compute_cv_hash",
    "save_cv_analysis",
    "get_cv_analysis",
    "get_latest_cv_analysis",
    "link_user_cv",
    "get_quota_status",
    "reserve_slots",
    "set_subscription_tier",
    "get_applied_keys",
    "record_applications",
    "submit_applications",
]
