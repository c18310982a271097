"""Subscription quota counters database operations."""

import logging
from datetime import datetime

from jobhackr.db.connection import DatabaseConnection, get_connection, write_transaction
from jobhackr.matching.quota import (
    apply_period_resets,
    compute_quota_status,
    daily_period_start,
    remaining_slots,
    weekly_period_start,
)
from jobhackr.schemas.quota import QuotaCounters, QuotaStatus, SubscriptionTier, TierLimits

logger = logging.getLogger(__name__)


def _parse_timestamp(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _db_timestamp(db: DatabaseConnection, value: datetime | None):
    if value is None or db.is_postgres:
        return value
    return value.isoformat()


def _select_counters(
    db: DatabaseConnection, user_id: int, lock: bool = False
) -> tuple[SubscriptionTier, QuotaCounters] | None:
    cursor = db.cursor(dictionary=True)
    ph = db.placeholder
    cursor.execute(
        f"""
        SELECT subscription_tier, used_today, used_this_week,
               daily_period_start, weekly_period_start
        FROM quota_counters WHERE user_id = {ph}{db.for_update if lock else ""}
        """,
        (user_id,),
    )
    row = cursor.fetchone()
    if row is None:
        return None

    counters = QuotaCounters(
        used_today=row["used_today"],
        used_this_week=row["used_this_week"],
        daily_period_start=_parse_timestamp(row["daily_period_start"]),
        weekly_period_start=_parse_timestamp(row["weekly_period_start"]),
    )
    return SubscriptionTier(row["subscription_tier"]), counters


def _write_counters(
    db: DatabaseConnection,
    user_id: int,
    tier: SubscriptionTier,
    counters: QuotaCounters,
    now: datetime,
) -> None:
    cursor = db.cursor()
    ph = db.placeholder
    cursor.execute(
        f"""
        INSERT INTO quota_counters
            (user_id, subscription_tier, used_today, used_this_week,
             daily_period_start, weekly_period_start, updated_at)
        VALUES ({ph}, {ph}, {ph}, {ph}, {ph}, {ph}, {ph})
        ON CONFLICT (user_id) DO UPDATE SET
            subscription_tier = excluded.subscription_tier,
            used_today = excluded.used_today,
            used_this_week = excluded.used_this_week,
            daily_period_start = excluded.daily_period_start,
            weekly_period_start = excluded.weekly_period_start,
            updated_at = excluded.updated_at
        """,
        (
            user_id,
            tier.value,
            counters.used_today,
            counters.used_this_week,
            _db_timestamp(db, counters.daily_period_start),
            _db_timestamp(db, counters.weekly_period_start),
            _db_timestamp(db, now),
        ),
    )


def _claim_slots(
    db: DatabaseConnection, user_id: int, requested: int, now: datetime
) -> tuple[SubscriptionTier, int]:
    stored = _select_counters(db, user_id, lock=True)
    tier, counters = stored or (SubscriptionTier.FREE, QuotaCounters())
    counters = apply_period_resets(counters, now)

    granted = min(requested, remaining_slots(TierLimits.for_tier(tier), counters))
    counters = counters.model_copy(
        update={
            "used_today": counters.used_today + granted,
            "used_this_week": counters.used_this_week + granted,
        }
    )
    _write_counters(db, user_id, tier, counters, now)
    return tier, granted


def get_quota_status(user_id: int, now: datetime | None = None) -> QuotaStatus:
    """Get a user's remaining allowance without consuming any of it.

    Users without stored counters are on the free tier with nothing used.

    Args:
        user_id: User to look up.
        now: Current local time (defaults to now).

    Returns:
        QuotaStatus for the current periods.
    """
    now = now or datetime.now()
    with get_connection() as db:
        stored = _select_counters(db, user_id)

    tier, counters = stored or (SubscriptionTier.FREE, QuotaCounters())
    return compute_quota_status(tier, counters, now)


def reserve_slots(user_id: int, requested: int, now: datetime | None = None) -> int:
    """Atomically claim up to `requested` application slots for a user.

    The read, the limit check and the increment happen inside one write
    transaction, so concurrent requests for the same user cannot together
    go past the tier limits.

    Args:
        user_id: User claiming slots.
        requested: Number of applications about to be submitted.
        now: Current local time (defaults to now).

    Returns:
        Number of slots granted, between 0 and `requested`.
    """
    now = now or datetime.now()
    if requested <= 0:
        return 0

    with write_transaction() as db:
        tier, granted = _claim_slots(db, user_id, requested, now)

    logger.info(f"User {user_id}: reserved {granted}/{requested} application slots ({tier.value})")
    return granted


def set_subscription_tier(
    user_id: int, tier: SubscriptionTier, now: datetime | None = None
) -> QuotaStatus:
    """Change a user's tier; both counters start over.

    Args:
        user_id: User to update.
        tier: New subscription tier.
        now: Current local time (defaults to now).

    Returns:
        QuotaStatus under the new tier.
    """
    now = now or datetime.now()
    counters = QuotaCounters(
        used_today=0,
        used_this_week=0,
        daily_period_start=daily_period_start(now),
        weekly_period_start=weekly_period_start(now),
    )

    with write_transaction() as db:
        _write_counters(db, user_id, tier, counters, now)

    logger.info(f"User {user_id}: subscription tier set to {tier.value}")
    return compute_quota_status(tier, counters, now)
