"""Time-based subscription quota accounting.

Pure functions over QuotaCounters; persistence lives in jobhackr.db.quotas.
Periods are keyed by their start (local midnight, Monday midnight), so a
reset only happens when the stored start differs from the current one.
"""

import sys
from datetime import datetime, timedelta

from jobhackr.schemas.quota import QuotaCounters, QuotaStatus, SubscriptionTier, TierLimits

LIMIT_REACHED_REASON = "Application limit reached for your subscription"


def daily_period_start(now: datetime) -> datetime:
    """Midnight at the start of the day containing `now`."""
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def weekly_period_start(now: datetime) -> datetime:
    """Monday midnight at the start of the week containing `now`."""
    return daily_period_start(now) - timedelta(days=now.weekday())


def next_daily_reset(now: datetime) -> datetime:
    return daily_period_start(now) + timedelta(days=1)


def next_weekly_reset(now: datetime) -> datetime:
    return weekly_period_start(now) + timedelta(days=7)


def apply_period_resets(counters: QuotaCounters, now: datetime) -> QuotaCounters:
    """Zero the counters whose period has rolled over.

    Calling this any number of times within the same period returns the
    same counters.

    Args:
        counters: Stored counters with the periods they belong to.
        now: Current local time.

    Returns:
        Counters for the current periods (a new object when anything reset).
    """
    today = daily_period_start(now)
    this_week = weekly_period_start(now)
    updates: dict = {}

    if counters.daily_period_start != today:
        updates.update(used_today=0, daily_period_start=today)
    if counters.weekly_period_start != this_week:
        updates.update(used_this_week=0, weekly_period_start=this_week)

    if not updates:
        return counters
    return counters.model_copy(update=updates)


def remaining_slots(limits: TierLimits, counters: QuotaCounters) -> int:
    """Applications still allowed across both the daily and weekly caps."""
    remaining = []
    if limits.applications_per_day is not None:
        remaining.append(limits.applications_per_day - counters.used_today)
    if limits.applications_per_week is not None:
        remaining.append(limits.applications_per_week - counters.used_this_week)
    if not remaining:
        return sys.maxsize
    return max(0, min(remaining))


def compute_quota_status(
    tier: SubscriptionTier,
    counters: QuotaCounters,
    now: datetime,
) -> QuotaStatus:
    """Build the quota snapshot for a user at `now`.

    Counters are reset for the current periods first. The reset time is the
    next local midnight for tiers with a daily cap, otherwise next Monday.
    """
    counters = apply_period_resets(counters, now)
    limits = TierLimits.for_tier(tier)
    left = remaining_slots(limits, counters)

    if limits.applications_per_day is not None:
        reset_at = next_daily_reset(now)
    else:
        reset_at = next_weekly_reset(now)

    return QuotaStatus(
        tier=tier,
        used_today=counters.used_today,
        used_this_week=counters.used_this_week,
        daily_limit=limits.applications_per_day,
        weekly_limit=limits.applications_per_week,
        applications_left=left,
        can_apply=left > 0,
        reset_at=reset_at,
        reason=None if left > 0 else LIMIT_REACHED_REASON,
    )
