"""Tests for time-based quota accounting."""

import sys
from datetime import datetime

from jobhackr.matching.quota import (
    LIMIT_REACHED_REASON,
    apply_period_resets,
    compute_quota_status,
    daily_period_start,
    next_daily_reset,
    next_weekly_reset,
    remaining_slots,
    weekly_period_start,
)
from jobhackr.schemas.quota import QuotaCounters, SubscriptionTier, TierLimits

# Wednesday afternoon; the week started on Monday 2026-10-19
WEDNESDAY = datetime(2026, 10, 21, 14, 30)
MONDAY = datetime(2026, 10, 19)


def _current_counters(used_today: int = 0, used_this_week: int = 0) -> QuotaCounters:
    return QuotaCounters(
        used_today=used_today,
        used_this_week=used_this_week,
        daily_period_start=daily_period_start(WEDNESDAY),
        weekly_period_start=weekly_period_start(WEDNESDAY),
    )


class TestPeriods:
    def test_daily_period_start(self):
        assert daily_period_start(WEDNESDAY) == datetime(2026, 10, 21)

    def test_weekly_period_start_is_monday(self):
        assert weekly_period_start(WEDNESDAY) == MONDAY
        assert weekly_period_start(MONDAY) == MONDAY

    def test_next_resets(self):
        assert next_daily_reset(WEDNESDAY) == datetime(2026, 10, 22)
        assert next_weekly_reset(WEDNESDAY) == datetime(2026, 10, 26)


class TestApplyPeriodResets:
    def test_same_period_is_unchanged(self):
        counters = _current_counters(used_today=3, used_this_week=8)

        assert apply_period_resets(counters, WEDNESDAY) == counters

    def test_idempotent_within_period(self):
        stale = QuotaCounters(
            used_today=4,
            used_this_week=9,
            daily_period_start=datetime(2026, 10, 20),
            weekly_period_start=MONDAY,
        )

        once = apply_period_resets(stale, WEDNESDAY)
        twice = apply_period_resets(once, datetime(2026, 10, 21, 23, 59))

        assert once == twice
        assert twice.used_today == 0
        assert twice.used_this_week == 9

    def test_new_week_resets_both(self):
        last_week = QuotaCounters(
            used_today=2,
            used_this_week=40,
            daily_period_start=datetime(2026, 10, 18),
            weekly_period_start=datetime(2026, 10, 12),
        )

        counters = apply_period_resets(last_week, MONDAY)

        assert counters.used_today == 0
        assert counters.used_this_week == 0
        assert counters.weekly_period_start == MONDAY

    def test_fresh_counters_get_current_periods(self):
        counters = apply_period_resets(QuotaCounters(), WEDNESDAY)

        assert counters.daily_period_start == datetime(2026, 10, 21)
        assert counters.weekly_period_start == MONDAY


class TestRemainingSlots:
    def test_smallest_of_daily_and_weekly(self):
        limits = TierLimits(applications_per_day=30, applications_per_week=210)

        assert remaining_slots(limits, _current_counters(5, 200)) == 10
        assert remaining_slots(limits, _current_counters(25, 50)) == 5

    def test_never_negative(self):
        limits = TierLimits(applications_per_day=10, applications_per_week=70)

        assert remaining_slots(limits, _current_counters(12, 12)) == 0

    def test_uncapped(self):
        assert remaining_slots(TierLimits(), _current_counters(100, 100)) == sys.maxsize


class TestComputeQuotaStatus:
    def test_free_tier_weekly_cap(self):
        status = compute_quota_status(
            SubscriptionTier.FREE, _current_counters(3, 3), WEDNESDAY
        )

        assert status.daily_limit is None
        assert status.weekly_limit == 10
        assert status.applications_left == 7
        assert status.can_apply is True
        assert status.reset_at == datetime(2026, 10, 26)

    def test_free_tier_exhausted(self):
        status = compute_quota_status(
            SubscriptionTier.FREE, _current_counters(0, 10), WEDNESDAY
        )

        assert status.applications_left == 0
        assert status.can_apply is False
        assert status.reason == LIMIT_REACHED_REASON

    def test_daily_tier_resets_at_midnight(self):
        status = compute_quota_status(
            SubscriptionTier.WEEKLY, _current_counters(10, 10), WEDNESDAY
        )

        assert status.applications_left == 0
        assert status.reset_at == datetime(2026, 10, 22)

    def test_stale_counters_are_reset(self):
        stale = QuotaCounters(
            used_today=15,
            used_this_week=15,
            daily_period_start=datetime(2026, 10, 20),
            weekly_period_start=MONDAY,
        )

        status = compute_quota_status(SubscriptionTier.MONTHLY, stale, WEDNESDAY)

        assert status.used_today == 0
        assert status.applications_left == 15

    def test_tier_limits_table(self):
        assert TierLimits.for_tier(SubscriptionTier.PREMIUM) == TierLimits(
            applications_per_day=30, applications_per_week=210
        )
        assert TierLimits.for_tier(SubscriptionTier.MONTHLY).applications_per_week == 105
