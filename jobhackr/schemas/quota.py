from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from jobhackr.config import SUBSCRIPTION_LIMITS


class SubscriptionTier(str, Enum):
    FREE = "free"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    PREMIUM = "premium"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            value_lower = value.strip().lower()
            for member in cls:
                if member.value == value_lower:
                    return member
        return None


class TierLimits(BaseModel):
    """Application caps for a subscription tier (None = period not capped)."""

    applications_per_day: int | None = None
    applications_per_week: int | None = None

    @classmethod
    def for_tier(cls, tier: SubscriptionTier) -> "TierLimits":
        return cls(**SUBSCRIPTION_LIMITS.get(tier.value, SUBSCRIPTION_LIMITS["free"]))


class QuotaCounters(BaseModel):
    """Per-user application counters and the periods they belong to."""

    used_today: int = 0
    used_this_week: int = 0
    daily_period_start: datetime | None = Field(
        default=None, description="Local midnight the daily counter belongs to"
    )
    weekly_period_start: datetime | None = Field(
        default=None, description="Monday midnight the weekly counter belongs to"
    )


class QuotaStatus(BaseModel):
    """Snapshot of a user's remaining application allowance."""

    tier: SubscriptionTier
    used_today: int
    used_this_week: int
    daily_limit: int | None
    weekly_limit: int | None
    applications_left: int
    can_apply: bool
    reset_at: datetime
    reason: str | None = None
