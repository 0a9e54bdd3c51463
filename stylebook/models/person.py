"""
stylebook/models/person.py

Person model: the subject of entitlement checks.

Only the fields the cache and entitlement logic read are modelled here.
Tier and status are written by the billing collaborator; this service reads them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    """Timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def ensure_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class SubscriptionTier(str, Enum):
    FREE = "free"
    PRO = "pro"


class StylePreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    preferred_colors: List[str] = Field(default_factory=list)
    avoid_colors: List[str] = Field(default_factory=list)
    style_notes: Optional[str] = None


class Person(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    clerk_user_id: str
    display_name: Optional[str] = None
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    subscription_status: str = "inactive"
    subscription_end_date: Optional[datetime] = None
    shoe_care_usage_this_month: int = Field(default=0, ge=0)
    usage_reset_date: datetime
    wardrobe_last_modified: datetime
    supplies_last_modified: datetime
    preferences: Optional[StylePreferences] = None

    @field_validator(
        "usage_reset_date",
        "wardrobe_last_modified",
        "supplies_last_modified",
        "subscription_end_date",
    )
    @classmethod
    def _aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @field_validator("subscription_tier", mode="before")
    @classmethod
    def _default_tier(cls, value):
        # Unknown or missing tiers are treated as free
        if value in (None, ""):
            return SubscriptionTier.FREE
        try:
            return SubscriptionTier(value)
        except ValueError:
            return SubscriptionTier.FREE

    @property
    def is_pro(self) -> bool:
        return self.subscription_tier == SubscriptionTier.PRO

    @property
    def is_active_pro(self) -> bool:
        return self.is_pro and self.subscription_status == "active"
