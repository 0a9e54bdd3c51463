"""
stylebook/features/entitlements/service.py

Entitlement evaluator: the single gate in front of every costly AI generation.

Handles:
- Boolean features (Pro-only, active subscription required)
- Quota features (Pro bypass, otherwise monthly usage < limit)
- Subscription summary for the client

The evaluator never mutates the usage counter beyond the lazy monthly reset
performed by `current_usage`. Callers increment only after a generation
succeeds, so a failed AI call never consumes quota.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, Union
import logging

from stylebook.core.config import settings
from stylebook.core.errors import NotEntitledError
from stylebook.features.usage.service import current_usage
from stylebook.models.person import Person, SubscriptionTier


logger = logging.getLogger(__name__)


class Feature(str, Enum):
    AI_CHAT = "ai_chat"
    TRIP_PLANNING = "trip_planning"
    SHOE_CARE = "shoe_care"


FEATURE_LABELS = {
    Feature.AI_CHAT: "AI Chat",
    Feature.TRIP_PLANNING: "Trip Planning",
    Feature.SHOE_CARE: "shoe care instructions",
}

# Limit value per tier: bool for all-or-nothing features, int for monthly
# quotas, None for unlimited.
PlanLimit = Union[bool, int, None]


def plan_limits() -> Dict[SubscriptionTier, Dict[Feature, PlanLimit]]:
    return {
        SubscriptionTier.FREE: {
            Feature.AI_CHAT: False,
            Feature.TRIP_PLANNING: False,
            Feature.SHOE_CARE: settings.FREE_SHOE_CARE_LIMIT,
        },
        SubscriptionTier.PRO: {
            Feature.AI_CHAT: True,
            Feature.TRIP_PLANNING: True,
            Feature.SHOE_CARE: None,
        },
    }


QUOTA_FEATURES = frozenset({Feature.SHOE_CARE})


@dataclass(frozen=True)
class UsageInfo:
    used: int
    limit: int


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None
    usage_info: Optional[UsageInfo] = None


def is_quota_feature(feature: Feature) -> bool:
    return feature in QUOTA_FEATURES


def check_access(person: Person, feature: Feature, now: Optional[datetime] = None) -> AccessDecision:
    """Decide whether a new AI generation for `feature` may proceed.

    Boolean features require an active Pro subscription. Quota features are
    open to any Pro-tier person and to free-tier people under their monthly
    limit; denials carry the exact used/limit pair.
    """
    if not is_quota_feature(feature):
        if person.is_active_pro:
            return AccessDecision(allowed=True)
        reason = f"{FEATURE_LABELS[feature]} requires a Pro subscription"
        logger.warning(
            "[entitlement] DENIED",
            extra={
                "person_id": person.id,
                "feature": feature.value,
                "tier": person.subscription_tier.value,
                "status": person.subscription_status,
            },
        )
        return AccessDecision(allowed=False, reason=reason)

    # Pro usage is never counted or checked
    if person.is_pro:
        return AccessDecision(allowed=True)

    limit = plan_limits()[SubscriptionTier.FREE][feature]
    used = current_usage(person.id, now=now)
    usage_info = UsageInfo(used=used, limit=limit)

    if used >= limit:
        logger.warning(
            "[entitlement] QUOTA_EXHAUSTED",
            extra={"person_id": person.id, "feature": feature.value, "used": used, "limit": limit},
        )
        return AccessDecision(
            allowed=False,
            reason=f"You've used all {limit} {FEATURE_LABELS[feature]} this month",
            usage_info=usage_info,
        )

    logger.info(
        "[entitlement] ALLOWED",
        extra={"person_id": person.id, "feature": feature.value, "used": used, "limit": limit},
    )
    return AccessDecision(allowed=True, usage_info=usage_info)


def require_access(person: Person, feature: Feature, now: Optional[datetime] = None) -> AccessDecision:
    """check_access, raising NotEntitledError on denial."""
    decision = check_access(person, feature, now=now)
    if not decision.allowed:
        raise NotEntitledError(decision.reason, usage_info=decision.usage_info)
    return decision


def get_subscription_info(person: Person, now: Optional[datetime] = None) -> Dict[str, Any]:
    limits = plan_limits()[SubscriptionTier.FREE]
    shoe_care_limit = limits[Feature.SHOE_CARE]
    used = current_usage(person.id, now=now)
    return {
        "tier": person.subscription_tier.value,
        "status": person.subscription_status,
        "end_date": person.subscription_end_date.isoformat() if person.subscription_end_date else None,
        "is_active": person.is_active_pro,
        "can_access_ai_chat": check_access(person, Feature.AI_CHAT).allowed,
        "can_access_trip_planning": check_access(person, Feature.TRIP_PLANNING).allowed,
        "shoe_care_usage_this_month": used,
        "shoe_care_limit": None if person.is_pro else shoe_care_limit,
        "can_use_shoe_care": person.is_pro or used < shoe_care_limit,
    }
