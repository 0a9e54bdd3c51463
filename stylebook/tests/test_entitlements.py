"""Tests for the entitlement evaluator."""
from datetime import datetime, timezone

import pytest

from stylebook.core.errors import NotEntitledError
from stylebook.features.entitlements.service import (
    Feature,
    check_access,
    get_subscription_info,
    require_access,
)
from stylebook.features.people.service import apply_subscription_update, get_person
from stylebook.models.person import SubscriptionTier


def test_free_person_under_limit_is_allowed(make_person):
    person = get_person(make_person(usage=2))
    decision = check_access(person, Feature.SHOE_CARE)
    assert decision.allowed
    assert decision.usage_info.used == 2
    assert decision.usage_info.limit == 3


def test_free_person_at_limit_is_denied_with_usage(make_person):
    person = get_person(make_person(usage=3))
    decision = check_access(person, Feature.SHOE_CARE)
    assert not decision.allowed
    assert decision.reason == "You've used all 3 shoe care instructions this month"
    assert (decision.usage_info.used, decision.usage_info.limit) == (3, 3)


def test_exhausted_quota_is_restored_by_new_month(make_person):
    pid = make_person(usage=3, usage_reset_date=datetime(2026, 1, 5, tzinfo=timezone.utc))
    person = get_person(pid)
    decision = check_access(person, Feature.SHOE_CARE, now=datetime(2026, 2, 1, tzinfo=timezone.utc))
    assert decision.allowed
    assert decision.usage_info.used == 0


def test_pro_bypasses_quota_and_reports_no_usage(make_person):
    person = get_person(make_person(tier="pro", status="active", usage=40))
    decision = check_access(person, Feature.SHOE_CARE)
    assert decision.allowed
    assert decision.usage_info is None


def test_pro_tier_with_lapsed_status_still_gets_shoe_care(make_person):
    person = get_person(make_person(tier="pro", status="canceled", usage=10))
    assert check_access(person, Feature.SHOE_CARE).allowed


@pytest.mark.parametrize("feature", [Feature.AI_CHAT, Feature.TRIP_PLANNING])
def test_boolean_features_need_active_pro(make_person, feature):
    free = get_person(make_person())
    lapsed = get_person(make_person(tier="pro", status="past_due"))
    active = get_person(make_person(tier="pro", status="active"))

    assert not check_access(free, feature).allowed
    assert not check_access(lapsed, feature).allowed
    assert check_access(active, feature).allowed


def test_chat_denial_reason(make_person):
    person = get_person(make_person())
    decision = check_access(person, Feature.AI_CHAT)
    assert decision.reason == "AI Chat requires a Pro subscription"
    assert decision.usage_info is None


def test_require_access_raises_with_usage(make_person):
    person = get_person(make_person(usage=3))
    with pytest.raises(NotEntitledError) as excinfo:
        require_access(person, Feature.SHOE_CARE)
    assert excinfo.value.status_code == 403
    assert excinfo.value.extra_payload() == {"usage": {"used": 3, "limit": 3}}


def test_unknown_tier_is_treated_as_free(make_person):
    person = get_person(make_person(tier="platinum"))
    assert person.subscription_tier == SubscriptionTier.FREE
    assert not check_access(person, Feature.AI_CHAT).allowed


def test_tier_change_keeps_usage_counter(make_person):
    pid = make_person(tier="pro", status="active", usage=2)
    downgraded = apply_subscription_update(pid, tier=SubscriptionTier.FREE, status="canceled")
    assert downgraded.shoe_care_usage_this_month == 2
    decision = check_access(downgraded, Feature.SHOE_CARE)
    assert decision.allowed
    assert decision.usage_info.used == 2


def test_subscription_info_summary(make_person):
    free = get_subscription_info(get_person(make_person(usage=1)))
    assert free["tier"] == "free"
    assert free["shoe_care_limit"] == 3
    assert free["shoe_care_usage_this_month"] == 1
    assert free["can_use_shoe_care"] is True
    assert free["can_access_ai_chat"] is False

    pro = get_subscription_info(get_person(make_person(tier="pro", status="active")))
    assert pro["shoe_care_limit"] is None
    assert pro["can_access_ai_chat"] is True
    assert pro["is_active"] is True
