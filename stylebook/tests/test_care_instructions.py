"""Tests for cached, quota-gated shoe care instructions."""
import pytest

from stylebook.core.errors import AIUnavailableError, NotEntitledError, SubjectNotFoundError
from stylebook.features.care.service import generate_care_instructions
from stylebook.features.people.service import get_person
from stylebook.features.wardrobe.service import add_care_supply, update_wardrobe_item
from stylebook.models.payloads import CareType
from stylebook.models.wardrobe import CareSupplyCreate, WardrobeItemUpdate


def test_free_generation_is_cached_and_counted(make_person, make_item, fake_client, stylist, care_json):
    pid = make_person(usage=0)
    shoe_id = make_item(pid)
    fake_client.script(care_json)

    first = generate_care_instructions(get_person(pid), shoe_id, CareType.FULL_POLISH, stylist)
    assert first.cached is False
    assert first.instructions.title.startswith("Full polish")
    assert (first.usage_info.used, first.usage_info.limit) == (1, 3)

    second = generate_care_instructions(get_person(pid), shoe_id, CareType.FULL_POLISH, stylist)
    assert second.cached is True
    assert second.instructions.model_dump() == first.instructions.model_dump()
    assert fake_client.call_count == 1
    assert get_person(pid).shoe_care_usage_this_month == 1


def test_cache_hit_is_served_after_quota_exhausted(make_person, make_item, fake_client, stylist, care_json):
    pid = make_person(usage=2)
    shoe_id = make_item(pid)
    fake_client.script(care_json)

    generate_care_instructions(get_person(pid), shoe_id, CareType.FULL_POLISH, stylist)
    assert get_person(pid).shoe_care_usage_this_month == 3

    # Limit reached, but cached instructions never re-check entitlement
    again = generate_care_instructions(get_person(pid), shoe_id, CareType.FULL_POLISH, stylist)
    assert again.cached is True

    with pytest.raises(NotEntitledError) as excinfo:
        generate_care_instructions(get_person(pid), shoe_id, CareType.DEEP_CLEAN, stylist)
    assert excinfo.value.usage_info.used == 3
    assert fake_client.call_count == 1


def test_failed_generation_stores_nothing_and_costs_nothing(make_person, make_item, fake_client, stylist, care_json):
    pid = make_person(usage=1)
    shoe_id = make_item(pid)
    fake_client.script("the model rambled without JSON")

    with pytest.raises(AIUnavailableError):
        generate_care_instructions(get_person(pid), shoe_id, CareType.QUICK_SHINE, stylist)
    assert get_person(pid).shoe_care_usage_this_month == 1

    fake_client.script(care_json)
    result = generate_care_instructions(get_person(pid), shoe_id, CareType.QUICK_SHINE, stylist)
    assert result.cached is False
    assert get_person(pid).shoe_care_usage_this_month == 2


def test_pro_usage_is_not_counted(make_person, make_item, fake_client, stylist, care_json):
    pid = make_person(tier="pro", status="active", usage=0)
    shoe_id = make_item(pid)
    fake_client.script(care_json)

    result = generate_care_instructions(get_person(pid), shoe_id, CareType.CONDITIONING, stylist)
    assert result.cached is False
    assert result.usage_info is None
    assert get_person(pid).shoe_care_usage_this_month == 0


def test_supply_change_invalidates_cache(make_person, make_item, fake_client, stylist, care_json):
    pid = make_person(tier="pro", status="active")
    shoe_id = make_item(pid)
    fake_client.script(care_json)

    generate_care_instructions(get_person(pid), shoe_id, CareType.FULL_POLISH, stylist)
    add_care_supply(pid, CareSupplyCreate(name="Horsehair brush", category="BRUSH"))

    result = generate_care_instructions(get_person(pid), shoe_id, CareType.FULL_POLISH, stylist)
    assert result.cached is False
    assert fake_client.call_count == 2
    assert "Horsehair brush" in fake_client.calls[1]["user"]


def test_shoe_edit_invalidates_cache(make_person, make_item, fake_client, stylist, care_json):
    pid = make_person(tier="pro", status="active")
    shoe_id = make_item(pid)
    fake_client.script(care_json)

    generate_care_instructions(get_person(pid), shoe_id, CareType.FULL_POLISH, stylist)
    update_wardrobe_item(pid, shoe_id, WardrobeItemUpdate(material="suede"))

    result = generate_care_instructions(get_person(pid), shoe_id, CareType.FULL_POLISH, stylist)
    assert result.cached is False


def test_someone_elses_shoe_is_not_found(make_person, make_item, stylist):
    owner = make_person()
    shoe_id = make_item(owner)
    intruder = get_person(make_person())

    with pytest.raises(SubjectNotFoundError):
        generate_care_instructions(intruder, shoe_id, CareType.FULL_POLISH, stylist)
    with pytest.raises(SubjectNotFoundError):
        generate_care_instructions(intruder, "does-not-exist", CareType.FULL_POLISH, stylist)
