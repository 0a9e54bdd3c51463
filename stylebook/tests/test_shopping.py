"""Tests for shopping recommendations and click tracking."""
from datetime import timedelta

import pytest

from stylebook.core.errors import AIUnavailableError
from stylebook.features.cache import service as cache
from stylebook.features.cache.service import ShoppingKey
from stylebook.features.people.service import get_person
from stylebook.features.shopping.service import get_shopping_recommendations, record_recommendation_click
from stylebook.features.wardrobe.service import add_wardrobe_item
from stylebook.models.person import utc_now
from stylebook.models.wardrobe import WardrobeItemCreate


def _wardrobe(make_person, make_item, n=3, **person_kwargs):
    pid = make_person(**person_kwargs)
    for i in range(n):
        make_item(pid, name=f"Item {i}", category="Shirts")
    return pid


def test_pro_gets_nothing_and_no_cache(make_person, make_item, fake_client, stylist, shopping_json):
    pid = _wardrobe(make_person, make_item, tier="pro", status="active")
    fake_client.script(shopping_json)

    result = get_shopping_recommendations(get_person(pid), stylist)
    assert result.recommendations == []
    assert fake_client.call_count == 0
    assert cache.get(ShoppingKey(pid)) is None


def test_thin_wardrobe_gets_nothing(make_person, make_item, fake_client, stylist, shopping_json):
    pid = _wardrobe(make_person, make_item, n=2)
    make_item(pid, status="DONATED")
    fake_client.script(shopping_json)

    assert get_shopping_recommendations(get_person(pid), stylist).recommendations == []
    assert fake_client.call_count == 0


def test_first_request_generates_then_serves_cache(make_person, make_item, fake_client, stylist, shopping_json):
    pid = _wardrobe(make_person, make_item)
    fake_client.script(shopping_json)

    first = get_shopping_recommendations(get_person(pid), stylist)
    assert first.cached is False
    assert [r.search_query for r in first.recommendations][0] == "navy chinos slim"
    assert cache.get(ShoppingKey(pid)).item_count == 3

    second = get_shopping_recommendations(get_person(pid), stylist)
    assert second.cached is True
    assert fake_client.call_count == 1


def test_wardrobe_change_within_cooldown_keeps_cache(make_person, make_item, fake_client, stylist, shopping_json):
    pid = _wardrobe(make_person, make_item)
    fake_client.script(shopping_json)
    get_shopping_recommendations(get_person(pid), stylist)

    add_wardrobe_item(pid, WardrobeItemCreate(category="Chinos", color_primary="khaki"))
    result = get_shopping_recommendations(get_person(pid), stylist)
    assert result.cached is True
    assert fake_client.call_count == 1


def test_stale_entry_after_cooldown_regenerates(make_person, make_item, fake_client, stylist, shopping_json):
    pid = _wardrobe(make_person, make_item)
    fake_client.script(shopping_json)
    get_shopping_recommendations(get_person(pid), stylist)
    record_recommendation_click(get_person(pid))

    add_wardrobe_item(pid, WardrobeItemCreate(category="Chinos", color_primary="khaki"))
    later = utc_now() + timedelta(hours=25)
    result = get_shopping_recommendations(get_person(pid), stylist, now=later)

    assert result.cached is False
    assert fake_client.call_count == 2
    entry = cache.get(ShoppingKey(pid))
    assert entry.click_count == 0
    assert entry.item_count == 4
    assert entry.generated_against == get_person(pid).wardrobe_last_modified


def test_failed_regeneration_serves_previous_set(make_person, make_item, fake_client, stylist, shopping_json):
    pid = _wardrobe(make_person, make_item)
    fake_client.script(shopping_json)
    first = get_shopping_recommendations(get_person(pid), stylist)

    add_wardrobe_item(pid, WardrobeItemCreate(category="Chinos", color_primary="khaki"))
    fake_client.script(RuntimeError("provider down"))
    result = get_shopping_recommendations(get_person(pid), stylist, now=utc_now() + timedelta(days=2))

    assert result.cached is True
    assert result.recommendations == first.recommendations


def test_failed_first_generation_raises(make_person, make_item, fake_client, stylist):
    pid = _wardrobe(make_person, make_item)
    fake_client.script("not json")
    with pytest.raises(AIUnavailableError):
        get_shopping_recommendations(get_person(pid), stylist)
    assert cache.get(ShoppingKey(pid)) is None


def test_click_tracking(make_person, make_item, fake_client, stylist, shopping_json):
    pid = _wardrobe(make_person, make_item)
    assert record_recommendation_click(get_person(pid)) is False

    fake_client.script(shopping_json)
    get_shopping_recommendations(get_person(pid), stylist)
    assert record_recommendation_click(get_person(pid)) is True
    assert cache.get(ShoppingKey(pid)).click_count == 1


def test_click_tracking_swallows_storage_errors(make_person, monkeypatch):
    person = get_person(make_person())

    def boom(person_id):
        raise RuntimeError("db gone")

    monkeypatch.setattr(cache, "record_click", boom)
    assert record_recommendation_click(person) is False
