"""Tests for JSON extraction and the stylist adapter's failure handling."""
import json

import groq
import httpx
import pytest

from stylebook.core.errors import MalformedAIResponse
from stylebook.features.ai.parsing import extract_json_object
from stylebook.models.payloads import CareType
from stylebook.models.wardrobe import WardrobeItem


SHOE = WardrobeItem(
    id="shoe-1",
    person_id="p1",
    category="Dress Shoes",
    color_primary="black",
    material="calf leather",
    updated_at="2026-01-01T00:00:00Z",
)


def test_extracts_object_wrapped_in_prose():
    text = 'Sure! Here you go:\n```json\n{"title": "Shine", "n": 1}\n```\nEnjoy.'
    assert extract_json_object(text) == {"title": "Shine", "n": 1}


def test_skips_braces_that_are_not_json():
    text = 'Use {gentle} strokes. {"ok": true}'
    assert extract_json_object(text) == {"ok": True}


@pytest.mark.parametrize("text", ["", "no json here", "[1, 2, 3]", '{"unterminated": '])
def test_no_object_raises(text):
    with pytest.raises(MalformedAIResponse):
        extract_json_object(text)


def test_care_instructions_success(fake_client, stylist, care_json):
    fake_client.script(f"Here are your steps:\n{care_json}")
    result = stylist.care_instructions(SHOE, [], CareType.FULL_POLISH)
    assert result.ok
    assert result.value.steps[0].title == "Clean"
    assert "black" in fake_client.calls[0]["user"]


def test_schema_mismatch_is_failure(fake_client, stylist):
    fake_client.script(json.dumps({"title": "No steps", "steps": [], "frequency": "weekly"}))
    result = stylist.care_instructions(SHOE, [], CareType.QUICK_SHINE)
    assert not result.ok
    assert result.error == "malformed_response"


def test_prose_only_reply_is_failure(fake_client, stylist):
    fake_client.script("I'm sorry, I can't help with that.")
    assert stylist.shopping_recommendations([SHOE]).error == "malformed_response"


@pytest.mark.parametrize(
    "exc",
    [
        groq.APITimeoutError(request=httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")),
        RuntimeError("503 from provider"),
    ],
)
def test_provider_errors_are_failures(fake_client, stylist, exc):
    fake_client.script(exc)
    result = stylist.outfit_suggestion("What should I wear?", [SHOE], None, [])
    assert not result.ok
    assert result.error == "provider_error"
