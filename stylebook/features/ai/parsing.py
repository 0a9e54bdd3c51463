"""Extraction of JSON objects from free-text model output."""

import json
from typing import Any, Dict

from stylebook.core.errors import MalformedAIResponse

_decoder = json.JSONDecoder()


def extract_json_object(text: str) -> Dict[str, Any]:
    """Return the first well-formed JSON object embedded in `text`.

    Models wrap JSON in prose or code fences; each `{` is tried as a start
    position until one decodes to an object.

    Raises:
        MalformedAIResponse: No JSON object in the text
    """
    if not text:
        raise MalformedAIResponse("Empty model response")

    start = text.find("{")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)

    raise MalformedAIResponse("No JSON object found in model response")
