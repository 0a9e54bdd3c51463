"""AI stylist orchestration.

Builds bounded prompt context, calls the injected completion client and parses
the reply into typed payloads. Every failure (provider error, timeout, text
without JSON, JSON that does not match the schema) comes back as a failed
AIResult, so feature handlers branch on success vs failure only.

Never touches the cache or usage counters.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError as PydanticValidationError

from stylebook.core.config import settings
from stylebook.core.errors import AIUnavailableError, MalformedAIResponse
from stylebook.core.logging import log_event
from stylebook.features.ai.client import CompletionClient
from stylebook.features.ai.parsing import extract_json_object
from stylebook.features.ai.prompts import (
    CARE_SYSTEM_PROMPT,
    CARE_TYPE_GOALS,
    SHOPPING_SYSTEM_PROMPT,
    STYLIST_SYSTEM_PROMPT,
)
from stylebook.models.payloads import (
    CareInstructionsPayload,
    CareType,
    OutfitSuggestionPayload,
    ShoppingRecommendation,
    ShoppingRecommendationPayload,
)
from stylebook.models.person import StylePreferences
from stylebook.models.wardrobe import CareSupply, OutfitHistory, WardrobeItem

logger = logging.getLogger("stylebook")

T = TypeVar("T")


@dataclass(frozen=True)
class AIResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "AIResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "AIResult[T]":
        return cls(error=error)


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


def _clamp(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 3)].rstrip() + "..."


def _iso(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment else None


def _item_summary(item: WardrobeItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "subcategory": item.subcategory,
        "colorPrimary": item.color_primary,
        "colorSecondary": item.color_secondary,
        "pattern": item.pattern,
        "brand": item.brand,
        "material": item.material,
        "formalityLevel": item.formality_level,
        "seasonSuitability": list(item.season_suitability),
        "lastWorn": _iso(item.last_worn),
        "timesWorn": item.times_worn,
    }


def _supply_summary(supply: CareSupply) -> Dict[str, Any]:
    return {
        "name": supply.name,
        "category": supply.category,
        "subcategory": supply.subcategory,
        "brand": supply.brand,
        "color": supply.color,
        "compatibleColors": list(supply.compatible_colors),
        "compatibleMaterials": list(supply.compatible_materials),
    }


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


class StylistAI:
    """Prompt building and response parsing around an injected CompletionClient."""

    def __init__(
        self,
        client: CompletionClient,
        *,
        max_items: Optional[int] = None,
        recent_outfits: Optional[int] = None,
        history_limit: Optional[int] = None,
    ):
        self.client = client
        self.max_items = max_items or settings.MAX_CONTEXT_ITEMS
        self.recent_outfits = recent_outfits or settings.RECENT_OUTFITS_LIMIT
        self.history_limit = history_limit or settings.CHAT_HISTORY_LIMIT

    def _generate(self, feature: str, system: str, user: str, parse: Callable[[Dict[str, Any]], T]) -> AIResult[T]:
        try:
            text = self.client.complete(system, user)
            data = extract_json_object(text)
            value = parse(data)
        except MalformedAIResponse as exc:
            log_event("warning", "[ai] malformed response", feature=feature, extra={"reason": exc})
            return AIResult.failure("malformed_response")
        except PydanticValidationError as exc:
            log_event(
                "warning",
                "[ai] response failed schema validation",
                feature=feature,
                extra={"reason": f"{exc.error_count()} errors"},
            )
            return AIResult.failure("malformed_response")
        except Exception as exc:
            # Provider errors and timeouts share the malformed-response path
            logger.error(
                f"[ai] provider call failed: {type(exc).__name__}",
                exc_info=True,
                extra={"feature": feature},
            )
            return AIResult.failure("provider_error")
        return AIResult.success(value)

    def care_instructions(
        self,
        shoe: WardrobeItem,
        supplies: Sequence[CareSupply],
        care_type: CareType,
    ) -> AIResult[CareInstructionsPayload]:
        shoe_context = {
            "category": shoe.category,
            "subcategory": shoe.subcategory,
            "colorPrimary": shoe.color_primary,
            "colorSecondary": shoe.color_secondary,
            "material": shoe.material,
            "brand": shoe.brand,
        }
        user = (
            f"Shoe:\n{_dump(shoe_context)}\n\n"
            f"Supplies I own:\n{_dump([_supply_summary(s) for s in supplies[: self.max_items]])}\n\n"
            f"Care goal: {CARE_TYPE_GOALS[care_type.value]}.\n"
            "Return only valid JSON."
        )
        return self._generate(
            "shoe_care", CARE_SYSTEM_PROMPT, user, CareInstructionsPayload.model_validate
        )

    def shopping_recommendations(self, items: Sequence[WardrobeItem]) -> AIResult[List[ShoppingRecommendation]]:
        user = (
            f"My wardrobe:\n{_dump([_item_summary(i) for i in items[: self.max_items]])}\n\n"
            "What should I buy next? Return only valid JSON."
        )
        return self._generate(
            "shopping_recommendations",
            SHOPPING_SYSTEM_PROMPT,
            user,
            lambda data: ShoppingRecommendationPayload.model_validate(data).recommendations,
        )

    def outfit_suggestion(
        self,
        message: str,
        items: Sequence[WardrobeItem],
        preferences: Optional[StylePreferences],
        recent_outfits: Sequence[OutfitHistory],
        transcript: Sequence[ChatMessage] = (),
    ) -> AIResult[OutfitSuggestionPayload]:
        history = [
            {"role": m.role, "content": _clamp(m.content, 1000)}
            for m in list(transcript)[-self.history_limit:]
        ]
        outfits = [
            {"id": o.id, "name": o.name, "itemIds": list(o.item_ids), "lastWorn": _iso(o.last_worn)}
            for o in list(recent_outfits)[: self.recent_outfits]
        ]
        prefs = preferences.model_dump() if isinstance(preferences, BaseModel) else {}
        user = (
            f"My wardrobe:\n{_dump([_item_summary(i) for i in items[: self.max_items]])}\n\n"
            f"My preferences:\n{_dump(prefs)}\n\n"
            f"Recent outfits worn:\n{_dump(outfits)}\n\n"
            f"Conversation so far:\n{_dump(history)}\n\n"
            f"User request: {_clamp(message, 2000)}\n\n"
            "Determine if this needs a new outfit or is just a question. Return only valid JSON."
        )
        return self._generate(
            "ai_chat", STYLIST_SYSTEM_PROMPT, user, OutfitSuggestionPayload.model_validate
        )


def get_stylist_ai(request: Request) -> StylistAI:
    """FastAPI dependency: a StylistAI around the client built at startup."""
    client = getattr(request.app.state, "completion_client", None)
    if client is None:
        logger.error("[ai] no completion client configured (GROQ_API_KEY missing?)")
        raise AIUnavailableError()
    return StylistAI(client)
