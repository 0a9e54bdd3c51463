"""
AI stylist chat.

Answers a style question or builds an outfit from the person's active
wardrobe. Requires an active Pro subscription; replies are not cached.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging

from stylebook.core.errors import AIUnavailableError, ValidationError
from stylebook.features.ai.service import ChatMessage, StylistAI
from stylebook.features.entitlements.service import Feature, require_access
from stylebook.features.wardrobe.service import list_items, recent_outfits
from stylebook.models.person import Person
from stylebook.models.wardrobe import WardrobeItem


logger = logging.getLogger(__name__)

EMPTY_WARDROBE_REPLY = (
    "It looks like you haven't added any items to your wardrobe yet. Head over to the "
    "Wardrobe section and upload some photos of your clothing, and I'll be able to help "
    "you put together outfits!"
)


@dataclass(frozen=True)
class SuggestedOutfit:
    name: Optional[str]
    item_ids: List[str]
    items: List[WardrobeItem]
    reasoning: str
    occasion_type: Optional[str]
    formality_score: Optional[int]


@dataclass(frozen=True)
class ChatReply:
    content: str
    suggested_outfit: Optional[SuggestedOutfit] = None


def suggest_outfit(person: Person, messages: Sequence[ChatMessage], ai: StylistAI) -> ChatReply:
    """
    Raises:
        NotEntitledError: No active Pro subscription
        ValidationError: No user message to answer
        AIUnavailableError: The stylist call failed
    """
    require_access(person, Feature.AI_CHAT)

    if not messages or not messages[-1].content.strip():
        raise ValidationError("No message provided")
    last_message = messages[-1].content

    items = list_items(person.id, active_only=True, limit=ai.max_items)
    if not items:
        return ChatReply(content=EMPTY_WARDROBE_REPLY)

    history = recent_outfits(person.id, limit=ai.recent_outfits)
    result = ai.outfit_suggestion(
        last_message,
        items,
        person.preferences,
        history,
        transcript=messages[:-1],
    )
    if not result.ok:
        logger.warning("[chat] generation failed", extra={"person_id": person.id, "reason": result.error})
        raise AIUnavailableError()

    suggestion = result.value
    content = suggestion.reasoning
    if suggestion.styling_tips:
        content += f"\n\n**Styling tips:** {suggestion.styling_tips}"

    if not suggestion.needs_outfit:
        return ChatReply(content=content)

    # Drop ids the model invented or that belong to inactive items
    by_id = {item.id: item for item in items}
    item_ids = [item_id for item_id in suggestion.item_ids if item_id in by_id]

    return ChatReply(
        content=content,
        suggested_outfit=SuggestedOutfit(
            name=suggestion.outfit_name,
            item_ids=item_ids,
            items=[by_id[item_id] for item_id in item_ids],
            reasoning=suggestion.reasoning,
            occasion_type=suggestion.occasion_type.value if suggestion.occasion_type else None,
            formality_score=suggestion.formality_score,
        ),
    )
