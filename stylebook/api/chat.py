"""AI stylist chat API.

POST /v1/chat
"""

from typing import List, Literal
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from stylebook.core.auth import get_current_person
from stylebook.core.logging import get_request_id
from stylebook.features.ai.service import ChatMessage, StylistAI, get_stylist_ai
from stylebook.features.chat.service import suggest_outfit
from stylebook.models.person import Person

router = APIRouter(prefix="/v1/chat", tags=["chat"])


class ChatMessageIn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(max_length=4000)


class ChatRequest(BaseModel):
    messages: List[ChatMessageIn] = Field(default_factory=list)


@router.post("")
def chat_endpoint(
    body: ChatRequest,
    request: Request,
    person: Person = Depends(get_current_person),
    ai: StylistAI = Depends(get_stylist_ai),
):
    rid = getattr(request.state, "request_id", None) or get_request_id()
    reply = suggest_outfit(
        person,
        [ChatMessage(role=m.role, content=m.content) for m in body.messages],
        ai,
    )

    suggested = None
    if reply.suggested_outfit is not None:
        outfit = reply.suggested_outfit
        suggested = {
            "name": outfit.name,
            "item_ids": outfit.item_ids,
            "items": [
                {"id": item.id, "category": item.category, "color_primary": item.color_primary}
                for item in outfit.items
            ],
            "reasoning": outfit.reasoning,
            "occasion_type": outfit.occasion_type,
            "formality_score": outfit.formality_score,
        }

    return {"data": {"content": reply.content, "suggested_outfit": suggested}, "request_id": rid}
