"""Shoe care instructions API.

POST /v1/shoe-care/instructions
"""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, field_validator

from stylebook.core.auth import get_current_person
from stylebook.core.logging import get_request_id
from stylebook.features.ai.service import StylistAI, get_stylist_ai
from stylebook.features.care.service import generate_care_instructions
from stylebook.models.payloads import CareType
from stylebook.models.person import Person

router = APIRouter(prefix="/v1/shoe-care", tags=["shoe-care"])


class CareInstructionsRequest(BaseModel):
    shoe_id: str
    care_type: CareType = CareType.FULL_POLISH

    @field_validator("shoe_id")
    @classmethod
    def shoe_id_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("shoe_id is required")
        return value


@router.post("/instructions")
def care_instructions_endpoint(
    body: CareInstructionsRequest,
    request: Request,
    person: Person = Depends(get_current_person),
    ai: StylistAI = Depends(get_stylist_ai),
):
    rid = getattr(request.state, "request_id", None) or get_request_id()
    result = generate_care_instructions(person, body.shoe_id, body.care_type, ai)

    usage = None
    if result.usage_info is not None:
        usage = {"used": result.usage_info.used, "limit": result.usage_info.limit}

    return {
        "data": {
            "instructions": result.instructions.model_dump(mode="json", by_alias=True),
            "cached": result.cached,
            "usage": usage,
        },
        "request_id": rid,
    }
