"""Shopping recommendation API.

POST /v1/shopping-recommendations
POST /v1/shopping-recommendations/click
"""

from fastapi import APIRouter, Depends, Request

from stylebook.core.auth import get_current_person
from stylebook.core.logging import get_request_id
from stylebook.features.ai.service import StylistAI, get_stylist_ai
from stylebook.features.shopping.service import get_shopping_recommendations, record_recommendation_click
from stylebook.models.person import Person

router = APIRouter(prefix="/v1/shopping-recommendations", tags=["shopping"])


@router.post("")
def shopping_recommendations_endpoint(
    request: Request,
    person: Person = Depends(get_current_person),
    ai: StylistAI = Depends(get_stylist_ai),
):
    rid = getattr(request.state, "request_id", None) or get_request_id()
    result = get_shopping_recommendations(person, ai)
    return {
        "data": {
            "recommendations": [r.model_dump(mode="json", by_alias=True) for r in result.recommendations],
            "cached": result.cached,
        },
        "request_id": rid,
    }


@router.post("/click")
def shopping_click_endpoint(person: Person = Depends(get_current_person)):
    record_recommendation_click(person)
    return {"ok": True}
