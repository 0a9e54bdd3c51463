"""Subscription and usage summary API.

GET /v1/subscription
"""

from fastapi import APIRouter, Depends

from stylebook.core.auth import get_current_person
from stylebook.features.entitlements.service import get_subscription_info
from stylebook.models.person import Person

router = APIRouter(prefix="/v1/subscription", tags=["subscription"])


@router.get("")
def subscription_endpoint(person: Person = Depends(get_current_person)):
    return {"data": get_subscription_info(person)}
