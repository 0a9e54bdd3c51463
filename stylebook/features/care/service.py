"""
Shoe care instructions.

Cached per (shoe, care type). An entry depends on the person's supply
collection and on the shoe itself, so it goes stale when either changes.
Generation is a quota feature: free-tier usage is counted only after a
successful generation.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging

from stylebook.core.errors import AIUnavailableError
from stylebook.features.ai.service import StylistAI
from stylebook.features.cache import service as cache
from stylebook.features.cache.service import CareInstructionKey
from stylebook.features.entitlements.service import Feature, UsageInfo, require_access
from stylebook.features.usage.service import increment_usage
from stylebook.features.wardrobe.service import get_item, list_available_supplies
from stylebook.models.payloads import CareInstructionsPayload, CareType
from stylebook.models.person import Person, utc_now
from stylebook.models.wardrobe import WardrobeItem


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CareInstructionsResult:
    instructions: CareInstructionsPayload
    cached: bool
    usage_info: Optional[UsageInfo] = None


def care_dependency_timestamp(person: Person, shoe: WardrobeItem) -> datetime:
    return max(person.supplies_last_modified, shoe.updated_at)


def generate_care_instructions(
    person: Person,
    shoe_id: str,
    care_type: CareType,
    ai: StylistAI,
    now: Optional[datetime] = None,
) -> CareInstructionsResult:
    """
    Return care instructions for one of the person's shoes.

    Raises:
        SubjectNotFoundError: Shoe missing or owned by someone else
        NotEntitledError: Cache miss and the monthly quota is used up
        AIUnavailableError: Cache miss and generation failed (nothing is stored or counted)
    """
    shoe = get_item(person.id, shoe_id)
    key = CareInstructionKey(wardrobe_item_id=shoe.id, care_type=care_type)
    depends_on = care_dependency_timestamp(person, shoe)

    entry = cache.get(key)
    if entry is not None and cache.is_valid(entry, depends_on):
        logger.info("[care] cache hit", extra={"person_id": person.id, "cache": "hit"})
        return CareInstructionsResult(instructions=entry.payload, cached=True)

    logger.info(
        "[care] cache miss",
        extra={"person_id": person.id, "cache": "stale" if entry else "miss"},
    )
    decision = require_access(person, Feature.SHOE_CARE, now=now)

    supplies = list_available_supplies(person.id)
    result = ai.care_instructions(shoe, supplies, care_type)
    if not result.ok:
        logger.warning(
            "[care] generation failed",
            extra={"person_id": person.id, "reason": result.error},
        )
        raise AIUnavailableError()

    cache.put(key, result.value, depends_on, now=now or utc_now())

    usage_info = decision.usage_info
    if not person.is_pro:
        used = increment_usage(person.id)
        if usage_info is not None:
            usage_info = UsageInfo(used=used, limit=usage_info.limit)

    return CareInstructionsResult(instructions=result.value, cached=False, usage_info=usage_info)
