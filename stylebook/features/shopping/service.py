"""
Shopping recommendations for free-tier wardrobes.

One cached set per person, regenerated according to the throttle in
`throttle.py`. Pro-tier people and thin wardrobes get no recommendations
and never touch the cache.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import logging

from stylebook.core.config import settings
from stylebook.core.errors import AIUnavailableError
from stylebook.features.ai.service import StylistAI
from stylebook.features.cache import service as cache
from stylebook.features.cache.service import ShoppingKey
from stylebook.features.shopping.throttle import ThrottleWindows, evaluate
from stylebook.features.wardrobe.service import count_wardrobe_items, list_items
from stylebook.models.payloads import ShoppingRecommendation
from stylebook.models.person import Person, utc_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShoppingRecommendationsResult:
    recommendations: List[ShoppingRecommendation] = field(default_factory=list)
    cached: bool = False


def get_shopping_recommendations(
    person: Person,
    ai: StylistAI,
    now: Optional[datetime] = None,
    windows: Optional[ThrottleWindows] = None,
) -> ShoppingRecommendationsResult:
    """
    Serve or regenerate the person's recommendation set.

    A failed regeneration falls back to the existing set when there is one.

    Raises:
        AIUnavailableError: Generation failed and nothing was cached
    """
    if person.is_pro:
        return ShoppingRecommendationsResult()

    item_count = count_wardrobe_items(person.id)
    if item_count < settings.SHOPPING_MIN_ITEMS:
        logger.info(
            "[shopping] wardrobe too small",
            extra={"person_id": person.id, "item_count": item_count},
        )
        return ShoppingRecommendationsResult()

    key = ShoppingKey(person_id=person.id)
    entry = cache.get(key)
    verdict = evaluate(entry, person.wardrobe_last_modified, now=now, windows=windows)
    logger.info(
        "[shopping] throttle",
        extra={"person_id": person.id, "decision": verdict.decision.value, "reason": verdict.reason},
    )
    if not verdict.regenerate:
        return ShoppingRecommendationsResult(recommendations=list(entry.payload), cached=True)

    generated_against = person.wardrobe_last_modified
    items = list_items(person.id, limit=settings.MAX_CONTEXT_ITEMS)
    result = ai.shopping_recommendations(items)
    if not result.ok:
        logger.warning(
            "[shopping] generation failed",
            extra={"person_id": person.id, "reason": result.error},
        )
        if entry is not None:
            return ShoppingRecommendationsResult(recommendations=list(entry.payload), cached=True)
        raise AIUnavailableError()

    cache.put(key, result.value, generated_against, item_count=item_count, now=now or utc_now())
    return ShoppingRecommendationsResult(recommendations=result.value, cached=False)


def record_recommendation_click(person: Person) -> bool:
    """Count a click-through. Never fails the caller."""
    try:
        return cache.record_click(person.id)
    except Exception:
        logger.warning("[shopping] click tracking failed", exc_info=True, extra={"person_id": person.id})
        return False
