"""
Content cache for AI-generated payloads.

Entries are keyed by the subject they describe and carry the modification
timestamp they were generated against. An entry is fresh while that
timestamp is >= the dependency's current clock; there is no TTL.

Writes are single-statement upserts so payload, generated_against and
updated_at are always observed together.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union
import logging
from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import select, update

from stylebook.core.database import (
    get_db_session,
    upsert,
    care_instruction_cache,
    shopping_recommendation_cache,
)
from stylebook.models.cache import CachedGeneration
from stylebook.models.payloads import CareInstructionsPayload, CareType, ShoppingRecommendation
from stylebook.models.person import ensure_utc, utc_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CareInstructionKey:
    wardrobe_item_id: str
    care_type: CareType


@dataclass(frozen=True)
class ShoppingKey:
    person_id: str


CacheKey = Union[CareInstructionKey, ShoppingKey]

_CARE_ENTRY = TypeAdapter(CachedGeneration[CareInstructionsPayload])
_SHOPPING_ENTRY = TypeAdapter(CachedGeneration[List[ShoppingRecommendation]])
_SHOPPING_LIST = TypeAdapter(List[ShoppingRecommendation])


def is_valid(entry: CachedGeneration, current_mod_timestamp: datetime) -> bool:
    """Fresh iff generated against data at least as new as the current clock."""
    return ensure_utc(entry.generated_against) >= ensure_utc(current_mod_timestamp)


def get(key: CacheKey) -> Optional[CachedGeneration]:
    """Return the stored entry, or None when absent (meaning: must generate).

    A stored payload that no longer matches its schema is treated as absent.
    """
    if isinstance(key, CareInstructionKey):
        table = care_instruction_cache
        query = (
            select(table)
            .where(table.c.wardrobe_item_id == key.wardrobe_item_id)
            .where(table.c.care_type == key.care_type.value)
        )
        adapter = _CARE_ENTRY
    else:
        table = shopping_recommendation_cache
        query = select(table).where(table.c.person_id == key.person_id)
        adapter = _SHOPPING_ENTRY

    with get_db_session() as session:
        row = session.execute(query).first()
    if row is None:
        return None

    data = dict(row._mapping)
    try:
        return adapter.validate_python(data)
    except PydanticValidationError:
        logger.warning("[cache] unreadable payload, treating as miss", extra={"cache": _describe(key)})
        return None


def put(
    key: CacheKey,
    payload: Union[CareInstructionsPayload, List[ShoppingRecommendation]],
    generated_against: datetime,
    *,
    item_count: int = 0,
    now: Optional[datetime] = None,
) -> None:
    """Upsert an entry. Last writer wins; engagement counters reset to zero."""
    stamp = ensure_utc(now) or utc_now()
    generated_against = ensure_utc(generated_against)

    with get_db_session() as session:
        if isinstance(key, CareInstructionKey):
            upsert(
                session,
                care_instruction_cache,
                values={
                    "wardrobe_item_id": key.wardrobe_item_id,
                    "care_type": key.care_type.value,
                    "payload": payload.model_dump(mode="json"),
                    "generated_against": generated_against,
                    "updated_at": stamp,
                },
                index_elements=["wardrobe_item_id", "care_type"],
                update_columns=["payload", "generated_against", "updated_at"],
            )
        else:
            upsert(
                session,
                shopping_recommendation_cache,
                values={
                    "person_id": key.person_id,
                    "payload": _SHOPPING_LIST.dump_python(payload, mode="json"),
                    "generated_against": generated_against,
                    "updated_at": stamp,
                    "item_count": item_count,
                    "click_count": 0,
                },
                index_elements=["person_id"],
                update_columns=["payload", "generated_against", "updated_at", "item_count", "click_count"],
            )

    logger.info("[cache] stored", extra={"cache": _describe(key)})


def record_click(person_id: str) -> bool:
    """Count a click-through on the person's shopping recommendations.

    Returns False when there is no cache entry to count against.
    """
    with get_db_session() as session:
        result = session.execute(
            update(shopping_recommendation_cache)
            .where(shopping_recommendation_cache.c.person_id == person_id)
            .values(click_count=shopping_recommendation_cache.c.click_count + 1)
        )
    return bool(result.rowcount)


def _describe(key: CacheKey) -> str:
    if isinstance(key, CareInstructionKey):
        return f"care:{key.wardrobe_item_id}:{key.care_type.value}"
    return f"shopping:{key.person_id}"
