"""
stylebook/models/cache.py

CachedGeneration: a stored AI result plus the modification timestamp it was
generated against.
"""

from datetime import datetime
from typing import Generic, TypeVar
from pydantic import BaseModel, ConfigDict, field_validator

from stylebook.models.person import ensure_utc

PayloadT = TypeVar("PayloadT")


class CachedGeneration(BaseModel, Generic[PayloadT]):
    """
    A cached AI result.

    Fresh iff `generated_against` >= the current modification timestamp of
    the data it was computed from. `click_count` is only tracked for shopping
    recommendations and resets to zero on every regeneration.
    """
    model_config = ConfigDict(frozen=True)

    payload: PayloadT
    generated_against: datetime
    updated_at: datetime
    click_count: int = 0
    item_count: int = 0

    @field_validator("generated_against", "updated_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_utc(value)
