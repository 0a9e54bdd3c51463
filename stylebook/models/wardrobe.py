"""Wardrobe, care supply and outfit history models used to build AI context."""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

from stylebook.models.person import ensure_utc


class ItemStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    DONATED = "DONATED"
    SOLD = "SOLD"


# Items that no longer count as part of the wardrobe
INACTIVE_ITEM_STATUSES = (ItemStatus.ARCHIVED.value, ItemStatus.DONATED.value, ItemStatus.SOLD.value)


class SupplyStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    ORDERED = "ORDERED"
    DISCONTINUED = "DISCONTINUED"


AVAILABLE_SUPPLY_STATUSES = (SupplyStatus.IN_STOCK.value, SupplyStatus.LOW_STOCK.value)


class WardrobeItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    person_id: str
    name: Optional[str] = None
    category: str
    subcategory: Optional[str] = None
    color_primary: str
    color_secondary: Optional[str] = None
    pattern: Optional[str] = None
    brand: Optional[str] = None
    material: Optional[str] = None
    formality_level: int = 3
    season_suitability: List[str] = Field(default_factory=list)
    status: ItemStatus = ItemStatus.ACTIVE
    times_worn: int = 0
    last_worn: Optional[datetime] = None
    updated_at: datetime

    @field_validator("last_worn", "updated_at")
    @classmethod
    def _aware(cls, value):
        return ensure_utc(value)

    @field_validator("season_suitability", mode="before")
    @classmethod
    def _seasons(cls, value):
        return value or []


class WardrobeItemCreate(BaseModel):
    name: Optional[str] = None
    category: str
    subcategory: Optional[str] = None
    color_primary: str
    color_secondary: Optional[str] = None
    pattern: Optional[str] = None
    brand: Optional[str] = None
    material: Optional[str] = None
    formality_level: int = Field(default=3, ge=1, le=5)
    season_suitability: List[str] = Field(default_factory=list)


class WardrobeItemUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    color_primary: Optional[str] = None
    color_secondary: Optional[str] = None
    pattern: Optional[str] = None
    brand: Optional[str] = None
    material: Optional[str] = None
    formality_level: Optional[int] = Field(default=None, ge=1, le=5)
    season_suitability: Optional[List[str]] = None
    status: Optional[ItemStatus] = None


class CareSupply(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    person_id: str
    name: str
    category: str
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    compatible_colors: List[str] = Field(default_factory=list)
    compatible_materials: List[str] = Field(default_factory=list)
    status: SupplyStatus = SupplyStatus.IN_STOCK

    @field_validator("compatible_colors", "compatible_materials", mode="before")
    @classmethod
    def _lists(cls, value):
        return value or []


class CareSupplyCreate(BaseModel):
    name: str
    category: str
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    compatible_colors: List[str] = Field(default_factory=list)
    compatible_materials: List[str] = Field(default_factory=list)
    status: SupplyStatus = SupplyStatus.IN_STOCK


class CareSupplyUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    compatible_colors: Optional[List[str]] = None
    compatible_materials: Optional[List[str]] = None
    status: Optional[SupplyStatus] = None


class OutfitHistory(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    item_ids: List[str] = Field(default_factory=list)
    last_worn: Optional[datetime] = None
