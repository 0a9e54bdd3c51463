"""
Typed AI payloads, one schema per feature.

Stored as plain JSON at the persistence boundary and re-validated on read,
so in-memory code only ever handles these models.
"""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class CareType(str, Enum):
    FULL_POLISH = "full_polish"
    QUICK_SHINE = "quick_shine"
    DEEP_CLEAN = "deep_clean"
    CONDITIONING = "conditioning"
    SUEDE_CARE = "suede_care"
    WATER_PROTECTION = "water_protection"


class OccasionType(str, Enum):
    CASUAL = "CASUAL"
    SMART_CASUAL = "SMART_CASUAL"
    BUSINESS_CASUAL = "BUSINESS_CASUAL"
    BUSINESS_FORMAL = "BUSINESS_FORMAL"
    BLACK_TIE = "BLACK_TIE"
    DATE_NIGHT = "DATE_NIGHT"
    CHURCH = "CHURCH"
    TRAVEL = "TRAVEL"
    OUTDOOR = "OUTDOOR"
    ATHLETIC = "ATHLETIC"
    OTHER = "OTHER"


class SupplyNeeded(BaseModel):
    name: str
    purpose: str
    owned: bool = True


class CareStep(BaseModel):
    step: int
    title: str
    description: str
    supply_used: Optional[str] = Field(default=None, alias="supplyUsed")
    duration: Optional[str] = None
    tips: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class CareInstructionsPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    supplies_needed: List[SupplyNeeded] = Field(default_factory=list, alias="suppliesNeeded")
    steps: List[CareStep] = Field(min_length=1)
    frequency: str
    warnings: List[str] = Field(default_factory=list)
    quick_maintenance_tips: List[str] = Field(default_factory=list, alias="quickMaintenanceTips")


class ShoppingRecommendation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_query: str = Field(alias="searchQuery")
    category: str
    suggested_color: str = Field(alias="suggestedColor")
    title: str
    description: str


class ShoppingRecommendationPayload(BaseModel):
    recommendations: List[ShoppingRecommendation] = Field(default_factory=list)


class OutfitAlternative(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId")
    reason: str


class OutfitSuggestionPayload(BaseModel):
    """A stylist reply. `needs_outfit` is False for plain questions and advice."""
    model_config = ConfigDict(populate_by_name=True)

    needs_outfit: bool = Field(default=False, alias="needsOutfit")
    reasoning: str
    outfit_name: Optional[str] = Field(default=None, alias="outfitName")
    item_ids: List[str] = Field(default_factory=list, alias="itemIds")
    occasion_type: Optional[OccasionType] = Field(default=None, alias="occasionType")
    formality_score: Optional[int] = Field(default=None, alias="formalityScore", ge=1, le=5)
    styling_tips: Optional[str] = Field(default=None, alias="stylingTips")
    alternatives: List[OutfitAlternative] = Field(default_factory=list)
