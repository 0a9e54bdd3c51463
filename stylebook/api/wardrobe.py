"""Wardrobe and care supply mutation API.

Every write advances the matching modification clock, which invalidates the
AI caches that depend on it.
"""

from fastapi import APIRouter, Depends

from stylebook.core.auth import get_or_create_current_person
from stylebook.features.wardrobe import service as wardrobe_service
from stylebook.models.person import Person
from stylebook.models.wardrobe import (
    CareSupplyCreate,
    CareSupplyUpdate,
    WardrobeItemCreate,
    WardrobeItemUpdate,
)

router = APIRouter(prefix="/v1", tags=["wardrobe"])


@router.post("/wardrobe")
def create_item(body: WardrobeItemCreate, person: Person = Depends(get_or_create_current_person)):
    item = wardrobe_service.add_wardrobe_item(person.id, body)
    return {"data": item.model_dump(mode="json")}


@router.patch("/wardrobe/{item_id}")
def update_item(item_id: str, body: WardrobeItemUpdate, person: Person = Depends(get_or_create_current_person)):
    item = wardrobe_service.update_wardrobe_item(person.id, item_id, body)
    return {"data": item.model_dump(mode="json")}


@router.delete("/wardrobe/{item_id}")
def delete_item(item_id: str, person: Person = Depends(get_or_create_current_person)):
    wardrobe_service.remove_wardrobe_item(person.id, item_id)
    return {"ok": True}


@router.post("/supplies")
def create_supply(body: CareSupplyCreate, person: Person = Depends(get_or_create_current_person)):
    supply = wardrobe_service.add_care_supply(person.id, body)
    return {"data": supply.model_dump(mode="json")}


@router.patch("/supplies/{supply_id}")
def update_supply(supply_id: str, body: CareSupplyUpdate, person: Person = Depends(get_or_create_current_person)):
    supply = wardrobe_service.update_care_supply(person.id, supply_id, body)
    return {"data": supply.model_dump(mode="json")}


@router.delete("/supplies/{supply_id}")
def delete_supply(supply_id: str, person: Person = Depends(get_or_create_current_person)):
    wardrobe_service.remove_care_supply(person.id, supply_id)
    return {"ok": True}
