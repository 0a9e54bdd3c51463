"""
Wardrobe and care-supply service.

Reads used to build AI context, plus the mutation helpers. Every mutation
advances the matching modification clock in the same transaction.
"""

from typing import List, Optional
from uuid import uuid4
from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.orm import Session

from stylebook.core.database import (
    get_db_session,
    wardrobe_items,
    care_supplies,
    care_instruction_cache,
    outfits,
    outfit_items,
)
from stylebook.core.errors import SubjectNotFoundError, ValidationError
from stylebook.features.clock.service import ModifiedResource, touch
from stylebook.models.person import utc_now
from stylebook.models.wardrobe import (
    AVAILABLE_SUPPLY_STATUSES,
    INACTIVE_ITEM_STATUSES,
    CareSupply,
    CareSupplyCreate,
    CareSupplyUpdate,
    ItemStatus,
    OutfitHistory,
    WardrobeItem,
    WardrobeItemCreate,
    WardrobeItemUpdate,
)


def _item_from_row(row) -> WardrobeItem:
    return WardrobeItem(**dict(row._mapping))


def _supply_from_row(row) -> CareSupply:
    return CareSupply(**dict(row._mapping))


def get_item(person_id: str, item_id: str) -> WardrobeItem:
    """Fetch an item owned by the person; anything else is a not-found."""
    with get_db_session() as session:
        row = session.execute(
            select(wardrobe_items)
            .where(wardrobe_items.c.id == item_id)
            .where(wardrobe_items.c.person_id == person_id)
        ).first()
    if not row:
        raise SubjectNotFoundError(f"Wardrobe item {item_id} not found")
    return _item_from_row(row)


def list_items(person_id: str, *, active_only: bool = False, limit: Optional[int] = None) -> List[WardrobeItem]:
    """List wardrobe items.

    `active_only` keeps ACTIVE items only; otherwise items that were archived,
    donated or sold are still excluded.
    """
    query = select(wardrobe_items).where(wardrobe_items.c.person_id == person_id)
    if active_only:
        query = query.where(wardrobe_items.c.status == ItemStatus.ACTIVE.value)
    else:
        query = query.where(wardrobe_items.c.status.notin_(INACTIVE_ITEM_STATUSES))
    query = query.order_by(wardrobe_items.c.created_at.desc(), wardrobe_items.c.id)
    if limit:
        query = query.limit(limit)
    with get_db_session() as session:
        rows = session.execute(query).all()
    return [_item_from_row(row) for row in rows]


def count_wardrobe_items(person_id: str) -> int:
    with get_db_session() as session:
        return session.execute(
            select(func.count())
            .select_from(wardrobe_items)
            .where(wardrobe_items.c.person_id == person_id)
            .where(wardrobe_items.c.status.notin_(INACTIVE_ITEM_STATUSES))
        ).scalar_one()


def list_available_supplies(person_id: str) -> List[CareSupply]:
    with get_db_session() as session:
        rows = session.execute(
            select(care_supplies)
            .where(care_supplies.c.person_id == person_id)
            .where(care_supplies.c.status.in_(AVAILABLE_SUPPLY_STATUSES))
            .order_by(care_supplies.c.category, care_supplies.c.name)
        ).all()
    return [_supply_from_row(row) for row in rows]


def recent_outfits(person_id: str, limit: int = 5) -> List[OutfitHistory]:
    with get_db_session() as session:
        rows = session.execute(
            select(outfits)
            .where(outfits.c.person_id == person_id)
            .order_by(outfits.c.last_worn.desc(), outfits.c.created_at.desc())
            .limit(limit)
        ).all()
        history = []
        for row in rows:
            item_ids = session.execute(
                select(outfit_items.c.wardrobe_item_id).where(outfit_items.c.outfit_id == row.id)
            ).scalars().all()
            history.append(
                OutfitHistory(id=row.id, name=row.name, item_ids=list(item_ids), last_worn=row.last_worn)
            )
    return history


def add_wardrobe_item(person_id: str, data: WardrobeItemCreate) -> WardrobeItem:
    item_id = str(uuid4())
    now = utc_now()
    with get_db_session() as session:
        session.execute(
            insert(wardrobe_items).values(
                id=item_id,
                person_id=person_id,
                status=ItemStatus.ACTIVE.value,
                times_worn=0,
                created_at=now,
                updated_at=now,
                **data.model_dump(),
            )
        )
        touch(session, person_id, ModifiedResource.WARDROBE, now)
    return get_item(person_id, item_id)


def update_wardrobe_item(person_id: str, item_id: str, data: WardrobeItemUpdate) -> WardrobeItem:
    changes = _changes(data, wardrobe_items)
    with get_db_session() as session:
        _require_owned(session, wardrobe_items, person_id, item_id, "Wardrobe item")
        stamp = touch(session, person_id, ModifiedResource.WARDROBE)
        session.execute(
            update(wardrobe_items)
            .where(wardrobe_items.c.id == item_id)
            .values(updated_at=stamp, **changes)
        )
    return get_item(person_id, item_id)


def remove_wardrobe_item(person_id: str, item_id: str) -> None:
    with get_db_session() as session:
        _require_owned(session, wardrobe_items, person_id, item_id, "Wardrobe item")
        session.execute(delete(care_instruction_cache).where(care_instruction_cache.c.wardrobe_item_id == item_id))
        session.execute(delete(outfit_items).where(outfit_items.c.wardrobe_item_id == item_id))
        session.execute(delete(wardrobe_items).where(wardrobe_items.c.id == item_id))
        touch(session, person_id, ModifiedResource.WARDROBE)


def get_supply(person_id: str, supply_id: str) -> CareSupply:
    with get_db_session() as session:
        row = session.execute(
            select(care_supplies)
            .where(care_supplies.c.id == supply_id)
            .where(care_supplies.c.person_id == person_id)
        ).first()
    if not row:
        raise SubjectNotFoundError(f"Care supply {supply_id} not found")
    return _supply_from_row(row)


def add_care_supply(person_id: str, data: CareSupplyCreate) -> CareSupply:
    supply_id = str(uuid4())
    now = utc_now()
    with get_db_session() as session:
        session.execute(
            insert(care_supplies).values(
                id=supply_id,
                person_id=person_id,
                created_at=now,
                updated_at=now,
                **data.model_dump(mode="json"),
            )
        )
        touch(session, person_id, ModifiedResource.SUPPLIES, now)
    return get_supply(person_id, supply_id)


def update_care_supply(person_id: str, supply_id: str, data: CareSupplyUpdate) -> CareSupply:
    changes = _changes(data, care_supplies)
    with get_db_session() as session:
        _require_owned(session, care_supplies, person_id, supply_id, "Care supply")
        stamp = touch(session, person_id, ModifiedResource.SUPPLIES)
        session.execute(
            update(care_supplies)
            .where(care_supplies.c.id == supply_id)
            .values(updated_at=stamp, **changes)
        )
    return get_supply(person_id, supply_id)


def remove_care_supply(person_id: str, supply_id: str) -> None:
    with get_db_session() as session:
        _require_owned(session, care_supplies, person_id, supply_id, "Care supply")
        session.execute(delete(care_supplies).where(care_supplies.c.id == supply_id))
        touch(session, person_id, ModifiedResource.SUPPLIES)


def _require_owned(session: Session, table, person_id: str, subject_id: str, label: str) -> None:
    exists = session.execute(
        select(table.c.id).where(table.c.id == subject_id).where(table.c.person_id == person_id)
    ).first()
    if not exists:
        raise SubjectNotFoundError(f"{label} {subject_id} not found")


def _changes(data, table) -> dict:
    """Fields the client sent, refusing explicit nulls for required columns."""
    changes = data.model_dump(exclude_unset=True, mode="json")
    cleared = [
        name for name, value in changes.items()
        if value is None and not table.c[name].nullable
    ]
    if cleared:
        raise ValidationError(f"Cannot clear required fields: {', '.join(sorted(cleared))}")
    return changes
