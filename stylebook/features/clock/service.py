"""
Modification clock.

Per-person "last modified" timestamps for the wardrobe and supply collections.
Caches compare against these to decide staleness, so `touch` must run inside
the same transaction as the mutation it records.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from stylebook.core.database import people
from stylebook.core.errors import PersonNotFoundError
from stylebook.models.person import Person, ensure_utc, utc_now


class ModifiedResource(str, Enum):
    WARDROBE = "wardrobe"
    SUPPLIES = "supplies"


_COLUMNS = {
    ModifiedResource.WARDROBE: people.c.wardrobe_last_modified,
    ModifiedResource.SUPPLIES: people.c.supplies_last_modified,
}

_TICK = timedelta(microseconds=1)


def modified_at(person: Person, resource: ModifiedResource) -> datetime:
    if resource == ModifiedResource.WARDROBE:
        return person.wardrobe_last_modified
    return person.supplies_last_modified


def touch(session: Session, person_id: str, resource: ModifiedResource, now: Optional[datetime] = None) -> datetime:
    """Advance the resource clock inside the caller's transaction.

    The new value is strictly greater than the stored one, so a result
    generated against the previous value is always stale afterwards.
    """
    column = _COLUMNS[resource]
    current = session.execute(
        select(column).where(people.c.id == person_id).with_for_update()
    ).scalar_one_or_none()
    if current is None:
        raise PersonNotFoundError(f"Person {person_id} not found")

    stamp = ensure_utc(now) or utc_now()
    previous = ensure_utc(current)
    if stamp <= previous:
        stamp = previous + _TICK

    session.execute(
        update(people).where(people.c.id == person_id).values({column.name: stamp})
    )
    return stamp
