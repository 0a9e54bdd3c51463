"""
Person domain service.

- get_person(person_id) / get_person_by_clerk_id(clerk_user_id)
- get_or_create_person(clerk_user_id)
- apply_subscription_update(): the single write seam for the billing collaborator
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4
from sqlalchemy import select, insert, update
from sqlalchemy.exc import IntegrityError

from stylebook.core.database import get_db_session, people
from stylebook.core.errors import PersonNotFoundError
from stylebook.models.person import Person, StylePreferences, SubscriptionTier, utc_now


def person_from_row(row) -> Person:
    return Person(
        id=row.id,
        clerk_user_id=row.clerk_user_id,
        display_name=row.display_name,
        subscription_tier=row.subscription_tier,
        subscription_status=row.subscription_status,
        subscription_end_date=row.subscription_end_date,
        shoe_care_usage_this_month=row.shoe_care_usage_this_month,
        usage_reset_date=row.usage_reset_date,
        wardrobe_last_modified=row.wardrobe_last_modified,
        supplies_last_modified=row.supplies_last_modified,
        preferences=StylePreferences(**row.preferences) if row.preferences else None,
    )


def get_person(person_id: str) -> Optional[Person]:
    with get_db_session() as session:
        row = session.execute(select(people).where(people.c.id == person_id)).first()
        return person_from_row(row) if row else None


def get_person_by_clerk_id(clerk_user_id: str) -> Optional[Person]:
    with get_db_session() as session:
        row = session.execute(select(people).where(people.c.clerk_user_id == clerk_user_id)).first()
        return person_from_row(row) if row else None


def require_person(clerk_user_id: str) -> Person:
    person = get_person_by_clerk_id(clerk_user_id)
    if person is None:
        raise PersonNotFoundError("Person not found")
    return person


def get_or_create_person(clerk_user_id: str, display_name: Optional[str] = None) -> Person:
    existing = get_person_by_clerk_id(clerk_user_id)
    if existing:
        return existing

    now = utc_now()
    try:
        with get_db_session() as session:
            session.execute(
                insert(people).values(
                    id=str(uuid4()),
                    clerk_user_id=clerk_user_id,
                    display_name=display_name,
                    subscription_tier=SubscriptionTier.FREE.value,
                    subscription_status="inactive",
                    shoe_care_usage_this_month=0,
                    usage_reset_date=now,
                    wardrobe_last_modified=now,
                    supplies_last_modified=now,
                    created_at=now,
                )
            )
    except IntegrityError:
        # Lost a creation race; the other request's row is just as good
        pass

    return require_person(clerk_user_id)


def apply_subscription_update(
    person_id: str,
    *,
    tier: SubscriptionTier,
    status: str,
    end_date: Optional[datetime] = None,
) -> Person:
    """Record a subscription change pushed by the billing provider.

    The usage counter is left alone: a mid-month tier change keeps it.
    """
    with get_db_session() as session:
        result = session.execute(
            update(people)
            .where(people.c.id == person_id)
            .values(
                subscription_tier=tier.value,
                subscription_status=status,
                subscription_end_date=end_date,
            )
        )
        if result.rowcount == 0:
            raise PersonNotFoundError(f"Person {person_id} not found")

    return get_person(person_id)
