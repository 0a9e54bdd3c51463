"""
stylebook/features/usage/service.py

Usage quota tracker.

Handles:
- Calendar-month billing periods (pure comparison)
- Lazy monthly rollover of the per-person counter
- Atomic increments after a successful generation
"""

from datetime import datetime
from typing import Optional
import logging
from sqlalchemy import select, update

from stylebook.core.database import get_db_session, people
from stylebook.core.errors import PersonNotFoundError
from stylebook.models.person import ensure_utc, utc_now


logger = logging.getLogger(__name__)


def is_same_billing_period(a: datetime, b: datetime) -> bool:
    """True when both instants fall in the same calendar month (UTC).

    Calendar months, not rolling 30-day windows: Jan 31 and Feb 1 are
    different periods, Mar 1 and Mar 31 are the same one.
    """
    a = ensure_utc(a)
    b = ensure_utc(b)
    return (a.year, a.month) == (b.year, b.month)


def current_usage(person_id: str, now: Optional[datetime] = None) -> int:
    """
    Return the usage count for the current month, resetting it first if the
    stored period has rolled over.

    The reset is a compare-and-set on `usage_reset_date`, so concurrent callers
    reset at most once per month and a reset never erases increments that a
    racing request already made in the new period.

    Raises:
        PersonNotFoundError: No person with this id
    """
    moment = ensure_utc(now) or utc_now()

    with get_db_session() as session:
        row = _read_usage(session, person_id)
        if row is None:
            raise PersonNotFoundError(f"Person {person_id} not found")

        if is_same_billing_period(row.usage_reset_date, moment):
            return row.shoe_care_usage_this_month

        result = session.execute(
            update(people)
            .where(people.c.id == person_id)
            .where(people.c.usage_reset_date == row.usage_reset_date)
            .values(shoe_care_usage_this_month=0, usage_reset_date=moment)
        )
        if result.rowcount:
            logger.info(
                "[usage] monthly reset",
                extra={"person_id": person_id, "previous_usage": row.shoe_care_usage_this_month},
            )
            return 0

        # Another request reset first; read what it left behind
        return session.execute(
            select(people.c.shoe_care_usage_this_month).where(people.c.id == person_id)
        ).scalar_one()


def _read_usage(session, person_id: str):
    return session.execute(
        select(people.c.shoe_care_usage_this_month, people.c.usage_reset_date)
        .where(people.c.id == person_id)
    ).first()


def increment_usage(person_id: str) -> int:
    """Add one to the counter and return the new value.

    Only call after a generation actually succeeded.
    """
    with get_db_session() as session:
        result = session.execute(
            update(people)
            .where(people.c.id == person_id)
            .values(shoe_care_usage_this_month=people.c.shoe_care_usage_this_month + 1)
        )
        if result.rowcount == 0:
            raise PersonNotFoundError(f"Person {person_id} not found")
        used = session.execute(
            select(people.c.shoe_care_usage_this_month).where(people.c.id == person_id)
        ).scalar_one()

    logger.info("[usage] incremented", extra={"person_id": person_id, "used": used})
    return used
