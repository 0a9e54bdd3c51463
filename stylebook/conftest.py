# stylebook/conftest.py
import json
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

import pytest
from sqlalchemy import insert

from stylebook.core.database import (
    init_engine,
    dispose_engine,
    create_all_tables,
    get_db_session,
    people,
    wardrobe_items,
    care_supplies,
)
from stylebook.features.ai.service import StylistAI
from stylebook.tests.mocks import FakeCompletionClient


@pytest.fixture(scope="function", autouse=True)
def database():
    """
    Fresh in-memory SQLite database for every test.

    The engine uses a static pool, so all sessions (and TestClient worker
    threads) share the one connection.
    """
    init_engine("sqlite://")
    create_all_tables()
    yield
    dispose_engine()


@pytest.fixture
def make_person():
    """Factory inserting a Person row directly, bypassing auth."""

    def _make(
        *,
        tier: str = "free",
        status: str = "inactive",
        usage: int = 0,
        usage_reset_date: Optional[datetime] = None,
        wardrobe_last_modified: Optional[datetime] = None,
        supplies_last_modified: Optional[datetime] = None,
        clerk_user_id: Optional[str] = None,
        preferences: Optional[dict] = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        person_id = str(uuid4())
        with get_db_session() as session:
            session.execute(
                insert(people).values(
                    id=person_id,
                    clerk_user_id=clerk_user_id or f"user_{uuid4().hex[:12]}",
                    subscription_tier=tier,
                    subscription_status=status,
                    shoe_care_usage_this_month=usage,
                    usage_reset_date=usage_reset_date or now,
                    wardrobe_last_modified=wardrobe_last_modified or now,
                    supplies_last_modified=supplies_last_modified or now,
                    preferences=preferences,
                    created_at=now,
                )
            )
        return person_id

    return _make


@pytest.fixture
def make_item():
    """Factory inserting a wardrobe item row without touching the clock."""

    def _make(person_id: str, **overrides) -> str:
        now = datetime.now(timezone.utc)
        item_id = overrides.pop("id", None) or str(uuid4())
        values = {
            "id": item_id,
            "person_id": person_id,
            "name": "Oxford shoe",
            "category": "Dress Shoes",
            "subcategory": "cap-toe oxford",
            "color_primary": "dark brown",
            "material": "full-grain leather",
            "formality_level": 4,
            "season_suitability": ["ALL_SEASON"],
            "status": "ACTIVE",
            "times_worn": 0,
            "created_at": now,
            "updated_at": overrides.pop("updated_at", None) or datetime(2020, 1, 1, tzinfo=timezone.utc),
        }
        values.update(overrides)
        with get_db_session() as session:
            session.execute(insert(wardrobe_items).values(**values))
        return item_id

    return _make


@pytest.fixture
def make_supply():
    def _make(person_id: str, **overrides) -> str:
        now = datetime.now(timezone.utc)
        supply_id = str(uuid4())
        values = {
            "id": supply_id,
            "person_id": person_id,
            "name": "Saphir Creme 1925",
            "category": "POLISH",
            "subcategory": "Cream polish",
            "color": "Dark Brown",
            "compatible_colors": ["dark brown"],
            "compatible_materials": ["Smooth leather"],
            "status": "IN_STOCK",
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        with get_db_session() as session:
            session.execute(insert(care_supplies).values(**values))
        return supply_id

    return _make


CARE_JSON = json.dumps({
    "title": "Full polish for dark brown oxfords",
    "suppliesNeeded": [{"name": "Saphir Creme 1925", "purpose": "Nourish and color", "owned": True}],
    "steps": [
        {"step": 1, "title": "Clean", "description": "Brush off dirt with a horsehair brush."},
        {"step": 2, "title": "Cream", "description": "Work in cream polish.", "supplyUsed": "Saphir Creme 1925"},
    ],
    "frequency": "Every 4-6 wears",
    "warnings": [],
    "quickMaintenanceTips": ["Use shoe trees"],
})

SHOPPING_JSON = json.dumps({
    "recommendations": [
        {"searchQuery": "navy chinos slim", "category": "Chinos", "suggestedColor": "navy", "title": "Navy chinos", "description": "Pairs with everything."},
        {"searchQuery": "white oxford shirt", "category": "Dress Shirts", "suggestedColor": "white", "title": "White OCBD", "description": "A staple."},
        {"searchQuery": "grey wool sweater", "category": "Sweaters/Knits", "suggestedColor": "grey", "title": "Grey crewneck", "description": "Layering piece."},
    ]
})


@pytest.fixture
def care_json():
    return CARE_JSON


@pytest.fixture
def shopping_json():
    return SHOPPING_JSON


@pytest.fixture
def fake_client():
    return FakeCompletionClient()


@pytest.fixture
def stylist(fake_client):
    return StylistAI(fake_client)
