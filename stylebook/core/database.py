"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- Connection pooling with sane defaults (SQLite gets a static pool for tests)
- Table definitions for people, wardrobe, supplies and AI result caches
- Dialect-aware upsert helper
"""
from typing import Optional
from contextlib import contextmanager
from sqlalchemy import create_engine, MetaData, Table, Column, Integer, String, DateTime, JSON, Text, Index, ForeignKey, UniqueConstraint
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
import logging
import os

from stylebook.core.config import settings

logger = logging.getLogger(__name__)

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour

# Global engine and session factory
_engine = None
_SessionLocal = None


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings or environment.

    For testing, use TEST_DATABASE_URL if available.
    """
    test_url = os.getenv("TEST_DATABASE_URL")
    if test_url:
        return test_url

    return settings.DATABASE_URL


def init_engine(database_url: Optional[str] = None):
    """
    Initialize the SQLAlchemy engine.

    Args:
        database_url: Optional override for DATABASE_URL
    """
    global _engine, _SessionLocal

    url = database_url or get_database_url()

    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    if url.startswith("sqlite"):
        # One shared connection so an in-memory database survives across sessions
        _engine = create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    else:
        _engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            echo=False,  # Set to True for SQL query logging
        )

    # Create session factory
    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine
    )

    return _engine


def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_engine():
    """Get the current SQLAlchemy engine."""
    global _engine
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory():
    """Get the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.

    Everything executed inside the block commits together or not at all.

    Usage:
        with get_db_session() as session:
            session.execute(...)
    """
    SessionLocal = get_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables():
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    engine = get_engine()
    metadata.create_all(bind=engine)


def check_connection() -> bool:
    """
    Check if database connection is available.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
        return True
    except Exception as e:
        logger.warning(f"Database connection check failed: {e}")
        return False


def upsert(session: Session, table: Table, values: dict, index_elements: list, update_columns: list):
    """Single-statement INSERT ... ON CONFLICT DO UPDATE for PostgreSQL and SQLite.

    All `update_columns` are written by the same statement, so readers never
    observe a partially updated row.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(table).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite_insert(table).values(**values)
    else:
        raise NotImplementedError(f"upsert not supported for dialect {dialect}")

    stmt = stmt.on_conflict_do_update(
        index_elements=index_elements,
        set_={col: stmt.excluded[col] for col in update_columns},
    )
    return session.execute(stmt)


# People (Person records, resolved from Clerk user ids)
people = Table(
    'people',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('clerk_user_id', String(100), nullable=False, unique=True),
    Column('display_name', Text, nullable=True),
    Column('subscription_tier', String(20), nullable=False, server_default='free'),
    Column('subscription_status', String(50), nullable=False, server_default='inactive'),
    Column('subscription_end_date', DateTime(timezone=True), nullable=True),
    Column('shoe_care_usage_this_month', Integer, nullable=False, server_default='0'),
    Column('usage_reset_date', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('wardrobe_last_modified', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('supplies_last_modified', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('preferences', JSON, nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_people_clerk_user_id', 'clerk_user_id'),
)

# Wardrobe items
wardrobe_items = Table(
    'wardrobe_items',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('person_id', String(100), ForeignKey('people.id'), nullable=False),
    Column('name', Text, nullable=True),
    Column('category', String(100), nullable=False),
    Column('subcategory', String(200), nullable=True),
    Column('color_primary', String(100), nullable=False),
    Column('color_secondary', String(100), nullable=True),
    Column('pattern', String(50), nullable=True),
    Column('brand', String(200), nullable=True),
    Column('material', String(200), nullable=True),
    Column('formality_level', Integer, nullable=False, server_default='3'),
    Column('season_suitability', JSON, nullable=True),
    Column('status', String(20), nullable=False, server_default='ACTIVE'),
    Column('times_worn', Integer, nullable=False, server_default='0'),
    Column('last_worn', DateTime(timezone=True), nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # Composite index for "active items for a person" queries
    Index('idx_wardrobe_items_person_status', 'person_id', 'status'),
)

# Shoe care supplies
care_supplies = Table(
    'care_supplies',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('person_id', String(100), ForeignKey('people.id'), nullable=False),
    Column('name', Text, nullable=False),
    Column('category', String(50), nullable=False),
    Column('subcategory', String(200), nullable=True),
    Column('brand', String(200), nullable=True),
    Column('color', String(100), nullable=True),
    Column('compatible_colors', JSON, nullable=True),
    Column('compatible_materials', JSON, nullable=True),
    Column('status', String(20), nullable=False, server_default='IN_STOCK'),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('updated_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_care_supplies_person_status', 'person_id', 'status'),
)

# Outfits (read-only here: recent history for chat context)
outfits = Table(
    'outfits',
    metadata,
    Column('id', String(100), primary_key=True),
    Column('person_id', String(100), ForeignKey('people.id'), nullable=False),
    Column('name', Text, nullable=False),
    Column('last_worn', DateTime(timezone=True), nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_outfits_person_last_worn', 'person_id', 'last_worn'),
)

outfit_items = Table(
    'outfit_items',
    metadata,
    Column('outfit_id', String(100), ForeignKey('outfits.id'), nullable=False),
    Column('wardrobe_item_id', String(100), ForeignKey('wardrobe_items.id'), nullable=False),
    UniqueConstraint('outfit_id', 'wardrobe_item_id', name='uq_outfit_items_outfit_item'),
)

# Care instruction cache: one row per (wardrobe item, care type)
care_instruction_cache = Table(
    'care_instruction_cache',
    metadata,
    Column('wardrobe_item_id', String(100), ForeignKey('wardrobe_items.id'), nullable=False),
    Column('care_type', String(50), nullable=False),
    Column('payload', JSON, nullable=False),
    Column('generated_against', DateTime(timezone=True), nullable=False),
    Column('updated_at', DateTime(timezone=True), nullable=False),
    UniqueConstraint('wardrobe_item_id', 'care_type', name='uq_care_instruction_cache_item_type'),
)

# Shopping recommendation cache: one row per person
shopping_recommendation_cache = Table(
    'shopping_recommendation_cache',
    metadata,
    Column('person_id', String(100), ForeignKey('people.id'), primary_key=True),
    Column('payload', JSON, nullable=False),
    Column('generated_against', DateTime(timezone=True), nullable=False),
    Column('updated_at', DateTime(timezone=True), nullable=False),
    Column('item_count', Integer, nullable=False, server_default='0'),
    Column('click_count', Integer, nullable=False, server_default='0'),
)
