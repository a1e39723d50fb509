"""
Engine management for the SQL document store.

SQLite URLs get a single shared connection (tests, local dev); anything else
gets a bounded connection pool.
"""
from typing import Optional
from sqlalchemy import create_engine, MetaData, Table, Column, String, DateTime, JSON
from sqlalchemy.pool import QueuePool, StaticPool
import os

from shegoes.core.config import settings


metadata = MetaData()

POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # seconds

_engine = None


def get_database_url() -> Optional[str]:
    """TEST_DATABASE_URL wins over DATABASE_URL when both are set."""
    test_url = os.getenv("TEST_DATABASE_URL") or settings.TEST_DATABASE_URL
    if test_url:
        return test_url

    return settings.DATABASE_URL


def build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=POOL_RECYCLE,
        echo=False,
    )


def get_engine():
    """Process-wide engine, built on first use from the configured URL."""
    global _engine
    if _engine is None:
        url = get_database_url()
        if not url:
            raise ValueError(
                "DATABASE_URL is not configured. "
                "Set DATABASE_URL in environment or .env file, or use STORE_BACKEND=memory."
            )
        _engine = build_engine(url)
    return _engine


def create_all_tables(engine=None):
    """Idempotent: existing tables are left alone."""
    metadata.create_all(bind=engine or get_engine())


# One flat camelCase document per authenticated identity.
user_states = Table(
    "user_states",
    metadata,
    Column("user_id", String(128), primary_key=True),
    Column("document", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)
