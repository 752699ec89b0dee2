"""Fixtures for persistence integration tests.

Runs against an in-memory SQLite database unless TENANTAUTH_DATABASE__URL
points at PostgreSQL, in which case tables are created and dropped per test.
"""

import os

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from tenantauth.config import DatabaseConfig
from tenantauth.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from tenantauth.infrastructure.persistence.tables import metadata


def _get_db_url() -> str:
    url = os.environ.get("TENANTAUTH_DATABASE__URL", "")
    if "postgresql" in url:
        return url
    return "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    """Per-test engine with a fresh schema."""
    engine = create_db_engine(DatabaseConfig(url=_get_db_url()))
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine):
    factory = create_session_factory(db_engine)
    async with factory() as session:
        yield session
        await session.rollback()
