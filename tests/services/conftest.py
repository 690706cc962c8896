"""Service test fixtures — fake store, seeded entities, in-memory SQLite.

Invariants:
    - Every test gets a fresh FakeEntityStore and a fresh in-memory database
    - Seed data (fake_store.py) mirrors the chat scenarios: apartment 562 checkout task, admin + cleaner

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for store tests
      (PostgreSQL-specific features not exercised here)
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from taskpilot.db.base import Base
import taskpilot.models  # noqa: F401
from taskpilot.infrastructure.database import DatabaseSessionManager

from tests.services.fake_store import FakeEntityStore, seed_tasks, seed_users


@pytest.fixture
def store():
    return FakeEntityStore(tasks=seed_tasks(), users=seed_users())


@pytest.fixture
async def test_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)
