"""Shared test fixtures."""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bike_wear_server.core.locks import entity_locks
from bike_wear_server.models.base import Base
from bike_wear_server.services.live_ride import live_tracker


@pytest.fixture(autouse=True)
def fresh_process_state():
    """Locks and the live ride are process-wide; each test starts clean."""
    entity_locks.reset()
    live_tracker.abandon()
    yield
    live_tracker.abandon()


@pytest.fixture
async def async_engine():
    """Create async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncIterator[AsyncSession]:
    """Create async session for testing."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def sink() -> AsyncMock:
    """Notification sink that records what it was sent."""
    fake = AsyncMock()
    fake.send = AsyncMock(return_value=None)
    return fake


@pytest.fixture
async def bike(async_session: AsyncSession):
    """A bike without the default parts list."""
    from bike_wear_server.services.bikes import BikeService

    return await BikeService(async_session).create(name="Commuter", seed_defaults=False)


@pytest.fixture
async def chain(async_session: AsyncSession, bike):
    """A chain installed on the test bike."""
    from bike_wear_server.services.components import ComponentStore

    return await ComponentStore(async_session).create(
        component_type="chain",
        name="Default chain",
        bike_id=bike.id,
        lifespan_km=3500.0,
    )
