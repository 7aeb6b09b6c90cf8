"""Database initialization and session management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm.exc import StaleDataError

from bike_wear_server.core.config import settings
from bike_wear_server.core.errors import ConcurrencyConflict

logger = logging.getLogger(__name__)


def create_engine() -> AsyncEngine:
    """Create PostgreSQL database engine.

    Returns:
        Async SQLAlchemy engine configured for PostgreSQL
    """
    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_recycle=300,  # Recycle connections every 5 minutes
    )


# Global engine and session maker
engine = create_engine()
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_database(db_engine: AsyncEngine | None = None) -> None:
    """Verify the database is reachable.

    Does NOT create tables - use Alembic migrations for schema management.
    """
    async with (db_engine or engine).connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Database connection verified")


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Usage:
        async with get_session() as session:
            result = await session.execute(select(Bike))
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def commit_or_conflict(
    session: AsyncSession,
    entity: str,
    entity_id: str | None = None,
) -> None:
    """Commit the session, turning lost optimistic-version races into ConcurrencyConflict.

    Raises:
        ConcurrencyConflict: If a versioned row was changed by another writer
    """
    try:
        await session.commit()
    except StaleDataError as e:
        await session.rollback()
        raise ConcurrencyConflict(entity, entity_id) from e


async def close_database(db_engine: AsyncEngine | None = None) -> None:
    """Close database connection pool."""
    await (db_engine or engine).dispose()
