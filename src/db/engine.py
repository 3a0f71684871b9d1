"""Async database engine, session factories and lifespan management.

PostgreSQL is reached through SQLAlchemy 2.0 async over asyncpg. Request
handlers get one session per request; search opens several sessions at
once through the factory dependency. Redis backs the rate limiter.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncGenerator

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config import DatabaseSettings, settings

logger = logging.getLogger(__name__)


def build_engine(db: DatabaseSettings) -> AsyncEngine:
    """Create the asyncpg engine with pool sizing and statement timeout from settings."""
    return create_async_engine(
        db.database_url,
        echo=settings.log_level == "DEBUG",
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
        connect_args={"server_settings": {"statement_timeout": str(db.statement_timeout_ms)}},
    )


engine: AsyncEngine = build_engine(settings.db)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session.

    Handlers commit their own writes before recording audit entries; anything
    left pending when the handler returns is committed here, and any error
    rolls the session back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Factory for handlers that open several sessions concurrently."""
    return async_session_factory


redis_client: aioredis.Redis = aioredis.from_url(
    settings.db.redis_url,
    decode_responses=True,
)


async def init_db() -> None:
    """Verify connectivity and, in development, create missing tables.

    Production schemas are managed by Alembic.
    """
    from src.models import Base

    async with engine.begin() as conn:
        if settings.db.auto_create_tables and not settings.is_production:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Ensured %d tables exist", len(Base.metadata.tables))


async def close_db() -> None:
    """Dispose the engine pool and the Redis connection."""
    await engine.dispose()
    await redis_client.aclose()


@contextlib.asynccontextmanager
async def db_lifespan() -> AsyncGenerator[None, None]:
    """Open database resources for the lifetime of the app."""
    await init_db()
    try:
        yield
    finally:
        await close_db()
