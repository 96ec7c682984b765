"""Async SQLAlchemy 2.0 engine, sessions and the declarative base.

One engine per process. Request handlers get a session from ``get_db``;
background work (scheduler, scripts) opens its own from
``get_session_maker()``. Sessions keep objects loaded after commit so
services can build responses from rows they just wrote.
"""

from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from djcafe.core.config import get_settings
from djcafe.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by every feature's models."""


@lru_cache
def get_engine() -> AsyncEngine:
    settings = get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.debug and settings.is_development,
        pool_pre_ping=True,
    )


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def dispose_engine() -> None:
    """Close pooled connections; called on application shutdown."""
    if get_engine.cache_info().currsize == 0:
        return
    await get_engine().dispose()
    get_session_maker.cache_clear()
    get_engine.cache_clear()
    logger.info("database.engine_disposed")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: committed when the handler returns, rolled back on error.

    Notifications queued with ``pg_notify`` during the request are therefore
    delivered only if the handler succeeds.
    """
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning(
                "database.request_rolled_back",
                error_type=type(e).__name__,
            )
            raise
