"""
PAWhere Backend — Database Engine & Session Management
========================================================

What:  Async SQLAlchemy engine, session factory and the declarative Base.
Why:   Centralizes all database connection logic in one place.
How:   `Database` owns one async engine with connection pooling and hands out
       sessions that auto-commit on success and auto-roll-back on error.
Who:   Constructed once by the application lifespan and injected into
       RegistrationStore; tests construct their own against SQLite.
When:  Built at startup, disposed at shutdown. Sessions are per-operation.

Lifecycle:
    There is no module-level engine. The lifespan handler builds a Database,
    keeps it on `app.state`, and disposes it on shutdown. This keeps imports
    free of side effects and lets tests point a fresh instance at a temp file.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from pawhere.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by `ensure_schema()` at runtime
    and by Alembic for versioned migrations.
    """
    pass


def _engine_options(url: str) -> Dict[str, Any]:
    """
    Pool options for create_async_engine.

    SQLite (used in tests) does not take pool sizing arguments, so they are
    only passed for server databases.
    """
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


def _redact(url: str) -> str:
    """Hide the password part of a connection URL for logging."""
    if "@" not in url or "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}"


class Database:
    """
    Owns the async engine and the session factory.

    expire_on_commit=False keeps attributes readable after commit, so a
    created record can be turned into a response without another query.
    """

    def __init__(self, url: Optional[str] = None, engine: Optional[AsyncEngine] = None):
        self.url = url or settings.database_url
        self.engine = engine or create_async_engine(self.url, **_engine_options(self.url))
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database configured: %s", _redact(self.url))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a transactional session.

        Commits when the block exits cleanly, rolls back on any exception
        and always returns the connection to the pool. A registration is
        therefore either fully persisted or not persisted at all.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def ping(self) -> None:
        """Run SELECT 1; raises whatever the driver raises when unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()
        logger.info("Database connections closed")
