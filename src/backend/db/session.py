"""
PostgreSQL session management.

The engine is created lazily so importing the application (tests, tooling)
never opens a connection.
"""

from typing import AsyncGenerator

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings

logger = structlog.get_logger(__name__)

_engine: AsyncEngine | None = None

# Bound to the engine on first use (see get_engine)
async_session_maker = async_sessionmaker(class_=AsyncSession, expire_on_commit=False)


def get_engine() -> AsyncEngine:
    """Get or create the async engine."""
    global _engine

    if _engine is None:
        _engine = create_async_engine(
            settings.POSTGRES_URL,
            echo=settings.DATABASE_ECHO,
            pool_pre_ping=True,
        )
        async_session_maker.configure(bind=_engine)
        logger.info("database_engine_created", host=settings.POSTGRES_HOST, db=settings.POSTGRES_DB)

    return _engine


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a session per request.

    Commits when the request handler returns, rolls back on error.
    """
    get_engine()
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Verify database connectivity on startup."""
    engine = get_engine()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    """Dispose of the engine on shutdown."""
    global _engine

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        logger.info("database_engine_disposed")
