"""Async SQLAlchemy engine and session management."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from competency_hub.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.ENVIRONMENT == "development" and settings.LOG_LEVEL == "debug"}
    if settings.is_sqlite:
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(pool_size=10, max_overflow=20, pool_pre_ping=True)
    return options


# Async engine for FastAPI
engine = create_async_engine(settings.DATABASE_URL, **_engine_options())

# Async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db() -> AsyncSession:
    """FastAPI dependency: yield an async database session."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_models() -> None:
    """Create all tables that do not exist yet."""
    # Register every model module on Base.metadata before create_all
    import competency_hub.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured on %s", engine.url.render_as_string(hide_password=True))


async def dispose_engine() -> None:
    await engine.dispose()
