"""Database engine, session factory and declarative base."""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from civic_reporter.config import settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def _engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.database_echo, "pool_pre_ping": True}
    # SQLite uses a single-connection pool that rejects sizing arguments
    if not settings.database_url.startswith("sqlite"):
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session per request.

    Routes that write commit before responding; whatever is still
    pending at teardown is committed, and errors roll back.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create tables that do not exist yet."""
    # Import models so they register with the metadata
    from civic_reporter import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()
