"""
Async SQLAlchemy database setup and session management.
"""
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import declarative_base

from review_collector.core.config import settings

# Base class for all models
Base = declarative_base()


def create_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    For file-based SQLite URLs the parent directory is created first,
    since the driver will not create it.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(
        database_url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize database tables.
    Called once when the durable storage backend is built.
    """
    async with engine.begin() as conn:
        # Import all models here to ensure they are registered
        from review_collector.models import review, app  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections."""
    await engine.dispose()
