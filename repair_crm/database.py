"""
Database engine, session factory and declarative base.
"""
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from repair_crm.config import Settings
from repair_crm.errors import NotFoundError

Base = declarative_base()


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    kwargs = {"echo": settings.database_echo}

    # In-memory SQLite only lives as long as its single connection
    if settings.database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        kwargs["poolclass"] = StaticPool

    return create_async_engine(settings.database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create a session factory bound to the engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables."""
    # Import models so they are registered on the metadata
    import repair_crm.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Yield a database session for a single request.
    The session is rolled back if the request handler raises.
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def utcnow() -> datetime:
    """Timezone-aware current time, used for column defaults."""
    return datetime.now(timezone.utc)


async def get_or_404(db: AsyncSession, model, record_id: int, label: str, refresh: bool = False):
    """
    Load a single record by primary key or raise a 404.
    With refresh=True the row and its eager relationships are reloaded even
    when the instance is already in the session.
    """
    query = select(model).where(model.id == record_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    record = result.scalar_one_or_none()

    if record is None:
        raise NotFoundError(f"No {label} found with that ID")

    return record
