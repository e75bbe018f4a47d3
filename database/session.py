"""
Async SQLAlchemy engine and session factory.

PostgreSQL (asyncpg) in production; SQLite (aiosqlite) works for local runs
and tests, minus the connection-pool tuning it does not support.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from config.settings import config
from database.models import Base


def engine_options(database_url: str) -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` suited to the backend."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"echo": False}
    return {
        "echo": False,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


engine = create_async_engine(config.database_url, **engine_options(config.database_url))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def create_tables() -> None:
    """Create the ``users`` table and its indexes if missing (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.  ``UserStore`` commits its own writes; this only
    rolls back whatever a failing request left open.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
