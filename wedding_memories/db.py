"""Async database session and engine (SQLAlchemy 2.0 + asyncpg)."""
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from wedding_memories.config import get_settings

settings = get_settings()

_engine_kwargs: Dict[str, Any] = {}
if settings.database_url.startswith("sqlite"):
    # aiosqlite connections must not be shared between event loops (tests, TestClient).
    _engine_kwargs["poolclass"] = NullPool

# Same URL as Alembic (postgresql+asyncpg://...)
engine = create_async_engine(
    settings.database_url,
    echo=settings.app_env == "local",
    future=True,
    **_engine_kwargs,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Declarative base for all models."""

    pass


# JSONB on Postgres, plain JSON elsewhere (SQLite in tests).
JsonDocument = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def dialect_name(db: AsyncSession) -> str:
    """Name of the dialect behind a session (postgresql | sqlite)."""
    return db.get_bind().dialect.name


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that yields an async session; close after request.
    Services commit before broadcasting, so the commit here only flushes leftovers.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
