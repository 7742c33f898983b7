"""
Database Configuration
SQLAlchemy async setup (SQLite via aiosqlite, PostgreSQL via asyncpg)
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from banksim.config import settings


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def normalize_async_url(url: str) -> str:
    """Convert postgres:// / postgresql:// to postgresql+asyncpg://"""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


DATABASE_URL = normalize_async_url(settings.DATABASE_URL)

engine: Optional[AsyncEngine] = None
async_session_factory: Optional[async_sessionmaker] = None


def create_engine_and_factory(url: str = DATABASE_URL, echo: bool = False):
    """Build an async engine and its session factory"""
    url = normalize_async_url(url)
    kwargs = {"echo": echo}
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=10, max_overflow=20, pool_timeout=30, pool_recycle=3600)

    new_engine = create_async_engine(url, **kwargs)
    factory = async_sessionmaker(
        new_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return new_engine, factory


def get_session_factory() -> async_sessionmaker:
    """Lazily create the process-wide engine"""
    global engine, async_session_factory
    if async_session_factory is None:
        engine, async_session_factory = create_engine_and_factory(DATABASE_URL, echo=settings.DEBUG)
    return async_session_factory


async def init_db(target: Optional[AsyncEngine] = None) -> None:
    """Initialize database (create tables)"""
    if target is None:
        if not settings.AUTO_CREATE_TABLES:
            return
        get_session_factory()
        target = engine

    async with target.begin() as conn:
        # Import all models here to ensure they're registered
        from banksim.infrastructure.db import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections"""
    global engine, async_session_factory
    if engine is not None:
        await engine.dispose()
    engine = None
    async_session_factory = None
