"""
Database connection: PostgreSQL in production, SQLite for local dev and tests.

Env vars (set in platform variables or .env):
    DATABASE_URL  -- full postgres:// connection string
    DATABASE_URL_FALLBACK -- optional sqlite+aiosqlite:///./metod_hub.db for local dev
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from backend.config import DATABASE_URL_FALLBACK, DATABASE_URL_RAW


def resolve_url(raw_url: str) -> str:
    """Platforms give postgres:// but asyncpg needs postgresql+asyncpg://"""
    if not raw_url:
        return DATABASE_URL_FALLBACK
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return raw_url


def build_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them
        return create_async_engine(url, echo=False, poolclass=NullPool)
    return create_async_engine(url, echo=False, pool_pre_ping=True)


DATABASE_URL = resolve_url(DATABASE_URL_RAW)

engine = build_engine(DATABASE_URL)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


def configure_engine(url: str) -> AsyncEngine:
    """Rebind the module engine and session factory (tests, one-off scripts)."""
    global DATABASE_URL, engine, async_session
    DATABASE_URL = url
    engine = build_engine(url)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine


async def init_db(bind: AsyncEngine | None = None):
    """Create all tables (safe to call multiple times)."""
    from backend import models  # noqa: F401  -- register mappers

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncSession:
    async with async_session() as session:
        yield session
