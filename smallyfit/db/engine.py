"""Database engine and per-request sessions for SmallyFit.

``DATABASE_URL`` picks the backend: aiosqlite for local runs and tests,
asyncpg for PostgreSQL deployments. Plain ``postgresql://`` URLs (as handed
out by most hosting providers) are pointed at the asyncpg driver.
"""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from config.settings import settings


def async_database_url(url: str) -> str:
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


def engine_options(url: str) -> dict:
    """Pool settings: SQLite keeps SQLAlchemy's defaults, PostgreSQL gets a sized pool."""
    options: dict = {"echo": False}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=1800,  # seconds
        pool_pre_ping=True,
    )
    return options


_url = async_database_url(settings.DATABASE_URL)
engine = create_async_engine(_url, **engine_options(_url))

# Rows stay readable after commit; routes serialise them post-commit
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncSession:
    """FastAPI dependency: one session per request, closed afterwards."""
    async with async_session() as session:
        yield session
