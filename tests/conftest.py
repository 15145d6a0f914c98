"""Shared test fixtures — single in-memory test DB for all API test modules."""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Use a shared in-memory DB with check_same_thread=False and StaticPool
# so all connections see the same in-memory database.
from sqlalchemy.pool import StaticPool

from smallyfit.db.engine import get_session
from smallyfit.db.tables import Base

TEST_DB_URL = "sqlite+aiosqlite:///file:smallyfit_test?mode=memory&cache=shared&uri=true"

test_engine = create_async_engine(
    TEST_DB_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = async_sessionmaker(test_engine, expire_on_commit=False, class_=AsyncSession)


async def override_get_session():
    async with TestSession() as session:
        yield session


# Import app and override BEFORE any test module imports app
from smallyfit.api.main import app  # noqa: E402

app.dependency_overrides[get_session] = override_get_session

import smallyfit.db.engine as _engine_mod  # noqa: E402
_engine_mod.async_session = TestSession
_engine_mod.engine = test_engine


@asynccontextmanager
async def get_test_session():
    """Context manager for seeding data in tests."""
    async with TestSession() as session:
        yield session


@pytest_asyncio.fixture
async def setup_db():
    """Create tables before each API test, drop after."""
    import smallyfit.db.user_tables  # noqa: F401
    import smallyfit.db.body_tables  # noqa: F401
    import smallyfit.db.workout_tables  # noqa: F401
    import smallyfit.db.notification_tables  # noqa: F401
    import smallyfit.db.meal_tables  # noqa: F401
    from smallyfit.services.food_catalog import seed_food_items

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with TestSession() as session:
        await seed_food_items(session)

    yield

    # Reset rate limiter and counters between tests
    from smallyfit.middleware.metrics import metrics
    from smallyfit.middleware.rate_limit import reset_store
    reset_store()
    metrics.reset()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(setup_db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def make_account(client):
    """Factory: create an account; returns the signup payload plus ready-made auth headers."""
    async def _make(email: str = "alex@example.com", name: str = "Alex", password: str = "secret123") -> dict:
        resp = await client.post("/api/v1/auth/signup", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        data = resp.json()
        data["headers"] = {"Authorization": f"Bearer {data['access_token']}"}
        return data
    return _make


@pytest_asyncio.fixture
async def account(make_account):
    """A fresh account inside its trial."""
    return await make_account()


async def _set_account_fields(account_id: str, **values) -> None:
    from smallyfit.db.user_tables import AccountRow
    async with get_test_session() as session:
        await session.execute(update(AccountRow).where(AccountRow.id == account_id).values(**values))
        await session.commit()


@pytest.fixture
def expire_trial():
    """Backdate an account so its free trial is over."""
    async def _expire(account_id: str, days: int = 8) -> None:
        await _set_account_fields(account_id, created_at=datetime.now(timezone.utc) - timedelta(days=days))
    return _expire


@pytest.fixture
def make_admin():
    async def _promote(account_id: str) -> None:
        await _set_account_fields(account_id, is_admin=True)
    return _promote


@pytest.fixture
def make_premium():
    async def _upgrade(account_id: str) -> None:
        await _set_account_fields(account_id, is_premium=True)
    return _upgrade


@pytest_asyncio.fixture
async def db_session(setup_db):
    """Direct DB access for seeding and asserting on rows."""
    async with get_test_session() as session:
        yield session


@pytest.fixture
def session_factory(setup_db):
    """The test sessionmaker, for tests that need several independent sessions."""
    return TestSession
