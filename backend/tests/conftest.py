"""Pytest configuration and fixtures"""
import os

# Keep the application engine off disk; tests use their own engine below.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_JSON", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from threadline.database import Base, get_db
from threadline.main import app
from threadline.models import User
from threadline.utils.security import create_access_token

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine():
    """In-memory database shared by every session of one test."""
    test_engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    """Database session fixture"""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(db):
    """Two owners: alice (id 1) and bob (id 2)."""
    alice = User(id=1, username="alice")
    bob = User(id=2, username="bob")
    db.add_all([alice, bob])
    await db.commit()
    return alice, bob


@pytest_asyncio.fixture
async def client(db):
    """HTTP client with the app's session dependency pointed at the test database."""
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user id."""
    def _headers(user_id: int):
        token = create_access_token({"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers
