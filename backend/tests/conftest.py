"""
Tourify Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the test suite.
How:   Every test gets its own in-memory SQLite database (aiosqlite) with the
       full schema created from the ORM metadata. The API client overrides
       two dependencies: the database session (bound to the test database)
       and the requester id (taken from the X-Test-User header, so tests
       never need a real identity provider).

Fixture Hierarchy (all function-scoped):
    ├── db_engine: in-memory engine with all tables
    ├── session_factory: async_sessionmaker bound to db_engine
    ├── db_session: one AsyncSession for service-level tests
    ├── test_client: HTTPX AsyncClient with DB + auth overrides
    └── raw_client: HTTPX AsyncClient with only the DB override (real auth)
"""

import os

# Must be set before any tourify import reads settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["FRONTEND_URL"] = "http://tourify.test"

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import tourify.models  # noqa: F401
from tourify.auth import get_requester_id
from tourify.database import Base, get_db_session
from tourify.exceptions import AuthenticationError

OWNER = "user_owner"
STRANGER = "user_stranger"

TEST_USER_HEADER = "X-Test-User"


def auth_headers(user_id: str = OWNER) -> dict:
    return {TEST_USER_HEADER: user_id}


@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite engine shared by every connection of one test.

    StaticPool keeps a single connection alive; without it each new
    connection would see an empty database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


def _override_session(session_factory):
    async def override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return override


async def _header_requester(request: Request) -> str:
    user_id = request.headers.get(TEST_USER_HEADER)
    if not user_id:
        raise AuthenticationError()
    return user_id


@pytest_asyncio.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for endpoint tests.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/tours", headers=auth_headers())
    """
    from tourify.main import app

    app.dependency_overrides[get_db_session] = _override_session(session_factory)
    app.dependency_overrides[get_requester_id] = _header_requester
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def raw_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Client that goes through the real bearer-token dependency."""
    from tourify.main import app

    app.dependency_overrides[get_db_session] = _override_session(session_factory)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
