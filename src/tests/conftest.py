"""Shared pytest fixtures for test suite."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

# Set test environment variables BEFORE any app imports
# This ensures tracing and other features are disabled during app initialization
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["OTEL_ENABLED"] = "false"  # Disable OpenTelemetry to prevent background threads
os.environ["VALKEY_URL"] = ""  # Module-level cache client falls back to FakeRedis
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum cost keeps password hashing fast

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from httpx import ASGITransport, AsyncClient
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from devit.core.cache import get_cache
from devit.core.config import Settings
from devit.core.database import get_db
from devit.main import app
from devit.models.base import Base

AuthHeaders = dict[str, str]


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Get settings configured for testing."""
    return Settings(
        environment="testing",
        log_level="WARNING",
    )


# ===== Database Fixtures =====


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test.

    Services commit their own transactions, so isolation comes from a new
    database rather than an outer rollback. StaticPool keeps every session
    on the one connection that holds the in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for repository and service tests."""
    async with session_maker() as session:
        yield session


# ===== Cache Fixtures =====


@pytest_asyncio.fixture(scope="function")
async def cache() -> AsyncGenerator[Redis, None]:
    """Private in-memory cache for one test."""
    client: Redis = FakeAsyncRedis(decode_responses=True)
    await client.flushdb()
    yield client
    await client.flushdb()
    await client.aclose()


# ===== API Client Fixtures =====


@pytest_asyncio.fixture
async def async_client(
    session_maker: async_sessionmaker[AsyncSession],
    cache: Redis,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test database and cache.

    Example:
        async def test_endpoint(async_client: AsyncClient):
            response = await async_client.get("/health")
            assert response.status_code == 200
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def override_get_cache() -> Redis:
        return cache

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = override_get_cache
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test"
        ) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_client(async_client: AsyncClient) -> AsyncClient:
    """Alias for async_client to match common naming convention."""
    return async_client


# ===== Account Fixtures =====


@pytest.fixture
def sign_up(async_client: AsyncClient) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Register a user through the API and return the response body."""

    async def _sign_up(username: str = "octocat", **overrides: Any) -> dict[str, Any]:
        payload = {
            "username": username,
            "email": f"{username}@example.com",
            "fullName": username.title(),
            "password": "hunter2hunter2",
            **overrides,
        }
        response = await async_client.post("/api/auth/signup", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    return _sign_up


def bearer(token: str) -> AuthHeaders:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def octocat(sign_up: Callable[..., Awaitable[dict[str, Any]]]) -> AuthHeaders:
    body = await sign_up("octocat")
    return bearer(body["token"])


@pytest_asyncio.fixture
async def hubot(sign_up: Callable[..., Awaitable[dict[str, Any]]]) -> AuthHeaders:
    body = await sign_up("hubot")
    return bearer(body["token"])


@pytest.fixture
def admin_headers(async_client: AsyncClient) -> Callable[[], Awaitable[AuthHeaders]]:
    async def _login() -> AuthHeaders:
        response = await async_client.post(
            "/api/admin/auth/login",
            json={"username": "admin", "password": "admin123"},
        )
        assert response.status_code == 200, response.text
        return bearer(response.json()["token"])

    return _login


# ===== Utility Fixtures =====


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
