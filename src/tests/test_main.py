"""Test basic application health."""
import time
from collections.abc import Iterator
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from devit.core.config import APP_VERSION, settings
from devit.main import check_backend_connection


@pytest.fixture
def healthy_dependencies() -> Iterator[tuple[AsyncMock, AsyncMock]]:
    """Report database and cache as reachable without touching either."""
    with patch(
        "devit.main.check_database_connection", new_callable=AsyncMock
    ) as mock_db, patch(
        "devit.main.check_cache_connection", new_callable=AsyncMock
    ) as mock_cache:
        mock_db.return_value = True
        mock_cache.return_value = True
        yield mock_db, mock_cache


@pytest.mark.asyncio
async def test_health_check(async_client: AsyncClient, healthy_dependencies) -> None:
    """Test the health check endpoint."""
    response = await async_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "devit-api"
    assert data["version"] == APP_VERSION


@pytest.mark.asyncio
async def test_health_check_response_structure(
    async_client: AsyncClient, healthy_dependencies
) -> None:
    """Test that health check response has correct structure."""
    response = await async_client.get("/health")

    data = response.json()
    for field in ("status", "service", "version", "timestamp", "checks"):
        assert field in data

    for name in ("database", "cache"):
        check = data["checks"][name]
        assert check["status"] == "healthy"
        assert isinstance(check["response_time_ms"], (int, float))
        assert check["response_time_ms"] >= 0
        assert check["timestamp"].endswith("Z")

    # No backend configured, so no backend entry
    assert "backend" not in data["checks"]


@pytest.mark.asyncio
async def test_health_check_database_unhealthy_returns_degraded(
    async_client: AsyncClient, healthy_dependencies
) -> None:
    """Test health check returns degraded when database is unhealthy."""
    mock_db, _ = healthy_dependencies
    mock_db.return_value = False

    response = await async_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["checks"]["database"]["status"] == "unhealthy"
    assert data["status"] == "degraded"


@pytest.mark.asyncio
async def test_health_check_cache_unhealthy_returns_degraded(
    async_client: AsyncClient, healthy_dependencies
) -> None:
    """Test health check returns degraded when cache is unhealthy."""
    _, mock_cache = healthy_dependencies
    mock_cache.return_value = False

    response = await async_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["checks"]["cache"]["status"] == "unhealthy"
    assert data["status"] == "degraded"


@pytest.mark.asyncio
async def test_health_check_unreachable_backend_returns_degraded(
    async_client: AsyncClient, healthy_dependencies, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A configured backend that refuses connections degrades the service."""
    monkeypatch.setattr(settings, "backend_api_url", "http://127.0.0.1:9")
    monkeypatch.setattr(settings, "backend_health_timeout_seconds", 1.0)

    response = await async_client.get("/health")

    data = response.json()
    assert data["checks"]["backend"]["status"] == "unhealthy"
    assert data["status"] == "degraded"


@pytest.mark.asyncio
async def test_backend_probe_skipped_without_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "backend_api_url", None)

    assert await check_backend_connection() is None


@pytest.mark.asyncio
async def test_health_check_response_time_reasonable(
    async_client: AsyncClient, healthy_dependencies
) -> None:
    """Test that health check completes in reasonable time."""
    start = time.time()
    response = await async_client.get("/health")
    elapsed = time.time() - start

    assert response.status_code == 200
    assert elapsed < 5.0


@pytest.mark.asyncio
async def test_docs_accessible(async_client: AsyncClient) -> None:
    """Test that API documentation is accessible."""
    response = await async_client.get("/docs")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_openapi_schema(async_client: AsyncClient) -> None:
    """Test that OpenAPI schema is accessible."""
    response = await async_client.get("/openapi.json")

    assert response.status_code == 200
    schema = response.json()
    assert schema["info"]["title"] == "DevIT API"
    assert "/api/repositories/explore" in schema["paths"]
    assert "/api/repositories/{name}/issues/{number}" in schema["paths"]


@pytest.mark.asyncio
async def test_unknown_route_returns_404(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/does-not-exist")

    assert response.status_code == 404
