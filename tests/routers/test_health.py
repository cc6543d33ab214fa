"""Tests for health and root endpoints."""

import pytest

from src.exceptions import StorageError
from src.services.storage_service import MemoryStore
from tests.conftest import ClientFactory


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    @pytest.mark.anyio
    async def test_health_returns_healthy_when_store_writable(
        self,
        client_factory: ClientFactory,
    ) -> None:
        """Health check returns healthy when the store accepts writes."""
        async with client_factory() as client:
            response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] is True

    @pytest.mark.anyio
    async def test_health_returns_degraded_when_store_read_only(
        self,
        client_factory: ClientFactory,
        memory_store: MemoryStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Health check returns degraded when the store rejects writes."""
        monkeypatch.setattr(memory_store, "is_writable", lambda: False)

        async with client_factory() as client:
            response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["store"] is False


class TestServiceEndpoints:
    """Tests for app-level behavior."""

    @pytest.mark.anyio
    async def test_root(self, client_factory: ClientFactory) -> None:
        """Root endpoint names the service."""
        async with client_factory() as client:
            response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "carelink"

    @pytest.mark.anyio
    async def test_storage_failure_returns_503(
        self,
        client_factory: ClientFactory,
        memory_store: MemoryStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Store errors are reported as a temporary outage."""

        def failing_get(key: str, default: object = None) -> object:
            raise StorageError(f"Failed to read {key}: disk gone")

        monkeypatch.setattr(memory_store, "get", failing_get)

        async with client_factory() as client:
            response = await client.get("/patients")

        assert response.status_code == 503
        assert response.json()["detail"] == "Storage temporarily unavailable"
