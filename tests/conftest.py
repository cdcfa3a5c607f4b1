"""Shared test fixtures and configuration."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from searchstore.config.settings import Settings


class FakeResponse(dict):
    """Dict-shaped API response carrying ``meta.status`` like ``ObjectApiResponse``."""

    def __init__(self, body: dict[str, Any], status: int = 200) -> None:
        super().__init__(body)
        self.meta = SimpleNamespace(status=status)


def make_hit(doc_id: str, source: dict[str, Any]) -> dict[str, Any]:
    return {"_index": "unit-test", "_id": doc_id, "_score": None, "_source": source}


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def cluster_info() -> dict[str, Any]:
    return {"cluster_name": "test-cluster", "version": {"number": "8.13.0"}}


@pytest.fixture
def es_client(cluster_info: dict[str, Any]) -> MagicMock:
    """Mock ``AsyncElasticsearch`` with async API methods."""
    client = MagicMock()
    client.info = AsyncMock(return_value=cluster_info)
    for method in ("index", "get", "update", "delete", "search", "close"):
        setattr(client, method, AsyncMock())
    client.indices.refresh = AsyncMock()
    client.indices.delete = AsyncMock()
    client.options.return_value = client
    return client


@pytest.fixture
def os_client(cluster_info: dict[str, Any]) -> MagicMock:
    """Mock ``AsyncOpenSearch`` with async API methods."""
    client = MagicMock()
    client.info = AsyncMock(return_value={**cluster_info, "version": {"number": "2.13.0"}})
    for method in ("index", "get", "update", "delete", "search", "close"):
        setattr(client, method, AsyncMock())
    client.indices.refresh = AsyncMock()
    client.indices.delete = AsyncMock()
    return client
