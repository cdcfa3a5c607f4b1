"""Integration test fixtures — Live search clusters.

Expects clusters to be running, e.g.:
    docker run -p 9200:9200 -e discovery.type=single-node -e xpack.security.enabled=false elasticsearch:8.13.0
    docker run -p 9201:9200 -e discovery.type=single-node -e DISABLE_SECURITY_PLUGIN=true opensearchproject/opensearch:2

Tests are skipped when a cluster is not reachable.
"""

from __future__ import annotations

import time

import httpx
import pytest

TEST_INDEX = "unit-test-elastic-index"
TEST_TYPE = "typeName"


def _wait_for_service(url: str, timeout: float = 30.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(2)
    return False


@pytest.fixture(scope="session")
def elasticsearch_ready() -> tuple[str, str]:
    """Ensure Elasticsearch is reachable; returns (host, port)."""
    host, port = "http://localhost", "9200"
    if not _wait_for_service(f"{host}:{port}"):
        pytest.skip("Elasticsearch not available at localhost:9200")
    return host, port


@pytest.fixture(scope="session")
def opensearch_ready() -> tuple[str, str]:
    """Ensure OpenSearch is reachable; returns (host, port)."""
    host, port = "http://localhost", "9201"
    if not _wait_for_service(f"{host}:{port}"):
        pytest.skip("OpenSearch not available at localhost:9201")
    return host, port
