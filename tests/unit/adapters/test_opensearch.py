"""Tests for the OpenSearch store."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from opensearchpy.exceptions import ConnectionError as OpenSearchConnectionError
from opensearchpy.exceptions import NotFoundError

from searchstore.adapters.base.exceptions import (
    ConfigurationError,
    ConnectionError,
    InvalidName,
    LookupFailed,
    WriteFailed,
)
from searchstore.adapters.opensearch.adapter import OpenSearchStore
from tests.conftest import make_hit

INDEX = "unit-test-opensearch-index"
TYPE = "typeName"


def _versioned(type_: str) -> dict[str, Any]:
    return {"_id": "os_001", "found": True, "_seq_no": 4, "_primary_term": 2, "_source": {"@type": type_}}


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def store(os_client: MagicMock) -> OpenSearchStore:
    return OpenSearchStore(os_client)


# ── Connection ───────────────────────────────────────────────────────────────


class TestOpenSearchConnection:
    def test_name(self, store: OpenSearchStore) -> None:
        assert store.name == "opensearch"

    def test_client_errors_cover_transport_failures(self, store: OpenSearchStore) -> None:
        assert issubclass(NotFoundError, store.client_errors)
        assert issubclass(OpenSearchConnectionError, store.client_errors)

    async def test_establish_failure_message_prefix(self, os_client: MagicMock) -> None:
        os_client.info = AsyncMock(side_effect=OSError("Connection refused"))
        with patch.object(OpenSearchStore, "_create_client", return_value=os_client):
            with pytest.raises(ConnectionError, match=r"^Cannot establish opensearch connection: Connection refused"):
                await OpenSearchStore.establish("http://localhost", "9201")
        os_client.close.assert_awaited_once()

    async def test_missing_package_raises(self) -> None:
        with patch.dict("sys.modules", {"opensearchpy": None}), pytest.raises(ConfigurationError):
            await OpenSearchStore.establish("http://localhost", "9201")

    def test_create_client_maps_timeout(self) -> None:
        with patch("opensearchpy.AsyncOpenSearch") as client_cls:
            OpenSearchStore._create_client("http://localhost:9201", request_timeout=7.5)
        client_cls.assert_called_once_with(hosts=["http://localhost:9201"], ssl_show_warn=False, timeout=7.5)

    async def test_shutdown_closes_client(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        await store.close()
        os_client.close.assert_awaited_once()
        assert store._client is None


# ── Documents ────────────────────────────────────────────────────────────────


class TestOpenSearchDocuments:
    async def test_create_sends_body_and_refreshes(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.index.return_value = {"result": "created", "_id": "os_001"}

        assert await store.create_document(INDEX, TYPE, {"title": "Solar", "tags": ["a"]}) == "os_001"

        kwargs = os_client.index.await_args.kwargs
        assert kwargs["body"]["title"] == "Solar"
        assert kwargs["body"]["@type"] == TYPE
        assert kwargs["refresh"] is True
        os_client.indices.refresh.assert_awaited_once_with(index=INDEX, ignore=404)

    async def test_create_invalid_name(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        with pytest.raises(InvalidName):
            await store.create_document("BadName", TYPE, {"title": "x"})
        os_client.index.assert_not_called()

    async def test_create_unexpected_result(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.index.return_value = {"result": "noop", "_id": "os_001"}
        with pytest.raises(WriteFailed):
            await store.create_document(INDEX, TYPE, {"title": "x"})

    async def test_get_found(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.return_value = {"_id": "os_001", "found": True, "_source": {"title": "x", "@type": TYPE}}
        assert await store.get_by_id(INDEX, TYPE, "os_001") == {"title": "x"}

    async def test_get_not_found(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.side_effect = NotFoundError(404, "not_found", {"_id": "gone", "found": False})
        assert await store.get_by_id(INDEX, TYPE, "gone") is None

    async def test_get_missing_index(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.side_effect = NotFoundError(
            404, "index_not_found_exception", {"error": {"type": "index_not_found_exception"}, "status": 404}
        )
        with pytest.raises(LookupFailed):
            await store.get_by_id("missing", TYPE, "os_001")

    async def test_update(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.return_value = _versioned(TYPE)

        assert await store.update_document(INDEX, TYPE, "os_001", {"title": "y"}) is True

        os_client.get.assert_awaited_once_with(index=INDEX, id="os_001", _source_includes=["@type"])
        os_client.update.assert_awaited_once_with(
            index=INDEX, id="os_001", body={"doc": {"title": "y"}}, refresh=True, if_seq_no=4, if_primary_term=2
        )

    async def test_update_missing(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.side_effect = NotFoundError(404, "not_found", {"_id": "gone", "found": False})
        assert await store.update_document(INDEX, TYPE, "gone", {"title": "y"}) is False
        os_client.update.assert_not_called()

    async def test_update_under_other_type(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.return_value = _versioned("typeA")
        assert await store.update_document(INDEX, "typeB", "os_001", {"title": "y"}) is False
        os_client.update.assert_not_called()

    async def test_update_failure(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.return_value = _versioned(TYPE)
        os_client.update.side_effect = NotFoundError(404, "document_missing_exception", {})
        assert await store.update_document(INDEX, TYPE, "gone", {"title": "y"}) is False

    async def test_delete(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.return_value = _versioned(TYPE)
        os_client.delete.return_value = {"result": "deleted", "_id": "os_001"}

        await store.delete_document(INDEX, TYPE, "os_001")

        os_client.delete.assert_awaited_once_with(
            index=INDEX, id="os_001", refresh=True, if_seq_no=4, if_primary_term=2
        )

    async def test_delete_missing_is_silent(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.side_effect = NotFoundError(404, "not_found", {"_id": "gone", "found": False})
        await store.delete_document(INDEX, TYPE, "gone")
        os_client.delete.assert_not_called()
        os_client.indices.refresh.assert_awaited_once_with(index=INDEX, ignore=404)

    async def test_delete_under_other_type(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.return_value = _versioned("typeA")
        await store.delete_document(INDEX, "typeB", "os_001")
        os_client.delete.assert_not_called()
        os_client.indices.refresh.assert_awaited_once_with(index=INDEX, ignore=404)

    async def test_delete_removed_concurrently_is_silent(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.return_value = _versioned(TYPE)
        os_client.delete.side_effect = NotFoundError(404, "not_found", {"result": "not_found"})
        await store.delete_document(INDEX, TYPE, "os_001")

    async def test_delete_other_error_propagates(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        os_client.get.return_value = _versioned(TYPE)
        os_client.delete.side_effect = OSError("socket closed")
        with pytest.raises(OSError):
            await store.delete_document(INDEX, TYPE, "os_001")

    async def test_delete_collection(self, store: OpenSearchStore, os_client: MagicMock) -> None:
        assert await store.delete_collection("never-created") is True
        os_client.indices.delete.assert_awaited_once_with(index="never-created", ignore=404)


# ── Search ───────────────────────────────────────────────────────────────────


class TestOpenSearchSearch:
    @pytest.fixture
    def response(self) -> dict[str, Any]:
        return {
            "took": 3,
            "hits": {
                "total": {"value": 2},
                "hits": [
                    make_hit("os_001", {"title": "aa", "@type": TYPE, "@created": 1}),
                    make_hit("os_002", {"title": "aa bb", "@type": TYPE, "@created": 2}),
                ],
            },
        }

    async def test_get_all(self, store: OpenSearchStore, os_client: MagicMock, response: dict) -> None:
        os_client.search.return_value = response

        assert await store.get_all(INDEX, TYPE) == [{"title": "aa"}, {"title": "aa bb"}]

        body = os_client.search.await_args.kwargs["body"]
        assert body["sort"] == [{"@created": {"order": "asc", "unmapped_type": "long"}}]

    async def test_search_by_field(self, store: OpenSearchStore, os_client: MagicMock, response: dict) -> None:
        os_client.search.return_value = response

        result = await store.search_by_field(INDEX, TYPE, "title", "aa")

        assert len(result) == 2
        body = os_client.search.await_args.kwargs["body"]
        assert body["query"]["bool"]["must"] == [{"regexp": {"title.keyword": ".*aa.*"}}]
