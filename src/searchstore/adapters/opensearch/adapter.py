"""OpenSearch store — Document CRUD and field search for OpenSearch (v2+).

OpenSearch is an AWS-maintained fork of Elasticsearch with a compatible
query DSL and API surface.  This store uses ``opensearch-py`` (async) and
offers the same contract as the Elasticsearch store.

Install the optional dependency::

    pip install searchstore[opensearch]
    # or: pip install opensearch-py[async]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from searchstore.adapters.base.adapter import SearchStore
from searchstore.adapters.base.exceptions import ConfigurationError, LookupFailed, WriteFailed
from searchstore.models.document import TYPE_FIELD, Document, FieldValue, strip_reserved, validate_body

logger = logging.getLogger(__name__)


def _is_not_found(error: Exception) -> bool:
    return getattr(error, "status_code", None) == 404


class OpenSearchStore(SearchStore):
    """Search store backed by OpenSearch.

    The query DSL is shared with the Elasticsearch store; requests go
    through ``opensearchpy`` with ``body=`` payloads and ``ignore=404`` for
    the idempotent collection calls.
    """

    engine = "opensearch"

    @classmethod
    def _create_client(
        cls,
        node: str,
        request_timeout: float | None = None,
        **kwargs: Any,
    ) -> Any:
        try:
            from opensearchpy import AsyncOpenSearch
        except ImportError as e:
            raise ConfigurationError(
                "opensearch-py package is required.  Install with: pip install searchstore[opensearch]"
            ) from e

        kwargs.setdefault("ssl_show_warn", False)
        if request_timeout is not None:
            kwargs["timeout"] = request_timeout
        return AsyncOpenSearch(hosts=[node], **kwargs)

    @property
    def client_errors(self) -> tuple[type[Exception], ...]:
        from opensearchpy.exceptions import OpenSearchException

        return (OpenSearchException,)

    # ── Mutations ────────────────────────────────────────────────────────

    async def create_document(self, collection: str, type_: str, body: Mapping[str, FieldValue]) -> str:
        self.validate_index(collection)
        document = validate_body(body)

        async with self._refreshing(collection):
            response = await self._conn.index(
                index=collection,
                body=self._stamp(document, type_),
                refresh=True,
            )

        if response.get("result") != "created":
            raise WriteFailed(f"Failed to create document in '{collection}': result={response.get('result')!r}")
        logger.debug("Created document %s in %s/%s", response["_id"], collection, type_)
        return response["_id"]

    async def update_document(
        self, collection: str, type_: str, doc_id: str, partial_body: Mapping[str, FieldValue]
    ) -> bool:
        try:
            document = validate_body(partial_body)
            async with self._refreshing(collection):
                version = await self._owned_version(collection, type_, doc_id)
                if version is not None:
                    await self._conn.update(
                        index=collection, id=doc_id, body={"doc": document}, refresh=True, **version
                    )
        except Exception as e:
            logger.warning("Update of %s in %s/%s failed: %s", doc_id, collection, type_, e)
            return False
        if version is None:
            logger.warning("Update of %s in %s/%s failed: no such document", doc_id, collection, type_)
            return False
        return True

    async def delete_document(self, collection: str, type_: str, doc_id: str) -> None:
        async with self._refreshing(collection):
            version = await self._owned_version(collection, type_, doc_id)
            if version is None:
                logger.debug("Document %s in %s/%s already absent", doc_id, collection, type_)
                return
            try:
                response = await self._conn.delete(index=collection, id=doc_id, refresh=True, **version)
            except Exception as e:
                if not _is_not_found(e):
                    raise
                logger.debug("Document %s in %s/%s already absent", doc_id, collection, type_)
                return

        if response.get("result") not in ("deleted", "not_found"):
            raise WriteFailed(f"Failed to delete document '{doc_id}': result={response.get('result')!r}")

    async def delete_collection(self, collection: str) -> bool:
        await self._conn.indices.delete(index=collection, ignore=404)
        logger.debug("Deleted collection %s", collection)
        return True

    async def refresh(self, collection: str) -> None:
        await self._conn.indices.refresh(index=collection, ignore=404)

    # ── Lookups ──────────────────────────────────────────────────────────

    async def _owned_version(self, collection: str, type_: str, doc_id: str) -> dict[str, int] | None:
        """Return ``if_seq_no``/``if_primary_term`` for a document of ``type_``, else ``None``."""
        try:
            response = await self._conn.get(index=collection, id=doc_id, _source_includes=[TYPE_FIELD])
        except Exception as e:
            if not _is_not_found(e):
                raise
            return None
        if not self._matches_type(response.get("_source", {}), type_):
            return None
        return {"if_seq_no": response["_seq_no"], "if_primary_term": response["_primary_term"]}

    async def get_by_id(self, collection: str, type_: str, doc_id: str) -> Document | None:
        try:
            response = await self._conn.get(index=collection, id=doc_id)
        except Exception as e:
            info = getattr(e, "info", None)
            if _is_not_found(e) and isinstance(info, dict) and info.get("found") is False:
                return None
            raise LookupFailed(f"Failed to fetch document '{doc_id}': {e}") from e

        source = response["_source"]
        if not self._matches_type(source, type_):
            return None
        return strip_reserved(source)

    async def get_all(self, collection: str, type_: str) -> list[Document]:
        response = await self._conn.search(index=collection, body=self._search_request(type_))
        return self._hits_to_documents(response)

    async def search_by_field(self, collection: str, type_: str, field: str, query: str) -> list[Document]:
        clause = self._field_query(field, query)
        response = await self._conn.search(index=collection, body=self._search_request(type_, clause))
        return self._hits_to_documents(response)
