"""Elasticsearch store — Document CRUD and field search on Elasticsearch (v8+).

Uses the official ``elasticsearch`` async client.  Mapping types no longer
exist on current clusters, so the type tag travels inside each document as
the ``@type`` keyword field and is filtered on for enumeration and search.

Usage::

    store = await ElasticsearchStore.establish("http://localhost", "9200")
    doc_id = await store.create_document("products", "phone", {"name": "Iphone 12"})
    await store.search_by_field("products", "phone", "name", "Iphone")
    await store.close()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from elasticsearch import ApiError, AsyncElasticsearch, NotFoundError, TransportError

from searchstore.adapters.base.adapter import SearchStore
from searchstore.adapters.base.exceptions import LookupFailed, WriteFailed
from searchstore.models.document import TYPE_FIELD, Document, FieldValue, strip_reserved, validate_body

logger = logging.getLogger(__name__)


class ElasticsearchStore(SearchStore):
    """Search store backed by Elasticsearch.

    Every mutation is sent with ``refresh=true`` and then followed by an
    explicit index refresh, so a read issued after the awaited call sees it.
    """

    engine = "elasticsearch"

    @classmethod
    def _create_client(
        cls,
        node: str,
        request_timeout: float | None = None,
        **kwargs: Any,
    ) -> AsyncElasticsearch:
        if request_timeout is not None:
            kwargs["request_timeout"] = request_timeout
        return AsyncElasticsearch(hosts=[node], **kwargs)

    @property
    def client_errors(self) -> tuple[type[Exception], ...]:
        return (ApiError, TransportError)

    # ── Mutations ────────────────────────────────────────────────────────

    async def create_document(self, collection: str, type_: str, body: Mapping[str, FieldValue]) -> str:
        self.validate_index(collection)
        document = validate_body(body)

        async with self._refreshing(collection):
            response = await self._conn.index(
                index=collection,
                document=self._stamp(document, type_),
                refresh=True,
            )

        if response["result"] != "created" or response.meta.status != 201:
            raise WriteFailed(
                f"Failed to create document in '{collection}': "
                f"result={response['result']!r}, status={response.meta.status}"
            )
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
                    await self._conn.update(index=collection, id=doc_id, doc=document, refresh=True, **version)
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
            except NotFoundError:
                logger.debug("Document %s in %s/%s already absent", doc_id, collection, type_)
                return

        if response["result"] not in ("deleted", "not_found"):
            raise WriteFailed(f"Failed to delete document '{doc_id}': result={response['result']!r}")

    async def delete_collection(self, collection: str) -> bool:
        await self._conn.options(ignore_status=404).indices.delete(index=collection)
        logger.debug("Deleted collection %s", collection)
        return True

    async def refresh(self, collection: str) -> None:
        await self._conn.options(ignore_status=404).indices.refresh(index=collection)

    # ── Lookups ──────────────────────────────────────────────────────────

    async def _owned_version(self, collection: str, type_: str, doc_id: str) -> dict[str, int] | None:
        """Return the write preconditions for a document of ``type_``.

        ``None`` means the document is missing or carries another type tag.
        The sequence number and primary term make the following write fail
        if the document changed in between.
        """
        try:
            response = await self._conn.get(index=collection, id=doc_id, source_includes=[TYPE_FIELD])
        except NotFoundError:
            return None
        if not self._matches_type(response["_source"], type_):
            return None
        return {"if_seq_no": response["_seq_no"], "if_primary_term": response["_primary_term"]}

    async def get_by_id(self, collection: str, type_: str, doc_id: str) -> Document | None:
        try:
            response = await self._conn.get(index=collection, id=doc_id)
        except NotFoundError as e:
            if isinstance(e.body, dict) and e.body.get("found") is False:
                return None
            raise LookupFailed(f"Failed to fetch document '{doc_id}': {e}") from e
        except Exception as e:
            raise LookupFailed(f"Failed to fetch document '{doc_id}': {e}") from e

        source = response["_source"]
        if not self._matches_type(source, type_):
            return None
        return strip_reserved(source)

    async def get_all(self, collection: str, type_: str) -> list[Document]:
        response = await self._conn.search(index=collection, **self._search_request(type_))
        return self._hits_to_documents(response)

    async def search_by_field(self, collection: str, type_: str, field: str, query: str) -> list[Document]:
        clause = self._field_query(field, query)
        response = await self._conn.search(index=collection, **self._search_request(type_, clause))
        return self._hits_to_documents(response)
