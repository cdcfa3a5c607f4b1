"""Base search store — Abstract interface for document-store adapters.

Every backend wraps one search-engine client library behind the same
capability set so callers never depend on a client's major version:

  1. Connection lifecycle (``establish`` / ``close``)
  2. Document mutations (create, update, delete) followed by a refresh
  3. Lookups (by id, whole collection, field search)
  4. Collection maintenance (delete, refresh)

Writes are only visible to searches after a refresh.  Mutating calls run
inside ``_refreshing()``, which refreshes the collection on every exit path,
much like a commit in a transactional store.
"""

from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any, ClassVar, Self

from searchstore.adapters.base.exceptions import ConnectionError, InvalidArgument, InvalidName
from searchstore.models.document import CREATED_FIELD, TYPE_FIELD, Document, FieldValue, strip_reserved
from searchstore.models.query import MatchPolicy

logger = logging.getLogger(__name__)

INDEX_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")
DEFAULT_RESULT_WINDOW = 10_000

# Lucene regexp operators; escaped so queries always match literally.
_REGEXP_RESERVED = frozenset('.?+*|{}[]()"\\#@&<>~')


class SearchStore(ABC):
    """Abstract base class for search store adapters.

    Subclasses bind ``engine`` to the backend name and implement client
    creation plus every document operation.  The base class owns argument
    checks, collection-name validation, query construction and the
    refresh-on-exit scope.

    Args:
        client: A connected async client for the backend.
        match_policy: Matching used by ``search_by_field``.
        result_window: Maximum number of hits fetched per search.
    """

    engine: ClassVar[str]

    def __init__(
        self,
        client: Any,
        *,
        match_policy: MatchPolicy | str = MatchPolicy.CONTAINS,
        result_window: int = DEFAULT_RESULT_WINDOW,
    ) -> None:
        self._client = client
        self._match_policy = MatchPolicy(match_policy)
        self._result_window = result_window

    @property
    def name(self) -> str:
        """Backend name (e.g., 'elasticsearch', 'opensearch')."""
        return self.engine

    @property
    def match_policy(self) -> MatchPolicy:
        return self._match_policy

    @property
    def client_errors(self) -> tuple[type[Exception], ...]:
        """Exception types the backend client raises for transport and API failures."""
        return ()

    # ── Lifecycle ────────────────────────────────────────────────────────

    @classmethod
    async def establish(
        cls,
        host: Any,
        port: Any,
        *,
        match_policy: MatchPolicy | str = MatchPolicy.CONTAINS,
        result_window: int = DEFAULT_RESULT_WINDOW,
        **client_kwargs: Any,
    ) -> Self:
        """Connect to ``host:port`` and verify the backend answers.

        Args:
            host: Scheme and host name, e.g. ``"http://localhost"``.
            port: Port as a string, e.g. ``"9200"``.
            match_policy: Matching used by ``search_by_field``.
            result_window: Maximum number of hits fetched per search.
            **client_kwargs: Forwarded to the backend client constructor.

        Returns:
            A ready adapter owning the new connection.

        Raises:
            InvalidArgument: If host or port is missing or not a string.
            ConnectionError: If the liveness probe fails.
        """
        if not isinstance(host, str) or not host:
            raise InvalidArgument("Host invalid")
        if not isinstance(port, str) or not port:
            raise InvalidArgument("Port invalid")

        node = host + ":" + port
        client = cls._create_client(node, **client_kwargs)
        try:
            info = await client.info()
        except Exception as e:
            await client.close()
            raise ConnectionError(f"Cannot establish {cls.engine} connection: {e}") from e

        body = getattr(info, "body", info)
        logger.info(
            "Connected to %s cluster: %s (v%s) at %s",
            cls.engine,
            body.get("cluster_name", "unknown"),
            (body.get("version") or {}).get("number", "unknown"),
            node,
        )
        return cls(client, match_policy=match_policy, result_window=result_window)

    @classmethod
    @abstractmethod
    def _create_client(cls, node: str, **kwargs: Any) -> Any:
        """Build the backend's async client for a single node URL."""

    async def close(self) -> None:
        """Release the connection. Further operations are not permitted."""
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("Closed %s connection", self.engine)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    @property
    def _conn(self) -> Any:
        if self._client is None:
            raise ConnectionError(f"{self.engine} store is closed.")
        return self._client

    # ── Operations ───────────────────────────────────────────────────────

    @abstractmethod
    async def create_document(self, collection: str, type_: str, body: Mapping[str, FieldValue]) -> str:
        """Index a new document and return its store-assigned id.

        Raises:
            InvalidName: If ``collection`` is not a valid collection name.
            InvalidArgument: If ``body`` is not a flat string mapping.
            WriteFailed: If the store did not report a newly created document.
        """

    @abstractmethod
    async def get_by_id(self, collection: str, type_: str, doc_id: str) -> Document | None:
        """Fetch a document, or ``None`` when the store reports it missing.

        Raises:
            LookupFailed: For any failure other than not-found.
        """

    @abstractmethod
    async def update_document(
        self, collection: str, type_: str, doc_id: str, partial_body: Mapping[str, FieldValue]
    ) -> bool:
        """Merge ``partial_body`` into a document of ``type_``.

        Returns False on any failure, including a missing document or one
        tagged with another type.
        """

    @abstractmethod
    async def get_all(self, collection: str, type_: str) -> list[Document]:
        """Return every document of the type, in insertion order."""

    @abstractmethod
    async def search_by_field(self, collection: str, type_: str, field: str, query: str) -> list[Document]:
        """Return documents whose ``field`` matches ``query``, in insertion order."""

    @abstractmethod
    async def delete_document(self, collection: str, type_: str, doc_id: str) -> None:
        """Delete a document of ``type_``.

        A missing document, or one tagged with another type, is left alone
        and the call succeeds silently.
        """

    @abstractmethod
    async def delete_collection(self, collection: str) -> bool:
        """Delete a whole collection. A missing collection counts as deleted."""

    @abstractmethod
    async def refresh(self, collection: str) -> None:
        """Make all prior writes to ``collection`` visible to reads and searches."""

    # ── Helpers ──────────────────────────────────────────────────────────

    @staticmethod
    def validate_index(name: str) -> None:
        """Check a collection name before it can be created implicitly.

        Raises:
            InvalidName: If ``name`` is not lowercase alphanumerics and hyphens.
        """
        if not isinstance(name, str) or not INDEX_NAME_PATTERN.fullmatch(name):
            raise InvalidName(f"Invalid collection name '{name}': must match {INDEX_NAME_PATTERN.pattern}")

    @asynccontextmanager
    async def _refreshing(self, collection: str) -> AsyncIterator[None]:
        """Refresh ``collection`` when the block exits, whether or not it raised.

        On the failure path a refresh error is logged and the original
        exception propagates.
        """
        try:
            yield
        except Exception:
            try:
                await self.refresh(collection)
            except Exception:
                logger.warning("Refresh of '%s' after failed write also failed", collection, exc_info=True)
            raise
        await self.refresh(collection)

    @staticmethod
    def _stamp(document: Document, type_: str) -> dict[str, Any]:
        """Attach the type tag and creation stamp to a new document."""
        return {**document, TYPE_FIELD: type_, CREATED_FIELD: time.time_ns()}

    @staticmethod
    def _type_filter(type_: str) -> dict[str, Any]:
        return {"term": {f"{TYPE_FIELD}.keyword": type_}}

    def _field_query(self, field: str, query: str) -> dict[str, Any]:
        """Build the field clause for the configured match policy."""
        if self._match_policy is MatchPolicy.TOKEN:
            return {"match": {field: {"query": query, "operator": "and"}}}
        return {"regexp": {f"{field}.keyword": f".*{escape_regexp(query)}.*"}}

    def _search_request(self, type_: str, clause: dict[str, Any] | None = None) -> dict[str, Any]:
        """Build a type-filtered search sorted by creation stamp."""
        bool_query: dict[str, Any] = {"filter": [self._type_filter(type_)]}
        if clause is not None:
            bool_query["must"] = [clause]
        return {
            "query": {"bool": bool_query},
            "sort": [{CREATED_FIELD: {"order": "asc", "unmapped_type": "long"}}],
            "size": self._result_window,
        }

    @staticmethod
    def _hits_to_documents(response: Mapping[str, Any]) -> list[Document]:
        return [strip_reserved(hit.get("_source", {})) for hit in response["hits"]["hits"]]

    @staticmethod
    def _matches_type(source: Mapping[str, Any], type_: str) -> bool:
        return source.get(TYPE_FIELD) == type_


def escape_regexp(text: str) -> str:
    """Escape Lucene regexp operators so ``text`` matches literally."""
    return "".join(f"\\{ch}" if ch in _REGEXP_RESERVED else ch for ch in text)
