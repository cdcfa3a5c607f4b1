"""searchstore — CRUD and field search over a search engine, behind one interface."""

from searchstore.adapters.base.adapter import SearchStore
from searchstore.adapters.base.exceptions import (
    ConnectionError,
    InvalidArgument,
    InvalidName,
    LookupFailed,
    StoreError,
    WriteFailed,
)
from searchstore.adapters.base.registry import StoreRegistry, connect, default_registry
from searchstore.adapters.elasticsearch.adapter import ElasticsearchStore
from searchstore.models.query import MatchPolicy

__version__ = "0.1.0"

__all__ = [
    "ConnectionError",
    "ElasticsearchStore",
    "InvalidArgument",
    "InvalidName",
    "LookupFailed",
    "MatchPolicy",
    "SearchStore",
    "StoreError",
    "StoreRegistry",
    "WriteFailed",
    "__version__",
    "connect",
    "default_registry",
]
