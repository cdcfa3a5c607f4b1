"""Base store interface — Abstract classes for search engine stores."""

from searchstore.adapters.base.adapter import SearchStore
from searchstore.adapters.base.registry import StoreRegistry

__all__ = ["SearchStore", "StoreRegistry"]
