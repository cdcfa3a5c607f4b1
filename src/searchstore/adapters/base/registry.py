"""Store Registry — Maps backend names to search store classes.

The registry is a central place to register store classes and establish a
connected store from configuration.

Example:
    >>> registry = StoreRegistry()
    >>> registry.register("elasticsearch", ElasticsearchStore)
    >>> store = await registry.establish("elasticsearch", "http://localhost", "9200")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from searchstore.adapters.base.adapter import SearchStore
from searchstore.adapters.base.exceptions import StoreError

if TYPE_CHECKING:
    from searchstore.config.settings import Settings

logger = logging.getLogger(__name__)


class BackendNotFoundError(StoreError):
    """Raised when a requested backend is not registered."""


class StoreRegistry:
    """Registry of search store classes keyed by backend name."""

    def __init__(self) -> None:
        self._classes: dict[str, type[SearchStore]] = {}

    def register(self, name: str, store_class: type[SearchStore]) -> None:
        """Register a store class.

        Args:
            name: Unique backend name.
            store_class: The store class to register.
        """
        if name in self._classes:
            logger.warning("Overwriting existing backend registration: %s", name)
        self._classes[name] = store_class
        logger.debug("Registered backend: %s", name)

    def get(self, name: str) -> type[SearchStore]:
        """Get a registered store class by name.

        Raises:
            BackendNotFoundError: If no store is registered under this name.
        """
        if name not in self._classes:
            raise BackendNotFoundError(
                f"No backend registered with name '{name}'. "
                f"Available backends: {list(self._classes.keys())}"
            )
        return self._classes[name]

    async def establish(self, name: str, host: Any, port: Any, **options: Any) -> SearchStore:
        """Establish a connected store for the named backend.

        Args:
            name: The registered backend name.
            host: Scheme and host name.
            port: Port as a string.
            **options: Passed to the store's ``establish()``.

        Returns:
            The connected store.
        """
        return await self.get(name).establish(host, port, **options)

    @property
    def registered_backends(self) -> list[str]:
        """List all registered backend names."""
        return list(self._classes.keys())


def default_registry() -> StoreRegistry:
    """Build a registry with the built-in backends registered."""
    from searchstore.adapters.elasticsearch.adapter import ElasticsearchStore
    from searchstore.adapters.opensearch.adapter import OpenSearchStore

    registry = StoreRegistry()
    registry.register(ElasticsearchStore.engine, ElasticsearchStore)
    registry.register(OpenSearchStore.engine, OpenSearchStore)
    return registry


async def connect(settings: Settings, registry: StoreRegistry | None = None) -> SearchStore:
    """Establish the store described by ``settings.store``.

    Args:
        settings: Application settings.
        registry: Registry to resolve the backend from. Defaults to the
            built-in backends.

    Returns:
        The connected store.
    """
    store_settings = settings.store
    registry = registry or default_registry()
    return await registry.establish(
        store_settings.backend,
        store_settings.host,
        store_settings.port,
        match_policy=store_settings.match_policy,
        result_window=store_settings.result_window,
        request_timeout=store_settings.request_timeout,
    )
