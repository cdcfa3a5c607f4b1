"""Store-specific exceptions."""


class StoreError(Exception):
    """Base exception for search store errors."""


class InvalidArgument(StoreError, ValueError):
    """Raised when connection parameters or a document body are malformed."""


class InvalidName(StoreError, ValueError):
    """Raised when a collection name does not match ``^[a-z0-9-]+$``."""


class ConnectionError(StoreError):
    """Raised when the liveness probe against the search backend fails."""


class WriteFailed(StoreError):
    """Raised when a create or delete returns an unexpected result."""


class LookupFailed(StoreError):
    """Raised when fetching a document fails for a reason other than not-found."""


class ConfigurationError(StoreError):
    """Raised when store configuration is invalid."""
