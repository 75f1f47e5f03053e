"""Error taxonomy for the cache hook.

Only ``ConfigurationError`` ever reaches the caller of the hook. The other
two are raised by stores and codecs and absorbed by the engine, which
then behaves as if caching were disabled for that request.
"""


class CacheError(Exception):
    """Base class for all cache hook errors."""
    pass


class ConfigurationError(CacheError):
    """Raised when a required option is missing or the named store is not registered."""
    pass


class SerializationError(CacheError):
    """Raised when an entry cannot be encoded for, or decoded from, the store."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{key}: {message}")


class StoreUnavailable(CacheError):
    """Raised when the underlying key-value store fails a read or write."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"store {operation} failed: {message}")
