"""Exception taxonomy for DazzleCache.

Every error raised by the caching layer derives from CacheError so hosts
can catch the whole family in one place.
"""


class CacheError(Exception):
    """Base class for all caching-layer errors."""
    pass


class KeyDerivationError(CacheError):
    """Raised when a props bag cannot be turned into a cache key.

    Cyclic structures and values with no canonical serialization (functions,
    sets, arbitrary objects) trigger this when no custom key function is
    configured. It is always propagated to the caller of the render.
    """
    pass


class TemplateMismatchError(CacheError):
    """Raised when a stored template cannot be replayed with the current props.

    The interceptor recovers from this by rendering without the cache.
    """
    pass


class ConfigError(CacheError):
    """Raised when a caching configuration is malformed."""
    pass
