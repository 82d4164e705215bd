"""Common components shared across DazzleCache modules.

This internal package contains pure data structures and helpers with no
dependency on the store, the strategies or the interceptor. It should NOT
be imported directly by users.

Components here include:
- Configuration classes (ComponentConfig, GlobalFlags)
- Canonical serialization of props bags

Important: This package must NEVER import from the strategies or the
interceptor to avoid circular dependencies.
"""

from .config import (
    CacheStrategy,
    ComponentConfig,
    GlobalFlags,
    FlagSnapshot,
    DEFAULT_BOOKKEEPING_ATTRIBUTES,
)
from .canonical import canonicalize, serialize, join_path

__all__ = [
    'CacheStrategy',
    'ComponentConfig',
    'GlobalFlags',
    'FlagSnapshot',
    'DEFAULT_BOOKKEEPING_ATTRIBUTES',
    'canonicalize',
    'serialize',
    'join_path',
]
