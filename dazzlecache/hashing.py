"""Cache key hashing.

Composed keys can get long (they embed every literal prop value), so they
can optionally be hashed. The default hash is xxhash's xxh64; when xxhash
is not installed there is no default and hashing stays off unless a custom
function is supplied.
"""

from typing import Callable, Optional

try:
    import xxhash
    _HAS_XXHASH = True
except ImportError:
    _HAS_XXHASH = False


def xxh64_hex(text: str) -> str:
    """Hex digest of a key string using xxh64."""
    return xxhash.xxh64(text.encode("utf-8")).hexdigest()


def default_hash_fn() -> Optional[Callable[[str], str]]:
    """The default key hash function, or None when xxhash is unavailable."""
    return xxh64_hex if _HAS_XXHASH else None
