"""
Private cache storage for rendered markup with hit accounting.

Entries live until an explicit clear. An optional entry bound switches the
backing map to a cachetools LRUCache, evicting least-recently-used entries.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from cachetools import LRUCache


@dataclass
class CacheEntry:
    """
    One cached render.

    payload holds raw markup for the simple strategy and placeholder-bearing
    markup for the template strategy. token_paths records, for templates,
    the tokenized property paths in placeholder order.
    """
    key: str
    payload: str
    hit_count: int = 0
    token_paths: Optional[Tuple[str, ...]] = None


class CacheStore:
    """
    Cache storage keyed by (component identity, derived key).

    Supports two modes:
    - Unbounded (max_entries=None): plain dict, entries kept until clear()
    - Bounded: cachetools LRUCache holding at most max_entries entries

    put() never replaces an existing entry: when two renders miss on the
    same key (a component nested inside itself, for instance) the first
    writer wins and later payloads are discarded.
    """

    def __init__(self, max_entries: Optional[int] = None):
        """
        Initialize cache storage.

        Args:
            max_entries: Maximum number of entries (None = unbounded)
        """
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.cache = self._new_map()
        self.hits = 0
        self.misses = 0

    def _new_map(self):
        if self.max_entries is None:
            return {}
        return LRUCache(maxsize=self.max_entries)

    def get(self, identity: str, key: str) -> Optional[CacheEntry]:
        """
        Look up an entry, counting the hit or miss.

        Args:
            identity: Component identity
            key: Derived cache key

        Returns:
            CacheEntry (with hit_count already incremented) or None
        """
        entry = self.cache.get((identity, key))
        if entry is None:
            self.misses += 1
            return None
        entry.hit_count += 1
        self.hits += 1
        return entry

    def peek(self, identity: str, key: str) -> Optional[CacheEntry]:
        """Look up an entry without touching any counters."""
        return self.cache.get((identity, key))

    def put(self, identity: str, key: str, payload: str,
            token_paths: Optional[Tuple[str, ...]] = None) -> CacheEntry:
        """
        Store an entry unless one already exists for the key.

        Returns:
            The entry now held by the store (the existing one if present)
        """
        existing = self.cache.get((identity, key))
        if existing is not None:
            return existing
        entry = CacheEntry(key=key, payload=payload, token_paths=token_paths)
        self.cache[(identity, key)] = entry
        return entry

    def clear(self):
        """Clear all cache entries and counters."""
        self.cache.clear()
        self.hits = 0
        self.misses = 0

    def entries(self) -> int:
        """Number of cached entries."""
        return len(self.cache)

    def hit_report(self) -> Dict[str, Dict[str, int]]:
        """
        Snapshot of hit counts.

        Returns:
            {identity: {key: hit_count}}
        """
        report: Dict[str, Dict[str, int]] = {}
        for (identity, key), entry in list(self.cache.items()):
            report.setdefault(identity, {})[key] = entry.hit_count
        return report

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache metrics
        """
        stats = {
            'entries': len(self.cache),
            'hits': self.hits,
            'misses': self.misses,
        }

        # Calculate hit rate if we have attempts
        total_attempts = self.hits + self.misses
        if total_attempts > 0:
            stats['hit_rate'] = self.hits / total_attempts

        return stats

    def __len__(self) -> int:
        return len(self.cache)
