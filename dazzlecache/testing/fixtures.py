"""Test fixtures for DazzleCache consumers.

These fixtures provide controlled access to internal state for testing purposes
without exposing implementation details as part of the public API.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from ..interceptor import RenderContext


class RecordingRenderer:
    """Stand-in host renderer that records every call it receives.

    Example:
        renderer = RecordingRenderer(lambda identity, props: f"<p>{props['x']}</p>")
        interceptor.render("P", {"x": "a"}, renderer)
        assert renderer.call_count == 1
    """

    def __init__(self, render: Callable[[str, Any], str]):
        self._render = render
        self.calls: List[Tuple[str, Any]] = []

    def __call__(self, identity: str, props: Any) -> str:
        self.calls.append((identity, props))
        return self._render(identity, props)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def calls_for(self, identity: str) -> List[Any]:
        """Props of every call made for one identity."""
        return [props for called, props in self.calls if called == identity]


class CacheTestHelper:
    """Public test fixture for cache verification.

    This class provides a stable testing interface for verifying cache behavior
    without exposing internal implementation details. It's designed for use in
    test suites of projects that consume DazzleCache.

    Example:
        testable = CacheTestHelper(context)

        # Verify cache behavior
        summary = testable.get_summary()
        assert summary['total_entries'] > 0
        assert testable.hits_for("Hello") == [1]
    """

    def __init__(self, context: RenderContext):
        """Initialize with the render context under test.

        Args:
            context: The RenderContext whose store is inspected
        """
        self._context = context

    def get_summary(self) -> Dict[str, Any]:
        """Returns high-level cache state for testing.

        Returns:
            Dictionary containing:
            - total_entries: Number of cached entries
            - total_hits: Sum of hit counts across entries
            - identities: Sorted identities with at least one entry
            - template_entries: Entries carrying token paths
        """
        store = self._context.store
        entries = list(store.cache.items())
        return {
            'total_entries': len(entries),
            'total_hits': sum(entry.hit_count for _, entry in entries),
            'identities': sorted({identity for (identity, _), _ in entries}),
            'template_entries': sum(1 for _, entry in entries if entry.token_paths is not None),
        }

    def keys_for(self, identity: str) -> List[str]:
        """Cache keys stored for one identity."""
        return [key for (stored, key) in self._context.store.cache.keys() if stored == identity]

    def hits_for(self, identity: str) -> List[int]:
        """Hit counts of the entries stored for one identity."""
        return list(self._context.store.hit_report().get(identity, {}).values())

    def payload_for(self, identity: str, key: Optional[str] = None) -> Optional[str]:
        """Stored payload for an identity (its only entry when key is omitted)."""
        if key is None:
            keys = self.keys_for(identity)
            if len(keys) != 1:
                return None
            key = keys[0]
        entry = self._context.store.peek(identity, key)
        return entry.payload if entry is not None else None
