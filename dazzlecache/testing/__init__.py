"""Testing utilities for DazzleCache consumers."""

from .fixtures import CacheTestHelper, RecordingRenderer

__all__ = ['CacheTestHelper', 'RecordingRenderer']
