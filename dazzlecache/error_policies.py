"""
Error handling policies for DazzleCache.

This module decides what happens when the cache layer cannot serve a render
call it was asked to serve, through the Policy pattern. Policies only see
recoverable errors (TemplateMismatchError); the interceptor renders the
component without the cache whenever a policy returns.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter, deque
from typing import Any, Deque, Dict, Optional

logger = logging.getLogger(__name__)


class CacheErrorPolicy(ABC):
    """
    Base class for cache error policies.

    Subclasses implement different strategies for reacting to errors that
    occur while serving a render from the cache.
    """

    @abstractmethod
    def handle(self, error: Exception, identity: str, props: Any) -> None:
        """
        Handle a recoverable cache error.

        Args:
            error: The exception that was raised
            identity: Component identity being rendered
            props: The props bag of the failing call

        Returns:
            None to let the interceptor fall back to an uncached render,
            or re-raises the exception to fail the render.
        """
        pass


class FailFastPolicy(CacheErrorPolicy):
    """
    Policy that immediately re-raises any error.

    Useful in tests and when tuning a config, where a misclassified prop
    should be loud rather than silently rendered uncached.
    """

    def handle(self, error: Exception, identity: str, props: Any) -> None:
        """Re-raise the error immediately."""
        raise error


class CollectErrorsPolicy(CacheErrorPolicy):
    """
    Policy that collects all errors without logging, then falls back.

    Useful for collecting errors and presenting them at the end. Counts
    cover every error; only the most recent max_errors records are kept.
    """

    def __init__(self, max_errors: Optional[int] = 1000):
        """
        Initialize the policy.

        Args:
            max_errors: Number of error records to keep (None = unbounded)
        """
        self.errors: Deque[Dict[str, Any]] = deque(maxlen=max_errors)
        self.total_errors = 0
        self.by_identity: Counter = Counter()

    def handle(self, error: Exception, identity: str, props: Any) -> None:
        """Silently collect the error."""
        self._record(error, identity)

    def _record(self, error: Exception, identity: str):
        self.total_errors += 1
        self.by_identity[identity] += 1
        self.errors.append({
            'identity': identity,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': str(error),
        })

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and the retained records
        """
        return {
            'total_errors': self.total_errors,
            'by_identity': dict(self.by_identity),
            'errors': list(self.errors),  # Most recent error details
        }


class FallbackPolicy(CollectErrorsPolicy):
    """
    Policy that logs errors and falls back to an uncached render.

    This is the default: cache problems never stop a component from
    rendering. Errors are kept for later inspection.
    """

    def __init__(self, verbose: bool = True, max_errors: Optional[int] = 1000):
        """
        Initialize the policy.

        Args:
            verbose: If True, log a warning for every error
            max_errors: Number of error records to keep (None = unbounded)
        """
        super().__init__(max_errors=max_errors)
        self.verbose = verbose

    def handle(self, error: Exception, identity: str, props: Any) -> None:
        """Record the error, log it if verbose, and fall back."""
        self._record(error, identity)
        if self.verbose:
            logger.warning("Cache bypassed for '%s': %s", identity, error)
