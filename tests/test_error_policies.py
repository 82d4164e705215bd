"""
Tests for cache error policies.
"""

import logging

import pytest
from unittest.mock import Mock

from dazzlecache import (
    CacheErrorPolicy,
    CollectErrorsPolicy,
    FailFastPolicy,
    FallbackPolicy,
    TemplateMismatchError,
)


class TestErrorPolicies:
    """Test individual error policy behaviors."""

    def test_fail_fast_policy(self):
        """FailFastPolicy should re-raise any error."""
        policy = FailFastPolicy()

        with pytest.raises(TemplateMismatchError):
            policy.handle(TemplateMismatchError("shape changed"), "Hello", {})

    def test_collect_errors_policy(self):
        """CollectErrorsPolicy should record errors and return None."""
        policy = CollectErrorsPolicy()

        assert policy.handle(TemplateMismatchError("a"), "Hello", {}) is None
        policy.handle(TemplateMismatchError("b"), "Hello", {})
        policy.handle(TemplateMismatchError("c"), "Card", {})

        stats = policy.get_statistics()
        assert stats["total_errors"] == 3
        assert stats["by_identity"] == {"Hello": 2, "Card": 1}
        assert stats["errors"][0]["error_type"] == "TemplateMismatchError"
        assert stats["errors"][0]["error_message"] == "a"

    def test_collect_errors_keeps_recent_records(self):
        """Old records are dropped past max_errors; counts keep going."""
        policy = CollectErrorsPolicy(max_errors=2)

        for message in ("a", "b", "c"):
            policy.handle(TemplateMismatchError(message), "Hello", {})

        stats = policy.get_statistics()
        assert stats["total_errors"] == 3
        assert stats["by_identity"] == {"Hello": 3}
        assert [record["error_message"] for record in stats["errors"]] == ["b", "c"]

    def test_fallback_policy_is_bounded_by_default(self):
        """The default policy never grows without limit."""
        policy = FallbackPolicy(verbose=False)
        assert policy.errors.maxlen == 1000

    def test_fallback_policy_logs_when_verbose(self, caplog):
        """FallbackPolicy warns through logging."""
        policy = FallbackPolicy(verbose=True)

        with caplog.at_level(logging.WARNING, logger="dazzlecache.error_policies"):
            assert policy.handle(TemplateMismatchError("shape changed"), "Hello", {}) is None

        assert "Cache bypassed for 'Hello': shape changed" in caplog.text
        assert policy.get_statistics()["total_errors"] == 1

    def test_fallback_policy_quiet(self, caplog):
        """A quiet FallbackPolicy only records."""
        policy = FallbackPolicy(verbose=False)

        with caplog.at_level(logging.WARNING, logger="dazzlecache.error_policies"):
            policy.handle(TemplateMismatchError("x"), "Hello", {})

        assert caplog.text == ""
        assert len(policy.errors) == 1

    def test_custom_policy(self):
        """Policies are a small ABC that users can implement."""
        seen = Mock()

        class NotifyPolicy(CacheErrorPolicy):
            def handle(self, error, identity, props):
                seen(identity, str(error))

        NotifyPolicy().handle(TemplateMismatchError("x"), "Hello", {"a": 1})
        seen.assert_called_once_with("Hello", "x")

    def test_policy_is_abstract(self):
        with pytest.raises(TypeError):
            CacheErrorPolicy()
