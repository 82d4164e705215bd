"""
Tests for canonical serialization and the simple key strategy.
"""

import pytest

from dazzlecache import KeyDerivationError
from dazzlecache._common.canonical import canonicalize, serialize
from dazzlecache.config import ComponentConfig
from dazzlecache.strategies import SimpleKeyStrategy


class TestCanonicalSerialization:
    """Test the canonical form of props bags."""

    def test_key_order_does_not_matter(self):
        """Insertion order never changes the serialization."""
        first = {"b": 1, "a": {"y": [1, 2], "x": "s"}}
        second = {"a": {"x": "s", "y": [1, 2]}, "b": 1}

        assert serialize(first) == serialize(second)

    def test_compact_and_sorted(self):
        """Keys are sorted and separators compact."""
        assert serialize({"b": True, "a": None}) == '{"a":null,"b":true}'

    def test_tuples_serialize_as_lists(self):
        """Tuples and lists are interchangeable."""
        assert serialize({"a": (1, 2)}) == serialize({"a": [1, 2]})

    def test_non_string_keys(self):
        """Mapping keys are compared by their string form."""
        assert serialize({1: "a", 2: "b"}) == '{"1":"a","2":"b"}'

    def test_ambiguous_keys_rejected(self):
        """Two keys with the same string form cannot be serialized."""
        with pytest.raises(KeyDerivationError):
            canonicalize({1: "a", "1": "b"})

    def test_unicode_kept(self):
        """Non-ASCII text is kept readable."""
        assert serialize({"name": "Zoë"}) == '{"name":"Zoë"}'

    def test_cycle_rejected(self):
        """Cycles fail fast."""
        props = {"a": {}}
        props["a"]["self"] = props

        with pytest.raises(KeyDerivationError) as exc_info:
            serialize(props)
        assert "cyclic" in str(exc_info.value)

    def test_shared_subtree_is_not_a_cycle(self):
        """The same object twice side by side is fine."""
        shared = {"x": 1}
        assert serialize({"a": shared, "b": shared}) == '{"a":{"x":1},"b":{"x":1}}'

    @pytest.mark.parametrize("value", [lambda: None, {1, 2}, object()])
    def test_unserializable_values(self, value):
        """Functions, sets and opaque objects have no canonical form."""
        with pytest.raises(KeyDerivationError):
            serialize({"value": value})

    def test_nan_is_rejected(self):
        """NaN has no stable JSON form."""
        with pytest.raises(KeyDerivationError):
            serialize({"value": float("nan")})


class TestSimpleKeyStrategy:
    """Test SimpleKeyStrategy.derive_key."""

    def setup_method(self):
        self.strategy = SimpleKeyStrategy()
        self.config = ComponentConfig()

    def test_equal_props_equal_keys(self):
        """Structurally equal bags share a key."""
        first = self.strategy.derive_key("Hello", {"name": "Bob", "n": 1}, self.config)
        second = self.strategy.derive_key("Hello", {"n": 1, "name": "Bob"}, self.config)

        assert first == second

    def test_any_change_changes_key(self):
        """Every value participates in the key."""
        first = self.strategy.derive_key("Hello", {"name": "Bob"}, self.config)
        second = self.strategy.derive_key("Hello", {"name": "Ann"}, self.config)

        assert first != second

    def test_key_is_the_serialization(self):
        """Without a custom function the key is the canonical JSON."""
        props = {"name": "Bob", "tags": ["a"]}
        assert self.strategy.derive_key("Hello", props, self.config) == serialize(props)

    def test_gen_cache_key_used_verbatim(self):
        """A custom key function's result is the key."""
        config = ComponentConfig(gen_cache_key=lambda props: f"user-{props['id']}")

        assert self.strategy.derive_key("Hello", {"id": 7, "fn": len}, config) == "user-7"

    def test_gen_cache_key_not_hashable(self):
        """Custom keys are marked so they skip hashing."""
        config = ComponentConfig(gen_cache_key=lambda props: "k")

        assert self.strategy.prepare("Hello", {}, config).hashable is False
        assert self.strategy.prepare("Hello", {}, self.config).hashable is True

    def test_gen_cache_key_failure(self):
        """A failing key function surfaces as KeyDerivationError."""
        config = ComponentConfig(gen_cache_key=lambda props: props["missing"])

        with pytest.raises(KeyDerivationError) as exc_info:
            self.strategy.derive_key("Hello", {}, config)
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_gen_cache_key_none(self):
        """A key function returning None is an error."""
        config = ComponentConfig(gen_cache_key=lambda props: None)

        with pytest.raises(KeyDerivationError):
            self.strategy.derive_key("Hello", {}, config)

    def test_function_prop_without_custom_key(self):
        """Functions in props fail fast."""
        with pytest.raises(KeyDerivationError):
            self.strategy.derive_key("Hello", {"onClick": print}, self.config)

    def test_render_props_are_untouched(self):
        """The renderer gets the original props object."""
        props = {"name": "Bob"}
        assert self.strategy.prepare("Hello", props, self.config).render_props is props
