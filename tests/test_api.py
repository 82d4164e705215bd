"""
Tests for the functional API over the default context.
"""

import pytest

from dazzlecache import ConfigError, RenderContext, api


@pytest.fixture(autouse=True)
def fresh_default_context():
    """Every test starts from a clean default context."""
    api.reset_default_context()
    yield
    api.reset_default_context()


def greet(identity, props):
    return "<p>%s</p>" % props["name"]


class TestDefaultContext:
    """Module-level control surface."""

    def test_defaults_are_off(self):
        """Nothing is cached or profiled until switched on."""
        calls = []

        def render(identity, props):
            calls.append(props)
            return greet(identity, props)

        api.set_caching_config({"components": {"Greet": {"strategy": "template", "enable": True}}})
        api.render_component("Greet", {"name": "a"}, render)
        api.render_component("Greet", {"name": "a"}, render)

        assert len(calls) == 2
        assert api.cache_entries() == 0
        assert api.profile_data() == {}

    def test_caching_round_trip(self):
        """The documented quick-start flow."""
        api.enable_caching()
        api.set_caching_config({"components": {"Greet": {"strategy": "template", "enable": True}}})

        assert api.render_component("Greet", {"name": "Bob"}, greet) == "<p>Bob</p>"
        assert api.render_component("Greet", {"name": "Ann"}, greet) == "<p>Ann</p>"
        assert api.cache_entries() == 1
        assert list(api.cache_hit_report()["Greet"].values()) == [1]

        api.clear_cache()
        assert api.cache_entries() == 0

    def test_profiling(self):
        """Profile data is collected and cleared."""
        api.enable_profiling()
        api.render_component("Greet", {"name": "Bob"}, greet)

        assert api.profile_data()["Greet"]["count"] == 1
        api.clear_profile_data()
        assert api.profile_data() == {}

    def test_flags(self):
        """Toggles land on the default context's flags."""
        api.enable_caching_debug()
        api.strip_url_protocol()
        api.should_hash_keys(True, lambda text: "h")

        flags = api.get_default_context().flags
        assert flags.caching_debug is True
        assert flags.strip_url_protocol is True
        assert flags.hash_keys is True

        api.enable_caching_debug(False)
        api.strip_url_protocol(False)
        api.should_hash_keys(False)
        assert flags.caching_debug is False
        assert flags.strip_url_protocol is False
        assert flags.hash_keys is False

    def test_bad_config(self):
        """ConfigError reaches the caller."""
        with pytest.raises(ConfigError):
            api.set_caching_config({"components": {"Greet": {"strategy": "nope"}}})

    def test_reset_with_own_context(self):
        """A host can install its own context."""
        context = RenderContext()
        assert api.reset_default_context(context) is context
        assert api.get_default_context() is context
