"""High-level API for DazzleCache.

This module provides simple, functional interfaces over a process-wide
default RenderContext. They wrap the object-oriented API for the common
case of one renderer per process; hosts that need isolation create their
own RenderContext and RenderInterceptor instead.
"""

from typing import Any, Callable, Dict, Optional

from .interceptor import RenderContext, RenderInterceptor, RenderFn

_default_interceptor = RenderInterceptor(RenderContext())


def get_default_context() -> RenderContext:
    """Return the process-wide default context."""
    return _default_interceptor.context


def reset_default_context(context: Optional[RenderContext] = None) -> RenderContext:
    """Replace the default context (a fresh one if omitted) and return it."""
    _default_interceptor.context = context if context is not None else RenderContext()
    return _default_interceptor.context


def render_component(identity: str, props: Any, render_fn: RenderFn) -> str:
    """Render one component through the default context.

    Example:
        >>> enable_caching()
        >>> set_caching_config({"components": {"Hello": {"strategy": "template", "enable": True}}})
        >>> render_component("Hello", {"name": "Bob"}, host_render)
    """
    return _default_interceptor.render(identity, props, render_fn)


def enable_profiling(flag: bool = True):
    get_default_context().enable_profiling(flag)


def clear_profile_data():
    get_default_context().clear_profile_data()


def profile_data() -> Dict[str, Dict[str, float]]:
    """Snapshot of render timings: {identity: {total_ms, count, average_ms, max_ms}}."""
    return get_default_context().profile_data


def enable_caching(flag: bool = True):
    get_default_context().enable_caching(flag)


def enable_caching_debug(flag: bool = True):
    get_default_context().enable_caching_debug(flag)


def set_caching_config(config: Any):
    """Replace the component config table; raises ConfigError if malformed."""
    get_default_context().set_caching_config(config)


def strip_url_protocol(flag: bool = True):
    get_default_context().strip_url_protocol(flag)


def should_hash_keys(flag: bool = True, hash_fn: Optional[Callable[[str], str]] = None):
    get_default_context().should_hash_keys(flag, hash_fn)


def clear_cache():
    get_default_context().clear_cache()


def cache_entries() -> int:
    return get_default_context().cache_entries()


def cache_hit_report() -> Dict[str, Dict[str, int]]:
    return get_default_context().cache_hit_report()
