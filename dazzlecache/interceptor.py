"""
Render interception for DazzleCache.

The RenderInterceptor is invoked once per component instance while the host
walks its component tree. It decides whether a render can be served from
the cache and otherwise delegates to the host renderer:

    START -> [profile start] -> strategy lookup
          -> hit:  replay stored payload        -> [profile stop] -> DONE
          -> miss: delegate, store, replay      -> [profile stop] -> DONE

Components nested inside a cache miss re-enter render() while the outer
call is still running. Nothing here takes a lock; all state lives on the
RenderContext and is only mutated by nested synchronous calls.
"""

import logging
import re
from typing import Any, Callable, Dict, Optional, Tuple

from cachetools import LRUCache, cached

from ._cache_store import CacheStore
from .config import ConfigManager, GlobalFlags, FlagSnapshot
from .error_policies import CacheErrorPolicy, FallbackPolicy
from .errors import TemplateMismatchError
from .hashing import default_hash_fn
from .profiler import Profiler
from .strategies import contains_placeholder, get_strategy

logger = logging.getLogger(__name__)

# Host renderer contract: (identity, props) -> markup
RenderFn = Callable[[str, Any], str]


@cached(LRUCache(maxsize=32))
def _bookkeeping_pattern(attributes: Tuple[str, ...]):
    names = "|".join(re.escape(name) for name in attributes)
    return re.compile(r"""\s+(?:%s)(?![\w-])(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>"']+))?""" % names)


def strip_bookkeeping(markup: str, attributes: Tuple[str, ...]) -> str:
    """Remove tree-position attributes (ids, checksums) from markup."""
    if not attributes:
        return markup
    return _bookkeeping_pattern(tuple(attributes)).sub("", markup)


class RenderContext:
    """
    Everything a render call reads: flags, component configs, the cache
    store, the profiler and the error policy.

    The host integration layer owns a context and configures it up front;
    mutating it while renders are in flight is not supported.

    Example:
        context = RenderContext()
        context.enable_caching()
        context.set_caching_config({
            "components": {"Hello": {"strategy": "template", "enable": True}}
        })
        interceptor = RenderInterceptor(context)
    """

    def __init__(self,
                 flags: Optional[GlobalFlags] = None,
                 configs: Optional[ConfigManager] = None,
                 store: Optional[CacheStore] = None,
                 profiler: Optional[Profiler] = None,
                 error_policy: Optional[CacheErrorPolicy] = None,
                 max_entries: Optional[int] = None,
                 hash_memo_size: int = 10000):
        """
        Initialize a render context.

        Args:
            flags: Global switches (all off by default)
            configs: Component config table
            store: Cache store; a new one bounded by max_entries if omitted
            profiler: Render profiler
            error_policy: Policy for recoverable cache errors
            max_entries: Entry bound for a newly created store (None = unbounded)
            hash_memo_size: Number of composed keys whose hash is remembered
        """
        self.flags = flags if flags is not None else GlobalFlags()
        self.configs = configs if configs is not None else ConfigManager()
        self.store = store if store is not None else CacheStore(max_entries=max_entries)
        self.profiler = profiler if profiler is not None else Profiler()
        self.error_policy = error_policy if error_policy is not None else FallbackPolicy(verbose=False)
        self._hashed_keys = LRUCache(maxsize=hash_memo_size)
        # Template misses whose host render is still running
        self._open_templates = 0

    # Profiling

    def enable_profiling(self, flag: bool = True):
        self.flags.profiling = bool(flag)

    def clear_profile_data(self):
        self.profiler.clear()

    @property
    def profile_data(self) -> Dict[str, Dict[str, float]]:
        """Read-only snapshot of collected render timings."""
        return self.profiler.report()

    # Caching

    def enable_caching(self, flag: bool = True):
        self.flags.caching = bool(flag)

    def enable_caching_debug(self, flag: bool = True):
        self.flags.caching_debug = bool(flag)

    def set_caching_config(self, config: Any):
        """Replace the component config table (see ConfigManager)."""
        self.configs.set_caching_config(config)

    def strip_url_protocol(self, flag: bool = True):
        self.flags.strip_url_protocol = bool(flag)

    def should_hash_keys(self, flag: bool = True, hash_fn: Optional[Callable[[str], str]] = None):
        """
        Turn key hashing on or off.

        Args:
            flag: Whether to hash composed keys
            hash_fn: Custom str -> str hash; defaults to xxh64 when available
        """
        if hash_fn is not None and not callable(hash_fn):
            raise TypeError("hash_fn must be callable")
        if flag and hash_fn is None:
            hash_fn = default_hash_fn()
            if hash_fn is None:
                logger.warning("xxhash is not installed and no hash_fn given; key hashing stays off")
                flag = False
        self.flags.hash_keys = bool(flag)
        self.flags.hash_fn = hash_fn if flag else None
        self._hashed_keys.clear()

    def hash_key(self, composed: str, hash_fn: Callable[[str], str]) -> str:
        """Hash a composed key, calling hash_fn once per distinct key."""
        hashed = self._hashed_keys.get(composed)
        if hashed is None:
            hashed = str(hash_fn(composed))
            self._hashed_keys[composed] = hashed
        return hashed

    def clear_cache(self):
        self.store.clear()
        self._hashed_keys.clear()

    def cache_entries(self) -> int:
        return self.store.entries()

    def cache_hit_report(self) -> Dict[str, Dict[str, int]]:
        """Hit counts per identity and key; logged as well in debug mode."""
        report = self.store.hit_report()
        if self.flags.caching_debug:
            logger.info("Cache hit report: %s", report)
        return report


class RenderInterceptor:
    """
    Per-render entry point wrapping the host renderer with the cache.

    Example:
        interceptor = RenderInterceptor(context)
        markup = interceptor.render("Hello", {"name": "Bob"}, host_render)
    """

    def __init__(self, context: Optional[RenderContext] = None):
        self.context = context if context is not None else RenderContext()

    def render(self, identity: str, props: Any, render_fn: RenderFn) -> str:
        """
        Render one component instance, from the cache when possible.

        Args:
            identity: Component identity
            props: Props bag; never mutated
            render_fn: Host renderer, called at most once per miss

        Returns:
            Markup for the component

        Raises:
            KeyDerivationError: If the props cannot be turned into a key
        """
        flags = self.context.flags.snapshot()

        if not flags.profiling:
            return self._render(identity, props, render_fn, flags)

        profiler = self.context.profiler
        timer = profiler.start(identity)
        try:
            return self._render(identity, props, render_fn, flags)
        finally:
            profiler.stop(timer)

    def wrap(self, identity: str, render_fn: RenderFn) -> Callable[[Any], str]:
        """Bind an identity and renderer into a props -> markup callable."""
        def render(props: Any) -> str:
            return self.render(identity, props, render_fn)
        render.__name__ = f"render_{identity}"
        return render

    def _render(self, identity: str, props: Any, render_fn: RenderFn, flags: FlagSnapshot) -> str:
        context = self.context
        config = context.configs.get_config(identity) if flags.caching else None
        if config is None:
            return render_fn(identity, props)

        # Placeholders handed down by an enclosing template miss; the outer
        # entry will hold this markup, so it is not cached on its own
        if context._open_templates and contains_placeholder(props):
            if flags.caching_debug:
                logger.debug("Rendering '%s' uncached inside a template render", identity)
            return render_fn(identity, props)

        strategy = get_strategy(config.strategy)
        try:
            prepared = strategy.prepare(identity, props, config)
        except TemplateMismatchError as e:
            return self._fall_back(e, identity, props, render_fn, flags)

        key = prepared.key
        if flags.hash_keys and prepared.hashable:
            key = context.hash_key(key, flags.hash_fn)

        entry = context.store.get(identity, key)
        if entry is not None:
            if flags.caching_debug:
                logger.debug("Cache hit for '%s' (hits=%d): %s", identity, entry.hit_count, key)
            try:
                return strategy.replay(entry.payload, prepared, config, flags, entry.token_paths)
            except TemplateMismatchError as e:
                return self._fall_back(e, identity, props, render_fn, flags)

        if flags.caching_debug:
            logger.debug("Cache miss for '%s': %s", identity, key)

        templated = bool(prepared.token_paths)
        if templated:
            context._open_templates += 1
        try:
            raw = render_fn(identity, prepared.render_props)
        finally:
            if templated:
                context._open_templates -= 1
        payload = strip_bookkeeping(raw, flags.bookkeeping_attributes)
        try:
            markup = strategy.replay(payload, prepared, config, flags, prepared.token_paths)
        except TemplateMismatchError as e:
            return self._fall_back(e, identity, props, render_fn, flags)

        stored = context.store.put(identity, key, payload, prepared.token_paths)
        if stored.payload != payload and flags.caching_debug:
            logger.debug("Entry for '%s' already stored by a nested render; keeping the first", identity)
        return markup

    def _fall_back(self, error: TemplateMismatchError, identity: str, props: Any,
                   render_fn: RenderFn, flags: FlagSnapshot) -> str:
        if flags.caching_debug:
            logger.warning("Template mismatch for '%s', rendering uncached: %s", identity, error)
        self.context.error_policy.handle(error, identity, props)
        return render_fn(identity, props)
