"""DazzleCache - Render caching and profiling for server-side component trees.

DazzleCache sits between a server-side renderer and the components it walks.
It profiles per-component render cost and reuses previously rendered markup
keyed by component identity and props.

Two key strategies:
━━━━━━━━━━━━━━━━━━━━━━━━━━
Simple:
    Any prop change is a new entry; payload is raw markup.

Template:
    String props become placeholders; one entry serves every value.
━━━━━━━━━━━━━━━━━━━━━━━━━━

Quick start:
    from dazzlecache import RenderContext, RenderInterceptor

    context = RenderContext()
    context.enable_caching()
    context.set_caching_config({
        "components": {"Hello": {"strategy": "template", "enable": True}}
    })
    markup = RenderInterceptor(context).render("Hello", props, host_render)
"""

__version__ = "0.1.0"

from .errors import (
    CacheError,
    KeyDerivationError,
    TemplateMismatchError,
    ConfigError,
)
from .config import (
    CacheStrategy,
    ComponentConfig,
    GlobalFlags,
    ConfigManager,
)
from ._cache_store import CacheStore, CacheEntry
from .profiler import Profiler, ProfileTimer, ProfileEntry
from .strategies import (
    KeyStrategy,
    SimpleKeyStrategy,
    TemplateKeyStrategy,
    TokenizedProps,
    TokenMapEntry,
)
from .error_policies import (
    CacheErrorPolicy,
    FallbackPolicy,
    CollectErrorsPolicy,
    FailFastPolicy,
)
from .interceptor import RenderContext, RenderInterceptor, strip_bookkeeping
from . import api

__all__ = [
    "__version__",
    # Errors
    "CacheError",
    "KeyDerivationError",
    "TemplateMismatchError",
    "ConfigError",
    # Configuration
    "CacheStrategy",
    "ComponentConfig",
    "GlobalFlags",
    "ConfigManager",
    # Store and profiling
    "CacheStore",
    "CacheEntry",
    "Profiler",
    "ProfileTimer",
    "ProfileEntry",
    # Strategies
    "KeyStrategy",
    "SimpleKeyStrategy",
    "TemplateKeyStrategy",
    "TokenizedProps",
    "TokenMapEntry",
    # Error policies
    "CacheErrorPolicy",
    "FallbackPolicy",
    "CollectErrorsPolicy",
    "FailFastPolicy",
    # Rendering
    "RenderContext",
    "RenderInterceptor",
    "strip_bookkeeping",
    "api",
]
