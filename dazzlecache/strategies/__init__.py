"""Cache key strategies for DazzleCache."""

from .._common.config import CacheStrategy
from .base import KeyStrategy, PreparedRender
from .simple import SimpleKeyStrategy
from .template import (
    TemplateKeyStrategy,
    TokenizedProps,
    TokenMapEntry,
    TOKEN_PATTERN,
    contains_placeholder,
    make_token,
)

_STRATEGIES = {
    CacheStrategy.SIMPLE: SimpleKeyStrategy(),
    CacheStrategy.TEMPLATE: TemplateKeyStrategy(),
}


def get_strategy(strategy: CacheStrategy) -> KeyStrategy:
    """Return the shared strategy instance for a CacheStrategy."""
    return _STRATEGIES[strategy]


__all__ = [
    'KeyStrategy',
    'PreparedRender',
    'SimpleKeyStrategy',
    'TemplateKeyStrategy',
    'TokenizedProps',
    'TokenMapEntry',
    'TOKEN_PATTERN',
    'contains_placeholder',
    'make_token',
    'get_strategy',
]
