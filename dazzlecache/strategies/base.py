"""KeyStrategy abstraction for DazzleCache.

A KeyStrategy decides how a render call maps onto a cache entry: which key
it probes, which props the host renderer sees on a miss, and how a stored
payload is turned back into markup on a hit.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .._common.config import CacheStrategy, ComponentConfig, FlagSnapshot


@dataclass
class PreparedRender:
    """Result of preparing one render call for the cache.

    Attributes:
        key: Derived cache key (before any hashing)
        render_props: Props the host renderer receives on a miss
        hashable: False when the key came from a custom key function and
                  must be used verbatim
        token_paths: Tokenized property paths, template strategy only
        state: Strategy-private data reused when replaying the payload
    """
    key: str
    render_props: Any
    hashable: bool = True
    token_paths: Optional[Tuple[str, ...]] = None
    state: Any = None


class KeyStrategy(ABC):
    """Abstract cache key strategy.

    Subclasses implement derive_key(); strategies whose payload is not raw
    markup also override prepare() and replay().
    """

    strategy: CacheStrategy

    @abstractmethod
    def derive_key(self, identity: str, props: Any, config: ComponentConfig) -> str:
        """Derive the cache key for a render call.

        Args:
            identity: Component identity
            props: The props bag for this call
            config: The component's caching config

        Returns:
            Cache key string

        Raises:
            KeyDerivationError: If props cannot be serialized
        """
        pass

    def prepare(self, identity: str, props: Any, config: ComponentConfig) -> PreparedRender:
        """Derive the key and the props to render with on a miss."""
        return PreparedRender(
            key=self.derive_key(identity, props, config),
            render_props=props,
        )

    def replay(self, payload: str, prepared: PreparedRender, config: ComponentConfig,
               flags: FlagSnapshot, token_paths: Optional[Tuple[str, ...]] = None) -> str:
        """Turn a stored payload into markup for the current call.

        The default payload is final markup and is returned as is.
        """
        return payload
