"""Simple key strategy: the whole props bag is the key."""

from typing import Any

from .._common.canonical import serialize
from .._common.config import CacheStrategy, ComponentConfig
from ..errors import KeyDerivationError
from .base import KeyStrategy, PreparedRender


class SimpleKeyStrategy(KeyStrategy):
    """Caches raw markup under the canonical serialization of the props.

    Any change to any prop produces a new entry. A custom gen_cache_key
    replaces the serialization entirely and its result is used verbatim;
    the caller owns collisions in that case.
    """

    strategy = CacheStrategy.SIMPLE

    def derive_key(self, identity: str, props: Any, config: ComponentConfig) -> str:
        if config.gen_cache_key is not None:
            try:
                key = config.gen_cache_key(props)
            except KeyDerivationError:
                raise
            except Exception as e:
                raise KeyDerivationError(
                    f"genCacheKey for '{identity}' failed: {e}"
                ) from e
            if key is None:
                raise KeyDerivationError(f"genCacheKey for '{identity}' returned None")
            return str(key)

        return serialize(props)

    def prepare(self, identity: str, props: Any, config: ComponentConfig) -> PreparedRender:
        return PreparedRender(
            key=self.derive_key(identity, props, config),
            render_props=props,
            hashable=config.gen_cache_key is None,
        )
