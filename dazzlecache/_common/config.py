"""Configuration system for DazzleCache.

This module defines how users declare which components are cached, which
key strategy each one uses, and the process-wide switches that shape every
render call.
"""

import html
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Callable, FrozenSet, Any, Dict, List, Tuple, Iterable


class CacheStrategy(Enum):
    """How a component's cache key and payload are derived."""
    SIMPLE = "simple"       # Key is the serialized props bag, payload is raw markup
    TEMPLATE = "template"   # Key is the props shape, payload holds placeholders


# Attributes a React-style host injects for reconciliation. They depend on
# tree position, not props, so they never belong in a cached payload.
DEFAULT_BOOKKEEPING_ATTRIBUTES = ("data-reactid", "data-react-checksum")

# Schema names accepted by ConfigManager, camelCase first, mapped to fields.
_OPTION_NAMES = {
    "strategy": "strategy",
    "enable": "enable",
    "enabled": "enable",
    "genCacheKey": "gen_cache_key",
    "gen_cache_key": "gen_cache_key",
    "preserveKeys": "preserve_keys",
    "preserve_keys": "preserve_keys",
    "preserveEmptyKeys": "preserve_empty_keys",
    "preserve_empty_keys": "preserve_empty_keys",
    "ignoreKeys": "ignore_keys",
    "ignore_keys": "ignore_keys",
    "whiteListNonStringKeys": "whitelist_non_string_keys",
    "whitelist_non_string_keys": "whitelist_non_string_keys",
}

_KEY_SET_FIELDS = (
    "preserve_keys",
    "preserve_empty_keys",
    "ignore_keys",
    "whitelist_non_string_keys",
)


@dataclass
class ComponentConfig:
    """Caching rules for one component identity."""

    strategy: CacheStrategy = CacheStrategy.SIMPLE
    enable: bool = True

    # Custom key function for the simple strategy; its result is used verbatim
    gen_cache_key: Optional[Callable[[Any], Any]] = None

    # Property rules for the template strategy. Each entry is either a full
    # dotted path ("user.name") or a bare key name ("name").
    preserve_keys: FrozenSet[str] = frozenset()
    preserve_empty_keys: FrozenSet[str] = frozenset()
    ignore_keys: FrozenSet[str] = frozenset()
    whitelist_non_string_keys: FrozenSet[str] = frozenset()

    def __post_init__(self):
        if isinstance(self.strategy, str):
            try:
                self.strategy = CacheStrategy(self.strategy.lower())
            except ValueError:
                pass  # reported by validate()
        for name in _KEY_SET_FIELDS:
            value = getattr(self, name)
            if value is None:
                setattr(self, name, frozenset())
            elif isinstance(value, (list, tuple, set)):
                setattr(self, name, frozenset(value))

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> Tuple['ComponentConfig', List[str]]:
        """Build a config from the public schema.

        Args:
            options: Mapping using the camelCase or snake_case option names

        Returns:
            Tuple of (config, problems); problems is empty when valid
        """
        problems = []
        if not isinstance(options, dict):
            return cls(), [f"expected a mapping of options, got {type(options).__name__}"]

        # The schema's "enable" is opt-in: a component without it stays uncached
        kwargs = {"enable": False}
        for name, value in options.items():
            field_name = _OPTION_NAMES.get(name)
            if field_name is None:
                problems.append(f"unknown option '{name}'")
                continue
            if field_name in _KEY_SET_FIELDS:
                if value is None:
                    value = ()
                if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
                    problems.append(f"'{name}' must be a list of key names")
                    continue
                if not all(isinstance(item, str) for item in value):
                    problems.append(f"'{name}' entries must be strings")
                    continue
                value = frozenset(value)
            kwargs[field_name] = value

        config = cls(**kwargs)
        problems.extend(config.validate())
        return config, problems

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.strategy, CacheStrategy):
            errors.append(
                f"unknown strategy {self.strategy!r} "
                f"(expected one of: {', '.join(s.value for s in CacheStrategy)})"
            )

        if not isinstance(self.enable, bool):
            errors.append("enable must be a boolean")

        if self.gen_cache_key is not None and not callable(self.gen_cache_key):
            errors.append("genCacheKey must be callable")

        for name in _KEY_SET_FIELDS:
            if not isinstance(getattr(self, name), frozenset):
                errors.append(f"{name} must be a collection of key names")

        return errors


def _default_escape(value: str) -> str:
    return html.escape(value, quote=True)


@dataclass(frozen=True)
class FlagSnapshot:
    """Read-only view of GlobalFlags handed to a single render call."""

    profiling: bool
    caching: bool
    caching_debug: bool
    strip_url_protocol: bool
    hash_keys: bool
    hash_fn: Optional[Callable[[str], str]]
    bookkeeping_attributes: Tuple[str, ...]
    escape: Callable[[str], str]
    to_text: Callable[[Any], str] = str


@dataclass
class GlobalFlags:
    """Switches read by every render call.

    Toggles take effect on the next call; entries already in the cache are
    never rewritten.
    """

    profiling: bool = False
    caching: bool = False
    caching_debug: bool = False
    strip_url_protocol: bool = False
    hash_keys: bool = False
    hash_fn: Optional[Callable[[str], str]] = None

    # Attributes stripped from markup before it is stored
    bookkeeping_attributes: Tuple[str, ...] = DEFAULT_BOOKKEEPING_ATTRIBUTES

    # Applied to values substituted into a template; must match the host's
    # own text escaping for replayed markup to be byte-identical
    escape: Callable[[str], str] = field(default=_default_escape)

    # Text form of a non-string value before escaping; str() is what
    # Python string formatting prints
    to_text: Callable[[Any], str] = field(default=str)

    def snapshot(self) -> FlagSnapshot:
        """Freeze the current flags for one render call."""
        return FlagSnapshot(
            profiling=self.profiling,
            caching=self.caching,
            caching_debug=self.caching_debug,
            strip_url_protocol=self.strip_url_protocol,
            hash_keys=self.hash_keys and self.hash_fn is not None,
            hash_fn=self.hash_fn,
            bookkeeping_attributes=tuple(self.bookkeeping_attributes),
            escape=self.escape,
            to_text=self.to_text,
        )

    def copy(self) -> 'GlobalFlags':
        """Return an independent copy of the flags."""
        return replace(self)


def iter_component_options(config: Any) -> Iterable[Tuple[Any, Any]]:
    """Yield (identity, options) pairs from a caching config.

    Accepts ``{"components": {...}}`` or a bare identity mapping.
    """
    if isinstance(config, dict) and "components" in config:
        components = config["components"]
    else:
        components = config
    if components is None:
        return iter(())
    if not isinstance(components, dict):
        raise TypeError(f"components must be a mapping, got {type(components).__name__}")
    return iter(components.items())
