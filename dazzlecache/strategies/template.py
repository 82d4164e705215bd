"""
Template key strategy.

Makes one cached render reusable across many prop values. String props are
swapped for positional placeholders (``@0@``, ``@1@``, ...) before the host
renders, so the stored markup is a template; on reuse the placeholders are
replaced with the current call's values.

Traversal order is fixed so the same props shape always yields the same
placeholder numbering:
- depth-first from the top-level props mapping
- mapping keys in ascending order of ``str(key)``
- list and tuple items in index order
- a leaf's path is the dotted join of keys and indices, e.g. ``user.tags.0``

Leaves are classified in this order:
1. ignore_keys: left out of the key, passed to the renderer untouched
2. preserve_keys: literal value kept and keyed (whole subtree for containers)
3. empty string in preserve_empty_keys: literal value kept and keyed
4. non-empty string, or any leaf in whitelist_non_string_keys: placeholder;
   only the fact that the path is a placeholder is keyed
5. anything else: literal value kept and keyed

A rule matches a leaf when it equals the leaf's full dotted path or the
leaf's own key name.

Placeholder text is reserved. Props that already contain it are rejected,
and so is a template whose placeholder index has no current value. An
in-range placeholder written into a component's own static markup cannot be
told apart from one the renderer received, and is substituted like it.
"""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, List, Optional, Set, Tuple

from .._common.canonical import canonicalize, join_path
from .._common.config import CacheStrategy, ComponentConfig, FlagSnapshot
from ..errors import KeyDerivationError, TemplateMismatchError
from .base import KeyStrategy, PreparedRender

# Placeholder alphabet is '@' and digits, which HTML escaping leaves alone
TOKEN_PATTERN = re.compile(r"@(0|[1-9][0-9]*)@")

_URL_PROTOCOL = re.compile(r"^https?:(?=//)", re.IGNORECASE)


def make_token(index: int) -> str:
    """Placeholder text for a token index."""
    return f"@{index}@"


def strip_protocol(text: str) -> str:
    """Make an absolute http(s) URL protocol-relative."""
    return _URL_PROTOCOL.sub("", text, count=1)


@dataclass(frozen=True)
class TokenMapEntry:
    """One placeholder: its index, the value it stands for, and where it was."""
    index: int
    value: Any
    path: str


@dataclass
class TokenizedProps:
    """Output of tokenize().

    Attributes:
        props: Copy of the props with placeholders substituted, as handed to
               the renderer on a miss
        token_map: Placeholders in index order
        key_parts: Ordered shape of the props that feeds the cache key
    """
    props: Any
    token_map: List[TokenMapEntry] = field(default_factory=list)
    key_parts: List[list] = field(default_factory=list)

    @property
    def token_paths(self) -> Tuple[str, ...]:
        return tuple(entry.path for entry in self.token_map)


def _matches(rules: FrozenSet[str], path: str, name: str) -> bool:
    return bool(rules) and (path in rules or name in rules)


def _contains_token(value: Any, active: Set[int]) -> bool:
    if isinstance(value, str):
        return TOKEN_PATTERN.search(value) is not None
    if isinstance(value, (Mapping, list, tuple)):
        marker = id(value)
        if marker in active:
            return False
        active.add(marker)
        try:
            items = value.values() if isinstance(value, Mapping) else value
            return any(_contains_token(item, active) for item in items)
        finally:
            active.discard(marker)
    return False


def contains_placeholder(value: Any) -> bool:
    """True if any string anywhere in value holds placeholder text."""
    return _contains_token(value, set())


class _Tokenizer:
    """Single-use walker that builds one TokenizedProps."""

    def __init__(self, config: ComponentConfig):
        self.config = config
        self.result = TokenizedProps(props=None)
        self._active: Set[int] = set()

    def run(self, props: Any) -> TokenizedProps:
        self.result.props = self._visit(props, "", "")
        return self.result

    def _visit(self, value: Any, path: str, name: str) -> Any:
        config = self.config

        if path and _matches(config.ignore_keys, path, name):
            self._guard(value, path)
            return value

        if path and _matches(config.preserve_keys, path, name):
            self._guard(value, path)
            self._literal(path, value)
            return value

        if isinstance(value, (Mapping, list, tuple)):
            return self._visit_container(value, path)

        if isinstance(value, str):
            self._guard(value, path)
            if value == "" and _matches(config.preserve_empty_keys, path, name):
                self._literal(path, value)
                return value

        if (isinstance(value, str) and value != "") or (
                path and _matches(config.whitelist_non_string_keys, path, name)):
            return self._token(path, value)

        self._literal(path, value)
        return value

    def _visit_container(self, value: Any, path: str) -> Any:
        marker = id(value)
        if marker in self._active:
            raise KeyDerivationError(f"cyclic structure at '{path or '<root>'}'")
        self._active.add(marker)
        try:
            if isinstance(value, Mapping):
                if path:
                    self.result.key_parts.append([path, "{}"])
                result = {}
                for key in sorted(value, key=str):
                    name = str(key)
                    result[key] = self._visit(value[key], join_path(path, name), name)
                return result

            if path:
                self.result.key_parts.append([path, "[]"])
            items = [
                self._visit(item, join_path(path, str(index)), str(index))
                for index, item in enumerate(value)
            ]
            return tuple(items) if isinstance(value, tuple) else items
        finally:
            self._active.discard(marker)

    def _token(self, path: str, value: Any) -> str:
        index = len(self.result.token_map)
        self.result.token_map.append(TokenMapEntry(index, value, path))
        self.result.key_parts.append([path, "@"])
        return make_token(index)

    def _literal(self, path: str, value: Any):
        self.result.key_parts.append([path, "=", canonicalize(value, path)])

    def _guard(self, value: Any, path: str):
        if _contains_token(value, set()):
            raise TemplateMismatchError(
                f"prop '{path}' already contains placeholder text"
            )


class TemplateKeyStrategy(KeyStrategy):
    """
    Caches placeholder-bearing markup keyed by the shape of the props.

    Example:
        strategy = TemplateKeyStrategy()
        config = ComponentConfig(strategy=CacheStrategy.TEMPLATE)
        tokenized = strategy.tokenize({"name": "Bob"}, config)
        tokenized.props                       # {"name": "@0@"}
        strategy.detokenize("<b>@0@</b>", {"name": "Ann"}, config)
        # "<b>Ann</b>"
    """

    strategy = CacheStrategy.TEMPLATE

    def tokenize(self, props: Any, config: ComponentConfig) -> TokenizedProps:
        """
        Replace tokenizable leaves with placeholders.

        The input is never mutated; containers on the path to a placeholder
        are copied.

        Raises:
            KeyDerivationError: On cycles or literal values with no
                                canonical serialization
            TemplateMismatchError: If a prop already contains placeholder text
        """
        return _Tokenizer(config).run(props)

    def compose_key(self, identity: str, tokenized: TokenizedProps) -> str:
        # sort_keys reaches into literal mappings kept in the parts
        shape = json.dumps(tokenized.key_parts, sort_keys=True,
                           separators=(",", ":"), ensure_ascii=False)
        return f"{identity}|{shape}"

    def derive_key(self, identity: str, props: Any, config: ComponentConfig) -> str:
        return self.compose_key(identity, self.tokenize(props, config))

    def prepare(self, identity: str, props: Any, config: ComponentConfig) -> PreparedRender:
        tokenized = self.tokenize(props, config)
        return PreparedRender(
            key=self.compose_key(identity, tokenized),
            render_props=tokenized.props,
            token_paths=tokenized.token_paths,
            state=tokenized,
        )

    def replay(self, payload: str, prepared: PreparedRender, config: ComponentConfig,
               flags: FlagSnapshot, token_paths: Optional[Tuple[str, ...]] = None) -> str:
        return self.detokenize(
            payload,
            None,
            config,
            token_paths=token_paths,
            escape=flags.escape,
            strip_url_protocol=flags.strip_url_protocol,
            tokenized=prepared.state,
            to_text=flags.to_text,
        )

    def detokenize(self, template: str, props: Any, config: ComponentConfig,
                   token_paths: Optional[Tuple[str, ...]] = None,
                   escape: Optional[Callable[[str], str]] = None,
                   strip_url_protocol: bool = False,
                   tokenized: Optional[TokenizedProps] = None,
                   to_text: Callable[[Any], str] = str) -> str:
        """
        Substitute current prop values into a stored template.

        Args:
            template: Markup containing placeholders
            props: Current props (ignored when tokenized is given)
            config: The component's caching config
            token_paths: Tokenized paths recorded when the template was stored
            escape: Applied to each substituted value
            strip_url_protocol: Drop http:/https: from URL values
            tokenized: Tokenization of the current props, if already computed
            to_text: Text form of a value, as the host renderer would print it

        Returns:
            Markup with every placeholder replaced

        Raises:
            TemplateMismatchError: If the current props tokenize to a
                                   different shape than the template's
        """
        if tokenized is None:
            tokenized = self.tokenize(props, config)

        if token_paths is not None and tuple(token_paths) != tokenized.token_paths:
            raise TemplateMismatchError(
                f"tokenized paths differ: stored {list(token_paths)}, "
                f"current {list(tokenized.token_paths)}"
            )

        values = []
        for entry in tokenized.token_map:
            text = to_text(entry.value)
            if strip_url_protocol:
                text = strip_protocol(text)
            values.append(escape(text) if escape else text)

        def substitute(match):
            index = int(match.group(1))
            if index >= len(values):
                raise TemplateMismatchError(
                    f"template placeholder {match.group(0)} has no current value"
                )
            return values[index]

        # One pass, so substituted text is never rescanned for placeholders
        return TOKEN_PATTERN.sub(substitute, template)
