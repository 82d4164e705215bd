"""Canonical serialization of props bags.

Two structurally-equal bags must serialize to the same string no matter the
insertion order of their mappings, so mapping keys are sorted by their
string form and tuples are treated as lists.
"""

import json
import math
from collections.abc import Mapping
from typing import Any, Optional, Set

from ..errors import KeyDerivationError

_SCALARS = (str, int, float, bool, type(None))


def canonicalize(value: Any, path: str = "", _active: Optional[Set[int]] = None) -> Any:
    """Convert a value into plain JSON-compatible data.

    Args:
        value: Value to convert
        path: Dotted path of the value, used in error messages
        _active: ids of containers on the current recursion stack

    Returns:
        Equivalent structure built from dicts, lists and scalars

    Raises:
        KeyDerivationError: On cycles or values with no canonical form
    """
    if isinstance(value, float) and not math.isfinite(value):
        raise KeyDerivationError(f"non-finite number at '{path or '<root>'}'")
    if isinstance(value, _SCALARS):
        return value

    if _active is None:
        _active = set()

    if isinstance(value, (Mapping, list, tuple)):
        marker = id(value)
        if marker in _active:
            raise KeyDerivationError(f"cyclic structure at '{path or '<root>'}'")
        _active.add(marker)
        try:
            if isinstance(value, Mapping):
                result = {}
                for key, item in value.items():
                    name = str(key)
                    if name in result:
                        raise KeyDerivationError(
                            f"ambiguous key {key!r} at '{path or '<root>'}'"
                        )
                    result[name] = canonicalize(item, join_path(path, name), _active)
                return result
            return [
                canonicalize(item, join_path(path, str(index)), _active)
                for index, item in enumerate(value)
            ]
        finally:
            _active.discard(marker)

    raise KeyDerivationError(
        f"value of type {type(value).__name__} at '{path or '<root>'}' "
        f"cannot be serialized into a cache key"
    )


def serialize(value: Any) -> str:
    """Serialize a value canonically (sorted keys, compact separators)."""
    data = canonicalize(value)
    try:
        return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise KeyDerivationError(str(e)) from e


def join_path(parent: str, name: str) -> str:
    """Join a dotted property path."""
    return f"{parent}.{name}" if parent else name
