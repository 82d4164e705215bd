"""Per-component caching configuration.

Re-exports the configuration dataclasses from the _common package and adds
the ConfigManager that owns the component table.
"""

import logging
from typing import Any, Dict, Optional

from ._common.config import (
    CacheStrategy,
    ComponentConfig,
    GlobalFlags,
    FlagSnapshot,
    DEFAULT_BOOKKEEPING_ATTRIBUTES,
    iter_component_options,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)


class ConfigManager:
    """Holds the per-component configuration table.

    The table is only ever replaced as a whole: set_caching_config validates
    every entry first and swaps the table in one assignment, so a rejected
    config leaves the previous one untouched.
    """

    def __init__(self):
        self._components: Dict[str, ComponentConfig] = {}

    def set_caching_config(self, config: Any) -> None:
        """Replace the component table.

        Args:
            config: ``{"components": {identity: options}}``, a bare
                    ``{identity: options}`` mapping, or None to clear. Options
                    are schema dicts or ComponentConfig instances.

        Raises:
            ConfigError: If any entry is malformed; nothing is applied
        """
        table = {}
        problems = []

        try:
            items = list(iter_component_options(config))
        except TypeError as e:
            raise ConfigError(f"Invalid caching config: {e}") from e

        for identity, options in items:
            if not isinstance(identity, str) or not identity:
                problems.append(f"component identity {identity!r} must be a non-empty string")
                continue
            if isinstance(options, ComponentConfig):
                component, errors = options, options.validate()
            else:
                component, errors = ComponentConfig.from_dict(options)
            problems.extend(f"{identity}: {error}" for error in errors)
            table[identity] = component

        if problems:
            raise ConfigError(f"Invalid caching config: {'; '.join(problems)}")

        self._components = table
        logger.debug("Caching config set for %d component(s)", len(table))

    def get_config(self, identity: str) -> Optional[ComponentConfig]:
        """Get the effective config for a component.

        Returns:
            The ComponentConfig, or None when the component is not configured
            or its caching is disabled
        """
        component = self._components.get(identity)
        if component is None or not component.enable:
            return None
        return component

    def components(self) -> Dict[str, ComponentConfig]:
        """Return a shallow copy of the component table."""
        return dict(self._components)

    def __len__(self) -> int:
        return len(self._components)


__all__ = [
    'CacheStrategy',
    'ComponentConfig',
    'GlobalFlags',
    'FlagSnapshot',
    'DEFAULT_BOOKKEEPING_ATTRIBUTES',
    'ConfigManager',
]
