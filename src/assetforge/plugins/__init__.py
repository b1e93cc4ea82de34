# src/assetforge/plugins/__init__.py
"""Plugin system: build strategies via pluggy.

- Protocols: Type contract for strategy implementations
- Base class: BasePrefabStrategy, required for discovery
- Config base: strict option parsing for strategies
- Manager: Strategy discovery, registration and lookup
- Hookspecs: pluggy hook definitions
"""

from assetforge.contracts import Determinism
from assetforge.plugins.base import BasePrefabStrategy
from assetforge.plugins.config_base import PluginConfig, PluginConfigError
from assetforge.plugins.hookspecs import hookimpl, hookspec
from assetforge.plugins.manager import PluginManager, PluginSpec
from assetforge.plugins.protocols import StrategyProtocol

__all__ = [
    "BasePrefabStrategy",
    "Determinism",
    "PluginConfig",
    "PluginConfigError",
    "PluginManager",
    "PluginSpec",
    "StrategyProtocol",
    "hookimpl",
    "hookspec",
]
