# src/assetforge/plugins/manager.py
"""Plugin manager for strategy discovery, registration, and lookup.

Uses pluggy for hook-based plugin registration.
"""

from dataclasses import dataclass
from typing import Any

import pluggy

from assetforge.contracts import Determinism
from assetforge.core.canonical import stable_hash
from assetforge.plugins.hookspecs import PROJECT_NAME, AssetForgeStrategySpec
from assetforge.plugins.protocols import StrategyProtocol


@dataclass(frozen=True)
class PluginSpec:
    """Registration record for a strategy.

    spec_hash fingerprints (name, version, determinism, qualified class) so a
    change of strategy implementation is visible in logs and manifests.
    """

    name: str
    version: str
    determinism: Determinism
    qualified_name: str
    spec_hash: str

    @classmethod
    def from_plugin(cls, plugin_cls: type[StrategyProtocol]) -> "PluginSpec":
        qualified_name = f"{plugin_cls.__module__}.{plugin_cls.__qualname__}"
        return cls(
            name=plugin_cls.name,
            version=plugin_cls.plugin_version,
            determinism=plugin_cls.determinism,
            qualified_name=qualified_name,
            spec_hash=stable_hash(
                {
                    "name": plugin_cls.name,
                    "version": plugin_cls.plugin_version,
                    "determinism": plugin_cls.determinism.value,
                    "class": qualified_name,
                }
            ),
        )


class PluginManager:
    """Manages strategy discovery, registration, and lookup.

    Usage:
        manager = PluginManager()
        manager.register_builtin_plugins()

        strategy = manager.create_strategy("composite", {"allowed_types": ["texture"]})
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(AssetForgeStrategySpec)

        # name -> plugin class, for duplicate detection
        self._strategies: dict[str, type[StrategyProtocol]] = {}

    def register_builtin_plugins(self) -> None:
        """Discover and register all built-in strategies.

        Scans the strategies directory for BasePrefabStrategy subclasses and
        registers them via a dynamically-generated hookimpl.
        """
        from assetforge.plugins.discovery import create_dynamic_hookimpl, discover_all_plugins

        discovered = discover_all_plugins()
        self.register(create_dynamic_hookimpl(discovered["strategies"], "assetforge_get_strategies"))

    def register(self, plugin: Any) -> None:
        """Register a plugin.

        Args:
            plugin: Plugin instance implementing hook methods

        Raises:
            ValueError: If the plugin contributes a strategy name that is
                already registered. The plugin is unregistered again.
        """
        self._pm.register(plugin)
        try:
            self._refresh_caches()
        except ValueError:
            self._pm.unregister(plugin)
            raise

    def _refresh_caches(self) -> None:
        """Refresh the strategy cache from hooks.

        Raises:
            ValueError: If two plugins register the same strategy name
        """
        new_strategies: dict[str, type[StrategyProtocol]] = {}

        for strategies in self._pm.hook.assetforge_get_strategies():
            for cls in strategies:
                name = cls.name
                if name in new_strategies:
                    raise ValueError(f"Duplicate strategy plugin name: '{name}'. Already registered by {new_strategies[name].__name__}")
                new_strategies[name] = cls

        self._strategies = new_strategies

    # === Getters ===

    def get_strategies(self) -> list[type[StrategyProtocol]]:
        """Get all registered strategies, sorted by name."""
        return [self._strategies[name] for name in sorted(self._strategies)]

    def get_strategy_by_name(self, name: str) -> type[StrategyProtocol] | None:
        """Get strategy class by name."""
        return self._strategies.get(name)

    def get_specs(self) -> list[PluginSpec]:
        return [PluginSpec.from_plugin(cls) for cls in self.get_strategies()]

    def create_strategy(self, name: str, options: dict[str, Any] | None = None) -> StrategyProtocol:
        """Instantiate the strategy registered under name.

        Args:
            name: Strategy plugin name (node.strategy in settings)
            options: Strategy options (node.options in settings)

        Returns:
            Configured strategy instance

        Raises:
            ValueError: If no strategy is registered under name
            PluginConfigError: If the strategy rejects its options
        """
        strategy_cls = self.get_strategy_by_name(name)
        if strategy_cls is None:
            available = ", ".join(sorted(self._strategies)) or "(none)"
            raise ValueError(f"Unknown strategy: '{name}'. Available strategies: {available}")
        return strategy_cls(dict(options or {}))
