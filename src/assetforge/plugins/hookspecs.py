# src/assetforge/plugins/hookspecs.py
"""pluggy hook specifications for AssetForge strategies.

Strategy plugins implement these hooks to register themselves with the
framework. The plugin manager calls them during discovery.

Usage (implementing a plugin):
    from assetforge.plugins.hookspecs import hookimpl

    class MyPlugin:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def assetforge_get_strategies(self):
            return [MyStrategy]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from assetforge.plugins.protocols import StrategyProtocol

# Project name for pluggy
PROJECT_NAME = "assetforge"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class AssetForgeStrategySpec:
    """Hook specifications for build strategy plugins."""

    @hookspec
    def assetforge_get_strategies(self) -> list[type["StrategyProtocol"]]:  # type: ignore[empty-body]
        """Return strategy plugin classes.

        Returns:
            List of strategy classes (not instances)
        """
