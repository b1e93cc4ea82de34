# src/assetforge/plugins/discovery.py
"""Dynamic strategy discovery by folder scanning.

Scans the strategies directory for classes that:
1. Inherit from BasePrefabStrategy
2. Have a non-empty `name` class attribute
3. Are not abstract
"""

import importlib.util
import inspect
import sys
from pathlib import Path
from typing import Any

from assetforge.core.logging import get_logger

logger = get_logger(__name__)

# Files that should never be scanned for plugins
EXCLUDED_FILES: frozenset[str] = frozenset(
    {
        "__init__.py",
        "base.py",
        "protocols.py",
        "config_base.py",
        "hookspecs.py",
        "manager.py",
        "discovery.py",
    }
)

# Which directories (relative to this package) to scan for each plugin type.
# Non-recursive: subdirectories must be listed explicitly.
PLUGIN_SCAN_CONFIG: dict[str, list[str]] = {
    "strategies": ["strategies"],
}


def discover_plugins_in_directory(directory: Path, base_class: type) -> list[type]:
    """Discover plugin classes in a directory.

    Args:
        directory: Path to scan for plugin files
        base_class: Base class that plugins must inherit from

    Returns:
        List of discovered plugin classes, in file order
    """
    discovered: list[type] = []

    if not directory.exists():
        logger.warning("Plugin directory does not exist", directory=str(directory))
        return discovered

    for py_file in sorted(directory.glob("*.py")):
        if py_file.name in EXCLUDED_FILES:
            continue
        # Built-in strategy code is ours: import errors are bugs and propagate.
        discovered.extend(_discover_in_file(py_file, base_class))

    return discovered


def _discover_in_file(py_file: Path, base_class: type) -> list[type]:
    module_name = f"assetforge.plugins._discovered.{py_file.parent.name}.{py_file.stem}"
    spec = importlib.util.spec_from_file_location(module_name, py_file)
    if spec is None or spec.loader is None:
        return []

    module = importlib.util.module_from_spec(spec)
    # dataclass field resolution looks up cls.__module__ in sys.modules
    sys.modules[module.__name__] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module.__name__, None)
        raise

    discovered: list[type] = []
    for name, obj in inspect.getmembers(module, inspect.isclass):
        if obj.__module__ != module.__name__:
            continue
        if not issubclass(obj, base_class) or obj is base_class:
            continue
        if inspect.isabstract(obj):
            continue

        # Trust boundary: arbitrary classes, so the attribute may be absent
        plugin_name = getattr(obj, "name", None)
        if not plugin_name:
            logger.warning(
                "Strategy class has no name attribute, skipping",
                class_name=name,
                file=str(py_file),
                base_class=base_class.__name__,
            )
            continue

        discovered.append(obj)

    return discovered


def _get_base_classes() -> dict[str, type]:
    from assetforge.plugins.base import BasePrefabStrategy

    return {"strategies": BasePrefabStrategy}


def discover_all_plugins() -> dict[str, list[type]]:
    """Discover all built-in plugins by scanning configured directories.

    Returns:
        Dict mapping plugin type to discovered classes, e.g.
        {"strategies": [CompositePrefabStrategy, PerAssetPrefabStrategy]}

    Raises:
        ValueError: If two discovered plugins of one type share a name
    """
    plugins_root = Path(__file__).parent
    base_classes = _get_base_classes()
    result: dict[str, list[type]] = {}

    for plugin_type, directories in PLUGIN_SCAN_CONFIG.items():
        base_class = base_classes[plugin_type]
        all_discovered: list[type] = []
        seen: dict[str, type] = {}

        for dir_name in directories:
            for cls in discover_plugins_in_directory(plugins_root / dir_name, base_class):
                cls_name: str = cls.name  # type: ignore[attr-defined]
                if cls_name in seen:
                    raise ValueError(
                        f"Duplicate {plugin_type} plugin name '{cls_name}': "
                        f"found in both {seen[cls_name].__module__} and {cls.__module__}. "
                        f"Plugin names must be unique within each type."
                    )
                seen[cls_name] = cls
                all_discovered.append(cls)

        result[plugin_type] = all_discovered

    return result


def get_plugin_description(plugin_cls: type) -> str:
    """First non-empty docstring line of plugin_cls, or '<name> plugin'."""
    if plugin_cls.__doc__:
        for line in plugin_cls.__doc__.strip().split("\n"):
            cleaned = line.strip()
            if cleaned:
                return cleaned

    name = getattr(plugin_cls, "name", plugin_cls.__name__)
    return f"{name} plugin"


def create_dynamic_hookimpl(plugin_classes: list[type], hook_method_name: str) -> object:
    """Create a pluggy hookimpl object returning plugin_classes.

    Args:
        plugin_classes: Plugin classes to register
        hook_method_name: Hook name, e.g. "assetforge_get_strategies"

    Returns:
        Object instance with the decorated hook method
    """
    from assetforge.plugins.hookspecs import hookimpl

    class DynamicHookImpl:
        """Dynamically generated hook implementer."""

    def hook_method(self: Any) -> list[type]:
        return plugin_classes

    setattr(DynamicHookImpl, hook_method_name, hookimpl(hook_method))
    return DynamicHookImpl()
