# tests/conftest.py
"""Shared test fixtures and helpers.

Fixtures:
- node / target / directories: identity and cache layout of the node under test
- make_asset: factory for imported Assets backed by real files
- scripted_strategy: factory for strategies whose plan/build behaviour is
  given as data (names to allocate per group, groups that fail)
- plugin_manager: PluginManager with the built-in strategies registered
- write_settings: factory writing a settings YAML plus a source tree

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from assetforge.contracts import (
    Asset,
    AssetDescriptor,
    BuildTarget,
    NodeInfo,
    PrefabComponent,
    PrefabObject,
)
from assetforge.core.cache_dir import CacheDirectoryAllocator
from assetforge.plugins.base import BasePrefabStrategy
from assetforge.plugins.manager import PluginManager


class ScriptedStrategy(BasePrefabStrategy):
    """Test strategy driven by data instead of logic.

    Args (via config):
        outputs: group key -> artifact names to allocate (default: ["<group>.pfb"])
        fail_group: group whose build raises RuntimeError
        skip_allocate: groups for which neither plan nor build allocate
        force_names: artifact names built with force=True
    """

    name = "scripted"

    def __init__(self, config: dict[str, Any]) -> None:
        super().__init__(config)
        self.outputs: dict[str, list[str]] = config.get("outputs", {})
        self.fail_group: str | None = config.get("fail_group")
        self.skip_allocate: set[str] = set(config.get("skip_allocate", ()))
        self.force_names: set[str] = set(config.get("force_names", ()))
        self.plan_calls: list[tuple[str, list[AssetDescriptor]]] = []
        self.build_calls: list[tuple[str, list[AssetDescriptor]]] = []

    def _names(self, group_key: str) -> list[str]:
        if group_key in self.skip_allocate:
            return []
        return self.outputs.get(group_key, [f"{group_key}.pfb"])

    def plan(self, target, node, group_key, inputs, output_dir, allocate):  # type: ignore[no-untyped-def]
        self.plan_calls.append((group_key, list(inputs)))
        for name in self._names(group_key):
            allocate(name)

    def build(self, target, node, group_key, inputs, output_dir, allocate):  # type: ignore[no-untyped-def]
        self.build_calls.append((group_key, list(inputs)))
        if group_key == self.fail_group:
            raise RuntimeError(f"boom in {group_key}")
        for name in self._names(group_key):
            prefab = PrefabObject(
                name=Path(name).stem,
                components=tuple(PrefabComponent(kind="asset_reference", properties={"path": d.path}) for d in inputs),
            )
            allocate(prefab, name, force=name in self.force_names)


@pytest.fixture
def node() -> NodeInfo:
    return NodeInfo(node_id="prefab_1", name="Character Prefabs")


@pytest.fixture
def target() -> BuildTarget:
    return BuildTarget.STANDALONE


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def directories(cache_root: Path) -> CacheDirectoryAllocator:
    return CacheDirectoryAllocator(cache_root)


@pytest.fixture
def output_dir(cache_root: Path, node: NodeInfo, target: BuildTarget) -> Path:
    """Where the node under test writes its artifacts (not created)."""
    return cache_root / node.node_id / target.value


@pytest.fixture
def make_asset(tmp_path: Path) -> Callable[..., Asset]:
    """Factory for imported assets whose source file exists on disk."""
    source_root = tmp_path / "source"

    def _make(name: str = "hero.png", *, asset_type: str = "texture", is_new: bool = False, content: str = "data") -> Asset:
        path = source_root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if not path.exists():
            path.write_text(content)
        return Asset.imported(
            absolute_source_path=os.fspath(path),
            source_base_path=os.fspath(source_root),
            import_from=os.fspath(path),
            asset_id=f"id-{name}",
            asset_type=asset_type,
            is_new=is_new,
        )

    return _make


@pytest.fixture
def scripted_strategy() -> Callable[..., ScriptedStrategy]:
    def _make(**config: Any) -> ScriptedStrategy:
        return ScriptedStrategy(config)

    return _make


@pytest.fixture
def plugin_manager() -> PluginManager:
    """PluginManager with built-in strategies registered."""
    manager = PluginManager()
    manager.register_builtin_plugins()
    return manager


@pytest.fixture
def write_settings(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing settings.yaml next to a small character source tree.

    Source layout (scan mode):
        Assets/hero/body.fbx, Assets/hero/skin.png, Assets/villain/cape.png
    """

    def _write(body: str | None = None, *, files: dict[str, str] | None = None) -> Path:
        tree = files if files is not None else {
            "Assets/hero/body.fbx": "mesh-hero",
            "Assets/hero/skin.png": "pixels-hero",
            "Assets/villain/cape.png": "pixels-villain",
        }
        for rel, content in tree.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

        if body is None:
            body = """
            target: standalone
            source:
              path: Assets
            node:
              id: characters
              name: Character Prefabs
              strategy: composite
            cache:
              root: build/cache
              state_dir: build/state
            """
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text(textwrap.dedent(body))
        return settings_path

    return _write


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
