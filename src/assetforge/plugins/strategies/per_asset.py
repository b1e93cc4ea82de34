# src/assetforge/plugins/strategies/per_asset.py
"""Per-asset strategy: one prefab per input asset."""

from pathlib import Path
from typing import TYPE_CHECKING, Any

from assetforge.contracts import (
    AssetDescriptor,
    BuildTarget,
    NodeError,
    NodeErrorKind,
    NodeInfo,
    PrefabComponent,
    PrefabObject,
)
from assetforge.plugins.base import BasePrefabStrategy
from assetforge.plugins.config_base import PluginConfig

if TYPE_CHECKING:
    from assetforge.engine.orchestrator.allocators import BuildAllocator, PlanAllocator


class PerAssetConfig(PluginConfig):
    extension: str = ".pfb"
    # Regenerate every artifact on each run, ignoring the cache
    always_rebuild: bool = False


class PerAssetPrefabStrategy(BasePrefabStrategy):
    """Wraps every input asset in its own prefab, named <group>/<stem>."""

    name = "per_asset"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        super().__init__(config)
        self._config = PerAssetConfig.from_dict(config)

    def artifact_name(self, group_key: str, descriptor: AssetDescriptor) -> str:
        return f"{group_key}/{Path(descriptor.name).stem}{self._config.extension}"

    def _check_group(self, node: NodeInfo, group_key: str, inputs: list[AssetDescriptor]) -> None:
        # Inputs sharing a stem (body.fbx, body.png) would map to one artifact
        by_name: dict[str, list[AssetDescriptor]] = {}
        for descriptor in inputs:
            by_name.setdefault(self.artifact_name(group_key, descriptor), []).append(descriptor)
        collisions = {name: found for name, found in by_name.items() if len(found) > 1}
        if collisions:
            listing = "; ".join(f"{name} <- " + ", ".join(d.path for d in found) for name, found in collisions.items())
            raise NodeError(
                NodeErrorKind.PLAN_REJECTED,
                node.node_id,
                f"group {group_key!r} has inputs that map to the same artifact: {listing}",
            )

    def plan(
        self,
        target: BuildTarget,
        node: NodeInfo,
        group_key: str,
        inputs: list[AssetDescriptor],
        output_dir: Path,
        allocate: "PlanAllocator",
    ) -> None:
        self._check_group(node, group_key, inputs)
        for descriptor in inputs:
            allocate(self.artifact_name(group_key, descriptor))

    def build(
        self,
        target: BuildTarget,
        node: NodeInfo,
        group_key: str,
        inputs: list[AssetDescriptor],
        output_dir: Path,
        allocate: "BuildAllocator",
    ) -> None:
        self._check_group(node, group_key, inputs)
        for descriptor in inputs:
            prefab = PrefabObject(
                name=Path(descriptor.name).stem,
                components=(
                    PrefabComponent(
                        kind="asset_reference",
                        properties={"path": descriptor.path, "asset_id": descriptor.asset_id, "asset_type": descriptor.asset_type},
                    ),
                ),
            )
            allocate(prefab, self.artifact_name(group_key, descriptor), force=self._config.always_rebuild)
