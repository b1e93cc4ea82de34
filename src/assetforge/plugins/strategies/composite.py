# src/assetforge/plugins/strategies/composite.py
"""Composite strategy: one prefab per group, one child per input asset."""

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import field_validator

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


class CompositeConfig(PluginConfig):
    """Options for the composite strategy.

    allowed_types: asset types the group may contain; None accepts any type.
    extension: artifact file extension, including the dot.
    """

    allowed_types: list[str] | None = None
    extension: str = ".pfb"

    @field_validator("extension")
    @classmethod
    def _validate_extension(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2 or "/" in v:
            raise ValueError(f"extension must look like '.pfb', got {v!r}")
        return v


class CompositePrefabStrategy(BasePrefabStrategy):
    """Builds one prefab per group with a child object per input asset.

    The artifact is named after the group key. Plan rejects empty groups and,
    when allowed_types is set, groups containing any other asset type.
    """

    name = "composite"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        super().__init__(config)
        self._config = CompositeConfig.from_dict(config)

    def artifact_name(self, group_key: str) -> str:
        return f"{group_key}{self._config.extension}"

    def _check_group(self, node: NodeInfo, group_key: str, inputs: list[AssetDescriptor]) -> None:
        if not inputs:
            raise NodeError(NodeErrorKind.PLAN_REJECTED, node.node_id, f"group {group_key!r} has no input assets")

        if self._config.allowed_types is None:
            return
        rejected = [d for d in inputs if d.asset_type not in self._config.allowed_types]
        if rejected:
            listing = ", ".join(f"{d.path} ({d.asset_type})" for d in rejected)
            raise NodeError(
                NodeErrorKind.PLAN_REJECTED,
                node.node_id,
                f"group {group_key!r} contains unsupported asset types: {listing}",
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
        allocate(self.artifact_name(group_key))

    def build(
        self,
        target: BuildTarget,
        node: NodeInfo,
        group_key: str,
        inputs: list[AssetDescriptor],
        output_dir: Path,
        allocate: "BuildAllocator",
    ) -> None:
        # run may be invoked without a preceding setup
        self._check_group(node, group_key, inputs)

        children = tuple(
            PrefabObject(
                name=Path(d.name).stem,
                components=(
                    PrefabComponent(
                        kind="asset_reference",
                        properties={"path": d.path, "asset_id": d.asset_id, "asset_type": d.asset_type},
                    ),
                ),
            )
            for d in inputs
        )
        root = PrefabObject(
            name=group_key,
            components=(PrefabComponent(kind="build_info", properties={"target": target.value, "node": node.node_id}),),
            children=children,
        )
        allocate(root, self.artifact_name(group_key))

