# src/assetforge/plugins/base.py
"""Base class for build strategy implementations.

Strategies MUST subclass BasePrefabStrategy:
- Plugin discovery uses issubclass() checks against the base class
- Protocols with non-method members (name, determinism) cannot support
  issubclass(), only isinstance() on instances

The default plan()/build() fail loudly with NOT_IMPLEMENTED. A strategy that
silently did nothing would leave the node's cache ledger claiming artifacts
that were never produced.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any

from assetforge.contracts import AssetDescriptor, BuildTarget, Determinism, NodeError, NodeInfo
from assetforge.core.logging import get_logger

if TYPE_CHECKING:
    from assetforge.engine.orchestrator.allocators import BuildAllocator, PlanAllocator

logger = get_logger(__name__)


class BasePrefabStrategy:
    """Base class for all build strategies.

    Example:
        class HeroStrategy(BasePrefabStrategy):
            name = "hero"

            def plan(self, target, node, group_key, inputs, output_dir, allocate):
                allocate(f"{group_key}.pfb")

            def build(self, target, node, group_key, inputs, output_dir, allocate):
                allocate(PrefabObject(name=group_key), f"{group_key}.pfb")
    """

    name: str
    determinism: Determinism = Determinism.DETERMINISTIC
    plugin_version: str = "0.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize with strategy options.

        Args:
            config: Strategy options from node.options
        """
        self.config = config

    def plan(
        self,
        target: BuildTarget,
        node: NodeInfo,
        group_key: str,
        inputs: list[AssetDescriptor],
        output_dir: Path,
        allocate: "PlanAllocator",
    ) -> None:
        logger.error("Strategy did not implement plan()", node=node.name, strategy=type(self).__name__)
        raise NodeError.not_implemented(node.node_id, "plan", self)

    def build(
        self,
        target: BuildTarget,
        node: NodeInfo,
        group_key: str,
        inputs: list[AssetDescriptor],
        output_dir: Path,
        allocate: "BuildAllocator",
    ) -> None:
        logger.error("Strategy did not implement build()", node=node.name, strategy=type(self).__name__)
        raise NodeError.not_implemented(node.node_id, "build", self)
