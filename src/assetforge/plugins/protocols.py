# src/assetforge/plugins/protocols.py
"""Strategy protocol defining the contract for build strategy plugins.

Used for type checking; runtime registration goes through pluggy and
BasePrefabStrategy.

A strategy has two operations, one per node phase:
- plan(...): declare intended artifacts through the PlanAllocator
- build(...): produce artifacts through the BuildAllocator

Strategies receive AssetDescriptors, never Assets, so they cannot see or
alter the node's freshness bookkeeping.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from assetforge.contracts import AssetDescriptor, BuildTarget, Determinism, NodeInfo

if TYPE_CHECKING:
    from assetforge.engine.orchestrator.allocators import BuildAllocator, PlanAllocator


@runtime_checkable
class StrategyProtocol(Protocol):
    """Protocol for build strategy plugins.

    Lifecycle:
    1. __init__(config) - Plugin instantiation with strategy options
    2. plan(...) per group - setup phase
    3. build(...) per group - run phase
    """

    name: str
    determinism: Determinism
    plugin_version: str

    def __init__(self, config: dict[str, Any]) -> None: ...

    def plan(
        self,
        target: BuildTarget,
        node: NodeInfo,
        group_key: str,
        inputs: list[AssetDescriptor],
        output_dir: Path,
        allocate: "PlanAllocator",
    ) -> None:
        """Declare the group's intended artifacts via allocate(name).

        Raises:
            NodeError: PLAN_REJECTED if the group cannot be built
        """
        ...

    def build(
        self,
        target: BuildTarget,
        node: NodeInfo,
        group_key: str,
        inputs: list[AssetDescriptor],
        output_dir: Path,
        allocate: "BuildAllocator",
    ) -> None:
        """Produce the group's artifacts via allocate(target_object, name, force)."""
        ...
