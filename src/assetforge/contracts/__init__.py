"""Shared contracts for cross-boundary data types.

All dataclasses, enums and exceptions that cross subsystem boundaries
(import stage, node orchestrator, strategies, CLI) are defined here.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from
assetforge.core.config.
"""

from assetforge.contracts.asset import PREFAB_ASSET_TYPE, Asset, AssetDescriptor
from assetforge.contracts.enums import (
    BuildTarget,
    Determinism,
    NodeErrorKind,
    NodePhase,
    OutputListing,
)
from assetforge.contracts.errors import NodeError
from assetforge.contracts.events import (
    HostPhase,
    NodeRunSummary,
    PhaseCompleted,
    PhaseError,
    PhaseStarted,
    RunCompletionStatus,
)
from assetforge.contracts.node import ConnectionInfo, GroupedAssets, NodeInfo, OutputCallback
from assetforge.contracts.prefab import PrefabComponent, PrefabObject

__all__ = [
    "PREFAB_ASSET_TYPE",
    "Asset",
    "AssetDescriptor",
    "BuildTarget",
    "ConnectionInfo",
    "Determinism",
    "GroupedAssets",
    "HostPhase",
    "NodeError",
    "NodeErrorKind",
    "NodeInfo",
    "NodePhase",
    "NodeRunSummary",
    "OutputCallback",
    "OutputListing",
    "PhaseCompleted",
    "PhaseError",
    "PhaseStarted",
    "PrefabComponent",
    "PrefabObject",
    "RunCompletionStatus",
]
