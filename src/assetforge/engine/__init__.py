# src/assetforge/engine/__init__.py
"""Execution engine for prefab nodes.

- Prefabricator: Two-phase (setup/run) node driver with cache reconciliation
- AssetImporter: Resolves source files into grouped, freshness-checked Assets
- NodePipeline: Hosts one invocation (import, node phase, ledgers, output)

Example:
    from assetforge.core.config import load_settings
    from assetforge.engine import NodePipeline

    pipeline = NodePipeline(load_settings(Path("settings.yaml")))
    result = pipeline.execute(force=False)
"""

from assetforge.engine.importer import AssetImporter, ImportResult
from assetforge.engine.orchestrator import (
    BuildAllocator,
    GroupOutcome,
    PlanAllocator,
    Prefabricator,
    ReconcileResult,
    RunResult,
    SetupResult,
)
from assetforge.engine.pipeline import NodePipeline, PipelineResult

__all__ = [
    "AssetImporter",
    "BuildAllocator",
    "GroupOutcome",
    "ImportResult",
    "NodePipeline",
    "PipelineResult",
    "PlanAllocator",
    "Prefabricator",
    "ReconcileResult",
    "RunResult",
    "SetupResult",
]
