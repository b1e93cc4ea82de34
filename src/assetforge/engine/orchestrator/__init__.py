# src/assetforge/engine/orchestrator/__init__.py
"""Orchestrator package: the prefab node's setup/run contract.

Public API:
- Prefabricator: Two-phase node driver
- PlanAllocator / BuildAllocator: Capabilities handed to strategies
- SetupResult / RunResult / GroupOutcome / ReconcileResult: Phase results
- is_cache_valid / reconcile_cache: Cache policy

Module structure:
- core.py: Prefabricator class (main entry point)
- types.py: Result dataclasses (leaf module)
- allocators.py: Plan and build allocators
- cache.py: Cache validity and reconciliation
- validation.py: Input resolution checks
"""

from assetforge.engine.orchestrator.allocators import BuildAllocator, PlanAllocator
from assetforge.engine.orchestrator.cache import find_stale_paths, is_cache_valid, reconcile_cache
from assetforge.engine.orchestrator.core import Prefabricator
from assetforge.engine.orchestrator.types import GroupOutcome, ReconcileResult, RunResult, SetupResult
from assetforge.engine.orchestrator.validation import find_unresolved_inputs, validate_inputs_resolved

__all__ = [
    "BuildAllocator",
    "GroupOutcome",
    "PlanAllocator",
    "Prefabricator",
    "ReconcileResult",
    "RunResult",
    "SetupResult",
    "find_stale_paths",
    "find_unresolved_inputs",
    "is_cache_valid",
    "reconcile_cache",
    "validate_inputs_resolved",
]
