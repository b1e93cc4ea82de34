# src/assetforge/engine/orchestrator/validation.py
"""Input validation run before either node phase.

Validation happens before the node touches its cache directory: a rejected
invocation performs no filesystem writes at all.
"""

from __future__ import annotations

from assetforge.contracts.errors import NodeError
from assetforge.contracts.node import GroupedAssets


def find_unresolved_inputs(grouped_sources: GroupedAssets) -> list[str]:
    """Paths of every input asset that has not been imported yet, in group order."""
    return [asset.display_path for assets in grouped_sources.values() for asset in assets if not asset.is_resolved]


def validate_inputs_resolved(node_id: str, grouped_sources: GroupedAssets) -> None:
    """Reject the invocation if any input asset lacks a resolved path.

    Raises:
        NodeError: UNRESOLVED_INPUT, enumerating all offending paths
    """
    unresolved = find_unresolved_inputs(grouped_sources)
    if unresolved:
        raise NodeError.unresolved_input(node_id, unresolved)
