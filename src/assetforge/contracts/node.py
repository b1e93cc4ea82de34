"""Node identity and output handoff contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from assetforge.contracts.asset import Asset

GroupedAssets = dict[str, list[Asset]]
"""group_key -> ordered list of assets built together"""


@dataclass(frozen=True, slots=True)
class NodeInfo:
    """Identity of the node being executed.

    Attributes:
        node_id: Stable identifier; names the node's cache directory
        name: Display name used in log lines and diagnostics
    """

    node_id: str
    name: str


@dataclass(frozen=True, slots=True)
class ConnectionInfo:
    """Connection the node's output is handed to."""

    connection_id: str
    label: str = "output"


class OutputCallback(Protocol):
    """Downstream consumer of a node's output.

    Receives the node, the outgoing connection, the output groups (generated
    or reused artifacts followed by the passthrough inputs) and the list of
    cache paths that were reused.
    """

    def __call__(
        self,
        node: NodeInfo,
        connection: ConnectionInfo,
        output_groups: GroupedAssets,
        used_cache: list[str],
    ) -> None: ...
