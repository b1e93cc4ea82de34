"""Node-scoped error contract.

Every fatal condition inside a node surfaces as a NodeError carrying the
node's identity, so the hosting pipeline can attribute the failure to a
specific node instead of receiving a raw fault.
"""

from __future__ import annotations

from collections.abc import Iterable

from assetforge.contracts.enums import NodeErrorKind


class NodeError(Exception):
    """Raised when a node cannot complete a phase.

    NodeErrors are not recoverable inside the node. They abort the current
    phase before reconciliation, so no cache entry is pruned and no output
    is handed to the downstream consumer.

    Attributes:
        kind: Failure classification
        node_id: Identifier of the node that failed
        message: Human-readable diagnostic
        cause: Underlying exception for BUILD_FAILED / PLAN_REJECTED wrapping
    """

    def __init__(
        self,
        kind: NodeErrorKind,
        node_id: str,
        message: str,
        *,
        cause: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.node_id = node_id
        self.message = message
        self.cause = cause
        super().__init__(f"[{node_id}] {kind.value}: {message}")

    @classmethod
    def unresolved_input(cls, node_id: str, paths: Iterable[str]) -> NodeError:
        """Create the error raised when inputs have not been imported yet."""
        joined = ", ".join(paths)
        return cls(
            NodeErrorKind.UNRESOLVED_INPUT,
            node_id,
            f"{joined} are not imported yet. These assets need to be imported before prefabricated.",
        )

    @classmethod
    def not_implemented(cls, node_id: str, operation: str, strategy: object) -> NodeError:
        """Create the error raised by strategies that skip a required operation."""
        return cls(
            NodeErrorKind.NOT_IMPLEMENTED,
            node_id,
            f"Strategy {type(strategy).__name__} did not implement {operation}()",
        )
