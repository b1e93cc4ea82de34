"""Observability events for node execution.

These domain events provide visibility into node phases and completion
status. Events are emitted by the pipeline host and consumed by CLI
formatters for human-readable or structured output.
"""

from dataclasses import dataclass
from enum import StrEnum

from assetforge.contracts.enums import NodePhase


class HostPhase(StrEnum):
    """Lifecycle phases of the pipeline host around a node invocation."""

    CONFIG = "config"
    IMPORT = "import"
    SETUP = "setup"
    RUN = "run"
    LEDGER = "ledger"


class RunCompletionStatus(StrEnum):
    """Final status for NodeRunSummary events."""

    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PhaseStarted:
    """Emitted when a host phase begins.

    Attributes:
        phase: The lifecycle phase starting
        target: Optional target (e.g., source path, node id)
    """

    phase: HostPhase
    target: str | None = None


@dataclass(frozen=True, slots=True)
class PhaseCompleted:
    """Emitted when a host phase completes successfully."""

    phase: HostPhase
    duration_seconds: float


@dataclass(frozen=True, slots=True)
class PhaseError:
    """Emitted when a host phase fails.

    Stores the full exception object to preserve traceback and chained causes.
    """

    phase: HostPhase
    error: BaseException
    target: str | None = None

    @property
    def error_message(self) -> str:
        """Human-readable error message for formatting."""
        return str(self.error)


@dataclass(frozen=True, slots=True)
class NodeRunSummary:
    """Summary emitted when a node invocation finishes (success or failure).

    Attributes:
        node_id: Node that ran
        phase: Which node phase ran (setup for dry runs, run otherwise)
        status: Final status
        groups: Number of input groups
        generated: Artifacts regenerated (or planned, for setup)
        reused: Cached artifacts reused
        pruned: Stale cache entries removed by reconciliation
        duration_seconds: Wall time of the whole invocation
    """

    node_id: str
    phase: NodePhase
    status: RunCompletionStatus
    groups: int
    generated: int
    reused: int
    pruned: int
    duration_seconds: float

    @property
    def exit_code(self) -> int:
        return 0 if self.status == RunCompletionStatus.COMPLETED else 1
