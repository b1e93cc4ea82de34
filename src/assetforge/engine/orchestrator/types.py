# src/assetforge/engine/orchestrator/types.py
"""Result types returned by the two node phases.

IMPORTANT: Import Cycle Prevention
----------------------------------
This module is a LEAF MODULE - it must NOT import from other orchestrator
submodules (allocators.py, cache.py, core.py). They import FROM here.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from assetforge.contracts.node import GroupedAssets


@dataclass(frozen=True, slots=True)
class GroupOutcome:
    """What one group's strategy call did.

    Returned per group instead of being tracked in shared mutable state, so
    the orchestrator holds no per-call flags between groups.

    Attributes:
        group_key: Group the outcome belongs to
        allocations: Number of allocator invocations made by the strategy
        generated: Paths regenerated (run) or planned (setup)
        reused: Cached paths reused (always empty for setup)
    """

    group_key: str
    allocations: int
    generated: tuple[str, ...] = ()
    reused: tuple[str, ...] = ()

    @property
    def touched(self) -> tuple[str, ...]:
        """Every path this group generated or reused."""
        return self.generated + self.reused

    @property
    def allocator_called(self) -> bool:
        return self.allocations > 0


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Outcome of pruning stale cache entries.

    Attributes:
        removed: Stale primary artifacts deleted from disk
        untagged: Stale artifacts whose bundle tag was stripped before deletion
        removed_dirs: Directories deleted because they became empty
        missing: Stale ledger entries whose file was already gone
        skipped: Stale ledger entries outside the cache directory (never deleted)
    """

    removed: tuple[str, ...] = ()
    untagged: tuple[str, ...] = ()
    removed_dirs: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()

    @property
    def pruned_count(self) -> int:
        return len(self.removed) + len(self.missing)


@dataclass(frozen=True)
class SetupResult:
    """Provisional output manifest produced by the setup (dry run) phase.

    Attributes:
        output_groups: Planned artifacts (new, not cached) followed by the inputs
        used_cache: Always empty - setup never consults the cache
        outcomes: Per-group planning outcome
    """

    output_groups: GroupedAssets
    used_cache: list[str] = field(default_factory=list)
    outcomes: tuple[GroupOutcome, ...] = ()

    @property
    def planned(self) -> list[str]:
        return [path for outcome in self.outcomes for path in outcome.generated]


@dataclass(frozen=True)
class RunResult:
    """Committed output of the run phase.

    Attributes:
        output_groups: Generated/reused artifacts followed by the inputs, per group
        used_cache: Cached paths reused in this run
        generated: Paths regenerated in this run
        touched: generated + reused, in allocation order; the next cache ledger
        reconciliation: What the post-run prune removed
        outcomes: Per-group build outcome
    """

    output_groups: GroupedAssets
    used_cache: list[str]
    generated: list[str]
    touched: list[str]
    reconciliation: ReconcileResult
    outcomes: tuple[GroupOutcome, ...] = ()
