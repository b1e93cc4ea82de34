# src/assetforge/engine/orchestrator/core.py
"""Prefabricator: the two-phase node driver.

Drives the setup/run contract uniformly across all groups, independent of
what the pluggable strategy builds.

    setup:  validate inputs -> plan each group -> provisional manifest
    run:    validate inputs -> build each group -> reconcile cache -> manifest

Groups are processed strictly sequentially. Reconciliation needs the touched
set of the whole run, so it happens once, after the last group, and never
after a failure: a run that aborts leaves the cache directory as a superset
of valid artifacts, which the next successful run prunes. The candidates for
pruning are the ledger entries plus every artifact found in the directory,
so files written by an aborted run are pruned even though no ledger names
them.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from assetforge.contracts.asset import Asset
from assetforge.contracts.enums import BuildTarget, NodeErrorKind, NodePhase, OutputListing
from assetforge.contracts.errors import NodeError
from assetforge.contracts.node import ConnectionInfo, GroupedAssets, NodeInfo, OutputCallback
from assetforge.core.cache_dir import CacheDirectoryAllocator, list_artifact_files
from assetforge.core.logging import bind_node_context, get_logger
from assetforge.core.prefab_io import ArtifactWriter, YamlPrefabWriter
from assetforge.core.sidecar import DEFAULT_SIDECAR_SUFFIX, GUID_KEY, read_sidecar
from assetforge.engine.orchestrator.allocators import BuildAllocator, PlanAllocator
from assetforge.engine.orchestrator.cache import reconcile_cache
from assetforge.engine.orchestrator.types import GroupOutcome, RunResult, SetupResult
from assetforge.engine.orchestrator.validation import validate_inputs_resolved
from assetforge.plugins.protocols import StrategyProtocol

logger = get_logger(__name__)


class Prefabricator:
    """Runs one prefab node against its cache directory.

    The instance holds configuration only; every per-invocation value lives
    in the returned SetupResult/RunResult, so one Prefabricator can be
    invoked repeatedly.

    Args:
        strategy: Plan/build strategy for this node type
        node: Node identity
        target: Target platform
        directories: Allocates the node's cache directory
        writer: Regeneration side effect (defaults to YamlPrefabWriter)
        output_listing: How generated artifacts are listed after a build
        sidecar_suffix: Suffix of artifact sidecar files

    Example:
        prefabricator = Prefabricator(strategy, node=node, target=BuildTarget.IOS,
                                      directories=CacheDirectoryAllocator(cache_root))
        result = prefabricator.run(groups, previously_cached=ledger.cached_paths)
    """

    def __init__(
        self,
        strategy: StrategyProtocol,
        *,
        node: NodeInfo,
        target: BuildTarget,
        directories: CacheDirectoryAllocator,
        writer: ArtifactWriter | None = None,
        output_listing: OutputListing = OutputListing.TRACKED,
        sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX,
    ) -> None:
        self.strategy = strategy
        self.node = node
        self.target = target
        self.directories = directories
        self.writer: ArtifactWriter = writer if writer is not None else YamlPrefabWriter(sidecar_suffix=sidecar_suffix)
        self.output_listing = output_listing
        self.sidecar_suffix = sidecar_suffix

    # === Setup (validation phase) ===

    def setup(
        self,
        grouped_sources: GroupedAssets,
        *,
        connection: ConnectionInfo | None = None,
        output: OutputCallback | None = None,
    ) -> SetupResult:
        """Plan every group without building anything.

        Args:
            grouped_sources: Input groups (borrowed, never modified)
            connection: Outgoing connection passed to output
            output: Downstream consumer, called once with the manifest

        Returns:
            SetupResult with planned artifacts (new, not cached) followed by inputs

        Raises:
            NodeError: UNRESOLVED_INPUT, PLAN_REJECTED or NOT_IMPLEMENTED
        """
        with bind_node_context(self.node.node_id, NodePhase.SETUP.value):
            validate_inputs_resolved(self.node.node_id, grouped_sources)

            # Path only - setup must not create the directory
            output_dir = self.directories.path_for(self.target, self.node)
            output_groups: GroupedAssets = {}
            outcomes: list[GroupOutcome] = []
            planned_paths: dict[str, str] = {}

            for group_key, inputs in grouped_sources.items():
                allocator = PlanAllocator(output_dir, group_key)
                descriptors = [asset.to_descriptor() for asset in inputs]
                try:
                    self.strategy.plan(self.target, self.node, group_key, descriptors, output_dir, allocator)
                except NodeError:
                    raise
                except Exception as e:
                    logger.error("Strategy failed to plan group", group=group_key, error=str(e), error_type=type(e).__name__)
                    raise NodeError(
                        NodeErrorKind.PLAN_REJECTED,
                        self.node.node_id,
                        f"{self.node.name}: cannot plan group {group_key!r}: {e}",
                        cause=e,
                    ) from e

                outcome = GroupOutcome(group_key=group_key, allocations=allocator.invocation_count, generated=allocator.intended)
                self._warn_if_allocator_unused(outcome)
                self._claim_paths(planned_paths, outcome, NodeErrorKind.PLAN_REJECTED)
                outcomes.append(outcome)

                planned = [Asset.generated(path, is_new=True, is_cached=False) for path in allocator.intended]
                output_groups[group_key] = planned + list(inputs)

            result = SetupResult(output_groups=output_groups, used_cache=[], outcomes=tuple(outcomes))

        if output is not None:
            output(self.node, connection or ConnectionInfo(connection_id=self.node.node_id), result.output_groups, result.used_cache)
        return result

    # === Run (execution phase) ===

    def run(
        self,
        grouped_sources: GroupedAssets,
        previously_cached: Iterable[str],
        *,
        force: bool = False,
        connection: ConnectionInfo | None = None,
        output: OutputCallback | None = None,
    ) -> RunResult:
        """Build every group, then prune cache entries the run did not touch.

        Args:
            grouped_sources: Input groups (borrowed, never modified)
            previously_cached: Paths cached by the previous successful run. Artifacts
                found in the output directory are pruned too when untouched.
            force: Regenerate every artifact regardless of the cache
            connection: Outgoing connection passed to output
            output: Downstream consumer, called once after reconciliation

        Returns:
            RunResult with generated/reused artifacts followed by inputs

        Raises:
            NodeError: UNRESOLVED_INPUT, BUILD_FAILED or NOT_IMPLEMENTED.
                No reconciliation happens and output is not called.
        """
        with bind_node_context(self.node.node_id, NodePhase.RUN.value):
            validate_inputs_resolved(self.node.node_id, grouped_sources)

            output_dir = self.directories.ensure(self.target, self.node)
            cached = frozenset(previously_cached)
            output_groups: GroupedAssets = {}
            outcomes: list[GroupOutcome] = []
            allocators: list[BuildAllocator] = []
            # dict as ordered set: path -> owning group
            touched: dict[str, str] = {}

            for group_key, inputs in grouped_sources.items():
                allocator = BuildAllocator(
                    node=self.node,
                    group_key=group_key,
                    output_dir=output_dir,
                    inputs=inputs,
                    previously_cached=cached,
                    writer=self.writer,
                    force_all=force,
                    sidecar_suffix=self.sidecar_suffix,
                )
                self._build_group(group_key, inputs, output_dir, allocator)

                outcome = GroupOutcome(
                    group_key=group_key,
                    allocations=allocator.invocation_count,
                    generated=allocator.generated,
                    reused=allocator.reused,
                )
                self._warn_if_allocator_unused(outcome)
                self._claim_paths(touched, outcome)
                outcomes.append(outcome)
                allocators.append(allocator)

            # Every group succeeded - safe to prune
            on_disk = list_artifact_files(output_dir, self.sidecar_suffix)
            reconciliation = reconcile_cache(
                cached.union(on_disk), touched, cache_dir=output_dir, sidecar_suffix=self.sidecar_suffix
            )

            for (group_key, inputs), allocator in zip(grouped_sources.items(), allocators, strict=True):
                output_groups[group_key] = self._list_group_outputs(output_dir, allocator) + list(inputs)

            result = RunResult(
                output_groups=output_groups,
                used_cache=[path for outcome in outcomes for path in outcome.reused],
                generated=[path for outcome in outcomes for path in outcome.generated],
                touched=list(touched),
                reconciliation=reconciliation,
                outcomes=tuple(outcomes),
            )
            logger.info(
                "Node run complete",
                groups=len(outcomes),
                generated=len(result.generated),
                reused=len(result.used_cache),
                pruned=reconciliation.pruned_count,
            )

        if output is not None:
            output(self.node, connection or ConnectionInfo(connection_id=self.node.node_id), result.output_groups, result.used_cache)
        return result

    def _build_group(self, group_key: str, inputs: list[Asset], output_dir: Path, allocator: BuildAllocator) -> None:
        descriptors = [asset.to_descriptor() for asset in inputs]
        try:
            self.strategy.build(self.target, self.node, group_key, descriptors, output_dir, allocator)
        except NodeError as e:
            logger.error("Strategy aborted group", group=group_key, kind=e.kind.value, error=e.message)
            raise
        except Exception as e:
            logger.error("Strategy failed to build group", group=group_key, error=str(e), error_type=type(e).__name__, exc_info=True)
            raise NodeError(
                NodeErrorKind.BUILD_FAILED,
                self.node.node_id,
                f"{self.node.name}: building group {group_key!r} failed: {type(e).__name__}: {e}",
                cause=e,
            ) from e

    def _claim_paths(
        self, touched: dict[str, str], outcome: GroupOutcome, kind: NodeErrorKind = NodeErrorKind.BUILD_FAILED
    ) -> None:
        """Add a group's paths to the invocation's path set.

        Raises:
            NodeError: kind (BUILD_FAILED by default) if another group already claimed one of the paths
        """
        for path in outcome.touched:
            owner = touched.get(path)
            if owner is not None:
                raise NodeError(
                    kind,
                    self.node.node_id,
                    f"{self.node.name}: groups {owner!r} and {outcome.group_key!r} both produce {path}",
                )
            touched[path] = outcome.group_key

    def _list_group_outputs(self, output_dir: Path, allocator: BuildAllocator) -> list[Asset]:
        generated = set(allocator.generated)
        if self.output_listing == OutputListing.TRACKED:
            return [
                Asset.generated(path, is_new=path in generated, is_cached=path not in generated, asset_id=allocator.asset_id_for(path))
                for path in allocator.touched
            ]

        outputs: list[Asset] = []
        for path in list_artifact_files(output_dir, self.sidecar_suffix):
            is_new = path in generated
            asset_id = allocator.asset_id_for(path) or str(read_sidecar(Path(path), self.sidecar_suffix).get(GUID_KEY, ""))
            outputs.append(Asset.generated(os.fspath(path), is_new=is_new, is_cached=not is_new, asset_id=asset_id))
        return outputs

    def _warn_if_allocator_unused(self, outcome: GroupOutcome) -> None:
        if not outcome.allocator_called:
            logger.warning(
                "Allocator was not called. Prefab might not be created properly.",
                node=self.node.name,
                group=outcome.group_key,
                strategy=type(self.strategy).__name__,
            )
