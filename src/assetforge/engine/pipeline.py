# src/assetforge/engine/pipeline.py
"""NodePipeline: hosts one prefab node invocation end to end.

    CONFIG -> instantiate the strategy plugin
    IMPORT -> resolve and freshness-check source assets
    SETUP  -> plan only (dry run), or
    RUN    -> build, reconcile
    LEDGER -> persist cache and import ledgers (run only)

then hands the output manifest to the downstream consumer.

Ledgers are persisted only after the node run succeeded, and the consumer is
only called after that. A failure in any phase emits PhaseError and a FAILED
NodeRunSummary, then re-raises.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from assetforge.contracts import (
    BuildTarget,
    ConnectionInfo,
    HostPhase,
    NodeInfo,
    NodePhase,
    NodeRunSummary,
    OutputCallback,
    PhaseCompleted,
    PhaseError,
    PhaseStarted,
    RunCompletionStatus,
)
from assetforge.core.cache_dir import CacheDirectoryAllocator
from assetforge.core.canonical import stable_hash
from assetforge.core.config import AssetForgeSettings
from assetforge.core.events import EventBusProtocol, NullEventBus
from assetforge.core.ledger import CacheLedger, LedgerStore
from assetforge.core.logging import get_logger
from assetforge.core.prefab_io import ArtifactWriter, YamlPrefabWriter
from assetforge.engine.importer import AssetImporter, ImportResult
from assetforge.engine.orchestrator import Prefabricator, RunResult, SetupResult
from assetforge.plugins.manager import PluginManager, PluginSpec
from assetforge.plugins.protocols import StrategyProtocol

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one hosted node invocation.

    Attributes:
        phase: SETUP for dry runs, RUN otherwise
        node_result: SetupResult or RunResult from the Prefabricator
        import_result: Grouped inputs the node consumed
        forced: Whether every artifact was regenerated
        ledger_paths: Ledger files written (empty for dry runs)
    """

    phase: NodePhase
    node_result: SetupResult | RunResult
    import_result: ImportResult
    forced: bool = False
    ledger_paths: tuple[Path, ...] = field(default_factory=tuple)


class NodePipeline:
    """Runs the configured node against its source, cache and ledgers.

    Args:
        settings: Validated settings
        plugin_manager: Manager with strategies registered (built-ins when None)
        event_bus: Receives phase and summary events (no-op when None)
        writer: Regeneration side effect (YamlPrefabWriter when None)

    Example:
        pipeline = NodePipeline(load_settings(Path("settings.yaml")))
        result = pipeline.execute()
    """

    def __init__(
        self,
        settings: AssetForgeSettings,
        *,
        plugin_manager: PluginManager | None = None,
        event_bus: EventBusProtocol | None = None,
        writer: ArtifactWriter | None = None,
    ) -> None:
        self.settings = settings
        if plugin_manager is None:
            plugin_manager = PluginManager()
            plugin_manager.register_builtin_plugins()
        self.plugin_manager = plugin_manager
        self._events: EventBusProtocol = event_bus if event_bus is not None else NullEventBus()
        self.writer: ArtifactWriter = (
            writer
            if writer is not None
            else YamlPrefabWriter(bundle_name=settings.node.bundle_name, sidecar_suffix=settings.cache.sidecar_suffix)
        )
        self.store = LedgerStore(settings.cache.state_dir)

    @property
    def node(self) -> NodeInfo:
        return NodeInfo(node_id=self.settings.node.id, name=self.settings.node.display_name)

    @property
    def target(self) -> BuildTarget:
        return self.settings.target

    @property
    def connection(self) -> ConnectionInfo:
        return ConnectionInfo(connection_id=f"{self.settings.node.id}:{self.settings.node.connection}", label=self.settings.node.connection)

    def create_strategy(self) -> StrategyProtocol:
        """Instantiate the configured strategy plugin.

        Raises:
            ValueError: If the strategy name is not registered
            PluginConfigError: If the strategy rejects node.options
        """
        return self.plugin_manager.create_strategy(self.settings.node.strategy, self.settings.node.options)

    def strategy_fingerprint(self, strategy: StrategyProtocol) -> str:
        """Hash of everything besides inputs that shapes the built artifacts."""
        return stable_hash(
            {
                "strategy": PluginSpec.from_plugin(type(strategy)).spec_hash,
                "options": self.settings.node.options,
                "bundle_name": self.settings.node.bundle_name,
                "target": self.target.value,
            }
        )

    def build_prefabricator(self, strategy: StrategyProtocol) -> Prefabricator:
        return Prefabricator(
            strategy,
            node=self.node,
            target=self.target,
            directories=CacheDirectoryAllocator(self.settings.cache.root),
            writer=self.writer,
            output_listing=self.settings.node.output_listing,
            sidecar_suffix=self.settings.cache.sidecar_suffix,
        )

    def execute(self, *, dry_run: bool = False, force: bool = False, output: OutputCallback | None = None) -> PipelineResult:
        """Run the node once.

        Args:
            dry_run: Plan only (setup phase); writes nothing
            force: Regenerate every artifact regardless of the cache
            output: Downstream consumer, called after ledgers are saved

        Returns:
            PipelineResult describing the invocation

        Raises:
            NodeError: If the node rejects the invocation or a group fails
            ValueError / PluginConfigError: If the strategy cannot be created
            LedgerError: If a stored ledger is corrupt
        """
        node_phase = NodePhase.SETUP if dry_run else NodePhase.RUN
        run_start = time.perf_counter()
        groups_count = 0

        try:
            strategy = self._phase(HostPhase.CONFIG, self.settings.node.strategy, self.create_strategy)
            import_result = self._phase(HostPhase.IMPORT, str(self.settings.source.path or "explicit groups"), self._import)
            groups_count = len(import_result.groups)
            prefabricator = self.build_prefabricator(strategy)

            if dry_run:
                setup_result = self._phase(HostPhase.SETUP, self.node.node_id, lambda: prefabricator.setup(import_result.groups))
                result = PipelineResult(phase=node_phase, node_result=setup_result, import_result=import_result)
                summary_counts = (len(setup_result.planned), 0, 0)
            else:
                fingerprint = self.strategy_fingerprint(strategy)
                previous = self.store.load_cache_ledger(self.node.node_id, self.target)
                forced = force or self._strategy_changed(previous, fingerprint)
                run_result = self._phase(
                    HostPhase.RUN,
                    self.node.node_id,
                    lambda: prefabricator.run(import_result.groups, previous.cached_paths, force=forced),
                )
                ledger_paths = self._phase(
                    HostPhase.LEDGER,
                    str(self.settings.cache.state_dir),
                    lambda: self._save_ledgers(run_result, import_result, fingerprint),
                )
                result = PipelineResult(
                    phase=node_phase,
                    node_result=run_result,
                    import_result=import_result,
                    forced=forced,
                    ledger_paths=ledger_paths,
                )
                summary_counts = (len(run_result.generated), len(run_result.used_cache), run_result.reconciliation.pruned_count)
        except Exception:
            self._events.emit(
                NodeRunSummary(
                    node_id=self.node.node_id,
                    phase=node_phase,
                    status=RunCompletionStatus.FAILED,
                    groups=groups_count,
                    generated=0,
                    reused=0,
                    pruned=0,
                    duration_seconds=time.perf_counter() - run_start,
                )
            )
            raise

        if output is not None:
            output(self.node, self.connection, result.node_result.output_groups, result.node_result.used_cache)

        generated, reused, pruned = summary_counts
        self._events.emit(
            NodeRunSummary(
                node_id=self.node.node_id,
                phase=node_phase,
                status=RunCompletionStatus.COMPLETED,
                groups=groups_count,
                generated=generated,
                reused=reused,
                pruned=pruned,
                duration_seconds=time.perf_counter() - run_start,
            )
        )
        return result

    def _phase(self, phase: HostPhase, target: str | None, action: Callable[[], T]) -> T:
        phase_start = time.perf_counter()
        self._events.emit(PhaseStarted(phase=phase, target=target))
        try:
            value = action()
        except Exception as e:
            self._events.emit(PhaseError(phase=phase, error=e, target=target))
            raise
        self._events.emit(PhaseCompleted(phase=phase, duration_seconds=time.perf_counter() - phase_start))
        return value

    def _import(self) -> ImportResult:
        importer = AssetImporter(
            self.settings.source,
            node_id=self.node.node_id,
            target=self.target,
            exclude_dirs=(self.settings.cache.root, self.settings.cache.state_dir),
            sidecar_suffix=self.settings.cache.sidecar_suffix,
        )
        return importer.import_assets(self.store.load_import_ledger(self.node.node_id, self.target))

    def _strategy_changed(self, previous: CacheLedger, fingerprint: str) -> bool:
        if not previous.cached_paths or previous.strategy_fingerprint == fingerprint:
            return False
        logger.info(
            "Strategy configuration changed since last run, regenerating all artifacts",
            node=self.node.name,
            strategy=self.settings.node.strategy,
        )
        return True

    def _save_ledgers(self, run_result: RunResult, import_result: ImportResult, fingerprint: str) -> tuple[Path, ...]:
        cache_ledger = CacheLedger(
            node_id=self.node.node_id,
            target=self.target,
            cached_paths=sorted(run_result.touched),
            strategy_fingerprint=fingerprint,
        )
        return (
            self.store.save_cache_ledger(cache_ledger),
            self.store.save_import_ledger(import_result.ledger),
        )
