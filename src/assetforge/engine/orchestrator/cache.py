# src/assetforge/engine/orchestrator/cache.py
"""Cache validity and cache reconciliation.

Validity decides, per candidate artifact, whether the copy cached by the
previous run can be reused. Reconciliation runs once after every group has
been built and removes the cached artifacts that the run did not touch.

Sidecar ordering: a sidecar is never deleted ahead of its primary. For each
stale artifact the bundle tag is stripped from the sidecar, then the primary
is deleted, then the sidecar, then any directory left empty.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from pathlib import Path

from assetforge.contracts.asset import Asset
from assetforge.core.cache_dir import delete_file_then_folder_if_empty
from assetforge.core.logging import get_logger
from assetforge.core.sidecar import DEFAULT_SIDECAR_SUFFIX, is_sidecar, sidecar_path, strip_bundle_tag
from assetforge.engine.orchestrator.types import ReconcileResult

logger = get_logger(__name__)


def is_cache_valid(inputs: Iterable[Asset], previously_cached: Collection[str], candidate_path: str) -> bool:
    """Whether a previously cached artifact can be reused.

    Valid iff the candidate was cached by the previous run and none of the
    inputs it was built from changed since. Freshness of each input is the
    import stage's verdict (Asset.is_new); this check does not look at disk.

    Pure: safe to call repeatedly within one group.
    """
    if candidate_path not in previously_cached:
        return False
    return not any(asset.is_new for asset in inputs)


def find_stale_paths(
    previously_cached: Iterable[str],
    touched: Iterable[str],
    sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX,
) -> list[str]:
    """Cached paths the current run did not touch, sidecars excluded, sorted."""
    stale = set(previously_cached) - set(touched)
    return sorted(path for path in stale if not is_sidecar(path, sidecar_suffix))


def reconcile_cache(
    previously_cached: Iterable[str],
    touched: Iterable[str],
    *,
    cache_dir: Path,
    sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX,
) -> ReconcileResult:
    """Delete every previously cached artifact not touched in this run.

    Destructive and irreversible. Callers must only invoke this after all
    groups of the run completed successfully.

    Args:
        previously_cached: Cache ledger from the previous run
        touched: Paths generated or reused in this run
        cache_dir: The node's cache directory; nothing outside it is deleted
            and it is never removed itself
        sidecar_suffix: Suffix identifying sidecar files

    Returns:
        ReconcileResult describing what was removed
    """
    removed: list[str] = []
    untagged: list[str] = []
    removed_dirs: list[str] = []
    missing: list[str] = []
    skipped: list[str] = []

    cache_root = cache_dir.resolve()
    for stale in find_stale_paths(previously_cached, touched, sidecar_suffix):
        path = Path(stale)
        if not path.resolve().is_relative_to(cache_root):
            logger.warning("Stale cache entry outside cache directory, not deleting", path=stale, cache_dir=str(cache_dir))
            skipped.append(stale)
            continue

        if strip_bundle_tag(path, sidecar_suffix):
            untagged.append(stale)

        if path.exists():
            path.unlink()
            removed.append(stale)
            logger.info("Pruned unused cached artifact", path=stale)
        else:
            missing.append(stale)
            logger.debug("Stale cache entry already gone", path=stale)

        # Sidecar follows its primary; delete it and climb out of empty dirs
        dirs = delete_file_then_folder_if_empty(sidecar_path(path, sidecar_suffix), stop_at=cache_dir)
        removed_dirs.extend(str(d) for d in dirs)

    return ReconcileResult(
        removed=tuple(removed),
        untagged=tuple(untagged),
        removed_dirs=tuple(removed_dirs),
        missing=tuple(missing),
        skipped=tuple(skipped),
    )
