# src/assetforge/engine/orchestrator/allocators.py
"""Allocator capabilities handed to strategies.

A strategy never computes output paths or writes artifacts on its own. It
asks an allocator, which turns a desired artifact name into a concrete path
inside the node's output directory and records what happened:

- PlanAllocator (setup): records the path as intended, creates nothing.
- BuildAllocator (run): reuses the cached artifact when it is still valid,
  otherwise regenerates it through the ArtifactWriter.

Both count their invocations. The orchestrator reads the count after the
strategy returns to detect strategies that never allocated anything.
One allocator instance serves exactly one group.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Collection, Iterable, Sequence
from pathlib import Path
from typing import Any

from assetforge.contracts.asset import Asset
from assetforge.contracts.node import NodeInfo
from assetforge.core.cache_dir import resolve_output_path
from assetforge.core.logging import get_logger
from assetforge.core.prefab_io import ArtifactWriter
from assetforge.core.sidecar import DEFAULT_SIDECAR_SUFFIX, GUID_KEY, read_sidecar
from assetforge.engine.orchestrator.cache import is_cache_valid

logger = get_logger(__name__)

ValidityCheck = Callable[[Iterable[Asset], Collection[str], str], bool]


class PlanAllocator:
    """Records intended output paths during the setup phase.

    Rejects a name allocated twice for the same group, as BuildAllocator
    does, so a plan that setup accepts is never refused by run.
    """

    def __init__(self, output_dir: Path, group_key: str = "") -> None:
        self.output_dir = output_dir
        self.group_key = group_key
        self.invocation_count = 0
        self._intended: list[str] = []

    def __call__(self, name: str) -> Path:
        """Return the future path of artifact name and record it as intended.

        Raises:
            ValueError: If name is invalid or was already allocated for this group
        """
        path = resolve_output_path(self.output_dir, name)
        self.invocation_count += 1
        key = os.fspath(path)
        if key in self._intended:
            raise ValueError(f"Artifact {name!r} was allocated twice for group {self.group_key!r}")
        self._intended.append(key)
        return path

    @property
    def intended(self) -> tuple[str, ...]:
        return tuple(self._intended)


class BuildAllocator:
    """Reuses or regenerates artifacts during the run phase.

    Args:
        node: Node being executed (log context)
        group_key: Group this allocator serves
        output_dir: Node cache directory
        inputs: The group's input assets; their freshness drives validity
        previously_cached: Cache ledger from the previous run
        writer: Performs the regeneration side effect
        force_all: Regenerate every artifact regardless of the cache
        validity_check: Cache validity policy (defaults to is_cache_valid)
        sidecar_suffix: Suffix of artifact sidecars
    """

    def __init__(
        self,
        *,
        node: NodeInfo,
        group_key: str,
        output_dir: Path,
        inputs: Sequence[Asset],
        previously_cached: Collection[str],
        writer: ArtifactWriter,
        force_all: bool = False,
        validity_check: ValidityCheck = is_cache_valid,
        sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX,
    ) -> None:
        self.node = node
        self.group_key = group_key
        self.output_dir = output_dir
        self.force_all = force_all
        self.invocation_count = 0
        self._inputs = tuple(inputs)
        self._previously_cached = previously_cached
        self._writer = writer
        self._validity_check = validity_check
        self._sidecar_suffix = sidecar_suffix
        self._generated: list[str] = []
        self._reused: list[str] = []
        self._asset_ids: dict[str, str] = {}

    def __call__(self, target_object: Any, name: str, force: bool = False) -> Path:
        """Produce artifact name from target_object, reusing the cache when valid.

        Args:
            target_object: Object handed to the ArtifactWriter on regeneration
            name: Artifact name relative to the output directory
            force: Regenerate even if a valid cached artifact exists

        Returns:
            Path of the artifact on disk

        Raises:
            ValueError: If name is invalid or was already allocated for this group
        """
        path = resolve_output_path(self.output_dir, name)
        key = os.fspath(path)
        self.invocation_count += 1

        if key in self._asset_ids:
            raise ValueError(f"Artifact {name!r} was allocated twice for group {self.group_key!r}")

        if self._needs_regeneration(key, path, force):
            self._asset_ids[key] = self._writer.write(target_object, path)
            self._generated.append(key)
            logger.info("Created new artifact", node=self.node.name, group=self.group_key, path=key)
        else:
            self._asset_ids[key] = str(read_sidecar(path, self._sidecar_suffix).get(GUID_KEY, ""))
            self._reused.append(key)
            logger.info("Used cached artifact", node=self.node.name, group=self.group_key, path=key)
        return path

    def _needs_regeneration(self, key: str, path: Path, force: bool) -> bool:
        if force or self.force_all:
            return True
        # A ledger entry whose file was deleted out-of-band cannot be reused
        if not path.is_file():
            return True
        return not self._validity_check(self._inputs, self._previously_cached, key)

    @property
    def generated(self) -> tuple[str, ...]:
        return tuple(self._generated)

    @property
    def reused(self) -> tuple[str, ...]:
        return tuple(self._reused)

    @property
    def touched(self) -> tuple[str, ...]:
        """Generated and reused paths in allocation order."""
        return tuple(self._asset_ids)

    def asset_id_for(self, path: str) -> str:
        return self._asset_ids.get(path, "")
