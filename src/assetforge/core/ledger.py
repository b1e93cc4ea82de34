# src/assetforge/core/ledger.py
"""Persistent ledgers carried between node runs.

Two ledgers are kept per (node, target):

- CacheLedger: output paths the last successful run generated or reused.
  Fed back as ``previously_cached`` on the next run. Also records which
  strategy configuration built them, so a changed strategy forces a rebuild.
- ImportLedger: content hash of every source file and a membership
  fingerprint per group, as of the last successful run. The import stage
  compares against it to decide which inputs are new or changed.

Both are written only after a run completes. A failed run leaves the old
ledgers in place, so the next run re-checks everything the failed run may
have touched.

Structure: state_dir/<node_id>/<target>.cache.json
           state_dir/<node_id>/<target>.import.json
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, Field, ValidationError

from assetforge.contracts.enums import BuildTarget
from assetforge.core.canonical import CANONICAL_VERSION

_LedgerT = TypeVar("_LedgerT", bound=BaseModel)


class LedgerError(Exception):
    """Raised when a ledger file exists but cannot be parsed."""


class CacheLedger(BaseModel):
    """Output paths cached by the last successful run."""

    model_config = {"frozen": True}

    node_id: str
    target: BuildTarget
    cached_paths: list[str] = Field(default_factory=list, description="Sorted generated-or-reused artifact paths")
    strategy_fingerprint: str = Field(default="", description="stable_hash of strategy spec, options and bundle tag that built cached_paths")


class ImportLedger(BaseModel):
    """Source freshness record from the last successful run."""

    model_config = {"frozen": True}

    node_id: str
    target: BuildTarget
    canonical_version: str = CANONICAL_VERSION
    content_hashes: dict[str, str] = Field(default_factory=dict, description="absolute source path -> SHA-256 of contents")
    group_fingerprints: dict[str, str] = Field(default_factory=dict, description="group key -> stable hash of member paths")


class LedgerStore:
    """Reads and writes ledgers under a state directory."""

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = state_dir

    def cache_ledger_path(self, node_id: str, target: BuildTarget) -> Path:
        return self.state_dir / node_id / f"{target.value}.cache.json"

    def import_ledger_path(self, node_id: str, target: BuildTarget) -> Path:
        return self.state_dir / node_id / f"{target.value}.import.json"

    def load_cache_ledger(self, node_id: str, target: BuildTarget) -> CacheLedger:
        """Load the cache ledger, or an empty one if this node never ran."""
        path = self.cache_ledger_path(node_id, target)
        loaded = self._load(path, CacheLedger)
        return loaded if loaded is not None else CacheLedger(node_id=node_id, target=target)

    def load_import_ledger(self, node_id: str, target: BuildTarget) -> ImportLedger:
        """Load the import ledger, or an empty one if this node never ran."""
        path = self.import_ledger_path(node_id, target)
        loaded = self._load(path, ImportLedger)
        return loaded if loaded is not None else ImportLedger(node_id=node_id, target=target)

    def save_cache_ledger(self, ledger: CacheLedger) -> Path:
        return self._save(self.cache_ledger_path(ledger.node_id, ledger.target), ledger)

    def save_import_ledger(self, ledger: ImportLedger) -> Path:
        return self._save(self.import_ledger_path(ledger.node_id, ledger.target), ledger)

    def _load(self, path: Path, model: type[_LedgerT]) -> _LedgerT | None:
        if not path.exists():
            return None
        try:
            return model.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            raise LedgerError(f"Ledger {path} is corrupt: {e}") from e

    def _save(self, path: Path, ledger: BaseModel) -> Path:
        # Write-then-rename so a crash never leaves a half-written ledger
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(ledger.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, path)
        return path
