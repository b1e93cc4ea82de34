# src/assetforge/contracts/asset.py
"""Asset contracts shared between the import stage, the node and strategies.

Asset is the node's bookkeeping record for one tracked file. It is frozen:
freshness changes are expressed by creating a new Asset, never by mutating
an existing one.

AssetDescriptor is the read-only build-intent snapshot handed to strategies.
It deliberately omits the freshness flags so a strategy cannot tamper with
the node's cache decisions.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

# Asset type assigned to artifacts produced by the node itself
PREFAB_ASSET_TYPE = "prefab"


@dataclass(frozen=True, slots=True)
class AssetDescriptor:
    """Build-intent descriptor passed to strategies, one per input asset."""

    name: str
    asset_type: str
    path: str
    asset_id: str


@dataclass(frozen=True, slots=True)
class Asset:
    """A single tracked file-system artifact.

    Attributes:
        trace_id: Stable identifier, assigned once at creation
        absolute_source_path: Where the raw asset was found (empty for generated artifacts)
        source_base_path: Root the source path is relative to
        file_name: File name with extension
        path_under_source_base: Source path relative to source_base_path
        import_from: Resolved, materialized path. Empty means not imported yet.
        asset_id: Identity assigned by the import subsystem or sidecar guid
        asset_type: Logical type ("texture", "model", "prefab", ...)
        is_new: Created or changed during this run
        is_cached: Still present in the node's cache
    """

    trace_id: str
    absolute_source_path: str
    source_base_path: str
    file_name: str
    path_under_source_base: str
    import_from: str
    asset_id: str
    asset_type: str
    is_new: bool = False
    is_cached: bool = False

    @property
    def is_resolved(self) -> bool:
        """Whether the asset has been materialized and can be built from."""
        return bool(self.import_from)

    @property
    def display_path(self) -> str:
        """Path used in diagnostics: the source path, falling back to the resolved one."""
        return self.absolute_source_path or self.import_from

    @classmethod
    def unresolved(cls, absolute_source_path: str, source_base_path: str) -> Asset:
        """Create an asset discovered by the loader but not imported yet."""
        return cls(
            trace_id=str(uuid.uuid4()),
            absolute_source_path=absolute_source_path,
            source_base_path=source_base_path,
            file_name=Path(absolute_source_path).name,
            path_under_source_base=path_without_base(absolute_source_path, source_base_path),
            import_from="",
            asset_id="",
            asset_type="",
        )

    @classmethod
    def imported(
        cls,
        *,
        absolute_source_path: str,
        source_base_path: str,
        import_from: str,
        asset_id: str,
        asset_type: str,
        is_new: bool,
        trace_id: str | None = None,
    ) -> Asset:
        """Create an asset that the import stage has resolved."""
        return cls(
            trace_id=trace_id or str(uuid.uuid4()),
            absolute_source_path=absolute_source_path,
            source_base_path=source_base_path,
            file_name=Path(absolute_source_path).name,
            path_under_source_base=path_without_base(absolute_source_path, source_base_path),
            import_from=import_from,
            asset_id=asset_id,
            asset_type=asset_type,
            is_new=is_new,
        )

    @classmethod
    def generated(
        cls,
        import_path: str,
        *,
        is_new: bool,
        is_cached: bool,
        asset_id: str = "",
        asset_type: str = PREFAB_ASSET_TYPE,
    ) -> Asset:
        """Create an asset for an artifact the node generated or reused.

        Generated assets always receive a fresh trace id.
        """
        return cls(
            trace_id=str(uuid.uuid4()),
            absolute_source_path="",
            source_base_path="",
            file_name=Path(import_path).name,
            path_under_source_base="",
            import_from=import_path,
            asset_id=asset_id,
            asset_type=asset_type,
            is_new=is_new,
            is_cached=is_cached,
        )

    def to_descriptor(self) -> AssetDescriptor:
        """Strip bookkeeping and return the build-intent descriptor."""
        return AssetDescriptor(
            name=self.file_name,
            asset_type=self.asset_type,
            path=self.import_from,
            asset_id=self.asset_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation for manifests and CLI output."""
        return {
            "trace_id": self.trace_id,
            "file_name": self.file_name,
            "asset_type": self.asset_type,
            "import_from": self.import_from,
            "asset_id": self.asset_id,
            "is_new": self.is_new,
            "is_cached": self.is_cached,
        }


def path_without_base(path: str, base_path: str) -> str:
    """Return path relative to base_path, using forward slashes.

    Paths outside base_path are returned unchanged.
    """
    if not base_path:
        return Path(path).as_posix()
    try:
        return Path(path).relative_to(base_path).as_posix()
    except ValueError:
        return Path(path).as_posix()
