# src/assetforge/engine/importer.py
"""Import stage: resolve source files into grouped Assets.

The importer is the upstream producer the prefab node consumes. It decides
two things the node relies on but never computes itself:

- Resolution: an Asset whose file exists gets ``import_from`` set; a listed
  file that is missing stays unresolved and the node rejects the invocation.
- Freshness: ``is_new`` is True when the file's SHA-256 differs from the
  import ledger of the last successful run, or when the membership of its
  group changed (an asset added to or removed from a group invalidates the
  group's artifacts even if no remaining file changed).

The importer does not persist anything. It returns the next ImportLedger;
the pipeline saves it only after the node run succeeded.
"""

import hashlib
import os
import re
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePath

from assetforge.contracts import Asset, BuildTarget, GroupedAssets
from assetforge.core.canonical import stable_hash
from assetforge.core.config import SourceSettings
from assetforge.core.ledger import ImportLedger
from assetforge.core.logging import get_logger
from assetforge.core.sidecar import DEFAULT_SIDECAR_SUFFIX, is_sidecar

logger = get_logger(__name__)

# Group for files that sit directly in the scanned directory
DEFAULT_GROUP_KEY = "0"

_HASH_CHUNK_SIZE = 1024 * 1024

ASSET_TYPES_BY_EXTENSION: dict[str, str] = {
    ".png": "texture",
    ".jpg": "texture",
    ".jpeg": "texture",
    ".tga": "texture",
    ".psd": "texture",
    ".tif": "texture",
    ".tiff": "texture",
    ".exr": "texture",
    ".fbx": "model",
    ".obj": "model",
    ".dae": "model",
    ".blend": "model",
    ".gltf": "model",
    ".glb": "model",
    ".wav": "audio",
    ".mp3": "audio",
    ".ogg": "audio",
    ".mat": "material",
    ".shader": "shader",
    ".anim": "animation",
    ".controller": "animation",
    ".prefab": "prefab",
    ".pfb": "prefab",
    ".txt": "text",
    ".json": "text",
    ".yaml": "text",
    ".yml": "text",
}


def infer_asset_type(path: PurePath) -> str:
    """Logical asset type from the file extension ("file" when unknown)."""
    return ASSET_TYPES_BY_EXTENSION.get(path.suffix.lower(), "file")


def hash_file(path: Path) -> str:
    """SHA-256 hex digest of a file's contents, read in chunks."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def asset_id_for(path: Path) -> str:
    """Stable identity of a source file, derived from its absolute path."""
    return uuid.uuid5(uuid.NAMESPACE_URL, path.resolve().as_uri()).hex


def group_fingerprint(paths: Iterable[str]) -> str:
    """Membership fingerprint of a group: order-insensitive hash of its paths."""
    return stable_hash(sorted(paths))


@dataclass(frozen=True)
class ImportResult:
    """Grouped assets plus the ledger describing them.

    Attributes:
        groups: group key -> assets, groups and assets in sorted order
        ledger: Import ledger to persist once the node run succeeds
        new_count: Resolved assets flagged new or changed
        unresolved_count: Listed files that do not exist
    """

    groups: GroupedAssets
    ledger: ImportLedger
    new_count: int = 0
    unresolved_count: int = 0


class AssetImporter:
    """Resolves one source configuration into grouped Assets.

    Args:
        source: Source settings (scan or explicit mode)
        node_id: Node the import feeds; recorded in the ledger
        target: Build target; recorded in the ledger
        exclude_dirs: Directories never scanned (cache and state locations)
        sidecar_suffix: Sidecar files are metadata, never assets

    Example:
        importer = AssetImporter(settings.source, node_id="characters", target=BuildTarget.IOS)
        result = importer.import_assets(store.load_import_ledger("characters", BuildTarget.IOS))
    """

    def __init__(
        self,
        source: SourceSettings,
        *,
        node_id: str,
        target: BuildTarget,
        exclude_dirs: Sequence[Path] = (),
        sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX,
    ) -> None:
        self.source = source
        self.node_id = node_id
        self.target = target
        self.exclude_dirs = tuple(p.resolve() for p in exclude_dirs)
        self.sidecar_suffix = sidecar_suffix
        self._group_re = re.compile(source.group_pattern) if source.group_pattern else None

    def import_assets(self, previous: ImportLedger) -> ImportResult:
        """Resolve, group and freshness-check every source file.

        Args:
            previous: Import ledger of the last successful run (empty on first run)

        Returns:
            ImportResult with grouped assets and the next ledger

        Raises:
            FileNotFoundError: If the scan directory does not exist
        """
        if self.source.path is not None:
            base, listed = self._scan(self.source.path)
        else:
            base, listed = self._explicit(self.source.groups or {})

        content_hashes: dict[str, str] = {}
        fingerprints: dict[str, str] = {}
        groups: GroupedAssets = {}
        new_count = 0
        unresolved_count = 0

        for group_key in sorted(listed):
            paths = listed[group_key]
            fingerprint = group_fingerprint(os.fspath(p) for p in paths)
            fingerprints[group_key] = fingerprint
            membership_changed = previous.group_fingerprints.get(group_key) != fingerprint
            if membership_changed and group_key in previous.group_fingerprints:
                logger.info("Group membership changed", group=group_key)

            assets: list[Asset] = []
            for path in paths:
                key = os.fspath(path)
                if not path.is_file():
                    assets.append(Asset.unresolved(key, os.fspath(base)))
                    unresolved_count += 1
                    continue

                content_hash = hash_file(path)
                content_hashes[key] = content_hash
                is_new = membership_changed or previous.content_hashes.get(key) != content_hash
                new_count += int(is_new)
                assets.append(
                    Asset.imported(
                        absolute_source_path=key,
                        source_base_path=os.fspath(base),
                        import_from=key,
                        asset_id=asset_id_for(path),
                        asset_type=infer_asset_type(path),
                        is_new=is_new,
                    )
                )
            groups[group_key] = assets

        logger.info(
            "Import complete",
            groups=len(groups),
            assets=sum(len(a) for a in groups.values()),
            new=new_count,
            unresolved=unresolved_count,
        )
        ledger = ImportLedger(
            node_id=self.node_id,
            target=self.target,
            content_hashes=content_hashes,
            group_fingerprints=fingerprints,
        )
        return ImportResult(groups=groups, ledger=ledger, new_count=new_count, unresolved_count=unresolved_count)

    # === Listing ===

    def _scan(self, directory: Path) -> tuple[Path, dict[str, list[Path]]]:
        base = directory.resolve()
        if not base.is_dir():
            raise FileNotFoundError(f"Source directory not found: {directory}")

        found: set[Path] = set()
        for pattern in self.source.include:
            for candidate in base.glob(pattern):
                if candidate.is_file() and self._is_asset_file(base, candidate):
                    found.add(candidate)

        listed: dict[str, list[Path]] = {}
        for path in sorted(found):
            relative = path.relative_to(base).as_posix()
            group_key = self._group_key_for(relative)
            if group_key is None:
                logger.debug("File does not match group_pattern, skipping", path=relative)
                continue
            listed.setdefault(group_key, []).append(path)
        return base, listed

    def _explicit(self, groups: dict[str, list[str]]) -> tuple[Path, dict[str, list[Path]]]:
        listed = {key: [Path(p).absolute() for p in paths] for key, paths in groups.items()}
        parents = [os.fspath(p.parent) for paths in listed.values() for p in paths]
        base = Path(os.path.commonpath(parents)) if parents else Path.cwd()
        return base, listed

    def _is_asset_file(self, base: Path, path: Path) -> bool:
        relative = path.relative_to(base)
        if any(part.startswith(".") for part in relative.parts):
            return False
        if is_sidecar(path, self.sidecar_suffix):
            return False
        resolved = path.resolve()
        return not any(resolved.is_relative_to(excluded) for excluded in self.exclude_dirs)

    def _group_key_for(self, relative: str) -> str | None:
        if self._group_re is not None:
            match = self._group_re.search(relative)
            return match.group(1) if match else None
        parts = PurePath(relative).parts
        return parts[0] if len(parts) > 1 else DEFAULT_GROUP_KEY
