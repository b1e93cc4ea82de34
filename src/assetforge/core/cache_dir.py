# src/assetforge/core/cache_dir.py
"""Node cache directories.

Each (node, target) pair owns one directory under the cache root:

    cache_root/<node_id>/<target>/...

Only the node run that owns a directory may write to or prune it. The
helpers here never decide what is stale; they only allocate, list and
delete.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from assetforge.contracts.enums import BuildTarget
from assetforge.contracts.node import NodeInfo
from assetforge.core.sidecar import DEFAULT_SIDECAR_SUFFIX, is_sidecar

# Node ids become directory names - restrict them to a portable alphabet
_NODE_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class CacheDirectoryAllocator:
    """Maps (target, node) to the node's dedicated cache directory."""

    def __init__(self, cache_root: Path) -> None:
        self.cache_root = cache_root

    def path_for(self, target: BuildTarget, node: NodeInfo) -> Path:
        """Return the directory without creating it.

        Raises:
            ValueError: If the node id is not usable as a directory name
        """
        if not _NODE_ID_PATTERN.match(node.node_id) or node.node_id in (".", ".."):
            raise ValueError(f"Node id {node.node_id!r} cannot be used as a cache directory name")
        return self.cache_root / node.node_id / target.value

    def ensure(self, target: BuildTarget, node: NodeInfo) -> Path:
        """Return the directory, creating it (and parents) if needed."""
        path = self.path_for(target, node)
        path.mkdir(parents=True, exist_ok=True)
        return path


def resolve_output_path(output_dir: Path, name: str) -> Path:
    """Join an artifact name onto the output directory.

    Names may contain forward-slash subdirectories ("hero/body.pfb") but must
    stay inside output_dir.

    Raises:
        ValueError: If name is empty, absolute, or escapes output_dir
    """
    if not name or name.strip() != name:
        raise ValueError(f"Invalid artifact name {name!r}")
    candidate = Path(name)
    if candidate.is_absolute() or ".." in candidate.parts:
        raise ValueError(f"Artifact name {name!r} must be a relative path inside the output directory")
    return output_dir / candidate


def list_artifact_files(directory: Path, sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX) -> list[str]:
    """List primary artifact files under directory, recursively and sorted.

    Sidecars and dotfiles are skipped. A missing directory lists as empty.
    """
    if not directory.is_dir():
        return []
    found: list[str] = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        for file_name in sorted(files):
            if file_name.startswith(".") or is_sidecar(file_name, sidecar_suffix):
                continue
            found.append(os.path.join(root, file_name))
    return sorted(found)


def delete_file_then_folder_if_empty(path: Path, stop_at: Path) -> list[Path]:
    """Delete a file, then each parent directory that became empty.

    Climbing stops at stop_at, which is never removed.

    Returns:
        Directories removed, innermost first.
    """
    if path.exists():
        path.unlink()
    removed: list[Path] = []
    stop = stop_at.resolve()
    parent = path.parent
    while True:
        resolved = parent.resolve()
        if resolved == stop or not resolved.is_relative_to(stop):
            break
        if not parent.is_dir() or any(parent.iterdir()):
            break
        parent.rmdir()
        removed.append(parent)
        parent = parent.parent
    return removed
