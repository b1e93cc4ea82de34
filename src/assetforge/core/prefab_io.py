# src/assetforge/core/prefab_io.py
"""Prefab artifact serialization.

The build allocator never writes artifacts itself; it delegates the
regeneration side effect to an ArtifactWriter. The default writer stores a
PrefabObject as a YAML document and keeps a sidecar next to it.

File layout (``*.pfb``):

    format_version: 1
    root:
      name: hero
      components: [...]
      children: [...]
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from assetforge.contracts.prefab import PrefabObject
from assetforge.core.sidecar import DEFAULT_SIDECAR_SUFFIX, ensure_sidecar

PREFAB_FORMAT_VERSION = 1


class PrefabFormatError(Exception):
    """Raised when a prefab file does not match the expected layout."""


@runtime_checkable
class ArtifactWriter(Protocol):
    """Performs the regeneration side effect for one artifact."""

    def write(self, target_object: Any, path: Path) -> str:
        """Write target_object to path.

        Returns:
            Identity of the written artifact (sidecar guid)
        """
        ...


class YamlPrefabWriter:
    """Writes PrefabObjects as YAML documents with a sidecar.

    Args:
        bundle_name: Bundle to tag every written artifact with, or None
        sidecar_suffix: Suffix of the sidecar file
    """

    def __init__(self, *, bundle_name: str | None = None, sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX) -> None:
        self.bundle_name = bundle_name
        self.sidecar_suffix = sidecar_suffix

    def write(self, target_object: Any, path: Path) -> str:
        if not isinstance(target_object, PrefabObject):
            raise TypeError(f"YamlPrefabWriter can only write PrefabObject instances, got {type(target_object).__name__}")

        document = {
            "format_version": PREFAB_FORMAT_VERSION,
            "root": target_object.to_dict(),
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        return ensure_sidecar(path, bundle_name=self.bundle_name, suffix=self.sidecar_suffix)


def read_prefab(path: Path) -> dict[str, Any]:
    """Load the root object of a prefab file.

    Raises:
        PrefabFormatError: If the document is not a supported prefab
    """
    document = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(document, dict) or "root" not in document:
        raise PrefabFormatError(f"{path} is not a prefab document")
    version = document.get("format_version")
    if version != PREFAB_FORMAT_VERSION:
        raise PrefabFormatError(f"{path} has unsupported format_version {version!r} (expected {PREFAB_FORMAT_VERSION})")
    root: dict[str, Any] = document["root"]
    return root
