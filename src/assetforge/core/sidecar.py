# src/assetforge/core/sidecar.py
"""Sidecar metadata files.

Every generated artifact may carry a YAML sidecar at ``<artifact><suffix>``
(``.meta`` by default) holding its stable guid and, optionally, the name of
the bundle it is distributed in. Sidecars have no lifecycle of their own:
they are created with their primary artifact and deleted after it.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any

import yaml

DEFAULT_SIDECAR_SUFFIX = ".meta"

GUID_KEY = "guid"
BUNDLE_KEY = "asset_bundle_name"


class SidecarError(Exception):
    """Raised when a sidecar exists but is not a YAML mapping."""


def sidecar_path(path: Path, suffix: str = DEFAULT_SIDECAR_SUFFIX) -> Path:
    """Return the sidecar location for a primary artifact."""
    return path.with_name(path.name + suffix)


def is_sidecar(path: str | Path, suffix: str = DEFAULT_SIDECAR_SUFFIX) -> bool:
    """Whether path names a sidecar rather than a primary artifact."""
    return str(path).endswith(suffix)


def read_sidecar(path: Path, suffix: str = DEFAULT_SIDECAR_SUFFIX) -> dict[str, Any]:
    """Read the sidecar of a primary artifact.

    Returns:
        Sidecar mapping, or an empty dict when the artifact has no sidecar.

    Raises:
        SidecarError: If the sidecar is not a YAML mapping
    """
    meta = sidecar_path(path, suffix)
    if not meta.exists():
        return {}
    data = yaml.safe_load(meta.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SidecarError(f"Sidecar {meta} must contain a mapping, got {type(data).__name__}")
    return data


def write_sidecar(path: Path, data: dict[str, Any], suffix: str = DEFAULT_SIDECAR_SUFFIX) -> Path:
    """Write the sidecar of a primary artifact and return its path."""
    meta = sidecar_path(path, suffix)
    meta.write_text(yaml.safe_dump(data, sort_keys=True), encoding="utf-8")
    return meta


def ensure_sidecar(path: Path, *, bundle_name: str | None = None, suffix: str = DEFAULT_SIDECAR_SUFFIX) -> str:
    """Create or refresh a sidecar, preserving an existing guid.

    Regenerating an artifact must not change its identity, so a guid that
    is already on disk is kept. The bundle tag is replaced by bundle_name,
    or removed when bundle_name is None.

    Returns:
        The artifact's guid.
    """
    data = read_sidecar(path, suffix)
    guid = data.get(GUID_KEY) or uuid.uuid4().hex
    data[GUID_KEY] = guid
    if bundle_name:
        data[BUNDLE_KEY] = bundle_name
    else:
        data.pop(BUNDLE_KEY, None)
    write_sidecar(path, data, suffix)
    return str(guid)


def bundle_tag(path: Path, suffix: str = DEFAULT_SIDECAR_SUFFIX) -> str | None:
    """Return the bundle an artifact is tagged with, if any."""
    value = read_sidecar(path, suffix).get(BUNDLE_KEY)
    return str(value) if value else None


def strip_bundle_tag(path: Path, suffix: str = DEFAULT_SIDECAR_SUFFIX) -> bool:
    """Remove the bundle tag from an artifact's sidecar.

    Returns:
        True if a tag was removed, False if the artifact had none.
    """
    data = read_sidecar(path, suffix)
    if not data.get(BUNDLE_KEY):
        return False
    del data[BUNDLE_KEY]
    write_sidecar(path, data, suffix)
    return True
