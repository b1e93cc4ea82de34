# src/assetforge/core/__init__.py
"""Core infrastructure: Canonical, Configuration, Cache directories, Ledgers, Sidecars, Logging."""

from assetforge.core.cache_dir import (
    CacheDirectoryAllocator,
    delete_file_then_folder_if_empty,
    list_artifact_files,
    resolve_output_path,
)
from assetforge.core.canonical import (
    CANONICAL_VERSION,
    canonical_json,
    stable_hash,
)
from assetforge.core.config import (
    AssetForgeSettings,
    CacheSettings,
    NodeSettings,
    SourceSettings,
    load_settings,
)
from assetforge.core.events import (
    EventBus,
    EventBusProtocol,
    NullEventBus,
)
from assetforge.core.ledger import CacheLedger, ImportLedger, LedgerError, LedgerStore
from assetforge.core.logging import (
    configure_logging,
    get_logger,
)
from assetforge.core.prefab_io import ArtifactWriter, PrefabFormatError, YamlPrefabWriter, read_prefab

__all__ = [
    "CANONICAL_VERSION",
    "ArtifactWriter",
    "AssetForgeSettings",
    "CacheDirectoryAllocator",
    "CacheLedger",
    "CacheSettings",
    "EventBus",
    "EventBusProtocol",
    "ImportLedger",
    "LedgerError",
    "LedgerStore",
    "NodeSettings",
    "NullEventBus",
    "PrefabFormatError",
    "SourceSettings",
    "YamlPrefabWriter",
    "canonical_json",
    "configure_logging",
    "delete_file_then_folder_if_empty",
    "get_logger",
    "list_artifact_files",
    "load_settings",
    "read_prefab",
    "resolve_output_path",
    "stable_hash",
]
