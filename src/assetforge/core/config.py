# src/assetforge/core/config.py
"""
Configuration schema and loading for AssetForge nodes.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from assetforge.contracts.enums import BuildTarget, OutputListing

# Node ids name cache directories, so they follow the same alphabet
_NODE_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"


class SourceSettings(BaseModel):
    """Where input assets come from and how they are grouped.

    Exactly one of ``path`` (scan mode) or ``groups`` (explicit mode) is set.

    Example YAML (scan mode):
        source:
          path: ./Assets/Characters
          group_pattern: "^([^/]+)/"   # group key = first directory
          include: ["**/*.png", "**/*.fbx"]

    Example YAML (explicit mode):
        source:
          groups:
            hero: [Assets/hero/body.fbx, Assets/hero/skin.png]
    """

    model_config = {"frozen": True}

    path: Path | None = Field(default=None, description="Directory scanned for source assets")
    groups: dict[str, list[str]] | None = Field(default=None, description="Explicit group key -> file paths")
    group_pattern: str | None = Field(
        default=None,
        description="Regex applied to the path under the source base; capture group 1 is the group key",
    )
    include: list[str] = Field(default_factory=lambda: ["**/*"], description="Glob patterns selected in scan mode")

    @field_validator("group_pattern")
    @classmethod
    def validate_group_pattern(cls, v: str | None) -> str | None:
        """Pattern must compile and capture the group key."""
        if v is None:
            return v
        try:
            compiled = re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid group_pattern: {e}") from e
        if compiled.groups < 1:
            raise ValueError("group_pattern must contain a capture group for the group key")
        return v

    @model_validator(mode="after")
    def validate_exactly_one_mode(self) -> "SourceSettings":
        if (self.path is None) == (self.groups is None):
            raise ValueError("source requires exactly one of 'path' or 'groups'")
        if self.groups is not None and self.group_pattern is not None:
            raise ValueError("group_pattern only applies to scan mode (source.path)")
        return self


class NodeSettings(BaseModel):
    """The prefab node being executed.

    Example YAML:
        node:
          id: character_prefabs
          name: Character Prefabs
          strategy: composite
          options:
            allowed_types: [model, texture]
          bundle_name: characters
    """

    model_config = {"frozen": True}

    id: str = Field(pattern=_NODE_ID_PATTERN, description="Stable node id, names the cache directory")
    name: str | None = Field(default=None, description="Display name (defaults to id)")
    strategy: str = Field(min_length=1, description="Registered build strategy plugin name")
    options: dict[str, Any] = Field(default_factory=dict, description="Strategy-specific options")
    bundle_name: str | None = Field(default=None, description="Bundle tag applied to generated artifacts")
    output_listing: OutputListing = Field(
        default=OutputListing.TRACKED,
        description="tracked: list allocator-recorded artifacts; scan: list the whole output directory",
    )
    connection: str = Field(default="output", description="Label of the outgoing connection")

    @property
    def display_name(self) -> str:
        return self.name or self.id


class CacheSettings(BaseModel):
    """Cache and state locations."""

    model_config = {"frozen": True}

    root: Path = Field(default=Path(".assetforge/cache"), description="Root of per-node cache directories")
    state_dir: Path = Field(default=Path(".assetforge/state"), description="Directory holding run ledgers")
    sidecar_suffix: str = Field(default=".meta", description="Suffix of artifact sidecar files")

    @field_validator("sidecar_suffix")
    @classmethod
    def validate_sidecar_suffix(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2 or "/" in v:
            raise ValueError(f"sidecar_suffix must look like '.meta', got {v!r}")
        return v


class AssetForgeSettings(BaseModel):
    """Top-level AssetForge configuration.

    This is the single source of truth for a node invocation.
    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    target: BuildTarget = Field(default=BuildTarget.STANDALONE, description="Target platform")
    source: SourceSettings = Field(description="Input asset source")
    node: NodeSettings = Field(description="Node to execute")
    cache: CacheSettings = Field(default_factory=CacheSettings, description="Cache and ledger locations")

    @model_validator(mode="after")
    def validate_cache_outside_source(self) -> "AssetForgeSettings":
        """Generated artifacts must never land inside the scanned source tree."""
        if self.source.path is not None:
            source = self.source.path.resolve()
            cache = self.cache.root.resolve()
            if cache == source or cache.is_relative_to(source):
                raise ValueError(f"cache.root {self.cache.root} must not be inside source.path {self.source.path}")
        return self


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Unset variables without a default are left as-is so validation reports them.
    """
    import os

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        default = match.group(2)
        return default if default is not None else match.group(0)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(replacer, value)
        if isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        if isinstance(value, list):
            return [_expand_value(item) for item in value]
        return value

    return {k: _expand_value(v) for k, v in config.items()}


def _resolve_relative_paths(config: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Anchor relative source and cache paths at the settings file's directory.

    A node must resolve to the same cache directory regardless of the
    working directory it was launched from; otherwise the ledger and the
    directory it describes drift apart.
    """

    def _anchor(value: Any) -> Any:
        if isinstance(value, str | Path) and not Path(value).is_absolute():
            return str(base_dir / value)
        return value

    result = dict(config)
    source = result.get("source")
    if isinstance(source, dict):
        source = dict(source)
        if "path" in source:
            source["path"] = _anchor(source["path"])
        if isinstance(source.get("groups"), dict):
            source["groups"] = {key: [_anchor(p) for p in paths] for key, paths in source["groups"].items()}
        result["source"] = source

    cache = result.get("cache")
    cache = dict(cache) if isinstance(cache, dict) else {}
    for key, default in (("root", ".assetforge/cache"), ("state_dir", ".assetforge/state")):
        cache[key] = _anchor(cache.get(key, default))
    result["cache"] = cache
    return result


def load_settings(config_path: Path) -> AssetForgeSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (ASSETFORGE_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: ASSETFORGE_NODE__BUNDLE_NAME for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated AssetForgeSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="ASSETFORGE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    raw_config = _expand_env_vars(raw_config)
    raw_config = _resolve_relative_paths(raw_config, config_path.resolve().parent)

    return AssetForgeSettings(**raw_config)


def resolve_config(settings: AssetForgeSettings) -> dict[str, Any]:
    """Convert validated settings to a JSON-safe dict (explicit + defaults)."""
    return settings.model_dump(mode="json")
