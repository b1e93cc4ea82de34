# src/assetforge/plugins/config_base.py
"""Base class for typed strategy options.

Strategies parse node.options through a PluginConfig subclass to get:
- Strict validation (unknown option keys are rejected)
- A factory method with a clear error message naming the config class

Example usage:
    class CompositeConfig(PluginConfig):
        allowed_types: list[str] | None = None

    cfg = CompositeConfig.from_dict(config)
"""

from typing import Any, Self

from pydantic import BaseModel, ValidationError


class PluginConfigError(Exception):
    """Raised when strategy options are invalid."""

    pass


class PluginConfig(BaseModel):
    """Base class for typed strategy options."""

    model_config = {"extra": "forbid", "frozen": True}

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create config from dict with clear error on validation failure.

        Args:
            config: Dictionary of option values.

        Returns:
            Validated configuration instance.

        Raises:
            PluginConfigError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: config must be a dict, got {type(config).__name__}.")

        try:
            return cls.model_validate(config)
        except ValidationError as e:
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e
