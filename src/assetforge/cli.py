# src/assetforge/cli.py
"""AssetForge Command Line Interface.

Entry point for the assetforge CLI tool.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from assetforge import __version__
from assetforge.contracts import ConnectionInfo, GroupedAssets, NodeInfo
from assetforge.core.config import AssetForgeSettings, load_settings

if TYPE_CHECKING:
    from assetforge.plugins.manager import PluginManager

__all__ = [
    "app",
    "load_settings",  # Re-exported from config for convenience
]

# Module-level singleton for plugin manager
_plugin_manager_cache: PluginManager | None = None


def _get_plugin_manager() -> PluginManager:
    """Get initialized plugin manager (singleton).

    Returns:
        PluginManager with all built-in strategies registered
    """
    global _plugin_manager_cache

    from assetforge.plugins.manager import PluginManager

    if _plugin_manager_cache is None:
        manager = PluginManager()
        manager.register_builtin_plugins()
        _plugin_manager_cache = manager
    return _plugin_manager_cache


app = typer.Typer(
    name="assetforge",
    help="AssetForge: Incremental prefab builds with a reconciled cache.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"assetforge version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # Existence is checked by _load_dotenv for a better message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """AssetForge: Incremental prefab builds with a reconciled cache."""
    from assetforge.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_settings_or_exit(settings: str) -> AssetForgeSettings:
    settings_path = Path(settings).expanduser()
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


class ManifestWriter:
    """Downstream consumer that writes the node's output manifest as JSON."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def __call__(
        self,
        node: NodeInfo,
        connection: ConnectionInfo,
        output_groups: GroupedAssets,
        used_cache: list[str],
    ) -> None:
        manifest = {
            "node_id": node.node_id,
            "node_name": node.name,
            "connection": connection.connection_id,
            "used_cache": sorted(used_cache),
            "groups": {key: [asset.to_dict() for asset in assets] for key, assets in output_groups.items()},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")


@app.command()
def run(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Plan the node (setup phase) without building anything.",
    ),
    execute: bool = typer.Option(
        False,
        "--execute",
        "-x",
        help="Actually build and prune the cache (required for safety).",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Regenerate every artifact, ignoring the cache.",
    ),
    manifest: Path | None = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Write the output manifest (groups and reused cache) to this JSON file.",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Run the configured prefab node.

    Requires --execute flag to actually build (safety feature).
    Use --dry-run to plan without writing anything.
    """
    config = _load_settings_or_exit(settings)

    if output_format == "json":
        # stdout carries only event records in JSON mode
        from assetforge.core.logging import configure_logging

        configure_logging(json_output=True, level=logging.getLevelName(logging.getLogger().level), stream=sys.stderr)

    if not dry_run and not execute:
        if output_format == "console":
            typer.echo("Node configuration valid.")
            typer.echo(f"  Node: {config.node.display_name} ({config.node.strategy})")
            typer.echo("")
            typer.echo("To execute, add --execute (or -x) flag:", err=True)
            typer.echo(f"  assetforge run -s {settings} --execute", err=True)
        raise typer.Exit(1)

    try:
        _execute_node(config, dry_run=dry_run, force=force, manifest=manifest, output_format=output_format)
    except Exception as e:
        if output_format == "json":
            typer.echo(json.dumps({"event": "error", "error": str(e), "error_type": type(e).__name__}), err=True)
        else:
            typer.echo(f"Error during node execution: {e}", err=True)
        raise typer.Exit(1) from None


def _execute_node(
    config: AssetForgeSettings,
    *,
    dry_run: bool,
    force: bool,
    manifest: Path | None,
    output_format: Literal["console", "json"],
) -> None:
    from assetforge.cli_formatters import create_console_formatters, create_json_formatters, subscribe_formatters
    from assetforge.core.events import EventBus
    from assetforge.engine.pipeline import NodePipeline

    event_bus = EventBus()
    formatters = create_json_formatters() if output_format == "json" else create_console_formatters()
    subscribe_formatters(event_bus, formatters)

    pipeline = NodePipeline(config, plugin_manager=_get_plugin_manager(), event_bus=event_bus)
    output = ManifestWriter(manifest) if manifest is not None else None
    result = pipeline.execute(dry_run=dry_run, force=force, output=output)

    if output_format == "console" and result.forced and not force:
        typer.echo("  (strategy configuration changed: all artifacts regenerated)")
    if output_format == "console" and manifest is not None:
        typer.echo(f"  Manifest written to {manifest}")


def _format_validation_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted validation error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]❌ {title}[/]",
        border_style="red",
        padding=(0, 1),
    )
    console.print(panel)


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Validate node configuration without running."""
    from assetforge.plugins.config_base import PluginConfigError

    settings_path = Path(settings).expanduser()

    try:
        config = load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_validation_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {settings_path.name}",
            details=[str(e.problem)] if hasattr(e, "problem") else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            details.append(f"{loc}: {error['msg']}")
        _format_validation_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(1) from None

    manager = _get_plugin_manager()
    try:
        manager.create_strategy(config.node.strategy, config.node.options)
    except PluginConfigError as e:
        _format_validation_error(
            title="Strategy Options Error",
            message=str(e),
            hint="Check node.options match the strategy's requirements.",
        )
        raise typer.Exit(1) from None
    except ValueError as e:
        _format_validation_error(
            title="Unknown Strategy",
            message=str(e),
            hint="Run 'assetforge plugins list' to see registered strategies.",
        )
        raise typer.Exit(1) from None

    typer.echo("✅ Node configuration valid!")
    typer.echo(f"  Node: {config.node.display_name} ({config.node.id})")
    typer.echo(f"  Strategy: {config.node.strategy}")
    typer.echo(f"  Target: {config.target.value}")
    typer.echo(f"  Source: {config.source.path if config.source.path is not None else f'{len(config.source.groups or {})} explicit groups'}")
    typer.echo(f"  Cache: {config.cache.root}")


# Plugins subcommand group
plugins_app = typer.Typer(help="Plugin management commands.")
app.add_typer(plugins_app, name="plugins")


@dataclass(frozen=True)
class PluginInfo:
    """Metadata for a registered strategy.

    Attributes:
        name: The strategy identifier used in node.strategy.
        version: Plugin version.
        description: First docstring line of the strategy class.
    """

    name: str
    version: str
    description: str


def _build_plugin_registry() -> list[PluginInfo]:
    from assetforge.plugins.discovery import get_plugin_description

    manager = _get_plugin_manager()
    return [PluginInfo(name=cls.name, version=cls.plugin_version, description=get_plugin_description(cls)) for cls in manager.get_strategies()]


@plugins_app.command("list")
def plugins_list() -> None:
    """List available build strategies."""
    registry = _build_plugin_registry()

    typer.echo("\nSTRATEGIES:")
    if not registry:
        typer.echo("  (none available)")
    for plugin in registry:
        typer.echo(f"  {plugin.name:20} {plugin.version:8} - {plugin.description}")

    typer.echo()  # Final newline


if __name__ == "__main__":
    app()
