# src/assetforge/cli_formatters.py
"""CLI event formatter factories for node execution output.

Each factory returns a dict mapping event types to handler callables,
suitable for subscribing to an EventBus.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import typer

from assetforge.contracts.events import (
    NodeRunSummary,
    PhaseCompleted,
    PhaseError,
    PhaseStarted,
)
from assetforge.core.events import EventBusProtocol


def _format_duration(seconds: float) -> str:
    return f"{seconds:.2f}s" if seconds < 60 else f"{seconds / 60:.1f}m"


def create_console_formatters() -> dict[type, Callable[..., None]]:
    """Create console formatters for human-readable CLI output."""

    def _format_phase_started(event: PhaseStarted) -> None:
        target_info = f" → {event.target}" if event.target else ""
        typer.echo(f"[{event.phase.value.upper()}] Starting{target_info}...")

    def _format_phase_completed(event: PhaseCompleted) -> None:
        typer.echo(f"[{event.phase.value.upper()}] ✓ Completed in {_format_duration(event.duration_seconds)}")

    def _format_phase_error(event: PhaseError) -> None:
        target_info = f" ({event.target})" if event.target else ""
        typer.echo(f"[{event.phase.value.upper()}] ✗ Error{target_info}: {event.error_message}", err=True)

    def _format_node_summary(event: NodeRunSummary) -> None:
        symbol = "✓" if event.exit_code == 0 else "✗"
        label = "Dry run" if event.phase.value == "setup" else "Run"
        generated_label = "planned" if event.phase.value == "setup" else "generated"
        typer.echo(
            f"\n{symbol} {label} {event.status.value.upper()}: "
            f"node {event.node_id} | "
            f"{event.groups:,} groups | "
            f"{event.generated:,} {generated_label} | "
            f"{event.reused:,} reused | "
            f"{event.pruned:,} pruned | "
            f"{event.duration_seconds:.2f}s total"
        )

    return {
        PhaseStarted: _format_phase_started,
        PhaseCompleted: _format_phase_completed,
        PhaseError: _format_phase_error,
        NodeRunSummary: _format_node_summary,
    }


def create_json_formatters() -> dict[type, Callable[..., None]]:
    """Create JSON formatters for structured CLI output (one object per line)."""

    def _format_phase_started_json(event: PhaseStarted) -> None:
        typer.echo(json.dumps({"event": "phase_started", "phase": event.phase.value, "target": event.target}))

    def _format_phase_completed_json(event: PhaseCompleted) -> None:
        typer.echo(json.dumps({"event": "phase_completed", "phase": event.phase.value, "duration_seconds": event.duration_seconds}))

    def _format_phase_error_json(event: PhaseError) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "phase_error",
                    "phase": event.phase.value,
                    "error": event.error_message,
                    "error_type": type(event.error).__name__,
                    "target": event.target,
                }
            ),
            err=True,
        )

    def _format_node_summary_json(event: NodeRunSummary) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "node_completed",
                    "node_id": event.node_id,
                    "phase": event.phase.value,
                    "status": event.status.value,
                    "groups": event.groups,
                    "generated": event.generated,
                    "reused": event.reused,
                    "pruned": event.pruned,
                    "duration_seconds": event.duration_seconds,
                    "exit_code": event.exit_code,
                }
            )
        )

    return {
        PhaseStarted: _format_phase_started_json,
        PhaseCompleted: _format_phase_completed_json,
        PhaseError: _format_phase_error_json,
        NodeRunSummary: _format_node_summary_json,
    }


def subscribe_formatters(
    event_bus: EventBusProtocol,
    formatters: dict[type, Callable[..., None]],
) -> None:
    """Subscribe all formatters to the event bus."""
    for event_type, handler in formatters.items():
        event_bus.subscribe(event_type, handler)
