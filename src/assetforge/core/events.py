"""Event bus for node observability.

A synchronous event bus carrying domain events (PhaseStarted, NodeRunSummary,
...) from the pipeline host to CLI formatters, keeping presentation out of
the node orchestrator.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class EventBusProtocol(Protocol):
    """Protocol satisfied by both EventBus and NullEventBus."""

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None: ...

    def emit(self, event: T) -> None: ...


class EventBus:
    """Synchronous event bus.

    Handlers run in subscription order on the emitting thread. Handler
    exceptions propagate to the emitter; formatters are our code, so a bug
    in one should crash rather than hide output.

    Example:
        bus = EventBus()
        bus.subscribe(PhaseStarted, lambda e: print(f"[{e.phase}] starting"))
        bus.emit(PhaseStarted(phase=HostPhase.IMPORT, target="Assets/Characters"))
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """Subscribe a handler to an exact event type (no subclass dispatch)."""
        self._subscribers.setdefault(event_type, []).append(handler)

    def emit(self, event: T) -> None:
        """Emit an event to all subscribers of its exact type.

        Events with no subscribers are ignored.
        """
        for handler in self._subscribers.get(type(event), []):
            handler(event)


class NullEventBus:
    """No-op event bus for library use where no CLI is present.

    Does NOT inherit from EventBus: subscribing to it is a no-op, and
    inheritance would hide that from a caller expecting callbacks.
    """

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        pass

    def emit(self, event: T) -> None:
        pass
