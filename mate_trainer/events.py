"""User interaction events and the synchronous event source.

Each event type has exactly one handler. Dispatch runs the handler to
completion and returns its result, so no two handlers ever overlap.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SquareInteracted:
    square: str


@dataclass(frozen=True)
class DragStarted:
    source: str
    piece: str


@dataclass(frozen=True)
class PieceDropped:
    source: str
    target: str


@dataclass(frozen=True)
class DragSettled:
    pass


@dataclass(frozen=True)
class HintRequested:
    pass


@dataclass(frozen=True)
class AdvanceRequested:
    pass


@dataclass(frozen=True)
class ResetRequested:
    pass


Handler = Callable[[Any], Any]


class EventSource:
    """Routes events to their registered handler, one at a time."""

    def __init__(self) -> None:
        self._handlers: dict[type, Handler] = {}
        self._dispatching = False

    def register(self, event_type: type, handler: Handler) -> None:
        """Register *handler* for *event_type*, replacing any previous one."""
        self._handlers[event_type] = handler

    def dispatch(self, event: object) -> Any:
        """Run the handler for *event* and return its result.

        Raises:
            TypeError: If no handler is registered for the event's type.
            RuntimeError: If called from inside another handler.
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"No handler registered for {type(event).__name__}")
        if self._dispatching:
            raise RuntimeError("Re-entrant dispatch while handling an event")

        self._dispatching = True
        try:
            return handler(event)
        finally:
            self._dispatching = False
