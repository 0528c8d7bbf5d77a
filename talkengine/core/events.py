"""
Typed event bus for dialog notifications.

Event types are Enum members and each carries one payload object, so
listeners never match on magic strings or dig through dicts.

Usage:
    @event_bus.subscribe(DialogEvent.LINE_STARTED)
    def on_line(event):
        print(event.payload.line.text)

    event_bus.publish(DialogEvent.DIALOG_ENDED, SessionEvent(agent="guard"))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class DialogEvent(Enum):
    """Events published by the dialog processor."""
    # Session
    DIALOG_STARTED = auto()
    DIALOG_ENDED = auto()

    # Flow
    NODE_ENTERED = auto()
    LINE_STARTED = auto()
    QUERY_STARTED = auto()
    FUNCTION_CALLED = auto()


@dataclass(frozen=True)
class Event:
    """
    A published event.

    Attributes:
        type: The event type (Enum member)
        payload: Event-specific data object
    """
    type: Enum
    payload: Any = None


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe messaging between the processor and its observers.

    Handlers run synchronously in subscription order. An exception in one
    handler is logged and the remaining handlers still run.
    """

    def __init__(self):
        self._handlers: dict[Enum, list[EventHandler]] = {}

    def subscribe(
        self,
        event_type: Enum,
        handler: Optional[EventHandler] = None,
    ) -> Any:
        """
        Subscribe to an event type.

        Can be called directly or used as a decorator.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)

        Returns:
            The handler, or a decorator when ``handler`` is omitted
        """
        if handler is None:
            def decorator(func: EventHandler) -> EventHandler:
                return self.subscribe(event_type, func)
            return decorator

        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
        return handler

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> bool:
        """Remove a handler. Returns False if it was not subscribed."""
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def publish(self, event_type: Enum, payload: Any = None) -> Event:
        """
        Publish an event to every handler of its type.

        Args:
            event_type: The event type
            payload: Event-specific data

        Returns:
            The dispatched event
        """
        event = Event(event_type, payload)
        # Snapshot: handlers may unsubscribe while being called
        for handler in list(self._handlers.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in event handler for {event_type}")
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Remove the handlers of one event type, or of all types."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def handler_count(self, event_type: Enum) -> int:
        return len(self._handlers.get(event_type, []))
