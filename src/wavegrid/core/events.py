"""
Event bus system for WAVEGRID.

The host feeds pointer, resize and theme notifications through the bus;
the engine subscribes on init and unsubscribes on destroy. Dispatch is
synchronous on the caller's thread, so a handler has finished mutating
engine state before the next frame runs.
"""

from dataclasses import dataclass, field
from typing import Any, Callable
from enum import Enum, auto
import logging
import time
from collections import defaultdict

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Built-in event types."""
    # Pointer events
    POINTER_MOVE = auto()
    POINTER_ENTER = auto()
    POINTER_LEAVE = auto()

    # Viewport events
    RESIZE = auto()

    # Appearance events
    THEME_CHANGED = auto()
    CONFIG_CHANGED = auto()

    # System events
    TICK = auto()  # Frame tick


@dataclass(frozen=True)
class Viewport:
    """Surface dimensions in logical pixels plus the device pixel ratio."""
    width: float
    height: float
    device_pixel_ratio: float = 1.0


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: Event type (EventType enum or custom string)
        data: Event payload
        source: Component that emitted the event
        timestamp: When event was created (monotonic seconds)
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.monotonic)


Handler = Callable[[Event], None]


class EventBus:
    """
    Central event bus for component communication.

    Handlers are called synchronously in subscription order. An exception
    in one handler is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType | str, list[Handler]] = defaultdict(list)
        self._global_handlers: list[Handler] = []
        self._event_history: list[Event] = []
        self._history_limit = 100

    def subscribe(
        self,
        event_type: EventType | str,
        handler: Handler
    ) -> Callable[[], None]:
        """
        Subscribe to an event type.

        Args:
            event_type: Type of event to listen for
            handler: Callback function

        Returns:
            Unsubscribe function
        """
        self._handlers[event_type].append(handler)
        logger.debug(f"Handler subscribed to {event_type}")

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Handler unsubscribed from {event_type}")

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """
        Subscribe to all events.

        Returns:
            Unsubscribe function
        """
        self._global_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._global_handlers:
                self._global_handlers.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> None:
        """Emit an event to every matching handler."""
        self._add_to_history(event)
        handlers = list(self._handlers.get(event.type, [])) + list(self._global_handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.type}: {e}")

    def handler_count(self, event_type: EventType | str | None = None) -> int:
        """Number of handlers for a type, or of all handlers if None."""
        if event_type is None:
            return sum(len(h) for h in self._handlers.values()) + len(self._global_handlers)
        return len(self._handlers.get(event_type, []))

    def _add_to_history(self, event: Event) -> None:
        """Add event to history, maintaining limit."""
        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)

    def get_history(
        self,
        event_type: EventType | str | None = None,
        limit: int = 10
    ) -> list[Event]:
        """Get recent events from history."""
        history = self._event_history
        if event_type is not None:
            history = [e for e in history if e.type == event_type]
        return history[-limit:]

    def clear_history(self) -> None:
        """Clear event history."""
        self._event_history.clear()


# Convenience functions for creating common events
def pointer_move_event(x: float, y: float, source: str = "pointer") -> Event:
    """Create a pointer move event."""
    return Event(EventType.POINTER_MOVE, data={"x": x, "y": y}, source=source)


def pointer_enter_event(
    x: float | None = None, y: float | None = None, source: str = "pointer"
) -> Event:
    """Create a pointer enter event."""
    return Event(EventType.POINTER_ENTER, data={"x": x, "y": y}, source=source)


def pointer_leave_event(source: str = "pointer") -> Event:
    """Create a pointer leave event."""
    return Event(EventType.POINTER_LEAVE, source=source)


def resize_event(viewport: Viewport, source: str = "window") -> Event:
    """Create a viewport resize event."""
    return Event(EventType.RESIZE, data={"viewport": viewport}, source=source)


def theme_event(name: str, source: str = "ui") -> Event:
    """Create a theme selection event."""
    return Event(EventType.THEME_CHANGED, data={"name": name}, source=source)


def tick_event(delta: float, frame: int) -> Event:
    """Create a frame tick event."""
    return Event(EventType.TICK, data={"delta": delta, "frame": frame})


def config_event(config: Any) -> Event:
    """Create a config swap event carrying the new EngineConfig."""
    return Event(EventType.CONFIG_CHANGED, data={"config": config}, source="engine")
