"""Core framework components for WAVEGRID."""

from .state import State, StateMachine
from .events import EventBus, Event, EventType, Viewport

__all__ = ["State", "StateMachine", "EventBus", "Event", "EventType", "Viewport"]
