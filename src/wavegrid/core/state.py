"""
Lifecycle state machine for a WaveGrid engine.

States:
    CREATED: Constructed, no surface yet
    RUNNING: Attached to a surface, frames being scheduled
    STOPPED: Attached to a surface, frame loop paused
    DESTROYED: Listeners removed, surface released; terminal
"""

from enum import Enum, auto
from typing import Callable
import logging

logger = logging.getLogger(__name__)


class State(Enum):
    """Engine lifecycle states."""
    CREATED = auto()
    RUNNING = auto()
    STOPPED = auto()
    DESTROYED = auto()


class StateMachine:
    """
    Tracks the engine lifecycle and rejects invalid transitions.

    An invalid transition is refused with a warning rather than raised,
    so lifecycle misuse degrades to a no-op.
    """

    VALID_TRANSITIONS: list[tuple[State, State]] = [
        (State.CREATED, State.RUNNING),
        (State.CREATED, State.STOPPED),  # Attached without auto-start
        (State.CREATED, State.DESTROYED),

        (State.RUNNING, State.STOPPED),
        (State.RUNNING, State.DESTROYED),

        (State.STOPPED, State.RUNNING),
        (State.STOPPED, State.DESTROYED),
    ]

    def __init__(self, initial_state: State = State.CREATED) -> None:
        self._state = initial_state
        self._listeners: list[Callable[[State, State], None]] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)

    @property
    def state(self) -> State:
        """Get current state."""
        return self._state

    @property
    def is_attached(self) -> bool:
        """True while the engine holds a surface."""
        return self._state in (State.RUNNING, State.STOPPED)

    @property
    def is_destroyed(self) -> bool:
        return self._state == State.DESTROYED

    def can_transition(self, to_state: State) -> bool:
        """Check if transition to given state is valid."""
        return (self._state, to_state) in self._valid_transitions

    def transition(self, to_state: State) -> bool:
        """
        Attempt to transition to a new state.

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_state):
            logger.warning(
                f"Invalid transition: {self._state.name} -> {to_state.name}"
            )
            return False

        old_state = self._state
        self._state = to_state
        logger.debug(f"State transition: {old_state.name} -> {to_state.name}")

        for listener in self._listeners:
            try:
                listener(old_state, to_state)
            except Exception as e:
                logger.error(f"Error in state listener: {e}")

        return True

    def add_listener(self, callback: Callable[[State, State], None]) -> None:
        """Add a state change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[State, State], None]) -> None:
        """Remove a state change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)
