"""Shared pytest fixtures for the wavegrid test suite.

Time is driven by hand through ``ManualScheduler`` so frame and debounce
tests are deterministic and need no event loop or display.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable

import pytest

from wavegrid.animation.loop import FrameScheduler
from wavegrid.config.settings import EngineConfig
from wavegrid.core.events import EventBus
from wavegrid.graphics.surface import RecordingSurface
from wavegrid.noise.simplex import ZeroNoise


class ManualScheduler(FrameScheduler):
    """Frame scheduler whose clock only moves when a test says so."""

    def __init__(self) -> None:
        self.now = 0.0
        self._ids = itertools.count(1)
        self.frames: dict[int, Callable[[float], None]] = {}
        self.timers: dict[int, tuple[float, Callable[[], None]]] = {}
        self.frame_requests = 0

    def request_frame(self, callback: Callable[[float], None]) -> Any:
        handle = next(self._ids)
        self.frames[handle] = callback
        self.frame_requests += 1
        return handle

    def cancel_frame(self, handle: Any) -> None:
        self.frames.pop(handle, None)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Any:
        handle = next(self._ids)
        self.timers[handle] = (self.now + delay_ms, callback)
        return handle

    def cancel_timer(self, handle: Any) -> None:
        self.timers.pop(handle, None)

    def run_frame(self, timestamp: float | None = None) -> int:
        """Deliver every pending frame callback at ``timestamp``."""
        if timestamp is not None:
            self.now = timestamp
        pending, self.frames = self.frames, {}
        for callback in pending.values():
            callback(self.now)
        return len(pending)

    def advance(self, ms: float) -> None:
        """Move the clock forward and fire every timer that came due."""
        self.now += ms
        due = sorted(
            (when, handle) for handle, (when, _) in self.timers.items() if when <= self.now
        )
        for _, handle in due:
            entry = self.timers.pop(handle, None)
            if entry is not None:
                entry[1]()


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def surface() -> RecordingSurface:
    return RecordingSurface(800, 600)


@pytest.fixture()
def zero_noise() -> ZeroNoise:
    return ZeroNoise()


@pytest.fixture()
def flat_config() -> EngineConfig:
    """Small uncentred grid with no padding."""
    return EngineConfig(spacing_x=10.0, spacing_y=10.0, pad=0, centered=False)
