"""Animation timing for WAVEGRID."""

from wavegrid.animation.clock import AnimationClock
from wavegrid.animation.loop import (
    AnimationLoop,
    AsyncioFrameScheduler,
    Debouncer,
    FrameScheduler,
)

__all__ = [
    "AnimationClock",
    "AnimationLoop",
    "AsyncioFrameScheduler",
    "Debouncer",
    "FrameScheduler",
]
