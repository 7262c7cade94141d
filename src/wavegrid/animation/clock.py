"""Accumulated animation time."""

import math


class AnimationClock:
    """Monotonic animation time, advanced once per frame.

    ``time`` is in noise time units: each frame adds
    ``elapsed_ms * time_scale`` where the time scale already includes
    any audio speed-up.
    """

    def __init__(self):
        self.time = 0.0
        self.elapsed_ms = 0.0
        self.frame = 0

    def advance(self, elapsed_ms: float, time_scale: float) -> float:
        """Advance by one frame and return the new time.

        Negative or non-finite inputs advance nothing.
        """
        step = elapsed_ms * time_scale
        if math.isfinite(step) and step > 0:
            self.time += step
        if math.isfinite(elapsed_ms) and elapsed_ms > 0:
            self.elapsed_ms += elapsed_ms
        self.frame += 1
        return self.time

    def reset(self) -> None:
        self.time = 0.0
        self.elapsed_ms = 0.0
        self.frame = 0
