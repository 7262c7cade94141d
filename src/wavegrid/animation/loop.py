"""Frame scheduling for the animation engine.

The host owns the display refresh; the loop asks it for exactly one
callback per frame and re-requests explicitly after every frame. Resize
bursts are collapsed by a Debouncer outside the frame pass.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional
import asyncio
import logging
import math
import time

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameScheduler(ABC):
    """Host display-refresh and timer services.

    Timestamps and delays are in milliseconds.
    """

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> Any:
        """Call ``callback(timestamp_ms)`` once on the next frame. Returns a handle."""
        ...

    @abstractmethod
    def cancel_frame(self, handle: Any) -> None:
        """Cancel a pending frame request."""
        ...

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Any:
        """Call ``callback()`` once after ``delay_ms``. Returns a handle."""
        ...

    @abstractmethod
    def cancel_timer(self, handle: Any) -> None:
        """Cancel a pending timer."""
        ...


class AsyncioFrameScheduler(FrameScheduler):
    """Frame scheduler on an asyncio event loop, paced to a target fps.

    Args:
        fps: Target frame rate
        loop: Event loop; the running loop if None
    """

    def __init__(self, fps: int = 60, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.fps = max(1, fps)
        self._loop = loop
        self._next_due = 0.0

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @staticmethod
    def now_ms() -> float:
        return time.monotonic() * 1000.0

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        interval = 1000.0 / self.fps
        now = self.now_ms()
        # Hold a steady cadence, but never queue frames to catch up
        self._next_due = max(now, self._next_due + interval)
        delay = (self._next_due - now) / 1000.0
        return self.loop.call_later(delay, lambda: callback(self.now_ms()))

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_ms) / 1000.0, callback)

    def cancel_timer(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class Debouncer:
    """Collapses a burst of calls into one, after a quiet period.

    Only the arguments of the last call in a burst are delivered.

    Args:
        scheduler: Timer provider
        delay_ms: Quiescence window
        callback: Called with the last call's arguments
    """

    def __init__(self, scheduler: FrameScheduler, delay_ms: float, callback: Callable[..., None]):
        self._scheduler = scheduler
        self.delay_ms = delay_ms
        self._callback = callback
        self._handle: Any = None
        self._args: tuple = ()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any) -> None:
        self._args = args
        if self._handle is not None:
            self._scheduler.cancel_timer(self._handle)
        self._handle = self._scheduler.call_later(self.delay_ms, self._fire)

    def _fire(self) -> None:
        self._handle = None
        args, self._args = self._args, ()
        self._callback(*args)

    def flush(self) -> None:
        """Deliver a pending call now."""
        if self._handle is not None:
            self._scheduler.cancel_timer(self._handle)
            self._fire()

    def cancel(self) -> None:
        """Drop a pending call."""
        if self._handle is not None:
            self._scheduler.cancel_timer(self._handle)
            self._handle = None
            self._args = ()


class AnimationLoop:
    """Drives one frame callback per display refresh.

    The first invocation after ``start()`` only records the timestamp and
    runs the frame with zero elapsed time. Later invocations pass the time
    since the previous one, clamped to ``max_frame_ms`` so a suspended
    host does not produce one giant step.

    Args:
        scheduler: Host frame scheduler
        frame: Called with elapsed milliseconds each frame
        max_frame_ms: Upper bound for a single frame's elapsed time
    """

    def __init__(self, scheduler: FrameScheduler, frame: Callable[[float], None], max_frame_ms: float = 100.0):
        self._scheduler = scheduler
        self._frame = frame
        self.max_frame_ms = max_frame_ms
        self._running = False
        self._handle: Any = None
        self._last_timestamp: Optional[float] = None
        self.frame_count = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def has_pending_frame(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """Start the loop. No-op if already running."""
        if self._running:
            logger.debug("Animation already running, skipping start()")
            return
        self._running = True
        self._last_timestamp = None
        self._schedule()
        logger.info("Animation loop started")

    def stop(self) -> None:
        """Stop the loop and cancel any pending frame."""
        was_running = self._running
        self._running = False
        if self._handle is not None:
            self._scheduler.cancel_frame(self._handle)
            self._handle = None
        if was_running:
            logger.info("Animation loop stopped")

    def _schedule(self) -> None:
        self._handle = self._scheduler.request_frame(self._on_frame)

    def _on_frame(self, timestamp: float) -> None:
        self._handle = None
        if not self._running:
            return

        if self._last_timestamp is None or not math.isfinite(timestamp):
            elapsed = 0.0
        else:
            elapsed = min(self.max_frame_ms, max(0.0, timestamp - self._last_timestamp))
        if math.isfinite(timestamp):
            self._last_timestamp = timestamp

        try:
            self._frame(elapsed)
        except Exception:
            logger.exception("Frame failed, stopping animation loop")
            self.stop()
            raise

        self.frame_count += 1
        if self._running and self._handle is None:
            self._schedule()
