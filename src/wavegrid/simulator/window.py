"""
Simulator window using pygame.

Hosts one WaveGrid in a resizable desktop window and forwards pointer,
resize and theme input to it through the event bus.
"""

import asyncio
import logging
from dataclasses import dataclass

import pygame

from ..core.events import (
    Event,
    EventBus,
    EventType,
    Viewport,
    pointer_enter_event,
    pointer_leave_event,
    pointer_move_event,
    resize_event,
    theme_event,
)
from ..engine.wave_grid import WaveGrid
from .surface import PygameSurface

logger = logging.getLogger(__name__)

# Seconds between input polls; frames are paced by the scheduler
EVENT_POLL_INTERVAL = 0.004

THEME_KEYS = {
    pygame.K_1: "default",
    pygame.K_2: "classicfm",
    pygame.K_3: "reprezent",
    pygame.K_4: "no-selection",
}


@dataclass
class WindowConfig:
    """Simulator window configuration."""
    width: int = 1280
    height: int = 720
    title: str = "WAVEGRID Simulator"
    fullscreen: bool = False


class SimulatorWindow:
    """
    Desktop window driving a WaveGrid.

    Keyboard Mapping:
        1-4: Select theme (default, classicfm, reprezent, no-selection)
        SPACE: Pause / resume animation
        S: Capture screenshot
        Q / ESC: Exit simulator
    """

    def __init__(
        self,
        engine: WaveGrid,
        config: WindowConfig | None = None,
        event_bus: EventBus | None = None
    ) -> None:
        self.config = config or WindowConfig()
        self.engine = engine
        self.event_bus = event_bus or engine.events

        self._screen: pygame.Surface | None = None
        self._surface: PygameSurface | None = None
        self._running = False
        self._frame_count = 0

        logger.info("SimulatorWindow created")

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)

        self._screen = pygame.display.set_mode(
            (self.config.width, self.config.height),
            self._display_flags()
        )
        logger.info(f"Pygame initialized: {self.config.width}x{self.config.height}")

    def _display_flags(self) -> int:
        if self.config.fullscreen:
            return pygame.FULLSCREEN | pygame.DOUBLEBUF
        return pygame.RESIZABLE | pygame.DOUBLEBUF

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)

            elif event.type == pygame.MOUSEMOTION:
                x, y = event.pos
                self.event_bus.emit(pointer_move_event(x, y, source="mouse"))

            elif event.type == pygame.WINDOWENTER:
                x, y = pygame.mouse.get_pos()
                self.event_bus.emit(pointer_enter_event(x, y, source="mouse"))

            elif event.type == pygame.WINDOWLEAVE:
                self.event_bus.emit(pointer_leave_event(source="mouse"))

            elif event.type == pygame.VIDEORESIZE:
                self._handle_resize(event.w, event.h)

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key

        if key == pygame.K_ESCAPE or key == pygame.K_q:
            self._running = False
        elif key in THEME_KEYS:
            self.event_bus.emit(theme_event(THEME_KEYS[key], source="keyboard"))
        elif key == pygame.K_SPACE:
            if self.engine.is_running:
                self.engine.stop()
            else:
                self.engine.start()
        elif key == pygame.K_s:
            self._capture_screenshot()

    def _handle_resize(self, width: int, height: int) -> None:
        self.config.width = width
        self.config.height = height
        self._screen = pygame.display.set_mode((width, height), self._display_flags())
        self.event_bus.emit(resize_event(Viewport(width, height), source="window"))

    def _on_tick(self, event: Event) -> None:
        """Present the frame the engine just drew."""
        if self._surface is not None:
            self._surface.present()
        pygame.display.flip()
        self._frame_count = event.data.get("frame", self._frame_count + 1)

    def _capture_screenshot(self) -> None:
        """Capture and save a screenshot."""
        if self._screen:
            filename = f"screenshot_{self._frame_count}.png"
            pygame.image.save(self._screen, filename)
            logger.info(f"Screenshot saved: {filename}")

    async def run(self) -> None:
        """Main simulator loop."""
        self._init_pygame()
        self._running = True

        self._surface = PygameSurface()
        unsubscribe = self.event_bus.subscribe(EventType.TICK, self._on_tick)
        self.engine.init(
            self._surface, Viewport(self.config.width, self.config.height)
        )

        logger.info("Simulator started")

        try:
            while self._running:
                self._handle_events()
                # Frames run as scheduler callbacks while we wait
                await asyncio.sleep(EVENT_POLL_INTERVAL)
        finally:
            unsubscribe()
            self.engine.destroy()
            self._cleanup()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        pygame.quit()
        logger.info("Simulator stopped")

    def stop(self) -> None:
        """Stop the simulator."""
        self._running = False
