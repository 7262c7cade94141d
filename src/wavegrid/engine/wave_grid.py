"""WaveGrid engine facade.

One WaveGrid instance owns everything for one surface: grid, pointer
state, config, clock, theme and energy source. Nothing is shared between
instances. The host only needs ``init``, ``set_theme`` and ``destroy``;
``update`` and ``draw`` are public for hosts that drive frames
themselves instead of handing the engine a FrameScheduler.
"""

from typing import Callable, Optional
import logging
import math

import numpy as np

from wavegrid.animation.clock import AnimationClock
from wavegrid.animation.loop import AnimationLoop, Debouncer, FrameScheduler
from wavegrid.audio.energy import EnergySource, SmoothedEnergySource, as_energy_source
from wavegrid.config.settings import EngineConfig
from wavegrid.core.events import (
    Event,
    EventBus,
    EventType,
    Viewport,
    config_event,
    tick_event,
)
from wavegrid.core.state import State, StateMachine
from wavegrid.engine.displacement import DisplacementEngine
from wavegrid.engine.spring import CursorSpringSystem
from wavegrid.graphics.renderer import Renderer
from wavegrid.graphics.surface import RasterSurface
from wavegrid.graphics.themes import DEFAULT_THEME, Theme, ThemeRegistry
from wavegrid.grid.model import Grid, GridModel
from wavegrid.noise.simplex import SimplexNoise

logger = logging.getLogger(__name__)

# Config fields that change the lattice itself
_LAYOUT_FIELDS = ("spacing_x", "spacing_y", "pad", "centered")


class WaveGrid:
    """Procedural wave-grid animation bound to one raster surface.

    Args:
        config: Engine tunables; defaults if None
        noise: Noise field; a SimplexNoise seeded from config if None
        energy_source: EnergySource or ``() -> float``; silence if None
        themes: Theme registry; built-in themes if None
        theme: Initial theme name
        scheduler: Host frame scheduler. Without one the host calls
            ``frame()`` (or ``update()`` + ``draw()``) itself and resizes
            are applied immediately.
        event_bus: Bus carrying pointer, resize and theme events
        resize_debounce_ms: Quiescence window for resize bursts
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        noise: Optional[SimplexNoise] = None,
        energy_source: Optional[EnergySource | Callable[[], Optional[float]]] = None,
        themes: Optional[ThemeRegistry] = None,
        theme: str = DEFAULT_THEME,
        scheduler: Optional[FrameScheduler] = None,
        event_bus: Optional[EventBus] = None,
        resize_debounce_ms: float = 100.0,
    ):
        cfg = config or EngineConfig()
        self._config = cfg

        self.noise = noise or SimplexNoise(cfg.seed)
        self.grid_model = GridModel(cfg)
        self.displacement = DisplacementEngine(self.noise, cfg)
        self.spring = CursorSpringSystem(cfg)
        self.renderer = Renderer(cfg.curve_mode, cfg.line_width)
        self.clock = AnimationClock()
        self.themes = themes or ThemeRegistry()
        self._theme = self.themes.resolve(theme)

        # Resolved once here, never probed per frame
        self.energy_source = SmoothedEnergySource(
            as_energy_source(energy_source), alpha=cfg.audio_smoothing
        )
        self.energy = 0.0

        self.events = event_bus or EventBus()
        self.state = StateMachine()

        self._loop: Optional[AnimationLoop] = None
        self._resize: Optional[Debouncer] = None
        if scheduler is not None:
            self._loop = AnimationLoop(scheduler, self.frame, cfg.max_frame_ms)
            self._resize = Debouncer(scheduler, resize_debounce_ms, self._apply_resize)

        self._surface: Optional[RasterSurface] = None
        self._viewport: Optional[Viewport] = None
        self._unsubscribers: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def grid(self) -> Optional[Grid]:
        return self.grid_model.grid

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def surface(self) -> Optional[RasterSurface]:
        return self._surface

    @property
    def viewport(self) -> Optional[Viewport]:
        return self._viewport

    @property
    def loop(self) -> Optional[AnimationLoop]:
        return self._loop

    @property
    def is_running(self) -> bool:
        return self._loop is not None and self._loop.is_running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(
        self,
        surface: RasterSurface,
        viewport: Optional[Viewport] = None,
        autostart: bool = True,
    ) -> None:
        """Attach to a surface, build the grid and subscribe to host events.

        Args:
            surface: Surface to draw on
            viewport: Initial viewport; the surface's own size if None
            autostart: Start the frame loop if a scheduler was given
        """
        if self.state.state != State.CREATED:
            logger.warning(f"init() ignored in state {self.state.state.name}")
            return

        if viewport is None:
            viewport = Viewport(surface.width, surface.height)
        else:
            surface.resize(viewport.width, viewport.height, viewport.device_pixel_ratio)

        self._surface = surface
        self._viewport = viewport
        grid = self.grid_model.build(viewport.width, viewport.height)

        self._unsubscribers = [
            self.events.subscribe(EventType.POINTER_MOVE, self._on_pointer_move),
            self.events.subscribe(EventType.POINTER_ENTER, self._on_pointer_enter),
            self.events.subscribe(EventType.POINTER_LEAVE, self._on_pointer_leave),
            self.events.subscribe(EventType.RESIZE, self._on_resize_event),
            self.events.subscribe(EventType.THEME_CHANGED, self._on_theme_event),
        ]

        logger.info(
            f"WaveGrid initialized: {grid.cols}x{grid.rows} points, "
            f"viewport {viewport.width}x{viewport.height}, theme '{self._theme.name}'"
        )

        if autostart and self._loop is not None:
            self.state.transition(State.RUNNING)
            self._loop.start()
        else:
            self.state.transition(State.STOPPED)

    def start(self) -> None:
        """Resume the frame loop. No-op if already running."""
        if self._loop is None:
            logger.warning("start() needs a frame scheduler")
            return
        if self.state.state == State.RUNNING and self._loop.is_running:
            return
        if self.state.state == State.RUNNING or self.state.transition(State.RUNNING):
            self._loop.start()

    def stop(self) -> None:
        """Pause the frame loop, keeping the grid and subscriptions."""
        if self._loop is not None:
            self._loop.stop()
        if self.state.state == State.RUNNING:
            self.state.transition(State.STOPPED)

    def destroy(self) -> None:
        """Stop, drop every host subscription and release the surface."""
        if self.state.is_destroyed:
            logger.debug("destroy() called twice")
            return

        if self._loop is not None:
            self._loop.stop()
        if self._resize is not None:
            self._resize.cancel()

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

        self._surface = None
        self.state.transition(State.DESTROYED)
        logger.info("WaveGrid destroyed")

    # ------------------------------------------------------------------
    # Frame pass
    # ------------------------------------------------------------------

    def update(self, elapsed_ms: float) -> Optional[Grid]:
        """Advance time and recompute every point's current position.

        Args:
            elapsed_ms: Milliseconds since the previous frame

        Returns:
            The grid that was updated, or None if not attached
        """
        if not self.state.is_attached:
            logger.warning(f"update() ignored in state {self.state.state.name}")
            return None

        # Read once: a resize may publish a new grid between frames
        grid = self.grid_model.grid
        if grid is None:
            return None

        cfg = self._config
        if not math.isfinite(elapsed_ms) or elapsed_ms < 0:
            elapsed_ms = 0.0
        # Hosts driving update() directly get the same gap clamp as the loop
        elapsed_ms = min(elapsed_ms, cfg.max_frame_ms)

        self.energy = energy = self.energy_source.get_energy()
        t = self.clock.advance(elapsed_ms, self.displacement.time_scale(energy))

        self.spring.inject(grid)
        if cfg.frame_rate_independent:
            dt_scale = elapsed_ms / cfg.reference_frame_ms
        else:
            dt_scale = 1.0
        self.spring.step(grid, dt_scale)

        dx, dy = self.displacement.rest_offsets(grid.base_x, grid.base_y, t, energy)
        np.add(grid.base_x, dx, out=grid.current_x)
        np.add(grid.base_y, dy, out=grid.current_y)
        grid.current_x += grid.spring_offset_x
        grid.current_y += grid.spring_offset_y
        return grid

    def draw(self, grid: Optional[Grid] = None) -> None:
        """Render a grid (the current one by default) onto the surface."""
        if self._surface is None:
            logger.debug("draw() without a surface")
            return
        if grid is None:
            grid = self.grid_model.grid
        if grid is None:
            return
        self.renderer.draw(self._surface, grid, self._theme)

    def frame(self, elapsed_ms: float) -> None:
        """One full frame: update then draw the same grid."""
        grid = self.update(elapsed_ms)
        if grid is None:
            return
        self.draw(grid)
        if self.events.handler_count(EventType.TICK):
            self.events.emit(tick_event(elapsed_ms, self.clock.frame))

    # ------------------------------------------------------------------
    # Appearance and configuration
    # ------------------------------------------------------------------

    def set_theme(self, name: Optional[str]) -> Theme:
        """Select a theme by name. Unknown names resolve to the default."""
        self._theme = self.themes.resolve(name)
        logger.info(f"Theme set to '{self._theme.name}'")
        return self._theme

    def set_config(self, config: EngineConfig) -> None:
        """Swap the whole config.

        Spacing, pad or centering changes rebuild the grid, which resets
        all spring state. Other changes apply from the next frame.
        """
        old = self._config
        if config is old:
            return

        self._config = config
        if config.seed != old.seed:
            self.noise = SimplexNoise(config.seed)
            self.displacement.noise = self.noise

        self.grid_model.set_config(config)
        self.displacement.set_config(config)
        self.spring.set_config(config)
        self.renderer.curve_mode = config.curve_mode
        self.renderer.line_width = config.line_width
        self.energy_source.alpha = min(1.0, max(0.0, config.audio_smoothing))
        if self._loop is not None:
            self._loop.max_frame_ms = config.max_frame_ms

        relayout = any(getattr(config, f) != getattr(old, f) for f in _LAYOUT_FIELDS)
        if relayout and self.state.is_attached and self._viewport is not None:
            self.grid_model.build(self._viewport.width, self._viewport.height)

        logger.info(f"Config swapped (rebuild={relayout and self.state.is_attached})")
        if self.events.handler_count(EventType.CONFIG_CHANGED):
            self.events.emit(config_event(config))

    # ------------------------------------------------------------------
    # Resize
    # ------------------------------------------------------------------

    def on_resize(self, viewport: Viewport) -> None:
        """Queue a resize. Bursts collapse into one rebuild."""
        if not self.state.is_attached:
            logger.debug("Resize ignored, engine not attached")
            return
        if self._resize is not None:
            self._resize(viewport)
        else:
            self._apply_resize(viewport)

    def _apply_resize(self, viewport: Viewport) -> None:
        if not self.state.is_attached or self._surface is None:
            return
        self._viewport = viewport
        self._surface.resize(viewport.width, viewport.height, viewport.device_pixel_ratio)
        grid = self.grid_model.build(viewport.width, viewport.height)
        logger.debug(
            f"Grid rebuilt for {viewport.width}x{viewport.height}: {grid.cols}x{grid.rows}"
        )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_pointer_move(self, event: Event) -> None:
        self.spring.on_pointer_move(event.data.get("x"), event.data.get("y"))

    def _on_pointer_enter(self, event: Event) -> None:
        self.spring.on_pointer_enter(event.data.get("x"), event.data.get("y"))

    def _on_pointer_leave(self, event: Event) -> None:
        self.spring.on_pointer_leave()

    def _on_resize_event(self, event: Event) -> None:
        viewport = event.data.get("viewport")
        if isinstance(viewport, Viewport):
            self.on_resize(viewport)
        else:
            logger.debug(f"Resize event without a viewport: {event.data!r}")

    def _on_theme_event(self, event: Event) -> None:
        self.set_theme(event.data.get("name"))
