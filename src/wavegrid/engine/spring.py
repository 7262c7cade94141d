"""Pointer-driven spring-damper offsets.

Pointer motion injects velocity into nearby points; every point then
runs the same spring-damper step each frame and settles back to zero
offset once the pointer stops feeding it. No per-point state machine is
stored: at-rest, perturbed and settling are just regions of the
(offset, velocity) space.
"""

from typing import Optional
from dataclasses import dataclass
import logging
import math

import numpy as np

from wavegrid.config.settings import EngineConfig
from wavegrid.grid.model import Grid

logger = logging.getLogger(__name__)


@dataclass
class PointerState:
    """Pointer position and velocity in surface-local coordinates.

    Only the pointer event handlers write to this; the physics pass
    reads it.
    """

    x: float = 0.0
    y: float = 0.0
    smoothed_x: float = 0.0
    smoothed_y: float = 0.0
    velocity_x: float = 0.0
    velocity_y: float = 0.0
    active: bool = False
    has_position: bool = False
    # Bumped on every accepted move
    moves: int = 0

    @property
    def speed(self) -> float:
        return math.hypot(self.velocity_x, self.velocity_y)


def _finite(*values: Optional[float]) -> bool:
    return all(v is not None and math.isfinite(v) for v in values)


class CursorSpringSystem:
    """Owns pointer state and integrates per-point spring offsets.

    Args:
        config: Engine config (tension, friction, cursor parameters)
    """

    def __init__(self, config: EngineConfig):
        self.config = config
        self.pointer = PointerState()
        # Frames since the pointer last moved, tracked here so the
        # physics pass never writes PointerState
        self._seen_moves = 0
        self._idle_frames = 0

    def set_config(self, config: EngineConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def on_pointer_move(self, x: float, y: float) -> None:
        """Record a pointer move and derive its velocity."""
        if not _finite(x, y):
            logger.debug(f"Ignoring non-finite pointer move ({x!r}, {y!r})")
            return

        cfg = self.config
        p = self.pointer

        if p.has_position:
            raw_vx = x - p.x
            raw_vy = y - p.y
        else:
            raw_vx = raw_vy = 0.0

        s = cfg.pointer_smoothing
        vx = s * p.velocity_x + (1.0 - s) * raw_vx
        vy = s * p.velocity_y + (1.0 - s) * raw_vy

        # Dropped frames show up as huge deltas
        speed = math.hypot(vx, vy)
        if not math.isfinite(speed):
            # Deltas between huge coordinates overflow
            logger.debug(f"Pointer velocity overflowed at ({x!r}, {y!r})")
            vx = vy = 0.0
        elif speed > cfg.max_pointer_speed:
            scale = cfg.max_pointer_speed / speed
            vx *= scale
            vy *= scale

        if p.has_position:
            smoothed_x = s * p.smoothed_x + (1.0 - s) * x
            smoothed_y = s * p.smoothed_y + (1.0 - s) * y
        else:
            smoothed_x, smoothed_y = x, y

        p.x = x
        p.y = y
        p.smoothed_x = smoothed_x
        p.smoothed_y = smoothed_y
        p.velocity_x = vx
        p.velocity_y = vy
        p.has_position = True
        p.active = True
        p.moves += 1

    def on_pointer_enter(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        """Mark the pointer active, optionally at a known position."""
        p = self.pointer
        if _finite(x, y):
            p.x = p.smoothed_x = x
            p.y = p.smoothed_y = y
            p.has_position = True
        p.velocity_x = p.velocity_y = 0.0
        p.active = True

    def on_pointer_leave(self) -> None:
        """Stop injecting. Existing offsets keep settling."""
        p = self.pointer
        p.active = False
        p.velocity_x = p.velocity_y = 0.0
        # Next entry must not produce a jump from the exit point
        p.has_position = False

    # ------------------------------------------------------------------
    # Per-frame physics
    # ------------------------------------------------------------------

    def influence_radius(self) -> float:
        """Current influence radius; grows with pointer speed if configured."""
        cfg = self.config
        return cfg.influence_radius + self.pointer.speed * cfg.radius_speed_gain

    def inject(self, grid: Grid) -> int:
        """Inject pointer velocity into points within the influence radius.

        Runs every frame while the pointer is active. A pointer that has
        not moved for ``pointer_idle_frames`` frames stops pushing.

        Args:
            grid: Grid whose spring velocities are updated in place

        Returns:
            Number of points that received an impulse
        """
        p = self.pointer
        if not p.active:
            return 0

        cfg = self.config
        if p.moves != self._seen_moves:
            self._seen_moves = p.moves
            self._idle_frames = 0
        else:
            self._idle_frames += 1
        if self._idle_frames >= cfg.pointer_idle_frames:
            return 0

        speed = p.speed
        if speed == 0.0:
            return 0

        radius = self.influence_radius()

        dx = grid.current_x - p.smoothed_x
        dy = grid.current_y - p.smoothed_y
        dist = np.hypot(dx, dy)

        # Zero distance is skipped; there is no direction to work with
        mask = (dist > 0.0) & (dist < radius)
        if not mask.any():
            return 0

        d = dist[mask]
        falloff = 1.0 - (d / radius) ** 2
        impulse = falloff * cfg.cursor_strength

        if cfg.directional_bias:
            align = (dx[mask] * p.velocity_x + dy[mask] * p.velocity_y) / (d * speed)
            impulse = impulse * (0.5 * (1.0 + align))

        grid.spring_velocity_x[mask] += p.velocity_x * impulse
        grid.spring_velocity_y[mask] += p.velocity_y * impulse
        return int(mask.sum())

    def step(self, grid: Grid, dt_scale: float = 1.0) -> None:
        """Advance every point's spring by one frame.

        Frames longer than the reference frame are split into sub-steps no
        longer than one reference frame, so a slow host integrates with
        the same stability as a 60 Hz one.

        Args:
            grid: Grid whose spring offsets/velocities are updated in place
            dt_scale: Frame duration relative to the reference frame
        """
        if not math.isfinite(dt_scale) or dt_scale < 0.0:
            dt_scale = 0.0

        if dt_scale > 1.0:
            substeps = math.ceil(dt_scale)
            sub_dt = dt_scale / substeps
            for _ in range(substeps):
                self._integrate(grid, sub_dt)
        else:
            self._integrate(grid, dt_scale)

        ox = grid.spring_offset_x
        oy = grid.spring_offset_y
        vx = grid.spring_velocity_x
        vy = grid.spring_velocity_y

        # Persistent state must stay finite or every later frame is ruined
        bad = ~(np.isfinite(ox) & np.isfinite(oy) & np.isfinite(vx) & np.isfinite(vy))
        if bad.any():
            logger.debug(f"Resetting {int(bad.sum())} non-finite spring states")
            ox[bad] = 0.0
            oy[bad] = 0.0
            vx[bad] = 0.0
            vy[bad] = 0.0

    def _integrate(self, grid: Grid, dt: float) -> None:
        cfg = self.config
        ox = grid.spring_offset_x
        oy = grid.spring_offset_y
        vx = grid.spring_velocity_x
        vy = grid.spring_velocity_y

        if dt == 1.0:
            k = cfg.tension
            damping = cfg.friction
        else:
            k = cfg.tension * dt
            damping = cfg.friction ** dt

        vx -= ox * k
        vy -= oy * k
        vx *= damping
        vy *= damping

        if dt == 1.0:
            ox += vx
            oy += vy
        else:
            ox += vx * dt
            oy += vy * dt

        np.clip(ox, -cfg.max_offset, cfg.max_offset, out=ox)
        np.clip(oy, -cfg.max_offset, cfg.max_offset, out=oy)

    def is_settled(self, grid: Grid, epsilon: float = 1e-3) -> bool:
        """True when every spring offset and velocity is within epsilon of zero."""
        return bool(
            np.all(np.abs(grid.spring_offset_x) < epsilon)
            and np.all(np.abs(grid.spring_offset_y) < epsilon)
            and np.all(np.abs(grid.spring_velocity_x) < epsilon)
            and np.all(np.abs(grid.spring_velocity_y) < epsilon)
        )
