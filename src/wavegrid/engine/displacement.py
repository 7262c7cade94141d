"""Noise-driven rest offsets for grid points.

Each frame every point gets a "rest" offset from its base position,
built from up to four noise layers applied in a fixed order:

1. secondary vector warp of the sampling coordinates
2. domain warp of the vertical sampling coordinate
3. primary angle displacement
4. ridge modulation of the primary displacement

Layers 1, 2 and 4 can be switched off in EngineConfig; the order never
changes.
"""

from typing import Tuple
import logging
import math

import numpy as np
from numpy.typing import NDArray

from wavegrid.config.settings import EngineConfig
from wavegrid.noise.simplex import SimplexNoise

logger = logging.getLogger(__name__)

# Keeps the ridge sample decorrelated from the primary one
RIDGE_OFFSET = 311.7


def energy_response(energy: float, exponent: float = 2.0) -> float:
    """Convex response curve for the external energy signal.

    Near-silence maps to almost nothing, peak energy maps to 1.

    Args:
        energy: Energy in [0, 1]. Non-finite values count as 0.
        exponent: Curve exponent, > 1

    Returns:
        Response in [0, 1]
    """
    if not math.isfinite(energy):
        return 0.0
    energy = min(1.0, max(0.0, energy))
    return energy ** exponent


class DisplacementEngine:
    """Computes per-point rest offsets from a noise field."""

    def __init__(self, noise: SimplexNoise, config: EngineConfig):
        self.noise = noise
        self.config = config

    def set_config(self, config: EngineConfig) -> None:
        self.config = config

    def amplitude_scale(self, energy: float) -> float:
        """Amplitude multiplier for the given energy."""
        cfg = self.config
        if not cfg.audio_reactive:
            return 1.0
        return 1.0 + energy_response(energy, cfg.energy_exponent) * cfg.audio_amplitude_multiplier

    def speed_scale(self, energy: float) -> float:
        """Temporal rate multiplier for the given energy."""
        cfg = self.config
        if not cfg.audio_reactive:
            return 1.0
        return 1.0 + energy_response(energy, cfg.energy_exponent) * cfg.audio_speed_multiplier

    def effective_amplitude(self, energy: float) -> float:
        """Displacement amplitude in pixels after audio scaling."""
        return self.config.amplitude * self.amplitude_scale(energy)

    def time_scale(self, energy: float) -> float:
        """Noise time units advanced per millisecond."""
        return self.config.noise_speed * self.speed_scale(energy)

    def rest_offsets(
        self,
        base_x: NDArray[np.float64],
        base_y: NDArray[np.float64],
        t: float,
        energy: float = 0.0,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Compute rest offsets for a batch of base positions.

        Args:
            base_x: Base x coordinates
            base_y: Base y coordinates
            t: Animation clock value (noise time units)
            energy: External energy in [0, 1]

        Returns:
            (dx, dy) arrays matching the input shape
        """
        cfg = self.config
        noise3 = self.noise.noise3d_array

        x = base_x
        y = base_y

        # 1. Secondary vector warp
        if cfg.vector_warp and cfg.warp_amplitude > 0:
            tw = t * cfg.warp_speed
            wx = noise3(base_x * cfg.warp_scale, base_y * cfg.warp_scale, tw)
            wy = noise3(
                base_x * cfg.warp_scale + cfg.warp_phase,
                base_y * cfg.warp_scale + cfg.warp_phase,
                tw,
            )
            x = base_x + wx * cfg.warp_amplitude
            y = base_y + wy * cfg.warp_amplitude

        # 2. Domain warp, vertical only
        warped_y = y
        if cfg.domain_warp and cfg.domain_warp_amplitude > 0:
            d = noise3(
                x * cfg.domain_warp_scale,
                y * cfg.domain_warp_scale,
                t * cfg.domain_warp_speed,
            )
            warped_y = y + d * cfg.domain_warp_amplitude

        # 3. Primary angle displacement
        amplitude = self.effective_amplitude(energy)
        n = noise3(x * cfg.noise_scale, warped_y * cfg.noise_scale, t)
        angle = n * cfg.angle_gain
        dy = np.sin(angle) * (amplitude * cfg.wave_amp_y)
        if cfg.horizontal_displacement:
            dx = np.cos(angle) * (amplitude * cfg.wave_amp_x)
        else:
            dx = np.zeros_like(dy)

        # 4. Ridge modulation
        if cfg.ridge and cfg.ridge_strength > 0:
            r = noise3(
                x * cfg.ridge_scale + RIDGE_OFFSET,
                warped_y * cfg.ridge_scale,
                t * cfg.ridge_speed,
            )
            factor = (1.0 - cfg.ridge_strength) + cfg.ridge_strength * np.abs(r) ** cfg.ridge_power
            dx = dx * factor
            dy = dy * factor

        return dx, dy

    def rest_offset(self, x: float, y: float, t: float, energy: float = 0.0) -> Tuple[float, float]:
        """Rest offset for a single base position."""
        dx, dy = self.rest_offsets(
            np.array([x], dtype=np.float64),
            np.array([y], dtype=np.float64),
            t,
            energy,
        )
        return float(dx[0]), float(dy[0])
