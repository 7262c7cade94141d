"""Displacement, spring physics and the WaveGrid engine."""

from wavegrid.engine.displacement import DisplacementEngine, energy_response
from wavegrid.engine.spring import CursorSpringSystem, PointerState
from wavegrid.engine.wave_grid import WaveGrid

__all__ = [
    "DisplacementEngine",
    "energy_response",
    "CursorSpringSystem",
    "PointerState",
    "WaveGrid",
]
