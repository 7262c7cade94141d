"""
WAVEGRID - procedural wave-grid animation.

A lattice of points is displaced by layered simplex noise, pushed around
by pointer motion through per-point springs, and drawn as one stroked
path per row.
"""

__version__ = "0.1.0"

from wavegrid.config.settings import EngineConfig
from wavegrid.core.events import EventBus, Viewport
from wavegrid.engine.wave_grid import WaveGrid
from wavegrid.graphics.surface import BufferSurface, RasterSurface
from wavegrid.graphics.themes import Theme, ThemeRegistry

__all__ = [
    "__version__",
    "EngineConfig",
    "EventBus",
    "Viewport",
    "WaveGrid",
    "BufferSurface",
    "RasterSurface",
    "Theme",
    "ThemeRegistry",
]
