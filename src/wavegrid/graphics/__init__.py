"""Graphics module for WAVEGRID rendering."""

from wavegrid.graphics.renderer import Renderer
from wavegrid.graphics.surface import (
    BufferSurface,
    PolylineSurface,
    RasterSurface,
    RecordingSurface,
    parse_color,
)
from wavegrid.graphics.themes import BUILTIN_THEMES, DEFAULT_THEME, Theme, ThemeRegistry

__all__ = [
    # Renderer
    "Renderer",
    # Surfaces
    "RasterSurface",
    "PolylineSurface",
    "BufferSurface",
    "RecordingSurface",
    "parse_color",
    # Themes
    "Theme",
    "ThemeRegistry",
    "BUILTIN_THEMES",
    "DEFAULT_THEME",
]
