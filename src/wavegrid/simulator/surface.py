"""
pygame surface adapter.

Flattens paths into polylines and strokes them with pygame.draw.
Translucent strokes go through an SRCALPHA overlay that is composited
onto the window in ``present()``.
"""

from typing import Optional
import logging

import pygame

from wavegrid.graphics.surface import RGBA, PolylineSurface

logger = logging.getLogger(__name__)


class PygameSurface(PolylineSurface):
    """Draws onto a pygame surface, the display surface by default.

    Args:
        target: Surface to draw on; the current display surface if None
        pixel_ratio: Device pixels per logical pixel
    """

    def __init__(self, target: Optional[pygame.Surface] = None, pixel_ratio: float = 1.0):
        super().__init__()
        self._target = target
        self.pixel_ratio = pixel_ratio if pixel_ratio > 0 else 1.0
        self._overlay: Optional[pygame.Surface] = None
        self._overlay_dirty = False

    @property
    def target(self) -> pygame.Surface:
        # The display surface is replaced by set_mode, so look it up each time
        if self._target is not None:
            return self._target
        surface = pygame.display.get_surface()
        if surface is None:
            raise RuntimeError("No pygame display surface")
        return surface

    @property
    def width(self) -> int:
        return int(self.target.get_width() / self.pixel_ratio)

    @property
    def height(self) -> int:
        return int(self.target.get_height() / self.pixel_ratio)

    def resize(self, width: float, height: float, pixel_ratio: float = 1.0) -> None:
        self.pixel_ratio = pixel_ratio if pixel_ratio > 0 else 1.0
        self._overlay = None
        self._overlay_dirty = False

    def _get_overlay(self) -> pygame.Surface:
        size = self.target.get_size()
        if self._overlay is None or self._overlay.get_size() != size:
            self._overlay = pygame.Surface(size, pygame.SRCALPHA)
            self._overlay_dirty = False
        if not self._overlay_dirty:
            self._overlay.fill((0, 0, 0, 0))
            self._overlay_dirty = True
        return self._overlay

    def fill(self, color: RGBA) -> None:
        r, g, b, a = color
        if a >= 1.0:
            self.target.fill((r, g, b))
        elif a > 0.0:
            veil = pygame.Surface(self.target.get_size(), pygame.SRCALPHA)
            veil.fill((r, g, b, int(a * 255)))
            self.target.blit(veil, (0, 0))

    def stroke(self, color: RGBA, width: float = 1.0) -> None:
        r, g, b, a = color
        if a <= 0.0:
            return

        pr = self.pixel_ratio
        px_width = max(1, round(width * pr))
        opaque = a >= 1.0
        dest = self.target if opaque else self._get_overlay()
        draw_color = (r, g, b) if opaque else (r, g, b, int(a * 255))

        for path in self._subpaths:
            if len(path) < 2:
                continue
            points = [(x * pr, y * pr) for x, y in path]
            if px_width == 1 and opaque:
                pygame.draw.aalines(dest, draw_color, False, points)
            else:
                pygame.draw.lines(dest, draw_color, False, points, px_width)

    def present(self) -> None:
        """Composite translucent strokes onto the target."""
        if self._overlay is not None and self._overlay_dirty:
            self.target.blit(self._overlay, (0, 0))
            self._overlay_dirty = False
