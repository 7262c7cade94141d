"""
Raster surfaces the renderer can paint on.

RasterSurface is the narrow path-drawing contract the renderer needs
(fill, begin a path, move/line/curve, stroke once). Implementations
exist for a numpy RGB buffer (headless rendering), for recording calls,
and for pygame in the simulator.
"""

from abc import ABC, abstractmethod
from typing import List, Tuple, Union
import logging
import re

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# Type aliases
RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, float]
ColorLike = Union[str, RGB, RGBA]

# Segments used to flatten one quadratic curve
CURVE_SEGMENTS = 8

_RGBA_RE = re.compile(
    r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([0-9.]+)\s*)?\)"
)


def parse_color(color: ColorLike) -> RGBA:
    """Convert a CSS-style color into an (r, g, b, alpha) tuple.

    Accepts ``#rrggbb``, ``#rgb``, ``rgb(r, g, b)``, ``rgba(r, g, b, a)``,
    ``transparent`` and 3/4-tuples.

    Raises:
        ValueError: If the color cannot be parsed
    """
    if isinstance(color, tuple):
        if len(color) == 3:
            r, g, b = color
            return (int(r), int(g), int(b), 1.0)
        if len(color) == 4:
            r, g, b, a = color
            return (int(r), int(g), int(b), float(a))
        raise ValueError(f"Bad color tuple: {color!r}")

    text = color.strip().lower()
    if text == "transparent":
        return (0, 0, 0, 0.0)

    if text.startswith("#"):
        hex_color = text.lstrip("#")
        if len(hex_color) == 3:
            hex_color = "".join(c * 2 for c in hex_color)
        if len(hex_color) != 6:
            raise ValueError(f"Bad hex color: {color!r}")
        r, g, b = (int(hex_color[i:i + 2], 16) for i in (0, 2, 4))
        return (r, g, b, 1.0)

    match = _RGBA_RE.fullmatch(text)
    if match:
        r, g, b = (min(255, int(match.group(i))) for i in (1, 2, 3))
        a = float(match.group(4)) if match.group(4) is not None else 1.0
        return (r, g, b, max(0.0, min(1.0, a)))

    raise ValueError(f"Unrecognised color: {color!r}")


class RasterSurface(ABC):
    """Abstract 2D surface with a single current path."""

    @property
    @abstractmethod
    def width(self) -> int:
        """Surface width in logical pixels."""
        ...

    @property
    @abstractmethod
    def height(self) -> int:
        """Surface height in logical pixels."""
        ...

    @abstractmethod
    def fill(self, color: RGBA) -> None:
        """Fill the whole surface with a color."""
        ...

    @abstractmethod
    def begin_path(self) -> None:
        """Discard the current path and start a new one."""
        ...

    @abstractmethod
    def move_to(self, x: float, y: float) -> None:
        """Start a new subpath at (x, y)."""
        ...

    @abstractmethod
    def line_to(self, x: float, y: float) -> None:
        """Add a straight segment to (x, y)."""
        ...

    @abstractmethod
    def quadratic_curve_to(self, cx: float, cy: float, x: float, y: float) -> None:
        """Add a quadratic Bezier segment with control point (cx, cy)."""
        ...

    @abstractmethod
    def stroke(self, color: RGBA, width: float = 1.0) -> None:
        """Stroke the current path."""
        ...

    def resize(self, width: float, height: float, pixel_ratio: float = 1.0) -> None:
        """Match a new viewport. Surfaces with a fixed size ignore this."""
        pass


class PolylineSurface(RasterSurface):
    """Base for surfaces that flatten paths into polylines before stroking."""

    def __init__(self) -> None:
        self._subpaths: List[List[Tuple[float, float]]] = []

    def begin_path(self) -> None:
        self._subpaths = []

    def move_to(self, x: float, y: float) -> None:
        self._subpaths.append([(x, y)])

    def line_to(self, x: float, y: float) -> None:
        if not self._subpaths:
            self._subpaths.append([(x, y)])
        else:
            self._subpaths[-1].append((x, y))

    def quadratic_curve_to(self, cx: float, cy: float, x: float, y: float) -> None:
        if not self._subpaths:
            self._subpaths.append([(cx, cy)])
        path = self._subpaths[-1]
        x0, y0 = path[-1]
        for step in range(1, CURVE_SEGMENTS + 1):
            t = step / CURVE_SEGMENTS
            u = 1.0 - t
            path.append((
                u * u * x0 + 2 * u * t * cx + t * t * x,
                u * u * y0 + 2 * u * t * cy + t * t * y,
            ))


class BufferSurface(PolylineSurface):
    """Paints into an (height, width, 3) uint8 numpy buffer.

    Args:
        width: Logical width
        height: Logical height
        pixel_ratio: Device pixels per logical pixel
    """

    def __init__(self, width: int, height: int, pixel_ratio: float = 1.0):
        super().__init__()
        self._width = max(1, int(width))
        self._height = max(1, int(height))
        self.pixel_ratio = pixel_ratio if pixel_ratio > 0 else 1.0
        self.buffer: NDArray[np.uint8] = self._allocate()

    def _allocate(self) -> NDArray[np.uint8]:
        return np.zeros(
            (
                max(1, round(self._height * self.pixel_ratio)),
                max(1, round(self._width * self.pixel_ratio)),
                3,
            ),
            dtype=np.uint8,
        )

    def resize(self, width: float, height: float, pixel_ratio: float = 1.0) -> None:
        """Reallocate the backing buffer; its contents are discarded."""
        self._width = max(1, int(width))
        self._height = max(1, int(height))
        self.pixel_ratio = pixel_ratio if pixel_ratio > 0 else 1.0
        self.buffer = self._allocate()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def fill(self, color: RGBA) -> None:
        r, g, b, a = color
        if a >= 1.0:
            self.buffer[:, :] = (r, g, b)
        elif a > 0.0:
            blended = self.buffer * (1.0 - a) + np.array((r, g, b)) * a
            self.buffer[:, :] = blended.astype(np.uint8)

    def stroke(self, color: RGBA, width: float = 1.0) -> None:
        r, g, b, a = color
        if a <= 0.0:
            return

        xs, ys = self._rasterize()
        if xs.size == 0:
            return

        # Rows run horizontally, so thicken vertically
        thickness = max(1, round(width * self.pixel_ratio))
        if thickness > 1:
            offsets = np.arange(thickness) - thickness // 2
            ys = (ys[None, :] + offsets[:, None]).ravel()
            xs = np.tile(xs, thickness)

        h, w = self.buffer.shape[:2]
        inside = (xs >= 0) & (xs < w) & (ys >= 0) & (ys < h)
        xs = xs[inside]
        ys = ys[inside]
        if xs.size == 0:
            return

        # One blend per pixel even where segments overlap
        flat = np.unique(ys * w + xs)
        ys, xs = np.divmod(flat, w)

        if a >= 1.0:
            self.buffer[ys, xs] = (r, g, b)
        else:
            src = self.buffer[ys, xs].astype(np.float64)
            self.buffer[ys, xs] = (src * (1.0 - a) + np.array((r, g, b)) * a).astype(np.uint8)

    def _rasterize(self) -> Tuple[NDArray[np.int64], NDArray[np.int64]]:
        """Sample every segment of the current path at pixel resolution."""
        xs_parts = []
        ys_parts = []
        ratio = self.pixel_ratio
        # Far off-surface points would only cost samples
        limit = 4 * max(self.buffer.shape[:2])
        for path in self._subpaths:
            pts = np.clip(np.asarray(path, dtype=np.float64) * ratio, -limit, limit)
            if len(pts) == 1:
                if not np.isfinite(pts).all():
                    continue
                xs_parts.append(np.rint(pts[:, 0]))
                ys_parts.append(np.rint(pts[:, 1]))
                continue
            for (x0, y0), (x1, y1) in zip(pts[:-1], pts[1:]):
                if not np.isfinite((x0, y0, x1, y1)).all():
                    continue
                n = int(max(abs(x1 - x0), abs(y1 - y0))) + 1
                xs_parts.append(np.rint(np.linspace(x0, x1, n + 1)))
                ys_parts.append(np.rint(np.linspace(y0, y1, n + 1)))
        if not xs_parts:
            return np.empty(0, dtype=np.int64), np.empty(0, dtype=np.int64)
        return (
            np.concatenate(xs_parts).astype(np.int64),
            np.concatenate(ys_parts).astype(np.int64),
        )


class RecordingSurface(RasterSurface):
    """Records every drawing call as a tuple. Useful for inspection."""

    def __init__(self, width: int = 0, height: int = 0):
        self._width = width
        self._height = height
        self.calls: List[tuple] = []

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def fill(self, color: RGBA) -> None:
        self.calls.append(("fill", color))

    def begin_path(self) -> None:
        self.calls.append(("begin_path",))

    def move_to(self, x: float, y: float) -> None:
        self.calls.append(("move_to", x, y))

    def line_to(self, x: float, y: float) -> None:
        self.calls.append(("line_to", x, y))

    def quadratic_curve_to(self, cx: float, cy: float, x: float, y: float) -> None:
        self.calls.append(("quadratic_curve_to", cx, cy, x, y))

    def stroke(self, color: RGBA, width: float = 1.0) -> None:
        self.calls.append(("stroke", color, width))

    def resize(self, width: float, height: float, pixel_ratio: float = 1.0) -> None:
        self._width = width
        self._height = height
        self.calls.append(("resize", width, height, pixel_ratio))

    def count(self, name: str) -> int:
        """Number of recorded calls with the given name."""
        return sum(1 for call in self.calls if call[0] == name)

    def clear(self) -> None:
        self.calls.clear()
