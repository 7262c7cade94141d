"""Grid of animated points.

Point storage is struct-of-arrays: one flat numpy array per field, in
row-major order. Only GridModel allocates or replaces these arrays; the
displacement and spring passes write into them in place.
"""

from typing import Iterator, Optional
from dataclasses import dataclass, field
import logging
import math

import numpy as np
from numpy.typing import NDArray

from wavegrid.config.settings import EngineConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Point:
    """Snapshot of a single grid point."""

    base_x: float
    base_y: float
    current_x: float
    current_y: float
    spring_offset_x: float = 0.0
    spring_offset_y: float = 0.0
    spring_velocity_x: float = 0.0
    spring_velocity_y: float = 0.0


@dataclass(eq=False)
class Grid:
    """Row-major lattice of points.

    Attributes:
        rows: Number of rows
        cols: Number of points per row
        spacing_x: Horizontal gap between base positions
        spacing_y: Vertical gap between base positions
        origin_x: Base x of the first point
        origin_y: Base y of the first point
    """

    rows: int
    cols: int
    spacing_x: float
    spacing_y: float
    origin_x: float = 0.0
    origin_y: float = 0.0

    base_x: NDArray[np.float64] = field(init=False, repr=False)
    base_y: NDArray[np.float64] = field(init=False, repr=False)
    current_x: NDArray[np.float64] = field(init=False, repr=False)
    current_y: NDArray[np.float64] = field(init=False, repr=False)
    spring_offset_x: NDArray[np.float64] = field(init=False, repr=False)
    spring_offset_y: NDArray[np.float64] = field(init=False, repr=False)
    spring_velocity_x: NDArray[np.float64] = field(init=False, repr=False)
    spring_velocity_y: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self):
        col_idx = np.arange(self.cols, dtype=np.float64)
        row_idx = np.arange(self.rows, dtype=np.float64)
        yy, xx = np.meshgrid(row_idx, col_idx, indexing="ij")

        self.base_x = (self.origin_x + xx * self.spacing_x).ravel()
        self.base_y = (self.origin_y + yy * self.spacing_y).ravel()
        # Base positions never change after build
        self.base_x.setflags(write=False)
        self.base_y.setflags(write=False)

        self.current_x = self.base_x.copy()
        self.current_y = self.base_y.copy()

        n = self.rows * self.cols
        self.spring_offset_x = np.zeros(n, dtype=np.float64)
        self.spring_offset_y = np.zeros(n, dtype=np.float64)
        self.spring_velocity_x = np.zeros(n, dtype=np.float64)
        self.spring_velocity_y = np.zeros(n, dtype=np.float64)

    def __len__(self) -> int:
        return self.rows * self.cols

    def index(self, row: int, col: int) -> int:
        """Flat index of the point at (row, col)."""
        return row * self.cols + col

    def point(self, index: int) -> Point:
        """Get a snapshot of the point at a flat index."""
        return Point(
            base_x=float(self.base_x[index]),
            base_y=float(self.base_y[index]),
            current_x=float(self.current_x[index]),
            current_y=float(self.current_y[index]),
            spring_offset_x=float(self.spring_offset_x[index]),
            spring_offset_y=float(self.spring_offset_y[index]),
            spring_velocity_x=float(self.spring_velocity_x[index]),
            spring_velocity_y=float(self.spring_velocity_y[index]),
        )

    def points(self) -> Iterator[Point]:
        """Iterate point snapshots in row-major order."""
        for i in range(len(self)):
            yield self.point(i)

    def row_x(self, row: int) -> NDArray[np.float64]:
        """Current x positions of one row (a view, not a copy)."""
        start = row * self.cols
        return self.current_x[start:start + self.cols]

    def row_y(self, row: int) -> NDArray[np.float64]:
        """Current y positions of one row (a view, not a copy)."""
        start = row * self.cols
        return self.current_y[start:start + self.cols]


def _sanitize_dimension(value: Optional[float], name: str) -> float:
    """Clamp missing, non-finite or non-positive dimensions to 1."""
    if value is None or not math.isfinite(value) or value < 1:
        logger.debug(f"Clamping viewport {name}={value!r} to 1")
        return 1.0
    return float(value)


class GridModel:
    """Owns the point lattice and rebuilds it from viewport dimensions.

    A rebuild always produces a brand-new Grid, discarding every point and
    all spring state of the previous one. The new grid is published with a
    single reference swap, so a reader holding ``model.grid`` sees either
    the old grid or the new one in full.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or EngineConfig()
        self._grid: Optional[Grid] = None
        self._width = 0.0
        self._height = 0.0

    @property
    def grid(self) -> Optional[Grid]:
        """The current grid, or None before the first build."""
        return self._grid

    @property
    def size(self) -> tuple[float, float]:
        """Viewport size the current grid was built for."""
        return (self._width, self._height)

    @property
    def config(self) -> EngineConfig:
        return self._config

    def set_config(self, config: EngineConfig) -> None:
        """Swap the config. Takes effect on the next build."""
        self._config = config

    def build(
        self,
        width: Optional[float],
        height: Optional[float],
        config: Optional[EngineConfig] = None,
    ) -> Grid:
        """Build a fresh grid for a viewport.

        Args:
            width: Viewport width in logical pixels
            height: Viewport height in logical pixels
            config: Config to build with; replaces the stored one if given

        Returns:
            The new Grid (also published as ``self.grid``)
        """
        if config is not None:
            self._config = config
        cfg = self._config

        w = _sanitize_dimension(width, "width")
        h = _sanitize_dimension(height, "height")

        cols = math.ceil(w / cfg.spacing_x) + cfg.pad
        rows = math.ceil(h / cfg.spacing_y) + cfg.pad

        if cfg.centered:
            origin_x = (w - (cols - 1) * cfg.spacing_x) / 2
            origin_y = (h - (rows - 1) * cfg.spacing_y) / 2
        else:
            origin_x = -(cfg.pad // 2) * cfg.spacing_x
            origin_y = -(cfg.pad // 2) * cfg.spacing_y

        grid = Grid(
            rows=rows,
            cols=cols,
            spacing_x=cfg.spacing_x,
            spacing_y=cfg.spacing_y,
            origin_x=origin_x,
            origin_y=origin_y,
        )

        self._grid = grid
        self._width = w
        self._height = h

        logger.debug(f"Grid built: {cols}x{rows} points for {w:.0f}x{h:.0f}")
        return grid
