"""Row renderer for the wave grid."""

from typing import Literal
import logging

from wavegrid.grid.model import Grid
from wavegrid.graphics.surface import RasterSurface
from wavegrid.graphics.themes import Theme

logger = logging.getLogger(__name__)

CurveMode = Literal["line", "quadratic"]


class Renderer:
    """Paints a grid as one stroked path per row.

    Every row is exactly one begin_path and one stroke, never one per
    segment: path setup and stroking dominate the cost of a frame.
    """

    def __init__(self, curve_mode: CurveMode = "quadratic", line_width: float = 1.0):
        self.curve_mode = curve_mode
        self.line_width = line_width

    def draw(self, surface: RasterSurface, grid: Grid, theme: Theme) -> None:
        """Fill the background and stroke every row of ``grid``.

        Args:
            surface: Target surface
            grid: Grid to draw, read through current positions only
            theme: Colors and stroke width
        """
        surface.fill(theme.background_rgba)

        color = theme.line_rgba
        width = theme.line_width if theme.line_width is not None else self.line_width
        quadratic = self.curve_mode == "quadratic"

        # Two flat lists per frame; rows are index ranges into them
        xs = grid.current_x.tolist()
        ys = grid.current_y.tolist()
        cols = grid.cols
        if cols == 0:
            return

        for start in range(0, grid.rows * cols, cols):
            end = start + cols

            surface.begin_path()
            surface.move_to(xs[start], ys[start])

            if quadratic:
                self._curve_row(surface, xs, ys, start, end)
            else:
                for i in range(start + 1, end):
                    surface.line_to(xs[i], ys[i])

            surface.stroke(color, width)

    @staticmethod
    def _curve_row(surface: RasterSurface, xs: list, ys: list, start: int, end: int) -> None:
        """Curve through xs/ys[start:end]: control at each point, end at the next midpoint."""
        last = end - 1
        if last <= start:
            return
        for i in range(start, last):
            mid_x = (xs[i] + xs[i + 1]) / 2
            mid_y = (ys[i] + ys[i + 1]) / 2
            surface.quadratic_curve_to(xs[i], ys[i], mid_x, mid_y)
        surface.line_to(xs[last], ys[last])
