"""Grid model for WAVEGRID."""

from wavegrid.grid.model import Grid, GridModel, Point

__all__ = ["Grid", "GridModel", "Point"]
