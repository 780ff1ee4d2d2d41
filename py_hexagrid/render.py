"""
Matplotlib rendering of a grid.

The plotter only reads the grid: it draws one segment per point/neighbour
pair and redraws whenever ``pointsUpdated`` is emitted on the grid's emitter.
"""

from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np
import structlog
from matplotlib.collections import LineCollection

from .core.events import GridEvent
from .core.grid import Grid, Point
from .core.mesh_quality import point_coordinates

logger = structlog.get_logger()


class GridPlotter:
    """Draw the neighbour graph of a grid as line segments."""

    def __init__(self, grid: Grid, ax=None, color: str = "#1f3b57", linewidth: float = 0.6):
        self.grid = grid
        self.color = color
        self.linewidth = linewidth
        if ax is None:
            self.figure, self.ax = plt.subplots(figsize=(8, 8))
        else:
            self.figure, self.ax = ax.figure, ax
        self.collection: Optional[LineCollection] = None
        grid.on(GridEvent.POINTS_UPDATED, self._on_points_updated)

    def _on_points_updated(self, items: List[Point]) -> None:
        self.draw()

    def segments(self) -> np.ndarray:
        """Array of shape (edges, 2, 2), one segment per undirected edge."""
        coords = point_coordinates(self.grid)
        edges = np.array(list(self.grid.edges()), dtype=np.int64).reshape(-1, 2)
        return coords[edges]

    def draw(self) -> LineCollection:
        """Redraw every edge from the current point coordinates."""
        if self.collection is not None:
            self.collection.remove()

        segments = self.segments()
        self.collection = LineCollection(segments, colors=self.color, linewidths=self.linewidth)
        self.ax.add_collection(self.collection)
        self.ax.set_aspect("equal")
        self.ax.set_xlim(-1.1, 1.1)
        self.ax.set_ylim(-1.1, 1.1)
        self.ax.set_axis_off()

        logger.debug("Grid drawn", segments=len(segments))
        return self.collection

    def save(self, path, dpi: int = 150) -> None:
        self.draw()
        self.figure.savefig(path, dpi=dpi, bbox_inches="tight")
        logger.info("Grid image saved", path=str(path))

    def close(self) -> None:
        """Stop listening to the grid and release the figure."""
        self.grid.off(GridEvent.POINTS_UPDATED, self._on_points_updated)
        plt.close(self.figure)
