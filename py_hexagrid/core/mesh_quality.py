"""Mesh quality statistics over a built grid."""

from typing import Any, Dict

import numpy as np
import structlog

from .grid import Grid

logger = structlog.get_logger()


def point_coordinates(grid: Grid) -> np.ndarray:
    """Return point coordinates as an (n, 2) float array."""
    if not len(grid.points):
        return np.zeros((0, 2))
    return np.array([[p.x, p.y] for p in grid.points], dtype=np.float64)


def boundary_mask(grid: Grid) -> np.ndarray:
    """Boolean array, True for boundary points."""
    return np.array([p.is_boundary for p in grid.points], dtype=bool)


def quad_areas(grid: Grid) -> np.ndarray:
    """
    Signed area of every final quad (shoelace formula).

    Sub-quads keep the winding of the base or triangle they came from, and
    bases are not all wound the same way, so signs can differ.
    """
    coords = point_coordinates(grid)
    quads = np.array([tuple(q) for q in grid.quads], dtype=np.int64).reshape(-1, 4)
    x = coords[quads, 0]
    y = coords[quads, 1]
    return 0.5 * np.sum(x * np.roll(y, -1, axis=1) - np.roll(x, -1, axis=1) * y, axis=1)


def analyze_grid(grid: Grid) -> Dict[str, Any]:
    """
    Summarize topology counts and quad area spread.

    Returns:
        Dictionary of counts and area statistics
    """
    coords = point_coordinates(grid)
    mask = boundary_mask(grid)
    areas = np.abs(quad_areas(grid))

    radii = np.hypot(coords[mask, 0], coords[mask, 1])
    area_mean = float(np.mean(areas)) if len(areas) else 0.0
    area_std = float(np.std(areas)) if len(areas) else 0.0

    stats = {
        "size": grid.size,
        "points": len(grid.points),
        "boundary_points": int(np.sum(mask)),
        "triangles": len(grid.triangles),
        "unpaired_triangles": sum(1 for t in grid.triangles if t.active),
        "bases": len(grid.bases),
        "quads": len(grid.quads),
        "edges": sum(1 for _ in grid.edges()),
        "area_mean": area_mean,
        "area_std": area_std,
        "area_cv": area_std / area_mean if area_mean else 0.0,
        "area_min": float(np.min(areas)) if len(areas) else 0.0,
        "area_max": float(np.max(areas)) if len(areas) else 0.0,
        "boundary_radius_deviation": float(np.max(np.abs(radii - 1.0))) if len(radii) else 0.0,
    }

    logger.info("Grid analyzed", quads=stats["quads"], area_cv=stats["area_cv"])
    return stats
