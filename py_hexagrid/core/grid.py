"""
Hexagonal quad grid generation.

Builds a quad mesh covering a hexagon in four steps:

1. A triangulated lattice of ``3*size^2 - 3*size + 1`` points is laid out
   column by column.
2. Random active triangles are merged with an adjacent active triangle into
   quads ("bases") until sampling keeps hitting consumed triangles.
3. Every base and every leftover triangle is split into quads around its
   center, sharing edge midpoints so the mesh has no T-junctions.
4. Point adjacency is collected from the edges of the final quads.

The grid can then be relaxed in place any number of times.

Based on https://github.com/kchapelier/hexagrid-relaxing
"""

import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

import structlog

from .errors import SideCountTooLowError
from .events import EventEmitter, EventName, GridEvent, Listener, ObservableSequence
from .lcg_prng import LcgPRNG, NumberGenerator

logger = structlog.get_logger()

# sqrt(3) / 2, horizontal distance between lattice columns
SIDE_LENGTH = 0.8660254037844386


@dataclass
class Point:
    """Grid point. Only coordinates change after construction."""
    x: float
    y: float
    is_boundary: bool


@dataclass
class Triangle:
    """Lattice triangle; ``active`` is cleared once it is merged into a base."""
    a: int
    b: int
    c: int
    active: bool = True

    @property
    def indices(self) -> Tuple[int, int, int]:
        return (self.a, self.b, self.c)


class Quad(NamedTuple):
    """Four point indices in winding order."""
    p0: int
    p1: int
    p2: int
    p3: int


class GridConfig(NamedTuple):
    """Configuration for grid generation."""
    size: int
    max_iteration_count: int = 10
    force_circle_shape: bool = False


class Grid:
    """
    Quad mesh over a hexagonal domain.

    The whole pipeline runs inside the constructor. ``points``, ``triangles``,
    ``bases``, ``quads`` and ``neighbours`` are append-only sequences that
    announce every append through ``events`` before the items are stored.
    They are sealed once construction ends; only point coordinates change
    afterwards.

    Args:
        size: Number of lattice points along one side of the hexagon (>= 2)
        rand: Callable returning floats in [0, 1), drives triangle pairing
        max_iteration_count: Consecutive draws of consumed triangles that end pairing
        force_circle_shape: Project boundary points onto the unit circle
        emitter: Emitter to notify; pass one with listeners attached to
            observe construction itself

    Raises:
        SideCountTooLowError: If ``size`` is lower than 2
    """

    SIDE_LENGTH = SIDE_LENGTH

    def __init__(
        self,
        size: int,
        rand: NumberGenerator = random.random,
        max_iteration_count: int = 10,
        force_circle_shape: bool = False,
        emitter: Optional[EventEmitter] = None,
    ):
        if size < 2:
            raise SideCountTooLowError(size)

        self.size = size
        self.rand = rand
        self.max_iteration_count = max_iteration_count
        self.force_circle_shape = force_circle_shape
        self.config = GridConfig(size, max_iteration_count, force_circle_shape)
        # Set by generate_grid when the number source comes from a seed
        self.seed: Optional[int] = None
        # Set by the first relaxation pass; relaxed grids are never reused
        self.relaxed = False

        self.events = emitter if emitter is not None else EventEmitter()
        self.points: ObservableSequence[Point] = ObservableSequence(GridEvent.POINTS_UPDATED, self.events)
        self.triangles: ObservableSequence[Triangle] = ObservableSequence(GridEvent.TRIANGLES_UPDATED, self.events)
        self.bases: ObservableSequence[Quad] = ObservableSequence(GridEvent.BASES_UPDATED, self.events)
        self.quads: ObservableSequence[Quad] = ObservableSequence(GridEvent.QUADS_UPDATED, self.events)
        self.neighbours: ObservableSequence[List[int]] = ObservableSequence(GridEvent.NEIGHBOURS_UPDATED, self.events)

        logger.info("Generating hexagonal grid", size=size,
                    max_iteration_count=max_iteration_count,
                    force_circle_shape=force_circle_shape)

        self._build_lattice()
        self._triangulate()
        logger.info("Lattice built", points=len(self.points), triangles=len(self.triangles))

        self._pair_triangles()
        unpaired = sum(1 for triangle in self.triangles if triangle.active)
        logger.info("Triangles paired", bases=len(self.bases), unpaired_triangles=unpaired)

        self._subdivide_all()
        self._build_neighbours()

        if self.force_circle_shape:
            self._project_boundary_to_circle()

        for sequence in (self.points, self.triangles, self.bases, self.quads, self.neighbours):
            sequence.seal()

        logger.info("Grid generated", points=len(self.points), quads=len(self.quads))

    def on(self, event: EventName, listener: Listener) -> Listener:
        """Subscribe to a container event, e.g. ``GridEvent.POINTS_UPDATED``."""
        return self.events.on(event, listener)

    def off(self, event: EventName, listener: Listener) -> None:
        self.events.off(event, listener)

    def _column_height(self, x: int) -> int:
        """Number of lattice points in column ``x``."""
        return self.size + x if x < self.size else self.size * 3 - 2 - x

    def _build_lattice(self) -> None:
        size = self.size
        max_height = size * 2 - 1
        max_height_delta = size - max_height * 0.5
        height_ratio = max_height / 2 - max_height_delta

        for x in range(size * 2 - 1):
            height = self._column_height(x)
            height_delta = size - height * 0.5
            for y in range(height):
                self.points.append(Point(
                    (x - size + 1) * self.SIDE_LENGTH / height_ratio,
                    (y + height_delta - max_height / 2) / height_ratio,
                    x == 0 or x == size * 2 - 2 or y == 0 or y == height - 1,
                ))

    def _triangulate(self) -> None:
        """Emit the lattice triangles between each pair of adjacent columns."""
        offset = 0
        for x in range(self.size * 2 - 2):
            height = self._column_height(x)

            if x < self.size - 1:
                # Next column is one point taller
                for y in range(height):
                    self.triangles.append(Triangle(offset + y, offset + y + height, offset + y + height + 1))
                    if y >= height - 1:
                        break
                    self.triangles.append(Triangle(offset + y + height + 1, offset + y + 1, offset + y))
            else:
                # Next column is one point shorter
                for y in range(height):
                    self.triangles.append(Triangle(offset + y, offset + y + height, offset + y + 1))
                    if y >= height - 2:
                        break
                    self.triangles.append(Triangle(offset + y + 1, offset + y + height, offset + y + height + 1))

            offset += height

    def _find_adjacent_triangle(self, index: int) -> Optional[int]:
        """First other active triangle sharing an edge with triangle ``index``."""
        vertices = self.triangles[index].indices

        for i, other in enumerate(self.triangles):
            if i == index or not other.active:
                continue
            shared = sum(1 for vertex in vertices if vertex in other.indices)
            if shared == 2:
                return i

        return None

    def _pair_triangles(self) -> None:
        """
        Merge random pairs of adjacent active triangles into bases.

        Pairing stops after ``max_iteration_count`` consecutive draws without
        reaching an active triangle before the budget ran out, so some
        triangles usually stay unpaired; they are subdivided on their own.
        """
        budget = max(1, self.max_iteration_count)
        count = len(self.triangles)

        while True:
            search_count = 0
            while True:
                index = int(self.rand() * count)
                search_count += 1
                if search_count >= budget or self.triangles[index].active:
                    break

            if search_count == budget:
                break

            adjacent = self._find_adjacent_triangle(index)
            if adjacent is None:
                continue

            first = self.triangles[index]
            second = self.triangles[adjacent]
            indices = sorted(first.indices + second.indices)

            unique = [indices[0]]
            for value in indices[1:]:
                if value != unique[-1]:
                    unique.append(value)

            # Sorted lattice indices -> winding order
            self.bases.append(Quad(unique[0], unique[2], unique[3], unique[1]))
            first.active = False
            second.active = False

    def _subdivide(self, corners: Sequence[int], middles: Dict[Tuple[int, int], int]) -> None:
        """
        Split a triangle or quad into one quad per edge.

        ``middles`` maps an edge (lower index, higher index) to its midpoint
        and is shared by every shape so neighbours reuse the same midpoint.
        """
        count = len(corners)
        corner_points = [self.points[i] for i in corners]

        center = len(self.points)
        self.points.append(Point(
            sum(p.x for p in corner_points) / count,
            sum(p.y for p in corner_points) / count,
            False,
        ))

        halves = []
        for j in range(count):
            index_a = corners[j]
            index_b = corners[(j + 1) % count]
            key = (min(index_a, index_b), max(index_a, index_b))

            if key not in middles:
                point_a = self.points[index_a]
                point_b = self.points[index_b]
                middles[key] = len(self.points)
                self.points.append(Point(
                    (point_a.x + point_b.x) / 2.0,
                    (point_a.y + point_b.y) / 2.0,
                    point_a.is_boundary and point_b.is_boundary,
                ))
            halves.append(middles[key])

        for j in range(count):
            following = (j + 1) % count
            self.quads.append(Quad(center, halves[j], corners[following], halves[following]))

    def _subdivide_all(self) -> None:
        middles: Dict[Tuple[int, int], int] = {}

        for base in list(self.bases):
            self._subdivide(base, middles)

        for triangle in list(self.triangles):
            if triangle.active:
                self._subdivide(triangle.indices, middles)

        logger.info("Subdivision completed", points=len(self.points),
                    quads=len(self.quads), midpoints=len(middles))

    def _build_neighbours(self) -> None:
        adjacency: List[List[int]] = [[] for _ in range(len(self.points))]

        for quad in self.quads:
            for j in range(4):
                index_a = quad[j]
                index_b = quad[(j + 1) & 3]
                if index_b not in adjacency[index_a]:
                    adjacency[index_a].append(index_b)
                if index_a not in adjacency[index_b]:
                    adjacency[index_b].append(index_a)

        self.neighbours.append(*adjacency)

    def _project_boundary_to_circle(self) -> None:
        for point in self.points:
            if point.is_boundary:
                dist = math.sqrt(point.x * point.x + point.y * point.y)
                point.x /= dist
                point.y /= dist

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Yield each undirected edge of the neighbour graph once as (low, high)."""
        for i, neighbour in enumerate(self.neighbours):
            for j in neighbour:
                if i < j:
                    yield (i, j)

    def relax(self) -> None:
        """
        Move every interior point to the average of its neighbours.

        Points are updated in place in index order, so a point already sees
        the new positions of lower-indexed neighbours from the same pass.
        """
        points = self.points
        for i, point in enumerate(points):
            if point.is_boundary:
                continue

            neighbour = self.neighbours[i]
            if not neighbour:
                continue

            sum_x = 0.0
            sum_y = 0.0
            for j in neighbour:
                sum_x += points[j].x
                sum_y += points[j].y
            point.x = sum_x / len(neighbour)
            point.y = sum_y / len(neighbour)

        self.relaxed = True
        logger.debug("Relaxation pass completed", mode="simple")

    def relax_weighted(self) -> None:
        """
        Relax interior points, weighting each neighbour by its distance.

        The further two points are, the more they attract each other: long
        edges shrink and short edges grow, which evens out quad areas and
        reaches equilibrium in fewer passes than :meth:`relax`.
        """
        points = self.points
        for i, point in enumerate(points):
            if point.is_boundary:
                continue

            sum_x = 0.0
            sum_y = 0.0
            weight = 0.0
            for j in self.neighbours[i]:
                other = points[j]
                w = math.sqrt((point.x - other.x) ** 2 + (point.y - other.y) ** 2)
                sum_x += other.x * w
                sum_y += other.y * w
                weight += w

            if weight == 0.0:
                continue
            point.x = sum_x / weight
            point.y = sum_y / weight

        self.relaxed = True
        logger.debug("Relaxation pass completed", mode="weighted")

    def relax_side(self) -> None:
        """Pull boundary points a tenth of the way toward the unit circle."""
        radius = 1

        for point in self.points:
            if not point.is_boundary:
                continue

            dx = point.x
            dy = point.y
            distance = radius - math.sqrt(dx * dx + dy * dy)

            point.x += (dx * distance) * 0.1
            point.y += (dy * distance) * 0.1

        self.relaxed = True
        logger.debug("Relaxation pass completed", mode="side")

    def should_regenerate(self, config: GridConfig, seed: Optional[int]) -> bool:
        """Check if a grid for ``config`` and ``seed`` would differ from this one.

        Grids built without a seed, or already relaxed, are never reused.
        """
        if seed is None or self.seed is None or self.relaxed:
            return True
        return not (self.config == config and self.seed == seed)


RELAX_MODES: Dict[str, Callable[[Grid], None]] = {
    "simple": Grid.relax,
    "weighted": Grid.relax_weighted,
}


def generate_grid(config: GridConfig, seed: Optional[int] = None,
                  emitter: Optional[EventEmitter] = None) -> Grid:
    """
    Build a grid from ``config``.

    Args:
        config: Grid configuration
        seed: Seed for the LCG number source; ``None`` uses ``random.random``
        emitter: Optional emitter with listeners already attached

    Returns:
        Fully constructed Grid
    """
    rand = LcgPRNG(seed).random if seed is not None else random.random
    grid = Grid(config.size, rand, config.max_iteration_count,
                config.force_circle_shape, emitter=emitter)
    grid.seed = seed
    return grid


def generate_or_reuse_grid(existing_grid: Optional[Grid], config: GridConfig,
                           seed: Optional[int] = None) -> Grid:
    """
    Return ``existing_grid`` if it was built from the same config and seed
    and has not been relaxed since,
    otherwise build a new one.
    """
    if existing_grid is None or existing_grid.should_regenerate(config, seed):
        logger.info("Generating new grid")
        return generate_grid(config, seed)

    logger.info("Reusing existing grid", seed=existing_grid.seed,
                points=len(existing_grid.points))
    return existing_grid


def relax_grid(grid: Grid, iterations: int, mode: str = "weighted",
               relax_side: bool = False) -> Grid:
    """
    Run ``iterations`` relaxation passes on ``grid``.

    Args:
        grid: Grid to relax in place
        iterations: Number of passes
        mode: "simple" for :meth:`Grid.relax`, "weighted" for :meth:`Grid.relax_weighted`
        relax_side: Also run :meth:`Grid.relax_side` after each pass

    Returns:
        The same grid, for chaining
    """
    if mode not in RELAX_MODES:
        raise ValueError(f"Unknown relaxation mode: {mode!r}")

    relax = RELAX_MODES[mode]
    logger.info("Starting grid relaxation", iterations=iterations,
                mode=mode, relax_side=relax_side)

    for _ in range(iterations):
        relax(grid)
        if relax_side:
            grid.relax_side()

    return grid
