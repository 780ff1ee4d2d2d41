"""Tests for in-place grid relaxation."""

import math

import pytest
from py_hexagrid.core import Grid, relax_grid
from py_hexagrid.core.lcg_prng import LcgPRNG


def coordinates(grid):
    return [(p.x, p.y) for p in grid.points]


def sequential_mean(grid):
    """Neighbour average computed point by point over one shared buffer."""
    coords = [[p.x, p.y] for p in grid.points]
    for i, point in enumerate(grid.points):
        if point.is_boundary:
            continue
        neighbour = grid.neighbours[i]
        sum_x = 0.0
        sum_y = 0.0
        for j in neighbour:
            sum_x += coords[j][0]
            sum_y += coords[j][1]
        coords[i] = [sum_x / len(neighbour), sum_y / len(neighbour)]
    return [tuple(c) for c in coords]


def snapshot_mean(grid):
    """Neighbour average computed from coordinates taken before the pass."""
    before = coordinates(grid)
    coords = list(before)
    for i, point in enumerate(grid.points):
        if point.is_boundary:
            continue
        neighbour = grid.neighbours[i]
        coords[i] = (sum(before[j][0] for j in neighbour) / len(neighbour),
                     sum(before[j][1] for j in neighbour) / len(neighbour))
    return coords


def sequential_weighted_mean(grid):
    coords = [[p.x, p.y] for p in grid.points]
    for i, point in enumerate(grid.points):
        if point.is_boundary:
            continue
        sum_x = 0.0
        sum_y = 0.0
        weight = 0.0
        for j in grid.neighbours[i]:
            w = math.sqrt((coords[i][0] - coords[j][0]) ** 2 + (coords[i][1] - coords[j][1]) ** 2)
            sum_x += coords[j][0] * w
            sum_y += coords[j][1] * w
            weight += w
        coords[i] = [sum_x / weight, sum_y / weight]
    return [tuple(c) for c in coords]


def max_displacement(before, after):
    return max(math.hypot(a[0] - b[0], a[1] - b[1]) for a, b in zip(before, after))


class TestRelax:
    """Test the plain neighbour average."""

    @pytest.mark.parametrize("seed", [1, 5, 77])
    def test_matches_sequential_average(self, seed):
        """Test that each point sees already-updated lower neighbours."""
        grid = Grid(5, LcgPRNG(seed))
        expected = sequential_mean(grid)

        grid.relax()

        assert coordinates(grid) == expected

    def test_differs_from_snapshot_average(self):
        """Test that the in-place pass is not a double-buffered one."""
        grid = Grid(5, LcgPRNG(3))
        snapshot = snapshot_mean(grid)

        grid.relax()

        assert coordinates(grid) != snapshot

    def test_boundary_untouched(self):
        """Test that boundary points keep their exact coordinates."""
        grid = Grid(6, LcgPRNG(9), force_circle_shape=True)
        before = [(p.x, p.y) for p in grid.points if p.is_boundary]

        grid.relax()

        assert [(p.x, p.y) for p in grid.points if p.is_boundary] == before

    def test_repeated_passes_converge(self):
        """Test that successive passes move points less and less."""
        grid = Grid(4, LcgPRNG(3))
        before = coordinates(grid)
        grid.relax()
        first_step = max_displacement(before, coordinates(grid))

        for _ in range(60):
            before = coordinates(grid)
            grid.relax()
        last_step = max_displacement(before, coordinates(grid))

        assert last_step < first_step * 0.1

    def test_containers_unchanged(self):
        """Test that relaxation never grows a container."""
        grid = Grid(4, LcgPRNG(2))
        sizes = [len(grid.points), len(grid.triangles), len(grid.bases),
                 len(grid.quads), len(grid.neighbours)]
        quads = list(grid.quads)

        grid.relax()
        grid.relax_weighted()
        grid.relax_side()

        assert sizes == [len(grid.points), len(grid.triangles), len(grid.bases),
                         len(grid.quads), len(grid.neighbours)]
        assert list(grid.quads) == quads


class TestRelaxWeighted:
    """Test the distance weighted average."""

    @pytest.mark.parametrize("seed", [2, 13])
    def test_matches_sequential_weighted_average(self, seed):
        """Test the weighted update point by point."""
        grid = Grid(5, LcgPRNG(seed))
        expected = sequential_weighted_mean(grid)

        grid.relax_weighted()

        assert coordinates(grid) == expected

    def test_boundary_untouched(self):
        """Test that boundary points keep their exact coordinates."""
        grid = Grid(5, LcgPRNG(4))
        before = [(p.x, p.y) for p in grid.points if p.is_boundary]

        grid.relax_weighted()

        assert [(p.x, p.y) for p in grid.points if p.is_boundary] == before


class TestRelaxSide:
    """Test the radial pull on boundary points."""

    def test_boundary_pulled_toward_circle(self):
        """Test the damped radial update."""
        grid = Grid(4, LcgPRNG(6))
        expected = []
        for p in grid.points:
            if p.is_boundary:
                distance = 1 - math.sqrt(p.x * p.x + p.y * p.y)
                expected.append((p.x + (p.x * distance) * 0.1, p.y + (p.y * distance) * 0.1))
        interior = [(p.x, p.y) for p in grid.points if not p.is_boundary]

        grid.relax_side()

        assert [(p.x, p.y) for p in grid.points if p.is_boundary] == expected
        assert [(p.x, p.y) for p in grid.points if not p.is_boundary] == interior

    def test_moves_closer_to_circle(self):
        """Test that boundary radii approach one."""
        grid = Grid(5, LcgPRNG(6))

        def deviation():
            return max(abs(math.hypot(p.x, p.y) - 1) for p in grid.points if p.is_boundary)

        start = deviation()
        for _ in range(20):
            grid.relax_side()

        assert deviation() < start


class TestRelaxGrid:
    """Test the iteration helper."""

    def test_same_as_manual_passes(self):
        """Test that relax_grid runs the chosen operator the given number of times."""
        grid = Grid(4, LcgPRNG(10))
        manual = Grid(4, LcgPRNG(10))

        assert relax_grid(grid, 3, mode="simple", relax_side=True) is grid
        for _ in range(3):
            manual.relax()
            manual.relax_side()

        assert coordinates(grid) == coordinates(manual)

    def test_weighted_default(self):
        """Test that the default mode is the weighted operator."""
        grid = Grid(4, LcgPRNG(10))
        manual = Grid(4, LcgPRNG(10))

        relax_grid(grid, 2)
        manual.relax_weighted()
        manual.relax_weighted()

        assert coordinates(grid) == coordinates(manual)

    def test_unknown_mode(self):
        """Test that unknown modes are rejected."""
        grid = Grid(3, LcgPRNG(1))

        with pytest.raises(ValueError):
            relax_grid(grid, 1, mode="laplace")
