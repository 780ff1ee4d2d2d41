"""
Core grid generation functionality.
"""

from .errors import GridError, GridErrorKind, SideCountTooLowError
from .events import EventEmitter, GridEvent, ObservableSequence
from .grid import (Grid, GridConfig, Point, Quad, Triangle, generate_grid,
                   generate_or_reuse_grid, relax_grid)
from .lcg_prng import LcgPRNG, number_generator_factory
from .mesh_quality import analyze_grid, boundary_mask, point_coordinates, quad_areas

__all__ = ['GridError', 'GridErrorKind', 'SideCountTooLowError',
           'EventEmitter', 'GridEvent', 'ObservableSequence',
           'Grid', 'GridConfig', 'Point', 'Quad', 'Triangle',
           'generate_grid', 'generate_or_reuse_grid', 'relax_grid',
           'LcgPRNG', 'number_generator_factory',
           'analyze_grid', 'boundary_mask', 'point_coordinates', 'quad_areas']
