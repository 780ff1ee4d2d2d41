"""Errors raised while building a grid."""

from enum import Enum


class GridErrorKind(Enum):
    """Closed set of grid construction failures."""

    SIDE_COUNT_TOO_LOW = "SideCountTooLow"


class GridError(Exception):
    """Base class for grid errors; ``kind`` tells which failure occurred."""

    kind: GridErrorKind

    def __init__(self, kind: GridErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class SideCountTooLowError(GridError):
    """Raised when a grid is requested with fewer than two points per side."""

    def __init__(self, size=None):
        super().__init__(GridErrorKind.SIDE_COUNT_TOO_LOW, "Side Size too low")
        self.size = size
