"""Custom exceptions for terrain synthesis."""


class TerrainError(Exception):
    """Base exception for terrain errors."""

    pass


class InvalidGridError(TerrainError, ValueError):
    """Raised when a height field cannot be built from the given parameters."""

    pass


class TerrainFrozenError(TerrainError):
    """Raised when mutating a height field after the simulation phase ended."""

    pass
