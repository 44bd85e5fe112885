"""Procedural island terrain synthesis.

This package builds island height fields from fractal value noise, shapes
them with a central bulge, weathers them with particle-based hydraulic
erosion and thermal cascading, and answers continuous height, normal,
flatness and flow queries over a fixed triangle tessellation.
"""

from .chunks import ChunkMesh, build_chunk_mesh, iter_chunk_meshes
from .config import TerrainConfig, load_config
from .erosion import ErosionReport, ParticleFate
from .exceptions import InvalidGridError, TerrainError, TerrainFrozenError
from .generator import GenerationResult, generate_terrain
from .heightfield import HeightField
from .validation import ValidationResult, validate_heightfield

__all__ = [
    "ChunkMesh",
    "ErosionReport",
    "GenerationResult",
    "HeightField",
    "InvalidGridError",
    "ParticleFate",
    "TerrainConfig",
    "TerrainError",
    "TerrainFrozenError",
    "ValidationResult",
    "build_chunk_mesh",
    "generate_terrain",
    "iter_chunk_meshes",
    "load_config",
    "validate_heightfield",
]
