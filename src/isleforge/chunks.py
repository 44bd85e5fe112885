"""Chunked bulk export of a finished height field as triangle meshes."""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from .heightfield import HeightField

CHUNK_SIZE = 32


def chunk_coords(x: float, y: float) -> tuple[int, int]:
    """Convert grid coordinates to chunk coordinates."""
    return (int(x) // CHUNK_SIZE, int(y) // CHUNK_SIZE)


def chunk_count(width: int) -> int:
    """Number of chunks along one axis of a grid with `width` vertices."""
    cells = max(width - 1, 0)
    return (cells + CHUNK_SIZE - 1) // CHUNK_SIZE


def chunk_bounds(chunk_x: int, chunk_y: int, width: int) -> tuple[int, int, int, int]:
    """Inclusive vertex range (x0, y0, x1, y1) covered by a chunk.

    Neighboring chunks share their edge row/column of vertices.
    """
    count = chunk_count(width)
    if not (0 <= chunk_x < count and 0 <= chunk_y < count):
        raise ValueError(f"Chunk ({chunk_x}, {chunk_y}) outside {count}x{count} chunks")
    x0 = chunk_x * CHUNK_SIZE
    y0 = chunk_y * CHUNK_SIZE
    return (x0, y0, min(x0 + CHUNK_SIZE, width - 1), min(y0 + CHUNK_SIZE, width - 1))


@dataclass
class ChunkMesh:
    """Triangle list for one chunk in world space."""

    chunk_x: int
    chunk_y: int
    vertices: NDArray[np.float32]  # Shape: (N, 3)
    normals: NDArray[np.float32]  # Shape: (N, 3)
    indices: NDArray[np.uint32]  # Shape: (M, 3)

    @property
    def triangle_count(self) -> int:
        return int(self.indices.shape[0])


def vertex_normals(
    heights: NDArray[np.float32], amplitude: float = 1.0
) -> NDArray[np.float32]:
    """Per-vertex normals from central differences.

    Border vertices point straight up.

    Returns:
        Array of shape (rows, cols, 3) with unit normals.
    """
    z = heights.astype(np.float64) * amplitude
    normals = np.zeros(z.shape + (3,), dtype=np.float64)
    normals[..., 2] = 1.0

    interior = np.zeros_like(normals[1:-1, 1:-1])
    interior[..., 0] = z[1:-1, :-2] - z[1:-1, 2:]
    interior[..., 1] = z[:-2, 1:-1] - z[2:, 1:-1]
    interior[..., 2] = 2.0
    if interior.size:
        lengths = np.linalg.norm(interior, axis=-1, keepdims=True)
        normals[1:-1, 1:-1] = interior / lengths

    return normals.astype(np.float32)


def build_chunk_mesh(
    terrain: "HeightField",
    chunk_x: int,
    chunk_y: int,
    normals: NDArray[np.float32] | None = None,
) -> ChunkMesh:
    """Tessellate one chunk of the grid.

    Each cell yields the triangles (00, 10, 01) and (10, 11, 01), the same
    split the height queries use, with `z = height * amplitude`.

    Args:
        terrain: Height field to export (read only).
        chunk_x: Chunk column.
        chunk_y: Chunk row.
        normals: Precomputed `vertex_normals` for the whole grid.

    Returns:
        ChunkMesh for the chunk.
    """
    x0, y0, x1, y1 = chunk_bounds(chunk_x, chunk_y, terrain.width)
    if normals is None:
        normals = vertex_normals(terrain.heights, terrain.amplitude)

    cols = x1 - x0 + 1
    rows = y1 - y0 + 1
    ys, xs = np.meshgrid(
        np.arange(y0, y1 + 1, dtype=np.float32),
        np.arange(x0, x1 + 1, dtype=np.float32),
        indexing="ij",
    )
    zs = terrain.heights[y0 : y1 + 1, x0 : x1 + 1].astype(np.float32) * terrain.amplitude
    vertices = np.stack((xs, ys, zs), axis=-1).reshape(-1, 3).astype(np.float32)
    chunk_normals = normals[y0 : y1 + 1, x0 : x1 + 1].reshape(-1, 3).copy()

    cell_y, cell_x = np.meshgrid(
        np.arange(rows - 1, dtype=np.uint32),
        np.arange(cols - 1, dtype=np.uint32),
        indexing="ij",
    )
    i00 = (cell_y * cols + cell_x).ravel()
    i10 = i00 + 1
    i01 = i00 + cols
    i11 = i01 + 1

    indices = np.empty((2 * i00.size, 3), dtype=np.uint32)
    indices[0::2] = np.stack((i00, i10, i01), axis=-1)
    indices[1::2] = np.stack((i10, i11, i01), axis=-1)

    return ChunkMesh(
        chunk_x=chunk_x,
        chunk_y=chunk_y,
        vertices=vertices,
        normals=chunk_normals,
        indices=indices,
    )


def iter_chunk_meshes(terrain: "HeightField") -> Iterator[ChunkMesh]:
    """Yield a mesh for every chunk, row by row."""
    normals = vertex_normals(terrain.heights, terrain.amplitude)
    count = chunk_count(terrain.width)
    for chunk_y in range(count):
        for chunk_x in range(count):
            yield build_chunk_mesh(terrain, chunk_x, chunk_y, normals)
