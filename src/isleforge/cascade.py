"""Thermal relaxation: limit the height difference between neighboring cells."""

import math

import numpy as np
from numpy.typing import NDArray

from .config import CascadeConfig
from .triangles import Vec2

# 8-connected neighborhood, row by row
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


def cascade(
    heights: NDArray[np.float32],
    position: Vec2,
    config: CascadeConfig,
) -> float:
    """Relax slopes between the cell nearest `position` and its neighbors.

    Neighbors are visited in ascending height order. Whenever the difference
    to a neighbor exceeds the talus threshold (scaled by the neighbor
    distance), half of the excess times `config.settling` moves from the
    higher cell to the lower one. This is a single local pass; repeated calls
    along particle paths converge the terrain.

    Args:
        heights: Height grid indexed [y, x], modified in place.
        position: Continuous (x, y) position.
        config: Relaxation parameters.

    Returns:
        Total height moved between cells.
    """
    x, y = position
    if not (math.isfinite(x) and math.isfinite(y)):
        return 0.0

    rows, cols = heights.shape
    cx = int(round(x))
    cy = int(round(y))
    if not (0 <= cx < cols and 0 <= cy < rows):
        return 0.0

    neighbors: list[tuple[float, int, int, float]] = []
    for dx, dy in NEIGHBOR_OFFSETS:
        nx = cx + dx
        ny = cy + dy
        if 0 <= nx < cols and 0 <= ny < rows:
            neighbors.append((float(heights[ny, nx]), nx, ny, math.hypot(dx, dy)))
    neighbors.sort()

    moved = 0.0
    for _, nx, ny, distance in neighbors:
        center = float(heights[cy, cx])
        neighbor = float(heights[ny, nx])
        diff = center - neighbor
        excess = abs(diff) - config.talus_threshold * distance
        if excess <= 0.0:
            continue

        transfer = 0.5 * excess * config.settling
        if diff > 0.0:
            heights[cy, cx] = center - transfer
            heights[ny, nx] = neighbor + transfer
        else:
            heights[cy, cx] = center + transfer
            heights[ny, nx] = neighbor - transfer
        moved += transfer

    return moved
