"""Continuous sampling of a grid through its triangle tessellation.

Every unit cell is split along the diagonal from (x+1, y) to (x, y+1) into
the triangles (00, 10, 01) and (10, 11, 01), the same split used for render
meshes. A query locates the containing triangle once; height comes from a
vertical ray/triangle intersection and the normal from the face cross product.
"""

import math
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]

ZERO3: Vec3 = (0.0, 0.0, 0.0)
UP: Vec3 = (0.0, 0.0, 1.0)

_PARALLEL_EPS = 1e-12
_EDGE_TOLERANCE = 1e-6


class Triangle(NamedTuple):
    """Three corners of a grid triangle in 3D (x, y, scaled value)."""

    a: Vec3
    b: Vec3
    c: Vec3


def sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def normalize(v: Vec3) -> Vec3:
    """Scale `v` to unit length; zero or non-finite vectors map to zero."""
    length = math.sqrt(dot(v, v))
    if length == 0.0 or not math.isfinite(length):
        return ZERO3
    return (v[0] / length, v[1] / length, v[2] / length)


def locate_triangle(
    layer: NDArray[np.float32],
    x: float,
    y: float,
    scale: float = 1.0,
) -> Triangle | None:
    """Find the tessellation triangle containing (x, y).

    Args:
        layer: Grid values indexed [y, x].
        x: Continuous x coordinate.
        y: Continuous y coordinate.
        scale: Multiplier applied to the corner values.

    Returns:
        The containing triangle, or None for NaN or out-of-grid coordinates.
    """
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    rows, cols = layer.shape
    if cols < 2 or rows < 2:
        return None
    if x < 0.0 or y < 0.0 or x > cols - 1 or y > rows - 1:
        return None

    # The last row/column belongs to the cell before it
    x0 = min(int(x), cols - 2)
    y0 = min(int(y), rows - 2)
    fx = x - x0
    fy = y - y0

    h10 = float(layer[y0, x0 + 1]) * scale
    h01 = float(layer[y0 + 1, x0]) * scale
    corner_10 = (float(x0 + 1), float(y0), h10)
    corner_01 = (float(x0), float(y0 + 1), h01)

    if fx + fy <= 1.0:
        h00 = float(layer[y0, x0]) * scale
        return Triangle((float(x0), float(y0), h00), corner_10, corner_01)

    h11 = float(layer[y0 + 1, x0 + 1]) * scale
    return Triangle(corner_10, (float(x0 + 1), float(y0 + 1), h11), corner_01)


def intersect_vertical(triangle: Triangle, x: float, y: float) -> float | None:
    """Intersect the vertical line through (x, y) with a triangle.

    Moller-Trumbore with origin (x, y, 0) and direction +z, so the ray
    parameter is the surface value itself.

    Returns:
        The interpolated value, or None if the line misses or runs parallel.
    """
    a, b, c = triangle
    edge1 = sub(b, a)
    edge2 = sub(c, a)
    p = cross(UP, edge2)
    det = dot(edge1, p)
    if abs(det) < _PARALLEL_EPS:
        return None

    inv_det = 1.0 / det
    s = (x - a[0], y - a[1], -a[2])
    u = dot(s, p) * inv_det
    if u < -_EDGE_TOLERANCE or u > 1.0 + _EDGE_TOLERANCE:
        return None

    q = cross(s, edge1)
    v = dot(UP, q) * inv_det
    if v < -_EDGE_TOLERANCE or u + v > 1.0 + _EDGE_TOLERANCE:
        return None

    t = dot(edge2, q) * inv_det
    if not math.isfinite(t):
        return None
    return t


def face_normal(triangle: Triangle) -> Vec3:
    """Unit normal of a triangle; zero for degenerate triangles."""
    a, b, c = triangle
    return normalize(cross(sub(b, a), sub(c, a)))


def sample_value(
    layer: NDArray[np.float32],
    x: float,
    y: float,
    scale: float = 1.0,
) -> float:
    """Interpolated layer value at (x, y); 0.0 outside the grid."""
    triangle = locate_triangle(layer, x, y, scale)
    if triangle is None:
        return 0.0
    value = intersect_vertical(triangle, x, y)
    return 0.0 if value is None else value


def sample_normal(
    layer: NDArray[np.float32],
    x: float,
    y: float,
    scale: float = 1.0,
) -> Vec3:
    """Surface normal at (x, y); zero vector outside the grid."""
    triangle = locate_triangle(layer, x, y, scale)
    if triangle is None:
        return ZERO3
    return face_normal(triangle)


def flatness(
    layer: NDArray[np.float32],
    x: float,
    y: float,
    scale: float = 1.0,
) -> float:
    """Dot product of the surface normal with up, in [-1, 1]; 1 is flat."""
    return dot(sample_normal(layer, x, y, scale), UP)
