"""Shared test fixtures for terrain tests."""

import numpy as np
import pytest

from isleforge.config import ErosionConfig
from isleforge.heightfield import HeightField


def radial_distance(width: int, center: float) -> np.ndarray:
    """Distance of every cell [y, x] to (center, center)."""
    coords = np.arange(width, dtype=np.float64) - center
    yy, xx = np.meshgrid(coords, coords, indexing="ij")
    return np.sqrt(xx**2 + yy**2)


@pytest.fixture
def flat_field() -> HeightField:
    """8x8 field at constant height 0.8."""
    return HeightField(np.full((8, 8), 0.8, dtype=np.float32))


@pytest.fixture
def slope_field() -> HeightField:
    """32x32 plane falling towards +x: h = 0.9 - 0.02 * x."""
    xs = np.arange(32, dtype=np.float32)
    heights = np.tile(0.9 - 0.02 * xs, (32, 1)).astype(np.float32)
    return HeightField(heights)


@pytest.fixture
def cone_field() -> HeightField:
    """32x32 cone peaking at 1.0 in the center, 0 at distance 16."""
    dist = radial_distance(32, 16.0)
    heights = np.clip(1.0 - dist / 16.0, 0.0, 1.0).astype(np.float32)
    return HeightField(heights)


@pytest.fixture
def basin_field() -> HeightField:
    """48x48 cone inside a ring valley, so particles cannot reach the edge.

    Peak 0.9 at (24, 24), falling 0.02 per cell to the valley at distance
    15, rising 0.02 per cell beyond it.
    """
    dist = radial_distance(48, 24.0)
    heights = np.where(dist < 15.0, 0.9 - 0.02 * dist, 0.6 + 0.02 * (dist - 15.0))
    return HeightField(heights.astype(np.float32))


@pytest.fixture
def island_field() -> HeightField:
    """48x48 shaped and eroded island from fixed seeds."""
    terrain = HeightField.generate(48, 0.1, seed=3, amplitude=10.0)
    terrain.create_bulge()
    terrain.normalize()
    terrain.erode(2000, seed=11)
    return terrain


@pytest.fixture
def no_cascade() -> ErosionConfig:
    """Default erosion parameters with thermal relaxation disabled."""
    return ErosionConfig(cascade_enabled=False)
