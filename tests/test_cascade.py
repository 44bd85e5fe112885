"""Tests for thermal relaxation."""

import math

import numpy as np
import pytest

from isleforge.cascade import NEIGHBOR_OFFSETS, cascade
from isleforge.config import CascadeConfig


class TestCascade:
    """Tests for the local cascade pass."""

    def test_eight_neighbors(self) -> None:
        """The neighborhood is 8-connected without the center."""
        assert len(NEIGHBOR_OFFSETS) == 8
        assert (0, 0) not in NEIGHBOR_OFFSETS

    def test_spike_is_lowered(self) -> None:
        """A spike above the talus threshold sheds material to its neighbors."""
        heights = np.zeros((5, 5), dtype=np.float32)
        heights[2, 2] = 1.0
        moved = cascade(heights, (2.0, 2.0), CascadeConfig())

        assert moved > 0.0
        assert heights[2, 2] < 1.0
        assert heights[1, 2] > 0.0

    def test_pit_is_filled(self) -> None:
        """A pit below its neighbors is raised."""
        heights = np.ones((5, 5), dtype=np.float32)
        heights[2, 2] = 0.0
        cascade(heights, (2.0, 2.0), CascadeConfig())
        assert heights[2, 2] > 0.0

    def test_conserves_material(self) -> None:
        """Material is moved, never created or destroyed."""
        heights = np.zeros((5, 5), dtype=np.float32)
        heights[2, 2] = 1.0
        before = float(heights.astype(np.float64).sum())
        cascade(heights, (2.0, 2.0), CascadeConfig())
        assert float(heights.astype(np.float64).sum()) == pytest.approx(before, abs=1e-6)

    def test_flat_grid_unchanged(self) -> None:
        """Flat terrain has nothing to relax."""
        heights = np.full((5, 5), 0.4, dtype=np.float32)
        assert cascade(heights, (2.0, 2.0), CascadeConfig()) == 0.0
        np.testing.assert_array_equal(heights, np.full((5, 5), 0.4, dtype=np.float32))

    def test_within_talus_unchanged(self) -> None:
        """Differences under the talus threshold are stable."""
        heights = np.zeros((3, 3), dtype=np.float32)
        heights[1, 1] = 0.03
        original = heights.copy()
        assert cascade(heights, (1.0, 1.0), CascadeConfig(talus_threshold=0.04)) == 0.0
        np.testing.assert_array_equal(heights, original)

    def test_only_touches_neighborhood(self) -> None:
        """Cells outside the 3x3 block around the position are untouched."""
        heights = np.zeros((7, 7), dtype=np.float32)
        heights[3, 3] = 1.0
        cascade(heights, (3.2, 2.9), CascadeConfig())

        outside = np.ones((7, 7), dtype=bool)
        outside[2:5, 2:5] = False
        assert np.all(heights[outside] == 0.0)

    def test_rounds_to_nearest_cell(self) -> None:
        """The center is the cell nearest the position."""
        heights = np.zeros((5, 5), dtype=np.float32)
        heights[3, 3] = 1.0
        cascade(heights, (2.6, 3.4), CascadeConfig())
        assert heights[3, 3] < 1.0

    def test_corner_position(self) -> None:
        """Positions on the grid corner use only existing neighbors."""
        heights = np.zeros((4, 4), dtype=np.float32)
        heights[0, 0] = 1.0
        moved = cascade(heights, (0.0, 0.0), CascadeConfig())
        assert moved > 0.0
        assert np.isfinite(heights).all()

    def test_invalid_positions(self) -> None:
        """NaN and out-of-grid positions do nothing."""
        heights = np.zeros((4, 4), dtype=np.float32)
        heights[1, 1] = 1.0
        original = heights.copy()
        assert cascade(heights, (math.nan, 1.0), CascadeConfig()) == 0.0
        assert cascade(heights, (-3.0, 1.0), CascadeConfig()) == 0.0
        assert cascade(heights, (1.0, 9.0), CascadeConfig()) == 0.0
        np.testing.assert_array_equal(heights, original)

    def test_zero_settling_moves_nothing(self) -> None:
        """With settling 0 no material moves."""
        heights = np.zeros((3, 3), dtype=np.float32)
        heights[1, 1] = 1.0
        assert cascade(heights, (1.0, 1.0), CascadeConfig(settling=0.0)) == 0.0
        assert heights[1, 1] == 1.0
