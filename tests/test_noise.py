"""Tests for fractal value noise."""

import numpy as np

from isleforge.noise import (
    HASH,
    fractal_noise,
    generate,
    lattice_hash,
    smooth_interpolate,
    value_noise,
)


class TestLatticeHash:
    """Tests for the permutation table lookup."""

    def test_table_values_in_range(self) -> None:
        """Every table entry is a byte value."""
        assert HASH.shape == (256,)
        assert HASH.min() >= 0
        assert HASH.max() <= 255

    def test_two_level_lookup(self) -> None:
        """Hash looks up the row by y + seed, then offsets by x."""
        x = np.array([7])
        y = np.array([3])
        expected = HASH[(HASH[(3 + 5) % 256] + 7) % 256]
        assert lattice_hash(x, y, 5)[0] == expected

    def test_negative_coordinates_wrap_by_magnitude(self) -> None:
        """Negative lattice coordinates stay inside the table."""
        x = np.array([-3])
        y = np.array([-5])
        expected = HASH[abs(HASH[5] - 3) % 256]
        assert lattice_hash(x, y, 0)[0] == expected

    def test_large_seed(self) -> None:
        """Seeds beyond the table size wrap around."""
        x = np.array([1, 2, 3])
        y = np.array([4, 5, 6])
        np.testing.assert_array_equal(lattice_hash(x, y, 256 + 9), lattice_hash(x, y, 9))


class TestValueNoise:
    """Tests for a single noise octave."""

    def test_lattice_points_return_hash(self) -> None:
        """At integer coordinates the noise equals the corner hash."""
        result = value_noise(np.array([2.0]), np.array([3.0]), 0)
        assert result[0] == lattice_hash(np.array([2]), np.array([3]), 0)[0]

    def test_output_in_hash_range(self) -> None:
        """Interpolated values stay within the table range."""
        xs = np.linspace(0.0, 20.0, 101)
        ys = np.linspace(0.0, 13.0, 101)
        result = value_noise(xs, ys, 4)
        assert result.min() >= 0.0
        assert result.max() <= 255.0

    def test_smooth_interpolate_endpoints(self) -> None:
        """Ease curve hits both endpoints and the midpoint."""
        a = np.array([10.0])
        b = np.array([30.0])
        assert smooth_interpolate(a, b, np.array([0.0]))[0] == 10.0
        assert smooth_interpolate(a, b, np.array([1.0]))[0] == 30.0
        assert smooth_interpolate(a, b, np.array([0.5]))[0] == 20.0


class TestFractalNoise:
    """Tests for octave summation."""

    def test_zero_frequency_is_constant(self) -> None:
        """With frequency 0 every octave samples the origin."""
        result = generate(4, 0.0, 0)
        expected = lattice_hash(np.array([0]), np.array([0]), 0)[0] / 256.0
        np.testing.assert_allclose(result, np.full((4, 4), expected), rtol=1e-6)

    def test_zero_depth_is_zero(self) -> None:
        """No octaves produce no signal."""
        xs = np.arange(5, dtype=np.float64)
        result = fractal_noise(xs, xs, 0.1, 0, depth=0)
        np.testing.assert_array_equal(result, np.zeros(5))


class TestGenerate:
    """Tests for grid generation."""

    def test_output_shape(self) -> None:
        """Output is a square grid."""
        result = generate(16, 0.1, 0)
        assert result.shape == (16, 16)

    def test_output_dtype(self) -> None:
        """Output is float32."""
        result = generate(8, 0.1, 0)
        assert result.dtype == np.float32

    def test_output_range(self) -> None:
        """Values lie in [0, 1)."""
        result = generate(64, 0.1, 42)
        assert result.min() >= 0.0
        assert result.max() < 1.0

    def test_deterministic_with_same_seed(self) -> None:
        """Same inputs produce bit-identical output."""
        result1 = generate(32, 0.1, 123)
        result2 = generate(32, 0.1, 123)
        np.testing.assert_array_equal(result1, result2)

    def test_different_seed_different_output(self) -> None:
        """Different seeds produce different output."""
        result1 = generate(32, 0.1, 1)
        result2 = generate(32, 0.1, 2)
        assert not np.array_equal(result1, result2)

    def test_indexed_by_row_then_column(self) -> None:
        """Grid cell [y, x] holds the noise sampled at (x, y)."""
        result = generate(6, 0.3, 0)
        direct = fractal_noise(np.array([4.0]), np.array([1.0]), 0.3, 0)
        assert result[1, 4] == np.float32(direct[0])
