"""Deterministic fractal value noise.

Each octave hashes the four integer lattice corners around a sample through
a fixed 256-entry permutation table, eases the fractional offsets with the
cubic `3s^2 - 2s^3` and interpolates in x, then in y. Octaves double in
frequency and halve in amplitude; the sum is divided by the total weight so
the result stays in [0, 1).
"""

import numpy as np
from numpy.typing import NDArray

# Fixed permutation/hash table; values are in [0, 255].
HASH = np.array(
    [
        208, 34, 231, 213, 32, 248, 233, 56, 161, 78, 24, 140, 71, 48, 140, 254,
        245, 255, 247, 247, 40, 185, 248, 251, 245, 28, 124, 204, 204, 76, 36, 1,
        107, 28, 234, 163, 202, 224, 245, 128, 167, 204, 9, 92, 217, 54, 239, 174,
        173, 102, 193, 189, 190, 121, 100, 108, 167, 44, 43, 77, 180, 204, 8, 81,
        70, 223, 11, 38, 24, 254, 210, 210, 177, 32, 81, 195, 243, 125, 8, 169,
        112, 32, 97, 53, 195, 13, 203, 9, 47, 104, 125, 117, 114, 124, 165, 203,
        181, 235, 193, 206, 70, 180, 174, 0, 167, 181, 41, 164, 30, 116, 127, 198,
        245, 146, 87, 224, 149, 206, 57, 4, 192, 210, 65, 210, 129, 240, 178, 105,
        228, 108, 245, 148, 140, 40, 35, 195, 38, 58, 65, 207, 215, 253, 65, 85,
        208, 76, 62, 3, 237, 55, 89, 232, 50, 217, 64, 244, 157, 199, 121, 252,
        90, 17, 212, 203, 149, 152, 140, 187, 234, 177, 73, 174, 193, 100, 192, 143,
        97, 53, 145, 135, 19, 103, 13, 90, 135, 151, 199, 91, 239, 247, 33, 39,
        145, 101, 120, 99, 3, 186, 86, 99, 41, 237, 203, 111, 79, 220, 135, 158,
        42, 30, 154, 120, 67, 87, 167, 135, 176, 183, 191, 253, 115, 184, 21, 233,
        58, 129, 233, 142, 39, 128, 211, 118, 137, 139, 255, 114, 20, 218, 113, 154,
        27, 127, 246, 250, 1, 8, 198, 250, 209, 92, 222, 173, 21, 88, 102, 219,
    ],
    dtype=np.int64,
)

HASH_SIZE = 256
DEFAULT_DEPTH = 10


def lattice_hash(
    x: NDArray[np.int64], y: NDArray[np.int64], seed: int
) -> NDArray[np.int64]:
    """Hash integer lattice coordinates to values in [0, 255].

    Negative indices wrap by magnitude, so the table lookup is valid for any
    seed and coordinate sign.
    """
    row = HASH[np.abs(y + seed) % HASH_SIZE]
    return HASH[np.abs(row + x) % HASH_SIZE]


def smooth_interpolate(
    a: NDArray[np.float64], b: NDArray[np.float64], s: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Interpolate from `a` to `b` with a cubic ease of `s`."""
    t = s * s * (3.0 - 2.0 * s)
    return a + t * (b - a)


def value_noise(
    x: NDArray[np.float64], y: NDArray[np.float64], seed: int
) -> NDArray[np.float64]:
    """Single octave of value noise at non-negative sample coordinates.

    Returns raw hash-scale values in [0, 255].
    """
    x_int = np.floor(x).astype(np.int64)
    y_int = np.floor(y).astype(np.int64)
    x_frac = x - x_int
    y_frac = y - y_int

    s = lattice_hash(x_int, y_int, seed).astype(np.float64)
    t = lattice_hash(x_int + 1, y_int, seed).astype(np.float64)
    u = lattice_hash(x_int, y_int + 1, seed).astype(np.float64)
    v = lattice_hash(x_int + 1, y_int + 1, seed).astype(np.float64)

    low = smooth_interpolate(s, t, x_frac)
    high = smooth_interpolate(u, v, x_frac)
    return smooth_interpolate(low, high, y_frac)


def fractal_noise(
    x: NDArray[np.float64],
    y: NDArray[np.float64],
    frequency: float,
    seed: int,
    depth: int = DEFAULT_DEPTH,
) -> NDArray[np.float64]:
    """Sum `depth` octaves of value noise at doubling frequency.

    Args:
        x: Sample x coordinates (grid units, non-negative).
        y: Sample y coordinates (grid units, non-negative).
        frequency: Frequency of the first octave.
        seed: Noise seed.
        depth: Number of octaves.

    Returns:
        Noise values in [0, 1).
    """
    xa = x * frequency
    ya = y * frequency
    amplitude = 1.0
    total = np.zeros(np.broadcast(xa, ya).shape, dtype=np.float64)
    weight = 0.0

    for _ in range(depth):
        weight += HASH_SIZE * amplitude
        total += value_noise(xa, ya, seed) * amplitude
        amplitude /= 2.0
        xa = xa * 2.0
        ya = ya * 2.0

    if weight == 0.0:
        return total
    return total / weight


def generate(
    width: int,
    frequency: float,
    seed: int,
    depth: int = DEFAULT_DEPTH,
) -> NDArray[np.float32]:
    """Generate a square grid of fractal value noise.

    Pure function of `(width, frequency, seed, depth)`: the same inputs give
    a bit-identical grid.

    Args:
        width: Grid width and height in cells.
        frequency: Frequency of the first octave, in lattice cells per grid cell.
        seed: Noise seed.
        depth: Number of octaves.

    Returns:
        Array of shape (width, width) indexed [y, x], values in [0, 1).
    """
    coords = np.arange(width, dtype=np.float64)
    ys, xs = np.meshgrid(coords, coords, indexing="ij")
    return fractal_noise(xs, ys, frequency, seed, depth).astype(np.float32)
