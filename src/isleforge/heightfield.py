"""Height field storage, island shaping, and continuous queries."""

import logging
import math

import numpy as np
from numpy.typing import NDArray

from .config import ErosionConfig, IslandConfig, TerrainConfig
from .erosion import ErosionReport, erode
from .exceptions import InvalidGridError, TerrainFrozenError
from .noise import DEFAULT_DEPTH, generate
from .triangles import Vec2, Vec3, flatness, sample_normal, sample_value

logger = logging.getLogger(__name__)


class HeightField:
    """Square grid of (height, flow) cells.

    Heights are unit-less and live in `heights[y, x]`; `flows` accumulates
    water-particle visits. The grid size never changes. After `freeze()` the
    arrays are read-only and every mutator raises TerrainFrozenError.

    World-space queries (`height`, `get_normal`, `get_dot_prod`) scale the
    stored heights by `amplitude`; `flow` returns the raw accumulator.
    """

    def __init__(
        self,
        heights: NDArray[np.float32],
        amplitude: float = 1.0,
        island: IslandConfig | None = None,
        erosion: ErosionConfig | None = None,
    ):
        if heights.ndim != 2 or heights.shape[0] != heights.shape[1]:
            raise InvalidGridError(f"Height grid must be square, got {heights.shape}")
        if heights.shape[0] < 2:
            raise InvalidGridError(
                f"Height grid needs at least 2x2 cells, got {heights.shape}"
            )
        if not math.isfinite(amplitude):
            raise InvalidGridError(f"Amplitude must be finite, got {amplitude}")
        if not np.isfinite(heights).all():
            raise InvalidGridError("Height grid contains NaN or infinite values")

        self._heights = np.array(heights, dtype=np.float32, copy=True)
        self._flows = np.zeros_like(self._heights)
        self.amplitude = float(amplitude)
        self.island = island or IslandConfig()
        self.erosion_config = erosion or ErosionConfig()
        self.last_report: ErosionReport | None = None
        self._frozen = False

    @classmethod
    def generate(
        cls,
        width: int,
        frequency: float,
        seed: int,
        amplitude: float,
        depth: int = DEFAULT_DEPTH,
        island: IslandConfig | None = None,
        erosion: ErosionConfig | None = None,
    ) -> "HeightField":
        """Build a height field from fractal noise.

        Args:
            width: Grid width and height in cells (at least 2).
            frequency: Noise frequency of the first octave.
            seed: Noise seed.
            amplitude: World-space vertical scale.
            depth: Noise octaves.
            island: Bulge parameters.
            erosion: Erosion parameters.

        Returns:
            Unshaped height field with heights in [0, 1).

        Raises:
            InvalidGridError: If width or frequency is invalid.
        """
        if width < 2:
            raise InvalidGridError(f"Width must be at least 2, got {width}")
        if not math.isfinite(frequency):
            raise InvalidGridError(f"Frequency must be finite, got {frequency}")

        noise = generate(width, frequency, seed, depth)
        logger.debug(f"Generated {width}x{width} noise (frequency={frequency}, seed={seed})")
        return cls(noise, amplitude=amplitude, island=island, erosion=erosion)

    @classmethod
    def from_config(cls, config: TerrainConfig) -> "HeightField":
        """Build an unshaped height field from a TerrainConfig."""
        return cls.generate(
            config.width,
            config.noise.frequency,
            config.noise.seed,
            config.amplitude,
            depth=config.noise.depth,
            island=config.island,
            erosion=config.erosion,
        )

    @property
    def width(self) -> int:
        return self._heights.shape[0]

    @property
    def heights(self) -> NDArray[np.float32]:
        """Height grid indexed [y, x]."""
        return self._heights

    @property
    def flows(self) -> NDArray[np.float32]:
        """Flow accumulator grid indexed [y, x]."""
        return self._flows

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """End the simulation phase; the grid becomes read-only."""
        self._heights.flags.writeable = False
        self._flows.flags.writeable = False
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise TerrainFrozenError("Height field is frozen; simulation phase has ended")

    def create_bulge(self) -> None:
        """Blend the heights with a centered Gaussian to form an island.

        Each cell becomes `(1 - mix) * exp(-(d / spread)^2) + mix * h`, where
        `d` is the distance to the map center and `spread` is
        `bulge_spread * width`.
        """
        self._check_mutable()
        width = self.width
        center = width / 2.0
        spread = max(self.island.bulge_spread * width, 1e-6)
        mix = self.island.bulge_mix

        coords = np.arange(width, dtype=np.float64) - center
        yy, xx = np.meshgrid(coords, coords, indexing="ij")
        dist_sq = xx**2 + yy**2
        falloff = np.exp(-dist_sq / (spread * spread))

        shaped = (1.0 - mix) * falloff + mix * self._heights.astype(np.float64)
        self._heights[:] = shaped.astype(np.float32)
        logger.debug(f"Applied bulge (mix={mix}, spread={spread:.2f} cells)")

    def normalize(self) -> None:
        """Rescale heights linearly so the minimum is 0 and the maximum 1.

        A flat field becomes all zeros.
        """
        self._check_mutable()
        lo = float(self._heights.min())
        hi = float(self._heights.max())
        span = hi - lo
        if span <= 0.0 or not math.isfinite(span):
            self._heights.fill(0.0)
            logger.debug("Normalized flat height field to zero")
            return

        scaled = (self._heights.astype(np.float64) - lo) / span
        self._heights[:] = scaled.astype(np.float32)

    def erode(self, particle_count: int, seed: int) -> NDArray[np.float32]:
        """Run the particle erosion simulation in place.

        Args:
            particle_count: Number of particles to spawn.
            seed: Seed for the particle RNG.

        Returns:
            Copy of the accumulated flow grid.
        """
        self._check_mutable()
        self.last_report = erode(self, particle_count, seed, self.erosion_config)
        return self._flows.copy()

    def height(self, pos: Vec2) -> float:
        """World-space interpolated height at a continuous (x, y)."""
        return sample_value(self._heights, pos[0], pos[1], self.amplitude)

    def get_normal(self, pos: Vec2) -> Vec3:
        """World-space surface normal at (x, y); zero vector outside the grid."""
        return sample_normal(self._heights, pos[0], pos[1], self.amplitude)

    def get_dot_prod(self, pos: Vec2) -> float:
        """Flatness at (x, y): 1 is level ground, 0 outside the grid."""
        return flatness(self._heights, pos[0], pos[1], self.amplitude)

    def flow(self, pos: Vec2) -> float:
        """Interpolated flow accumulator value at (x, y)."""
        return sample_value(self._flows, pos[0], pos[1])

    def is_land(self, pos: Vec2) -> bool:
        """Whether the unit-less height at (x, y) is at or above sea level."""
        return sample_value(self._heights, pos[0], pos[1]) >= self.island.sea_level

    def to_flat(self) -> tuple[NDArray[np.float32], NDArray[np.float32]]:
        """Row-major (x + y * width) copies of the height and flow grids."""
        return self._heights.ravel().copy(), self._flows.ravel().copy()
