"""Particle-based hydraulic erosion.

Water particles are spawned one at a time at seeded random land positions
and run to termination before the next one starts. At every step a particle
follows the blended downhill direction by one cell, then trades material
with the four cells around its previous position: it erodes while running
downhill under capacity and deposits when running uphill or over capacity.
The same four cells accumulate the particle's volume as flow.

Particle lifecycle: spawned -> descending -> one of ParticleFate. Every
terminal state except OUT_OF_BOUNDS settles the carried sediment back into
the terrain.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np
import structlog
from numpy.typing import NDArray

from .cascade import cascade
from .config import ErosionConfig
from .exceptions import InvalidGridError
from .triangles import Vec2, sample_normal, sample_value

if TYPE_CHECKING:
    from .heightfield import HeightField

logger = structlog.get_logger()


class ParticleFate(str, Enum):
    """Why a particle stopped."""

    SKIPPED = "skipped"
    OUT_OF_BOUNDS = "out_of_bounds"
    STALLED = "stalled"
    EVAPORATED = "evaporated"
    AGED_OUT = "aged_out"


@dataclass
class Particle:
    """A water droplet carrying sediment."""

    position: Vec2
    velocity: Vec2 = (0.0, 0.0)
    volume: float = 1.0
    sediment: float = 0.0
    age: int = 0


@dataclass
class ErosionReport:
    """Summary of an erosion run."""

    particle_count: int = 0
    steps: int = 0
    eroded: float = 0.0
    deposited: float = 0.0
    fates: dict[ParticleFate, int] = field(
        default_factory=lambda: {fate: 0 for fate in ParticleFate}
    )

    def record(self, fate: ParticleFate) -> None:
        self.fates[fate] += 1

    def summary(self) -> dict[str, float | int]:
        """Flat key/value view for logging."""
        summary: dict[str, float | int] = {
            "particles": self.particle_count,
            "steps": self.steps,
            "eroded": round(self.eroded, 6),
            "deposited": round(self.deposited, 6),
        }
        for fate, count in self.fates.items():
            summary[fate.value] = count
        return summary


def in_bounds(position: Vec2, width: int, margin: float) -> bool:
    """Whether a particle at `position` can still sample and modify the grid."""
    x, y = position
    upper = width - 1 - margin
    return margin <= x < upper and margin <= y < upper


def bilinear_weights(
    position: Vec2, width: int
) -> list[tuple[int, int, float]] | None:
    """Four (x, y, weight) corners around `position`.

    Returns:
        Corner list with weights summing to 1, or None if any corner would
        fall outside the grid.
    """
    x, y = position
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    if x < 0.0 or y < 0.0 or x > width - 1 or y > width - 1 or width < 2:
        return None

    x0 = min(int(x), width - 2)
    y0 = min(int(y), width - 2)
    fx = x - x0
    fy = y - y0
    return [
        (x0, y0, (1.0 - fx) * (1.0 - fy)),
        (x0 + 1, y0, fx * (1.0 - fy)),
        (x0, y0 + 1, (1.0 - fx) * fy),
        (x0 + 1, y0 + 1, fx * fy),
    ]


def deposit_bilinear(grid: NDArray[np.float32], position: Vec2, amount: float) -> bool:
    """Add `amount` to the four cells around `position`, bilinearly weighted.

    Negative amounts remove material. Nothing outside those four cells is
    touched.

    Returns:
        False if the position has no valid corners and nothing changed.
    """
    corners = bilinear_weights(position, grid.shape[0])
    if corners is None:
        return False
    for cx, cy, weight in corners:
        if weight != 0.0:
            grid[cy, cx] = float(grid[cy, cx]) + amount * weight
    return True


def spawn_floor(terrain: "HeightField", config: ErosionConfig) -> float:
    """Minimum spawn height: the configured override or the island sea level."""
    if config.spawn_min_height is not None:
        return config.spawn_min_height
    return terrain.island.sea_level


def max_steps_for(width: int, config: ErosionConfig) -> int:
    """Step bound for one particle: the age limit or the width heuristic."""
    return max(1, min(config.max_age, int(config.max_steps_per_width * width)))


def step_particle(
    terrain: "HeightField",
    particle: Particle,
    config: ErosionConfig,
    report: ErosionReport | None = None,
) -> ParticleFate | None:
    """Advance a particle by one step, trading material with the terrain.

    Returns:
        The fate if the particle terminated during this step, else None.
    """
    heights = terrain.heights
    x, y = particle.position

    # Downhill direction is the horizontal part of the surface normal
    normal = sample_normal(heights, x, y)
    vx = config.inertia * particle.velocity[0] + (1.0 - config.inertia) * normal[0]
    vy = config.inertia * particle.velocity[1] + (1.0 - config.inertia) * normal[1]
    speed = math.hypot(vx, vy)
    if speed == 0.0 or not math.isfinite(speed):
        particle.velocity = (0.0, 0.0)
        return ParticleFate.STALLED

    vx /= speed
    vy /= speed
    particle.velocity = (vx, vy)
    new_position = (x + vx, y + vy)
    if not in_bounds(new_position, terrain.width, config.edge_margin):
        particle.position = new_position
        return ParticleFate.OUT_OF_BOUNDS

    delta_height = sample_value(heights, *new_position) - sample_value(heights, x, y)
    capacity = min(config.max_capacity, config.capacity_factor * speed * particle.volume)

    # delta_z > 0 moves sediment into the terrain, < 0 picks it up
    if delta_height > 0.0 or particle.sediment > capacity:
        if particle.sediment > capacity:
            amount = (particle.sediment - capacity) * config.deposition_rate
        else:
            amount = particle.sediment
        if delta_height > 0.0:
            amount = min(amount, delta_height)
        delta_z = max(0.0, min(amount, particle.sediment))
    else:
        amount = (capacity - particle.sediment) * config.erosion_rate
        delta_z = -max(0.0, min(amount, -delta_height))

    if delta_z != 0.0 and deposit_bilinear(heights, (x, y), delta_z):
        particle.sediment -= delta_z
        if report is not None:
            if delta_z > 0.0:
                report.deposited += delta_z
            else:
                report.eroded -= delta_z

    deposit_bilinear(terrain.flows, (x, y), particle.volume)

    particle.position = new_position
    particle.age += 1
    if report is not None:
        report.steps += 1

    retain = 1.0 - config.evaporation
    particle.volume *= retain
    particle.sediment *= retain
    if particle.volume < config.min_volume:
        return ParticleFate.EVAPORATED

    if config.cascade_enabled:
        cascade(heights, new_position, config.cascade)
    return None


def settle(
    terrain: "HeightField",
    particle: Particle,
    report: ErosionReport | None = None,
) -> None:
    """Drop all carried sediment at the particle's position."""
    if particle.sediment <= 0.0:
        return
    if deposit_bilinear(terrain.heights, particle.position, particle.sediment):
        if report is not None:
            report.deposited += particle.sediment
        particle.sediment = 0.0


def simulate_particle(
    terrain: "HeightField",
    particle: Particle,
    config: ErosionConfig,
    report: ErosionReport | None = None,
) -> ParticleFate:
    """Run one particle from spawn to termination.

    Args:
        terrain: Height field, modified in place.
        particle: Particle at its spawn position.
        config: Erosion parameters.
        report: Optional report updated with step and mass totals.

    Returns:
        The particle's terminal state.
    """
    if not in_bounds(particle.position, terrain.width, config.edge_margin):
        return ParticleFate.OUT_OF_BOUNDS
    if sample_value(terrain.heights, *particle.position) < spawn_floor(terrain, config):
        return ParticleFate.SKIPPED

    max_steps = max_steps_for(terrain.width, config)
    fate = ParticleFate.AGED_OUT
    while particle.age < max_steps:
        outcome = step_particle(terrain, particle, config, report)
        if outcome is not None:
            fate = outcome
            break

    if fate is not ParticleFate.OUT_OF_BOUNDS:
        settle(terrain, particle, report)
    return fate


def erode(
    terrain: "HeightField",
    particle_count: int,
    seed: int,
    config: ErosionConfig | None = None,
) -> ErosionReport:
    """Simulate `particle_count` particles sequentially on `terrain`.

    Deterministic for a given initial grid, particle count and seed: the
    RNG is created once here and drawn from in particle order.

    Args:
        terrain: Height field, modified in place (heights and flows).
        particle_count: Number of particles to spawn.
        seed: Seed for spawn positions.
        config: Erosion parameters (defaults to the terrain's).

    Returns:
        ErosionReport with fate counts and mass totals.

    Raises:
        InvalidGridError: If particle_count is negative.
    """
    if particle_count < 0:
        raise InvalidGridError(f"Particle count must be non-negative, got {particle_count}")

    config = config or terrain.erosion_config
    rng = np.random.default_rng(seed)
    low = config.edge_margin
    high = max(low, terrain.width - 1 - config.edge_margin)
    report = ErosionReport(particle_count=particle_count)

    logger.info(
        "erosion_started",
        particles=particle_count,
        seed=seed,
        width=terrain.width,
    )

    for _ in range(particle_count):
        spawn_x, spawn_y = rng.uniform(low, high, size=2)
        particle = Particle(
            position=(float(spawn_x), float(spawn_y)),
            volume=config.initial_volume,
        )
        report.record(simulate_particle(terrain, particle, config, report))

    logger.info("erosion_finished", **report.summary())
    return report
