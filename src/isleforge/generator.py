"""Main terrain generation orchestration."""

import logging

import numpy as np

from .chunks import chunk_count
from .config import TerrainConfig
from .erosion import ErosionReport
from .heightfield import HeightField
from .placement import Placement, find_spawn_point, place_treasure, place_trees
from .validation import ValidationResult, validate_heightfield

logger = logging.getLogger(__name__)


class GenerationResult:
    """Result of terrain generation with the frozen field and its reports."""

    def __init__(
        self,
        terrain: HeightField,
        config: TerrainConfig,
        erosion: ErosionReport | None,
        validation: ValidationResult,
        spawn: Placement | None = None,
        objects: list[Placement] | None = None,
    ):
        self.terrain = terrain
        self.config = config
        self.erosion = erosion
        self.validation = validation
        self.spawn = spawn
        self.objects = objects or []


def generate_terrain(config: TerrainConfig) -> GenerationResult:
    """Generate a complete island from configuration.

    Args:
        config: Terrain generation configuration.

    Returns:
        GenerationResult holding the frozen HeightField.
    """
    width = config.width
    logger.info(
        f"Generating terrain {width}x{width} with seed {config.noise.seed}, "
        f"erosion seed {config.erosion_seed}"
    )

    # Stage A: Base noise
    logger.info("Stage A: Generating noise field...")
    terrain = HeightField.from_config(config)

    # Stage B: Island shaping
    logger.info("Stage B: Shaping island...")
    terrain.create_bulge()
    terrain.normalize()
    logger.info(f"Land fraction before erosion: {_land_fraction(terrain):.2%}")

    # Stage C: Hydraulic erosion
    logger.info(f"Stage C: Eroding with {config.particle_count} particles...")
    terrain.erode(config.particle_count, config.erosion_seed)
    if config.normalize_after_erosion:
        terrain.normalize()

    # Stage D: Validation
    logger.info("Stage D: Validating...")
    validation = validate_heightfield(
        terrain, expect_normalized=config.normalize_after_erosion
    )

    terrain.freeze()

    # Stage E: Object placement
    spawn = None
    objects: list[Placement] = []
    if config.objects.enabled:
        logger.info("Stage E: Placing objects...")
        spawn, objects = _place_objects(terrain, config)
        logger.info(f"Placed {len(objects)} objects")

    _log_terrain_stats(terrain)

    return GenerationResult(
        terrain=terrain,
        config=config,
        erosion=terrain.last_report,
        validation=validation,
        spawn=spawn,
        objects=objects,
    )


def _place_objects(
    terrain: HeightField, config: TerrainConfig
) -> tuple[Placement, list[Placement]]:
    """Place spawn, trees and treasure from one seeded RNG."""
    settings = config.objects
    rng = np.random.default_rng(settings.seed)

    spawn = find_spawn_point(terrain, rng, min_flatness=settings.spawn_min_flatness)
    trees = place_trees(
        terrain,
        rng,
        base_density=settings.tree_base_density,
        min_flatness=settings.tree_min_flatness,
    )
    treasure = place_treasure(
        terrain,
        rng,
        settings.treasure_count,
        spawn=spawn,
        min_distance=settings.treasure_min_distance,
    )
    return spawn, trees + treasure


def _land_fraction(terrain: HeightField) -> float:
    return float(np.mean(terrain.heights >= terrain.island.sea_level))


def _log_terrain_stats(terrain: HeightField) -> None:
    """Log summary statistics about the generated terrain."""
    heights = terrain.heights
    flows = terrain.flows
    logger.info("Terrain statistics:")
    logger.info(f"  Heights: min={heights.min():.4f}, max={heights.max():.4f}, mean={heights.mean():.4f}")
    logger.info(f"  Land fraction: {_land_fraction(terrain):.2%}")
    logger.info(f"  Wet cells: {np.count_nonzero(flows) / flows.size:.2%}, peak flow {flows.max():.2f}")
    logger.info(f"  Mesh chunks: {chunk_count(terrain.width) ** 2}")
