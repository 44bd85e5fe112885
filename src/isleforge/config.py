"""Terrain synthesis configuration models and TOML loading."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field


class NoiseConfig(BaseModel):
    """Fractal value noise parameters."""

    frequency: float = Field(default=0.1, description="Lattice cells per grid cell")
    depth: int = Field(default=10, description="Number of octaves")
    seed: int = Field(default=0, description="Permutation table offset")


class IslandConfig(BaseModel):
    """Bulge shaping parameters."""

    bulge_mix: float = Field(
        default=0.4, description="Weight of the noise in the bulge blend (0-1)"
    )
    bulge_spread: float = Field(
        default=0.1414,
        description="Gaussian spread of the bulge as a fraction of the width",
    )
    sea_level: float = Field(
        default=0.5, description="Normalized height below which cells are water"
    )


class CascadeConfig(BaseModel):
    """Thermal relaxation parameters."""

    talus_threshold: float = Field(
        default=0.04, description="Max stable height difference between neighbors"
    )
    settling: float = Field(
        default=0.5, description="Fraction of the excess moved per relaxation (0-1)"
    )


class ErosionConfig(BaseModel):
    """Particle-based hydraulic erosion parameters.

    The rates are empirically tuned for grids of roughly 64 to 256 cells
    with heights normalized to [0, 1].
    """

    inertia: float = Field(
        default=0.3, description="Weight of the previous velocity in the blend"
    )
    capacity_factor: float = Field(
        default=0.05, description="Sediment capacity per unit speed and volume"
    )
    max_capacity: float = Field(default=0.05, description="Upper bound on capacity")
    erosion_rate: float = Field(
        default=0.3, description="Fraction of the capacity gap eroded per step"
    )
    deposition_rate: float = Field(
        default=0.3, description="Fraction of the capacity excess deposited per step"
    )
    evaporation: float = Field(
        default=0.02, description="Volume and sediment lost per step (0-1)"
    )
    initial_volume: float = Field(default=1.0, description="Water volume at spawn")
    min_volume: float = Field(
        default=0.01, description="Particles below this volume evaporate"
    )
    max_age: int = Field(default=64, description="Maximum steps per particle")
    max_steps_per_width: float = Field(
        default=2.0, description="Step bound as a multiple of the grid width"
    )
    edge_margin: float = Field(
        default=0.5, description="Distance from the border treated as out of bounds"
    )
    spawn_min_height: float | None = Field(
        default=None,
        description="Particles spawned below this height are skipped; "
        "None uses the island sea level",
    )
    cascade_enabled: bool = Field(
        default=True, description="Run thermal relaxation after every step"
    )
    cascade: CascadeConfig = Field(default_factory=CascadeConfig)


class ObjectPlacementConfig(BaseModel):
    """Spawn, tree and treasure placement parameters."""

    enabled: bool = Field(default=True, description="Place objects after generation")
    seed: int = Field(default=7, description="Seed for placement sampling")
    spawn_min_flatness: float = Field(
        default=0.95, description="Required flatness at the spawn point"
    )
    tree_base_density: float = Field(
        default=0.3, description="Tree probability at full moisture"
    )
    tree_min_flatness: float = Field(
        default=0.8, description="Slopes less flat than this get no trees"
    )
    treasure_count: int = Field(default=3, description="Number of treasures")
    treasure_min_distance: float = Field(
        default=10.0, description="Minimum treasure distance from spawn"
    )


class TerrainConfig(BaseModel):
    """Complete terrain generation configuration."""

    width: int = Field(default=128, description="Grid width in cells")
    amplitude: float = Field(
        default=10.0, description="World-space vertical scale of a unit height"
    )
    particle_count: int = Field(default=20000, description="Erosion particles")
    erosion_seed: int = Field(default=1, description="Seed for particle spawning")
    normalize_after_erosion: bool = Field(
        default=False, description="Rescale heights to [0, 1] after erosion"
    )

    noise: NoiseConfig = Field(default_factory=NoiseConfig)
    island: IslandConfig = Field(default_factory=IslandConfig)
    erosion: ErosionConfig = Field(default_factory=ErosionConfig)
    objects: ObjectPlacementConfig = Field(default_factory=ObjectPlacementConfig)


def load_config(config_path: Path) -> TerrainConfig:
    """Read island generation settings from TOML.

    Top-level keys set the grid (`width`, `amplitude`, `particle_count`, ...);
    the `[noise]`, `[island]`, `[erosion]`, `[erosion.cascade]` and
    `[objects]` tables override the matching groups. Anything left out keeps
    its default.

    Raises:
        FileNotFoundError: If `config_path` does not exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If a value has the wrong type.
    """
    settings = tomllib.loads(Path(config_path).read_text(encoding="utf-8"))
    return TerrainConfig.model_validate(settings)
