"""Object placement on a finished height field: spawn, trees, treasure."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .heightfield import HeightField


class PlacementKind(str, Enum):
    """Kinds of things placed on the island."""

    SPAWN = "spawn"
    TREE = "tree"
    TREASURE = "treasure"


@dataclass
class Placement:
    """A placed item at a continuous world position."""

    x: float
    y: float
    z: float
    kind: PlacementKind
    placement_id: str


def _placement(
    terrain: "HeightField", x: float, y: float, kind: PlacementKind, placement_id: str
) -> Placement:
    return Placement(
        x=x, y=y, z=terrain.height((x, y)), kind=kind, placement_id=placement_id
    )


def find_spawn_point(
    terrain: "HeightField",
    rng: np.random.Generator,
    attempts: int = 256,
    min_flatness: float = 0.95,
) -> Placement:
    """Pick a flat land position for the player.

    Samples random positions; the first land sample at least `min_flatness`
    flat wins. Otherwise the flattest land sample is used, and the map
    center if no sample hit land.

    Args:
        terrain: Finished height field.
        rng: Random number generator.
        attempts: Number of random samples.
        min_flatness: Required normal/up dot product.

    Returns:
        Spawn placement.
    """
    limit = terrain.width - 1
    best: tuple[float, float, float] | None = None

    for _ in range(attempts):
        x, y = (float(v) for v in rng.uniform(0.0, limit, size=2))
        if not terrain.is_land((x, y)):
            continue
        flat = terrain.get_dot_prod((x, y))
        if flat >= min_flatness:
            return _placement(terrain, x, y, PlacementKind.SPAWN, "spawn")
        if best is None or flat > best[0]:
            best = (flat, x, y)

    if best is None:
        center = limit / 2.0
        return _placement(terrain, center, center, PlacementKind.SPAWN, "spawn")
    return _placement(terrain, best[1], best[2], PlacementKind.SPAWN, "spawn")


def place_trees(
    terrain: "HeightField",
    rng: np.random.Generator,
    base_density: float = 0.3,
    min_flatness: float = 0.8,
) -> list[Placement]:
    """Scatter trees on land, denser where water flowed.

    One jittered candidate per cell. The flow accumulator acts as moisture:
    probability is `base_density * moisture * flatness`, with moisture the
    flow scaled by the 99th percentile of land flow.

    Args:
        terrain: Finished height field.
        rng: Random number generator.
        base_density: Tree probability at full moisture on flat ground.
        min_flatness: Slopes less flat than this get no trees.

    Returns:
        List of tree placements.
    """
    width = terrain.width
    land = terrain.heights >= terrain.island.sea_level
    land_flow = terrain.flows[land]
    flow_reference = float(np.percentile(land_flow, 99)) if land_flow.size else 0.0
    if flow_reference <= 0.0:
        return []

    trees: list[Placement] = []
    tree_id = 0

    for y in range(width - 1):
        for x in range(width - 1):
            jitter_x, jitter_y, roll = rng.random(3)
            px = x + float(jitter_x)
            py = y + float(jitter_y)
            if not terrain.is_land((px, py)):
                continue

            flat = terrain.get_dot_prod((px, py))
            if flat < min_flatness:
                continue

            moisture = min(terrain.flow((px, py)) / flow_reference, 1.0)
            if roll < base_density * moisture * flat:
                trees.append(
                    _placement(terrain, px, py, PlacementKind.TREE, f"tree_{tree_id}")
                )
                tree_id += 1

    return trees


def place_treasure(
    terrain: "HeightField",
    rng: np.random.Generator,
    count: int,
    spawn: Placement | None = None,
    min_distance: float = 10.0,
    attempts_per_item: int = 64,
) -> list[Placement]:
    """Hide treasure on land, away from the spawn point.

    Args:
        terrain: Finished height field.
        rng: Random number generator.
        count: Number of treasures wanted.
        spawn: Spawn placement to keep away from.
        min_distance: Minimum distance to the spawn point.
        attempts_per_item: Sampling budget per treasure.

    Returns:
        Up to `count` treasure placements.
    """
    limit = terrain.width - 1
    treasure: list[Placement] = []

    for _ in range(count * attempts_per_item):
        if len(treasure) >= count:
            break
        x, y = (float(v) for v in rng.uniform(0.0, limit, size=2))
        if not terrain.is_land((x, y)):
            continue
        if spawn is not None and math.hypot(x - spawn.x, y - spawn.y) < min_distance:
            continue
        treasure.append(
            _placement(
                terrain, x, y, PlacementKind.TREASURE, f"treasure_{len(treasure)}"
            )
        )

    return treasure
