"""Tests for the generation pipeline."""

import numpy as np
import pytest

from isleforge.config import ObjectPlacementConfig, TerrainConfig
from isleforge.exceptions import TerrainFrozenError
from isleforge.generator import generate_terrain
from isleforge.placement import PlacementKind


@pytest.fixture
def small_config() -> TerrainConfig:
    """Fast 32x32 configuration."""
    return TerrainConfig(width=32, particle_count=400, erosion_seed=2)


class TestGenerateTerrain:
    """Tests for end-to-end generation."""

    def test_result_is_frozen(self, small_config: TerrainConfig) -> None:
        """The returned field is read-only."""
        result = generate_terrain(small_config)
        assert result.terrain.frozen
        with pytest.raises(TerrainFrozenError):
            result.terrain.erode(1, seed=0)

    def test_reports(self, small_config: TerrainConfig) -> None:
        """Erosion and validation reports are attached."""
        result = generate_terrain(small_config)
        assert result.erosion is not None
        assert result.erosion.particle_count == 400
        assert result.validation.passed
        assert result.config is small_config

    def test_deterministic(self, small_config: TerrainConfig) -> None:
        """Same configuration gives the same terrain and objects."""
        a = generate_terrain(small_config)
        b = generate_terrain(small_config)
        np.testing.assert_array_equal(a.terrain.heights, b.terrain.heights)
        np.testing.assert_array_equal(a.terrain.flows, b.terrain.flows)
        assert [(o.x, o.y) for o in a.objects] == [(o.x, o.y) for o in b.objects]

    def test_erosion_seed_matters(self, small_config: TerrainConfig) -> None:
        """A different erosion seed changes the flow grid."""
        a = generate_terrain(small_config)
        b = generate_terrain(small_config.model_copy(update={"erosion_seed": 3}))
        assert not np.array_equal(a.terrain.flows, b.terrain.flows)

    def test_normalize_after_erosion(self, small_config: TerrainConfig) -> None:
        """Optional renormalization keeps heights in [0, 1]."""
        config = small_config.model_copy(update={"normalize_after_erosion": True})
        result = generate_terrain(config)
        assert result.terrain.heights.min() == pytest.approx(0.0)
        assert result.terrain.heights.max() == pytest.approx(1.0)

    def test_objects_placed(self, small_config: TerrainConfig) -> None:
        """Spawn and treasure are placed on land."""
        result = generate_terrain(small_config)
        assert result.spawn is not None
        assert result.spawn.kind == PlacementKind.SPAWN
        for item in result.objects:
            assert result.terrain.is_land((item.x, item.y))

    def test_objects_disabled(self, small_config: TerrainConfig) -> None:
        """Placement can be switched off."""
        config = small_config.model_copy(
            update={"objects": ObjectPlacementConfig(enabled=False)}
        )
        result = generate_terrain(config)
        assert result.spawn is None
        assert result.objects == []
