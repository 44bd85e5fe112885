"""Post-generation validation of a height field."""

import logging
from typing import TYPE_CHECKING

import numpy as np
from scipy import ndimage

if TYPE_CHECKING:
    from .heightfield import HeightField

logger = logging.getLogger(__name__)


class ValidationResult:
    """Problems found in a height field, plus the land statistics measured.

    Errors mean the grid is unusable (non-finite values, negative flow, heights
    outside [0, 1] when normalization was expected). Warnings flag an island
    that is usable but odd: no land, land on the border, or several land
    masses.
    """

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.land_fraction = 0.0
        self.land_masses = 0

    @property
    def passed(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


def validate_heightfield(
    terrain: "HeightField",
    expect_normalized: bool = False,
) -> ValidationResult:
    """Check a height field before it is frozen and handed to consumers.

    Args:
        terrain: Height field to check.
        expect_normalized: Require heights within [0, 1].

    Returns:
        ValidationResult with errors, warnings and land statistics.
    """
    result = ValidationResult()

    _check_finite(terrain, result)
    if expect_normalized:
        _check_normalized(terrain, result)
    _check_flow(terrain, result)
    _check_land(terrain, result)

    summary = (
        f"{terrain.width}x{terrain.width} field: "
        f"{result.land_fraction:.1%} land in {result.land_masses} mass(es)"
    )
    if result.passed:
        logger.info(f"{summary}, usable")
    else:
        logger.error(f"{summary}, unusable: {'; '.join(result.errors)}")
    if result.warnings:
        logger.warning(f"{summary}, check island shape: {'; '.join(result.warnings)}")

    return result


def _check_finite(terrain: "HeightField", result: ValidationResult) -> None:
    """Check heights and flows are finite."""
    bad_heights = int(np.count_nonzero(~np.isfinite(terrain.heights)))
    bad_flows = int(np.count_nonzero(~np.isfinite(terrain.flows)))
    if bad_heights:
        result.add_error(f"{bad_heights} heights are NaN or infinite")
    if bad_flows:
        result.add_error(f"{bad_flows} flow values are NaN or infinite")


def _check_normalized(terrain: "HeightField", result: ValidationResult) -> None:
    """Check heights lie in [0, 1]."""
    lo = float(np.nanmin(terrain.heights))
    hi = float(np.nanmax(terrain.heights))
    tolerance = 1e-6
    if lo < -tolerance or hi > 1.0 + tolerance:
        result.add_error(f"Heights span [{lo:.4f}, {hi:.4f}], expected [0, 1]")


def _check_flow(terrain: "HeightField", result: ValidationResult) -> None:
    """Check flow accumulator is non-negative."""
    if terrain.flows.size and float(np.nanmin(terrain.flows)) < 0.0:
        result.add_error("Flow accumulator has negative values")


def _check_land(terrain: "HeightField", result: ValidationResult) -> None:
    """Check there is one island above sea level, mostly clear of the border."""
    land = terrain.heights >= terrain.island.sea_level
    result.land_fraction = float(np.mean(land))
    if result.land_fraction == 0.0:
        result.add_warning("No land above sea level")
        return

    border = np.concatenate((land[0, :], land[-1, :], land[1:-1, 0], land[1:-1, -1]))
    border_land = float(np.mean(border))
    if border_land > 0.5:
        result.add_warning(f"{border_land:.1%} of the border is land; island may be clipped")

    structure = ndimage.generate_binary_structure(2, 2)  # 8-connected
    labeled, num_features = ndimage.label(land, structure=structure)
    result.land_masses = int(num_features)
    if num_features > 1:
        sizes = ndimage.sum(land, labeled, range(1, num_features + 1))
        largest_frac = float(np.max(sizes)) / float(np.sum(land))
        if largest_frac < 0.9:
            result.add_warning(
                f"Multiple land masses: {num_features} components, "
                f"largest is {largest_frac:.1%} of land"
            )
