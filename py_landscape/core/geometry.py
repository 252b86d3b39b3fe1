"""
Terrain geometry planning.

Derives the component/subsection layout of the terrain from the grid edge
and the horizontal/vertical scale factors that place it at a real-world
size. Blocks are arranged in a square tiling, so the requested block count
is square-rooted and rounded to the nearest whole side.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import structlog

from ..config import VerticalScaleMode
from .errors import InvalidDimension
from .heightfield import HeightField

logger = structlog.get_logger()

# Component edges are a power of two minus one quads, never below this
MIN_COMPONENT_QUADS = 63
NUM_SUBSECTIONS = 1

# 16-bit terrain samples map to 1/128 world unit per sample at scale 1.0
SAMPLES_PER_WORLD_UNIT = 128.0


@dataclass(frozen=True)
class TerrainGeometry:
    """Layout and scale of the terrain handed to the host."""

    component_quads: int
    subsection_quads: int
    num_subsections: int
    horizontal_scale: float
    vertical_scale: float
    grid_side: int
    desired_block_count: int
    total_physical_size: float

    @property
    def scale(self) -> Tuple[float, float, float]:
        """Scale triple (x, y, z) for the terrain object."""
        return (self.horizontal_scale, self.horizontal_scale, self.vertical_scale)

    @property
    def block_count_rounded(self) -> bool:
        """True when the tiling does not hold exactly the requested blocks."""
        return self.grid_side * self.grid_side != self.desired_block_count


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TerrainGeometryPlanner:
    """Plans terrain components and scale factors for a grid edge."""

    def __init__(
        self,
        vertical_mode: Union[VerticalScaleMode, str] = VerticalScaleMode.FIXED,
        target_elevation_range: float = 51200.0,
    ):
        """
        Initialize the planner.

        Args:
            vertical_mode: "fixed" uses the desired vertical scale unchanged,
                "fit" stretches the height field's sample range over
                target_elevation_range world units
            target_elevation_range: World units the sample range spans in fit mode
        """
        self.vertical_mode = VerticalScaleMode(vertical_mode)
        self.target_elevation_range = target_elevation_range

    def plan(
        self,
        edge: int,
        desired_block_count: int,
        block_physical_size: float,
        desired_vertical_scale: float,
        height_field: Optional[HeightField] = None,
    ) -> TerrainGeometry:
        if edge <= 0:
            raise InvalidDimension(f"Grid edge must be positive, got {edge}")
        if desired_block_count < 1:
            raise InvalidDimension(
                f"Desired block count must be at least 1, got {desired_block_count}"
            )
        if block_physical_size <= 0:
            raise InvalidDimension(
                f"Block physical size must be positive, got {block_physical_size}"
            )
        if desired_vertical_scale <= 0:
            raise InvalidDimension(
                f"Vertical scale must be positive, got {desired_vertical_scale}"
            )

        component_quads = max(MIN_COMPONENT_QUADS, edge - 1)
        subsection_quads = component_quads

        grid_side = max(1, round_half_up(math.sqrt(desired_block_count)))
        if grid_side * grid_side != desired_block_count:
            logger.info(
                "Rounded block count to square tiling",
                desired_block_count=desired_block_count,
                grid_side=grid_side,
                tiled_blocks=grid_side * grid_side,
            )

        total_physical_size = block_physical_size * grid_side
        horizontal_scale = total_physical_size / edge
        vertical_scale = self._vertical_scale(desired_vertical_scale, height_field)

        logger.info(
            "Planned terrain geometry",
            component_quads=component_quads,
            subsection_quads=subsection_quads,
            horizontal_scale=horizontal_scale,
            vertical_scale=vertical_scale,
        )

        return TerrainGeometry(
            component_quads=component_quads,
            subsection_quads=subsection_quads,
            num_subsections=NUM_SUBSECTIONS,
            horizontal_scale=horizontal_scale,
            vertical_scale=vertical_scale,
            grid_side=grid_side,
            desired_block_count=desired_block_count,
            total_physical_size=total_physical_size,
        )

    def _vertical_scale(
        self, desired_vertical_scale: float, height_field: Optional[HeightField]
    ) -> float:
        if self.vertical_mode is VerticalScaleMode.FIXED:
            return float(desired_vertical_scale)

        if height_field is None:
            raise InvalidDimension("Fit vertical mode needs the height field to measure")

        low, high = height_field.sample_range
        if high <= low:
            logger.warning(
                "Flat heightmap, keeping fixed vertical scale",
                elevation=low,
                vertical_scale=desired_vertical_scale,
            )
            return float(desired_vertical_scale)

        return self.target_elevation_range * SAMPLES_PER_WORLD_UNIT / (high - low)
