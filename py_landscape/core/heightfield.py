"""
Height field construction.

Copies decoded heightmap samples into a zero-filled square power-of-two
elevation buffer. The copy is an exact 1:1 pixel copy anchored at the
top-left corner: no centering, no resampling. Samples outside the
``edge x edge`` square are cropped.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import structlog

from .errors import AllocationFailure, InvalidDimension
from .grid_sizer import is_power_of_two
from .image_decoder import DecodedImage

logger = structlog.get_logger()


@dataclass(frozen=True, eq=False)
class HeightField:
    """
    Square elevation grid ready for import.

    ``elevations`` is a read-only flat uint16 array of length edge*edge in
    row-major order: the sample at column x, row y lives at y*edge + x.
    """

    edge: int
    elevations: np.ndarray
    source_width: int
    source_height: int

    def as_grid(self) -> np.ndarray:
        """Return a read-only (edge, edge) view indexed [y, x]."""
        return self.elevations.reshape(self.edge, self.edge)

    def at(self, x: int, y: int) -> int:
        return int(self.elevations[y * self.edge + x])

    @property
    def copied_size(self) -> Tuple[int, int]:
        """Width and height of the region filled from the source image."""
        return (min(self.source_width, self.edge), min(self.source_height, self.edge))

    @property
    def was_cropped(self) -> bool:
        return self.source_width > self.edge or self.source_height > self.edge

    @property
    def sample_range(self) -> Tuple[int, int]:
        """Min and max elevation over the copied region."""
        copied_w, copied_h = self.copied_size
        region = self.as_grid()[:copied_h, :copied_w]
        return int(region.min()), int(region.max())

    def __eq__(self, other):
        if not isinstance(other, HeightField):
            return NotImplemented
        return (
            self.edge == other.edge
            and self.source_width == other.source_width
            and self.source_height == other.source_height
            and np.array_equal(self.elevations, other.elevations)
        )


class HeightFieldBuilder:
    """Builds a HeightField from a decoded image and a grid edge."""

    def __init__(self, max_cells: Optional[int] = None):
        """
        Initialize the builder.

        Args:
            max_cells: Refuse to allocate buffers larger than this many cells
        """
        self.max_cells = max_cells

    def build(self, image: DecodedImage, edge: int) -> HeightField:
        if not is_power_of_two(edge):
            raise InvalidDimension(f"Grid edge must be a positive power of two, got {edge}")

        elevations = self._allocate(edge)

        copy_w = min(image.width, edge)
        copy_h = min(image.height, edge)
        grid = elevations.reshape(edge, edge)
        grid[:copy_h, :copy_w] = image.samples[:copy_h, :copy_w]

        if image.width > edge or image.height > edge:
            logger.warning(
                "Cropped heightmap to grid",
                original_size=f"{image.width}x{image.height}",
                edge=edge,
                dropped_rows=max(0, image.height - edge),
                dropped_columns=max(0, image.width - edge),
            )

        elevations.flags.writeable = False
        return HeightField(
            edge=edge,
            elevations=elevations,
            source_width=image.width,
            source_height=image.height,
        )

    def _allocate(self, edge: int) -> np.ndarray:
        cells = edge * edge
        if self.max_cells is not None and cells > self.max_cells:
            raise AllocationFailure(
                f"Elevation buffer of {cells} cells ({edge}x{edge}) exceeds "
                f"the limit of {self.max_cells} cells"
            )
        try:
            return np.zeros(cells, dtype=np.uint16)
        except (MemoryError, ValueError) as e:
            raise AllocationFailure(
                f"Failed to allocate elevation buffer of {cells} cells: {e}"
            ) from e
