"""Power-of-two grid sizing for heightmaps."""

from dataclasses import dataclass
import numbers

import structlog

from .errors import InvalidDimension
from .image_decoder import DecodedImage

logger = structlog.get_logger()


@dataclass(frozen=True)
class GridSpec:
    """Square grid whose edge is a power of two."""

    edge: int

    @property
    def cells(self) -> int:
        return self.edge * self.edge


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def compute_grid_edge(width: int) -> int:
    """Return the smallest power of two >= width."""
    if isinstance(width, bool) or not isinstance(width, numbers.Integral):
        raise InvalidDimension(f"Grid width must be an integer, got {width!r}")
    width = int(width)
    if width <= 0:
        raise InvalidDimension(f"Grid width must be positive, got {width}")
    return 1 << (width - 1).bit_length()


class GridSizer:
    """Sizes the square import grid from the image width alone.

    The height is conformed to the same edge, so an image taller than it is
    wide loses the rows beyond ``edge``.
    """

    def size(self, image: DecodedImage) -> GridSpec:
        edge = compute_grid_edge(image.width)
        logger.info(
            "Adjusted heightmap to power of two",
            original_size=f"{image.width}x{image.height}",
            adjusted_size=f"{edge}x{edge}",
        )
        return GridSpec(edge=edge)
