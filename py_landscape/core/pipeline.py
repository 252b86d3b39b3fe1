"""
Heightmap import pipeline.

decode -> size grid -> build height field -> plan geometry -> request.

Every stage fails fast: the first error aborts the import and no partial
``TerrainImportRequest`` is ever produced.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
import structlog

from ..config import NonSquarePolicy, Settings
from ..config import settings as default_settings
from .errors import DecodeFailure, InvalidDimension, LandscapeImportError, UnsupportedFormat
from .geometry import TerrainGeometry, TerrainGeometryPlanner
from .grid_sizer import GridSizer
from .heightfield import HeightField, HeightFieldBuilder
from .image_decoder import DecodedImage, ImageDecoder, PillowImageDecoder, read_heightmap_file

logger = structlog.get_logger()

HeightmapSource = Union[bytes, bytearray, memoryview, str, os.PathLike, DecodedImage]


@dataclass(frozen=True, eq=False)
class TerrainImportRequest:
    """Finished height field plus geometry, handed to the terrain host."""

    height_field: HeightField
    geometry: TerrainGeometry

    def __eq__(self, other):
        if not isinstance(other, TerrainImportRequest):
            return NotImplemented
        return self.height_field == other.height_field and self.geometry == other.geometry

    @property
    def edge(self) -> int:
        return self.height_field.edge

    @property
    def elevations(self) -> np.ndarray:
        return self.height_field.elevations

    @property
    def component_quads(self) -> int:
        return self.geometry.component_quads

    @property
    def subsection_quads(self) -> int:
        return self.geometry.subsection_quads

    @property
    def num_subsections(self) -> int:
        return self.geometry.num_subsections

    @property
    def horizontal_scale(self) -> float:
        return self.geometry.horizontal_scale

    @property
    def vertical_scale(self) -> float:
        return self.geometry.vertical_scale

    @property
    def import_extent(self) -> Tuple[int, int, int, int]:
        """Inclusive (min_x, min_y, max_x, max_y) grid coordinates."""
        return (0, 0, self.edge - 1, self.edge - 1)


class TerrainPipeline:
    """Turns an encoded heightmap into a TerrainImportRequest."""

    def __init__(
        self,
        decoder: Optional[ImageDecoder] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            decoder: Image decoder, defaults to a Pillow PNG decoder
            settings: Import settings, defaults to the environment settings
        """
        self.settings = settings if settings is not None else default_settings
        self.decoder = decoder or PillowImageDecoder(
            strict_depth=self.settings.strict_depth,
            max_pixels=self.settings.max_grid_cells,
        )
        self.sizer = GridSizer()
        self.builder = HeightFieldBuilder(max_cells=self.settings.max_grid_cells)
        self.planner = TerrainGeometryPlanner(
            vertical_mode=self.settings.vertical_mode,
            target_elevation_range=self.settings.target_elevation_range,
        )

    def generate(self, source: HeightmapSource, desired_block_count: int) -> TerrainImportRequest:
        try:
            return self._generate(source, desired_block_count)
        except LandscapeImportError as e:
            logger.error("Heightmap import failed", kind=e.kind, error=e.message)
            raise

    def _generate(self, source: HeightmapSource, desired_block_count: int) -> TerrainImportRequest:
        if desired_block_count < 1:
            raise InvalidDimension(
                f"Desired block count must be at least 1, got {desired_block_count}"
            )

        decoded = self._decode(source)

        if not decoded.is_square and self.settings.non_square_policy is NonSquarePolicy.REJECT:
            raise InvalidDimension(
                f"Heightmap must be square, got {decoded.width}x{decoded.height}"
            )

        grid = self.sizer.size(decoded)
        height_field = self.builder.build(decoded, grid.edge)
        geometry = self.planner.plan(
            grid.edge,
            desired_block_count,
            self.settings.block_physical_size,
            self.settings.vertical_scale,
            height_field=height_field,
        )

        logger.info(
            "Prepared terrain import",
            edge=grid.edge,
            component_quads=geometry.component_quads,
            subsection_quads=geometry.subsection_quads,
            horizontal_scale=geometry.horizontal_scale,
            vertical_scale=geometry.vertical_scale,
        )
        return TerrainImportRequest(height_field=height_field, geometry=geometry)

    def _decode(self, source: HeightmapSource) -> DecodedImage:
        if isinstance(source, DecodedImage):
            return source

        if isinstance(source, (str, os.PathLike)):
            data = read_heightmap_file(source)
        elif isinstance(source, (bytes, bytearray, memoryview)):
            data = bytes(source)
        else:
            raise DecodeFailure(f"Cannot read a heightmap from {type(source).__name__}")

        decoded = self.decoder.decode(data)
        if not isinstance(decoded, DecodedImage) or decoded.samples.dtype != np.uint16:
            raise UnsupportedFormat("Decoder did not produce 16-bit grayscale samples")
        return decoded


def generate_terrain(
    source: HeightmapSource,
    desired_block_count: int,
    decoder: Optional[ImageDecoder] = None,
    settings: Optional[Settings] = None,
) -> TerrainImportRequest:
    """
    Convert a heightmap into a TerrainImportRequest.

    Args:
        source: Encoded image bytes, a file path, or an already decoded image
        desired_block_count: Number of blocks the terrain should cover (>= 1)
        decoder: Optional image decoder, Pillow by default
        settings: Optional settings overriding the environment

    Returns:
        Immutable request for the terrain host

    Raises:
        LandscapeImportError: InvalidDimension, DecodeFailure,
            UnsupportedFormat or AllocationFailure
    """
    return TerrainPipeline(decoder=decoder, settings=settings).generate(
        source, desired_block_count
    )
