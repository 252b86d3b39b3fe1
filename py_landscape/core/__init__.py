"""
Core heightmap ingestion functionality.
"""

from .errors import (
    LandscapeImportError, InvalidDimension, DecodeFailure, UnsupportedFormat, AllocationFailure
)
from .image_decoder import DecodedImage, ImageDecoder, PillowImageDecoder, read_heightmap_file
from .grid_sizer import GridSpec, GridSizer, compute_grid_edge, is_power_of_two
from .heightfield import HeightField, HeightFieldBuilder
from .geometry import TerrainGeometry, TerrainGeometryPlanner
from .pipeline import TerrainImportRequest, TerrainPipeline, generate_terrain

__all__ = ['LandscapeImportError', 'InvalidDimension', 'DecodeFailure', 'UnsupportedFormat',
           'AllocationFailure', 'DecodedImage', 'ImageDecoder', 'PillowImageDecoder', 'read_heightmap_file',
           'GridSpec', 'GridSizer', 'compute_grid_edge', 'is_power_of_two',
           'HeightField', 'HeightFieldBuilder', 'TerrainGeometry', 'TerrainGeometryPlanner',
           'TerrainImportRequest', 'TerrainPipeline', 'generate_terrain']
