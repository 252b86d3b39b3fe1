"""
py-landscape: convert grayscale heightmaps into tiled terrain import requests.
"""

from .core import (
    AllocationFailure,
    DecodeFailure,
    DecodedImage,
    InvalidDimension,
    LandscapeImportError,
    PillowImageDecoder,
    TerrainImportRequest,
    TerrainPipeline,
    UnsupportedFormat,
    compute_grid_edge,
    generate_terrain,
)
from .hosts import RawExportHost, TerrainHost, hand_off

__version__ = "0.1.0"

__all__ = ['generate_terrain', 'TerrainPipeline', 'TerrainImportRequest', 'DecodedImage',
           'PillowImageDecoder', 'compute_grid_edge', 'LandscapeImportError',
           'InvalidDimension', 'DecodeFailure', 'UnsupportedFormat', 'AllocationFailure',
           'TerrainHost', 'hand_off', 'RawExportHost']
