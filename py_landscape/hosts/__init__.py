"""
Terrain hosts that consume finished import requests.
"""

from .base import TerrainHost, hand_off
from .raw_export import RawExportHost, read_raw_heightmap

__all__ = ['TerrainHost', 'hand_off', 'RawExportHost', 'read_raw_heightmap']
