"""
Configuration for heightmap import.
"""

from .config import NonSquarePolicy, Settings, VerticalScaleMode, settings

__all__ = ['Settings', 'settings', 'VerticalScaleMode', 'NonSquarePolicy']
