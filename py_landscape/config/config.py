from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VerticalScaleMode(str, Enum):
    """How the terrain's vertical scale is chosen."""

    FIXED = "fixed"  # use vertical_scale as-is
    FIT = "fit"  # stretch the sample range over target_elevation_range


class NonSquarePolicy(str, Enum):
    """What to do with heightmaps whose height differs from their width."""

    CROP = "crop"  # conform to the width-derived square, dropping extra rows
    REJECT = "reject"


class Settings(BaseSettings):
    """Import settings pulled from environment variables (LANDSCAPE_*)."""

    # Geometry
    block_physical_size: float = Field(
        default=50000.0, gt=0, description="World units covered by one block edge (500 m)"
    )
    vertical_scale: float = Field(
        default=25.0, gt=0, description="Fixed vertical scale applied to the terrain"
    )
    vertical_mode: VerticalScaleMode = Field(
        default=VerticalScaleMode.FIXED, description="Vertical scale mode (fixed or fit)"
    )
    target_elevation_range: float = Field(
        default=51200.0,
        gt=0,
        description="World units the sample range should span in fit mode",
    )

    # Ingestion
    non_square_policy: NonSquarePolicy = Field(
        default=NonSquarePolicy.CROP, description="Handling of non-square heightmaps"
    )
    strict_depth: bool = Field(
        default=False,
        description="Reject images that are not already 16-bit grayscale instead of converting",
    )
    max_grid_cells: int = Field(
        default=2**28,
        gt=0,
        description="Largest elevation buffer (edge * edge) to allocate, also the decode pixel limit",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    model_config = SettingsConfigDict(
        env_prefix="LANDSCAPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Instantiate singleton settings object
settings = Settings()
