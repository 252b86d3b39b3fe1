"""
Raw heightmap export host.

Writes an import request as a little-endian 16-bit ``.r16`` file (row-major,
top row first) plus a JSON sidecar describing the terrain layout, the
format most terrain editors accept for raw heightmap import.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Tuple

import numpy as np
import structlog

from ..core.pipeline import TerrainImportRequest

logger = structlog.get_logger()


class RawExportHost:
    """Terrain host that persists requests to disk."""

    def __init__(self, output_dir, name: str = "heightmap"):
        self.output_dir = Path(output_dir)
        self.name = name

    def import_terrain(self, request: TerrainImportRequest) -> Tuple[Path, Path]:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        raw_path = self.output_dir / f"{self.name}.r16"
        meta_path = self.output_dir / f"{self.name}.json"

        raw_path.write_bytes(request.elevations.astype("<u2").tobytes())

        geometry = request.geometry
        meta = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "file": raw_path.name,
            "format": "uint16",
            "endian": "little",
            "edge": request.edge,
            "source_width": request.height_field.source_width,
            "source_height": request.height_field.source_height,
            "component_quads": geometry.component_quads,
            "subsection_quads": geometry.subsection_quads,
            "num_subsections": geometry.num_subsections,
            "scale": list(geometry.scale),
            "grid_side": geometry.grid_side,
            "desired_block_count": geometry.desired_block_count,
            "total_physical_size": geometry.total_physical_size,
            "import_extent": list(request.import_extent),
        }
        meta_path.write_text(json.dumps(meta, indent=2), encoding="utf-8")

        logger.info("Exported raw heightmap", raw_path=str(raw_path), meta_path=str(meta_path))
        return raw_path, meta_path


def read_raw_heightmap(raw_path, edge: int) -> np.ndarray:
    """Read an exported .r16 file back as an (edge, edge) uint16 grid."""
    data = np.fromfile(raw_path, dtype="<u2")
    return data.astype(np.uint16).reshape(edge, edge)
