#!/usr/bin/env python3
"""
Demo script showing heightmap import.

Usage:
    python examples/landscape_import_demo.py [heightmap.png] [num_blocks] [output_dir]

Without a heightmap a synthetic 16-bit island is generated.
"""

import io
import sys

import numpy as np
from PIL import Image

from py_landscape import LandscapeImportError, RawExportHost, generate_terrain, hand_off
from py_landscape.utils import configure_logging


def synthetic_heightmap(width=300, height=300) -> bytes:
    """Encode a radial island as a 16-bit PNG."""
    ys, xs = np.mgrid[0:height, 0:width]
    dist = np.hypot(xs - width / 2, ys - height / 2) / (min(width, height) / 2)
    heights = np.clip(1.0 - dist, 0.0, 1.0) ** 1.5 * 65535
    buffer = io.BytesIO()
    Image.fromarray(heights.astype(np.uint16)).save(buffer, format="PNG")
    return buffer.getvalue()


def main():
    """Demonstrate heightmap import."""
    configure_logging(fmt="plain")

    source = sys.argv[1] if len(sys.argv) > 1 else synthetic_heightmap()
    num_blocks = int(sys.argv[2]) if len(sys.argv) > 2 else 4
    output_dir = sys.argv[3] if len(sys.argv) > 3 else "landscape_out"

    print("Py-Landscape Heightmap Import Demo")
    print("=" * 40)

    try:
        request = generate_terrain(source, num_blocks)
    except LandscapeImportError as e:
        print(f"Import failed ({e.kind}): {e.message}")
        return 1

    geometry = request.geometry
    low, high = request.height_field.sample_range
    print(f"  Source size: {request.height_field.source_width}x{request.height_field.source_height}")
    print(f"  Grid edge: {request.edge}")
    print(f"  Component quads: {geometry.component_quads}")
    print(f"  Block tiling: {geometry.grid_side}x{geometry.grid_side} "
          f"(requested {geometry.desired_block_count})")
    print(f"  Scale: {geometry.scale}")
    print(f"  Elevation range: {low}-{high}")

    raw_path, meta_path = hand_off(request, RawExportHost(output_dir))
    print(f"\nWrote {raw_path} and {meta_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
