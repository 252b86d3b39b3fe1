"""Terrain host interface.

The host owns everything after the import request is built: creating the
terrain object, applying the scale and importing the elevations.
"""

from typing import Any, Protocol, runtime_checkable

import structlog

from ..core.pipeline import TerrainImportRequest

logger = structlog.get_logger()


@runtime_checkable
class TerrainHost(Protocol):
    """Consumes a finished TerrainImportRequest."""

    def import_terrain(self, request: TerrainImportRequest) -> Any:
        ...


def hand_off(request: TerrainImportRequest, host: TerrainHost) -> Any:
    """Pass a request to the host and return whatever the host returns."""
    logger.info(
        "Handing terrain to host",
        host=type(host).__name__,
        edge=request.edge,
        scale=request.geometry.scale,
    )
    result = host.import_terrain(request)
    logger.info(
        "Created landscape",
        dimensions=f"{request.edge}x{request.edge}",
        component_size=request.component_quads,
        subsection_size=request.subsection_quads,
    )
    return result
