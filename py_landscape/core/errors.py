"""Error taxonomy for heightmap import.

Every failure carries a ``kind`` so the caller can report which stage
aborted the import. No stage recovers from these; they abort the pipeline.
"""


class LandscapeImportError(Exception):
    """Base class for all heightmap import failures."""

    kind = "LandscapeImportError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InvalidDimension(LandscapeImportError, ValueError):
    """A width, height, edge or count was non-positive or otherwise unusable."""

    kind = "InvalidDimension"


class DecodeFailure(LandscapeImportError, ValueError):
    """The encoded bytes could not be read as an image."""

    kind = "DecodeFailure"


class UnsupportedFormat(LandscapeImportError, ValueError):
    """The image decoded, but not into 16-bit grayscale samples."""

    kind = "UnsupportedFormat"


class AllocationFailure(LandscapeImportError, MemoryError):
    """The elevation buffer could not be allocated."""

    kind = "AllocationFailure"
