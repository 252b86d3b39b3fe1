"""
Heightmap image decoding.

Turns encoded image bytes into a ``DecodedImage``: a width, a height and a
row-major grid of unsigned 16-bit samples. Container formats are handled by
Pillow; this module reduces whatever Pillow opens to 16-bit grayscale.
"""

import io
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Tuple, runtime_checkable

import numpy as np
import structlog
from PIL import Image, UnidentifiedImageError

from .errors import AllocationFailure, DecodeFailure, InvalidDimension, UnsupportedFormat

logger = structlog.get_logger()

UINT16_MAX = 65535

# Pillow modes that already hold 16-bit grayscale samples
SIXTEEN_BIT_MODES = ("I;16", "I;16L", "I;16B", "I;16N")

# Floating point samples have no faithful 16-bit mapping
FLOAT_MODES = ("F",)


@dataclass(frozen=True, eq=False)
class DecodedImage:
    """A decoded single-channel heightmap.

    ``samples`` is a read-only uint16 array of shape (height, width).
    """

    width: int
    height: int
    samples: np.ndarray

    def __post_init__(self):
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise InvalidDimension(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )

        samples = _as_uint16(np.asarray(self.samples))
        if samples.size != self.width * self.height:
            raise DecodeFailure(
                f"Expected {self.width * self.height} samples for a "
                f"{self.width}x{self.height} image, got {samples.size}"
            )

        samples = np.ascontiguousarray(samples.reshape(self.height, self.width))
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    @classmethod
    def from_array(cls, array) -> "DecodedImage":
        """Build a decoded image from a 2-D array indexed [y, x]."""
        array = np.asarray(array)
        if array.ndim != 2:
            raise UnsupportedFormat(
                f"Heightmap samples must be two-dimensional, got shape {array.shape}"
            )
        height, width = array.shape
        return cls(width=width, height=height, samples=array)

    def __eq__(self, other):
        if not isinstance(other, DecodedImage):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.samples, other.samples)
        )

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    @property
    def is_square(self) -> bool:
        return self.width == self.height


def _as_uint16(samples: np.ndarray) -> np.ndarray:
    """Convert integer samples to native uint16, rejecting out-of-range values."""
    if samples.dtype == np.uint16:
        return samples.astype(np.uint16, copy=False)

    if samples.dtype.kind not in "iub":
        raise UnsupportedFormat(
            f"Heightmap samples must be integers, got dtype {samples.dtype}"
        )

    if samples.size and (samples.min() < 0 or samples.max() > UINT16_MAX):
        raise UnsupportedFormat(
            f"Heightmap samples must fit 0-{UINT16_MAX}, "
            f"got range {samples.min()}-{samples.max()}"
        )
    return samples.astype(np.uint16)


@runtime_checkable
class ImageDecoder(Protocol):
    """Anything that turns encoded bytes into a ``DecodedImage``."""

    def decode(self, data: bytes) -> DecodedImage:
        ...


def read_heightmap_file(path) -> bytes:
    """Read the raw bytes of a heightmap file."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise DecodeFailure(f"Failed to load height map file {path}: {e}") from e


class PillowImageDecoder:
    """
    Decodes heightmaps into 16-bit grayscale with Pillow.

    PNG is the reference container. 16-bit grayscale is taken as-is; 8-bit
    grayscale, palette and colour images are reduced to grayscale and each
    sample widened by 257 so 0-255 maps onto the full 0-65535 range. With
    ``strict_depth`` set, anything that is not already 16-bit grayscale is
    rejected instead.
    """

    def __init__(
        self,
        allowed_formats: Optional[Iterable[str]] = ("PNG",),
        strict_depth: bool = False,
        max_pixels: Optional[int] = None,
    ):
        """
        Initialize the decoder.

        Args:
            allowed_formats: Pillow format names to accept, or None for any
            strict_depth: Reject images that are not already 16-bit grayscale
            max_pixels: Pillow decompression bomb limit to apply while decoding,
                None keeps Pillow's default
        """
        self.allowed_formats = (
            None if allowed_formats is None
            else tuple(fmt.upper() for fmt in allowed_formats)
        )
        self.strict_depth = strict_depth
        self.max_pixels = max_pixels

    def decode(self, data: bytes) -> DecodedImage:
        if not data:
            raise DecodeFailure("Heightmap buffer is empty")

        old_max_pixels = Image.MAX_IMAGE_PIXELS
        if self.max_pixels is not None:
            Image.MAX_IMAGE_PIXELS = self.max_pixels
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except Image.DecompressionBombError as e:
            raise AllocationFailure(f"Heightmap exceeds the decode pixel limit: {e}") from e
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise DecodeFailure(f"Failed to decode heightmap: {e}") from e
        finally:
            Image.MAX_IMAGE_PIXELS = old_max_pixels

        with img:
            return self._to_decoded(img)

    def decode_file(self, path) -> DecodedImage:
        """Read a heightmap file and decode it."""
        return self.decode(read_heightmap_file(path))

    def _to_decoded(self, img: Image.Image) -> DecodedImage:
        if self.allowed_formats is not None and img.format not in self.allowed_formats:
            raise UnsupportedFormat(
                f"Image format {img.format} is not supported, "
                f"expected one of {', '.join(self.allowed_formats)}"
            )

        if img.mode in SIXTEEN_BIT_MODES:
            samples = np.asarray(img)
        elif img.mode == "I":
            # Pillow may open 16-bit PNGs as 32-bit integer images
            samples = np.asarray(img)
        elif self.strict_depth or img.mode in FLOAT_MODES:
            raise UnsupportedFormat(
                f"Cannot produce 16-bit grayscale samples from image mode {img.mode}"
            )
        else:
            samples = self._widen_to_16bit(img)

        width, height = img.size
        logger.debug("Decoded heightmap", mode=img.mode, format=img.format,
                     width=width, height=height)
        return DecodedImage(width=width, height=height, samples=samples)

    def _widen_to_16bit(self, img: Image.Image) -> np.ndarray:
        source_mode = img.mode
        try:
            if img.mode in ("P", "PA"):
                img = img.convert("RGBA")
            if img.mode != "L":
                img = img.convert("L")
        except ValueError as e:
            raise UnsupportedFormat(
                f"Cannot produce 16-bit grayscale samples from image mode {source_mode}: {e}"
            ) from e

        if source_mode != "L":
            logger.info("Converted heightmap to grayscale", mode=source_mode)
        return np.asarray(img).astype(np.uint16) * 257
