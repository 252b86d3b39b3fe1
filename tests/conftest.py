"""Shared fixtures for heightmap import tests."""

import io

import numpy as np
import pytest
from PIL import Image

from py_landscape.config import Settings


def encode_image(array, fmt="PNG") -> bytes:
    """Encode a numpy array with Pillow and return the file bytes."""
    buffer = io.BytesIO()
    Image.fromarray(np.asarray(array)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def encode():
    return encode_image


@pytest.fixture
def samples_5x3():
    """5 wide, 3 tall, samples 1..15 in row-major order."""
    return np.arange(1, 16, dtype=np.uint16).reshape(3, 5)


@pytest.fixture
def png_5x3(samples_5x3):
    return encode_image(samples_5x3)


@pytest.fixture
def ramp_png():
    """A 100x100 16-bit heightmap spanning most of the sample range."""
    ys, xs = np.mgrid[0:100, 0:100]
    return encode_image(((xs + ys) * 300).astype(np.uint16))


@pytest.fixture
def test_settings():
    """Settings pinned to the reference constants, independent of the environment."""
    return Settings(
        block_physical_size=50000.0,
        vertical_scale=25.0,
        vertical_mode="fixed",
        non_square_policy="crop",
        strict_depth=False,
    )
