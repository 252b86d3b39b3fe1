"""Tests for heightmap decoding."""

import io

import numpy as np
import pytest
from PIL import Image

from py_landscape.core.errors import (
    AllocationFailure, DecodeFailure, InvalidDimension, UnsupportedFormat
)
from py_landscape.core.image_decoder import (
    DecodedImage, ImageDecoder, PillowImageDecoder, read_heightmap_file
)


class TestDecodedImage:
    """Test the decoded image value type."""

    def test_from_array(self, samples_5x3):
        image = DecodedImage.from_array(samples_5x3)
        assert image.width == 5
        assert image.height == 3
        assert image.shape == (3, 5)
        assert image.samples.dtype == np.uint16
        assert not image.is_square

    def test_flat_samples_reshaped(self):
        image = DecodedImage(width=3, height=2, samples=[1, 2, 3, 4, 5, 6])
        assert image.samples.tolist() == [[1, 2, 3], [4, 5, 6]]

    def test_samples_read_only(self, samples_5x3):
        image = DecodedImage.from_array(samples_5x3)
        with pytest.raises(ValueError):
            image.samples[0, 0] = 3

    def test_wider_ints_narrowed(self):
        image = DecodedImage.from_array(np.array([[0, 65535]], dtype=np.int32))
        assert image.samples.dtype == np.uint16
        assert image.samples.tolist() == [[0, 65535]]

    def test_sample_count_mismatch(self):
        with pytest.raises(DecodeFailure):
            DecodedImage(width=4, height=4, samples=[1, 2, 3])

    @pytest.mark.parametrize("width,height", [(0, 3), (3, 0), (-1, 2)])
    def test_non_positive_dimensions(self, width, height):
        with pytest.raises(InvalidDimension):
            DecodedImage(width=width, height=height, samples=[])

    def test_out_of_range_samples(self):
        with pytest.raises(UnsupportedFormat):
            DecodedImage.from_array(np.array([[70000]], dtype=np.int64))
        with pytest.raises(UnsupportedFormat):
            DecodedImage.from_array(np.array([[-1]], dtype=np.int64))

    def test_float_samples_rejected(self):
        with pytest.raises(UnsupportedFormat):
            DecodedImage.from_array(np.zeros((2, 2), dtype=np.float32))

    def test_three_dimensional_rejected(self):
        with pytest.raises(UnsupportedFormat):
            DecodedImage.from_array(np.zeros((2, 2, 3), dtype=np.uint16))


class TestPillowImageDecoder:
    """Test Pillow-backed decoding."""

    @pytest.fixture
    def decoder(self):
        return PillowImageDecoder()

    def test_satisfies_protocol(self, decoder):
        assert isinstance(decoder, ImageDecoder)

    def test_decode_16bit_png(self, decoder, png_5x3, samples_5x3):
        image = decoder.decode(png_5x3)
        assert (image.width, image.height) == (5, 3)
        assert image.samples.dtype == np.uint16
        assert np.array_equal(image.samples, samples_5x3)

    def test_decode_preserves_high_samples(self, decoder, encode):
        data = np.array([[0, 255, 256], [40000, 65534, 65535]], dtype=np.uint16)
        image = decoder.decode(encode(data))
        assert np.array_equal(image.samples, data)

    def test_empty_buffer(self, decoder):
        with pytest.raises(DecodeFailure):
            decoder.decode(b"")

    def test_garbage_bytes(self, decoder):
        with pytest.raises(DecodeFailure) as excinfo:
            decoder.decode(b"definitely not a png file")
        assert excinfo.value.kind == "DecodeFailure"

    def test_png_signature_only(self, decoder):
        with pytest.raises(DecodeFailure):
            decoder.decode(b"\x89PNG\r\n\x1a\n")


    def test_8bit_widened(self, decoder, encode):
        png = encode(np.array([[0, 1, 128, 255]], dtype=np.uint8))
        image = decoder.decode(png)
        assert image.samples.dtype == np.uint16
        assert image.samples.tolist() == [[0, 257, 128 * 257, 65535]]

    def test_8bit_rejected_when_strict(self, encode):
        png = encode(np.zeros((4, 4), dtype=np.uint8))
        with pytest.raises(UnsupportedFormat):
            PillowImageDecoder(strict_depth=True).decode(png)

    def test_strict_still_accepts_16bit(self, png_5x3, samples_5x3):
        image = PillowImageDecoder(strict_depth=True).decode(png_5x3)
        assert np.array_equal(image.samples, samples_5x3)

    def test_rgb_converted_to_gray(self, decoder, encode):
        rgb = np.zeros((2, 2, 3), dtype=np.uint8)
        rgb[0, 0] = (40, 40, 40)
        rgb[1, 1] = (255, 255, 255)
        rgb[0, 1] = (255, 0, 0)
        image = decoder.decode(encode(rgb))

        assert image.shape == (2, 2)
        assert image.samples[0, 0] == 40 * 257
        assert image.samples[1, 1] == 65535
        assert image.samples[1, 0] == 0
        # luminance of pure red sits between black and white
        assert 0 < image.samples[0, 1] < 65535
        assert image.samples[0, 1] % 257 == 0

    def test_palette_converted_to_gray(self, decoder):
        img = Image.fromarray(np.array([[0, 1], [1, 2]], dtype=np.uint8))
        img.putpalette([0, 0, 0, 100, 100, 100, 255, 255, 255] + [0] * (253 * 3))
        assert img.mode == "P"
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")

        image = decoder.decode(buffer.getvalue())
        assert image.samples.tolist() == [[0, 100 * 257], [100 * 257, 65535]]

    def test_gray_alpha_drops_alpha(self, decoder, encode):
        la = np.zeros((1, 2, 2), dtype=np.uint8)
        la[0, 0] = (10, 255)
        la[0, 1] = (20, 0)
        image = decoder.decode(encode(la))
        assert image.samples.tolist() == [[10 * 257, 20 * 257]]

    def test_color_rejected_when_strict(self, encode):
        png = encode(np.zeros((4, 4, 3), dtype=np.uint8))
        with pytest.raises(UnsupportedFormat):
            PillowImageDecoder(strict_depth=True).decode(png)

    def test_int_samples_out_of_range(self, encode):
        tiff = encode(np.array([[0, 70000]], dtype=np.int32), fmt="TIFF")
        with pytest.raises(UnsupportedFormat):
            PillowImageDecoder(allowed_formats=None).decode(tiff)

    def test_float_samples_rejected(self, encode):
        tiff = encode(np.array([[0.5, 1.5]], dtype=np.float32), fmt="TIFF")
        with pytest.raises(UnsupportedFormat):
            PillowImageDecoder(allowed_formats=None).decode(tiff)

    def test_other_container_rejected(self, decoder, encode):
        bmp = encode(np.zeros((4, 4), dtype=np.uint8), fmt="BMP")
        with pytest.raises(UnsupportedFormat):
            decoder.decode(bmp)

    def test_any_container_when_unrestricted(self, encode):
        bmp = encode(np.full((2, 3), 10, dtype=np.uint8), fmt="BMP")
        image = PillowImageDecoder(allowed_formats=None).decode(bmp)
        assert image.samples.tolist() == [[2570] * 3] * 2

    def test_pixel_limit_raised_for_large_heightmaps(self, png_5x3, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 4)

        with pytest.raises(AllocationFailure):
            PillowImageDecoder().decode(png_5x3)

        image = PillowImageDecoder(max_pixels=1000).decode(png_5x3)
        assert image.width == 5
        assert Image.MAX_IMAGE_PIXELS == 4

    def test_pixel_limit_restored_after_failure(self, png_5x3):
        before = Image.MAX_IMAGE_PIXELS
        with pytest.raises(AllocationFailure):
            PillowImageDecoder(max_pixels=4).decode(png_5x3)
        assert Image.MAX_IMAGE_PIXELS == before

    def test_decode_file(self, decoder, png_5x3, tmp_path):
        path = tmp_path / "height.png"
        path.write_bytes(png_5x3)
        assert decoder.decode_file(path).width == 5

    def test_decode_missing_file(self, decoder, tmp_path):
        with pytest.raises(DecodeFailure):
            decoder.decode_file(tmp_path / "missing.png")


def test_read_heightmap_file(png_5x3, tmp_path):
    path = tmp_path / "height.png"
    path.write_bytes(png_5x3)
    assert read_heightmap_file(path) == png_5x3
    assert read_heightmap_file(str(path)) == png_5x3

    with pytest.raises(DecodeFailure):
        read_heightmap_file(tmp_path / "missing.png")


def test_decoded_image_unhashable(samples_5x3):
    with pytest.raises(TypeError):
        hash(DecodedImage.from_array(samples_5x3))
