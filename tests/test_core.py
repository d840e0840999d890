"""
Tests for the image side of the pipeline: loading, downscaling,
pixel sampling and end-to-end palette extraction.
"""

import numpy as np
import pytest
from PIL import Image

from palette_pilot.core import (
    ImageLoadError, downscale, extract_palette, load_image, sample_pixels,
)


@pytest.fixture
def red_blue_image(tmp_path):
    """100x100 PNG, left half red and right half blue"""
    arr = np.zeros((100, 100, 3), dtype=np.uint8)
    arr[:, :50] = (255, 0, 0)
    arr[:, 50:] = (0, 0, 255)
    path = tmp_path / "red_blue.png"
    Image.fromarray(arr).save(path)
    return path


@pytest.fixture
def transparent_image(tmp_path):
    path = tmp_path / "clear.png"
    Image.new("RGBA", (20, 20), (255, 255, 255, 0)).save(path)
    return path


class TestLoadImage:

    def test_load_converts_to_rgba(self, red_blue_image):
        img = load_image(red_blue_image)
        assert img.mode == "RGBA"
        assert img.size == (100, 100)

    def test_load_invalid_file(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"this is not an image")
        with pytest.raises(ImageLoadError):
            load_image(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ImageLoadError):
            load_image(tmp_path / "missing.png")

    def test_load_error_is_value_error(self, tmp_path):
        with pytest.raises(ValueError):
            load_image(tmp_path / "missing.png")


class TestDownscale:

    def test_wide_image_is_shrunk(self):
        img = Image.new("RGB", (1600, 400))
        assert downscale(img).size == (800, 200)

    def test_tall_image_keeps_aspect(self):
        img = Image.new("RGB", (10, 2000))
        assert downscale(img).size == (4, 800)

    def test_small_image_untouched(self):
        img = Image.new("RGB", (100, 50))
        assert downscale(img) is img

    def test_sides_never_collapse_to_zero(self):
        img = Image.new("RGB", (4000, 1))
        width, height = downscale(img, max_side=100).size
        assert height == 1
        assert 0 < width <= 100


class TestSamplePixels:

    def test_every_pixel(self):
        img = Image.new("RGB", (10, 10), (1, 2, 3))
        pixels = sample_pixels(img, quality=1)
        assert pixels.shape == (100, 3)
        assert pixels.dtype == np.uint8
        assert tuple(pixels[0]) == (1, 2, 3)

    def test_stride(self):
        img = Image.new("RGB", (10, 10))
        assert len(sample_pixels(img, quality=10)) == 10
        assert len(sample_pixels(img, quality=3)) == 34

    def test_row_major_order(self):
        """Stride walks rows left to right, top to bottom"""
        arr = np.zeros((2, 3, 3), dtype=np.uint8)
        arr[0, 2] = (9, 9, 9)
        arr[1, 1] = (7, 7, 7)
        pixels = sample_pixels(Image.fromarray(arr), quality=2)
        assert [tuple(p) for p in pixels] == [(0, 0, 0), (9, 9, 9), (7, 7, 7)]

    def test_translucent_pixels_skipped(self):
        arr = np.zeros((10, 10, 4), dtype=np.uint8)
        arr[:, :, 3] = 255
        arr[:, :5, 3] = 0
        pixels = sample_pixels(Image.fromarray(arr), quality=1)
        assert len(pixels) == 50

    def test_alpha_threshold_boundary(self):
        arr = np.zeros((1, 2, 4), dtype=np.uint8)
        arr[0, 0] = (10, 10, 10, 125)
        arr[0, 1] = (20, 20, 20, 124)
        pixels = sample_pixels(Image.fromarray(arr), quality=1)
        assert [tuple(p) for p in pixels] == [(10, 10, 10)]

    @pytest.mark.parametrize("quality", [0, -1])
    def test_invalid_quality(self, quality):
        with pytest.raises(ValueError):
            sample_pixels(Image.new("RGB", (2, 2)), quality=quality)


class TestExtractPalette:

    def test_two_color_image(self, red_blue_image):
        palette = extract_palette(red_blue_image, colors=2, quality=1)
        assert sorted(palette) == [(0, 0, 255), (255, 0, 0)]

    def test_palette_within_requested_size(self, tmp_path):
        rng = np.random.default_rng(3)
        arr = rng.integers(0, 256, size=(64, 64, 3), dtype=np.uint8)
        path = tmp_path / "noise.png"
        Image.fromarray(arr).save(path)
        palette = extract_palette(path, colors=6, quality=1)
        assert 1 <= len(palette) <= 6

    def test_transparent_image_gives_empty_palette(self, transparent_image):
        assert extract_palette(transparent_image) == []

    def test_out_of_range_colors(self, red_blue_image):
        assert extract_palette(red_blue_image, colors=1) == []

    def test_verbose_output(self, red_blue_image, capsys):
        extract_palette(red_blue_image, colors=2, quality=1, verbose=True)
        out = capsys.readouterr().out
        assert "Input image: 100x100" in out
        assert "Sampled 10000 opaque pixels" in out
        assert "Palette: 2 colors" in out

    def test_quiet_by_default(self, red_blue_image, capsys):
        extract_palette(red_blue_image, colors=2)
        assert capsys.readouterr().out == ""

    def test_invalid_image(self, tmp_path):
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"\x00\x01\x02")
        with pytest.raises(ImageLoadError):
            extract_palette(path)
