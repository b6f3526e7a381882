# tests/unit/pipeline/test_image_processing.py — v1
"""Tests for pipeline/image_processing.py - JPEG normalization."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from breedlens.core.errors import ImageProcessingError
from breedlens.pipeline.image_processing import image_size, normalize_image


class TestNormalizeImage:
    def test_png_becomes_bounded_jpeg(self, png_bytes):
        out = normalize_image(png_bytes, max_dimension=800)
        with Image.open(io.BytesIO(out)) as img:
            assert img.format == "JPEG"
            assert img.size == (800, 400)

    def test_small_image_not_upscaled(self, jpeg_bytes):
        assert image_size(normalize_image(jpeg_bytes, max_dimension=800)) == (32, 24)

    def test_alpha_flattened_to_rgb(self):
        buf = io.BytesIO()
        Image.new("RGBA", (10, 10), (255, 0, 0, 128)).save(buf, format="PNG")
        with Image.open(io.BytesIO(normalize_image(buf.getvalue()))) as img:
            assert img.mode == "RGB"

    def test_garbage_rejected(self):
        with pytest.raises(ImageProcessingError):
            normalize_image(b"<html>not an image</html>")

    def test_empty_rejected(self):
        with pytest.raises(ImageProcessingError, match="empty"):
            normalize_image(b"")


class TestImageSize:
    def test_garbage(self):
        with pytest.raises(ImageProcessingError):
            image_size(b"nope")
