# src/pipeline/image_processing.py — v1
"""Normalize fetched image bytes into the cached JPEG form."""

from __future__ import annotations

import io

from PIL import Image, ImageOps, UnidentifiedImageError

from breedlens.core.errors import ImageProcessingError

DEFAULT_MAX_DIMENSION = 800
DEFAULT_JPEG_QUALITY = 85


def normalize_image(
    data: bytes,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> bytes:
    """Decode, fix orientation, convert to RGB, bound the size, re-encode as JPEG.

    Args:
        data: Raw bytes in any format Pillow can read (JPEG, PNG, WebP, ...).
        max_dimension: Upper bound for the longer side, in pixels.
        quality: JPEG quality (1-95).

    Returns:
        JPEG bytes.

    Raises:
        ImageProcessingError: If the bytes are not a decodable image.
    """
    if not data:
        raise ImageProcessingError("empty image data")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            if img.mode != "RGB":
                img = img.convert("RGB")
            img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

            out = io.BytesIO()
            img.save(out, format="JPEG", quality=quality, optimize=True)
            return out.getvalue()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageProcessingError(f"cannot decode image: {e}") from e


def image_size(data: bytes) -> tuple[int, int]:
    """(width, height) of encoded image bytes."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"cannot decode image: {e}") from e
