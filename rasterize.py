#!/usr/bin/env python3
"""
Decode an image and render it to a flat RGBA pixel buffer at a given scale.
"""

import io
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

log = logging.getLogger(__name__)


# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side


class DecodeError(ValueError):
    """Source could not be read as a supported image."""


class ScaleError(ValueError):
    """Scale factor leaves nothing to render."""


@dataclass
class DecodedImage:
    """A decoded image at its native size."""
    image: Image.Image  # RGBA

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def read_pixels(self, size: tuple, box: Optional[tuple] = None) -> np.ndarray:
        """
        Render a region of the image at a target size.

        Args:
            size: (width, height) of the output bitmap
            box: (left, upper, right, lower) source region, whole image if None

        Returns:
            uint8 array of shape (width * height, 4), row-major RGBA
        """
        full = (0, 0, self.width, self.height)
        if box is None:
            box = full

        if tuple(size) == (self.width, self.height) and tuple(box) == full:
            rendered = self.image
        else:
            rendered = self.image.resize(tuple(size), Image.BILINEAR, box=box)

        return np.asarray(rendered, dtype=np.uint8).reshape(-1, 4)


def decode_image(source) -> DecodedImage:
    """
    Decode an image from a path or an in-memory buffer.

    Args:
        source: str/Path to a file, bytes-like buffer, or binary file object

    Raises:
        FileNotFoundError: If the image file doesn't exist
        DecodeError: If the data is not a supported image or exceeds size limits
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(source))
    elif isinstance(source, Path):
        source = str(source)

    try:
        img = Image.open(source)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {source}")
    except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not open image: {e}") from e

    # Size comes from the header; reject before decoding any pixel data
    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise DecodeError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise DecodeError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    try:
        img.load()
    except (OSError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e

    return DecodedImage(image=img.convert('RGBA'))


def check_scale(scale: float) -> bool:
    """Warn when scale is outside (0, 1], NaN included. Never clamps."""
    if not 0 < scale <= 1:
        log.warning(
            "You have set scale to %s, which isn't between 0-1. "
            "This is either pointless (> 1) or a no-op (<= 0)",
            scale,
        )
        return False
    return True


def target_size(width: int, height: int, scale: float) -> tuple[int, int]:
    """
    Bitmap size for an image of the given native size at `scale`.

    Raises:
        ScaleError: If the scaled size is infinite or NaN
    """
    scaled_width, scaled_height = width * scale, height * scale
    if not (math.isfinite(scaled_width) and math.isfinite(scaled_height)):
        raise ScaleError(f"Scale {scale} gives no usable size for a {width}x{height} image")
    return math.floor(scaled_width), math.floor(scaled_height)


def rasterize(source, scale: float = 1.0) -> np.ndarray:
    """
    Decode an image and sample it at `scale` times its native resolution.

    Lower scales mean fewer pixels to scan at the cost of detail lost to
    resampling. Scale 1 returns the exact decoded pixels.

    Args:
        source: Image path or in-memory buffer
        scale: Resolution factor applied to both dimensions

    Returns:
        uint8 array of shape (w * h, 4), row-major RGBA samples

    Raises:
        FileNotFoundError: If the image file doesn't exist
        DecodeError: If the source is not a supported image
        ScaleError: If the scaled bitmap would be empty
    """
    decoded = decode_image(source)
    width, height = target_size(decoded.width, decoded.height, scale)
    if width <= 0 or height <= 0:
        raise ScaleError(
            f"Scale {scale} turns {decoded.width}x{decoded.height} into an empty "
            f"{width}x{height} bitmap"
        )

    log.debug("Rasterizing %dx%d image at %dx%d", decoded.width, decoded.height, width, height)
    return decoded.read_pixels((width, height))
