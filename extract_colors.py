#!/usr/bin/env python3
"""
Extract the colors of an image ranked by pixel count, as hex, RGB and HSL.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np

from rasterize import check_scale, rasterize

log = logging.getLogger(__name__)


DEFAULT_IGNORE = frozenset({'#000000', '#ffffff'})  # Black and white backgrounds
DEFAULT_SCALE = 0.3

HEX_DIGITS = frozenset('0123456789abcdefABCDEF')


# =============================================================================
# Color Conversion
# =============================================================================

def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB (0-255) to a lowercase #rrggbb string."""
    return '#' + format((1 << 24) + (r << 16) + (g << 8) + b, 'x')[1:]


def rgba_to_hex(r: int, g: int, b: int, a: int = 255) -> str:
    """
    Convert RGBA (0-255) to a hex key.

    Fully opaque colors get the plain #rrggbb form; anything else keeps a
    two digit alpha suffix (#rrggbbaa).
    """
    hex_alpha = '' if a == 255 else format(a + 0x10000, 'x')[-2:]
    return rgb_to_hex(r, g, b) + hex_alpha


def hex_to_rgba(value: str) -> tuple[int, int, int, int]:
    """Parse #rrggbb or #rrggbbaa (leading # optional). Alpha defaults to 255."""
    digits = value.strip().lstrip('#')
    if len(digits) not in (6, 8) or not all(c in HEX_DIGITS for c in digits):
        raise ValueError(f"Not a hex color: {value!r}")

    packed = int(digits, 16)
    if len(digits) == 6:
        packed = (packed << 8) | 0xFF
    return (packed >> 24) & 0xFF, (packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """Parse a hex key back to (r, g, b), dropping any alpha suffix."""
    return hex_to_rgba(value)[:3]


def normalize_hex(value: str) -> str:
    """Canonical form of a user-supplied hex string: lowercase, leading #."""
    return '#' + value.strip().lstrip('#').lower()


def normalize_ignore(ignore) -> frozenset:
    """Canonical ignore set. A single hex string counts as one entry."""
    if isinstance(ignore, str):
        ignore = (ignore,)
    return frozenset(normalize_hex(h) for h in ignore)


def _round(x: float) -> int:
    # Halves round up, never to even
    return math.floor(x + 0.5)


def rgb_to_hsl(red: int, green: int, blue: int) -> tuple[int, int, int]:
    """
    Convert RGB (0-255) to HSL with every component on a 0-100 scale.

    Hue is a fraction of the full circle, so pure red is 0 and pure blue
    is 67. Achromatic colors get hue and saturation 0.
    """
    r, g, b = red / 255, green / 255, blue / 255

    max_c = max(r, g, b)
    min_c = min(r, g, b)
    lightness = (max_c + min_c) / 2

    if max_c == min_c:
        hue = saturation = 0.0
    else:
        deviation = max_c - min_c
        if lightness > 0.5:
            saturation = deviation / (2 - max_c - min_c)
        else:
            saturation = deviation / (max_c + min_c)

        if max_c == r:
            hue = (g - b) / deviation + (6 if g < b else 0)
        elif max_c == g:
            hue = (b - r) / deviation + 2
        else:
            hue = (r - g) / deviation + 4
        hue /= 6

    return _round(hue * 100), _round(saturation * 100), _round(lightness * 100)


# =============================================================================
# Data Model
# =============================================================================

@dataclass(frozen=True)
class Color:
    """One color in three representations. Equality and hashing use `hex`."""
    hex: str
    rgb: tuple = field(compare=False)
    hsl: tuple = field(compare=False)

    @classmethod
    def from_rgba(cls, r: int, g: int, b: int, a: int = 255) -> 'Color':
        return cls(
            hex=rgba_to_hex(r, g, b, a),
            rgb=(r, g, b),
            hsl=rgb_to_hsl(r, g, b),
        )

    @classmethod
    def from_hex(cls, value: str) -> 'Color':
        return cls.from_rgba(*hex_to_rgba(value))

    def to_dict(self) -> dict:
        return {'hex': self.hex, 'rgb': list(self.rgb), 'hsl': list(self.hsl)}


@dataclass
class ColorCount:
    """A distinct color and the number of pixels it covers."""
    color: Color
    count: int


@dataclass(frozen=True)
class ExtractOptions:
    """
    Per-call extraction settings.

    Attributes:
        ignore: Hex keys excluded from counting and output
        scale: Resolution factor in (0, 1]; lower is faster and less exact
    """
    ignore: frozenset = DEFAULT_IGNORE
    scale: float = DEFAULT_SCALE

    def __post_init__(self):
        object.__setattr__(self, 'ignore', normalize_ignore(self.ignore))


# =============================================================================
# Aggregation
# =============================================================================

def as_samples(pixels) -> np.ndarray:
    """
    View a pixel buffer as an (n, 4) uint8 array of RGBA samples.

    Accepts bytes-like buffers, flat arrays and (n, 4) arrays or sequences.
    A trailing incomplete sample is dropped.
    """
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(pixels, dtype=np.uint8)
    else:
        flat = np.asarray(pixels, dtype=np.uint8).reshape(-1)

    usable = flat.size - flat.size % 4
    return flat[:usable].reshape(-1, 4)


def count_colors(pixels, ignore=frozenset()) -> list[ColorCount]:
    """
    Count the distinct visible colors in a pixel buffer.

    Fully transparent samples are skipped, as are colors whose hex key is in
    `ignore`. Each distinct color is converted once, not once per pixel.

    Args:
        pixels: RGBA pixel buffer (see `as_samples`)
        ignore: Hex keys to leave out

    Returns:
        ColorCount list sorted by count descending. The order of colors with
        equal counts is not guaranteed.
    """
    ignore = normalize_ignore(ignore)
    samples = as_samples(pixels)
    samples = samples[samples[:, 3] != 0]
    if len(samples) == 0:
        return []

    # Pack each sample into one 32-bit key: 0xRRGGBBAA
    s = samples.astype(np.uint32)
    keys = (s[:, 0] << 24) | (s[:, 1] << 16) | (s[:, 2] << 8) | s[:, 3]

    unique_keys, counts = np.unique(keys, return_counts=True)
    order = np.argsort(-counts, kind='stable')

    results = []
    for key, count in zip(unique_keys[order].tolist(), counts[order].tolist()):
        r, g, b, a = (key >> 24) & 0xFF, (key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF
        if rgba_to_hex(r, g, b, a) in ignore:
            continue
        results.append(ColorCount(color=Color.from_rgba(r, g, b, a), count=count))

    log.debug("Counted %d samples into %d colors", len(samples), len(results))
    return results


def aggregate(pixels, ignore=frozenset()) -> list[Color]:
    """Colors of a pixel buffer, most frequent first."""
    return [entry.color for entry in count_colors(pixels, ignore)]


# =============================================================================
# Extraction API
# =============================================================================

def _resolve_options(options: Optional[ExtractOptions], overrides: dict) -> ExtractOptions:
    options = options or ExtractOptions()
    return replace(options, **overrides) if overrides else options


def extract_color_counts(source, options: Optional[ExtractOptions] = None, **overrides) -> list[ColorCount]:
    """Like `extract_colors`, keeping the pixel count of each color."""
    options = _resolve_options(options, overrides)
    check_scale(options.scale)
    pixels = rasterize(source, options.scale)
    return count_colors(pixels, options.ignore)


def extract_colors(source, options: Optional[ExtractOptions] = None, **overrides) -> list[Color]:
    """
    Extract the colors of an image, most dominant first.

    Args:
        source: Image path or in-memory buffer
        options: Extraction settings, defaults to ExtractOptions()
        **overrides: `ignore` and/or `scale`, applied on top of `options`

    Returns:
        List of Color, sorted by pixel count descending. Empty when every
        pixel is transparent or ignored.

    Raises:
        FileNotFoundError: If the image file doesn't exist
        DecodeError: If the source is not a supported image
        ScaleError: If the scale leaves nothing to sample
    """
    return [entry.color for entry in extract_color_counts(source, options, **overrides)]


def dominant_color(source, options: Optional[ExtractOptions] = None, **overrides) -> Optional[Color]:
    """The most frequent color of an image, or None if nothing was counted."""
    colors = extract_colors(source, options, **overrides)
    return colors[0] if colors else None
