"""Tests for color conversion and frequency ranking."""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from extract_colors import (
    DEFAULT_IGNORE,
    Color,
    ExtractOptions,
    aggregate,
    as_samples,
    count_colors,
    dominant_color,
    extract_colors,
    hex_to_rgb,
    hex_to_rgba,
    rgb_to_hex,
    rgb_to_hsl,
    rgba_to_hex,
)
from tests.conftest import SCENARIO_PIXELS, make_image, png_bytes, solid_image


# -----------------------------------------------------------------------------
# Conversion
# -----------------------------------------------------------------------------

def test_rgb_to_hex_pads_with_zeros() -> None:
    assert rgb_to_hex(0, 0, 0) == '#000000'
    assert rgb_to_hex(1, 2, 3) == '#010203'
    assert rgb_to_hex(255, 255, 255) == '#ffffff'


def test_rgba_to_hex_alpha_suffix_only_when_translucent() -> None:
    assert rgba_to_hex(255, 0, 0, 255) == '#ff0000'
    assert rgba_to_hex(255, 0, 0, 128) == '#ff000080'
    assert rgba_to_hex(18, 52, 86, 1) == '#12345601'


def test_hex_round_trip() -> None:
    values = range(0, 256, 51)
    for r, g, b in itertools.product(values, values, values):
        assert hex_to_rgb(rgb_to_hex(r, g, b)) == (r, g, b)


def test_hex_to_rgba_accepts_alpha_and_case() -> None:
    assert hex_to_rgba('#FF000080') == (255, 0, 0, 128)
    assert hex_to_rgba('00ff00') == (0, 255, 0, 255)


@pytest.mark.parametrize('value', ['', '#fff', '#12345', '#gggggg', '#1234567'])
def test_hex_to_rgba_rejects_malformed(value: str) -> None:
    with pytest.raises(ValueError):
        hex_to_rgba(value)


@pytest.mark.parametrize(
    ('rgb', 'hsl'),
    [
        ((0, 0, 0), (0, 0, 0)),
        ((255, 255, 255), (0, 0, 100)),
        ((255, 0, 0), (0, 100, 50)),
        ((0, 255, 0), (33, 100, 50)),
        ((0, 0, 255), (67, 100, 50)),
        ((255, 0, 255), (83, 100, 50)),
        ((128, 128, 128), (0, 0, 50)),
        # Lightness above and below one half take different saturation formulas
        ((255, 128, 128), (0, 100, 75)),
        ((64, 0, 0), (0, 100, 13)),
        ((100, 150, 200), (58, 48, 59)),
        ((200, 150, 100), (8, 48, 59)),
    ],
)
def test_rgb_to_hsl(rgb, hsl) -> None:
    assert rgb_to_hsl(*rgb) == hsl


def test_color_equality_uses_hex() -> None:
    red = Color.from_rgba(255, 0, 0)
    assert Color.from_hex('#FF0000') == red
    assert red.rgb == (255, 0, 0)
    assert red.hsl == (0, 100, 50)
    assert Color.from_rgba(255, 0, 0, 128) != red


def test_options_normalize_ignore() -> None:
    options = ExtractOptions(ignore=['FF0000', '#00FF00'])
    assert options.ignore == frozenset({'#ff0000', '#00ff00'})
    assert ExtractOptions().ignore == DEFAULT_IGNORE
    assert ExtractOptions().scale == 0.3


def test_single_ignore_string_is_one_color() -> None:
    assert ExtractOptions(ignore='#FF0000').ignore == frozenset({'#ff0000'})
    assert [c.hex for c in aggregate(SCENARIO_PIXELS, ignore='#ff0000')] == ['#0000ff']


# -----------------------------------------------------------------------------
# Aggregation
# -----------------------------------------------------------------------------

def test_scenario_ranks_by_count() -> None:
    colors = aggregate(SCENARIO_PIXELS, ignore=set())
    assert [c.hex for c in colors] == ['#ff0000', '#0000ff']


def test_scenario_with_ignored_color() -> None:
    colors = aggregate(SCENARIO_PIXELS, ignore={'#ff0000'})
    assert [c.hex for c in colors] == ['#0000ff']


def test_all_transparent_is_empty() -> None:
    pixels = [(10, 20, 30, 0)] * 9
    assert aggregate(pixels) == []
    assert aggregate([]) == []


def test_black_and_white_ignored_by_default() -> None:
    pixels = [(0, 0, 0, 255), (255, 255, 255, 255)] * 5
    assert aggregate(pixels, DEFAULT_IGNORE) == []


def test_translucent_pixels_are_distinct_colors() -> None:
    pixels = [(255, 0, 0, 128)] * 3 + [(255, 0, 0, 255)]
    counts = count_colors(pixels)
    assert [(c.color.hex, c.count) for c in counts] == [('#ff000080', 3), ('#ff0000', 1)]
    # The opaque ignore entry does not cover the translucent variant
    assert [c.hex for c in aggregate(pixels, {'#ff0000'})] == ['#ff000080']


def test_accepts_flat_bytes_and_drops_partial_sample() -> None:
    buffer = bytes([0, 0, 255, 255, 0, 0, 255, 255, 7, 7])
    assert len(as_samples(buffer)) == 2
    assert [c.hex for c in aggregate(buffer)] == ['#0000ff']


def _random_pixels(seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    # Few channel levels so colors repeat
    pixels = rng.choice([0, 128, 255], size=(400, 4)).astype(np.uint8)
    pixels[::7, 3] = 0
    pixels[::5] = (0, 0, 0, 255)
    return pixels


def test_counts_cover_every_visible_unignored_pixel() -> None:
    pixels = _random_pixels()
    expected = sum(
        1 for r, g, b, a in pixels.tolist()
        if a != 0 and rgba_to_hex(r, g, b, a) not in DEFAULT_IGNORE
    )
    counts = count_colors(pixels, DEFAULT_IGNORE)
    assert sum(c.count for c in counts) == expected
    assert all(c.count >= 1 for c in counts)
    assert len({c.color.hex for c in counts}) == len(counts)


def test_counts_are_non_increasing() -> None:
    counts = [c.count for c in count_colors(_random_pixels(1))]
    assert counts == sorted(counts, reverse=True)


def test_repeated_aggregation_is_identical() -> None:
    pixels = _random_pixels(2)
    first = aggregate(pixels, DEFAULT_IGNORE)
    second = aggregate(pixels, DEFAULT_IGNORE)
    assert [c.hex for c in first] == [c.hex for c in second]


# -----------------------------------------------------------------------------
# Extraction API
# -----------------------------------------------------------------------------

def test_extract_colors_from_path(scenario_png) -> None:
    colors = extract_colors(scenario_png, ignore=[], scale=1)
    assert [c.hex for c in colors] == ['#ff0000', '#0000ff']
    assert colors[0].rgb == (255, 0, 0)
    assert colors[1].hsl == (67, 100, 50)


def test_extract_colors_from_bytes() -> None:
    data = png_bytes(make_image(SCENARIO_PIXELS, 2, 2))
    colors = extract_colors(data, ExtractOptions(ignore={'#ff0000'}, scale=1))
    assert [c.hex for c in colors] == ['#0000ff']


def test_extract_colors_default_ignore_on_black_and_white(write_png) -> None:
    pixels = [(0, 0, 0, 255), (255, 255, 255, 255)] * 8
    path = write_png('bw.png', make_image(pixels, 4, 4))
    assert extract_colors(path, scale=1) == []
    assert dominant_color(path, scale=1) is None


def test_dominant_color_at_default_scale(write_png) -> None:
    path = write_png('solid.png', solid_image((12, 34, 56, 255), 20, 20))
    assert dominant_color(path).hex == '#0c2238'
