"""Shared fixtures: small images built with Pillow."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# The 2x2 image from the ranking examples: two red, one blue, one transparent
SCENARIO_PIXELS = [(255, 0, 0, 255), (255, 0, 0, 255), (0, 0, 255, 255), (0, 0, 0, 0)]


def make_image(pixels, width: int, height: int) -> Image.Image:
    data = np.array(pixels, dtype=np.uint8).reshape(height, width, 4)
    return Image.fromarray(data, 'RGBA')


def solid_image(rgba, width: int = 4, height: int = 4) -> Image.Image:
    return make_image([rgba] * (width * height), width, height)


def png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def scenario_png(tmp_path: Path) -> Path:
    path = tmp_path / 'scenario.png'
    make_image(SCENARIO_PIXELS, 2, 2).save(path)
    return path


@pytest.fixture
def write_png(tmp_path: Path):
    def _write(name: str, image: Image.Image) -> Path:
        path = tmp_path / name
        image.save(path)
        return path

    return _write
