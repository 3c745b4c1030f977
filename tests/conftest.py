"""Shared fixtures: in-memory images and synthetic matrices."""

from io import BytesIO

import pytest
from PIL import Image

from patternqr.matrix import QRMatrix, build_matrix


def encode_image(width, height, fmt="PNG", color=(255, 0, 0)):
    mode = "RGBA" if fmt in ("PNG", "WEBP") else "RGB"
    fill = color + (255,) if mode == "RGBA" else color
    buf = BytesIO()
    Image.new(mode, (width, height), fill).save(buf, format=fmt)
    return buf.getvalue()


def synthetic_matrix(size, dark_fraction):
    """Square matrix whose first round(size*size*fraction) cells are dark."""
    dark = round(size * size * dark_fraction)
    cells = [i < dark for i in range(size * size)]
    rows = [cells[r * size:(r + 1) * size] for r in range(size)]
    return QRMatrix.from_rows(rows)


@pytest.fixture
def red_png():
    return encode_image(50, 30, "PNG")


@pytest.fixture
def large_gif():
    return encode_image(2000, 2000, "GIF")


@pytest.fixture
def example_matrix():
    return build_matrix("https://example.com")


@pytest.fixture
def long_url():
    return "https://example.com/" + "a" * 180
