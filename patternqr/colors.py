# -*- coding: utf-8 -*-
"""
Color Extractor Module

Derives a solid dark/light pair from an uploaded image, for tinting a
standard QR code when the image is not tiled into the modules.
"""

import logging
from io import BytesIO
from typing import Union

import numpy as np
from PIL import Image

from .config import COLOR_SAMPLE_GRID
from .content import ColorPair, DEFAULT_COLORS, ImageContent

logger = logging.getLogger(__name__)

DARK_FACTOR = 0.3
LIGHT_OFFSET = 50


def extract_colors(image: Union[ImageContent, bytes]) -> ColorPair:
    """
    Derive tint colors from an image.

    The image is downsampled to a small grid and its channels averaged. The
    dark tone is 30% of the average per channel, the light tone the average
    plus 50, clipped to 255. Anything that cannot be decoded yields the
    default black on white.

    Args:
        image (Union[ImageContent, bytes]): Uploaded image

    Returns:
        ColorPair: Tint colors

    Example:
        >>> extract_colors(png_bytes_of_solid_red)
        ColorPair(dark=(76, 0, 0), light=(255, 50, 50))
    """
    data = image.data if isinstance(image, ImageContent) else image
    try:
        with Image.open(BytesIO(data)) as src:
            sample = src.convert('RGB').resize(
                (COLOR_SAMPLE_GRID, COLOR_SAMPLE_GRID), Image.BILINEAR
            )
    except Exception as ex:
        logger.warning(f"Color extraction failed, using default colors: {ex}")
        return DEFAULT_COLORS

    average = np.asarray(sample, dtype=np.float64).reshape(-1, 3).mean(axis=0)
    dark = tuple(int(c) for c in average * DARK_FACTOR)
    light = tuple(int(c) for c in np.clip(average + LIGHT_OFFSET, 0, 255))
    return ColorPair(dark=dark, light=light)
