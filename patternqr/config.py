# -*- coding: utf-8 -*-
"""
Configuration Module

Rendering defaults, upload limits and the tunable weights of the readability
heuristic. The scoring numbers were picked empirically, so they are kept here
as data rather than inlined in the scorer.

Classes:
    ScoringWeights: Penalty magnitudes and verdict thresholds
    Settings: Process-level settings read from the environment
"""

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, FrozenSet

logger = logging.getLogger(__name__)

# Rendering defaults
DEFAULT_TARGET_SIZE = 300
DEFAULT_MARGIN = 2
ERROR_LEVEL = 'M'
TEXT_FONT_RATIO = 0.6
EMOJI_FONT_RATIO = 0.8

# Input limits
MAX_TEXT_LENGTH = 10
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
# Decoded pixel ceiling for uploads; well under Pillow's own bomb limit
MAX_IMAGE_PIXELS = 25_000_000

# Pillow format names accepted for uploads
ALLOWED_IMAGE_FORMATS = frozenset({'JPEG', 'PNG', 'GIF', 'WEBP', 'BMP', 'TIFF'})
ALLOWED_MIME_TYPES = frozenset({
    'image/jpeg', 'image/jpg', 'image/png', 'image/gif',
    'image/webp', 'image/bmp', 'image/tiff',
})

# Color extractor sampling grid (pixels per side)
COLOR_SAMPLE_GRID = 10


# Emoji penalties keyed by single codepoint (variation selectors stripped)
_EMOJI_PENALTIES = {
    '❤': 5,       # red heart: simple, high contrast
    '\U0001F499': 5,   # blue heart
    '\U0001F49A': 5,   # green heart
    '\U0001F49B': 8,   # yellow heart: low contrast on white
    '\U0001F49C': 6,   # purple heart
    '\U0001F5A4': 3,   # black heart
    '\U0001F90D': 10,  # white heart: near-invisible on white
    '\U0001F525': 7,   # fire: complex shape
    '⭐': 6,       # star
    '\U0001F31F': 8,   # glowing star
}


@dataclass(frozen=True)
class ScoringWeights:
    """
    Weights and thresholds of the readability heuristic.

    Every field defaults to the value the scorer was tuned with. Pass a custom
    instance to score() to experiment without touching the scorer.
    """

    start_score: int = 100
    readable_threshold: int = 70
    severe_threshold: int = 50

    # Emoji
    emoji_penalties: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType(dict(_EMOJI_PENALTIES))
    )
    unknown_emoji_penalty: int = 15

    # Text
    text_length_weight: int = 2
    text_upper_weight: int = 1
    text_lower_weight: int = 2
    text_digit_weight: int = 1
    text_special_weight: int = 5
    text_other_weight: int = 3
    text_repeat_bonus: int = 5
    text_penalty_cap: int = 25

    # Image
    image_base_penalty: int = 10
    image_large_dimension: int = 1000
    image_large_penalty: int = 5
    image_animated_formats: FrozenSet[str] = frozenset({'GIF'})
    image_animated_penalty: int = 8
    image_lossy_alpha_formats: FrozenSet[str] = frozenset({'WEBP'})
    image_lossy_alpha_penalty: int = 3
    image_unreadable_penalty: int = 15

    # Matrix
    matrix_large_size: int = 25
    matrix_large_penalty: int = 10
    matrix_medium_size: int = 20
    matrix_medium_penalty: int = 5
    dense_fraction: float = 0.7
    dense_penalty: int = 8
    sparse_fraction: float = 0.3
    sparse_penalty: int = 5


DEFAULT_WEIGHTS = ScoringWeights()


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default
    if value < minimum:
        logger.warning(f"Ignoring {name}={value}: below {minimum}, using {default}")
        return default
    return value


@dataclass(frozen=True)
class Settings:
    """Process settings for the HTTP surface."""

    target_size: int = DEFAULT_TARGET_SIZE
    margin: int = DEFAULT_MARGIN
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    max_image_pixels: int = MAX_IMAGE_PIXELS
    port: int = 5000
    debug: bool = False

    @classmethod
    def from_env(cls) -> 'Settings':
        """Build settings from PATTERNQR_* / PORT / FLASK_DEBUG variables."""
        return cls(
            target_size=_env_int('PATTERNQR_TARGET_SIZE', DEFAULT_TARGET_SIZE, minimum=21),
            margin=_env_int('PATTERNQR_MARGIN', DEFAULT_MARGIN),
            max_upload_bytes=_env_int('PATTERNQR_MAX_UPLOAD_BYTES', MAX_UPLOAD_BYTES, minimum=1),
            max_image_pixels=_env_int('PATTERNQR_MAX_IMAGE_PIXELS', MAX_IMAGE_PIXELS, minimum=1),
            port=_env_int('PORT', 5000, minimum=1),
            debug=os.environ.get('FLASK_DEBUG', '').lower() in ('1', 'true', 'yes'),
        )
