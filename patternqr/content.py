# -*- coding: utf-8 -*-
"""
Custom Content Module

The optional visual content that replaces dark modules. Exactly one variant
is active per request, which is why the request-level content is a single
value (None, TextContent, EmojiContent or ImageContent) rather than several
optional fields.

Functions:
    contains_emoji: Whether a string holds any emoji-block codepoint
    extract_first_emoji: First emoji-block codepoint, or the heart fallback
    emoji_colors: Tint colors associated with an emoji
    content_from_request: Map request fields to one content variant
"""

from dataclasses import dataclass
from io import BytesIO
from types import MappingProxyType
from typing import Optional, Tuple, Union

from PIL import Image

from .config import (
    MAX_TEXT_LENGTH, MAX_UPLOAD_BYTES, MAX_IMAGE_PIXELS, ALLOWED_IMAGE_FORMATS, ALLOWED_MIME_TYPES
)
from .errors import InvalidInputError

# Codepoint blocks treated as emoji
EMOJI_RANGES = (
    (0x1F600, 0x1F64F),  # Emoticons
    (0x1F300, 0x1F5FF),  # Misc symbols and pictographs
    (0x1F680, 0x1F6FF),  # Transport and map symbols
    (0x1F1E0, 0x1F1FF),  # Regional indicators (flags)
    (0x2600, 0x26FF),    # Misc symbols
    (0x2700, 0x27BF),    # Dingbats
)

FALLBACK_EMOJI = '❤'

# Variation selectors (text/emoji presentation) carry no glyph of their own
_VARIATION_SELECTORS = {'\uFE0E', '\uFE0F'}

# Input modes accepted at the request boundary
MODES = ('none', 'text', 'emoji', 'image')


@dataclass(frozen=True)
class ColorPair:
    """Dark/light RGB colors for solid rendering."""

    dark: Tuple[int, int, int] = (0, 0, 0)
    light: Tuple[int, int, int] = (255, 255, 255)


DEFAULT_COLORS = ColorPair()


def _hex(value: str) -> Tuple[int, int, int]:
    h = value.lstrip('#')
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


_EMOJI_COLORS = MappingProxyType({
    '❤': ColorPair(_hex('#e74c3c'), _hex('#fdf2f2')),
    '\U0001F499': ColorPair(_hex('#3498db'), _hex('#f0f8ff')),
    '\U0001F49A': ColorPair(_hex('#2ecc71'), _hex('#f0fff4')),
    '\U0001F49B': ColorPair(_hex('#f1c40f'), _hex('#fffef0')),
    '\U0001F49C': ColorPair(_hex('#9b59b6'), _hex('#faf0ff')),
    '\U0001F5A4': ColorPair(_hex('#2c3e50'), _hex('#f8f9fa')),
    '\U0001F90D': ColorPair(_hex('#95a5a6'), _hex('#ffffff')),
    '\U0001F525': ColorPair(_hex('#e67e22'), _hex('#fff5f0')),
    '⭐': ColorPair(_hex('#f39c12'), _hex('#fffef0')),
    '\U0001F31F': ColorPair(_hex('#f1c40f'), _hex('#fffef0')),
    '\U0001F48E': ColorPair(_hex('#3498db'), _hex('#f0f8ff')),
    '\U0001F3AF': ColorPair(_hex('#e74c3c'), _hex('#fdf2f2')),
    '\U0001F680': ColorPair(_hex('#9b59b6'), _hex('#faf0ff')),
    '\U0001F4AB': ColorPair(_hex('#f39c12'), _hex('#fffef0')),
    '\U0001F3A8': ColorPair(_hex('#e67e22'), _hex('#fff5f0')),
    '\U0001F3AD': ColorPair(_hex('#8e44ad'), _hex('#f8f4ff')),
    '\U0001F3AA': ColorPair(_hex('#e74c3c'), _hex('#fdf2f2')),
    '\U0001F3C6': ColorPair(_hex('#f39c12'), _hex('#fffef0')),
    '\U0001F38A': ColorPair(_hex('#e67e22'), _hex('#fff5f0')),
    '\U0001F389': ColorPair(_hex('#e74c3c'), _hex('#fdf2f2')),
    '\U0001F60A': ColorPair(_hex('#f39c12'), _hex('#fffef0')),
    '\U0001F60D': ColorPair(_hex('#e74c3c'), _hex('#fdf2f2')),
    '\U0001F970': ColorPair(_hex('#e91e63'), _hex('#fce4ec')),
    '\U0001F60E': ColorPair(_hex('#2c3e50'), _hex('#f8f9fa')),
    '\U0001F929': ColorPair(_hex('#f39c12'), _hex('#fffef0')),
    '\U0001F973': ColorPair(_hex('#e67e22'), _hex('#fff5f0')),
    '\U0001F607': ColorPair(_hex('#3498db'), _hex('#f0f8ff')),
})


def _is_emoji(char: str) -> bool:
    code = ord(char)
    return any(lo <= code <= hi for lo, hi in EMOJI_RANGES)


def contains_emoji(text: str) -> bool:
    return any(_is_emoji(ch) for ch in text)


def extract_first_emoji(text: str) -> str:
    """
    Return the first emoji-block codepoint in text.

    Falls back to a red heart when the string holds no emoji.

    Example:
        >>> extract_first_emoji("go \U0001F680 now")
        '\U0001F680'
        >>> extract_first_emoji("plain")
        '❤'
    """
    for ch in text:
        if _is_emoji(ch):
            return ch
    return FALLBACK_EMOJI


def normalize_emoji(emoji: str) -> str:
    """Drop variation selectors so '❤\uFE0F' and '❤' share table entries."""
    return ''.join(ch for ch in emoji if ch not in _VARIATION_SELECTORS)


def emoji_colors(emoji: str) -> ColorPair:
    return _EMOJI_COLORS.get(normalize_emoji(emoji), DEFAULT_COLORS)


@dataclass(frozen=True)
class TextContent:
    """Caption drawn in every dark module."""

    text: str


@dataclass(frozen=True)
class EmojiContent:
    """Single emoji drawn in every dark module."""

    emoji: str


@dataclass(frozen=True)
class ImageMetadata:
    width: int
    height: int
    format: str


@dataclass(frozen=True)
class ImageContent:
    """
    Uploaded image tiled into every dark module.

    Holds the encoded bytes only; decoding happens inside the render or score
    call that needs it so no decoded buffer outlives that call.
    """

    data: bytes
    declared_mime: Optional[str] = None

    def read_metadata(self) -> ImageMetadata:
        """
        Read dimensions and format from the image header.

        Raises:
            OSError: If Pillow cannot identify the image
        """
        with Image.open(BytesIO(self.data)) as img:
            return ImageMetadata(img.width, img.height, (img.format or '').upper())


CustomContent = Union[None, TextContent, EmojiContent, ImageContent]


def _validate_image(data: bytes, declared_mime: Optional[str],
                    max_bytes: int, max_pixels: int) -> ImageContent:
    if not data:
        raise InvalidInputError("Uploaded image is empty")
    if len(data) > max_bytes:
        raise InvalidInputError(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
        )
    mime = (declared_mime or '').split(';')[0].strip().lower()
    if mime and mime not in ALLOWED_MIME_TYPES:
        raise InvalidInputError(
            f"Unsupported image type '{mime}'. Allowed: jpg, png, gif, webp, bmp, tiff"
        )

    content = ImageContent(data, mime or None)
    try:
        meta = content.read_metadata()
    except Image.DecompressionBombError as ex:
        raise InvalidInputError(f"Uploaded image has too many pixels: {ex}") from ex
    except (OSError, ValueError) as ex:
        raise InvalidInputError(f"Uploaded file is not a readable image: {ex}") from ex
    if meta.width * meta.height > max_pixels:
        raise InvalidInputError(
            f"Uploaded image is too large ({meta.width}x{meta.height}). "
            f"Maximum is {max_pixels} pixels."
        )
    if meta.format not in ALLOWED_IMAGE_FORMATS:
        raise InvalidInputError(f"Unsupported image format '{meta.format or 'unknown'}'")
    return content


def content_from_request(
    mode: str = 'none',
    text: Optional[str] = None,
    image: Optional[bytes] = None,
    image_mime: Optional[str] = None,
    max_upload_bytes: int = MAX_UPLOAD_BYTES,
    max_image_pixels: int = MAX_IMAGE_PIXELS
) -> CustomContent:
    """
    Turn request fields into a single content variant.

    A text caption that contains an emoji selects emoji mode; callers never
    need a separate emoji field.

    Args:
        mode (str): One of 'none', 'text', 'emoji', 'image'
        text (Optional[str]): Caption, at most MAX_TEXT_LENGTH codepoints
        image (Optional[bytes]): Encoded image upload
        image_mime (Optional[str]): MIME type declared by the uploader
        max_upload_bytes (int): Upload ceiling in bytes
        max_image_pixels (int): Ceiling on decoded width * height

    Returns:
        CustomContent: None or the single active variant

    Raises:
        InvalidInputError: On unknown mode, missing or oversized content,
            or an unsupported image
    """
    mode = (mode or 'none').strip().lower()
    if mode not in MODES:
        raise InvalidInputError(f"Unknown mode '{mode}'. Expected one of: {', '.join(MODES)}")

    if mode == 'none':
        return None

    if mode == 'image':
        if image is None:
            raise InvalidInputError("Image mode requires an uploaded image")
        return _validate_image(image, image_mime, max_upload_bytes, max_image_pixels)

    text = (text or '').strip()
    if not text:
        raise InvalidInputError(f"{mode.capitalize()} mode requires custom text")
    if len(text) > MAX_TEXT_LENGTH:
        raise InvalidInputError(
            f"Custom text must be at most {MAX_TEXT_LENGTH} characters (got {len(text)})"
        )

    if mode == 'emoji' or contains_emoji(text):
        return EmojiContent(extract_first_emoji(text))
    return TextContent(text)
