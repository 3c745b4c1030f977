# -*- coding: utf-8 -*-
"""
QR Generation Service

Single entry point used by the HTTP layer: validate a request, build the
matrix once, then render the image and score its readability from the same
matrix. Both steps are pure functions of their inputs, so requests can be
served concurrently without locking.

Functions:
    validate_url: Check that a payload is an absolute URL
    generate: Produce a PNG and a readability verdict
    generate_svg: Produce the SVG equivalent
"""

import base64
import logging
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlparse

from .colors import extract_colors
from .config import Settings
from .content import (
    ColorPair, DEFAULT_COLORS, CustomContent, EmojiContent, ImageContent,
    content_from_request, emoji_colors
)
from .errors import EncodingError, InvalidInputError, InvalidLayoutError
from .layout import Layout, compute_layout
from .matrix import QRMatrix, build_matrix
from .renderer import RenderMode, Fallback, SvgRenderResult, mode_for, render, render_svg
from .scoring import ReadabilityVerdict, score

logger = logging.getLogger(__name__)

FALLBACK_WARNING = (
    "Warning: The custom pattern could not be rendered, so a standard QR code "
    "was generated instead."
)


@dataclass(frozen=True)
class GenerateRequest:
    """
    Validated-at-use request fields.

    mode is one of 'none', 'text', 'emoji', 'image'. tint=True renders emoji
    or image content as a solid two-color code instead of per-module glyphs.
    """

    url: str
    mode: str = 'none'
    text: Optional[str] = None
    image: Optional[bytes] = None
    image_mime: Optional[str] = None
    tint: bool = False


@dataclass(frozen=True)
class GenerateResult:
    png: bytes
    is_readable: bool
    warning: Optional[str]
    score: Optional[int]
    mode: RenderMode
    fallback: Optional[Fallback] = None

    @property
    def data_url(self) -> str:
        return 'data:image/png;base64,' + base64.b64encode(self.png).decode('ascii')


def validate_url(url: Optional[str]) -> str:
    """
    Return the stripped URL if it is absolute.

    Raises:
        InvalidInputError: If the URL is empty or has no scheme
    """
    url = (url or '').strip()
    if not url:
        raise InvalidInputError("URL is required")
    parsed = urlparse(url)
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        raise InvalidInputError(f"Invalid URL format: {url}")
    if parsed.scheme in ('http', 'https') and not parsed.netloc:
        raise InvalidInputError(f"Invalid URL format: {url}")
    return url


def _paint_plan(content: CustomContent, tint: bool) -> Tuple[RenderMode, ColorPair]:
    """Pick the render mode and solid colors for the content."""
    if tint and isinstance(content, EmojiContent):
        return RenderMode.STANDARD, emoji_colors(content.emoji)
    if tint and isinstance(content, ImageContent):
        return RenderMode.STANDARD, extract_colors(content)
    return mode_for(content), DEFAULT_COLORS


def _prepare(request: GenerateRequest, settings: Settings
             ) -> Tuple[QRMatrix, Layout, CustomContent]:
    url = validate_url(request.url)
    content = content_from_request(
        request.mode, request.text, request.image, request.image_mime,
        max_upload_bytes=settings.max_upload_bytes,
        max_image_pixels=settings.max_image_pixels
    )
    matrix = build_matrix(url, settings.target_size, settings.margin)
    try:
        layout = compute_layout(matrix.size, matrix.target_size, matrix.margin)
    except InvalidLayoutError as ex:
        raise EncodingError(
            f"URL needs a {matrix.size}-module QR code, too large for "
            f"the configured {matrix.target_size}px size"
        ) from ex
    return matrix, layout, content


def generate(request: GenerateRequest, settings: Optional[Settings] = None) -> GenerateResult:
    """
    Render a (possibly customized) QR code and judge its readability.

    Args:
        request (GenerateRequest): URL plus optional custom content
        settings (Optional[Settings]): Size, margin and upload limits

    Returns:
        GenerateResult: PNG bytes, verdict, warning, and the render fallback
            if a custom mode had to be dropped

    Raises:
        InvalidInputError: Bad URL, caption, mode or image
        EncodingError: URL too long for a QR code, or for the configured size

    Example:
        >>> result = generate(GenerateRequest("https://example.com", mode="text", text="hi"))
        >>> result.is_readable
        True
    """
    settings = settings or Settings()
    matrix, layout, content = _prepare(request, settings)
    mode, colors = _paint_plan(content, request.tint)

    rendered = render(matrix, layout, mode, content, colors)
    verdict: ReadabilityVerdict = score(matrix, content)

    warning = verdict.warning
    if rendered.fallback is not None and warning is None:
        warning = FALLBACK_WARNING

    logger.info(
        f"Generated {rendered.mode.value} QR v{matrix.version} ({layout.total_size}px), "
        f"score={verdict.score}, readable={verdict.is_readable}"
    )
    return GenerateResult(
        png=rendered.to_png(),
        is_readable=verdict.is_readable,
        warning=warning,
        score=verdict.score,
        mode=rendered.mode,
        fallback=rendered.fallback
    )


def generate_svg(request: GenerateRequest, settings: Optional[Settings] = None) -> SvgRenderResult:
    """Vector counterpart of generate(); no readability verdict."""
    settings = settings or Settings()
    matrix, layout, content = _prepare(request, settings)
    mode, colors = _paint_plan(content, request.tint)
    return render_svg(matrix, layout, mode, content, colors)
