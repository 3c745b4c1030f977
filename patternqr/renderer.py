# -*- coding: utf-8 -*-
"""
QR Pattern Renderer Module

Paints a QRMatrix onto a canvas. Light modules always keep the background
color; every dark module is painted with the unit of the active mode:

    standard     solid square in colors.dark
    text-glyph   bold caption centered in the module
    emoji-glyph  single emoji centered in the module, native colors
    image-tile   uploaded image cover-fitted to one module and stamped

A custom mode that fails for any reason is redrawn in standard mode with the
default colors, and the result carries a Fallback marker instead of raising.

Functions:
    mode_for: Render mode implied by a content variant
    render: Render a matrix to a Pillow image
    render_svg: Render a matrix to an SVG document
"""

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import Iterator, List, Optional, Tuple
from xml.sax.saxutils import escape

from PIL import Image, ImageDraw, ImageFont, ImageOps

from .config import TEXT_FONT_RATIO, EMOJI_FONT_RATIO, ALLOWED_IMAGE_FORMATS
from .content import (
    ColorPair, DEFAULT_COLORS, CustomContent, TextContent, EmojiContent, ImageContent
)
from .layout import Layout
from .matrix import QRMatrix

logger = logging.getLogger(__name__)

# Resolved through Pillow's system font search; first hit wins
BOLD_FONT_CANDIDATES = (
    'DejaVuSans-Bold.ttf',
    'LiberationSans-Bold.ttf',
    'Arial Bold.ttf',
    'arialbd.ttf',
)
EMOJI_FONT_CANDIDATES = (
    'NotoColorEmoji.ttf',
    'Apple Color Emoji.ttc',
    'seguiemj.ttf',
)
# CBDT color emoji fonts only ship this strike size
COLOR_EMOJI_STRIKE = 109
# Noncharacter no font maps; draws as the font's missing-glyph box
MISSING_GLYPH_SENTINEL = '\U0010FFFF'


class RenderMode(str, Enum):
    STANDARD = 'standard'
    TEXT = 'text-glyph'
    EMOJI = 'emoji-glyph'
    IMAGE = 'image-tile'


@dataclass(frozen=True)
class Fallback:
    """Why a custom mode was replaced by the standard rendering."""

    requested: RenderMode
    reason: str


@dataclass
class RenderResult:
    image: Image.Image
    mode: RenderMode
    fallback: Optional[Fallback] = None

    def to_png(self) -> bytes:
        buf = BytesIO()
        self.image.save(buf, format='PNG')
        return buf.getvalue()


@dataclass(frozen=True)
class SvgRenderResult:
    svg: bytes
    mode: RenderMode
    fallback: Optional[Fallback] = None


def mode_for(content: CustomContent) -> RenderMode:
    if isinstance(content, TextContent):
        return RenderMode.TEXT
    if isinstance(content, EmojiContent):
        return RenderMode.EMOJI
    if isinstance(content, ImageContent):
        return RenderMode.IMAGE
    return RenderMode.STANDARD


def _dark_cells(matrix: QRMatrix) -> Iterator[Tuple[int, int]]:
    """Yield (row, col) of every dark module, row-major."""
    for row in range(matrix.size):
        for col in range(matrix.size):
            if matrix.is_dark(row, col):
                yield row, col


def _dark_origins(matrix: QRMatrix, layout: Layout) -> Iterator[Tuple[int, int]]:
    """Yield the top-left pixel of every dark module, row-major."""
    for row, col in _dark_cells(matrix):
        yield layout.origin(row, col)


def _load_font(candidates: Tuple[str, ...], size: int):
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logger.debug(f"No TrueType font from {candidates} found, using Pillow default")
    return ImageFont.load_default(size=size)


def _glyph_font_size(layout: Layout, ratio: float) -> int:
    font_size = int(layout.cell_size * ratio)
    if font_size < 1:
        raise ValueError(f"Cell size {layout.cell_size}px is too small for glyphs")
    return font_size


def _require_content(content: CustomContent, kind: type, mode: RenderMode):
    if not isinstance(content, kind):
        raise ValueError(f"Mode '{mode.value}' needs {kind.__name__}, got {type(content).__name__}")
    return content


# ---------------------------------------------------------------------------
# Paint rules
# ---------------------------------------------------------------------------

def _paint_standard(canvas: Image.Image, matrix: QRMatrix, layout: Layout,
                    colors: ColorPair) -> None:
    draw = ImageDraw.Draw(canvas)
    last = layout.cell_size - 1
    for x, y in _dark_origins(matrix, layout):
        draw.rectangle([x, y, x + last, y + last], fill=colors.dark)


def _paint_text(canvas: Image.Image, matrix: QRMatrix, layout: Layout, text: str) -> None:
    font = _load_font(BOLD_FONT_CANDIDATES, _glyph_font_size(layout, TEXT_FONT_RATIO))
    draw = ImageDraw.Draw(canvas)

    # Same caption everywhere, so the centering offset is computed once
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    dx = (layout.cell_size - (right - left)) / 2 - left
    dy = (layout.cell_size - (bottom - top)) / 2 - top

    for x, y in _dark_origins(matrix, layout):
        draw.text((x + dx, y + dy), text, font=font, fill=DEFAULT_COLORS.dark)


def _draw_plain_glyph(text: str, font, font_size: int) -> Image.Image:
    side = font_size * 2
    glyph = Image.new('RGBA', (side, side), (0, 0, 0, 0))
    ImageDraw.Draw(glyph).text(
        (font_size // 2, font_size // 2), text, font=font,
        fill=DEFAULT_COLORS.dark + (255,),
        embedded_color=isinstance(font, ImageFont.FreeTypeFont)
    )
    return glyph


def _rasterize_emoji(emoji: str, font_size: int) -> Image.Image:
    """Draw the emoji once and return it cropped to its ink, at most font_size square."""
    for name in EMOJI_FONT_CANDIDATES:
        try:
            font = ImageFont.truetype(name, COLOR_EMOJI_STRIKE)
        except OSError:
            continue
        pad = COLOR_EMOJI_STRIKE // 4
        side = COLOR_EMOJI_STRIKE + 2 * pad
        glyph = Image.new('RGBA', (side, side), (0, 0, 0, 0))
        ImageDraw.Draw(glyph).text((pad, pad), emoji, font=font, embedded_color=True)
        break
    else:
        font = _load_font(BOLD_FONT_CANDIDATES, font_size)
        glyph = _draw_plain_glyph(emoji, font, font_size)
        missing = _draw_plain_glyph(MISSING_GLYPH_SENTINEL, font, font_size)
        if glyph.tobytes() == missing.tobytes():
            raise ValueError(f"Font has no glyph for {emoji!r}")

    bbox = glyph.getbbox()
    if bbox is None:
        raise ValueError(f"No font could draw {emoji!r}")
    glyph = glyph.crop(bbox)
    glyph.thumbnail((font_size, font_size), Image.LANCZOS)
    return glyph


def _emoji_tile(emoji: str, layout: Layout) -> Image.Image:
    glyph = _rasterize_emoji(emoji, _glyph_font_size(layout, EMOJI_FONT_RATIO))
    tile = Image.new('RGBA', (layout.cell_size, layout.cell_size), (0, 0, 0, 0))
    tile.paste(glyph, ((layout.cell_size - glyph.width) // 2,
                       (layout.cell_size - glyph.height) // 2))
    return tile


def _image_tile(content: ImageContent, layout: Layout) -> Image.Image:
    """Cover-fit the upload to one module; the decoded source is closed on return."""
    with Image.open(BytesIO(content.data)) as src:
        fmt = (src.format or '').upper()
        if fmt not in ALLOWED_IMAGE_FORMATS:
            raise ValueError(f"Unsupported image format '{fmt or 'unknown'}'")
        return ImageOps.fit(
            src.convert('RGBA'),
            (layout.cell_size, layout.cell_size),
            method=Image.LANCZOS,
            centering=(0.5, 0.5)
        )


def _stamp_tile(canvas: Image.Image, matrix: QRMatrix, layout: Layout,
                tile: Image.Image) -> None:
    for origin in _dark_origins(matrix, layout):
        canvas.paste(tile, origin, tile)


def _paint_custom(canvas: Image.Image, matrix: QRMatrix, layout: Layout,
                  mode: RenderMode, content: CustomContent) -> None:
    if mode is RenderMode.TEXT:
        _paint_text(canvas, matrix, layout, _require_content(content, TextContent, mode).text)
    elif mode is RenderMode.EMOJI:
        emoji = _require_content(content, EmojiContent, mode).emoji
        _stamp_tile(canvas, matrix, layout, _emoji_tile(emoji, layout))
    elif mode is RenderMode.IMAGE:
        tile = _image_tile(_require_content(content, ImageContent, mode), layout)
        _stamp_tile(canvas, matrix, layout, tile)
    else:
        raise ValueError(f"Unknown render mode {mode!r}")


def _render_standard(matrix: QRMatrix, layout: Layout, colors: ColorPair) -> Image.Image:
    canvas = Image.new('RGB', (layout.total_size, layout.total_size), colors.light)
    _paint_standard(canvas, matrix, layout, colors)
    return canvas


def render(
    matrix: QRMatrix,
    layout: Layout,
    mode: Optional[RenderMode] = None,
    content: CustomContent = None,
    colors: ColorPair = DEFAULT_COLORS
) -> RenderResult:
    """
    Render a QR matrix as a flattened RGB image.

    Args:
        matrix (QRMatrix): Module grid
        layout (Layout): Geometry from compute_layout
        mode (Optional[RenderMode]): Paint rule; derived from content if None
        content (CustomContent): Caption, emoji or image for custom modes
        colors (ColorPair): Dark/light colors for standard mode

    Returns:
        RenderResult: The image, the mode actually used, and a Fallback
            marker if a custom mode could not be drawn

    Example:
        >>> result = render(matrix, compute_layout(matrix.size, 300, 2))
        >>> png = result.to_png()
    """
    mode = mode_for(content) if mode is None else RenderMode(mode)

    if mode is RenderMode.STANDARD:
        image = _render_standard(matrix, layout, colors)
        logger.debug(f"Rendered standard {layout.total_size}px QR ({layout.cell_size}px cells)")
        return RenderResult(image, mode)

    try:
        canvas = Image.new('RGB', (layout.total_size, layout.total_size), DEFAULT_COLORS.light)
        _paint_custom(canvas, matrix, layout, mode, content)
    except Exception as ex:
        logger.warning(f"Custom {mode.value} rendering failed, using standard QR: {ex}")
        fallback = Fallback(mode, str(ex) or type(ex).__name__)
        return RenderResult(_render_standard(matrix, layout, DEFAULT_COLORS),
                            RenderMode.STANDARD, fallback)

    logger.debug(f"Rendered {mode.value} {layout.total_size}px QR ({layout.cell_size}px cells)")
    return RenderResult(canvas, mode)


# ---------------------------------------------------------------------------
# SVG output
# ---------------------------------------------------------------------------

def _svg_color(rgb: Tuple[int, int, int]) -> str:
    return f"rgb{tuple(rgb)}"


def _svg_body(matrix: QRMatrix, layout: Layout, mode: RenderMode,
              content: CustomContent, colors: ColorPair) -> List[str]:
    cell = layout.cell_size
    out = []

    if mode is RenderMode.STANDARD:
        for x, y in _dark_origins(matrix, layout):
            out.append(f'<rect x="{x}" y="{y}" width="{cell}" height="{cell}" '
                       f'fill="{_svg_color(colors.dark)}"/>')
        return out

    if mode in (RenderMode.TEXT, RenderMode.EMOJI):
        if mode is RenderMode.TEXT:
            glyph = _require_content(content, TextContent, mode).text
            font_size = _glyph_font_size(layout, TEXT_FONT_RATIO)
            style = (f'font-family="Arial, sans-serif" font-weight="bold" '
                     f'fill="{_svg_color(DEFAULT_COLORS.dark)}"')
        else:
            glyph = _require_content(content, EmojiContent, mode).emoji
            font_size = _glyph_font_size(layout, EMOJI_FONT_RATIO)
            style = ''
        for row, col in _dark_cells(matrix):
            x, y = layout.center(row, col)
            out.append(f'<text x="{x}" y="{y}" font-size="{font_size}" {style} '
                       f'text-anchor="middle" dominant-baseline="central">{escape(glyph)}</text>')
        return out

    if mode is RenderMode.IMAGE:
        tile = _image_tile(_require_content(content, ImageContent, mode), layout)
        buf = BytesIO()
        tile.save(buf, format='PNG')
        href = 'data:image/png;base64,' + base64.b64encode(buf.getvalue()).decode('ascii')
        # Pattern anchored at the margin so every module gets the whole tile
        out.append(f'<defs><pattern id="qrTile" x="{layout.margin}" y="{layout.margin}" '
                   f'width="{cell}" height="{cell}" patternUnits="userSpaceOnUse">'
                   f'<image href="{href}" x="0" y="0" width="{cell}" height="{cell}"/>'
                   f'</pattern></defs>')
        for x, y in _dark_origins(matrix, layout):
            out.append(f'<rect x="{x}" y="{y}" width="{cell}" height="{cell}" fill="url(#qrTile)"/>')
        return out

    raise ValueError(f"Unknown render mode {mode!r}")


def _svg_document(layout: Layout, background: Tuple[int, int, int], body: List[str]) -> bytes:
    px = layout.total_size
    out = ['<?xml version="1.0" encoding="UTF-8"?>',
           f'<svg xmlns="http://www.w3.org/2000/svg" width="{px}" height="{px}" viewBox="0 0 {px} {px}">',
           f'<rect width="{px}" height="{px}" fill="{_svg_color(background)}"/>']
    out.extend(body)
    out.append('</svg>')
    return "\n".join(out).encode("utf-8")


def render_svg(
    matrix: QRMatrix,
    layout: Layout,
    mode: Optional[RenderMode] = None,
    content: CustomContent = None,
    colors: ColorPair = DEFAULT_COLORS
) -> SvgRenderResult:
    """
    Render a QR matrix as an SVG document.

    Same modes, geometry and fallback policy as render(). Glyph modes emit
    <text> elements, so how they look depends on the fonts of the viewer.

    Returns:
        SvgRenderResult: UTF-8 SVG bytes, mode used, optional Fallback
    """
    mode = mode_for(content) if mode is None else RenderMode(mode)

    if mode is not RenderMode.STANDARD:
        try:
            body = _svg_body(matrix, layout, mode, content, colors)
            return SvgRenderResult(_svg_document(layout, DEFAULT_COLORS.light, body), mode)
        except Exception as ex:
            logger.warning(f"Custom {mode.value} SVG failed, using standard QR: {ex}")
            fallback = Fallback(mode, str(ex) or type(ex).__name__)
            body = _svg_body(matrix, layout, RenderMode.STANDARD, None, DEFAULT_COLORS)
            return SvgRenderResult(_svg_document(layout, DEFAULT_COLORS.light, body),
                                   RenderMode.STANDARD, fallback)

    body = _svg_body(matrix, layout, mode, None, colors)
    return SvgRenderResult(_svg_document(layout, colors.light, body), mode)
