# -*- coding: utf-8 -*-
"""
Pattern QR - Core Module

Encodes a URL as a QR code, optionally redraws every dark module as a
caption, emoji or image tile, and estimates whether the result still scans.

Modules:
    matrix: QR module grid built with segno
    layout: Pixel geometry of the rendered symbol
    content: Custom content variants and emoji helpers
    renderer: Standard and custom raster/SVG rendering
    scoring: Readability heuristic
    colors: Tint extraction from uploaded images
    service: Request-level orchestration
"""

__version__ = "1.0.0"
__author__ = "Pattern QR Team"

from .errors import PatternQRError, InvalidInputError, EncodingError, InvalidLayoutError
from .matrix import QRMatrix, build_matrix
from .layout import Layout, compute_layout
from .content import (
    ColorPair, TextContent, EmojiContent, ImageContent,
    contains_emoji, extract_first_emoji, emoji_colors, content_from_request
)
from .renderer import RenderMode, RenderResult, Fallback, render, render_svg
from .scoring import ReadabilityVerdict, score
from .colors import extract_colors
from .service import GenerateRequest, GenerateResult, generate, generate_svg

__all__ = [
    'PatternQRError',
    'InvalidInputError',
    'EncodingError',
    'InvalidLayoutError',
    'QRMatrix',
    'build_matrix',
    'Layout',
    'compute_layout',
    'ColorPair',
    'TextContent',
    'EmojiContent',
    'ImageContent',
    'contains_emoji',
    'extract_first_emoji',
    'emoji_colors',
    'content_from_request',
    'RenderMode',
    'RenderResult',
    'Fallback',
    'render',
    'render_svg',
    'ReadabilityVerdict',
    'score',
    'extract_colors',
    'GenerateRequest',
    'GenerateResult',
    'generate',
    'generate_svg',
]
