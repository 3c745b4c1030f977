# -*- coding: utf-8 -*-
"""
Readability Scoring Module

Heuristic estimate of whether a customized QR code will still scan. The score
starts at 100 and loses one penalty for the active custom content plus one
for the symbol itself:

    emoji    fixed table of known glyphs, 15 for anything unknown
    text     length and per-character weights, capped at 25
    image    base cost plus size and format surcharges, 15 if unreadable
    matrix   symbol size and dark-module density

A code is considered readable at 70 or above. Every number involved lives in
config.ScoringWeights.

Functions:
    emoji_penalty, text_penalty, image_penalty, matrix_penalty: Penalty terms
    score: Combine the terms into a ReadabilityVerdict
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import ScoringWeights, DEFAULT_WEIGHTS
from .content import CustomContent, TextContent, EmojiContent, ImageContent, normalize_emoji
from .matrix import QRMatrix

logger = logging.getLogger(__name__)

# Characters counted as "special" by the text penalty
SPECIAL_CHARACTERS = frozenset('!@#$%^&*()_+-=[]{};\':"\\|,.<>/?')

DENSITY_WARNING = (
    "Warning: This QR code may be difficult to scan due to its complexity. "
    "Consider using a shorter URL or standard QR code."
)


@dataclass(frozen=True)
class ReadabilityVerdict:
    """
    Outcome of the readability heuristic.

    score is None only when scoring itself failed and the verdict fell open.
    It is not clamped, so heavy penalties can push it below zero.
    """

    score: Optional[int]
    is_readable: bool
    warning: Optional[str] = None


FAIL_OPEN = ReadabilityVerdict(score=None, is_readable=True, warning=None)


def emoji_penalty(emoji: str, weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
    """
    Look up the penalty for an emoji glyph.

    Example:
        >>> emoji_penalty('\U0001F5A4')  # black heart
        3
    """
    return weights.emoji_penalties.get(normalize_emoji(emoji), weights.unknown_emoji_penalty)


def text_penalty(text: str, weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
    """
    Penalty for drawing a caption in every module.

    2 per character, plus a weight per character class (uppercase 1,
    lowercase 2, digit 1, punctuation 5, anything else 3), minus 5 when the
    caption is a single repeated character, capped at 25.

    Example:
        >>> text_penalty("ABCDEFGHIJ")  # 20 + 10 -> capped
        25
    """
    penalty = len(text) * weights.text_length_weight

    for ch in text:
        if 'A' <= ch <= 'Z':
            penalty += weights.text_upper_weight
        elif 'a' <= ch <= 'z':
            penalty += weights.text_lower_weight
        elif '0' <= ch <= '9':
            penalty += weights.text_digit_weight
        elif ch in SPECIAL_CHARACTERS:
            penalty += weights.text_special_weight
        else:
            penalty += weights.text_other_weight

    if len(set(text)) == 1:
        penalty -= weights.text_repeat_bonus

    return min(penalty, weights.text_penalty_cap)


def image_penalty(content: ImageContent, weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
    """Penalty from image dimensions and format; worst case if the header is unreadable."""
    try:
        meta = content.read_metadata()
    except Exception as ex:
        logger.warning(f"Could not read image metadata, assuming worst case: {ex}")
        return weights.image_unreadable_penalty

    penalty = weights.image_base_penalty
    if meta.width > weights.image_large_dimension or meta.height > weights.image_large_dimension:
        penalty += weights.image_large_penalty
    if meta.format in weights.image_animated_formats:
        penalty += weights.image_animated_penalty
    elif meta.format in weights.image_lossy_alpha_formats:
        penalty += weights.image_lossy_alpha_penalty
    return penalty


def matrix_penalty(matrix: QRMatrix, weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
    """
    Penalty for symbol size and module density.

    Example:
        >>> # 29x29 symbol with 75% dark modules
        >>> matrix_penalty(matrix)
        18
    """
    penalty = 0
    size = matrix.size

    if size > weights.matrix_large_size:
        penalty += weights.matrix_large_penalty
    elif size > weights.matrix_medium_size:
        penalty += weights.matrix_medium_penalty

    density = matrix.dark_fraction
    if density > weights.dense_fraction:
        penalty += weights.dense_penalty
    elif density < weights.sparse_fraction:
        penalty += weights.sparse_penalty

    return penalty


def _content_warning(content: CustomContent) -> Optional[str]:
    if isinstance(content, EmojiContent):
        return (f'Warning: The emoji "{content.emoji}" may make the QR code difficult to scan. '
                f'Consider using a simpler emoji or standard QR code.')
    if isinstance(content, TextContent):
        return (f'Warning: The text "{content.text}" may make the QR code difficult to scan. '
                f'Consider using shorter text or standard QR code.')
    if isinstance(content, ImageContent):
        return ('Warning: The uploaded image may make the QR code difficult to scan. '
                'Consider using a simpler image or standard QR code.')
    return None


def _content_penalty(content: CustomContent, weights: ScoringWeights) -> int:
    if isinstance(content, EmojiContent):
        return emoji_penalty(content.emoji, weights)
    if isinstance(content, TextContent):
        return text_penalty(content.text, weights)
    if isinstance(content, ImageContent):
        return image_penalty(content, weights)
    return 0


def _score(matrix: QRMatrix, content: CustomContent, weights: ScoringWeights) -> ReadabilityVerdict:
    running = weights.start_score
    warning = None

    running -= _content_penalty(content, weights)
    if running < weights.readable_threshold:
        warning = _content_warning(content)

    running -= matrix_penalty(matrix, weights)
    if running < weights.readable_threshold and warning is None:
        # Attribute to the active content when there is one
        warning = _content_warning(content) or DENSITY_WARNING

    if running < weights.severe_threshold:
        warning = DENSITY_WARNING

    return ReadabilityVerdict(
        score=running,
        is_readable=running >= weights.readable_threshold,
        warning=warning
    )


def score(
    matrix: QRMatrix,
    content: CustomContent = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS
) -> ReadabilityVerdict:
    """
    Estimate whether a customized QR code stays scannable.

    Warnings: the first time the running score falls below the readable
    threshold the warning names the active content (or pattern density when
    there is none); a final score below the severe threshold replaces it with
    the generic density warning.

    Scoring never blocks generation: if it fails, the verdict is readable
    with no warning.

    Args:
        matrix (QRMatrix): Symbol being customized
        content (CustomContent): Active custom content, or None
        weights (ScoringWeights): Tunable penalties and thresholds

    Returns:
        ReadabilityVerdict: Score, verdict and optional warning
    """
    try:
        verdict = _score(matrix, content, weights)
    except Exception as ex:
        logger.warning(f"Readability scoring failed, assuming readable: {ex}")
        return FAIL_OPEN

    logger.info(f"Readability score {verdict.score} (readable={verdict.is_readable})")
    return verdict
