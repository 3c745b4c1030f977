# -*- coding: utf-8 -*-
"""
QR Matrix Builder Module

Wraps the segno encoder to turn a payload into a square boolean module grid.
QR encoding itself (Reed-Solomon, version and mask selection) is left to
segno; this module only freezes its output into a value object that the
renderer and the scorer can share.

Functions:
    build_matrix: Encode a payload into a QRMatrix
"""

import logging
from dataclasses import dataclass
from typing import Tuple, Sequence

import segno

from .config import DEFAULT_TARGET_SIZE, DEFAULT_MARGIN, ERROR_LEVEL
from .errors import EncodingError, InvalidInputError

logger = logging.getLogger(__name__)

# Version 1 symbol side in modules
MIN_MATRIX_SIZE = 21


@dataclass(frozen=True)
class QRMatrix:
    """
    Immutable square grid of QR modules (True = dark).

    Attributes:
        rows: size x size booleans, row-major, without quiet zone
        version: QR version chosen by the encoder
        target_size: Rendered pixel size requested for this symbol
        margin: Pixel margin requested around the symbol
    """

    rows: Tuple[Tuple[bool, ...], ...]
    version: int
    target_size: int = DEFAULT_TARGET_SIZE
    margin: int = DEFAULT_MARGIN

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence], version: int = 0,
                  target_size: int = DEFAULT_TARGET_SIZE,
                  margin: int = DEFAULT_MARGIN) -> 'QRMatrix':
        """Freeze any row sequence (segno bytearrays, lists of bools) into a QRMatrix."""
        frozen = tuple(tuple(bool(cell) for cell in row) for row in rows)
        return cls(frozen, version, target_size, margin)

    @property
    def size(self) -> int:
        return len(self.rows)

    def is_dark(self, row: int, col: int) -> bool:
        return self.rows[row][col]

    @property
    def dark_count(self) -> int:
        return sum(sum(1 for cell in row if cell) for row in self.rows)

    @property
    def dark_fraction(self) -> float:
        """Share of dark modules; raises ValueError on a malformed grid."""
        size = self.size
        if size == 0 or any(len(row) != size for row in self.rows):
            raise ValueError(f"Matrix is not square: {size} rows")
        return self.dark_count / (size * size)


def build_matrix(
    payload: str,
    target_size: int = DEFAULT_TARGET_SIZE,
    margin: int = DEFAULT_MARGIN
) -> QRMatrix:
    """
    Encode a payload into a QR module grid.

    The error correction level is fixed (see config.ERROR_LEVEL) and segno is
    not allowed to boost it, so the same payload always gives the same grid.

    Args:
        payload (str): Validated URL to encode
        target_size (int): Pixel size the symbol will be rendered at
        margin (int): Pixel margin around the symbol

    Returns:
        QRMatrix: Square grid with odd size >= 21

    Raises:
        InvalidInputError: If the payload is empty
        EncodingError: If the payload exceeds QR capacity

    Example:
        >>> matrix = build_matrix("https://example.com")
        >>> matrix.size
        25
    """
    if not payload:
        raise InvalidInputError("URL is required")

    try:
        symbol = segno.make(
            payload,
            error=ERROR_LEVEL,
            boost_error=False,
            micro=False
        )
    except segno.DataOverflowError as ex:
        raise EncodingError(
            f"URL is too long to fit in a QR code ({len(payload)} characters)"
        ) from ex

    matrix = QRMatrix.from_rows(symbol.matrix, symbol.version, target_size, margin)
    logger.debug(f"Encoded payload as version {matrix.version} ({matrix.size}x{matrix.size})")
    return matrix
