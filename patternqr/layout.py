# -*- coding: utf-8 -*-
"""
Layout Calculator Module

Pixel geometry shared by the renderer and anything that needs to map modules
to pixels.
"""

from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidLayoutError


@dataclass(frozen=True)
class Layout:
    """Per-module geometry: total_size = matrix_size * cell_size + 2 * margin."""

    cell_size: int
    margin: int
    total_size: int

    def origin(self, row: int, col: int) -> Tuple[int, int]:
        """Top-left pixel of the module at (row, col)."""
        return self.margin + col * self.cell_size, self.margin + row * self.cell_size

    def center(self, row: int, col: int) -> Tuple[int, int]:
        x, y = self.origin(row, col)
        half = self.cell_size // 2
        return x + half, y + half


def compute_layout(matrix_size: int, target_pixel_size: int, margin: int) -> Layout:
    """
    Compute cell size and canvas size for a matrix.

    The cell size is floor-divided so modules never overlap; the canvas can
    therefore come out slightly smaller than the target.

    Args:
        matrix_size (int): Modules per side
        target_pixel_size (int): Desired symbol width in pixels
        margin (int): Pixel margin on each side

    Returns:
        Layout: Derived geometry

    Raises:
        InvalidLayoutError: On non-positive sizes, negative margin, or a
            target smaller than the matrix (cell size would be zero)
    """
    if matrix_size <= 0:
        raise InvalidLayoutError(f"Matrix size must be positive, got {matrix_size}")
    if target_pixel_size <= 0:
        raise InvalidLayoutError(f"Target size must be positive, got {target_pixel_size}")
    if margin < 0:
        raise InvalidLayoutError(f"Margin must not be negative, got {margin}")

    cell_size = target_pixel_size // matrix_size
    if cell_size < 1:
        raise InvalidLayoutError(
            f"Target size {target_pixel_size}px is smaller than the {matrix_size}-module matrix"
        )

    return Layout(
        cell_size=cell_size,
        margin=margin,
        total_size=matrix_size * cell_size + 2 * margin
    )
