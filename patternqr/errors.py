# -*- coding: utf-8 -*-
"""
Exception Taxonomy

Only the validation and capability errors below are meant to reach callers.
Rendering and scoring degrade instead of raising.
"""


class PatternQRError(Exception):
    """Base class for every error raised by patternqr."""


class InvalidInputError(PatternQRError):
    """Request rejected before any rendering (bad URL, caption, or image)."""


class EncodingError(PatternQRError):
    """Payload does not fit in any QR symbol at the fixed error level."""


class InvalidLayoutError(PatternQRError):
    """Layout geometry cannot be derived from the given sizes."""
