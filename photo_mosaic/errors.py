"""Exception hierarchy shared by the core and its boundary services."""

from __future__ import annotations


class MosaicError(Exception):
    """Base class for every error raised by photo_mosaic."""


class InvalidInputError(MosaicError, ValueError):
    """Bad arguments: non-positive block size, no tiles, empty image."""


class DecodeError(MosaicError):
    """Raised by a backend when bytes cannot be decoded into pixels."""


class EncodeError(MosaicError):
    """Raised by a backend when a buffer cannot be encoded into bytes."""
