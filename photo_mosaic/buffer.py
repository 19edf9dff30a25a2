"""Pixel buffers, blocks and the block scan shared by chop and composite."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from photo_mosaic.errors import InvalidInputError

CHANNELS = 4  # RGBA


class ColorSample(NamedTuple):
    """Average (r, g, b) of a region; alpha is never sampled."""

    r: float
    g: float
    b: float


class Block(NamedTuple):
    """Rectangular region anchored at (x, y). May overflow the buffer."""

    x: int
    y: int
    width: int
    height: int

    def fits(self, width: int, height: int) -> bool:
        """True if the block lies entirely inside a ``width x height`` buffer."""
        return self.x + self.width <= width and self.y + self.height <= height


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Immutable row-major RGBA image.

    Attributes:
        pixels: (H, W, 4) uint8 array, read-only.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = np.asarray(self.pixels)
        if arr.ndim != 3 or arr.shape[2] != CHANNELS:
            msg = f"Expected an (H, W, {CHANNELS}) array, got shape {arr.shape}"
            raise InvalidInputError(msg)
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            msg = f"Image must have a positive size, got {arr.shape[1]}x{arr.shape[0]}"
            raise InvalidInputError(msg)
        if arr.dtype != np.uint8:
            if not np.issubdtype(arr.dtype, np.integer):
                raise InvalidInputError(f"Expected integer pixel values, got dtype {arr.dtype}")
            if arr.min() < 0 or arr.max() > 255:
                msg = f"Pixel values must lie in 0-255, got {arr.min()}..{arr.max()}"
                raise InvalidInputError(msg)
        arr = np.array(arr, dtype=np.uint8, order="C", copy=True)
        arr.setflags(write=False)
        object.__setattr__(self, "pixels", arr)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def data(self) -> bytes:
        """Raw RGBA bytes, ``width * height * 4`` long."""
        return self.pixels.tobytes()

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> PixelBuffer:
        expected = width * height * CHANNELS
        if width <= 0 or height <= 0 or len(data) != expected:
            msg = (
                f"Cannot build a {width}x{height} buffer from {len(data)} bytes "
                f"(expected {expected})"
            )
            raise InvalidInputError(msg)
        arr = np.frombuffer(data, dtype=np.uint8).reshape(height, width, CHANNELS)
        return cls(arr)

    @classmethod
    def solid(
        cls,
        width: int,
        height: int,
        rgba: tuple[int, int, int, int] = (0, 0, 0, 0),
    ) -> PixelBuffer:
        """Uniform buffer; the default is fully transparent black."""
        if width <= 0 or height <= 0:
            msg = f"Image must have a positive size, got {width}x{height}"
            raise InvalidInputError(msg)
        arr = np.empty((height, width, CHANNELS), dtype=np.uint8)
        arr[:, :] = rgba
        return cls(arr)

    def crop(self, block: Block) -> PixelBuffer:
        """Copy *block* into a new buffer of exactly the block's size.

        Parts of the block outside this buffer are transparent black.
        """
        canvas = np.zeros((block.height, block.width, CHANNELS), dtype=np.uint8)
        h = max(0, min(block.height, self.height - block.y))
        w = max(0, min(block.width, self.width - block.x))
        canvas[:h, :w] = self.pixels[block.y:block.y + h, block.x:block.x + w]
        return PixelBuffer(canvas)


def check_block_size(x_size: int, y_size: int) -> None:
    """Reject non-integer or non-positive block dimensions."""
    for name, value in (("x_size", x_size), ("y_size", y_size)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            msg = f"{name} must be an integer, got {type(value).__name__}"
            raise InvalidInputError(msg)
        if value <= 0:
            msg = f"{name} must be positive, got {value}"
            raise InvalidInputError(msg)


def iter_blocks(
    width: int,
    height: int,
    x_size: int,
    y_size: int,
    x_stop: int | None = None,
    y_stop: int | None = None,
) -> Iterator[Block]:
    """Yield blocks in x-major, y-minor order.

    All blocks of one column are produced before moving right. Origins
    step by the block size from 0 up to *x_stop* / *y_stop* (exclusive),
    which default to *width* / *height*.
    """
    x_end = width if x_stop is None else x_stop
    y_end = height if y_stop is None else y_stop
    for x in range(0, x_end, x_size):
        for y in range(0, y_end, y_size):
            yield Block(x, y, x_size, y_size)


def paste(canvas: np.ndarray, tile: PixelBuffer, x: int, y: int) -> None:
    """Write *tile* into *canvas* at (x, y), dropping pixels past the edge."""
    h = min(tile.height, canvas.shape[0] - y)
    w = min(tile.width, canvas.shape[1] - x)
    if h <= 0 or w <= 0:
        return
    canvas[y:y + h, x:x + w] = tile.pixels[:h, :w]
