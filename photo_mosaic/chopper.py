"""Slice one image into a grid of equally sized sub-images."""

from __future__ import annotations

import logging

from photo_mosaic.buffer import PixelBuffer, check_block_size, iter_blocks

logger = logging.getLogger(__name__)


def chop(
    buffer: PixelBuffer,
    x_size: int,
    y_size: int,
    skip_incomplete: bool = True,
) -> list[PixelBuffer]:
    """Cut *buffer* into ``x_size x y_size`` pieces.

    Pieces come out column by column: every block of the first x-column
    top to bottom, then the next column. Callers number outputs by this
    order.

    Args:
        buffer:          Source image.
        x_size:          Block width in pixels.
        y_size:          Block height in pixels.
        skip_incomplete: Drop blocks that overhang the right or bottom
                         edge. When False they are kept, padded with
                         transparent black.

    Returns:
        List of ``x_size x y_size`` buffers.
    """
    check_block_size(x_size, y_size)

    pieces = []
    skipped = 0
    for block in iter_blocks(buffer.width, buffer.height, x_size, y_size):
        if skip_incomplete and not block.fits(buffer.width, buffer.height):
            skipped += 1
            continue
        pieces.append(buffer.crop(block))

    logger.debug(
        "Chopped %dx%d into %d blocks of %dx%d (%d skipped)",
        buffer.width, buffer.height, len(pieces), x_size, y_size, skipped,
    )
    return pieces
