"""Nearest-colour photomosaic compositing."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import NamedTuple

import numpy as np

from photo_mosaic.buffer import (
    CHANNELS,
    Block,
    ColorSample,
    PixelBuffer,
    check_block_size,
    iter_blocks,
    paste,
)
from photo_mosaic.color_utils import average_color, nearest_candidate
from photo_mosaic.errors import InvalidInputError
from photo_mosaic.image_io import ImageBackend, PillowBackend

logger = logging.getLogger(__name__)

# "full":   every pixel of every block is sampled, blocks cover the whole target.
# "legacy": last row/column of each block is left out of the average and the
#           scan stops before the target's last row/column.
EDGE_MODES = ("full", "legacy")


class Candidate(NamedTuple):
    """A tile resized to block size, with its average colour."""

    buffer: PixelBuffer
    sample: ColorSample


def _check_edge_mode(edge_mode: str, x_size: int, y_size: int) -> None:
    """Validate *edge_mode* against the block size.

    Legacy mode samples ``(x_size-1) x (y_size-1)`` per block, which is
    empty for 1-pixel blocks. The scan it reproduces would average zero
    pixels there and hand every block to the first tile; that case is
    rejected with :class:`InvalidInputError` instead.
    """
    if edge_mode not in EDGE_MODES:
        msg = f"edge_mode must be one of {EDGE_MODES}, got '{edge_mode}'"
        raise InvalidInputError(msg)
    if edge_mode == "legacy" and (x_size < 2 or y_size < 2):
        msg = f"Legacy edge mode needs blocks of at least 2x2, got {x_size}x{y_size}"
        raise InvalidInputError(msg)


def _sample_region(x: int, y: int, x_size: int, y_size: int, edge_mode: str) -> Block:
    if edge_mode == "legacy":
        return Block(x, y, x_size - 1, y_size - 1)
    return Block(x, y, x_size, y_size)


def prepare_candidates(
    tiles: Sequence[PixelBuffer],
    x_size: int,
    y_size: int,
    backend: ImageBackend | None = None,
    edge_mode: str = "full",
    workers: int = 1,
) -> list[Candidate]:
    """Resize every tile to the block size once and sample its colour.

    Args:
        tiles:     Palette images, any size.
        x_size:    Block width.
        y_size:    Block height.
        backend:   Resize provider (Pillow when omitted).
        edge_mode: One of :data:`EDGE_MODES`.
        workers:   Threads used for resizing. Output order always
                   follows *tiles*.

    Returns:
        One :class:`Candidate` per tile, in input order.
    """
    if not tiles:
        raise InvalidInputError("At least one tile image is required")
    check_block_size(x_size, y_size)
    _check_edge_mode(edge_mode, x_size, y_size)
    backend = PillowBackend() if backend is None else backend

    def _resize(tile: PixelBuffer) -> PixelBuffer:
        return backend.resize(tile, x_size, y_size)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            resized = list(executor.map(_resize, tiles))
    else:
        resized = [_resize(tile) for tile in tiles]

    region = _sample_region(0, 0, x_size, y_size, edge_mode)
    return [Candidate(buf, average_color(buf, region)) for buf in resized]


def match_blocks(
    target: PixelBuffer,
    candidates: Sequence[Candidate],
    x_size: int,
    y_size: int,
    edge_mode: str = "full",
) -> Iterator[tuple[Block, int]]:
    """Yield ``(block, candidate_index)`` for every block of *target*.

    Blocks follow the chop order (x-major, y-minor).
    """
    check_block_size(x_size, y_size)
    _check_edge_mode(edge_mode, x_size, y_size)
    if edge_mode == "legacy":
        x_stop, y_stop = target.width - 1, target.height - 1
    else:
        x_stop, y_stop = target.width, target.height

    samples = [c.sample for c in candidates]
    for block in iter_blocks(target.width, target.height, x_size, y_size, x_stop, y_stop):
        region = _sample_region(block.x, block.y, x_size, y_size, edge_mode)
        yield block, nearest_candidate(average_color(target, region), samples)


def composite(
    target: PixelBuffer,
    tiles: Sequence[PixelBuffer],
    x_size: int,
    y_size: int,
    backend: ImageBackend | None = None,
    edge_mode: str = "full",
    workers: int = 1,
) -> PixelBuffer:
    """Rebuild *target* out of *tiles*.

    Each ``x_size x y_size`` block of the target is replaced by the tile
    whose average colour is nearest in RGB. Tiles overhanging the right
    or bottom edge are clipped. Pixels never covered by a block stay
    transparent black.

    Raises:
        InvalidInputError: no tiles, bad block size or unknown edge mode.
            Checked before the target is read.
    """
    tiles = list(tiles)
    if not tiles:
        raise InvalidInputError("At least one tile image is required")
    check_block_size(x_size, y_size)
    _check_edge_mode(edge_mode, x_size, y_size)

    logger.info("Preparing %d candidate tiles at %dx%d …", len(tiles), x_size, y_size)
    t0 = time.perf_counter()
    candidates = prepare_candidates(tiles, x_size, y_size, backend, edge_mode, workers)
    logger.info("Candidates ready  (%.2f s)", time.perf_counter() - t0)

    canvas = np.zeros((target.height, target.width, CHANNELS), dtype=np.uint8)

    logger.info("Matching %dx%d target (%s edges) …", target.width, target.height, edge_mode)
    t0 = time.perf_counter()
    blocks = 0
    for block, index in match_blocks(target, candidates, x_size, y_size, edge_mode):
        paste(canvas, candidates[index].buffer, block.x, block.y)
        blocks += 1
    logger.info("Placed %d blocks  (%.2f s)", blocks, time.perf_counter() - t0)

    return PixelBuffer(canvas)
