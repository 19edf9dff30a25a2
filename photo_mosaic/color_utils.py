"""Average colours, RGB distance and nearest-colour selection."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from photo_mosaic.buffer import Block, ColorSample, PixelBuffer
from photo_mosaic.errors import InvalidInputError


def average_color(buffer: PixelBuffer, region: Block) -> ColorSample:
    """Mean R, G, B over *region*, clipped to the buffer.

    Pixels of the region outside the buffer are skipped and do not count
    towards the divisor. Alpha is ignored.

    Raises:
        InvalidInputError: if the region does not intersect the buffer.
    """
    x0, y0 = max(region.x, 0), max(region.y, 0)
    x1 = min(region.x + region.width, buffer.width)
    y1 = min(region.y + region.height, buffer.height)
    if x1 <= x0 or y1 <= y0:
        msg = f"Region {tuple(region)} lies outside the {buffer.width}x{buffer.height} buffer"
        raise InvalidInputError(msg)

    rgb = buffer.pixels[y0:y1, x0:x1, :3].reshape(-1, 3).astype(np.float64)
    count = rgb.shape[0]
    r, g, b = rgb.sum(axis=0) / count
    return ColorSample(float(r), float(g), float(b))


def color_distance(a: ColorSample, b: ColorSample) -> float:
    """Euclidean distance in RGB space."""
    return math.sqrt((b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2 + (b[2] - a[2]) ** 2)


def nearest_candidate(sample: ColorSample, samples: Sequence[ColorSample]) -> int:
    """Index of the colour in *samples* closest to *sample*.

    Only a strictly smaller distance replaces the running best, so ties
    resolve to the earliest entry.
    """
    if not samples:
        raise InvalidInputError("No candidate colours to match against")

    best = 0
    min_dist = math.inf
    for i, candidate in enumerate(samples):
        dist = color_distance(sample, candidate)
        if dist < min_dist:
            min_dist = dist
            best = i
    return best


def mean_color_error(a: PixelBuffer, b: PixelBuffer) -> float:
    """Mean per-pixel RGB distance between two equally sized buffers."""
    if (a.width, a.height) != (b.width, b.height):
        msg = f"Size mismatch: {a.width}x{a.height} vs {b.width}x{b.height}"
        raise InvalidInputError(msg)
    t = a.pixels[:, :, :3].reshape(-1, 3).astype(np.float64)
    m = b.pixels[:, :, :3].reshape(-1, 3).astype(np.float64)
    return float(np.mean(np.sqrt(np.sum((t - m) ** 2, axis=1))))
