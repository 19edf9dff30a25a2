"""
Photo Mosaic
============

Rebuild a target image out of a sheet of tile images: the target is cut
into fixed-size blocks and every block is replaced by the tile whose
average colour is nearest in RGB.

Two operations:

- **chop** - slice one image into a grid of equally sized pieces
- **composite** - build the mosaic of a target from a set of tiles
"""

__version__ = "1.0.0"

from photo_mosaic.buffer import Block, ColorSample, PixelBuffer
from photo_mosaic.chopper import chop
from photo_mosaic.color_utils import average_color, color_distance, nearest_candidate
from photo_mosaic.compositor import Candidate, composite, match_blocks, prepare_candidates
from photo_mosaic.config import MosaicConfig
from photo_mosaic.errors import DecodeError, EncodeError, InvalidInputError, MosaicError
from photo_mosaic.image_io import (
    ImageBackend,
    PillowBackend,
    load_image,
    save_image,
    save_numbered,
)

__all__ = [
    "Block",
    "Candidate",
    "ColorSample",
    "DecodeError",
    "EncodeError",
    "ImageBackend",
    "InvalidInputError",
    "MosaicConfig",
    "MosaicError",
    "PillowBackend",
    "PixelBuffer",
    "average_color",
    "chop",
    "color_distance",
    "composite",
    "load_image",
    "match_blocks",
    "nearest_candidate",
    "prepare_candidates",
    "save_image",
    "save_numbered",
]
