"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from photo_mosaic.errors import InvalidInputError

MIN_BLOCK_SIZE = 1
MAX_BLOCK_SIZE = 256


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for the chop and build workflows.

    The core functions never read this; the CLI unpacks it into
    explicit arguments.

    Attributes:
        block_width:     Block / tile width in pixels.
        block_height:    Block / tile height in pixels.
        skip_incomplete: Chop only - drop blocks overhanging the edge.
        edge_mode:       "full" or "legacy" block scan (see compositor).
        resample:        Pillow filter used to resize tiles.
        workers:         Threads used to resize tiles.
        output_format:   Image format for saved files.
        save_comparison: Also write a Target | Mosaic comparison image.
        output_dir:      Folder for chop results.
    """

    # Blocks
    block_width: int = 35
    block_height: int = 35
    skip_incomplete: bool = True

    # Matching
    edge_mode: str = "full"  # "full" | "legacy"
    resample: str = "bilinear"
    workers: int = 1

    # Output
    output_format: str = "png"
    save_comparison: bool = False
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tiff", ".tif", ".webp"}
    )

    def __post_init__(self) -> None:
        for name in ("block_width", "block_height"):
            value = getattr(self, name)
            if not MIN_BLOCK_SIZE <= value <= MAX_BLOCK_SIZE:
                msg = (
                    f"{name} must be between {MIN_BLOCK_SIZE} and "
                    f"{MAX_BLOCK_SIZE}, got {value}"
                )
                raise InvalidInputError(msg)
        if self.edge_mode not in ("full", "legacy"):
            msg = f"edge_mode must be 'full' or 'legacy', got '{self.edge_mode}'"
            raise InvalidInputError(msg)
        if self.workers < 1:
            raise InvalidInputError(f"workers must be at least 1, got {self.workers}")
