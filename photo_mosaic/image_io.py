"""Boundary services: decoding, resizing, encoding and file output."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from photo_mosaic.buffer import PixelBuffer
from photo_mosaic.errors import DecodeError, EncodeError, InvalidInputError

logger = logging.getLogger(__name__)

RESAMPLE_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
    "box": Image.Resampling.BOX,
}


def _to_image(buffer: PixelBuffer) -> Image.Image:
    # PixelBuffer arrays are read-only; hand Pillow its own copy
    return Image.fromarray(buffer.pixels.copy())


def _pil_format(fmt: str) -> str:
    """Map a format name or file extension (``tif``, ``jpg``) to Pillow's name."""
    ext = "." + fmt.lower().lstrip(".")
    return Image.registered_extensions().get(ext, fmt.upper())


class ImageBackend(Protocol):
    """What the core needs from an imaging library."""

    def decode(self, data: bytes) -> PixelBuffer: ...

    def resize(self, buffer: PixelBuffer, width: int, height: int) -> PixelBuffer: ...

    def encode(self, buffer: PixelBuffer, fmt: str = "png") -> bytes: ...


class PillowBackend:
    """:class:`ImageBackend` implemented with Pillow."""

    def __init__(self, resample: str = "bilinear") -> None:
        if resample.lower() not in RESAMPLE_FILTERS:
            msg = (
                f"Unknown resample filter '{resample}'. "
                f"Choose from {', '.join(RESAMPLE_FILTERS)}"
            )
            raise InvalidInputError(msg)
        self.resample = RESAMPLE_FILTERS[resample.lower()]

    def decode(self, data: bytes) -> PixelBuffer:
        try:
            with Image.open(io.BytesIO(data)) as img:
                rgba = img.convert("RGBA")
        except (OSError, Image.DecompressionBombError, Image.DecompressionBombWarning) as exc:
            raise DecodeError(f"Cannot decode image: {exc}") from exc
        return PixelBuffer(np.array(rgba, dtype=np.uint8))

    def resize(self, buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
        img = _to_image(buffer)
        img = img.resize((width, height), self.resample)
        return PixelBuffer(np.array(img, dtype=np.uint8))

    def encode(self, buffer: PixelBuffer, fmt: str = "png") -> bytes:
        img = _to_image(buffer)
        pil_format = _pil_format(fmt)
        if pil_format == "JPEG":
            # JPEG has no alpha channel
            img = img.convert("RGB")
        out = io.BytesIO()
        try:
            img.save(out, format=pil_format)
        except (KeyError, ValueError, OSError) as exc:
            raise EncodeError(f"Cannot encode image as {fmt}: {exc}") from exc
        return out.getvalue()


def _backend(backend: ImageBackend | None) -> ImageBackend:
    return PillowBackend() if backend is None else backend


def load_image(path: str | Path, backend: ImageBackend | None = None) -> PixelBuffer:
    """Read and decode an image file."""
    buffer = _backend(backend).decode(Path(path).read_bytes())
    logger.debug("Loaded %s (%dx%d)", path, buffer.width, buffer.height)
    return buffer


def save_image(
    buffer: PixelBuffer,
    path: str | Path,
    backend: ImageBackend | None = None,
    fmt: str | None = None,
) -> Path:
    """Encode *buffer* and write it to *path*.

    The format defaults to the file suffix (``png`` when there is none).
    """
    path = Path(path)
    fmt = fmt or path.suffix.lstrip(".") or "png"
    path.write_bytes(_backend(backend).encode(buffer, fmt))
    return path


def save_numbered(
    buffers: Sequence[PixelBuffer],
    output_dir: str | Path,
    backend: ImageBackend | None = None,
    fmt: str = "png",
) -> list[Path]:
    """Write buffers as ``1.<fmt>``, ``2.<fmt>``, ... in sequence order."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    backend = _backend(backend)
    return [
        save_image(buf, output_dir / f"{i}.{fmt}", backend, fmt)
        for i, buf in enumerate(buffers, 1)
    ]


def collect_images(paths: Iterable[str | Path], extensions: frozenset[str]) -> list[Path]:
    """Expand files and folders into a list of image paths.

    Folders contribute their matching files in sorted order; explicit
    files are kept as given. Order is preserved since it decides ties
    between equally coloured tiles.
    """
    found: list[Path] = []
    for p in map(Path, paths):
        if p.is_dir():
            found.extend(sorted(
                f for f in p.iterdir()
                if f.is_file() and f.suffix.lower() in extensions
            ))
        elif p.is_file():
            found.append(p)
    return found


def make_comparison_grid(
    target: PixelBuffer,
    mosaic: PixelBuffer,
    output_path: str | Path,
) -> None:
    """Save a labelled two-panel comparison: Target | Mosaic."""
    panel_w, panel_h = target.width, target.height
    label_height = 36
    gap = 8

    panels = [_to_image(target), _to_image(mosaic)]
    labels = [f"Target {target.width}x{target.height}", "Mosaic"]

    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGBA", (total_w, total_h), (30, 30, 30, 255))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels)):
        x = i * (panel_w + gap)
        canvas.paste(panel, (x, label_height), panel)

        bbox = draw.textbbox((0, 0), label, font=font)
        tx = x + (panel_w - (bbox[2] - bbox[0])) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    canvas.save(output_path)
