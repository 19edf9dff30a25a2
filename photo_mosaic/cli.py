"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from photo_mosaic.chopper import chop as chop_buffer
from photo_mosaic.color_utils import mean_color_error
from photo_mosaic.compositor import composite
from photo_mosaic.config import MosaicConfig
from photo_mosaic.errors import MosaicError
from photo_mosaic.image_io import (
    PillowBackend,
    collect_images,
    load_image,
    make_comparison_grid,
    save_image,
    save_numbered,
)

app = typer.Typer(
    name="photo-mosaic",
    help="Build photomosaics out of a sheet of tile images.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _fail(exc: MosaicError) -> None:
    console.print(f"[bold red]Error:[/bold red] {exc}")
    raise typer.Exit(1) from exc


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


# -- chop command ------------------------------------------------------

@app.command()
def chop(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to slice"),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Folder for the numbered pieces",
    ),
    x_size: int = typer.Option(_DEFAULTS.block_width, "--x-size", "-x", help="Block width"),
    y_size: int = typer.Option(_DEFAULTS.block_height, "--y-size", "-y", help="Block height"),
    skip_incomplete: bool = typer.Option(
        _DEFAULTS.skip_incomplete, "--skip-incomplete/--keep-incomplete",
        help="Drop blocks that do not fit entirely inside the image",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Slice IMAGE into X_SIZE x Y_SIZE pieces saved as 1.png, 2.png, ..."""
    _setup_logging(verbose)
    logger = logging.getLogger("photo_mosaic")

    try:
        cfg = MosaicConfig(
            block_width=x_size,
            block_height=y_size,
            skip_incomplete=skip_incomplete,
            output_dir=output_dir,
        )
        backend = PillowBackend(cfg.resample)
        source = load_image(image, backend)
        logger.info("Source: %dx%d", source.width, source.height)

        pieces = chop_buffer(source, cfg.block_width, cfg.block_height, cfg.skip_incomplete)
        if not pieces:
            console.print(
                f"\n[yellow]No {x_size}x{y_size} block fits inside "
                f"{source.width}x{source.height}[/yellow]\n"
            )
            raise typer.Exit(0)

        paths = save_numbered(pieces, cfg.output_dir, backend, cfg.output_format)
    except MosaicError as exc:
        _fail(exc)

    console.print(
        f"[green]✓[/green] {len(paths)} pieces written to {cfg.output_dir}/  "
        f"[dim]{x_size}x{y_size} blocks[/dim]"
    )


# -- build command -----------------------------------------------------

@app.command()
def build(
    target: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to rebuild"),
    tiles: list[Path] = typer.Argument(
        ..., exists=True, help="Tile images and/or folders of tile images",
    ),
    output: Path = typer.Option(Path("output/mosaic.png"), "--output", "-o"),
    x_size: int = typer.Option(_DEFAULTS.block_width, "--x-size", "-x", help="Block width"),
    y_size: int = typer.Option(_DEFAULTS.block_height, "--y-size", "-y", help="Block height"),
    edge_mode: str = typer.Option(
        _DEFAULTS.edge_mode, "--edge-mode", help="'full' or 'legacy' block scan",
    ),
    resample: str = typer.Option(
        _DEFAULTS.resample, "--resample", help="Tile resize filter",
    ),
    workers: int = typer.Option(
        _DEFAULTS.workers, "--workers", "-w", help="Threads for tile resizing",
    ),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Also save a Target | Mosaic comparison",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Rebuild TARGET out of TILES."""
    _setup_logging(verbose)
    logger = logging.getLogger("photo_mosaic")
    t_total = time.perf_counter()

    try:
        cfg = MosaicConfig(
            block_width=x_size,
            block_height=y_size,
            edge_mode=edge_mode,
            resample=resample,
            workers=workers,
            save_comparison=comparison,
        )
        backend = PillowBackend(cfg.resample)

        tile_paths = collect_images(tiles, cfg.SUPPORTED_EXTENSIONS)
        if not tile_paths:
            console.print("\n[yellow]No tile images found.[/yellow]\n")
            raise typer.Exit(1)

        console.print(Panel.fit(
            f"[bold]PHOTO MOSAIC[/bold]\n"
            f"Blocks: {cfg.block_width}x{cfg.block_height}  |  Edges: {cfg.edge_mode}\n"
            f"Tiles: {len(tile_paths)}  |  Resample: {cfg.resample}",
            border_style="cyan",
        ))

        source = load_image(target, backend)
        logger.info("Target: %dx%d", source.width, source.height)
        sheet = [load_image(p, backend) for p in tile_paths]

        mosaic = composite(
            source, sheet, cfg.block_width, cfg.block_height,
            backend=backend, edge_mode=cfg.edge_mode, workers=cfg.workers,
        )

        output.parent.mkdir(parents=True, exist_ok=True)
        save_image(mosaic, output, backend)

        if cfg.save_comparison:
            comp_path = output.with_name(f"{output.stem}_comparison.png")
            make_comparison_grid(source, mosaic, comp_path)
            logger.info("Comparison saved to %s", comp_path)
    except MosaicError as exc:
        _fail(exc)

    err = mean_color_error(source, mosaic)
    elapsed = time.perf_counter() - t_total
    console.print(
        f"[green]✓[/green] Saved to {output}  "
        f"[dim]{source.width}x{source.height}  error={err:.1f}"
        f"  time={elapsed:.1f}s[/dim]"
    )


if __name__ == "__main__":
    app()
