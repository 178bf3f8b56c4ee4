"""slidezoom CLI - inspect Deep Zoom pyramids of whole-slide images.

Commands print pyramid layout and tile geometry; no tiles are written.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from slidezoom import __version__
from slidezoom.config import ConfigError, settings
from slidezoom.deepzoom import DeepZoomError, DeepZoomGenerator, Tile, TileResult
from slidezoom.utils.logging import configure_logging, get_logger, set_correlation_context
from slidezoom.wsi import WSIError, WSIReader

app = typer.Typer(
    name="slidezoom",
    help="slidezoom: Deep Zoom tile pyramids over whole-slide images",
    add_completion=False,
)

SlideArgument = Annotated[
    Path,
    typer.Argument(
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to WSI file (.svs, .ndpi, .tiff, ...)",
    ),
]
TileSizeOption = Annotated[
    int | None,
    typer.Option("--tile-size", "-t", min=1, help="Tile edge length [default: TILE_SIZE]"),
]
OverlapOption = Annotated[
    int | None,
    typer.Option("--overlap", min=0, help="Interior edge overlap [default: OVERLAP]"),
]
LimitBoundsOption = Annotated[
    bool,
    typer.Option("--limit-bounds/--no-limit-bounds", help="Restrict to the slide's bounds"),
]
VerboseOption = Annotated[
    int, typer.Option("--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)")
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version(json_output: JsonOption = False) -> None:
    """Show version information."""
    if json_output:
        typer.echo(json.dumps({"version": __version__}))
    else:
        typer.echo(f"slidezoom {__version__}")


@app.command()
def info(
    wsi_path: SlideArgument,
    tile_size: TileSizeOption = None,
    overlap: OverlapOption = None,
    limit_bounds: LimitBoundsOption = settings.LIMIT_BOUNDS,
    verbose: VerboseOption = 0,
    json_output: JsonOption = False,
) -> None:
    """Show the Deep Zoom pyramid layout of a slide."""
    _configure_logging(verbose)
    set_correlation_context(slide=str(wsi_path))

    with _open_generator(wsi_path, tile_size, overlap, limit_bounds, json_output) as dz:
        levels = [
            {
                "level": level,
                "dimensions": list(dims),
                "tiles": list(grid),
                "native_level": binding.native_level,
                "residual_downsample": binding.residual_downsample,
            }
            for level, (dims, grid, binding) in enumerate(
                zip(dz.level_dimensions, dz.level_tiles, dz.level_downsamples, strict=True)
            )
        ]
        summary = {
            "level_count": dz.level_count,
            "tile_count": dz.tile_count,
            "tile_size": dz.tile_size,
            "overlap": dz.overlap,
            "offset": list(dz.level0_offset),
            "levels": levels,
        }

    if json_output:
        typer.echo(json.dumps(summary, indent=2))
        return

    typer.echo(f"Levels: {summary['level_count']}")
    typer.echo(f"Tiles: {summary['tile_count']}")
    for entry in levels:
        width, height = entry["dimensions"]
        cols, rows = entry["tiles"]
        typer.echo(
            f"  {entry['level']:>3}  {width}x{height}  {cols}x{rows} tiles  "
            f"native={entry['native_level']} residual={entry['residual_downsample']:.4f}"
        )


@app.command()
def tile(
    wsi_path: SlideArgument,
    level: Annotated[int, typer.Argument(help="Deep Zoom level")],
    col: Annotated[int, typer.Argument(help="Tile column")],
    row: Annotated[int, typer.Argument(help="Tile row")],
    tile_size: TileSizeOption = None,
    overlap: OverlapOption = None,
    limit_bounds: LimitBoundsOption = settings.LIMIT_BOUNDS,
    verbose: VerboseOption = 0,
    json_output: JsonOption = False,
) -> None:
    """Show where one tile is read from and its output size."""
    _configure_logging(verbose)
    set_correlation_context(slide=str(wsi_path), dz_level=level)

    with _open_generator(wsi_path, tile_size, overlap, limit_bounds, json_output) as dz:
        try:
            found = dz.get_tile(level, col, row)
        except DeepZoomError as e:
            _fail(e, json_output)

    payload = _tile_to_dict(found)
    if json_output:
        typer.echo(json.dumps(payload, indent=2))
    else:
        for key, value in payload.items():
            typer.echo(f"{key}: {value}")


@app.command()
def tiles(
    wsi_path: SlideArgument,
    tile_size: TileSizeOption = None,
    overlap: OverlapOption = None,
    limit_bounds: LimitBoundsOption = settings.LIMIT_BOUNDS,
    limit: Annotated[
        int, typer.Option("--limit", "-n", min=0, help="Stop after N tiles (0 = all)")
    ] = 0,
    verbose: VerboseOption = 0,
) -> None:
    """Enumerate tiles as JSON lines, coarsest level first."""
    _configure_logging(verbose)
    set_correlation_context(slide=str(wsi_path))

    with _open_generator(wsi_path, tile_size, overlap, limit_bounds, json_output=False) as dz:
        emitted = asyncio.run(_echo_tiles(dz, limit))

    get_logger(__name__).info("Enumerated tiles", emitted=emitted)


@app.command()
def dzi(
    wsi_path: SlideArgument,
    tile_size: TileSizeOption = None,
    overlap: OverlapOption = None,
    limit_bounds: LimitBoundsOption = settings.LIMIT_BOUNDS,
    image_format: Annotated[
        str, typer.Option("--format", "-f", help="Tile image format named in the DZI")
    ] = "jpeg",
    verbose: VerboseOption = 0,
) -> None:
    """Print the Deep Zoom (.dzi) XML descriptor."""
    _configure_logging(verbose)
    with _open_generator(wsi_path, tile_size, overlap, limit_bounds, json_output=False) as dz:
        typer.echo(dz.get_dzi(image_format))


# =============================================================================
# Helpers
# =============================================================================


@contextmanager
def _open_generator(
    path: Path,
    tile_size: int | None,
    overlap: int | None,
    limit_bounds: bool,
    json_output: bool,
) -> Iterator[DeepZoomGenerator]:
    """Open a slide and build its generator; exit 1 on config, slide or layout errors.

    Tile size and overlap not given on the command line come from settings.
    """
    if tile_size is None or overlap is None:
        try:
            default_tile_size, default_overlap = settings.require_valid_tiling()
        except ConfigError as e:
            _fail(e, json_output)
        tile_size = default_tile_size if tile_size is None else tile_size
        overlap = default_overlap if overlap is None else overlap

    try:
        reader = WSIReader(path)
    except WSIError as e:
        _fail(e, json_output)

    with reader:
        try:
            dz = DeepZoomGenerator(
                reader,
                tile_size=tile_size,
                overlap=overlap,
                limit_bounds=limit_bounds,
            )
        except (DeepZoomError, WSIError) as e:
            _fail(e, json_output)
        yield dz


async def _echo_tiles(dz: DeepZoomGenerator, limit: int) -> int:
    cancel = asyncio.Event()
    async with dz.iter_tiles(cancel) as enumeration:
        async for result in enumeration:
            typer.echo(json.dumps(_result_to_dict(result)))
            if limit and enumeration.emitted >= limit:
                cancel.set()
        return enumeration.emitted


def _tile_to_dict(found: Tile) -> dict[str, Any]:
    return {
        "level": found.level,
        "col": found.col,
        "row": found.row,
        "native_level": found.info.native_level,
        "source_location": list(found.info.source_location),
        "source_size": list(found.info.source_size),
        "output_size": list(found.info.output_size),
    }


def _result_to_dict(result: TileResult) -> dict[str, Any]:
    if result.tile is not None:
        return _tile_to_dict(result.tile)
    return {
        "level": result.level,
        "col": result.col,
        "row": result.row,
        "error": str(result.error),
    }


def _fail(error: Exception, json_output: bool) -> NoReturn:
    get_logger(__name__).error("Command failed", error=str(error))
    if json_output:
        typer.echo(json.dumps({"error": str(error)}))
    else:
        typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1)


def _configure_logging(verbose: int) -> None:
    """Configure logging based on verbosity level."""
    if verbose == 0:
        level = "WARNING"
    elif verbose == 1:
        level = "INFO"
    else:  # verbose >= 2
        level = "DEBUG"

    configure_logging(level=level)


if __name__ == "__main__":  # pragma: no cover
    app()
