"""Deep Zoom pyramid engine for slidezoom.

Key Components:
    - DeepZoomGenerator: pyramid layout, tile geometry, tile reads
    - TileEnumeration: cancellable async iteration over every tile
    - Tile / TileInfo / TileResult: per-tile values
    - levels: the static layout functions the generator is built from

Example:
    from slidezoom.deepzoom import DeepZoomGenerator
    from slidezoom.wsi import WSIReader

    with WSIReader("slide.svs") as reader:
        dz = DeepZoomGenerator(reader, tile_size=254, overlap=1)
        tile = dz.get_tile(dz.level_count - 1, 0, 0)
        image = dz.read_tile(tile)
"""

from slidezoom.deepzoom.enumeration import TileEnumeration
from slidezoom.deepzoom.exceptions import DeepZoomError, InvalidAddressError, InvalidLevelError
from slidezoom.deepzoom.generator import DeepZoomGenerator
from slidezoom.deepzoom.levels import (
    ResolvedLevels,
    build_deepzoom_levels,
    build_tile_grid,
    resolve_level_dimensions,
    select_downsamples,
    tile_overlap,
)
from slidezoom.deepzoom.types import LevelDownsample, Overlap, Tile, TileInfo, TileResult

__all__ = [
    "DeepZoomError",
    "DeepZoomGenerator",
    "InvalidAddressError",
    "InvalidLevelError",
    "LevelDownsample",
    "Overlap",
    "ResolvedLevels",
    "Tile",
    "TileEnumeration",
    "TileInfo",
    "TileResult",
    "build_deepzoom_levels",
    "build_tile_grid",
    "resolve_level_dimensions",
    "select_downsamples",
    "tile_overlap",
]
