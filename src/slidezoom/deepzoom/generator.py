"""Deep Zoom tile generation over a slide source.

``DeepZoomGenerator`` lays out a Deep Zoom pyramid once at construction
and then answers tile queries as pure functions of that layout: which
native level to read, which Level-0 rectangle to request, and how large
the finished tile is once interior-edge overlap is added.

Numeric policy:
    Tile geometry is computed in floating point and truncated to whole
    pixels only at the end. Truncating intermediate values shifts tile
    edges by a pixel and breaks the seamless tiling of a level.

Example:
    >>> from slidezoom.wsi import MemorySlide
    >>> slide = MemorySlide.blank([(1000, 1000)])
    >>> dz = DeepZoomGenerator(slide, tile_size=512, overlap=0)
    >>> dz.level_count, dz.level_tiles[-1]
    (11, (2, 2))
    >>> dz.get_tile(10, 1, 1).info.output_size
    (488, 488)
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Iterator
from xml.etree import ElementTree

from PIL import Image
from pydantic import ValidationError

from slidezoom.config import settings
from slidezoom.deepzoom.enumeration import TileEnumeration
from slidezoom.deepzoom.exceptions import DeepZoomError, InvalidAddressError, InvalidLevelError
from slidezoom.deepzoom.levels import (
    build_deepzoom_levels,
    build_tile_grid,
    resolve_level_dimensions,
    select_downsamples,
    tile_overlap,
    tile_span,
)
from slidezoom.deepzoom.types import LevelDownsample, Tile, TileInfo, TileResult
from slidezoom.utils.logging import get_logger
from slidezoom.wsi.exceptions import WSIReadError
from slidezoom.wsi.types import PROPERTY_BACKGROUND_COLOR, SlideSourceProtocol

logger = get_logger(__name__)

DZI_NAMESPACE = "http://schemas.microsoft.com/deepzoom/2008"


class DeepZoomGenerator:
    """Deep Zoom pyramid over a slide source.

    Args:
        source: Slide to tile (``WSIReader``, ``MemorySlide``, ...).
        tile_size: Tile edge length in pixels, excluding overlap.
        overlap: Pixels added on each interior tile edge.
        limit_bounds: Restrict the pyramid to the slide's declared
            ``openslide.bounds-*`` region.

    Raises:
        DeepZoomError: If tile_size/overlap are invalid or the source's
            level 0 is degenerate.
    """

    __slots__ = (
        "_background",
        "_downsamples",
        "_dz_dimensions",
        "_dz_tiles",
        "_level0_offset",
        "_native_dimensions",
        "_overlap",
        "_source",
        "_tile_size",
    )

    def __init__(
        self,
        source: SlideSourceProtocol,
        tile_size: int = 254,
        overlap: int = 1,
        limit_bounds: bool = False,
    ) -> None:
        if tile_size <= 0:
            raise DeepZoomError(f"tile_size must be positive, got {tile_size}")
        if overlap < 0:
            raise DeepZoomError(f"overlap must not be negative, got {overlap}")

        self._source = source
        self._tile_size = tile_size
        self._overlap = overlap

        metadata = source.get_metadata()
        bounds = None
        if limit_bounds:
            try:
                bounds = metadata.bounds()
            except ValidationError as e:
                raise DeepZoomError(
                    f"Slide level 0 is degenerate: {metadata.width}x{metadata.height}"
                ) from e
        resolved = resolve_level_dimensions(
            metadata.level_dimensions,
            bounds=bounds,
            limit_bounds=limit_bounds,
        )
        self._native_dimensions = resolved.dimensions
        self._level0_offset = resolved.offset
        self._dz_dimensions = build_deepzoom_levels(resolved.dimensions[0])
        self._dz_tiles = build_tile_grid(tile_size, self._dz_dimensions)
        self._downsamples = select_downsamples(source, metadata, len(self._dz_dimensions))
        background = metadata.get_property(PROPERTY_BACKGROUND_COLOR)
        self._background = f"#{background}" if background else settings.BACKGROUND_COLOR

        logger.debug(
            "Built Deep Zoom pyramid",
            slide=metadata.path,
            levels=self.level_count,
            tiles=self.tile_count,
            base=self._dz_dimensions[-1],
            tile_size=tile_size,
            overlap=overlap,
            limit_bounds=limit_bounds,
            offset=self._level0_offset,
        )

    # --- Pyramid layout ---

    @property
    def tile_size(self) -> int:
        """Return the tile edge length, excluding overlap."""
        return self._tile_size

    @property
    def overlap(self) -> int:
        """Return the overlap added on interior tile edges."""
        return self._overlap

    @property
    def level_count(self) -> int:
        """Return the number of Deep Zoom levels."""
        return len(self._dz_dimensions)

    @property
    def level_tiles(self) -> tuple[tuple[int, int], ...]:
        """Return (cols, rows) of tiles for each Deep Zoom level."""
        return self._dz_tiles

    @property
    def level_dimensions(self) -> tuple[tuple[int, int], ...]:
        """Return (width, height) in pixels for each Deep Zoom level."""
        return self._dz_dimensions

    @property
    def level_downsamples(self) -> tuple[LevelDownsample, ...]:
        """Return the native level binding of each Deep Zoom level."""
        return self._downsamples

    @property
    def native_dimensions(self) -> tuple[tuple[int, int], ...]:
        """Return the effective (bounds-scaled) native level sizes."""
        return self._native_dimensions

    @property
    def level0_offset(self) -> tuple[int, int]:
        """Return the Level-0 offset added to every read."""
        return self._level0_offset

    @property
    def tile_count(self) -> int:
        """Return the total number of tiles in the pyramid."""
        return sum(cols * rows for cols, rows in self._dz_tiles)

    # --- Tile geometry ---

    def get_tile_info(self, level: int, col: int, row: int) -> TileInfo:
        """Compute the read rectangle and output size of one tile.

        Raises:
            InvalidLevelError: If ``level`` is not in [0, level_count).
            InvalidAddressError: If ``col``/``row`` are off the level's grid.
        """
        if level < 0 or level >= self.level_count:
            raise InvalidLevelError(level, self.level_count)
        grid = self._dz_tiles[level]
        if col < 0 or row < 0 or col >= grid[0] or row >= grid[1]:
            raise InvalidAddressError(level, col, row, grid)

        binding = self._downsamples[level]
        residual = binding.residual_downsample
        width, height = self._dz_dimensions[level]
        overlap = tile_overlap(grid, self._overlap, col, row)

        output_size = (
            tile_span(width, self._tile_size, col) + overlap.left + overlap.right,
            tile_span(height, self._tile_size, row) + overlap.top + overlap.bottom,
        )

        # Grid origin in the Deep Zoom level, then in the native level
        z_x = self._tile_size * col
        z_y = self._tile_size * row
        l_x = residual * (z_x - overlap.left)
        l_y = residual * (z_y - overlap.top)

        offset_x, offset_y = self._level0_offset
        source_location = (
            int(binding.native_downsample * l_x + offset_x),
            int(binding.native_downsample * l_y + offset_y),
        )

        # Round the size up, but never past the edge of the native level
        native_width, native_height = binding.native_dimensions
        source_size = (
            int(min(math.ceil(residual * output_size[0]), native_width - math.ceil(l_x))),
            int(min(math.ceil(residual * output_size[1]), native_height - math.ceil(l_y))),
        )

        return TileInfo(
            source_location=source_location,
            source_size=source_size,
            output_size=output_size,
            native_level=binding.native_level,
        )

    def get_tile(self, level: int, col: int, row: int) -> Tile:
        """Return the tile at (level, col, row) with its geometry."""
        return Tile(level=level, col=col, row=row, info=self.get_tile_info(level, col, row))

    def get_tile_result(self, level: int, col: int, row: int) -> TileResult:
        """Like ``get_tile``, but return a DeepZoomError instead of raising it."""
        try:
            tile = self.get_tile(level, col, row)
        except DeepZoomError as e:
            return TileResult(level=level, col=col, row=row, error=e)
        return TileResult(level=level, col=col, row=row, tile=tile)

    def iter_addresses(self) -> Iterator[tuple[int, int, int]]:
        """Yield every (level, col, row), by level, then row, then column."""
        for level, (cols, rows) in enumerate(self._dz_tiles):
            for row in range(rows):
                for col in range(cols):
                    yield level, col, row

    def iter_tiles(
        self,
        cancel_event: asyncio.Event | None = None,
        queue_size: int | None = None,
    ) -> TileEnumeration:
        """Start a cancellable asynchronous enumeration of every tile.

        Args:
            cancel_event: Setting this stops the enumeration before the
                next tile is emitted.
            queue_size: Handoff slots between producer and consumer;
                defaults to settings.ENUMERATION_QUEUE_SIZE.

        Returns:
            A single-use async iterator of ``TileResult``.
        """
        return TileEnumeration(
            self,
            cancel_event=cancel_event,
            queue_size=settings.ENUMERATION_QUEUE_SIZE if queue_size is None else queue_size,
        )

    # --- Pixels ---

    def read_tile(self, tile: Tile) -> Image.Image:
        """Read a tile's pixels from the source as an RGB image.

        The source rectangle is composited over the background color and
        resized to the tile's output size when they differ.

        Raises:
            WSIReadError: Propagated from the source when the read fails.
        """
        info = tile.info
        try:
            region = self._source.read_region(
                info.source_location, info.native_level, info.source_size
            )
        except WSIReadError:
            logger.warning(
                "Tile read failed",
                level=tile.level,
                col=tile.col,
                row=tile.row,
                native_level=info.native_level,
            )
            raise

        if region.width == 0 or region.height == 0:
            return Image.new("RGB", info.output_size, self._background)
        image = Image.new("RGB", region.size, self._background)
        image.paste(region, mask=region.getchannel("A") if region.mode == "RGBA" else None)
        if image.size != info.output_size:
            image = image.resize(info.output_size, Image.Resampling.LANCZOS)
        return image

    def get_dzi(self, image_format: str = "jpeg") -> str:
        """Return the Deep Zoom XML descriptor for this pyramid."""
        width, height = self._dz_dimensions[-1]
        root = ElementTree.Element(
            "Image",
            Format=image_format,
            Overlap=str(self._overlap),
            TileSize=str(self._tile_size),
            xmlns=DZI_NAMESPACE,
        )
        ElementTree.SubElement(root, "Size", Height=str(height), Width=str(width))
        return '<?xml version="1.0" encoding="UTF-8"?>' + ElementTree.tostring(
            root, encoding="unicode"
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"DeepZoomGenerator(source={self._source!r}, tile_size={self._tile_size}, "
            f"overlap={self._overlap}, levels={self.level_count})"
        )
