"""Integration tests for Deep Zoom over a real slide file.

These tests exercise OpenSlide, WSIReader and DeepZoomGenerator together.
They are skipped if no test file is available.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from PIL import Image

from slidezoom.deepzoom import DeepZoomGenerator
from slidezoom.wsi import WSIReader
from slidezoom.wsi.types import WSIMetadata

pytestmark = pytest.mark.integration


class TestWSIReaderRealFile:
    """WSIReader against a real slide."""

    def test_open_real_slide(self, wsi_test_file: Path) -> None:
        """Open a real slide and check its level layout."""
        with WSIReader(wsi_test_file) as reader:
            metadata = reader.get_metadata()

            assert isinstance(metadata, WSIMetadata)
            assert metadata.level_dimensions[0] == (metadata.width, metadata.height)
            assert metadata.level_downsamples[0] == 1.0
            assert len(metadata.level_dimensions) == metadata.level_count
            for i in range(1, metadata.level_count):
                assert metadata.level_downsamples[i] > metadata.level_downsamples[i - 1]

    def test_read_region_is_rgba(self, wsi_test_file: Path) -> None:
        """Level-0 reads come back as RGBA of the requested size."""
        with WSIReader(wsi_test_file) as reader:
            region = reader.read_region(location=(0, 0), level=0, size=(256, 256))

            assert isinstance(region, Image.Image)
            assert region.mode == "RGBA"
            assert region.size == (256, 256)

    def test_best_level_matches_openslide_policy(self, wsi_test_file: Path) -> None:
        """The coarsest level is chosen for very large downsamples."""
        with WSIReader(wsi_test_file) as reader:
            metadata = reader.get_metadata()
            assert reader.get_best_level_for_downsample(1.0) == 0
            assert reader.get_best_level_for_downsample(1e9) == metadata.level_count - 1


class TestDeepZoomRealFile:
    """DeepZoomGenerator against a real slide."""

    @pytest.mark.parametrize("limit_bounds", [False, True])
    def test_top_level_matches_slide(self, wsi_test_file: Path, limit_bounds: bool) -> None:
        """The finest Deep Zoom level is the slide (or its bounds)."""
        with WSIReader(wsi_test_file) as reader:
            dz = DeepZoomGenerator(reader, tile_size=254, overlap=1, limit_bounds=limit_bounds)
            metadata = reader.get_metadata()

            expected = metadata.bounds().size.to_tuple() if limit_bounds else metadata.dimensions
            width, height = dz.level_dimensions[-1]
            # Scaling by the bounds ratio may truncate a pixel
            assert expected[0] - 1 <= width <= expected[0]
            assert expected[1] - 1 <= height <= expected[1]
            assert dz.level_dimensions[0] == (1, 1)

    def test_read_corner_tiles(self, wsi_test_file: Path) -> None:
        """Tiles read from the pyramid have their computed output size."""
        with WSIReader(wsi_test_file) as reader:
            dz = DeepZoomGenerator(reader, tile_size=254, overlap=1)
            top = dz.level_count - 1
            cols, rows = dz.level_tiles[top]

            for level, col, row in [(0, 0, 0), (top, 0, 0), (top, cols - 1, rows - 1)]:
                tile = dz.get_tile(level, col, row)
                image = dz.read_tile(tile)
                assert image.mode == "RGB"
                assert image.size == tile.info.output_size

    def test_enumeration_can_be_cancelled(self, wsi_test_file: Path) -> None:
        """Enumerating a real pyramid stops at the requested count."""

        async def first_tiles(dz: DeepZoomGenerator, count: int) -> int:
            cancel = asyncio.Event()
            async with dz.iter_tiles(cancel) as tiles:
                async for _ in tiles:
                    if tiles.emitted == count:
                        cancel.set()
                return tiles.emitted

        with WSIReader(wsi_test_file) as reader:
            dz = DeepZoomGenerator(reader)
            assert asyncio.run(first_tiles(dz, 5)) == 5
