"""Unit tests for Deep Zoom value types and exceptions."""

from __future__ import annotations

import pytest

from slidezoom.deepzoom import (
    DeepZoomError,
    InvalidAddressError,
    InvalidLevelError,
    Tile,
    TileInfo,
    TileResult,
)

INFO = TileInfo(
    source_location=(0, 0),
    source_size=(254, 254),
    output_size=(255, 255),
    native_level=0,
)


class TestTileResult:
    """Tests for the tagged tile-or-error result."""

    def test_ok_result_unwraps_to_tile(self) -> None:
        tile = Tile(level=3, col=1, row=2, info=INFO)
        result = TileResult(level=3, col=1, row=2, tile=tile)

        assert result.ok
        assert result.unwrap() is tile

    def test_error_result_raises_on_unwrap(self) -> None:
        error = InvalidLevelError(20, 14)
        result = TileResult(level=20, col=0, row=0, error=error)

        assert not result.ok
        with pytest.raises(InvalidLevelError) as exc_info:
            result.unwrap()
        assert exc_info.value is error

    def test_empty_result_raises_on_unwrap(self) -> None:
        with pytest.raises(DeepZoomError, match="No tile"):
            TileResult(level=0, col=0, row=0).unwrap()


class TestExceptions:
    """Tests for Deep Zoom error messages and attributes."""

    def test_invalid_level_message(self) -> None:
        error = InvalidLevelError(14, 14)
        assert str(error) == "Invalid Deep Zoom level 14: must be in range [0, 13]"
        assert (error.level, error.level_count) == (14, 14)

    def test_invalid_address_message(self) -> None:
        error = InvalidAddressError(5, 7, 0, (3, 2))
        assert str(error) == "Invalid tile address (col=7, row=0) at level 5: grid is 3x2"
        assert (error.level, error.col, error.row, error.grid) == (5, 7, 0, (3, 2))

    @pytest.mark.parametrize(
        "error", [InvalidLevelError(1, 1), InvalidAddressError(0, 1, 0, (1, 1))]
    )
    def test_errors_are_deepzoom_errors(self, error: DeepZoomError) -> None:
        assert isinstance(error, DeepZoomError)

    def test_tile_info_is_frozen(self) -> None:
        with pytest.raises(AttributeError):
            INFO.native_level = 1  # type: ignore[misc]
