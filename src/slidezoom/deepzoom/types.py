"""Value types produced by the Deep Zoom engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from slidezoom.deepzoom.exceptions import DeepZoomError


class Overlap(NamedTuple):
    """Overlap pixels added on each edge of one tile (0 on outer edges)."""

    left: int
    top: int
    right: int
    bottom: int


class LevelDownsample(NamedTuple):
    """Native level chosen to render one Deep Zoom level.

    Attributes:
        native_level: Index of the native level to read from.
        native_dimensions: (width, height) of that native level, unscaled.
        native_downsample: The native level's downsample from Level-0.
        residual_downsample: Extra shrink from the native level to the
            Deep Zoom level (desired downsample / native downsample).
    """

    native_level: int
    native_dimensions: tuple[int, int]
    native_downsample: float
    residual_downsample: float


@dataclass(frozen=True, slots=True)
class TileInfo:
    """Where to read a tile from and how large it ends up.

    Attributes:
        source_location: (x, y) to read, in Level-0 pixels, including the
            bounds offset.
        source_size: (width, height) to read from ``native_level``.
        output_size: (width, height) of the finished tile, overlap included.
        native_level: Native level to read from.
    """

    source_location: tuple[int, int]
    source_size: tuple[int, int]
    output_size: tuple[int, int]
    native_level: int


@dataclass(frozen=True, slots=True)
class Tile:
    """A Deep Zoom tile address together with its geometry."""

    level: int
    col: int
    row: int
    info: TileInfo


@dataclass(frozen=True, slots=True)
class TileResult:
    """One element of a tile enumeration: a tile, or the error computing it."""

    level: int
    col: int
    row: int
    tile: Tile | None = None
    error: DeepZoomError | None = None

    @property
    def ok(self) -> bool:
        """Return True when the tile was computed."""
        return self.error is None

    def unwrap(self) -> Tile:
        """Return the tile, raising the recorded error if there is one."""
        if self.error is not None:
            raise self.error
        if self.tile is None:
            raise DeepZoomError(f"No tile at {(self.level, self.col, self.row)}")
        return self.tile
