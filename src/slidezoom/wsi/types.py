"""Type definitions for the WSI data layer.

Contains data models and the source protocol consumed by the Deep Zoom
engine. All coordinates follow the OpenSlide convention where Level-0 is
the highest resolution (full magnification).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import NamedTuple, Protocol

from PIL import Image

from slidezoom.geometry import Region

# Well-known OpenSlide property names
PROPERTY_BACKGROUND_COLOR = "openslide.background-color"
PROPERTY_BOUNDS_HEIGHT = "openslide.bounds-height"
PROPERTY_BOUNDS_WIDTH = "openslide.bounds-width"
PROPERTY_BOUNDS_X = "openslide.bounds-x"
PROPERTY_BOUNDS_Y = "openslide.bounds-y"
PROPERTY_MPP_X = "openslide.mpp-x"
PROPERTY_MPP_Y = "openslide.mpp-y"
PROPERTY_OBJECTIVE_POWER = "openslide.objective-power"
PROPERTY_VENDOR = "openslide.vendor"


class NativeLevel(NamedTuple):
    """One resolution tier stored in the slide file.

    Attributes:
        index: Level index (0 = highest resolution).
        dimensions: (width, height) in pixels at this level.
        downsample: Downsample factor relative to Level-0 (>= 1.0).
    """

    index: int
    dimensions: tuple[int, int]
    downsample: float


@dataclass(frozen=True)
class WSIMetadata:
    """Immutable metadata for a Whole Slide Image.

    Attributes:
        path: Absolute path (or identifier) of the slide.
        width: Width of Level-0 in pixels.
        height: Height of Level-0 in pixels.
        level_count: Number of native levels.
        level_dimensions: (width, height) for each native level.
        level_downsamples: Downsample factor for each native level.
        vendor: Slide scanner vendor (e.g., "aperio", "hamamatsu").
        mpp_x: Microns per pixel horizontally, if known.
        mpp_y: Microns per pixel vertically, if known.
        properties: Raw string properties reported by the decoder.
    """

    path: str
    width: int
    height: int
    level_count: int
    level_dimensions: tuple[tuple[int, int], ...]
    level_downsamples: tuple[float, ...]
    vendor: str
    mpp_x: float | None
    mpp_y: float | None
    properties: Mapping[str, str] = field(default_factory=dict, compare=False)

    @property
    def dimensions(self) -> tuple[int, int]:
        """Return Level-0 dimensions as (width, height)."""
        return (self.width, self.height)

    @property
    def native_levels(self) -> tuple[NativeLevel, ...]:
        """Return every native level, finest first."""
        return tuple(
            NativeLevel(index=i, dimensions=dims, downsample=ds)
            for i, (dims, ds) in enumerate(
                zip(self.level_dimensions, self.level_downsamples, strict=True)
            )
        )

    def get_level_dimensions(self, level: int) -> tuple[int, int]:
        """Get dimensions for a native level.

        Raises:
            IndexError: If level is out of range.
        """
        if level < 0 or level >= self.level_count:
            raise IndexError(f"Level {level} out of range [0, {self.level_count - 1}]")
        return self.level_dimensions[level]

    def get_downsample(self, level: int) -> float:
        """Get the downsample factor for a native level.

        Raises:
            IndexError: If level is out of range.
        """
        if level < 0 or level >= self.level_count:
            raise IndexError(f"Level {level} out of range [0, {self.level_count - 1}]")
        return self.level_downsamples[level]

    def get_property(self, name: str, default: str | None = None) -> str | None:
        """Look up a raw property; missing or empty values yield ``default``."""
        value = self.properties.get(name)
        if value is None or value == "":
            return default
        return value

    def bounds(self) -> Region:
        """Return the declared non-empty region in Level-0 coordinates.

        Missing bounds properties fall back to the full Level-0 extent
        (origin 0, Level-0 width/height). Unparseable values, a negative
        origin and a non-positive extent are treated as missing.
        """
        return Region(
            x=_int_property(self, PROPERTY_BOUNDS_X, 0, minimum=0),
            y=_int_property(self, PROPERTY_BOUNDS_Y, 0, minimum=0),
            width=_int_property(self, PROPERTY_BOUNDS_WIDTH, self.width, minimum=1),
            height=_int_property(self, PROPERTY_BOUNDS_HEIGHT, self.height, minimum=1),
        )


def _int_property(metadata: WSIMetadata, name: str, default: int, minimum: int) -> int:
    value = metadata.get_property(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def best_level_for_downsample(
    level_downsamples: Sequence[float],
    downsample: float,
) -> int:
    """Pick the native level to read for a requested downsample factor.

    Returns the coarsest level whose downsample does not exceed
    ``downsample``, or level 0 if even level 0 is coarser than requested.
    ``level_downsamples`` must be non-decreasing.

    Example:
        >>> best_level_for_downsample((1.0, 4.0, 16.0), 8.0)
        1
        >>> best_level_for_downsample((1.0, 4.0, 16.0), 0.5)
        0
    """
    best = 0
    for level, level_downsample in enumerate(level_downsamples):
        if level_downsample > downsample:
            break
        best = level
    return best


class SlideSourceProtocol(Protocol):
    """Interface the Deep Zoom engine needs from a slide.

    Implemented by ``WSIReader`` (OpenSlide) and ``MemorySlide`` (numpy).
    """

    def get_metadata(self) -> WSIMetadata:
        """Return level layout and properties for the slide."""
        ...

    def get_best_level_for_downsample(self, downsample: float) -> int:
        """Return the native level best suited for ``downsample``."""
        ...

    def read_region(
        self,
        location: tuple[int, int],
        level: int,
        size: tuple[int, int],
    ) -> Image.Image:
        """Read a rectangle from a native level.

        Args:
            location: (x, y) top-left corner in LEVEL-0 coordinates.
            level: Native level to read from.
            size: (width, height) of the region AT ``level``.

        Returns:
            PIL Image in RGBA mode; pixels outside the slide are transparent.

        Raises:
            WSIReadError: If the read fails.
        """
        ...

    def close(self) -> None:
        """Release the slide handle."""
        ...
