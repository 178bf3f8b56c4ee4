"""Static pyramid layout for Deep Zoom.

These functions run once when a ``DeepZoomGenerator`` is built:

1. ``resolve_level_dimensions``: native level sizes, optionally cropped
   to the slide's declared bounds, plus the Level-0 read offset.
2. ``build_deepzoom_levels``: halve the base size (rounding up) until
   both axes reach 1, coarsest level first.
3. ``build_tile_grid``: tile columns and rows per level.
4. ``select_downsamples``: native level and residual downsample per
   Deep Zoom level.

Deep Zoom level ``i`` of ``L`` is rendered at downsample ``2 ** (L - i - 1)``
from the base. Native levels only exist at a few discrete downsamples, so
each Deep Zoom level reads from the closest native level that is not
coarser than needed and shrinks the rest of the way by the residual.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

from pydantic import ValidationError

from slidezoom.deepzoom.exceptions import DeepZoomError
from slidezoom.deepzoom.types import LevelDownsample, Overlap
from slidezoom.geometry import Region, Size
from slidezoom.wsi.types import SlideSourceProtocol, WSIMetadata


class ResolvedLevels(NamedTuple):
    """Native level sizes used as the pyramid base, and the read offset."""

    dimensions: tuple[tuple[int, int], ...]
    offset: tuple[int, int]


def resolve_level_dimensions(
    level_dimensions: Sequence[tuple[int, int]],
    bounds: Region | None = None,
    limit_bounds: bool = False,
) -> ResolvedLevels:
    """Compute effective native level sizes and the Level-0 offset.

    With ``limit_bounds`` disabled the native sizes are returned as-is.
    Otherwise every level is scaled by bounds width / Level-0 width (and
    likewise for height), truncating to whole pixels with a floor of 1,
    and the bounds origin becomes the offset added to every read.

    Args:
        level_dimensions: (width, height) per native level, finest first.
        bounds: Declared non-empty region in Level-0 pixels; ``None``
            means the whole Level-0 image.
        limit_bounds: Whether to restrict the pyramid to ``bounds``.

    Raises:
        DeepZoomError: If there are no levels or Level-0 is empty.
    """
    if not level_dimensions:
        raise DeepZoomError("Slide reports no levels")
    l0_width, l0_height = level_dimensions[0]
    if l0_width <= 0 or l0_height <= 0:
        raise DeepZoomError(f"Slide level 0 is degenerate: {l0_width}x{l0_height}")

    dimensions = tuple((int(w), int(h)) for w, h in level_dimensions)
    if not limit_bounds or bounds is None:
        return ResolvedLevels(dimensions=dimensions, offset=(0, 0))

    x_ratio = bounds.width / l0_width
    y_ratio = bounds.height / l0_height
    scaled = tuple(
        (max(1, int(w * x_ratio)), max(1, int(h * y_ratio))) for w, h in dimensions
    )
    return ResolvedLevels(dimensions=scaled, offset=bounds.origin)


def build_deepzoom_levels(base: tuple[int, int]) -> tuple[tuple[int, int], ...]:
    """Derive Deep Zoom level sizes from the full-resolution base.

    Example:
        >>> build_deepzoom_levels((5, 3))
        ((1, 1), (2, 1), (3, 2), (5, 3))

    Raises:
        DeepZoomError: If the base is not at least 1x1.
    """
    try:
        size = Size.from_tuple(base)
    except ValidationError as e:
        raise DeepZoomError(f"Invalid pyramid base {base}") from e

    levels = [size]
    while size.width > 1 or size.height > 1:
        size = size.halved()
        levels.append(size)
    return tuple(level.to_tuple() for level in reversed(levels))


def build_tile_grid(
    tile_size: int,
    level_dimensions: Sequence[tuple[int, int]],
) -> tuple[tuple[int, int], ...]:
    """Return (cols, rows) for each Deep Zoom level.

    Overlap does not change the grid; it only pads tile content.
    """
    if tile_size <= 0:
        raise DeepZoomError(f"tile_size must be positive, got {tile_size}")
    return tuple(Size.from_tuple(dims).tile_grid(tile_size) for dims in level_dimensions)


def select_downsamples(
    source: SlideSourceProtocol,
    metadata: WSIMetadata,
    level_count: int,
) -> tuple[LevelDownsample, ...]:
    """Bind each Deep Zoom level to a native level.

    The native level comes from the source's best-level policy; its
    dimensions are the native (unscaled) ones so reads stay inside the
    level even when the pyramid is restricted to bounds.
    """
    bindings = []
    for dz_level in range(level_count):
        desired = float(2 ** (level_count - dz_level - 1))
        native_level = source.get_best_level_for_downsample(desired)
        native_downsample = metadata.level_downsamples[native_level]
        bindings.append(
            LevelDownsample(
                native_level=native_level,
                native_dimensions=metadata.level_dimensions[native_level],
                native_downsample=native_downsample,
                residual_downsample=desired / native_downsample,
            )
        )
    return tuple(bindings)


def tile_overlap(grid: tuple[int, int], overlap: int, col: int, row: int) -> Overlap:
    """Overlap per edge: interior edges get ``overlap``, outer edges 0."""
    cols, rows = grid
    return Overlap(
        left=overlap if col != 0 else 0,
        top=overlap if row != 0 else 0,
        right=overlap if col != cols - 1 else 0,
        bottom=overlap if row != rows - 1 else 0,
    )


def tile_span(level_extent: int, tile_size: int, coord: int) -> int:
    """Unpadded extent of tile ``coord`` along one axis (last tile is partial)."""
    return min(tile_size, level_extent - tile_size * coord)
