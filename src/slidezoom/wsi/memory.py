"""In-memory slide source.

``MemorySlide`` keeps each native level as a 2D array of packed ARGB
words, the layout slide decoders hand back, and serves reads through the
same pixel-format correction a decoder-backed source needs. It stands in
for a slide file wherever one is not available: unit tests, demos, and
pyramids over images that are already in memory.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from slidezoom.wsi.exceptions import WSIReadError
from slidezoom.wsi.pixels import ByteOrder, argb_to_rgba, native_byteorder, pack_argb
from slidezoom.wsi.types import (
    PROPERTY_MPP_X,
    PROPERTY_MPP_Y,
    PROPERTY_VENDOR,
    WSIMetadata,
    best_level_for_downsample,
)

if TYPE_CHECKING:
    from types import TracebackType


class MemorySlide:
    """Slide source over packed ARGB numpy arrays.

    Args:
        levels: One ``uint32`` array of shape (height, width) per native
            level, finest first.
        downsamples: Downsample factor of each level. Defaults to the
            ratio of level-0 width to each level's width.
        properties: Slide properties, e.g. ``openslide.bounds-*``.
        name: Identifier reported as the metadata path.
        byteorder: Byte order of the host; detected once when omitted.
    """

    def __init__(
        self,
        levels: Sequence[NDArray[np.uint32]],
        downsamples: Sequence[float] | None = None,
        properties: Mapping[str, str] | None = None,
        name: str = "memory",
        byteorder: ByteOrder | None = None,
    ) -> None:
        if not levels:
            raise ValueError("MemorySlide needs at least one level")
        self._levels = [np.ascontiguousarray(level, dtype=np.uint32) for level in levels]
        base_width = self._levels[0].shape[1]
        if downsamples is None:
            downsamples = [base_width / level.shape[1] for level in self._levels]
        if len(downsamples) != len(self._levels):
            raise ValueError(
                f"Got {len(downsamples)} downsamples for {len(self._levels)} levels"
            )
        self._downsamples = tuple(float(ds) for ds in downsamples)
        self._properties = dict(properties or {})
        self._name = name
        self._byteorder = byteorder or native_byteorder()
        self._closed = False

    @classmethod
    def from_image(
        cls,
        image: Image.Image,
        downsamples: Sequence[float] = (1.0,),
        properties: Mapping[str, str] | None = None,
        name: str = "memory",
    ) -> MemorySlide:
        """Build a slide whose levels are ``image`` shrunk by each downsample."""
        rgba = image.convert("RGBA")
        levels = []
        for downsample in downsamples:
            size = (
                max(1, int(rgba.width / downsample)),
                max(1, int(rgba.height / downsample)),
            )
            level_image = rgba if size == rgba.size else rgba.resize(size, Image.Resampling.LANCZOS)
            levels.append(pack_argb(np.asarray(level_image, dtype=np.uint8)))
        return cls(levels, downsamples=downsamples, properties=properties, name=name)

    @classmethod
    def blank(
        cls,
        level_dimensions: Sequence[tuple[int, int]],
        downsamples: Sequence[float] | None = None,
        properties: Mapping[str, str] | None = None,
        color: int = 0xFFFFFFFF,
    ) -> MemorySlide:
        """Build a slide of solid-color levels with the given dimensions."""
        levels = [np.full((h, w), color, dtype=np.uint32) for w, h in level_dimensions]
        return cls(levels, downsamples=downsamples, properties=properties)

    def get_metadata(self) -> WSIMetadata:
        """Return metadata describing the in-memory levels."""
        height, width = self._levels[0].shape

        def _float(key: str) -> float | None:
            value = self._properties.get(key)
            return float(value) if value else None

        return WSIMetadata(
            path=self._name,
            width=width,
            height=height,
            level_count=len(self._levels),
            level_dimensions=tuple((lvl.shape[1], lvl.shape[0]) for lvl in self._levels),
            level_downsamples=self._downsamples,
            vendor=self._properties.get(PROPERTY_VENDOR, "memory"),
            mpp_x=_float(PROPERTY_MPP_X),
            mpp_y=_float(PROPERTY_MPP_Y),
            properties=dict(self._properties),
        )

    def get_best_level_for_downsample(self, downsample: float) -> int:
        """Return the coarsest level not coarser than ``downsample``."""
        return best_level_for_downsample(self._downsamples, downsample)

    def read_region(
        self,
        location: tuple[int, int],
        level: int,
        size: tuple[int, int],
    ) -> Image.Image:
        """Read a rectangle; ``location`` is Level-0, ``size`` is at ``level``."""
        if self._closed:
            raise WSIReadError("WSI is closed", path=self._name)
        if level < 0 or level >= len(self._levels):
            raise WSIReadError(
                f"Invalid level {level}. Must be in range [0, {len(self._levels) - 1}]",
                path=self._name,
                level=level,
                location=location,
                size=size,
            )
        width, height = size
        if width < 0 or height < 0:
            raise WSIReadError(
                f"Invalid size {size}. Width and height must not be negative.",
                path=self._name,
                level=level,
                location=location,
                size=size,
            )
        if width == 0 or height == 0:
            return Image.new("RGBA", (width, height))

        source = self._levels[level]
        downsample = self._downsamples[level]
        left = int(location[0] / downsample)
        top = int(location[1] / downsample)

        # Pixels outside the level stay transparent (ARGB 0)
        out = np.zeros((height, width), dtype=np.uint32)
        src_x0, src_y0 = max(left, 0), max(top, 0)
        src_x1 = min(left + width, source.shape[1])
        src_y1 = min(top + height, source.shape[0])
        if src_x1 > src_x0 and src_y1 > src_y0:
            out[src_y0 - top : src_y1 - top, src_x0 - left : src_x1 - left] = source[
                src_y0:src_y1, src_x0:src_x1
            ]

        rgba = argb_to_rgba(out.tobytes(), width, height, self._byteorder)
        return Image.fromarray(rgba)

    def close(self) -> None:
        """Mark the slide closed; later reads fail."""
        self._closed = True

    def __enter__(self) -> MemorySlide:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit context manager and close the slide."""
        self.close()

    def __repr__(self) -> str:
        """Return string representation."""
        return f"MemorySlide(name={self._name!r}, levels={len(self._levels)})"
