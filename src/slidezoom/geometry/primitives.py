"""Geometry primitives for slidezoom.

Immutable Pydantic models for pixel extents and rectangles. A ``Size`` is
one tier of a pyramid (native or Deep Zoom); a ``Region`` is a rectangle
in Level-0 pixels such as the slide's declared non-empty bounds.
"""

from __future__ import annotations

import math
from typing import Self

from pydantic import BaseModel, Field


class Size(BaseModel, frozen=True):
    """Pixel extent of an image or pyramid level; both axes at least 1.

    Example:
        >>> Size(width=125, height=63).halved()
        Size(width=63, height=32)
    """

    width: int = Field(..., gt=0, description="Horizontal extent in pixels")
    height: int = Field(..., gt=0, description="Vertical extent in pixels")

    def halved(self) -> Size:
        """Return the next coarser Deep Zoom tier (ceil of half per axis)."""
        return Size(width=math.ceil(self.width / 2), height=math.ceil(self.height / 2))

    def tile_grid(self, tile_size: int) -> tuple[int, int]:
        """Return (cols, rows) of ``tile_size`` squares covering this extent."""
        return (math.ceil(self.width / tile_size), math.ceil(self.height / tile_size))

    def to_tuple(self) -> tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_tuple(cls, size: tuple[int, int]) -> Self:
        return cls(width=size[0], height=size[1])


class Region(BaseModel, frozen=True):
    """Rectangle in Level-0 pixels, from (x, y) up to (right, bottom) exclusive.

    Attributes:
        x: Left edge (>= 0).
        y: Top edge (>= 0).
        width: Extent to the right of ``x`` (> 0).
        height: Extent below ``y`` (> 0).
    """

    x: int = Field(..., ge=0, description="Left edge in Level-0 pixels")
    y: int = Field(..., ge=0, description="Top edge in Level-0 pixels")
    width: int = Field(..., gt=0, description="Extent right of x")
    height: int = Field(..., gt=0, description="Extent below y")

    @property
    def origin(self) -> tuple[int, int]:
        """Return (x, y); used as the read offset when bounds are limited."""
        return (self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)

    def to_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_tuple(cls, bbox: tuple[int, int, int, int]) -> Self:
        """Create from (x, y, width, height)."""
        return cls(x=bbox[0], y=bbox[1], width=bbox[2], height=bbox[3])
