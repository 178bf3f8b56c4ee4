"""Geometry module for slidezoom.

Size and Region primitives in Level-0 pixel coordinates, shared by the
WSI data layer and the Deep Zoom engine.

Example:
    from slidezoom.geometry import Region, Size

    bounds = Region(x=1000, y=2000, width=50000, height=40000)
    base = bounds.size
    print(base.halved(), base.tile_grid(254))
"""

from slidezoom.geometry.primitives import Region, Size

__all__ = [
    "Region",
    "Size",
]
