"""Exceptions raised by the Deep Zoom engine.

Source read failures are not wrapped here; they surface as
``slidezoom.wsi.WSIReadError`` exactly as the source raised them.
"""

from __future__ import annotations


class DeepZoomError(Exception):
    """Base exception for Deep Zoom pyramid errors."""


class InvalidLevelError(DeepZoomError):
    """Raised when a Deep Zoom level index is outside [0, level_count).

    Attributes:
        level: The requested level.
        level_count: Number of levels in the pyramid.
    """

    def __init__(self, level: int, level_count: int) -> None:
        self.level = level
        self.level_count = level_count
        super().__init__(
            f"Invalid Deep Zoom level {level}: must be in range [0, {level_count - 1}]"
        )


class InvalidAddressError(DeepZoomError):
    """Raised when a tile column or row is not on the level's tile grid.

    Attributes:
        level: Deep Zoom level of the request.
        col: Requested column.
        row: Requested row.
        grid: (cols, rows) of that level.
    """

    def __init__(self, level: int, col: int, row: int, grid: tuple[int, int]) -> None:
        self.level = level
        self.col = col
        self.row = row
        self.grid = grid
        super().__init__(
            f"Invalid tile address (col={col}, row={row}) at level {level}: "
            f"grid is {grid[0]}x{grid[1]}"
        )
