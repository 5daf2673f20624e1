"""Partition of an image into a fixed grid of rectangular tiles.

The grid is sized from a nominal tile edge length: the number of tiles
along each axis is ``max(1, extent // tile_size)``, and the tiles are then
stretched so that they evenly cover the whole extent. Actual tile sizes
therefore differ from the nominal size by up to a factor of two, and may
differ by one pixel from their neighbours.

Tile boundaries use integer arithmetic (``tx * width // tiles_x``), so the
union of all tiles covers every pixel exactly once for any image size.

Example:
    >>> from tiletrace.core.tiles import TileGrid
    >>> grid = TileGrid(100, 50, tile_size=32)
    >>> grid.tiles_x, grid.tiles_y
    (3, 1)
    >>> grid.bounds(0)
    (0, 0, 33, 50)
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import numpy.typing as npt

# Nominal tile edge length in pixels
DEFAULT_TILE_SIZE = 32


class TileState(IntEnum):
    """Lifecycle of a tile during a render.

    Tiles move strictly forward: UNCLAIMED -> IN_PROGRESS -> DONE.
    """

    UNCLAIMED = 0
    IN_PROGRESS = 1
    DONE = 2


@dataclass(frozen=True)
class TileGrid:
    """A grid of tiles covering a ``width`` x ``height`` image.

    Tiles are numbered in row-major order starting from the top-left tile.
    Pixel row 0 is the top row of the image.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        tile_size: Nominal tile edge length in pixels.
    """

    width: int
    height: int
    tile_size: int = DEFAULT_TILE_SIZE

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) must be positive"
            )
        if self.tile_size < 1:
            raise ValueError(f"Tile size = {self.tile_size} must be positive")

    @property
    def tiles_x(self) -> int:
        """Number of tile columns."""
        return max(1, self.width // self.tile_size)

    @property
    def tiles_y(self) -> int:
        """Number of tile rows."""
        return max(1, self.height // self.tile_size)

    @property
    def tile_count(self) -> int:
        """Total number of tiles."""
        return self.tiles_x * self.tiles_y

    def __len__(self) -> int:
        return self.tile_count

    def bounds(self, index: int) -> tuple[int, int, int, int]:
        """Get the pixel range covered by a tile.

        Args:
            index: Tile index in [0, tile_count).

        Returns:
            Tuple (start_x, start_y, end_x, end_y); end bounds are exclusive.

        Raises:
            IndexError: If the index is outside the grid.
        """
        if index < 0 or index >= self.tile_count:
            raise IndexError(f"Tile index {index} out of range [0, {self.tile_count})")

        tx = index % self.tiles_x
        ty = index // self.tiles_x
        start_x = tx * self.width // self.tiles_x
        start_y = ty * self.height // self.tiles_y
        end_x = (tx + 1) * self.width // self.tiles_x
        end_y = (ty + 1) * self.height // self.tiles_y
        return start_x, start_y, end_x, end_y

    def __iter__(self) -> Iterator[tuple[int, int, int, int]]:
        for index in range(self.tile_count):
            yield self.bounds(index)

    def as_array(self) -> npt.NDArray[np.int32]:
        """Get all tile bounds as an array of shape (tile_count, 4).

        Rows are (start_x, start_y, end_x, end_y), in tile index order. This
        is the layout uploaded to the renderer's tile table.
        """
        return np.array(list(self), dtype=np.int32).reshape(self.tile_count, 4)
