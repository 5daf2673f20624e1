"""Tests for the tile partition.

Tests cover:
- Tile counts for exact, stretched and undersized images
- Exact coverage: every pixel belongs to exactly one tile
- Row-major tile numbering
- Validation of image and tile sizes
"""

import numpy as np
import pytest


class TestTileCounts:
    """Tests for the number of tiles in each direction."""

    def test_exact_multiple(self):
        """Test an image that is an exact multiple of the tile size."""
        from tiletrace.core.tiles import TileGrid

        grid = TileGrid(64, 32, 32)
        assert grid.tiles_x == 2
        assert grid.tiles_y == 1
        assert grid.tile_count == 2
        assert len(grid) == 2

    def test_stretched_tiles(self):
        """Test a non-multiple size floors the tile count and stretches tiles."""
        from tiletrace.core.tiles import TileGrid

        grid = TileGrid(100, 70, 32)
        assert grid.tiles_x == 3
        assert grid.tiles_y == 2
        # Stretched tiles are 33 or 34 pixels wide
        widths = {end_x - start_x for start_x, _, end_x, _ in grid}
        assert widths <= {33, 34}

    def test_image_smaller_than_tile(self):
        """Test an image smaller than one tile is covered by a single tile."""
        from tiletrace.core.tiles import TileGrid

        grid = TileGrid(20, 11, 32)
        assert grid.tile_count == 1
        assert grid.bounds(0) == (0, 0, 20, 11)


class TestCoverage:
    """Tests that tiles partition the image exactly."""

    @pytest.mark.parametrize(
        "width, height, tile_size",
        [
            (64, 64, 32),
            (100, 70, 32),
            (1200, 800, 32),
            (799, 449, 32),
            (20, 11, 32),
            (1, 1, 1),
            (37, 5, 4),
        ],
    )
    def test_every_pixel_covered_once(self, width, height, tile_size):
        """Test every pixel lies in exactly one tile."""
        from tiletrace.core.tiles import TileGrid

        grid = TileGrid(width, height, tile_size)
        coverage = np.zeros((height, width), dtype=np.int32)
        for start_x, start_y, end_x, end_y in grid:
            assert start_x < end_x
            assert start_y < end_y
            coverage[start_y:end_y, start_x:end_x] += 1

        assert (coverage == 1).all()

    def test_last_column_and_row_reached(self):
        """Test the last tile ends exactly at the image edge."""
        from tiletrace.core.tiles import TileGrid

        grid = TileGrid(799, 449, 32)
        _, _, end_x, end_y = grid.bounds(grid.tile_count - 1)
        assert end_x == 799
        assert end_y == 449


class TestTileIndexing:
    """Tests for tile numbering and the array layout."""

    def test_row_major_order(self):
        """Test tiles are numbered left to right, then top to bottom."""
        from tiletrace.core.tiles import TileGrid

        grid = TileGrid(64, 64, 32)
        assert grid.bounds(0) == (0, 0, 32, 32)
        assert grid.bounds(1) == (32, 0, 64, 32)
        assert grid.bounds(2) == (0, 32, 32, 64)
        assert grid.bounds(3) == (32, 32, 64, 64)

    def test_as_array_matches_bounds(self):
        """Test as_array rows match bounds() in tile order."""
        from tiletrace.core.tiles import TileGrid

        grid = TileGrid(100, 70, 32)
        array = grid.as_array()
        assert array.shape == (grid.tile_count, 4)
        assert array.dtype == np.int32
        for index in range(grid.tile_count):
            assert tuple(array[index]) == grid.bounds(index)

    def test_bounds_out_of_range(self):
        """Test bounds() rejects indices outside the grid."""
        from tiletrace.core.tiles import TileGrid

        grid = TileGrid(64, 64, 32)
        with pytest.raises(IndexError):
            grid.bounds(4)
        with pytest.raises(IndexError):
            grid.bounds(-1)


class TestValidation:
    """Tests for TileGrid parameter validation."""

    @pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-5, 10)])
    def test_rejects_empty_image(self, width, height):
        """Test non-positive image dimensions raise ValueError."""
        from tiletrace.core.tiles import TileGrid

        with pytest.raises(ValueError):
            TileGrid(width, height)

    def test_rejects_zero_tile_size(self):
        """Test a zero tile size raises ValueError."""
        from tiletrace.core.tiles import TileGrid

        with pytest.raises(ValueError):
            TileGrid(64, 64, 0)
