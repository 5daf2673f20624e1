"""Tiled parallel renderer.

The image is split into a TileGrid and rendered by a fixed pool of
workers. Each worker repeatedly claims the next unclaimed tile from a
shared counter with an atomic fetch-and-add, renders every pixel of it,
and stops once the counter runs past the last tile. Tiles that take longer
(glass and metal cast more bounces) therefore do not hold up the others.

For every pixel the renderer casts ``samples_per_pixel`` rays with random
sub-pixel offsets, averages their colours and writes the average straight
into the shared image buffer. Tiles are disjoint, so every pixel is written
by exactly one worker exactly once and pixel writes need no locking. The
kernel launch returns only after all workers finish, which makes every
write visible before the buffer is read.

All workers run inside one Taichi kernel launch: the outermost loop over
worker indices is parallelized by the Taichi runtime across its CPU thread
pool. Randomness comes from ti.random(), which keeps generator state per
thread.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from tiletrace.core.renderer import TiledRenderer
    >>> from tiletrace.scene.presets import create_preset
    >>>
    >>> preset = create_preset("two_balls")
    >>> renderer = TiledRenderer(400, 225)
    >>> stats = renderer.render(preset.scene, preset.camera, samples_per_pixel=10)
    >>> image = renderer.get_image_numpy()  # (225, 400, 3), linear colour
"""

import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from tiletrace.core.integrator import MAX_DEPTH, ray_colour
from tiletrace.core.ray import real, vec3
from tiletrace.core.tiles import DEFAULT_TILE_SIZE, TileGrid, TileState

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (tiles_done, tile_count)
ProgressCallback = Callable[[int, int], None]

# Default samples per pixel
DEFAULT_SAMPLES = 100

# Tile states as plain ints for use inside kernels
_IN_PROGRESS = int(TileState.IN_PROGRESS)
_DONE = int(TileState.DONE)


@dataclass
class RenderStats:
    """Summary of a finished render.

    Attributes:
        tile_count: Number of tiles rendered.
        total_rays: Primary rays cast (width * height * samples_per_pixel).
        seconds: Wall-clock render time.
        krps: Thousands of primary rays per second.
    """

    tile_count: int
    total_rays: int
    seconds: float
    krps: float


@ti.data_oriented
class TiledRenderer:
    """Renders a scene into an image buffer using tile-claiming workers.

    The renderer owns its image buffer, tile table and tile counter. The
    counter is reset at the start of every render, so one renderer can be
    reused for any number of renders.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        grid: The tile partition of the image.
        num_workers: Number of parallel workers.
    """

    def __init__(
        self,
        width: int,
        height: int,
        tile_size: int = DEFAULT_TILE_SIZE,
        num_workers: int | None = None,
    ) -> None:
        """Allocate the image buffer and tile table.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            tile_size: Nominal tile edge length in pixels.
            num_workers: Number of parallel workers. Defaults to the number
                of CPU cores.

        Raises:
            ValueError: If a dimension, the tile size or the worker count is
                not positive.
        """
        self.grid = TileGrid(width, height, tile_size)
        self.width = width
        self.height = height

        if num_workers is None:
            num_workers = os.cpu_count() or 1
        if num_workers < 1:
            raise ValueError(f"Number of workers = {num_workers} must be positive")
        self.num_workers = num_workers

        # Normalized coordinates span [0, 1] from the first to the last pixel
        self._s_scale = 1.0 / max(width - 1, 1)
        self._t_scale = 1.0 / max(height - 1, 1)

        tile_count = self.grid.tile_count

        # Image buffer, indexed by y * width + x with row 0 at the top
        self._image = ti.Vector.field(3, dtype=real, shape=width * height)
        # Number of times each pixel was written during the last render
        self._writes = ti.field(dtype=ti.i32, shape=width * height)

        # Tile table: (start_x, start_y, end_x, end_y) per tile
        self._tile_bounds = ti.Vector.field(4, dtype=ti.i32, shape=tile_count)
        self._tile_bounds.from_numpy(self.grid.as_array())
        self._tile_states = ti.field(dtype=ti.i32, shape=tile_count)

        # Shared claim cursor: the next unclaimed tile index
        self._next_tile = ti.field(dtype=ti.i32, shape=())

    @property
    def tile_count(self) -> int:
        """Number of tiles in the grid."""
        return self.grid.tile_count

    # =========================================================================
    # Rendering Kernel
    # =========================================================================

    @ti.func
    def _render_pixel(
        self, scene: ti.template(), camera: ti.template(), x: ti.i32, y: ti.i32,
        samples_per_pixel: ti.i32, max_depth: ti.i32,
    ) -> vec3:
        """Average samples_per_pixel jittered samples for one pixel."""
        colour = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            s = (ti.cast(x, real) + ti.random(real)) * self._s_scale
            t = 1.0 - (ti.cast(y, real) + ti.random(real)) * self._t_scale
            colour += ray_colour(scene, camera.get_ray(s, t), max_depth)

        return colour / ti.cast(samples_per_pixel, real)

    @ti.kernel
    def _render_tiles(
        self,
        scene: ti.template(),
        camera: ti.template(),
        samples_per_pixel: ti.i32,
        max_depth: ti.i32,
        tile_end: ti.i32,
    ):
        """Render all tiles below tile_end with num_workers workers.

        Each worker claims tile indices from the shared counter until it
        receives one at or past tile_end.
        """
        ti.loop_config(block_dim=1)
        for _worker in range(self.num_workers):
            active = 1
            while active == 1:
                tile = ti.atomic_add(self._next_tile[None], 1)
                if tile >= tile_end:
                    active = 0
                else:
                    self._tile_states[tile] = _IN_PROGRESS
                    bounds = self._tile_bounds[tile]

                    for y in range(bounds[1], bounds[3]):
                        for x in range(bounds[0], bounds[2]):
                            index = y * self.width + x
                            self._image[index] = self._render_pixel(
                                scene, camera, x, y, samples_per_pixel, max_depth
                            )
                            self._writes[index] += 1

                    self._tile_states[tile] = _DONE

    # =========================================================================
    # Public Rendering API
    # =========================================================================

    def render(
        self,
        scene,
        camera,
        samples_per_pixel: int = DEFAULT_SAMPLES,
        max_depth: int = MAX_DEPTH,
        *,
        tiles_per_batch: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> RenderStats:
        """Render the scene into the image buffer.

        By default all tiles are rendered in a single kernel launch. With
        tiles_per_batch, consecutive ranges of tiles are rendered in separate
        launches (each range still shared by all workers) and the callback
        is invoked after each one.

        Args:
            scene: The Scene to render. Must not be modified during the render.
            camera: The Camera to generate primary rays from.
            samples_per_pixel: Number of jittered samples averaged per pixel.
            max_depth: Maximum number of bounces per path.
            tiles_per_batch: Number of tiles per launch. Default: all tiles.
            callback: Optional progress callback, called after each launch
                with (tiles_done, tile_count).

        Returns:
            RenderStats for this render.

        Raises:
            ValueError: If samples_per_pixel or tiles_per_batch is less than 1,
                or max_depth is negative.

        Example:
            >>> def progress(done, total):
            ...     print(f"tile {done} of {total} done")
            >>> renderer.render(scene, camera, 100, tiles_per_batch=8, callback=progress)
        """
        if samples_per_pixel < 1:
            raise ValueError(f"Samples per pixel = {samples_per_pixel} must be at least 1")
        if max_depth < 0:
            raise ValueError(f"Max depth = {max_depth} must not be negative")

        tile_count = self.tile_count
        if tiles_per_batch is None:
            tiles_per_batch = tile_count
        if tiles_per_batch < 1:
            raise ValueError(f"Tiles per batch = {tiles_per_batch} must be at least 1")

        self._reset()

        total_rays = self.width * self.height * samples_per_pixel
        logger.debug(
            "Rendering %dx%d, %d spp, depth %d: %d tiles on %d workers",
            self.width,
            self.height,
            samples_per_pixel,
            max_depth,
            tile_count,
            self.num_workers,
        )

        start_time = time.perf_counter()

        tiles_done = 0
        while tiles_done < tile_count:
            tile_end = min(tiles_done + tiles_per_batch, tile_count)
            self._render_tiles(scene, camera, samples_per_pixel, max_depth, tile_end)
            ti.sync()

            # Workers overshoot the cursor when they find it exhausted
            self._next_tile[None] = tile_end
            tiles_done = tile_end

            if callback is not None:
                callback(tiles_done, tile_count)

        seconds = time.perf_counter() - start_time
        krps = total_rays / 1000.0 / seconds if seconds > 0 else 0.0

        logger.info("Rendered %d rays in %.3f seconds [%d krps]", total_rays, seconds, krps)

        return RenderStats(
            tile_count=tile_count,
            total_rays=total_rays,
            seconds=seconds,
            krps=krps,
        )

    def _reset(self) -> None:
        """Clear the image, write counts and tile states; rewind the counter."""
        self._image.fill(0.0)
        self._writes.fill(0)
        self._tile_states.fill(int(TileState.UNCLAIMED))
        self._next_tile[None] = 0

    # =========================================================================
    # Results
    # =========================================================================

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the rendered image as a NumPy array.

        Returns:
            Linear colours of shape (height, width, 3); row 0 is the top row.
        """
        return self._image.to_numpy().reshape(self.height, self.width, 3)

    def get_write_counts(self) -> npt.NDArray[np.int32]:
        """Get how many times each pixel was written in the last render.

        Returns:
            Array of shape (height, width). After a complete render every
            entry is exactly 1.
        """
        return self._writes.to_numpy().reshape(self.height, self.width)

    def get_tile_states(self) -> list[TileState]:
        """Get the state of every tile, in tile index order."""
        return [TileState(int(s)) for s in self._tile_states.to_numpy()]

    def __repr__(self) -> str:
        return (
            f"TiledRenderer(width={self.width}, height={self.height}, "
            f"tiles={self.tile_count}, workers={self.num_workers})"
        )
