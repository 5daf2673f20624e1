"""Render configuration and Taichi initialization.

RenderConfig collects everything needed to render one image: resolution,
sampling, tiling, the scene preset and the Taichi backend. The command line
builds one from its arguments; library users can build one directly.

Example:
    >>> from tiletrace.config import RenderConfig, init_taichi
    >>> config = RenderConfig(width=400, samples_per_pixel=20, scene="three_balls", seed=1)
    >>> init_taichi(config)
"""

import logging
import os
from dataclasses import dataclass

import numpy as np
import taichi as ti

from tiletrace.core.tiles import DEFAULT_TILE_SIZE

logger = logging.getLogger(__name__)

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_WIDTH = 800
DEFAULT_SAMPLES = 100
DEFAULT_DEPTH = 50
DEFAULT_SCENE = "random_balls"
DEFAULT_ASPECT_RATIO = 16.0 / 9.0

# Taichi backends selectable by name
ARCHS = ("cpu", "gpu", "cuda", "vulkan", "metal")


@dataclass
class RenderConfig:
    """Parameters for a single render.

    Attributes:
        width: Image width in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
        tile_size: Nominal tile edge length in pixels.
        scene: Name of the scene preset to render.
        seed: Seed for scene generation and sampling. None picks one at random.
        threads: Number of render workers and CPU threads. None uses all cores.
        arch: Taichi backend name (see ARCHS).
        aspect_ratio: Requested width / height. Presets may override it.
        tiles_per_batch: Tiles rendered between progress reports. None
            renders all tiles in one launch.
    """

    width: int = DEFAULT_WIDTH
    samples_per_pixel: int = DEFAULT_SAMPLES
    max_depth: int = DEFAULT_DEPTH
    tile_size: int = DEFAULT_TILE_SIZE
    scene: str = DEFAULT_SCENE
    seed: int | None = None
    threads: int | None = None
    arch: str = "cpu"
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    tiles_per_batch: int | None = None

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError(f"Width = {self.width} must be at least 1")
        if self.samples_per_pixel < 1:
            raise ValueError(f"Samples per pixel = {self.samples_per_pixel} must be at least 1")
        if self.max_depth < 0:
            raise ValueError(f"Max depth = {self.max_depth} must not be negative")
        if self.tile_size < 1:
            raise ValueError(f"Tile size = {self.tile_size} must be at least 1")
        if self.threads is not None and self.threads < 1:
            raise ValueError(f"Threads = {self.threads} must be at least 1")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio = {self.aspect_ratio} must be positive")
        if self.arch not in ARCHS:
            raise ValueError(f"Unknown arch '{self.arch}'. Available: {', '.join(ARCHS)}")

    @property
    def num_workers(self) -> int:
        """Number of render workers."""
        return self.threads if self.threads is not None else (os.cpu_count() or 1)

    def image_height(self, aspect_ratio: float | None = None) -> int:
        """Image height for the given aspect ratio (default: the configured one)."""
        if aspect_ratio is None:
            aspect_ratio = self.aspect_ratio
        return max(1, int(self.width / aspect_ratio))


def parse_count(text: str | None, default: int) -> int:
    """Parse a positive count, falling back to a default.

    Missing, unparsable, zero and negative values all yield the default.

    Example:
        >>> parse_count("400", 800)
        400
        >>> parse_count("0", 800)
        800
        >>> parse_count("wide", 800)
        800
    """
    if text is None:
        return default
    try:
        value = int(text)
    except ValueError:
        logger.debug("Ignoring unparsable count %r, using %d", text, default)
        return default
    return value if value > 0 else default


def init_taichi(config: RenderConfig) -> int:
    """Initialize Taichi for rendering with a config.

    Uses 64-bit floats throughout. The Taichi random seed is taken from the
    config, or drawn at random when the config has none.

    Args:
        config: The render configuration.

    Returns:
        The random seed Taichi was initialized with.
    """
    seed = config.seed
    if seed is None:
        seed = int(np.random.default_rng().integers(0, 2**31 - 1))

    kwargs = {}
    if config.threads is not None:
        kwargs["cpu_max_num_threads"] = config.threads

    ti.init(
        arch=getattr(ti, config.arch),
        default_fp=ti.f64,
        random_seed=seed,
        **kwargs,
    )
    logger.debug("Taichi initialized: arch=%s, seed=%d, threads=%s", config.arch, seed, config.threads)
    return seed
