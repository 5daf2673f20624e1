"""Command-line interface: render a scene preset to a PPM or PNG image.

Usage:
    tiletrace [width] [samples] [depth] [options]

Positional arguments (all optional, in this order):
    width               Image width in pixels (default: 800)
    samples             Samples per pixel (default: 100)
    depth               Maximum bounces per path (default: 50)

A missing, unparsable, zero or negative positional value falls back to its
default.

Options:
    --scene NAME        Scene preset (default: random_balls)
    --output PATH       Output file; "-" writes PPM to stdout (default: -)
    --seed SEED         Seed for scene generation and sampling
    --threads N         Number of render workers (default: all cores)
    --tile-size N       Nominal tile edge length (default: 32)
    --tiles-per-batch N Tiles rendered between progress updates
    --arch ARCH         Taichi backend (default: cpu)
    --show              Display the result in a Matplotlib window
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    tiletrace 400 20 --scene three_balls --output three_balls.png
    tiletrace 1200 500 > random_balls.ppm
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from tiletrace.config import (
    ARCHS,
    DEFAULT_DEPTH,
    DEFAULT_SAMPLES,
    DEFAULT_WIDTH,
    RenderConfig,
    init_taichi,
    parse_count,
)
from tiletrace.core.renderer import RenderStats, TiledRenderer
from tiletrace.core.tiles import DEFAULT_TILE_SIZE
from tiletrace.preview.display import show_image
from tiletrace.preview.export import save_image, write_ppm
from tiletrace.scene.presets import PRESETS, create_preset

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="tiletrace",
        description="Render a scene with the tiled Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "width",
        nargs="?",
        default=None,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "samples",
        nargs="?",
        default=None,
        help=f"Samples per pixel (default: {DEFAULT_SAMPLES})",
    )
    parser.add_argument(
        "depth",
        nargs="?",
        default=None,
        help=f"Maximum bounces per path (default: {DEFAULT_DEPTH})",
    )
    parser.add_argument(
        "--scene",
        choices=sorted(PRESETS),
        default="random_balls",
        help="Scene preset (default: random_balls)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="-",
        help='Output file path; "-" writes PPM to stdout (default: -)',
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for scene generation and sampling (default: random)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Number of render workers (default: all cores)",
    )
    parser.add_argument(
        "--tile-size",
        type=int,
        default=DEFAULT_TILE_SIZE,
        help=f"Nominal tile edge length in pixels (default: {DEFAULT_TILE_SIZE})",
    )
    parser.add_argument(
        "--tiles-per-batch",
        type=int,
        default=None,
        help="Tiles rendered between progress updates (default: 4 per worker)",
    )
    parser.add_argument(
        "--arch",
        choices=ARCHS,
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Display the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Build a RenderConfig from parsed arguments.

    Raises:
        ValueError: If an option value is invalid.
    """
    return RenderConfig(
        width=parse_count(args.width, DEFAULT_WIDTH),
        samples_per_pixel=parse_count(args.samples, DEFAULT_SAMPLES),
        max_depth=parse_count(args.depth, DEFAULT_DEPTH),
        tile_size=args.tile_size,
        scene=args.scene,
        seed=args.seed,
        threads=args.threads,
        arch=args.arch,
        tiles_per_batch=args.tiles_per_batch,
    )


def render_scene(
    config: RenderConfig,
    output_path: str = "-",
    *,
    quiet: bool = False,
    show: bool = False,
) -> RenderStats:
    """Render the configured scene and write the image.

    Taichi must already be initialized.

    Args:
        config: The render configuration.
        output_path: Output file path, or "-" for PPM on stdout.
        quiet: If True, suppress progress output.
        show: If True, display the image after rendering.

    Returns:
        The RenderStats of the render.
    """
    preset = create_preset(config.scene, config.aspect_ratio, config.seed)
    height = config.image_height(preset.aspect_ratio)

    renderer = TiledRenderer(
        config.width,
        height,
        tile_size=config.tile_size,
        num_workers=config.num_workers,
    )

    total_rays = config.width * height * config.samples_per_pixel
    if not quiet:
        print(
            f"Rendering {config.width} by {height} pixels with "
            f"{config.samples_per_pixel} samples per pixel",
            file=sys.stderr,
        )
        print(f"{total_rays} rays to cast", file=sys.stderr)

    def progress_callback(tiles_done: int, tile_count: int) -> None:
        print(f"\rtile {tiles_done} of {tile_count} done", end="", file=sys.stderr, flush=True)

    tiles_per_batch = config.tiles_per_batch
    if tiles_per_batch is None and not quiet:
        tiles_per_batch = 4 * config.num_workers

    stats = renderer.render(
        preset.scene,
        preset.camera,
        config.samples_per_pixel,
        config.max_depth,
        tiles_per_batch=tiles_per_batch,
        callback=None if quiet else progress_callback,
    )

    if not quiet:
        print("\nDone.", file=sys.stderr)
        print(f"{stats.seconds:.3f} seconds [{int(stats.krps)} krps]", file=sys.stderr)

    image = renderer.get_image_numpy()
    if output_path == "-":
        write_ppm(image, sys.stdout)
        sys.stdout.flush()
    else:
        save_image(image, output_path)
        if not quiet:
            print(f"Saved to: {output_path}", file=sys.stderr)

    if show:
        show_image(image, title=f"{config.scene} - {config.samples_per_pixel} SPP")

    return stats


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = config_from_args(args)
        seed = init_taichi(config)
        # Scene generation shares the sampling seed so a run can be repeated
        config.seed = seed

        render_scene(
            config,
            args.output,
            quiet=args.quiet,
            show=args.show,
        )
        return 0
    except Exception as e:
        logger.debug("Render failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
