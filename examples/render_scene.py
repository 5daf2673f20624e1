#!/usr/bin/env python3
"""Render a scene preset to a PNG file.

This script demonstrates end-to-end rendering with the library API rather
than the tiletrace command: it builds a preset scene, renders it with the
tiled renderer while reporting progress, and saves the result as a PNG.

Usage:
    python examples/render_scene.py [options]

Options:
    --scene NAME        Scene preset (default: three_balls)
    --width WIDTH       Image width in pixels (default: 400)
    --samples SAMPLES   Number of samples per pixel (default: 50)
    --depth DEPTH       Maximum bounces per path (default: 50)
    --output OUTPUT     Output file path (default: <scene>.png)
    --seed SEED         Random seed (default: 42)
    --quiet             Suppress progress output

Example:
    python examples/render_scene.py --scene random_balls --width 600 --samples 100
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene preset to a PNG file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="three_balls",
        help="Scene preset (default: three_balls)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=50,
        help="Number of samples per pixel (default: 50)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=50,
        help="Maximum bounces per path (default: 50)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file path (default: <scene>.png)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed (default: 42)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_preset(
    scene_name: str = "three_balls",
    width: int = 400,
    num_samples: int = 50,
    max_depth: int = 50,
    output_path: str | None = None,
    seed: int = 42,
    quiet: bool = False,
) -> Path:
    """Render a scene preset and save it to file.

    Args:
        scene_name: Name of the scene preset.
        width: Image width in pixels. The height follows the preset's aspect ratio.
        num_samples: Number of samples per pixel.
        max_depth: Maximum bounces per path.
        output_path: Output file path (PNG). Defaults to <scene_name>.png.
        seed: Seed for scene generation.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    from tiletrace.core.renderer import TiledRenderer
    from tiletrace.preview.export import save_png
    from tiletrace.scene.presets import create_preset

    if not quiet:
        print(f"Creating {scene_name} scene...")

    preset = create_preset(scene_name, seed=seed)
    height = max(1, int(width / preset.aspect_ratio))

    renderer = TiledRenderer(width, height)

    if not quiet:
        print(f"Rendering {width}x{height} at {num_samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(tiles_done: int, tile_count: int) -> None:
        if not quiet:
            progress_pct = (tiles_done / tile_count) * 100
            print(
                f"\r  Progress: {tiles_done}/{tile_count} tiles ({progress_pct:.1f}%)",
                end="",
                flush=True,
            )

    stats = renderer.render(
        preset.scene,
        preset.camera,
        num_samples,
        max_depth,
        tiles_per_batch=renderer.num_workers,
        callback=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path or f"{scene_name}.png")
    save_png(renderer.get_image_numpy(), output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s ({stats.krps:.0f} krps)")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=args.seed)

    try:
        render_preset(
            scene_name=args.scene,
            width=args.width,
            num_samples=args.samples,
            max_depth=args.depth,
            output_path=args.output,
            seed=args.seed,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
