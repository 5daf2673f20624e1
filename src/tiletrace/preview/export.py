"""Image export utilities for rendered images.

Rendered images are linear float colours of shape (H, W, 3). Every writer
gamma encodes them and quantizes each channel with
int(256 * clamp(c, 0, 0.999)), which maps [0, 1) evenly onto 0..255.

Supported formats:
    - PPM (plain-text P3, the renderer's native output)
    - PNG (8-bit via Pillow)

Example:
    >>> from tiletrace.preview.export import save_image
    >>> renderer.render(scene, camera, 100)
    >>> save_image(renderer.get_image_numpy(), "balls.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from tiletrace.preview.display import DEFAULT_GAMMA, apply_gamma

logger = logging.getLogger(__name__)

# Upper clamp so that 256 * c never reaches 256
MAX_INTENSITY = 0.999


def to_uint8(
    image: npt.NDArray[np.floating],
    *,
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma encoding applied before quantization.

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    encoded = apply_gamma(image, gamma)
    return (256.0 * np.clip(encoded, 0.0, MAX_INTENSITY)).astype(np.uint8)


def write_ppm(
    image: npt.NDArray[np.floating],
    stream: TextIO,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Write an image as plain-text PPM (P3).

    Pixels are written row by row from the top, one pixel per line.

    Args:
        image: Linear image array of shape (H, W, 3).
        stream: Text stream to write to.
        gamma: Gamma encoding applied before quantization.
    """
    pixels = to_uint8(image, gamma=gamma)
    height, width = pixels.shape[:2]

    stream.write(f"P3\n{width} {height}\n255\n")
    for r, g, b in pixels.reshape(-1, 3).tolist():
        stream.write(f"{r} {g} {b}\n")


def save_ppm(
    image: npt.NDArray[np.floating],
    filepath: str | Path,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save an image as a plain-text PPM file."""
    with open(filepath, "w", encoding="ascii") as f:
        write_ppm(image, f, gamma=gamma)


def save_png(
    image: npt.NDArray[np.floating],
    filepath: str | Path,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save an image as an 8-bit PNG file.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
        gamma: Gamma encoding applied before quantization.
    """
    pil_image = PILImage.fromarray(to_uint8(image, gamma=gamma))
    pil_image.save(filepath)


def save_image(
    image: npt.NDArray[np.floating],
    filepath: str | Path,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save an image, choosing the format from the file suffix.

    Files ending in .ppm are written as plain-text PPM; any other suffix
    Pillow recognizes (.png, .jpg, .bmp, ...) is written through Pillow.

    Raises:
        ValueError: If the suffix is not a supported image format.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()

    if suffix == ".ppm":
        save_ppm(image, path, gamma=gamma)
    elif suffix == ".png":
        save_png(image, path, gamma=gamma)
    else:
        if suffix not in PILImage.registered_extensions():
            raise ValueError(f"Unsupported image format: '{suffix}'")
        PILImage.fromarray(to_uint8(image, gamma=gamma)).save(path)

    logger.debug("Saved %s", path)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
