"""Preview module for output and visualization.

Components:
    display: Gamma encoding and Matplotlib-based preview display
    export: PPM/PNG image export utilities

Example:
    >>> from tiletrace.preview import save_image, show_image
    >>> image = renderer.get_image_numpy()
    >>> save_image(image, "output.ppm")
    >>> show_image(image)
"""

from tiletrace.preview.display import DEFAULT_GAMMA, apply_gamma, show_image
from tiletrace.preview.export import (
    compute_rmse,
    save_image,
    save_png,
    save_ppm,
    to_uint8,
    write_ppm,
)

__all__ = [
    # Display functions
    "DEFAULT_GAMMA",
    "apply_gamma",
    "show_image",
    # Export functions
    "to_uint8",
    "write_ppm",
    "save_ppm",
    "save_png",
    "save_image",
    "compute_rmse",
]
