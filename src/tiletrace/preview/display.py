"""Matplotlib-based preview display for rendered images.

The renderer produces linear colours. Before display (or export) they are
gamma encoded; the default gamma of 2 is the square-root encoding the
PPM output has always used.

Example:
    >>> from tiletrace.preview.display import show_image
    >>> renderer.render(scene, camera, 16)
    >>> show_image(renderer.get_image_numpy(), title="three_balls - 16 SPP")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

# Square-root gamma encoding
DEFAULT_GAMMA = 2.0


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float64]:
    """Apply gamma encoding for display.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value. 2.0 is a square root; 1.0 leaves values linear.

    Returns:
        Gamma encoded image clamped to [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma = {gamma} must be positive")

    # Clamp before the power to avoid NaN from negative values
    result = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)

    if gamma != 1.0:
        result = np.power(result, 1.0 / gamma)

    return result


def show_image(
    image: npt.NDArray[np.floating],
    *,
    gamma: float = DEFAULT_GAMMA,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
):
    """Display a linear image as a Matplotlib figure.

    Args:
        image: Linear image array of shape (H, W, 3); row 0 is the top row.
        gamma: Gamma encoding applied before display.
        title: Figure title. Defaults to the image size.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.

    Returns:
        The Matplotlib figure.
    """
    import matplotlib.pyplot as plt

    display_image = apply_gamma(image, gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        height, width = display_image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)

    return fig
