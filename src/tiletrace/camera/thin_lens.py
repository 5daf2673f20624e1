"""Thin-lens camera model for perspective ray generation with depth of field.

This module implements a camera that generates primary rays for rendering.
The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- Depth of field via a thin-lens approximation (aperture, focus distance)

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed at the focus distance. Each ray starts at a random
point on the lens disk and aims at the viewport point for its (s, t)
coordinates, so everything on the focus plane is sharp and everything else
blurs in proportion to the aperture. An aperture of zero gives a pinhole
camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from tiletrace.camera.thin_lens import Camera, CameraConfig
    >>>
    >>> config = CameraConfig(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> camera = Camera(config)
    >>>
    >>> # Generate ray through the image center
    >>> @ti.kernel
    ... def render(cam: ti.template()):
    ...     ray = cam.get_ray(0.5, 0.5)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from tiletrace.core.ray import Ray, random_in_unit_disk, real, vec3

# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass
class CameraConfig:
    """Human-facing parameters of a thin-lens camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_dist: Distance from the camera to the plane in perfect focus.
            Defaults to the distance between lookfrom and lookat.
    """

    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    aperture: float = 0.0
    focus_dist: float | None = None

    def resolved_focus_dist(self) -> float:
        """The focus distance, defaulting to |lookfrom - lookat|."""
        if self.focus_dist is not None:
            return self.focus_dist
        return math.dist(self.lookfrom, self.lookat)


# =============================================================================
# Camera
# =============================================================================


@ti.data_oriented
class Camera:
    """A thin-lens camera, immutable once constructed.

    All derived quantities are computed once from the CameraConfig and
    stored in Taichi fields so that get_ray() can be called from kernels.

    Attributes:
        config: The configuration the camera was built from.
    """

    def __init__(self, config: CameraConfig) -> None:
        """Build the camera basis and viewport from a configuration.

        Args:
            config: Camera position, orientation, FOV and lens parameters.

        Raises:
            ValueError: If the configuration is degenerate (see _derive()).
        """
        self.config = config

        self._origin = ti.Vector.field(3, dtype=real, shape=())
        self._u = ti.Vector.field(3, dtype=real, shape=())  # Right
        self._v = ti.Vector.field(3, dtype=real, shape=())  # Up
        self._w = ti.Vector.field(3, dtype=real, shape=())  # Backward
        self._horizontal = ti.Vector.field(3, dtype=real, shape=())
        self._vertical = ti.Vector.field(3, dtype=real, shape=())
        self._lower_left_corner = ti.Vector.field(3, dtype=real, shape=())
        self._lens_radius = ti.field(dtype=real, shape=())

        # Single-entry result slot for host-side ray probes
        self._probe = Ray.field(shape=())

        derived = self._derive(config)
        for name, value in derived.items():
            getattr(self, f"_{name}")[None] = value

    @staticmethod
    def _derive(config: CameraConfig) -> dict:
        """Compute the camera basis and viewport with NumPy.

        Raises:
            ValueError: If vfov is outside (0, 180), the aspect ratio or focus
                distance is not positive, the aperture is negative, lookfrom
                equals lookat, or vup is parallel to the view direction.
        """
        if not 0.0 < config.vfov < 180.0:
            raise ValueError(f"Vertical field of view = {config.vfov} must be in (0, 180)")
        if config.aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio = {config.aspect_ratio} must be positive")
        if config.aperture < 0.0:
            raise ValueError(f"Aperture = {config.aperture} must not be negative")
        focus_dist = config.resolved_focus_dist()
        if focus_dist <= 0.0:
            raise ValueError(f"Focus distance = {focus_dist} must be positive")

        theta = math.radians(config.vfov)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h
        viewport_width = config.aspect_ratio * viewport_height

        lookfrom = np.array(config.lookfrom, dtype=np.float64)
        lookat = np.array(config.lookat, dtype=np.float64)
        vup = np.array(config.vup, dtype=np.float64)

        # w points from lookat toward lookfrom (backward)
        w = lookfrom - lookat
        w_norm = np.linalg.norm(w)
        if w_norm == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        w = w / w_norm

        # u points right (perpendicular to w and vup)
        u = np.cross(vup, w)
        u_norm = np.linalg.norm(u)
        if u_norm < 1e-12:
            raise ValueError("vup must not be parallel to the view direction")
        u = u / u_norm

        v = np.cross(w, u)

        horizontal = focus_dist * viewport_width * u
        vertical = focus_dist * viewport_height * v
        lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - focus_dist * w

        return {
            "origin": lookfrom.tolist(),
            "u": u.tolist(),
            "v": v.tolist(),
            "w": w.tolist(),
            "horizontal": horizontal.tolist(),
            "vertical": vertical.tolist(),
            "lower_left_corner": lower_left.tolist(),
            "lens_radius": config.aperture / 2.0,
        }

    # =========================================================================
    # Ray Generation
    # =========================================================================

    @ti.func
    def get_ray(self, s: real, t: real) -> Ray:
        """Generate a ray through normalized image coordinates (s, t).

        Coordinates are normalized:
        - s = 0: left edge, s = 1: right edge
        - t = 0: bottom edge, t = 1: top edge

        Args:
            s: Horizontal coordinate (left to right).
            t: Vertical coordinate (bottom to top).

        Returns:
            A Ray from a random point on the lens toward the corresponding
            point on the focus plane. The direction is not normalized.
        """
        rd = self._lens_radius[None] * random_in_unit_disk()
        offset = self._u[None] * rd.x + self._v[None] * rd.y
        origin = self._origin[None] + offset

        target = (
            self._lower_left_corner[None]
            + s * self._horizontal[None]
            + t * self._vertical[None]
        )
        return Ray(origin=origin, direction=target - origin)

    @ti.kernel
    def _ray_kernel(self, s: real, t: real):
        # Single-iteration outer loop keeps lens sampling serial
        for _ in range(1):
            self._probe[None] = self.get_ray(s, t)

    def ray(self, s: float, t: float) -> tuple[tuple[float, ...], tuple[float, ...]]:
        """Generate one ray on the host side, for testing and debugging.

        Returns:
            Tuple (origin, direction), each as an (x, y, z) tuple.
        """
        self._ray_kernel(s, t)
        probe = self._probe[None]
        origin = tuple(float(probe.origin[i]) for i in range(3))
        direction = tuple(float(probe.direction[i]) for i in range(3))
        return origin, direction

    # =========================================================================
    # Utility Functions
    # =========================================================================

    def info(self) -> dict[str, tuple[float, float, float] | float]:
        """Get the derived camera state for debugging.

        Returns:
            Dictionary with origin, u, v, w, horizontal, vertical,
            lower_left and lens_radius.
        """

        def _vec(field: ti.MatrixField) -> tuple[float, float, float]:
            value = field[None]
            return (float(value[0]), float(value[1]), float(value[2]))

        return {
            "origin": _vec(self._origin),
            "u": _vec(self._u),
            "v": _vec(self._v),
            "w": _vec(self._w),
            "horizontal": _vec(self._horizontal),
            "vertical": _vec(self._vertical),
            "lower_left": _vec(self._lower_left_corner),
            "lens_radius": float(self._lens_radius[None]),
        }


def make_camera(
    lookfrom: tuple[float, float, float],
    lookat: tuple[float, float, float],
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0),
    vfov: float = 90.0,
    aspect_ratio: float = 16.0 / 9.0,
    aperture: float = 0.0,
    focus_dist: float | None = None,
) -> Camera:
    """Build a Camera directly from its parameters."""
    return Camera(
        CameraConfig(
            lookfrom=lookfrom,
            lookat=lookat,
            vup=vup,
            vfov=vfov,
            aspect_ratio=aspect_ratio,
            aperture=aperture,
            focus_dist=focus_dist,
        )
    )
