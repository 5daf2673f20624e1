"""Core rendering module.

This module contains the fundamental building blocks of the path tracer:

Components:
    ray: Ray data structure, vector utilities and random sampling
    integrator: Recursive radiance estimator (ray_colour)
    tiles: Partition of the image into fixed-size tiles
    renderer: Tiled parallel renderer with a shared tile counter

All compute-intensive operations are Taichi functions and kernels.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    random_real,
    random_unit_vector,
    ray_at,
    real,
    reflect,
    refract,
    schlick_reflectance,
    unit_vector,
    vec3,
)
from .tiles import TileGrid, TileState

# Note: integrator and renderer are NOT imported here to avoid circular imports
# with the scene and camera packages. Import them from tiletrace.core.integrator
# and tiletrace.core.renderer directly.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "real",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "unit_vector",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "random_real",
    "random_range",
    "random_in_unit_sphere",
    "random_in_unit_disk",
    "random_unit_vector",
    "TileGrid",
    "TileState",
]
