"""Path tracing integrator for Monte Carlo light transport.

This module implements ray_colour, the radiance estimator at the heart of
the renderer. It follows a camera ray through the scene, scattering it off
each surface it hits according to the surface material, until the ray
escapes to the sky, is absorbed, or runs out of bounces.

The estimate is the product of all attenuations along the path times the
sky colour where the path escaped:

    ray_colour(r, depth) = 0                                   if depth <= 0
                         = background(r)                       if r misses
                         = 0                                   if absorbed
                         = attenuation * ray_colour(r', depth - 1)  otherwise

Each step is purely multiplicative, so the recursion is evaluated as a
bounded loop carrying the attenuation product.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Sky gradient background; there are no light sources
    - Shadow-acne epsilon of T_MIN on every intersection query

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from tiletrace.core.integrator import trace_ray
    >>> from tiletrace.scene.world import Scene
    >>> scene = Scene()
    >>> trace_ray(scene, (0, 0, 0), (0, 1, 0), depth=50)  # straight up: sky blue
    (0.5, 0.7, 1.0)
"""

import math

import taichi as ti

from tiletrace.core.ray import Ray, unit_vector, vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum number of bounces per path
MAX_DEPTH = 50

# Intersections closer than this are self-intersections of the scattered ray
T_MIN = 0.001
T_MAX = math.inf

# Sky gradient endpoints: straight down is white, straight up is sky blue
SKY_WHITE = (1.0, 1.0, 1.0)
SKY_BLUE = (0.5, 0.7, 1.0)


@ti.func
def background(direction: vec3) -> vec3:
    """Colour of the sky seen along a direction.

    Linearly interpolates from white to sky blue as the direction's unit
    vertical component goes from -1 to 1.

    Args:
        direction: The escaping ray direction (any non-zero length).

    Returns:
        The background colour.
    """
    unit_direction = unit_vector(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * vec3(0.5, 0.7, 1.0)


@ti.func
def ray_colour(scene: ti.template(), ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        scene: The Scene to trace against.
        ray: The ray to trace.
        depth: Maximum number of surface interactions. A depth of 0 or less
            yields black.

    Returns:
        The estimated radiance (RGB) for this path sample.
    """
    result = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    remaining = depth

    # Active flag for path continuation
    active = 1
    while active == 1:
        if remaining <= 0:
            # Bounce budget exhausted: the path is treated as absorbed
            active = 0
        else:
            rec = scene.hit(current, T_MIN, T_MAX)

            if rec.hit == 0:
                result = throughput * background(current.direction)
                active = 0
            else:
                did_scatter, attenuation, scattered = scene.scatter_at(current, rec)

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered
                    remaining -= 1

    return result


# =============================================================================
# Host-side Probes
# =============================================================================


@ti.kernel
def _trace_kernel(scene: ti.template(), origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    return ray_colour(scene, Ray(origin=origin, direction=direction), depth)


@ti.kernel
def _background_kernel(direction: vec3) -> vec3:
    return background(direction)


def trace_ray(
    scene,
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Trace a single ray through a scene (host side).

    This is a Python-callable function for testing. For production rendering,
    use TiledRenderer which traces all pixels in parallel.

    Args:
        scene: The Scene to trace against.
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z).
        depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) colour values.
    """
    colour = _trace_kernel(
        scene,
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        depth,
    )
    return (float(colour[0]), float(colour[1]), float(colour[2]))


def background_colour(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Sky colour along a direction (host side)."""
    colour = _background_kernel(vec3(direction[0], direction[1], direction[2]))
    return (float(colour[0]), float(colour[1]), float(colour[2]))
