"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters every incoming ray. The scattered direction
is the surface normal plus a random unit vector, which distributes
directions with a cosine falloff around the normal, and the attenuation
is the surface albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from tiletrace.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction = scatter_lambertian(albedo, normal)
"""

import taichi as ti

from tiletrace.core.ray import near_zero, random_unit_vector, vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a scattered direction for a Lambertian surface.

    If the random unit vector nearly cancels the normal, the normal itself
    is used instead, so the scattered ray never has a zero-length
    direction.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        normal: The unit surface normal at the hit point.

    Returns:
        A tuple of (did_scatter, attenuation, direction) where:
        - did_scatter: Always 1; diffuse surfaces never absorb a ray outright.
        - attenuation: The albedo.
        - direction: The scattered direction (not normalized).
    """
    direction = normal + random_unit_vector()

    if near_zero(direction):
        direction = normal

    return 1, albedo, direction


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Check that an albedo is a valid reflectance color.

    Args:
        albedo: The color as (R, G, B) tuple.

    Raises:
        ValueError: If it does not have three components, or any component is
            outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
