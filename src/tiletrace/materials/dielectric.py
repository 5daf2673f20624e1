"""Dielectric (glass/water) material implementation.

This module implements clear refractive materials such as glass and water.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when the ratio times sin(theta) exceeds 1

Each scatter event picks reflection or refraction at random, with the
reflection probability given by the Schlick reflectance. Dielectrics never
absorb, so the attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from tiletrace.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti

from tiletrace.core.ray import real, reflect, refract, schlick_reflectance, unit_vector, vec3


@ti.func
def refraction_ratio(ior: real, front_face: ti.i32) -> real:
    """Ratio of refractive indices across the surface.

    Entering the medium (front face) the ratio is 1 / ior; leaving it
    (back face) the ratio is ior.
    """
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def cannot_refract(ior: real, incident_direction: vec3, normal: vec3, front_face: ti.i32) -> ti.i32:
    """Determine if total internal reflection will occur.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing against the incoming ray.
        front_face: 1 if the ray hits the outside of the surface, else 0.

    Returns:
        1 if refraction is impossible and the ray must reflect, 0 otherwise.
    """
    ratio = refraction_ratio(ior, front_face)
    unit_direction = unit_vector(incident_direction)
    cos_theta = ti.min(-unit_direction.dot(normal), 1.0)
    sin_theta = ti.sqrt(ti.max(1.0 - cos_theta * cos_theta, 0.0))
    return 1 if ratio * sin_theta > 1.0 else 0


@ti.func
def reflectance(ior: real, incident_direction: vec3, normal: vec3, front_face: ti.i32) -> real:
    """Schlick reflectance for a ray hitting the surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing against the incoming ray.
        front_face: 1 if the ray hits the outside of the surface, else 0.

    Returns:
        The probability of reflection in [0, 1].
    """
    ratio = refraction_ratio(ior, front_face)
    unit_direction = unit_vector(incident_direction)
    cos_theta = ti.min(-unit_direction.dot(normal), 1.0)
    return schlick_reflectance(cos_theta, ratio)


@ti.func
def scatter_dielectric(ior: real, incident_direction: vec3, normal: vec3, front_face: ti.i32):
    """Compute the scattered direction for a dielectric surface.

    Reflects on total internal reflection, or when a uniform draw falls
    below the Schlick reflectance; refracts otherwise.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing against the incoming ray.
        front_face: 1 if the ray hits the outside of the surface, 0 if it
            hits from within the material.

    Returns:
        A tuple of (did_scatter, attenuation, direction) where:
        - did_scatter: Always 1 for dielectrics.
        - attenuation: White; clear glass does not absorb.
        - direction: The reflected or refracted direction.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio(ior, front_face)

    unit_direction = unit_vector(incident_direction)
    cos_theta = ti.min(-unit_direction.dot(normal), 1.0)
    sin_theta = ti.sqrt(ti.max(1.0 - cos_theta * cos_theta, 0.0))

    direction = vec3(0.0, 0.0, 0.0)
    if ratio * sin_theta > 1.0 or schlick_reflectance(cos_theta, ratio) > ti.random(real):
        direction = reflect(unit_direction, normal)
    else:
        direction = refract(unit_direction, normal, ratio)

    return 1, attenuation, direction


def validate_refraction_index(refraction_index: float) -> None:
    """Check that a refraction index is positive.

    Indices below 1 are allowed; they model a less dense medium embedded in
    the surroundings, such as an air bubble in water.

    Raises:
        ValueError: If the index is not positive.
    """
    if refraction_index <= 0.0:
        raise ValueError(
            f"Index of refraction = {refraction_index} must be positive."
        )
