"""Metal (specular reflective) material implementation.

Metals reflect the incoming ray about the surface normal. A fuzz
parameter perturbs the mirror direction by a random offset inside a
sphere of radius ``fuzz``: 0 gives a perfect mirror, 1 a very rough
surface. Perturbed directions that end up below the surface are absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from tiletrace.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal
    >>> # )
"""

import taichi as ti

from tiletrace.core.ray import random_in_unit_sphere, real, reflect, unit_vector, vec3


@ti.func
def scatter_metal(albedo: vec3, fuzz: real, incident_direction: vec3, normal: vec3):
    """Compute the scattered direction for a metal surface.

    Args:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing against the incoming ray.

    Returns:
        A tuple of (did_scatter, attenuation, direction) where:
        - did_scatter: 1 if the scattered direction leaves the surface,
          0 if it points into the surface and the ray is absorbed.
        - attenuation: The albedo.
        - direction: The fuzzed reflection direction (not normalized).
    """
    reflected = reflect(unit_vector(incident_direction), normal)
    direction = reflected + fuzz * random_in_unit_sphere()

    did_scatter = 0
    if direction.dot(normal) > 0.0:
        did_scatter = 1

    return did_scatter, albedo, direction


def validate_fuzz(fuzz: float) -> None:
    """Check that a fuzz value is in [0, 1].

    Raises:
        ValueError: If fuzz is outside [0, 1].
    """
    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum roughness)."
        )
