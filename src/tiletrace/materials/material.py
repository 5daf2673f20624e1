"""Material variants and scatter dispatch.

Materials form a closed tagged variant: every material is a MaterialKind
tag plus the parameters of that kind. The scene stores materials in an
arena indexed by material id, and primitives refer to them by id, so any
number of spheres can share one material.

All kinds share one contract:

    scatter(ray_in, hit_record) -> (did_scatter, attenuation, scattered_ray)

where did_scatter == 0 means the ray was absorbed and contributes no
further radiance.
"""

from enum import IntEnum

import taichi as ti

from tiletrace.core.ray import Ray, real, vec3
from tiletrace.geometry.sphere import HitRecord
from tiletrace.materials.dielectric import scatter_dielectric
from tiletrace.materials.lambertian import scatter_lambertian
from tiletrace.materials.metal import scatter_metal


class MaterialKind(IntEnum):
    """Enumeration of supported material kinds.

    Used as the tag for material dispatch in the integrator.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Tags as plain ints for use inside kernels
_LAMBERTIAN = int(MaterialKind.LAMBERTIAN)
_METAL = int(MaterialKind.METAL)
_DIELECTRIC = int(MaterialKind.DIELECTRIC)


@ti.func
def scatter(kind: ti.i32, albedo: vec3, fuzz: real, ior: real, ray_in: Ray, rec: HitRecord):
    """Dispatch to the scatter function of a material kind.

    Args:
        kind: The MaterialKind tag.
        albedo: Albedo of Lambertian and metal materials.
        fuzz: Fuzz of metal materials.
        ior: Refraction index of dielectric materials.
        ray_in: The incoming ray.
        rec: The hit record at the scatter point.

    Returns:
        A tuple of (did_scatter, attenuation, scattered) where scattered is
        the outgoing ray, starting at the hit point. An unknown tag absorbs
        the ray.
    """
    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    direction = vec3(0.0, 0.0, 0.0)

    if kind == _LAMBERTIAN:
        did_scatter, attenuation, direction = scatter_lambertian(albedo, rec.normal)

    elif kind == _METAL:
        did_scatter, attenuation, direction = scatter_metal(
            albedo, fuzz, ray_in.direction, rec.normal
        )

    elif kind == _DIELECTRIC:
        did_scatter, attenuation, direction = scatter_dielectric(
            ior, ray_in.direction, rec.normal, rec.front_face
        )

    return did_scatter, attenuation, Ray(origin=rec.point, direction=direction)
