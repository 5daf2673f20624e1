"""Sphere primitive with robust ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the
intersection routine used by the scene aggregate.

The intersection uses the robust quadratic formula from Ray Tracing Gems to
avoid catastrophic cancellation when b^2 is nearly equal to 4ac. Of the two
roots, the near one is tried first and the far one second, so a ray that
starts inside a sphere still reports the exit point.

A sphere may have a negative radius. The radius only enters the quadratic
squared, so the hit parameters are those of the positive sphere, but the
outward normal is divided by the signed radius and therefore points
inward. Nesting a negative sphere inside a positive one of the same
material produces a hollow glass shell.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from tiletrace.core.ray import vec3
    >>> from tiletrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from tiletrace.core.ray import Ray, real, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, signed radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values flip the normal.
        material_id: Index of the sphere's material in the scene arena.
            The sphere does not own the material; many spheres may share it.
    """

    center: vec3
    radius: real
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The ray parameter of the intersection, inside the queried range.
        point: The 3D point where the ray intersected the surface.
        normal: Unit surface normal, always facing against the incoming ray.
        front_face: 1 if the ray hit the outside of the surface, 0 otherwise.
        material_id: Material of the primitive that was hit; -1 on a miss.

    Every field other than ``hit`` is only meaningful when hit == 1.
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def _solve_quadratic_robust(h: real, a: real, c: real, sqrt_d: real):
    """Solve a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant)) avoids subtracting near-equal values
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-12:
        # Tangent ray through the center plane; fall back to the textbook form
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def set_face_normal(ray: Ray, outward_normal: vec3):
    """Orient a normal against the incoming ray.

    Args:
        ray: The incoming ray.
        outward_normal: Unit normal pointing out of the surface.

    Returns:
        Tuple (front_face, normal): front_face is 1 when
        dot(ray.direction, outward_normal) < 0, and normal is the outward
        normal on a front face hit and its negation otherwise.
    """
    front_face = 0
    normal = -outward_normal
    if ray.direction.dot(outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: real, t_max: real) -> HitRecord:
    """Test for ray-sphere intersection.

    Solves |origin + t * direction - center|^2 = radius^2 for t using the
    half-b formulation:

        a = dot(direction, direction)
        h = dot(direction, oc)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    A root is accepted if it lies strictly inside (t_min, t_max); the near
    root is tried first and the far root second.

    Args:
        ray: The ray to test (direction need not be normalized).
        sphere: The sphere to test against.
        t_min: Lower bound of the accepted range (avoids self-intersection).
        t_max: Upper bound of the accepted range (closest hit so far).

    Returns:
        A HitRecord; check the hit field to see if an intersection occurred.
    """
    oc = ray.origin - sphere.center

    a = ray.direction.dot(ray.direction)
    h = ray.direction.dot(oc)
    c = oc.dot(oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            point = ray.origin + t * ray.direction
            # Dividing by the signed radius flips the normal of inverted spheres
            outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray, outward_normal)

            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result
