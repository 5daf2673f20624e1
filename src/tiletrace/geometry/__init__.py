"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection and hit records

All intersection routines are Taichi functions (@ti.func). There is no
spatial acceleration structure: the scene tests every primitive for every
ray.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
    "set_face_normal",
]
