"""Materials module: the three scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with fuzz
    dielectric: Glass-like refraction with Schlick-weighted reflection
    material: MaterialKind tag and scatter dispatch

Scatter functions are Taichi functions returning
(did_scatter, attenuation, direction). Each module also provides the
host-side parameter validation used when materials are added to a scene.
"""

from .dielectric import (
    cannot_refract,
    reflectance,
    refraction_ratio,
    scatter_dielectric,
    validate_refraction_index,
)
from .lambertian import scatter_lambertian, validate_albedo
from .material import MaterialKind, scatter
from .metal import scatter_metal, validate_fuzz

__all__ = [
    "MaterialKind",
    "scatter",
    # Lambertian
    "scatter_lambertian",
    "validate_albedo",
    # Metal
    "scatter_metal",
    "validate_fuzz",
    # Dielectric
    "scatter_dielectric",
    "cannot_refract",
    "reflectance",
    "refraction_ratio",
    "validate_refraction_index",
]
