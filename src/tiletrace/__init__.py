"""Tiled Monte Carlo path tracer built on Taichi.

This package renders scenes of spheres with diffuse, metal and glass
materials under a sky gradient, seen through a thin-lens camera with
depth of field. The image is split into tiles that a pool of parallel
workers claim from a shared atomic counter.

Subpackages:
    core: Ray and vector utilities, the path tracing integrator, the tile
        partition and the tiled renderer
    geometry: Sphere primitive and hit records
    materials: Lambertian, metal and dielectric scattering
    scene: Scene storage and scene presets
    camera: Thin-lens camera with ray generation
    preview: Gamma encoding, PPM/PNG export and preview display

Modules:
    config: Render configuration and Taichi initialization
    cli: The ``tiletrace`` command
"""

__version__ = "0.1.0"
