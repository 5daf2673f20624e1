"""Scene presets: ready-made scenes with matching cameras.

Three presets are provided:

- two_balls: two touching Lambertian spheres (blue and red) filling a
  90 degree view. Useful for checking field of view and aspect ratio.
- three_balls: a diffuse sphere between a hollow glass sphere and a
  polished gold sphere, all on a large yellow ground sphere, seen through
  a wide aperture so that the depth of field is obvious.
- random_balls: a 22 x 22 grid of small randomly placed spheres with
  random materials, plus three large feature spheres (glass, diffuse,
  metal) on a huge ground sphere. Always rendered at a 3:2 aspect ratio.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from tiletrace.scene.presets import create_preset
    >>>
    >>> preset = create_preset("random_balls", seed=7)
    >>> preset.aspect_ratio
    1.5
    >>> preset.scene.sphere_count > 400
    True
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from tiletrace.camera.thin_lens import Camera, CameraConfig
from tiletrace.scene.world import Scene

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = 16.0 / 9.0


@dataclass
class ScenePreset:
    """A populated scene together with the camera that frames it.

    Attributes:
        name: Registry name of the preset.
        scene: The populated Scene.
        camera: The Camera to render it with.
        aspect_ratio: Aspect ratio the camera was built for. Presets may
            override the requested aspect ratio, so the image height should
            be derived from this value.
    """

    name: str
    scene: Scene
    camera: Camera
    aspect_ratio: float


# =============================================================================
# Preset Builders
# =============================================================================


def two_balls(aspect_ratio: float = DEFAULT_ASPECT_RATIO, rng: np.random.Generator | None = None) -> ScenePreset:
    """Two touching diffuse spheres seen through a pinhole camera."""
    scene = Scene()

    radius = math.cos(math.pi / 4.0)
    blue = scene.add_lambertian((0.0, 0.0, 1.0))
    red = scene.add_lambertian((1.0, 0.0, 0.0))

    scene.add_sphere((-radius, 0.0, -1.0), radius, blue)
    scene.add_sphere((radius, 0.0, -1.0), radius, red)

    camera = Camera(
        CameraConfig(
            lookfrom=(0.0, 0.0, 0.0),
            lookat=(0.0, 0.0, -1.0),
            vup=(0.0, 1.0, 0.0),
            vfov=90.0,
            aspect_ratio=aspect_ratio,
            aperture=0.0,
        )
    )
    return ScenePreset("two_balls", scene, camera, aspect_ratio)


def three_balls(aspect_ratio: float = DEFAULT_ASPECT_RATIO, rng: np.random.Generator | None = None) -> ScenePreset:
    """Diffuse, hollow glass and metal spheres with a shallow depth of field.

    The glass sphere is hollow: an inner sphere with the same centre and a
    negative radius flips its normals, so the shell behaves like a bubble.
    """
    scene = Scene()

    ground = scene.add_lambertian((0.8, 0.8, 0.0))
    center = scene.add_lambertian((0.1, 0.2, 0.5))
    left = scene.add_dielectric(1.5)
    right = scene.add_metal((0.8, 0.6, 0.2), fuzz=0.0)

    scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, left)
    scene.add_sphere((-1.0, 0.0, -1.0), -0.4, left)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, right)

    camera = Camera(
        CameraConfig(
            lookfrom=(3.0, 3.0, 2.0),
            lookat=(0.0, 0.0, -1.0),
            vup=(0.0, 1.0, 0.0),
            vfov=20.0,
            aspect_ratio=aspect_ratio,
            aperture=2.0,
        )
    )
    return ScenePreset("three_balls", scene, camera, aspect_ratio)


# Random-balls layout
RANDOM_GRID_EXTENT = 11
SMALL_RADIUS = 0.2
# Small spheres this close to the metal feature sphere are skipped
FEATURE_CLEARANCE = 0.9


def random_balls(aspect_ratio: float = DEFAULT_ASPECT_RATIO, rng: np.random.Generator | None = None) -> ScenePreset:
    """Hundreds of random small spheres around three large feature spheres.

    The requested aspect ratio is ignored: this scene is framed for 3:2.

    Args:
        aspect_ratio: Ignored.
        rng: Random generator used to place and colour the small spheres.
            A fresh unseeded generator is used if None.
    """
    if rng is None:
        rng = np.random.default_rng()
    aspect_ratio = 3.0 / 2.0

    scene = Scene()
    ground = scene.add_lambertian((0.2, 0.6, 0.7))
    scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)

    clearance_point = np.array([4.0, SMALL_RADIUS, 0.0])
    for a in range(-RANDOM_GRID_EXTENT, RANDOM_GRID_EXTENT):
        for b in range(-RANDOM_GRID_EXTENT, RANDOM_GRID_EXTENT):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random()])

            if np.linalg.norm(center - clearance_point) <= FEATURE_CLEARANCE:
                continue

            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                material_id = scene.add_lambertian(tuple(albedo.tolist()))
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = rng.uniform(0.0, 0.5)
                material_id = scene.add_metal(tuple(albedo.tolist()), fuzz)
            else:
                material_id = scene.add_dielectric(1.5)

            scene.add_sphere(tuple(center.tolist()), SMALL_RADIUS, material_id)

    glass = scene.add_dielectric(1.5)
    scene.add_sphere((0.0, 1.0, 0.0), 1.0, glass)

    brown = scene.add_lambertian((0.4, 0.2, 0.1))
    scene.add_sphere((-4.0, 1.0, 0.0), 1.0, brown)

    mirror = scene.add_metal((0.7, 0.6, 0.5), fuzz=0.0)
    scene.add_sphere((4.0, 1.0, 0.0), 1.0, mirror)

    camera = Camera(
        CameraConfig(
            lookfrom=(12.0, 2.0, 3.0),
            lookat=(0.0, 0.0, 0.0),
            vup=(0.0, 1.0, 0.0),
            vfov=20.0,
            aspect_ratio=aspect_ratio,
            aperture=0.1,
            focus_dist=10.0,
        )
    )
    return ScenePreset("random_balls", scene, camera, aspect_ratio)


# =============================================================================
# Registry
# =============================================================================

PresetBuilder = Callable[[float, np.random.Generator | None], ScenePreset]

PRESETS: dict[str, PresetBuilder] = {
    "two_balls": two_balls,
    "three_balls": three_balls,
    "random_balls": random_balls,
}


def create_preset(
    name: str,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    seed: int | None = None,
) -> ScenePreset:
    """Build a preset scene by name.

    Args:
        name: One of the names in PRESETS.
        aspect_ratio: Requested image aspect ratio (width / height).
        seed: Seed for presets with random content. None gives a different
            scene on every call.

    Returns:
        The populated ScenePreset.

    Raises:
        KeyError: If name is not a registered preset.
    """
    try:
        builder = PRESETS[name]
    except KeyError:
        raise KeyError(f"Unknown scene '{name}'. Available: {', '.join(sorted(PRESETS))}") from None

    preset = builder(aspect_ratio, np.random.default_rng(seed))
    logger.debug(
        "Built scene %s: %d spheres, %d materials",
        name,
        preset.scene.sphere_count,
        preset.scene.material_count,
    )
    return preset
