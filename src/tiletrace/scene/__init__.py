"""Scene module for scene storage and scene presets.

Components:
    world: Scene container holding spheres and the material arena
    presets: Ready-made scenes with matching cameras

Scene data is organized for concurrent read-only access while rendering:
    - Structure-of-Arrays layout for sphere data
    - Materials stored once and referenced by id
"""

from .presets import PRESETS, ScenePreset, create_preset, random_balls, three_balls, two_balls
from .world import MAX_MATERIALS, MAX_SPHERES, Hit, Scene

__all__ = [
    # World
    "MAX_MATERIALS",
    "MAX_SPHERES",
    "Hit",
    "Scene",
    # Presets
    "PRESETS",
    "ScenePreset",
    "create_preset",
    "random_balls",
    "three_balls",
    "two_balls",
]
