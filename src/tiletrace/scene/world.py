"""Scene aggregate: sphere storage, material arena and ray-scene queries.

The Scene stores spheres and materials in Taichi fields using a
Structure-of-Arrays layout. Materials live in an arena indexed by material
id; every sphere refers to exactly one registered material, and a material
may be shared by any number of spheres.

A scene is built once on the host and is read-only while rendering, so all
render workers query it concurrently without synchronization.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from tiletrace.scene.world import Scene
    >>> scene = Scene()
    >>> red = scene.add_lambertian((0.8, 0.1, 0.1))
    >>> glass = scene.add_dielectric(1.5)
    >>> scene.add_sphere((0, 0, -1), 0.5, red)
    0
    >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
    1
    >>> scene.add_sphere((-1, 0, -1), -0.4, glass)  # hollow shell
    2
    >>> scene.intersect((0, 0, 0), (0, 0, -1)).material_id
    0
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

import taichi as ti

from tiletrace.core.ray import Ray, real, vec3
from tiletrace.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record
from tiletrace.materials.dielectric import validate_refraction_index
from tiletrace.materials.lambertian import validate_albedo
from tiletrace.materials.material import MaterialKind, scatter
from tiletrace.materials.metal import validate_fuzz

logger = logging.getLogger(__name__)

# Default capacities; the random-balls preset needs about 500 of each
MAX_SPHERES = 1024
MAX_MATERIALS = 1024

Vec3Like = tuple[float, float, float]


@dataclass
class Hit:
    """Host-side copy of a HitRecord.

    Attributes:
        t: Ray parameter of the intersection.
        point: Intersection point.
        normal: Unit normal facing against the ray.
        front_face: Whether the ray hit the outside of the surface.
        material_id: Material of the primitive that was hit.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material_id: int


@ti.data_oriented
class Scene:
    """An ordered collection of spheres plus the materials they use.

    Attributes:
        max_spheres: Sphere capacity.
        max_materials: Material capacity.
    """

    def __init__(self, max_spheres: int = MAX_SPHERES, max_materials: int = MAX_MATERIALS) -> None:
        """Allocate an empty scene.

        Args:
            max_spheres: Maximum number of spheres.
            max_materials: Maximum number of materials.
        """
        self.max_spheres = max_spheres
        self.max_materials = max_materials

        # Sphere storage
        self.sphere_centers = ti.Vector.field(3, dtype=real, shape=max_spheres)
        self.sphere_radii = ti.field(dtype=real, shape=max_spheres)
        self.sphere_material_ids = ti.field(dtype=ti.i32, shape=max_spheres)
        self.num_spheres = ti.field(dtype=ti.i32, shape=())

        # Material arena
        self.material_kinds = ti.field(dtype=ti.i32, shape=max_materials)
        self.material_albedos = ti.Vector.field(3, dtype=real, shape=max_materials)
        self.material_fuzz = ti.field(dtype=real, shape=max_materials)
        self.material_iors = ti.field(dtype=real, shape=max_materials)
        self.num_materials = ti.field(dtype=ti.i32, shape=())

        # Single-entry result slot for host-side intersection probes
        self._probe = HitRecord.field(shape=())

        # Host-side mirror of the scene, used for serialization
        self._material_params: list[dict[str, Any]] = []
        self._sphere_params: list[dict[str, Any]] = []

    # =========================================================================
    # Material Management
    # =========================================================================

    def _add_material(
        self,
        kind: MaterialKind,
        albedo: Vec3Like,
        fuzz: float,
        ior: float,
        params: dict[str, Any],
    ) -> int:
        material_id = int(self.num_materials[None])
        if material_id >= self.max_materials:
            raise RuntimeError(f"Maximum number of materials ({self.max_materials}) exceeded")

        self.material_kinds[material_id] = int(kind)
        self.material_albedos[material_id] = [albedo[0], albedo[1], albedo[2]]
        self.material_fuzz[material_id] = fuzz
        self.material_iors[material_id] = ior
        self.num_materials[None] = material_id + 1

        self._material_params.append({"type": kind.name.lower(), **params})
        return material_id

    def add_lambertian(self, albedo: Vec3Like) -> int:
        """Add a Lambertian (diffuse) material.

        Args:
            albedo: The diffuse reflectance color as (R, G, B), each in [0, 1].

        Returns:
            The material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        validate_albedo(albedo)
        return self._add_material(
            MaterialKind.LAMBERTIAN, albedo, 0.0, 1.0, {"albedo": list(albedo)}
        )

    def add_metal(self, albedo: Vec3Like, fuzz: float = 0.0) -> int:
        """Add a metal (specular reflective) material.

        Args:
            albedo: The reflective color as (R, G, B), each in [0, 1].
            fuzz: The surface roughness in [0, 1]. Default is a perfect mirror.

        Returns:
            The material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or the fuzz is outside [0, 1].
        """
        validate_albedo(albedo)
        validate_fuzz(fuzz)
        return self._add_material(
            MaterialKind.METAL, albedo, fuzz, 1.0, {"albedo": list(albedo), "fuzz": fuzz}
        )

    def add_dielectric(self, refraction_index: float = 1.5) -> int:
        """Add a dielectric (glass/water) material.

        Args:
            refraction_index: Index of refraction. Default is 1.5 (glass).
                Common values: Water=1.33, Glass=1.5, Diamond=2.4

        Returns:
            The material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the index is not positive.
        """
        validate_refraction_index(refraction_index)
        return self._add_material(
            MaterialKind.DIELECTRIC,
            (1.0, 1.0, 1.0),
            0.0,
            refraction_index,
            {"refraction_index": refraction_index},
        )

    @property
    def material_count(self) -> int:
        """Number of registered materials."""
        return int(self.num_materials[None])

    def material_kind(self, material_id: int) -> MaterialKind:
        """Get the kind of a registered material.

        Raises:
            ValueError: If material_id is not registered.
        """
        self._check_material_id(material_id)
        return MaterialKind(int(self.material_kinds[material_id]))

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= self.material_count:
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(self, center: Vec3Like, radius: float, material_id: int) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point as (x, y, z).
            radius: The radius. Negative values model an inverted shell.
            material_id: A material id returned by one of the add_* methods.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or the radius is zero or
                not finite.
        """
        self._check_material_id(material_id)
        if radius == 0.0 or not math.isfinite(radius):
            raise ValueError(f"Sphere radius = {radius} must be finite and non-zero")

        idx = int(self.num_spheres[None])
        if idx >= self.max_spheres:
            raise RuntimeError(f"Maximum number of spheres ({self.max_spheres}) exceeded")

        self.sphere_centers[idx] = [center[0], center[1], center[2]]
        self.sphere_radii[idx] = radius
        self.sphere_material_ids[idx] = material_id
        self.num_spheres[None] = idx + 1

        self._sphere_params.append(
            {"center": list(center), "radius": radius, "material_id": material_id}
        )
        return idx

    @property
    def sphere_count(self) -> int:
        """Number of spheres in the scene."""
        return int(self.num_spheres[None])

    def clear(self) -> None:
        """Remove all spheres and materials.

        Field data is not zeroed; it is overwritten as new entries are added.
        """
        self.num_spheres[None] = 0
        self.num_materials[None] = 0
        self._material_params.clear()
        self._sphere_params.clear()

    # =========================================================================
    # Ray Queries
    # =========================================================================

    @ti.func
    def hit(self, ray: Ray, t_min: real, t_max: real) -> HitRecord:
        """Find the closest intersection of a ray with the scene.

        Tests every sphere in insertion order, shrinking the accepted range
        to the closest hit found so far. Cost is linear in the number of
        spheres.

        Args:
            ray: The ray to test.
            t_min: Minimum t value to consider a valid hit.
            t_max: Maximum t value to consider a valid hit.

        Returns:
            The HitRecord of the nearest intersection, or a miss record.
        """
        closest_t = t_max
        result = make_miss_record()

        for i in range(self.num_spheres[None]):
            sphere = Sphere(
                center=self.sphere_centers[i],
                radius=self.sphere_radii[i],
                material_id=self.sphere_material_ids[i],
            )
            rec = hit_sphere(ray, sphere, t_min, closest_t)
            if rec.hit == 1:
                closest_t = rec.t
                result = rec

        return result

    @ti.func
    def scatter_at(self, ray_in: Ray, rec: HitRecord):
        """Scatter a ray off the material recorded in a hit record.

        Returns:
            A tuple of (did_scatter, attenuation, scattered_ray).
        """
        m = rec.material_id
        return scatter(
            self.material_kinds[m],
            self.material_albedos[m],
            self.material_fuzz[m],
            self.material_iors[m],
            ray_in,
            rec,
        )

    @ti.kernel
    def _intersect_kernel(self, origin: vec3, direction: vec3, t_min: real, t_max: real):
        # Single-iteration outer loop keeps the sphere scan serial
        for _ in range(1):
            self._probe[None] = self.hit(Ray(origin=origin, direction=direction), t_min, t_max)

    def intersect(
        self,
        origin: Vec3Like,
        direction: Vec3Like,
        t_min: float = 0.001,
        t_max: float = math.inf,
    ) -> Hit | None:
        """Find the closest intersection of a ray with the scene (host side).

        Convenience wrapper around hit() for testing and debugging.

        Args:
            origin: Ray origin as (x, y, z).
            direction: Ray direction as (x, y, z).
            t_min: Minimum t value to consider a valid hit.
            t_max: Maximum t value to consider a valid hit.

        Returns:
            A Hit, or None if the ray misses every sphere.
        """
        self._intersect_kernel(
            vec3(origin[0], origin[1], origin[2]),
            vec3(direction[0], direction[1], direction[2]),
            t_min,
            t_max,
        )
        rec = self._probe[None]
        if rec.hit == 0:
            return None
        return Hit(
            t=float(rec.t),
            point=(float(rec.point[0]), float(rec.point[1]), float(rec.point[2])),
            normal=(float(rec.normal[0]), float(rec.normal[1]), float(rec.normal[2])),
            front_face=bool(rec.front_face),
            material_id=int(rec.material_id),
        )

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary with 'materials' and 'spheres' lists. Material ids
            are positions in the materials list.
        """
        return {
            "materials": [dict(m) for m in self._material_params],
            "spheres": [dict(s) for s in self._sphere_params],
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary produced by to_dict().

        Clears the current scene first.

        Raises:
            ValueError: If the data contains an unknown material type or
                invalid parameters.
        """
        self.clear()

        for mat in data.get("materials", []):
            mat_type = mat.get("type", "").lower()
            if mat_type == "lambertian":
                self.add_lambertian(tuple(mat.get("albedo", [0.5, 0.5, 0.5])))
            elif mat_type == "metal":
                self.add_metal(tuple(mat.get("albedo", [0.8, 0.8, 0.8])), mat.get("fuzz", 0.0))
            elif mat_type == "dielectric":
                self.add_dielectric(mat.get("refraction_index", 1.5))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere in data.get("spheres", []):
            self.add_sphere(
                tuple(sphere.get("center", [0.0, 0.0, 0.0])),
                sphere.get("radius", 1.0),
                sphere.get("material_id", 0),
            )

        logger.debug(
            "Loaded scene with %d materials and %d spheres",
            self.material_count,
            self.sphere_count,
        )

    def __repr__(self) -> str:
        return f"Scene(spheres={self.sphere_count}, materials={self.material_count})"
