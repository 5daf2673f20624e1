"""Tests for the scene presets.

Tests cover:
- The preset registry
- Contents of each preset (sphere counts, hollow shell, materials)
- Seeded reproducibility of the random scene
- Aspect ratio handling
"""

import pytest


class TestRegistry:
    """Tests for create_preset and PRESETS."""

    def test_registered_names(self):
        """Test the three presets are registered."""
        from tiletrace.scene.presets import PRESETS

        assert set(PRESETS) == {"two_balls", "three_balls", "random_balls"}

    def test_unknown_name(self):
        """Test an unknown preset name raises KeyError."""
        from tiletrace.scene.presets import create_preset

        with pytest.raises(KeyError, match="Unknown scene"):
            create_preset("cornell_box")

    def test_preset_carries_name(self):
        """Test the returned preset records its name."""
        from tiletrace.scene.presets import create_preset

        preset = create_preset("two_balls")
        assert preset.name == "two_balls"


class TestTwoBalls:
    """Tests for the two-balls preset."""

    def test_contents(self):
        """Test two touching diffuse spheres."""
        from tiletrace.materials.material import MaterialKind
        from tiletrace.scene.presets import create_preset

        preset = create_preset("two_balls", aspect_ratio=2.0)
        scene = preset.scene

        assert scene.sphere_count == 2
        assert all(scene.material_kind(m) == MaterialKind.LAMBERTIAN for m in range(2))
        assert preset.aspect_ratio == 2.0
        assert preset.camera.config.vfov == 90.0

        # Left sphere is blue, right sphere is red
        left = scene.intersect((0.0, 0.0, 0.0), (-0.7, 0.0, -1.0))
        right = scene.intersect((0.0, 0.0, 0.0), (0.7, 0.0, -1.0))
        assert left.material_id == 0
        assert right.material_id == 1


class TestThreeBalls:
    """Tests for the three-balls preset."""

    def test_contents(self):
        """Test ground, diffuse, hollow glass and metal spheres."""
        from tiletrace.materials.material import MaterialKind
        from tiletrace.scene.presets import create_preset

        preset = create_preset("three_balls")
        data = preset.scene.to_dict()

        assert preset.scene.sphere_count == 5
        radii = [s["radius"] for s in data["spheres"]]
        assert radii == [100.0, 0.5, 0.5, -0.4, 0.5]

        # Both shells of the hollow sphere share the glass material
        glass_ids = {s["material_id"] for s in data["spheres"] if abs(s["radius"]) < 0.5}
        outer_glass = data["spheres"][2]["material_id"]
        assert glass_ids == {outer_glass}
        assert preset.scene.material_kind(outer_glass) == MaterialKind.DIELECTRIC

    def test_wide_aperture(self):
        """Test the camera has a shallow depth of field focused on the center sphere."""
        from tiletrace.scene.presets import create_preset

        preset = create_preset("three_balls")
        info = preset.camera.info()
        assert info["lens_radius"] == 1.0
        assert preset.camera.config.resolved_focus_dist() == pytest.approx(27.0**0.5)


class TestRandomBalls:
    """Tests for the random-balls preset."""

    def test_aspect_ratio_is_three_by_two(self):
        """Test the requested aspect ratio is overridden."""
        from tiletrace.scene.presets import create_preset

        preset = create_preset("random_balls", aspect_ratio=16.0 / 9.0, seed=1)
        assert preset.aspect_ratio == 1.5
        assert preset.camera.config.aspect_ratio == 1.5

    def test_sphere_count(self):
        """Test a ground sphere, up to 484 small spheres and three feature spheres."""
        from tiletrace.scene.presets import create_preset

        preset = create_preset("random_balls", seed=1)
        count = preset.scene.sphere_count
        # Only spheres close to the metal feature sphere are skipped
        assert 1 + 400 + 3 < count <= 1 + 484 + 3

        spheres = preset.scene.to_dict()["spheres"]
        assert spheres[0]["radius"] == 1000.0
        assert [s["radius"] for s in spheres[-3:]] == [1.0, 1.0, 1.0]
        assert all(s["radius"] == 0.2 for s in spheres[1:-3])

    def test_small_spheres_clear_feature_sphere(self):
        """Test no small sphere is centered near the metal feature sphere."""
        from tiletrace.scene.presets import create_preset

        preset = create_preset("random_balls", seed=3)
        for sphere in preset.scene.to_dict()["spheres"][1:-3]:
            x, y, z = sphere["center"]
            assert ((x - 4.0) ** 2 + (y - 0.2) ** 2 + z**2) ** 0.5 > 0.9

    def test_seed_reproducible(self):
        """Test the same seed produces the same scene."""
        from tiletrace.scene.presets import create_preset

        first = create_preset("random_balls", seed=7).scene.to_dict()
        second = create_preset("random_balls", seed=7).scene.to_dict()
        other = create_preset("random_balls", seed=8).scene.to_dict()

        assert first == second
        assert first != other

    def test_material_parameters_valid(self):
        """Test generated materials respect albedo and fuzz ranges."""
        from tiletrace.scene.presets import create_preset

        materials = create_preset("random_balls", seed=11).scene.to_dict()["materials"]
        kinds = {m["type"] for m in materials}
        assert kinds == {"lambertian", "metal", "dielectric"}

        for m in materials:
            if m["type"] == "metal":
                assert 0.0 <= m["fuzz"] <= 0.5
                assert all(0.5 <= a <= 1.0 for a in m["albedo"])
            elif m["type"] == "lambertian":
                assert all(0.0 <= a <= 1.0 for a in m["albedo"])
