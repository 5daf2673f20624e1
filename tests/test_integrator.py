"""Tests for the path tracing integrator.

Tests cover:
- Sky gradient background
- Bounce budget: depth 0 is black
- Absorption and attenuation along a path
- The ground-sphere scene seen from above and below the horizon
"""

import pytest


class TestBackground:
    """Tests for the sky gradient."""

    def test_straight_up_is_sky_blue(self):
        """Test a vertical ray sees the top of the gradient."""
        from tiletrace.core.integrator import SKY_BLUE, background_colour

        assert background_colour((0.0, 1.0, 0.0)) == pytest.approx(SKY_BLUE)

    def test_straight_down_is_white(self):
        """Test a downward ray sees the bottom of the gradient."""
        from tiletrace.core.integrator import SKY_WHITE, background_colour

        assert background_colour((0.0, -5.0, 0.0)) == pytest.approx(SKY_WHITE)

    def test_horizon_is_midpoint(self):
        """Test a horizontal ray sees the midpoint of the gradient."""
        from tiletrace.core.integrator import background_colour

        assert background_colour((1.0, 0.0, 0.0)) == pytest.approx((0.75, 0.85, 1.0))

    def test_direction_length_does_not_matter(self):
        """Test the gradient only depends on the direction."""
        from tiletrace.core.integrator import background_colour

        assert background_colour((1.0, 1.0, 0.0)) == pytest.approx(background_colour((7.0, 7.0, 0.0)))


class TestRayColour:
    """Tests for ray_colour through the host-side probe."""

    def test_depth_zero_is_black(self):
        """Test an exhausted bounce budget yields exactly black."""
        from tiletrace.core.integrator import trace_ray
        from tiletrace.scene.world import Scene

        scene = Scene(max_spheres=4, max_materials=4)
        assert trace_ray(scene, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=0) == (0.0, 0.0, 0.0)

    def test_empty_scene_returns_background(self):
        """Test a miss returns the sky colour."""
        from tiletrace.core.integrator import background_colour, trace_ray
        from tiletrace.scene.world import Scene

        scene = Scene(max_spheres=4, max_materials=4)
        direction = (0.3, 0.4, -1.0)
        assert trace_ray(scene, (0.0, 0.0, 0.0), direction) == pytest.approx(
            background_colour(direction)
        )

    def test_depth_one_hit_is_black(self):
        """Test a path that hits a surface with one bounce left cannot escape."""
        from tiletrace.core.integrator import trace_ray
        from tiletrace.scene.world import Scene

        scene = Scene(max_spheres=4, max_materials=4)
        material = scene.add_lambertian((0.5, 0.5, 0.5))
        scene.add_sphere((0.0, 0.0, -1.0), 0.5, material)

        assert trace_ray(scene, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=1) == (0.0, 0.0, 0.0)

    def test_mirror_attenuates_reflected_sky(self):
        """Test a perfect mirror returns albedo times the reflected sky."""
        from tiletrace.core.integrator import background_colour, trace_ray
        from tiletrace.scene.world import Scene

        scene = Scene(max_spheres=4, max_materials=4)
        mirror = scene.add_metal((0.5, 0.6, 0.7), fuzz=0.0)
        # Large sphere whose top acts as a horizontal mirror at y = 0
        scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, mirror)

        colour = trace_ray(scene, (0.0, 1.0, 0.0), (0.0, -1.0, 0.0))
        sky = background_colour((0.0, 1.0, 0.0))
        assert colour == pytest.approx((0.5 * sky[0], 0.6 * sky[1], 0.7 * sky[2]))

    def test_glass_is_transparent_on_average(self):
        """Test a head-on ray through a glass sphere keeps most of its energy."""
        from tiletrace.core.integrator import trace_ray
        from tiletrace.scene.world import Scene

        scene = Scene(max_spheres=4, max_materials=4)
        glass = scene.add_dielectric(1.5)
        scene.add_sphere((0.0, 0.0, -3.0), 0.5, glass)

        # Glass never absorbs, so every path ends in the (non-black) sky
        for _ in range(20):
            colour = trace_ray(scene, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
            assert min(colour) > 0.5


class TestGroundSphereScenario:
    """Tests with a huge diffuse ground sphere."""

    def test_ray_above_horizon_sees_sky(self):
        """Test a camera ray pointing up misses the ground."""
        from tiletrace.core.integrator import background_colour, trace_ray
        from tiletrace.scene.world import Scene

        scene = Scene(max_spheres=4, max_materials=4)
        ground = scene.add_lambertian((0.5, 0.5, 0.5))
        scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)

        direction = (0.0, 0.5, -1.0)
        assert trace_ray(scene, (0.0, 1.0, 0.0), direction) == pytest.approx(
            background_colour(direction)
        )

    def test_ray_into_ground_is_darker_than_sky(self):
        """Test a ray hitting the ground returns attenuated light in [0, 1]."""
        from tiletrace.core.integrator import trace_ray
        from tiletrace.scene.world import Scene

        scene = Scene(max_spheres=4, max_materials=4)
        ground = scene.add_lambertian((0.5, 0.5, 0.5))
        scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)

        samples = [trace_ray(scene, (0.0, 1.0, 0.0), (0.0, -1.0, -1.0)) for _ in range(50)]
        for colour in samples:
            assert all(0.0 <= c <= 0.5 + 1e-9 for c in colour)

        mean_red = sum(c[0] for c in samples) / len(samples)
        # One bounce off a 50% grey floor under a sky brighter than 0.5
        assert mean_red > 0.25
