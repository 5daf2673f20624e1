"""Tests for render configuration and the command-line interface.

Tests cover:
- Positional count parsing with fallback to defaults
- RenderConfig validation and derived values
- Argument parsing into a RenderConfig
- End-to-end rendering to a file and to stdout

Note: main() re-initializes Taichi, so these tests call render_scene
directly with the session's Taichi runtime.
"""

import pytest


class TestParseCount:
    """Tests for parse_count."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("400", 400),
            ("1", 1),
            (None, 800),
            ("0", 800),
            ("-5", 800),
            ("wide", 800),
            ("", 800),
        ],
    )
    def test_parse_count(self, text, expected):
        """Test valid counts parse and everything else falls back."""
        from tiletrace.config import parse_count

        assert parse_count(text, 800) == expected


class TestRenderConfig:
    """Tests for RenderConfig."""

    def test_defaults(self):
        """Test the default configuration."""
        from tiletrace.config import RenderConfig

        config = RenderConfig()
        assert config.width == 800
        assert config.samples_per_pixel == 100
        assert config.max_depth == 50
        assert config.scene == "random_balls"
        assert config.image_height() == 450

    def test_image_height(self):
        """Test the height follows the aspect ratio and never drops below 1."""
        from tiletrace.config import RenderConfig

        config = RenderConfig(width=1200)
        assert config.image_height(1.5) == 800
        assert RenderConfig(width=1).image_height(16.0 / 9.0) == 1

    def test_num_workers(self):
        """Test the worker count follows the thread setting."""
        from tiletrace.config import RenderConfig

        assert RenderConfig(threads=3).num_workers == 3
        assert RenderConfig().num_workers >= 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"samples_per_pixel": 0},
            {"max_depth": -1},
            {"tile_size": 0},
            {"threads": 0},
            {"aspect_ratio": 0.0},
            {"arch": "opengl"},
        ],
    )
    def test_invalid(self, kwargs):
        """Test invalid values raise ValueError."""
        from tiletrace.config import RenderConfig

        with pytest.raises(ValueError):
            RenderConfig(**kwargs)


class TestArguments:
    """Tests for parse_args and config_from_args."""

    def test_no_arguments(self):
        """Test an empty command line gives the defaults."""
        from tiletrace.cli import config_from_args, parse_args

        args = parse_args([])
        config = config_from_args(args)

        assert args.output == "-"
        assert config.width == 800
        assert config.samples_per_pixel == 100
        assert config.max_depth == 50
        assert config.seed is None

    def test_positionals_and_options(self):
        """Test positionals and options reach the config."""
        from tiletrace.cli import config_from_args, parse_args

        args = parse_args(
            ["400", "20", "8", "--scene", "three_balls", "--seed", "5", "--threads", "2", "-o", "x.png"]
        )
        config = config_from_args(args)

        assert (config.width, config.samples_per_pixel, config.max_depth) == (400, 20, 8)
        assert config.scene == "three_balls"
        assert config.seed == 5
        assert config.threads == 2
        assert args.output == "x.png"

    def test_bad_positionals_fall_back(self):
        """Test zero and unparsable positionals use the defaults."""
        from tiletrace.cli import config_from_args, parse_args

        config = config_from_args(parse_args(["0", "many"]))
        assert config.width == 800
        assert config.samples_per_pixel == 100

    def test_unknown_scene_rejected(self):
        """Test argparse rejects unknown scene names."""
        from tiletrace.cli import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--scene", "cornell_box"])


class TestRenderScene:
    """End-to-end tests for render_scene."""

    def test_render_to_ppm_file(self, tmp_path):
        """Test a small render is written as a PPM of the expected size."""
        from tiletrace.cli import render_scene
        from tiletrace.config import RenderConfig

        config = RenderConfig(
            width=16, samples_per_pixel=1, max_depth=3, tile_size=8, scene="two_balls", threads=2
        )
        path = tmp_path / "out.ppm"
        stats = render_scene(config, str(path), quiet=True)

        lines = path.read_text(encoding="ascii").splitlines()
        assert lines[:3] == ["P3", "16 9", "255"]
        assert len(lines) == 3 + 16 * 9
        assert stats.total_rays == 16 * 9

    def test_render_to_stdout(self, capsys):
        """Test "-" writes the PPM to stdout and progress to stderr."""
        from tiletrace.cli import render_scene
        from tiletrace.config import RenderConfig

        config = RenderConfig(
            width=12, samples_per_pixel=1, max_depth=2, tile_size=4, scene="two_balls", threads=2
        )
        render_scene(config, "-")

        captured = capsys.readouterr()
        assert captured.out.startswith("P3\n12 6\n255\n")
        assert "Rendering 12 by 6 pixels with 1 samples per pixel" in captured.err
        assert "72 rays to cast" in captured.err
        assert "tile 3 of 3 done" in captured.err
        assert "Done." in captured.err

    def test_random_balls_uses_three_by_two(self, tmp_path):
        """Test the random scene renders at a 3:2 aspect ratio."""
        from PIL import Image as PILImage

        from tiletrace.cli import render_scene
        from tiletrace.config import RenderConfig

        config = RenderConfig(
            width=24, samples_per_pixel=1, max_depth=2, scene="random_balls", seed=1, threads=2
        )
        path = tmp_path / "out.png"
        render_scene(config, str(path), quiet=True)

        with PILImage.open(path) as loaded:
            assert loaded.size == (24, 16)
