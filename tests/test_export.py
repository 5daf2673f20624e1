"""Tests for gamma encoding and image export.

Tests cover:
- Gamma encoding and clamping
- 8-bit quantization
- PPM text output
- PNG output via Pillow and format selection by suffix
- Image comparison (RMSE)

Note: Tests avoid displaying actual windows; show_image is exercised with
the non-interactive Agg backend.
"""

import io

import numpy as np
import pytest


class TestGamma:
    """Tests for apply_gamma."""

    def test_square_root_by_default(self):
        """Test the default gamma is a square root."""
        from tiletrace.preview.display import apply_gamma

        image = np.array([[[0.25, 0.81, 0.0]]])
        assert np.allclose(apply_gamma(image), [[[0.5, 0.9, 0.0]]])

    def test_clamps_out_of_range(self):
        """Test values outside [0, 1] are clamped before encoding."""
        from tiletrace.preview.display import apply_gamma

        image = np.array([[[-0.5, 1.5, 4.0]]])
        assert np.allclose(apply_gamma(image), [[[0.0, 1.0, 1.0]]])

    def test_linear_gamma(self):
        """Test gamma 1 leaves values unchanged."""
        from tiletrace.preview.display import apply_gamma

        image = np.array([[[0.2, 0.4, 0.6]]])
        assert np.allclose(apply_gamma(image, 1.0), image)

    def test_invalid_gamma(self):
        """Test a non-positive gamma raises ValueError."""
        from tiletrace.preview.display import apply_gamma

        with pytest.raises(ValueError):
            apply_gamma(np.zeros((1, 1, 3)), 0.0)


class TestQuantization:
    """Tests for to_uint8."""

    def test_quantization_levels(self):
        """Test 256 * clamp(sqrt(c), 0, 0.999) truncation."""
        from tiletrace.preview.export import to_uint8

        image = np.array([[[0.0, 0.25, 1.0], [2.0, -1.0, 0.5]]])
        pixels = to_uint8(image)

        assert pixels.dtype == np.uint8
        # sqrt(0.25) = 0.5 -> 128; 1.0 clamps to 0.999 -> 255
        assert pixels[0, 0].tolist() == [0, 128, 255]
        # sqrt(0.5) = 0.7071 -> 181
        assert pixels[0, 1].tolist() == [255, 0, 181]


class TestPPM:
    """Tests for PPM output."""

    def test_header_and_pixel_order(self):
        """Test the P3 header and top-to-bottom, left-to-right pixel order."""
        from tiletrace.preview.export import write_ppm

        image = np.zeros((2, 3, 3))
        image[0, 0] = (1.0, 0.0, 0.0)
        image[1, 2] = (0.0, 0.0, 1.0)

        stream = io.StringIO()
        write_ppm(image, stream)
        lines = stream.getvalue().splitlines()

        assert lines[:3] == ["P3", "3 2", "255"]
        assert len(lines) == 3 + 6
        assert lines[3] == "255 0 0"
        assert lines[-1] == "0 0 255"
        assert lines[4] == "0 0 0"

    def test_save_ppm(self, tmp_path):
        """Test save_ppm writes the same text as write_ppm."""
        from tiletrace.preview.export import save_ppm, write_ppm

        image = np.full((4, 5, 3), 0.25)
        path = tmp_path / "out.ppm"
        save_ppm(image, path)

        stream = io.StringIO()
        write_ppm(image, stream)
        assert path.read_text(encoding="ascii") == stream.getvalue()


class TestPNG:
    """Tests for Pillow-based output."""

    def test_save_png(self, tmp_path):
        """Test a saved PNG reads back with the quantized values."""
        from PIL import Image as PILImage

        from tiletrace.preview.export import save_png, to_uint8

        rng = np.random.default_rng(0)
        image = rng.random((6, 8, 3))
        path = tmp_path / "out.png"
        save_png(image, path)

        with PILImage.open(path) as loaded:
            assert loaded.size == (8, 6)
            assert np.array_equal(np.asarray(loaded), to_uint8(image))

    def test_save_image_by_suffix(self, tmp_path):
        """Test save_image picks the writer from the file suffix."""
        from tiletrace.preview.export import save_image

        image = np.full((2, 2, 3), 0.5)
        save_image(image, tmp_path / "a.ppm")
        save_image(image, tmp_path / "b.png")

        assert (tmp_path / "a.ppm").read_text(encoding="ascii").startswith("P3\n")
        assert (tmp_path / "b.png").read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_save_image_unknown_suffix(self, tmp_path):
        """Test an unsupported suffix raises ValueError."""
        from tiletrace.preview.export import save_image

        with pytest.raises(ValueError):
            save_image(np.zeros((2, 2, 3)), tmp_path / "out.xyz")


class TestComparison:
    """Tests for compute_rmse."""

    def test_rmse(self):
        """Test RMSE of identical and offset images."""
        from tiletrace.preview.export import compute_rmse

        a = np.zeros((4, 4, 3))
        assert compute_rmse(a, a) == 0.0
        assert compute_rmse(a, a + 0.5) == pytest.approx(0.5)

    def test_rmse_shape_mismatch(self):
        """Test mismatched shapes raise ValueError."""
        from tiletrace.preview.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))


class TestShowImage:
    """Tests for the Matplotlib preview."""

    def test_show_image_non_interactive(self):
        """Test show_image builds a titled figure without blocking."""
        matplotlib = pytest.importorskip("matplotlib")
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from tiletrace.preview.display import show_image

        fig = show_image(np.full((3, 4, 3), 0.25), block=False)
        try:
            assert fig.axes[0].get_title() == "Render Preview - 4x3"
        finally:
            plt.close(fig)
