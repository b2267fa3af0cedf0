"""
Tests for the heightfield relief (lithophane) generator.

Tests cover:
- Parameter validation and parsing
- Image pre-processing (contrast, luminance, smoothing, sampling)
- Depth mapping and carrier projection
- Closed, outward-wound output
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shadeforge.common.config import CarrierType
from shadeforge.common.errors import InvalidParameter, UnsupportedCarrierType
from shadeforge.common.mesh_ops import find_boundary_edges
from shadeforge.relief import LithophaneParameters, ImageSample, generate_relief_mesh, placeholder_shell
from shadeforge.relief.build import grid_shape, relief_depth
from shadeforge.relief.image_ops import (
    apply_smoothing, contrast_factor, adjust_channels, depth_fraction_map, sample_bilinear
)


# ============== Fixtures ==============

@pytest.fixture
def white_image():
    return ImageSample(np.full((2, 2, 4), 255, dtype=np.uint8))


@pytest.fixture
def gradient_image():
    """Horizontal black-to-white ramp, 16 x 32."""
    ramp = np.tile(np.linspace(0, 255, 32).astype(np.uint8), (16, 1))
    return ImageSample.from_array(ramp)


@pytest.fixture
def noise_image():
    rng = np.random.default_rng(3)
    return ImageSample.from_array(rng.integers(0, 256, size=(20, 30, 3), dtype=np.uint8))


@pytest.fixture
def params():
    return LithophaneParameters(resolution=12)


# ============== Parameter Tests ==============

class TestLithophaneParameters:

    def test_defaults(self):
        p = LithophaneParameters()
        assert p.carrier is CarrierType.FLAT
        assert p.min_thickness == 0.6
        assert p.max_thickness == 3.0
        assert p.resolution == 100
        assert not p.is_curved

    @pytest.mark.parametrize("kwargs", [
        {"resolution": 1},
        {"width": 0.0},
        {"height": -1.0},
        {"min_thickness": -0.1},
        {"base_thickness": -0.1},
        {"min_thickness": 2.0, "max_thickness": 1.0},
        {"min_thickness": 0.0, "base_thickness": 0.0},
        {"contrast": 300},
        {"contrast": -256},
        {"smoothing": -1},
        {"carrier": CarrierType.CURVED, "curve_radius": 0.0},
    ])
    def test_invalid(self, white_image, kwargs):
        with pytest.raises(InvalidParameter):
            generate_relief_mesh(white_image, LithophaneParameters(**kwargs))

    def test_flat_ignores_curve_radius(self, white_image):
        generate_relief_mesh(white_image, LithophaneParameters(resolution=4, curve_radius=0.0))

    def test_unknown_carrier(self):
        with pytest.raises(UnsupportedCarrierType):
            LithophaneParameters.from_dict({"type": "dome"})

    def test_unknown_carrier_instance(self, white_image):
        with pytest.raises(UnsupportedCarrierType):
            generate_relief_mesh(white_image, LithophaneParameters(carrier="dome"))

    def test_from_dict(self):
        p = LithophaneParameters.from_dict({"type": "cylinder", "resolution": 40, "extra": 1})
        assert p.carrier is CarrierType.CYLINDER
        assert p.resolution == 40

    def test_dict_round_trip(self):
        p = LithophaneParameters(carrier=CarrierType.ARC, smoothing=2.0, inverted=True)
        assert LithophaneParameters.from_dict(p.to_dict()) == p


class TestImageSample:

    def test_from_gray(self):
        image = ImageSample.from_array(np.zeros((3, 5), dtype=np.uint8))
        assert image.pixels.shape == (3, 5, 4)
        assert image.width == 5
        assert image.height == 3
        np.testing.assert_array_equal(image.pixels[:, :, 3], 255)

    def test_from_float(self):
        image = ImageSample.from_array(np.ones((2, 2, 3)))
        np.testing.assert_array_equal(image.pixels[:, :, :3], 255)

    def test_from_16_bit(self):
        # Mid-gray keeps its tone instead of wrapping modulo 256
        image = ImageSample.from_array(np.full((3, 3), 32768, dtype=np.uint16))
        np.testing.assert_array_equal(image.pixels[0, 0], [128, 128, 128, 255])
        white = ImageSample.from_array(np.full((2, 2, 3), 65535, dtype=np.uint16))
        np.testing.assert_array_equal(white.pixels[:, :, :3], 255)

    def test_from_float_out_of_range(self):
        image = ImageSample.from_array(np.array([[-0.5, 0.5, 1.5]]))
        np.testing.assert_array_equal(image.pixels[0, :, 0], [0, 128, 255])

    def test_read_only(self, white_image):
        with pytest.raises(ValueError):
            white_image.pixels[0, 0, 0] = 1

    def test_bad_shape(self):
        with pytest.raises(InvalidParameter):
            ImageSample(np.zeros((4, 4, 3), dtype=np.uint8))


# ============== Image Op Tests ==============

class TestImageOps:

    def test_contrast_factor_neutral(self):
        assert contrast_factor(0) == pytest.approx(1.0)

    def test_adjust_clamps(self):
        out = adjust_channels(np.array([0, 128, 255]), 100, 128)
        assert out.min() >= 0.0
        assert out.max() <= 255.0
        assert out[-1] == 255.0

    def test_brightness_shift(self):
        np.testing.assert_allclose(adjust_channels(np.array([100.0]), 20, 0), [120.0])

    def test_white_is_thin(self):
        pixels = np.full((2, 2, 4), 255, dtype=np.uint8)
        np.testing.assert_allclose(depth_fraction_map(pixels, 0, 0, False), 0.0, atol=1e-9)
        np.testing.assert_allclose(depth_fraction_map(pixels, 0, 0, True), 1.0, atol=1e-9)

    def test_black_is_thick(self):
        pixels = np.zeros((2, 2, 4), dtype=np.uint8)
        np.testing.assert_allclose(depth_fraction_map(pixels, 0, 0, False), 1.0)

    def test_bilinear_corners(self):
        values = np.array([[0.0, 1.0], [2.0, 3.0]])
        # v = 1 is the top image row
        np.testing.assert_allclose(sample_bilinear(values, np.array([0.0, 1.0]), np.array([1.0, 1.0])), [0.0, 1.0])
        np.testing.assert_allclose(sample_bilinear(values, np.array([0.0, 1.0]), np.array([0.0, 0.0])), [2.0, 3.0])
        np.testing.assert_allclose(sample_bilinear(values, np.array([0.5]), np.array([0.5])), [1.5])

    def test_smoothing_uniform_unchanged(self):
        pixels = np.full((8, 8, 4), 90, dtype=np.uint8)
        np.testing.assert_array_equal(apply_smoothing(pixels, 2), pixels)

    def test_smoothing_blurs_edge(self):
        pixels = np.zeros((9, 9, 4), dtype=np.uint8)
        pixels[:, 5:, :3] = 255
        pixels[:, :, 3] = 200
        smoothed = apply_smoothing(pixels, 1)
        row = smoothed[4, :, 0]
        assert 0 < row[4] < 255
        assert np.all(np.diff(row.astype(int)) >= 0)
        np.testing.assert_array_equal(smoothed[:, :, 3], 200)
        # Input untouched
        assert pixels[4, 4, 0] == 0

    def test_fractional_radius_below_one(self):
        pixels = np.arange(64 * 4, dtype=np.uint8).reshape(8, 8, 4)
        np.testing.assert_array_equal(apply_smoothing(pixels, 0.5), pixels)


# ============== Depth Tests ==============

class TestReliefDepth:

    def test_monotonic_and_bounded(self):
        p = LithophaneParameters(base_thickness=0.4, min_thickness=0.6, max_thickness=3.0)
        fraction = np.linspace(0.0, 1.0, 101)
        depth = relief_depth(fraction, p)
        assert np.all(np.diff(depth) >= 0)
        assert depth[0] == pytest.approx(1.0)
        assert depth[-1] == pytest.approx(3.4)

    def test_grid_shape(self):
        image = ImageSample(np.zeros((2, 4, 4), dtype=np.uint8))
        assert grid_shape(image, LithophaneParameters(resolution=10)) == (20, 10)


# ============== Relief Mesh Tests ==============

class TestGenerateReliefMesh:

    def test_white_image_scenario(self, white_image):
        p = LithophaneParameters(
            carrier=CarrierType.FLAT, width=10, height=10,
            min_thickness=0.6, max_thickness=3.0, base_thickness=0,
            resolution=50, brightness=0, contrast=0, smoothing=0, inverted=False
        )
        mesh = generate_relief_mesh(white_image, p)
        n_front = 50 * 50
        np.testing.assert_allclose(mesh.vertices[:n_front, 2], 0.6, atol=1e-9)
        np.testing.assert_allclose(mesh.vertices[n_front:, 2], 0.0)
        assert mesh.signed_volume() == pytest.approx(60.0, rel=1e-6)

    def test_counts(self, noise_image, params):
        mesh = generate_relief_mesh(noise_image, params)
        gx, gy = 18, 12
        assert mesh.n_vertices == 2 * gx * gy
        assert mesh.n_faces == 4 * (gx - 1) * (gy - 1) + 4 * (gx - 1) + 4 * (gy - 1)

    @pytest.mark.parametrize("carrier", list(CarrierType))
    def test_closed(self, noise_image, carrier):
        p = LithophaneParameters(carrier=carrier, resolution=10, curve_radius=8.0)
        mesh = generate_relief_mesh(noise_image, p)
        assert len(find_boundary_edges(mesh)) == 0
        tm = mesh.to_trimesh()
        assert tm.is_watertight
        assert tm.is_winding_consistent
        assert mesh.signed_volume() > 0

    def test_depth_within_bounds(self, noise_image):
        p = LithophaneParameters(resolution=20, base_thickness=0.2)
        mesh = generate_relief_mesh(noise_image, p)
        z = mesh.vertices[:mesh.n_vertices // 2, 2]
        assert z.min() >= 0.8 - 1e-9
        assert z.max() <= 3.2 + 1e-9

    def test_dark_side_thicker(self, gradient_image):
        mesh = generate_relief_mesh(gradient_image, LithophaneParameters(resolution=8))
        gx = 16
        front = mesh.vertices[:gx * 8].reshape(8, gx, 3)
        # Left edge is black, right edge white
        assert np.all(np.diff(front[0, :, 2]) <= 1e-9)
        assert front[0, 0, 2] == pytest.approx(3.0)
        assert front[0, -1, 2] == pytest.approx(0.6)

    def test_inverted_flips(self, gradient_image):
        mesh = generate_relief_mesh(gradient_image, LithophaneParameters(resolution=8, inverted=True))
        front = mesh.vertices[:16 * 8].reshape(8, 16, 3)
        assert front[0, 0, 2] == pytest.approx(0.6)
        assert front[0, -1, 2] == pytest.approx(3.0)

    def test_curved_radii(self, noise_image):
        p = LithophaneParameters(carrier=CarrierType.CURVED, resolution=10, curve_radius=12.0)
        mesh = generate_relief_mesh(noise_image, p)
        half = mesh.n_vertices // 2
        r = np.hypot(mesh.vertices[:, 0], mesh.vertices[:, 2] + 12.0)
        np.testing.assert_allclose(r[half:], 12.0)
        assert r[:half].min() >= 12.6 - 1e-9
        assert r[:half].max() <= 15.0 + 1e-9

    def test_cylinder_wraps_full_turn(self, noise_image):
        p = LithophaneParameters(carrier=CarrierType.CYLINDER, resolution=10, curve_radius=5.0)
        mesh = generate_relief_mesh(noise_image, p)
        back = mesh.vertices[mesh.n_vertices // 2:]
        # First and last back columns coincide
        gx = 15
        grid = back.reshape(10, gx, 3)
        np.testing.assert_allclose(grid[:, 0], grid[:, -1], atol=1e-9)

    def test_smoothing_changes_surface(self, noise_image, params):
        plain = generate_relief_mesh(noise_image, params)
        smooth = generate_relief_mesh(noise_image, LithophaneParameters(resolution=12, smoothing=2))
        assert not np.allclose(plain.vertices, smooth.vertices)
        assert np.std(smooth.vertices[:216, 2]) < np.std(plain.vertices[:216, 2])

    def test_too_narrow(self):
        image = ImageSample(np.zeros((100, 1, 4), dtype=np.uint8))
        with pytest.raises(InvalidParameter):
            generate_relief_mesh(image, LithophaneParameters(resolution=10))

    def test_deterministic(self, noise_image, params):
        a = generate_relief_mesh(noise_image, params)
        b = generate_relief_mesh(noise_image, params)
        np.testing.assert_array_equal(a.vertices, b.vertices)


class TestPlaceholderShell:

    def test_straight_shell(self):
        mesh = placeholder_shell(LithophaneParameters(), segments=32)
        assert mesh.n_vertices == 6 * 32
        radius = np.hypot(mesh.vertices[:, 0], mesh.vertices[:, 2])
        assert radius.max() == pytest.approx(5.0)
        assert radius.min() == pytest.approx(4.4)
        assert mesh.to_trimesh().is_watertight
