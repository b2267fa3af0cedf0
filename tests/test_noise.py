"""
Tests for the deterministic noise and displacement fields.

Tests cover:
- Trigonometric lattice hash
- Value / fractal noise ranges and determinism
- Per-strategy displacement functions (ribs, waves, folds, cells)
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shadeforge.common import noise


# ============== Fixtures ==============

@pytest.fixture
def sample_points():
    """Scattered 3D sample coordinates."""
    rng = np.random.default_rng(7)
    return rng.uniform(-20.0, 20.0, size=(3, 2000))


# ============== Hash Tests ==============

class TestHash3:
    """Test the lattice hash."""

    def test_range(self):
        ix, iy, iz = np.meshgrid(np.arange(-5, 5), np.arange(-5, 5), np.arange(-5, 5))
        h = noise.hash3(ix, iy, iz, 1234)
        assert h.min() >= 0.0
        assert h.max() < 1.0

    def test_deterministic(self):
        a = noise.hash3(3, -2, 7, 42)
        b = noise.hash3(3, -2, 7, 42)
        assert a == b

    def test_seed_changes_value(self):
        assert noise.hash3(1, 2, 3, 1) != noise.hash3(1, 2, 3, 2)


# ============== Value Noise Tests ==============

class TestValueNoise:
    """Test smooth lattice noise."""

    def test_bounded(self, sample_points):
        x, y, z = sample_points
        n = noise.value_noise3(x, y, z, 1234)
        assert n.min() >= -1.0
        assert n.max() <= 1.0

    def test_matches_hash_on_lattice(self):
        # At integer coordinates the blend reduces to one corner
        n = noise.value_noise3(2.0, 3.0, -1.0, 9)
        expected = 2.0 * noise.hash3(2.0, 3.0, -1.0, 9) - 1.0
        np.testing.assert_allclose(n, expected, atol=1e-12)

    def test_continuous(self):
        x = np.linspace(0.0, 4.0, 4001)
        n = noise.value_noise3(x, 0.3, 0.7, 5)
        assert np.abs(np.diff(n)).max() < 0.05

    def test_broadcasts(self):
        n = noise.value_noise3(np.zeros((4, 5)), 0.5, 0.5, 1)
        assert n.shape == (4, 5)


class TestFractalNoise:
    """Test octave sums."""

    def test_bounded(self, sample_points):
        x, y, z = sample_points
        for ridged in (False, True):
            n = noise.fractal_noise3(x, y, z, 1234, octaves=3, ridged=ridged)
            assert n.min() >= -1.0 - 1e-12
            assert n.max() <= 1.0 + 1e-12

    def test_deterministic(self, sample_points):
        x, y, z = sample_points
        a = noise.fractal_noise3(x, y, z, 77)
        b = noise.fractal_noise3(x, y, z, 77)
        np.testing.assert_array_equal(a, b)

    def test_ridged_differs(self, sample_points):
        x, y, z = sample_points
        plain = noise.fractal_noise3(x, y, z, 77)
        ridged = noise.fractal_noise3(x, y, z, 77, ridged=True)
        assert not np.allclose(plain, ridged)


# ============== Displacement Tests ==============

class TestRibDisplacement:
    """Ribs are a pure sine in angle."""

    def test_periodic(self):
        angle = np.linspace(0.0, 2.0 * np.pi, 500)
        rib_count = 24
        a = noise.rib_displacement(angle, rib_count, 0.4)
        b = noise.rib_displacement(angle + 2.0 * np.pi / rib_count, rib_count, 0.4)
        np.testing.assert_allclose(a, b, atol=1e-9)

    def test_bounded_by_depth(self):
        angle = np.linspace(0.0, 2.0 * np.pi, 5000)
        d = noise.rib_displacement(angle, 20, 0.5)
        assert np.abs(d).max() <= 0.5 + 1e-12
        assert np.abs(d).max() > 0.49


class TestWaveDisplacement:

    def test_amplitude(self):
        angle = np.linspace(0.0, 2.0 * np.pi, 1000)
        d = noise.wave_displacement(angle, 0.25, 1.5, 5)
        assert np.abs(d).max() <= 1.5 + 1e-12

    def test_zero_amplitude(self):
        d = noise.wave_displacement(np.linspace(0, 6, 10), 0.5, 0.0, 5)
        np.testing.assert_array_equal(d, 0.0)


class TestOrigamiDisplacement:
    """Folds alternate between the silhouette and fold_depth inside it."""

    def test_alternates_on_fold_columns(self):
        folds = 12
        angle = 2.0 * np.pi * np.arange(2 * folds) / (2 * folds)
        d = noise.origami_displacement(angle, folds, 1.0)
        np.testing.assert_array_equal(d[0::2], 0.0)
        np.testing.assert_array_equal(d[1::2], -1.0)

    def test_values_are_two_level(self):
        d = noise.origami_displacement(np.linspace(0, 2 * np.pi, 777), 7, 0.3)
        assert set(np.unique(d)) <= {0.0, -0.3}


class TestVoronoiDisplacement:

    def test_bounded_by_twice_scale(self):
        angle, y = np.meshgrid(np.linspace(0, 2 * np.pi, 100), np.linspace(0, 1, 50))
        d = noise.voronoi_displacement(angle, y, 12, 1234, 0.65)
        assert np.abs(d).max() <= 2 * 0.65 + 1e-12

    def test_seed_changes_field(self):
        angle = np.linspace(0, 2 * np.pi, 100)
        a = noise.voronoi_displacement(angle, 0.5, 12, 1, 1.0)
        b = noise.voronoi_displacement(angle, 0.5, 12, 2, 1.0)
        assert not np.allclose(a, b)


class TestNoiseDisplacement:
    """Noise sampled on the unit cylinder."""

    def test_continuous_across_seam(self):
        y = np.linspace(-7.5, 7.5, 20)
        a = noise.noise_displacement(0.0, y, 15.0, 1234, 0.5, 0.5)
        b = noise.noise_displacement(2.0 * np.pi, y, 15.0, 1234, 0.5, 0.5)
        np.testing.assert_allclose(a, b, atol=1e-9)

    def test_bounded_by_strength(self):
        angle, y = np.meshgrid(np.linspace(0, 2 * np.pi, 64), np.linspace(-7.5, 7.5, 61))
        d = noise.noise_displacement(angle, y, 15.0, 1234, 0.5, 0.8)
        assert np.abs(d).max() <= 0.8 + 1e-12

    def test_seed_repeatable(self):
        angle = np.linspace(0, 2 * np.pi, 64)
        a = noise.noise_displacement(angle, 1.0, 15.0, 99, 0.5, 0.5)
        b = noise.noise_displacement(angle, 1.0, 15.0, 99, 0.5, 0.5)
        np.testing.assert_array_equal(a, b)
