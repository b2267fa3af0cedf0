"""
Deterministic noise and displacement fields.

Every function is pure and vectorized over numpy arrays. The hash is a
closed-form trigonometric formula so a given seed always yields the same
surface.
"""

import numpy as np


def hash3(ix, iy, iz, seed: float) -> np.ndarray:
    """Trigonometric lattice hash in [0, 1)."""
    h = np.sin(
        np.asarray(ix) * 127.1 + np.asarray(iy) * 311.7 + np.asarray(iz) * 74.7 + seed * 53.3
    ) * 43758.5453
    return h - np.floor(h)


def _smooth(t: np.ndarray) -> np.ndarray:
    return t * t * (3.0 - 2.0 * t)


def value_noise3(x, y, z, seed: float) -> np.ndarray:
    """
    Smoothly interpolated lattice noise.

    Args:
        x, y, z: Sample coordinates (broadcastable arrays)
        seed: Noise seed

    Returns:
        Noise values in [-1, 1]
    """
    x, y, z = np.broadcast_arrays(
        np.asarray(x, dtype=np.float64),
        np.asarray(y, dtype=np.float64),
        np.asarray(z, dtype=np.float64)
    )
    x0, y0, z0 = np.floor(x), np.floor(y), np.floor(z)
    fx, fy, fz = _smooth(x - x0), _smooth(y - y0), _smooth(z - z0)

    def corner(dx, dy, dz):
        return hash3(x0 + dx, y0 + dy, z0 + dz, seed)

    # Trilinear blend of the 8 lattice corners
    x00 = corner(0, 0, 0) * (1 - fx) + corner(1, 0, 0) * fx
    x10 = corner(0, 1, 0) * (1 - fx) + corner(1, 1, 0) * fx
    x01 = corner(0, 0, 1) * (1 - fx) + corner(1, 0, 1) * fx
    x11 = corner(0, 1, 1) * (1 - fx) + corner(1, 1, 1) * fx
    y0v = x00 * (1 - fy) + x10 * fy
    y1v = x01 * (1 - fy) + x11 * fy
    return 2.0 * (y0v * (1 - fz) + y1v * fz) - 1.0


def fractal_noise3(x, y, z, seed: float, octaves: int = 2, ridged: bool = False) -> np.ndarray:
    """
    Weighted octave sum of value noise, normalized to [-1, 1].

    Octave k is sampled at frequency 2^k with weight 0.5^k. With `ridged`,
    each octave is folded to 1 - 2|n|, giving cell-like creases.
    """
    total = 0.0
    norm = 0.0
    for k in range(octaves):
        freq = 2.0 ** k
        weight = 0.5 ** k
        n = value_noise3(x * freq, y * freq, z * freq, seed + 17.0 * k)
        if ridged:
            n = 1.0 - 2.0 * np.abs(n)
        total = total + weight * n
        norm += weight
    return total / norm


def rib_displacement(angle, rib_count: int, rib_depth: float) -> np.ndarray:
    return rib_depth * np.sin(np.asarray(angle) * rib_count)


def wave_displacement(angle, norm_y, amplitude: float, frequency: float) -> np.ndarray:
    return amplitude * np.sin(np.asarray(angle) * frequency + np.asarray(norm_y) * 2.0 * np.pi)


def origami_displacement(angle, fold_count: int, fold_depth: float) -> np.ndarray:
    """0 on even fold indices, -fold_depth on odd ones."""
    angle = np.mod(np.asarray(angle), 2.0 * np.pi)
    fold_index = np.round(angle / (2.0 * np.pi) * fold_count * 2).astype(np.int64)
    return np.where(fold_index % 2 == 0, 0.0, -fold_depth)


def voronoi_displacement(angle, norm_y, cell_count: int, seed: float, scale: float) -> np.ndarray:
    """Two seeded sine/cosine fields approximating cell boundaries."""
    angle = np.asarray(angle)
    norm_y = np.asarray(norm_y)
    field = (
        np.sin(angle * cell_count) * np.cos(norm_y * cell_count * 0.5)
        + np.sin(angle * cell_count * 0.5 + seed) * np.cos(norm_y * cell_count)
    )
    return scale * field


def noise_displacement(
    angle,
    y,
    height: float,
    seed: float,
    noise_scale: float,
    noise_strength: float,
    ridged: bool = False
) -> np.ndarray:
    """
    Two-octave noise sampled on the unit cylinder (cos, height, sin).

    Sampling on (cos, sin) keeps the field continuous across the seam.
    """
    angle = np.asarray(angle)
    s = 4.0 * noise_scale
    n = fractal_noise3(
        np.cos(angle) * s,
        np.asarray(y) / height * s * 2.0,
        np.sin(angle) * s,
        seed,
        octaves=2,
        ridged=ridged
    )
    return noise_strength * n
