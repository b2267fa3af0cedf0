"""
Image pre-processing and sampling for reliefs.
"""

import numpy as np
import logging

logger = logging.getLogger(__name__)

try:
    from scipy.ndimage import uniform_filter, map_coordinates
    SCIPY_AVAILABLE = True
except ImportError:
    SCIPY_AVAILABLE = False
    logger.warning("scipy not available")

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def apply_smoothing(pixels: np.ndarray, radius: float, passes: int = 2) -> np.ndarray:
    """
    Box-blur the RGB channels of an RGBA image.

    Args:
        pixels: (H, W, 4) uint8 image (not modified)
        radius: Blur radius; the kernel is 2 * floor(radius) + 1 wide
        passes: Number of box passes

    Returns:
        Smoothed copy, alpha untouched
    """
    if not SCIPY_AVAILABLE:
        raise ImportError("scipy required for smoothing")

    smoothed = pixels.copy()
    r = int(np.floor(radius))
    if r <= 0:
        return smoothed

    rgb = smoothed[:, :, :3].astype(np.float64)
    for _ in range(passes):
        # Edge pixels are clamped, not wrapped
        rgb = uniform_filter(rgb, size=(2 * r + 1, 2 * r + 1, 1), mode='nearest')
        rgb = np.clip(np.rint(rgb), 0, 255)
    smoothed[:, :, :3] = rgb.astype(np.uint8)

    logger.debug(f"Smoothed {pixels.shape[1]}x{pixels.shape[0]} image, radius {r}")
    return smoothed


def contrast_factor(contrast: float) -> float:
    return 259.0 * (contrast + 255.0) / (255.0 * (259.0 - contrast))


def adjust_channels(values: np.ndarray, brightness: float, contrast: float) -> np.ndarray:
    """clamp(0, 255, factor * (value + brightness - 128) + 128)"""
    factor = contrast_factor(contrast)
    return np.clip(factor * (np.asarray(values, dtype=np.float64) + brightness - 128.0) + 128.0, 0.0, 255.0)


def depth_fraction_map(
    pixels: np.ndarray,
    brightness: float,
    contrast: float,
    inverted: bool
) -> np.ndarray:
    """
    Per-texel depth fraction in [0, 1].

    Luminance (of the adjusted channels) is inverted unless `inverted` is
    set, so dark texels become thick.
    """
    rgb = adjust_channels(pixels[:, :, :3], brightness, contrast)
    luminance = rgb @ LUMA_WEIGHTS / 255.0
    fraction = luminance if inverted else 1.0 - luminance
    return np.clip(fraction, 0.0, 1.0)


def sample_bilinear(values: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Bilinearly sample a (H, W) map at normalized coordinates.

    u runs left to right; v runs bottom to top (v = 1 is image row 0).
    """
    if not SCIPY_AVAILABLE:
        raise ImportError("scipy required for image sampling")

    h, w = values.shape
    cols = np.asarray(u) * (w - 1)
    rows = (1.0 - np.asarray(v)) * (h - 1)
    return map_coordinates(values, [rows, cols], order=1, mode='nearest')
