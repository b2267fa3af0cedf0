"""
Profile builder.

A profile is the closed (radius, height) loop swept around the Y axis:
the outer wall from bottom to top, then the inner wall (offset inward by the
wall thickness) from top back down to the bottom.
"""

import numpy as np
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..common.config import SilhouetteType, EngineConfig, DEFAULT_CONFIG
from ..common.errors import require, InvalidParameter

if TYPE_CHECKING:
    from .params import ShapeParameters


@dataclass(frozen=True)
class SilhouetteProfile:
    """Closed profile loop: outer pass then reversed inner pass."""
    radii: np.ndarray    # (2 * (steps + 1),)
    heights: np.ndarray  # (2 * (steps + 1),)
    steps: int

    @property
    def n_points(self) -> int:
        return len(self.radii)

    @property
    def outer_radii(self) -> np.ndarray:
        return self.radii[:self.steps + 1]

    @property
    def inner_radii(self) -> np.ndarray:
        """Inner radii in ascending height order."""
        return self.radii[self.steps + 1:][::-1]

    @property
    def outer_heights(self) -> np.ndarray:
        return self.heights[:self.steps + 1]


def silhouette_factor(silhouette: SilhouetteType, t) -> np.ndarray:
    """
    Radius multiplier at normalized height t in [0, 1].
    """
    t = np.asarray(t, dtype=np.float64)
    s = np.sin(t * np.pi)
    if silhouette is SilhouetteType.STRAIGHT:
        return np.ones_like(t)
    if silhouette is SilhouetteType.HOURGLASS:
        return 1.0 - 0.3 * s ** 2
    if silhouette is SilhouetteType.BELL:
        return 1.0 + 0.4 * (1.0 - t) ** 2
    if silhouette is SilhouetteType.CONVEX:
        return 1.0 + 0.2 * s
    if silhouette is SilhouetteType.CONCAVE:
        return 1.0 - 0.2 * s
    raise InvalidParameter(f"Unhandled silhouette: {silhouette!r}")


def modulated_radius(params: "ShapeParameters", t) -> np.ndarray:
    """Unclamped outer radius at normalized height t."""
    t = np.asarray(t, dtype=np.float64)
    linear = params.top_radius + (params.bottom_radius - params.top_radius) * t
    return linear * silhouette_factor(params.silhouette, t)


def silhouette_radius(
    params: "ShapeParameters",
    y,
    config: EngineConfig = DEFAULT_CONFIG
) -> np.ndarray:
    """
    Outer wall radius at model height y (in [-H/2, H/2]).
    """
    t = (np.asarray(y, dtype=np.float64) + params.height / 2.0) / params.height
    return np.maximum(modulated_radius(params, np.clip(t, 0.0, 1.0)), config.radius_floor)


def build_profile(
    params: "ShapeParameters",
    steps: int,
    config: EngineConfig = DEFAULT_CONFIG,
    radius_offset: float = 0.0,
    silhouette: SilhouetteType = None
) -> SilhouetteProfile:
    """
    Build the closed silhouette loop for a revolution sweep.

    Args:
        params: Shape parameters (height, radii, thickness, silhouette)
        steps: Number of height intervals (>= 2)
        config: Engine constants (radius floors)
        radius_offset: Shrink the whole profile inward (cores, inner shells)
        silhouette: Override the silhouette (e.g. straight for frustums)

    Returns:
        SilhouetteProfile with 2 * (steps + 1) points
    """
    require(steps >= 2, f"Profile steps must be >= 2, got {steps}")

    t = np.linspace(0.0, 1.0, steps + 1)
    y = -params.height / 2.0 + params.height * t
    linear = params.top_radius + (params.bottom_radius - params.top_radius) * t
    factor = silhouette_factor(silhouette or params.silhouette, t)

    outer = np.maximum(linear * factor - radius_offset, config.radius_floor)
    inner = np.maximum(outer - params.thickness, config.inner_radius_floor)

    return SilhouetteProfile(
        radii=np.concatenate([outer, inner[::-1]]),
        heights=np.concatenate([y, y[::-1]]),
        steps=steps
    )
