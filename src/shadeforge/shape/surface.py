"""
Wall surfaces of a built body.

Attachments anchor to the wall the strategy actually produced, not to the
undisplaced silhouette. A WallSurface is read back from the vertex radii of
a revolution sweep, so it sees displacement, polygon faces and shrunken
cores exactly as they were meshed.
"""

import numpy as np
from dataclasses import dataclass, replace
from typing import Optional

from ..common.mesh import Mesh


@dataclass(frozen=True)
class WallSurface:
    """
    Outer and inner wall radius of a swept shell.

    `outer` and `inner` hold one row per sweep column and one entry per
    profile height. Between columns the wall is the straight chord the
    sweep triangulates; between heights it is interpolated linearly.
    """
    heights: np.ndarray  # (rows,) ascending
    outer: np.ndarray    # (columns, rows)
    inner: np.ndarray    # (columns, rows)
    twist: float = 0.0   # radians the column grid turns from bottom to top

    @classmethod
    def from_sweep(cls, mesh: Mesh, steps: int, columns: int, twist: float = 0.0) -> "WallSurface":
        """
        Read the wall of a revolution sweep.

        Only the first `columns * 2 * (steps + 1)` vertices are read, so a
        merged body whose first part is the sweep works too.
        """
        n_points = 2 * (steps + 1)
        vertices = mesh.vertices[:columns * n_points].reshape(columns, n_points, 3)
        radius = np.hypot(vertices[..., 0], vertices[..., 2])
        return cls(
            heights=vertices[0, :steps + 1, 1].copy(),
            outer=radius[:, :steps + 1],
            inner=radius[:, steps + 1:][:, ::-1],
            twist=twist
        )

    def with_inner(self, other: "WallSurface") -> "WallSurface":
        """This outer wall paired with another shell's inner wall."""
        return replace(self, inner=other.inner)

    @property
    def columns(self) -> int:
        return self.outer.shape[0]

    def outer_radius(self, angle, y) -> np.ndarray:
        return self._radius(self.outer, angle, y)

    def inner_radius(self, angle, y) -> np.ndarray:
        return self._radius(self.inner, angle, y)

    def _radius(self, table: np.ndarray, angle, y) -> np.ndarray:
        angle, y = np.broadcast_arrays(
            np.asarray(angle, dtype=np.float64), np.asarray(y, dtype=np.float64)
        )
        step = 2.0 * np.pi / self.columns

        span = self.heights[-1] - self.heights[0]
        norm_y = np.clip((y - self.heights[0]) / span, 0.0, 1.0)
        local = np.mod(angle - norm_y * self.twist, 2.0 * np.pi)

        j0 = np.floor(local / step).astype(np.int64) % self.columns
        j1 = (j0 + 1) % self.columns
        phi = np.clip(local - j0 * step, 0.0, step)

        r0 = self._column_radius(table, j0, y)
        r1 = self._column_radius(table, j1, y)
        # Polar equation of the chord between the two column points
        return r0 * r1 * np.sin(step) / (r0 * np.sin(phi) + r1 * np.sin(step - phi))

    def _column_radius(self, table: np.ndarray, column: np.ndarray, y: np.ndarray) -> np.ndarray:
        rows = len(self.heights)
        k = np.clip(np.searchsorted(self.heights, y, side="right") - 1, 0, rows - 2)
        h0, h1 = self.heights[k], self.heights[k + 1]
        w = np.clip((y - h0) / (h1 - h0), 0.0, 1.0)
        return table[column, k] * (1.0 - w) + table[column, k + 1] * w


@dataclass
class Body:
    """
    A strategy's output: the mesh plus the wall attachments anchor to.

    `wall` is None for bodies without a continuous wall (lattice); those
    expose `strut_angles` instead, the strut centerline angles at a height.
    """
    mesh: Mesh
    wall: Optional[WallSurface] = None
    strut_angle0: Optional[np.ndarray] = None
    strut_twist: float = 0.0
    height: float = 0.0

    def strut_angles(self, y: float) -> np.ndarray:
        """Centerline angles of every lattice strut at height y."""
        t = np.clip((y + self.height / 2.0) / self.height, 0.0, 1.0)
        return np.concatenate([
            self.strut_angle0 + t * self.strut_twist,
            self.strut_angle0 - t * self.strut_twist,
        ])
