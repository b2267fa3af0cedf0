"""
Revolution mesh builder.

Sweeps a closed profile loop through a full turn. Column j sits at angle
2*pi*j/segments; there is no duplicated seam column, so the result is a
closed torus-topology shell with n_points * segments vertices.
"""

import numpy as np

from ..common.mesh import Mesh
from ..common.errors import require
from .profile import SilhouetteProfile


def revolve_profile(profile: SilhouetteProfile, segments: int) -> Mesh:
    """
    Sweep `profile` around the Y axis.

    Args:
        profile: Closed (radius, height) loop
        segments: Angular segment count (>= 3)

    Returns:
        Mesh with outward winding; vertex (k, j) is at index j * n_points + k
    """
    require(segments >= 3, f"Segment count must be >= 3, got {segments}")

    n_points = profile.n_points
    theta = np.linspace(0.0, 2.0 * np.pi, segments, endpoint=False)

    # (segments, n_points) grids
    r = np.broadcast_to(profile.radii, (segments, n_points))
    y = np.broadcast_to(profile.heights, (segments, n_points))
    cos_t = np.cos(theta)[:, None]
    sin_t = np.sin(theta)[:, None]

    vertices = np.stack([r * cos_t, y, r * sin_t], axis=-1).reshape(-1, 3)

    # Quad (k, j) -> (k+1, j+1), wrapping in both directions
    k = np.arange(n_points)
    j = np.arange(segments)
    kk, jj = np.meshgrid(k, j)
    a = jj * n_points + kk
    b = jj * n_points + (kk + 1) % n_points
    c = ((jj + 1) % segments) * n_points + kk
    d = ((jj + 1) % segments) * n_points + (kk + 1) % n_points

    faces = np.concatenate([
        np.stack([a, b, c], axis=-1).reshape(-1, 3),
        np.stack([b, d, c], axis=-1).reshape(-1, 3)
    ])

    return Mesh(vertices=vertices, faces=faces)


def vertex_cylindrical(mesh: Mesh):
    """
    Per-vertex (angle, radius, y) for post-hoc radial displacement.

    Angles are in [0, 2*pi).
    """
    x, y, z = mesh.vertices[:, 0], mesh.vertices[:, 1], mesh.vertices[:, 2]
    angle = np.mod(np.arctan2(z, x), 2.0 * np.pi)
    radius = np.hypot(x, z)
    return angle, radius, y


def displace_radially(mesh: Mesh, displacement: np.ndarray, min_radius: float) -> Mesh:
    """
    Move every vertex along its radial direction, in place.

    x/z are scaled by (r + d) / r; the new radius is floored at `min_radius`.
    Topology is untouched.
    """
    _, radius, _ = vertex_cylindrical(mesh)
    new_radius = np.maximum(radius + displacement, min_radius)
    scale = new_radius / np.maximum(radius, 1e-12)
    mesh.vertices[:, 0] *= scale
    mesh.vertices[:, 2] *= scale
    return mesh
