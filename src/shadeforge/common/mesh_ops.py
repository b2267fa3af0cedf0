"""
Mesh operation utilities.

Common mesh operations: merging, primitives (lofted tubes and slabs,
trimesh rings and beams), statistics and print estimation.
"""

import numpy as np
from typing import Dict, Any, List, Optional
from dataclasses import dataclass
import logging

from .mesh import Mesh
from .config import EngineConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)

try:
    import trimesh
    TRIMESH_AVAILABLE = True
except ImportError:
    TRIMESH_AVAILABLE = False


def merge_meshes(meshes: List[Mesh]) -> Mesh:
    """
    Merge multiple meshes into one.

    This is a topological merge (buffer concatenation), not a boolean union:
    intersecting parts stay intersecting and rely on physical overlap to print
    as one body. Vertex order follows the input order.

    Args:
        meshes: Ordered list of meshes

    Returns:
        Combined mesh with recomputed normals
    """
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for mesh merging")

    meshes = [m for m in meshes if m.n_vertices > 0]
    if not meshes:
        return Mesh.empty()

    combined = Mesh.from_trimesh(trimesh.util.concatenate([m.to_trimesh() for m in meshes]))
    combined.compute_normals()
    logger.debug(f"Merged {len(meshes)} meshes: {combined.n_vertices} verts, {combined.n_faces} faces")

    return combined


def loft_rings(rings: np.ndarray, cap: bool = True) -> Mesh:
    """
    Skin a stack of closed rings into a solid.

    Args:
        rings: (K, M, 3) array; ring k is a closed loop of M points
        cap: Close the open ends with a fan around each end ring's centroid

    Returns:
        Mesh wound to enclose positive volume
    """
    n_rings, n_seg, _ = rings.shape
    vertices = rings.reshape(-1, 3)

    faces = []
    for i in range(n_rings - 1):
        for j in range(n_seg):
            v0 = i * n_seg + j
            v1 = i * n_seg + (j + 1) % n_seg
            v2 = (i + 1) * n_seg + j
            v3 = (i + 1) * n_seg + (j + 1) % n_seg

            faces.append([v0, v1, v2])
            faces.append([v1, v3, v2])

    if cap:
        centers = []
        for ring_idx, flip in ((0, True), (n_rings - 1, False)):
            center_idx = len(vertices) + len(centers)
            centers.append(rings[ring_idx].mean(axis=0))
            base = ring_idx * n_seg
            for j in range(n_seg):
                a = base + j
                b = base + (j + 1) % n_seg
                faces.append([center_idx, b, a] if flip else [center_idx, a, b])
        vertices = np.vstack([vertices, np.array(centers)])

    mesh = Mesh(vertices=vertices, faces=np.array(faces, dtype=np.int64))
    return mesh.orient_outward()


def create_tube_mesh(
    centerline: np.ndarray,
    radius: float,
    segments: int = 8
) -> Mesh:
    """
    Create a tube mesh along a centerline.

    Args:
        centerline: Nx3 array of points
        radius: Tube radius
        segments: Number of segments around tube

    Returns:
        End-capped tube mesh
    """
    centerline = np.asarray(centerline, dtype=np.float64)
    n_points = len(centerline)
    if n_points < 2:
        return Mesh.empty()

    angles = np.linspace(0, 2 * np.pi, segments, endpoint=False)
    rings = np.empty((n_points, segments, 3))

    for i, point in enumerate(centerline):
        # Compute tangent
        if i == 0:
            tangent = centerline[1] - centerline[0]
        elif i == n_points - 1:
            tangent = centerline[-1] - centerline[-2]
        else:
            tangent = centerline[i + 1] - centerline[i - 1]

        tangent = tangent / (np.linalg.norm(tangent) + 1e-10)

        # Find perpendicular vectors
        if abs(tangent[1]) < 0.9:
            perp1 = np.cross(tangent, [0, 1, 0])
        else:
            perp1 = np.cross(tangent, [1, 0, 0])
        perp1 = perp1 / (np.linalg.norm(perp1) + 1e-10)
        perp2 = np.cross(tangent, perp1)

        # Generate ring vertices
        rings[i] = point + radius * (
            np.cos(angles)[:, None] * perp1 + np.sin(angles)[:, None] * perp2
        )

    return loft_rings(rings)


def create_ring_mesh(
    radius: float,
    y: float,
    tube_radius: float,
    segments: int = 32,
    tube_segments: int = 8
) -> Mesh:
    """Horizontal torus centered on the Y axis at height `y`."""
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for ring creation")

    # trimesh builds the torus around Z; turn Z onto Y
    transform = trimesh.transformations.rotation_matrix(-np.pi / 2.0, [1.0, 0.0, 0.0])
    transform[1, 3] = y
    torus = trimesh.creation.torus(
        major_radius=radius,
        minor_radius=tube_radius,
        major_sections=segments,
        minor_sections=tube_segments,
        transform=transform
    )
    return Mesh.from_trimesh(torus)


def create_beam_mesh(
    start: np.ndarray,
    end: np.ndarray,
    width: float,
    height: float,
    up: Optional[np.ndarray] = None
) -> Mesh:
    """
    Rectangular bar from `start` to `end`.

    Args:
        width: Extent perpendicular to both the bar and `up`
        height: Extent along `up` (defaults to +Y, or +X for vertical bars)
    """
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for beam creation")

    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)
    axis = end - start
    length = np.linalg.norm(axis)
    axis = axis / (length + 1e-10)

    if up is None:
        up = np.array([0.0, 1.0, 0.0]) if abs(axis[1]) < 0.9 else np.array([1.0, 0.0, 0.0])
    side = np.cross(axis, up)
    side = side / (np.linalg.norm(side) + 1e-10)
    up = np.cross(axis, side)

    # Right-handed frame: box x -> side, y -> up, z -> axis
    transform = np.eye(4)
    transform[:3, 0] = side
    transform[:3, 1] = up
    transform[:3, 2] = axis
    transform[:3, 3] = (start + end) / 2.0

    box = trimesh.creation.box(extents=[width, height, length], transform=transform)
    return Mesh.from_trimesh(box)


def create_radial_slab_mesh(
    angle: float,
    heights: np.ndarray,
    inner_radii: np.ndarray,
    outer_radii: np.ndarray,
    width: float
) -> Mesh:
    """
    Thin vertical slab in the radial plane at `angle`.

    The slab's inner and outer edges follow `inner_radii` / `outer_radii`
    sampled at `heights`, so it hugs a silhouette of varying radius.
    """
    radial = np.array([np.cos(angle), 0.0, np.sin(angle)])
    tangent = np.array([-np.sin(angle), 0.0, np.cos(angle)])
    hw = width / 2.0

    rings = np.empty((len(heights), 4, 3))
    for k, (y, ri, ro) in enumerate(zip(heights, inner_radii, outer_radii)):
        base = np.array([0.0, y, 0.0])
        rings[k] = [
            base + ri * radial - hw * tangent,
            base + ri * radial + hw * tangent,
            base + ro * radial + hw * tangent,
            base + ro * radial - hw * tangent,
        ]
    return loft_rings(rings)


def find_boundary_edges(mesh: Mesh) -> np.ndarray:
    """
    Edges used by exactly one triangle.

    Returns:
        (K, 2) array of sorted vertex index pairs
    """
    if mesh.n_faces == 0:
        return np.empty((0, 2), dtype=np.int64)
    edges = np.concatenate([mesh.faces[:, [0, 1]], mesh.faces[:, [1, 2]], mesh.faces[:, [2, 0]]])
    edges = np.sort(edges, axis=1)
    unique, counts = np.unique(edges, axis=0, return_counts=True)
    return unique[counts == 1]


def compute_mesh_stats(mesh: Mesh) -> Dict[str, Any]:
    """
    Compute comprehensive mesh statistics.

    Args:
        mesh: Mesh to inspect

    Returns:
        Dictionary of mesh statistics
    """
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for mesh statistics")

    tm = mesh.to_trimesh()
    bounds = tm.bounds
    extents = tm.extents

    return {
        "n_vertices": len(tm.vertices),
        "n_faces": len(tm.faces),
        "bounds": {
            "min": bounds[0].tolist(),
            "max": bounds[1].tolist()
        },
        "extents": extents.tolist(),
        "max_extent": float(max(extents)),
        "volume": float(tm.volume) if tm.is_watertight else None,
        "surface_area": float(tm.area),
        "is_watertight": bool(tm.is_watertight),
        "is_winding_consistent": bool(tm.is_winding_consistent),
        "euler_number": int(tm.euler_number)
    }


@dataclass
class PrintEstimate:
    """Rough filament and time estimate for a printed mesh."""
    volume_cm3: float
    weight_g: float
    hours: int
    minutes: int
    cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "volume_cm3": round(self.volume_cm3, 2),
            "weight_g": round(self.weight_g, 1),
            "time": f"{self.hours}h {self.minutes}m",
            "cost": round(self.cost, 2)
        }


def estimate_print(mesh: Mesh, config: EngineConfig = DEFAULT_CONFIG) -> PrintEstimate:
    """
    Estimate filament weight, print time and material cost.

    Uses the enclosed volume (1 unit = 1 cm). Overlapping merged parts are
    counted twice, so the estimate errs on the heavy side.
    """
    volume = abs(mesh.signed_volume())
    weight = volume * config.material_density_g_cm3
    total_hours = weight / config.grams_per_hour
    hours = int(total_hours)
    minutes = int((total_hours - hours) * 60)

    return PrintEstimate(
        volume_cm3=volume,
        weight_g=weight,
        hours=hours,
        minutes=minutes,
        cost=weight * config.cost_per_gram
    )
