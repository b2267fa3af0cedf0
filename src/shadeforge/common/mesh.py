"""
Triangle mesh container.

Vertices are (N, 3) float64 positions, faces are (M, 3) int64 indices with
counter-clockwise winding seen from outside the solid.
"""

import numpy as np
from typing import Optional
from dataclasses import dataclass

from .errors import MeshGenerationError

try:
    import trimesh
    TRIMESH_AVAILABLE = True
except ImportError:
    TRIMESH_AVAILABLE = False


@dataclass
class Mesh:
    """A 3D triangular mesh."""
    vertices: np.ndarray  # (N, 3) array of vertex positions
    faces: np.ndarray     # (M, 3) array of triangle indices
    normals: Optional[np.ndarray] = None  # (N, 3) vertex normals

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        self.faces = np.asarray(self.faces, dtype=np.int64).reshape(-1, 3)

    @classmethod
    def empty(cls) -> "Mesh":
        return cls(np.empty((0, 3)), np.empty((0, 3), dtype=np.int64))

    @classmethod
    def from_trimesh(cls, tm: "trimesh.Trimesh") -> "Mesh":
        """Copy the buffers out of a trimesh."""
        return cls(vertices=np.array(tm.vertices), faces=np.array(tm.faces))

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    @property
    def indices(self) -> np.ndarray:
        """Flat triangle index list (3 per triangle)."""
        return self.faces.reshape(-1)

    def copy(self) -> "Mesh":
        return Mesh(
            vertices=self.vertices.copy(),
            faces=self.faces.copy(),
            normals=None if self.normals is None else self.normals.copy()
        )

    def compute_normals(self) -> None:
        """Compute vertex normals by averaging adjacent (area-weighted) face normals."""
        self.normals = np.zeros_like(self.vertices)
        if self.n_faces == 0:
            return

        tris = self.vertices[self.faces]
        face_normals = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])

        # Accumulate to vertices
        for corner in range(3):
            np.add.at(self.normals, self.faces[:, corner], face_normals)

        # Normalize
        norms = np.linalg.norm(self.normals, axis=1, keepdims=True)
        norms = np.maximum(norms, 1e-10)  # Avoid division by zero
        self.normals = self.normals / norms

    def signed_volume(self) -> float:
        """Signed enclosed volume (positive for outward winding)."""
        if self.n_faces == 0:
            return 0.0
        tris = self.vertices[self.faces]
        return float(np.einsum(
            'ij,ij->i', tris[:, 0], np.cross(tris[:, 1], tris[:, 2])
        ).sum() / 6.0)

    def orient_outward(self) -> "Mesh":
        """Flip every face if the winding encloses negative volume."""
        if self.signed_volume() < 0:
            self.faces = self.faces[:, ::-1].copy()
        return self

    def validate(self) -> None:
        """
        Check topological consistency.

        Raises:
            MeshGenerationError: if any index is out of range or a coordinate is not finite
        """
        if self.faces.size and (self.faces.min() < 0 or self.faces.max() >= self.n_vertices):
            raise MeshGenerationError(
                f"Face index out of range for {self.n_vertices} vertices"
            )
        if self.indices.size != 3 * self.n_faces:
            raise MeshGenerationError("Index count is not 3 x triangle count")
        if not np.all(np.isfinite(self.vertices)):
            raise MeshGenerationError("Mesh contains non-finite coordinates")

    def to_trimesh(self) -> "trimesh.Trimesh":
        """Wrap as an unprocessed trimesh (no vertex merging)."""
        if not TRIMESH_AVAILABLE:
            raise ImportError("trimesh required for mesh conversion")
        return trimesh.Trimesh(
            vertices=self.vertices,
            faces=self.faces,
            vertex_normals=self.normals,
            process=False
        )
