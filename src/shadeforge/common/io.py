"""
I/O collaborators around the generators.

Image decoding (scikit-image) before a relief build, and mesh export
(trimesh) with a JSON metadata sidecar afterwards. The generators themselves
never touch the filesystem.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .config import MeshMetadata
from .mesh import Mesh
from .mesh_ops import compute_mesh_stats

logger = logging.getLogger(__name__)

try:
    import trimesh
    TRIMESH_AVAILABLE = True
except ImportError:
    TRIMESH_AVAILABLE = False
    logger.warning("trimesh not available")

try:
    from skimage import io as skio
    SKIMAGE_AVAILABLE = True
except ImportError:
    SKIMAGE_AVAILABLE = False
    logger.warning("scikit-image not available")


def load_image(path: Path) -> "ImageSample":
    """
    Decode an image file into an RGBA ImageSample.

    Args:
        path: PNG/JPEG/... file

    Returns:
        ImageSample (grayscale and RGB inputs are expanded to RGBA)
    """
    if not SKIMAGE_AVAILABLE:
        raise ImportError("scikit-image required for loading images")

    from ..relief.params import ImageSample

    path = Path(path)
    array = skio.imread(str(path))
    image = ImageSample.from_array(array)
    logger.info(f"Loaded image {path} ({image.width}x{image.height})")
    return image


def load_params(path: Path) -> Dict[str, Any]:
    """Load a flat parameter mapping from JSON."""
    with open(path) as f:
        return json.load(f)


def build_metadata(
    mesh: Mesh,
    kind: str,
    variant: str,
    generation_params: Optional[Dict[str, Any]] = None
) -> MeshMetadata:
    """Collect counts and watertightness for the metadata sidecar."""
    stats = compute_mesh_stats(mesh)
    return MeshMetadata(
        kind=kind,
        variant=variant,
        n_triangles=mesh.n_faces,
        n_vertices=mesh.n_vertices,
        is_watertight=stats["is_watertight"],
        volume_cm3=stats["volume"],
        generation_params=generation_params or {}
    )


def save_mesh(
    mesh: Mesh,
    path: Path,
    metadata: MeshMetadata
) -> None:
    """
    Save mesh via trimesh (format from the suffix) with metadata sidecar.

    Args:
        mesh: Mesh to export
        path: Output path (.stl, .obj, .ply, .glb ...)
        metadata: MeshMetadata object (will be saved as .json sidecar)
    """
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for saving meshes")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Save mesh
    mesh.to_trimesh().export(str(path))
    logger.info(f"Saved mesh: {path} ({metadata.n_vertices} verts, {metadata.n_triangles} tris)")

    # Save metadata sidecar
    meta_path = path.with_suffix('.json')
    metadata.save(meta_path)
    logger.info(f"Saved metadata: {meta_path}")


def load_mesh(path: Path) -> Tuple[Mesh, Optional[MeshMetadata]]:
    """
    Load mesh and its metadata sidecar.

    Args:
        path: Path to mesh file

    Returns:
        Tuple of (mesh, metadata) - metadata may be None if not found
    """
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for loading meshes")

    path = Path(path)
    tm = trimesh.load(str(path), force='mesh', process=False)
    mesh = Mesh.from_trimesh(tm)

    meta_path = path.with_suffix('.json')
    metadata = None
    if meta_path.exists():
        with open(meta_path) as f:
            metadata = MeshMetadata.from_dict(json.load(f))

    return mesh, metadata
