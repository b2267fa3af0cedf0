"""
Common modules shared by the shape and relief generators.

Unit Model:
- 1 model unit = 1 cm
- Fitter diameters in mm
"""

from .config import (
    EngineConfig, DEFAULT_CONFIG, MeshMetadata,
    ShapeType, SilhouetteType, FitterType, PatternType, CarrierType,
)
from .errors import MeshGenerationError, InvalidParameter, UnsupportedShapeType, UnsupportedCarrierType
from .mesh import Mesh
from .mesh_ops import merge_meshes, compute_mesh_stats, find_boundary_edges, estimate_print, PrintEstimate

__all__ = [
    'EngineConfig', 'DEFAULT_CONFIG', 'MeshMetadata',
    'ShapeType', 'SilhouetteType', 'FitterType', 'PatternType', 'CarrierType',
    'MeshGenerationError', 'InvalidParameter', 'UnsupportedShapeType', 'UnsupportedCarrierType',
    'Mesh',
    'merge_meshes', 'compute_mesh_stats', 'find_boundary_edges', 'estimate_print', 'PrintEstimate',
]
