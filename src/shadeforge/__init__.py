"""
shadeforge - parametric lampshade and lithophane mesh generation.

Two generators:
- generate_shape_mesh: revolution shells with procedural surfaces, ribs,
  fitters and pattern units
- generate_relief_mesh: image luminance extruded into a flat, arced or
  cylindrical relief

Usage:
    shadeforge shape --params lampshade.json --output outputs/
    shadeforge relief --image photo.png --params relief.json
"""

import logging

from .common import (
    Mesh, EngineConfig, DEFAULT_CONFIG,
    ShapeType, SilhouetteType, FitterType, PatternType, CarrierType,
    MeshGenerationError, InvalidParameter, UnsupportedShapeType, UnsupportedCarrierType,
)
from .shape import ShapeParameters, generate_shape_mesh
from .relief import LithophaneParameters, ImageSample, generate_relief_mesh

__version__ = "1.0.0"

# Library: never configure handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Mesh", "EngineConfig", "DEFAULT_CONFIG",
    "ShapeType", "SilhouetteType", "FitterType", "PatternType", "CarrierType",
    "MeshGenerationError", "InvalidParameter", "UnsupportedShapeType", "UnsupportedCarrierType",
    "ShapeParameters", "generate_shape_mesh",
    "LithophaneParameters", "ImageSample", "generate_relief_mesh",
]
