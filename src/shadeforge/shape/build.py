"""
Lampshade generation: parameters -> body -> attachments -> merged mesh.

Pipeline:
1. Validate every parameter (nothing is allocated on bad input)
2. Build the body with the shape type's strategy
3. Add internal ribs, fitter and pattern units if requested, anchored to the
   body's actual wall
4. Concatenate into one mesh and recompute vertex normals
"""

import logging

from ..common.config import FitterType, PatternType, EngineConfig, DEFAULT_CONFIG
from ..common.mesh import Mesh
from ..common.mesh_ops import merge_meshes
from .params import ShapeParameters, RibSpec, FitterSpec, PatternSpec
from .strategies import build_body
from .attachments import build_internal_ribs, build_fitter, build_pattern

logger = logging.getLogger(__name__)


def generate_shape_mesh(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Mesh:
    """
    Generate a printable lampshade mesh.

    Args:
        params: Shape description
        config: Engine constants

    Returns:
        Merged mesh with vertex normals

    Raises:
        InvalidParameter: on out-of-range parameters
        UnsupportedShapeType: on an unknown shape type
    """
    params.validate(config)

    body = build_body(params, config)
    parts = [body.mesh]

    if params.internal_ribs > 0:
        parts.append(build_internal_ribs(params, RibSpec.from_params(params), body, config))

    if params.fitter_type is not FitterType.NONE:
        parts.append(build_fitter(params, FitterSpec.from_params(params), body, config))

    if params.pattern_type is not PatternType.NONE:
        parts.append(build_pattern(params, PatternSpec.from_params(params), body, config))

    mesh = merge_meshes(parts)
    mesh.validate()

    logger.debug(
        f"Generated {params.shape_type.value}: {mesh.n_vertices} verts, {mesh.n_faces} faces"
    )
    return mesh
