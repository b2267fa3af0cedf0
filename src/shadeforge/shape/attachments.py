"""
Structural attachments: internal ribs, fitter and pattern units.

Each builder returns an independent mesh that sinks part of a wall into the
body it is given, so the concatenated result prints as one piece. Anchoring
follows the body's actual wall (displacement, polygon faces, slotted core),
read from its WallSurface.
"""

import numpy as np
from typing import Dict, List
import logging

from ..common.config import PatternType, EngineConfig, DEFAULT_CONFIG
from ..common.errors import InvalidParameter, require
from ..common.mesh import Mesh
from ..common.mesh_ops import (
    merge_meshes, loft_rings, create_ring_mesh, create_beam_mesh, create_radial_slab_mesh
)
from .params import ShapeParameters, RibSpec, FitterSpec, PatternSpec
from .profile import silhouette_radius
from .surface import Body, WallSurface

logger = logging.getLogger(__name__)


def _wall_of(body: Body, params: ShapeParameters, what: str) -> WallSurface:
    if body.wall is None:
        raise InvalidParameter(f"{params.shape_type.value} has no continuous wall to carry {what}")
    return body.wall


def build_internal_ribs(
    params: ShapeParameters,
    spec: RibSpec,
    body: Body,
    config: EngineConfig = DEFAULT_CONFIG
) -> Mesh:
    """
    Vertical ribs on the inside of the wall.

    Each rib's outward edge is sunk `wall_embed` of a wall into the body's
    inner wall at the rib's angle; its inward edge runs `spec.depth` further in.

    Raises:
        InvalidParameter: if the body has no continuous wall
    """
    wall = _wall_of(body, params, "internal ribs")
    heights = np.linspace(-params.height / 2.0, params.height / 2.0, config.profile_steps + 1)
    embed = config.wall_embed * params.thickness

    ribs = []
    for i in range(spec.count):
        angle = 2.0 * np.pi * i / spec.count
        inner_wall = wall.inner_radius(angle, heights)
        inner = np.maximum(inner_wall - spec.depth, config.inner_radius_floor)
        ribs.append(create_radial_slab_mesh(angle, heights, inner, inner_wall + embed, spec.thickness))
    return merge_meshes(ribs)


def build_fitter(
    params: ShapeParameters,
    spec: FitterSpec,
    body: Body,
    config: EngineConfig = DEFAULT_CONFIG
) -> Mesh:
    """
    Socket ring with spokes reaching the inner wall.

    On a lattice each spoke turns to the nearest strut and ends on its
    centerline.

    Raises:
        InvalidParameter: if the ring does not clear the wall it hangs from
    """
    angles = 2.0 * np.pi * np.arange(spec.spoke_count) / spec.spoke_count

    if body.wall is not None:
        reach = body.wall.inner_radius(angles, spec.y) + config.wall_embed * params.thickness
    else:
        struts = body.strut_angles(spec.y)
        offset = np.mod(struts[None, :] - angles[:, None] + np.pi, 2.0 * np.pi) - np.pi
        nearest = np.abs(offset).argmin(axis=1)
        snapped = angles + offset[np.arange(len(angles)), nearest]
        angles = np.unique(np.round(np.mod(snapped, 2.0 * np.pi), 9))
        centerline = float(silhouette_radius(params, spec.y, config)) - params.thickness / 2.0
        reach = np.full(len(angles), centerline)

    require(
        reach.min() > spec.ring_radius + config.fitter_tube_radius,
        f"fitter ring radius {spec.ring_radius:.2f} does not clear the wall ({reach.min():.2f})"
    )

    parts = [create_ring_mesh(
        radius=spec.ring_radius,
        y=spec.y,
        tube_radius=config.fitter_tube_radius,
        segments=32,
        tube_segments=8
    )]

    base = np.array([0.0, spec.y, 0.0])
    for angle, r in zip(angles, reach):
        radial = np.array([np.cos(angle), 0.0, np.sin(angle)])
        parts.append(create_beam_mesh(
            start=base + spec.ring_radius * radial,
            end=base + r * radial,
            width=config.spoke_width,
            height=config.spoke_height
        ))

    return merge_meshes(parts)


# ============== Pattern units ==============

def _circle(n: int, radius: float = 0.5) -> np.ndarray:
    a = np.linspace(0.0, 2.0 * np.pi, n, endpoint=False)
    return np.column_stack([radius * np.cos(a), radius * np.sin(a)])


def _star(points: int = 5, outer: float = 0.5, inner: float = 0.2) -> np.ndarray:
    a = np.pi / 2.0 + np.arange(2 * points) * np.pi / points
    r = np.where(np.arange(2 * points) % 2 == 0, outer, inner)
    return np.column_stack([r * np.cos(a), r * np.sin(a)])


def _heart(n: int = 24) -> np.ndarray:
    t = np.linspace(0.0, 2.0 * np.pi, n, endpoint=False)
    x = 16 * np.sin(t) ** 3
    y = 13 * np.cos(t) - 5 * np.cos(2 * t) - 2 * np.cos(3 * t) - np.cos(4 * t)
    outline = np.column_stack([x, y + 3.0])  # center the lobes on the origin
    return outline / (2.0 * np.abs(outline).max())


UNIT_OUTLINES: Dict[PatternType, np.ndarray] = {
    PatternType.DOTS: _circle(12),
    PatternType.STARS: _star(),
    PatternType.HEARTS: _heart(),
    PatternType.HEX: _circle(6),
}


def _cylindrical(theta: np.ndarray, radius: np.ndarray, y: np.ndarray) -> np.ndarray:
    return np.column_stack([radius * np.cos(theta), y, radius * np.sin(theta)])


def pattern_grid(params: ShapeParameters, spec: PatternSpec) -> List[tuple]:
    """
    (angle, height) centers of the pattern units.

    `spec.density` units per row; the row count keeps cells roughly square
    and odd rows are staggered by half a cell.
    """
    mean_radius = (params.top_radius + params.bottom_radius) / 2.0
    cell = 2.0 * np.pi * mean_radius / spec.density
    rows = max(1, int(round(params.height / cell)))

    centers = []
    for k in range(rows):
        y = -params.height / 2.0 + params.height * (k + 0.5) / rows
        for j in range(spec.density):
            angle = 2.0 * np.pi * (j + 0.5 * (k % 2)) / spec.density
            centers.append((angle, y))
    return centers


def build_pattern(
    params: ShapeParameters,
    spec: PatternSpec,
    body: Body,
    config: EngineConfig = DEFAULT_CONFIG
) -> Mesh:
    """
    Raised pattern units on the outer wall.

    Units are additive: every outline point is extruded from `wall_embed` of
    a wall beneath the body's outer surface to `pattern_depth` above it, so
    a unit follows ribs, waves and polygon faces under its footprint.
    Cutting holes would need a boolean difference, which the concatenating
    merge cannot express.

    Raises:
        InvalidParameter: if the body has no continuous wall
    """
    wall = _wall_of(body, params, "pattern units")
    outline = UNIT_OUTLINES[spec.pattern_type] * config.pattern_unit_size * spec.scale
    depth = config.pattern_depth * spec.scale
    embed = config.wall_embed * params.thickness

    units = []
    for angle, y in pattern_grid(params, spec):
        # Wrap the outline onto the wall: arc length along the wall, height along Y
        r = float(wall.outer_radius(angle, y))
        theta = angle + np.arctan2(outline[:, 0], r)
        height = y + outline[:, 1]
        surface = wall.outer_radius(theta, height)

        rings = np.stack([
            _cylindrical(theta, surface - embed, height),
            _cylindrical(theta, surface + depth, height)
        ])
        units.append(loft_rings(rings))

    logger.debug(f"Pattern {spec.pattern_type.value}: {len(units)} units")
    return merge_meshes(units)
