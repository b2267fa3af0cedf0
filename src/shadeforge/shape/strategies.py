"""
Shape-type strategies.

Displacement strategies sweep the silhouette profile and then move the
swept vertices in place (topology unchanged). Assembly strategies discard
the sweep and merge their own parts.
"""

import numpy as np
from typing import Callable, Dict
import logging

from ..common.config import ShapeType, SilhouetteType, EngineConfig, DEFAULT_CONFIG
from ..common.errors import UnsupportedShapeType
from ..common.mesh import Mesh
from ..common.mesh_ops import (
    merge_meshes, create_tube_mesh, create_ring_mesh, create_radial_slab_mesh
)
from ..common import noise
from .params import ShapeParameters, SLOT_FIN_DEPTH_FACTOR
from .profile import build_profile, silhouette_radius
from .revolution import revolve_profile, vertex_cylindrical, displace_radially
from .surface import WallSurface, Body

logger = logging.getLogger(__name__)

Strategy = Callable[[ShapeParameters, EngineConfig], Body]


def base_shell(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Mesh:
    """Undisplaced revolution shell of the silhouette."""
    profile = build_profile(params, config.profile_steps, config)
    return revolve_profile(profile, params.segments)


def _norm_y(y: np.ndarray, height: float) -> np.ndarray:
    return (y + height / 2.0) / height


def _swept_body(mesh: Mesh, params: ShapeParameters, config: EngineConfig, twist: float = 0.0) -> Body:
    wall = WallSurface.from_sweep(mesh, config.profile_steps, params.segments, twist)
    return Body(mesh, wall)


# ============== Displacement strategies ==============

def ribbed_drum(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    v = params.variant
    mesh = base_shell(params, config)
    angle, _, _ = vertex_cylindrical(mesh)
    d = noise.rib_displacement(angle, v.rib_count, v.rib_depth)
    return _swept_body(displace_radially(mesh, d, config.inner_radius_floor), params, config)


def spiral_twist(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    """Rotate each vertex about Y in proportion to its height."""
    mesh = base_shell(params, config)
    twist = np.radians(params.variant.twist_angle)
    x, y, z = mesh.vertices[:, 0].copy(), mesh.vertices[:, 1], mesh.vertices[:, 2].copy()
    a = _norm_y(y, params.height) * twist
    cos_a, sin_a = np.cos(a), np.sin(a)
    mesh.vertices[:, 0] = x * cos_a - z * sin_a
    mesh.vertices[:, 2] = x * sin_a + z * cos_a
    return _swept_body(mesh, params, config, twist=twist)


def wave_shell(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    v = params.variant
    mesh = base_shell(params, config)
    angle, _, y = vertex_cylindrical(mesh)
    d = noise.wave_displacement(angle, _norm_y(y, params.height), v.amplitude, v.frequency)
    return _swept_body(displace_radially(mesh, d, config.inner_radius_floor), params, config)


def _noise_shell(params: ShapeParameters, config: EngineConfig, ridged: bool) -> Body:
    v = params.variant
    mesh = base_shell(params, config)
    angle, _, y = vertex_cylindrical(mesh)
    d = noise.noise_displacement(
        angle, y, params.height, params.seed, v.noise_scale, v.noise_strength, ridged=ridged
    )
    return _swept_body(displace_radially(mesh, d, config.inner_radius_floor), params, config)


def perlin_noise(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    return _noise_shell(params, config, ridged=False)


def organic_cell(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    return _noise_shell(params, config, ridged=True)


def origami(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    """
    Pleated shell: one sweep column per fold edge, odd columns pushed in.

    The sweep uses 2 * fold_count columns instead of `segments`.
    """
    v = params.variant
    profile = build_profile(params, config.origami_profile_steps, config)
    mesh = revolve_profile(profile, v.fold_count * 2)
    angle, _, _ = vertex_cylindrical(mesh)
    d = noise.origami_displacement(angle, v.fold_count, v.fold_depth)
    mesh = displace_radially(mesh, d, config.inner_radius_floor)
    return Body(mesh, WallSurface.from_sweep(mesh, profile.steps, v.fold_count * 2))


def voronoi(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    v = params.variant
    mesh = base_shell(params, config)
    angle, _, y = vertex_cylindrical(mesh)
    scale = 0.05 * (params.top_radius + params.bottom_radius)
    d = noise.voronoi_displacement(
        angle, _norm_y(y, params.height), v.cell_count, params.seed, scale
    )
    return _swept_body(displace_radially(mesh, d, config.inner_radius_floor), params, config)


# ============== Assembly strategies ==============

def geometric_poly(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    """Straight N-gon frustum shell."""
    profile = build_profile(params, 2, config, silhouette=SilhouetteType.STRAIGHT)
    mesh = revolve_profile(profile, params.variant.sides)
    return Body(mesh, WallSurface.from_sweep(mesh, profile.steps, params.variant.sides))


def slotted(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    """Shrunken core shell with radial fins reaching out to the silhouette."""
    v = params.variant
    fin_depth = SLOT_FIN_DEPTH_FACTOR * params.thickness

    core_profile = build_profile(params, config.profile_steps, config, radius_offset=fin_depth)
    core = revolve_profile(core_profile, params.segments)
    parts = [core]

    heights = core_profile.outer_heights
    outer = silhouette_radius(params, heights, config)
    # Fins sink half a wall into the core
    inner = np.maximum(outer - fin_depth - params.thickness / 2.0, config.inner_radius_floor)

    for i in range(v.slot_count):
        angle = 2.0 * np.pi * i / v.slot_count
        parts.append(create_radial_slab_mesh(angle, heights, inner, outer, v.slot_width))

    # Attachments anchor to the core, the only continuous wall
    return Body(merge_meshes(parts), WallSurface.from_sweep(core, core_profile.steps, params.segments))


def lattice(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    """Crossed helical struts with top and bottom rings."""
    v = params.variant
    strut_radius = params.thickness / 2.0
    t = np.linspace(0.0, 1.0, config.profile_steps + 1)
    y = -params.height / 2.0 + params.height * t
    r = silhouette_radius(params, y, config) - strut_radius
    twist = np.radians(v.twist_angle)
    angle0 = 2.0 * np.pi * np.arange(v.grid_density) / v.grid_density

    parts = []
    for a0 in angle0:
        for direction in (1.0, -1.0):
            a = a0 + direction * t * twist
            path = np.column_stack([r * np.cos(a), y, r * np.sin(a)])
            parts.append(create_tube_mesh(path, strut_radius, segments=6))

    for end in (0, -1):
        parts.append(create_ring_mesh(
            radius=r[end],
            y=y[end],
            tube_radius=params.thickness,
            segments=params.segments,
            tube_segments=8
        ))

    return Body(merge_meshes(parts), strut_angle0=angle0, strut_twist=twist, height=params.height)


def double_wall(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    """Outer and inner shells joined by radial struts."""
    v = params.variant
    outer_profile = build_profile(params, config.profile_steps, config)
    inner_profile = build_profile(params, config.profile_steps, config, radius_offset=v.gap_distance)
    outer_shell = revolve_profile(outer_profile, params.segments)
    inner_shell = revolve_profile(inner_profile, params.segments)
    parts = [outer_shell, inner_shell]

    heights = outer_profile.outer_heights
    r = outer_profile.outer_radii
    strut_inner = inner_profile.outer_radii - config.union_overlap
    strut_outer = r - params.thickness + config.union_overlap

    for i in range(v.strut_count):
        angle = 2.0 * np.pi * i / v.strut_count
        parts.append(create_radial_slab_mesh(angle, heights, strut_inner, strut_outer, config.strut_width))

    # Patterns sit on the outer shell; ribs and spokes reach the inner one
    wall = WallSurface.from_sweep(outer_shell, outer_profile.steps, params.segments)
    wall = wall.with_inner(WallSurface.from_sweep(inner_shell, inner_profile.steps, params.segments))
    return Body(merge_meshes(parts), wall)


STRATEGIES: Dict[ShapeType, Strategy] = {
    ShapeType.RIBBED_DRUM: ribbed_drum,
    ShapeType.SPIRAL_TWIST: spiral_twist,
    ShapeType.WAVE_SHELL: wave_shell,
    ShapeType.PERLIN_NOISE: perlin_noise,
    ShapeType.ORGANIC_CELL: organic_cell,
    ShapeType.ORIGAMI: origami,
    ShapeType.VORONOI: voronoi,
    ShapeType.GEOMETRIC_POLY: geometric_poly,
    ShapeType.SLOTTED: slotted,
    ShapeType.LATTICE: lattice,
    ShapeType.DOUBLE_WALL: double_wall,
}


def build_body(params: ShapeParameters, config: EngineConfig = DEFAULT_CONFIG) -> Body:
    """
    Run the strategy registered for the parameters' shape type.

    Raises:
        UnsupportedShapeType: if no strategy is registered
    """
    try:
        strategy = STRATEGIES[params.shape_type]
    except KeyError:
        raise UnsupportedShapeType(f"No strategy for shape type {params.shape_type!r}") from None

    logger.debug(f"Building {params.shape_type.value} body")
    return strategy(params, config)
