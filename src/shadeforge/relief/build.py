"""
Heightfield relief (lithophane) builder.

Algorithm:
1. Optionally box-blur the image
2. Turn adjusted luminance into a per-texel depth fraction
3. Sample the fraction on a gridX x gridY lattice (bilinear)
4. Front grid at base + min + fraction * (max - min), back grid at 0
5. Project both grids onto the carrier (flat, arc or cylinder)
6. Stitch front, back and the four perimeter strips into one closed solid
"""

import numpy as np
import logging

from ..common.config import CarrierType, EngineConfig, DEFAULT_CONFIG
from ..common.errors import require
from ..common.mesh import Mesh
from ..shape.params import ShapeParameters, GeometricPoly
from ..shape.profile import build_profile
from ..shape.revolution import revolve_profile
from .params import LithophaneParameters, ImageSample
from .image_ops import apply_smoothing, depth_fraction_map, sample_bilinear

logger = logging.getLogger(__name__)


def grid_shape(image: ImageSample, params: LithophaneParameters):
    """(gridX, gridY) for an image; gridY = resolution."""
    return int(np.floor(params.resolution * image.aspect)), params.resolution


def relief_depth(fraction, params: LithophaneParameters) -> np.ndarray:
    """Total thickness for a depth fraction in [0, 1]."""
    return (
        params.base_thickness + params.min_thickness
        + np.asarray(fraction) * (params.max_thickness - params.min_thickness)
    )


def project_to_carrier(u: np.ndarray, v: np.ndarray, depth, params: LithophaneParameters) -> np.ndarray:
    """
    Map grid coordinates plus depth to 3D positions.

    Flat: (x, y, depth). Curved carriers wrap x onto an arc of radius
    curve_radius + depth whose center sits at z = -curve_radius.
    """
    x = (u - 0.5) * params.width
    y = (v - 0.5) * params.height
    depth = np.broadcast_to(depth, u.shape)

    if params.carrier is CarrierType.FLAT:
        return np.stack([x, y, depth], axis=-1)

    if params.carrier is CarrierType.CYLINDER:
        span = 2.0 * np.pi
    else:
        span = params.width / params.curve_radius
    angle = (u - 0.5) * span
    r = params.curve_radius + depth
    return np.stack([r * np.sin(angle), y, r * np.cos(angle) - params.curve_radius], axis=-1)


def _grid_faces(grid_x: int, grid_y: int, back_offset: int) -> np.ndarray:
    """Front, back and side triangles for two grid_x * grid_y vertex grids."""
    i, j = np.meshgrid(np.arange(grid_x - 1), np.arange(grid_y - 1))
    a = (j * grid_x + i).ravel()
    b = a + 1
    c = a + grid_x
    d = c + 1

    front = np.concatenate([np.stack([a, b, c], axis=1), np.stack([b, d, c], axis=1)])
    back = np.concatenate([np.stack([a, c, b], axis=1), np.stack([b, c, d], axis=1)]) + back_offset

    o = back_offset
    sides = []

    # Bottom (v = 0) and top (v = 1) edges
    f = np.arange(grid_x - 1)
    sides.append(np.stack([f, f + o, f + 1], axis=1))
    sides.append(np.stack([f + 1, f + o, f + 1 + o], axis=1))
    f = f + (grid_y - 1) * grid_x
    sides.append(np.stack([f, f + 1, f + o], axis=1))
    sides.append(np.stack([f + 1, f + 1 + o, f + o], axis=1))

    # Left (u = 0) and right (u = 1) edges
    f = np.arange(grid_y - 1) * grid_x
    sides.append(np.stack([f, f + grid_x, f + o], axis=1))
    sides.append(np.stack([f + grid_x, f + grid_x + o, f + o], axis=1))
    f = f + grid_x - 1
    sides.append(np.stack([f, f + o, f + grid_x], axis=1))
    sides.append(np.stack([f + grid_x, f + o, f + grid_x + o], axis=1))

    return np.concatenate([front, back] + sides)


def generate_relief_mesh(image: ImageSample, params: LithophaneParameters) -> Mesh:
    """
    Generate a closed relief solid from an image.

    Args:
        image: Source raster
        params: Relief description

    Returns:
        Mesh with front grid first, back grid second, vertex normals set

    Raises:
        InvalidParameter: on out-of-range parameters or a too-narrow grid
        UnsupportedCarrierType: on an unknown carrier
    """
    params.validate()
    grid_x, grid_y = grid_shape(image, params)
    require(grid_x >= 2, f"Image aspect {image.aspect:.3f} gives fewer than 2 grid columns")

    pixels = image.pixels
    if params.smoothing > 0:
        pixels = apply_smoothing(pixels, params.smoothing)

    fraction_map = depth_fraction_map(pixels, params.brightness, params.contrast, params.inverted)

    u, v = np.meshgrid(np.linspace(0.0, 1.0, grid_x), np.linspace(0.0, 1.0, grid_y))
    depth = relief_depth(sample_bilinear(fraction_map, u, v), params)

    front = project_to_carrier(u, v, depth, params).reshape(-1, 3)
    back = project_to_carrier(u, v, 0.0, params).reshape(-1, 3)

    mesh = Mesh(
        vertices=np.concatenate([front, back]),
        faces=_grid_faces(grid_x, grid_y, back_offset=len(front))
    )
    mesh.compute_normals()
    mesh.validate()

    logger.debug(
        f"Relief {params.carrier.value} {grid_x}x{grid_y}: {mesh.n_vertices} verts, {mesh.n_faces} faces"
    )
    return mesh


def placeholder_shell(
    params: LithophaneParameters,
    segments: int = 64,
    config: EngineConfig = DEFAULT_CONFIG
) -> Mesh:
    """
    Plain straight shell shown while no image is loaded.

    Built by the revolution sweep with a straight profile, sized to the
    relief's width and base-plus-minimum thickness.
    """
    params.validate()
    radius = params.width / 2.0
    thickness = min(params.base_thickness + params.min_thickness, radius / 2.0)
    shell = ShapeParameters(
        variant=GeometricPoly(sides=segments),
        height=params.height,
        top_radius=radius,
        bottom_radius=radius,
        thickness=thickness,
        segments=segments
    )
    shell.validate(config)
    mesh = revolve_profile(build_profile(shell, 2, config), segments)
    mesh.compute_normals()
    return mesh
