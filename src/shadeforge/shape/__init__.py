"""
Revolution-based lampshade generator.

Profile -> revolution sweep -> shape-type strategy -> attachments -> merge.
"""

from .params import (
    ShapeParameters, RibSpec, FitterSpec, PatternSpec,
    RibbedDrum, SpiralTwist, WaveShell, PerlinNoise, OrganicCell, Origami,
    Voronoi, GeometricPoly, Slotted, Lattice, DoubleWall,
)
from .profile import SilhouetteProfile, build_profile, silhouette_radius
from .revolution import revolve_profile
from .surface import WallSurface, Body
from .build import generate_shape_mesh

__all__ = [
    "ShapeParameters", "RibSpec", "FitterSpec", "PatternSpec",
    "RibbedDrum", "SpiralTwist", "WaveShell", "PerlinNoise", "OrganicCell", "Origami",
    "Voronoi", "GeometricPoly", "Slotted", "Lattice", "DoubleWall",
    "SilhouetteProfile", "build_profile", "silhouette_radius",
    "revolve_profile", "WallSurface", "Body",
    "generate_shape_mesh",
]
