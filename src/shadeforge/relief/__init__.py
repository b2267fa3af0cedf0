"""
Heightfield relief (lithophane) generator.
"""

from .params import LithophaneParameters, ImageSample
from .build import generate_relief_mesh, placeholder_shell

__all__ = [
    "LithophaneParameters",
    "ImageSample",
    "generate_relief_mesh",
    "placeholder_shell",
]
