"""
Configuration, enumerations and metadata for mesh generation.

Unit Model:
- 1 model unit = 1 cm (a height of 15 prints at 150 mm)
- Fitter diameters are given in millimetres (E27 socket = 28 mm)
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Type, TypeVar
import json
from pathlib import Path

from .errors import UnsupportedShapeType, UnsupportedCarrierType, InvalidParameter

E = TypeVar("E", bound=Enum)


class ShapeType(Enum):
    """Base shape strategies."""
    RIBBED_DRUM = "ribbed_drum"
    SPIRAL_TWIST = "spiral_twist"
    WAVE_SHELL = "wave_shell"
    PERLIN_NOISE = "perlin_noise"
    ORGANIC_CELL = "organic_cell"
    ORIGAMI = "origami"
    VORONOI = "voronoi"
    GEOMETRIC_POLY = "geometric_poly"
    SLOTTED = "slotted"
    LATTICE = "lattice"
    DOUBLE_WALL = "double_wall"


class SilhouetteType(Enum):
    """Radius modulation applied along the height of the profile."""
    STRAIGHT = "straight"
    HOURGLASS = "hourglass"
    BELL = "bell"
    CONVEX = "convex"
    CONCAVE = "concave"


class FitterType(Enum):
    """
    Lamp socket fitter.

    SPIDER: 3 spokes
    UNO: 4 spokes
    """
    NONE = "none"
    SPIDER = "spider"
    UNO = "uno"


class PatternType(Enum):
    """Surface pattern units (rendered as raised projections)."""
    NONE = "none"
    DOTS = "dots"
    STARS = "stars"
    HEARTS = "hearts"
    HEX = "hex"


class CarrierType(Enum):
    """Carrier surface for a relief."""
    FLAT = "flat"
    CURVED = "curved"
    ARC = "arc"
    CYLINDER = "cylinder"


def parse_enum(enum_cls: Type[E], value: Any) -> E:
    """
    Coerce a string (or enum member) into `enum_cls`, failing closed.

    Unknown shape/carrier values raise their dedicated error types; any other
    unknown enumeration raises InvalidParameter.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        if enum_cls is ShapeType:
            raise UnsupportedShapeType(f"Unknown shape type: {value!r}") from None
        if enum_cls is CarrierType:
            raise UnsupportedCarrierType(f"Unknown carrier type: {value!r}") from None
        raise InvalidParameter(f"Unknown {enum_cls.__name__}: {value!r}") from None


@dataclass
class MeshMetadata:
    """
    Metadata sidecar written next to every exported mesh.
    """
    kind: str  # "shape" or "relief"
    variant: str  # shape type or carrier type
    n_triangles: int
    n_vertices: int
    is_watertight: Optional[bool] = None
    volume_cm3: Optional[float] = None
    generation_params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "variant": self.variant,
            "n_triangles": self.n_triangles,
            "n_vertices": self.n_vertices,
            "is_watertight": self.is_watertight,
            "volume_cm3": self.volume_cm3,
            "generation_params": self.generation_params
        }

    def save(self, path: Path) -> None:
        """Save metadata to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeshMetadata":
        return cls(**data)


@dataclass
class EngineConfig:
    """
    Tunable constants shared by the generators.

    Geometry constants are in model units (cm).
    """

    # Profile sampling
    profile_steps: int = 60
    origami_profile_steps: int = 20

    # Radius floors keep revolution apexes non-degenerate
    radius_floor: float = 0.1
    inner_radius_floor: float = 0.05

    # Overlap between parts merged by concatenation
    union_overlap: float = 0.01
    # Ribs, spokes and pattern units sink this fraction of a wall into it
    wall_embed: float = 0.4

    # Fitter geometry
    fitter_tube_radius: float = 0.15
    spoke_height: float = 0.15
    spoke_width: float = 0.3

    # Double-wall connecting struts
    strut_width: float = 0.2

    # Pattern projections
    pattern_unit_size: float = 0.5
    pattern_depth: float = 0.2

    # Print estimate (PLA)
    material_density_g_cm3: float = 1.25
    grams_per_hour: float = 15.0
    cost_per_gram: float = 0.02

    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile_steps": self.profile_steps,
            "origami_profile_steps": self.origami_profile_steps,
            "radius_floor": self.radius_floor,
            "inner_radius_floor": self.inner_radius_floor,
            "union_overlap": self.union_overlap,
            "wall_embed": self.wall_embed,
            "fitter_tube_radius": self.fitter_tube_radius,
            "spoke_height": self.spoke_height,
            "spoke_width": self.spoke_width,
            "strut_width": self.strut_width,
            "pattern_unit_size": self.pattern_unit_size,
            "pattern_depth": self.pattern_depth,
            "material_density_g_cm3": self.material_density_g_cm3,
            "grams_per_hour": self.grams_per_hour,
            "cost_per_gram": self.cost_per_gram,
            "output_dir": str(self.output_dir)
        }

    @classmethod
    def from_json(cls, path: Path) -> "EngineConfig":
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        data["output_dir"] = Path(data.get("output_dir", "outputs"))
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Global default config
DEFAULT_CONFIG = EngineConfig()
