"""
Shape parameters.

ShapeParameters holds the fields shared by every lampshade; the
type-specific fields live on exactly one variant dataclass per shape type,
so a RibbedDrum can never carry a stray `twist_angle`.
"""

from dataclasses import dataclass, field, fields, asdict, replace
from typing import Any, Callable, ClassVar, Dict, Optional, Type, Union

import numpy as np

from ..common.config import (
    ShapeType, SilhouetteType, FitterType, PatternType, parse_enum,
    EngineConfig, DEFAULT_CONFIG
)
from ..common.errors import require, InvalidParameter, UnsupportedShapeType
from .profile import modulated_radius, silhouette_radius


# Slotted fins reach this many wall thicknesses in from the silhouette
SLOT_FIN_DEPTH_FACTOR = 4.0


# ============== Shape variants ==============

@dataclass(frozen=True)
class RibbedDrum:
    shape_type: ClassVar[ShapeType] = ShapeType.RIBBED_DRUM
    rib_count: int = 20
    rib_depth: float = 0.5

    def validate(self) -> None:
        require(self.rib_count >= 1, "rib_count must be >= 1")
        require(self.rib_depth >= 0, "rib_depth must be >= 0")


@dataclass(frozen=True)
class SpiralTwist:
    shape_type: ClassVar[ShapeType] = ShapeType.SPIRAL_TWIST
    twist_angle: float = 360.0  # degrees over the full height

    def validate(self) -> None:
        require(np.isfinite(self.twist_angle), "twist_angle must be finite")


@dataclass(frozen=True)
class WaveShell:
    shape_type: ClassVar[ShapeType] = ShapeType.WAVE_SHELL
    amplitude: float = 1.0
    frequency: float = 5.0

    def validate(self) -> None:
        require(self.amplitude >= 0, "amplitude must be >= 0")
        require(self.frequency >= 0, "frequency must be >= 0")


@dataclass(frozen=True)
class PerlinNoise:
    shape_type: ClassVar[ShapeType] = ShapeType.PERLIN_NOISE
    noise_scale: float = 0.5
    noise_strength: float = 0.5

    def validate(self) -> None:
        require(self.noise_scale > 0, "noise_scale must be > 0")
        require(self.noise_strength >= 0, "noise_strength must be >= 0")


@dataclass(frozen=True)
class OrganicCell(PerlinNoise):
    shape_type: ClassVar[ShapeType] = ShapeType.ORGANIC_CELL


@dataclass(frozen=True)
class Origami:
    shape_type: ClassVar[ShapeType] = ShapeType.ORIGAMI
    fold_count: int = 12
    fold_depth: float = 1.0

    def validate(self) -> None:
        # 2 * fold_count columns must still form a valid sweep
        require(self.fold_count >= 2, "fold_count must be >= 2")
        require(self.fold_depth >= 0, "fold_depth must be >= 0")


@dataclass(frozen=True)
class Voronoi:
    shape_type: ClassVar[ShapeType] = ShapeType.VORONOI
    cell_count: int = 12

    def validate(self) -> None:
        require(self.cell_count >= 1, "cell_count must be >= 1")


@dataclass(frozen=True)
class GeometricPoly:
    shape_type: ClassVar[ShapeType] = ShapeType.GEOMETRIC_POLY
    sides: int = 6

    def validate(self) -> None:
        require(self.sides >= 3, f"sides must be >= 3, got {self.sides}")


@dataclass(frozen=True)
class Slotted:
    shape_type: ClassVar[ShapeType] = ShapeType.SLOTTED
    slot_count: int = 16
    slot_width: float = 0.4  # tangential fin width

    def validate(self) -> None:
        require(self.slot_count >= 1, "slot_count must be >= 1")
        require(self.slot_width > 0, "slot_width must be > 0")


@dataclass(frozen=True)
class Lattice:
    shape_type: ClassVar[ShapeType] = ShapeType.LATTICE
    grid_density: int = 12
    twist_angle: float = 90.0  # degrees each strut turns over the height

    def validate(self) -> None:
        require(self.grid_density >= 1, "grid_density must be >= 1")


@dataclass(frozen=True)
class DoubleWall:
    shape_type: ClassVar[ShapeType] = ShapeType.DOUBLE_WALL
    gap_distance: float = 1.0
    strut_count: int = 8

    def validate(self) -> None:
        require(self.gap_distance > 0, "gap_distance must be > 0")
        require(self.strut_count >= 0, "strut_count must be >= 0")


ShapeVariant = Union[
    RibbedDrum, SpiralTwist, WaveShell, PerlinNoise, OrganicCell, Origami,
    Voronoi, GeometricPoly, Slotted, Lattice, DoubleWall
]

VARIANTS: Dict[ShapeType, Type] = {
    cls.shape_type: cls
    for cls in (RibbedDrum, SpiralTwist, WaveShell, PerlinNoise, OrganicCell, Origami,
                Voronoi, GeometricPoly, Slotted, Lattice, DoubleWall)
}

# Per-type draws for random designs; organic_cell is never offered
RANDOM_VARIANTS: Dict[ShapeType, Callable[[np.random.Generator], Any]] = {
    ShapeType.RIBBED_DRUM: lambda rng: RibbedDrum(int(rng.integers(12, 48)), float(rng.uniform(0.2, 1.0))),
    ShapeType.SPIRAL_TWIST: lambda rng: SpiralTwist(float(rng.uniform(90.0, 720.0))),
    ShapeType.VORONOI: lambda rng: Voronoi(int(rng.integers(8, 24))),
    ShapeType.WAVE_SHELL: lambda rng: WaveShell(float(rng.uniform(0.5, 2.0)), float(rng.uniform(3.0, 11.0))),
    ShapeType.GEOMETRIC_POLY: lambda rng: GeometricPoly(int(rng.integers(3, 12))),
    ShapeType.LATTICE: lambda rng: Lattice(int(rng.integers(8, 24))),
    ShapeType.ORIGAMI: lambda rng: Origami(int(rng.integers(8, 28)), float(rng.uniform(0.4, 1.6))),
    ShapeType.PERLIN_NOISE: lambda rng: PerlinNoise(float(rng.uniform(0.3, 1.0)), float(rng.uniform(0.2, 1.0))),
    ShapeType.SLOTTED: lambda rng: Slotted(),
    ShapeType.DOUBLE_WALL: lambda rng: DoubleWall(),
}


# ============== Common parameters ==============

@dataclass(frozen=True)
class ShapeParameters:
    """
    Immutable lampshade description.

    Units are cm except fitter_diameter (mm). Defaults match the
    application's initial state.
    """
    variant: ShapeVariant = field(default_factory=RibbedDrum)
    silhouette: SilhouetteType = SilhouetteType.STRAIGHT
    height: float = 15.0
    top_radius: float = 5.0
    bottom_radius: float = 8.0
    thickness: float = 0.8
    segments: int = 64
    seed: int = 1234

    # Fitter
    fitter_type: FitterType = FitterType.NONE
    fitter_diameter: float = 28.0  # mm, E27
    fitter_height: float = 2.0

    # Internal ribs
    internal_ribs: int = 0
    internal_rib_thickness: float = 0.2
    internal_rib_depth: float = 0.5

    # Surface patterns
    pattern_type: PatternType = PatternType.NONE
    pattern_density: int = 12
    pattern_scale: float = 1.0

    @property
    def shape_type(self) -> ShapeType:
        return self.variant.shape_type

    def validate(self, config: EngineConfig = DEFAULT_CONFIG) -> None:
        """
        Check every range before any geometry is built.

        Raises:
            InvalidParameter: on out-of-range values, on enum fields holding
                anything but their enum, or on attachments a lattice cannot carry
            UnsupportedShapeType: if the variant is not a known shape
        """
        if type(self.variant) not in VARIANTS.values():
            raise UnsupportedShapeType(f"Unknown shape variant: {type(self.variant).__name__}")

        for name, enum_cls in (("silhouette", SilhouetteType),
                               ("fitter_type", FitterType),
                               ("pattern_type", PatternType)):
            value = getattr(self, name)
            if not isinstance(value, enum_cls):
                raise InvalidParameter(f"{name} must be a {enum_cls.__name__}, got {value!r}")

        require(self.segments >= 3, f"segments must be >= 3, got {self.segments}")
        require(self.height > 0, f"height must be > 0, got {self.height}")
        require(self.top_radius >= 0 and self.bottom_radius >= 0, "radii must be >= 0")
        require(self.thickness > 0, f"thickness must be > 0, got {self.thickness}")

        # Wall must fit inside the modulated radius at every profile sample
        t = np.linspace(0.0, 1.0, config.profile_steps + 1)
        min_radius = float(modulated_radius(self, t).min())
        require(
            self.thickness < min_radius,
            f"thickness {self.thickness} must be < smallest radius {min_radius:.3f}"
        )

        require(self.internal_ribs >= 0, "internal_ribs must be >= 0")
        if self.internal_ribs:
            require(self.internal_rib_thickness > 0, "internal_rib_thickness must be > 0")
            require(self.internal_rib_depth > 0, "internal_rib_depth must be > 0")

        if self.pattern_type is not PatternType.NONE:
            require(self.pattern_density >= 1, "pattern_density must be >= 1")
            require(self.pattern_scale > 0, "pattern_scale must be > 0")

        if self.fitter_type is not FitterType.NONE:
            require(self.fitter_diameter > 0, "fitter_diameter must be > 0")
            require(
                0 <= self.fitter_height <= self.height,
                f"fitter_height must lie within [0, {self.height}]"
            )
            fitter = FitterSpec.from_params(self)
            wall = float(silhouette_radius(self, fitter.y, config)) - self.thickness
            require(
                fitter.ring_radius + config.fitter_tube_radius < wall,
                f"fitter ring radius {fitter.ring_radius:.2f} does not clear the inner wall ({wall:.2f})"
            )

        self.variant.validate()

        if isinstance(self.variant, DoubleWall):
            require(
                self.variant.gap_distance > self.thickness,
                "gap_distance must exceed thickness so the two walls stay apart"
            )
            require(
                self.variant.gap_distance + self.thickness < min_radius,
                "gap_distance + thickness must be < smallest radius"
            )
        elif isinstance(self.variant, Slotted):
            require(
                (SLOT_FIN_DEPTH_FACTOR + 1) * self.thickness < min_radius,
                "slotted core does not fit inside the silhouette"
            )
        elif isinstance(self.variant, Lattice):
            # Struts leave no continuous wall to carry these
            require(self.internal_ribs == 0, "lattice shapes cannot carry internal ribs")
            require(self.pattern_type is PatternType.NONE, "lattice shapes cannot carry pattern units")

    def to_dict(self) -> Dict[str, Any]:
        """Flat mapping (enums as strings) with a `type` key."""
        data = {"type": self.shape_type.value}
        data.update(asdict(self.variant))
        for f in fields(self):
            if f.name == "variant":
                continue
            value = getattr(self, f.name)
            data[f.name] = value.value if hasattr(value, "value") else value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShapeParameters":
        """
        Build from a flat mapping such as a UI record or JSON file.

        Keys that belong to neither the common fields nor the selected
        variant are ignored.
        """
        data = dict(data)
        shape_type = parse_enum(ShapeType, data.pop("type", ShapeType.RIBBED_DRUM.value))
        variant_cls = VARIANTS[shape_type]

        variant_keys = {f.name for f in fields(variant_cls)}
        variant = variant_cls(**{k: v for k, v in data.items() if k in variant_keys})

        common = {}
        for f in fields(cls):
            if f.name == "variant" or f.name not in data:
                continue
            common[f.name] = data[f.name]
        for key, enum_cls in (("silhouette", SilhouetteType),
                              ("fitter_type", FitterType),
                              ("pattern_type", PatternType)):
            if key in common:
                common[key] = parse_enum(enum_cls, common[key])

        return cls(variant=variant, **common)

    @classmethod
    def random(cls, seed: Optional[int] = None, base: Optional["ShapeParameters"] = None) -> "ShapeParameters":
        """
        A random design, reproducible for a given seed.

        Draws the shape type, the overall proportions, the noise seed and
        the type's own fields; everything else comes from `base`. A drawn
        lattice drops ribs and patterns, which it cannot carry.
        """
        rng = np.random.default_rng(seed)
        base = base if base is not None else cls()

        types = list(RANDOM_VARIANTS)
        shape_type = types[int(rng.integers(len(types)))]
        params = replace(
            base,
            variant=RANDOM_VARIANTS[shape_type](rng),
            height=float(rng.uniform(12.0, 24.0)),
            top_radius=float(rng.uniform(4.0, 10.0)),
            bottom_radius=float(rng.uniform(6.0, 14.0)),
            seed=int(rng.integers(10000))
        )
        if shape_type is ShapeType.LATTICE:
            params = replace(params, internal_ribs=0, pattern_type=PatternType.NONE)
        return params


# ============== Attachment specs ==============

@dataclass(frozen=True)
class RibSpec:
    """Internal rib geometry."""
    count: int
    thickness: float
    depth: float

    @classmethod
    def from_params(cls, params: ShapeParameters) -> "RibSpec":
        return cls(
            count=params.internal_ribs,
            thickness=params.internal_rib_thickness,
            depth=params.internal_rib_depth
        )


@dataclass(frozen=True)
class FitterSpec:
    """Lamp fitter ring and spokes."""
    spoke_count: int
    ring_radius: float
    y: float

    @classmethod
    def from_params(cls, params: ShapeParameters) -> "FitterSpec":
        return cls(
            spoke_count=3 if params.fitter_type is FitterType.SPIDER else 4,
            ring_radius=params.fitter_diameter / 20.0,  # mm diameter -> cm radius
            y=params.height / 2.0 - params.fitter_height
        )


@dataclass(frozen=True)
class PatternSpec:
    """Repeated surface units."""
    pattern_type: PatternType
    density: int
    scale: float

    @classmethod
    def from_params(cls, params: ShapeParameters) -> "PatternSpec":
        return cls(
            pattern_type=params.pattern_type,
            density=params.pattern_density,
            scale=params.pattern_scale
        )
