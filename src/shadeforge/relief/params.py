"""
Relief (lithophane) parameters and source image.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict
import logging

import numpy as np

from ..common.config import CarrierType, parse_enum
from ..common.errors import require, UnsupportedCarrierType

logger = logging.getLogger(__name__)

try:
    from skimage.util import img_as_ubyte
    SKIMAGE_AVAILABLE = True
except ImportError:
    SKIMAGE_AVAILABLE = False
    logger.warning("scikit-image not available")


@dataclass(frozen=True)
class LithophaneParameters:
    """
    Immutable relief description (units: cm).

    brightness is added to every channel before contrast; contrast follows
    the usual 259 * (c + 255) / (255 * (259 - c)) factor and must lie in
    [-255, 255].
    """
    carrier: CarrierType = CarrierType.FLAT
    width: float = 10.0
    height: float = 10.0
    base_thickness: float = 0.0
    min_thickness: float = 0.6
    max_thickness: float = 3.0
    curve_radius: float = 10.0
    resolution: int = 100
    inverted: bool = False
    brightness: float = 0.0
    contrast: float = 0.0
    smoothing: float = 0.0

    @property
    def is_curved(self) -> bool:
        return self.carrier is not CarrierType.FLAT

    def validate(self) -> None:
        """
        Raises:
            InvalidParameter: on out-of-range values
            UnsupportedCarrierType: on an unknown carrier
        """
        if not isinstance(self.carrier, CarrierType):
            raise UnsupportedCarrierType(f"Unknown carrier type: {self.carrier!r}")

        require(self.resolution >= 2, f"resolution must be >= 2, got {self.resolution}")
        require(self.width > 0 and self.height > 0, "width and height must be > 0")
        require(self.min_thickness >= 0, "min_thickness must be >= 0")
        require(self.base_thickness >= 0, "base_thickness must be >= 0")
        require(
            self.max_thickness >= self.min_thickness,
            f"max_thickness {self.max_thickness} must be >= min_thickness {self.min_thickness}"
        )
        require(
            self.base_thickness + self.min_thickness > 0,
            "base_thickness + min_thickness must be > 0"
        )
        require(-255 <= self.contrast <= 255, "contrast must lie in [-255, 255]")
        require(self.smoothing >= 0, "smoothing must be >= 0")
        if self.is_curved:
            require(self.curve_radius > 0, "curve_radius must be > 0")

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["carrier"] = self.carrier.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LithophaneParameters":
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        # The application calls the carrier "type"
        carrier = kwargs.pop("carrier", data.get("type", CarrierType.FLAT.value))
        return cls(carrier=parse_enum(CarrierType, carrier), **kwargs)


@dataclass(frozen=True)
class ImageSample:
    """Read-only RGBA raster, (H, W, 4) uint8, row 0 at the top."""
    pixels: np.ndarray

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        require(pixels.ndim == 3 and pixels.shape[2] == 4, "ImageSample needs (H, W, 4) RGBA pixels")
        require(pixels.shape[0] >= 1 and pixels.shape[1] >= 1, "ImageSample must not be empty")
        pixels = pixels.astype(np.uint8, copy=True)
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @classmethod
    def from_array(cls, array: np.ndarray) -> "ImageSample":
        """
        Accept grayscale (H, W), RGB (H, W, 3) or RGBA (H, W, 4) arrays.

        Samples are rescaled from their dtype's range to bytes, so 16-bit
        images keep their tones; float images are clipped to [0, 1] first.
        """
        if not SKIMAGE_AVAILABLE:
            raise ImportError("scikit-image required for image conversion")

        array = np.asarray(array)
        if np.issubdtype(array.dtype, np.floating):
            array = np.clip(array, 0.0, 1.0)
        array = img_as_ubyte(array)

        if array.ndim == 2:
            array = np.repeat(array[:, :, None], 3, axis=2)
        require(array.ndim == 3 and array.shape[2] in (3, 4), f"Unsupported image shape {array.shape}")
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=2)
        return cls(array)
