"""
Error taxonomy for mesh generation.

All errors are raised synchronously, before any buffer is allocated.
"""


class MeshGenerationError(ValueError):
    """Base class for every error raised by the generators."""


class InvalidParameter(MeshGenerationError):
    """Malformed or out-of-range numeric input."""


class UnsupportedShapeType(MeshGenerationError):
    """Shape type outside the known set."""


class UnsupportedCarrierType(MeshGenerationError):
    """Relief carrier surface outside the known set."""


def require(condition: bool, message: str) -> None:
    """Raise InvalidParameter with `message` unless `condition` holds."""
    if not condition:
        raise InvalidParameter(message)
