from .vectors import LocalCoord, polyline_length
from .errors import (
    MissionEngineError,
    InvalidInput,
    DegenerateGeometry,
    EmptyGrid,
    InsufficientWaypoints,
    InvalidTick,
)

__all__ = [
    "LocalCoord",
    "polyline_length",
    "MissionEngineError",
    "InvalidInput",
    "DegenerateGeometry",
    "EmptyGrid",
    "InsufficientWaypoints",
    "InvalidTick",
]
