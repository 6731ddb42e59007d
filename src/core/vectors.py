"""
Local ENU coordinate value type and the small vector algebra the engine needs.
x = East, y = North, z = Up; all in meters relative to a mission-defined origin.
"""
import math
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class LocalCoord:
    """Immutable East/North/Up position (or direction) in meters."""

    x: float
    y: float
    z: float

    def __add__(self, other: "LocalCoord") -> "LocalCoord":
        return LocalCoord(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "LocalCoord") -> "LocalCoord":
        return LocalCoord(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, k: float) -> "LocalCoord":
        return LocalCoord(self.x * k, self.y * k, self.z * k)

    def dot(self, other: "LocalCoord") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "LocalCoord") -> "LocalCoord":
        return LocalCoord(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "LocalCoord":
        """Unit vector in the same direction. Zero vector is returned unchanged."""
        n = self.length()
        if n < 1e-12:
            return self
        return LocalCoord(self.x / n, self.y / n, self.z / n)

    def distance_to(self, other: "LocalCoord") -> float:
        return (other - self).length()

    def lerp(self, other: "LocalCoord", t: float) -> "LocalCoord":
        """Linear interpolation: t=0 -> self, t=1 -> other."""
        return LocalCoord(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
            self.z + (other.z - self.z) * t,
        )

    def as_tuple(self):
        return (self.x, self.y, self.z)


ORIGIN = LocalCoord(0.0, 0.0, 0.0)
WORLD_X = LocalCoord(1.0, 0.0, 0.0)
WORLD_Y = LocalCoord(0.0, 1.0, 0.0)
WORLD_Z = LocalCoord(0.0, 0.0, 1.0)


def polyline_length(points: Iterable[LocalCoord]) -> float:
    """Sum of straight-line distances between consecutive points."""
    total = 0.0
    prev = None
    for p in points:
        if prev is not None:
            total += prev.distance_to(p)
        prev = p
    return total
