"""
Mission path model: waypoints, path segments, speed policy, and path metrics.
A Path is an ordered sequence of PathSegments; the simulator flies their waypoints
in order after an optional takeoff point.
"""
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from src.core.errors import InvalidInput
from src.core.vectors import LocalCoord, polyline_length


@dataclass(frozen=True)
class Waypoint:
    """Commanded pose. heading/pitch/roll in degrees; hold_time_s dwell on arrival."""

    position: LocalCoord
    heading: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    hold_time_s: float = 0.0

    def __post_init__(self):
        if not self.hold_time_s >= 0:
            raise InvalidInput("Hold time must be non-negative", details={"hold_time_s": self.hold_time_s})


@dataclass(frozen=True)
class PathSegment:
    """Named leg group. speed_mps overrides the mission default for legs ending in this segment."""

    id: str
    waypoints: Tuple[Waypoint, ...]
    speed_mps: Optional[float] = None

    def __post_init__(self):
        # Accept any sequence; store a tuple so the segment stays immutable.
        object.__setattr__(self, "waypoints", tuple(self.waypoints))
        if self.speed_mps is not None and not self.speed_mps > 0:
            raise InvalidInput("Segment speed must be positive", details={"segment": self.id, "speed_mps": self.speed_mps})


Path = Sequence[PathSegment]


@dataclass(frozen=True)
class SpeedPolicy:
    """Mission default speed (m/s) and a playback multiplier (0 pauses motion)."""

    default_speed_mps: float = 5.0
    multiplier: float = 1.0

    def __post_init__(self):
        if not self.default_speed_mps > 0:
            raise InvalidInput("Default speed must be positive", details={"default_speed_mps": self.default_speed_mps})
        if not (self.multiplier >= 0 and math.isfinite(self.multiplier)):
            raise InvalidInput("Speed multiplier must be finite and non-negative", details={"multiplier": self.multiplier})

    def speed_for(self, segment_speed: Optional[float]) -> float:
        """Real (unscaled) speed for a leg."""
        return segment_speed if segment_speed is not None else self.default_speed_mps


@dataclass(frozen=True)
class PathPoint:
    """One entry of the flattened path: the waypoint plus the segment it came from."""

    waypoint: Waypoint
    segment_id: Optional[str]
    segment_speed: Optional[float]


def flatten_path(path: Path, takeoff: Optional[LocalCoord] = None) -> List[PathPoint]:
    """Takeoff point (if any) followed by each segment's waypoints, in order."""
    points: List[PathPoint] = []
    if takeoff is not None:
        points.append(PathPoint(Waypoint(position=takeoff), None, None))
    for segment in path:
        for wp in segment.waypoints:
            points.append(PathPoint(wp, segment.id, segment.speed_mps))
    return points


def path_length_m(points: Sequence[PathPoint]) -> float:
    return polyline_length(p.waypoint.position for p in points)


def segment_length_m(segment: PathSegment) -> float:
    return polyline_length(wp.position for wp in segment.waypoints)


def estimate_flight_time_s(path: Path, policy: SpeedPolicy, takeoff: Optional[LocalCoord] = None) -> float:
    """
    Real flight time: each leg at the speed of the segment it ends in, plus all holds.
    The playback multiplier is ignored.
    """
    points = flatten_path(path, takeoff)
    total = 0.0
    for i in range(1, len(points)):
        leg = points[i - 1].waypoint.position.distance_to(points[i].waypoint.position)
        total += leg / policy.speed_for(points[i].segment_speed)
        total += points[i].waypoint.hold_time_s
    return total


def format_duration_mmss(seconds: float) -> str:
    """'MM:SS' (minutes may exceed 59)."""
    if not math.isfinite(seconds) or seconds < 0:
        return "--:--"
    whole = int(round(seconds))
    return f"{whole // 60:02d}:{whole % 60:02d}"
