"""
Waypoint generators: boustrophedon camera stations over a planar face, and a
ground raster (lawnmower) segment. Output is plain Waypoint / PathSegment values.
"""
import logging
import math
from enum import Enum
from typing import List, Optional

from src.camera.hardware import CameraSpec, LensSpec
from src.camera.optics import overlap_spacing
from src.core.errors import EmptyGrid, InvalidInput
from src.core.vectors import LocalCoord
from src.geo.face import FaceGeometry
from src.geo.transform import bearing_deg
from src.mission.model import PathSegment, Waypoint
from src.mission_settings import MAX_GRID_STATIONS

logger = logging.getLogger(__name__)

MIN_FACE_EXTENT_M = 1e-9


class ScanDirection(Enum):
    """HORIZONTAL: passes along the face x axis (rows). VERTICAL: passes along y (columns)."""

    HORIZONTAL = "Horizontal"
    VERTICAL = "Vertical"


def _cell_count(extent: float, spacing: float) -> int:
    """Cells needed to cover extent; at least one."""
    ratio = extent / spacing
    if not math.isfinite(ratio):
        raise InvalidInput("Spacing too small for face extent", details={"extent": extent, "spacing": spacing})
    return max(1, math.ceil(ratio))


def _cell_centers(extent: float, spacing: float, count: int) -> List[float]:
    """Centered cell coordinates covering [-extent/2, extent/2]."""
    return [-extent / 2 + i * spacing + spacing / 2 for i in range(count)]


def grid_stations(
    face: FaceGeometry,
    u_spacing: float,
    v_spacing: float,
    direction: ScanDirection = ScanDirection.HORIZONTAL,
    standoff_m: float = 0.0,
) -> List[LocalCoord]:
    """
    Camera stations for explicit spacings, in boustrophedon order, offset standoff_m along the normal.
    Even passes sweep the increasing axis, odd passes sweep back.
    """
    for name, value in (("u_spacing", u_spacing), ("v_spacing", v_spacing)):
        if not (value > 0 and math.isfinite(value)):
            raise InvalidInput(f"{name} must be positive and finite", details={name: value})
    if not (math.isfinite(face.width) and math.isfinite(face.height)):
        raise EmptyGrid("Face extents are not finite", details={"width": face.width, "height": face.height})
    if face.width <= MIN_FACE_EXTENT_M and face.height <= MIN_FACE_EXTENT_M:
        raise EmptyGrid("Face has no extent; no stations to place", details={"width": face.width, "height": face.height})

    num_u = _cell_count(face.width, u_spacing)
    num_v = _cell_count(face.height, v_spacing)
    if num_u * num_v > MAX_GRID_STATIONS:
        raise InvalidInput(
            f"Grid of {num_u} x {num_v} stations exceeds the limit of {MAX_GRID_STATIONS}",
            details={"num_u": num_u, "num_v": num_v, "max_stations": MAX_GRID_STATIONS},
        )
    us = _cell_centers(face.width, u_spacing, num_u)
    vs = _cell_centers(face.height, v_spacing, num_v)
    offset = face.normal.scale(standoff_m)

    stations: List[LocalCoord] = []
    if direction is ScanDirection.HORIZONTAL:
        for j, v in enumerate(vs):
            row = us if j % 2 == 0 else list(reversed(us))
            stations.extend(face.point_at(u, v) + offset for u in row)
    elif direction is ScanDirection.VERTICAL:
        for i, u in enumerate(us):
            column = vs if i % 2 == 0 else list(reversed(vs))
            stations.extend(face.point_at(u, v) + offset for v in column)
    else:
        raise InvalidInput(f"Unknown scan direction {direction!r}")

    if not stations:
        raise EmptyGrid("Waypoint grid is empty")
    return stations


def facing_pitch_deg(normal: LocalCoord) -> float:
    """Pitch (deg) of a camera looking along -normal: 0 for a vertical wall, -90 for a ground face."""
    n = normal.normalized()
    return math.degrees(math.asin(max(-1.0, min(1.0, -n.z))))


def generate_face_waypoints(
    face: FaceGeometry,
    camera: CameraSpec,
    lens: LensSpec,
    overlap: float,
    standoff_m: float,
    direction: ScanDirection = ScanDirection.HORIZONTAL,
    pitch_deg: Optional[float] = None,
    hold_time_s: float = 0.0,
) -> List[Waypoint]:
    """
    Waypoints covering the face at standoff_m with the given image overlap fraction.
    Each station looks at the face center; pitch is fixed for the whole face.
    """
    if not (standoff_m > 0 and math.isfinite(standoff_m)):
        raise InvalidInput("Standoff distance must be positive", details={"standoff_m": standoff_m})
    spacing = overlap_spacing(standoff_m, camera, lens, overlap, overlap)
    stations = grid_stations(
        face,
        spacing.horizontal_spacing_m,
        spacing.vertical_spacing_m,
        direction,
        standoff_m,
    )
    pitch = facing_pitch_deg(face.normal) if pitch_deg is None else pitch_deg
    waypoints = [
        Waypoint(
            position=station,
            heading=bearing_deg(face.center - station),
            pitch=pitch,
            roll=0.0,
            hold_time_s=hold_time_s,
        )
        for station in stations
    ]
    logger.info(
        "Face scan: %d waypoints (%s, spacing %.2f x %.2f m, standoff %.2f m, overlap %.0f%%)",
        len(waypoints),
        direction.value,
        spacing.horizontal_spacing_m,
        spacing.vertical_spacing_m,
        standoff_m,
        overlap * 100,
    )
    return waypoints


def face_scan_segment(
    segment_id: str,
    face: FaceGeometry,
    camera: CameraSpec,
    lens: LensSpec,
    overlap: float,
    standoff_m: float,
    direction: ScanDirection = ScanDirection.HORIZONTAL,
    speed_mps: Optional[float] = None,
    hold_time_s: float = 0.0,
) -> PathSegment:
    waypoints = generate_face_waypoints(
        face, camera, lens, overlap, standoff_m, direction, hold_time_s=hold_time_s
    )
    return PathSegment(id=segment_id, waypoints=tuple(waypoints), speed_mps=speed_mps)


def generate_raster_segment(
    segment_id: str,
    start: LocalCoord,
    row_length_m: float,
    row_spacing_m: float,
    num_rows: int,
    altitude_m: float,
    direction: ScanDirection = ScanDirection.HORIZONTAL,
    snake: bool = True,
    speed_mps: Optional[float] = None,
    pitch_deg: float = -90.0,
) -> PathSegment:
    """
    Ground lawnmower pattern at start.z + altitude_m.
    HORIZONTAL passes run East from start and step North; VERTICAL passes run North and step East.
    Without snake, every pass flies the same way and the vehicle returns to the pass start line
    through two transition waypoints.
    """
    if num_rows <= 0 or not row_length_m > 0 or not row_spacing_m > 0:
        raise InvalidInput(
            "Raster needs positive rows, row length and row spacing",
            details={"num_rows": num_rows, "row_length_m": row_length_m, "row_spacing_m": row_spacing_m},
        )
    z = start.z + altitude_m

    def along(offset_pass: float, offset_step: float) -> LocalCoord:
        if direction is ScanDirection.HORIZONTAL:
            return LocalCoord(start.x + offset_pass, start.y + offset_step, z)
        elif direction is ScanDirection.VERTICAL:
            return LocalCoord(start.x + offset_step, start.y + offset_pass, z)
        raise InvalidInput(f"Unknown scan direction {direction!r}")

    forward_heading = 90.0 if direction is ScanDirection.HORIZONTAL else 0.0
    backward_heading = (forward_heading + 180.0) % 360.0

    def wp(pos: LocalCoord, heading: float) -> Waypoint:
        return Waypoint(position=pos, heading=heading, pitch=pitch_deg, roll=0.0)

    waypoints: List[Waypoint] = []
    for i in range(num_rows):
        step = i * row_spacing_m
        reverse = snake and i % 2 == 1
        pass_start, pass_end = (row_length_m, 0.0) if reverse else (0.0, row_length_m)
        heading = backward_heading if reverse else forward_heading

        if not snake and i > 0:
            prev_step = (i - 1) * row_spacing_m
            waypoints.append(wp(along(pass_start, prev_step), heading))
            waypoints.append(wp(along(pass_start, step), heading))
        if snake or i == 0:
            waypoints.append(wp(along(pass_start, step), heading))
        waypoints.append(wp(along(pass_end, step), heading))

    logger.info("Raster segment %s: %d waypoints over %d passes", segment_id, len(waypoints), num_rows)
    return PathSegment(id=segment_id, waypoints=tuple(waypoints), speed_mps=speed_mps)
