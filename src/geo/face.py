"""
Planar face geometry: an in-plane orthonormal basis and bounding extents derived
from a polygon's vertices and its face normal.
"""
from dataclasses import dataclass
from typing import Sequence, Tuple

from src.core.errors import DegenerateGeometry
from src.core.vectors import LocalCoord, WORLD_X, WORLD_Y

# Reference axis is considered parallel to the normal above this |dot|
PARALLEL_DOT_LIMIT = 0.999
MIN_NORMAL_LENGTH = 1e-9


@dataclass(frozen=True)
class FaceGeometry:
    """
    center: bounding-box center on the face plane.
    x_axis, y_axis, normal: right-handed orthonormal frame (x_axis x y_axis = normal).
    width / height: extents along x_axis / y_axis.
    """

    center: LocalCoord
    normal: LocalCoord
    x_axis: LocalCoord
    y_axis: LocalCoord
    width: float
    height: float

    def point_at(self, u: float, v: float) -> LocalCoord:
        """Face-plane point at face-local (u, v) measured from the center."""
        return self.center + self.x_axis.scale(u) + self.y_axis.scale(v)

    def project(self, p: LocalCoord) -> Tuple[float, float]:
        """Face-local (u, v) of p relative to the center (normal component dropped)."""
        d = p - self.center
        return d.dot(self.x_axis), d.dot(self.y_axis)


def in_plane_axes(normal: LocalCoord) -> Tuple[LocalCoord, LocalCoord, LocalCoord]:
    """
    (x_axis, y_axis, unit normal) for a plane with the given normal.
    World X is the reference axis unless nearly parallel to the normal, then world Y.
    """
    if not normal.length() >= MIN_NORMAL_LENGTH:
        raise DegenerateGeometry("Face normal has near-zero length", details={"normal": normal.as_tuple()})
    n = normal.normalized()
    ref = WORLD_X if abs(n.dot(WORLD_X)) <= PARALLEL_DOT_LIMIT else WORLD_Y
    x_axis = (ref - n.scale(ref.dot(n))).normalized()
    y_axis = n.cross(x_axis)
    return x_axis, y_axis, n


def face_basis(vertices: Sequence[LocalCoord], normal: LocalCoord) -> FaceGeometry:
    """Build the FaceGeometry for a planar polygon. Needs at least 3 vertices."""
    if len(vertices) < 3:
        raise DegenerateGeometry(
            f"Face needs at least 3 vertices, got {len(vertices)}",
            details={"vertex_count": len(vertices)},
        )
    x_axis, y_axis, n = in_plane_axes(normal)

    us = [p.dot(x_axis) for p in vertices]
    vs = [p.dot(y_axis) for p in vertices]
    plane_offset = sum(p.dot(n) for p in vertices) / len(vertices)

    u_min, u_max = min(us), max(us)
    v_min, v_max = min(vs), max(vs)
    u_c = (u_min + u_max) / 2
    v_c = (v_min + v_max) / 2
    center = x_axis.scale(u_c) + y_axis.scale(v_c) + n.scale(plane_offset)

    return FaceGeometry(
        center=center,
        normal=n,
        x_axis=x_axis,
        y_axis=y_axis,
        width=u_max - u_min,
        height=v_max - v_min,
    )
