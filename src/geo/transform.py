"""
Local ENU <-> geodetic conversion around a mission origin.
Equirectangular tangent-plane approximation: fine for mission-scale extents (tens of km),
not exact geodesy. Latitude/longitude in degrees, altitude and local offsets in meters.
"""
import math
from dataclasses import dataclass

from src.core.vectors import LocalCoord
from src.mission_settings import EARTH_RADIUS_M


@dataclass(frozen=True)
class GeoCoord:
    latitude: float
    longitude: float
    altitude: float = 0.0


@dataclass(frozen=True)
class LocalOrigin:
    """
    Anchor of the local frame. heading_deg rotates the local +y axis clockwise
    from true north (0 = local axes aligned with East/North).
    """

    anchor: GeoCoord
    heading_deg: float = 0.0


def _rotate(x: float, y: float, heading_deg: float):
    """Local (x, y) -> true (east, north) for a frame rotated heading_deg clockwise."""
    if heading_deg == 0.0:
        return x, y
    h = math.radians(heading_deg)
    east = x * math.cos(h) + y * math.sin(h)
    north = -x * math.sin(h) + y * math.cos(h)
    return east, north


def local_to_geo(local: LocalCoord, origin: LocalOrigin) -> GeoCoord:
    east, north = _rotate(local.x, local.y, origin.heading_deg)
    lat0 = origin.anchor.latitude
    dlat = math.degrees(north / EARTH_RADIUS_M)
    dlon = math.degrees(east / (EARTH_RADIUS_M * math.cos(math.radians(lat0))))
    return GeoCoord(
        latitude=lat0 + dlat,
        longitude=origin.anchor.longitude + dlon,
        altitude=origin.anchor.altitude + local.z,
    )


def geo_to_local(geo: GeoCoord, origin: LocalOrigin) -> LocalCoord:
    lat0 = origin.anchor.latitude
    north = math.radians(geo.latitude - lat0) * EARTH_RADIUS_M
    east = math.radians(geo.longitude - origin.anchor.longitude) * EARTH_RADIUS_M * math.cos(math.radians(lat0))
    # Inverse rotation is the rotation by -heading
    x, y = _rotate(east, north, -origin.heading_deg)
    return LocalCoord(x, y, geo.altitude - origin.anchor.altitude)


def bearing_deg(vector: LocalCoord) -> float:
    """Compass bearing of the vector's horizontal part in degrees [0, 360). 0 for a vertical/zero vector."""
    if abs(vector.x) < 1e-12 and abs(vector.y) < 1e-12:
        return 0.0
    return math.degrees(math.atan2(vector.x, vector.y)) % 360.0


def haversine_distance_m(a: GeoCoord, b: GeoCoord) -> float:
    """Great-circle surface distance between two geodetic points (altitude ignored)."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))
