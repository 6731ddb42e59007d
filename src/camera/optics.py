"""
Camera optics: field of view, footprint, ground sample distance, depth of field.
Pure functions. Lengths on the sensor side in mm, scene distances in meters, angles in degrees.
"""
import math
from dataclasses import dataclass

from src.camera.hardware import CameraSpec, LensSpec
from src.core.errors import InvalidInput
from src.mission_settings import COC_DIAGONAL_DIVISOR


@dataclass(frozen=True)
class Footprint:
    """Scene coverage of one image at a given distance (m)."""

    width_m: float
    height_m: float


@dataclass(frozen=True)
class DepthOfField:
    near_limit_m: float
    far_limit_m: float  # math.inf beyond hyperfocal
    total_m: float
    hyperfocal_m: float
    coc_mm: float


@dataclass(frozen=True)
class OverlapSpacing:
    horizontal_spacing_m: float  # between image centers along a pass
    vertical_spacing_m: float    # between adjacent passes
    footprint: Footprint
    horizontal_fov_deg: float
    vertical_fov_deg: float


def _require_positive(name: str, value: float) -> None:
    if not value > 0:
        raise InvalidInput(f"{name} must be positive", details={name: value})


def field_of_view(focal_length_mm: float, sensor_dimension_mm: float) -> float:
    """FOV in degrees along one sensor axis: 2 * atan(d / 2f)."""
    _require_positive("focal_length_mm", focal_length_mm)
    _require_positive("sensor_dimension_mm", sensor_dimension_mm)
    return math.degrees(2 * math.atan(sensor_dimension_mm / (2 * focal_length_mm)))


def horizontal_fov(camera: CameraSpec, lens: LensSpec) -> float:
    return field_of_view(lens.effective_focal_length_mm, camera.sensor_width_mm)


def vertical_fov(camera: CameraSpec, lens: LensSpec) -> float:
    return field_of_view(lens.effective_focal_length_mm, camera.sensor_height_mm)


def footprint(distance_m: float, camera: CameraSpec, lens: LensSpec) -> Footprint:
    """Coverage at distance_m: 2 * tan(FOV/2) * distance on each axis."""
    _require_positive("distance_m", distance_m)
    h = math.radians(horizontal_fov(camera, lens))
    v = math.radians(vertical_fov(camera, lens))
    return Footprint(
        width_m=2 * math.tan(h / 2) * distance_m,
        height_m=2 * math.tan(v / 2) * distance_m,
    )


def ground_sample_distance(distance_m: float, camera: CameraSpec, lens: LensSpec) -> float:
    """GSD in mm/pixel: footprint width divided by horizontal pixel count."""
    fp = footprint(distance_m, camera, lens)
    return fp.width_m * 1000.0 / camera.image_width_px


def distance_for_gsd(target_gsd_mm: float, camera: CameraSpec, lens: LensSpec) -> float:
    """Distance (m) at which the camera resolves target_gsd_mm per pixel."""
    _require_positive("target_gsd_mm", target_gsd_mm)
    # Footprint scales linearly with distance, so GSD does too.
    gsd_at_1m = ground_sample_distance(1.0, camera, lens)
    return target_gsd_mm / gsd_at_1m


def circle_of_confusion(camera: CameraSpec, divisor: float = COC_DIAGONAL_DIVISOR) -> float:
    """Acceptable blur circle (mm) as a fixed fraction of the sensor diagonal."""
    _require_positive("divisor", divisor)
    return camera.diagonal_mm / divisor


def hyperfocal_distance(lens: LensSpec, aperture: float, coc_mm: float) -> float:
    """H = f^2 / (N * c) + f, returned in meters."""
    _require_positive("aperture", aperture)
    lens.validate_aperture(aperture)
    _require_positive("coc_mm", coc_mm)
    f = lens.effective_focal_length_mm
    return (f * f / (aperture * coc_mm) + f) / 1000.0


def depth_of_field(
    distance_m: float,
    camera: CameraSpec,
    lens: LensSpec,
    aperture: float,
    coc_divisor: float = COC_DIAGONAL_DIVISOR,
) -> DepthOfField:
    """
    Thin-lens near/far limits of acceptable sharpness around focus distance s:
        near = H*s / (H + (s - f))
        far  = H*s / (H - (s - f)),  +inf once the denominator reaches 0
    """
    if not distance_m > 0:
        raise InvalidInput("Focus distance must be positive", details={"distance_m": distance_m})
    if not aperture > 0:
        raise InvalidInput("Aperture must be positive", details={"aperture": aperture})
    lens.validate_aperture(aperture)

    coc = circle_of_confusion(camera, coc_divisor)
    hyperfocal = hyperfocal_distance(lens, aperture, coc)
    f_m = lens.effective_focal_length_mm / 1000.0
    s = distance_m

    near = (hyperfocal * s) / (hyperfocal + (s - f_m))
    far_denominator = hyperfocal - (s - f_m)
    if far_denominator <= 0:
        far = math.inf
    else:
        far = (hyperfocal * s) / far_denominator
    total = math.inf if math.isinf(far) else far - near
    return DepthOfField(
        near_limit_m=near,
        far_limit_m=far,
        total_m=total,
        hyperfocal_m=hyperfocal,
        coc_mm=coc,
    )


def overlap_spacing(
    distance_m: float,
    camera: CameraSpec,
    lens: LensSpec,
    overlap_h: float,
    overlap_v: float,
) -> OverlapSpacing:
    """
    Spacing between image centers for the requested overlap fractions.
    Horizontal (along-pass) uses the footprint width, vertical (between passes) the height.
    """
    for name, value in (("overlap_h", overlap_h), ("overlap_v", overlap_v)):
        if not (0.0 <= value < 1.0):
            raise InvalidInput(f"{name} must be in [0, 1)", details={name: value})
    fp = footprint(distance_m, camera, lens)
    return OverlapSpacing(
        horizontal_spacing_m=fp.width_m * (1 - overlap_h),
        vertical_spacing_m=fp.height_m * (1 - overlap_v),
        footprint=fp,
        horizontal_fov_deg=horizontal_fov(camera, lens),
        vertical_fov_deg=vertical_fov(camera, lens),
    )
