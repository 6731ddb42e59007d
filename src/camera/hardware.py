"""
Camera body and lens specifications (caller-supplied, read-only inputs).
Sensor dimensions and focal lengths in mm; apertures as f-numbers.
"""
import math
from dataclasses import dataclass
from typing import Optional

from src.core.errors import InvalidInput


@dataclass(frozen=True)
class CameraSpec:
    """Physical sensor. Pixel grid is derived from megapixels and the sensor aspect ratio."""

    sensor_width_mm: float
    sensor_height_mm: float
    megapixels: float
    name: str = ""

    def __post_init__(self):
        if not (self.sensor_width_mm > 0 and self.sensor_height_mm > 0):
            raise InvalidInput(
                "Sensor dimensions must be positive",
                details={"sensor_width_mm": self.sensor_width_mm, "sensor_height_mm": self.sensor_height_mm},
            )
        if not self.megapixels > 0:
            raise InvalidInput("Megapixels must be positive", details={"megapixels": self.megapixels})

    @property
    def aspect_ratio(self) -> float:
        return self.sensor_width_mm / self.sensor_height_mm

    @property
    def diagonal_mm(self) -> float:
        return math.hypot(self.sensor_width_mm, self.sensor_height_mm)

    @property
    def image_width_px(self) -> float:
        # w * h = MP * 1e6 and w / h = aspect  ->  w = sqrt(MP * 1e6 * aspect)
        return math.sqrt(self.megapixels * 1e6 * self.aspect_ratio)

    @property
    def image_height_px(self) -> float:
        return math.sqrt(self.megapixels * 1e6 / self.aspect_ratio)


@dataclass(frozen=True)
class LensSpec:
    """
    Lens with an aperture range. min_aperture is the widest opening (smallest f-number),
    max_aperture the narrowest. zoom_factor multiplies the base focal length.
    """

    focal_length_mm: float
    min_aperture: float
    max_aperture: float
    zoom_factor: Optional[float] = None
    name: str = ""

    def __post_init__(self):
        if not self.focal_length_mm > 0:
            raise InvalidInput("Focal length must be positive", details={"focal_length_mm": self.focal_length_mm})
        if not (0 < self.min_aperture <= self.max_aperture):
            raise InvalidInput(
                "Aperture range must satisfy 0 < min_aperture <= max_aperture",
                details={"min_aperture": self.min_aperture, "max_aperture": self.max_aperture},
            )
        if self.zoom_factor is not None and not self.zoom_factor > 0:
            raise InvalidInput("Zoom factor must be positive", details={"zoom_factor": self.zoom_factor})

    @property
    def effective_focal_length_mm(self) -> float:
        return self.focal_length_mm * (self.zoom_factor or 1.0)

    def clamp_aperture(self, f_number: float) -> float:
        """Nearest f-number the lens can actually set."""
        return max(self.min_aperture, min(self.max_aperture, f_number))

    def validate_aperture(self, f_number: float) -> float:
        if not (self.min_aperture <= f_number <= self.max_aperture):
            raise InvalidInput(
                f"Aperture f/{f_number} outside lens range f/{self.min_aperture}-f/{self.max_aperture}",
                details={"aperture": f_number},
            )
        return f_number
