"""
Shared pytest fixtures for mission engine tests.
Ensures project root is on sys.path so src.* and webapp.* import correctly.
"""
import os
import sys
import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from src.camera.hardware import CameraSpec, LensSpec
from src.core.vectors import LocalCoord
from src.geo.face import face_basis


@pytest.fixture
def camera():
    """Full-frame 36 x 24 mm, 24 MP body."""
    return CameraSpec(sensor_width_mm=36.0, sensor_height_mm=24.0, megapixels=24.0, name="test body")


@pytest.fixture
def lens():
    return LensSpec(focal_length_mm=50.0, min_aperture=1.8, max_aperture=22.0, name="50mm")


@pytest.fixture
def wall_face():
    """40 m x 20 m vertical wall in the y = 0 plane, facing south (-y)."""
    vertices = [
        LocalCoord(-20.0, 0.0, 0.0),
        LocalCoord(20.0, 0.0, 0.0),
        LocalCoord(20.0, 0.0, 20.0),
        LocalCoord(-20.0, 0.0, 20.0),
    ]
    return face_basis(vertices, LocalCoord(0.0, -1.0, 0.0))
