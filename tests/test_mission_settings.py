"""Tests for mission_settings constants."""
import pytest

from src.mission_settings import (
    CAMERA_SENSOR_HEIGHT_MM,
    CAMERA_SENSOR_WIDTH_MM,
    COC_DIAGONAL_DIVISOR,
    DEFAULT_SPEED_MS,
    DEFAULT_TICK_S,
    EARTH_RADIUS_M,
    FACE_NORMAL,
    FACE_OVERLAP,
    FACE_SCAN_DIRECTION,
    FACE_STANDOFF_FT,
    FACE_VERTICES,
    HOLD_TRANSITION_MAX_S,
    LEG_EPSILON_M,
    LENS_MAX_APERTURE,
    LENS_MIN_APERTURE,
    LOCAL_ORIGIN,
    MONTE_CARLO_NUM_SEEDS,
    MONTE_CARLO_SEED,
    TAKEOFF_POINT,
    APERTURE,
)


def test_physical_constants():
    assert EARTH_RADIUS_M == 6378137.0
    assert COC_DIAGONAL_DIVISOR > 0


def test_simulator_tuning_positive():
    assert LEG_EPSILON_M == 0.01
    assert HOLD_TRANSITION_MAX_S == 2.0
    assert DEFAULT_SPEED_MS > 0
    assert DEFAULT_TICK_S > 0


def test_hardware_defaults_valid():
    assert CAMERA_SENSOR_WIDTH_MM > 0 and CAMERA_SENSOR_HEIGHT_MM > 0
    assert 0 < LENS_MIN_APERTURE <= APERTURE <= LENS_MAX_APERTURE


def test_face_defaults():
    assert len(FACE_VERTICES) >= 3
    assert len(FACE_NORMAL) == 3
    assert 0 <= FACE_OVERLAP < 1
    assert FACE_STANDOFF_FT > 0
    assert FACE_SCAN_DIRECTION in ("Horizontal", "Vertical")


def test_takeoff_and_origin():
    assert len(TAKEOFF_POINT) == 3
    assert -90 <= LOCAL_ORIGIN[0] <= 90
    assert -180 <= LOCAL_ORIGIN[1] <= 180


def test_monte_carlo_params():
    assert MONTE_CARLO_NUM_SEEDS >= 1
    assert MONTE_CARLO_SEED is not None
