"""
Mission settings constants for planning and simulation (run_all.py, webapp, validation).
Edit this file to change the target face, camera/lens, scan parameters, and simulator tuning.
"""

import os
from typing import List, Tuple

# ---------------------------------------------------------------------------
# Physical constants
# ---------------------------------------------------------------------------

# Equatorial radius (WGS84) used by the tangent-plane projection
EARTH_RADIUS_M = 6378137.0

# Circle of confusion = sensor diagonal / divisor. A convention, not a law; tune per workflow.
COC_DIAGONAL_DIVISOR = 1500.0

# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------

# Legs shorter than this (m) complete instantly and keep the last heading
LEG_EPSILON_M = 0.01
# Gimbal easing during a hold lasts min(HOLD_TRANSITION_MAX_S, hold_time / 2)
HOLD_TRANSITION_MAX_S = 2.0
# Mission default speed (m/s); segments may override
DEFAULT_SPEED_MS = 5.0
# Fixed tick used by run_all / webapp playback (s)
DEFAULT_TICK_S = 0.1
# Upper bound on ticks for a full playback run
MAX_SIM_STEPS = 200_000

# ---------------------------------------------------------------------------
# Hardware (camera + lens)
# ---------------------------------------------------------------------------

# Sony Alpha A7R IV class full-frame body
CAMERA_NAME = "Sony Alpha A7R IV"
CAMERA_SENSOR_WIDTH_MM = 35.7
CAMERA_SENSOR_HEIGHT_MM = 23.8
CAMERA_MEGAPIXELS = 61.0

LENS_NAME = "35mm prime"
LENS_FOCAL_LENGTH_MM = 35.0
LENS_MIN_APERTURE = 1.8   # widest opening (smallest f-number)
LENS_MAX_APERTURE = 22.0  # narrowest opening (largest f-number)
LENS_ZOOM_FACTOR = None

APERTURE = 5.6

# ---------------------------------------------------------------------------
# Face scan mission
# ---------------------------------------------------------------------------

# Target face: polygon vertices in local ENU meters and its outward normal.
# Default: a 40 m x 20 m south-facing wall standing on the ground at y = 0.
FACE_VERTICES: List[Tuple[float, float, float]] = [
    (-20.0, 0.0, 0.0),
    (20.0, 0.0, 0.0),
    (20.0, 0.0, 20.0),
    (-20.0, 0.0, 20.0),
]
FACE_NORMAL: Tuple[float, float, float] = (0.0, -1.0, 0.0)

FACE_OVERLAP = 0.70             # fraction in [0, 1)
FACE_STANDOFF_FT = 20.0         # standoff entered in feet, converted at the boundary
FACE_SCAN_DIRECTION = "Horizontal"  # "Horizontal" | "Vertical"
FACE_HOLD_TIME_S = 0.0
FACE_SEGMENT_ID = "face-scan"
FACE_SEGMENT_SPEED_MS = 3.0
# Upper bound on camera stations per face; smaller spacings are rejected
MAX_GRID_STATIONS = 100_000

# Takeoff point (local ENU) prepended to the simulated path
TAKEOFF_POINT: Tuple[float, float, float] = (0.0, -30.0, 0.0)

# Local frame anchor (lat_deg, lon_deg, alt_m) and frame heading (deg from true north)
LOCAL_ORIGIN: Tuple[float, float, float] = (37.7749, -122.4194, 10.0)
LOCAL_ORIGIN_HEADING_DEG = 0.0

# ---------------------------------------------------------------------------
# Robustness (timestep jitter Monte-Carlo)
# ---------------------------------------------------------------------------

MONTE_CARLO_NUM_SEEDS = 10
MONTE_CARLO_SEED = 42
MONTE_CARLO_MAX_TICK_S = 0.25

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("MISSION_ENGINE_LOG_LEVEL", "INFO")
