"""
Mission engine Flask app: JSON calculator API over the optics, face planner and simulator.
Start mission runs the pipeline from mission_settings and writes to outputs/.
"""
import json
import logging
import math
import os
import sys

from flask import Flask, jsonify, request

app = Flask(__name__)

# Path to outputs and project root (parent of webapp)
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
OUTPUTS = os.path.join(ROOT, "outputs")
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from src.core.errors import InvalidInput, MissionEngineError, error_response

logger = logging.getLogger(__name__)


@app.errorhandler(MissionEngineError)
def _engine_error(e):
    return jsonify(e.to_payload()), 400


@app.errorhandler(500)
def _internal_error(e):
    original = getattr(e, "original_exception", None) or e
    logger.error("Request failed: %s", original)
    return jsonify(error_response("INTERNAL_ERROR", str(original))), 500


def _load_json(name: str):
    path = os.path.join(OUTPUTS, name)
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None


def _body():
    data = request.get_json(force=True, silent=True) or {}
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")
    return data


def _object(value, key):
    if not isinstance(value, dict):
        raise InvalidInput(f"{key} must be an object", details={key: value})
    return value


def _number(data, key, default):
    value = data.get(key, default)
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{key} must be a number", details={key: value})
    if not math.isfinite(number):
        raise InvalidInput(f"{key} must be finite", details={key: str(value)})
    return number


def _point(value, key):
    try:
        x, y, z = (float(c) for c in value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{key} must be [x, y, z]", details={key: value})
    if not all(math.isfinite(c) for c in (x, y, z)):
        raise InvalidInput(f"{key} must be finite", details={key: [str(c) for c in (x, y, z)]})
    from src.core.vectors import LocalCoord
    return LocalCoord(x, y, z)


def _hardware(data):
    from src.run_all import build_hardware
    from src.mission_settings import (
        CAMERA_MEGAPIXELS,
        CAMERA_SENSOR_HEIGHT_MM,
        CAMERA_SENSOR_WIDTH_MM,
        LENS_FOCAL_LENGTH_MM,
        LENS_ZOOM_FACTOR,
    )
    return build_hardware(
        sensor_width_mm=_number(data, "sensor_width_mm", CAMERA_SENSOR_WIDTH_MM),
        sensor_height_mm=_number(data, "sensor_height_mm", CAMERA_SENSOR_HEIGHT_MM),
        megapixels=_number(data, "megapixels", CAMERA_MEGAPIXELS),
        focal_length_mm=_number(data, "focal_length_mm", LENS_FOCAL_LENGTH_MM),
        zoom_factor=_number(data, "zoom_factor", LENS_ZOOM_FACTOR),
    )


def _path_from_json(segments):
    """[{id, speed_mps?, waypoints: [{position: [x,y,z], heading?, pitch?, roll?, hold_time_s?}]}]"""
    from src.mission.model import PathSegment, Waypoint

    if not isinstance(segments, list):
        raise InvalidInput("segments must be a list")
    path = []
    for i, seg in enumerate(segments):
        seg = _object(seg, "segment")
        raw_waypoints = seg.get("waypoints") or []
        if not isinstance(raw_waypoints, list):
            raise InvalidInput("waypoints must be a list", details={"segment": i})
        waypoints = [
            Waypoint(
                position=_point(wp.get("position"), "position"),
                heading=_number(wp, "heading", 0.0),
                pitch=_number(wp, "pitch", 0.0),
                roll=_number(wp, "roll", 0.0),
                hold_time_s=_number(wp, "hold_time_s", 0.0),
            )
            for wp in (_object(item, "waypoint") for item in raw_waypoints)
        ]
        path.append(PathSegment(
            id=str(seg.get("id") or f"segment-{i}"),
            waypoints=waypoints,
            speed_mps=_number(seg, "speed_mps", None),
        ))
    return path


@app.route("/")
def index():
    return jsonify({
        "service": "mission-engine",
        "endpoints": [
            "/api/settings",
            "/api/optics",
            "/api/face_mission",
            "/api/simulate",
            "/api/mission",
            "/api/start_mission",
        ],
    })


@app.route("/api/settings")
def api_settings():
    """Return current mission settings (hardware, face, scan, simulator) from mission_settings."""
    from src.mission_settings import (
        APERTURE,
        CAMERA_MEGAPIXELS,
        CAMERA_NAME,
        CAMERA_SENSOR_HEIGHT_MM,
        CAMERA_SENSOR_WIDTH_MM,
        DEFAULT_SPEED_MS,
        DEFAULT_TICK_S,
        FACE_NORMAL,
        FACE_OVERLAP,
        FACE_SCAN_DIRECTION,
        FACE_STANDOFF_FT,
        FACE_VERTICES,
        LENS_FOCAL_LENGTH_MM,
        LENS_NAME,
        LOCAL_ORIGIN,
        TAKEOFF_POINT,
    )
    return jsonify({
        "camera": {
            "name": CAMERA_NAME,
            "sensor_width_mm": CAMERA_SENSOR_WIDTH_MM,
            "sensor_height_mm": CAMERA_SENSOR_HEIGHT_MM,
            "megapixels": CAMERA_MEGAPIXELS,
        },
        "lens": {"name": LENS_NAME, "focal_length_mm": LENS_FOCAL_LENGTH_MM, "aperture": APERTURE},
        "face": {
            "vertices": [list(v) for v in FACE_VERTICES],
            "normal": list(FACE_NORMAL),
            "overlap": FACE_OVERLAP,
            "standoff_ft": FACE_STANDOFF_FT,
            "scan_direction": FACE_SCAN_DIRECTION,
        },
        "simulator": {"default_speed_ms": DEFAULT_SPEED_MS, "tick_s": DEFAULT_TICK_S},
        "takeoff": list(TAKEOFF_POINT),
        "origin": list(LOCAL_ORIGIN),
        "scan_directions": ["Horizontal", "Vertical"],
    })


@app.route("/api/optics", methods=["POST"])
def api_optics():
    """Optics report at distance_m (or distance_ft) for the given or configured hardware."""
    from src.camera.units import feet_to_meters
    from src.mission_settings import APERTURE, FACE_OVERLAP, FACE_STANDOFF_FT
    from src.run_all import optics_report

    data = _body()
    camera, lens = _hardware(data)
    if data.get("distance_m") is not None:
        distance_m = _number(data, "distance_m", None)
    else:
        distance_m = feet_to_meters(_number(data, "distance_ft", FACE_STANDOFF_FT))
    report = optics_report(
        camera,
        lens,
        distance_m,
        aperture=_number(data, "aperture", APERTURE),
        overlap=_number(data, "overlap", FACE_OVERLAP),
    )
    return jsonify(report)


@app.route("/api/face_mission", methods=["POST"])
def api_face_mission():
    """Generate face-scan waypoints (local + geodetic) for a posted face or the configured one."""
    from src.camera.units import feet_to_meters
    from src.mission.model import SpeedPolicy, estimate_flight_time_s, format_duration_mmss, segment_length_m
    from src.mission_settings import (
        DEFAULT_SPEED_MS,
        FACE_HOLD_TIME_S,
        FACE_NORMAL,
        FACE_OVERLAP,
        FACE_SCAN_DIRECTION,
        FACE_STANDOFF_FT,
        FACE_VERTICES,
    )
    from src.run_all import build_face, build_origin, plan_face_path, waypoint_rows

    data = _body()
    camera, lens = _hardware(data)
    vertices = data.get("vertices") or FACE_VERTICES
    face = build_face(
        [_point(v, "vertices").as_tuple() for v in vertices],
        _point(data.get("normal") or FACE_NORMAL, "normal").as_tuple(),
    )
    if data.get("standoff_m") is not None:
        standoff_m = _number(data, "standoff_m", None)
    else:
        standoff_m = feet_to_meters(_number(data, "standoff_ft", FACE_STANDOFF_FT))
    direction = data.get("scan_direction") or FACE_SCAN_DIRECTION
    if direction not in ("Horizontal", "Vertical"):
        raise InvalidInput("scan_direction must be Horizontal or Vertical", details={"scan_direction": direction})

    path = plan_face_path(
        camera,
        lens,
        face,
        standoff_m,
        overlap=_number(data, "overlap", FACE_OVERLAP),
        direction=direction,
        hold_time_s=_number(data, "hold_time_s", FACE_HOLD_TIME_S),
    )
    estimate_s = estimate_flight_time_s(path, SpeedPolicy(default_speed_mps=DEFAULT_SPEED_MS))
    return jsonify({
        "ok": True,
        "standoff_m": standoff_m,
        "face": {"width_m": face.width, "height_m": face.height, "center": list(face.center.as_tuple())},
        "waypoints": waypoint_rows(path, build_origin()),
        "path_length_m": segment_length_m(path[0]),
        "estimated_time_s": estimate_s,
        "estimated_time_mmss": format_duration_mmss(estimate_s),
    })


@app.route("/api/simulate", methods=["POST"])
def api_simulate():
    """Play back a posted path with a fixed tick; returns a thinned track and the final state."""
    from src.mission.simulate import SimPhase
    from src.mission_settings import DEFAULT_SPEED_MS, DEFAULT_TICK_S
    from src.run_all import simulate_path

    data = _body()
    path = _path_from_json(data.get("segments"))
    takeoff = _point(data["takeoff"], "takeoff") if data.get("takeoff") is not None else None
    tick_s = _number(data, "tick_s", DEFAULT_TICK_S)
    if not tick_s > 0:
        raise InvalidInput("tick_s must be positive", details={"tick_s": tick_s})
    multiplier = _number(data, "multiplier", 1.0)
    if not multiplier > 0:
        raise InvalidInput("multiplier must be positive for playback", details={"multiplier": multiplier})
    every = max(1, int(_number(data, "sample_every", 10)))

    final, states, events = simulate_path(
        path,
        takeoff,
        default_speed_mps=_number(data, "default_speed_mps", DEFAULT_SPEED_MS),
        multiplier=multiplier,
        tick_s=tick_s,
    )
    if final.phase is not SimPhase.FINISHED:
        return jsonify(error_response(
            "PLAYBACK_INCOMPLETE",
            f"Playback did not finish within {len(states)} ticks",
            details={"phase": final.phase.value, "ticks": len(states), "elapsed_s": final.elapsed_s},
        )), 400
    track = [
        {
            "t": s.elapsed_s,
            "position": list(s.current_position.as_tuple()),
            "heading": s.current_heading,
            "pitch": s.current_pitch,
            "roll": s.current_roll,
            "phase": s.phase.value,
        }
        for s in states[::every]
    ]
    return jsonify({
        "ok": True,
        "phase": final.phase.value,
        "elapsed_s": final.elapsed_s,
        "distance_traveled_m": final.distance_traveled_m,
        "ticks": len(states),
        "track": track,
        "events": [
            {"kind": e.kind.value, "waypoint_index": e.waypoint_index, "segment_id": e.segment_id, "t": e.elapsed_s}
            for e in events
        ],
    })


@app.route("/api/mission")
def api_mission():
    data = _load_json("face_mission.json")
    if data is None:
        return {"error": "No face mission found. Click Start mission to run the mission from settings."}, 404
    return data


@app.route("/api/start_mission", methods=["POST"])
def api_start_mission():
    """Run the pipeline from mission_settings; write to outputs/. Returns JSON { ok: true } or error."""
    from src.run_all import run_face_mission

    out = run_face_mission()
    return jsonify({"ok": True, "waypoint_count": out["performance_metrics"]["waypoint_count"]})


def main():
    from src.core.logging_setup import setup_logging

    setup_logging("webapp")
    app.run(host="127.0.0.1", port=5000, debug=False)


if __name__ == "__main__":
    main()
