"""
Single entry point: plan and simulate the face-scan mission end-to-end.
Saves the plan, optics report, geodetic waypoints and playback metrics to outputs/.
All mission variables (face, camera, lens, scan parameters, etc.) are defined in src.mission_settings.
"""
import json
import logging
import math
import os
import sys

# Add project root so "src" imports work
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from src.mission_settings import (
    APERTURE,
    CAMERA_MEGAPIXELS,
    CAMERA_NAME,
    CAMERA_SENSOR_HEIGHT_MM,
    CAMERA_SENSOR_WIDTH_MM,
    DEFAULT_SPEED_MS,
    DEFAULT_TICK_S,
    FACE_HOLD_TIME_S,
    FACE_NORMAL,
    FACE_OVERLAP,
    FACE_SCAN_DIRECTION,
    FACE_SEGMENT_ID,
    FACE_SEGMENT_SPEED_MS,
    FACE_STANDOFF_FT,
    FACE_VERTICES,
    LENS_FOCAL_LENGTH_MM,
    LENS_MAX_APERTURE,
    LENS_MIN_APERTURE,
    LENS_NAME,
    LENS_ZOOM_FACTOR,
    LOCAL_ORIGIN,
    LOCAL_ORIGIN_HEADING_DEG,
    TAKEOFF_POINT,
)

logger = logging.getLogger(__name__)


def _finite_or_none(value):
    """JSON has no infinity; report unbounded values as null."""
    return value if math.isfinite(value) else None


def build_hardware(
    sensor_width_mm=CAMERA_SENSOR_WIDTH_MM,
    sensor_height_mm=CAMERA_SENSOR_HEIGHT_MM,
    megapixels=CAMERA_MEGAPIXELS,
    focal_length_mm=LENS_FOCAL_LENGTH_MM,
    zoom_factor=LENS_ZOOM_FACTOR,
):
    """Camera and lens from mission_settings, with optional overrides."""
    from src.camera.hardware import CameraSpec, LensSpec

    camera = CameraSpec(
        sensor_width_mm=sensor_width_mm,
        sensor_height_mm=sensor_height_mm,
        megapixels=megapixels,
        name=CAMERA_NAME,
    )
    lens = LensSpec(
        focal_length_mm=focal_length_mm,
        min_aperture=LENS_MIN_APERTURE,
        max_aperture=LENS_MAX_APERTURE,
        zoom_factor=zoom_factor,
        name=LENS_NAME,
    )
    return camera, lens


def build_face(vertices=FACE_VERTICES, normal=FACE_NORMAL):
    from src.core.vectors import LocalCoord
    from src.geo.face import face_basis

    return face_basis([LocalCoord(*v) for v in vertices], LocalCoord(*normal))


def build_origin(anchor=LOCAL_ORIGIN, heading_deg=LOCAL_ORIGIN_HEADING_DEG):
    from src.geo.transform import GeoCoord, LocalOrigin

    return LocalOrigin(anchor=GeoCoord(*anchor), heading_deg=heading_deg)


def optics_report(camera, lens, distance_m, aperture=APERTURE, overlap=FACE_OVERLAP):
    """FOV, footprint, GSD, depth of field and image spacing at one working distance."""
    from src.camera.optics import depth_of_field, ground_sample_distance, overlap_spacing
    from src.camera.units import meters_to_feet

    spacing = overlap_spacing(distance_m, camera, lens, overlap, overlap)
    dof = depth_of_field(distance_m, camera, lens, lens.clamp_aperture(aperture))
    return {
        "camera": {
            "name": camera.name,
            "sensor_width_mm": camera.sensor_width_mm,
            "sensor_height_mm": camera.sensor_height_mm,
            "megapixels": camera.megapixels,
            "image_width_px": camera.image_width_px,
            "image_height_px": camera.image_height_px,
        },
        "lens": {
            "name": lens.name,
            "focal_length_mm": lens.focal_length_mm,
            "effective_focal_length_mm": lens.effective_focal_length_mm,
            "aperture": lens.clamp_aperture(aperture),
        },
        "distance_m": distance_m,
        "distance_ft": meters_to_feet(distance_m),
        "horizontal_fov_deg": spacing.horizontal_fov_deg,
        "vertical_fov_deg": spacing.vertical_fov_deg,
        "footprint_m": {"width": spacing.footprint.width_m, "height": spacing.footprint.height_m},
        "gsd_mm_per_px": ground_sample_distance(distance_m, camera, lens),
        "overlap": overlap,
        "spacing_m": {
            "horizontal": spacing.horizontal_spacing_m,
            "vertical": spacing.vertical_spacing_m,
        },
        "depth_of_field": {
            "near_limit_m": dof.near_limit_m,
            "far_limit_m": _finite_or_none(dof.far_limit_m),
            "total_m": _finite_or_none(dof.total_m),
            "hyperfocal_m": dof.hyperfocal_m,
            "coc_mm": dof.coc_mm,
        },
    }


def plan_face_path(
    camera,
    lens,
    face,
    standoff_m,
    overlap=FACE_OVERLAP,
    direction=FACE_SCAN_DIRECTION,
    hold_time_s=FACE_HOLD_TIME_S,
    speed_mps=FACE_SEGMENT_SPEED_MS,
    segment_id=FACE_SEGMENT_ID,
):
    """One-segment path covering the face."""
    from src.mission.planner import ScanDirection, face_scan_segment

    segment = face_scan_segment(
        segment_id,
        face,
        camera,
        lens,
        overlap,
        standoff_m,
        ScanDirection(direction),
        speed_mps=speed_mps,
        hold_time_s=hold_time_s,
    )
    return [segment]


def simulate_path(path, takeoff, default_speed_mps=DEFAULT_SPEED_MS, multiplier=1.0, tick_s=DEFAULT_TICK_S):
    """Play the path back with a fixed tick; returns (final state, snapshots, events)."""
    from src.mission.model import SpeedPolicy
    from src.mission.simulate import MissionSimulator, run_playback

    sim = MissionSimulator()
    sim.start(path, SpeedPolicy(default_speed_mps=default_speed_mps, multiplier=multiplier), takeoff=takeoff)
    states = run_playback(sim, tick_s)
    return sim.state, states, sim.drain_events()


def waypoint_rows(path, origin):
    """Flattened waypoints with local and geodetic coordinates."""
    from src.geo.transform import local_to_geo

    rows = []
    for segment in path:
        for wp in segment.waypoints:
            geo = local_to_geo(wp.position, origin)
            rows.append({
                "segment_id": segment.id,
                "x": wp.position.x,
                "y": wp.position.y,
                "z": wp.position.z,
                "lat": geo.latitude,
                "lon": geo.longitude,
                "alt_m": geo.altitude,
                "heading_deg": wp.heading,
                "pitch_deg": wp.pitch,
                "roll_deg": wp.roll,
                "hold_time_s": wp.hold_time_s,
            })
    return rows


def run_face_mission():
    """Plan and simulate the face scan; save to outputs/ (JSON + plot).
    Uses mission_settings for the face, camera/lens, standoff (feet), overlap and takeoff point.
    """
    from src.camera.units import feet_to_meters
    from src.core.vectors import LocalCoord
    from src.mission.model import (
        SpeedPolicy,
        estimate_flight_time_s,
        flatten_path,
        format_duration_mmss,
        path_length_m,
    )

    camera, lens = build_hardware()
    face = build_face()
    origin = build_origin()
    standoff_m = feet_to_meters(FACE_STANDOFF_FT)
    takeoff = LocalCoord(*TAKEOFF_POINT)

    path = plan_face_path(camera, lens, face, standoff_m)
    points = flatten_path(path, takeoff)
    estimate_s = estimate_flight_time_s(path, SpeedPolicy(default_speed_mps=DEFAULT_SPEED_MS), takeoff)
    final, states, events = simulate_path(path, takeoff)

    out = {
        "module": "Face scan (photogrammetry)",
        "face": {
            "center": list(face.center.as_tuple()),
            "normal": list(face.normal.as_tuple()),
            "x_axis": list(face.x_axis.as_tuple()),
            "y_axis": list(face.y_axis.as_tuple()),
            "width_m": face.width,
            "height_m": face.height,
        },
        "standoff_ft": FACE_STANDOFF_FT,
        "standoff_m": standoff_m,
        "scan_direction": FACE_SCAN_DIRECTION,
        "optics": optics_report(camera, lens, standoff_m),
        "takeoff": list(takeoff.as_tuple()),
        "origin": {
            "lat": origin.anchor.latitude,
            "lon": origin.anchor.longitude,
            "alt_m": origin.anchor.altitude,
            "heading_deg": origin.heading_deg,
        },
        "waypoints": waypoint_rows(path, origin),
        "performance_metrics": {
            "waypoint_count": len(points) - 1,
            "path_length_m": path_length_m(points),
            "estimated_time_s": estimate_s,
            "estimated_time_mmss": format_duration_mmss(estimate_s),
            "simulated_time_s": final.elapsed_s,
            "simulated_distance_m": final.distance_traveled_m,
            "ticks": len(states),
            "finished": final.phase.value == "finished",
        },
        "events": [
            {"kind": e.kind.value, "waypoint_index": e.waypoint_index, "t": e.elapsed_s}
            for e in events
        ],
    }
    os.makedirs(os.path.join(ROOT, "outputs"), exist_ok=True)
    json_path = os.path.join(ROOT, "outputs", "face_mission.json")
    with open(json_path, "w") as f:
        json.dump(out, f, indent=2)
    logger.info("Face mission saved to %s", json_path)

    # Plan view and face elevation of the flown track
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))
        xs = [p.waypoint.position.x for p in points]
        ys = [p.waypoint.position.y for p in points]
        zs = [p.waypoint.position.z for p in points]
        ax1.plot(xs, ys, "b-o", markersize=3)
        ax1.plot([v[0] for v in FACE_VERTICES], [v[1] for v in FACE_VERTICES], "k-", linewidth=3)
        ax1.set_xlabel("East (m)")
        ax1.set_ylabel("North (m)")
        ax1.set_title("Plan view")
        ax1.set_aspect("equal", adjustable="datalim")
        ax1.grid(True)
        uv = [face.project(p.waypoint.position) for p in points[1:]]
        ax2.plot([u for u, _ in uv], [v for _, v in uv], "g-o", markersize=3)
        ax2.set_xlabel("Face u (m)")
        ax2.set_ylabel("Face v (m)")
        ax2.set_title(f"Face stations ({FACE_SCAN_DIRECTION})")
        ax2.grid(True)
        plt.tight_layout()
        plot_path = os.path.join(ROOT, "outputs", "face_mission_plot.png")
        plt.savefig(plot_path)
        plt.close()
        logger.info("Face mission plot saved to %s", plot_path)
    except Exception as e:
        logger.warning("Could not save face mission plot: %s", e)

    return out


def main():
    from src.core.logging_setup import setup_logging

    setup_logging("run_all")
    logger.info("Running face-scan mission...")
    out = run_face_mission()
    metrics = out["performance_metrics"]
    logger.info(
        "Done: %d waypoints, %.1f m, estimated %s. Check outputs/",
        metrics["waypoint_count"],
        metrics["path_length_m"],
        metrics["estimated_time_mmss"],
    )


if __name__ == "__main__":
    main()
