"""Tests for run_all entry point (face-scan mission outputs)."""
import os
import sys
import json
import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(scope="module")
def face_mission():
    from src.run_all import run_face_mission
    return run_face_mission()


def test_run_face_mission_returns_dict_with_required_keys(face_mission):
    assert isinstance(face_mission, dict)
    for key in ("module", "face", "optics", "waypoints", "performance_metrics", "events", "origin"):
        assert key in face_mission
    assert face_mission["module"] == "Face scan (photogrammetry)"


def test_run_face_mission_flies_whole_path(face_mission):
    metrics = face_mission["performance_metrics"]
    assert metrics["finished"] is True
    assert metrics["waypoint_count"] == len(face_mission["waypoints"])
    assert metrics["simulated_distance_m"] == pytest.approx(metrics["path_length_m"])
    assert metrics["simulated_time_s"] >= metrics["estimated_time_s"] - 1e-6
    assert face_mission["events"][-1]["kind"] == "finished"


def test_run_face_mission_waypoints_have_geo(face_mission):
    from src.mission_settings import LOCAL_ORIGIN

    for row in face_mission["waypoints"]:
        assert abs(row["lat"] - LOCAL_ORIGIN[0]) < 0.01
        assert abs(row["lon"] - LOCAL_ORIGIN[1]) < 0.01
        assert row["alt_m"] == pytest.approx(LOCAL_ORIGIN[2] + row["z"])


def test_run_face_mission_optics_report(face_mission):
    optics = face_mission["optics"]
    assert optics["distance_m"] == pytest.approx(face_mission["standoff_m"])
    assert optics["gsd_mm_per_px"] > 0
    dof = optics["depth_of_field"]
    assert dof["near_limit_m"] <= optics["distance_m"]
    assert dof["far_limit_m"] is None or dof["far_limit_m"] >= optics["distance_m"]


def test_run_face_mission_writes_json(face_mission):
    path = os.path.join(ROOT, "outputs", "face_mission.json")
    assert os.path.isfile(path)
    with open(path) as f:
        data = json.load(f)
    assert len(data["waypoints"]) == len(face_mission["waypoints"])


def test_optics_report_converts_infinite_far_limit(camera, lens):
    from src.run_all import optics_report

    report = optics_report(camera, lens, 500.0, aperture=16.0)
    assert report["depth_of_field"]["far_limit_m"] is None
    assert report["depth_of_field"]["total_m"] is None
