"""Tests for the mission path simulator state machine."""
import math
import pytest

from src.core.errors import InsufficientWaypoints, InvalidInput, InvalidTick
from src.core.vectors import LocalCoord
from src.mission.model import PathSegment, SpeedPolicy, Waypoint, flatten_path, path_length_m
from src.mission.simulate import (
    MissionSimulator,
    SimEventKind,
    SimPhase,
    SimulationProgress,
    run_playback,
)

TAKEOFF = LocalCoord(0.0, 0.0, 0.0)
DT = 0.1


def _wp(x, y, z=0.0, **kwargs):
    return Waypoint(position=LocalCoord(x, y, z), **kwargs)


@pytest.fixture
def sim():
    return MissionSimulator()


@pytest.fixture
def three_leg_path():
    return [PathSegment("survey", [_wp(10, 0), _wp(10, 7), _wp(3, 7, 5)])]


def test_start_requires_two_points(sim):
    with pytest.raises(InsufficientWaypoints):
        sim.start([PathSegment("a", [_wp(1, 1)])])
    assert sim.phase is SimPhase.IDLE
    with pytest.raises(InsufficientWaypoints):
        sim.start([], takeoff=TAKEOFF)
    assert sim.phase is SimPhase.IDLE


def test_start_pose(sim, three_leg_path):
    state = sim.start(three_leg_path, takeoff=TAKEOFF)
    assert state.phase is SimPhase.RUNNING
    assert state.running and not state.is_holding
    assert state.current_position == TAKEOFF
    assert state.current_heading == pytest.approx(90.0)
    assert state.active_leg_index == 0
    assert state.leg_progress == 0.0


@pytest.mark.parametrize("delta", [-0.1, math.nan, math.inf])
def test_invalid_tick_rejected_in_any_phase(sim, three_leg_path, delta):
    with pytest.raises(InvalidTick):
        sim.tick(delta)
    sim.start(three_leg_path, takeoff=TAKEOFF)
    with pytest.raises(InvalidTick):
        sim.tick(delta)


def test_idle_tick_is_noop(sim):
    state = sim.tick(DT)
    assert state.phase is SimPhase.IDLE
    assert state.elapsed_s == 0.0


def test_distance_sums_to_path_length(sim, three_leg_path):
    sim.start(three_leg_path, SpeedPolicy(default_speed_mps=2.0), takeoff=TAKEOFF)
    expected = path_length_m(flatten_path(three_leg_path, TAKEOFF))
    previous = sim.state.current_position
    moved = 0.0
    for state in run_playback(sim, DT):
        moved += previous.distance_to(state.current_position)
        previous = state.current_position
    assert sim.phase is SimPhase.FINISHED
    assert moved == pytest.approx(expected)
    assert sim.state.distance_traveled_m == pytest.approx(expected)
    assert sim.state.current_position == LocalCoord(3, 7, 5)


def test_hold_lasts_hold_time_within_one_tick(sim):
    path = [PathSegment("a", [_wp(10, 0, hold_time_s=3.0)])]
    sim.start(path, SpeedPolicy(default_speed_mps=2.0), takeoff=TAKEOFF)
    states = run_playback(sim, DT)
    holding = [s for s in states if s.is_holding]
    assert abs(len(holding) * DT - 3.0) <= DT + 1e-9
    events = {e.kind: e for e in sim.drain_events()}
    held = events[SimEventKind.HOLD_ENDED].elapsed_s - events[SimEventKind.HOLD_STARTED].elapsed_s
    assert abs(held - 3.0) <= DT + 1e-9
    assert sim.phase is SimPhase.FINISHED


def test_event_order(sim):
    path = [PathSegment("a", [_wp(1, 0, hold_time_s=0.5), _wp(2, 0)])]
    sim.start(path, takeoff=TAKEOFF)
    run_playback(sim, DT)
    kinds = [e.kind for e in sim.drain_events()]
    assert kinds == [
        SimEventKind.WAYPOINT_REACHED,
        SimEventKind.HOLD_STARTED,
        SimEventKind.HOLD_ENDED,
        SimEventKind.WAYPOINT_REACHED,
        SimEventKind.FINISHED,
    ]
    assert sim.drain_events() == []


def test_gimbal_eases_during_hold_and_snaps_at_end(sim):
    path = [PathSegment("a", [_wp(1, 0, pitch=-90.0, roll=10.0, hold_time_s=4.0), _wp(2, 0)])]
    sim.start(path, SpeedPolicy(default_speed_mps=10.0), takeoff=TAKEOFF)
    state = sim.tick(DT)
    assert state.is_holding
    assert state.current_pitch == 0.0
    for _ in range(10):
        state = sim.tick(DT)
    # halfway through the 2 s transition: smoothstep(0.5) = 0.5
    assert state.current_pitch == pytest.approx(-45.0, abs=1e-6)
    assert state.current_roll == pytest.approx(5.0, abs=1e-6)
    while sim.phase is SimPhase.HOLDING:
        state = sim.tick(DT)
    assert state.current_pitch == -90.0
    assert state.current_roll == 10.0


def test_short_hold_eases_over_half_the_hold(sim):
    path = [PathSegment("a", [_wp(1, 0, pitch=-90.0, hold_time_s=1.0), _wp(2, 0)])]
    sim.start(path, SpeedPolicy(default_speed_mps=10.0), takeoff=TAKEOFF)
    assert sim.tick(DT).is_holding
    sim.tick(DT)
    state = sim.tick(DT)
    # 0.2 s into a 0.5 s transition: smoothstep(0.4) = 0.352
    assert state.current_pitch == pytest.approx(-90.0 * 0.352, abs=1e-6)
    for _ in range(3):
        state = sim.tick(DT)
    assert state.is_holding
    assert state.current_pitch == pytest.approx(-90.0, abs=1e-6)


def test_progress_reports_target_waypoint(sim, three_leg_path):
    assert sim.progress == SimulationProgress(None, 0, 0)
    sim.start(three_leg_path, takeoff=TAKEOFF)
    assert sim.progress == SimulationProgress("survey", 1, 4)
    while sim.state.active_leg_index == 0:
        sim.tick(DT)
    assert sim.progress.waypoint_index == 2
    run_playback(sim, DT)
    assert sim.progress == SimulationProgress("survey", 3, 4)


def test_stop_twice_stays_idle(sim, three_leg_path):
    sim.start(three_leg_path, takeoff=TAKEOFF)
    sim.tick(DT)
    sim.stop()
    sim.stop()
    state = sim.state
    assert state.phase is SimPhase.IDLE
    assert not state.running
    assert state.distance_traveled_m == 0.0
    assert sim.progress == SimulationProgress(None, 0, 0)
    sim.reset()
    assert sim.phase is SimPhase.IDLE


def test_finished_tick_is_noop(sim, three_leg_path):
    sim.start(three_leg_path, takeoff=TAKEOFF)
    run_playback(sim, DT)
    before = sim.state
    assert sim.tick(DT) == before


def test_multiplier_scales_time_not_distance(three_leg_path):
    normal, fast = MissionSimulator(), MissionSimulator()
    normal.start(three_leg_path, SpeedPolicy(default_speed_mps=2.0), takeoff=TAKEOFF)
    fast.start(three_leg_path, SpeedPolicy(default_speed_mps=2.0, multiplier=4.0), takeoff=TAKEOFF)
    run_playback(normal, DT)
    run_playback(fast, DT)
    assert fast.state.distance_traveled_m == pytest.approx(normal.state.distance_traveled_m)
    assert fast.state.elapsed_s < normal.state.elapsed_s / 3


def test_zero_multiplier_pauses(sim, three_leg_path):
    sim.start(three_leg_path, takeoff=TAKEOFF)
    sim.set_speed_multiplier(0.0)
    assert sim.multiplier == 0.0
    for _ in range(5):
        state = sim.tick(DT)
    assert state.current_position == TAKEOFF
    assert state.phase is SimPhase.RUNNING
    with pytest.raises(InvalidInput):
        sim.set_speed_multiplier(-1.0)


def test_segment_speed_overrides_default(sim):
    path = [PathSegment("fast", [_wp(20, 0)], speed_mps=10.0)]
    sim.start(path, SpeedPolicy(default_speed_mps=1.0), takeoff=TAKEOFF)
    run_playback(sim, DT)
    assert sim.state.elapsed_s == pytest.approx(2.0, abs=DT + 1e-9)


def test_zero_length_leg_completes_in_one_tick(sim):
    path = [PathSegment("a", [_wp(0, 0), _wp(0, 0.001), _wp(5, 0)])]
    sim.start(path, takeoff=TAKEOFF)
    state = sim.tick(DT)
    assert state.active_leg_index == 1
    state = sim.tick(DT)
    assert state.active_leg_index == 2
    assert state.distance_traveled_m == 0.0


def test_vertical_leg_keeps_heading(sim):
    path = [PathSegment("a", [_wp(0, 0, heading=45.0), _wp(0, 0, 10), _wp(0, 10, 10)])]
    state = sim.start(path)
    assert state.current_heading == 45.0
    while sim.state.active_leg_index == 0:
        assert sim.tick(DT).current_heading == 45.0
    sim.tick(DT)
    assert sim.state.current_heading == pytest.approx(0.0)


def test_restart_replaces_run(sim, three_leg_path):
    sim.start(three_leg_path, takeoff=TAKEOFF)
    for _ in range(20):
        sim.tick(DT)
    state = sim.start([PathSegment("b", [_wp(0, 5)])], takeoff=TAKEOFF)
    assert state.active_leg_index == 0
    assert state.elapsed_s == 0.0
    assert sim.progress == SimulationProgress("b", 1, 2)
    assert sim.drain_events() == []
