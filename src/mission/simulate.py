"""
Mission path simulator: steps a vehicle along a composed multi-segment path, one
caller-supplied tick at a time, with dwell/hold at waypoints and gimbal easing during holds.

State machine: IDLE -> RUNNING <-> HOLDING -> FINISHED -> IDLE (stop/reset).

Threading: not thread-safe. One owner (the caller's frame loop) calls start/tick/stop;
tick() is the only mutator of the simulation state and must not run concurrently
with any other call on the same instance.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from src.core.errors import InsufficientWaypoints, InvalidInput, InvalidTick
from src.core.vectors import LocalCoord, ORIGIN
from src.geo.transform import bearing_deg
from src.mission.model import Path, PathPoint, SpeedPolicy, flatten_path, path_length_m
from src.mission_settings import DEFAULT_SPEED_MS, HOLD_TRANSITION_MAX_S, LEG_EPSILON_M, MAX_SIM_STEPS

logger = logging.getLogger(__name__)

# Hold is over once the remaining time drops below this (absorbs float drift of summed ticks)
HOLD_END_TOLERANCE_S = 1e-9
POSE_TOLERANCE_DEG = 1e-9


class SimPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    HOLDING = "holding"
    FINISHED = "finished"


class SimEventKind(Enum):
    WAYPOINT_REACHED = "waypoint_reached"
    HOLD_STARTED = "hold_started"
    HOLD_ENDED = "hold_ended"
    FINISHED = "finished"


@dataclass(frozen=True)
class SimEvent:
    kind: SimEventKind
    leg_index: int
    waypoint_index: int
    segment_id: Optional[str]
    elapsed_s: float


@dataclass(frozen=True)
class SimulationProgress:
    """waypoint_index: index of the waypoint being approached in the flattened path (takeoff = 0)."""

    segment_id: Optional[str]
    waypoint_index: int
    total_waypoints: int


@dataclass(frozen=True)
class SimulationState:
    """Snapshot handed back to the caller after every tick."""

    phase: SimPhase
    current_position: LocalCoord
    current_heading: float
    current_pitch: float
    current_roll: float
    active_leg_index: int
    leg_progress: float
    is_holding: bool
    hold_remaining_s: float
    running: bool
    segment_id: Optional[str]
    distance_traveled_m: float
    elapsed_s: float


@dataclass
class _GimbalTransition:
    start_pitch: float
    target_pitch: float
    start_roll: float
    target_roll: float
    duration_s: float
    elapsed_s: float = 0.0

    def factor(self) -> float:
        """Smoothstep-eased progress in [0, 1]."""
        if self.duration_s <= 0:
            return 1.0
        t = min(1.0, self.elapsed_s / self.duration_s)
        return t * t * (3 - 2 * t)

    def pose(self):
        k = self.factor()
        return (
            self.start_pitch + (self.target_pitch - self.start_pitch) * k,
            self.start_roll + (self.target_roll - self.start_roll) * k,
        )


class MissionSimulator:
    """
    Flies the flattened path leg by leg. Leg i runs from point i to point i + 1.
    Speed is the segment speed of the leg's target point (or the policy default),
    scaled by the playback multiplier; reported distance is real path distance.
    """

    def __init__(
        self,
        leg_epsilon_m: float = LEG_EPSILON_M,
        hold_transition_max_s: float = HOLD_TRANSITION_MAX_S,
    ):
        self.leg_epsilon_m = leg_epsilon_m
        self.hold_transition_max_s = hold_transition_max_s
        self._clear()

    def _clear(self) -> None:
        self._phase = SimPhase.IDLE
        self._points: List[PathPoint] = []
        self._policy: Optional[SpeedPolicy] = None
        self._multiplier = 1.0
        self._leg = 0
        self._progress = 0.0
        self._position = ORIGIN
        self._heading = 0.0
        self._pitch = 0.0
        self._roll = 0.0
        self._hold_remaining = 0.0
        self._transition: Optional[_GimbalTransition] = None
        self._distance = 0.0
        self._elapsed = 0.0
        self._events: List[SimEvent] = []

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(
        self,
        path: Path,
        speed_policy: Optional[SpeedPolicy] = None,
        takeoff: Optional[LocalCoord] = None,
    ) -> "SimulationState":
        """Replace any active run with a new one at leg 0. Needs at least 2 flattened points."""
        points = flatten_path(path, takeoff)
        self._clear()
        if len(points) < 2:
            raise InsufficientWaypoints(
                f"Simulation needs at least 2 waypoints, got {len(points)}",
                details={"waypoints": len(points)},
            )
        self._points = points
        self._policy = speed_policy or SpeedPolicy(default_speed_mps=DEFAULT_SPEED_MS)
        self._multiplier = self._policy.multiplier
        self._phase = SimPhase.RUNNING

        first = points[0].waypoint
        self._position = first.position
        self._pitch = first.pitch
        self._roll = first.roll
        first_leg = points[1].waypoint.position - first.position
        if self._has_heading(first_leg):
            self._heading = bearing_deg(first_leg)
        else:
            self._heading = first.heading
        logger.debug(
            "Simulation started: %d points, %.1f m, default speed %.2f m/s",
            len(points),
            path_length_m(points),
            self._policy.default_speed_mps,
        )
        return self.state

    def stop(self) -> None:
        """Back to IDLE; in-progress motion and easing are discarded. Idempotent."""
        if self._phase is not SimPhase.IDLE:
            logger.debug("Simulation stopped in phase %s", self._phase.value)
        self._clear()

    def reset(self) -> None:
        self.stop()

    def set_speed_multiplier(self, multiplier: float) -> None:
        if not (multiplier >= 0 and math.isfinite(multiplier)):
            raise InvalidInput("Speed multiplier must be finite and non-negative", details={"multiplier": multiplier})
        self._multiplier = multiplier

    def tick(self, delta_s: float) -> "SimulationState":
        """Advance by delta_s seconds. No-op while IDLE or FINISHED."""
        if not (math.isfinite(delta_s) and delta_s >= 0):
            raise InvalidTick(
                "Tick delta must be finite and non-negative",
                details={"delta_s": delta_s},
            )
        if self._phase is SimPhase.RUNNING:
            self._elapsed += delta_s
            self._advance_leg(delta_s)
        elif self._phase is SimPhase.HOLDING:
            self._elapsed += delta_s
            self._advance_hold(delta_s)
        return self.state

    def drain_events(self) -> List[SimEvent]:
        """Events since the previous call, oldest first."""
        events, self._events = self._events, []
        return events

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SimPhase:
        return self._phase

    @property
    def multiplier(self) -> float:
        return self._multiplier

    @property
    def progress(self) -> SimulationProgress:
        if self._phase is SimPhase.IDLE:
            return SimulationProgress(None, 0, 0)
        target = self._target_index()
        return SimulationProgress(self._points[target].segment_id, target, len(self._points))

    @property
    def state(self) -> SimulationState:
        segment_id = None
        if self._phase is not SimPhase.IDLE:
            segment_id = self._points[self._target_index()].segment_id
        return SimulationState(
            phase=self._phase,
            current_position=self._position,
            current_heading=self._heading,
            current_pitch=self._pitch,
            current_roll=self._roll,
            active_leg_index=self._leg,
            leg_progress=self._progress,
            is_holding=self._phase is SimPhase.HOLDING,
            hold_remaining_s=self._hold_remaining,
            running=self._phase in (SimPhase.RUNNING, SimPhase.HOLDING),
            segment_id=segment_id,
            distance_traveled_m=self._distance,
            elapsed_s=self._elapsed,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _target_index(self) -> int:
        return min(self._leg + 1, len(self._points) - 1)

    def _has_heading(self, leg_vector: LocalCoord) -> bool:
        # Gated on horizontal length, not leg length: a straight climb or descent
        # has a real length but no bearing, so it keeps the last heading
        return math.hypot(leg_vector.x, leg_vector.y) >= self.leg_epsilon_m

    def _emit(self, kind: SimEventKind) -> None:
        target = self._target_index()
        event = SimEvent(kind, self._leg, target, self._points[target].segment_id, self._elapsed)
        self._events.append(event)
        logger.debug("t=%.2fs %s at waypoint %d (leg %d)", self._elapsed, kind.value, target, self._leg)

    def _advance_leg(self, dt: float) -> None:
        start = self._points[self._leg].waypoint.position
        target_point = self._points[self._leg + 1]
        target = target_point.waypoint.position
        leg_vector = target - start
        leg_length = leg_vector.length()

        if leg_length < self.leg_epsilon_m:
            self._progress = 1.0
        else:
            speed = self._policy.speed_for(target_point.segment_speed) * self._multiplier
            previous = self._progress
            self._progress = max(0.0, min(1.0, self._progress + speed * dt / leg_length))
            self._distance += (self._progress - previous) * leg_length
            if self._has_heading(leg_vector):
                self._heading = bearing_deg(leg_vector)

        self._position = target if self._progress >= 1.0 else start.lerp(target, self._progress)
        if self._progress >= 1.0:
            self._arrive(target_point)

    def _arrive(self, target_point: PathPoint) -> None:
        self._emit(SimEventKind.WAYPOINT_REACHED)
        wp = target_point.waypoint
        if wp.hold_time_s > 0:
            self._phase = SimPhase.HOLDING
            self._hold_remaining = wp.hold_time_s
            if abs(wp.pitch - self._pitch) > POSE_TOLERANCE_DEG or abs(wp.roll - self._roll) > POSE_TOLERANCE_DEG:
                self._transition = _GimbalTransition(
                    start_pitch=self._pitch,
                    target_pitch=wp.pitch,
                    start_roll=self._roll,
                    target_roll=wp.roll,
                    duration_s=min(self.hold_transition_max_s, wp.hold_time_s / 2),
                )
            self._emit(SimEventKind.HOLD_STARTED)
        else:
            self._next_leg()

    def _advance_hold(self, dt: float) -> None:
        self._hold_remaining -= dt
        if self._transition is not None:
            self._transition.elapsed_s += dt
            self._pitch, self._roll = self._transition.pose()
        if self._hold_remaining <= HOLD_END_TOLERANCE_S:
            self._hold_remaining = 0.0
            if self._transition is not None:
                self._pitch = self._transition.target_pitch
                self._roll = self._transition.target_roll
                self._transition = None
            self._emit(SimEventKind.HOLD_ENDED)
            self._phase = SimPhase.RUNNING
            self._next_leg()

    def _next_leg(self) -> None:
        if self._leg + 2 < len(self._points):
            self._leg += 1
            self._progress = 0.0
        else:
            self._phase = SimPhase.FINISHED
            self._emit(SimEventKind.FINISHED)
            logger.debug("Simulation finished after %.2fs, %.1f m", self._elapsed, self._distance)


def run_playback(
    simulator: MissionSimulator,
    delta_s: float,
    max_steps: int = MAX_SIM_STEPS,
) -> List[SimulationState]:
    """
    Tick an already-started simulator with a fixed delta until it finishes (or max_steps).
    Returns the snapshot after every tick.
    """
    states: List[SimulationState] = []
    for _ in range(max_steps):
        if simulator.phase not in (SimPhase.RUNNING, SimPhase.HOLDING):
            break
        states.append(simulator.tick(delta_s))
    if simulator.phase is not SimPhase.FINISHED:
        logger.warning("Playback stopped after %d ticks in phase %s", len(states), simulator.phase.value)
    return states
