"""
Validation: Monte-Carlo playback of the face-scan mission under jittered tick sizes.
Run from project root with PYTHONPATH set. Checks that flown distance and waypoint
arrivals do not depend on how the caller slices time.
"""
import os
import random
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Relative distance error tolerated between a jittered run and the path length
DISTANCE_TOLERANCE = 1e-6


def _play_jittered(sim, rng, max_tick_s, max_steps):
    from src.mission.simulate import SimPhase

    steps = 0
    while sim.phase in (SimPhase.RUNNING, SimPhase.HOLDING) and steps < max_steps:
        sim.tick(rng.uniform(0.0, max_tick_s))
        steps += 1
    return steps


def main(num_seeds=None, seed=None, max_tick_s=None):
    from src.camera.units import feet_to_meters
    from src.core.logging_setup import setup_logging
    from src.core.vectors import LocalCoord
    from src.mission.model import flatten_path, path_length_m
    from src.mission.simulate import MissionSimulator, SimEventKind, SimPhase
    from src.mission_settings import (
        FACE_STANDOFF_FT,
        MAX_SIM_STEPS,
        MONTE_CARLO_MAX_TICK_S,
        MONTE_CARLO_NUM_SEEDS,
        MONTE_CARLO_SEED,
        TAKEOFF_POINT,
    )
    from src.run_all import build_face, build_hardware, plan_face_path

    setup_logging("validation")
    num_seeds = MONTE_CARLO_NUM_SEEDS if num_seeds is None else num_seeds
    seed = MONTE_CARLO_SEED if seed is None else seed
    max_tick_s = MONTE_CARLO_MAX_TICK_S if max_tick_s is None else max_tick_s

    camera, lens = build_hardware()
    path = plan_face_path(camera, lens, build_face(), feet_to_meters(FACE_STANDOFF_FT))
    takeoff = LocalCoord(*TAKEOFF_POINT)
    points = flatten_path(path, takeoff)
    expected_m = path_length_m(points)
    expected_arrivals = len(points) - 1

    rng = random.Random(seed)
    distances, times, successes = [], [], 0
    for _ in range(num_seeds):
        sim = MissionSimulator()
        sim.start(path, takeoff=takeoff)
        _play_jittered(sim, rng, max_tick_s, MAX_SIM_STEPS)
        state = sim.state
        arrivals = sum(1 for e in sim.drain_events() if e.kind is SimEventKind.WAYPOINT_REACHED)
        distances.append(state.distance_traveled_m)
        times.append(state.elapsed_s)
        ok = (
            state.phase is SimPhase.FINISHED
            and arrivals == expected_arrivals
            and abs(state.distance_traveled_m - expected_m) <= DISTANCE_TOLERANCE * max(1.0, expected_m)
        )
        successes += int(ok)

    result = {
        "runs": num_seeds,
        "success_rate": successes / num_seeds if num_seeds else 0.0,
        "path_length_m": expected_m,
        "distances_m": distances,
        "elapsed_s": times,
    }
    print(f"Timestep sweep ({num_seeds} seeds, tick in [0, {max_tick_s}] s)")
    print(f"  Success rate: {result['success_rate']:.2%}")
    print(f"  Path length: {expected_m:.2f} m")
    if times:
        print(f"  Elapsed range: {min(times):.1f} - {max(times):.1f} s")
    return result


if __name__ == "__main__":
    main()
