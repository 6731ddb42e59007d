"""Engine error kinds. All are local, recoverable errors returned to the caller."""

from __future__ import annotations

from typing import Any, Dict, Optional


def error_response(code: str, message: str, *, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "ok": False,
        "error_code": code,
        "error": message,
    }
    if details:
        payload["details"] = details
    return payload


class MissionEngineError(Exception):
    code = "MISSION_ENGINE_ERROR"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        return error_response(self.code, self.message, details=self.details)


class InvalidInput(MissionEngineError):
    """Non-positive or out-of-range physical parameter."""

    code = "INVALID_INPUT"


class DegenerateGeometry(MissionEngineError):
    """Face with fewer than 3 vertices or a zero-length normal."""

    code = "DEGENERATE_GEOMETRY"


class EmptyGrid(MissionEngineError):
    code = "EMPTY_GRID"


class InsufficientWaypoints(MissionEngineError):
    """Simulation started with fewer than 2 flattened points."""

    code = "INSUFFICIENT_WAYPOINTS"


class InvalidTick(MissionEngineError):
    """Negative or non-finite tick delta."""

    code = "INVALID_TICK"
