"""Tests for engine error kinds and payloads."""
import pytest

from src.core.errors import (
    DegenerateGeometry,
    EmptyGrid,
    InsufficientWaypoints,
    InvalidInput,
    InvalidTick,
    MissionEngineError,
    error_response,
)


@pytest.mark.parametrize(
    "cls, code",
    [
        (MissionEngineError, "MISSION_ENGINE_ERROR"),
        (InvalidInput, "INVALID_INPUT"),
        (DegenerateGeometry, "DEGENERATE_GEOMETRY"),
        (EmptyGrid, "EMPTY_GRID"),
        (InsufficientWaypoints, "INSUFFICIENT_WAYPOINTS"),
        (InvalidTick, "INVALID_TICK"),
    ],
)
def test_error_codes(cls, code):
    err = cls("boom")
    assert err.code == code
    assert isinstance(err, MissionEngineError)
    assert str(err) == "boom"


def test_to_payload_includes_details():
    payload = InvalidTick("bad delta", details={"delta_s": -1}).to_payload()
    assert payload == {
        "ok": False,
        "error_code": "INVALID_TICK",
        "error": "bad delta",
        "details": {"delta_s": -1},
    }


def test_error_response_omits_empty_details():
    assert "details" not in error_response("X", "msg")
