"""Boundary unit conversions. The engine itself works in meters only."""

METERS_TO_FEET = 3.28084
FEET_TO_METERS = 0.3048


def meters_to_feet(meters: float) -> float:
    return meters * METERS_TO_FEET


def feet_to_meters(feet: float) -> float:
    return feet * FEET_TO_METERS
