"""Compass state snapshot, sensor sample events and sensor names."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from compass.location.declination import DeclinationUpdate

ACCELEROMETER = "accelerometer"
MAGNETOMETER = "magnetometer"
SENSOR_TYPES = (ACCELEROMETER, MAGNETOMETER)


@dataclass
class CompassState:
    """Current heading snapshot published to subscribers"""
    bearing: float                        # True (or magnetic) bearing, [0, 360)
    magnetic_bearing: float               # Before declination correction
    declination_degrees: Optional[float]  # None when no location fix
    pitch: float                          # Degrees
    roll: float                           # Degrees
    fusion_count: int
    last_updated: float                   # Timestamp (seconds)


@dataclass(frozen=True)
class SensorSample:
    """Raw tri-axis sample tagged with its sensor type."""
    sensor: str
    values: Sequence[float]
    timestamp_ns: int = 0


CompassEvent = Union[SensorSample, DeclinationUpdate]
