"""
Orientation math for gravity + magnetometer heading estimation.

Implements the standard device-orientation convention used by phone and
watch sensor stacks:

- ``rotation_matrix``: builds the 3x3 matrix R that maps world axes
  (East, North, Up) to device axes from a gravity ("down") vector and a
  geomagnetic ("north-ish") vector.
- ``orientation_angles``: extracts (azimuth, pitch, roll) in radians from R.
- ``normalize_bearing`` / ``apply_declination``: degree bookkeeping that
  keeps bearings in [0, 360).

Rotation-matrix construction fails with ``DegenerateOrientationError`` when
the device is in free fall or the two vectors are nearly parallel.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from compass.imu.vector import Vector3

STANDARD_GRAVITY = 9.80665  # m/s²


class DegenerateOrientationError(ValueError):
    """Gravity and magnetic vectors do not define an orientation."""


def rotation_matrix(
    gravity: Vector3,
    geomagnetic: Vector3,
    gravity_norm: float = STANDARD_GRAVITY,
    free_fall_ratio: float = 0.01,
    min_horizontal_norm: float = 0.1,
) -> np.ndarray:
    """
    Compute the rotation matrix from gravity and geomagnetic readings.

    Args:
        gravity: Accelerometer vector (m/s², device axes)
        geomagnetic: Magnetometer vector (µT, device axes)
        gravity_norm: Reference gravity used for the free-fall check
        free_fall_ratio: |gravity|² below ratio * g² counts as free fall
        min_horizontal_norm: Minimum |E x A| before normalization

    Returns:
        np.ndarray: 3x3 matrix whose rows are East, North and Up in device axes

    Raises:
        DegenerateOrientationError: free fall or near-parallel vectors
    """
    a = gravity.as_array()
    e = geomagnetic.as_array()

    norm_sq_a = float(np.dot(a, a))
    if norm_sq_a < free_fall_ratio * gravity_norm * gravity_norm:
        raise DegenerateOrientationError(
            f"Gravity magnitude too small (|g|²={norm_sq_a:.4f}), device in free fall"
        )

    h = np.cross(e, a)
    norm_h = float(np.linalg.norm(h))
    if norm_h < min_horizontal_norm:
        raise DegenerateOrientationError(
            f"Magnetic field nearly parallel to gravity (|E x A|={norm_h:.4f})"
        )

    h = h / norm_h
    a = a / math.sqrt(norm_sq_a)
    m = np.cross(a, h)

    return np.vstack((h, m, a))


def orientation_angles(r: np.ndarray) -> Tuple[float, float, float]:
    """
    Extract orientation from a rotation matrix.

    Returns:
        (azimuth, pitch, roll) in radians. Azimuth is the angle between the
        device y-axis and magnetic north around the z-axis.
    """
    azimuth = math.atan2(r[0, 1], r[1, 1])
    pitch = math.asin(max(-1.0, min(1.0, -r[2, 1])))
    roll = math.atan2(-r[2, 0], r[2, 2])
    return azimuth, pitch, roll


def normalize_bearing(degrees: float) -> float:
    """Single wraparound into [0, 360)."""
    if degrees < 0:
        degrees += 360.0
    elif degrees >= 360.0:
        degrees -= 360.0
    # -1e-15 + 360 rounds to exactly 360.0
    if degrees >= 360.0:
        degrees = 0.0
    return degrees


def apply_declination(magnetic_bearing: float, declination_degrees: float) -> float:
    """Convert a magnetic bearing to a true bearing."""
    return normalize_bearing(magnetic_bearing - declination_degrees)


def bearing_to_direction(bearing: float) -> str:
    """Convert bearing to readable direction"""
    directions = [
        "N", "NE", "E", "SE",
        "S", "SW", "W", "NW"
    ]

    # Each direction covers 45° (360° / 8)
    index = round(bearing / 45) % 8
    return directions[index]
