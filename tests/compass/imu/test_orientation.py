"""Tests for rotation matrix construction and bearing bookkeeping."""

from __future__ import annotations

import math

import numpy as np
import pytest

from compass.imu.orientation import (
    DegenerateOrientationError,
    apply_declination,
    bearing_to_direction,
    normalize_bearing,
    orientation_angles,
    rotation_matrix,
)
from compass.imu.vector import Vector3


def test_flat_device_facing_north_gives_identity():
    r = rotation_matrix(Vector3(0.0, 0.0, 9.8), Vector3(0.0, 30.0, -40.0))

    assert np.allclose(r, np.eye(3), atol=1e-6)
    azimuth, pitch, roll = orientation_angles(r)
    assert azimuth == pytest.approx(0.0, abs=1e-6)
    assert pitch == pytest.approx(0.0, abs=1e-6)
    assert roll == pytest.approx(0.0, abs=1e-6)


def test_flat_device_facing_east():
    # Device y-axis points east: field shows up along -x
    r = rotation_matrix(Vector3(0.0, 0.0, 9.8), Vector3(-30.0, 0.0, -40.0))

    azimuth, _, _ = orientation_angles(r)
    assert math.degrees(azimuth) == pytest.approx(90.0, abs=1e-4)


def test_rotation_matrix_is_orthonormal():
    r = rotation_matrix(Vector3(1.2, -0.8, 9.6), Vector3(12.0, 25.0, -38.0))

    assert np.allclose(r @ r.T, np.eye(3), atol=1e-6)
    assert np.linalg.det(r) == pytest.approx(1.0, abs=1e-6)


def test_zero_gravity_is_degenerate():
    with pytest.raises(DegenerateOrientationError):
        rotation_matrix(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 30.0, -40.0))


def test_parallel_vectors_are_degenerate():
    with pytest.raises(DegenerateOrientationError):
        rotation_matrix(Vector3(0.0, 0.0, 9.8), Vector3(0.0, 0.0, -45.0))


def test_degenerate_error_is_value_error():
    assert issubclass(DegenerateOrientationError, ValueError)


@pytest.mark.parametrize(
    "value, expected",
    [(-90.0, 270.0), (0.0, 0.0), (359.5, 359.5), (360.0, 0.0), (365.0, 5.0), (-1e-15, 0.0)],
)
def test_normalize_bearing(value, expected):
    assert normalize_bearing(value) == pytest.approx(expected)


def test_declination_correction_is_reversible():
    for magnetic in (0.0, 3.0, 90.0, 181.5, 358.0):
        for declination in (-20.0, -0.4, 5.0, 17.3):
            corrected = apply_declination(magnetic, declination)
            restored = (corrected + declination) % 360.0
            assert 0.0 <= corrected < 360.0
            assert restored == pytest.approx(magnetic % 360.0, abs=1e-9)


def test_bearing_to_direction():
    assert bearing_to_direction(0.0) == "N"
    assert bearing_to_direction(44.0) == "NE"
    assert bearing_to_direction(180.0) == "S"
    assert bearing_to_direction(350.0) == "N"
