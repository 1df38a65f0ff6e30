"""Tests for the sensor-callback observer."""

from __future__ import annotations

import logging

import pytest

from compass.imu.heading_estimator import HeadingEstimator
from compass.location.declination import DeclinationResolver, LocationFix
from compass.observer import CompassObserver, SensorAccuracy


@pytest.fixture()
def estimator() -> HeadingEstimator:
    return HeadingEstimator()


@pytest.fixture()
def observer(estimator: HeadingEstimator) -> CompassObserver:
    obs = CompassObserver(estimator)
    obs.register()
    return obs


def test_samples_reach_estimator(observer: CompassObserver, estimator: HeadingEstimator) -> None:
    observer.on_accelerometer_received((0.0, 0.0, 9.8), timestamp_ns=1)
    observer.on_magnetometer_received((0.0, 30.0, -40.0), timestamp_ns=2)

    assert estimator.has_fix
    assert estimator.bearing == pytest.approx(0.0, abs=1e-4)
    assert observer.get_stats()["accelerometer_samples"] == 1
    assert observer.get_stats()["magnetometer_samples"] == 1


def test_samples_dropped_while_unregistered(estimator: HeadingEstimator) -> None:
    obs = CompassObserver(estimator)

    obs.on_accelerometer_received((0.0, 0.0, 9.8))

    assert estimator.filtered_gravity is None
    assert obs.get_stats()["dropped_samples"] == 1


def test_unregister_stops_delivery(observer: CompassObserver, estimator: HeadingEstimator) -> None:
    observer.on_accelerometer_received((0.0, 0.0, 9.8))
    observer.unregister()
    observer.on_magnetometer_received((0.0, 30.0, -40.0))

    assert not observer.registered
    assert estimator.filtered_magnetic is None


def test_register_is_idempotent(observer: CompassObserver) -> None:
    observer.register()
    observer.register()

    assert observer.registered


def test_wrong_payload_size_raises(observer: CompassObserver) -> None:
    with pytest.raises(ValueError):
        observer.on_accelerometer_received((0.0, 9.8))


def test_location_resolved_synchronously(estimator: HeadingEstimator) -> None:
    resolver = DeclinationResolver(sink=estimator.post, declination_fn=lambda *args: 5.0)
    obs = CompassObserver(estimator, resolver=resolver, async_declination=False)
    obs.register()

    obs.on_location_received(LocationFix(51.5, -0.12, 10.0, 1_700_000_000_000))
    obs.on_accelerometer_received((0.0, 0.0, 9.8))
    obs.on_magnetometer_received((0.0, 30.0, -40.0))

    assert estimator.bearing == pytest.approx(355.0, abs=1e-4)


def test_location_without_resolver_is_ignored(observer: CompassObserver, estimator: HeadingEstimator) -> None:
    observer.on_location_received(LocationFix(0.0, 0.0, 0.0, 0.0))

    assert estimator.declination_model is None


def test_accuracy_changes_are_logged(
    observer: CompassObserver,
    caplog: pytest.LogCaptureFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(logging.getLogger("compass.sensors"), "propagate", True)
    with caplog.at_level(logging.DEBUG, logger="compass.sensors"):
        observer.on_accuracy_changed("magnetometer", SensorAccuracy.UNRELIABLE)
        observer.on_accuracy_changed("accelerometer", 3)
        observer.on_accuracy_changed("accelerometer", 42)

    assert observer.accuracy["magnetometer"] == SensorAccuracy.UNRELIABLE
    assert observer.accuracy["accelerometer"] == SensorAccuracy.HIGH
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
