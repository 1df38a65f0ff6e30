"""Tests for the MockObserver sensor source."""

from __future__ import annotations

import time
from pathlib import Path

import pytest

from compass.imu.heading_estimator import HeadingEstimator
from compass.mock_observer import MockObserver, load_replay, sample_for_heading
from compass.observer import CompassObserver
from compass.utils.config_sections import MockSensorConfig


@pytest.fixture()
def estimator() -> HeadingEstimator:
    return HeadingEstimator()


@pytest.fixture()
def observer(estimator: HeadingEstimator) -> CompassObserver:
    obs = CompassObserver(estimator)
    obs.register()
    return obs


def angular_diff(a: float, b: float) -> float:
    return abs((a - b + 180.0) % 360.0 - 180.0)


def test_sample_for_heading_north():
    accel, mag = sample_for_heading(0.0, gravity=9.8, field_horizontal=30.0, field_vertical=40.0)

    assert accel == (0.0, 0.0, 9.8)
    assert mag == pytest.approx((0.0, 30.0, -40.0))


def test_static_mode_converges(observer: CompassObserver, estimator: HeadingEstimator) -> None:
    mock = MockObserver(observer, mode='static', heading=135.0, rate_hz=50)
    for _ in range(30):
        mock.step()

    assert angular_diff(estimator.bearing, 135.0) < 1e-2
    assert mock.sim_time_ns == 30 * int(1e9 / 50)


def test_synthetic_mode_sweeps_heading(observer: CompassObserver) -> None:
    mock = MockObserver(observer, mode='synthetic', heading=350.0, rotation_rate=20.0, rate_hz=10)

    assert mock.current_heading() == pytest.approx(350.0)
    for _ in range(10):
        mock.step()

    # One simulated second later
    assert mock.current_heading() == pytest.approx(10.0)


def test_noise_is_reproducible_with_seed() -> None:
    results = []
    for _ in range(2):
        est = HeadingEstimator()
        obs = CompassObserver(est)
        obs.register()
        mock = MockObserver(obs, mode='static', heading=60.0, noise_std=0.5, seed=3)
        for _ in range(50):
            mock.step()
        results.append(est.bearing)

    assert results[0] == results[1]
    assert angular_diff(results[0], 60.0) < 5.0


def test_mode_defaults_to_config(observer: CompassObserver) -> None:
    mock = MockObserver(observer, config=MockSensorConfig(mode="synthetic", rotation_rate=90.0, rate_hz=2.0))

    assert mock.mode == "synthetic"
    mock.step()
    assert mock.current_heading() == pytest.approx(45.0)


def test_unknown_mode_rejected(observer: CompassObserver) -> None:
    with pytest.raises(ValueError):
        MockObserver(observer, mode='video')


def test_replay_requires_file(observer: CompassObserver, tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        MockObserver(observer, mode='replay', replay_path=str(tmp_path / "missing.csv"))


def test_replay_mode_delivers_rows_in_loop(observer: CompassObserver, estimator: HeadingEstimator, tmp_path: Path) -> None:
    log_file = tmp_path / "walk.csv"
    log_file.write_text(
        "timestamp_ns,sensor,x,y,z\n"
        "1000,accelerometer,0.0,0.0,9.8\n"
        "1000,magnetometer,-30.0,0.0,-40.0\n"
    )
    mock = MockObserver(observer, mode='replay', replay_path=str(log_file))

    for _ in range(5):
        mock.step()

    assert observer.get_stats()["accelerometer_samples"] == 3
    assert observer.get_stats()["magnetometer_samples"] == 2
    assert estimator.bearing == pytest.approx(90.0, abs=1e-3)


def test_load_replay_rejects_unknown_sensor(tmp_path: Path) -> None:
    log_file = tmp_path / "bad.csv"
    log_file.write_text("1000,gyroscope,0.0,0.0,0.1\n")

    with pytest.raises(ValueError, match="unknown sensor"):
        load_replay(str(log_file))


def test_load_replay_rejects_malformed_row(tmp_path: Path) -> None:
    log_file = tmp_path / "bad.csv"
    log_file.write_text("1000,accelerometer,0.0,abc,9.8\n")

    with pytest.raises(ValueError):
        load_replay(str(log_file))


def test_start_stop_registers_and_unregisters(estimator: HeadingEstimator) -> None:
    obs = CompassObserver(estimator)
    mock = MockObserver(obs, mode='static', heading=45.0, rate_hz=200)

    mock.start()
    deadline = time.time() + 2.0
    while not estimator.has_fix and time.time() < deadline:
        time.sleep(0.01)
    mock.stop()

    assert estimator.has_fix
    assert not obs.registered
    assert not mock.running
