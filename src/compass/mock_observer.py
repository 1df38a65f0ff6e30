#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mock sensor source for compass testing without a watch.

Drives a CompassObserver with accelerometer and magnetometer samples so the
whole heading pipeline can run on a laptop.

Operating modes:
- 'static': Device lying flat at a fixed magnetic heading (plus optional noise)
- 'synthetic': Device lying flat, heading sweeping at a constant rotation rate
- 'replay': Replays a recorded CSV sample log in loop

Replay files have one sample per row:

    timestamp_ns,sensor,x,y,z
    1000000,accelerometer,0.01,0.02,9.79
    1000000,magnetometer,0.0,30.1,-40.2

Usage:
    mock = MockObserver(observer, mode='synthetic', rate_hz=50, rotation_rate=30)
    mock.start()
    ...
    mock.stop()
"""

import csv
import logging
import math
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from compass.imu.compass_state import ACCELEROMETER, MAGNETOMETER, SENSOR_TYPES
from compass.observer import CompassObserver
from compass.utils.config_sections import MockSensorConfig, load_mock_sensor_config

log = logging.getLogger("MockObserver")

MODES = ('static', 'synthetic', 'replay')

Triple = Tuple[float, float, float]


def sample_for_heading(
    heading: float,
    gravity: float = 9.80665,
    field_horizontal: float = 30.0,
    field_vertical: float = 40.0,
) -> Tuple[Triple, Triple]:
    """
    Accelerometer and magnetometer readings for a device lying flat.

    Args:
        heading: Magnetic azimuth of the device y-axis in degrees
        gravity: Accelerometer magnitude (m/s²)
        field_horizontal: Horizontal geomagnetic component (µT)
        field_vertical: Downward geomagnetic component (µT)

    Returns:
        ((ax, ay, az), (mx, my, mz))
    """
    h = math.radians(heading)
    accel = (0.0, 0.0, gravity)
    mag = (
        -field_horizontal * math.sin(h),
        field_horizontal * math.cos(h),
        -field_vertical,
    )
    return accel, mag


def load_replay(path: str) -> List[Tuple[int, str, Triple]]:
    """Parse a replay CSV into (timestamp_ns, sensor, values) rows."""
    rows = []
    with open(path, newline='') as f:
        for line_no, row in enumerate(csv.reader(f), start=1):
            if not row or row[0].startswith('#'):
                continue
            if row[0].strip() == 'timestamp_ns':
                continue
            if len(row) != 5:
                raise ValueError(f"{path}:{line_no}: expected 5 columns, got {len(row)}")
            sensor = row[1].strip()
            if sensor not in SENSOR_TYPES:
                raise ValueError(f"{path}:{line_no}: unknown sensor '{sensor}'")
            try:
                timestamp_ns = int(row[0])
                values = (float(row[2]), float(row[3]), float(row[4]))
            except ValueError as e:
                raise ValueError(f"{path}:{line_no}: {e}") from e
            rows.append((timestamp_ns, sensor, values))

    if not rows:
        raise ValueError(f"Replay file has no samples: {path}")
    return rows


class MockObserver:
    """
    Mock sensor source feeding a CompassObserver.

    See module docstring for usage examples.
    """

    def __init__(
        self,
        observer: CompassObserver,
        mode: Optional[str] = None,
        rate_hz: Optional[float] = None,
        heading: Optional[float] = None,
        rotation_rate: Optional[float] = None,
        noise_std: Optional[float] = None,
        replay_path: Optional[str] = None,
        config: Optional[MockSensorConfig] = None,
        seed: Optional[int] = None,
    ) -> None:
        """
        Initialize the MockObserver.

        Args:
            observer: CompassObserver receiving the samples
            mode: 'static', 'synthetic', or 'replay' (default from config)
            rate_hz: Sample pairs per second
            heading: Initial magnetic heading (degrees)
            rotation_rate: Sweep rate in 'synthetic' mode (degrees/s)
            noise_std: Gaussian noise added to every component
            replay_path: CSV file for 'replay' mode
            config: Defaults for unspecified arguments
            seed: Noise generator seed
        """
        cfg = config or load_mock_sensor_config()
        self.observer = observer
        self.mode = mode if mode is not None else cfg.mode
        self.rate_hz = rate_hz if rate_hz is not None else cfg.rate_hz
        self.heading = heading if heading is not None else cfg.heading
        self.rotation_rate = rotation_rate if rotation_rate is not None else cfg.rotation_rate
        self.noise_std = noise_std if noise_std is not None else cfg.noise_std
        self.replay_path = replay_path if replay_path is not None else cfg.replay_path
        self.field_horizontal = cfg.field_horizontal
        self.field_vertical = cfg.field_vertical

        self._rng = np.random.RandomState(seed)
        self._replay_rows: List[Tuple[int, str, Triple]] = []
        self._replay_index = 0

        # Simulated clock, advanced by one period per step
        self.sim_time_ns = 0
        self.step_count = 0

        self.running = False
        self._generator_thread = None

        self._init_mode()

    def _init_mode(self) -> None:
        """Initialize resources based on selected mode."""
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode}")
        if self.rate_hz <= 0:
            raise ValueError(f"Sample rate must be positive: {self.rate_hz}")

        if self.mode == 'replay':
            if not self.replay_path or not Path(self.replay_path).exists():
                raise ValueError(f"Replay file not found: {self.replay_path}")
            self._replay_rows = load_replay(self.replay_path)
            log.info(f"Loaded {len(self._replay_rows)} samples from {self.replay_path}")

    # ------------------------------------------------------------------
    # Sample generation
    # ------------------------------------------------------------------

    def current_heading(self) -> float:
        """Magnetic heading simulated for the current step."""
        if self.mode == 'synthetic':
            elapsed = self.sim_time_ns * 1e-9
            return (self.heading + self.rotation_rate * elapsed) % 360.0
        return self.heading % 360.0

    def _noisy(self, values: Triple) -> Triple:
        if self.noise_std <= 0:
            return values
        noise = self._rng.normal(0.0, self.noise_std, size=3)
        return tuple(float(v + n) for v, n in zip(values, noise))

    def step(self) -> None:
        """Deliver one accelerometer + magnetometer pair (one row in replay mode)."""
        if self.mode == 'replay':
            timestamp_ns, sensor, values = self._replay_rows[self._replay_index]
            self._replay_index = (self._replay_index + 1) % len(self._replay_rows)
            if self._replay_index == 0:
                log.debug("Replay loop restarted")
            self._deliver(sensor, values, timestamp_ns)
        else:
            accel, mag = sample_for_heading(
                self.current_heading(),
                field_horizontal=self.field_horizontal,
                field_vertical=self.field_vertical,
            )
            self._deliver(ACCELEROMETER, self._noisy(accel), self.sim_time_ns)
            self._deliver(MAGNETOMETER, self._noisy(mag), self.sim_time_ns)

        self.sim_time_ns += int(1e9 / self.rate_hz)
        self.step_count += 1

    def _deliver(self, sensor: str, values: Triple, timestamp_ns: int) -> None:
        if sensor == ACCELEROMETER:
            self.observer.on_accelerometer_received(values, timestamp_ns)
        else:
            self.observer.on_magnetometer_received(values, timestamp_ns)

    # ------------------------------------------------------------------
    # Thread control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Register the observer and start sample generation."""
        if self.running:
            print("[MockObserver] Already running")
            return

        self.observer.register()
        self.running = True

        self._generator_thread = threading.Thread(target=self._generate_samples, daemon=True)
        self._generator_thread.start()

        print(f"[MockObserver] Started '{self.mode}' sensor stream @ {self.rate_hz:.0f} Hz")

    def stop(self) -> None:
        """Stop sample generation and unregister the observer."""
        self.running = False
        if self._generator_thread:
            self._generator_thread.join(timeout=2.0)
        self.observer.unregister()

        print(f"[MockObserver] Stopped (generated {self.step_count} steps)")

    def _generate_samples(self) -> None:
        """Thread loop that delivers samples at the target rate."""
        interval = 1.0 / self.rate_hz

        while self.running:
            loop_start = time.time()

            self.step()

            elapsed = time.time() - loop_start
            sleep_time = max(0, interval - elapsed)
            if sleep_time > 0:
                time.sleep(sleep_time)
