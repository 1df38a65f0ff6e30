#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sensor-callback surface of the compass.

The host environment (sensor SDK, watch runtime, replay tool) delivers
accelerometer and magnetometer samples, accuracy changes and location fixes
through the ``on_*`` callbacks. The observer turns them into estimator
events; it holds no heading state of its own.
"""

import logging
import threading
from enum import IntEnum
from typing import Dict, Optional, Sequence

from compass.imu.compass_state import ACCELEROMETER, MAGNETOMETER, SensorSample
from compass.imu.heading_estimator import HeadingEstimator
from compass.location.declination import DeclinationResolver, LocationFix

log = logging.getLogger("compass.sensors")


class SensorAccuracy(IntEnum):
    """Sensor status levels reported by the host."""
    UNRELIABLE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class CompassObserver:
    """
    Observer dedicated to sensor delivery for the heading estimator.
    """

    def __init__(
        self,
        estimator: HeadingEstimator,
        resolver: Optional[DeclinationResolver] = None,
        async_declination: bool = True,
    ):
        self.estimator = estimator
        self.resolver = resolver
        self.async_declination = async_declination

        self._lock = threading.Lock()
        self.registered = False
        self.sample_counts: Dict[str, int] = {
            ACCELEROMETER: 0,
            MAGNETOMETER: 0,
        }
        self.dropped_count = 0
        self.accuracy: Dict[str, SensorAccuracy] = {}

    # ------------------------------------------------------------------
    # Registration lifecycle
    # ------------------------------------------------------------------

    def register(self) -> None:
        """Start accepting samples. Unregisters first for a clean registration."""
        self.unregister()
        with self._lock:
            self.registered = True
        log.info("Sensors registered (accelerometer + magnetometer)")

    def unregister(self) -> None:
        """Stop accepting samples."""
        with self._lock:
            was_registered = self.registered
            self.registered = False
        if was_registered:
            log.info("Sensors unregistered")

    # ------------------------------------------------------------------
    # Host callbacks
    # ------------------------------------------------------------------

    def on_accelerometer_received(self, values: Sequence[float], timestamp_ns: int = 0) -> None:
        """
        Accelerometer callback

        Args:
            values: (ax, ay, az) in m/s², device axes
            timestamp_ns: Capture timestamp
        """
        self._deliver(ACCELEROMETER, values, timestamp_ns)

    def on_magnetometer_received(self, values: Sequence[float], timestamp_ns: int = 0) -> None:
        """
        Magnetometer callback

        Args:
            values: (mx, my, mz) in µT, device axes
            timestamp_ns: Capture timestamp
        """
        self._deliver(MAGNETOMETER, values, timestamp_ns)

    def on_location_received(self, fix: Optional[LocationFix]) -> None:
        """Location callback; a None fix means no last known location."""
        if self.resolver is None:
            log.debug("Location received but no declination resolver configured")
            return

        if self.async_declination:
            self.resolver.resolve_async(fix)
        else:
            self.resolver.resolve(fix)

    def on_accuracy_changed(self, sensor: str, accuracy: int) -> None:
        """Accuracy callback; UNRELIABLE is logged as a warning."""
        try:
            level = SensorAccuracy(accuracy)
        except ValueError:
            log.warning(f"Unknown accuracy value for {sensor}: {accuracy}")
            return

        with self._lock:
            self.accuracy[sensor] = level

        if level == SensorAccuracy.UNRELIABLE:
            log.warning(f"Sensor accuracy ({sensor}): UNRELIABLE")
        else:
            log.debug(f"Sensor accuracy ({sensor}): {level.name}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _deliver(self, sensor: str, values: Sequence[float], timestamp_ns: int) -> None:
        with self._lock:
            if not self.registered:
                self.dropped_count += 1
                return
            self.sample_counts[sensor] += 1
            count = self.sample_counts[sensor]

        self.estimator.post(SensorSample(sensor=sensor, values=tuple(values), timestamp_ns=timestamp_ns))

        if count % 500 == 0:
            log.debug(f"{sensor}: {count} samples, bearing={self.estimator.bearing:.1f}°")

    def get_stats(self) -> Dict[str, int]:
        """Sample counters for the session summary."""
        with self._lock:
            return {
                "accelerometer_samples": self.sample_counts[ACCELEROMETER],
                "magnetometer_samples": self.sample_counts[MAGNETOMETER],
                "dropped_samples": self.dropped_count,
            }
