"""
Heading estimation from filtered gravity and magnetic-field vectors.

The estimator owns all mutable compass state: the two low-pass filtered
vectors, the current bearing and the optional declination model. Every
update goes through one lock, so samples and declination updates may be
delivered from different threads.

Pipeline per sample:
1. Low-pass filter the sample into its stream (gravity or magnetic)
2. If both streams are initialized, build the rotation matrix
3. Extract azimuth, convert to degrees, normalize to [0, 360)
4. Subtract declination when a model is present, normalize again
5. Store the bearing and notify subscribers

A degenerate orientation (free fall, vectors nearly parallel) aborts the
pipeline at step 2, so steps 2-5 never complete and the previous bearing
is kept. It is logged and counted, never raised.

Usage:
    estimator = HeadingEstimator()
    unsubscribe = estimator.subscribe(lambda state: print(state.bearing))
    estimator.on_gravity(Vector3(0.0, 0.0, 9.8))
    estimator.on_magnetic(Vector3(0.0, 30.0, -40.0))
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, List, Optional

from compass.imu.compass_state import (
    ACCELEROMETER,
    MAGNETOMETER,
    CompassEvent,
    CompassState,
    SensorSample,
)
from compass.imu.low_pass_filter import LowPassFilter
from compass.imu.orientation import (
    DegenerateOrientationError,
    apply_declination,
    normalize_bearing,
    orientation_angles,
    rotation_matrix,
)
from compass.imu.vector import Vector3
from compass.location.declination import DeclinationModel, DeclinationUpdate
from compass.utils.config_sections import (
    FusionConfig,
    LowPassConfig,
    load_fusion_config,
    load_low_pass_config,
)

log = logging.getLogger("compass.fusion")

BearingListener = Callable[[CompassState], None]


class HeadingEstimator:
    """Fuse accelerometer and magnetometer streams into a compass bearing."""

    def __init__(
        self,
        low_pass_config: Optional[LowPassConfig] = None,
        fusion_config: Optional[FusionConfig] = None,
        telemetry=None,
    ) -> None:
        self.low_pass_config = low_pass_config or load_low_pass_config()
        self.fusion_config = fusion_config or load_fusion_config()
        self.telemetry = telemetry

        self._lock = threading.Lock()
        self._gravity = LowPassFilter(self.low_pass_config.alpha)
        self._magnetic = LowPassFilter(self.low_pass_config.alpha)
        self._declination: Optional[DeclinationModel] = None
        self._state: Optional[CompassState] = None
        self._bearing = 0.0

        self.fusion_count = 0
        self.degenerate_count = 0

        self._listeners: List[BearingListener] = []
        self._listeners_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Update entry points
    # ------------------------------------------------------------------

    def post(self, event: CompassEvent) -> Optional[CompassState]:
        """Single update entry point for sensor samples and declination updates."""
        if isinstance(event, DeclinationUpdate):
            self.set_declination_model(event.model)
            return None

        if isinstance(event, SensorSample):
            sample = Vector3.from_values(event.values)
            if event.sensor == ACCELEROMETER:
                return self.on_gravity(sample)
            if event.sensor == MAGNETOMETER:
                return self.on_magnetic(sample)
            raise ValueError(f"Unknown sensor type: {event.sensor}")

        raise TypeError(f"Unsupported compass event: {type(event).__name__}")

    def on_gravity(self, sample: Vector3) -> Optional[CompassState]:
        """Filter an accelerometer sample and attempt fusion."""
        with self._lock:
            self._gravity.update(sample)
            state = self._fuse_locked()
        return self._publish(state)

    def on_magnetic(self, sample: Vector3) -> Optional[CompassState]:
        """Filter a magnetometer sample and attempt fusion."""
        with self._lock:
            self._magnetic.update(sample)
            state = self._fuse_locked()
        return self._publish(state)

    def set_declination_model(self, model: Optional[DeclinationModel]) -> None:
        """Replace the declination model. Takes effect on the next fusion."""
        with self._lock:
            self._declination = model

        if model is not None:
            log.debug(f"Declination model set: {model.declination_degrees:.2f}°")
            if self.telemetry is not None:
                self.telemetry.log_declination(model)

    # ------------------------------------------------------------------
    # Fusion
    # ------------------------------------------------------------------

    def _fuse_locked(self) -> Optional[CompassState]:
        gravity = self._gravity.value
        magnetic = self._magnetic.value
        if gravity is None or magnetic is None:
            return None

        cfg = self.fusion_config
        try:
            r = rotation_matrix(
                gravity,
                magnetic,
                gravity_norm=cfg.gravity,
                free_fall_ratio=cfg.free_fall_ratio,
                min_horizontal_norm=cfg.min_horizontal_norm,
            )
        except DegenerateOrientationError as e:
            self.degenerate_count += 1
            log.warning(f"Failed to get rotation matrix: {e}")
            if self.telemetry is not None:
                self.telemetry.log_degenerate(str(e), self._bearing)
            return None

        azimuth, pitch, roll = orientation_angles(r)
        magnetic_bearing = normalize_bearing(math.degrees(azimuth))

        bearing = magnetic_bearing
        declination = None
        if self._declination is not None:
            declination = self._declination.declination_degrees
            bearing = apply_declination(magnetic_bearing, declination)

        self._bearing = bearing
        self.fusion_count += 1
        self._state = CompassState(
            bearing=bearing,
            magnetic_bearing=magnetic_bearing,
            declination_degrees=declination,
            pitch=math.degrees(pitch),
            roll=math.degrees(roll),
            fusion_count=self.fusion_count,
            last_updated=time.time(),
        )
        log.debug(f"Bearing: {bearing:.1f}°")
        return self._state

    def _publish(self, state: Optional[CompassState]) -> Optional[CompassState]:
        if state is None:
            return None

        if self.telemetry is not None:
            self.telemetry.log_bearing(state)

        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                log.exception("Bearing listener failed")
        return state

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: BearingListener) -> Callable[[], None]:
        """Register a bearing-changed callback. Returns an unsubscribe function."""
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def bearing(self) -> float:
        with self._lock:
            return self._bearing

    @property
    def has_fix(self) -> bool:
        with self._lock:
            return self._state is not None

    @property
    def filtered_gravity(self) -> Optional[Vector3]:
        with self._lock:
            return self._gravity.value

    @property
    def filtered_magnetic(self) -> Optional[Vector3]:
        with self._lock:
            return self._magnetic.value

    @property
    def declination_model(self) -> Optional[DeclinationModel]:
        with self._lock:
            return self._declination

    def state(self) -> Optional[CompassState]:
        """Latest successful fusion, or None before the first one."""
        with self._lock:
            return self._state
