"""
Magnetic declination from the device's last known location.

A location fix (latitude, longitude, altitude, timestamp) is turned into a
``DeclinationModel`` through the World Magnetic Model shipped with the
``geomag`` package. The model holds a single scalar, the declination in
degrees (angle from true north to magnetic north, east positive).

The lookup runs off the sensor path: ``DeclinationResolver`` computes the
model, optionally on a background thread, and posts it to a sink (the
heading estimator's ``post``) as a ``DeclinationUpdate`` message. A missing
fix or a failed lookup keeps whatever model the estimator already has.

Usage:
    resolver = DeclinationResolver(sink=estimator.post)
    resolver.resolve_async(LocationFix(40.4, -3.7, 650.0, time.time() * 1000))
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Optional

from geomag import geomag

log = logging.getLogger("compass.location")

FEET_PER_METER = 3.28084
WMM_VALIDITY_YEARS = 5.0

DeclinationFn = Callable[[float, float, float, float], float]

_models = {}
_models_lock = threading.Lock()


@dataclass(frozen=True)
class LocationFix:
    """Last known device location."""
    latitude: float      # degrees
    longitude: float     # degrees
    altitude: float      # meters
    timestamp_ms: float  # epoch milliseconds


def _wmm_model(wmm_filename: Optional[str] = None):
    """Cached ``geomag.GeoMag`` for a coefficient file (None = bundled WMM.COF)."""
    key = wmm_filename or ""
    with _models_lock:
        model = _models.get(key)
        if model is None:
            model = geomag.GeoMag(wmm_filename)
            _models[key] = model
            epoch = getattr(model, "epoch", None)
            log.info(f"Loaded WMM coefficients (epoch {epoch}) from {wmm_filename or 'geomag package'}")
        return model


def coefficients_cover(model, when: date) -> bool:
    """True when ``when`` falls inside the model's five-year validity window."""
    epoch = getattr(model, "epoch", None)
    if epoch is None:
        return True
    year = when.year + (when.timetuple().tm_yday - 1) / 365.25
    return epoch <= year < epoch + WMM_VALIDITY_YEARS


def wmm_declination(
    latitude: float,
    longitude: float,
    altitude: float,
    timestamp_ms: float,
    wmm_filename: Optional[str] = None,
) -> float:
    """
    World Magnetic Model declination for a location and time.

    Args:
        latitude: Decimal degrees
        longitude: Decimal degrees
        altitude: Meters above sea level
        timestamp_ms: Epoch milliseconds
        wmm_filename: WMM.COF coefficient file, defaults to
            Config.WMM_COEFFICIENTS_PATH or the file bundled with geomag

    Returns:
        float: Declination in degrees (east positive)
    """
    if wmm_filename is None:
        from compass.utils.config import Config
        wmm_filename = getattr(Config, "WMM_COEFFICIENTS_PATH", None)

    when = datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc).date()
    model = _wmm_model(wmm_filename)
    if not coefficients_cover(model, when):
        log.warning(
            f"{when} is outside the WMM {getattr(model, 'epoch', '?')} coefficient window; "
            f"declination is extrapolated (set Config.WMM_COEFFICIENTS_PATH to a current WMM.COF)"
        )
    result = model.GeoMag(latitude, longitude, h=altitude * FEET_PER_METER, time=when)
    return float(result.dec)


@dataclass(frozen=True)
class DeclinationModel:
    """Declination derived from one location fix."""
    declination_degrees: float
    fix: Optional[LocationFix] = None

    @classmethod
    def from_fix(cls, fix: LocationFix, declination_fn: DeclinationFn = wmm_declination) -> "DeclinationModel":
        declination = declination_fn(fix.latitude, fix.longitude, fix.altitude, fix.timestamp_ms)
        return cls(declination_degrees=float(declination), fix=fix)


@dataclass(frozen=True)
class DeclinationUpdate:
    """New declination model available for the estimator."""
    model: DeclinationModel


class DeclinationResolver:
    """Builds declination models from location fixes and posts them to a sink."""

    def __init__(
        self,
        sink: Callable[[object], None],
        declination_fn: DeclinationFn = wmm_declination,
        telemetry=None,
    ) -> None:
        self._sink = sink
        self._declination_fn = declination_fn
        self.telemetry = telemetry
        self._lock = threading.Lock()
        self._threads = []
        self.resolved_count = 0
        self.failed_count = 0
        self.last_model: Optional[DeclinationModel] = None

    def resolve(self, fix: Optional[LocationFix]) -> Optional[DeclinationModel]:
        """Compute the model for ``fix`` and post it. Returns None if skipped."""
        if fix is None:
            log.debug("No location fix available, keeping current declination")
            return None

        try:
            model = DeclinationModel.from_fix(fix, self._declination_fn)
        except Exception as e:
            with self._lock:
                self.failed_count += 1
            log.warning(f"Declination lookup failed for ({fix.latitude:.4f}, {fix.longitude:.4f}): {e}")
            if self.telemetry:
                self.telemetry.log_error(
                    "declination_lookup", str(e),
                    latitude=fix.latitude, longitude=fix.longitude,
                )
            return None

        with self._lock:
            self.resolved_count += 1
            self.last_model = model

        log.info(f"Magnetic declination: {model.declination_degrees:.2f}°")
        self._sink(DeclinationUpdate(model))
        return model

    def resolve_async(self, fix: Optional[LocationFix]) -> Optional[threading.Thread]:
        """Fire-and-forget resolve on a daemon thread."""
        if fix is None:
            log.debug("No location fix available, keeping current declination")
            return None

        thread = threading.Thread(target=self.resolve, args=(fix,), daemon=True)
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
        thread.start()
        return thread

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for pending async lookups."""
        with self._lock:
            pending = list(self._threads)
        for thread in pending:
            thread.join(timeout=timeout)
