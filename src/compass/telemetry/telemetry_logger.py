"""Centralized compass telemetry - JSONL metrics per session."""

import json
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class BearingMetric:
    """Bearing produced by one successful fusion."""
    timestamp: float
    fusion_count: int
    bearing: float
    magnetic_bearing: float
    declination_degrees: Optional[float]
    pitch: float
    roll: float


@dataclass
class DegenerateMetric:
    """Fusion skipped because the rotation matrix was degenerate."""
    timestamp: float
    reason: str
    retained_bearing: float


class TelemetryLogger:
    """
    Thread-safe session telemetry for the compass.
    - Headings: every published bearing
    - Degenerate orientations: skipped fusions with the bearing kept
    - System: session start/end, declination updates, errors
    """

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Start a new telemetry session.

        Args:
            output_dir: Base directory for session folders (default: logs/)
        """
        self._write_lock = threading.Lock()
        self._buffer_lock = threading.Lock()

        base_dir = Path(output_dir) if output_dir is not None else Path("logs")
        base_dir.mkdir(parents=True, exist_ok=True)

        self.session_timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.session_start = time.time()
        self.output_dir = base_dir / f"session_{self.session_timestamp}"
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.headings_log = self.output_dir / "headings.jsonl"
        self.system_log = self.output_dir / "system.jsonl"

        self.bearing_buffer: List[BearingMetric] = []
        self.degenerate_buffer: List[DegenerateMetric] = []
        self.declination_updates = 0

        self._log_system_event("session_start", {
            "session": self.session_timestamp,
            "timestamp": self.session_start
        })

    def get_session_dir(self) -> Path:
        """Return the session directory path for use by other loggers."""
        return self.output_dir

    # ------------------------------------------------------------------
    # Heading metrics
    # ------------------------------------------------------------------

    def log_bearing(self, state) -> None:
        """
        Record a published compass state.

        Args:
            state: CompassState from the heading estimator
        """
        metric = BearingMetric(
            timestamp=time.time(),
            fusion_count=state.fusion_count,
            bearing=state.bearing,
            magnetic_bearing=state.magnetic_bearing,
            declination_degrees=state.declination_degrees,
            pitch=state.pitch,
            roll=state.roll,
        )

        with self._buffer_lock:
            self.bearing_buffer.append(metric)

        self._write_jsonl(self.headings_log, {"event_type": "bearing", **asdict(metric)})

    def log_degenerate(self, reason: str, retained_bearing: float) -> None:
        """Record a fusion skipped on a degenerate orientation."""
        metric = DegenerateMetric(
            timestamp=time.time(),
            reason=reason,
            retained_bearing=retained_bearing,
        )

        with self._buffer_lock:
            self.degenerate_buffer.append(metric)

        self._write_jsonl(self.headings_log, {"event_type": "degenerate_orientation", **asdict(metric)})

    # ------------------------------------------------------------------
    # System events
    # ------------------------------------------------------------------

    def log_declination(self, model) -> None:
        """Record a new declination model."""
        fix = model.fix
        with self._buffer_lock:
            self.declination_updates += 1
        self._log_system_event("declination_update", {
            "declination_degrees": model.declination_degrees,
            "latitude": fix.latitude if fix else None,
            "longitude": fix.longitude if fix else None,
        })

    def log_error(self, error_type: str, message: str, **kwargs: Any) -> None:
        """Record a system error."""
        self._log_system_event("error", {
            "error_type": error_type,
            "message": message,
            **kwargs
        })

    def _log_system_event(self, event_type: str, data: Dict[str, Any]) -> None:
        payload = {
            "timestamp": time.time(),
            "session": self.session_timestamp,
            "event_type": event_type,
            **data
        }
        self._write_jsonl(self.system_log, payload)

    # ------------------------------------------------------------------
    # Session management
    # ------------------------------------------------------------------

    def get_heading_summary(self) -> Dict[str, Any]:
        """Running statistics for the current session."""
        with self._buffer_lock:
            bearings = [m.bearing for m in self.bearing_buffer]
            degenerate = len(self.degenerate_buffer)
            declination_updates = self.declination_updates

        return {
            "total_fusions": len(bearings),
            "degenerate_orientations": degenerate,
            "declination_updates": declination_updates,
            "last_bearing": bearings[-1] if bearings else None,
        }

    def finalize_session(self) -> Dict[str, Any]:
        """
        Close the session and write summary.json.

        Returns:
            Dict with session statistics
        """
        summary = {
            "session": self.session_timestamp,
            "duration_seconds": time.time() - self.session_start,
            **self.get_heading_summary(),
        }

        self._log_system_event("session_end", summary)

        summary_path = self.output_dir / "summary.json"
        with open(summary_path, 'w') as f:
            json.dump(summary, f, indent=2)

        return summary

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _write_jsonl(self, path: Path, data: Dict[str, Any]) -> None:
        try:
            line = json.dumps(data, ensure_ascii=True)
        except TypeError:
            line = json.dumps({"error": "serialization_failed", "repr": repr(data)})

        with self._write_lock:
            with open(path, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
