"""Tests for the JSONL telemetry session logger."""

from __future__ import annotations

import json
from pathlib import Path

from compass.imu.heading_estimator import HeadingEstimator
from compass.imu.vector import Vector3
from compass.location.declination import DeclinationModel, LocationFix
from compass.telemetry.telemetry_logger import TelemetryLogger


def read_jsonl(path: Path):
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def test_session_directory_created(tmp_path: Path) -> None:
    telemetry = TelemetryLogger(output_dir=tmp_path)

    assert telemetry.get_session_dir().parent == tmp_path
    events = read_jsonl(telemetry.system_log)
    assert events[0]["event_type"] == "session_start"


def test_estimator_writes_bearing_and_degenerate_events(tmp_path: Path) -> None:
    telemetry = TelemetryLogger(output_dir=tmp_path)
    estimator = HeadingEstimator(telemetry=telemetry)

    estimator.on_gravity(Vector3(0.0, 0.0, 9.8))
    estimator.on_magnetic(Vector3(0.0, 30.0, -40.0))
    # Fresh estimator with zero gravity: free fall
    other = HeadingEstimator(telemetry=telemetry)
    other.on_magnetic(Vector3(0.0, 30.0, -40.0))
    other.on_gravity(Vector3(0.0, 0.0, 0.0))

    rows = read_jsonl(telemetry.headings_log)
    kinds = [row["event_type"] for row in rows]
    assert kinds == ["bearing", "degenerate_orientation"]
    assert rows[1]["retained_bearing"] == 0.0

    summary = telemetry.get_heading_summary()
    assert summary["total_fusions"] == 1
    assert summary["degenerate_orientations"] == 1


def test_declination_update_logged_as_system_event(tmp_path: Path) -> None:
    telemetry = TelemetryLogger(output_dir=tmp_path)
    fix = LocationFix(48.85, 2.35, 35.0, 1_700_000_000_000)

    telemetry.log_declination(DeclinationModel(declination_degrees=1.9, fix=fix))

    events = read_jsonl(telemetry.system_log)
    assert events[-1]["event_type"] == "declination_update"
    assert events[-1]["latitude"] == 48.85


def test_finalize_session_writes_summary(tmp_path: Path) -> None:
    telemetry = TelemetryLogger(output_dir=tmp_path)
    telemetry.log_error("sensor", "magnetometer missing")

    summary = telemetry.finalize_session()

    saved = json.loads((telemetry.output_dir / "summary.json").read_text())
    assert saved["total_fusions"] == 0
    assert summary["last_bearing"] is None
    assert read_jsonl(telemetry.system_log)[-1]["event_type"] == "session_end"
