"""Tests for typed configuration sections."""

from __future__ import annotations

import pytest

from compass.utils.config import Config
from compass.utils.config_sections import (
    load_dashboard_config,
    load_fusion_config,
    load_low_pass_config,
    load_mock_sensor_config,
)


def test_low_pass_defaults_to_quarter_alpha():
    assert load_low_pass_config().alpha == 0.25


def test_fusion_config_reads_constants():
    cfg = load_fusion_config()

    assert cfg.gravity == pytest.approx(9.80665)
    assert cfg.free_fall_ratio == Config.FREE_FALL_GRAVITY_RATIO
    assert cfg.min_horizontal_norm == Config.MIN_HORIZONTAL_FIELD_NORM


def test_sections_follow_config_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(Config, "LOW_PASS_ALPHA", 0.5)
    monkeypatch.setattr(Config, "MOCK_RATE_HZ", 25.0)
    monkeypatch.setattr(Config, "DASHBOARD_SIZE", 320)

    assert load_low_pass_config().alpha == 0.5
    assert load_mock_sensor_config().rate_hz == 25.0
    assert load_dashboard_config().size == 320
