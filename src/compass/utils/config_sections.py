"""
Typed configuration sections for the Wear Compass.

This module provides strongly-typed configuration sections built from the
flat Config constants, with proper type hints and defaults.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class LowPassConfig:
    """Configuration for the exponential low-pass filter."""

    # Blend factor: larger reacts faster but passes more noise
    alpha: float = 0.25


@dataclass
class FusionConfig:
    """Configuration for rotation-matrix fusion."""

    gravity: float = 9.80665  # m/s²
    free_fall_ratio: float = 0.01
    min_horizontal_norm: float = 0.1


@dataclass
class MockSensorConfig:
    """Configuration for the mock sensor source."""

    mode: str = "static"
    rate_hz: float = 50.0
    heading: float = 0.0  # degrees, magnetic
    rotation_rate: float = 30.0  # degrees per second
    noise_std: float = 0.0
    field_horizontal: float = 30.0  # µT
    field_vertical: float = 40.0  # µT
    replay_path: Optional[str] = None


@dataclass
class DashboardConfig:
    """Configuration for the OpenCV needle dashboard."""

    size: int = 400
    window_name: str = "Wear Compass"
    needle_ratio: float = 0.8


def load_low_pass_config() -> LowPassConfig:
    """
    Load low-pass configuration from Config with fallback defaults.

    Returns:
        LowPassConfig with values from Config or defaults
    """
    from compass.utils.config import Config

    return LowPassConfig(alpha=getattr(Config, "LOW_PASS_ALPHA", 0.25))


def load_fusion_config() -> FusionConfig:
    """
    Load fusion configuration from Config with fallback defaults.

    Returns:
        FusionConfig with values from Config or defaults
    """
    from compass.utils.config import Config

    return FusionConfig(
        gravity=getattr(Config, "STANDARD_GRAVITY", 9.80665),
        free_fall_ratio=getattr(Config, "FREE_FALL_GRAVITY_RATIO", 0.01),
        min_horizontal_norm=getattr(Config, "MIN_HORIZONTAL_FIELD_NORM", 0.1),
    )


def load_mock_sensor_config() -> MockSensorConfig:
    """
    Load mock sensor configuration from Config with fallback defaults.

    Returns:
        MockSensorConfig with values from Config or defaults
    """
    from compass.utils.config import Config

    return MockSensorConfig(
        mode=getattr(Config, "MOCK_MODE", "static"),
        rate_hz=getattr(Config, "MOCK_RATE_HZ", 50.0),
        heading=getattr(Config, "MOCK_HEADING_DEG", 0.0),
        rotation_rate=getattr(Config, "MOCK_ROTATION_RATE_DEG_S", 30.0),
        noise_std=getattr(Config, "MOCK_NOISE_STD", 0.0),
        field_horizontal=getattr(Config, "MOCK_FIELD_HORIZONTAL_UT", 30.0),
        field_vertical=getattr(Config, "MOCK_FIELD_VERTICAL_UT", 40.0),
    )


def load_dashboard_config() -> DashboardConfig:
    """
    Load dashboard configuration from Config with fallback defaults.

    Returns:
        DashboardConfig with values from Config or defaults
    """
    from compass.utils.config import Config

    return DashboardConfig(
        size=getattr(Config, "DASHBOARD_SIZE", 400),
        window_name=getattr(Config, "DASHBOARD_WINDOW_NAME", "Wear Compass"),
        needle_ratio=getattr(Config, "DASHBOARD_NEEDLE_RATIO", 0.8),
    )
