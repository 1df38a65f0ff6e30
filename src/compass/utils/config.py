"""
Centralized configuration for the Wear Compass.

This module provides all configuration constants for:
- Signal conditioning (low-pass filter)
- Orientation fusion (gravity constant, degeneracy thresholds)
- Magnetic declination lookup
- Mock sensor generation (development without hardware)
- Telemetry and session logging
- Needle dashboard rendering

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation.

Usage:
    from compass.utils.config import Config

    alpha = Config.LOW_PASS_ALPHA
    if Config.TELEMETRY_ENABLED:
        # Write heading telemetry for the session
"""


class Config:
    """System configuration constants for the Wear Compass."""

    # ==========================================================================
    # SIGNAL CONDITIONING: Low-pass filter
    # ==========================================================================

    # Same constant for accelerometer and magnetometer
    LOW_PASS_ALPHA = 0.25

    # ==========================================================================
    # ORIENTATION FUSION: Rotation matrix thresholds
    # ==========================================================================

    STANDARD_GRAVITY = 9.80665          # m/s²
    FREE_FALL_GRAVITY_RATIO = 0.01      # |g|² below ratio * g² is free fall
    MIN_HORIZONTAL_FIELD_NORM = 0.1     # |E x A| below this is degenerate

    # ==========================================================================
    # DECLINATION: World Magnetic Model lookup
    # ==========================================================================

    DECLINATION_ENABLED = True
    DECLINATION_ASYNC = True            # Resolve on a background thread
    WMM_COEFFICIENTS_PATH = None        # Current WMM.COF; None uses the file bundled with geomag

    # ==========================================================================
    # MOCK SENSORS: Synthetic stream for development
    # ==========================================================================

    MOCK_MODE = "static"                # static, synthetic, replay
    MOCK_RATE_HZ = 50.0                 # Roughly SENSOR_DELAY_UI
    MOCK_HEADING_DEG = 0.0              # Simulated magnetic azimuth
    MOCK_ROTATION_RATE_DEG_S = 30.0     # Sweep speed in synthetic mode
    MOCK_NOISE_STD = 0.0                # Gaussian noise per component
    MOCK_FIELD_HORIZONTAL_UT = 30.0     # Horizontal geomagnetic component
    MOCK_FIELD_VERTICAL_UT = 40.0       # Downward geomagnetic component

    # ==========================================================================
    # TELEMETRY & LOGGING
    # ==========================================================================

    TELEMETRY_ENABLED = True
    LOG_DIR = "logs"
    BEARING_PRINT_INTERVAL = 0.5        # seconds between CLI prints

    # ==========================================================================
    # DASHBOARD: OpenCV needle rendering
    # ==========================================================================

    DASHBOARD_SIZE = 400                # px, square canvas
    DASHBOARD_WINDOW_NAME = "Wear Compass"
    DASHBOARD_NEEDLE_RATIO = 0.8        # needle length / dial radius
