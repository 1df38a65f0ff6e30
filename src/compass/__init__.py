"""
Wear Compass

Heading estimation for a wrist-worn compass: low-pass filtered
accelerometer and magnetometer samples are fused into a bearing, corrected
from magnetic to true north when a location fix is available.

Components:
- HeadingEstimator: fusion pipeline and bearing state
- CompassObserver: sensor callback surface
- DeclinationResolver: World Magnetic Model lookup for a location fix
"""

from .imu.heading_estimator import HeadingEstimator
from .location.declination import DeclinationModel, DeclinationResolver, LocationFix
from .observer import CompassObserver

__all__ = [
    'HeadingEstimator',
    'CompassObserver',
    'DeclinationModel',
    'DeclinationResolver',
    'LocationFix',
]
__version__ = '0.1.0'
