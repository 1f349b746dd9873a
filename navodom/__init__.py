"""
GPS/inertial odometry driver.

This package provides:
- Navigation sample acquisition and deduplication
- Grid-snapped global to local coordinate transform
- Compass to robot convention conversion with gear-aware speed sign
- A fixed-rate driver publishing odometry, transforms and GPS status
"""

__version__ = "1.0.0"
__author__ = "DR Vehicle Team"

from .odometry import CycleDriver, CoordinateNormalizer, SampleAcquirer, ConventionAdapter
from .bus import MessageBus
from .math import normalize_angle

__all__ = [
    "CycleDriver",
    "CoordinateNormalizer",
    "SampleAcquirer",
    "ConventionAdapter",
    "MessageBus",
    "normalize_angle"
]
