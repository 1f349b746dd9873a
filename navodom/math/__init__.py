"""
Mathematical utilities for odometry calculations.
"""

from .utils import (normalize_angle, degrees_to_radians, compass_to_yaw,
                    quaternion_from_rpy, snap_to_grid)
from .constants import *

__all__ = ["normalize_angle", "degrees_to_radians", "compass_to_yaw",
           "quaternion_from_rpy", "snap_to_grid"]
