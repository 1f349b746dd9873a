"""
Odometry from a GPS/inertial positioning device.
"""

from .state import MapOrigin, Pose3D, Velocity3D, Position3D
from .acquirer import SampleAcquirer
from .normalizer import CoordinateNormalizer
from .adapter import ConventionAdapter, Gear, GearCell
from .messages import GpsQuality, GpsInfo, Odometry, TransformStamped
from .driver import CycleDriver, DriverState, Rate

__all__ = ["MapOrigin", "Pose3D", "Velocity3D", "Position3D",
           "SampleAcquirer", "CoordinateNormalizer", "ConventionAdapter",
           "Gear", "GearCell", "GpsQuality", "GpsInfo", "Odometry",
           "TransformStamped", "CycleDriver", "DriverState", "Rate"]
