"""
Device to robot convention conversion.

The device reports attitude like a compass: heading zero is North and
grows clockwise. The robot frame has yaw zero along +X (East) and pi/2
along +Y (North). The device cannot tell forward from reverse motion, so
the sign of the speed comes from the transmission.
"""

import logging
from enum import IntEnum
from typing import Tuple, Union

from .state import Pose3D, Velocity3D
from ..math.utils import degrees_to_radians, compass_to_yaw
from ..sensors.records import RawSample

logger = logging.getLogger(__name__)

class Gear(IntEnum):
    """Transmission gear."""
    
    RESET = 0
    PARK = 1
    REVERSE = 2
    NEUTRAL = 3
    DRIVE = 4
    LOW = 5

class GearCell:
    """
    Holds the latest reported gear.
    
    Written by the gear notification handler, read once per cycle. Only
    the most recent value matters, so each write replaces the last.
    """
    
    def __init__(self, gear: Gear = Gear.DRIVE):
        self._gear = Gear(gear)
    
    def get(self) -> Gear:
        return self._gear
    
    def set(self, gear: Union[Gear, int]) -> None:
        gear = Gear(gear)
        if gear != self._gear:
            logger.info("Gear changed from %s to %s", self._gear.name, gear.name)
        self._gear = gear

class ConventionAdapter:
    """Maps device attitude, velocity and rates into the robot frame."""
    
    @staticmethod
    def orient(sample: RawSample) -> Tuple[float, float, float]:
        """
        Get robot roll, pitch and yaw from a sample.
        
        Returns:
            (roll, pitch, yaw) in radians, yaw in (-pi, pi]
        """
        roll = degrees_to_radians(sample.roll)
        pitch = degrees_to_radians(-sample.pitch)
        yaw = compass_to_yaw(sample.heading)
        return roll, pitch, yaw
    
    def apply_orientation(self, sample: RawSample, pose: Pose3D) -> Pose3D:
        """Set the orientation fields of a pose from a sample."""
        pose.roll, pose.pitch, pose.yaw = self.orient(sample)
        return pose
    
    @staticmethod
    def adapt(sample: RawSample, gear: Gear) -> Velocity3D:
        """
        Get vehicle-frame velocity from a sample.
        
        Lateral velocity is not observed and stays zero.
        
        Args:
            sample: Accepted navigation sample
            gear: Current transmission gear
            
        Returns:
            Velocity3D in m/s and rad/s
        """
        speed = sample.speed
        if gear == Gear.REVERSE:
            speed = -speed
        
        return Velocity3D(
            x=speed,
            y=0.0,
            z=-sample.vel_down,
            roll=degrees_to_radians(sample.arate_x),
            pitch=degrees_to_radians(-sample.arate_y),
            yaw=degrees_to_radians(-sample.arate_z)
        )
