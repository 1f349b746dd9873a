"""
Outgoing odometry, GPS and transform messages.
"""

import numpy as np
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Any

from .state import Pose3D, Velocity3D, Position3D
from ..math.utils import quaternion_from_rpy
from ..sensors.records import AlignmentStatus, RawSample
from ..sensors.projection import UTMCoordinate

ODOM_FRAME = "odom"
VEHICLE_FRAME = "vehicle"

class GpsQuality(IntEnum):
    """GPS fix quality, numbered like the NMEA GGA quality field."""
    
    INVALID_FIX = 0
    GPS_FIX = 1
    DGPS_FIX = 2

def quality_from_alignment(alignment: AlignmentStatus) -> GpsQuality:
    """Map device alignment status to GPS fix quality."""
    if alignment == AlignmentStatus.FULL:
        return GpsQuality.DGPS_FIX
    if alignment == AlignmentStatus.FINE:
        return GpsQuality.GPS_FIX
    return GpsQuality.INVALID_FIX

def _zero_covariance() -> np.ndarray:
    # Covariances are not estimated; all zero means unknown.
    return np.zeros((6, 6))

@dataclass
class GpsInfo:
    """Current GPS status."""
    
    stamp: float
    frame_id: str
    latitude: float
    longitude: float
    altitude: float
    utm_e: float
    utm_n: float
    utm_zone: str
    quality: GpsQuality
    
    @classmethod
    def from_sample(cls, sample: RawSample, coord: UTMCoordinate,
                    frame_id: str = ODOM_FRAME) -> 'GpsInfo':
        return cls(
            stamp=sample.timestamp,
            frame_id=frame_id,
            latitude=sample.latitude,
            longitude=sample.longitude,
            altitude=sample.altitude,
            utm_e=coord.easting,
            utm_n=coord.northing,
            utm_zone=coord.zone,
            quality=quality_from_alignment(sample.alignment)
        )
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'stamp': self.stamp,
            'frame_id': self.frame_id,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'altitude': self.altitude,
            'utm_e': self.utm_e,
            'utm_n': self.utm_n,
            'utm_zone': self.utm_zone,
            'quality': self.quality.name
        }

@dataclass
class TransformStamped:
    """Transform from the vehicle frame to the odometry frame."""
    
    stamp: float
    frame_id: str
    child_frame_id: str
    translation: np.ndarray
    rotation: np.ndarray  # quaternion (x, y, z, w)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'stamp': self.stamp,
            'frame_id': self.frame_id,
            'child_frame_id': self.child_frame_id,
            'translation': self.translation.tolist(),
            'rotation': self.rotation.tolist()
        }

@dataclass
class Odometry:
    """
    Pose in the odometry frame and twist in the vehicle frame.
    """
    
    stamp: float
    frame_id: str
    child_frame_id: str
    pose: Pose3D
    orientation: np.ndarray  # quaternion (x, y, z, w)
    twist: Velocity3D
    pose_covariance: np.ndarray = field(default_factory=_zero_covariance)
    twist_covariance: np.ndarray = field(default_factory=_zero_covariance)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'stamp': self.stamp,
            'frame_id': self.frame_id,
            'child_frame_id': self.child_frame_id,
            'position': self.pose.position.tolist(),
            'rpy': self.pose.orientation.tolist(),
            'orientation': self.orientation.tolist(),
            'linear': self.twist.linear.tolist(),
            'angular': self.twist.angular.tolist(),
            'pose_covariance': self.pose_covariance.ravel().tolist(),
            'twist_covariance': self.twist_covariance.ravel().tolist()
        }

def make_pose_messages(position: Position3D, stamp: float,
                       frame_id: str = ODOM_FRAME,
                       child_frame_id: str = VEHICLE_FRAME):
    """
    Build the transform and odometry messages for a pose estimate.
    
    Returns:
        (TransformStamped, Odometry)
    """
    pos = position.pos
    quat = quaternion_from_rpy(pos.roll, pos.pitch, pos.yaw)
    
    transform = TransformStamped(
        stamp=stamp,
        frame_id=frame_id,
        child_frame_id=child_frame_id,
        translation=pos.position,
        rotation=quat
    )
    odom = Odometry(
        stamp=stamp,
        frame_id=frame_id,
        child_frame_id=child_frame_id,
        pose=pos.copy(),
        orientation=quat.copy(),
        twist=position.vel.copy()
    )
    return transform, odom
