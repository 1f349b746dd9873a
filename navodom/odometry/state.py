"""
Pose and velocity representation for odometry.
"""

import numpy as np
from dataclasses import dataclass, field

@dataclass(frozen=True)
class MapOrigin:
    """
    Global position of the local frame origin, in projected meters.
    
    x and y are snapped to the origin grid; z is the altitude of the
    first accepted sample.
    """
    
    x: float
    y: float
    z: float
    
    def __str__(self) -> str:
        return f"MapOrigin({self.x:.3f}, {self.y:.3f}, {self.z:.3f})"

@dataclass
class Pose3D:
    """
    Position and orientation.
    
    - x, y, z: meters (local frame once normalized)
    - roll, pitch, yaw: radians
    """
    
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0
    
    @property
    def position(self) -> np.ndarray:
        """Get position as [x, y, z] vector."""
        return np.array([self.x, self.y, self.z])
    
    @property
    def orientation(self) -> np.ndarray:
        """Get orientation as [roll, pitch, yaw] vector."""
        return np.array([self.roll, self.pitch, self.yaw])
    
    def copy(self) -> 'Pose3D':
        """Create a copy of the pose."""
        return Pose3D(self.x, self.y, self.z, self.roll, self.pitch, self.yaw)
    
    def __str__(self) -> str:
        return (
            f"Pose3D(pos=[{self.x:.3f}, {self.y:.3f}, {self.z:.3f}], "
            f"rpy=[{self.roll:.3f}, {self.pitch:.3f}, {self.yaw:.3f}])"
        )

@dataclass
class Velocity3D:
    """
    Linear and angular velocity in the vehicle frame.
    
    - x, y, z: m/s
    - roll, pitch, yaw: rad/s
    """
    
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0
    
    @property
    def linear(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])
    
    @property
    def angular(self) -> np.ndarray:
        return np.array([self.roll, self.pitch, self.yaw])
    
    def copy(self) -> 'Velocity3D':
        """Create a copy of the velocity."""
        return Velocity3D(self.x, self.y, self.z, self.roll, self.pitch, self.yaw)

@dataclass
class Position3D:
    """Combined pose and velocity estimate."""
    
    pos: Pose3D = field(default_factory=Pose3D)
    vel: Velocity3D = field(default_factory=Velocity3D)
    
    def copy(self) -> 'Position3D':
        return Position3D(self.pos.copy(), self.vel.copy())
