"""
Global to local coordinate transform.
"""

import logging
from typing import Optional, Tuple

from .state import MapOrigin, Pose3D
from ..math.constants import ORIGIN_GRID_M
from ..math.utils import snap_to_grid

logger = logging.getLogger(__name__)

class CoordinateNormalizer:
    """
    Translates projected poses into a local frame.
    
    The frame origin is taken from the first pose, with its horizontal
    position rounded to a coarse grid. A driver restarted within the same
    grid cell picks the same origin, so local coordinates stay comparable
    across runs without persisting anything.
    """
    
    def __init__(self, grid_size: float = ORIGIN_GRID_M):
        if grid_size <= 0:
            raise ValueError("grid_size must be positive")
        self.grid_size = grid_size
        self._origin: Optional[MapOrigin] = None
    
    @property
    def origin(self) -> Optional[MapOrigin]:
        """Map origin, or None before the first pose."""
        return self._origin
    
    @property
    def has_origin(self) -> bool:
        return self._origin is not None
    
    def _set_origin(self, x: float, y: float, z: float) -> None:
        self._origin = MapOrigin(
            x=snap_to_grid(x, self.grid_size),
            y=snap_to_grid(y, self.grid_size),
            z=z
        )
        logger.info("INITIAL data (%.3f, %.3f, %.3f), map origin (%.3f, %.3f, %.3f)",
                    x, y, z, self._origin.x, self._origin.y, self._origin.z)
    
    def normalize(self, pose: Pose3D) -> bool:
        """
        Translate a pose from projected meters to local coordinates in place.
        
        Only x, y and z change; roll, pitch and yaw are left alone.
        
        Args:
            pose: Pose holding easting, northing and altitude
            
        Returns:
            True if this pose defined the map origin
        """
        logger.debug("Global data (%.3f, %.3f, %.3f) (%.3f, %.3f, %.3f)",
                     pose.x, pose.y, pose.z, pose.roll, pose.pitch, pose.yaw)
        
        initial_pose = self._origin is None
        if initial_pose:
            self._set_origin(pose.x, pose.y, pose.z)
        
        pose.x -= self._origin.x
        pose.y -= self._origin.y
        pose.z -= self._origin.z
        
        logger.debug("Local data  (%.3f, %.3f, %.3f) (%.3f, %.3f, %.3f)",
                     pose.x, pose.y, pose.z, pose.roll, pose.pitch, pose.yaw)
        
        return initial_pose
    
    def to_local(self, easting: float, northing: float,
                 altitude: float) -> Tuple[Pose3D, bool]:
        """
        Convert projected coordinates to a local pose.
        
        Returns:
            (pose, is_first_sample)
        """
        pose = Pose3D(x=easting, y=northing, z=altitude)
        return pose, self.normalize(pose)
