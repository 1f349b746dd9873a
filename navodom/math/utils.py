"""
Mathematical utility functions for odometry.
"""

import numpy as np
import math

from .constants import PI, TWO_PI, DEG_TO_RAD

def normalize_angle(angle):
    """
    Normalize angle to the (-pi, pi] range.
    
    Args:
        angle (float): Angle in radians
        
    Returns:
        float: Normalized angle in (-pi, pi]
    """
    wrapped = math.fmod(angle + PI, TWO_PI)
    if wrapped <= 0.0:
        wrapped += TWO_PI
    result = wrapped - PI
    # Rounding can land exactly on -pi
    return result if result > -PI else PI

def degrees_to_radians(degrees):
    """Convert degrees to radians."""
    return degrees * DEG_TO_RAD

def compass_to_yaw(heading_deg):
    """
    Convert a compass heading to a robot yaw angle.
    
    Compass headings are zero at North and increase clockwise. Robot yaw
    is zero along +X (East) and increases counter-clockwise, so North is
    pi/2.
    
    Args:
        heading_deg (float): Compass heading in degrees
        
    Returns:
        float: Yaw in radians, normalized to (-pi, pi]
    """
    return normalize_angle(degrees_to_radians(90.0 - heading_deg))

def quaternion_from_rpy(roll, pitch, yaw):
    """
    Build a quaternion from fixed-axis roll, pitch and yaw.
    
    Rotations are applied about X, then Y, then Z.
    
    Args:
        roll (float): Rotation about X in radians
        pitch (float): Rotation about Y in radians
        yaw (float): Rotation about Z in radians
        
    Returns:
        np.ndarray: Quaternion as (x, y, z, w)
    """
    cr, sr = math.cos(roll / 2), math.sin(roll / 2)
    cp, sp = math.cos(pitch / 2), math.sin(pitch / 2)
    cy, sy = math.cos(yaw / 2), math.sin(yaw / 2)
    
    return np.array([
        sr * cp * cy - cr * sp * sy,
        cr * sp * cy + sr * cp * sy,
        cr * cp * sy - sr * sp * cy,
        cr * cp * cy + sr * sp * sy
    ])

def snap_to_grid(value, grid):
    """
    Round a coordinate to the nearest multiple of grid.
    
    Halfway values round to the even multiple, as C rint() does.
    """
    return float(round(value / grid)) * grid
