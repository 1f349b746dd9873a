"""
Mathematical constants and driver defaults for odometry.
"""

import math

# Mathematical constants
PI = math.pi
TWO_PI = 2 * math.pi

# Conversion factors
DEG_TO_RAD = math.pi / 180.0

# Local map origin
ORIGIN_GRID_M = 10000.0     # Map origin is snapped to a 10 km grid

# Driver timing
DEFAULT_FREQUENCY_HZ = 50.0 # Positioning device navigation rate
SOURCE_QUEUE_SIZE = 100     # Samples buffered by background readers
